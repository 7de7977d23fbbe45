from jsonmend._core.error import RepairError

__all__ = ['RepairError']
