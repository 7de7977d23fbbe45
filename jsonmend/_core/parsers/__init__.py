from jsonmend._core.parsers.repair import JSONRepair, RepairSession, loads, repair_json

__all__ = ['JSONRepair', 'RepairSession', 'loads', 'repair_json']
