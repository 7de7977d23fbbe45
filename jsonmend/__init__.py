from typing import Optional

from jsonmend._core.environment import settings
from jsonmend._core.error import RepairError
from jsonmend._core.parsers.repair import JSONRepair, loads, repair_json


def init(log_level: Optional[str] = None, log_rich: Optional[bool] = None) -> None:
    """
    Initialize jsonmend logging with optional overrides.

    If not called, logging auto-configures from the environment on first use.

    Args:
        log_level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR').
            If None, uses JSONMEND_LOG_LEVEL or 'INFO'.
        log_rich: Enable rich formatting. If None, uses JSONMEND_LOG_USE_RICH.

    Example:
        >>> import jsonmend
        >>> jsonmend.init(log_level='DEBUG')
    """
    from jsonmend.logging import configure_logging

    configure_logging(level=log_level, use_rich=log_rich, force=True)


__all__ = [
    'init',
    'settings',
    'JSONRepair',
    'RepairError',
    'loads',
    'repair_json',
]
