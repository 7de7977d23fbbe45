"""
Public API for logging functionality.

Logging configures itself from the environment on first use. Just call
get_logger() and log.

Quick Start:
    >>> from jsonmend.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Hello world")

Environment Variables:
    - JSONMEND_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
    - JSONMEND_LOG_USE_RICH: Enable rich formatting (true/false)
    - JSONMEND_LOG_FILE_PATH: Optional log file path
    - JSONMEND_REPAIR_LOG_LEVEL: Level of the per-repair decision messages

Public API:
    - configure_logging: Configure logging (optional, auto-configures on first use)
    - get_logger: Get a logger instance
    - is_logging_configured: Check if logging has been configured
    - clear_logging_config: Clear configuration (useful for testing)
    - log_summary: Log a summary of all logging activity during the session
    - RichLogger: Logger class with message counting and timing helpers
    - logger: Pre-configured logger instance for 'jsonmend'
"""

from jsonmend._core.logging import (
    RichLogger,
    clear_logging_config,
    configure_logging,
    get_logger,
    is_logging_configured,
    log_summary,
    logger,
)

__all__ = [
    'clear_logging_config',
    'configure_logging',
    'get_logger',
    'is_logging_configured',
    'log_summary',
    'logger',
    'RichLogger',
]
