import logging
import threading
import time
from contextlib import contextmanager
from logging import StreamHandler
from pathlib import Path
from typing import Dict, Iterator, Optional

from rich.logging import RichHandler

from jsonmend._core.environment import settings

# --- Global State ---
_log_stats: Dict[str, Dict[str, int]] = {}
_session_start_time: float = time.monotonic()
_logging_configured = False
DEFAULT_LOG_LEVEL = 'INFO'
PACKAGE_LOGGER_NAME = 'jsonmend'
_logger_class_lock = threading.Lock()


class RichLogger(logging.Logger):
    """
    A custom logger class that counts emitted messages per level and adds
    a few high-level logging helpers.
    """

    def _log(
        self,
        level,
        msg,
        args,
        exc_info=None,
        extra=None,
        stack_info=False,
        stacklevel=1,
        **kwargs,
    ):
        """Override internal _log to track stats before passing to parent."""
        stats = _log_stats.setdefault(
            self.name,
            {'DEBUG': 0, 'INFO': 0, 'WARNING': 0, 'ERROR': 0, 'CRITICAL': 0},
        )
        level_name = logging.getLevelName(level)
        if level_name in stats:
            stats[level_name] += 1
        super()._log(level, msg, args, exc_info, extra, stack_info, stacklevel)

    def warning_highlight(self, message: str, *args, **kwargs):
        """Log a 'WARNING' message with a warning sign."""
        self.warning(f'⚠️  {message}', *args, **kwargs)

    def log_performance(
        self, operation: str, duration: float, level: int = logging.INFO, **metrics
    ):
        """Log performance metrics for a specific operation."""
        msg = f'⚡ Performance | {operation} | Duration: {duration:.4f}s'
        if metrics:
            metric_str = ' | '.join(f'{k}={v}' for k, v in metrics.items())
            msg += f' | {metric_str}'
        self.log(level, msg)

    @contextmanager
    def log_operation(
        self, operation_name: str, level: int = logging.INFO
    ) -> Iterator[None]:
        """Context manager for logging the start, end, and duration of an operation."""
        if not self.isEnabledFor(level):
            yield
            return

        self.log(level, f'🔹 Starting | {operation_name}')
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.log(
                level,
                f'❌ Failed   | {operation_name} after {elapsed:.2f}s: {e}',
            )
            raise
        else:
            elapsed = time.perf_counter() - start
            self.log(level, f'✅ Completed | {operation_name} in {elapsed:.2f}s')
            self.log_performance(operation_name, elapsed, level=level)


def _get_rich_logger(name: str) -> RichLogger:
    """
    Look up a logger, creating it as a RichLogger if it does not exist yet.

    The logger class is swapped only for the lookup, so loggers owned by the
    host application keep their own class.
    """
    with _logger_class_lock:
        previous = logging.getLoggerClass()
        logging.setLoggerClass(RichLogger)
        try:
            return logging.getLogger(name)
        finally:
            logging.setLoggerClass(previous)


def configure_logging(
    level: Optional[str] = None,
    use_rich: Optional[bool] = None,
    format_string: Optional[str] = None,
    file_path: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Configures the package logging system.

    Only the `jsonmend` logger is configured; the root logger and the handlers
    of the host application are left alone. Records still propagate to the
    root logger.

    Prioritizes direct function arguments over global settings, which in turn
    are loaded from environment variables or .env files.

    Args:
        level: Override the log level (e.g., 'DEBUG').
        use_rich: Override the use of rich formatting.
        format_string: Override the log format string.
        file_path: Override the log file path.
        force: If True, will overwrite an existing configuration.
    """
    global _logging_configured, _session_start_time
    init_logger = _get_rich_logger(__name__)

    if _logging_configured and not force:
        init_logger.debug('Logging already configured. Skipping reconfiguration.')
        return

    if not _logging_configured:
        _session_start_time = time.monotonic()

    # 1. Resolve configuration, prioritizing direct arguments over global settings.
    final_level = level or settings.log_level
    # `False` is a valid override, so check against None.
    final_use_rich = use_rich if use_rich is not None else settings.log_use_rich
    final_format_string = format_string or settings.log_format_string
    final_file_path = file_path or settings.log_file_path

    # 2. Configure the package logger
    package_logger = _get_rich_logger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(final_level.upper())
    _remove_handlers(package_logger)

    init_logger.debug(
        f'--- Configuring logging. Level: {final_level}, Rich: {final_use_rich} ---'
    )

    if final_use_rich:
        handler = RichHandler(rich_tracebacks=True, show_path=False, markup=False)
        formatter = logging.Formatter('%(message)s', datefmt='[%X]')
    elif final_format_string:
        handler = StreamHandler()
        formatter = logging.Formatter(final_format_string)
    else:
        handler = StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s | %(name)-20s | %(levelname)-8s | %(message)s'
        )

    handler.setFormatter(formatter)
    package_logger.addHandler(handler)

    # 3. Optional file handler
    if final_file_path:
        try:
            Path(final_file_path).parent.mkdir(parents=True, exist_ok=True)
            file_formatter = logging.Formatter(
                final_format_string
                or '%(asctime)s | %(name)s | %(levelname)s | %(message)s'
            )
            file_handler = logging.FileHandler(final_file_path, mode='a')
            file_handler.setFormatter(file_formatter)
            package_logger.addHandler(file_handler)
            init_logger.debug(f'Logging also configured for file: {final_file_path}')
        except OSError as e:
            package_logger.error(
                f'Failed to configure file handler at {final_file_path}: {e}'
            )

    _logging_configured = True


def is_logging_configured() -> bool:
    """Check whether configure_logging() has run."""
    return _logging_configured


def _remove_handlers(target: logging.Logger) -> None:
    for handler in list(target.handlers):
        target.removeHandler(handler)
        handler.close()


def clear_logging_config() -> None:
    """Drop the package handlers and message counts so logging configures afresh."""
    global _logging_configured
    _remove_handlers(logging.getLogger(PACKAGE_LOGGER_NAME))
    _log_stats.clear()
    _logging_configured = False


def get_logger(name: str) -> RichLogger:
    """
    Gets a logger instance. If logging is not yet configured,
    it applies a safe default configuration first.
    """
    if not _logging_configured:
        configure_logging()
    return _get_rich_logger(name)


def log_summary() -> None:
    """Logs a summary of all logging activity during the session."""
    logger = get_logger(f'{PACKAGE_LOGGER_NAME}.summary')
    total_runtime = time.monotonic() - _session_start_time
    logger.info('--- Logging Summary ---')
    logger.info(f'Total Session Runtime: {total_runtime:.2f} seconds')
    grand_total = sum(sum(stats.values()) for stats in _log_stats.values())
    for logger_name, stats in list(_log_stats.items()):
        total = sum(stats.values())
        if total > 0:
            logger.info(f"Logger '{logger_name}': {total} messages")
            for level, count in stats.items():
                if count > 0:
                    logger.info(f'    - {level}: {count}')
    logger.info(f'Grand Total Messages: {grand_total}')
    logger.info('-----------------------')


# CONVENIENCE ACCESS
logger: RichLogger = get_logger(PACKAGE_LOGGER_NAME)


__all__ = [
    'DEFAULT_LOG_LEVEL',
    'PACKAGE_LOGGER_NAME',
    'RichLogger',
    'clear_logging_config',
    'configure_logging',
    'get_logger',
    'is_logging_configured',
    'log_summary',
    'logger',
]
