import logging

import pytest
from jsonmend._core.logging import (
    DEFAULT_LOG_LEVEL,
    PACKAGE_LOGGER_NAME,
    RichLogger,
    _log_stats,
    clear_logging_config,
    configure_logging,
    get_logger,
    is_logging_configured,
    log_summary,
)


@pytest.fixture(autouse=True)
def reset_logging_state(monkeypatch):
    """Resets the global state of the logging module before each test."""
    _log_stats.clear()
    monkeypatch.setattr('jsonmend._core.logging._logging_configured', False)
    yield
    _log_stats.clear()
    monkeypatch.setattr('jsonmend._core.logging._logging_configured', False)
    logging.getLogger(PACKAGE_LOGGER_NAME).handlers.clear()


def test_basic_logging_levels_and_stats(capsys):
    """
    Tests that basic logging calls are emitted and that stats are tracked correctly.
    """
    logger = get_logger('jsonmend.test_logger')
    configure_logging(level='DEBUG', use_rich=False, force=True)

    logger.debug('debug message')
    logger.info('info message')
    logger.warning('warn message')
    logger.error('error message')
    logger.critical('critical message')

    captured = capsys.readouterr().err
    assert 'debug message' in captured
    assert 'info message' in captured
    assert 'warn message' in captured
    assert 'error message' in captured
    assert 'critical message' in captured

    stats = _log_stats.get('jsonmend.test_logger', {})
    assert stats.get('DEBUG') == 1
    assert stats.get('INFO') == 1
    assert stats.get('WARNING') == 1
    assert stats.get('ERROR') == 1
    assert stats.get('CRITICAL') == 1


def test_get_logger_returns_rich_logger():
    logger = get_logger('jsonmend.rich_logger_type')
    assert isinstance(logger, RichLogger)
    assert is_logging_configured()


def test_host_loggers_and_root_are_left_alone():
    root = logging.getLogger()
    root_handlers = list(root.handlers)
    root_level = root.level

    configure_logging(level='DEBUG', use_rich=False, force=True)

    assert root.handlers == root_handlers
    assert root.level == root_level
    assert logging.getLoggerClass() is logging.Logger
    assert type(logging.getLogger('host_application.module')) is logging.Logger


def test_warning_highlight_prefix(capsys):
    logger = get_logger('jsonmend.custom_logger')
    configure_logging(level='INFO', use_rich=False, force=True)

    logger.warning_highlight('be careful')

    captured = capsys.readouterr().err
    assert '⚠️  be careful' in captured
    assert _log_stats['jsonmend.custom_logger']['WARNING'] == 1


def test_log_operation_context_manager_success(capsys):
    """
    Tests the log_operation context manager on a successful operation.
    """
    logger = get_logger('jsonmend.op_logger')
    configure_logging(level='INFO', use_rich=False, force=True)

    with logger.log_operation('test_op'):
        pass

    captured = capsys.readouterr().err
    assert '🔹 Starting | test_op' in captured
    assert '✅ Completed | test_op in' in captured
    assert '⚡ Performance | test_op | Duration:' in captured


def test_log_operation_context_manager_exception(capsys):
    """
    Tests the log_operation context manager when an exception occurs.
    """
    logger = get_logger('jsonmend.op_logger_fail')
    configure_logging(level='INFO', use_rich=False, force=True)

    with pytest.raises(ValueError, match='fail!'):
        with logger.log_operation('failing_op'):
            raise ValueError('fail!')

    captured = capsys.readouterr().err
    assert '🔹 Starting | failing_op' in captured
    assert '❌ Failed   | failing_op after' in captured
    assert 'Performance' not in captured


def test_log_operation_is_silent_below_level(capsys):
    logger = get_logger('jsonmend.op_logger_quiet')
    configure_logging(level='INFO', use_rich=False, force=True)

    with logger.log_operation('quiet_op', level=logging.DEBUG):
        pass

    assert 'quiet_op' not in capsys.readouterr().err
    assert 'jsonmend.op_logger_quiet' not in _log_stats


def test_configure_logging_force_reconfigures():
    """
    Tests that `force=True` allows re-configuration.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    _ = get_logger('jsonmend.reconfig_test')
    assert package_logger.level == logging.getLevelName(DEFAULT_LOG_LEVEL)

    configure_logging(level='DEBUG', force=True)
    assert package_logger.level == logging.DEBUG
    assert len(package_logger.handlers) == 1


def test_configure_logging_without_force_keeps_existing_setup():
    configure_logging(level='WARNING', use_rich=False, force=True)
    configure_logging(level='DEBUG', use_rich=False)
    assert logging.getLogger(PACKAGE_LOGGER_NAME).level == logging.WARNING


def test_custom_format_string(capsys):
    logger = get_logger('jsonmend.format_logger')
    configure_logging(
        level='INFO', use_rich=False, format_string='<<%(message)s>>', force=True
    )

    logger.info('framed')
    assert '<<framed>>' in capsys.readouterr().err


def test_file_handler_writes_log_file(tmp_path):
    log_file = tmp_path / 'logs' / 'jsonmend.log'
    logger = get_logger('jsonmend.file_logger')
    configure_logging(
        level='INFO', use_rich=False, file_path=str(log_file), force=True
    )

    logger.info('written to disk')
    clear_logging_config()

    content = log_file.read_text(encoding='utf-8')
    assert 'jsonmend.file_logger' in content
    assert 'written to disk' in content


def test_log_performance_message_format(capsys):
    """
    Tests the format of the log_performance() message.
    """
    logger = get_logger('jsonmend.perf_logger')
    configure_logging(level='INFO', use_rich=False, force=True)

    logger.log_performance('my_operation', 1.2345, throughput=100, errors=2)
    captured = capsys.readouterr().err

    assert 'my_operation' in captured
    assert 'Duration: 1.2345s' in captured
    assert 'throughput=100' in captured
    assert 'errors=2' in captured


def test_log_summary_reports_counts(capsys):
    logger = get_logger('jsonmend.summary_source')
    configure_logging(level='INFO', use_rich=False, force=True)

    logger.info('one')
    logger.warning('two')
    log_summary()

    captured = capsys.readouterr().err
    assert '--- Logging Summary ---' in captured
    assert "Logger 'jsonmend.summary_source': 2 messages" in captured
    assert '- WARNING: 1' in captured


def test_clear_logging_config_resets_state():
    logger = get_logger('jsonmend.clear_logger')
    configure_logging(level='INFO', use_rich=False, force=True)
    logger.info('counted')
    assert _log_stats

    clear_logging_config()

    assert not is_logging_configured()
    assert not logging.getLogger(PACKAGE_LOGGER_NAME).handlers
    assert not _log_stats
