import pytest
from jsonmend._core.environment import AppSettings, JSONMendConfig, settings
from jsonmend._core.parsers.repair import JSONRepair
from pydantic import ValidationError


class TestAppSettings:
    """Tests for environment-driven settings."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in [
            'JSONMEND_THROW_ON_ERROR',
            'JSONMEND_REPAIR_LOG_LEVEL',
            'JSONMEND_LOG_LEVEL',
            'JSONMEND_LOG_USE_RICH',
            'JSONMEND_LOG_FORMAT_STRING',
            'JSONMEND_LOG_FILE_PATH',
        ]:
            monkeypatch.delenv(name, raising=False)

    def test_defaults(self):
        config = JSONMendConfig()
        assert config.throw_on_error is True
        assert config.repair_log_level == 'DEBUG'
        assert config.log_level == 'INFO'
        assert config.log_use_rich is True
        assert config.log_format_string is None
        assert config.log_file_path is None

    def test_log_level_is_read_from_env_and_upper_cased(self, monkeypatch):
        monkeypatch.setenv('JSONMEND_LOG_LEVEL', 'debug')
        monkeypatch.setenv('JSONMEND_REPAIR_LOG_LEVEL', 'info')
        loaded = AppSettings()
        assert loaded.log_level == 'DEBUG'
        assert loaded.repair_log_level == 'INFO'

    def test_invalid_log_level_is_rejected(self, monkeypatch):
        monkeypatch.setenv('JSONMEND_LOG_LEVEL', 'verbose')
        with pytest.raises(ValidationError, match='Log level must be one of'):
            AppSettings()

    def test_boolean_flags_from_env(self, monkeypatch):
        monkeypatch.setenv('JSONMEND_THROW_ON_ERROR', 'false')
        monkeypatch.setenv('JSONMEND_LOG_USE_RICH', '0')
        loaded = AppSettings()
        assert loaded.throw_on_error is False
        assert loaded.log_use_rich is False

    def test_assignment_is_validated(self):
        loaded = AppSettings()
        loaded.log_level = 'warning'
        assert loaded.log_level == 'WARNING'
        with pytest.raises(ValidationError):
            loaded.log_level = 'loud'


class TestThrowOnErrorSetting:
    def test_repairer_defaults_to_settings(self, monkeypatch):
        monkeypatch.setattr(settings, 'throw_on_error', False)
        assert JSONRepair().repair('{"a": 1, #}') == '{"a": 1, '

    def test_explicit_argument_wins_over_settings(self, monkeypatch):
        monkeypatch.setattr(settings, 'throw_on_error', False)
        repairer = JSONRepair(throw_on_error=True)
        assert repairer.throw_on_error is True
