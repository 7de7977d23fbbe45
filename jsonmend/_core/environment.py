import os
from typing import Any, Optional

from dotenv import find_dotenv
from pydantic import BaseModel, Field, GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema
from pydantic_settings import BaseSettings, SettingsConfigDict

###################################
# .env File Loading Logic
# 1. It first checks for an environment variable `ENV_PATH` for an explicit file path.
# 2. If `ENV_PATH` is not set or the file doesn't exist, it falls back to `find_dotenv()`,
#    which searches for a `.env` file in the current and parent directories.
###################################


env_path_from_var = os.getenv('ENV_PATH')
dotenv_path = (
    env_path_from_var
    if env_path_from_var and os.path.exists(env_path_from_var)
    else find_dotenv()
)

VALID_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}


class LogLevel(str):
    """Custom type for log levels, ensuring the value is one of the standard levels."""

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        def validate_log_level(v: str) -> str:
            v_upper = v.upper()
            if v_upper not in VALID_LOG_LEVELS:
                raise ValueError(f'Log level must be one of: {VALID_LOG_LEVELS}')
            return v_upper

        return core_schema.no_info_after_validator_function(
            validate_log_level, core_schema.str_schema()
        )


###################################
# Core Configuration Schema
###################################
class JSONMendConfig(BaseModel):
    """Defines the configuration schema for the jsonmend package.
    This class does not load from the environment; it only defines the data shape.
    """

    # Repair Settings
    throw_on_error: bool = Field(
        default=True,
        description=(
            'Default error mode for JSONRepair. When False, an unrecoverable '
            'malformation returns the output repaired so far instead of raising.'
        ),
    )
    repair_log_level: LogLevel = Field(
        default='DEBUG',
        description='Level at which each individual repair decision is logged.',
    )

    # Logging Settings
    log_level: LogLevel = Field(
        default='INFO', description='The minimum logging level.'
    )
    log_use_rich: bool = Field(
        default=True, description='Use rich for beautiful, formatted logging output.'
    )
    log_format_string: Optional[str] = Field(
        default=None, description='A custom format string for the console logger.'
    )
    log_file_path: Optional[str] = Field(
        default=None, description='If set, logs will also be written to this file.'
    )


###################################
# Settings Initialization
###################################
class AppSettings(BaseSettings, JSONMendConfig):
    """Application settings that load from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix='JSONMEND_',
        case_sensitive=False,
        validate_assignment=True,
        extra='ignore',
        env_file=dotenv_path,
        env_file_encoding='utf-8',
    )


# Global Settings
settings = AppSettings()
