"""Configuration management for gamewatch."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, validate_app_config, validate_config_file
from .models import (
    AdvancedConfig,
    AppConfig,
    AutoGrabConfig,
    DedupConfig,
    DownloadConfig,
    JobId,
    JobScheduleConfig,
    JobsConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    ReleaseSyncConfig,
    UpdatesConfig,
)
from .runtime import RuntimeSettings

__all__ = [
    "load_config",
    "validate_app_config",
    "validate_config_file",
    "load_environment_config",
    "AppConfig",
    "AutoGrabConfig",
    "JobsConfig",
    "JobScheduleConfig",
    "ReleaseSyncConfig",
    "DedupConfig",
    "DownloadConfig",
    "UpdatesConfig",
    "LoggingConfig",
    "AdvancedConfig",
    "EnvironmentConfig",
    "RuntimeSettings",
    "JobId",
    "LogLevel",
    "LogFormat",
    "ConfigurationError",
]
