"""Core types: results, errors and configuration."""

from .config import Config, ConfigError, load_config, load_config_or_default
from .errors import (
    ConfigurationError,
    NoPluginRegistered,
    OperationError,
    ReleaseError,
    StagingStateError,
    ToolchainNotFound,
)
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "Config",
    "ConfigError",
    "load_config",
    "load_config_or_default",
    # errors
    "ConfigurationError",
    "NoPluginRegistered",
    "OperationError",
    "ReleaseError",
    "StagingStateError",
    "ToolchainNotFound",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
