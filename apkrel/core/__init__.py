"""Core domain types and logic."""

from .config import ConfigError, PublishConfig, load_config, load_publish_config
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "ConfigError",
    "PublishConfig",
    "load_config",
    "load_publish_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
