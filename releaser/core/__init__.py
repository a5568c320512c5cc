"""Core types: configuration, exit codes and Result."""

from .config import ConfigError, PipelineConfig, VariantSpec, load_config, resolve_config
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "ConfigError",
    "PipelineConfig",
    "VariantSpec",
    "load_config",
    "resolve_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
