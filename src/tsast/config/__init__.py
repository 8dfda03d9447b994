"""Config module exports."""

from tsast.config.loader import TsAstSettings, load_config
from tsast.config.models import (
    LoggingConfig,
    LogOutputConfig,
    TsAstConfig,
    UnmarshalConfig,
)

__all__ = [
    "load_config",
    "TsAstConfig",
    "TsAstSettings",
    "LoggingConfig",
    "LogOutputConfig",
    "UnmarshalConfig",
]
