"""Core module exports."""

from tsast.core.errors import (
    ConfigError,
    ErrorCode,
    ParseError,
    SchemaError,
    TsAstError,
    UnmarshalError,
)
from tsast.core.logging import (
    clear_build_id,
    configure_logging,
    get_build_id,
    get_logger,
    set_build_id,
)

__all__ = [
    # Errors
    "TsAstError",
    "ErrorCode",
    "ParseError",
    "ConfigError",
    "UnmarshalError",
    "SchemaError",
    # Logging
    "clear_build_id",
    "configure_logging",
    "get_build_id",
    "get_logger",
    "set_build_id",
]
