"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (TSAST__SECTION__KEY)
3. Project YAML (./tsast.yaml, or an explicit path)
4. Global YAML (~/.config/tsast/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    TSAST__<SECTION>__<KEY>=<VALUE>

Examples:
    TSAST__LOGGING__LEVEL=DEBUG
    TSAST__UNMARSHAL__DECODE_ERRORS=backslashreplace
    TSAST__UNMARSHAL__KEEP_FIELDED_EXTRAS=true
"""

import codecs
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from tsast.config.constants import DEFAULT_ENCODING

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Error handlers that never raise while decoding.
DecodeErrors = Literal["replace", "backslashreplace", "surrogateescape", "ignore"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        TSAST__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every dispatch table build and failure.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class UnmarshalConfig(BaseModel):
    """Tree walking and annotation options.

    The engine never reads configuration sources itself: callers pass
    ``load_config().unmarshal`` (or any instance) as ``config=`` to
    ``parse_byte_string``/``build``. Without it the defaults below apply.

    Env vars (honored by ``load_config``):
        TSAST__UNMARSHAL__ENCODING: Source encoding for text annotations
        TSAST__UNMARSHAL__DECODE_ERRORS: Lenient decode policy for invalid bytes
        TSAST__UNMARSHAL__KEEP_FIELDED_EXTRAS: Keep extra nodes that carry a field name
        TSAST__UNMARSHAL__VALIDATE_FIELD_NAMES: Check declared fields against the grammar
    """

    model_config = {"frozen": True}

    encoding: str = Field(
        default=DEFAULT_ENCODING,
        description="Encoding used to decode text annotations. Byte offsets are "
        "always those reported by tree-sitter.",
    )
    decode_errors: DecodeErrors = Field(
        default="replace",
        description="Handler for invalid byte sequences. All choices are lenient.",
    )
    keep_fielded_extras: bool = Field(
        default=False,
        description="Bucket extra nodes (e.g. comments) under their field name when "
        "the grammar gives them one. Extra nodes without a field name are always dropped.",
    )
    validate_field_names: bool = Field(
        default=True,
        description="Reject AST declarations whose child fields the grammar does not define.",
    )

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        try:
            return codecs.lookup(v).name
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {v}") from e


class TsAstConfig(BaseModel):
    """Root configuration for tsast.

    All settings can be configured via:
    1. Environment variables: TSAST__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    unmarshal: UnmarshalConfig = Field(default_factory=UnmarshalConfig)
