"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
For configurable values, see models.py (UnmarshalConfig, LoggingConfig).
"""

# =============================================================================
# Field Collection
# =============================================================================

EXTRA_CHILDREN_FIELD = "extra_children"
"""Synthetic field holding named, non-extra children that carry no field name."""

# =============================================================================
# Driver
# =============================================================================

NO_ROOT_MESSAGE = "error: didn't get a root node"
"""Fixed failure message when the parser yields no tree or no root node."""

DEFAULT_ENCODING = "utf-8"
"""Source encoding assumed for byte offsets and text annotations."""

# =============================================================================
# Config Files
# =============================================================================

ENV_PREFIX = "TSAST__"
PROJECT_CONFIG_NAME = "tsast.yaml"
