"""Static configuration: default operation catalog and environment loading."""

from .loader import (
    CONFIG_FILE_ENV_VAR, CONFIG_JSON_ENV_VAR, LOG_LEVEL_ENV_VAR,
    apply_operation_overrides, get_log_level, load_config_overrides
)
from .operations import CATEGORY_DEFAULTS, DEFAULT_OPERATIONS, create_operation_config

__all__ = [
    "CATEGORY_DEFAULTS",
    "DEFAULT_OPERATIONS",
    "create_operation_config",
    "load_config_overrides",
    "apply_operation_overrides",
    "get_log_level",
    "CONFIG_JSON_ENV_VAR",
    "CONFIG_FILE_ENV_VAR",
    "LOG_LEVEL_ENV_VAR",
]
