"""Configuration loading from the environment."""

import json
import logging
import os
from typing import Any, Dict, Mapping

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

CONFIG_JSON_ENV_VAR = "STEER_OPS_CONFIG_JSON"
CONFIG_FILE_ENV_VAR = "STEER_OPS_CONFIG_FILE"
LOG_LEVEL_ENV_VAR = "STEER_OPS_LOG_LEVEL"


def load_config_overrides(load_env_file: bool = True) -> Dict[str, Any]:
    """
    Load gateway config overrides from the environment.

    Priority order:
    1. STEER_OPS_CONFIG_JSON environment variable (JSON string)
    2. STEER_OPS_CONFIG_FILE environment variable (path to JSON file)

    A ``.env`` file in the working directory is read first when
    ``load_env_file`` is set. Sources that cannot be parsed are logged and
    skipped.

    Returns:
        Raw config mapping (may be empty)
    """
    if load_env_file:
        load_dotenv()

    json_str = os.getenv(CONFIG_JSON_ENV_VAR)
    if json_str:
        try:
            overrides = json.loads(json_str)
            if isinstance(overrides, dict):
                logger.info(f"Loaded gateway config overrides from {CONFIG_JSON_ENV_VAR}")
                return overrides
            logger.error(f"{CONFIG_JSON_ENV_VAR} must contain a JSON object")
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse {CONFIG_JSON_ENV_VAR}: {e}")

    file_path = os.getenv(CONFIG_FILE_ENV_VAR)
    if file_path:
        try:
            with open(file_path, 'r') as f:
                overrides = json.load(f)
            if isinstance(overrides, dict):
                logger.info(f"Loaded gateway config overrides from {file_path}")
                return overrides
            logger.error(f"Config file {file_path} must contain a JSON object")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load gateway config from {file_path}: {e}")

    return {}


def get_log_level(default: str = "INFO") -> str:
    return os.getenv(LOG_LEVEL_ENV_VAR, default).upper()


def apply_operation_overrides(
    entries: Mapping[str, Dict[str, Any]],
    overrides: Mapping[str, Mapping[str, Any]]
) -> Dict[str, Dict[str, Any]]:
    """
    Layer per-operation overrides onto raw catalog entries.

    Only ``category``, ``cacheable``, ``ttl_seconds``/``defaultTtlSeconds``
    and ``mutating`` may be overridden. Overrides naming an unknown operation
    are logged and ignored.

    Returns:
        New mapping; ``entries`` is left untouched
    """
    allowed = {"category", "cacheable", "ttl_seconds", "defaultTtlSeconds", "mutating"}
    result = {name: dict(entry) for name, entry in entries.items()}

    for op_name, changes in overrides.items():
        if op_name not in result:
            logger.warning(f"Catalog override for unknown operation: {op_name}")
            continue

        entry = result[op_name]
        for key, value in changes.items():
            if key not in allowed:
                logger.warning(f"Ignoring unsupported catalog override {op_name}.{key}")
                continue
            if key in ("ttl_seconds", "defaultTtlSeconds"):
                entry.pop("ttl_seconds", None)
                entry["defaultTtlSeconds"] = value
            else:
                entry[key] = value

        # Turning caching on implies the operation is read-only
        if changes.get("cacheable") and "mutating" not in changes:
            entry["mutating"] = False
        logger.debug(f"Applied catalog overrides for {op_name}")

    return result
