"""
Handles loading and validation of configuration settings.

This module is responsible for loading, merging, and validating configuration settings from:
1. The config.yaml file (primary configuration source)
2. Environment variables (for secrets and overrides)

It provides a unified configuration access mechanism through the get_config_value function,
ensures settings are validated against expected types and requirements, and makes the
configuration available throughout the application.

Key components:
- APP_CONFIG: The global configuration dictionary
- get_config_value: Function to retrieve values using dot notation
- validate_config: Validates configuration against expected structure and types
- load_app_config: Loads and merges configuration from all sources
"""

import json
import logging
import os
import sys
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Environment variables from .env are visible to the overrides below
load_dotenv()

APP_CONFIG: Dict[str, Any] = {}

__all__ = [
    "APP_CONFIG",
    "load_app_config",
    "get_config_value",
    "validate_config",
]

DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULT_CONFIG_STRUCTURE = {
    "app": {
        "app_name": "TeamHub",
        "log_file_name": "teamhub.log",
        "debug_mode": False,
        "log_level": "INFO",
    },
    "api": {
        "base_url": None,
        "data_path": "/db",
        "auth_path": "/auth",
        "api_key": None,  # Secret
        "timeout_seconds": 0,  # 0 means wait indefinitely
    },
    "session": {
        "store_file": "teamhub_session.db",
    },
    "permissions": {
        "event_manager_roles": ["Coach", "Adviser"],
        "inventory_manager_roles": ["Coach", "Adviser", "Builder"],
    },
    "activity": {
        "default_actor": "Current User",
        "default_avatar": "CU",
    },
}

# (type, is_required, default_value)
EXPECTED_CONFIG: Dict[str, Tuple[type, bool, Any]] = {
    "app.app_name": (str, False, "TeamHub"),
    "app.log_file_name": (str, False, "teamhub.log"),
    "app.debug_mode": (bool, False, False),
    "app.log_level": (str, False, "INFO"),
    "api.base_url": (str, True, None),
    "api.data_path": (str, False, "/db"),
    "api.auth_path": (str, False, "/auth"),
    "api.api_key": (str, False, None),
    "api.timeout_seconds": (int, False, 0),
    "session.store_file": (str, False, "teamhub_session.db"),
    "permissions.event_manager_roles": (list, False, ["Coach", "Adviser"]),
    "permissions.inventory_manager_roles": (
        list,
        False,
        ["Coach", "Adviser", "Builder"],
    ),
    "activity.default_actor": (str, False, "Current User"),
    "activity.default_avatar": (str, False, "CU"),
}

# Secrets read from dedicated variable names instead of SECTION_KEY
SECRET_ENV_VARS = {
    ("api", "api_key"): "TEAMHUB_API_KEY",
}


def _load_yaml_config(path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Loads configuration from a YAML file."""
    try:
        if os.path.exists(path):
            with open(path, "r") as f:
                yaml_config = yaml.safe_load(f)
                logger.info(f"Successfully loaded configuration from {path}")
                return yaml_config or {}
        else:
            logger.warning(
                f"YAML configuration file not found at {path}. "
                "Ensure 'config.yaml' exists or all settings are provided via environment variables."
            )
            return {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML configuration file {path}: {e}")
        sys.exit(f"Critical error: Could not parse {path}. Please check its syntax.")
    except OSError as e:
        logger.error(f"Could not read YAML configuration {path}: {e}")
        return {}


def _get_typed_env_var(key: str, default_value: Any, expected_type: type) -> Any:
    """Gets an environment variable and attempts to cast it to the expected type."""
    value = os.getenv(key)
    if value is None:
        return default_value

    try:
        if expected_type is bool:
            return value.lower() in ("true", "1", "t", "yes", "y")
        if expected_type is int:
            return int(value)
        if expected_type is list:  # Comma-separated
            return [item.strip() for item in value.split(",") if item.strip()]
        if expected_type is dict:
            return json.loads(value)
        return expected_type(value)
    except (ValueError, TypeError):
        logger.warning(
            f"Could not cast environment variable {key}='{value}' to {expected_type}. Using default: {default_value}"
        )
        return default_value


def _merge_configs(
    yaml_config: Dict[str, Any], defaults: Dict[str, Any]
) -> Dict[str, Any]:
    """Merges YAML config over the default structure, section by section."""
    merged_config = {}

    for section, section_defaults in defaults.items():
        merged_config[section] = section_defaults.copy()
        yaml_section = yaml_config.get(section, {})

        if isinstance(yaml_section, dict):
            for key, default_val in section_defaults.items():
                merged_config[section][key] = yaml_section.get(key, default_val)
        elif yaml_section is not None:
            merged_config[section] = yaml_section

    return merged_config


def _apply_env_vars_to_merged_config(
    config_dict: Dict[str, Any], defaults: Dict[str, Any]
) -> None:
    """Applies environment variables to the config_dict based on default structure.
    Environment variables are expected in the format SECTION_KEY=value (e.g. APP_DEBUG_MODE=true).
    """
    for section_name, section_defaults in defaults.items():
        if not isinstance(config_dict.get(section_name), dict):
            config_dict[section_name] = {}
        for key_name, default_value in section_defaults.items():
            env_var_key = SECRET_ENV_VARS.get(
                (section_name, key_name), f"{section_name.upper()}_{key_name.upper()}"
            )
            expected_type = type(default_value) if default_value is not None else str

            if os.getenv(env_var_key) is None:
                continue

            current_val_in_config = config_dict[section_name].get(
                key_name, default_value
            )
            env_val = _get_typed_env_var(
                env_var_key, current_val_in_config, expected_type
            )
            config_dict[section_name][key_name] = env_val
            logger.debug(
                f"Applied environment variable '{env_var_key}' to '{section_name}.{key_name}'"
            )


def load_app_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load application configuration from YAML and environment variables.

    The configuration loading follows this priority order:
    - Defaults from DEFAULT_CONFIG_STRUCTURE
    - Base settings from config.yaml (or the path given, or TEAMHUB_CONFIG)
    - Overrides from environment variables

    Returns:
        Dict[str, Any]: The loaded configuration dictionary
    """
    global APP_CONFIG

    config_path = path or os.getenv("TEAMHUB_CONFIG", DEFAULT_CONFIG_PATH)
    yaml_config = _load_yaml_config(config_path)
    merged_config = _merge_configs(yaml_config, DEFAULT_CONFIG_STRUCTURE)
    _apply_env_vars_to_merged_config(merged_config, DEFAULT_CONFIG_STRUCTURE)

    APP_CONFIG = merged_config

    logger.debug(f"Configuration loaded with {len(APP_CONFIG)} top-level keys.")
    return APP_CONFIG


load_app_config()


def get_config_value(path: str, default: Any = None) -> Any:
    """
    Retrieves a configuration value using dot notation path.

    Args:
        path: Dot-notation path to the configuration value (e.g., 'api.base_url')
        default: Value to return if the path is not found

    Returns:
        The configuration value at the specified path, or the default if not found

    Examples:
        >>> get_config_value('app.app_name', 'Default Name')
        'TeamHub'
        >>> get_config_value('nonexistent.path', 'fallback')
        'fallback'
    """
    if not APP_CONFIG:
        load_app_config()

    current: Any = APP_CONFIG
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return default
    return current


def validate_config() -> None:
    """
    Validates the loaded configuration against expected types and requirements.

    Every problem is logged. Critical problems make the process exit with status 1
    once all keys have been checked.

    Raises:
        SystemExit: If a critical configuration error is found
    """
    logger.info("Validating configuration...")
    valid = True

    for key, (p_type, is_required, _default) in EXPECTED_CONFIG.items():
        val = get_config_value(key)

        if val is None:
            if is_required:
                logger.critical(
                    f"Config Error: Required key '{key}' is missing or not set."
                )
                valid = False
            continue

        type_valid = True
        if p_type is int:
            # bool is a subclass of int
            type_valid = isinstance(val, int) and not isinstance(val, bool)
        elif not isinstance(val, p_type):
            type_valid = False

        if not type_valid:
            logger.critical(
                f"Config Error: Key '{key}' (value: '{val}', type: {type(val).__name__}) must be of type {p_type.__name__}."
            )
            valid = False
            continue

        if key == "app.log_level":
            if val.upper() not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
                logger.critical(
                    f"Config Error: '{key}' (value: {val}) must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL."
                )
                valid = False

        elif key == "api.base_url":
            if not (val.startswith("http://") or val.startswith("https://")):
                logger.critical(
                    f"Config Error: '{key}' (value: {val}) must be an HTTP/HTTPS URL."
                )
                valid = False

        elif key in ("api.data_path", "api.auth_path"):
            if not val.startswith("/"):
                logger.warning(
                    f"Config Warning: '{key}' (value: {val}) does not start with '/'."
                )

        elif key == "api.timeout_seconds":
            if val < 0:
                logger.critical(
                    f"Config Error: Key '{key}' (value: {val}) must be a non-negative integer."
                )
                valid = False

        elif key.startswith("permissions."):
            if not all(isinstance(item, str) for item in val):
                logger.critical(
                    f"Config Error: All items in '{key}' must be role names (strings)."
                )
                valid = False

        elif key == "activity.default_avatar":
            if not val:
                logger.critical(f"Config Error: '{key}' cannot be empty.")
                valid = False

    if not valid:
        logger.critical(
            "Configuration validation failed. Please check your config.yaml and .env files."
        )
        sys.exit(1)
    logger.info("Configuration validated successfully.")
