"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and an optional
YAML configuration file (~/.gamereviews/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".gamereviews"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

DEFAULT_DATABASE_PATH = "game_reviews.sqlite3"
DEFAULT_RATE_LIMIT = 4
DEFAULT_API_BASE_URL = "https://api.igdb.com/v4"
DEFAULT_TOKEN_URL = "https://id.twitch.tv/oauth2/token"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}  # For testing purposes
_loaded = False


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flattens nested YAML mappings into dotted keys ('igdb': {'rate_limit': 4} -> 'igdb.rate_limit')."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: real environment variables take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug(".env file not found at or above current directory.")

    # 3. Environment Variables (Highest priority) are handled by os.environ in get_config

    _loaded = True
    logger.info("Configuration loading process completed.")


def get_config(key: str, default: Any = None, coerce: bool = True) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable (key upper-cased, dots replaced by underscores)
    3. YAML config
    4. Default value

    Args:
        key: The configuration key
        default: Default value if the key is not found
        coerce: Convert environment strings to bool, int or float. Disable for
            values that must stay verbatim, such as credentials.

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = key.upper().replace('.', '_')
    if env_key in os.environ:
        value = os.environ[env_key]
        if not coerce:
            return value
        # Try to convert common types
        if value.lower() == 'true':
            return True
        elif value.lower() == 'false':
            return False
        try:
            if '.' in value:
                return float(value)
            else:
                return int(value)
        except (ValueError, TypeError):
            return value

    if key in _config:
        return _config[key]

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


# --- Convenience Functions ---

def _get_str(*keys: str) -> Optional[str]:
    for key in keys:
        value = get_config(key, coerce=False)
        if value is not None and value != "":
            return str(value)
    return None


def get_client_id() -> Optional[str]:
    """Twitch application client ID (IGDB_TWITCH_CLIENT_ID or igdb.client_id)."""
    return _get_str('IGDB_TWITCH_CLIENT_ID', 'igdb.client_id')


def get_client_secret() -> Optional[str]:
    """Twitch application client secret (IGDB_TWITCH_CLIENT_SECRET or igdb.client_secret)."""
    return _get_str('IGDB_TWITCH_CLIENT_SECRET', 'igdb.client_secret')


def get_access_token() -> Optional[str]:
    """A pre-issued bearer token; skips the token exchange when set."""
    return _get_str('TWITCH_ACCESS_TOKEN', 'igdb.access_token')


def get_database_path() -> Path:
    """The review database, which also holds the metadata cache table."""
    return Path(_get_str('GAMEREVIEWS_DATABASE', 'database.path') or DEFAULT_DATABASE_PATH)


def get_rate_limit() -> int:
    """Maximum IGDB requests per second."""
    value = get_config('igdb.rate_limit', DEFAULT_RATE_LIMIT)
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid igdb.rate_limit value '{value}'. Using {DEFAULT_RATE_LIMIT}.")
        return DEFAULT_RATE_LIMIT


def get_api_base_url() -> str:
    return _get_str('igdb.api_base_url') or DEFAULT_API_BASE_URL


def get_token_url() -> str:
    return _get_str('igdb.token_url') or DEFAULT_TOKEN_URL


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
