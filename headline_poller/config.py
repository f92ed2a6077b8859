# -*- coding: utf-8 -*-
"""
Configuration resolution.

Sources are consulted in a fixed order and the first one that applies wins:

1. a config file in the config directory, tried as TOML, JSON, properties
   and INI in that order; its contents are used as-is
2. command-line flags merged with NEWS_* environment variables, flag first

The result is one immutable Configuration or a ConfigError. When the save
flag is set, a Configuration resolved from flags and environment is also
written to disk; a failed write is only logged.
"""

import logging
import os
from typing import Any, List, Mapping, Optional, Tuple

from headline_poller import codec
from headline_poller.errors import (
    ConfigFileError,
    ConfigSaveError,
    DecodeError,
    InvalidRefreshInterval,
    MissingApiKey,
    MissingCountryCode,
)
from headline_poller.models import (
    DEFAULT_REFRESH_INTERVAL_MINUTES,
    Configuration,
    CountryCode,
)

logger = logging.getLogger(__name__)

# ============================================================================
# CONSTANTS
# ============================================================================

APP_DIR_NAME = "headline-poller"
CONFIG_BASENAME = "config"
DEFAULT_SAVE_FORMAT = codec.FORMAT_TOML

ENV_XDG_CONFIG_HOME = "XDG_CONFIG_HOME"
ENV_API_KEY = "NEWS_API_KEY"
ENV_COUNTRY_CODE = "NEWS_COUNTRY_CODE"
ENV_REFRESH_SPEED = "NEWS_REFRESH_SPEED"

# Discovery order. The first entry whose file exists is decoded.
CONFIG_FILE_FORMATS: List[Tuple[str, str]] = [
    (codec.FORMAT_TOML, f"{CONFIG_BASENAME}.toml"),
    (codec.FORMAT_JSON, f"{CONFIG_BASENAME}.json"),
    (codec.FORMAT_PROPERTIES, f"{CONFIG_BASENAME}.properties"),
    (codec.FORMAT_INI, f"{CONFIG_BASENAME}.ini"),
]

MSG_INFO_LOADED_CONFIG = "Loaded configuration from {path}"
MSG_INFO_RESOLVED_FROM_ARGS = "Resolved configuration from command line and environment"
MSG_INFO_SAVED_CONFIG = "Saved configuration to {path}"
MSG_WARNING_SAVE_FAILED = "Failed to save configuration: {error}"
MSG_WARNING_BAD_ENV_SPEED = "Ignoring non-integer {var}={value!r}"
MSG_ERROR_NO_API_KEY = (
    "No API key provided. Please set the NEWS_API_KEY environment variable "
    "or use the -k/--key option."
)
MSG_ERROR_NO_COUNTRY_CODE = (
    "No country code provided. Please set the NEWS_COUNTRY_CODE environment "
    "variable or use the -c/--country-code option."
)
MSG_ERROR_BAD_REFRESH = "Refresh speed must be a positive number of minutes, got {value}"
MSG_ERROR_READ_CONFIG = "Failed to read config file {path}: {error}"

# ============================================================================
# CONFIG FILES
# ============================================================================

def default_config_dir(environ: Optional[Mapping[str, str]] = None) -> str:
    """$XDG_CONFIG_HOME/headline-poller, falling back to ~/.config/headline-poller."""
    if environ is None:
        environ = os.environ
    base = environ.get(ENV_XDG_CONFIG_HOME) or os.path.join(os.path.expanduser("~"), ".config")
    return os.path.join(base, APP_DIR_NAME)


def find_config_file(config_dir: str) -> Optional[Tuple[str, str]]:
    """Return (format, path) of the first config file present, or None."""
    for fmt, filename in CONFIG_FILE_FORMATS:
        path = os.path.join(config_dir, filename)
        if os.path.isfile(path):
            return fmt, path
    return None


def load_config_file(path: str, fmt: str) -> Configuration:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
        config = codec.decode_config(text, fmt)
    except (OSError, UnicodeDecodeError, DecodeError) as e:
        raise ConfigFileError(MSG_ERROR_READ_CONFIG.format(path=path, error=e)) from e
    logger.info(MSG_INFO_LOADED_CONFIG.format(path=path))
    return config


def save_config(config: Configuration, config_dir: str, fmt: str = DEFAULT_SAVE_FORMAT) -> str:
    """
    Write the configuration as config.<fmt> in config_dir, creating the
    directory if needed. Returns the written path.
    """
    path = os.path.join(config_dir, f"{CONFIG_BASENAME}.{fmt}")
    try:
        text = codec.encode_config(config, fmt)
        os.makedirs(config_dir, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)
    except (OSError, ValueError) as e:
        raise ConfigSaveError(str(e)) from e
    logger.info(MSG_INFO_SAVED_CONFIG.format(path=path))
    return path

# ============================================================================
# FLAGS AND ENVIRONMENT
# ============================================================================

def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None and value != "":
            return value
    return None


def _env_refresh_speed(environ: Mapping[str, str]) -> Optional[int]:
    raw = environ.get(ENV_REFRESH_SPEED)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(MSG_WARNING_BAD_ENV_SPEED.format(var=ENV_REFRESH_SPEED, value=raw))
        return None


def config_from_sources(options: Mapping[str, Any], environ: Mapping[str, str]) -> Configuration:
    """Merge flags over environment variables field by field and validate."""
    api_key = _first_present(options.get("key"), environ.get(ENV_API_KEY))
    if api_key is None:
        raise MissingApiKey(MSG_ERROR_NO_API_KEY)

    country_token = _first_present(options.get("country_code"), environ.get(ENV_COUNTRY_CODE))
    if country_token is None:
        raise MissingCountryCode(MSG_ERROR_NO_COUNTRY_CODE)
    country_code = CountryCode.from_token(country_token)

    refresh = _first_present(options.get("refresh_speed"), _env_refresh_speed(environ))
    if refresh is None:
        refresh = DEFAULT_REFRESH_INTERVAL_MINUTES
    if refresh <= 0:
        raise InvalidRefreshInterval(MSG_ERROR_BAD_REFRESH.format(value=refresh))

    return Configuration(api_key=api_key, country_code=country_code, refresh_interval=refresh)

# ============================================================================
# RESOLUTION
# ============================================================================

def resolve_config(options: Mapping[str, Any],
                   environ: Optional[Mapping[str, str]] = None,
                   config_dir: Optional[str] = None) -> Configuration:
    """
    Resolve the single Configuration for this run.

    Args:
        options: parsed command-line flags (key, country_code, refresh_speed,
            save_config, save_format)
        environ: environment mapping, defaults to os.environ
        config_dir: directory searched for config files, defaults to
            default_config_dir(environ)

    Raises:
        ConfigError: no valid configuration could be produced
    """
    if environ is None:
        environ = os.environ
    if config_dir is None:
        config_dir = default_config_dir(environ)

    found = find_config_file(config_dir)
    if found is not None:
        fmt, path = found
        return load_config_file(path, fmt)

    config = config_from_sources(options, environ)
    logger.info(MSG_INFO_RESOLVED_FROM_ARGS)

    if options.get("save_config"):
        try:
            save_config(config, config_dir, options.get("save_format") or DEFAULT_SAVE_FORMAT)
        except ConfigSaveError as e:
            logger.warning(MSG_WARNING_SAVE_FAILED.format(error=e))

    return config
