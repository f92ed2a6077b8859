# -*- coding: utf-8 -*-
"""
Operational settings loaded from an optional YAML file.

These tune how the poller runs (database location, API endpoint, request
timeout, log level). They are separate from the resolved Configuration,
which decides what is polled.

Example headline_poller.yml:

    database:
      path: news.db
    api:
      base_url: https://newsapi.org/v2/top-headlines
      timeout_seconds: 30
    logging:
      level: DEBUG
"""

import logging
import os
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

# ============================================================================
# CONSTANTS
# ============================================================================

SETTINGS_FILE = "headline_poller.yml"

DEFAULT_DATABASE_PATH = "news.db"
DEFAULT_BASE_URL = "https://newsapi.org/v2/top-headlines"
DEFAULT_TIMEOUT_SECONDS = None  # transport default
DEFAULT_LOG_LEVEL = "INFO"

MSG_INFO_LOADED_SETTINGS = "Loaded settings from {path}"
MSG_DEBUG_SETTINGS_NOT_FOUND = "Settings file {path} not found, using defaults"
MSG_WARNING_SETTINGS_ERROR = "Error loading settings file {path}: {error}, using defaults"
MSG_WARNING_SETTINGS_NOT_MAPPING = "Settings file {path} is not a mapping, using defaults"

# ============================================================================
# LOADING
# ============================================================================

def load_settings(path: str = SETTINGS_FILE) -> Dict:
    """Load settings from YAML with fallback to an empty dict."""
    if not os.path.exists(path):
        logger.debug(MSG_DEBUG_SETTINGS_NOT_FOUND.format(path=path))
        return {}

    try:
        with open(path, 'r', encoding='utf-8') as f:
            settings = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(MSG_WARNING_SETTINGS_ERROR.format(path=path, error=e))
        return {}

    if not isinstance(settings, dict):
        logger.warning(MSG_WARNING_SETTINGS_NOT_MAPPING.format(path=path))
        return {}

    logger.info(MSG_INFO_LOADED_SETTINGS.format(path=path))
    return settings


def get_setting(settings: Dict, path: str, default: Any) -> Any:
    """Get a nested value by dot notation (e.g. 'api.timeout_seconds')."""
    value = settings
    for key in path.split('.'):
        if not isinstance(value, dict):
            return default
        value = value.get(key)
        if value is None:
            return default
    return value
