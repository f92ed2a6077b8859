#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command-line entry point: resolve the configuration, open the article
database and poll until the process is stopped.

Usage:
    python -m headline_poller -k YOUR_KEY -c de -r 30
    NEWS_API_KEY=... NEWS_COUNTRY_CODE=us headline-poller --save-config
"""

import argparse
import logging
import sys
import traceback
from datetime import datetime
from typing import Any, Dict, List, Optional

from headline_poller import scheduler
from headline_poller.codec import DATETIME_FORMAT, ENCODERS
from headline_poller.config import DEFAULT_SAVE_FORMAT, resolve_config
from headline_poller.errors import ConfigError
from headline_poller.fetcher import HeadlineFetcher
from headline_poller.settings import (
    DEFAULT_BASE_URL,
    DEFAULT_DATABASE_PATH,
    DEFAULT_LOG_LEVEL,
    DEFAULT_TIMEOUT_SECONDS,
    SETTINGS_FILE,
    get_setting,
    load_settings,
)
from headline_poller.store import ArticleStore

# Fix encoding for Windows console
if sys.platform == 'win32':
    sys.stdout.reconfigure(encoding='utf-8')

logger = logging.getLogger(__name__)

# ============================================================================
# CONSTANTS
# ============================================================================

EXIT_OK = 0
EXIT_FAILURE = 1

MSG_INFO_STARTING = "Starting headline poller at {now}"
MSG_INFO_DATABASE = "Storing articles in {path}"
MSG_ERROR_CONFIG = "Configuration error: {error}"
MSG_INFO_GET_KEY = "Get a free key at: https://newsapi.org/"
MSG_INFO_INTERRUPTED = "Interrupted by user"
MSG_WARNING_BAD_LOG_LEVEL = "Unknown log level {level!r}, using {default}"
MSG_WARNING_BAD_TIMEOUT = "Ignoring api.timeout_seconds={value!r}, it must be a positive number"
MSG_FATAL_ERROR = "FATAL ERROR"
MSG_ERROR_UNEXPECTED_MAIN = "Unexpected error in main"

# ============================================================================
# LOGGING SETUP
# ============================================================================

def setup_logging(level: str = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Configure logging with appropriate format and level."""
    logging.basicConfig(
        level=level,
        format='[%(levelname)s] %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    logging.getLogger().setLevel(level)
    return logger


def apply_log_level(level: Any):
    """Set the root log level, falling back to the default for unknown names."""
    try:
        logging.getLogger().setLevel(level if isinstance(level, int) else str(level).upper())
    except (ValueError, TypeError):
        logging.getLogger().setLevel(DEFAULT_LOG_LEVEL)
        logger.warning(MSG_WARNING_BAD_LOG_LEVEL.format(level=level, default=DEFAULT_LOG_LEVEL))

# ============================================================================
# ARGUMENTS
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="headline-poller",
        description="Poll NewsAPI top headlines for one country and store new articles",
    )
    parser.add_argument("-k", "--key", help="News API key (env: NEWS_API_KEY)")
    parser.add_argument("-c", "--country-code", help="Country code, e.g. de or US (env: NEWS_COUNTRY_CODE)")
    parser.add_argument("-r", "--refresh-speed", type=int,
                        help="Refresh speed in minutes (env: NEWS_REFRESH_SPEED, default 60)")
    parser.add_argument("-s", "--save-config", action="store_true",
                        help="Save the resolved configuration to the config directory")
    parser.add_argument("--save-format", choices=sorted(ENCODERS), default=DEFAULT_SAVE_FORMAT,
                        help="File format used by --save-config (default: toml)")
    parser.add_argument("--settings", default=SETTINGS_FILE,
                        help=f"Operational settings YAML (default: {SETTINGS_FILE})")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)

# ============================================================================
# SETTINGS
# ============================================================================

def timeout_setting(settings: Dict) -> Optional[float]:
    """api.timeout_seconds as a positive float, or the default when unset or invalid."""
    value = get_setting(settings, 'api.timeout_seconds', DEFAULT_TIMEOUT_SECONDS)
    if value is None:
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        timeout = 0.0
    if not timeout > 0 or isinstance(value, bool):
        logger.warning(MSG_WARNING_BAD_TIMEOUT.format(value=value))
        return DEFAULT_TIMEOUT_SECONDS
    return timeout

# ============================================================================
# MAIN EXECUTION
# ============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """Resolve configuration and run the polling loop. Returns an exit code."""
    args = parse_args(argv)

    setup_logging()
    settings = load_settings(args.settings)
    apply_log_level(get_setting(settings, 'logging.level', DEFAULT_LOG_LEVEL))

    logger.info(MSG_INFO_STARTING.format(now=datetime.now().strftime(DATETIME_FORMAT)))

    try:
        config = resolve_config(vars(args))
    except ConfigError as e:
        logger.error(MSG_ERROR_CONFIG.format(error=e))
        logger.info(MSG_INFO_GET_KEY)
        return EXIT_FAILURE

    database_path = get_setting(settings, 'database.path', DEFAULT_DATABASE_PATH)
    fetcher = HeadlineFetcher(
        base_url=get_setting(settings, 'api.base_url', DEFAULT_BASE_URL),
        timeout=timeout_setting(settings),
    )

    logger.info(MSG_INFO_DATABASE.format(path=database_path))
    with ArticleStore(database_path) as store:
        store.ensure_schema()
        scheduler.run(config, fetcher, store)

    return EXIT_OK


def run_cli():
    """Entry point wrapper that handles CLI execution and exit codes."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info(f"\n{MSG_INFO_INTERRUPTED}")
        sys.exit(EXIT_FAILURE)
    except Exception as e:
        logger.critical(f"\n{MSG_FATAL_ERROR}: {MSG_ERROR_UNEXPECTED_MAIN}: {e}")
        logger.critical(traceback.format_exc())
        sys.exit(EXIT_FAILURE)


if __name__ == "__main__":
    run_cli()
