# -*- coding: utf-8 -*-
"""
Poll NewsAPI top headlines for a configured country and store new articles.

The configuration comes from the first config file found in the config
directory (TOML, JSON, properties, INI), or else from command-line flags
and NEWS_* environment variables. Each tick fetches the headlines once and
inserts every article whose title is not stored yet into a SQLite table.

This module can be run manually or left running as a service:
    python -m headline_poller -k YOUR_KEY -c us
"""

from headline_poller.cli import main, run_cli
from headline_poller.config import resolve_config
from headline_poller.fetcher import HeadlineFetcher
from headline_poller.models import Article, Configuration, CountryCode
from headline_poller.store import ArticleStore

__all__ = [
    "Article",
    "ArticleStore",
    "Configuration",
    "CountryCode",
    "HeadlineFetcher",
    "main",
    "resolve_config",
    "run_cli",
]
