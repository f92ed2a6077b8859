# -*- coding: utf-8 -*-
"""
Fixed-interval polling loop.

The first tick runs immediately. After each tick the loop sleeps for
whatever is left of the refresh interval, so ticks never overlap: a tick
that runs longer than the interval pushes the next one back, and missed
ticks are not made up.
"""

import logging
import time
from typing import List, NoReturn, Optional

from headline_poller.codec import DATETIME_FORMAT, parse_published_at
from headline_poller.errors import FetchError, StoreError
from headline_poller.fetcher import HeadlineFetcher
from headline_poller.models import Article, Configuration
from headline_poller.store import ArticleStore

logger = logging.getLogger(__name__)

SECONDS_PER_MINUTE = 60

MSG_INFO_STARTING = "Polling top headlines for {country} every {minutes} minute(s)"
MSG_INFO_TICK = "Tick {tick}: fetching headlines"
MSG_WARNING_FETCH_FAILED = "Fetch failed, waiting for next tick: {error}"
MSG_ERROR_STORE_FAILED = "Storing articles failed, waiting for next tick: {error}"
MSG_INFO_EMPTY_BATCH = "No articles in response"
MSG_INFO_NEWEST = "Newest headline published {published}"
MSG_DEBUG_NEXT_TICK = "Next tick in {seconds:.0f}s"
MSG_WARNING_OVERRUN = "Tick took {elapsed:.0f}s, longer than the {interval:.0f}s interval"


def newest_published(articles: List[Article]) -> Optional[str]:
    """Latest publish time in the batch, rendered in local time, or None."""
    newest = None
    for article in articles:
        try:
            published = parse_published_at(article.published_at)
        except ValueError:
            continue
        if newest is None or published > newest:
            newest = published
    if newest is None:
        return None
    return newest.strftime(DATETIME_FORMAT)


def run_tick(config: Configuration, fetcher: HeadlineFetcher, store: ArticleStore) -> int:
    """
    Fetch once and store the new articles.

    Returns the number of articles inserted. Fetch and store failures are
    logged and count as zero inserted.
    """
    try:
        articles = fetcher.fetch(config)
    except FetchError as e:
        logger.warning(MSG_WARNING_FETCH_FAILED.format(error=e))
        return 0

    if not articles:
        logger.info(MSG_INFO_EMPTY_BATCH)
        return 0

    newest = newest_published(articles)
    if newest:
        logger.info(MSG_INFO_NEWEST.format(published=newest))

    try:
        return store.insert_new(articles, config.country_code)
    except StoreError as e:
        logger.error(MSG_ERROR_STORE_FAILED.format(error=e))
        return 0


def run(config: Configuration, fetcher: HeadlineFetcher, store: ArticleStore) -> NoReturn:
    """Tick forever. Only returns by exception (e.g. KeyboardInterrupt)."""
    interval = config.refresh_interval * SECONDS_PER_MINUTE
    logger.info(MSG_INFO_STARTING.format(country=config.country_code.name, minutes=config.refresh_interval))

    tick = 0
    while True:
        tick += 1
        started = time.monotonic()
        logger.info(MSG_INFO_TICK.format(tick=tick))
        run_tick(config, fetcher, store)

        elapsed = time.monotonic() - started
        if elapsed > interval:
            logger.warning(MSG_WARNING_OVERRUN.format(elapsed=elapsed, interval=interval))
        delay = max(0.0, interval - elapsed)
        logger.debug(MSG_DEBUG_NEXT_TICK.format(seconds=delay))
        time.sleep(delay)
