# -*- coding: utf-8 -*-
"""
Top-headlines client. One call to fetch() issues exactly one request.
"""

import logging
import time
from typing import Dict, List, Optional

import requests

from headline_poller.codec import decode_articles
from headline_poller.errors import DecodeError, RemoteError
from headline_poller.models import Article, Configuration
from headline_poller.settings import DEFAULT_BASE_URL

logger = logging.getLogger(__name__)

# ============================================================================
# CONSTANTS
# ============================================================================

HTTP_OK = 200
DEFAULT_MAX_ERROR_TEXT_LENGTH = 500

MSG_DEBUG_REQUEST = "Requesting {url} with params: {params}"
MSG_INFO_FETCHED = "Fetched {count} article(s) for {country} in {elapsed_ms:.0f}ms (totalResults: {total})"
MSG_ERROR_REQUEST_FAILED = "Request failed: {error}"
MSG_ERROR_BAD_STATUS = "Failed to get news (HTTP {status_code}): {body}"
MSG_ERROR_NOT_JSON = "Response body is not valid JSON: {error}"


class HeadlineFetcher:
    """Fetches the current top headlines for a configured country."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: Optional[float] = None):
        self.base_url = base_url
        self.timeout = timeout

    def build_params(self, config: Configuration) -> Dict[str, str]:
        return {
            "country": config.country_code.value,
            "apiKey": config.api_key,
        }

    def fetch(self, config: Configuration) -> List[Article]:
        """
        Request the headlines for config.country_code.

        Returns the decoded batch, which may be empty.

        Raises:
            RemoteError: non-200 response or transport failure
            DecodeError: 200 response whose body is not a headlines payload
        """
        params = self.build_params(config)
        safe_params = {k: v for k, v in params.items() if k != "apiKey"}
        logger.debug(MSG_DEBUG_REQUEST.format(url=self.base_url, params=safe_params))

        start_time = time.time()
        try:
            response = requests.get(self.base_url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            # The exception text can include the full URL, key included.
            message = str(e).replace(config.api_key, "***")
            logger.error(MSG_ERROR_REQUEST_FAILED.format(error=message))
            raise RemoteError(None, message) from e
        elapsed_ms = (time.time() - start_time) * 1000

        if response.status_code != HTTP_OK:
            body = response.text
            logger.error(MSG_ERROR_BAD_STATUS.format(
                status_code=response.status_code,
                body=body[:DEFAULT_MAX_ERROR_TEXT_LENGTH],
            ))
            raise RemoteError(response.status_code, body)

        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError(MSG_ERROR_NOT_JSON.format(error=e)) from e

        articles = decode_articles(payload)
        logger.info(MSG_INFO_FETCHED.format(
            count=len(articles),
            country=config.country_code.name,
            elapsed_ms=elapsed_ms,
            total=payload.get("totalResults", len(articles)),
        ))
        return articles
