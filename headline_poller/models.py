# -*- coding: utf-8 -*-
"""
Value types shared by the resolver, fetcher and store.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from headline_poller.errors import InvalidCountryCode

DEFAULT_REFRESH_INTERVAL_MINUTES = 60


class CountryCode(Enum):
    """Countries accepted by the top-headlines endpoint.

    The member name is the token users type and config files store; the
    value is the code sent to the API and written to the database.
    """

    AR = "ar"  # Argentina
    AU = "au"  # Australia
    BR = "br"  # Brazil
    CA = "ca"  # Canada
    CN = "cn"  # China
    DE = "de"  # Germany
    FR = "fr"  # France
    GB = "gb"  # United Kingdom
    IN = "in"  # India
    IT = "it"  # Italy
    JP = "jp"  # Japan
    KR = "kr"  # South Korea
    RU = "ru"  # Russia
    US = "us"  # United States

    @classmethod
    def from_token(cls, token: str) -> "CountryCode":
        """Look up a country case-insensitively ("de", "DE" and "De" are equal)."""
        try:
            return cls[token.strip().upper()]
        except (KeyError, AttributeError):
            raise InvalidCountryCode(f"Invalid country code: {token!r}") from None


@dataclass(frozen=True)
class Configuration:
    api_key: str
    country_code: CountryCode
    refresh_interval: int = DEFAULT_REFRESH_INTERVAL_MINUTES


@dataclass(frozen=True)
class Article:
    """One item of the top-headlines response, flattened."""

    source_id: str
    source_name: str
    author: str
    title: str
    description: Optional[str]
    url: str
    url_to_image: Optional[str]
    published_at: str
    content: Optional[str]
