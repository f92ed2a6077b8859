# -*- coding: utf-8 -*-
"""
Conversions between wire/disk representations and the value types.

- top-headlines JSON payload -> list of Article
- Configuration <-> TOML, JSON, Java properties and INI text
- timestamps used for fetch provenance
"""

import configparser
import io
import json
import logging
import tomllib
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import tomli_w
from jproperties import Properties, PropertyError

from headline_poller.errors import DecodeError
from headline_poller.models import Article, Configuration, CountryCode

logger = logging.getLogger(__name__)

# ============================================================================
# CONSTANTS
# ============================================================================

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

KEY_API_KEY = "apiKey"
KEY_COUNTRY_CODE = "countryCode"
KEY_REFRESH_INTERVAL = "refreshInterval"
INI_SECTION = "config"
PROPERTIES_ENCODING = "utf-8"
INI_QUOTE = '"'

FORMAT_TOML = "toml"
FORMAT_JSON = "json"
FORMAT_PROPERTIES = "properties"
FORMAT_INI = "ini"

MSG_DEFAULT_UNKNOWN = "Unknown"
MSG_WARNING_SKIPPED_ARTICLE = "Skipping article without {field}: {title}"
MSG_ERROR_NOT_OBJECT = "Expected a JSON object, got {kind}"
MSG_ERROR_NO_ARTICLES = "Payload has no 'articles' list"
MSG_ERROR_ARTICLE_NOT_OBJECT = "Article #{index} is not an object"
MSG_ERROR_BAD_CONFIG = "Malformed {fmt} config: {error}"
MSG_ERROR_UNKNOWN_FORMAT = "Unknown config format: {fmt}"

# ============================================================================
# ARTICLE PAYLOAD
# ============================================================================

def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def decode_article(raw: Dict) -> Optional[Article]:
    """
    Flatten one raw article. Returns None when title, url or publishedAt is
    missing; author and source fields fall back to "Unknown".
    """
    title = raw.get("title")
    for field, value in (("title", title), ("url", raw.get("url")), ("publishedAt", raw.get("publishedAt"))):
        if not value:
            logger.warning(MSG_WARNING_SKIPPED_ARTICLE.format(field=field, title=title or "<untitled>"))
            return None

    source = raw.get("source") or {}
    if not isinstance(source, dict):
        source = {}

    return Article(
        source_id=str(source.get("id") or MSG_DEFAULT_UNKNOWN),
        source_name=str(source.get("name") or MSG_DEFAULT_UNKNOWN),
        author=str(raw.get("author") or MSG_DEFAULT_UNKNOWN),
        title=str(title),
        description=_optional_text(raw.get("description")),
        url=str(raw["url"]),
        url_to_image=_optional_text(raw.get("urlToImage")),
        published_at=str(raw["publishedAt"]),
        content=_optional_text(raw.get("content")),
    )


def decode_articles(payload: Any) -> List[Article]:
    """
    Convert a decoded top-headlines response into Article values.

    Raises DecodeError when the payload itself is malformed. Individual
    articles lacking a title, url or publish date are dropped.
    """
    if not isinstance(payload, dict):
        raise DecodeError(MSG_ERROR_NOT_OBJECT.format(kind=type(payload).__name__))

    raw_articles = payload.get("articles")
    if not isinstance(raw_articles, list):
        raise DecodeError(MSG_ERROR_NO_ARTICLES)

    articles = []
    for index, raw in enumerate(raw_articles):
        if not isinstance(raw, dict):
            raise DecodeError(MSG_ERROR_ARTICLE_NOT_OBJECT.format(index=index))
        article = decode_article(raw)
        if article is not None:
            articles.append(article)
    return articles

# ============================================================================
# CONFIGURATION FORMATS
# ============================================================================

def config_to_dict(config: Configuration) -> Dict[str, Any]:
    return {
        KEY_API_KEY: config.api_key,
        KEY_COUNTRY_CODE: config.country_code.name,
        KEY_REFRESH_INTERVAL: config.refresh_interval,
    }


def config_from_dict(data: Dict[str, Any]) -> Configuration:
    """
    Build a Configuration from file contents as-is.

    The country is looked up by exact enum name and the fields are not
    checked further; file contents are trusted.
    """
    return Configuration(
        api_key=str(data[KEY_API_KEY]),
        country_code=CountryCode[str(data[KEY_COUNTRY_CODE])],
        refresh_interval=int(data[KEY_REFRESH_INTERVAL]),
    )


def encode_toml(config: Configuration) -> str:
    return tomli_w.dumps(config_to_dict(config))


def decode_toml(text: str) -> Configuration:
    return config_from_dict(tomllib.loads(text))


def encode_json(config: Configuration) -> str:
    return json.dumps(config_to_dict(config), indent=2)


def decode_json(text: str) -> Configuration:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise TypeError(MSG_ERROR_NOT_OBJECT.format(kind=type(data).__name__))
    return config_from_dict(data)


def encode_properties(config: Configuration) -> str:
    props = Properties()
    for key, value in config_to_dict(config).items():
        props[key] = str(value)
    out = io.BytesIO()
    props.store(out, encoding=PROPERTIES_ENCODING, timestamp=False)
    return out.getvalue().decode(PROPERTIES_ENCODING)


def decode_properties(text: str) -> Configuration:
    props = Properties()
    props.load(text.encode(PROPERTIES_ENCODING), PROPERTIES_ENCODING)
    return config_from_dict({key: props[key].data for key in props})


def _is_quoted(value: str) -> bool:
    return len(value) >= 2 and value.startswith(INI_QUOTE) and value.endswith(INI_QUOTE)


def _quote_ini_value(value: str) -> str:
    # configparser strips surrounding whitespace from values
    if value != value.strip() or _is_quoted(value):
        return f"{INI_QUOTE}{value}{INI_QUOTE}"
    return value


def _unquote_ini_value(value: str) -> str:
    if _is_quoted(value):
        return value[1:-1]
    return value


def encode_ini(config: Configuration) -> str:
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str  # keep camelCase keys
    parser[INI_SECTION] = {key: _quote_ini_value(str(value)) for key, value in config_to_dict(config).items()}
    out = io.StringIO()
    parser.write(out)
    return out.getvalue()


def decode_ini(text: str) -> Configuration:
    """Decode the [config] section. A value wrapped in double quotes is unwrapped once."""
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str
    parser.read_string(text)
    return config_from_dict({key: _unquote_ini_value(value) for key, value in parser[INI_SECTION].items()})


ENCODERS: Dict[str, Callable[[Configuration], str]] = {
    FORMAT_TOML: encode_toml,
    FORMAT_JSON: encode_json,
    FORMAT_PROPERTIES: encode_properties,
    FORMAT_INI: encode_ini,
}

DECODERS: Dict[str, Callable[[str], Configuration]] = {
    FORMAT_TOML: decode_toml,
    FORMAT_JSON: decode_json,
    FORMAT_PROPERTIES: decode_properties,
    FORMAT_INI: decode_ini,
}


def encode_config(config: Configuration, fmt: str) -> str:
    try:
        encoder = ENCODERS[fmt]
    except KeyError:
        raise ValueError(MSG_ERROR_UNKNOWN_FORMAT.format(fmt=fmt)) from None
    return encoder(config)


def decode_config(text: str, fmt: str) -> Configuration:
    """Decode config text in the given format, raising DecodeError on any malformation."""
    try:
        decoder = DECODERS[fmt]
    except KeyError:
        raise ValueError(MSG_ERROR_UNKNOWN_FORMAT.format(fmt=fmt)) from None
    try:
        return decoder(text)
    except (KeyError, ValueError, TypeError, configparser.Error, PropertyError) as e:
        raise DecodeError(MSG_ERROR_BAD_CONFIG.format(fmt=fmt, error=e)) from e

# ============================================================================
# TIME CONVERSION
# ============================================================================

def current_timestamp() -> str:
    """Current local wall-clock time as 'YYYY-MM-DD HH:MM:SS'."""
    return datetime.now().strftime(DATETIME_FORMAT)


def parse_published_at(value: str) -> datetime:
    """
    Parse an API publish date such as '2022-03-01T12:30:00Z' into an aware
    datetime in the local timezone. Naive values are taken as UTC.
    """
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone()
