"""
Unit tests for payload decoding, config formats and time conversion.
"""
import os
import re
import sys
import pytest
from datetime import datetime, timezone

# Add parent directory to path to import headline_poller
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from headline_poller import codec
from headline_poller.codec import (
    current_timestamp,
    decode_article,
    decode_articles,
    decode_config,
    encode_config,
    parse_published_at,
)
from headline_poller.errors import DecodeError
from headline_poller.models import Article, Configuration, CountryCode


def raw_article(title="Headline", **overrides):
    article = {
        "source": {"id": "bbc-news", "name": "BBC News"},
        "author": "Jane Doe",
        "title": title,
        "description": "A short description",
        "url": f"https://example.com/{title.replace(' ', '-')}",
        "urlToImage": "https://example.com/image.jpg",
        "publishedAt": "2024-05-01T10:00:00Z",
        "content": "Full content",
    }
    article.update(overrides)
    return article


class TestDecodeArticles:
    """Test conversion of the top-headlines payload."""

    def test_decode_full_payload(self):
        """Test decoding a well-formed payload."""
        payload = {"status": "ok", "totalResults": 2, "articles": [raw_article("A"), raw_article("B")]}

        articles = decode_articles(payload)

        assert [a.title for a in articles] == ["A", "B"]
        first = articles[0]
        assert isinstance(first, Article)
        assert first.source_id == "bbc-news"
        assert first.source_name == "BBC News"
        assert first.author == "Jane Doe"
        assert first.url_to_image == "https://example.com/image.jpg"
        assert first.published_at == "2024-05-01T10:00:00Z"

    def test_empty_articles_is_valid(self):
        """Test that an empty article list is not an error."""
        assert decode_articles({"status": "ok", "totalResults": 0, "articles": []}) == []

    def test_nullable_fields_stay_none(self):
        """Test that description, image and content may be null."""
        article = decode_article(raw_article(description=None, urlToImage=None, content=None))

        assert article.description is None
        assert article.url_to_image is None
        assert article.content is None

    def test_missing_author_and_source_fall_back(self):
        """Test that null author and source fields get a placeholder."""
        article = decode_article(raw_article(author=None, source={"id": None, "name": None}))

        assert article.author == "Unknown"
        assert article.source_id == "Unknown"
        assert article.source_name == "Unknown"

    @pytest.mark.parametrize("field", ["title", "url", "publishedAt"])
    def test_article_without_required_field_is_skipped(self, field):
        """Test that articles lacking identity fields are dropped."""
        dropped = raw_article("Drop")
        dropped[field] = None
        payload = {"articles": [raw_article("Keep"), dropped]}

        articles = decode_articles(payload)

        assert [a.title for a in articles] == ["Keep"]

    @pytest.mark.parametrize("payload", [
        None,
        [],
        "not a payload",
        {"status": "ok"},
        {"status": "ok", "articles": "nope"},
        {"status": "ok", "articles": ["not an object"]},
    ])
    def test_malformed_payload_raises(self, payload):
        """Test that a payload without an article list is a decode error."""
        with pytest.raises(DecodeError):
            decode_articles(payload)


class TestConfigFormats:
    """Test Configuration encoding in every supported format."""

    @pytest.mark.parametrize("fmt", ["toml", "json", "properties", "ini"])
    @pytest.mark.parametrize("config", [
        Configuration(api_key="0123456789abcdef", country_code=CountryCode.DE, refresh_interval=60),
        Configuration(api_key="key-with_dashes.and%percent", country_code=CountryCode.JP, refresh_interval=1),
        Configuration(api_key="k", country_code=CountryCode.US, refresh_interval=1440),
    ])
    def test_round_trip(self, fmt, config):
        """Test that decode(encode(config)) gives the same configuration."""
        assert decode_config(encode_config(config, fmt), fmt) == config

    @pytest.mark.parametrize("fmt", ["toml", "json", "properties", "ini"])
    @pytest.mark.parametrize("api_key", [" lead", "trail ", " both ", "\"quoted\"", "\"", "in ner"])
    def test_round_trip_keeps_surrounding_characters(self, fmt, api_key):
        """Test that whitespace and quotes around the key survive every format."""
        config = Configuration(api_key=api_key, country_code=CountryCode.DE, refresh_interval=60)

        assert decode_config(encode_config(config, fmt), fmt) == config

    def test_ini_quoted_value_written_by_hand(self):
        """Test that a double-quoted INI value is unwrapped."""
        text = '[config]\napiKey = " abc "\ncountryCode = US\nrefreshInterval = 5\n'

        assert decode_config(text, "ini") == Configuration(" abc ", CountryCode.US, 5)

    def test_toml_layout(self):
        """Test the keys written to TOML."""
        text = encode_config(Configuration("abc", CountryCode.GB, 15), "toml")

        assert 'apiKey = "abc"' in text
        assert 'countryCode = "GB"' in text
        assert "refreshInterval = 15" in text

    def test_ini_uses_config_section(self):
        """Test that INI values live in the [config] section with camelCase keys."""
        text = encode_config(Configuration("abc", CountryCode.FR, 30), "ini")

        assert "[config]" in text
        assert "apiKey = abc" in text
        assert "countryCode = FR" in text

    def test_decode_json_written_by_hand(self):
        """Test decoding a JSON file in the documented layout."""
        text = '{"apiKey": "abc", "countryCode": "IT", "refreshInterval": 10}'

        assert decode_config(text, "json") == Configuration("abc", CountryCode.IT, 10)

    def test_decode_properties_written_by_hand(self):
        """Test decoding a properties file in the documented layout."""
        text = "# saved config\napiKey=abc\ncountryCode=KR\nrefreshInterval=45\n"

        assert decode_config(text, "properties") == Configuration("abc", CountryCode.KR, 45)

    @pytest.mark.parametrize("fmt, text", [
        ("toml", "apiKey = \n"),
        ("json", "{not json"),
        ("json", "[1, 2]"),
        ("ini", "[other]\napiKey = abc\n"),
        ("properties", "apiKey=abc\n"),
        ("toml", 'apiKey = "abc"\ncountryCode = "DE"\nrefreshInterval = "soon"\n'),
        ("properties", "apiKey=\\uZZZZ\ncountryCode=DE\nrefreshInterval=60\n"),
    ])
    def test_malformed_config_raises_decode_error(self, fmt, text):
        """Test that broken or incomplete files raise DecodeError."""
        with pytest.raises(DecodeError):
            decode_config(text, fmt)

    def test_file_country_is_matched_by_exact_name(self):
        """Test that file contents are not case-folded like command-line values."""
        text = 'apiKey = "abc"\ncountryCode = "de"\nrefreshInterval = 60\n'

        with pytest.raises(DecodeError):
            decode_config(text, "toml")

    def test_unknown_format(self):
        """Test that an unsupported format name is rejected."""
        with pytest.raises(ValueError):
            encode_config(Configuration("abc", CountryCode.US, 60), "yaml")
        with pytest.raises(ValueError):
            decode_config("", "yaml")

    def test_formats_cover_same_names(self):
        """Test that every encoder has a matching decoder."""
        assert set(codec.ENCODERS) == set(codec.DECODERS) == {"toml", "json", "properties", "ini"}


class TestTimeConversion:
    """Test fetch timestamps and publish date parsing."""

    def test_current_timestamp_format(self):
        """Test that the fetch timestamp is 'YYYY-MM-DD HH:MM:SS'."""
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", current_timestamp())

    def test_current_timestamp_is_local_now(self):
        """Test that the fetch timestamp is close to local wall-clock time."""
        parsed = datetime.strptime(current_timestamp(), codec.DATETIME_FORMAT)
        assert abs((datetime.now() - parsed).total_seconds()) < 5

    @pytest.mark.parametrize("value, expected", [
        ("2022-03-01T12:30:00Z", datetime(2022, 3, 1, 12, 30, tzinfo=timezone.utc)),
        ("2024-02-29T12:30:00Z", datetime(2024, 2, 29, 12, 30, tzinfo=timezone.utc)),
        ("2022-12-31T23:59:59Z", datetime(2022, 12, 31, 23, 59, 59, tzinfo=timezone.utc)),
        ("2022-12-31T23:59:59", datetime(2022, 12, 31, 23, 59, 59, tzinfo=timezone.utc)),
    ])
    def test_parse_published_at(self, value, expected):
        """Test parsing API publish dates, including leap day and year end."""
        parsed = parse_published_at(value)

        assert parsed == expected
        assert parsed.tzinfo is not None

    def test_parse_published_at_rejects_garbage(self):
        """Test that an unparseable date raises ValueError."""
        with pytest.raises(ValueError):
            parse_published_at("yesterday")
