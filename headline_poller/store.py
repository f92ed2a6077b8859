# -*- coding: utf-8 -*-
"""
SQLite-backed article table.

Articles are deduplicated by exact title: an article whose title is already
stored is skipped, never updated. Rows carry the time they were inserted
(fetchedAt) and the country they were fetched for (countryCode).
"""

import logging
import os
import sqlite3
from typing import Iterable, List

from headline_poller.codec import current_timestamp
from headline_poller.errors import StoreError
from headline_poller.models import Article, CountryCode

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS articles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title VARCHAR(1024) NOT NULL,
    author VARCHAR(1024) NOT NULL,
    description VARCHAR(4096),
    url VARCHAR(1024) NOT NULL,
    urlToImage VARCHAR(1024),
    publishedAt VARCHAR(1024) NOT NULL,
    content VARCHAR(8192),
    sourceName VARCHAR(1024) NOT NULL,
    sourceId VARCHAR(1024) NOT NULL,
    fetchedAt VARCHAR(1024) NOT NULL,
    countryCode VARCHAR(2) NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_articles_title ON articles(title);
"""

INSERT_ARTICLE = """
INSERT INTO articles (
    title, author, description, url, urlToImage, publishedAt, content,
    sourceName, sourceId, fetchedAt, countryCode
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

MSG_DEBUG_SKIPPED_DUPLICATE = "Already stored: {title}"
MSG_INFO_INSERTED = "Inserted {inserted} new article(s), skipped {skipped} already stored"
MSG_ERROR_DATABASE = "Database error on {path}: {error}"


class ArticleStore:
    """Owns the articles table in one SQLite file."""

    def __init__(self, path: str):
        self.path = path
        self._conn = None
        self._schema_ready = False

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            self._conn = sqlite3.connect(self.path)
            self._conn.row_factory = sqlite3.Row
        if not self._schema_ready:
            self._conn.executescript(SCHEMA)
            self._conn.commit()
            self._schema_ready = True
        return self._conn

    def ensure_schema(self):
        """Create the table if it does not exist. Safe to call repeatedly."""
        try:
            self._schema_ready = False
            self._get_conn()
        except sqlite3.Error as e:
            raise StoreError(MSG_ERROR_DATABASE.format(path=self.path, error=e)) from e

    def _exists(self, conn: sqlite3.Connection, title: str) -> bool:
        row = conn.execute("SELECT 1 FROM articles WHERE title = ? LIMIT 1", (title,)).fetchone()
        return row is not None

    def exists(self, title: str) -> bool:
        try:
            return self._exists(self._get_conn(), title)
        except sqlite3.Error as e:
            raise StoreError(MSG_ERROR_DATABASE.format(path=self.path, error=e)) from e

    def insert_new(self, articles: Iterable[Article], country_code: CountryCode) -> int:
        """
        Insert every article whose title is not stored yet.

        All articles of one call share a transaction; a title repeated within
        the batch is inserted once. Returns the number of rows inserted.
        """
        inserted = 0
        skipped = 0
        try:
            conn = self._get_conn()
            with conn:
                for article in articles:
                    if self._exists(conn, article.title):
                        logger.debug(MSG_DEBUG_SKIPPED_DUPLICATE.format(title=article.title))
                        skipped += 1
                        continue
                    conn.execute(INSERT_ARTICLE, (
                        article.title,
                        article.author,
                        article.description,
                        article.url,
                        article.url_to_image,
                        article.published_at,
                        article.content,
                        article.source_name,
                        article.source_id,
                        current_timestamp(),
                        country_code.value,
                    ))
                    inserted += 1
        except sqlite3.Error as e:
            raise StoreError(MSG_ERROR_DATABASE.format(path=self.path, error=e)) from e

        logger.info(MSG_INFO_INSERTED.format(inserted=inserted, skipped=skipped))
        return inserted

    def count(self) -> int:
        try:
            return self._get_conn().execute("SELECT COUNT(*) FROM articles").fetchone()[0]
        except sqlite3.Error as e:
            raise StoreError(MSG_ERROR_DATABASE.format(path=self.path, error=e)) from e

    def titles(self) -> List[str]:
        """Stored titles in insertion order."""
        try:
            rows = self._get_conn().execute("SELECT title FROM articles ORDER BY id").fetchall()
        except sqlite3.Error as e:
            raise StoreError(MSG_ERROR_DATABASE.format(path=self.path, error=e)) from e
        return [row["title"] for row in rows]

    def rows(self) -> List[sqlite3.Row]:
        try:
            return self._get_conn().execute("SELECT * FROM articles ORDER BY id").fetchall()
        except sqlite3.Error as e:
            raise StoreError(MSG_ERROR_DATABASE.format(path=self.path, error=e)) from e

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._schema_ready = False

    def __enter__(self) -> "ArticleStore":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
