"""
PostgreSQL connection helpers for the postgres storage backend.
One short-lived connection per store read/write: commit on success,
rollback on error, always closed.
"""

import logging
from contextlib import contextmanager
from typing import Optional
from urllib.parse import urlsplit

import psycopg2
from psycopg2.extras import RealDictCursor

from partnerhub.config import config

logger = logging.getLogger(__name__)

APPLICATION_NAME = 'partnerhub'


def _safe_target(url: str) -> str:
    """host:port/dbname without credentials, for log lines."""
    parts = urlsplit(url)
    return f"{parts.hostname or 'localhost'}:{parts.port or 5432}{parts.path or ''}"


@contextmanager
def get_db_connection(database_url: Optional[str] = None):
    """
    Usage:
        with get_db_connection() as conn:
            cur = conn.cursor()
            cur.execute("SELECT value FROM kv_store WHERE key = %s", (key,))
    """
    url = database_url or config.DATABASE_URL
    if not url:
        raise ValueError("DATABASE_URL is not set; the postgres backend cannot connect.")

    conn = None
    try:
        conn = psycopg2.connect(url, application_name=APPLICATION_NAME)
        logger.debug(f"Connected to {_safe_target(url)}")
        yield conn
        conn.commit()
    except Exception as e:
        if conn:
            conn.rollback()
            logger.error(f"Transaction on {_safe_target(url)} rolled back: {e}")
        raise
    finally:
        if conn:
            conn.close()


@contextmanager
def get_db_cursor(dict_cursor: bool = True, database_url: Optional[str] = None):
    """Cursor inside a managed transaction. Rows come back as dicts by default."""
    with get_db_connection(database_url) as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor if dict_cursor else None)
        try:
            yield cur
        finally:
            cur.close()
