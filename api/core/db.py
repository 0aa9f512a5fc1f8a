"""
Async database wiring using asyncpg.

There is no module-level pool here. `main.py` creates one in the FastAPI
lifespan, hands it to the album store, and closes it on shutdown.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

logger = logging.getLogger(__name__)


def sanitize_database_url(url: str) -> str:
    """
    Drop `sslmode` from the query string; asyncpg rejects it as an unknown
    server setting.
    """
    parts = urlsplit(url)
    pairs = parse_qsl(parts.query, keep_blank_values=True)
    kept = [pair for pair in pairs if pair[0] != "sslmode"]
    if len(kept) == len(pairs):
        return url
    return parts._replace(query=urlencode(kept)).geturl()


def _redact(url: str) -> str:
    parts = urlsplit(url)
    if parts.password is None:
        return url
    netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


async def create_pool(
    dsn: str,
    *,
    min_size: int = 1,
    max_size: int = 5,
    command_timeout: float = 30,
) -> asyncpg.Pool:
    """
    Open a pool and verify connectivity before returning it.

    Raises whatever asyncpg raises; callers treat that as fatal.
    """
    logger.info("db_pool_opening dsn=%s min_size=%s max_size=%s", _redact(dsn), min_size, max_size)
    pool = await asyncpg.create_pool(
        dsn=dsn,
        min_size=min_size,
        max_size=max_size,
        command_timeout=command_timeout,
    )
    try:
        await ping(pool)
    except Exception:
        await pool.close()
        raise
    return pool


async def ping(pool: Any) -> None:
    value = await pool.fetchval("SELECT 1")
    if value != 1:
        raise RuntimeError("Database ping returned an unexpected value.")
