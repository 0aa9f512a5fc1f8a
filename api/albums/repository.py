"""
Album persistence.

All album SQL lives here. Two stores share one interface:
- PostgresAlbumStore: the real table, over an asyncpg pool
- StubAlbumStore: fixed responses, no database
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import asyncpg

from . import schemas

logger = logging.getLogger(__name__)

TABLE_NAME = "albums"

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS albums (
    album_id   VARCHAR(255) PRIMARY KEY,
    image_data BYTEA,
    image_size INTEGER NOT NULL,
    artist     VARCHAR(255) NOT NULL,
    title      VARCHAR(255) NOT NULL,
    year       VARCHAR(4)   NOT NULL,
    created_at TIMESTAMPTZ  NOT NULL DEFAULT now()
)
"""

STUB_ALBUM_ID = "123"
STUB_PROFILE = schemas.Profile(artist="Sex Pistols", title="Never Mind The Bollocks", year="1977")


class StoreError(RuntimeError):
    """Raised for any persistence failure; callers map it to a 500."""


@dataclass(frozen=True)
class NewAlbum:
    album_id: str
    image_data: bytes
    image_size: int
    profile: schemas.Profile


class AlbumStore(Protocol):
    async def insert_album(self, album: NewAlbum) -> str:
        """Persist one album and return the id the client should use."""
        ...

    async def get_album(self, album_id: str) -> schemas.Profile | None:
        """Return the album's profile, or None when there is no such album."""
        ...

    async def close(self) -> None:
        ...


# Connection-level failures (dropped sockets, pool closed) are not
# PostgresError subclasses.
_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class PostgresAlbumStore:
    def __init__(self, pool: Any) -> None:
        self._pool = pool

    async def ensure_schema(self) -> None:
        await self._pool.execute(CREATE_TABLE_SQL)
        logger.info("albums_table_ready table=%s", TABLE_NAME)

    async def reset(self) -> None:
        """
        Delete every album. Destructive; only startup calls this, and only
        when ALBUMS_RESET_ON_STARTUP is enabled.
        """
        logger.warning("albums_table_reset table=%s all rows will be deleted", TABLE_NAME)
        await self._pool.execute(f"TRUNCATE TABLE {TABLE_NAME}")
        logger.warning("albums_table_cleared table=%s", TABLE_NAME)

    async def insert_album(self, album: NewAlbum) -> str:
        try:
            await self._pool.execute(
                """
                INSERT INTO albums (album_id, image_data, image_size, artist, title, year)
                VALUES ($1, $2, $3, $4, $5, $6)
                """,
                album.album_id,
                album.image_data,
                album.image_size,
                album.profile.artist,
                album.profile.title,
                album.profile.year,
            )
        except _DB_ERRORS as e:
            raise StoreError(f"Failed to insert album {album.album_id}.") from e
        return album.album_id

    async def get_album(self, album_id: str) -> schemas.Profile | None:
        try:
            row = await self._pool.fetchrow(
                """
                SELECT artist, title, year
                FROM albums
                WHERE album_id = $1
                """,
                album_id,
            )
        except _DB_ERRORS as e:
            raise StoreError(f"Failed to fetch album {album_id}.") from e

        if row is None:
            return None
        return schemas.Profile(
            artist=str(row["artist"]),
            title=str(row["title"]),
            year=str(row["year"]),
        )

    async def close(self) -> None:
        await self._pool.close()


class StubAlbumStore:
    """
    Accepts every upload and answers every lookup with the same canned album.
    """

    async def insert_album(self, album: NewAlbum) -> str:
        logger.debug("stub_insert_ignored album_id=%s image_size=%s", album.album_id, album.image_size)
        return STUB_ALBUM_ID

    async def get_album(self, album_id: str) -> schemas.Profile | None:
        return STUB_PROFILE.model_copy()

    async def close(self) -> None:
        return None
