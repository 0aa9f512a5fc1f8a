"""
Album store wiring: build the configured store at startup and hand it to
routes through FastAPI's dependency system.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status

from core import db
from core.settings import STORE_STUB, Settings

from . import repository

logger = logging.getLogger(__name__)


async def open_store(settings: Settings) -> repository.AlbumStore:
    """
    Create the store selected by ALBUM_STORE.

    For postgres this connects, pings, creates the table and (if enabled)
    resets it. Any failure propagates so the process exits before serving.
    """
    if settings.album_store == STORE_STUB:
        logger.info("album_store_selected store=stub")
        return repository.StubAlbumStore()

    pool = await db.create_pool(
        settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        command_timeout=settings.command_timeout,
    )
    store = repository.PostgresAlbumStore(pool)
    try:
        await store.ensure_schema()
        if settings.reset_on_startup:
            await store.reset()
        else:
            logger.info("albums_table_reset_skipped ALBUMS_RESET_ON_STARTUP=false")
    except Exception:
        await store.close()
        raise

    logger.info("album_store_selected store=postgres")
    return store


def get_album_store(request: Request) -> repository.AlbumStore:
    store = getattr(request.app.state, "album_store", None)
    if store is None:
        # Lifespan did not run (or failed); never serve without a store.
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="album store is not initialized",
        )
    return store
