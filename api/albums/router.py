"""
FastAPI router for album endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from . import dependencies, repository, service

router = APIRouter()


@router.post("/albums")
async def create_album(
    request: Request,
    store: repository.AlbumStore = Depends(dependencies.get_album_store),
) -> dict:
    """
    Upload an image plus its profile JSON.

    The form is read by hand rather than with File()/Form() parameters so
    that missing or mistyped parts produce the documented 400 messages in a
    fixed order instead of a 422 validation error.
    """
    form = await service.read_form(request)
    try:
        result = await service.create_album(
            store,
            image=form.get("image"),
            profile=form.get("profile"),
        )
    finally:
        await form.close()
    return result.model_dump(by_alias=True)


@router.get("/albums/{album_id}")
async def get_album(
    album_id: str,
    store: repository.AlbumStore = Depends(dependencies.get_album_store),
) -> dict:
    """
    Return the artist/title/year of one album. Image bytes are never returned.
    """
    result = await service.get_album(store, album_id)
    return result.model_dump()


@router.get("/albums/")
async def get_album_missing_id(
    store: repository.AlbumStore = Depends(dependencies.get_album_store),
) -> dict:
    # Path parameters never match an empty segment; answer 400, not 404.
    result = await service.get_album(store, "")
    return result.model_dump()
