"""
Album "service layer".

Validation and orchestration that the router calls:
- pull the `image` and `profile` parts out of the multipart form
- parse the profile JSON
- read the image bytes and hand the row to the store
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import HTTPException, status
from pydantic import ValidationError
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request

from . import repository, schemas

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 1024 * 1024  # 1 MiB
# Text fields (the profile) are not size-limited.
FORM_MAX_PART_SIZE = 2**63 - 1

MSG_IMAGE_REQUIRED = "invalid request: image is required"
MSG_PROFILE_REQUIRED = "invalid request: profile is required"
MSG_PROFILE_INVALID = "invalid request: profile is not valid JSON"
MSG_ALBUM_ID_REQUIRED = "invalid request: albumID is required"
MSG_ALBUM_NOT_FOUND = "album not found"
MSG_READ_FAILED = "failed to read image file"
MSG_PERSIST_FAILED = "failed to persist album data"
MSG_FETCH_FAILED = "failed to retrieve album data"


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _server_error(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def require_image(value: Any) -> UploadFile:
    # A plain text field named `image` does not count as an upload.
    if not isinstance(value, UploadFile):
        raise _bad_request(MSG_IMAGE_REQUIRED)
    return value


def parse_profile(value: Any) -> schemas.Profile:
    if not isinstance(value, str) or value == "":
        raise _bad_request(MSG_PROFILE_REQUIRED)
    try:
        return schemas.Profile.model_validate_json(value)
    except ValidationError as e:
        raise _bad_request(MSG_PROFILE_INVALID) from e


async def read_form(request: Request) -> FormData:
    """
    Parse the request body as a form. A body that cannot be parsed (e.g. a
    multipart request without a boundary) carries no usable image part.
    """
    try:
        return await request.form(max_part_size=FORM_MAX_PART_SIZE)
    except (MultiPartException, StarletteHTTPException) as e:
        logger.info("form_unreadable reason=%s", getattr(e, "detail", None) or getattr(e, "message", e))
        raise _bad_request(MSG_IMAGE_REQUIRED) from e


async def read_image_bytes(image: UploadFile) -> bytes:
    """
    Read the whole upload into memory. No size limit and no format check:
    the bytes are stored exactly as sent.
    """
    buf = bytearray()
    try:
        while True:
            chunk = await image.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            buf.extend(chunk)
    except OSError as e:
        logger.exception("image_read_failed filename=%s", image.filename)
        raise _server_error(MSG_READ_FAILED) from e
    return bytes(buf)


async def create_album(
    store: repository.AlbumStore,
    *,
    image: Any,
    profile: Any,
) -> schemas.CreateAlbumResponse:
    """
    Validate the form parts in order (image, then profile), then persist.

    `image` and `profile` are the raw form values, possibly None.
    """
    upload = require_image(image)
    parsed = parse_profile(profile)

    data = await read_image_bytes(upload)
    new_album = repository.NewAlbum(
        album_id=str(uuid.uuid4()),
        image_data=data,
        image_size=len(data),
        profile=parsed,
    )

    try:
        album_id = await store.insert_album(new_album)
    except repository.StoreError as e:
        logger.exception("album_persist_failed album_id=%s", new_album.album_id)
        raise _server_error(MSG_PERSIST_FAILED) from e

    logger.info("album_created album_id=%s image_size=%s", album_id, new_album.image_size)
    return schemas.CreateAlbumResponse(album_id=album_id, image_size=str(new_album.image_size))


async def get_album(store: repository.AlbumStore, album_id: str) -> schemas.AlbumProfileResponse:
    if not album_id:
        raise _bad_request(MSG_ALBUM_ID_REQUIRED)

    try:
        profile = await store.get_album(album_id)
    except repository.StoreError as e:
        logger.exception("album_fetch_failed album_id=%s", album_id)
        raise _server_error(MSG_FETCH_FAILED) from e

    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MSG_ALBUM_NOT_FOUND)

    return schemas.AlbumProfileResponse(
        artist=profile.artist,
        title=profile.title,
        year=profile.year,
    )
