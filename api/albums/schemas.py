"""
Album API schemas (request/response models).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

PROFILE_FIELDS = ("artist", "title", "year")


class Profile(BaseModel):
    """
    Metadata sent as the `profile` form field.

    Decoding is lenient about shape but strict about types:
    - a top-level `null` is an empty profile
    - keys match case-insensitively (`Artist` fills `artist`); a later
      duplicate overwrites an earlier one
    - `null` values leave the field at ""
    - unknown keys are ignored
    Non-string values are still rejected.
    """

    model_config = ConfigDict(extra="ignore")

    artist: str = ""
    title: str = ""
    year: str = ""

    @model_validator(mode="before")
    @classmethod
    def _fold_keys(cls, data: Any) -> Any:
        if data is None:
            return {}
        if not isinstance(data, dict):
            return data

        folded: dict[str, Any] = {}
        for key, value in data.items():
            name = key.lower() if isinstance(key, str) else key
            if name not in PROFILE_FIELDS or value is None:
                continue
            folded[name] = value
        return folded


class CreateAlbumResponse(BaseModel):
    album_id: str = Field(..., serialization_alias="albumID")
    # Decimal string on the wire, not a JSON number.
    image_size: str = Field(..., serialization_alias="imageSize")


class AlbumProfileResponse(BaseModel):
    artist: str
    title: str
    year: str
