"""Wire DTOs for the photo API.

Field names match the JSON payload (snake_case). List payloads are decoded
as raw mappings so a single malformed record can be dropped during mapping
instead of failing the whole page.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class ProfileImageDTO(BaseModel):
    small: str
    medium: str
    large: str


class UserDTO(BaseModel):
    id: str
    username: str
    first_name: str | None = None
    last_name: str | None = None
    profile_image: ProfileImageDTO


class PhotoURLsDTO(BaseModel):
    raw: str
    full: str
    regular: str
    small: str
    thumb: str


class PhotoDTO(BaseModel):
    id: str
    urls: PhotoURLsDTO
    user: UserDTO
    created_at: datetime
    width: int
    height: int
    color: str
    description: str | None = None


RawPhotosDTO = list[dict[str, Any]]


class PhotosSearchResultDTO(BaseModel):
    """Search response envelope; ``results`` stays raw for lenient mapping."""

    total: int
    total_pages: int | None = None
    results: RawPhotosDTO
