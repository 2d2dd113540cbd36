"""Domain models for photos and authors, and their mapping from wire DTOs.

Mapping is lenient for lists: a record that fails validation (missing field,
bad date, unparseable URL) is dropped and the rest of the page survives.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, HttpUrl, ValidationError

from unsplash.dto import PhotoDTO, PhotosSearchResultDTO, PhotoURLsDTO, ProfileImageDTO, UserDTO

log = structlog.get_logger()


class ProfileImage(BaseModel):
    model_config = ConfigDict(frozen=True)

    small: HttpUrl
    medium: HttpUrl
    large: HttpUrl


class Author(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    nickname: str
    first_name: str | None = None
    last_name: str | None = None
    profile_image: ProfileImage

    @property
    def display_name(self) -> str:
        """Full name when known, otherwise the nickname."""
        parts = [part for part in (self.first_name, self.last_name) if part]
        return " ".join(parts) if parts else self.nickname


class PhotoURLs(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: HttpUrl
    full: HttpUrl
    regular: HttpUrl
    small: HttpUrl
    thumb: HttpUrl


class Resolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int
    height: int

    @property
    def aspect_ratio(self) -> float:
        """Height over width, as used to size waterfall cells."""
        if self.width <= 0:
            return 1.0
        return self.height / self.width


class Photo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    author: Author
    created_at: datetime
    resolution: Resolution
    color: str
    description: str | None = None
    urls: PhotoURLs


class PhotosSearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    photos: list[Photo]


def _profile_image_from_dto(dto: ProfileImageDTO) -> ProfileImage:
    return ProfileImage(small=dto.small, medium=dto.medium, large=dto.large)


def author_from_dto(dto: UserDTO) -> Author | None:
    try:
        return Author(
            id=dto.id,
            nickname=dto.username,
            first_name=dto.first_name,
            last_name=dto.last_name,
            profile_image=_profile_image_from_dto(dto.profile_image),
        )
    except ValidationError:
        return None


def _urls_from_dto(dto: PhotoURLsDTO) -> PhotoURLs:
    return PhotoURLs(
        raw=dto.raw,
        full=dto.full,
        regular=dto.regular,
        small=dto.small,
        thumb=dto.thumb,
    )


def photo_from_dto(dto: PhotoDTO) -> Photo | None:
    """Map a PhotoDTO to a Photo; None if any URL is invalid."""
    author = author_from_dto(dto.user)
    if author is None:
        return None

    try:
        return Photo(
            id=dto.id,
            author=author,
            created_at=dto.created_at,
            resolution=Resolution(width=dto.width, height=dto.height),
            color=dto.color,
            description=dto.description,
            urls=_urls_from_dto(dto.urls),
        )
    except ValidationError:
        return None


def photo_from_payload(payload: Mapping[str, Any]) -> Photo | None:
    """Validate one raw photo record and map it; None if it is malformed."""
    try:
        dto = PhotoDTO.model_validate(payload)
    except ValidationError as exc:
        log.debug(
            "photos.record_dropped",
            photo_id=payload.get("id") if isinstance(payload, Mapping) else None,
            error_count=exc.error_count(),
        )
        return None
    return photo_from_dto(dto)


def photos_from_payloads(payloads: Iterable[Mapping[str, Any]]) -> list[Photo]:
    """Map a page of raw records, keeping order and dropping malformed ones."""
    photos: list[Photo] = []
    dropped = 0
    for payload in payloads:
        photo = photo_from_payload(payload)
        if photo is None:
            dropped += 1
        else:
            photos.append(photo)

    if dropped:
        log.info("photos.records_dropped", dropped=dropped, kept=len(photos))
    return photos


def search_result_from_dto(dto: PhotosSearchResultDTO) -> PhotosSearchResult:
    return PhotosSearchResult(total=dto.total, photos=photos_from_payloads(dto.results))
