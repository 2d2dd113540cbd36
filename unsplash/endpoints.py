"""Endpoint factories for the photo API."""

from typing import TYPE_CHECKING

from networking.endpoint import Endpoint, EndpointBuilder
from unsplash.dto import PhotoDTO, PhotosSearchResultDTO, RawPhotosDTO

if TYPE_CHECKING:
    from search.query import SearchQuery

DEFAULT_PER_PAGE = 10


def get_photos_endpoint(page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> Endpoint:
    """``GET /photos?page={page}&per_page={per_page}``."""
    return (
        EndpointBuilder()
        .path("/photos")
        .get()
        .add_param("page", page)
        .add_param("per_page", per_page)
        .build(RawPhotosDTO)
    )


def get_photo_endpoint(photo_id: str) -> Endpoint:
    """``GET /photos/{id}``."""
    return Endpoint(
        path=f"/photos/{photo_id}",
        response_type=PhotoDTO,
        route="/photos/{id}",
    )


def search_photos_endpoint(
    query: "SearchQuery",
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE,
) -> Endpoint:
    """``GET /search/photos`` with the query text, filter values and paging.

    Filters whose value is "any" contribute no parameter.
    """
    params = query.api_params()
    params["page"] = str(page)
    params["per_page"] = str(per_page)
    return Endpoint(
        path="/search/photos",
        params=params,
        response_type=PhotosSearchResultDTO,
    )
