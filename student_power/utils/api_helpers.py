"""API helper functions for routes."""

from fastapi import Response

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}


def apply_no_cache(response: Response) -> None:
    """Mark a response as never cacheable.

    Catalog lists change whenever an admin edits them, so intermediaries
    must not serve stale copies.
    """
    response.headers.update(NO_CACHE_HEADERS)


def update_fields(data) -> dict:
    """Fields explicitly set on a partial-update schema."""
    return data.model_dump(exclude_unset=True, exclude_none=True)
