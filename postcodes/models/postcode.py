"""Models for cached and served postal code data."""

from pydantic import BaseModel

from postcodes.models.entry import Entry


class CachedCountry(BaseModel):
    """Last fetched entries of a country together with their ETag."""

    etag: str
    entries: list[Entry]


class PostcodeResponse(BaseModel):
    """Postal code entries exposed by the API."""

    country_code: str
    etag: str
    modified: bool
    count: int
    entries: list[Entry]
