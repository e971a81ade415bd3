"""Fetching GeoNames postal code entries with ETag based caching."""

import httpx

from postcodes.geonames_service.archive import member_filename, unzip_member
from postcodes.geonames_service.download import (
    download,
    download_url,
    normalize_country_code,
)
from postcodes.geonames_service.records import parse_entries
from postcodes.logging_config import logger
from postcodes.models.entry import FetchResult


def fetch_country(
    country_code: str, etag: str = "", client: httpx.Client | None = None
) -> FetchResult:
    """Fetch the postal code entries of one country from GeoNames.

    The archive is only downloaded when it changed since the download that
    produced ``etag``. Callers keep the returned ETag and pass it on the next
    call. See https://download.geonames.org/export/zip/ for the available
    countries.

    Args:
        country_code: Two letter country code, any case.
        etag: ETag of the previously fetched archive, empty for a first fetch.
        client: HTTP client to use instead of the shared one.

    Returns:
        A FetchResult. When the archive is unchanged, ``modified`` is False,
        ``entries`` is empty and ``etag`` is the one passed in.

    Raises:
        InvalidCountryCode: Before any request, if the code is malformed.
        DownloadError: If the download fails.
        ArchiveError: If the data file cannot be extracted.
        MalformedRecord: If the data file cannot be parsed.
    """
    country_code = normalize_country_code(country_code)

    data, modified, new_etag = download(download_url(country_code), etag, client)
    if not modified:
        logger.info("GEONAMES_NOT_MODIFIED", country=country_code, etag=etag)
        return FetchResult(entries=[], modified=False, etag=new_etag)

    contents = unzip_member(data, member_filename(country_code))
    entries = parse_entries(contents)
    logger.info(
        "GEONAMES_FETCHED", country=country_code, count=len(entries), etag=new_etag
    )
    return FetchResult(entries=entries, modified=True, etag=new_etag)
