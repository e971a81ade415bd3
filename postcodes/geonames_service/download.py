"""Conditional download of GeoNames postal code archives."""

import os

import httpx

from postcodes.geonames_service.errors import (
    InvalidCountryCode,
    TransportError,
    UnexpectedStatus,
)
from postcodes.logging_config import logger

GEONAMES_BASE_URL = os.getenv(
    "GEONAMES_BASE_URL", "https://download.geonames.org/export/zip"
).rstrip("/")
HTTP_TIMEOUT_S = os.getenv("GEONAMES_HTTP_TIMEOUT")

# Process-wide client; replace it, or pass client= to the calls below.
http_client = httpx.Client(
    timeout=float(HTTP_TIMEOUT_S) if HTTP_TIMEOUT_S else None,
    follow_redirects=True,
)


def normalize_country_code(country_code: str) -> str:
    """Uppercase a two letter country code.

    Args:
        country_code: Country code in any case.

    Returns:
        The uppercased country code.

    Raises:
        InvalidCountryCode: If the code is not exactly two bytes long.
    """
    length = len(country_code.encode("utf-8"))
    if length != 2:
        logger.error("INVALID_COUNTRY_CODE", country=country_code, length=length)
        raise InvalidCountryCode(country_code, length)
    # one character in, one character out: "ß".upper() would be "SS"
    return "".join(
        char.upper() if len(char.upper()) == 1 else char for char in country_code
    )


def download_url(country_code: str) -> str:
    return f"{GEONAMES_BASE_URL}/{country_code}.zip"


def download(
    url: str, etag: str, client: httpx.Client | None = None
) -> tuple[bytes | None, bool, str]:
    """Fetch an archive unless it still matches the given ETag.

    Args:
        url: Archive URL.
        etag: ETag from an earlier download, empty if there is none.
        client: HTTP client to use instead of the module-level one.

    Returns:
        A ``(body, modified, etag)`` tuple. On 304 the body is None and the
        sent ETag is echoed back.

    Raises:
        TransportError: If the request or reading the body fails.
        UnexpectedStatus: If the response is neither 200 nor 304.
    """
    client = client if client is not None else http_client
    try:
        with client.stream("GET", url, headers={"If-None-Match": etag}) as response:
            logger.info(
                "GEONAMES_DOWNLOAD_RESPONSE", url=url, status=response.status_code
            )
            if response.status_code == httpx.codes.NOT_MODIFIED:
                return None, False, etag
            if response.status_code != httpx.codes.OK:
                raise UnexpectedStatus(response.status_code, url)
            body = response.read()
            return body, True, response.headers.get("ETag", "")
    except httpx.RequestError as exc:
        logger.error("GEONAMES_DOWNLOAD_FAILED", url=url, error=str(exc))
        raise TransportError(f"GET {url}: {exc}") from exc
