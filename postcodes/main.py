"""FastAPI application routes, middleware, and metrics."""

import time
import uuid

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from structlog.contextvars import bind_contextvars, clear_contextvars

from postcodes.geonames_service.errors import InvalidCountryCode, PostcodeError
from postcodes.geonames_service.geonames import fetch_country
from postcodes.health.health_check import is_geonames_available, is_redis_available
from postcodes.logging_config import logger
from postcodes.models.health import Dependencies, HealthResponse, ServiceStatus
from postcodes.models.postcode import CachedCountry, PostcodeResponse
from postcodes.redis_cache.cache import country_cache

app = FastAPI()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "path", "status_code"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request duration in seconds", ["path"]
)
FETCH_COUNT = Counter(
    "geonames_fetch_total", "GeoNames archive fetches by outcome", ["outcome"]
)


@app.middleware("http")
async def request_logging(request: Request, call_next):
    """Log request details, attach a request ID, and record metrics.

    Args:
        request: Incoming HTTP request.
        call_next: FastAPI handler for the next middleware/app.

    Returns:
        The response produced by the downstream handler.
    """
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    bind_contextvars(request_id=request_id)
    start = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response
    finally:
        duration_s = time.perf_counter() - start
        status_code = getattr(response, "status_code", 500)
        logger.info(
            "HTTP_REQUEST",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=round(duration_s * 1000, 2),
        )
        REQUEST_COUNT.labels(
            method=request.method, path=request.url.path, status_code=status_code
        ).inc()
        REQUEST_LATENCY.labels(path=request.url.path).observe(duration_s)
        clear_contextvars()


@app.exception_handler(InvalidCountryCode)
async def invalid_country_code_handler(request: Request, exc: InvalidCountryCode):
    """Convert malformed country codes into 400 responses."""
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(PostcodeError)
async def postcode_error_handler(request: Request, exc: PostcodeError):
    """Convert download, archive and record failures into 502 responses.

    Args:
        request: Incoming HTTP request.
        exc: Raised pipeline error.

    Returns:
        A JSON response with the error detail.
    """
    return JSONResponse(status_code=502, content={"detail": str(exc)})


def get_country(country_code: str) -> PostcodeResponse:
    """Return the entries of a country, refreshing the cache when GeoNames changed.

    Args:
        country_code: Two letter country code from the path.

    Returns:
        A PostcodeResponse built from fresh or cached entries.
    """
    cache = country_cache()
    cached = cache.get_country(country_code)
    result = fetch_country(country_code, cached.etag if cached else "")
    FETCH_COUNT.labels(
        outcome="modified" if result.modified else "not_modified"
    ).inc()

    if result.modified:
        cache.save_country(
            country_code, CachedCountry(etag=result.etag, entries=result.entries)
        )
        entries = result.entries
    else:
        entries = cached.entries if cached else []

    return PostcodeResponse(
        country_code=country_code.upper(),
        etag=result.etag,
        modified=result.modified,
        count=len(entries),
        entries=entries,
    )


@app.get("/postcodes/{country_code}")
def get_postcodes(country_code: str) -> PostcodeResponse:
    """Serve all postal code entries of a country."""
    return get_country(country_code)


@app.get("/postcodes/{country_code}/{postal_code}")
def get_postcode(country_code: str, postal_code: str) -> PostcodeResponse:
    """Serve the entries of a country that carry the given postal code.

    Args:
        country_code: Two letter country code from the path.
        postal_code: Postal code to match exactly.

    Returns:
        A PostcodeResponse restricted to matching entries.

    Raises:
        HTTPException: 404 if no entry carries the postal code.
    """
    response = get_country(country_code)
    entries = [e for e in response.entries if e.postal_code == postal_code]
    if not entries:
        raise HTTPException(
            status_code=404, detail=f"Postal code not found: {postal_code}"
        )
    return response.model_copy(update={"entries": entries, "count": len(entries)})


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Report API health and dependency availability.

    Returns:
        A HealthResponse containing dependency status.
    """
    geonames_available = await is_geonames_available()
    return HealthResponse(
        status="ok",
        dependencies=Dependencies(
            geonames=ServiceStatus.available
            if geonames_available
            else ServiceStatus.not_available,
            redis=is_redis_available(),
        ),
    )


@app.get("/metrics")
async def metrics():
    """Expose Prometheus metrics for scraping."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
