"""Health checks for Redis and the GeoNames download server."""

import httpx
from redis.exceptions import RedisError

from postcodes.geonames_service.download import GEONAMES_BASE_URL
from postcodes.logging_config import logger
from postcodes.models.health import ServiceStatus
from postcodes.redis_cache.cache import redis_client


def is_redis_available() -> ServiceStatus:
    """Check Redis connectivity.

    Returns:
        ServiceStatus.available when Redis responds, else not_available.
    """
    try:
        redis_client.ping()
        logger.info("REDIS CONNECTED")
        return ServiceStatus.available
    except RedisError as exc:
        logger.error("REDIS UNAVAILABLE", error=str(exc))
        return ServiceStatus.not_available


async def is_geonames_available() -> bool:
    """Check that the GeoNames export index answers.

    Returns:
        True if the index responds with 200.
    """
    try:
        async with httpx.AsyncClient(timeout=5, follow_redirects=True) as client:
            response = await client.head(f"{GEONAMES_BASE_URL}/")
            return response.status_code == 200
    except httpx.HTTPError as exc:
        logger.error("GEONAMES UNAVAILABLE", error=str(exc))
        return False
