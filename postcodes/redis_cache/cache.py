"""Redis cache for fetched country entries and their ETags."""

import os
from functools import partial

from redis import Redis
from redis.exceptions import RedisError

from postcodes.logging_config import logger
from postcodes.models.postcode import CachedCountry

redis_client = Redis(
    host=os.getenv("REDIS_HOST", "redis"),
    port=int(os.getenv("REDIS_PORT", "6379")),
    db=int(os.getenv("REDIS_DB", "0")),
    decode_responses=True,
)
POSTCODES_TTL_S = int(os.getenv("POSTCODES_TTL", "0"))


def country_key(country_code: str) -> str:
    """Build the Redis key for a country.

    Args:
        country_code: Country code in any case.

    Returns:
        Key of the form ``postcodes:<CC>``.
    """
    return f"postcodes:{country_code.strip().upper()}"


class CountryCache:
    """Cache wrapper for storing and retrieving CachedCountry models."""

    def __init__(self, client):
        self.redis_client: Redis = client

    def save_country(self, country_code: str, country: CachedCountry):
        """Save fetched entries and their ETag to Redis.

        Args:
            country_code: Country code key.
            country: Entries and ETag to serialize.
        """
        try:
            ttl = POSTCODES_TTL_S if POSTCODES_TTL_S > 0 else None
            self.redis_client.set(
                country_key(country_code), country.model_dump_json(), ex=ttl
            )
        except RedisError as exc:
            logger.error(
                "REDIS_SAVE_COUNTRY_FAILED", country=country_code, error=str(exc)
            )

    def get_country(self, country_code: str) -> CachedCountry | None:
        """Get cached entries and their ETag from Redis.

        Args:
            country_code: Country code key.

        Returns:
            CachedCountry if present, otherwise None.
        """
        try:
            country = self.redis_client.get(country_key(country_code))
        except RedisError as exc:
            logger.error(
                "REDIS_GET_COUNTRY_FAILED", country=country_code, error=str(exc)
            )
            return None
        return CachedCountry.model_validate_json(country) if country else None


country_cache = partial(CountryCache, client=redis_client)
