"""Random-user API client with caching and retry."""

import logging

from pydantic import ValidationError

from weathercards.cache.expiring import CacheKey, ExpiringCache
from weathercards.config import settings
from weathercards.errors import ValidationFailure, validate_data
from weathercards.http.client import HttpClient
from weathercards.resilience.retry import RetryExecutor
from weathercards.services.models import RandomUser

logger = logging.getLogger(__name__)


class UserService:
    """Fetches random user profiles, reusing cached profiles when enough are stored."""

    def __init__(
        self,
        http: HttpClient,
        cache: ExpiringCache,
        retry: RetryExecutor,
        url: str | None = None,
    ) -> None:
        self._http = http
        self._cache = cache
        self._retry = retry
        self._url = url or settings.random_user_url

    async def fetch_random_users(self, count: int = 5, use_cache: bool = True) -> list[RandomUser]:
        """
        Get `count` users, from the cache when possible.

        Args:
            count: Number of users wanted
            use_cache: Consult the cache before calling the API

        Returns:
            List of users

        Raises:
            TransientFailure: If the API keeps failing
            ValidationFailure: If the API keeps returning no users
        """
        if use_cache:
            cached = await self.get_cached_users()
            if cached and len(cached) >= count:
                logger.info(f"Using cached users ({len(cached)} available)")
                return cached[:count]

        async def fetch() -> list[RandomUser]:
            data = await self._http.fetch_json(self._url, params={"results": count})
            validate_data(
                data,
                lambda d: isinstance(d["results"], list) and len(d["results"]) > 0,
                "No users found in response",
            )
            try:
                return [RandomUser.model_validate(item) for item in data["results"]]
            except ValidationError as e:
                raise ValidationFailure(f"Malformed user in response: {e}") from e

        users = await self._retry.run_api_call(fetch, api_name="Random User API")

        if users:
            await self._cache.set(
                CacheKey.USERS,
                [user.model_dump(mode="json") for user in users],
            )
        return users

    async def fetch_fresh_users(self, count: int = 5) -> list[RandomUser]:
        """Drop cached users and fetch a fresh set."""
        logger.info("Forcing fresh user fetch (ignoring cache)")
        await self._cache.remove(CacheKey.USERS)
        return await self.fetch_random_users(count, use_cache=False)

    async def get_cached_users(self) -> list[RandomUser] | None:
        """Cached users, or None if none are stored or they are unreadable."""
        cached = await self._cache.get(CacheKey.USERS)
        if not isinstance(cached, list):
            return None
        try:
            return [RandomUser.model_validate(item) for item in cached]
        except ValidationError as e:
            logger.error(f"Discarding malformed cached users: {e}")
            return None

    async def has_cached_users(self) -> bool:
        cached = await self.get_cached_users()
        return bool(cached)
