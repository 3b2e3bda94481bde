"""Market-data client for a CoinGecko-compatible API.

Every request goes through a :class:`ResilientFetchCache`, so repeated
calls within the cache TTL cost no upstream quota.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from coinfetch.core.exceptions import FetchError, InvalidResponse
from coinfetch.core.services.fetch_cache import ResilientFetchCache

logger = logging.getLogger(__name__)

VS_CURRENCY = "usd"
ALL_COINS_LIMIT = 250


class MarketDataClient:
    """Domain wrappers over the market-data endpoints."""

    def __init__(self, fetch_cache: ResilientFetchCache) -> None:
        self._fetch_cache = fetch_cache

    @property
    def fetch_cache(self) -> ResilientFetchCache:
        return self._fetch_cache

    async def fetch_coins(self, limit: int = 100) -> list[dict[str, Any]]:
        """Return the top ``limit`` coins by market cap."""
        try:
            return await self._markets(limit)
        except FetchError:
            logger.exception("Error fetching coins")
            raise

    async def fetch_all_coins(self) -> list[dict[str, Any]]:
        """Return the largest page of coins the API serves at once."""
        try:
            return await self._markets(ALL_COINS_LIMIT)
        except FetchError:
            logger.exception("Error fetching all coins")
            raise

    async def get_coin_details(self, coin_id: str) -> dict[str, Any]:
        """Return market data for a single coin."""
        try:
            return await self._fetch_cache.fetch_with_cache(
                f"/coins/{coin_id}",
                {
                    "localization": False,
                    "tickers": False,
                    "market_data": True,
                    "community_data": False,
                    "developer_data": False,
                    "sparkline": False,
                },
            )
        except FetchError:
            logger.exception("Error fetching coin details for %s", coin_id)
            raise

    async def get_coin_history(self, coin_id: str, days: int | str) -> dict[str, Any]:
        """Return price, market cap and volume series over ``days``.

        ``days`` may also be ``"max"``.
        """
        try:
            return await self._fetch_cache.fetch_with_cache(
                f"/coins/{coin_id}/market_chart",
                {"vs_currency": VS_CURRENCY, "days": days},
            )
        except FetchError:
            logger.exception("Error fetching coin history for %s", coin_id)
            raise

    async def fetch_token_data(self, query: str) -> dict[str, Any] | None:
        """Look a token up by name or symbol and return its details.

        Returns:
            Details of the best search match, or None if nothing matched.
        """
        try:
            response = await self._fetch_cache.fetch_with_cache("/search", {"query": query})
            if not isinstance(response, Mapping):
                raise InvalidResponse("search returned a non-object body", endpoint="/search")
            coins = response.get("coins") or []
            if not coins:
                return None
            coin_id = coins[0].get("id")
            if not coin_id:
                raise InvalidResponse("search match has no id", endpoint="/search")
            return await self.get_coin_details(coin_id)
        except FetchError:
            logger.exception("Error fetching token data for %r", query)
            raise

    async def fetch_token_history(self, coin_id: str, days: int | str = 30) -> dict[str, Any]:
        return await self.get_coin_history(coin_id, days)

    def search_coins(
        self,
        query: str,
        candidates: Iterable[Mapping[str, Any]],
    ) -> list[Mapping[str, Any]]:
        """Filter already-fetched coins by name or symbol.

        Matching is a case-insensitive substring test. A blank query
        matches nothing.
        """
        needle = query.strip().lower()
        if not needle:
            return []
        return [
            coin
            for coin in candidates
            if needle in str(coin.get("name", "")).lower()
            or needle in str(coin.get("symbol", "")).lower()
        ]

    async def _markets(self, limit: int) -> list[dict[str, Any]]:
        return await self._fetch_cache.fetch_with_cache(
            "/coins/markets",
            {
                "vs_currency": VS_CURRENCY,
                "order": "market_cap_desc",
                "per_page": limit,
                "page": 1,
                "sparkline": False,
            },
        )
