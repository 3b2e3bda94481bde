"""FastAPI proxy exposing cached market data and a retried upstream call."""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from coinfetch import __version__
from coinfetch.adapters.fastapi.config import ServerConfig
from coinfetch.adapters.fastapi.middleware import RateLimitMiddleware
from coinfetch.core.entities.fetch_config import FetchConfig
from coinfetch.core.exceptions import FetchError, RateLimited
from coinfetch.core.services.fetch_cache import ResilientFetchCache
from coinfetch.core.services.retry import retry_with_backoff
from coinfetch.market import ALL_COINS_LIMIT, MarketDataClient
from coinfetch.watchlist import JsonFileStorage, WatchlistStore

logger = logging.getLogger(__name__)

router = APIRouter()


def get_market(request: Request) -> MarketDataClient:
    return request.app.state.market


def get_watchlists(request: Request) -> WatchlistStore:
    return request.app.state.watchlists


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    return {"status": "ok", "cache": request.app.state.market.fetch_cache.stats}


@router.get("/api/data", response_model=None)
async def proxy_data(request: Request) -> Any:
    """Fetch the configured upstream resource, retrying with backoff."""
    settings: ServerConfig = request.app.state.server_config
    client: httpx.AsyncClient = request.app.state.upstream

    async def call() -> Any:
        response = await client.get(settings.proxy_url)
        response.raise_for_status()
        return response.json()

    try:
        return await retry_with_backoff(
            call,
            max_attempts=settings.proxy_retry_attempts,
            initial_delay=settings.proxy_retry_delay,
        )
    except (httpx.HTTPError, ValueError):
        logger.exception("Error fetching data from %s", settings.proxy_url)
        return JSONResponse(
            status_code=500,
            content={"error": "An error occurred while fetching data"},
        )


@router.get("/api/coins")
async def list_coins(
    limit: int = Query(100, ge=1, le=ALL_COINS_LIMIT),
    market: MarketDataClient = Depends(get_market),
) -> Any:
    return await market.fetch_coins(limit)


@router.get("/api/coins/{coin_id}")
async def coin_details(
    coin_id: str,
    market: MarketDataClient = Depends(get_market),
) -> Any:
    return await market.get_coin_details(coin_id)


@router.get("/api/coins/{coin_id}/history")
async def coin_history(
    coin_id: str,
    days: str = Query("30", pattern=r"^(\d+|max)$"),
    market: MarketDataClient = Depends(get_market),
) -> Any:
    return await market.get_coin_history(coin_id, days)


@router.get("/api/search")
async def search(
    query: str = Query(..., min_length=1),
    market: MarketDataClient = Depends(get_market),
) -> Any:
    """Return details of the best match for ``query``, or 404."""
    details = await market.fetch_token_data(query)
    if details is None:
        return JSONResponse(status_code=404, content={"error": f"No coin matches {query!r}"})
    return details


@router.get("/api/watchlist/{account}")
async def read_watchlist(
    account: str,
    watchlists: WatchlistStore = Depends(get_watchlists),
) -> list[str]:
    return watchlists.get(account)


@router.post("/api/watchlist/{account}/{coin_id}")
async def add_to_watchlist(
    account: str,
    coin_id: str,
    watchlists: WatchlistStore = Depends(get_watchlists),
) -> list[str]:
    return watchlists.add(account, coin_id)


@router.delete("/api/watchlist/{account}/{coin_id}")
async def remove_from_watchlist(
    account: str,
    coin_id: str,
    watchlists: WatchlistStore = Depends(get_watchlists),
) -> list[str]:
    return watchlists.remove(account, coin_id)


async def fetch_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map upstream failures onto proxy responses."""
    status_code = 429 if isinstance(exc, RateLimited) else 502
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


def create_app(
    config: FetchConfig | None = None,
    server_config: ServerConfig | None = None,
    fetch_cache: ResilientFetchCache | None = None,
    upstream_client: httpx.AsyncClient | None = None,
    watchlists: WatchlistStore | None = None,
) -> FastAPI:
    """Create the proxy application.

    Collaborators that are not passed in are created on startup and
    closed on shutdown; passed-in ones are left open.

    Args:
        config: Market-data fetch configuration.
        server_config: Proxy server configuration.
        fetch_cache: Fetch cache to serve market data through.
        upstream_client: Client used for ``/api/data``.
        watchlists: Watchlist store behind ``/api/watchlist``.

    Returns:
        The configured FastAPI application.
    """
    config = config or FetchConfig()
    server_config = server_config or ServerConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        cache = fetch_cache or ResilientFetchCache.from_config(config)
        client = upstream_client or httpx.AsyncClient(timeout=config.timeout)

        app.state.server_config = server_config
        app.state.market = MarketDataClient(cache)
        app.state.upstream = client
        if watchlists is not None:
            app.state.watchlists = watchlists
        elif server_config.watchlist_path:
            app.state.watchlists = WatchlistStore(JsonFileStorage(server_config.watchlist_path))
        else:
            app.state.watchlists = WatchlistStore()

        logger.info("Proxy ready; market data from %s", cache.config.base_url)
        try:
            yield
        finally:
            if fetch_cache is None:
                await cache.aclose()
            if upstream_client is None:
                await client.aclose()

    app = FastAPI(
        title="coinfetch proxy",
        description="Cached, rate-limit aware market-data proxy",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        RateLimitMiddleware,
        max_requests=server_config.rate_limit_max,
        window_seconds=server_config.rate_limit_window.total_seconds(),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=server_config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(FetchError, fetch_error_handler)
    app.include_router(router)

    return app


def main() -> None:
    """Run the proxy with uvicorn using environment configuration."""
    import uvicorn

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    server_config = ServerConfig.from_env()
    app = create_app(FetchConfig.from_env(), server_config)
    uvicorn.run(app, host=server_config.host, port=server_config.port)


if __name__ == "__main__":
    main()
