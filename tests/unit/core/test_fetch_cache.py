"""Tests for ResilientFetchCache."""

from datetime import timedelta

import httpx
import pytest

from coinfetch import (
    FetchConfig,
    HttpxTransport,
    InMemoryCacheStore,
    InvalidResponse,
    NetworkError,
    RateLimited,
    ResilientFetchCache,
    UpstreamError,
)
from tests.helpers import FakeClock, RecordingSleep, ScriptedUpstream, json_response

BASE_URL = "https://api.example.test/api/v3"


def make_cache(
    upstream: ScriptedUpstream,
    clock: FakeClock,
    sleep: RecordingSleep,
    config: FetchConfig | None = None,
) -> ResilientFetchCache:
    config = config or FetchConfig(base_url=BASE_URL)
    return ResilientFetchCache(
        transport=HttpxTransport(base_url=BASE_URL, transport=upstream.transport()),
        store=InMemoryCacheStore(
            maxsize=config.max_entries,
            ttl=config.ttl_seconds,
            timer=clock,
        ),
        config=config,
        sleep=sleep,
    )


class TestCaching:
    """Tests for the cache fast path."""

    @pytest.mark.asyncio
    async def test_second_call_within_ttl_is_cached(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test that two calls within the TTL issue one request."""
        upstream = ScriptedUpstream(json_response([{"id": "bitcoin"}]))
        cache = make_cache(upstream, clock, sleep)

        first = await cache.fetch_with_cache("/coins/markets", {"vs_currency": "usd"})
        clock.advance(299)
        second = await cache.fetch_with_cache("/coins/markets", {"vs_currency": "usd"})

        assert first == second == [{"id": "bitcoin"}]
        assert upstream.calls == 1
        assert cache.stats == {"hits": 1, "misses": 1, "total": 2}

    @pytest.mark.asyncio
    async def test_call_after_ttl_refetches_once(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test that a call after the TTL issues exactly one new request."""
        upstream = ScriptedUpstream(
            json_response({"price": 1}),
            json_response({"price": 2}),
        )
        cache = make_cache(upstream, clock, sleep)

        assert await cache.fetch_with_cache("/simple/price") == {"price": 1}
        clock.advance(301)
        assert await cache.fetch_with_cache("/simple/price") == {"price": 2}
        assert upstream.calls == 2

        # The refreshed entry is served again
        assert await cache.fetch_with_cache("/simple/price") == {"price": 2}
        assert upstream.calls == 2

    @pytest.mark.asyncio
    async def test_parameter_order_shares_entry(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test that parameter insertion order does not cause a miss."""
        upstream = ScriptedUpstream(json_response({"ok": True}))
        cache = make_cache(upstream, clock, sleep)

        await cache.fetch_with_cache("/x", {"a": 1, "b": 2})
        await cache.fetch_with_cache("/x", {"b": 2, "a": 1})

        assert upstream.calls == 1
        assert cache.build_key("/x", {"a": 1, "b": 2}) == cache.build_key(
            "/x", {"b": 2, "a": 1}
        )

    @pytest.mark.asyncio
    async def test_different_parameters_separate_entries(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test that different parameter values are fetched separately."""
        upstream = ScriptedUpstream(json_response([]))
        cache = make_cache(upstream, clock, sleep)

        await cache.fetch_with_cache("/coins/markets", {"per_page": 10})
        await cache.fetch_with_cache("/coins/markets", {"per_page": 20})

        assert upstream.calls == 2

    @pytest.mark.asyncio
    async def test_injected_store_receives_entries(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test an empty injected store is used rather than replaced."""
        upstream = ScriptedUpstream(json_response({"id": "bitcoin"}))
        store = InMemoryCacheStore(maxsize=10, ttl=300, timer=clock)
        cache = ResilientFetchCache(
            transport=HttpxTransport(base_url=BASE_URL, transport=upstream.transport()),
            store=store,
            sleep=sleep,
        )

        await cache.fetch_with_cache("/coins/bitcoin")

        assert len(store) == 1
        entry = await store.get(cache.build_key("/coins/bitcoin"))
        assert entry is not None
        assert entry.stored_at == clock.now

    @pytest.mark.asyncio
    async def test_endpoint_normalized_for_key_and_request(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test equivalent endpoint spellings share one request to one path."""
        upstream = ScriptedUpstream(json_response({"ok": True}))
        cache = make_cache(upstream, clock, sleep)

        await cache.fetch_with_cache(" coins/markets/ ")
        await cache.fetch_with_cache("/coins/markets")

        assert upstream.calls == 1
        assert upstream.requests[0].url.path == "/api/v3/coins/markets"

    @pytest.mark.asyncio
    async def test_custom_ttl(self, clock: FakeClock, sleep: RecordingSleep) -> None:
        """Test the configured TTL bounds freshness."""
        upstream = ScriptedUpstream(json_response({}))
        config = FetchConfig(base_url=BASE_URL, cache_ttl=timedelta(seconds=30))
        cache = make_cache(upstream, clock, sleep, config)

        await cache.fetch_with_cache("/ping")
        clock.advance(31)
        await cache.fetch_with_cache("/ping")

        assert upstream.calls == 2

    @pytest.mark.asyncio
    async def test_invalidate(self, clock: FakeClock, sleep: RecordingSleep) -> None:
        """Test invalidating a single request."""
        upstream = ScriptedUpstream(json_response({}))
        cache = make_cache(upstream, clock, sleep)

        await cache.fetch_with_cache("/ping", {"a": 1})

        assert await cache.invalidate("/ping", {"a": 1}) is True
        assert await cache.invalidate("/ping", {"a": 1}) is False

        await cache.fetch_with_cache("/ping", {"a": 1})
        assert upstream.calls == 2

    @pytest.mark.asyncio
    async def test_clear_resets_stats(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test clearing entries and statistics."""
        upstream = ScriptedUpstream(json_response({}))
        cache = make_cache(upstream, clock, sleep)

        await cache.fetch_with_cache("/ping")
        await cache.clear()

        assert cache.stats["total"] == 0
        await cache.fetch_with_cache("/ping")
        assert upstream.calls == 2


class TestRateLimitRetry:
    """Tests for the 429 retry path."""

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test a rate-limited call succeeds once the upstream recovers."""
        upstream = ScriptedUpstream(
            httpx.Response(429),
            httpx.Response(429),
            json_response({"id": "ethereum"}),
        )
        cache = make_cache(upstream, clock, sleep)

        result = await cache.fetch_with_cache("/coins/ethereum")

        assert result == {"id": "ethereum"}
        assert upstream.calls == 3
        assert sleep.delays == [2.0, 2.0]

    @pytest.mark.asyncio
    async def test_budget_exhausted_propagates(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test three retries at a fixed 2s delay, then the failure surfaces."""
        upstream = ScriptedUpstream(httpx.Response(429))
        cache = make_cache(upstream, clock, sleep)

        with pytest.raises(RateLimited):
            await cache.fetch_with_cache("/coins/markets", retries_remaining=3)

        assert upstream.calls == 4
        assert sleep.delays == [2.0, 2.0, 2.0]

    @pytest.mark.asyncio
    async def test_zero_retries(self, clock: FakeClock, sleep: RecordingSleep) -> None:
        """Test no retry happens when the budget is zero."""
        upstream = ScriptedUpstream(httpx.Response(429))
        cache = make_cache(upstream, clock, sleep)

        with pytest.raises(RateLimited):
            await cache.fetch_with_cache("/coins/markets", retries_remaining=0)

        assert upstream.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_configured_budget_and_delay(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test the default budget and delay come from the configuration."""
        upstream = ScriptedUpstream(httpx.Response(429))
        config = FetchConfig(base_url=BASE_URL, rate_limit_retries=1, rate_limit_delay=0.5)
        cache = make_cache(upstream, clock, sleep, config)

        with pytest.raises(RateLimited):
            await cache.fetch_with_cache("/coins/markets")

        assert upstream.calls == 2
        assert sleep.delays == [0.5]

    @pytest.mark.asyncio
    async def test_negative_budget_rejected(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test validation of the per-call budget."""
        cache = make_cache(ScriptedUpstream(json_response({})), clock, sleep)

        with pytest.raises(ValueError):
            await cache.fetch_with_cache("/ping", retries_remaining=-1)

    @pytest.mark.asyncio
    async def test_entry_stored_during_wait_is_reused(self, clock: FakeClock) -> None:
        """Test a response stored while waiting out a 429 ends the retries."""
        upstream = ScriptedUpstream(httpx.Response(429))
        store = InMemoryCacheStore(maxsize=10, ttl=300, timer=clock)
        delays: list[float] = []

        async def concurrent_store(delay: float) -> None:
            delays.append(delay)
            await store.set(cache.build_key("/coins/bitcoin"), b'{"id":"bitcoin"}')

        cache = ResilientFetchCache(
            transport=HttpxTransport(base_url=BASE_URL, transport=upstream.transport()),
            store=store,
            sleep=concurrent_store,
        )

        result = await cache.fetch_with_cache("/coins/bitcoin")

        assert result == {"id": "bitcoin"}
        assert upstream.calls == 1
        assert delays == [2.0]


class TestFailures:
    """Tests for failures that are not retried."""

    @pytest.mark.asyncio
    async def test_upstream_error_not_retried(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test a 500 answer surfaces immediately."""
        upstream = ScriptedUpstream(httpx.Response(500))
        cache = make_cache(upstream, clock, sleep)

        with pytest.raises(UpstreamError) as exc_info:
            await cache.fetch_with_cache("/coins/markets")

        assert exc_info.value.status_code == 500
        assert upstream.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_network_error_not_retried(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test a connection failure surfaces immediately."""
        upstream = ScriptedUpstream(httpx.ConnectError("unreachable"))
        cache = make_cache(upstream, clock, sleep)

        with pytest.raises(NetworkError):
            await cache.fetch_with_cache("/coins/markets")

        assert upstream.calls == 1

    @pytest.mark.asyncio
    async def test_failure_never_cached(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test a failed fetch leaves the next call to hit the network."""
        upstream = ScriptedUpstream(httpx.Response(503), json_response({"ok": True}))
        cache = make_cache(upstream, clock, sleep)

        with pytest.raises(UpstreamError):
            await cache.fetch_with_cache("/ping")

        assert await cache.fetch_with_cache("/ping") == {"ok": True}
        assert upstream.calls == 2

    @pytest.mark.asyncio
    async def test_exhausted_rate_limit_never_cached(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test a call that ran out of retries does not populate the cache."""
        upstream = ScriptedUpstream(httpx.Response(429), json_response({"ok": True}))
        cache = make_cache(upstream, clock, sleep)

        with pytest.raises(RateLimited):
            await cache.fetch_with_cache("/ping", retries_remaining=0)

        assert await cache.fetch_with_cache("/ping") == {"ok": True}
        assert upstream.calls == 2

    @pytest.mark.asyncio
    async def test_malformed_body(self, clock: FakeClock, sleep: RecordingSleep) -> None:
        """Test a non-JSON 2xx body raises InvalidResponse and is not cached."""
        upstream = ScriptedUpstream(
            httpx.Response(200, content=b"<html>maintenance</html>"),
            json_response({"ok": True}),
        )
        cache = make_cache(upstream, clock, sleep)

        with pytest.raises(InvalidResponse) as exc_info:
            await cache.fetch_with_cache("/ping")

        assert exc_info.value.endpoint == "/ping"
        assert await cache.fetch_with_cache("/ping") == {"ok": True}
        assert upstream.calls == 2


class TestLifecycle:
    """Tests for construction and cleanup."""

    @pytest.mark.asyncio
    async def test_from_config_sends_api_key(self) -> None:
        """Test the factory builds an httpx transport with the API key."""
        cache = ResilientFetchCache.from_config(
            FetchConfig(base_url=BASE_URL, api_key="secret")
        )

        assert isinstance(cache, ResilientFetchCache)
        assert cache.config.default_params == {"x_cg_demo_api_key": "secret"}
        await cache.aclose()

    @pytest.mark.asyncio
    async def test_async_context_manager_closes_transport(
        self, clock: FakeClock, sleep: RecordingSleep
    ) -> None:
        """Test leaving the context closes the transport."""
        transport = HttpxTransport(
            base_url=BASE_URL,
            transport=ScriptedUpstream(json_response({})).transport(),
        )

        async with ResilientFetchCache(transport=transport, sleep=sleep) as cache:
            await cache.fetch_with_cache("/ping")

        assert transport.client.is_closed
