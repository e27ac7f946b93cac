from unittest.mock import AsyncMock, MagicMock

import pytest

from stitchcli.core.services.orchestrator import RequestOrchestrator
from stitchcli.core.services.request_options import RequestOptionsBuilder
from stitchcli.domain.interfaces.cache import ResponseCache
from stitchcli.domain.interfaces.transport import Transport
from stitchcli.infrastructure.resilience.rate_limiter import RateLimiter

@pytest.fixture
def mock_transport():
    transport = MagicMock(spec=Transport)
    transport.send = AsyncMock(return_value={"Products": {}})
    return transport

@pytest.fixture
def mock_cache():
    cache = MagicMock(spec=ResponseCache)
    cache.get = AsyncMock(return_value={"cached": True})
    return cache

def make_orchestrator(transport, cache=None, cache_override=False):
    return RequestOrchestrator(
        builder=RequestOptionsBuilder(access_token="t"),
        rate_limiter=RateLimiter(concurrency=5, spacing_seconds=0.01),
        transport=transport,
        cache_store=cache,
        cache_override=cache_override,
    )

@pytest.mark.asyncio
async def test_request_goes_straight_to_transport_without_override(mock_transport, mock_cache):
    orchestrator = make_orchestrator(mock_transport, mock_cache, cache_override=False)
    result = await orchestrator.request("api2/v2/Products")
    assert result == {"Products": {}}
    mock_cache.get.assert_not_called()
    sent = mock_transport.send.call_args.args[0]
    assert sent.url == "https://api-pub.stitchlabs.com/api2/v2/Products"

@pytest.mark.asyncio
async def test_request_uses_cache_with_override(mock_transport, mock_cache):
    orchestrator = make_orchestrator(mock_transport, mock_cache, cache_override=True)
    result = await orchestrator.request("api2/v2/Products")
    assert result == {"cached": True}
    descriptor = mock_cache.get.call_args.args[0]
    assert descriptor.body["page_num"] == 1
    assert mock_cache.get.call_args.kwargs["fetch"] == orchestrator.fetch
    mock_transport.send.assert_not_called()

def test_override_without_cache_is_disabled(mock_transport):
    orchestrator = make_orchestrator(mock_transport, None, cache_override=True)
    assert orchestrator.cache_override is False

@pytest.mark.asyncio
async def test_fetch_passes_through_rate_limiter(mock_transport):
    orchestrator = make_orchestrator(mock_transport)
    admitted = []
    orchestrator.rate_limiter = RateLimiter(concurrency=5, spacing_seconds=0.01, event_listener=admitted.append)
    await orchestrator.fetch(orchestrator.builder.build("api2/v2/Products"))
    assert len(admitted) == 1
    mock_transport.send.assert_awaited_once()
