"""StitchLabsClient: the public entry point of the library.

Wires one client instance together: a request options builder, a single
rate limiter, the HTTP transport, an optional file cache, the paginator and
the response merger.

Usage:

    client = StitchLabsClient(access_token="...", cache_dir="~/.stitch-cache",
                              cache_alive=3600, cache_override=True)
    async with client:
        products = await client.request_all("api2/v2/Products")
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

# Core Services Imports
from stitchcli.core.services.links import variant_url
from stitchcli.core.services.merger import merge_responses, propagate_responses
from stitchcli.core.services.orchestrator import RequestOrchestrator
from stitchcli.core.services.pagination import Paginator
from stitchcli.core.services.request_options import DEFAULT_PAGE_SIZE, RequestInput, RequestOptionsBuilder

# Domain Layer Imports
from stitchcli.domain.events.api_events import EventListener
from stitchcli.domain.exceptions import ConfigError
from stitchcli.domain.interfaces.filesystem import FileSystem
from stitchcli.domain.interfaces.transport import Transport
from stitchcli.domain.models.common import MergedResult, PageResponse
from stitchcli.domain.models.request import RequestDescriptor

# Infrastructure Layer Imports
from stitchcli.infrastructure.cache.caching_service import FileCacheStore
from stitchcli.infrastructure.filesystem.local_fs import LocalFileSystem
from stitchcli.infrastructure.http.transport import DEFAULT_TIMEOUT_SECONDS, HttpTransport
from stitchcli.infrastructure.resilience.rate_limiter import DEFAULT_SPACING_SECONDS, RateLimiter

logger = logging.getLogger(__name__)

class StitchLabsClient:
    """Rate-limited, optionally cached client for the Stitch Labs API."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        cache_dir: Optional[Union[str, Path]] = None,
        cache_alive: Optional[int] = 0,
        cache_override: bool = False,
        requests_per_second: Optional[int] = 1,
        page_size: Optional[int] = DEFAULT_PAGE_SIZE,
        consumer_url: Optional[str] = None,
        spacing_seconds: float = DEFAULT_SPACING_SECONDS,
        http_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[Transport] = None,
        file_system: Optional[FileSystem] = None,
        event_listener: Optional[EventListener] = None,
    ):
        """Initializes the client.

        Args:
            access_token: Stitch API token (required).
            cache_dir: Directory for cached responses; None disables caching.
            cache_alive: Seconds a cached response stays fresh.
            cache_override: Serve all requests through the cache. Ignored
                without cache_dir.
            requests_per_second: Admissions allowed per spacing window.
            page_size: Default body.page_size for read requests.
            consumer_url: Stitch web app subdomain used by variant_url().
            spacing_seconds: Length of the rate limiter's spacing window.
            http_timeout_seconds: Timeout of the default HTTP transport.
            transport: Custom transport (defaults to HttpTransport).
            file_system: Custom file system adapter (defaults to LocalFileSystem).
            event_listener: Optional callable receiving domain events.

        Raises:
            ConfigError: If access_token is missing.
        """
        if not access_token:
            raise ConfigError("missing accessToken")

        self.access_token = access_token
        self.cache_dir = Path(cache_dir).expanduser() if cache_dir else None
        self.cache_alive = int(cache_alive or 0)
        self.cache_override = bool(cache_override and self.cache_dir)
        self.requests_per_second = int(requests_per_second or 1)
        self.page_size = int(page_size or DEFAULT_PAGE_SIZE)
        self.consumer_url = consumer_url or None

        self.builder = RequestOptionsBuilder(access_token=access_token, page_size=self.page_size)
        self.rate_limiter = RateLimiter(
            concurrency=self.requests_per_second,
            spacing_seconds=spacing_seconds,
            event_listener=event_listener,
        )
        self.transport = transport or HttpTransport(
            timeout_seconds=http_timeout_seconds,
            event_listener=event_listener,
        )
        self.cache_store = FileCacheStore(
            cache_dir=self.cache_dir,
            file_system=file_system or LocalFileSystem(),
            ttl_seconds=self.cache_alive,
            event_listener=event_listener,
        )
        self.orchestrator = RequestOrchestrator(
            builder=self.builder,
            rate_limiter=self.rate_limiter,
            transport=self.transport,
            cache_store=self.cache_store,
            cache_override=self.cache_override,
        )
        self.paginator = Paginator(self.orchestrator.request)
        logger.info(
            f"StitchLabsClient initialized: requests_per_second={self.requests_per_second}, "
            f"page_size={self.page_size}, cache_dir={self.cache_dir}, cache_override={self.cache_override}"
        )

    async def __aenter__(self) -> "StitchLabsClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Closes the underlying transport."""
        await self.transport.close()

    def build_options(self, request: RequestInput) -> RequestDescriptor:
        """Returns the canonical descriptor a request would be sent as."""
        return self.builder.build(request)

    async def request(self, request: RequestInput) -> PageResponse:
        """Performs one request (cached when cache override is on)."""
        return await self.orchestrator.request(request)

    async def make_request(self, request: RequestInput) -> PageResponse:
        """Performs one rate-limited request, never consulting the cache."""
        return await self.orchestrator.fetch(self.builder.build(request))

    async def cache_request(self, request: RequestInput) -> PageResponse:
        """Performs one request through the cache, regardless of cache override.

        Raises:
            NoCacheConfigured: If the client has no cache_dir.
        """
        descriptor = self.builder.build(request)
        return await self.cache_store.get(descriptor, fetch=self.orchestrator.fetch)

    async def paginate(self, response: PageResponse, request: Optional[RequestInput] = None) -> List[PageResponse]:
        """Fetches the remaining pages of a response, in page order."""
        descriptor = self.builder.build(request) if request is not None else None
        return await self.paginator.paginate(response, descriptor)

    @staticmethod
    def merge_responses(responses: List[PageResponse]) -> MergedResult:
        return merge_responses(responses)

    async def request_all(self, request: RequestInput) -> MergedResult:
        """Requests every page of a query and merges them by resource type."""
        descriptor = self.builder.build(request)
        first = await self.orchestrator.request(descriptor)
        pages = await self.paginator.paginate(first, descriptor)
        return merge_responses(pages)

    @staticmethod
    def propagate_responses(results: Mapping[str, Mapping[str, Any]]) -> Dict[str, Any]:
        return propagate_responses(results)

    def variant_url(self, record: Mapping[str, Any]) -> Optional[str]:
        """Link to a variant in the Stitch web app, or None if unavailable."""
        return variant_url(record, self.consumer_url)
