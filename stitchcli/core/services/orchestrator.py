"""Request orchestration: the single path from a caller to the transport.

Every request is normalized by the RequestOptionsBuilder and then either
served through the response cache (cache override mode) or sent directly.
Both paths reach the transport only through the RateLimiter.
"""

import logging
from typing import Optional

# Core Services Imports
from stitchcli.core.services.request_options import RequestInput, RequestOptionsBuilder

# Domain Layer Imports
from stitchcli.domain.fingerprint import fingerprint
from stitchcli.domain.interfaces.cache import ResponseCache
from stitchcli.domain.interfaces.transport import Transport
from stitchcli.domain.models.common import PageResponse
from stitchcli.domain.models.request import RequestDescriptor

# Infrastructure Layer Imports
from stitchcli.infrastructure.resilience.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

class RequestOrchestrator:
    """Routes requests through the cache (optional) and the rate limiter."""

    def __init__(
        self,
        builder: RequestOptionsBuilder,
        rate_limiter: RateLimiter,
        transport: Transport,
        cache_store: Optional[ResponseCache] = None,
        cache_override: bool = False,
    ):
        """Initializes the orchestrator.

        Args:
            builder: Normalizes caller input into descriptors.
            rate_limiter: The client's only throttle.
            transport: Sends descriptors to the API.
            cache_store: Response cache; required for cache override mode.
            cache_override: Serve every request through the cache.
        """
        self.builder = builder
        self.rate_limiter = rate_limiter
        self.transport = transport
        self.cache_store = cache_store
        self.cache_override = bool(cache_override and cache_store is not None)
        if cache_override and cache_store is None:
            logger.warning("Cache override requested without a cache store; requests will not be cached.")

    async def request(self, request: RequestInput) -> PageResponse:
        """Performs one request and returns the decoded (decorated) response."""
        descriptor = self.builder.build(request)
        if self.cache_override:
            return await self.cache_store.get(descriptor, fetch=self.fetch)
        return await self.fetch(descriptor)

    async def fetch(self, descriptor: RequestDescriptor) -> PageResponse:
        """Sends a descriptor through the rate limiter, bypassing the cache."""
        logger.debug(
            f"Queueing request {descriptor.url} on page {descriptor.page_num} ({fingerprint(descriptor)})"
        )
        return await self.rate_limiter.submit(lambda: self.transport.send(descriptor))
