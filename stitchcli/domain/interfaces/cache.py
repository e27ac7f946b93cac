"""Interface for the response cache.

Defines the contract for locating cache artifacts by request fingerprint
and serving cached responses, falling back to a fetch on a miss.
"""

import abc
from typing import Awaitable, Callable

# Import relevant domain models
from ..models.cache import CacheArtifact
from ..models.common import Fingerprint, PageResponse
from ..models.request import RequestDescriptor

Fetcher = Callable[[RequestDescriptor], Awaitable[PageResponse]]

class ResponseCache(abc.ABC):
    """Abstract Base Class for fingerprint-addressed response caching."""

    @abc.abstractmethod
    async def locate(self, fingerprint: Fingerprint) -> CacheArtifact:
        """Finds the artifact to use for a fingerprint.

        Args:
            fingerprint: The request fingerprint.

        Returns:
            The latest fresh artifact (exists=True), or a new write target
            stamped with the current time (exists=False).

        Raises:
            NoCacheConfigured: If the cache has no directory.
        """
        pass

    @abc.abstractmethod
    async def get(self, descriptor: RequestDescriptor, fetch: Fetcher) -> PageResponse:
        """Returns the cached response, or fetches and stores a fresh one.

        Args:
            descriptor: The canonical request.
            fetch: Coroutine function performing the real (rate-limited) request.

        Returns:
            The decoded response.

        Raises:
            NoCacheConfigured: If the cache has no directory.
            FileIOError: If a fresh artifact exists but cannot be read.
        """
        pass
