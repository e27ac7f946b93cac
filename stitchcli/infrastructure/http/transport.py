"""Concrete implementation of the Transport interface using httpx.

Sends canonical request descriptors to the Stitch Labs API and decorates the
decoded JSON response with the options that produced it. Failures are
translated to TransportError and never retried here.
"""

import logging
import time
from typing import Optional

import httpx

# Domain Layer Imports
from stitchcli.domain.events.api_events import (
    ApiCallFailed, ApiCallSucceeded, EventListener, dispatch_event
)
from stitchcli.domain.exceptions import TransportError
from stitchcli.domain.interfaces.transport import Transport
from stitchcli.domain.models.common import PageResponse
from stitchcli.domain.models.request import RequestDescriptor

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
# Keep error messages readable when the API returns an HTML error page
MAX_ERROR_BODY_CHARS = 500

class HttpTransport(Transport):
    """httpx based transport for the Stitch Labs API."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        event_listener: Optional[EventListener] = None,
    ):
        """Initializes the transport.

        Args:
            client: Pre-configured AsyncClient (e.g. with a MockTransport in
                tests). A client with `timeout_seconds` is created if None.
            timeout_seconds: Per-request timeout for the default client.
            event_listener: Optional callable receiving API call events.
        """
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds))
        self._event_listener = event_listener
        logger.debug(f"HttpTransport initialized (timeout={timeout_seconds}s, owns_client={self._owns_client})")

    async def send(self, descriptor: RequestDescriptor) -> PageResponse:
        """Sends the descriptor and returns the decorated JSON payload."""
        url = str(descriptor.url)
        page_num = descriptor.page_num
        logger.debug(f"Making request {descriptor.method} {url} on page {page_num}")
        start_time = time.perf_counter()
        try:
            response = await self.client.request(
                descriptor.method,
                url,
                headers=descriptor.headers,
                json=descriptor.body,
            )
        except httpx.HTTPError as e:
            self._failed(url, page_num, e)
            raise TransportError(f"Request to {url} failed: {e}", url=url) from e

        latency_ms = (time.perf_counter() - start_time) * 1000

        if response.is_error:
            body = response.text[:MAX_ERROR_BODY_CHARS]
            error = TransportError(
                f"Request to {url} returned HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
                response_body=body,
            )
            self._failed(url, page_num, error, status_code=response.status_code)
            raise error

        try:
            payload = response.json()
        except ValueError as e:
            # JSONDecodeError, or UnicodeDecodeError for bytes that are not UTF-8
            self._failed(url, page_num, e, status_code=response.status_code)
            raise TransportError(
                f"Response from {url} is not valid JSON: {e}",
                url=url,
                status_code=response.status_code,
                response_body=response.text[:MAX_ERROR_BODY_CHARS],
            ) from e

        if not isinstance(payload, dict):
            error = TransportError(
                f"Response from {url} is not a JSON object (got {type(payload).__name__})",
                url=url,
                status_code=response.status_code,
            )
            self._failed(url, page_num, error, status_code=response.status_code)
            raise error

        if descriptor.return_options:
            payload["options"] = descriptor.to_dict()

        logger.debug(f"Received HTTP {response.status_code} from {url} in {latency_ms:.2f}ms")
        dispatch_event(
            ApiCallSucceeded(url=url, page_num=page_num, latency_ms=latency_ms, status_code=response.status_code),
            self._event_listener,
        )
        return payload

    def _failed(self, url: str, page_num, error: Exception, status_code: Optional[int] = None) -> None:
        logger.warning(f"Request to {url} (page {page_num}) failed: {type(error).__name__}: {error}")
        dispatch_event(
            ApiCallFailed(
                url=url,
                page_num=page_num,
                error_type=type(error).__name__,
                error_message=str(error),
                status_code=status_code,
            ),
            self._event_listener,
        )

    async def close(self) -> None:
        """Closes the AsyncClient if this transport created it."""
        if self._owns_client:
            await self.client.aclose()
