"""Expands a first response page into every page of the query.

The number of follow-up requests is only known once the first response
arrives (meta.last_page). Remaining pages are requested concurrently through
the orchestrator, so each one is still cached and rate limited, and the
result is always returned in ascending page order.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Mapping, Optional

# Domain Layer Imports
from stitchcli.domain.exceptions import PaginationError
from stitchcli.domain.models.common import PageResponse
from stitchcli.domain.models.request import RequestDescriptor

logger = logging.getLogger(__name__)

RequestFn = Callable[[RequestDescriptor], Awaitable[PageResponse]]


def last_page_of(response: Mapping[str, Any]) -> int:
    """Returns meta.last_page as an int; a response without it is one page."""
    meta = response.get("meta")
    if not isinstance(meta, Mapping) or meta.get("last_page") is None:
        return 1
    try:
        return int(meta["last_page"])
    except (TypeError, ValueError) as e:
        raise PaginationError(f"Invalid meta.last_page: {meta['last_page']!r}") from e


class Paginator:
    """Fetches the remaining pages of a paginated response."""

    def __init__(self, request: RequestFn):
        """Initializes the paginator.

        Args:
            request: Coroutine function performing one request (normally
                RequestOrchestrator.request).
        """
        self._request = request

    async def paginate(
        self,
        first_response: PageResponse,
        descriptor: Optional[RequestDescriptor] = None,
    ) -> List[PageResponse]:
        """Returns [first_response, page 2, ..., last page].

        Args:
            first_response: The response for the first requested page.
            descriptor: Request that produced first_response; only needed
                when the response carries no echoed 'options'.

        Raises:
            PaginationError: If more pages exist but the originating request
                is unknown.
            Exception: The first failure of any page request. Remaining page
                requests are cancelled and no partial result is returned.
        """
        last_page = last_page_of(first_response)
        if last_page <= 1:
            return [first_response]

        base = self._base_descriptor(first_response, descriptor)
        try:
            start_page = int(base.page_num or 1) + 1
        except (TypeError, ValueError) as e:
            raise PaginationError(f"Invalid body.page_num: {base.page_num!r}") from e

        pages = list(range(start_page, last_page + 1))
        if not pages:
            return [first_response]
        logger.info(f"Paginating {base.url}: fetching pages {start_page}..{last_page}")

        tasks = [asyncio.ensure_future(self._request(base.with_page(page))) for page in pages]
        try:
            # gather keeps input order, so results are ordered by page number
            responses = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            # Let cancelled siblings finish so their errors are not reported as lost
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return [first_response, *responses]

    @staticmethod
    def _base_descriptor(
        first_response: Mapping[str, Any],
        descriptor: Optional[RequestDescriptor],
    ) -> RequestDescriptor:
        options = first_response.get("options")
        if isinstance(options, Mapping):
            return RequestDescriptor.from_dict(options)
        if descriptor is not None:
            return descriptor
        raise PaginationError(
            "Cannot paginate: response has no echoed options and no request descriptor was given"
        )
