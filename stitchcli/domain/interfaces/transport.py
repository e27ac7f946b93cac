"""Interface for sending requests to the remote API."""

import abc

from ..models.common import PageResponse
from ..models.request import RequestDescriptor

class Transport(abc.ABC):
    """Abstract Base Class for API transports."""

    @abc.abstractmethod
    async def send(self, descriptor: RequestDescriptor) -> PageResponse:
        """Sends one request and returns the decoded response.

        When descriptor.return_options is true the descriptor mapping is
        attached to the response under 'options'.

        Raises:
            TransportError: On network failure, non-success status or a
                body that is not a JSON object.
        """
        pass

    async def close(self) -> None:
        """Releases any underlying connections."""
        return None
