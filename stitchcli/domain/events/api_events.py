"""Domain Events related to API calls and response caching.

Emitted by the rate limiter, transport and cache store through an optional
listener; see dispatch_event().
"""

from dataclasses import dataclass, field
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# Base Event Class
@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass

EventListener = Callable[[DomainEvent], None]

# --- Specific API Events ---

@dataclass
class RequestAdmitted(DomainEvent):
    """Event triggered when the rate limiter admits a queued operation."""
    queue_depth: int
    in_flight: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallSucceeded(DomainEvent):
    """Event triggered when an API call returns a success status."""
    url: str
    page_num: Optional[int]
    latency_ms: float
    status_code: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when an API call fails (no retries follow)."""
    url: str
    page_num: Optional[int]
    error_type: str
    error_message: str
    status_code: Optional[int] = None
    timestamp: float = field(default_factory=time.time)

# --- Cache Events ---

@dataclass
class CacheHit(DomainEvent):
    """Event triggered when a fresh artifact is served from disk."""
    fingerprint: str
    path: str
    timestamp: float = field(default_factory=time.time)

@dataclass
class CacheMiss(DomainEvent):
    """Event triggered when no fresh artifact exists for a fingerprint."""
    fingerprint: str
    stale_path: Optional[str] = None # Set when an expired artifact was found
    timestamp: float = field(default_factory=time.time)

@dataclass
class CacheWriteFailed(DomainEvent):
    """Event triggered when a fetched response could not be persisted."""
    fingerprint: str
    path: str
    error_message: str
    timestamp: float = field(default_factory=time.time)


def dispatch_event(event: DomainEvent, listener: Optional[EventListener] = None) -> None:
    """Hands an event to the listener, or just logs it when none is set.

    Listener errors are logged and never interrupt the request flow.
    """
    logger.debug(f"EVENT: {event}")
    if listener is None:
        return
    try:
        listener(event)
    except Exception as e:
        logger.error(f"Event listener failed for {type(event).__name__}: {e}", exc_info=True)
