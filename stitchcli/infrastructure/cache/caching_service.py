"""Concrete implementation of the file-based response cache.

Responses are stored as pretty-printed JSON artifacts named
'{fingerprint}-{unix_seconds}.json' in the cache directory. An artifact is
fresh while its timestamp is not older than now - ttl. Stale artifacts are
left in place; a new artifact is written next to them.
"""

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Callable, Dict, Optional, Union

# Domain Layer Imports
from stitchcli.domain.events.api_events import (
    CacheHit, CacheMiss, CacheWriteFailed, EventListener, dispatch_event
)
from stitchcli.domain.exceptions import CacheCorruptedError, FileIOError, NoCacheConfigured
from stitchcli.domain.fingerprint import fingerprint
from stitchcli.domain.interfaces.cache import Fetcher, ResponseCache
from stitchcli.domain.interfaces.filesystem import FileSystem
from stitchcli.domain.models.cache import CacheArtifact, format_artifact_name, parse_artifact_name
from stitchcli.domain.models.common import FilePath, Fingerprint, PageResponse
from stitchcli.domain.models.request import RequestDescriptor

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 0
JSON_INDENT = 2

class _LeaderCancelled(Exception):
    """Set on a shared fetch whose leading caller was cancelled; followers retry."""

class FileCacheStore(ResponseCache):
    """Fingerprint-addressed JSON cache on the local disk."""

    def __init__(
        self,
        cache_dir: Optional[Union[str, Path]],
        file_system: FileSystem,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        event_listener: Optional[EventListener] = None,
    ):
        """Initializes the cache store.

        Args:
            cache_dir: Directory holding the artifacts. None disables the
                cache; every operation then raises NoCacheConfigured.
            file_system: Adapter used for all disk access.
            ttl_seconds: How long an artifact stays fresh.
            clock: Returns the current unix time (injectable for tests).
            event_listener: Optional callable receiving cache events.
        """
        self.cache_dir = Path(cache_dir) if cache_dir else None
        self.file_system = file_system
        self.ttl_seconds = int(ttl_seconds or 0)
        self._clock = clock
        self._event_listener = event_listener
        # In-process single-flight: fingerprint -> pending result of the leading fetch
        self._inflight: Dict[Fingerprint, asyncio.Future] = {}
        logger.info(f"FileCacheStore initialized. dir={self.cache_dir}, ttl={self.ttl_seconds}s")

    def _require_dir(self) -> Path:
        if self.cache_dir is None:
            raise NoCacheConfigured()
        return self.cache_dir

    def _artifact(self, fingerprint_: Fingerprint, timestamp: int) -> CacheArtifact:
        path = self._require_dir() / format_artifact_name(fingerprint_, timestamp)
        return CacheArtifact(fingerprint=fingerprint_, timestamp=timestamp, path=FilePath(str(path)))

    def is_stale(self, timestamp: int, now: Optional[int] = None) -> bool:
        """True when an artifact stamped `timestamp` is older than now - ttl."""
        current = int(self._clock()) if now is None else now
        return timestamp < current - self.ttl_seconds

    # --- ResponseCache Interface Implementation ---

    async def locate(self, fingerprint_: Fingerprint) -> CacheArtifact:
        """Finds the latest artifact for a fingerprint, or a new write target."""
        cache_dir = self._require_dir()
        entries = await self.file_system.list_dir(FilePath(str(cache_dir)))

        latest_timestamp: Optional[int] = None
        for entry in entries:
            parsed = parse_artifact_name(entry)
            if parsed is None:
                continue
            entry_fingerprint, timestamp = parsed
            if entry_fingerprint != fingerprint_:
                continue
            if latest_timestamp is None or timestamp > latest_timestamp:
                latest_timestamp = timestamp

        now = int(self._clock())
        candidate = self._artifact(fingerprint_, now)

        if latest_timestamp is None:
            return candidate

        latest = self._artifact(fingerprint_, latest_timestamp)
        latest.exists = True
        latest.stale = self.is_stale(latest_timestamp, now)
        if latest.stale:
            candidate.previous = latest
            return candidate
        return latest

    async def get(self, descriptor: RequestDescriptor, fetch: Fetcher) -> PageResponse:
        """Serves a fresh artifact, or fetches, stores and returns a new response."""
        self._require_dir()
        key = fingerprint(descriptor)

        while True:
            leader = self._inflight.get(key)
            if leader is None:
                return await self._lead(key, descriptor, fetch)
            logger.debug(f"Joining in-flight fetch for {key}")
            try:
                return await asyncio.shield(leader)
            except _LeaderCancelled:
                # The first follower to resume becomes the new leader
                logger.debug(f"Leading fetch for {key} was cancelled; retrying")

    async def _lead(self, key: Fingerprint, descriptor: RequestDescriptor, fetch: Fetcher) -> PageResponse:
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            result = await self._get_or_fetch(key, descriptor, fetch)
        except asyncio.CancelledError:
            # Only this caller was cancelled; followers must not see CancelledError
            future.set_exception(_LeaderCancelled())
            future.exception()
            raise
        except Exception as e:
            future.set_exception(e)
            # Mark as retrieved; followers (if any) still receive it
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            self._inflight.pop(key, None)

    async def _get_or_fetch(self, key: Fingerprint, descriptor: RequestDescriptor, fetch: Fetcher) -> PageResponse:
        artifact = await self.locate(key)

        if artifact.exists and not artifact.stale:
            content = await self.file_system.read_file(artifact.path)
            try:
                cached = json.loads(content)
            except json.JSONDecodeError as e:
                raise CacheCorruptedError(f"Cache file {artifact.path} is not valid JSON: {e}", path=artifact.path) from e
            logger.debug(f"Cache file successfully read {artifact.name} on page {descriptor.page_num}")
            dispatch_event(CacheHit(fingerprint=key, path=artifact.path), self._event_listener)
            return cached

        stale_path = artifact.previous.path if artifact.previous else None
        if stale_path:
            logger.debug(f"Cache file {Path(stale_path).name} expired; fetching {key} again")
        else:
            logger.debug(f"Cache miss for {key}")
        dispatch_event(CacheMiss(fingerprint=key, stale_path=stale_path), self._event_listener)

        result = await fetch(descriptor)
        await self._store(artifact, result)
        return result

    async def _store(self, artifact: CacheArtifact, result: PageResponse) -> None:
        """Writes a fetched response; failures are logged, never raised."""
        try:
            content = json.dumps(result, indent=JSON_INDENT, ensure_ascii=False)
            await self.file_system.write_file(artifact.path, content)
        except (FileIOError, TypeError, ValueError) as e:
            logger.warning(f"Failed to write cache file {artifact.path}: {e}")
            dispatch_event(
                CacheWriteFailed(fingerprint=artifact.fingerprint, path=artifact.path, error_message=str(e)),
                self._event_listener,
            )
            return
        logger.debug(f"Cache file successfully written {artifact.name}")
