"""Cache artifact model and filename convention.

Artifacts live on disk as '{fingerprint}-{unix_seconds}.json'. All knowledge
of that naming scheme is kept in this module.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from stitchcli.domain.models.common import FilePath, Fingerprint

ARTIFACT_SUFFIX = ".json"


@dataclass
class CacheArtifact:
    """A located (or planned) cache file for one fingerprint."""
    fingerprint: Fingerprint
    timestamp: int
    path: FilePath
    exists: bool = False
    stale: bool = False
    # Set when a stale artifact was found and this one is its replacement
    previous: Optional["CacheArtifact"] = None

    @property
    def name(self) -> str:
        return Path(self.path).name


def format_artifact_name(fingerprint: str, timestamp: int) -> str:
    """Builds the file name for an artifact."""
    return f"{fingerprint}-{int(timestamp)}{ARTIFACT_SUFFIX}"


def parse_artifact_name(name: str) -> Optional[Tuple[Fingerprint, int]]:
    """Parses an artifact file name into (fingerprint, timestamp).

    Returns None for anything that does not follow the naming scheme:
    wrong suffix, missing or extra '-' separators, empty fingerprint, or a
    timestamp that is not a non-negative integer.
    """
    if not name.endswith(ARTIFACT_SUFFIX):
        return None
    stem = name[: -len(ARTIFACT_SUFFIX)]
    parts = stem.split("-")
    if len(parts) != 2:
        return None
    fingerprint, raw_timestamp = parts
    if not fingerprint or not (raw_timestamp.isascii() and raw_timestamp.isdigit()):
        return None
    return Fingerprint(fingerprint), int(raw_timestamp)
