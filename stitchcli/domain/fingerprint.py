"""Content fingerprint of a canonical request.

The fingerprint is the cache key: two requests share a cached response
exactly when their descriptors serialize identically, ignoring whether the
caller asked for the options echo.
"""

import hashlib
import json

from stitchcli.domain.models.common import Fingerprint
from stitchcli.domain.models.request import RequestDescriptor

# Fields that do not change what the API returns
NON_SEMANTIC_FIELDS = ("return_options",)


def canonical_json(descriptor: RequestDescriptor) -> str:
    """Serializes a descriptor with sorted keys and compact separators."""
    data = descriptor.to_dict()
    for name in NON_SEMANTIC_FIELDS:
        data.pop(name, None)
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def fingerprint(descriptor: RequestDescriptor) -> Fingerprint:
    """Returns the MD5 hex digest of the canonical serialization."""
    digest = hashlib.md5(canonical_json(descriptor).encode("utf-8")).hexdigest()
    return Fingerprint(digest)
