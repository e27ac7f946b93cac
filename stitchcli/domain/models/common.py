"""Defines common Value Objects used across different domain contexts.

These objects represent simple values like fingerprints, URLs and
file paths, ensuring consistency and type safety.
"""

from typing import NewType, List, Any, Dict

# === Request Context ===
RequestUrl = NewType("RequestUrl", str)          # Fully resolved https URL
HttpMethod = NewType("HttpMethod", str)          # 'POST', 'GET', ...

# === Caching Context ===
Fingerprint = NewType("Fingerprint", str)        # Hex digest of a canonical request
FilePath = NewType("FilePath", str)              # Path to a file on disk

# A decoded API response page, including 'meta' and the echoed 'options'
PageResponse = Dict[str, Any]
# Resource key -> flat list of records across all pages
MergedResult = Dict[str, List[Any]]

