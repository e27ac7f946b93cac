"""Merges paginated responses into one result keyed by resource type."""

import logging
from typing import Any, Dict, Iterable, List, Mapping

from stitchcli.domain.models.common import MergedResult, PageResponse

logger = logging.getLogger(__name__)

# Top-level response keys that are bookkeeping, not resources
NON_RESOURCE_KEYS = ("meta", "options")


def _records(value: Any) -> List[Any]:
    # Records come keyed by id ({"123": {...}}) or as a plain list; scalars hold none
    if isinstance(value, Mapping):
        return list(value.values())
    if isinstance(value, list):
        return list(value)
    return []


def merge_responses(responses: Iterable[PageResponse]) -> MergedResult:
    """Flattens page responses into {resource_key: [records in page order]}.

    'meta' and 'options' are skipped; the input responses are not modified.
    Keys appear in the order they are first seen.
    """
    pages: Dict[str, List[List[Any]]] = {}
    for response in responses:
        for key, value in response.items():
            if key in NON_RESOURCE_KEYS:
                continue
            pages.setdefault(key, []).append(_records(value))

    merged: MergedResult = {key: [record for page in chunks for record in page] for key, chunks in pages.items()}
    counts = {key: len(records) for key, records in merged.items()}
    logger.debug(f"Merged responses: {counts}")
    return merged


def propagate_responses(results: Mapping[str, Mapping[str, Any]]) -> Dict[str, Any]:
    """Picks each named result's own resource out of a batch of merged results.

    Given {"Products": merged_products, "Variants": merged_variants}, returns
    {"Products": merged_products["Products"], "Variants": merged_variants["Variants"],
     "requests": <the input mapping>}.
    """
    propagated: Dict[str, Any] = {key: result.get(key) for key, result in results.items()}
    propagated["requests"] = results
    return propagated
