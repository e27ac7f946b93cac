"""Builds canonical request descriptors from caller input.

Caller input may be a URL string, a mapping of request options, or an
existing RequestDescriptor. The result always targets the Stitch Labs API
host over https and carries the authentication and content-type headers.

Options are assembled from named layers applied in a fixed order:

1. base defaults (method, headers, read action, options echo)
2. pagination defaults (page_num/page_size, unless the action is "write")
3. caller overrides, deep-merged on top
"""

import copy
import logging
from typing import Any, Callable, Dict, List, Mapping, Tuple, Union
from urllib.parse import urlsplit, urlunsplit

# Domain Layer Imports
from stitchcli.domain.exceptions import ParseError
from stitchcli.domain.models.common import RequestUrl
from stitchcli.domain.models.request import RequestDescriptor

logger = logging.getLogger(__name__)

API_SCHEME = "https"
API_HOST = "api-pub.stitchlabs.com"
CONTENT_TYPE = "application/json;charset=UTF-8"
DEFAULT_METHOD = "POST"
DEFAULT_ACTION = "read"
WRITE_ACTION = "write"
DEFAULT_PAGE_SIZE = 5

RequestInput = Union[str, Mapping[str, Any], RequestDescriptor]
Layer = Callable[[Dict[str, Any], Dict[str, Any]], Dict[str, Any]]


def resolve_url(raw_url: Any) -> RequestUrl:
    """Forces a caller URL onto the API scheme and host.

    Path, query and fragment are kept. Any scheme, host, port or user info
    given by the caller is discarded.

    Raises:
        ParseError: If the URL is missing or cannot be parsed.
    """
    if not isinstance(raw_url, str) or not raw_url.strip():
        raise ParseError(f"Missing request URL: {raw_url!r}")
    try:
        parts = urlsplit(raw_url.strip())
    except ValueError as e:
        raise ParseError(f"Malformed request URL {raw_url!r}: {e}") from e

    path = parts.path
    if not parts.netloc and not parts.scheme and path and not path.startswith("/"):
        # 'api-pub.stitchlabs.com/api2/...' or 'api2/v2/...' without a scheme
        first, _, rest = path.partition("/")
        path = "/" + rest if "." in first else "/" + path
    elif path and not path.startswith("/"):
        path = "/" + path

    return RequestUrl(urlunsplit((API_SCHEME, API_HOST, path, parts.query, parts.fragment)))


def deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Returns a new mapping with overrides merged recursively over base.

    Nested mappings merge key by key; any other value from overrides
    (scalars, lists, None) replaces the base value. Inputs are not mutated.
    """
    merged: Dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class RequestOptionsBuilder:
    """Normalizes caller input into a RequestDescriptor."""

    def __init__(self, access_token: str, page_size: int = DEFAULT_PAGE_SIZE):
        self.access_token = access_token
        self.page_size = page_size
        self.layers: List[Tuple[str, Layer]] = [
            ("base", self._base_layer),
            ("pagination", self._pagination_layer),
            ("overrides", self._override_layer),
        ]

    def build(self, request: RequestInput) -> RequestDescriptor:
        """Builds the canonical descriptor for a request.

        Raises:
            ParseError: If the input has no URL or the URL is malformed.
        """
        overrides = self._normalize_input(request)
        overrides["url"] = resolve_url(overrides.get("url"))

        options: Dict[str, Any] = {}
        for _, layer in self.layers:
            options = layer(options, overrides)

        descriptor = RequestDescriptor.from_dict(options)
        logger.debug(f"Built request options for {descriptor.url} (page {descriptor.page_num})")
        return descriptor

    @staticmethod
    def _normalize_input(request: RequestInput) -> Dict[str, Any]:
        if isinstance(request, RequestDescriptor):
            return request.to_dict()
        if isinstance(request, str):
            return {"url": request}
        if isinstance(request, Mapping):
            overrides = copy.deepcopy(dict(request))
            # 'uri' is accepted as an alias of 'url'
            uri = overrides.pop("uri", None)
            if overrides.get("url") is None and uri is not None:
                overrides["url"] = uri
            return overrides
        raise ParseError(f"Unsupported request type: {type(request).__name__}")

    # --- Layers ---

    def _base_layer(self, options: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        return deep_merge(options, {
            "method": DEFAULT_METHOD,
            "headers": {
                "access_token": self.access_token,
                "Content-Type": CONTENT_TYPE,
            },
            "body": {"action": DEFAULT_ACTION},
            "return_options": True,
        })

    def _pagination_layer(self, options: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        body = overrides.get("body")
        action = body.get("action") if isinstance(body, Mapping) else None
        if action == WRITE_ACTION:
            return options
        return deep_merge(options, {"body": {"page_num": 1, "page_size": self.page_size}})

    @staticmethod
    def _override_layer(options: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        return deep_merge(options, overrides)
