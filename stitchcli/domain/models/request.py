"""Request descriptor model.

A RequestDescriptor is the canonical, fully populated form of a request to
the Stitch Labs API. It is what gets fingerprinted, sent, and echoed back
inside responses under 'options'.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from stitchcli.domain.models.common import HttpMethod, RequestUrl


@dataclass
class RequestDescriptor:
    """Canonical request sent through the orchestrator."""
    url: RequestUrl
    method: HttpMethod = HttpMethod("POST")
    headers: Dict[str, str] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)
    # When true the transport attaches this descriptor to the response
    return_options: bool = True

    @property
    def page_num(self) -> Any:
        return self.body.get("page_num")

    def to_dict(self) -> Dict[str, Any]:
        """Returns a deep-copied wire mapping of this descriptor."""
        return {
            "url": self.url,
            "method": self.method,
            "headers": copy.deepcopy(self.headers),
            "body": copy.deepcopy(self.body),
            "return_options": self.return_options,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RequestDescriptor":
        """Rebuilds a descriptor from a mapping produced by to_dict()."""
        return cls(
            url=RequestUrl(data["url"]),
            method=HttpMethod(data.get("method", "POST")),
            headers=copy.deepcopy(dict(data.get("headers") or {})),
            body=copy.deepcopy(dict(data.get("body") or {})),
            return_options=bool(data.get("return_options", True)),
        )

    def with_page(self, page_num: int) -> "RequestDescriptor":
        """Returns a copy of this descriptor targeting another page."""
        clone = RequestDescriptor.from_dict(self.to_dict())
        clone.body["page_num"] = page_num
        return clone
