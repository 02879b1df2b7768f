"""
Request and response types shared by the transport components.
"""

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .transport_endpoints import EndpointDescriptor


# Flat query parameters; a list value repeats the key in list order
ParamSet = Dict[str, Union[str, List[str]]]


class MapsRequest(ABC):
    """Capability interface implemented by every endpoint's request type."""

    @abstractmethod
    def to_query_params(self) -> ParamSet:
        """
        Build the endpoint-specific query parameters.

        Credentials are added by the transport and must not appear here.
        """
        pass

    def uses_post(self) -> bool:
        """Whether the request is sent as a POST with a JSON body."""
        return False

    def to_json_body(self) -> Optional[Dict[str, Any]]:
        """JSON body for POST requests."""
        return None


@dataclass
class OutboundRequest:
    """One logical call: verb, endpoint and parameters."""
    method: str
    endpoint: EndpointDescriptor
    params: ParamSet = field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.method = self.method.upper()
        if self.method not in ("GET", "POST"):
            raise ValueError(f"Unsupported HTTP method: {self.method}")

    @classmethod
    def from_request(cls, endpoint: EndpointDescriptor, request: MapsRequest) -> "OutboundRequest":
        """Build an outbound request from an endpoint request object."""
        if request.uses_post():
            return cls("POST", endpoint, request.to_query_params(), request.to_json_body())
        return cls("GET", endpoint, request.to_query_params())


@dataclass
class RawResponse:
    """Status, content type and fully-read body of an HTTP response."""
    status_code: int
    content_type: str
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass
class BinaryResponse:
    """Successful image response."""
    content_type: str
    data: bytes

    def open(self) -> io.BytesIO:
        """Return the image as a readable stream."""
        return io.BytesIO(self.data)
