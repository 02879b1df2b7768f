"""
Transport module for the Maps web services client.

This module provides:
- Credential configuration and URL signing for client ID accounts
- Authenticated query construction
- Rate limited, cancellable dispatch over a shared requests session
- Response decoding with a uniform error taxonomy
- Per-call metrics reporting

Errors:
- CredentialError: Missing, malformed or refused credentials
- TransportError: HTTP call failed
- CanceledError: Caller canceled or deadline passed
- DecodeError: Unreadable response body
- APIError: Service reported a failure status
- QuotaExceededError: Binary endpoint answered 403
"""

from .transport_auth import build_auth_query, canonical_query
from .transport_cancel import CancelToken
from .transport_config import ClientConfig
from .transport_decoder import CommonEnvelope, decode_binary, decode_json
from .transport_dispatcher import LIBRARY_USER_AGENT, RequestDispatcher, UserAgentAdapter
from .transport_endpoints import ENDPOINTS, EndpointDescriptor
from .transport_errors import (
    APIError,
    CanceledError,
    CredentialError,
    DecodeError,
    MapsError,
    QuotaExceededError,
    TransportError,
)
from .transport_metrics import LoggingReporter, MetricsReporter, NoOpReporter
from .transport_rate_limiter import TokenBucketRateLimiter
from .transport_signer import decode_signing_key, sign, sign_query
from .transport_types import BinaryResponse, MapsRequest, OutboundRequest, RawResponse

__all__ = [
    # Configuration and auth
    "ClientConfig",
    "build_auth_query",
    "canonical_query",
    "decode_signing_key",
    "sign",
    "sign_query",

    # Dispatch
    "CancelToken",
    "RequestDispatcher",
    "TokenBucketRateLimiter",
    "UserAgentAdapter",
    "LIBRARY_USER_AGENT",

    # Endpoints and payloads
    "ENDPOINTS",
    "EndpointDescriptor",
    "MapsRequest",
    "OutboundRequest",
    "RawResponse",
    "BinaryResponse",

    # Decoding
    "CommonEnvelope",
    "decode_json",
    "decode_binary",

    # Metrics
    "MetricsReporter",
    "NoOpReporter",
    "LoggingReporter",

    # Errors
    "MapsError",
    "CredentialError",
    "TransportError",
    "CanceledError",
    "DecodeError",
    "APIError",
    "QuotaExceededError",
]
