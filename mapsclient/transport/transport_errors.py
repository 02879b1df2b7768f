"""
Custom exceptions for the transport module.

Each failure mode a caller may want to handle differently has its own
class: bad credentials, network failure, cancellation, an unreadable
response body, a service-reported error status, and quota exhaustion on
binary endpoints. The outcome attribute is the short label reported to
metrics.
"""


class MapsError(Exception):
    """Base exception for all client failures."""
    outcome = "error"


class CredentialError(MapsError):
    """Raised when credentials are missing, malformed, or refused by an endpoint."""
    outcome = "credential_error"


class TransportError(MapsError):
    """Raised when the HTTP call itself fails (connection refused, timeout, ...)."""
    outcome = "transport_error"


class CanceledError(MapsError):
    """Raised when the caller canceled the call or its deadline passed."""
    outcome = "canceled"


class DecodeError(MapsError):
    """Raised when a response body cannot be parsed into the expected shape."""
    outcome = "decode_error"


class APIError(MapsError):
    """
    Raised when the service reports a failure status.

    Attributes:
        status: Verbatim status string (e.g. "OVER_QUERY_LIMIT", "HTTP_500")
        message: Verbatim error_message, or the response body text
    """

    def __init__(self, status: str, message: str = ""):
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}" if message else status)

    @property
    def outcome(self) -> str:
        return self.status


class QuotaExceededError(MapsError):
    """Raised when a binary endpoint answers HTTP 403."""
    outcome = "quota_exceeded"
