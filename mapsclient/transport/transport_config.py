"""
Client configuration for the transport module.

A ClientConfig carries exactly one credential form, either an API key or
a client ID with its signing secret, plus the request rate and transport
settings shared by every call made through one client. Credential
problems are reported here, at construction, never at call time.
"""

from dataclasses import dataclass, field
from typing import Optional

import requests

from ..config.config_module import get_config, get_config_float, get_config_int, load_config
from .transport_errors import CredentialError
from .transport_signer import decode_signing_key


DEFAULT_REQUESTS_PER_SECOND = 10.0


@dataclass
class ClientConfig:
    """Credentials and transport settings for a Maps client."""

    # API key credential
    api_key: Optional[str] = None

    # Client ID credential: account ID plus base64url signing secret
    client_id: Optional[str] = None
    client_secret: Optional[str] = field(default=None, repr=False)

    # Token bucket settings shared by all calls on one client
    requests_per_second: float = DEFAULT_REQUESTS_PER_SECOND
    burst_capacity: int = 1

    # Overrides the endpoint host, e.g. a local test server
    base_url: Optional[str] = None

    # Usage reporting channel
    channel: Optional[str] = None

    # HTTP timeout in seconds
    request_timeout: float = 30.0

    # Upper bound on background workers serving cancellable calls
    max_workers: int = 10

    # Network transport handle; a private session is created when None
    session: Optional[requests.Session] = field(default=None, repr=False, compare=False)

    signing_key: bytes = field(default=b"", init=False, repr=False, compare=False)

    def __post_init__(self):
        """Validate credentials and decode the signing secret."""
        has_key = bool(self.api_key)
        has_client_id = bool(self.client_id)
        has_secret = bool(self.client_secret)

        if has_key and (has_client_id or has_secret):
            raise CredentialError(
                "Configure either an API key or a client ID and signing secret, not both"
            )

        if not has_key:
            if has_client_id and not has_secret:
                raise CredentialError("Client ID provided without a signing secret")
            if has_secret and not has_client_id:
                raise CredentialError("Signing secret provided without a client ID")
            if not has_client_id:
                raise CredentialError("API key or client ID and signing secret missing")

            self.signing_key = decode_signing_key(self.client_secret)

        if self.requests_per_second <= 0:
            raise ValueError(
                f"requests_per_second must be positive, got {self.requests_per_second}"
            )

        if self.burst_capacity < 1:
            raise ValueError(
                f"burst_capacity must be at least 1, got {self.burst_capacity}"
            )

        if self.request_timeout <= 0:
            raise ValueError(
                f"request_timeout must be positive, got {self.request_timeout}"
            )

        if self.max_workers < 1:
            raise ValueError(
                f"max_workers must be at least 1, got {self.max_workers}"
            )

        if self.base_url:
            self.base_url = self.base_url.rstrip("/")

    @property
    def uses_api_key(self) -> bool:
        return bool(self.api_key)

    @property
    def uses_client_id(self) -> bool:
        return not self.api_key and bool(self.client_id) and bool(self.signing_key)

    @classmethod
    def from_env(cls, env_path: Optional[str] = None, **overrides) -> "ClientConfig":
        """
        Build a config from environment variables.

        Reads GOOGLE_MAPS_API_KEY, GOOGLE_MAPS_CLIENT_ID,
        GOOGLE_MAPS_CLIENT_SECRET, GOOGLE_MAPS_CHANNEL, GOOGLE_MAPS_BASE_URL,
        GOOGLE_MAPS_QPS, GOOGLE_MAPS_BURST, GOOGLE_MAPS_TIMEOUT and
        GOOGLE_MAPS_MAX_WORKERS.

        Args:
            env_path: Optional .env file loaded before reading
            **overrides: Field values that take precedence over the environment

        Raises:
            CredentialError: If the environment holds no usable credentials
            ConfigError: If a numeric variable is not a number
        """
        if env_path:
            load_config(env_path)

        values = {
            "api_key": get_config("GOOGLE_MAPS_API_KEY"),
            "client_id": get_config("GOOGLE_MAPS_CLIENT_ID"),
            "client_secret": get_config("GOOGLE_MAPS_CLIENT_SECRET"),
            "channel": get_config("GOOGLE_MAPS_CHANNEL"),
            "base_url": get_config("GOOGLE_MAPS_BASE_URL"),
            "requests_per_second": get_config_float(
                "GOOGLE_MAPS_QPS", DEFAULT_REQUESTS_PER_SECOND
            ),
            "burst_capacity": get_config_int("GOOGLE_MAPS_BURST", 1),
            "request_timeout": get_config_float("GOOGLE_MAPS_TIMEOUT", 30.0),
            "max_workers": get_config_int("GOOGLE_MAPS_MAX_WORKERS", 10),
        }
        values.update(overrides)

        return cls(**values)
