"""
Maps web services client.

MapsClient ties the transport together: it turns request objects into
outbound calls, dispatches them through the shared rate limiter, decodes
the responses and reports per-call metrics. The endpoint wrappers
(geocode, elevation, static_map, place_photo) are thin layers over the
generic request_json and request_binary.
"""

import threading
import time
from typing import Dict, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel

from ..config.logger_module import log_info, log_warning
from ..transport.transport_auth import build_auth_query
from ..transport.transport_cancel import CancelToken
from ..transport.transport_config import ClientConfig
from ..transport.transport_decoder import STATUS_OK, decode_binary, decode_json
from ..transport.transport_dispatcher import RequestDispatcher
from ..transport.transport_endpoints import (
    ELEVATION,
    GEOCODING,
    PLACE_PHOTO,
    STATIC_MAP,
    EndpointDescriptor,
)
from ..transport.transport_errors import MapsError
from ..transport.transport_metrics import MetricsReporter, NoOpReporter
from ..transport.transport_rate_limiter import TokenBucketRateLimiter
from ..transport.transport_types import BinaryResponse, MapsRequest, OutboundRequest
from .mapping_models import ElevationResponse, ElevationResult, GeocodingResponse, GeocodingResult
from .mapping_requests import ElevationRequest, GeocodingRequest, PlacePhotoRequest, StaticMapRequest


EXPERIENCE_ID_HEADER = "X-Goog-Maps-Experience-ID"

T = TypeVar("T", bound=BaseModel)


class MapsClient:
    """
    Client for the Maps web services.

    One client may be shared by any number of threads; all of its calls
    draw from the same token bucket.
    """

    def __init__(self,
                 config: Optional[ClientConfig] = None,
                 rate_limiter: Optional[TokenBucketRateLimiter] = None,
                 metrics: Optional[MetricsReporter] = None,
                 experience_ids: Optional[Iterable[str]] = None):
        """
        Initialize the client.

        Args:
            config: Credentials and transport settings (read from the
                environment if not provided)
            rate_limiter: Limiter to use instead of one built from config
            metrics: Receives one record per call
            experience_ids: Initial X-Goog-Maps-Experience-ID values

        Raises:
            CredentialError: If no valid credentials are configured
        """
        self.config = config or ClientConfig.from_env()
        self._dispatcher = RequestDispatcher(self.config, rate_limiter)
        self._metrics = metrics or NoOpReporter()

        self._experience_lock = threading.Lock()
        self._experience_ids: List[str] = list(experience_ids or [])

        log_info(
            f"MapsClient initialized (rate_limit={self.config.requests_per_second}/sec)"
        )

    # ==================== EXPERIENCE IDS ====================

    def set_experience_id(self, *ids: str) -> None:
        """Replace the experience IDs sent with every request."""
        with self._experience_lock:
            self._experience_ids = list(ids)

    def get_experience_id(self) -> List[str]:
        with self._experience_lock:
            return list(self._experience_ids)

    def clear_experience_id(self) -> None:
        with self._experience_lock:
            self._experience_ids = []

    # ==================== GENERIC CALLS ====================

    def _outbound(self, endpoint: EndpointDescriptor, request: MapsRequest) -> OutboundRequest:
        outbound = OutboundRequest.from_request(endpoint, request)
        ids = self.get_experience_id()
        if ids:
            outbound.headers[EXPERIENCE_ID_HEADER] = ",".join(ids)
        return outbound

    def _record(self, endpoint: EndpointDescriptor, started: float, outcome: str) -> None:
        self._metrics.record(endpoint.name, time.monotonic() - started, outcome)

    def request_json(self,
                     endpoint: EndpointDescriptor,
                     request: MapsRequest,
                     shape: Type[T],
                     cancel: Optional[CancelToken] = None) -> T:
        """
        Call a JSON endpoint and decode the answer.

        Args:
            endpoint: Target endpoint
            request: Request object supplying the parameters
            shape: Pydantic model of the success body
            cancel: Optional cancellation token / deadline

        Returns:
            The decoded response

        Raises:
            ValueError: If the request fails its own validation
            MapsError: Any transport, decoding or service error
        """
        outbound = self._outbound(endpoint, request)
        started = time.monotonic()

        try:
            raw = self._dispatcher.dispatch(outbound, cancel)
            result = decode_json(raw, shape, endpoint)
        except MapsError as e:
            self._record(endpoint, started, e.outcome)
            log_warning(f"{endpoint.name} failed ({e.outcome}): {e}")
            raise

        self._record(endpoint, started, getattr(result, "status", None) or STATUS_OK)
        return result

    def request_binary(self,
                       endpoint: EndpointDescriptor,
                       request: MapsRequest,
                       cancel: Optional[CancelToken] = None) -> BinaryResponse:
        """
        Call an image endpoint.

        Raises:
            ValueError: If the request fails its own validation
            MapsError: Any transport or service error
        """
        outbound = self._outbound(endpoint, request)
        started = time.monotonic()

        try:
            raw = self._dispatcher.dispatch(outbound, cancel)
            result = decode_binary(raw)
        except MapsError as e:
            self._record(endpoint, started, e.outcome)
            log_warning(f"{endpoint.name} failed ({e.outcome}): {e}")
            raise

        self._record(endpoint, started, STATUS_OK)
        log_info(f"Fetched {endpoint.name} image ({len(result.data)} bytes)")
        return result

    def signed_url(self, endpoint: EndpointDescriptor, request: MapsRequest) -> str:
        """
        Build the complete authenticated URL for a GET request without sending it.

        Useful for embedding static map or photo URLs in pages. The URL
        contains the API key or signature.
        """
        outbound = OutboundRequest.from_request(endpoint, request)
        query = build_auth_query(endpoint, outbound.params, self.config)
        return self._dispatcher.build_url(outbound, query)

    # ==================== ENDPOINT WRAPPERS ====================

    def geocode(self,
                request: GeocodingRequest,
                cancel: Optional[CancelToken] = None) -> List[GeocodingResult]:
        """
        Geocode an address, or reverse geocode a location.

        Returns:
            Matching results; empty when the service finds none
        """
        return self.request_json(GEOCODING, request, GeocodingResponse, cancel).results

    def elevation(self,
                  request: ElevationRequest,
                  cancel: Optional[CancelToken] = None) -> List[ElevationResult]:
        """Elevations for the requested locations or path samples."""
        return self.request_json(ELEVATION, request, ElevationResponse, cancel).results

    def static_map(self,
                   request: StaticMapRequest,
                   cancel: Optional[CancelToken] = None) -> BinaryResponse:
        return self.request_binary(STATIC_MAP, request, cancel)

    def place_photo(self,
                    request: PlacePhotoRequest,
                    cancel: Optional[CancelToken] = None) -> BinaryResponse:
        return self.request_binary(PLACE_PHOTO, request, cancel)

    # ==================== LIFECYCLE ====================

    def get_rate_limit_status(self) -> Dict[str, float]:
        """
        Get current rate limiting status.

        Returns:
            Dictionary with available tokens and wait time
        """
        return self._dispatcher.rate_limiter.get_status()

    def close(self) -> None:
        """Release the worker pool and any session the client created."""
        self._dispatcher.close()

    def __enter__(self) -> "MapsClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
