"""
Rate-limited, cancellable request dispatcher.

The dispatcher owns the client's HTTP session and token bucket. For each
call it builds the authenticated query, waits for a token, performs the
request and returns the fully-read response. Nothing is retried: a
transport failure is raised to the caller as TransportError.

requests has no way to abort a call from another thread, so calls that
carry a CancelToken run on a bounded worker pool while the caller waits
for whichever happens first, completion or cancellation. An abandoned
worker still finishes within the request timeout and always closes its
response, so the connection is released rather than leaked.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import requests
from requests.adapters import BaseAdapter, HTTPAdapter

from .. import __version__
from ..config.logger_module import log_debug, log_error, log_info, log_warning
from .transport_auth import build_auth_query
from .transport_cancel import CancelToken
from .transport_config import ClientConfig
from .transport_errors import CanceledError, TransportError
from .transport_rate_limiter import TokenBucketRateLimiter
from .transport_types import OutboundRequest, RawResponse


LIBRARY_USER_AGENT = f"GoogleGeoApiClientPython/{__version__}"

# Body read size; cancellation is checked between chunks
CHUNK_SIZE = 64 * 1024

# Floor for the HTTP timeout derived from a nearly expired deadline
MIN_TIMEOUT = 0.001


def append_user_agent(user_agent: Optional[str]) -> str:
    """Append the library identifier to a User-Agent value, once."""
    if not user_agent:
        return LIBRARY_USER_AGENT
    if LIBRARY_USER_AGENT in user_agent.split(";"):
        return user_agent
    return f"{user_agent};{LIBRARY_USER_AGENT}"


class UserAgentAdapter(BaseAdapter):
    """
    Transport adapter that tags every request with the library identifier.

    Wraps the adapter previously mounted on the session and delegates the
    actual send to it.
    """

    def __init__(self, base: Optional[BaseAdapter] = None):
        super().__init__()
        self.base = base if base is not None else HTTPAdapter()

    def send(self, request, **kwargs):
        request = request.copy()
        request.headers["User-Agent"] = append_user_agent(request.headers.get("User-Agent"))
        return self.base.send(request, **kwargs)

    def close(self):
        self.base.close()


def install_user_agent(session: requests.Session) -> None:
    """Mount UserAgentAdapter over the session's http and https adapters."""
    for prefix in ("https://", "http://"):
        current = session.adapters.get(prefix)
        if not isinstance(current, UserAgentAdapter):
            session.mount(prefix, UserAgentAdapter(current))


class RequestDispatcher:
    """
    Issues authenticated, rate-limited calls for one client.

    Safe for any number of concurrent callers: the rate limiter is the
    only shared mutable state, everything else is local to a call.
    """

    def __init__(self,
                 config: ClientConfig,
                 rate_limiter: Optional[TokenBucketRateLimiter] = None):
        """
        Initialize the dispatcher.

        Args:
            config: Credentials, rate and transport settings
            rate_limiter: Shared limiter (built from config when None)
        """
        self.config = config
        self._limiter = rate_limiter or TokenBucketRateLimiter(
            rate_per_second=config.requests_per_second,
            burst_capacity=config.burst_capacity,
        )

        self._owns_session = config.session is None
        self._session = config.session if config.session is not None else requests.Session()
        install_user_agent(self._session)

        self._executor = ThreadPoolExecutor(
            max_workers=config.max_workers,
            thread_name_prefix="mapsclient-dispatch",
        )
        self._closed = False

        log_info(
            f"RequestDispatcher initialized "
            f"(auth={'api_key' if config.uses_api_key else 'client_id'}, "
            f"max_workers={config.max_workers})"
        )

    @property
    def rate_limiter(self) -> TokenBucketRateLimiter:
        return self._limiter

    @property
    def session(self) -> requests.Session:
        return self._session

    def build_url(self, request: OutboundRequest, query: str) -> str:
        """Full request URL, honoring the base URL override."""
        base = self.config.base_url or request.endpoint.host
        return f"{base}{request.endpoint.path}?{query}"

    def dispatch(self,
                 request: OutboundRequest,
                 cancel: Optional[CancelToken] = None) -> RawResponse:
        """
        Perform one call.

        Args:
            request: The call to make
            cancel: Optional cancellation token / deadline

        Returns:
            The response with its body fully read

        Raises:
            CredentialError: If the query cannot be authenticated
            CanceledError: If cancel fires before or during the call
            TransportError: If the HTTP call fails
        """
        name = request.endpoint.name

        if self._closed:
            raise TransportError(f"{name} request made after the dispatcher was closed")

        if cancel is not None and cancel.canceled:
            log_warning(f"{name} request canceled before dispatch ({cancel.reason})")
            raise CanceledError(cancel.reason)

        query =build_auth_query(request.endpoint, request.params, self.config)

        try:
            reservation = self._limiter.acquire(cancel)
        except CanceledError:
            log_warning(f"{name} request canceled while rate limited")
            raise

        if cancel is not None and cancel.canceled:
            self._limiter.release(reservation)
            log_warning(f"{name} request canceled before dispatch ({cancel.reason})")
            raise CanceledError(cancel.reason)

        url = self.build_url(request, query)
        log_debug(f"Dispatching {request.method} {name}")

        if cancel is None:
            return self._send(request, url, None)
        return self._send_cancellable(request, url, cancel)

    def _send_cancellable(self,
                          request: OutboundRequest,
                          url: str,
                          cancel: CancelToken) -> RawResponse:
        """Run the call on a worker and race it against cancellation."""
        finished = threading.Event()
        try:
            future = self._executor.submit(self._send, request, url, cancel)
        except RuntimeError as e:
            # close() raced with this call
            raise TransportError(
                f"{request.endpoint.name} request made after the dispatcher was closed"
            ) from e
        future.add_done_callback(lambda _: finished.set())
        remove_callback = cancel.on_cancel(finished.set)

        try:
            while not future.done() and not cancel.canceled:
                finished.wait(cancel.remaining())
        finally:
            remove_callback()

        if future.done():
            return future.result()

        future.cancel()
        log_warning(f"{request.endpoint.name} request canceled in flight ({cancel.reason})")
        raise CanceledError(cancel.reason)

    def _timeout_for(self, cancel: Optional[CancelToken]) -> float:
        timeout = self.config.request_timeout
        remaining = cancel.remaining() if cancel is not None else None
        if remaining is not None:
            timeout = max(min(timeout, remaining), MIN_TIMEOUT)
        return timeout

    def _send(self,
              request: OutboundRequest,
              url: str,
              cancel: Optional[CancelToken]) -> RawResponse:
        """Perform the HTTP call and read the body eagerly."""
        name = request.endpoint.name

        try:
            response = self._session.request(
                request.method,
                url,
                json=request.body,
                headers=request.headers or None,
                timeout=self._timeout_for(cancel),
                stream=True,
            )
        except requests.exceptions.RequestException as e:
            raise self._transport_failure(name, e, cancel) from e

        try:
            chunks: List[bytes] = []
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if cancel is not None and cancel.canceled:
                    raise CanceledError(cancel.reason)
                chunks.append(chunk)

            return RawResponse(
                status_code=response.status_code,
                content_type=response.headers.get("Content-Type", ""),
                body=b"".join(chunks),
            )
        except requests.exceptions.RequestException as e:
            raise self._transport_failure(name, e, cancel) from e
        finally:
            response.close()

    def _transport_failure(self,
                           name: str,
                           error: Exception,
                           cancel: Optional[CancelToken]) -> Exception:
        if cancel is not None and cancel.canceled:
            return CanceledError(cancel.reason)

        message = self._redact(str(error))
        log_error(f"{name} request failed: {message}")
        return TransportError(f"{name} request failed: {message}")

    def _redact(self, text: str) -> str:
        """Strip credentials from text that may contain the request URL."""
        for secret in (self.config.api_key, self.config.client_secret):
            if secret:
                text = text.replace(secret, "REDACTED")
        return text

    def close(self) -> None:
        """Stop the worker pool and close the session if this dispatcher created it."""
        self._closed = True
        self._executor.shutdown(wait=False)
        if self._owns_session:
            self._session.close()
