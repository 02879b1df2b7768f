"""
Test suite for the transport building blocks.

Covers URL signing, authenticated query construction, client
configuration, the endpoint catalog, cancellation tokens and the token
bucket rate limiter. Time is simulated with a fake clock where timing
is asserted.

To run tests:
- Command line: python -m pytest mapsclient/transport/test_transport.py -v
"""

import base64
import hashlib
import hmac
import threading
import time
from unittest.mock import MagicMock, patch
from urllib.parse import parse_qsl

import pytest

from .transport_auth import build_auth_query, canonical_query
from .transport_cancel import CANCELED, DEADLINE_EXCEEDED, CancelToken
from .transport_config import ClientConfig
from .transport_endpoints import (
    ENDPOINTS,
    FIND_PLACE_FROM_TEXT,
    GEOCODING,
    SNAP_TO_ROADS,
    EndpointDescriptor,
)
from .transport_errors import APIError, CanceledError, CredentialError, MapsError
from .transport_rate_limiter import TokenBucketRateLimiter
from .transport_signer import decode_signing_key, sign, sign_query


# base64url of b"key"
SECRET = "a2V5"
FOX = "The quick brown fox jumps over the lazy dog"
FOX_SIGNATURE = base64.urlsafe_b64encode(
    bytes.fromhex("de7c9b85b8b78aa6bc8a7a36f70a90701c9db4d9")
).decode("ascii")


# ==================== FIXTURES ====================

class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def mock_logging():
    """Mock logging in the modules under test."""
    with patch('mapsclient.transport.transport_rate_limiter.log_info'), \
            patch('mapsclient.transport.transport_rate_limiter.log_debug'):
        yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def key_config():
    return ClientConfig(api_key="AIza-test")


@pytest.fixture
def client_id_config():
    return ClientConfig(client_id="gme-test", client_secret=SECRET)


# ==================== TEST CLASSES ====================

class TestErrors:
    """Test the error taxonomy."""

    def test_hierarchy(self):
        for error in (CredentialError("x"), CanceledError("x"), APIError("DENIED")):
            assert isinstance(error, MapsError)

    def test_api_error_keeps_status_and_message(self):
        error = APIError("OVER_QUERY_LIMIT", "You have exceeded your daily request quota")
        assert error.status == "OVER_QUERY_LIMIT"
        assert error.message == "You have exceeded your daily request quota"
        assert error.outcome == "OVER_QUERY_LIMIT"
        assert str(error) == "OVER_QUERY_LIMIT: You have exceeded your daily request quota"

    def test_api_error_without_message(self):
        assert str(APIError("REQUEST_DENIED")) == "REQUEST_DENIED"

    def test_outcome_labels(self):
        assert CredentialError.outcome == "credential_error"
        assert CanceledError.outcome == "canceled"


class TestSigner:
    """Test HMAC-SHA1 URL signing."""

    def test_known_vector(self):
        assert sign(b"key", FOX) == FOX_SIGNATURE

    def test_signature_is_url_safe(self):
        # Sign enough messages that "+" or "/" would appear in standard base64
        for i in range(64):
            signature = sign(b"key", f"message-{i}")
            assert "+" not in signature
            assert "/" not in signature

    def test_decode_signing_key(self):
        assert decode_signing_key(SECRET) == b"key"

    def test_decode_url_safe_alphabet(self):
        assert decode_signing_key("-_-_") == b"\xfb\xff\xbf"

    def test_decode_rejects_malformed_secret(self):
        with pytest.raises(CredentialError):
            decode_signing_key("not base64!")

    def test_decode_rejects_empty_secret(self):
        with pytest.raises(CredentialError):
            decode_signing_key("")

    def test_sign_query_signs_path_and_query(self):
        signed = sign_query("/maps/api/geocode/json", "address=Sydney&client=c", b"key")
        expected = sign(b"key", "/maps/api/geocode/json?address=Sydney&client=c")
        assert signed == f"address=Sydney&client=c&signature={expected}"


class TestCanonicalQuery:
    """Test canonical query encoding."""

    def test_sorted_by_key(self):
        assert canonical_query({"b": "2", "a": "1", "c": "3"}) == "a=1&b=2&c=3"

    def test_spaces_and_reserved_characters(self):
        assert canonical_query({"address": "1 Main St|Sydney"}) == "address=1+Main+St%7CSydney"

    def test_repeated_values_keep_order(self):
        query = canonical_query({"markers": ["z", "a"], "center": "x"})
        assert query == "center=x&markers=z&markers=a"


class TestBuildAuthQuery:
    """Test authenticated query construction."""

    def test_api_key_query(self, key_config):
        query = build_auth_query(GEOCODING, {"address": "Sydney"}, key_config)
        params = dict(parse_qsl(query))

        assert params == {"address": "Sydney", "key": "AIza-test"}
        assert "client" not in params
        assert "signature" not in params

    def test_params_not_mutated(self, key_config):
        params = {"address": "Sydney"}
        build_auth_query(GEOCODING, params, key_config)
        assert params == {"address": "Sydney"}

    def test_channel_added(self):
        config = ClientConfig(api_key="AIza-test", channel="web")
        params = dict(parse_qsl(build_auth_query(GEOCODING, {}, config)))
        assert params["channel"] == "web"

    def test_client_id_query_is_signed(self, client_id_config):
        query = build_auth_query(GEOCODING, {"address": "New York"}, client_id_config)

        unsigned, _, signature = query.rpartition("&signature=")
        assert unsigned == "address=New+York&client=gme-test"
        assert "key=" not in query

        message = f"{GEOCODING.path}?{unsigned}".encode("utf-8")
        digest = hmac.new(b"key", message, hashlib.sha1).digest()
        assert signature == base64.urlsafe_b64encode(digest).decode("ascii")

    def test_signature_is_last_parameter(self, client_id_config):
        query = build_auth_query(GEOCODING, {"zoom": "3", "address": "x"}, client_id_config)
        keys = [key for key, _ in parse_qsl(query)]
        assert keys == ["address", "client", "zoom", "signature"]

    def test_endpoint_refusing_client_id(self, client_id_config):
        with pytest.raises(CredentialError, match="does not accept enterprise credentials"):
            build_auth_query(FIND_PLACE_FROM_TEXT, {"input": "museum"}, client_id_config)

    def test_api_key_still_works_on_key_only_endpoint(self, key_config):
        query = build_auth_query(SNAP_TO_ROADS, {"path": "1,2|3,4"}, key_config)
        assert "key=AIza-test" in query

    def test_no_credentials(self):
        config = MagicMock(spec=ClientConfig)
        config.channel = None
        config.uses_api_key = False
        config.uses_client_id = False

        with pytest.raises(CredentialError, match="No credentials configured"):
            build_auth_query(GEOCODING, {}, config)


class TestClientConfig:
    """Test credential validation and environment loading."""

    def test_api_key(self, key_config):
        assert key_config.uses_api_key
        assert not key_config.uses_client_id
        assert key_config.requests_per_second == 10.0
        assert key_config.burst_capacity == 1

    def test_client_id_decodes_secret(self, client_id_config):
        assert client_id_config.uses_client_id
        assert client_id_config.signing_key == b"key"

    def test_secret_not_in_repr(self, client_id_config):
        assert SECRET not in repr(client_id_config)

    @pytest.mark.parametrize("kwargs", [
        {},
        {"api_key": "k", "client_id": "c", "client_secret": SECRET},
        {"api_key": "k", "client_secret": SECRET},
        {"client_id": "c"},
        {"client_secret": SECRET},
        {"client_id": "c", "client_secret": "%%%"},
    ])
    def test_invalid_credentials(self, kwargs):
        with pytest.raises(CredentialError):
            ClientConfig(**kwargs)

    @pytest.mark.parametrize("field", [
        "requests_per_second", "burst_capacity", "request_timeout", "max_workers",
    ])
    def test_non_positive_settings(self, field):
        with pytest.raises(ValueError):
            ClientConfig(api_key="k", **{field: 0})

    def test_base_url_trailing_slash_removed(self):
        config = ClientConfig(api_key="k", base_url="http://localhost:8080/")
        assert config.base_url == "http://localhost:8080"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "AIza-env")
        monkeypatch.setenv("GOOGLE_MAPS_CHANNEL", "batch")
        monkeypatch.setenv("GOOGLE_MAPS_QPS", "25")
        monkeypatch.setenv("GOOGLE_MAPS_TIMEOUT", "5")
        monkeypatch.delenv("GOOGLE_MAPS_CLIENT_ID", raising=False)
        monkeypatch.delenv("GOOGLE_MAPS_CLIENT_SECRET", raising=False)
        monkeypatch.delenv("GOOGLE_MAPS_BASE_URL", raising=False)

        config = ClientConfig.from_env()

        assert config.api_key == "AIza-env"
        assert config.channel == "batch"
        assert config.requests_per_second == 25.0
        assert config.request_timeout == 5.0

    def test_from_env_overrides(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "AIza-env")
        monkeypatch.delenv("GOOGLE_MAPS_CLIENT_ID", raising=False)
        monkeypatch.delenv("GOOGLE_MAPS_CLIENT_SECRET", raising=False)

        config = ClientConfig.from_env(requests_per_second=2.0)
        assert config.requests_per_second == 2.0

    def test_from_env_without_credentials(self, monkeypatch):
        for name in ("GOOGLE_MAPS_API_KEY", "GOOGLE_MAPS_CLIENT_ID", "GOOGLE_MAPS_CLIENT_SECRET"):
            monkeypatch.delenv(name, raising=False)

        with pytest.raises(CredentialError):
            ClientConfig.from_env()


class TestEndpoints:
    """Test the endpoint catalog."""

    def test_catalog_lookup(self):
        assert ENDPOINTS["geocode"] is GEOCODING
        assert GEOCODING.url == "https://maps.googleapis.com/maps/api/geocode/json"

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            ENDPOINTS["geocode"] = SNAP_TO_ROADS

    def test_descriptor_is_frozen(self):
        with pytest.raises(AttributeError):
            GEOCODING.path = "/other"

    def test_policies(self):
        assert GEOCODING.accepts_zero_results
        assert not FIND_PLACE_FROM_TEXT.accepts_client_id
        assert not SNAP_TO_ROADS.status_envelope

    def test_descriptor_defaults(self):
        endpoint = EndpointDescriptor("custom", "https://example.com", "/api")
        assert endpoint.accepts_client_id
        assert not endpoint.accepts_zero_results
        assert endpoint.status_envelope


class TestCancelToken:
    """Test cancellation tokens."""

    def test_initially_active(self):
        token = CancelToken()
        assert not token.canceled
        assert token.reason is None
        assert token.remaining() is None

    def test_cancel(self):
        token = CancelToken()
        token.cancel()
        assert token.canceled
        assert token.reason == CANCELED

    def test_deadline(self, clock):
        token = CancelToken(timeout=2.0, clock=clock)
        assert token.remaining() == pytest.approx(2.0)

        clock.advance(2.0)

        assert token.canceled
        assert token.reason == DEADLINE_EXCEEDED
        assert token.remaining() == 0.0

    def test_callbacks_run_once(self):
        token = CancelToken()
        callback = MagicMock()
        token.on_cancel(callback)

        token.cancel()
        token.cancel()

        callback.assert_called_once_with()

    def test_callback_after_cancel_runs_immediately(self):
        token = CancelToken()
        token.cancel()
        callback = MagicMock()

        token.on_cancel(callback)

        callback.assert_called_once_with()

    def test_removed_callback_not_run(self):
        token = CancelToken()
        callback = MagicMock()
        remove = token.on_cancel(callback)

        remove()
        token.cancel()

        callback.assert_not_called()

    def test_wait_times_out(self):
        assert CancelToken().wait(0.01) is False

    def test_wait_woken_by_cancel(self):
        token = CancelToken()
        timer = threading.Timer(0.05, token.cancel)
        timer.start()
        try:
            assert token.wait(5.0) is True
        finally:
            timer.cancel()

    def test_wait_ends_at_deadline(self, clock):
        token = CancelToken(timeout=0.0, clock=clock)
        assert token.wait(10.0) is True


class TestTokenBucketRateLimiter:
    """Test the rate limiter implementation."""

    def _limiter(self, clock, rate=5.0, burst=1, waiter=None):
        def advance(seconds, cancel):
            clock.advance(seconds)
            return False

        return TokenBucketRateLimiter(
            rate_per_second=rate,
            burst_capacity=burst,
            clock=clock,
            waiter=waiter or advance,
        )

    def test_initialization(self, clock):
        limiter = self._limiter(clock, rate=2.0, burst=3)
        assert limiter.rate_per_second == 2.0
        assert limiter.burst_capacity == 3
        assert limiter.get_available_tokens() == 3.0  # Starts full

    @pytest.mark.parametrize("kwargs", [
        {"rate_per_second": 0},
        {"rate_per_second": -1},
        {"burst_capacity": 0},
    ])
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValueError):
            TokenBucketRateLimiter(**kwargs)

    def test_first_acquire_does_not_wait(self, clock):
        waiter = MagicMock(return_value=False)
        limiter = self._limiter(clock, waiter=waiter)

        limiter.acquire()

        waiter.assert_not_called()

    def test_n_acquisitions_take_at_least_n_minus_one_over_rate(self, clock):
        limiter = self._limiter(clock, rate=5.0)
        start = clock.now

        for _ in range(6):
            limiter.acquire()

        assert clock.now - start >= 1.0 - 1e-9

    def test_waits_deficit_over_rate(self, clock):
        waiter = MagicMock(return_value=False)
        limiter = self._limiter(clock, rate=4.0, waiter=waiter)

        limiter.acquire()
        limiter.acquire()
        limiter.acquire()

        waits = [c.args[0] for c in waiter.call_args_list]
        assert waits == [pytest.approx(0.25), pytest.approx(0.5)]

    def test_token_refill(self, clock):
        limiter = self._limiter(clock, rate=2.0, burst=5)
        for _ in range(5):
            assert limiter.try_acquire()
        assert not limiter.try_acquire()

        # 0.5 seconds adds one token
        clock.advance(0.5)

        assert limiter.get_available_tokens() == pytest.approx(1.0)

    def test_refill_capped_at_burst(self, clock):
        limiter = self._limiter(clock, rate=10.0, burst=2)
        clock.advance(60)
        assert limiter.get_available_tokens() == 2.0

    def test_get_wait_time(self, clock):
        limiter = self._limiter(clock, rate=2.0)
        assert limiter.get_wait_time() == 0.0

        limiter.try_acquire()

        assert limiter.get_wait_time() == pytest.approx(0.5)

    def test_status(self, clock):
        status = self._limiter(clock).get_status()
        assert status == {"available_tokens": 1.0, "wait_time_seconds": 0.0}

    def test_pre_canceled_consumes_no_token(self, clock):
        limiter = self._limiter(clock)
        token = CancelToken()
        token.cancel()

        with pytest.raises(CanceledError):
            limiter.acquire(token)

        assert limiter.get_available_tokens() == 1.0

    def test_cancel_of_newest_reservation_returns_token(self, clock):
        limiter = self._limiter(clock, waiter=lambda seconds, cancel: True)
        token = CancelToken()
        limiter.acquire()

        with pytest.raises(CanceledError):
            limiter.acquire(token)

        assert limiter.get_available_tokens() == 0.0

    def test_cancel_with_caller_queued_behind_keeps_slots(self, clock):
        queued_waits = []
        granted_waits = []

        def waiter(seconds, cancel):
            if cancel is not None:
                # Another caller queues while this one waits, then this one gives up
                queued_waits.append(limiter._reserve()[0])
                return True
            granted_waits.append(seconds)
            clock.advance(seconds)
            return False

        limiter = self._limiter(clock, rate=1.0, waiter=waiter)
        limiter.acquire()

        with pytest.raises(CanceledError):
            limiter.acquire(CancelToken())

        limiter.acquire()

        # The queued caller holds t=2, so the next one must not share it
        assert queued_waits == [pytest.approx(2.0)]
        assert granted_waits == [pytest.approx(3.0)]

    def test_release_only_newest_reservation(self, clock):
        limiter = self._limiter(clock, rate=1.0, burst=2)
        first = limiter.acquire()
        second = limiter.acquire()

        assert limiter.release(first) is False
        assert limiter.get_available_tokens() == 0.0
        assert limiter.release(second) is True
        assert limiter.get_available_tokens() == 1.0

    def test_waiter_receives_cancel_token(self, clock):
        waiter = MagicMock(return_value=False)
        limiter = self._limiter(clock, waiter=waiter)
        token = CancelToken()

        limiter.acquire(token)
        limiter.acquire(token)

        assert waiter.call_args.args[1] is token

    def test_concurrent_acquire_real_clock(self):
        limiter = TokenBucketRateLimiter(rate_per_second=50.0)
        start = time.monotonic()
        threads = [threading.Thread(target=limiter.acquire) for _ in range(5)]

        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        # Five acquisitions at 50/sec span at least four intervals
        assert time.monotonic() - start >= 0.08 - 0.005
