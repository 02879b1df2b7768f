"""
Response decoding and error classification.

Turns a RawResponse into either a typed pydantic model or one of the
transport errors. Most Maps services wrap every JSON answer in a status
envelope ({"status": "OK", ...}); the newer services (roads, geolocation,
address validation) instead report failures as a Google JSON error object
together with a non-200 HTTP status.
"""

import json
from typing import Any, Dict, Optional, Type, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError

from .transport_endpoints import EndpointDescriptor
from .transport_errors import APIError, DecodeError, QuotaExceededError
from .transport_types import BinaryResponse, RawResponse


STATUS_OK = "OK"
STATUS_ZERO_RESULTS = "ZERO_RESULTS"

T = TypeVar("T", bound=BaseModel)


class CommonEnvelope(BaseModel):
    """Status fields shared by every envelope-style response."""
    status: str
    error_message: str = ""


def _parse_body(raw: RawResponse) -> Dict[str, Any]:
    try:
        data = json.loads(raw.body)
    except ValueError as e:
        raise DecodeError(f"Response body is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _is_list_field(annotation: Any) -> bool:
    """True for list, List[X] and Optional[List[X]] annotations."""
    if annotation is list:
        return True

    origin = get_origin(annotation)
    if origin is list:
        return True
    if origin is Union:
        return any(_is_list_field(arg) for arg in get_args(annotation) if arg is not type(None))
    return False


def _fill_empty_lists(shape: Type[BaseModel], data: Dict[str, Any]) -> Dict[str, Any]:
    """Set absent or null list-valued fields to [] so callers can iterate."""
    filled = dict(data)
    for name, info in shape.model_fields.items():
        key = info.alias or name
        if _is_list_field(info.annotation) and filled.get(key) is None:
            filled[key] = []
    return filled


def _check_envelope(raw: RawResponse, data: Dict[str, Any], accepts_zero_results: bool) -> str:
    """Validate the status envelope and return the success status."""
    if "status" not in data:
        if raw.status_code != 200:
            raise APIError(f"HTTP_{raw.status_code}", raw.text)
        raise DecodeError("Response has no status field")

    try:
        envelope = CommonEnvelope.model_validate(data)
    except ValidationError as e:
        raise DecodeError(f"Malformed status envelope: {e}") from e

    if envelope.status == STATUS_OK:
        return envelope.status
    if envelope.status == STATUS_ZERO_RESULTS and accepts_zero_results:
        return envelope.status

    raise APIError(envelope.status, envelope.error_message)


def _check_google_error(raw: RawResponse, data: Dict[str, Any]) -> None:
    """Raise APIError for a Google JSON error object or a non-200 status."""
    error = data.get("error")
    if error is None and raw.status_code == 200:
        return

    if not isinstance(error, dict):
        error = {}

    status = error.get("status") or f"HTTP_{raw.status_code}"
    message = error.get("message") or raw.text
    raise APIError(str(status), str(message))


def decode_json(raw: RawResponse,
                shape: Type[T],
                endpoint: Optional[EndpointDescriptor] = None) -> T:
    """
    Decode a JSON response into the given model.

    Args:
        raw: The response as returned by the dispatcher
        shape: Pydantic model describing the success body
        endpoint: Descriptor supplying the envelope and ZERO_RESULTS policy;
            without one the envelope is expected and ZERO_RESULTS accepted

    Returns:
        An instance of shape

    Raises:
        DecodeError: If the body is not a JSON object or does not fit shape
        APIError: If the service reported a failure
    """
    data = _parse_body(raw)

    if endpoint is None or endpoint.status_envelope:
        accepts_zero_results = endpoint is None or endpoint.accepts_zero_results
        status = _check_envelope(raw, data, accepts_zero_results)
        if status == STATUS_ZERO_RESULTS:
            data = _fill_empty_lists(shape, data)
    else:
        _check_google_error(raw, data)

    try:
        return shape.model_validate(data)
    except ValidationError as e:
        raise DecodeError(f"Response does not match {shape.__name__}: {e}") from e


def decode_binary(raw: RawResponse) -> BinaryResponse:
    """
    Accept an image response.

    Raises:
        QuotaExceededError: On HTTP 403
        APIError: On any other non-200 status, or a 200 that is not an image
    """
    if raw.status_code == 403:
        raise QuotaExceededError(raw.text or "Quota exceeded")

    if raw.status_code != 200:
        raise APIError(f"HTTP_{raw.status_code}", raw.text)

    media_type = raw.content_type.split(";")[0].strip().lower()
    if not media_type.startswith("image/"):
        raise APIError(
            "HTTP_200",
            f"unexpected content type {raw.content_type or '<none>'}: {raw.text}",
        )

    return BinaryResponse(content_type=raw.content_type, data=raw.body)
