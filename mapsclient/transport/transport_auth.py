"""
Authenticated query construction.

Adds credentials to an endpoint's parameters and produces the final
query string. For client ID credentials the query is encoded once, in
canonical order, and that same string is both signed and transmitted;
the service recomputes the signature over the received query, so any
re-ordering after signing would be rejected.
"""

from typing import List, Tuple
from urllib.parse import quote_plus

from .transport_config import ClientConfig
from .transport_endpoints import EndpointDescriptor
from .transport_errors import CredentialError
from .transport_signer import sign_query
from .transport_types import ParamSet


def canonical_query(params: ParamSet) -> str:
    """
    Encode parameters sorted by key.

    Repeated values of one key keep their order. Keys and values are
    percent-encoded with spaces as "+".
    """
    pairs: List[Tuple[str, str]] = []
    for key in sorted(params):
        value = params[key]
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            pairs.append((key, str(item)))

    return "&".join(f"{quote_plus(k)}={quote_plus(v)}" for k, v in pairs)


def build_auth_query(endpoint: EndpointDescriptor,
                     params: ParamSet,
                     config: ClientConfig) -> str:
    """
    Build the final, authenticated query string for a call.

    Args:
        endpoint: Target endpoint
        params: Endpoint parameters (not modified)
        config: Client credentials

    Returns:
        Encoded query string, without the leading "?"

    Raises:
        CredentialError: If the endpoint refuses client ID credentials, or
            no credentials are configured
    """
    query = dict(params)

    if config.channel:
        query["channel"] = config.channel

    if config.uses_api_key:
        query["key"] = config.api_key
        return canonical_query(query)

    if config.uses_client_id:
        if not endpoint.accepts_client_id:
            raise CredentialError(
                f"Endpoint {endpoint.name} does not accept enterprise credentials"
            )
        query["client"] = config.client_id
        return sign_query(endpoint.path, canonical_query(query), config.signing_key)

    raise CredentialError("No credentials configured")
