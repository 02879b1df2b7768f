"""
URL signing for client ID (enterprise) credentials.

Signed requests carry an HMAC-SHA1 of "path?query" computed with the
account's signing secret. Both the secret and the signature use the
URL-safe base64 alphabet.

See https://developers.google.com/maps/documentation/maps-static/digital-signature
"""

import base64
import binascii
import hashlib
import hmac

from .transport_errors import CredentialError


def decode_signing_key(secret: str) -> bytes:
    """
    Decode a platform-issued base64url signing secret.

    Args:
        secret: The secret as shown in the console (URL-safe alphabet, padded)

    Returns:
        Raw key bytes

    Raises:
        CredentialError: If the secret is not valid base64url or is empty
    """
    try:
        key = base64.b64decode(secret.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError) as e:
        raise CredentialError(f"Signing secret is not valid URL-safe base64: {e}") from e

    if not key:
        raise CredentialError("Signing secret decodes to an empty key")

    return key


def sign(signing_key: bytes, message: str) -> str:
    """
    Sign a message with HMAC-SHA1.

    Args:
        signing_key: Decoded key bytes
        message: Text to sign, hashed as UTF-8

    Returns:
        base64url-encoded digest
    """
    digest = hmac.new(signing_key, message.encode("utf-8"), hashlib.sha1).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii")


def sign_query(path: str, encoded_query: str, signing_key: bytes) -> str:
    """Append the signature of path?encoded_query to the query string."""
    signature = sign(signing_key, f"{path}?{encoded_query}")
    return f"{encoded_query}&signature={signature}"
