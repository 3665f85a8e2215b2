"""
Bearer token decoding and expiry checks.

Tokens are parsed, never verified: the client only needs the claims
(`exp`, `cid`) to decide whether a token is still usable and which
client to refresh it for. The API verifies signatures.
"""

import time
from typing import Any, Callable, Dict, Optional

import jwt

from .errors import InvalidTokenError


# Tokens are treated as expired this many seconds before their real expiry
EXPIRY_BUFFER_SECONDS = 10

_DECODE_OPTIONS = {
    "verify_signature": False,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
}


class TokenValidator:
    """Decodes bearer tokens and decides whether they are expired."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock

    def decode(self, token: Optional[str]) -> Dict[str, Any]:
        """
        Decode the claims of a token without verifying its signature.

        Raises:
            InvalidTokenError: If the token is empty, has the wrong number of
                segments, or its payload is not base64url-encoded JSON object
        """
        if not token:
            raise InvalidTokenError("Token is empty")
        try:
            return jwt.decode(token, options=_DECODE_OPTIONS)
        except jwt.PyJWTError as e:
            raise InvalidTokenError(f"Unable to decode token: {e}") from e

    def is_expired(self, token: Optional[str]) -> bool:
        """
        True if the token is empty, undecodable, or expires within the buffer.

        A decodable token without a numeric `exp` claim never expires.
        """
        if not token:
            return True
        try:
            claims = self.decode(token)
        except InvalidTokenError:
            return True

        exp = claims.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            return False
        return exp <= self._clock() - EXPIRY_BUFFER_SECONDS

    def get_client_id(self, token: Optional[str]) -> Optional[str]:
        """Return the `cid` claim of a token, or None if it cannot be read."""
        try:
            claims = self.decode(token)
        except InvalidTokenError:
            return None
        client_id = claims.get("cid")
        return client_id if isinstance(client_id, str) and client_id else None
