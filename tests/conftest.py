"""
Shared fixtures for the OrderCloud SDK tests.
"""

import time
from typing import Any, Callable, Dict, Optional

import jwt
import pytest

from ordercloud import Configuration


SIGNING_KEY = "test-signing-key-that-is-long-enough-for-hs256"


def encode_token(**claims: Any) -> str:
    """Build a signed bearer token carrying the given claims."""
    return jwt.encode(claims, SIGNING_KEY, algorithm="HS256")


@pytest.fixture
def make_token() -> Callable[..., str]:
    """
    Token factory.

    make_token(expires_in=3600, cid="client-id", **claims) returns a token
    whose `exp` is relative to now; pass expires_in=None to omit `exp`.
    """

    def _make(expires_in: Optional[float] = 3600, cid: Optional[str] = "my-client-id", **claims: Any) -> str:
        payload: Dict[str, Any] = dict(claims)
        if expires_in is not None:
            payload["exp"] = int(time.time() + expires_in)
        if cid is not None:
            payload["cid"] = cid
        payload.setdefault("usr", "buyer01")
        return encode_token(**payload)

    return _make


@pytest.fixture
def config() -> Configuration:
    """Configuration with a client id."""
    return Configuration(client_id="my-client-id")
