"""
OrderCloud SDK Token Storage Implementations

Provides the storage media tokens live in: instance memory for server
processes, or a cookie jar when one is shared with the runtime (e.g. a
browser running Pyodide). Storage keys are namespaced per client ID so
several clients can share one cookie jar.
"""

import sys
from http.cookiejar import Cookie
from typing import Dict, Optional

import httpx

from .configuration import CookieOptions


def detect_environment() -> str:
    """Coarse runtime tag: 'browser' under Pyodide/Emscripten, else 'server'."""
    if sys.platform == "emscripten":
        return "browser"
    return "server"


def hash_client_id(client_id: str) -> str:
    """
    Short, deterministic identifier for a client ID.

    32-bit string hash (h = h * 31 + c over UTF-16 code units), absolute
    value in base 36.
    """
    encoded = client_id.encode("utf-16-le")
    value = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        value = (value * 31 + code_unit) & 0xFFFFFFFF
    if value & 0x80000000:
        value -= 0x100000000
    return _to_base36(abs(value))


def _to_base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if number == 0:
        return "0"
    result = ""
    while number:
        number, remainder = divmod(number, 36)
        result = digits[remainder] + result
    return result


class StorageKeyGenerator:
    """Generates storage keys unique to one client ID and environment."""

    def __init__(self, client_id: Optional[str], environment: Optional[str] = None) -> None:
        self._client_hash = hash_client_id(client_id or "default")
        self._environment = environment or detect_environment()

    @property
    def environment(self) -> str:
        return self._environment

    def generate_key(self, purpose: str) -> str:
        """Key format: oc_{hash(client_id)}_{environment}_{purpose}"""
        return f"oc_{self._client_hash}_{self._environment}_{purpose}"


class MemoryStorage:
    """In-memory token storage (default for server processes)."""

    def __init__(self) -> None:
        self._tokens: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        """Get the token stored under key."""
        return self._tokens.get(key)

    def set(self, key: str, value: str) -> None:
        """Store a token under key."""
        self._tokens[key] = value

    def remove(self, key: str) -> None:
        """Remove the token stored under key."""
        self._tokens.pop(key, None)


class CookieStorage:
    """Cookie-backed token storage, shared through an httpx cookie jar."""

    def __init__(self, cookies: httpx.Cookies, options: Optional[CookieOptions] = None) -> None:
        self._cookies = cookies
        self._options = options or CookieOptions()

    @property
    def cookies(self) -> httpx.Cookies:
        return self._cookies

    def _cookie_name(self, key: str) -> str:
        return f"{self._options.prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        """Get the token stored under key."""
        name = self._cookie_name(key)
        for cookie in self._cookies.jar:
            if cookie.name == name:
                return cookie.value
        return None

    def set(self, key: str, value: str) -> None:
        """Store a token under key, applying the configured cookie options."""
        self.remove(key)
        domain = self._options.domain or ""
        cookie = Cookie(
            version=0,
            name=self._cookie_name(key),
            value=value,
            port=None,
            port_specified=False,
            domain=domain,
            domain_specified=bool(domain),
            domain_initial_dot=domain.startswith("."),
            path=self._options.path,
            path_specified=True,
            secure=self._options.secure,
            expires=None,
            discard=True,
            comment=None,
            comment_url=None,
            rest={"SameSite": self._options.samesite},
            rfc2109=False,
        )
        self._cookies.jar.set_cookie(cookie)

    def remove(self, key: str) -> None:
        """Remove the token stored under key."""
        self._cookies.delete(self._cookie_name(key))
