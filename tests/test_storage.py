"""
Tests for token storage media and the per-client token store.
"""

from typing import Callable
from unittest.mock import patch

import httpx
import pytest

from ordercloud import Configuration, CookieOptions
from ordercloud.errors import MalformedTokenError
from ordercloud.storage import (
    CookieStorage,
    MemoryStorage,
    StorageKeyGenerator,
    detect_environment,
    hash_client_id,
)
from ordercloud.tokens import TokenStore, create_storage
from ordercloud.types import TokenKind, TokenStorage


# =============================================================================
# Storage Keys
# =============================================================================

class TestStorageKeyGenerator:
    """Tests for storage key generation."""

    def test_hash_known_values(self):
        """Test the string hash renders in base 36."""
        assert hash_client_id("") == "0"
        assert hash_client_id("a") == "2p"

    def test_key_format(self):
        generator = StorageKeyGenerator("a", environment="server")

        assert generator.generate_key("access_token") == "oc_2p_server_access_token"

    def test_keys_stable_for_one_client(self):
        first = StorageKeyGenerator("client-1", environment="server")
        second = StorageKeyGenerator("client-1", environment="server")

        assert first.generate_key("refresh_token") == second.generate_key("refresh_token")

    def test_keys_differ_across_clients(self):
        first = StorageKeyGenerator("client-1", environment="server")
        second = StorageKeyGenerator("client-2", environment="server")

        assert first.generate_key("access_token") != second.generate_key("access_token")

    def test_missing_client_id_uses_default(self):
        assert (
            StorageKeyGenerator(None, environment="server").generate_key("x")
            == StorageKeyGenerator("default", environment="server").generate_key("x")
        )

    def test_environment_detection(self):
        assert detect_environment() == "server"
        with patch("ordercloud.storage.sys.platform", "emscripten"):
            assert detect_environment() == "browser"


# =============================================================================
# Storage Media
# =============================================================================

class TestMemoryStorage:
    """Tests for in-memory storage."""

    def test_set_get_remove(self):
        storage = MemoryStorage()

        storage.set("key", "value")
        assert storage.get("key") == "value"

        storage.remove("key")
        assert storage.get("key") is None

    def test_remove_missing_key(self):
        """Test removing an absent key is a no-op."""
        MemoryStorage().remove("missing")

    def test_satisfies_protocol(self):
        assert isinstance(MemoryStorage(), TokenStorage)


class TestCookieStorage:
    """Tests for cookie-backed storage."""

    def test_cookie_name_uses_prefix(self):
        cookies = httpx.Cookies()
        storage = CookieStorage(cookies, CookieOptions(prefix="shop_"))

        storage.set("token", "abc")

        assert cookies.get("shop_token") == "abc"
        assert storage.get("token") == "abc"

    def test_cookie_options_applied(self):
        cookies = httpx.Cookies()
        options = CookieOptions(domain=".example.com", path="/app", secure=True, samesite="strict")
        CookieStorage(cookies, options).set("token", "abc")

        cookie = next(iter(cookies.jar))
        assert cookie.domain == ".example.com"
        assert cookie.path == "/app"
        assert cookie.secure is True
        assert cookie.get_nonstandard_attr("SameSite") == "strict"

    def test_set_replaces_value(self):
        cookies = httpx.Cookies()
        storage = CookieStorage(cookies)

        storage.set("token", "first")
        storage.set("token", "second")

        assert storage.get("token") == "second"
        assert len(list(cookies.jar)) == 1

    def test_remove(self):
        storage = CookieStorage(httpx.Cookies())
        storage.set("token", "abc")

        storage.remove("token")
        storage.remove("token")

        assert storage.get("token") is None

    def test_satisfies_protocol(self):
        assert isinstance(CookieStorage(httpx.Cookies()), TokenStorage)


class TestCreateStorage:
    """Tests for storage medium selection."""

    def test_server_uses_memory(self, config: Configuration):
        assert isinstance(create_storage(config), MemoryStorage)

    def test_shared_jar_uses_cookies(self, config: Configuration):
        cookies = httpx.Cookies()
        storage = create_storage(config, cookies)

        assert isinstance(storage, CookieStorage)
        assert storage.cookies is cookies

    def test_browser_uses_cookies(self, config: Configuration):
        with patch("ordercloud.storage.sys.platform", "emscripten"):
            assert isinstance(create_storage(config), CookieStorage)


# =============================================================================
# Token Store
# =============================================================================

@pytest.fixture(params=["memory", "cookie"])
def token_store(request, config: Configuration) -> TokenStore:
    """Token store over each storage medium."""
    storage = MemoryStorage() if request.param == "memory" else CookieStorage(httpx.Cookies())
    return TokenStore(config, storage=storage)


class TestTokenStore:
    """Tests for the per-client token store."""

    def test_starts_empty(self, token_store: TokenStore):
        for kind in TokenKind:
            assert token_store.get(kind) is None

    @pytest.mark.parametrize("kind", list(TokenKind))
    def test_round_trip_each_kind(self, token_store: TokenStore, make_token: Callable[..., str], kind: TokenKind):
        """Test every kind of token can be stored, read back and removed."""
        token = make_token()

        token_store.set(kind, token)
        assert token_store.get(kind) == token

        token_store.remove(kind)
        assert token_store.get(kind) is None

    def test_named_helpers(self, token_store: TokenStore, make_token: Callable[..., str]):
        access, impersonation = make_token(), make_token(usr="admin")

        token_store.set_access_token(access)
        token_store.set_impersonation_token(impersonation)
        token_store.set_refresh_token("refresh-opaque")
        token_store.set_identity_token("identity-opaque")
        token_store.set_idp_access_token("idp-opaque")

        assert token_store.get_access_token() == access
        assert token_store.get_impersonation_token() == impersonation
        assert token_store.get_refresh_token() == "refresh-opaque"
        assert token_store.get_identity_token() == "identity-opaque"
        assert token_store.get_idp_access_token() == "idp-opaque"

    @pytest.mark.parametrize("kind", [TokenKind.ACCESS, TokenKind.IMPERSONATION])
    def test_malformed_token_rejected(self, token_store: TokenStore, kind: TokenKind):
        """Test access and impersonation tokens must decode before storing."""
        with pytest.raises(MalformedTokenError):
            token_store.set(kind, "not-a-token")

        assert token_store.get(kind) is None

    def test_malformed_token_keeps_previous(self, token_store: TokenStore, make_token: Callable[..., str]):
        token = make_token()
        token_store.set_access_token(token)

        with pytest.raises(MalformedTokenError):
            token_store.set_access_token("not-a-token")

        assert token_store.get_access_token() == token

    def test_opaque_kinds_stored_verbatim(self, token_store: TokenStore):
        token_store.set(TokenKind.REFRESH, "opaque-refresh")

        assert token_store.get_refresh_token() == "opaque-refresh"

    def test_clear(self, token_store: TokenStore, make_token: Callable[..., str]):
        token_store.set_access_token(make_token())
        token_store.set_refresh_token("refresh")

        token_store.clear()

        assert token_store.get_access_token() is None
        assert token_store.get_refresh_token() is None

    def test_stores_are_isolated(self, config: Configuration, make_token: Callable[..., str]):
        """Test two stores never see each other's tokens."""
        first = TokenStore(config)
        second = TokenStore(config)

        first.set_access_token(make_token())

        assert second.get_access_token() is None

    def test_keys_namespaced_by_client(self, make_token: Callable[..., str]):
        """Test clients sharing a cookie jar keep separate tokens."""
        cookies = httpx.Cookies()
        first = TokenStore(Configuration(client_id="client-1"), storage=CookieStorage(cookies))
        second = TokenStore(Configuration(client_id="client-2"), storage=CookieStorage(cookies))
        token = make_token()

        first.set_access_token(token)

        assert first.key_for(TokenKind.ACCESS) != second.key_for(TokenKind.ACCESS)
        assert second.get_access_token() is None
        assert first.get_access_token() == token
