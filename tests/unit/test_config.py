"""Unit tests for settings."""

import pytest
from pydantic import ValidationError

from oauth_core.core.config import Settings, clear_settings_cache, get_settings


class TestSettings:
    """Tests for configuration loading and validation."""

    def test_defaults(self):
        """Test default values."""
        settings = Settings()
        assert settings.allow_unregistered_clients is False
        assert settings.allow_all_scopes is False
        assert settings.admin_scope == "oauth_admin"
        assert settings.admin_resource_owner_ids == []
        assert settings.access_token_expiry == 3600
        assert settings.authorization_code_expiry == 600

    def test_supported_scopes_normalized(self):
        """Test supported scopes are stored in canonical form."""
        settings = Settings(supported_scopes="write read write")
        assert settings.supported_scopes == "read write"

    def test_invalid_supported_scopes(self):
        """Test a malformed supported scope is a configuration error."""
        with pytest.raises(ValidationError):
            Settings(supported_scopes="read  write")

    def test_admin_scope_single_token(self):
        """Test the admin scope must be exactly one token."""
        with pytest.raises(ValidationError):
            Settings(admin_scope="oauth admin")

    def test_expiry_must_be_positive(self):
        """Test token lifetimes are validated."""
        with pytest.raises(ValidationError):
            Settings(access_token_expiry=0)

    def test_frozen(self):
        """Test settings are immutable."""
        settings = Settings()
        with pytest.raises(ValidationError):
            settings.allow_all_scopes = True

    def test_unknown_field_rejected(self):
        """Test extra settings are forbidden."""
        with pytest.raises(ValidationError):
            Settings(allow_everything=True)

    def test_environment(self, monkeypatch):
        """Test values are read from OAUTH_ prefixed variables."""
        monkeypatch.setenv("OAUTH_ALLOW_UNREGISTERED_CLIENTS", "true")
        monkeypatch.setenv("OAUTH_ACCESS_TOKEN_EXPIRY", "120")
        monkeypatch.setenv("OAUTH_ADMIN_RESOURCE_OWNER_IDS", '["root"]')
        settings = Settings()
        assert settings.allow_unregistered_clients is True
        assert settings.access_token_expiry == 120
        assert settings.admin_resource_owner_ids == ["root"]

    def test_get_settings_cached(self):
        """Test the process-wide instance is cached until cleared."""
        first = get_settings()
        assert get_settings() is first
        clear_settings_cache()
        assert get_settings() is not first


class TestServerSettings:
    """Tests for the settings an authorization server runs with."""

    def test_defaults_to_process_settings(self, monkeypatch, storage, resource_owner):
        """Test a server built without settings uses the cached instance."""
        from urllib.parse import parse_qs, urlsplit

        from oauth_core.core.auth.oauth2 import AuthorizationServer
        from oauth_core.schemas.oauth import AuthorizeRequest

        monkeypatch.setenv("OAUTH_ACCESS_TOKEN_EXPIRY", "120")
        clear_settings_cache()
        server = AuthorizationServer(storage)

        storage.add_approval("jsapp1", "alice", "read")
        request = AuthorizeRequest(client_id="jsapp1", response_type="token", scope="read")
        url = server.authorize(resource_owner, request).unwrap().url
        assert parse_qs(urlsplit(url).fragment)["expires_in"] == ["120"]
        assert get_settings().access_token_expiry == 120
