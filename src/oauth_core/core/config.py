# OAuthCore - OAuth2 Authorization Server Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Configuration management using Pydantic Settings."""

from beartype import beartype
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Authorization server settings with immutable configuration.

    Values are read from ``OAUTH_``-prefixed environment variables, e.g.
    ``OAUTH_ALLOW_UNREGISTERED_CLIENTS=true``. The server receives an
    instance explicitly and treats it as read-only.
    """

    model_config = SettingsConfigDict(
        env_prefix="OAUTH_",
        env_file=None,
        frozen=True,
        validate_default=True,
        extra="forbid",
    )

    # Clients
    allow_unregistered_clients: bool = Field(
        default=False,
        description="Accept user-agent clients identified by their redirect_uri host",
    )

    # Scopes
    allow_all_scopes: bool = Field(
        default=False,
        description="Skip the supported_scopes check for requested scopes",
    )
    supported_scopes: str = Field(
        default="read",
        description="Space separated scopes clients may request",
        min_length=1,
    )
    admin_scope: str = Field(
        default="oauth_admin",
        description="Scope token reserved for administrators",
        min_length=1,
    )
    admin_resource_owner_ids: list[str] = Field(
        default_factory=list,
        description="Resource owners allowed to obtain the admin scope",
    )

    # Lifetimes
    access_token_expiry: int = Field(
        default=3600,
        ge=1,
        description="Access token lifetime in seconds",
    )
    authorization_code_expiry: int = Field(
        default=600,
        ge=1,
        description="Authorization code lifetime in seconds",
    )

    @field_validator("supported_scopes")
    @classmethod
    def validate_supported_scopes(cls: type["Settings"], v: str) -> str:
        """Store supported scopes in canonical form."""
        from .auth.oauth2.scopes import Scope

        normalized = Scope.normalize(v)
        if normalized is None:
            raise ValueError(f"supported_scopes is not a valid scope: {v!r}")
        return normalized

    @field_validator("admin_scope")
    @classmethod
    def validate_admin_scope(cls: type["Settings"], v: str) -> str:
        """Ensure the admin scope is a single scope token."""
        from .auth.oauth2.scopes import Scope

        if not Scope.is_valid(v) or " " in v:
            raise ValueError(f"admin_scope must be a single scope token: {v!r}")
        return v


_settings: Settings | None = None


@beartype
def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@beartype
def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    global _settings
    _settings = None
