"""OAuth2 authorization server implementation."""

from .basic_auth import parse_basic_auth, verify_basic_auth
from .credentials import generate_token
from .errors import (
    ClientError,
    CredentialGenerationError,
    ErrorKind,
    OAuthError,
    ResourceOwnerError,
    TokenError,
    VerifyError,
)
from .profiles import CLIENT_PROFILES, ResponseType, TokenEndpointAuth
from .resource_owner import ResourceOwner, StaticResourceOwner
from .scopes import Scope
from .server import AuthorizationServer, GrantType
from .storage import InMemoryStorage, OAuthStorage
from .verify import BearerTokenVerifier

__all__ = [
    "AuthorizationServer",
    "BearerTokenVerifier",
    "CLIENT_PROFILES",
    "ClientError",
    "CredentialGenerationError",
    "ErrorKind",
    "GrantType",
    "InMemoryStorage",
    "OAuthError",
    "OAuthStorage",
    "ResourceOwner",
    "ResourceOwnerError",
    "ResponseType",
    "Scope",
    "StaticResourceOwner",
    "TokenEndpointAuth",
    "TokenError",
    "VerifyError",
    "generate_token",
    "parse_basic_auth",
    "verify_basic_auth",
]
