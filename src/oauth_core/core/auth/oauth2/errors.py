"""OAuth2 error taxonomy.

Errors are grouped by who has to see them:

- ``ResourceOwnerError``: the request cannot be tied to a client with a safe
  redirect target, so the error is displayed to the resource owner.
- ``ClientError``: the client is known, the error is sent back to its
  redirect URI (RFC 6749 section 4.1.2.1).
- ``TokenError``: token endpoint error response (RFC 6749 section 5.2).
- ``VerifyError``: bearer token verification failure at a resource server
  (RFC 6750 section 3.1).
"""

from enum import Enum
from typing import Any
from urllib.parse import urlencode

from beartype import beartype

from ....models.oauth import Client


class ErrorKind(str, Enum):
    """Audience of an OAuth2 error."""

    RESOURCE_OWNER = "resource_owner"
    CLIENT = "client"
    TOKEN = "token"
    VERIFY = "verify"


class OAuthError(Exception):
    """Base class for OAuth2 protocol errors."""

    kind: ErrorKind

    def __init__(
        self,
        error: str,
        error_description: str | None = None,
        status_code: int = 400,
    ) -> None:
        """Initialize OAuth2 error.

        Args:
            error: Machine readable error code, e.g. "invalid_grant"
            error_description: Human readable explanation
            status_code: HTTP status a transport layer should use
        """
        self.error = error
        self.error_description = error_description
        self.status_code = status_code
        super().__init__(
            f"{error}: {error_description}" if error_description else error
        )

    @beartype
    def to_dict(self) -> dict[str, Any]:
        """Convert to OAuth2 error response."""
        response: dict[str, Any] = {"error": self.error}
        if self.error_description:
            response["error_description"] = self.error_description
        return response


class ResourceOwnerError(OAuthError):
    """Malformed authorization request, shown to the resource owner directly."""

    kind = ErrorKind.RESOURCE_OWNER

    def __init__(self, error_description: str) -> None:
        super().__init__("invalid_request", error_description, status_code=400)


class ClientError(OAuthError):
    """Authorization error delivered to the client through its redirect URI."""

    kind = ErrorKind.CLIENT

    def __init__(
        self,
        error: str,
        error_description: str,
        client: Client,
        state: str | None = None,
    ) -> None:
        """Initialize client error.

        Args:
            error: unsupported_response_type, invalid_scope or access_denied
            error_description: Human readable explanation
            client: Client the request was resolved to
            state: State from the authorization request, echoed back
        """
        super().__init__(error, error_description, status_code=302)
        self.client = client
        self.state = state

    @beartype
    def to_dict(self) -> dict[str, Any]:
        """Convert to error redirect parameters."""
        response = super().to_dict()
        if self.state is not None:
            response["state"] = self.state
        return response

    @beartype
    def redirect_url(self) -> str:
        """Client redirect URI carrying the error as query parameters."""
        return f"{self.client.redirect_uri}?{urlencode(self.to_dict())}"


class TokenError(OAuthError):
    """Token endpoint error."""

    kind = ErrorKind.TOKEN

    def __init__(self, error: str, error_description: str | None = None) -> None:
        status_code = 401 if error == "invalid_client" else 400
        super().__init__(error, error_description, status_code=status_code)


class VerifyError(OAuthError):
    """Bearer token verification failure."""

    kind = ErrorKind.VERIFY

    _STATUS_CODES = {
        "invalid_request": 400,
        "invalid_token": 401,
        "insufficient_scope": 403,
    }

    def __init__(
        self,
        error: str,
        error_description: str | None = None,
        scope: str | None = None,
    ) -> None:
        super().__init__(
            error, error_description, status_code=self._STATUS_CODES.get(error, 401)
        )
        self.scope = scope

    @beartype
    def www_authenticate(self, realm: str = "Resource Server") -> str:
        """Render the ``WWW-Authenticate`` challenge for this error."""
        parts = [f'realm="{realm}"', f'error="{self.error}"']
        if self.error_description:
            parts.append(f'error_description="{self.error_description}"')
        if self.scope:
            parts.append(f'scope="{self.scope}"')
        return "Bearer " + ", ".join(parts)


class CredentialGenerationError(RuntimeError):
    """The random source cannot produce cryptographically strong credentials."""
