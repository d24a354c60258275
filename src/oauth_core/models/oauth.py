"""Client, approval and credential records owned by storage."""

from enum import Enum

from beartype import beartype
from pydantic import Field

from .base import BaseModelConfig

UNREGISTERED_DESCRIPTION = "UNREGISTERED APPLICATION"


class ClientType(str, Enum):
    """Client profiles (RFC 6749 section 2.1)."""

    WEB_APPLICATION = "web_application"
    NATIVE_APPLICATION = "native_application"
    USER_AGENT_BASED_APPLICATION = "user_agent_based_application"


class Client(BaseModelConfig):
    """OAuth2 client application."""

    id: str = Field(..., min_length=1, max_length=64, description="Client identifier")
    name: str = Field(..., description="Display name shown to the resource owner")
    description: str = Field(default="", description="Human readable description")
    type: ClientType = Field(..., description="Client profile")
    redirect_uri: str = Field(..., min_length=1, description="Registered redirect URI")
    secret: str | None = Field(
        default=None, description="Client secret for token endpoint authentication"
    )
    registered: bool = Field(
        default=True, description="False for clients synthesized from a redirect URI"
    )

    @classmethod
    @beartype
    def unregistered(cls, host: str, redirect_uri: str) -> "Client":
        """Synthesize a client for an unregistered user-agent application.

        Args:
            host: Host of the redirect URI, used as id and name
            redirect_uri: Redirect URI supplied in the request
        """
        return cls(
            id=host,
            name=host,
            description=UNREGISTERED_DESCRIPTION,
            type=ClientType.USER_AGENT_BASED_APPLICATION,
            redirect_uri=redirect_uri,
            secret=None,
            registered=False,
        )


class Approval(BaseModelConfig):
    """Standing consent of a resource owner for a client."""

    client_id: str = Field(..., min_length=1)
    resource_owner_id: str = Field(..., min_length=1)
    scope: str = Field(..., description="Approved scope in canonical form")


class AuthorizationCode(BaseModelConfig):
    """Authorization code awaiting redemption at the token endpoint."""

    code: str = Field(..., min_length=1)
    resource_owner_id: str = Field(..., min_length=1)
    issue_time: int = Field(..., ge=0, description="UNIX time of issuance")
    client_id: str = Field(..., min_length=1)
    redirect_uri: str | None = Field(
        default=None, description="redirect_uri exactly as sent to authorize"
    )
    scope: str = Field(..., description="Granted scope in canonical form")


class AccessToken(BaseModelConfig):
    """Opaque bearer access token."""

    access_token: str = Field(..., min_length=1)
    issue_time: int = Field(..., ge=0, description="UNIX time of issuance")
    client_id: str = Field(..., min_length=1)
    resource_owner_id: str = Field(..., min_length=1)
    scope: str = Field(..., description="Granted scope in canonical form")
    expires_in: int = Field(..., ge=1, description="Lifetime in seconds from issue_time")
    token_type: str = Field(default="bearer")

    @beartype
    def expires_at(self) -> int:
        """UNIX time after which the token is no longer valid."""
        return self.issue_time + self.expires_in


class RefreshToken(BaseModelConfig):
    """Refresh token issued together with a code grant access token."""

    refresh_token: str = Field(..., min_length=1)
    client_id: str = Field(..., min_length=1)
    resource_owner_id: str = Field(..., min_length=1)
    scope: str = Field(..., description="Granted scope in canonical form")
