# OAuthCore - OAuth2 Authorization Server Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Schemas for the authorize, approve and token entry points.

Request schemas are built from raw query or form parameters with
``from_params``; parameters that are missing or empty are treated as absent
and unknown parameters are ignored.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Literal, TypeVar

from beartype import beartype
from pydantic import Field

from ..models.base import BaseModelConfig
from ..models.oauth import Client

APPROVE: str = "Approve"

_RequestT = TypeVar("_RequestT", bound="_ParameterSchema")


class _ParameterSchema(BaseModelConfig):
    """Schema populated from request parameters."""

    @classmethod
    def from_params(cls: type[_RequestT], params: Mapping[str, Any]) -> _RequestT:
        """Build the schema from query or form parameters."""
        values = {
            name: params[name]
            for name in cls.model_fields
            if params.get(name) not in (None, "")
        }
        return cls(**values)


class AuthorizeRequest(_ParameterSchema):
    """Authorization endpoint query parameters."""

    client_id: str | None = None
    response_type: str | None = None
    redirect_uri: str | None = None
    scope: str | None = None
    state: str | None = None

    @beartype
    def with_scope(self, scope: str | None) -> "AuthorizeRequest":
        """Same request with the scope replaced."""
        return self.model_copy(update={"scope": scope})


class ApprovalDecision(_ParameterSchema):
    """Resource owner decision posted from the approval page."""

    scope: str | None = None
    approval: str | None = None

    @property
    def approved(self) -> bool:
        """Only the exact value "Approve" grants access."""
        return self.approval == APPROVE


class TokenRequest(_ParameterSchema):
    """Token endpoint form parameters."""

    grant_type: str | None = None
    code: str | None = None
    redirect_uri: str | None = None
    refresh_token: str | None = None
    token: str | None = None


class AuthorizeAction(str, Enum):
    """What the caller has to do with an authorize outcome."""

    ASK_APPROVAL = "ask_approval"
    REDIRECT = "redirect"


class AskApproval(BaseModelConfig):
    """The resource owner has to approve the requested scope first."""

    action: Literal[AuthorizeAction.ASK_APPROVAL] = AuthorizeAction.ASK_APPROVAL
    client: Client = Field(..., description="Client asking for approval")


class Redirect(BaseModelConfig):
    """Send the user agent to the client with the grant result."""

    action: Literal[AuthorizeAction.REDIRECT] = AuthorizeAction.REDIRECT
    url: str = Field(..., description="Client redirect URI with response parameters")


AuthorizeOutcome = AskApproval | Redirect


class TokenResponse(BaseModelConfig):
    """Successful token endpoint response (RFC 6749 section 5.1)."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    refresh_token: str | None = None
    scope: str

    @beartype
    def to_dict(self) -> dict[str, Any]:
        """Response body, without a refresh token when none was issued."""
        return self.model_dump(mode="json", exclude_none=True)
