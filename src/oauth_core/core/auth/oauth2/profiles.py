"""Client profile matrix.

A client's type fixes the response types it may request at the
authorization endpoint and how it authenticates at the token endpoint.
"""

from enum import Enum
from typing import Final

from beartype import beartype

from ....models.oauth import ClientType


class ResponseType(str, Enum):
    """Authorization endpoint response types."""

    CODE = "code"
    TOKEN = "token"


class TokenEndpointAuth(str, Enum):
    """Client authentication rule at the token endpoint."""

    REQUIRED = "required"  # Basic credentials must be sent and verify
    OPTIONAL = "optional"  # Basic credentials verified only when sent
    FORBIDDEN = "forbidden"  # Client may not use the token endpoint at all


CLIENT_PROFILES: Final[dict[ClientType, frozenset[ResponseType]]] = {
    ClientType.WEB_APPLICATION: frozenset({ResponseType.CODE}),
    ClientType.NATIVE_APPLICATION: frozenset({ResponseType.TOKEN, ResponseType.CODE}),
    ClientType.USER_AGENT_BASED_APPLICATION: frozenset({ResponseType.TOKEN}),
}

TOKEN_ENDPOINT_AUTH: Final[dict[ClientType, TokenEndpointAuth]] = {
    ClientType.WEB_APPLICATION: TokenEndpointAuth.REQUIRED,
    ClientType.NATIVE_APPLICATION: TokenEndpointAuth.OPTIONAL,
    ClientType.USER_AGENT_BASED_APPLICATION: TokenEndpointAuth.FORBIDDEN,
}


@beartype
def is_response_type_allowed(client_type: ClientType, response_type: str) -> bool:
    """Check whether a client profile may use a response type.

    Args:
        client_type: Profile of the requesting client
        response_type: Raw response_type request parameter

    Returns:
        True if the response type belongs to the profile
    """
    try:
        requested = ResponseType(response_type)
    except ValueError:
        return False
    return requested in CLIENT_PROFILES[client_type]


@beartype
def token_endpoint_auth(client_type: ClientType) -> TokenEndpointAuth:
    """Get the token endpoint authentication rule for a client profile."""
    return TOKEN_ENDPOINT_AUTH[client_type]
