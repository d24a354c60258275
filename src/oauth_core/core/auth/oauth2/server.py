"""OAuth2 authorization server implementation.

The server implements three entry points:

- ``authorize``: validates an authorization request and either asks for the
  resource owner's approval or issues a code (query) or an implicit access
  token (fragment).
- ``approve``: records the resource owner's decision and re-runs authorize.
- ``token``: exchanges an authorization code or refresh token for an access
  token, and validates bearer tokens through a custom grant type.

The server keeps no state between calls. Storage writes only happen after all
validation has passed.
"""

import time
from collections.abc import Callable
from enum import Enum
from urllib.parse import urlencode, urlsplit

from beartype import beartype

from ....core.config import Settings, get_settings
from ....core.logging_utils import get_logger
from ....core.result_types import Err, Ok
from ....models.oauth import AccessToken, AuthorizationCode, Client, RefreshToken
from ....schemas.oauth import (
    ApprovalDecision,
    AskApproval,
    AuthorizeRequest,
    Redirect,
    TokenRequest,
    TokenResponse,
)
from .basic_auth import verify_basic_auth
from .credentials import generate_token
from .errors import ClientError, OAuthError, ResourceOwnerError, TokenError
from .profiles import (
    ResponseType,
    TokenEndpointAuth,
    is_response_type_allowed,
    token_endpoint_auth,
)
from .resource_owner import ResourceOwner
from .scopes import Scope
from .storage import OAuthStorage

logger = get_logger(__name__)

MAX_CLIENT_ID_LENGTH = 64
VALIDATED_TOKEN_TYPE = "urn:pingidentity.com:oauth2:validated_token"


class GrantType(str, Enum):
    """Grant types accepted at the token endpoint."""

    AUTHORIZATION_CODE = "authorization_code"
    REFRESH_TOKEN = "refresh_token"
    VALIDATE_BEARER = "urn:pingidentity.com:oauth2:grant_type:validate_bearer"


def _unix_time() -> int:
    return int(time.time())


def _netloc_host(netloc: str) -> str:
    """Host as written in the netloc, without userinfo or port.

    Case is preserved and IPv6 literals keep their brackets.
    """
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        return host[: host.index("]") + 1]
    return host.partition(":")[0]


class AuthorizationServer:
    """OAuth2 authorization server."""

    def __init__(
        self,
        storage: OAuthStorage,
        settings: Settings | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        """Initialize authorization server.

        Args:
            storage: Backend owning clients, approvals and credentials
            settings: Read-only server configuration, defaults to the cached
                process-wide settings
            clock: Returns the current UNIX time in seconds
        """
        self._storage = storage
        self._settings = settings or get_settings()
        self._clock = clock or _unix_time

    @beartype
    def authorize(
        self,
        resource_owner: ResourceOwner,
        request: AuthorizeRequest,
    ) -> Ok[AskApproval | Redirect] | Err[OAuthError]:
        """Handle an authorization request.

        Args:
            resource_owner: Authenticated resource owner
            request: Authorization endpoint query parameters

        Returns:
            Ok with AskApproval or Redirect, or Err with a ResourceOwnerError
            (display to the resource owner) or ClientError (redirect to client)
        """
        try:
            return Ok(self._authorize(resource_owner, request))
        except OAuthError as e:
            logger.warning(f"Authorization request rejected: {e}")
            return Err(e)

    @beartype
    def approve(
        self,
        resource_owner: ResourceOwner,
        request: AuthorizeRequest,
        decision: ApprovalDecision,
    ) -> Ok[AskApproval | Redirect] | Err[OAuthError]:
        """Handle the resource owner's approval decision.

        Args:
            resource_owner: Authenticated resource owner
            request: Original authorization endpoint query parameters
            decision: Posted approval form (scope and approval button)

        Returns:
            Same as :meth:`authorize`
        """
        try:
            return Ok(self._approve(resource_owner, request, decision))
        except OAuthError as e:
            logger.warning(f"Approval rejected: {e}")
            return Err(e)

    @beartype
    def token(
        self,
        request: TokenRequest,
        authorization_header: str | None = None,
    ) -> Ok[TokenResponse | AccessToken] | Err[OAuthError]:
        """Handle a token request.

        Args:
            request: Token endpoint form parameters
            authorization_header: Raw ``Authorization`` header, if any

        Returns:
            Ok with a TokenResponse, Ok with the stored AccessToken for the
            validate_bearer grant, or Err with a TokenError
        """
        try:
            return Ok(self._token(request, authorization_header))
        except OAuthError as e:
            logger.warning(f"Token request rejected: {e}")
            return Err(e)

    # Authorization endpoint

    def _authorize(
        self, resource_owner: ResourceOwner, request: AuthorizeRequest
    ) -> AskApproval | Redirect:
        client_id = request.client_id
        if client_id is None:
            raise ResourceOwnerError("client_id missing")
        if not 1 <= len(client_id) <= MAX_CLIENT_ID_LENGTH:
            raise ResourceOwnerError("client_id length exceeded")
        if request.response_type is None:
            raise ResourceOwnerError("response_type missing")

        client = self._resolve_client(client_id, request.redirect_uri)

        if request.redirect_uri is not None and request.redirect_uri != client.redirect_uri:
            raise ResourceOwnerError(
                "specified redirect_uri not the same as registered redirect_uri"
            )

        state = request.state
        if not is_response_type_allowed(client.type, request.response_type):
            raise ClientError(
                "unsupported_response_type",
                "response_type not supported by client profile",
                client,
                state,
            )

        requested_scope = Scope.normalize(request.scope)
        if requested_scope is None:
            raise ClientError("invalid_scope", "malformed scope", client, state)

        if not self._settings.allow_all_scopes and not Scope.is_subset(
            requested_scope, self._settings.supported_scopes
        ):
            raise ClientError("invalid_scope", "scope not supported", client, state)

        resource_owner_id = resource_owner.resource_owner_id
        if (
            Scope.contains(requested_scope, self._settings.admin_scope)
            and resource_owner_id not in self._settings.admin_resource_owner_ids
        ):
            raise ClientError(
                "invalid_scope",
                "scope not supported: resource owner is not an administrator",
                client,
                state,
            )

        approval = self._storage.get_approval(
            client.id, resource_owner_id, requested_scope
        )
        if approval is None or not Scope.is_subset(requested_scope, approval.scope):
            return AskApproval(client=client)

        if request.response_type == ResponseType.TOKEN.value:
            return self._issue_implicit_token(
                client, resource_owner_id, requested_scope, state
            )
        return self._issue_authorization_code(
            client, resource_owner_id, requested_scope, request.redirect_uri, state
        )

    def _resolve_client(self, client_id: str, redirect_uri: str | None) -> Client:
        """Get the registered client or synthesize an unregistered one."""
        client = self._storage.get_client(client_id)
        if client is not None:
            return client

        if not self._settings.allow_unregistered_clients:
            raise ResourceOwnerError("client not registered")
        if redirect_uri is None:
            raise ResourceOwnerError("redirect_uri required for unregistered clients")

        try:
            parts = urlsplit(redirect_uri)
            has_host = bool(parts.hostname)
        except ValueError:
            raise ResourceOwnerError("redirect_uri is malformed") from None
        if (
            not parts.scheme
            or not has_host
            or any(c.isspace() for c in redirect_uri)
        ):
            raise ResourceOwnerError("redirect_uri is malformed")
        if "#" in redirect_uri:
            raise ResourceOwnerError("redirect_uri must not contain fragment")

        host = _netloc_host(parts.netloc)
        if host != client_id:
            raise ResourceOwnerError(
                "client_id should match with hostname of redirect_uri"
            )

        return Client.unregistered(host, redirect_uri)

    def _issue_implicit_token(
        self,
        client: Client,
        resource_owner_id: str,
        scope: str,
        state: str | None,
    ) -> Redirect:
        access_token = generate_token()
        expires_in = self._settings.access_token_expiry
        now = self._clock()
        self._purge_expired(now)
        self._storage.store_access_token(
            access_token, now, client.id, resource_owner_id, scope, expires_in
        )
        logger.info(
            f"Issued implicit access token: client_id={client.id} "
            f"resource_owner_id={resource_owner_id} scope={scope}"
        )

        params: dict[str, str | int] = {
            "access_token": access_token,
            "expires_in": expires_in,
            "token_type": "bearer",
            "scope": scope,
        }
        if state is not None:
            params["state"] = state
        return Redirect(url=f"{client.redirect_uri}#{urlencode(params)}")

    def _issue_authorization_code(
        self,
        client: Client,
        resource_owner_id: str,
        scope: str,
        redirect_uri: str | None,
        state: str | None,
    ) -> Redirect:
        code = generate_token()
        now = self._clock()
        self._purge_expired(now)
        self._storage.store_authorization_code(
            code, resource_owner_id, now, client.id, redirect_uri, scope
        )
        logger.info(
            f"Issued authorization code: client_id={client.id} "
            f"resource_owner_id={resource_owner_id} scope={scope}"
        )

        params = {"code": code}
        if state is not None:
            params["state"] = state
        return Redirect(url=f"{client.redirect_uri}?{urlencode(params)}")

    def _purge_expired(self, now: int) -> None:
        removed = self._storage.purge_expired(
            now, self._settings.authorization_code_expiry
        )
        if removed:
            logger.debug(f"Purged {removed} expired codes and access tokens")

    # Approval

    def _approve(
        self,
        resource_owner: ResourceOwner,
        request: AuthorizeRequest,
        decision: ApprovalDecision,
    ) -> AskApproval | Redirect:
        outcome = self._authorize(resource_owner, request)
        if not isinstance(outcome, AskApproval):
            return outcome

        client = outcome.client
        if not decision.approved:
            raise ClientError(
                "access_denied", "not authorized by resource owner", client, request.state
            )

        approved_scope = Scope.normalize(decision.scope)
        if approved_scope is None or not Scope.is_subset(approved_scope, request.scope):
            raise ClientError(
                "invalid_scope",
                "approved scope is not a subset of requested scope",
                client,
                request.state,
            )

        resource_owner_id = resource_owner.resource_owner_id
        current = self._storage.get_approval(client.id, resource_owner_id)
        if current is None:
            self._storage.add_approval(client.id, resource_owner_id, approved_scope)
            logger.info(
                f"Stored approval: client_id={client.id} "
                f"resource_owner_id={resource_owner_id} scope={approved_scope}"
            )
        elif not Scope.is_subset(approved_scope, current.scope):
            merged = Scope.merge(approved_scope, current.scope)
            assert merged is not None
            self._storage.update_approval(client.id, resource_owner_id, merged)
            logger.info(
                f"Extended approval: client_id={client.id} "
                f"resource_owner_id={resource_owner_id} scope={merged}"
            )

        return self._authorize(resource_owner, request.with_scope(approved_scope))

    # Token endpoint

    def _token(
        self, request: TokenRequest, authorization_header: str | None
    ) -> TokenResponse | AccessToken:
        if request.grant_type is None:
            raise TokenError("invalid_request", "the grant_type parameter is missing")

        grant: AuthorizationCode | RefreshToken
        if request.grant_type == GrantType.VALIDATE_BEARER.value:
            return self._validate_bearer(request)
        elif request.grant_type == GrantType.AUTHORIZATION_CODE.value:
            grant = self._lookup_authorization_code(request)
        elif request.grant_type == GrantType.REFRESH_TOKEN.value:
            grant = self._lookup_refresh_token(request)
        else:
            raise TokenError(
                "unsupported_grant_type", "the requested grant type is not supported"
            )

        client = self._authenticate_client(grant.client_id, authorization_header)
        if client.id != grant.client_id:
            raise TokenError("invalid_grant", "grant was not issued to this client")

        access_token = generate_token()
        self._storage.store_access_token(
            access_token,
            self._clock(),
            grant.client_id,
            grant.resource_owner_id,
            grant.scope,
            self._settings.access_token_expiry,
        )
        token = self._storage.get_access_token(access_token)
        if token is None:
            raise RuntimeError("storage did not return the stored access token")

        refresh_token: str | None = None
        if isinstance(grant, AuthorizationCode):
            # Losing this race means another request redeemed the code first
            if not self._storage.delete_authorization_code(
                grant.code, grant.redirect_uri
            ):
                raise TokenError("invalid_grant", "this grant was already used")
            refresh_token = generate_token()
            self._storage.store_refresh_token(
                refresh_token, token.client_id, token.resource_owner_id, token.scope
            )

        self._purge_expired(self._clock())

        logger.info(
            f"Issued access token: grant_type={request.grant_type} "
            f"client_id={token.client_id} resource_owner_id={token.resource_owner_id} "
            f"scope={token.scope} refresh_token_issued={refresh_token is not None}"
        )

        return TokenResponse(
            access_token=token.access_token,
            token_type="bearer",
            expires_in=token.expires_at() - self._clock(),
            refresh_token=refresh_token,
            scope=token.scope,
        )

    def _validate_bearer(self, request: TokenRequest) -> AccessToken:
        if request.token is None:
            raise TokenError("invalid_request", "the token parameter is missing")
        token = self._storage.get_access_token(request.token)
        if token is None:
            raise TokenError("invalid_grant", "the token was not found")
        return token.model_copy(update={"token_type": VALIDATED_TOKEN_TYPE})

    def _lookup_authorization_code(self, request: TokenRequest) -> AuthorizationCode:
        if request.code is None:
            raise TokenError("invalid_request", "the code parameter is missing")
        code = self._storage.get_authorization_code(request.code, request.redirect_uri)
        if code is None:
            raise TokenError("invalid_grant", "the authorization code was not found")
        if self._clock() > code.issue_time + self._settings.authorization_code_expiry:
            raise TokenError("invalid_grant", "the authorization code expired")
        return code

    def _lookup_refresh_token(self, request: TokenRequest) -> RefreshToken:
        if request.refresh_token is None:
            raise TokenError("invalid_request", "the refresh_token parameter is missing")
        refresh_token = self._storage.get_refresh_token(request.refresh_token)
        if refresh_token is None:
            raise TokenError("invalid_grant", "the refresh_token was not found")
        return refresh_token

    def _authenticate_client(
        self, client_id: str, authorization_header: str | None
    ) -> Client:
        """Apply the token endpoint authentication rule of the client's profile."""
        client = self._storage.get_client(client_id)
        if client is None:
            raise TokenError("invalid_client", "the client is not registered")

        rule = token_endpoint_auth(client.type)
        if rule is TokenEndpointAuth.FORBIDDEN:
            raise TokenError(
                "unauthorized_client",
                "this client type is not allowed to use the token endpoint",
            )
        if rule is TokenEndpointAuth.REQUIRED and not authorization_header:
            raise TokenError("invalid_client", "this client requires authentication")
        if authorization_header and not verify_basic_auth(
            authorization_header, client.id, client.secret
        ):
            raise TokenError("invalid_client", "client authentication failed")
        return client
