"""Storage contract for clients, approvals and credentials.

Storage owns every record the authorization server reads or writes. The
server only relies on single-record atomicity; in particular
``delete_authorization_code`` must delete the code only if it is still
present and report whether it did, so that a code is redeemed exactly once.
Lookups return None when the record does not exist.
"""

import threading
from abc import ABC, abstractmethod

from beartype import beartype

from ....models.oauth import (
    AccessToken,
    Approval,
    AuthorizationCode,
    Client,
    RefreshToken,
)


class OAuthStorage(ABC):
    """Persistence backend used by the authorization server."""

    @beartype
    @abstractmethod
    def add_client(self, client: Client) -> None:
        """Register a client, replacing one with the same id."""

    @beartype
    @abstractmethod
    def get_client(self, client_id: str) -> Client | None:
        """Get a registered client."""

    @beartype
    @abstractmethod
    def get_approval(
        self,
        client_id: str,
        resource_owner_id: str,
        scope: str | None = None,
    ) -> Approval | None:
        """Get the approval a resource owner gave a client.

        Args:
            client_id: Client identifier
            resource_owner_id: Resource owner identifier
            scope: Requested scope, a hint backends may ignore
        """

    @beartype
    @abstractmethod
    def add_approval(self, client_id: str, resource_owner_id: str, scope: str) -> None:
        """Store a first approval."""

    @beartype
    @abstractmethod
    def update_approval(
        self, client_id: str, resource_owner_id: str, scope: str
    ) -> None:
        """Replace the approved scope of an existing approval."""

    @beartype
    @abstractmethod
    def store_authorization_code(
        self,
        code: str,
        resource_owner_id: str,
        issue_time: int,
        client_id: str,
        redirect_uri: str | None,
        scope: str,
    ) -> None:
        """Store a freshly issued authorization code."""

    @beartype
    @abstractmethod
    def get_authorization_code(
        self, code: str, redirect_uri: str | None
    ) -> AuthorizationCode | None:
        """Get an authorization code issued for the given redirect_uri."""

    @beartype
    @abstractmethod
    def delete_authorization_code(self, code: str, redirect_uri: str | None) -> bool:
        """Atomically delete an authorization code.

        Returns:
            True if this call removed the code, False if it was already gone
        """

    @beartype
    @abstractmethod
    def store_access_token(
        self,
        access_token: str,
        issue_time: int,
        client_id: str,
        resource_owner_id: str,
        scope: str,
        expires_in: int,
    ) -> None:
        """Store an access token."""

    @beartype
    @abstractmethod
    def get_access_token(self, access_token: str) -> AccessToken | None:
        """Get an access token."""

    @beartype
    @abstractmethod
    def store_refresh_token(
        self,
        refresh_token: str,
        client_id: str,
        resource_owner_id: str,
        scope: str,
    ) -> None:
        """Store a refresh token."""

    @beartype
    @abstractmethod
    def get_refresh_token(self, refresh_token: str) -> RefreshToken | None:
        """Get a refresh token."""

    @beartype
    def purge_expired(self, now: int, authorization_code_expiry: int) -> int:
        """Drop expired authorization codes and access tokens.

        Backends that expire records on their own may keep this no-op.

        Returns:
            Number of records removed
        """
        return 0


class InMemoryStorage(OAuthStorage):
    """Thread-safe storage keeping every record in process memory."""

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._lock = threading.Lock()
        self._clients: dict[str, Client] = {}
        self._approvals: dict[tuple[str, str], Approval] = {}
        self._codes: dict[tuple[str, str | None], AuthorizationCode] = {}
        self._access_tokens: dict[str, AccessToken] = {}
        self._refresh_tokens: dict[str, RefreshToken] = {}

    @beartype
    def add_client(self, client: Client) -> None:
        """Register a client, replacing one with the same id."""
        with self._lock:
            self._clients[client.id] = client

    @beartype
    def get_client(self, client_id: str) -> Client | None:
        """Get a registered client."""
        with self._lock:
            return self._clients.get(client_id)

    @beartype
    def get_approval(
        self,
        client_id: str,
        resource_owner_id: str,
        scope: str | None = None,
    ) -> Approval | None:
        """Get the approval a resource owner gave a client."""
        with self._lock:
            return self._approvals.get((client_id, resource_owner_id))

    @beartype
    def add_approval(self, client_id: str, resource_owner_id: str, scope: str) -> None:
        """Store a first approval."""
        approval = Approval(
            client_id=client_id, resource_owner_id=resource_owner_id, scope=scope
        )
        with self._lock:
            self._approvals[(client_id, resource_owner_id)] = approval

    @beartype
    def update_approval(
        self, client_id: str, resource_owner_id: str, scope: str
    ) -> None:
        """Replace the approved scope of an existing approval."""
        with self._lock:
            current = self._approvals.get((client_id, resource_owner_id))
            if current is None:
                raise KeyError(f"no approval for {client_id}/{resource_owner_id}")
            self._approvals[(client_id, resource_owner_id)] = current.model_copy(
                update={"scope": scope}
            )

    @beartype
    def store_authorization_code(
        self,
        code: str,
        resource_owner_id: str,
        issue_time: int,
        client_id: str,
        redirect_uri: str | None,
        scope: str,
    ) -> None:
        """Store a freshly issued authorization code."""
        record = AuthorizationCode(
            code=code,
            resource_owner_id=resource_owner_id,
            issue_time=issue_time,
            client_id=client_id,
            redirect_uri=redirect_uri,
            scope=scope,
        )
        with self._lock:
            self._codes[(code, redirect_uri)] = record

    @beartype
    def get_authorization_code(
        self, code: str, redirect_uri: str | None
    ) -> AuthorizationCode | None:
        """Get an authorization code issued for the given redirect_uri."""
        with self._lock:
            return self._codes.get((code, redirect_uri))

    @beartype
    def delete_authorization_code(self, code: str, redirect_uri: str | None) -> bool:
        """Atomically delete an authorization code."""
        with self._lock:
            return self._codes.pop((code, redirect_uri), None) is not None

    @beartype
    def store_access_token(
        self,
        access_token: str,
        issue_time: int,
        client_id: str,
        resource_owner_id: str,
        scope: str,
        expires_in: int,
    ) -> None:
        """Store an access token."""
        record = AccessToken(
            access_token=access_token,
            issue_time=issue_time,
            client_id=client_id,
            resource_owner_id=resource_owner_id,
            scope=scope,
            expires_in=expires_in,
        )
        with self._lock:
            self._access_tokens[access_token] = record

    @beartype
    def get_access_token(self, access_token: str) -> AccessToken | None:
        """Get an access token."""
        with self._lock:
            return self._access_tokens.get(access_token)

    @beartype
    def store_refresh_token(
        self,
        refresh_token: str,
        client_id: str,
        resource_owner_id: str,
        scope: str,
    ) -> None:
        """Store a refresh token."""
        record = RefreshToken(
            refresh_token=refresh_token,
            client_id=client_id,
            resource_owner_id=resource_owner_id,
            scope=scope,
        )
        with self._lock:
            self._refresh_tokens[refresh_token] = record

    @beartype
    def get_refresh_token(self, refresh_token: str) -> RefreshToken | None:
        """Get a refresh token."""
        with self._lock:
            return self._refresh_tokens.get(refresh_token)

    @beartype
    def purge_expired(self, now: int, authorization_code_expiry: int) -> int:
        """Drop expired authorization codes and access tokens."""
        with self._lock:
            expired_codes = [
                key
                for key, code in self._codes.items()
                if now > code.issue_time + authorization_code_expiry
            ]
            expired_tokens = [
                key
                for key, token in self._access_tokens.items()
                if now > token.expires_at()
            ]
            for code_key in expired_codes:
                del self._codes[code_key]
            for token_key in expired_tokens:
                del self._access_tokens[token_key]
        return len(expired_codes) + len(expired_tokens)
