"""Bearer token verification for resource servers sharing the token store."""

import re
import time
from collections.abc import Callable
from typing import Final

from beartype import beartype

from ....core.logging_utils import get_logger
from ....core.result_types import Err, Ok
from ....models.oauth import AccessToken
from .errors import VerifyError
from .scopes import Scope
from .storage import OAuthStorage

logger = get_logger(__name__)

# b64token = 1*( ALPHA / DIGIT / "-" / "." / "_" / "~" / "+" / "/" ) *"="
BEARER_PATTERN: Final = re.compile(r"Bearer (?P<token>[A-Za-z0-9\-._~+/]+=*)")


class BearerTokenVerifier:
    """Verify ``Authorization: Bearer`` headers (RFC 6750)."""

    def __init__(
        self,
        storage: OAuthStorage,
        clock: Callable[[], int] | None = None,
    ) -> None:
        """Initialize verifier.

        Args:
            storage: Storage holding issued access tokens
            clock: Returns the current UNIX time in seconds
        """
        self._storage = storage
        self._clock = clock or (lambda: int(time.time()))

    @beartype
    def verify(
        self,
        authorization_header: str | None,
        required_scope: str | None = None,
    ) -> Ok[AccessToken] | Err[VerifyError]:
        """Verify a bearer token and optionally the scope it grants.

        Args:
            authorization_header: Raw ``Authorization`` header value
            required_scope: Scope the protected resource needs

        Returns:
            Result containing the stored access token or the VerifyError to
            send back with a ``WWW-Authenticate`` challenge
        """
        if not authorization_header:
            return Err(VerifyError("invalid_request", "no token provided"))

        match = BEARER_PATTERN.fullmatch(authorization_header)
        if match is None:
            return Err(VerifyError("invalid_request", "the header is malformed"))

        token = self._storage.get_access_token(match.group("token"))
        if token is None:
            return Err(VerifyError("invalid_token", "the access token is not valid"))

        if self._clock() > token.expires_at():
            return Err(VerifyError("invalid_token", "the access token expired"))

        if required_scope is not None and not Scope.is_subset(
            required_scope, token.scope
        ):
            logger.warning(
                f"Insufficient scope: client_id={token.client_id} "
                f"granted={token.scope} required={required_scope}"
            )
            return Err(
                VerifyError(
                    "insufficient_scope",
                    "the access token does not grant the required scope",
                    scope=Scope.normalize(required_scope),
                )
            )

        return Ok(token)
