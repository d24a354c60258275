"""Opaque credential generation."""

import secrets

from beartype import beartype

from .errors import CredentialGenerationError

TOKEN_BYTES = 16


@beartype
def generate_token(nbytes: int = TOKEN_BYTES) -> str:
    """Generate an opaque credential.

    Used for authorization codes, access tokens and refresh tokens.

    Args:
        nbytes: Number of random bytes

    Returns:
        Hex encoding of ``nbytes`` random bytes (32 characters by default)

    Raises:
        CredentialGenerationError: If the OS has no cryptographically strong
            random source. Callers must not retry.
    """
    try:
        return secrets.token_hex(nbytes)
    except NotImplementedError as e:
        raise CredentialGenerationError(
            "unable to securely generate random string"
        ) from e
