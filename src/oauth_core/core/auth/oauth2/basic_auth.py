"""HTTP Basic client authentication for the token endpoint."""

import base64
import binascii
import hmac
import re
from typing import Final

from beartype import beartype

# b64token = 1*( ALPHA / DIGIT / "-" / "." / "_" / "~" / "+" / "/" ) *"="
BASIC_AUTH_PATTERN: Final = re.compile(r"Basic (?P<value>[A-Za-z0-9\-._~+/]+=*)")


@beartype
def parse_basic_auth(authorization_header: str | None) -> tuple[str, str] | None:
    """Extract client credentials from an ``Authorization`` header value.

    Args:
        authorization_header: Raw header value, e.g. ``Basic Zm9vOmJhcg==``

    Returns:
        (username, password) tuple, or None if the header is not a well formed
        Basic credential with a non-empty username and password
    """
    if not authorization_header:
        return None

    match = BASIC_AUTH_PATTERN.fullmatch(authorization_header)
    if match is None:
        return None

    value = match.group("value").rstrip("=")
    value += "=" * (-len(value) % 4)
    try:
        decoded = base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    username, sep, password = decoded.partition(":")
    if not sep or not username or not password:
        return None
    return username, password


@beartype
def verify_basic_auth(
    authorization_header: str | None,
    username: str,
    password: str | None,
) -> bool:
    """Check a Basic ``Authorization`` header against expected credentials.

    Never raises; any malformed input is a failed verification.

    Args:
        authorization_header: Raw header value
        username: Expected username (the client id)
        password: Expected password (the client secret), None if the client
            has no secret

    Returns:
        True only if both username and password match exactly
    """
    if password is None:
        return False

    credentials = parse_basic_auth(authorization_header)
    if credentials is None:
        return False

    given_user, given_pass = credentials
    user_ok = hmac.compare_digest(given_user.encode("utf-8"), username.encode("utf-8"))
    pass_ok = hmac.compare_digest(given_pass.encode("utf-8"), password.encode("utf-8"))
    return user_ok and pass_ok
