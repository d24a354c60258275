"""OAuth2 scope validation and set operations.

A scope is a set of scope tokens (RFC 6749 section 3.3)::

    scope       = scope-token *( SP scope-token )
    scope-token = 1*( %x21 / %x23-5B / %x5D-7E )

Scopes are stored and compared in canonical form: unique tokens, sorted
lexically, joined by a single space. ``None`` is the invalid marker returned
by :meth:`Scope.normalize`; it is never a subset of anything and nothing is a
subset of it.
"""

import re
from typing import Final

from beartype import beartype

_SCOPE_TOKEN: Final = r"[\x21\x23-\x5B\x5D-\x7E]+"
SCOPE_PATTERN: Final = re.compile(rf"{_SCOPE_TOKEN}(?:\x20{_SCOPE_TOKEN})*")


class Scope:
    """Scope algebra over space delimited scope strings."""

    @staticmethod
    @beartype
    def is_valid(scope: str | None) -> bool:
        """Check a scope string against the scope grammar.

        Args:
            scope: Space separated scope string

        Returns:
            True if every token matches the grammar and tokens are separated
            by exactly one space
        """
        if scope is None:
            return False
        return SCOPE_PATTERN.fullmatch(scope) is not None

    @staticmethod
    @beartype
    def to_set(scope: str | None) -> frozenset[str] | None:
        """Split a valid scope into its token set, None if invalid."""
        if not Scope.is_valid(scope):
            return None
        assert scope is not None
        return frozenset(scope.split(" "))

    @staticmethod
    @beartype
    def normalize(scope: str | None) -> str | None:
        """Return the canonical form of a scope.

        Args:
            scope: Space separated scope string

        Returns:
            Sorted, de-duplicated tokens joined by a space, or None when the
            scope does not match the grammar
        """
        tokens = Scope.to_set(scope)
        if tokens is None:
            return None
        return " ".join(sorted(tokens))

    @staticmethod
    @beartype
    def is_subset(s: str | None, t: str | None) -> bool:
        """Check whether every token of ``s`` is also in ``t``.

        Fails closed: an invalid scope on either side yields False.
        """
        u = Scope.to_set(s)
        v = Scope.to_set(t)
        if u is None or v is None:
            return False
        return u <= v

    @staticmethod
    @beartype
    def merge(s: str | None, t: str | None) -> str | None:
        """Union of two scopes in canonical form, None if either is invalid."""
        u = Scope.to_set(s)
        v = Scope.to_set(t)
        if u is None or v is None:
            return None
        return " ".join(sorted(u | v))

    @staticmethod
    @beartype
    def contains(scope: str | None, token: str) -> bool:
        """Check whether a single token is part of a scope."""
        tokens = Scope.to_set(scope)
        return tokens is not None and token in tokens
