"""Result types returned by the protocol entry points.

The authorize, approve and token entry points never raise protocol errors to
their caller. They return ``Ok(outcome)`` or ``Err(error)`` where ``error`` is
one of the tagged OAuth error types; callers branch on ``is_ok()`` and then on
the error kind to decide between redirecting and displaying.
"""

from typing import Any, Generic, NoReturn, TypeVar

from attrs import frozen
from beartype import beartype

T = TypeVar("T")
E = TypeVar("E")


@frozen
class Ok(Generic[T]):
    """Success result wrapper."""

    value: T

    @beartype
    def is_ok(self) -> bool:
        """Check if result is Ok."""
        return True

    @beartype
    def is_err(self) -> bool:
        """Check if result is Err."""
        return False

    @property
    def ok_value(self) -> T:
        """Get the Ok value."""
        return self.value

    @property
    def err_value(self) -> None:
        """Get the Err value (None for Ok)."""
        return None

    def unwrap(self) -> T:
        """Get the success value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get the success value, ignoring the default."""
        return self.value

    def unwrap_err(self) -> NoReturn:
        """Raise ValueError as this is Ok."""
        raise ValueError(f"Called unwrap_err on Ok value: {self.value!r}")


@frozen
class Err(Generic[E]):
    """Error result wrapper."""

    error: E

    @beartype
    def is_ok(self) -> bool:
        """Check if result is Ok."""
        return False

    @beartype
    def is_err(self) -> bool:
        """Check if result is Err."""
        return True

    @property
    def ok_value(self) -> None:
        """Get the Ok value (None for Err)."""
        return None

    @property
    def err_value(self) -> E:
        """Get the Err value."""
        return self.error

    def unwrap(self) -> NoReturn:
        """Raise ValueError as this is Err."""
        raise ValueError(f"Called unwrap on Err value: {self.error!r}")

    def unwrap_or(self, default: Any) -> Any:
        """Return the default value."""
        return default

    def unwrap_err(self) -> E:
        """Get the error value."""
        return self.error
