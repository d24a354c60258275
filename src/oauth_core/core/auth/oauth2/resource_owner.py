"""Resource owner capability consumed by the authorization server.

Authenticating the resource owner is the caller's job; the server only needs
a stable identifier and a name to show on the approval page.
"""

from abc import ABC, abstractmethod

from beartype import beartype


class ResourceOwner(ABC):
    """An authenticated end user."""

    @beartype
    @abstractmethod
    def set_hint(self, resource_owner_id_hint: str | None = None) -> None:
        """Pass an identifier hint to the authentication backend."""

    @property
    @abstractmethod
    def resource_owner_id(self) -> str:
        """Stable resource owner identifier."""

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Name shown to the resource owner."""


class StaticResourceOwner(ResourceOwner):
    """Resource owner whose identity was established before the request."""

    def __init__(self, resource_owner_id: str, display_name: str | None = None) -> None:
        """Initialize resource owner.

        Args:
            resource_owner_id: Stable identifier
            display_name: Display name, defaults to the identifier
        """
        self._id = resource_owner_id
        self._display_name = display_name or resource_owner_id
        self.hint: str | None = None

    @beartype
    def set_hint(self, resource_owner_id_hint: str | None = None) -> None:
        """Record the hint; the identity itself is fixed."""
        self.hint = resource_owner_id_hint

    @property
    def resource_owner_id(self) -> str:
        """Stable resource owner identifier."""
        return self._id

    @property
    def display_name(self) -> str:
        """Name shown to the resource owner."""
        return self._display_name
