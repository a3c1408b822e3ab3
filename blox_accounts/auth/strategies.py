"""External identity providers."""

from abc import ABC, abstractmethod


class Strategy(ABC):
    """
    A login strategy backed by an external identity provider.

    Implementations should raise :class:`.AuthenticationFailed` from
    :meth:`authenticate` when the provider rejects the credentials.
    """

    type: str = ''
    """Type tag of the provider, e.g. ``'Snap!'``. Stored on linked accounts."""

    @abstractmethod
    def authenticate(self, username: str, password: str) -> None:
        """Verify ``username`` and ``password`` with the provider."""

    @abstractmethod
    def get_email(self, username: str, password: str) -> str:
        """Get the e-mail address the provider has for ``username``."""
