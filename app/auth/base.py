from abc import ABC, abstractmethod

from app.auth.models import AuthenticatedUser, AuthSession


class BaseIdentityProvider(ABC):
    """Contract for resolving the user behind a session."""

    @abstractmethod
    def get_current_user(self, session: AuthSession | None) -> AuthenticatedUser:
        """Return the authenticated user for ``session``.

        Raises:
            AuthenticationError: if there is no session or it is not valid.
        """
