"""Abstract base class for authentication strategies."""
from abc import ABC, abstractmethod

from sqlalchemy.orm import Session as DBSession

from blog.services.auth.outcomes import AuthOutcome


class AuthStrategy(ABC):
    """
    Abstract authentication strategy interface.

    Login routes only depend on this interface, so another credential source
    can be dropped in without touching them.
    """

    @abstractmethod
    async def authenticate(self, db: DBSession, email: str, password: str) -> AuthOutcome:
        """
        Verify an email/password pair.

        Returns Authenticated, Rejected or Errored. Expected negatives are
        never raised.
        """
        pass
