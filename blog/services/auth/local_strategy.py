"""Local email/password authentication and registration."""
import logging

from sqlalchemy.orm import Session as DBSession

from blog.errors import ConflictError, HashingError
from blog.services.auth import outcomes
from blog.services.auth.base import AuthStrategy
from blog.services.auth.credential_store import CredentialStore
from blog.services.auth.outcomes import (
    Authenticated,
    AuthOutcome,
    Errored,
    Registered,
    RegistrationOutcome,
    RegistrationRejected,
    Rejected,
)
from blog.services.auth.passwords import MAX_PASSWORD_BYTES, PasswordHasher

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Strip surrounding whitespace. Case is kept as submitted."""
    return (email or "").strip()


class LocalStrategy(AuthStrategy):
    """Checks submitted credentials against the credential store."""

    def __init__(self, credentials: CredentialStore, hasher: PasswordHasher):
        self.credentials = credentials
        self.hasher = hasher

    async def authenticate(self, db: DBSession, email: str, password: str) -> AuthOutcome:
        email = normalize_email(email)
        user = self.credentials.find_by_email(db, email)
        if user is None:
            logger.info("Login rejected for %s: user not found", email)
            return Rejected(outcomes.USER_NOT_FOUND)

        try:
            valid = await self.hasher.verify(password, user.password_hash)
        except HashingError as exc:
            logger.error("Password check failed for user %s: %s", user.id, exc)
            return Errored(exc)

        if not valid:
            logger.info("Login rejected for %s: bad password", email)
            return Rejected(outcomes.BAD_PASSWORD)

        return Authenticated(user)


class RegistrationService:
    """
    Creates accounts from the registration form.

    The email lookup only skips needless hashing; the unique constraint
    decides duplicates.
    """

    def __init__(self, credentials: CredentialStore, hasher: PasswordHasher):
        self.credentials = credentials
        self.hasher = hasher

    async def register(
        self,
        db: DBSession,
        email: str,
        password: str,
        confirm_password: str,
    ) -> RegistrationOutcome:
        email = normalize_email(email)
        if not email or not password:
            return RegistrationRejected(outcomes.MISSING_FIELDS)

        if password != confirm_password:
            logger.info("Registration rejected for %s: passwords do not match", email)
            return RegistrationRejected(outcomes.PASSWORDS_MISMATCH)

        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            return RegistrationRejected(outcomes.PASSWORD_TOO_LONG)

        if self.credentials.find_by_email(db, email) is not None:
            logger.info("Registration rejected for %s: email exists", email)
            return RegistrationRejected(outcomes.EMAIL_EXISTS)

        password_hash = await self.hasher.hash(password)
        try:
            user = self.credentials.create(db, email, password_hash)
        except ConflictError:
            return RegistrationRejected(outcomes.EMAIL_EXISTS)

        logger.info("Registered user %s", user.id)
        return Registered(user)
