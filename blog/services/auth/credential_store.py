"""Persistence boundary for user identities and password hashes."""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from blog.errors import ConflictError, DatastoreError
from blog.models.user import User

logger = logging.getLogger(__name__)


class CredentialStore:
    """
    Reads and inserts users.

    Email uniqueness is enforced by the unique constraint on users.email;
    a violation is the authoritative duplicate signal, whatever any earlier
    lookup returned.
    """

    def find_by_email(self, db: Session, email: str) -> Optional[User]:
        try:
            return db.query(User).filter(User.email == email).first()
        except SQLAlchemyError as exc:
            raise DatastoreError("User lookup by email failed") from exc

    def find_by_id(self, db: Session, user_id: int) -> Optional[User]:
        try:
            return db.get(User, user_id)
        except SQLAlchemyError as exc:
            raise DatastoreError("User lookup by id failed") from exc

    def create(self, db: Session, email: str, password_hash: str) -> User:
        """Insert a user. Raises ConflictError if the email is taken."""
        user = User(email=email, password_hash=password_hash)
        db.add(user)
        try:
            db.commit()
        except IntegrityError as exc:
            # Race condition: another request registered this email first
            db.rollback()
            logger.info("Duplicate registration rejected by constraint: %s", email)
            raise ConflictError("Email already registered", email=email) from exc
        except SQLAlchemyError as exc:
            db.rollback()
            raise DatastoreError("User insert failed") from exc
        db.refresh(user)
        return user
