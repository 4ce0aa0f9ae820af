"""Pluggable storage for server-side session records."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from blog.errors import DatastoreError
from blog.models.session import Session


@dataclass(frozen=True)
class SessionRecord:
    token: str
    user_id: int
    created_at: datetime
    expires_at: datetime
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


class SessionStore(ABC):
    """
    Where session records live.

    Methods take the request's database session so the SQL store can share
    its transaction; stores that keep records elsewhere ignore it.
    """

    @abstractmethod
    def save(self, db: DBSession, record: SessionRecord) -> None:
        pass

    @abstractmethod
    def get(self, db: DBSession, token: str, now: datetime) -> Optional[SessionRecord]:
        """Return the record for token if it has not expired at `now`."""
        pass

    @abstractmethod
    def delete(self, db: DBSession, token: str) -> bool:
        pass

    @abstractmethod
    def purge_expired(self, db: DBSession, now: datetime) -> int:
        pass


class SqlSessionStore(SessionStore):
    """Sessions in the `sessions` table. Survives restarts and is shared by every instance."""

    @staticmethod
    def _to_record(row: Session) -> SessionRecord:
        return SessionRecord(
            token=row.token,
            user_id=row.user_id,
            created_at=row.created_at,
            expires_at=row.expires_at,
            user_agent=row.user_agent,
            ip_address=row.ip_address,
        )

    def save(self, db: DBSession, record: SessionRecord) -> None:
        db.add(
            Session(
                token=record.token,
                user_id=record.user_id,
                created_at=record.created_at,
                expires_at=record.expires_at,
                user_agent=record.user_agent,
                ip_address=record.ip_address,
            )
        )
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise DatastoreError("Session insert failed") from exc

    def get(self, db: DBSession, token: str, now: datetime) -> Optional[SessionRecord]:
        try:
            row = (
                db.query(Session)
                .filter(Session.token == token, Session.expires_at > now)
                .first()
            )
        except SQLAlchemyError as exc:
            raise DatastoreError("Session lookup failed") from exc
        return self._to_record(row) if row else None

    def delete(self, db: DBSession, token: str) -> bool:
        try:
            count = db.query(Session).filter(Session.token == token).delete()
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise DatastoreError("Session delete failed") from exc
        return count > 0

    def purge_expired(self, db: DBSession, now: datetime) -> int:
        try:
            # SQLite hands datetimes back naive; match rows in SQL, not in Python
            count = (
                db.query(Session)
                .filter(Session.expires_at <= now)
                .delete(synchronize_session="fetch")
            )
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise DatastoreError("Session purge failed") from exc
        return count


class InMemorySessionStore(SessionStore):
    """
    Process-local sessions.

    Everything is lost on restart and nothing is shared between instances.
    Suitable for tests and single-process deployments.
    """

    def __init__(self):
        self._records: Dict[str, SessionRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def save(self, db: DBSession, record: SessionRecord) -> None:
        self._records[record.token] = record

    def get(self, db: DBSession, token: str, now: datetime) -> Optional[SessionRecord]:
        record = self._records.get(token)
        if record is None or record.expires_at <= now:
            return None
        return record

    def delete(self, db: DBSession, token: str) -> bool:
        return self._records.pop(token, None) is not None

    def purge_expired(self, db: DBSession, now: datetime) -> int:
        expired = [token for token, r in self._records.items() if r.expires_at <= now]
        for token in expired:
            del self._records[token]
        return len(expired)
