"""Session lifecycle: issue, resolve and destroy cookie-bound sessions."""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from fastapi import Request, Response
from itsdangerous import BadSignature, URLSafeTimedSerializer
from sqlalchemy.orm import Session as DBSession

from blog.models.user import User
from blog.services.auth.credential_store import CredentialStore
from blog.services.auth.session_store import SessionRecord, SessionStore

logger = logging.getLogger(__name__)

COOKIE_SALT = "blog.session.v1"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionHandle:
    token: str
    cookie_value: str
    user_id: int
    created_at: datetime
    expires_at: datetime


class SessionManager:
    """
    Binds an authenticated user to a client through a signed cookie.

    Only the user id is stored with the session; the full user is re-read
    from the credential store on every request. Expiry is absolute:
    `max_age` seconds after creation, not extended by activity.
    """

    def __init__(
        self,
        store: SessionStore,
        credentials: CredentialStore,
        secret: str,
        cookie_name: str = "blog_session",
        max_age: int = 86400,
        secure: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ):
        if not secret:
            raise RuntimeError("SESSION_SECRET must be set")
        self.store = store
        self.credentials = credentials
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.secure = secure
        self.clock = clock
        self._serializer = URLSafeTimedSerializer(secret_key=secret, salt=COOKIE_SALT)

    def _generate_session_token(self) -> str:
        """Generate a cryptographically secure session token."""
        return secrets.token_urlsafe(32)

    def sign(self, token: str) -> str:
        """Cookie value carrying token."""
        return self._serializer.dumps(token)

    def _unsign(self, cookie_value: str) -> Optional[str]:
        try:
            token = self._serializer.loads(cookie_value, max_age=self.max_age)
        except BadSignature:
            return None
        return token if isinstance(token, str) and token else None

    def _cookie_secure(self, request: Request) -> bool:
        return self.secure or request.url.scheme == "https"

    async def create(
        self, db: DBSession, user: User, request: Request, response: Response
    ) -> SessionHandle:
        """Store a new session for user and set its cookie on response."""
        now = self.clock()
        token = self._generate_session_token()
        record = SessionRecord(
            token=token,
            user_id=user.id,
            created_at=now,
            expires_at=now + timedelta(seconds=self.max_age),
            user_agent=request.headers.get("user-agent", "")[:512],
            ip_address=request.client.host if request.client else None,
        )
        self.store.save(db, record)

        handle = SessionHandle(
            token=token,
            cookie_value=self.sign(token),
            user_id=user.id,
            created_at=record.created_at,
            expires_at=record.expires_at,
        )
        response.set_cookie(
            key=self.cookie_name,
            value=handle.cookie_value,
            max_age=self.max_age,
            httponly=True,
            samesite="lax",
            secure=self._cookie_secure(request),
        )
        logger.debug("Session created for user %s", user.id)
        return handle

    async def resolve_cookie(self, db: DBSession, cookie_value: Optional[str]) -> Optional[User]:
        """Return the user behind a cookie value, or None."""
        if not cookie_value:
            return None
        token = self._unsign(cookie_value)
        if token is None:
            return None
        record = self.store.get(db, token, self.clock())
        if record is None:
            return None
        return self.credentials.find_by_id(db, record.user_id)

    async def resolve(self, db: DBSession, request: Request) -> Optional[User]:
        """Extract user from session cookie."""
        return await self.resolve_cookie(db, request.cookies.get(self.cookie_name))

    async def destroy(self, db: DBSession, request: Request, response: Response) -> bool:
        """Remove the request's session and tell the client to drop the cookie."""
        revoked = False
        cookie_value = request.cookies.get(self.cookie_name)
        token = self._unsign(cookie_value) if cookie_value else None
        if token:
            revoked = self.store.delete(db, token)
        response.delete_cookie(
            self.cookie_name,
            httponly=True,
            samesite="lax",
            secure=self._cookie_secure(request),
        )
        return revoked

    def purge_expired(self, db: DBSession) -> int:
        return self.store.purge_expired(db, self.clock())
