"""bcrypt password hashing that keeps the event loop free."""
import logging

import bcrypt
from starlette.concurrency import run_in_threadpool

from blog.errors import HashingError

logger = logging.getLogger(__name__)

# bcrypt ignores (or, in newer releases, rejects) input beyond this length
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """
    Salted one-way hashing with a fixed bcrypt cost factor.

    The salt is embedded in the hash string, so verification needs nothing
    but the stored hash. Both operations are awaitable and run bcrypt in the
    threadpool; they are slow on purpose.
    """

    def __init__(self, rounds: int):
        if not isinstance(rounds, int) or not 4 <= rounds <= 31:
            raise HashingError(f"Invalid bcrypt cost factor: {rounds!r}")
        self.rounds = rounds

    def _hash_sync(self, password: str) -> str:
        return bcrypt.hashpw(
            password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)
        ).decode("utf-8")

    def _verify_sync(self, password: str, hashed_password: str) -> bool:
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            # Registration never accepts these, so no stored hash can match
            return False
        try:
            return bcrypt.checkpw(encoded, hashed_password.encode("utf-8"))
        except (ValueError, TypeError) as exc:
            raise HashingError("Stored password hash is malformed") from exc

    async def hash(self, password: str) -> str:
        """Hash a password using bcrypt."""
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise HashingError("Password exceeds bcrypt's 72 byte limit")
        try:
            return await run_in_threadpool(self._hash_sync, password)
        except ValueError as exc:
            raise HashingError("bcrypt failed to hash password") from exc

    async def verify(self, password: str, hashed_password: str) -> bool:
        """Verify a password against its hash. False on mismatch."""
        return await run_in_threadpool(self._verify_sync, password, hashed_password)
