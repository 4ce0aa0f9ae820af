"""
Unit tests for LocalStrategy and RegistrationService.

Tests authentication outcomes and the registration rules:
- Typed outcomes instead of exceptions for expected negatives
- Duplicate emails decided by the unique constraint
"""
import pytest
from sqlalchemy.orm import Session

from blog.models import User
from blog.services.auth import outcomes
from blog.services.auth.credential_store import CredentialStore
from blog.services.auth.local_strategy import (
    LocalStrategy,
    RegistrationService,
    normalize_email,
)
from blog.services.auth.outcomes import (
    Authenticated,
    Errored,
    Registered,
    RegistrationRejected,
    Rejected,
)
from blog.services.auth.passwords import PasswordHasher
from tests.factories import create_user


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def strategy(hasher: PasswordHasher) -> LocalStrategy:
    return LocalStrategy(CredentialStore(), hasher)


@pytest.fixture
def registration(hasher: PasswordHasher) -> RegistrationService:
    return RegistrationService(CredentialStore(), hasher)


class TestAuthenticate:
    """Tests for user authentication."""

    @pytest.mark.asyncio
    async def test_authenticate_success(self, strategy: LocalStrategy, db: Session):
        user = create_user(db, email="test@example.com", password="secret123")

        outcome = await strategy.authenticate(db, "test@example.com", "secret123")

        assert isinstance(outcome, Authenticated)
        assert outcome.user.id == user.id

    @pytest.mark.asyncio
    async def test_authenticate_wrong_password(self, strategy: LocalStrategy, db: Session):
        create_user(db, email="test@example.com", password="secret123")

        outcome = await strategy.authenticate(db, "test@example.com", "wrongpassword")

        assert outcome == Rejected(outcomes.BAD_PASSWORD)

    @pytest.mark.asyncio
    async def test_authenticate_unknown_user(self, strategy: LocalStrategy, db: Session):
        outcome = await strategy.authenticate(db, "nonexistent@example.com", "password")

        assert outcome == Rejected(outcomes.USER_NOT_FOUND)

    @pytest.mark.asyncio
    async def test_authenticate_strips_email(self, strategy: LocalStrategy, db: Session):
        create_user(db, email="test@example.com", password="secret123")

        outcome = await strategy.authenticate(db, "  test@example.com ", "secret123")

        assert isinstance(outcome, Authenticated)

    @pytest.mark.asyncio
    async def test_authenticate_malformed_hash_is_error(
        self, strategy: LocalStrategy, db: Session
    ):
        create_user(db, email="broken@example.com", password_hash="not-a-bcrypt-hash")

        outcome = await strategy.authenticate(db, "broken@example.com", "anything")

        assert isinstance(outcome, Errored)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", ["pw123", "p@ss word", "ΩΩΩ"])
    async def test_authenticated_iff_hash_verifies(
        self,
        strategy: LocalStrategy,
        registration: RegistrationService,
        db: Session,
        password: str,
    ):
        await registration.register(db, "prop@example.com", password, password)

        good = await strategy.authenticate(db, "prop@example.com", password)
        bad = await strategy.authenticate(db, "prop@example.com", password + "x")

        assert isinstance(good, Authenticated)
        assert isinstance(bad, Rejected)


class TestRegister:
    """Tests for account registration."""

    @pytest.mark.asyncio
    async def test_register_creates_user(self, registration: RegistrationService, db: Session):
        outcome = await registration.register(db, "alice@example.com", "pw123", "pw123")

        assert isinstance(outcome, Registered)
        assert outcome.user.id is not None
        assert outcome.user.email == "alice@example.com"
        assert outcome.user.password_hash != "pw123"

    @pytest.mark.asyncio
    async def test_register_password_mismatch(self, registration: RegistrationService, db: Session):
        outcome = await registration.register(db, "alice@example.com", "pw123", "pw124")

        assert outcome == RegistrationRejected(outcomes.PASSWORDS_MISMATCH)
        assert db.query(User).count() == 0

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, registration: RegistrationService, db: Session):
        await registration.register(db, "alice@example.com", "pw123", "pw123")

        outcome = await registration.register(db, "alice@example.com", "other", "other")

        assert outcome == RegistrationRejected(outcomes.EMAIL_EXISTS)
        assert db.query(User).filter(User.email == "alice@example.com").count() == 1

    @pytest.mark.asyncio
    async def test_register_conflict_from_constraint(
        self, registration: RegistrationService, db: Session, monkeypatch
    ):
        """A registration that passes the lookup still loses to the constraint."""
        create_user(db, email="race@example.com")
        # Simulate the concurrent request whose lookup ran before the insert
        monkeypatch.setattr(
            registration.credentials, "find_by_email", lambda db, email: None
        )

        outcome = await registration.register(db, "race@example.com", "pw", "pw")

        assert outcome == RegistrationRejected(outcomes.EMAIL_EXISTS)
        assert db.query(User).filter(User.email == "race@example.com").count() == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email,password", [("", "pw"), ("   ", "pw"), ("a@example.com", "")]
    )
    async def test_register_missing_fields(
        self, registration: RegistrationService, db: Session, email: str, password: str
    ):
        outcome = await registration.register(db, email, password, password)

        assert outcome == RegistrationRejected(outcomes.MISSING_FIELDS)

    @pytest.mark.asyncio
    async def test_register_password_too_long(self, registration: RegistrationService, db: Session):
        password = "x" * 73

        outcome = await registration.register(db, "long@example.com", password, password)

        assert outcome == RegistrationRejected(outcomes.PASSWORD_TOO_LONG)


def test_normalize_email_keeps_case():
    assert normalize_email("  Alice@Example.com\n") == "Alice@Example.com"
    assert normalize_email(None) == ""
