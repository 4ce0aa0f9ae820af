"""
Test configuration and fixtures for the blog.

- Function-scoped app built by create_app() on a fresh in-memory SQLite database
- Database session shared between the test and the app via dependency override
- TestClient with a default Referer for the CSRF origin middleware
- Authenticated client fixtures
"""

from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from blog.config import Settings
from blog.database import get_db
from blog.main import create_app
from blog.models import User, Session as UserSession
from tests.factories import create_session, create_user, make_settings

TEST_PASSWORD = "testpassword123"


# =============================================================================
# Application / Database Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(settings: Settings) -> Generator[FastAPI, None, None]:
    """Application with all tables created on its private database."""
    application = create_app(settings)
    application.state.database.create_all()
    yield application
    application.state.database.dispose()


@pytest.fixture
def db(app: FastAPI) -> Generator[Session, None, None]:
    """Session on the app's database; the app uses the same one during requests."""
    session = app.state.database.session_factory()
    yield session
    session.close()


@pytest.fixture
def auth(app: FastAPI):
    """The app's AuthContext."""
    return app.state.auth


# =============================================================================
# TestClient Fixtures
# =============================================================================


def _client_for(app: FastAPI, db: Session) -> TestClient:
    def override_get_db():
        try:
            yield db
        finally:
            pass  # Don't close - managed by db fixture

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)
    # Set default Referer so CSRF Origin middleware allows requests
    test_client.headers["referer"] = "http://testserver/"
    return test_client


@pytest.fixture
def client(app: FastAPI, db: Session) -> Generator[TestClient, None, None]:
    """Anonymous TestClient."""
    with _client_for(app, db) as test_client:
        yield test_client
        # Close the shared session before lifespan shutdown disposes the engine
        db.close()

    app.dependency_overrides.clear()


# =============================================================================
# Authentication Fixtures
# =============================================================================


@pytest.fixture
def test_user(db: Session) -> User:
    """Create a test user."""
    return create_user(db, email="testuser@example.com", password=TEST_PASSWORD)


@pytest.fixture
def test_session(db: Session, test_user: User) -> UserSession:
    """Create a session row for the test user."""
    return create_session(db, test_user)


@pytest.fixture
def session_cookie(auth, test_session: UserSession) -> str:
    """Signed cookie value for test_session."""
    return auth.sessions.sign(test_session.token)


@pytest.fixture
def auth_client(
    app: FastAPI, db: Session, session_cookie: str, settings: Settings
) -> Generator[TestClient, None, None]:
    """
    Authenticated TestClient for the test user.

    Creates a separate TestClient instance to avoid cookie conflicts.
    """
    with _client_for(app, db) as test_client:
        test_client.cookies.set(settings.session_cookie_name, session_cookie)
        yield test_client
        # Close the shared session before lifespan shutdown disposes the engine
        db.close()

    app.dependency_overrides.clear()
