"""
Authentication service package.

Everything the auth routes need is bundled in an AuthContext that the app
factory builds once and stores on `app.state.auth`:

    from blog.services.auth import AuthContext, get_auth
    from blog.services.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected_route(user: User = Depends(get_current_user)):
        ...
"""
from dataclasses import dataclass

from fastapi import Request

from blog.config import Settings
from blog.services.auth.base import AuthStrategy
from blog.services.auth.credential_store import CredentialStore
from blog.services.auth.local_strategy import LocalStrategy, RegistrationService
from blog.services.auth.passwords import PasswordHasher
from blog.services.auth.session_manager import SessionManager
from blog.services.auth.session_store import (
    InMemorySessionStore,
    SessionStore,
    SqlSessionStore,
)


@dataclass
class AuthContext:
    hasher: PasswordHasher
    credentials: CredentialStore
    strategy: AuthStrategy
    registration: RegistrationService
    sessions: SessionManager


def build_session_store(settings: Settings) -> SessionStore:
    if settings.session_backend == "memory":
        return InMemorySessionStore()
    return SqlSessionStore()


def build_auth_context(settings: Settings, session_store: SessionStore = None) -> AuthContext:
    """Wire the auth collaborators from settings."""
    hasher = PasswordHasher(settings.salt_rounds)
    credentials = CredentialStore()
    sessions = SessionManager(
        store=session_store or build_session_store(settings),
        credentials=credentials,
        secret=settings.session_secret,
        cookie_name=settings.session_cookie_name,
        max_age=settings.session_max_age,
        secure=settings.session_cookie_secure,
    )
    return AuthContext(
        hasher=hasher,
        credentials=credentials,
        strategy=LocalStrategy(credentials, hasher),
        registration=RegistrationService(credentials, hasher),
        sessions=sessions,
    )


def get_auth(request: Request) -> AuthContext:
    """FastAPI dependency returning the app's AuthContext."""
    return request.app.state.auth


__all__ = [
    "AuthContext",
    "AuthStrategy",
    "build_auth_context",
    "build_session_store",
    "get_auth",
]
