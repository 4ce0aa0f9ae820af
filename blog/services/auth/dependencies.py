"""FastAPI dependencies for authentication."""
import logging
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from blog.database import get_db
from blog.errors import DatastoreError
from blog.models.user import User
from blog.services.auth import AuthContext, get_auth

logger = logging.getLogger(__name__)

# Where unauthenticated visitors are sent
LOGIN_REDIRECT = "/register"


class LoginRequired(Exception):
    """Raised by guarded routes; the app turns it into a redirect."""

    def __init__(self, location: str = LOGIN_REDIRECT):
        super().__init__(location)
        self.location = location


async def get_optional_user(
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth),
) -> Optional[User]:
    """
    Get the current user if authenticated, None otherwise.

    The result is cached on request.state for the rest of the request.
    If the session lookup itself fails, public pages render anonymously
    and the failure is kept on request.state.session_error for guarded
    routes to re-raise.
    """
    if not getattr(request.state, "user_resolved", False):
        request.state.user = None
        request.state.session_error = None
        try:
            request.state.user = await auth.sessions.resolve(db, request)
        except DatastoreError as exc:
            logger.error(
                "Session lookup failed: path=%s", request.url.path, exc_info=exc
            )
            request.state.session_error = exc
        request.state.user_resolved = True
    return request.state.user


def is_authenticated(request: Request) -> bool:
    """True once get_optional_user has resolved a user for this request."""
    return getattr(request.state, "user", None) is not None


async def get_current_user(
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
) -> User:
    """
    Get the currently authenticated user.

    Redirects to the registration page when there is no valid session.
    Every mutating post route depends on this.
    """
    if request.state.session_error is not None:
        raise request.state.session_error
    if not is_authenticated(request):
        raise LoginRequired()
    return user
