"""Authentication routes for registration, login and logout."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from blog.database import get_db
from blog.models.user import User
from blog.services.auth import AuthContext, get_auth
from blog.services.auth.dependencies import get_optional_user
from blog.services.auth.outcomes import (
    EMAIL_EXISTS,
    Authenticated,
    Errored,
    Registered,
)
from blog.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

FEED_URL = "/home"


# =============================================================================
# Registration
# =============================================================================


@router.get("/register", response_class=HTMLResponse)
async def register_page(
    request: Request,
    error: Optional[str] = Query(None),
    user: Optional[User] = Depends(get_optional_user),
):
    """Registration page. Redirects to the feed if already logged in."""
    if user:
        return RedirectResponse(url=FEED_URL, status_code=303)

    return templates.TemplateResponse(
        request, "auth/register.html", {"error": error, "user": None}
    )


@router.post("/register")
async def register(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form("", alias="confirmPassword"),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth),
):
    """Create an account and log it in."""
    outcome = await auth.registration.register(db, email, password, confirm_password)

    if not isinstance(outcome, Registered):
        if outcome.reason == EMAIL_EXISTS:
            return RedirectResponse(url="/signIn?error=email_exists", status_code=303)
        return RedirectResponse(
            url=f"/register?error={outcome.reason}", status_code=303
        )

    # Auto-login
    response = RedirectResponse(url=FEED_URL, status_code=303)
    await auth.sessions.create(db, outcome.user, request, response)
    return response


# =============================================================================
# Login / Logout
# =============================================================================


@router.get("/signIn", response_class=HTMLResponse)
async def login_page(
    request: Request,
    error: Optional[str] = Query(None),
    user: Optional[User] = Depends(get_optional_user),
):
    """Login page. Redirects to the feed if already logged in."""
    if user:
        return RedirectResponse(url=FEED_URL, status_code=303)

    return templates.TemplateResponse(
        request, "auth/login.html", {"error": error, "user": None}
    )


@router.post("/signIn")
async def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth),
):
    """Process login form."""
    outcome = await auth.strategy.authenticate(db, email, password)

    if isinstance(outcome, Authenticated):
        response = RedirectResponse(url=FEED_URL, status_code=303)
        await auth.sessions.create(db, outcome.user, request, response)
        return response

    if isinstance(outcome, Errored):
        logger.error("Login could not be completed: %s", outcome.cause)
        return RedirectResponse(url="/register?error=unavailable", status_code=303)

    # Same answer for unknown email and wrong password
    return RedirectResponse(url="/register?error=invalid_credentials", status_code=303)


@router.post("/logout")
async def logout(
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth),
):
    """Logout and clear session."""
    response = RedirectResponse(url="/signIn", status_code=303)
    await auth.sessions.destroy(db, request, response)
    return response
