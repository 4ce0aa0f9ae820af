import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from blog.api import auth, posts, routes
from blog.config import Settings
from blog.database import Database
from blog.errors import DatastoreError, HashingError, NotFoundError
from blog.middleware import CSRFOriginMiddleware
from blog.services.auth import build_auth_context
from blog.services.auth.dependencies import LoginRequired
from blog.services.auth.session_store import SessionStore
from blog.templating import STATIC_DIR, templates

logger = logging.getLogger(__name__)


async def login_required_handler(request: Request, exc: LoginRequired):
    """Send visitors without a valid session to the registration page."""
    return RedirectResponse(url=exc.location, status_code=status.HTTP_303_SEE_OTHER)


async def not_found_handler(request: Request, exc: NotFoundError):
    return templates.TemplateResponse(
        request,
        "404.html",
        {"user": getattr(request.state, "user", None)},
        status_code=status.HTTP_404_NOT_FOUND,
    )


async def unavailable_handler(request: Request, exc: Exception):
    """
    Last stop for datastore and hashing failures.

    Details go to the log; the visitor only gets a generic redirect.
    """
    logger.error(
        "Request failed: method=%s, path=%s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return RedirectResponse(url="/?error=unavailable", status_code=status.HTTP_303_SEE_OTHER)


def create_app(
    settings: Optional[Settings] = None,
    session_store: Optional[SessionStore] = None,
) -> FastAPI:
    """
    Build the application and everything it depends on.

    Collaborators live on app.state and reach handlers through dependencies.
    """
    settings = settings or Settings()
    if not settings.session_secret:
        raise RuntimeError("SESSION_SECRET must be set")

    database = Database(
        settings.database_url,
        pool_timeout=settings.db_pool_timeout,
        statement_timeout_ms=settings.db_statement_timeout_ms,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        database.dispose()

    app = FastAPI(title="Blog", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.auth = build_auth_context(settings, session_store)

    app.add_middleware(CSRFOriginMiddleware)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    app.add_exception_handler(LoginRequired, login_required_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    for exc_class in (DatastoreError, HashingError, SQLAlchemyError):
        app.add_exception_handler(exc_class, unavailable_handler)

    # Include routers
    app.include_router(routes.router)
    app.include_router(auth.router)
    app.include_router(posts.router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app
