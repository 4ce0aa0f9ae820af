"""Public pages."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from blog.models.user import User
from blog.services.auth.dependencies import get_optional_user
from blog.templating import templates

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    error: Optional[str] = Query(None),
    user: Optional[User] = Depends(get_optional_user),
):
    """Landing page."""
    return templates.TemplateResponse(
        request, "index.html", {"user": user, "error": error}
    )


@router.get("/about", response_class=HTMLResponse)
async def about(request: Request, user: Optional[User] = Depends(get_optional_user)):
    return templates.TemplateResponse(request, "about.html", {"user": user})
