"""Post feed, reader, composer and editor routes."""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from blog.database import get_db
from blog.models.user import User
from blog.services.auth.dependencies import get_current_user, get_optional_user
from blog.services.post_service import PostInput, format_published_date, post_service
from blog.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["posts"])


def _post_input(
    title: str, subtitle: str, text: str, author: str, published: str
) -> PostInput:
    return PostInput(
        title=title,
        subtitle=subtitle,
        text=text,
        author=author,
        published_date=published or date.today().isoformat(),
    )


# =============================================================================
# Pages
# =============================================================================


@router.get("/home", response_class=HTMLResponse)
async def feed(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Post feed."""
    posts = post_service.list_posts(db)
    return templates.TemplateResponse(
        request, "home.html", {"user": user, "posts": posts}
    )


@router.get("/write", response_class=HTMLResponse)
async def composer(
    request: Request,
    error: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
):
    """New post form."""
    return templates.TemplateResponse(
        request,
        "write.html",
        {"user": user, "error": error, "today": date.today().isoformat()},
    )


@router.get("/read/{post_id}", response_class=HTMLResponse)
async def read_post(
    request: Request,
    post_id: int,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Single post, readable without logging in."""
    post = post_service.require_post(db, post_id)
    return templates.TemplateResponse(
        request,
        "read.html",
        {
            "user": user,
            "post": post,
            "published_date": format_published_date(post.published_date),
        },
    )


@router.get("/edit/{post_id}", response_class=HTMLResponse)
async def edit_post_page(
    request: Request,
    post_id: int,
    error: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Edit form for an existing post."""
    post = post_service.require_post(db, post_id)
    return templates.TemplateResponse(
        request,
        "edit.html",
        {
            "user": user,
            "post": post,
            "error": error,
            "published_date": format_published_date(post.published_date),
        },
    )


# =============================================================================
# Mutations (all require a session)
# =============================================================================


@router.post("/submit")
async def submit_post(
    title: str = Form(""),
    subtitle: str = Form(""),
    text: str = Form(""),
    author: str = Form(""),
    published: str = Form("", alias="date"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a post."""
    try:
        data = _post_input(title, subtitle, text, author, published)
    except ValidationError as exc:
        logger.info("Rejected new post from user %s: %s", user.id, exc.errors())
        return RedirectResponse(url="/write?error=invalid_post", status_code=303)

    post = post_service.create_post(db, data)
    logger.info("User %s created post %s", user.id, post.id)
    return RedirectResponse(url="/home", status_code=303)


@router.post("/update/{post_id}")
async def update_post(
    post_id: int,
    title: str = Form(""),
    subtitle: str = Form(""),
    text: str = Form(""),
    author: str = Form(""),
    published: str = Form("", alias="date"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update a post if it exists."""
    try:
        data = _post_input(title, subtitle, text, author, published)
    except ValidationError as exc:
        logger.info("Rejected edit of post %s: %s", post_id, exc.errors())
        return RedirectResponse(
            url=f"/edit/{post_id}?error=invalid_post", status_code=303
        )

    if post_service.update_post(db, post_id, data) is None:
        logger.info("User %s tried to update missing post %s", user.id, post_id)
    return RedirectResponse(url="/home", status_code=303)


@router.post("/delete/{post_id}")
async def delete_post(
    post_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a post."""
    if post_service.delete_post(db, post_id):
        logger.info("User %s deleted post %s", user.id, post_id)
    return RedirectResponse(url="/home", status_code=303)
