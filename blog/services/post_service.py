"""Post CRUD."""
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from blog.errors import NotFoundError
from blog.models.post import Post


class PostInput(BaseModel):
    """Fields accepted by the composer and edit forms."""

    title: str = Field(min_length=1, max_length=255)
    subtitle: Optional[str] = Field(default=None, max_length=255)
    text: str = Field(min_length=1)
    author: Optional[str] = Field(default=None, max_length=255)
    published_date: date

    @field_validator("title", "text")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("subtitle", "author")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


def format_published_date(value: date) -> str:
    """Render a publish date as yyyy-MM-dd."""
    return value.strftime("%Y-%m-%d")


class PostService:
    """Service for blog post operations."""

    @staticmethod
    def list_posts(db: Session) -> List[Post]:
        """All posts, newest publish date first."""
        return (
            db.query(Post)
            .order_by(Post.published_date.desc(), Post.id.desc())
            .all()
        )

    @staticmethod
    def get_post(db: Session, post_id: int) -> Optional[Post]:
        return db.get(Post, post_id)

    @staticmethod
    def require_post(db: Session, post_id: int) -> Post:
        """Like get_post, but raises NotFoundError."""
        post = PostService.get_post(db, post_id)
        if post is None:
            raise NotFoundError("Post not found", post_id=post_id)
        return post

    @staticmethod
    def create_post(db: Session, data: PostInput) -> Post:
        post = Post(**data.model_dump())
        db.add(post)
        db.commit()
        db.refresh(post)
        return post

    @staticmethod
    def update_post(db: Session, post_id: int, data: PostInput) -> Optional[Post]:
        """
        Overwrite every field of an existing post.

        Returns None when the post does not exist.
        """
        post = PostService.get_post(db, post_id)
        if post is None:
            return None
        for field, value in data.model_dump().items():
            setattr(post, field, value)
        db.commit()
        db.refresh(post)
        return post

    @staticmethod
    def delete_post(db: Session, post_id: int) -> bool:
        post = PostService.get_post(db, post_id)
        if post is None:
            return False
        db.delete(post)
        db.commit()
        return True


# Singleton instance
post_service = PostService()
