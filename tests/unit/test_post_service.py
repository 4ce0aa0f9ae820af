"""Unit tests for PostService."""
from datetime import date

import pytest
from pydantic import ValidationError
from sqlalchemy.orm import Session

from blog.errors import NotFoundError
from blog.models import Post
from blog.services.post_service import PostInput, format_published_date, post_service
from tests.factories import create_post


def post_input(**overrides) -> PostInput:
    values = {
        "title": "Title",
        "subtitle": "Subtitle",
        "text": "Text",
        "author": "Author",
        "published_date": "2024-03-09",
    }
    values.update(overrides)
    return PostInput(**values)


class TestPostInput:
    """Validation of composer/editor input."""

    def test_parses_date(self):
        assert post_input().published_date == date(2024, 3, 9)

    @pytest.mark.parametrize("field", ["title", "text"])
    def test_blank_required_field(self, field):
        with pytest.raises(ValidationError):
            post_input(**{field: "   "})

    def test_invalid_date(self):
        with pytest.raises(ValidationError):
            post_input(published_date="09/03/2024")

    def test_blank_optional_fields_become_none(self):
        data = post_input(subtitle="  ", author="")

        assert data.subtitle is None
        assert data.author is None


class TestCrud:
    """Tests for create, read, update and delete."""

    def test_create_post(self, db: Session):
        post = post_service.create_post(db, post_input())

        assert post.id is not None
        assert db.get(Post, post.id).title == "Title"

    def test_list_posts_newest_first(self, db: Session):
        older = create_post(db, title="older", published_date=date(2023, 1, 1))
        newer = create_post(db, title="newer", published_date=date(2024, 1, 1))

        posts = post_service.list_posts(db)

        assert [p.id for p in posts] == [newer.id, older.id]

    def test_get_post_missing(self, db: Session):
        assert post_service.get_post(db, 12345) is None

    def test_require_post_missing_raises(self, db: Session):
        with pytest.raises(NotFoundError):
            post_service.require_post(db, 12345)

    def test_update_post(self, db: Session):
        post = create_post(db)

        updated = post_service.update_post(
            db, post.id, post_input(title="New title", published_date="2025-12-31")
        )

        assert updated.title == "New title"
        assert updated.published_date == date(2025, 12, 31)

    def test_update_missing_post(self, db: Session):
        assert post_service.update_post(db, 12345, post_input()) is None
        assert db.query(Post).count() == 0

    def test_delete_post(self, db: Session):
        post = create_post(db)

        assert post_service.delete_post(db, post.id) is True
        assert db.query(Post).count() == 0

    def test_delete_missing_post(self, db: Session):
        assert post_service.delete_post(db, 12345) is False


def test_format_published_date():
    assert format_published_date(date(2024, 3, 9)) == "2024-03-09"
