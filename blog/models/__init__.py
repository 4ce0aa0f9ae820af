"""
Database models for the blog.

Import all models here so create_all() sees every table.
"""

from blog.database import Base
from blog.models.user import User
from blog.models.session import Session
from blog.models.post import Post

__all__ = [
    "Base",
    "User",
    "Session",
    "Post",
]
