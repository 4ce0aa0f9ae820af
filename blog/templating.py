"""Shared Jinja2 environment for page rendering."""
from pathlib import Path

from fastapi.templating import Jinja2Templates

from blog.services.post_service import format_published_date

PACKAGE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"
STATIC_DIR = PACKAGE_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["published"] = format_published_date
