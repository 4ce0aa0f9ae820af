"""Server-rendered blog with email/password accounts."""

__version__ = "0.1.0"
