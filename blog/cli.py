"""CLI commands for the blog."""

import argparse
import asyncio
import getpass
import logging
import sys
from typing import Optional

import uvicorn

from blog.config import Settings
from blog.database import Database
from blog.errors import BlogError, ConflictError, ValidationError
from blog.services.auth import build_session_store
from blog.services.auth.credential_store import CredentialStore
from blog.services.auth.passwords import PasswordHasher
from blog.services.auth.session_manager import utcnow


def _database(settings: Settings) -> Database:
    return Database(
        settings.database_url,
        pool_timeout=settings.db_pool_timeout,
        statement_timeout_ms=settings.db_statement_timeout_ms,
    )


def init_db(settings: Settings) -> None:
    """Create any missing tables."""
    database = _database(settings)
    try:
        database.create_all()
    finally:
        database.dispose()
    print("Database tables created.")


def create_user(settings: Settings, email: str, password: Optional[str] = None) -> None:
    """Create a user account from the command line."""
    # Get password if not provided
    if not password:
        password = getpass.getpass("Password: ")
        password_confirm = getpass.getpass("Confirm password: ")
        if password != password_confirm:
            raise ValidationError("Passwords do not match.")
    if not password:
        raise ValidationError("Password must not be empty.")

    credentials = CredentialStore()
    hasher = PasswordHasher(settings.salt_rounds)
    database = _database(settings)
    db = database.session_factory()
    try:
        email = email.strip()
        if credentials.find_by_email(db, email):
            raise ConflictError(f"User with email '{email}' already exists.")
        password_hash = asyncio.run(hasher.hash(password))
        user = credentials.create(db, email, password_hash)
    finally:
        db.close()
        database.dispose()

    print(f"User created successfully: {user.email} (id {user.id})")


def purge_sessions(settings: Settings) -> int:
    """Delete expired sessions."""
    if settings.session_backend != "sql":
        # Memory sessions live inside the server process, out of reach here
        raise ValidationError("purge-sessions needs SESSION_BACKEND=sql.")
    store = build_session_store(settings)
    database = _database(settings)
    db = database.session_factory()
    try:
        count = store.purge_expired(db, utcnow())
    finally:
        db.close()
        database.dispose()
    print(f"Removed {count} expired session(s).")
    return count


def serve(settings: Settings, host: Optional[str] = None, port: Optional[int] = None) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "blog.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


def main(argv=None):
    parser = argparse.ArgumentParser(description="Blog CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create database tables")

    create_user_parser = subparsers.add_parser("create-user", help="Create a user")
    create_user_parser.add_argument("--email", required=True, help="User email address")
    create_user_parser.add_argument(
        "--password", help="User password (will prompt if not provided)"
    )

    subparsers.add_parser("purge-sessions", help="Delete expired sessions")

    serve_parser = subparsers.add_parser("serve", help="Run the web server")
    serve_parser.add_argument("--host", help="Bind address (default: HOST)")
    serve_parser.add_argument("--port", type=int, help="Listen port (default: PORT)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    settings = Settings()

    try:
        if args.command == "init-db":
            init_db(settings)
        elif args.command == "create-user":
            create_user(settings, args.email, args.password)
        elif args.command == "purge-sessions":
            purge_sessions(settings)
        elif args.command == "serve":
            serve(settings, args.host, args.port)
    except BlogError as exc:
        print(f"Error: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
