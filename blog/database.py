"""Database engine, session factory and the request-scoped session dependency."""
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


class Database:
    """
    Owns the engine and connection pool shared by all requests.

    Every query goes through the ORM or bound parameters; nothing builds SQL
    from request input.
    """

    def __init__(
        self,
        url: str,
        pool_timeout: int = 10,
        statement_timeout_ms: int = 5000,
    ):
        self.url = make_url(url)
        engine_kwargs = {}

        if self.url.get_backend_name() == "sqlite":
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if self.url.database in (None, "", ":memory:"):
                # A single shared connection keeps the in-memory database alive
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_pre_ping"] = True
            engine_kwargs["pool_timeout"] = pool_timeout
            if self.url.get_backend_name() == "postgresql":
                engine_kwargs["connect_args"] = {
                    "options": f"-c statement_timeout={statement_timeout_ms}"
                }

        self.engine = create_engine(self.url, **engine_kwargs)
        self.session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )

    def create_all(self) -> None:
        # Import models so they register on Base.metadata
        import blog.models  # noqa: F401

        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """Yield a session for the current request and close it afterwards."""
    db = request.app.state.database.session_factory()
    try:
        yield db
    finally:
        db.close()
