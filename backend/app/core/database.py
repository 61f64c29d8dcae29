from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.core.config import settings


def engine_options(dsn: str) -> dict[str, Any]:
    """Engine keyword arguments for a DSN.

    SQLite connections may cross threads. Server databases pre-ping pooled
    connections before handing them out.
    """
    if dsn.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.APP_DATABASE_DSN, **engine_options(settings.APP_DATABASE_DSN))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; routes and the services they build share it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
