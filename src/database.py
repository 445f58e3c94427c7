"""Database configuration and session management."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from settings import get_settings

# Create Base class for declarative models
Base = declarative_base()


def make_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections may be shared across threads."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args)


settings = get_settings()

# Create SQLAlchemy engine
engine = make_engine(settings.database_url, echo=settings.sql_echo)

# Create SessionLocal class for database sessions
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create any missing tables."""
    import models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(bind=bind)

