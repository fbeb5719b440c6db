# File: streamvault/core/database/connection.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from streamvault.core.config.settings import settings


def build_session_factory(database_url: str, echo: bool = False) -> sessionmaker:
    """Creates an engine for the given URL and returns a bound session factory."""
    # check_same_thread=False is needed only for SQLite: workers write from their own threads
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}

    engine = create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args
    )
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


SessionLocal = build_session_factory(settings.DATABASE_URL)
