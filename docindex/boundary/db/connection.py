"""
Database connection management.

Provides the SQLAlchemy engine and session factory for the SQLite
tracking database.

Dependencies: sqlalchemy, docindex.configs
System role: Tracking database connection lifecycle management
"""

from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from docindex.configs.tracker import TrackerSettings


def get_engine(settings: TrackerSettings) -> Engine:
    """
    Create SQLAlchemy engine for the tracking database.

    An in-memory database uses a single shared connection (StaticPool) so
    every session sees the same data. A file database gets its parent
    directory created on demand.

    Args:
        settings: Tracker configuration

    Returns:
        Engine: Configured SQLAlchemy engine

    Raises:
        ArgumentError: If the database URL is invalid
    """
    connect_args = {"check_same_thread": False}
    if settings.is_memory:
        return create_engine(
            settings.database_url,
            echo=settings.echo_sql,
            poolclass=StaticPool,
            connect_args=connect_args,
        )

    Path(settings.db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
    return create_engine(
        settings.database_url,
        echo=settings.echo_sql,
        connect_args=connect_args,
        pool_pre_ping=True,
    )


def get_session_factory(engine: Engine) -> sessionmaker:
    """
    Create session factory for database operations.

    Sessions are bound to engine with autocommit=False and autoflush=False
    for explicit transaction control.

    Args:
        engine: Engine returned by get_engine

    Returns:
        sessionmaker: Session factory configured for manual transaction control

    Usage:
        SessionFactory = get_session_factory(engine)
        with SessionFactory() as session, session.begin():
            session.add(obj)
    """
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
