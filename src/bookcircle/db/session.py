"""
SQLAlchemy session management for BookCircle.
Creates the engine, the session factory and the declarative base for the ORM
models, and provides a dependency that opens and closes sessions safely.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from bookcircle.core.config import settings

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, echo=settings.SQL_ECHO)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    """
    Provides a database session for use in dependencies (e.g. a web framework).

    Yields:
        Session: SQLAlchemy session.

    Ensures:
        The session is closed after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
