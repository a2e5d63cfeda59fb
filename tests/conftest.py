# tests/conftest.py
import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Importing the package registers every model with Base
from bookcircle.db.session import Base
import bookcircle.models  # noqa: F401
from bookcircle.crud import create_user, create_book
from bookcircle.schemas.user import UserCreate
from bookcircle.schemas.book import BookCreate

# --- Test Database Setup ---
# In-memory SQLite shared through a single connection (StaticPool),
# rebuilt for every test so no data leaks between tests.
TEST_DATABASE_URL = "sqlite:///:memory:"

@pytest.fixture(scope="function")
def db_engine():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture(scope="function")
def db_session(db_engine):
    """Provides a session bound to the per-test database."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)()
    try:
        yield session # Test function runs here
    finally:
        session.close()

# --- Shared entity factories ---

@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make_user(name=None, **kwargs):
        counter["n"] += 1
        n = counter["n"]
        return create_user(db_session, UserCreate(
            name=name or f"Reader {n}",
            email=kwargs.pop("email", f"reader{n}@example.com"),
            **kwargs
        ))
    return _make_user

@pytest.fixture
def make_book(db_session):
    counter = {"n": 0}

    def _make_book(title=None, **kwargs):
        counter["n"] += 1
        n = counter["n"]
        return create_book(db_session, BookCreate(
            title=title or f"Test Book {n}",
            author=kwargs.pop("author", "Test Author"),
            description=kwargs.pop("description", "A book used in tests."),
            isbn=kwargs.pop("isbn", f"97800000000{n:02d}"),
            **kwargs
        ))
    return _make_book

@pytest.fixture
def test_user(make_user):
    return make_user("Asha")

@pytest.fixture
def test_user_2(make_user):
    return make_user("Ravi")

@pytest.fixture
def test_book(make_book):
    return make_book("The Guide", author="R. K. Narayan")

@pytest.fixture
def next_week():
    return datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(days=7)
