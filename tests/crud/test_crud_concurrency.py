# tests/crud/test_crud_concurrency.py
import datetime

import pytest
from pytest import approx
from sqlalchemy import create_engine
from sqlalchemy import event as sa_event
from sqlalchemy.orm import sessionmaker

from bookcircle.db.session import Base
import bookcircle.models  # noqa: F401
from bookcircle.crud import create_book, create_event, create_review, create_user, join_event
from bookcircle.core.enums import EventCategory, EventType
from bookcircle.core.exceptions import DuplicateReviewError
from bookcircle.models.book import Book
from bookcircle.models.event import Event, EventAttendee
from bookcircle.models.review import Review
from bookcircle.models.user import User
from bookcircle.schemas.book import BookCreate
from bookcircle.schemas.event import EventCreate, LocationSchema
from bookcircle.schemas.review import ReviewCreate
from bookcircle.schemas.user import UserCreate

# Two sessions need two real connections to the same database, which an
# in-memory StaticPool engine cannot provide.

@pytest.fixture
def two_sessions(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'bookcircle_race.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session_a, session_b = factory(), factory()
    try:
        yield session_a, session_b
    finally:
        session_a.close()
        session_b.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()

@pytest.fixture
def reader_and_book(two_sessions):
    session_a, _ = two_sessions
    user = create_user(session_a, UserCreate(name="Asha", email="asha@example.com"))
    book = create_book(session_a, BookCreate(title="The Guide", author="R. K. Narayan",
                                             description="A guide becomes a holy man."))
    return user.id, book.id

def _run_once_before_flush(session, action):
    """Runs `action` the first time `session` flushes, before its rows are written."""
    state = {"done": False}

    def before_flush(flushing_session, flush_context, instances):
        if not state["done"]:
            state["done"] = True
            action()

    sa_event.listen(session, "before_flush", before_flush)
    return before_flush

def test_review_written_between_check_and_insert(two_sessions, reader_and_book):
    """
    The same user reviews the same book from two sessions. The second session
    commits after the first has passed its duplicate check; the first must
    fail with DuplicateReviewError and leave a single rating contribution.
    """
    session_a, session_b = two_sessions
    user_id, book_id = reader_and_book

    def competing_review():
        create_review(session_b, ReviewCreate(rating=1, title="Slow", content="Did not finish the middle."),
                      user_id, book_id)

    listener = _run_once_before_flush(session_a, competing_review)
    try:
        with pytest.raises(DuplicateReviewError):
            create_review(session_a, ReviewCreate(rating=5, title="Classic", content="Loved it."),
                          user_id, book_id)
    finally:
        sa_event.remove(session_a, "before_flush", listener)

    book = session_a.get(Book, book_id)
    session_a.refresh(book)
    assert book.total_ratings == 1
    assert book.total_reviews == 1
    assert book.average_rating == approx(1.0)
    assert session_a.get(User, user_id).reviews_written == 1
    assert session_a.query(Review).count() == 1

def test_join_recorded_between_check_and_insert(two_sessions, reader_and_book):
    """A registration committed by another session turns the join into a no-op."""
    session_a, session_b = two_sessions
    user_id, _ = reader_and_book
    event = create_event(session_a, EventCreate(
        title="Sunday Reading Club",
        description="Bring a book you loved this month.",
        type=EventType.READING_CLUB,
        category=EventCategory.FICTION,
        date=datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(days=7),
        time="10:00",
        location=LocationSchema(venue="Central Library", address="MG Road", city="Bengaluru", state="Karnataka"),
        max_attendees=5,
    ), user_id)
    event_id = event.id

    def competing_join():
        session_b.add(EventAttendee(event_id=event_id, user_id=user_id))
        session_b.commit()

    listener = _run_once_before_flush(session_a, competing_join)
    try:
        joined = join_event(session_a, event_id, user_id)
    finally:
        sa_event.remove(session_a, "before_flush", listener)

    assert joined.id == event_id
    assert joined.attendee_count == 1
    assert joined.is_attending(user_id)
    assert session_a.query(EventAttendee).filter(EventAttendee.event_id == event_id).count() == 1
    assert session_a.get(Event, event_id).available_spots == 4
