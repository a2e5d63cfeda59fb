"""
Seeds a development database for BookCircle with Faker data.

Creates books, users, reviews, shelf placements, discussions and events,
always through the CRUD functions so every derived counter (average rating,
review totals, books read) is maintained exactly as in normal operation.

Usage:
    python scripts/generate_fake_data.py

The target database is taken from DATABASE_URL (see `.env.example`); the
tables are created if they do not exist yet.
"""

import datetime
import random
import logging
from faker import Faker
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional

from bookcircle.core.config import settings
from bookcircle.core.enums import DiscussionCategory, EventCategory, EventType, Genre, Shelf
from bookcircle.core.exceptions import BookCircleError
from bookcircle.db.session import Base, SessionLocal, engine
import bookcircle.models  # noqa: F401
from bookcircle.crud import (
    add_reply,
    create_book,
    create_discussion,
    create_event,
    create_review,
    create_user,
    get_user_by_email,
    join_event,
    mark_interested,
    move_to_shelf,
    start_reading,
    update_reading_progress,
)
from bookcircle.schemas.book import BookCreate
from bookcircle.schemas.discussion import DiscussionCreate
from bookcircle.schemas.event import EventCreate, LocationSchema
from bookcircle.schemas.review import ReviewCreate, QuoteSchema
from bookcircle.schemas.user import UserCreate

logging.basicConfig(level=settings.LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

NUM_FAKE_BOOKS: int = 40
NUM_FAKE_USERS: int = 30
MAX_REVIEWS_PER_USER: int = 8
MIN_REVIEWS_PER_USER: int = 1
NUM_FAKE_DISCUSSIONS: int = 15
NUM_FAKE_EVENTS: int = 10
STATES: List[str] = ["Karnataka", "Maharashtra", "Tamil Nadu", "Delhi", "West Bengal", "Kerala"]

fake = Faker(['en_IN', 'en_US'])


def _create_books(db: Session) -> List[int]:
    book_ids: List[int] = []
    for i in range(NUM_FAKE_BOOKS):
        book_in = BookCreate(
            title=fake.sentence(nb_words=random.randint(2, 5)).rstrip("."),
            author=fake.name(),
            description=fake.paragraph(nb_sentences=3),
            isbn=fake.unique.isbn13(separator=""),
            genres=random.sample(list(Genre), random.randint(1, 3)),
            publication_year=random.randint(1950, datetime.date.today().year),
            page_count=random.randint(80, 900),
            is_indian=random.random() < 0.4,
            is_popular=random.random() < 0.2,
        )
        book = create_book(db, book_in)
        book_ids.append(book.id)
        logger.debug(f"  ({i+1}/{NUM_FAKE_BOOKS}) Book created: {book.title} (ID: {book.id})")
    return book_ids


def _create_users(db: Session) -> List[int]:
    user_ids: List[int] = []
    for i in range(NUM_FAKE_USERS):
        fake_email: str = fake.unique.safe_email()
        existing_user = get_user_by_email(db, email=fake_email)
        if existing_user:
            logger.info(f"  ({i+1}/{NUM_FAKE_USERS}) User found: {existing_user.email} (ID: {existing_user.id})")
            user_ids.append(existing_user.id)
            continue

        user_in = UserCreate(
            name=fake.first_name(),
            email=fake_email,
            location=fake.city(),
            bio=fake.sentence(),
            favorite_genres=random.sample(list(Genre), random.randint(1, 4)),
        )
        try:
            new_user = create_user(db=db, user=user_in)
            user_ids.append(new_user.id)
            logger.info(f"  ({i+1}/{NUM_FAKE_USERS}) User created: {new_user.email} (ID: {new_user.id})")
        except IntegrityError:
            logger.warning(f"  ({i+1}/{NUM_FAKE_USERS}) {fake_email} already registered, skipping.")
    return user_ids


def _create_reviews_and_shelves(db: Session, user_ids: List[int], book_ids: List[int]) -> int:
    total_reviews_added: int = 0
    for user_id in user_ids:
        count: int = random.randint(MIN_REVIEWS_PER_USER, min(MAX_REVIEWS_PER_USER, len(book_ids)))
        selected_book_ids: List[int] = random.sample(book_ids, count)

        for book_id in selected_book_ids:
            rating: int = random.randint(1, 5)
            quotes = [QuoteSchema(text=fake.sentence(), page_number=random.randint(1, 300))] if random.random() < 0.3 else []
            review_in = ReviewCreate(
                rating=rating,
                title=fake.sentence(nb_words=4).rstrip("."),
                content=fake.paragraph(nb_sentences=random.randint(1, 4)),
                quotes=quotes,
                is_spoiler=random.random() < 0.1,
            )
            try:
                create_review(db=db, review=review_in, user_id=user_id, book_id=book_id)
                move_to_shelf(db, user_id, book_id, Shelf.READ, rating=rating)
                total_reviews_added += 1
            except BookCircleError as e:
                logger.warning(f"  Skipped review of book {book_id} by user {user_id}: {e}")

        remaining = [book_id for book_id in book_ids if book_id not in selected_book_ids]
        if remaining:
            move_to_shelf(db, user_id, random.choice(remaining), Shelf.TO_READ)
            reading = random.choice(remaining)
            start_reading(db, user_id, reading)
            update_reading_progress(db, user_id, reading, random.randint(0, 100))
    return total_reviews_added


def _create_discussions(db: Session, user_ids: List[int], book_ids: List[int]) -> None:
    for _ in range(NUM_FAKE_DISCUSSIONS):
        discussion = create_discussion(db, DiscussionCreate(
            title=fake.sentence(nb_words=6),
            content=fake.paragraph(nb_sentences=3),
            category=random.choice(list(DiscussionCategory)),
            tags=fake.words(nb=random.randint(0, 3)),
            book_id=random.choice(book_ids) if random.random() < 0.5 else None,
        ), random.choice(user_ids))
        for author_id in random.sample(user_ids, random.randint(0, min(5, len(user_ids)))):
            add_reply(db, discussion.id, author_id, fake.paragraph(nb_sentences=2))


def _create_events(db: Session, user_ids: List[int]) -> None:
    for _ in range(NUM_FAKE_EVENTS):
        event = create_event(db, EventCreate(
            title=fake.sentence(nb_words=5).rstrip("."),
            description=fake.paragraph(nb_sentences=2),
            type=random.choice(list(EventType)),
            category=random.choice(list(EventCategory)),
            date=datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(days=random.randint(1, 60)),
            time=f"{random.randint(9, 19)}:00",
            location=LocationSchema(
                venue=fake.company(),
                address=fake.street_address(),
                city=fake.city(),
                state=random.choice(STATES),
            ),
            max_attendees=random.choice([None, 5, 10, 25]),
        ), random.choice(user_ids))
        for user_id in random.sample(user_ids, random.randint(0, min(12, len(user_ids)))):
            try:
                join_event(db, event.id, user_id)
            except BookCircleError as e:
                logger.info(f"  User {user_id} could not join event {event.id}: {e}")
                mark_interested(db, event.id, user_id)


def generate_data() -> None:
    """
    Seeds every store with fake data.

    Phases run in dependency order: catalog, users, reviews and shelves,
    discussions, events. A failing phase rolls back its pending changes and
    stops the run.
    """
    logger.info("=============================================")
    logger.info(" Starting fake data generation")
    logger.info("=============================================")

    if not settings.is_development:
        logger.error(f"Refusing to seed a {settings.ENVIRONMENT} database.")
        return

    Base.metadata.create_all(bind=engine)
    db: Optional[Session] = None

    try:
        db = SessionLocal()

        logger.info(f"--- Phase 1: Creating {NUM_FAKE_BOOKS} books ---")
        book_ids = _create_books(db)

        logger.info(f"--- Phase 2: Creating/Checking {NUM_FAKE_USERS} users ---")
        user_ids = _create_users(db)
        if not user_ids:
            logger.error("No users could be created or found. Aborting.")
            return

        logger.info(f"--- Phase 3: Reviews ({MIN_REVIEWS_PER_USER}-{MAX_REVIEWS_PER_USER} per user) and shelves ---")
        total_reviews_added = _create_reviews_and_shelves(db, user_ids, book_ids)
        logger.info(f"--- Phase 3 completed: {total_reviews_added} reviews added ---")

        logger.info(f"--- Phase 4: Creating {NUM_FAKE_DISCUSSIONS} discussions ---")
        _create_discussions(db, user_ids, book_ids)

        logger.info(f"--- Phase 5: Creating {NUM_FAKE_EVENTS} events ---")
        _create_events(db, user_ids)

    except Exception as e:
        logger.exception(f"CRITICAL error during data generation: {e}")
        if db:
            db.rollback()
        raise
    finally:
        if db:
            logger.info("Closing database session.")
            db.close()

if __name__ == "__main__":
    generate_data()
    logger.info("============================================")
    logger.info(" Fake data generation finished")
    logger.info("============================================")
