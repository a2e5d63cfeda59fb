"""
CRUD operations for the User model (Identity Store).
Includes user registration and lookup, shelf management across the three
mutually exclusive shelves, reading progress and badges.

Increment sites for the user stats kept here:
    books_read -- `move_to_shelf` with the `read` shelf.
`reviews_written` is incremented by `crud_review.create_review`.
"""

import datetime
import logging
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Optional, List, Any, Union

from ..core.enums import Shelf
from ..core.exceptions import InvalidProgressError, NotCurrentlyReadingError, ValidationError
from ..models.book import Book
from ..models.user import User, CurrentlyReading, ShelfEntry, Badge
from ..schemas.user import UserCreate, ShelfMove, ShelvesSchema, ShelfEntrySchema
from .crud_book import validate_rating
from .utils import commit, get_or_raise

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """
    Gets a user by email address.

    Args:
        db (Session): SQLAlchemy session.
        email (str): Email to look up.

    Returns:
        Optional[User]: The user if it exists, None otherwise.
    """
    return db.query(User).filter(User.email == email).first()

def create_user(db: Session, user: UserCreate) -> User:
    """
    Registers a new user. Shelves, stats and badges start empty.

    Args:
        db (Session): SQLAlchemy session.
        user (UserCreate): Profile data of the new user.

    Returns:
        User: The created user.

    Raises:
        IntegrityError: If the email is already registered.
    """
    db_user: User = User(**user.model_dump(mode="json"))
    db.add(db_user)
    commit(db, f"registration of {user.email}")
    db.refresh(db_user)
    logger.info(f"User {db_user.id} registered.")
    return db_user

def get_users(db: Session, skip: int = 0, limit: int = 100) -> List[Any]:
    """
    Lists users with pagination.
    Returns Rows with the public columns only.

    Args:
        db (Session): SQLAlchemy session.
        skip (int): Rows to skip.
        limit (int): Maximum rows to return.

    Returns:
        List[Any]: Rows of (id, name, email, is_active, books_read, created_at).
    """
    return db.query(
        User.id,
        User.name,
        User.email,
        User.is_active,
        User.books_read,
        User.created_at
    ).order_by(User.id).offset(skip).limit(limit).all()

def search_users(db: Session, q: str, skip: int = 0, limit: int = 10) -> List[User]:
    """Active users whose name, bio or location contains `q`, most books read first."""
    return db.query(User).filter(
        User.is_active.is_(True),
        or_(
            User.name.ilike(f"%{q}%"),
            User.bio.ilike(f"%{q}%"),
            User.location.ilike(f"%{q}%")
        )
    ).order_by(User.books_read.desc()).offset(skip).limit(limit).all()

def deactivate_user(db: Session, user_id: int) -> User:
    """Soft-deactivates an account. Users are never hard-deleted."""
    user = get_or_raise(db, User, user_id)
    if user.is_active:
        user.is_active = False
        commit(db, f"deactivation of user {user_id}")
        logger.info(f"User {user_id} deactivated.")
    return user

def add_badge(db: Session, user_id: int, name: str, description: Optional[str] = None,
              icon: Optional[str] = None) -> Badge:
    """Appends a badge; badges are never removed."""
    user = get_or_raise(db, User, user_id)
    badge = Badge(name=name, description=description, icon=icon)
    user.badges.append(badge)
    commit(db, f"badge '{name}' for user {user_id}")
    logger.info(f"User {user_id} earned badge '{name}'.")
    return badge


# --- Shelves ---

def _parse_shelf(shelf_name: Union[str, Shelf]) -> Shelf:
    try:
        return Shelf(shelf_name)
    except ValueError:
        raise ValidationError("shelf", shelf_name, f"one of {[s.value for s in Shelf]}") from None

def _detach_from_shelves(user: User, book_id: int, shelf: Optional[Shelf] = None) -> bool:
    """Drops the book's entry (on `shelf` only, if given). Absence is not an error."""
    removed = False
    for entry in list(user.shelf_entries):
        if entry.book_id == book_id and (shelf is None or entry.shelf == shelf):
            user.shelf_entries.remove(entry)
            removed = True
    return removed

def move_to_shelf(db: Session, user_id: int, book_id: int, shelf_name: Union[str, Shelf],
                  rating: Optional[int] = None) -> User:
    """
    Places a book on one shelf, removing it from the other two first.

    Moving to `read` stores `read_at` and the optional personal rating and
    increments `books_read` on every call, including a book that was already
    read before and moved back.

    Args:
        db (Session): SQLAlchemy session.
        user_id (int): Owner of the shelves.
        book_id (int): Book to place.
        shelf_name (str | Shelf): 'toRead', 'read' or 'dnf'.
        rating (Optional[int]): Personal rating 1-5, `read` shelf only.

    Returns:
        User: The user with updated shelves.

    Raises:
        ValidationError: Unknown shelf name or rating outside [1, 5].
        NotFoundError: User or book does not exist.
    """
    shelf = _parse_shelf(shelf_name)
    if shelf is Shelf.READ and rating is not None:
        validate_rating(rating)
    user = get_or_raise(db, User, user_id)
    get_or_raise(db, Book, book_id)

    if _detach_from_shelves(user, book_id):
        # The delete must reach the database before the new row hits uq_user_book_shelf
        db.flush()

    if shelf is Shelf.READ:
        user.shelf_entries.append(ShelfEntry(
            book_id=book_id,
            shelf=shelf,
            read_at=datetime.datetime.now(datetime.timezone.utc),
            rating=rating
        ))
        user.books_read += 1
    elif shelf is Shelf.TO_READ or shelf is Shelf.DNF:
        user.shelf_entries.append(ShelfEntry(book_id=book_id, shelf=shelf))

    commit(db, f"move of book {book_id} to shelf {shelf.value} for user {user_id}")
    logger.info(f"User {user_id} moved book {book_id} to shelf '{shelf.value}'.")
    return user

def apply_shelf_move(db: Session, user_id: int, move: ShelfMove) -> User:
    """Runs a validated `ShelfMove` command through `move_to_shelf`."""
    return move_to_shelf(db, user_id, move.book_id, move.shelf, rating=move.rating)

def remove_from_shelf(db: Session, user_id: int, shelf_name: Union[str, Shelf], book_id: int) -> bool:
    """
    Removes a book from one shelf. Returns False when it was not on that shelf.
    """
    shelf = _parse_shelf(shelf_name)
    user = get_or_raise(db, User, user_id)
    if not _detach_from_shelves(user, book_id, shelf):
        logger.info(f"Book {book_id} was not on shelf '{shelf.value}' of user {user_id}. No action taken.")
        return False
    commit(db, f"removal of book {book_id} from shelf {shelf.value} for user {user_id}")
    logger.info(f"User {user_id} removed book {book_id} from shelf '{shelf.value}'.")
    return True

def get_shelves(db: Session, user_id: int) -> ShelvesSchema:
    user = get_or_raise(db, User, user_id)
    return ShelvesSchema(
        to_read=user.to_read,
        read=[ShelfEntrySchema.model_validate(entry) for entry in user.read],
        dnf=user.dnf
    )


# --- Reading progress ---

def start_reading(db: Session, user_id: int, book_id: int) -> CurrentlyReading:
    """
    Adds a book to the currently-reading list at 0% progress.
    Returns the existing entry if the book is already there.
    """
    user = get_or_raise(db, User, user_id)
    get_or_raise(db, Book, book_id)
    for entry in user.currently_reading:
        if entry.book_id == book_id:
            return entry
    entry = CurrentlyReading(book_id=book_id, progress=0)
    user.currently_reading.append(entry)
    commit(db, f"start reading of book {book_id} for user {user_id}")
    logger.info(f"User {user_id} started reading book {book_id}.")
    return entry

def update_reading_progress(db: Session, user_id: int, book_id: int, progress: int) -> CurrentlyReading:
    """
    Sets the progress (0-100) of a book in the currently-reading list.

    Raises:
        InvalidProgressError: Progress outside [0, 100].
        NotFoundError: The user does not exist.
        NotCurrentlyReadingError: The book is not in the currently-reading list.
    """
    if isinstance(progress, bool) or not isinstance(progress, int) or not 0 <= progress <= 100:
        raise InvalidProgressError(progress)

    user = get_or_raise(db, User, user_id)
    entry = next((item for item in user.currently_reading if item.book_id == book_id), None)
    if entry is None:
        logger.warning(f"User {user_id} tried to update progress of book {book_id} not in currently reading.")
        raise NotCurrentlyReadingError(user_id, book_id)

    entry.progress = progress
    commit(db, f"progress update of book {book_id} for user {user_id}")
    logger.info(f"User {user_id} progress on book {book_id} set to {progress}%.")
    return entry
