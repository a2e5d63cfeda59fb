"""
CRUD operations for the Book model (Catalog Store).
Includes catalog lookups and the rating-aggregation operations that maintain
`average_rating` and `total_ratings`. The aggregation functions only stage
their changes on the session: the review ledger, which calls them, commits.
"""

import logging
from sqlalchemy.orm import Session
from sqlalchemy import select, or_, cast, String
from typing import List, Optional

from ..core.enums import BookStatus, Genre, Language
from ..core.exceptions import ValidationError
from ..models.book import Book
from ..schemas.book import BookCreate
from .utils import commit

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def validate_rating(rating: int, field: str = "rating") -> int:
    """
    Checks that a rating is an integer star value between 1 and 5.

    Raises:
        ValidationError: If the value is not an int or falls outside [1, 5].
    """
    if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(field, rating, f"{MIN_RATING} <= {field} <= {MAX_RATING}")
    return rating


def apply_new_rating(db: Session, book: Book, rating: int) -> Book:
    """
    Adds one rating contribution to the book's running mean.

    Every call counts as a new contribution; callers are responsible for
    calling it once per new review.

    Args:
        db (Session): SQLAlchemy session.
        book (Book): Book whose aggregate is updated.
        rating (int): New rating, 1 to 5.

    Returns:
        Book: The book with `average_rating` and `total_ratings` updated (not committed).

    Raises:
        ValidationError: If the rating is outside [1, 5].
    """
    validate_rating(rating)
    total = book.total_ratings or 0
    average = book.average_rating or 0.0
    book.average_rating = (average * total + rating) / (total + 1)
    book.total_ratings = total + 1
    db.add(book)
    return book


def replace_rating(db: Session, book: Book, old_rating: int, new_rating: int) -> Book:
    """
    Swaps an existing contribution for a new value, keeping `total_ratings`.

    Computes `(average * total - old + new) / total`. A book without any
    recorded contribution gets the new rating added instead.

    Raises:
        ValidationError: If `new_rating` is outside [1, 5].
    """
    validate_rating(new_rating)
    total = book.total_ratings or 0
    if total == 0:
        return apply_new_rating(db, book, new_rating)
    average = book.average_rating or 0.0
    new_average = (average * total - old_rating + new_rating) / total
    # Clamp float drift at the 0-5 boundaries
    book.average_rating = min(float(MAX_RATING), max(0.0, new_average))
    db.add(book)
    return book


def create_book(db: Session, book: BookCreate) -> Book:
    """
    Adds a book to the catalog. Aggregates start at zero.

    Args:
        db (Session): SQLAlchemy session.
        book (BookCreate): Catalog metadata.

    Returns:
        Book: The created book.
    """
    data = book.model_dump(mode="json")
    db_book = Book(**data)
    db.add(db_book)
    commit(db, f"creation of book '{book.title}'")
    db.refresh(db_book)
    logger.info(f"Book {db_book.id} '{db_book.title}' added to the catalog.")
    return db_book


def search_books(
    db: Session,
    title: Optional[str] = None,
    author: Optional[str] = None,
    query: Optional[str] = None,
    limit: int = 10
) -> List[Book]:
    """
    Looks up active books by title, author or a general term.

    Args:
        db (Session): SQLAlchemy session.
        title (Optional[str]): Partial, case-insensitive title match.
        author (Optional[str]): Partial, case-insensitive author match.
        query (Optional[str]): Term matched against title, author or description.
        limit (int): Maximum number of results.

    Returns:
        List[Book]: Matching books, best rated first.
    """
    stmt = select(Book).where(Book.status == BookStatus.ACTIVE.value)
    filters = []

    if query:
        filters.append(or_(
            Book.title.ilike(f"%{query}%"),
            Book.author.ilike(f"%{query}%"),
            Book.description.ilike(f"%{query}%")
        ))
    else:
        if title:
            filters.append(Book.title.ilike(f"%{title}%"))
        if author:
            filters.append(Book.author.ilike(f"%{author}%"))

    if filters:
        stmt = stmt.where(*filters)

    stmt = stmt.order_by(Book.average_rating.desc()).limit(limit)
    return db.execute(stmt).scalars().all()


def get_book_by_id(db: Session, book_id: int) -> Optional[Book]:
    return db.get(Book, book_id)


def get_book_by_isbn(db: Session, isbn: str) -> Optional[Book]:
    stmt = select(Book).where(Book.isbn == isbn)
    return db.execute(stmt).scalars().first()


def get_popular_books(db: Session, limit: int = 10) -> List[Book]:
    """Active books flagged popular, by average rating then number of ratings."""
    stmt = (
        select(Book)
        .where(Book.is_popular.is_(True), Book.status == BookStatus.ACTIVE.value)
        .order_by(Book.average_rating.desc(), Book.total_ratings.desc())
        .limit(limit)
    )
    return db.execute(stmt).scalars().all()


def get_indian_books(db: Session, limit: int = 20) -> List[Book]:
    stmt = (
        select(Book)
        .where(Book.is_indian.is_(True), Book.status == BookStatus.ACTIVE.value)
        .order_by(Book.average_rating.desc())
        .limit(limit)
    )
    return db.execute(stmt).scalars().all()


def get_featured_books(db: Session, limit: int = 6) -> List[Book]:
    stmt = (
        select(Book)
        .where(Book.is_featured.is_(True), Book.status == BookStatus.ACTIVE.value)
        .order_by(Book.average_rating.desc())
        .limit(limit)
    )
    return db.execute(stmt).scalars().all()


def _genre_filter(genre: str):
    # genres is a JSON array; match the quoted value in its text form
    return cast(Book.genres, String).like(f'%"{Genre(genre).value}"%')


def get_books_by_genre(db: Session, genre: Genre, skip: int = 0, limit: int = 12) -> List[Book]:
    """Active books tagged with `genre`, best rated first."""
    stmt = (
        select(Book)
        .where(_genre_filter(genre), Book.status == BookStatus.ACTIVE.value)
        .order_by(Book.average_rating.desc())
        .offset(skip)
        .limit(limit)
    )
    return db.execute(stmt).scalars().all()


def get_books_by_author(db: Session, author: str, skip: int = 0, limit: int = 12) -> List[Book]:
    """Active books whose author contains `author`, newest publication first."""
    stmt = (
        select(Book)
        .where(Book.author.ilike(f"%{author}%"), Book.status == BookStatus.ACTIVE.value)
        .order_by(Book.publication_year.desc())
        .offset(skip)
        .limit(limit)
    )
    return db.execute(stmt).scalars().all()


def list_genres(db: Session) -> List[str]:
    """Distinct genres used by active books, sorted."""
    stmt = select(Book.genres).where(Book.status == BookStatus.ACTIVE.value)
    genres = set()
    for book_genres in db.execute(stmt).scalars():
        genres.update(book_genres or [])
    return sorted(genres)


def list_languages(db: Session) -> List[str]:
    stmt = (
        select(Book.language)
        .where(Book.status == BookStatus.ACTIVE.value)
        .distinct()
        .order_by(Book.language)
    )
    return db.execute(stmt).scalars().all()


BOOK_SORT_COLUMNS = {
    "rating": Book.average_rating,
    "title": Book.title,
    "author": Book.author,
    "year": Book.publication_year,
    "created": Book.created_at,
}


def list_books(
    db: Session,
    genre: Optional[Genre] = None,
    language: Optional[Language] = None,
    is_indian: Optional[bool] = None,
    sort_by: str = "created",
    order: str = "desc",
    skip: int = 0,
    limit: int = 12
) -> List[Book]:
    """
    Catalog listing with optional filters and a sort key.

    Args:
        db (Session): SQLAlchemy session.
        genre (Optional[Genre]): Only books tagged with this genre.
        language (Optional[Language]): Only books in this language.
        is_indian (Optional[bool]): Filter on the Indian-literature flag.
        sort_by (str): 'rating', 'title', 'author', 'year' or 'created';
            unknown keys sort by creation date.
        order (str): 'asc' or 'desc'.
        skip (int): Rows to skip.
        limit (int): Maximum rows to return.

    Returns:
        List[Book]: One page of active books.
    """
    stmt = select(Book).where(Book.status == BookStatus.ACTIVE.value)
    if genre is not None:
        stmt = stmt.where(_genre_filter(genre))
    if language is not None:
        stmt = stmt.where(Book.language == Language(language).value)
    if is_indian is not None:
        stmt = stmt.where(Book.is_indian.is_(is_indian))

    column = BOOK_SORT_COLUMNS.get(sort_by, Book.created_at)
    direction = column.asc() if order == "asc" else column.desc()
    stmt = stmt.order_by(direction, Book.id.asc() if order == "asc" else Book.id.desc())
    return db.execute(stmt.offset(skip).limit(limit)).scalars().all()
