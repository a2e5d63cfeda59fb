from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import desc
import logging

from ..core.exceptions import AuthorizationError, DuplicateReviewError, ValidationError
from ..models.review import Review, ReviewQuote, ReviewComment
from ..models.user import User
from ..models.book import Book
from ..schemas.review import ReviewCreate, ReviewUpdate, QuoteSchema
from .crud_book import apply_new_rating, replace_rating, validate_rating
from .utils import commit, get_or_raise, toggle_membership

logger = logging.getLogger(__name__)


def _build_quotes(quotes: list[QuoteSchema]) -> list[ReviewQuote]:
    return [
        ReviewQuote(position=position, text=quote.text, page_number=quote.page_number)
        for position, quote in enumerate(quotes)
    ]


def _require_owner(review: Review, requesting_user_id: int) -> None:
    if review.user_id != requesting_user_id:
        logger.error(f"Unauthorized attempt: User {requesting_user_id} tried to modify review {review.id} owned by {review.user_id}")
        raise AuthorizationError(requesting_user_id, "Review", review.id)


def create_review(db: Session, review: ReviewCreate, user_id: int, book_id: int) -> Review:
    """
    Creates the review of `user_id` for `book_id` and updates the aggregates
    depending on it, in this order:

    1. validate the rating and check that user and book exist;
    2. persist the review (the uq_user_book_review constraint rejects a second
       review for the same pair, even when two requests pass the pre-check);
    3. add the rating to the book aggregate and count the review on the book;
    4. increment the author's `reviews_written`.

    All four steps are committed together.

    Raises:
        ValidationError: Rating outside [1, 5].
        NotFoundError: User or book does not exist.
        DuplicateReviewError: The user already reviewed this book.
    """
    validate_rating(review.rating)
    if not review.title.strip() or not review.content.strip():
        raise ValidationError("title/content", None, "required")
    book = get_or_raise(db, Book, book_id)
    user = get_or_raise(db, User, user_id)

    existing = db.query(Review.id).filter(Review.user_id == user_id, Review.book_id == book_id).first()
    if existing:
        logger.warning(f"User {user_id} already reviewed book {book_id} (review {existing.id}).")
        raise DuplicateReviewError(user_id, book_id)

    db_review = Review(
        rating=review.rating,
        title=review.title,
        content=review.content,
        is_spoiler=review.is_spoiler,
        quotes=_build_quotes(review.quotes),
        user_id=user_id,
        book_id=book_id,
    )
    db.add(db_review)
    try:
        db.flush() # Ensure db_review gets an ID and hits the unique constraint now
    except IntegrityError:
        db.rollback()
        logger.warning(f"Concurrent duplicate review rejected for user {user_id}, book {book_id}.")
        raise DuplicateReviewError(user_id, book_id) from None

    # --- Update aggregates within the SAME transaction ---
    apply_new_rating(db, book, review.rating)
    book.total_reviews = (book.total_reviews or 0) + 1
    user.reviews_written += 1

    commit(db, f"review creation/rating update for book {book_id}")
    db.refresh(db_review)
    logger.info(f"Review {db_review.id} created for book {book_id} by user {user_id}. Average rating updated.")
    return db_review


def update_review_rating(db: Session, review_id: int, new_rating: int) -> Review:
    """
    Changes the rating of a review and swaps its contribution in the book
    aggregate (`total_ratings` is unchanged). Same rating is a no-op.

    Raises:
        ValidationError: Rating outside [1, 5].
        NotFoundError: Review does not exist.
    """
    validate_rating(new_rating)
    db_review = get_or_raise(db, Review, review_id)
    old_rating = db_review.rating
    if old_rating == new_rating:
        return db_review

    db_review.rating = new_rating
    replace_rating(db, db_review.book, old_rating, new_rating)

    commit(db, f"rating update for review {review_id}")
    db.refresh(db_review)
    logger.info(f"Review {review_id} rating changed {old_rating} -> {new_rating}. Average rating for book {db_review.book_id} updated.")
    return db_review


def update_review(db: Session, review_id: int, requesting_user_id: int, update: ReviewUpdate) -> Review:
    """
    Edits a review owned by `requesting_user_id`. A rating change goes through
    `update_review_rating` so the book aggregate stays consistent.

    Raises:
        NotFoundError: Review does not exist.
        AuthorizationError: The requester is not the author.
    """
    db_review = get_or_raise(db, Review, review_id)
    _require_owner(db_review, requesting_user_id)

    if update.title is not None:
        db_review.title = update.title
    if update.content is not None:
        db_review.content = update.content
    if update.is_spoiler is not None:
        db_review.is_spoiler = update.is_spoiler
    if update.quotes is not None:
        db_review.quotes = _build_quotes(update.quotes)

    if update.rating is not None and update.rating != db_review.rating:
        return update_review_rating(db, review_id, update.rating)

    commit(db, f"update of review {review_id}")
    db.refresh(db_review)
    logger.info(f"Review {review_id} updated by user {requesting_user_id}.")
    return db_review


def delete_review(db: Session, review_id: int, requesting_user_id: int) -> None:
    """
    Deletes a review owned by `requesting_user_id` and decrements the book's
    `total_reviews`.

    The review's contribution to `average_rating`/`total_ratings` is kept and
    the author's `reviews_written` is not decremented.

    Raises:
        NotFoundError: Review does not exist.
        AuthorizationError: The requester is not the author.
    """
    db_review = get_or_raise(db, Review, review_id)
    _require_owner(db_review, requesting_user_id)

    book = db_review.book
    db.delete(db_review)
    book.total_reviews = max(0, (book.total_reviews or 0) - 1)

    commit(db, f"deletion of review {review_id}")
    logger.info(f"Review {review_id} deleted by user {requesting_user_id}. Book {book.id} now has {book.total_reviews} reviews.")


def toggle_review_like(db: Session, review_id: int, user_id: int) -> bool:
    """Likes or unlikes a review. Returns True if the user now likes it."""
    db_review = get_or_raise(db, Review, review_id)
    user = get_or_raise(db, User, user_id)
    liked = toggle_membership(db_review.likes, user)
    commit(db, f"like toggle on review {review_id}")
    logger.info(f"User {user_id} {'liked' if liked else 'unliked'} review {review_id}.")
    return liked


def add_review_comment(db: Session, review_id: int, user_id: int, content: str) -> ReviewComment:
    """Appends a comment to a review. Comments are never edited."""
    if not content or not content.strip():
        raise ValidationError("content", content, "required")
    db_review = get_or_raise(db, Review, review_id)
    get_or_raise(db, User, user_id)
    comment = ReviewComment(user_id=user_id, content=content)
    db_review.comments.append(comment)
    commit(db, f"comment on review {review_id}")
    logger.info(f"User {user_id} commented on review {review_id}.")
    return comment


def mark_review_helpful(db: Session, review_id: int, is_helpful: bool) -> Review:
    """Counts one helpful or not-helpful vote."""
    db_review = get_or_raise(db, Review, review_id)
    if is_helpful:
        db_review.helpful += 1
    else:
        db_review.not_helpful += 1
    commit(db, f"helpful vote on review {review_id}")
    return db_review


def get_review_by_id(db: Session, review_id: int) -> Review | None:
    return db.get(Review, review_id)


def get_reviews_for_book(db: Session, book_id: int, skip: int = 0, limit: int = 10) -> list[Review]:
    """Public reviews of a book, newest first."""
    return db.query(Review).\
            filter(Review.book_id == book_id, Review.is_public.is_(True)).\
            order_by(desc(Review.created_at), desc(Review.id)).\
            offset(skip).\
            limit(limit).all()


def get_reviews_by_user(db: Session, user_id: int, skip: int = 0, limit: int = 10) -> list:
    """Public reviews of a user with the reviewed book title.
       Returns a list of Rows with (Review, Book.title).
    """
    return db.query(Review, Book.title).\
            join(Book, Review.book_id == Book.id).\
            filter(Review.user_id == user_id, Review.is_public.is_(True)).\
            order_by(desc(Review.created_at), desc(Review.id)).\
            offset(skip).\
            limit(limit).all()


def get_recent_reviews(db: Session, limit: int = 10) -> list[Review]:
    return db.query(Review).\
            filter(Review.is_public.is_(True)).\
            order_by(desc(Review.created_at), desc(Review.id)).\
            limit(limit).all()
