# tests/crud/test_crud_review.py
import pytest
from pytest import approx # Import approx for float comparison

from bookcircle.crud import (
    create_review,
    update_review_rating,
    update_review,
    delete_review,
    toggle_review_like,
    add_review_comment,
    mark_review_helpful,
    get_review_by_id,
    get_reviews_for_book,
    get_reviews_by_user,
    get_recent_reviews,
)
from bookcircle.core.exceptions import (
    AuthorizationError,
    DuplicateReviewError,
    NotFoundError,
    ValidationError,
)
from bookcircle.models.review import Review
from bookcircle.schemas.review import ReviewCreate, ReviewUpdate, QuoteSchema

def _review_in(rating=4, **kwargs):
    return ReviewCreate(
        rating=rating,
        title=kwargs.pop("title", "A fine read"),
        content=kwargs.pop("content", "Enjoyed every chapter."),
        **kwargs
    )

def test_create_review_crud(db_session, test_user, test_book):
    """Test the create_review CRUD function and its aggregate updates."""
    review_in = _review_in(5, quotes=[QuoteSchema(text="Opening line", page_number=1)])

    created_review = create_review(db=db_session, review=review_in,
                                   user_id=test_user.id, book_id=test_book.id)

    assert created_review.id is not None
    assert created_review.rating == 5
    assert created_review.user_id == test_user.id
    assert created_review.book_id == test_book.id
    assert [quote.text for quote in created_review.quotes] == ["Opening line"]

    db_session.refresh(test_book)
    db_session.refresh(test_user)
    assert test_book.average_rating == approx(5.0)
    assert test_book.total_ratings == 1
    assert test_book.total_reviews == 1
    assert test_user.reviews_written == 1

def test_average_rating_is_mean_of_all_reviews(db_session, make_user, test_book):
    ratings = [5, 3, 4, 1]
    for rating in ratings:
        create_review(db_session, _review_in(rating), make_user().id, test_book.id)

    db_session.refresh(test_book)
    assert test_book.average_rating == approx(sum(ratings) / len(ratings))
    assert test_book.total_ratings == len(ratings)
    assert test_book.total_reviews == len(ratings)

def test_create_review_duplicate(db_session, test_user, test_book):
    """A second review by the same user for the same book is rejected untouched."""
    create_review(db_session, _review_in(4), test_user.id, test_book.id)

    with pytest.raises(DuplicateReviewError) as exc_info:
        create_review(db_session, _review_in(1), test_user.id, test_book.id)

    assert exc_info.value.user_id == test_user.id
    assert exc_info.value.book_id == test_book.id
    db_session.refresh(test_book)
    db_session.refresh(test_user)
    assert test_book.average_rating == approx(4.0)
    assert test_book.total_ratings == 1
    assert test_user.reviews_written == 1
    assert db_session.query(Review).count() == 1

def test_create_review_invalid_rating(db_session, test_user, test_book):
    # model_construct skips schema validation so the core check is exercised
    review_in = ReviewCreate.model_construct(rating=6, title="t", content="c", quotes=[], is_spoiler=False)

    with pytest.raises(ValidationError) as exc_info:
        create_review(db_session, review_in, test_user.id, test_book.id)

    assert exc_info.value.field == "rating"
    db_session.refresh(test_book)
    assert test_book.total_ratings == 0
    assert db_session.query(Review).count() == 0

def test_create_review_unknown_book(db_session, test_user):
    with pytest.raises(NotFoundError) as exc_info:
        create_review(db_session, _review_in(3), test_user.id, 9999)
    assert exc_info.value.entity == "Book"

def test_create_review_unknown_user(db_session, test_book):
    with pytest.raises(NotFoundError) as exc_info:
        create_review(db_session, _review_in(3), 9999, test_book.id)
    assert exc_info.value.entity == "User"

def test_update_review_rating(db_session, test_user, test_user_2, test_book):
    first = create_review(db_session, _review_in(2), test_user.id, test_book.id)
    create_review(db_session, _review_in(4), test_user_2.id, test_book.id)

    updated = update_review_rating(db_session, first.id, 5)

    assert updated.rating == 5
    db_session.refresh(test_book)
    assert test_book.total_ratings == 2 # unchanged
    assert test_book.average_rating == approx(4.5)

def test_update_review_rating_same_value_is_noop(db_session, test_user, test_book):
    review = create_review(db_session, _review_in(3), test_user.id, test_book.id)

    update_review_rating(db_session, review.id, 3)

    db_session.refresh(test_book)
    assert test_book.average_rating == approx(3.0)
    assert test_book.total_ratings == 1

def test_update_review_by_owner(db_session, test_user, test_book):
    review = create_review(db_session, _review_in(2), test_user.id, test_book.id)

    updated = update_review(db_session, review.id, test_user.id,
                            ReviewUpdate(title="Second thoughts", rating=4, is_spoiler=True))

    assert updated.title == "Second thoughts"
    assert updated.rating == 4
    assert updated.is_spoiler is True
    db_session.refresh(test_book)
    assert test_book.average_rating == approx(4.0)

def test_update_review_by_other_user(db_session, test_user, test_user_2, test_book):
    review = create_review(db_session, _review_in(2), test_user.id, test_book.id)

    with pytest.raises(AuthorizationError):
        update_review(db_session, review.id, test_user_2.id, ReviewUpdate(title="Hijack"))

def test_delete_review_keeps_rating_contribution(db_session, test_user, test_book):
    """Deleting decrements total_reviews only; the rating aggregate keeps the contribution."""
    review = create_review(db_session, _review_in(5), test_user.id, test_book.id)

    delete_review(db_session, review.id, test_user.id)

    assert get_review_by_id(db_session, review.id) is None
    db_session.refresh(test_book)
    db_session.refresh(test_user)
    assert test_book.total_reviews == 0
    assert test_book.total_ratings == 1
    assert test_book.average_rating == approx(5.0)
    assert test_user.reviews_written == 1

def test_delete_review_by_other_user(db_session, test_user, test_user_2, test_book):
    review = create_review(db_session, _review_in(5), test_user.id, test_book.id)

    with pytest.raises(AuthorizationError):
        delete_review(db_session, review.id, test_user_2.id)

    assert get_review_by_id(db_session, review.id) is not None

def test_delete_missing_review(db_session, test_user):
    with pytest.raises(NotFoundError):
        delete_review(db_session, 12345, test_user.id)

def test_toggle_review_like_twice_restores_state(db_session, test_user, test_user_2, test_book):
    review = create_review(db_session, _review_in(4), test_user.id, test_book.id)

    assert toggle_review_like(db_session, review.id, test_user_2.id) is True
    db_session.refresh(review)
    assert review.like_count == 1

    assert toggle_review_like(db_session, review.id, test_user_2.id) is False
    db_session.refresh(review)
    assert review.like_count == 0

def test_add_review_comment(db_session, test_user, test_user_2, test_book):
    review = create_review(db_session, _review_in(4), test_user.id, test_book.id)

    comment = add_review_comment(db_session, review.id, test_user_2.id, "Great point about the ending.")

    assert comment.id is not None
    db_session.refresh(review)
    assert review.comment_count == 1
    assert review.comments[0].user_id == test_user_2.id

def test_add_review_comment_empty(db_session, test_user, test_book):
    review = create_review(db_session, _review_in(4), test_user.id, test_book.id)

    with pytest.raises(ValidationError):
        add_review_comment(db_session, review.id, test_user.id, "   ")

def test_mark_review_helpful(db_session, test_user, test_book):
    review = create_review(db_session, _review_in(4), test_user.id, test_book.id)

    mark_review_helpful(db_session, review.id, True)
    mark_review_helpful(db_session, review.id, True)
    updated = mark_review_helpful(db_session, review.id, False)

    assert updated.helpful == 2
    assert updated.not_helpful == 1

def test_review_listings(db_session, test_user, test_user_2, test_book):
    create_review(db_session, _review_in(4), test_user.id, test_book.id)
    create_review(db_session, _review_in(2), test_user_2.id, test_book.id)

    for_book = get_reviews_for_book(db_session, test_book.id)
    assert {review.user_id for review in for_book} == {test_user.id, test_user_2.id}

    by_user = get_reviews_by_user(db_session, test_user.id)
    assert len(by_user) == 1
    review, book_title = by_user[0]
    assert review.rating == 4
    assert book_title == test_book.title

    assert len(get_recent_reviews(db_session)) == 2
