# tests/crud/test_crud_user.py
import pytest
from sqlalchemy.exc import IntegrityError

from bookcircle.crud import (
    create_user,
    get_user,
    get_user_by_email,
    get_users,
    search_users,
    deactivate_user,
    add_badge,
    move_to_shelf,
    apply_shelf_move,
    remove_from_shelf,
    get_shelves,
    start_reading,
    update_reading_progress,
)
from bookcircle.core.enums import Genre, Shelf
from bookcircle.core.exceptions import (
    InvalidProgressError,
    NotCurrentlyReadingError,
    NotFoundError,
    ValidationError,
)
from bookcircle.schemas.user import ShelfMove, UserCreate

def _shelves_of(user, book_id):
    return [entry.shelf for entry in user.shelf_entries if entry.book_id == book_id]

def test_create_user(db_session):
    """Test registering a user through the CRUD layer."""
    user_in = UserCreate(
        name="Meera",
        email="meera@example.com",
        favorite_genres=[Genre.POETRY, Genre.MYTHOLOGY, Genre.POETRY],
    )

    user = create_user(db_session, user_in)

    assert user.id is not None
    assert user.favorite_genres == ["Poetry", "Mythology"]
    assert user.books_read == 0
    assert get_user(db_session, user.id) == user
    assert get_user_by_email(db_session, "meera@example.com") == user

def test_create_user_duplicate_email(db_session, test_user):
    with pytest.raises(IntegrityError):
        create_user(db_session, UserCreate(name="Copy", email=test_user.email))

def test_get_users_and_search(db_session, make_user):
    make_user("Kiran", location="Mysore")
    make_user("Divya", bio="Loves crime fiction")

    rows = get_users(db_session)
    assert [row.name for row in rows] == ["Kiran", "Divya"]

    assert [user.name for user in search_users(db_session, "mysore")] == ["Kiran"]
    assert [user.name for user in search_users(db_session, "crime")] == ["Divya"]

def test_deactivate_user(db_session, test_user):
    deactivate_user(db_session, test_user.id)

    db_session.refresh(test_user)
    assert test_user.is_active is False
    assert search_users(db_session, test_user.name) == []

def test_add_badge(db_session, test_user):
    add_badge(db_session, test_user.id, "First Review", "Wrote a review", "star")
    add_badge(db_session, test_user.id, "Bookworm")

    db_session.refresh(test_user)
    assert [badge.name for badge in test_user.badges] == ["First Review", "Bookworm"]

def test_move_to_shelf_keeps_shelves_exclusive(db_session, test_user, test_book):
    """A book moves between shelves and is only ever on one of them."""
    move_to_shelf(db_session, test_user.id, test_book.id, "toRead")
    assert _shelves_of(test_user, test_book.id) == [Shelf.TO_READ]

    move_to_shelf(db_session, test_user.id, test_book.id, "dnf")
    assert _shelves_of(test_user, test_book.id) == [Shelf.DNF]

    move_to_shelf(db_session, test_user.id, test_book.id, Shelf.READ, rating=4)
    db_session.refresh(test_user)
    assert _shelves_of(test_user, test_book.id) == [Shelf.READ]
    assert test_user.read[0].rating == 4
    assert test_user.read[0].read_at is not None
    assert test_user.to_read == []
    assert test_user.dnf == []

def test_move_to_read_counts_every_time(db_session, test_user, test_book):
    move_to_shelf(db_session, test_user.id, test_book.id, "read")
    move_to_shelf(db_session, test_user.id, test_book.id, "toRead")
    move_to_shelf(db_session, test_user.id, test_book.id, "read")

    db_session.refresh(test_user)
    assert test_user.books_read == 2
    assert len(test_user.read) == 1

def test_move_to_shelf_invalid_shelf(db_session, test_user, test_book):
    with pytest.raises(ValidationError) as exc_info:
        move_to_shelf(db_session, test_user.id, test_book.id, "favourites")
    assert exc_info.value.field == "shelf"

def test_move_to_read_invalid_rating_leaves_shelves(db_session, test_user, test_book):
    move_to_shelf(db_session, test_user.id, test_book.id, "toRead")

    with pytest.raises(ValidationError):
        move_to_shelf(db_session, test_user.id, test_book.id, "read", rating=7)

    db_session.refresh(test_user)
    assert test_user.to_read == [test_book.id]
    assert test_user.books_read == 0

def test_move_to_shelf_unknown_book(db_session, test_user):
    with pytest.raises(NotFoundError):
        move_to_shelf(db_session, test_user.id, 9999, "toRead")

def test_remove_from_shelf(db_session, test_user, test_book):
    move_to_shelf(db_session, test_user.id, test_book.id, "toRead")

    assert remove_from_shelf(db_session, test_user.id, "dnf", test_book.id) is False
    assert remove_from_shelf(db_session, test_user.id, "toRead", test_book.id) is True
    assert get_shelves(db_session, test_user.id).to_read == []

def test_get_shelves(db_session, test_user, make_book):
    book_a, book_b = make_book(), make_book()
    move_to_shelf(db_session, test_user.id, book_a.id, "toRead")
    move_to_shelf(db_session, test_user.id, book_b.id, "read", rating=5)

    shelves = get_shelves(db_session, test_user.id)

    assert shelves.to_read == [book_a.id]
    assert [entry.book_id for entry in shelves.read] == [book_b.id]
    assert shelves.read[0].rating == 5
    assert shelves.dnf == []

def test_start_reading_is_idempotent(db_session, test_user, test_book):
    first = start_reading(db_session, test_user.id, test_book.id)
    second = start_reading(db_session, test_user.id, test_book.id)

    assert first.id == second.id
    assert first.progress == 0
    db_session.refresh(test_user)
    assert len(test_user.currently_reading) == 1

@pytest.mark.parametrize("progress", [0, 60, 100])
def test_update_reading_progress(db_session, test_user, test_book, progress):
    """Both bounds of the 0-100 range are accepted."""
    start_reading(db_session, test_user.id, test_book.id)

    entry = update_reading_progress(db_session, test_user.id, test_book.id, progress)

    assert entry.progress == progress
    db_session.refresh(entry)
    assert entry.progress == progress

@pytest.mark.parametrize("progress", [-1, 101, 50.5])
def test_update_reading_progress_out_of_range(db_session, test_user, test_book, progress):
    start_reading(db_session, test_user.id, test_book.id)

    with pytest.raises(InvalidProgressError):
        update_reading_progress(db_session, test_user.id, test_book.id, progress)

    db_session.refresh(test_user)
    assert test_user.currently_reading[0].progress == 0

def test_update_reading_progress_not_reading(db_session, test_user, test_book):
    with pytest.raises(NotCurrentlyReadingError):
        update_reading_progress(db_session, test_user.id, test_book.id, 10)

def test_apply_shelf_move(db_session, test_user, test_book):
    move_to_shelf(db_session, test_user.id, test_book.id, "toRead")

    user = apply_shelf_move(db_session, test_user.id, ShelfMove(book_id=test_book.id, shelf="read", rating=3))

    assert user.to_read == []
    assert [entry.book_id for entry in user.read] == [test_book.id]
    assert user.read[0].rating == 3
    assert user.books_read == 1
