# tests/crud/test_crud_book.py
import pytest
from pytest import approx

from bookcircle.crud import (
    apply_new_rating,
    replace_rating,
    search_books,
    get_book_by_id,
    get_book_by_isbn,
    get_popular_books,
    get_indian_books,
    get_featured_books,
    get_books_by_genre,
    get_books_by_author,
    list_genres,
    list_languages,
    list_books,
)
from bookcircle.core.enums import BookStatus, Genre, Language
from bookcircle.core.exceptions import ValidationError

def test_create_book_defaults(db_session, make_book):
    book = make_book("Malgudi Days", isbn="9780143039655")

    assert get_book_by_id(db_session, book.id) == book
    assert get_book_by_isbn(db_session, "9780143039655") == book
    assert book.average_rating == 0.0
    assert book.total_ratings == 0
    assert book.total_reviews == 0

def test_apply_new_rating_running_mean(db_session, test_book):
    for rating in (4, 5, 3):
        apply_new_rating(db_session, test_book, rating)
    db_session.commit()

    assert test_book.total_ratings == 3
    assert test_book.average_rating == approx(4.0)

def test_apply_new_rating_rejects_out_of_range(db_session, test_book):
    with pytest.raises(ValidationError):
        apply_new_rating(db_session, test_book, 0)
    assert test_book.total_ratings == 0

def test_replace_rating(db_session, test_book):
    apply_new_rating(db_session, test_book, 2)
    apply_new_rating(db_session, test_book, 4)

    replace_rating(db_session, test_book, 2, 5)

    assert test_book.total_ratings == 2
    assert test_book.average_rating == approx(4.5)

def test_replace_rating_without_contributions(db_session, test_book):
    replace_rating(db_session, test_book, 3, 5)

    assert test_book.total_ratings == 1
    assert test_book.average_rating == approx(5.0)

def test_search_books(db_session, make_book):
    make_book("The Guide", author="R. K. Narayan")
    make_book("The White Tiger", author="Aravind Adiga")
    make_book("Hidden", author="Nobody", status=BookStatus.INACTIVE)

    assert [book.title for book in search_books(db_session, author="narayan")] == ["The Guide"]
    assert [book.title for book in search_books(db_session, query="tiger")] == ["The White Tiger"]
    assert "Hidden" not in [book.title for book in search_books(db_session)]

def test_popular_and_indian_books(db_session, make_book):
    popular = make_book("Popular", is_popular=True)
    indian = make_book("Indian", is_indian=True)
    make_book("Neither")

    assert get_popular_books(db_session) == [popular]
    assert get_indian_books(db_session) == [indian]

def _rate(db_session, book, average):
    book.average_rating = average
    db_session.commit()
    return book

def test_featured_books(db_session, make_book):
    low = _rate(db_session, make_book("Low", is_featured=True), 2.0)
    high = _rate(db_session, make_book("High", is_featured=True), 4.5)
    make_book("Plain")
    make_book("Retired", is_featured=True, status=BookStatus.INACTIVE)

    assert get_featured_books(db_session) == [high, low]
    assert get_featured_books(db_session, limit=1) == [high]

def test_books_by_genre(db_session, make_book):
    fiction = _rate(db_session, make_book("Fiction", genres=[Genre.FICTION]), 3.0)
    both = _rate(db_session, make_book("Both", genres=[Genre.MYSTERY, Genre.FICTION]), 4.0)
    make_book("Essays", genres=[Genre.NON_FICTION])

    assert get_books_by_genre(db_session, Genre.FICTION) == [both, fiction]
    assert get_books_by_genre(db_session, "Mystery") == [both]
    assert get_books_by_genre(db_session, Genre.POETRY) == []

def test_books_by_author(db_session, make_book):
    older = make_book("Swami and Friends", author="R. K. Narayan", publication_year=1935)
    newer = make_book("The Guide", author="R. K. Narayan", publication_year=1958)
    make_book("Gitanjali", author="Rabindranath Tagore")

    assert get_books_by_author(db_session, "narayan") == [newer, older]
    assert get_books_by_author(db_session, "narayan", skip=1) == [older]

def test_list_genres_and_languages(db_session, make_book):
    make_book(genres=[Genre.POETRY, Genre.DRAMA], language=Language.HINDI)
    make_book(genres=[Genre.DRAMA])
    make_book(genres=[Genre.HORROR], language=Language.TAMIL, status=BookStatus.INACTIVE)

    assert list_genres(db_session) == ["Drama", "Poetry"]
    assert list_languages(db_session) == ["English", "Hindi"]

def test_list_books_filters(db_session, make_book):
    hindi = make_book("Godaan", genres=[Genre.FICTION], language=Language.HINDI, is_indian=True)
    english = make_book("Dune", genres=[Genre.SCI_FI, Genre.FICTION])
    make_book("Draft", genres=[Genre.FICTION], status=BookStatus.PENDING)

    assert set(list_books(db_session)) == {hindi, english}
    assert set(list_books(db_session, genre=Genre.FICTION)) == {hindi, english}
    assert list_books(db_session, genre=Genre.SCI_FI) == [english]
    assert list_books(db_session, language=Language.HINDI) == [hindi]
    assert list_books(db_session, is_indian=True) == [hindi]
    assert list_books(db_session, is_indian=False) == [english]

def test_list_books_sorting(db_session, make_book):
    first = _rate(db_session, make_book("Anandmath", publication_year=1882), 3.5)
    second = _rate(db_session, make_book("Chemmeen", publication_year=1956), 4.8)
    third = _rate(db_session, make_book("Bhowani Junction", publication_year=1954), 1.0)

    assert list_books(db_session, sort_by="title", order="asc") == [first, third, second]
    assert list_books(db_session, sort_by="title", order="desc") == [second, third, first]
    assert list_books(db_session, sort_by="rating") == [second, first, third]
    assert list_books(db_session, sort_by="year", order="asc") == [first, third, second]
    # Unknown keys fall back to creation order; ties resolve by id
    assert list_books(db_session, sort_by="popularity") == [third, second, first]
    assert list_books(db_session, sort_by="title", order="asc", skip=1, limit=1) == [third]
