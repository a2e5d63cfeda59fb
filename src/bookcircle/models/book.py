"""
ORM model for the Book entity of the BookCircle catalog.
Defines the catalog metadata of a book, its aggregate rating statistics and
its relationship with reviews.
"""

from sqlalchemy import Column, Integer, String, Text, Float, Boolean, DateTime, JSON, CheckConstraint, func
from sqlalchemy.orm import relationship
from bookcircle.core.enums import BookStatus, Language
from bookcircle.db.session import Base

class Book(Base):
    """
    Represents a book in the catalog.

    Attributes:
        id (int): Primary key.
        title (str): Book title.
        author (str): Book author(s).
        description (str): Synopsis.
        isbn (str): Unique ISBN, optional.
        genres (List[str]): Genre values (see `Genre`).
        language (str): Language value (see `Language`).
        average_rating (float): Running mean of every rating contribution, 0-5.
        total_ratings (int): Number of rating contributions.
        total_reviews (int): Number of reviews currently written for the book.
        reviews (List[Review]): Reviews of the book.

    The three aggregate fields are maintained by `crud_book.apply_new_rating`,
    `crud_book.replace_rating` and the review ledger; they are never set directly.
    """
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), index=True, nullable=False)
    author = Column(String(100), index=True, nullable=False)
    description = Column(Text, nullable=False)
    isbn = Column(String(20), unique=True, index=True, nullable=True)
    cover_image_url = Column(String(512), nullable=True)
    genres = Column(JSON, nullable=False, default=list)
    language = Column(String(20), nullable=False, default=Language.ENGLISH.value)
    publication_year = Column(Integer, nullable=True)
    publisher = Column(String(100), nullable=True)
    page_count = Column(Integer, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    is_indian = Column(Boolean, default=False, nullable=False)
    is_popular = Column(Boolean, default=False, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    status = Column(String(20), default=BookStatus.ACTIVE.value, nullable=False, index=True)

    average_rating = Column(Float, default=0.0, nullable=False)
    total_ratings = Column(Integer, default=0, nullable=False)
    total_reviews = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now(), nullable=False)

    reviews = relationship(
        "Review",
        back_populates="book",
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint('average_rating >= 0 AND average_rating <= 5', name='book_average_rating_check'),
        CheckConstraint('page_count IS NULL OR page_count >= 1', name='book_page_count_check'),
    )

    @property
    def rating_percentage(self) -> float:
        """Average rating expressed as a percentage of the 5-star maximum."""
        return (self.average_rating / 5) * 100 if self.average_rating else 0.0

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title='{self.title[:30]}...', isbn='{self.isbn}')>"
