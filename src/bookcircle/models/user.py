"""
ORM models for the Identity Store of BookCircle.
Defines the User entity, its derived stats and the rows it owns: the
currently-reading list, shelf entries and badges.
"""

from sqlalchemy import (Column, Integer, String, Text, Boolean, DateTime, JSON, ForeignKey,
                        CheckConstraint, UniqueConstraint, Enum as SAEnum, func)
from sqlalchemy.orm import relationship
from bookcircle.core.enums import Shelf
from bookcircle.db.session import Base

class User(Base):
    """
    Represents a registered user.

    Attributes:
        id (int): Primary key.
        name (str): Display name.
        email (str): Unique email address.
        favorite_genres (List[str]): Genre values the user follows.
        is_active (bool): False once the account is deactivated (never hard-deleted).
        books_read, reviews_written, discussions_participated,
        followers_count, following_count (int): Derived stats. Each one is only
            incremented at the sites listed in the CRUD layer.
        currently_reading (List[CurrentlyReading]): Books in progress, in start order.
        shelf_entries (List[ShelfEntry]): Entries across the three shelves.
        badges (List[Badge]): Append-only earned badges.
        reviews (List[Review]): Reviews written by the user.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    avatar = Column(String(512), nullable=True)
    bio = Column(String(500), nullable=False, default="")
    location = Column(String(100), nullable=False, default="")
    favorite_genres = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now(), nullable=False)

    books_read = Column(Integer, default=0, nullable=False)
    reviews_written = Column(Integer, default=0, nullable=False)
    discussions_participated = Column(Integer, default=0, nullable=False)
    followers_count = Column(Integer, default=0, nullable=False)
    following_count = Column(Integer, default=0, nullable=False)

    currently_reading = relationship(
        "CurrentlyReading",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="CurrentlyReading.id"
    )
    shelf_entries = relationship(
        "ShelfEntry",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="ShelfEntry.id"
    )
    badges = relationship(
        "Badge",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Badge.id"
    )
    reviews = relationship(
        "Review",
        back_populates="user",
        cascade="all, delete-orphan"
    )

    @property
    def stats(self) -> dict:
        return {
            "booksRead": self.books_read,
            "reviewsWritten": self.reviews_written,
            "discussionsParticipated": self.discussions_participated,
            "followersCount": self.followers_count,
            "followingCount": self.following_count,
        }

    def shelf(self, shelf: Shelf) -> list:
        """Entries on one shelf, oldest first."""
        return [entry for entry in self.shelf_entries if entry.shelf == shelf]

    @property
    def to_read(self) -> list:
        return [entry.book_id for entry in self.shelf(Shelf.TO_READ)]

    @property
    def read(self) -> list:
        return self.shelf(Shelf.READ)

    @property
    def dnf(self) -> list:
        return [entry.book_id for entry in self.shelf(Shelf.DNF)]

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"


class CurrentlyReading(Base):
    __tablename__ = "currently_reading"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False, index=True)
    progress = Column(Integer, default=0, nullable=False)
    started_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="currently_reading")
    book = relationship("Book")

    __table_args__ = (
        CheckConstraint('progress >= 0 AND progress <= 100', name='currently_reading_progress_check'),
        UniqueConstraint('user_id', 'book_id', name='uq_user_book_currently_reading'),
    )

    def __repr__(self):
        return f"<CurrentlyReading(user_id={self.user_id}, book_id={self.book_id}, progress={self.progress})>"


class ShelfEntry(Base):
    """
    A book placed on one of the user's shelves.

    The (user_id, book_id) unique constraint keeps the three shelves mutually
    exclusive: a book can only ever hold one entry per user.
    `read_at` and `rating` are only filled for the `read` shelf.
    """
    __tablename__ = "shelf_entries"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False, index=True)
    shelf = Column(
        SAEnum(Shelf, name="shelf", values_callable=lambda enum: [member.value for member in enum]),
        nullable=False,
        index=True
    )
    added_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    rating = Column(Integer, nullable=True)

    user = relationship("User", back_populates="shelf_entries")
    book = relationship("Book")

    __table_args__ = (
        CheckConstraint('rating IS NULL OR (rating >= 1 AND rating <= 5)', name='shelf_entry_rating_check'),
        UniqueConstraint('user_id', 'book_id', name='uq_user_book_shelf'),
    )

    def __repr__(self):
        return f"<ShelfEntry(user_id={self.user_id}, book_id={self.book_id}, shelf={self.shelf.value})>"


class Badge(Base):
    __tablename__ = "badges"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    icon = Column(String(255), nullable=True)
    earned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="badges")

    def __repr__(self):
        return f"<Badge(user_id={self.user_id}, name='{self.name}')>"
