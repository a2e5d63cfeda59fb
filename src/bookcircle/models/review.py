# src/bookcircle/models/review.py
from sqlalchemy import (Column, Integer, String, Text, ForeignKey, DateTime, Table,
                        func, CheckConstraint, UniqueConstraint, Boolean)
from sqlalchemy.orm import relationship
from bookcircle.db.session import Base

# (review, user) is the primary key, so a user can like a review only once
review_likes = Table(
    "review_likes",
    Base.metadata,
    Column("review_id", Integer, ForeignKey("reviews.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True)
    rating = Column(Integer, nullable=False)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    is_spoiler = Column(Boolean, default=False, nullable=False)
    is_public = Column(Boolean, default=True, nullable=False, index=True)
    helpful = Column(Integer, default=0, nullable=False)
    not_helpful = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now(), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False, index=True)

    user = relationship("User", back_populates="reviews")
    book = relationship("Book", back_populates="reviews")
    quotes = relationship(
        "ReviewQuote",
        back_populates="review",
        cascade="all, delete-orphan",
        order_by="ReviewQuote.position"
    )
    comments = relationship(
        "ReviewComment",
        back_populates="review",
        cascade="all, delete-orphan",
        order_by="ReviewComment.id"
    )
    likes = relationship("User", secondary=review_likes)

    __table_args__ = (
        # Ensure rating is between 1 and 5
        CheckConstraint('rating >= 1 AND rating <= 5', name='review_rating_check'),
        # Ensure a user can review a specific book only once
        UniqueConstraint('user_id', 'book_id', name='uq_user_book_review'),
    )

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @property
    def comment_count(self) -> int:
        return len(self.comments)

    def __repr__(self):
        spoiler = " [SPOILER]" if self.is_spoiler else ""
        return f"<Review(id={self.id}, book_id={self.book_id}, user_id={self.user_id}, rating={self.rating}){spoiler}>"


class ReviewQuote(Base):
    __tablename__ = "review_quotes"

    id = Column(Integer, primary_key=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    text = Column(String(500), nullable=False)
    page_number = Column(Integer, nullable=True)

    review = relationship("Review", back_populates="quotes")

    __table_args__ = (
        CheckConstraint('page_number IS NULL OR page_number >= 1', name='review_quote_page_check'),
    )


class ReviewComment(Base):
    """Append-only comment left on a review."""
    __tablename__ = "review_comments"

    id = Column(Integer, primary_key=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    review = relationship("Review", back_populates="comments")
    user = relationship("User")
