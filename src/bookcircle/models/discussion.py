"""
ORM models for discussions in the BookCircle Engagement Store.
A discussion owns its replies; likes on the discussion and on each reply are
stored in association tables keyed by (target, user), so a user can only
appear once in any like set.
"""

from sqlalchemy import (Column, Integer, String, Text, Boolean, DateTime, JSON, ForeignKey, Table,
                        Index, func)
from sqlalchemy.orm import relationship
from bookcircle.db.session import Base

discussion_likes = Table(
    "discussion_likes",
    Base.metadata,
    Column("discussion_id", Integer, ForeignKey("discussions.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

reply_likes = Table(
    "reply_likes",
    Base.metadata,
    Column("reply_id", Integer, ForeignKey("discussion_replies.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

class Discussion(Base):
    """
    A discussion thread.

    Attributes:
        category (str): A `DiscussionCategory` value.
        book_id (int): Optional book the thread is about.
        is_pinned (bool): Pinned threads sort first in category listings.
        is_locked (bool): Locked threads accept no new replies.
        is_active (bool): False once soft-deleted.
        view_count (int): Only ever incremented.
        replies (List[DiscussionReply]): Replies in posting order.
        likes (List[User]): Users who liked the thread.
    """
    __tablename__ = "discussions"

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category = Column(String(50), nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=True, index=True)
    is_pinned = Column(Boolean, default=False, nullable=False)
    is_locked = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    view_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now(), nullable=False)

    author = relationship("User")
    book = relationship("Book")
    replies = relationship(
        "DiscussionReply",
        back_populates="discussion",
        cascade="all, delete-orphan",
        order_by="DiscussionReply.id"
    )
    likes = relationship("User", secondary=discussion_likes)

    __table_args__ = (
        Index("ix_discussions_category_created", "category", "created_at"),
    )

    @property
    def reply_count(self) -> int:
        return len(self.replies)

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @property
    def solution(self):
        """The reply marked as solution, if any."""
        return next((reply for reply in self.replies if reply.is_solution), None)

    def __repr__(self) -> str:
        return f"<Discussion(id={self.id}, title='{self.title[:30]}', category='{self.category}')>"


class DiscussionReply(Base):
    __tablename__ = "discussion_replies"

    id = Column(Integer, primary_key=True)
    discussion_id = Column(Integer, ForeignKey("discussions.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(String(2000), nullable=False)
    is_solution = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    discussion = relationship("Discussion", back_populates="replies")
    author = relationship("User")
    likes = relationship("User", secondary=reply_likes)

    @property
    def like_count(self) -> int:
        return len(self.likes)

    def __repr__(self) -> str:
        solution = " [SOLUTION]" if self.is_solution else ""
        return f"<DiscussionReply(id={self.id}, discussion_id={self.discussion_id}){solution}>"
