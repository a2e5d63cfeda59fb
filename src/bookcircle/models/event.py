"""
ORM models for events in the BookCircle Engagement Store.

Attendance is capacity-constrained: `max_attendees` is checked when a user
joins (see `crud_event.join_event`), not by the schema, so concurrent joins
near capacity can overshoot. Each user holds at most one attendee row per
event.
"""

from sqlalchemy import (Column, Integer, String, Text, Float, Boolean, DateTime, JSON, ForeignKey,
                        Table, CheckConstraint, UniqueConstraint, Index, func)
from sqlalchemy.orm import relationship
from bookcircle.db.session import Base

event_interested = Table(
    "event_interested",
    Base.metadata,
    Column("event_id", Integer, ForeignKey("events.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    organizer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False, index=True)
    category = Column(String(50), nullable=False, index=True)
    date = Column(DateTime(timezone=True), nullable=False)
    time = Column(String(20), nullable=False)
    duration = Column(Float, default=2, nullable=False)

    venue = Column(String(200), nullable=False)
    address = Column(String(500), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    is_online = Column(Boolean, default=False, nullable=False)
    online_link = Column(String(512), nullable=True)
    max_attendees = Column(Integer, nullable=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=True)
    image = Column(String(512), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    is_free = Column(Boolean, default=True, nullable=False)
    price = Column(Float, default=0, nullable=False)
    requirements = Column(String(500), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    is_cancelled = Column(Boolean, default=False, nullable=False)
    cancellation_reason = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now(), nullable=False)

    organizer = relationship("User")
    book = relationship("Book")
    attendees = relationship(
        "EventAttendee",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="EventAttendee.id"
    )
    interested = relationship("User", secondary=event_interested)

    __table_args__ = (
        CheckConstraint('max_attendees IS NULL OR max_attendees >= 1', name='event_max_attendees_check'),
        Index("ix_events_date", "date"),
        Index("ix_events_city_state", "city", "state"),
    )

    @property
    def attendee_count(self) -> int:
        return len(self.attendees)

    @property
    def interested_count(self) -> int:
        return len(self.interested)

    @property
    def available_spots(self):
        """Remaining places, or None when the event has no cap."""
        if self.max_attendees:
            return self.max_attendees - len(self.attendees)
        return None

    @property
    def is_full(self) -> bool:
        return bool(self.max_attendees) and len(self.attendees) >= self.max_attendees

    def is_attending(self, user_id: int) -> bool:
        return any(attendee.user_id == user_id for attendee in self.attendees)

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title='{self.title[:30]}', attendees={len(self.attendees)}/{self.max_attendees})>"


class EventAttendee(Base):
    __tablename__ = "event_attendees"

    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    event = relationship("Event", back_populates="attendees")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint('event_id', 'user_id', name='uq_event_attendee'),
    )

    def __repr__(self):
        return f"<EventAttendee(event_id={self.event_id}, user_id={self.user_id})>"
