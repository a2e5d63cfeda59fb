"""
CRUD operations for events (Engagement Store).

Attendance uses admission control at join time: the capacity check and the
append happen in the same call but not under a lock, so two concurrent
joins near capacity can both be admitted. The (event, user) unique
constraint only prevents the same user from being added twice.
"""

import datetime
import logging
from sqlalchemy.orm import Session
from sqlalchemy import asc, desc, func
from sqlalchemy.exc import IntegrityError
from typing import List, Optional

from ..core.enums import EventCategory, EventType
from ..core.exceptions import AuthorizationError, EventCancelledError, EventFullError
from ..models.book import Book
from ..models.event import Event, EventAttendee
from ..models.user import User
from ..schemas.event import EventCreate, EventUpdate
from .utils import add_member, commit, get_or_raise, remove_member

logger = logging.getLogger(__name__)

CLEARABLE_FIELDS = {"max_attendees", "book_id", "online_link", "image", "requirements"}


def _require_organizer(event: Event, requester_id: int) -> None:
    if event.organizer_id != requester_id:
        logger.error(f"Unauthorized attempt: User {requester_id} tried to modify event {event.id} organized by {event.organizer_id}")
        raise AuthorizationError(requester_id, "Event", event.id)


def _attendee_exists(db: Session, event_id: int, user_id: int) -> bool:
    return db.query(EventAttendee.id).filter(
        EventAttendee.event_id == event_id,
        EventAttendee.user_id == user_id
    ).first() is not None


def _upcoming(db: Session):
    return db.query(Event).filter(
        Event.is_active.is_(True),
        Event.is_cancelled.is_(False),
        Event.date >= datetime.datetime.now(datetime.timezone.utc)
    )


def create_event(db: Session, event: EventCreate, organizer_id: int) -> Event:
    """
    Creates an event organized by `organizer_id`.

    Raises:
        NotFoundError: Organizer, or the referenced book, does not exist.
    """
    get_or_raise(db, User, organizer_id)
    if event.book_id is not None:
        get_or_raise(db, Book, event.book_id)
    data = event.model_dump(mode="json", exclude={"location", "date"})
    location = event.location.model_dump()
    db_event = Event(**data, **location, date=event.date, organizer_id=organizer_id)
    db.add(db_event)
    commit(db, f"creation of event by user {organizer_id}")
    db.refresh(db_event)
    logger.info(f"Event {db_event.id} '{db_event.title}' created by user {organizer_id}.")
    return db_event


def get_event(db: Session, event_id: int) -> Event:
    return get_or_raise(db, Event, event_id)


def update_event(db: Session, event_id: int, requester_id: int, update: EventUpdate) -> Event:
    """
    Applies the fields set in `update`. Lowering `max_attendees` below the
    current attendance is allowed; it only blocks further joins.
    Fields explicitly set to None are cleared when the column allows it, so
    `max_attendees=None` removes the cap.

    Raises:
        NotFoundError: Event, or the referenced book, does not exist.
        AuthorizationError: The requester is not the organizer.
    """
    db_event = get_or_raise(db, Event, event_id)
    _require_organizer(db_event, requester_id)
    data = {
        field: value
        for field, value in update.model_dump(mode="json", exclude_unset=True, exclude={"location", "date"}).items()
        if value is not None or field in CLEARABLE_FIELDS
    }
    if data.get("book_id") is not None:
        get_or_raise(db, Book, data["book_id"])
    if update.location is not None:
        data.update(update.location.model_dump())
    if update.date is not None:
        data["date"] = update.date
    for field, value in data.items():
        setattr(db_event, field, value)
    commit(db, f"update of event {event_id}")
    logger.info(f"Event {event_id} updated by user {requester_id}.")
    return db_event


def cancel_event(db: Session, event_id: int, requester_id: int, reason: str | None = None) -> Event:
    """Marks the event cancelled; further joins fail with EventCancelledError."""
    db_event = get_or_raise(db, Event, event_id)
    _require_organizer(db_event, requester_id)
    db_event.is_cancelled = True
    db_event.cancellation_reason = reason
    commit(db, f"cancellation of event {event_id}")
    logger.info(f"Event {event_id} cancelled by user {requester_id}.")
    return db_event


def delete_event(db: Session, event_id: int, requester_id: int) -> Event:
    """Soft delete: the event disappears from listings."""
    db_event = get_or_raise(db, Event, event_id)
    _require_organizer(db_event, requester_id)
    db_event.is_active = False
    commit(db, f"deletion of event {event_id}")
    logger.info(f"Event {event_id} deactivated by user {requester_id}.")
    return db_event


def join_event(db: Session, event_id: int, user_id: int) -> Event:
    """
    Registers `user_id` as an attendee. Joining twice is a no-op.

    Checks, in order: the event exists, it is not cancelled, it is not full.

    Raises:
        NotFoundError: Event or user does not exist.
        EventCancelledError: The event is cancelled.
        EventFullError: `max_attendees` is set and already reached.
    """
    db_event = get_or_raise(db, Event, event_id)
    if db_event.is_cancelled:
        logger.warning(f"User {user_id} tried to join cancelled event {event_id}.")
        raise EventCancelledError(event_id)
    if db_event.is_full:
        logger.warning(f"User {user_id} rejected from full event {event_id} ({db_event.max_attendees} attendees).")
        raise EventFullError(event_id, db_event.max_attendees)
    get_or_raise(db, User, user_id)

    if db_event.is_attending(user_id):
        logger.info(f"User {user_id} already attends event {event_id}. No action taken.")
        return db_event

    db_event.attendees.append(EventAttendee(user_id=user_id))
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        if not _attendee_exists(db, event_id, user_id):
            logger.exception(f"Error registering user {user_id} to event {event_id}")
            raise
        # Another request registered the same user first
        logger.info(f"User {user_id} was registered to event {event_id} concurrently.")
        return get_or_raise(db, Event, event_id)
    commit(db, f"user {user_id} joining event {event_id}")
    logger.info(f"User {user_id} joined event {event_id} ({db_event.attendee_count}/{db_event.max_attendees or '-'}).")
    return db_event


def leave_event(db: Session, event_id: int, user_id: int) -> Event:
    """Removes `user_id` from the attendees; not attending is not an error."""
    db_event = get_or_raise(db, Event, event_id)
    remaining = [attendee for attendee in db_event.attendees if attendee.user_id != user_id]
    if len(remaining) == len(db_event.attendees):
        logger.info(f"User {user_id} was not attending event {event_id}. No action taken.")
        return db_event
    db_event.attendees = remaining
    commit(db, f"user {user_id} leaving event {event_id}")
    logger.info(f"User {user_id} left event {event_id}.")
    return db_event


def mark_interested(db: Session, event_id: int, user_id: int) -> Event:
    """Adds the user to `interested`, independently of attendance."""
    db_event = get_or_raise(db, Event, event_id)
    user = get_or_raise(db, User, user_id)
    if add_member(db_event.interested, user):
        commit(db, f"interest of user {user_id} in event {event_id}")
        logger.info(f"User {user_id} is interested in event {event_id}.")
    return db_event


def remove_interested(db: Session, event_id: int, user_id: int) -> Event:
    db_event = get_or_raise(db, Event, event_id)
    user = db.get(User, user_id)
    if user is not None and remove_member(db_event.interested, user):
        commit(db, f"removal of interest of user {user_id} in event {event_id}")
        logger.info(f"User {user_id} is no longer interested in event {event_id}.")
    return db_event


def get_upcoming_events(db: Session, limit: int = 10) -> List[Event]:
    """Active, non-cancelled future events, soonest first."""
    return _upcoming(db).order_by(Event.date).limit(limit).all()


def get_events_by_city(db: Session, city: str, skip: int = 0, limit: int = 10) -> List[Event]:
    return _upcoming(db).filter(Event.city.ilike(f"%{city}%")).\
            order_by(Event.date).offset(skip).limit(limit).all()


def get_events_by_type(db: Session, event_type: EventType, skip: int = 0, limit: int = 10) -> List[Event]:
    return _upcoming(db).filter(Event.type == EventType(event_type).value).\
            order_by(Event.date).offset(skip).limit(limit).all()


def list_events(db: Session, event_type: Optional[EventType] = None, category: Optional[EventCategory] = None,
                city: Optional[str] = None, is_online: Optional[bool] = None, sort_by: str = "date",
                order: str = "asc", skip: int = 0, limit: int = 10) -> List[Event]:
    """
    Upcoming events with optional filters, sorted by 'attendees', 'created'
    or the event date (any other key).
    """
    attendee_count = db.query(func.count(EventAttendee.id)).\
            filter(EventAttendee.event_id == Event.id).\
            correlate(Event).scalar_subquery()
    sort_columns = {
        "attendees": attendee_count,
        "created": Event.created_at,
        "date": Event.date,
    }
    column = sort_columns.get(sort_by, Event.date)

    query = _upcoming(db)
    if event_type is not None:
        query = query.filter(Event.type == EventType(event_type).value)
    if category is not None:
        query = query.filter(Event.category == EventCategory(category).value)
    if city:
        query = query.filter(Event.city.ilike(f"%{city}%"))
    if is_online is not None:
        query = query.filter(Event.is_online.is_(is_online))
    if order == "desc":
        query = query.order_by(desc(column), Event.id.desc())
    else:
        query = query.order_by(asc(column), Event.id.asc())
    return query.offset(skip).limit(limit).all()
