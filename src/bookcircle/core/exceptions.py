"""
Error taxonomy for the BookCircle core.

Every error carries the entity and constraint involved as attributes so the
calling layer can build its own response; the message is only a debugging aid.
"""

from typing import Any, Optional


class BookCircleError(Exception):
    """Base class for all errors raised by the core operations."""


class ValidationError(BookCircleError, ValueError):
    """Malformed or out-of-range input (rating, progress, shelf name, content)."""

    def __init__(self, field: str, value: Any = None, constraint: Optional[str] = None):
        self.field = field
        self.value = value
        self.constraint = constraint
        super().__init__(f"invalid {field}={value!r} ({constraint})")


class InvalidProgressError(ValidationError):
    def __init__(self, progress: Any):
        super().__init__("progress", progress, "0 <= progress <= 100")
        self.progress = progress


class NotFoundError(BookCircleError):
    """A referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class DuplicateReviewError(BookCircleError):
    """A (user, book) pair already has a review."""

    def __init__(self, user_id: int, book_id: int):
        self.user_id = user_id
        self.book_id = book_id
        super().__init__(f"user {user_id} already reviewed book {book_id}")


class AuthorizationError(BookCircleError):
    """The actor does not own the entity it is trying to modify."""

    def __init__(self, actor_id: int, entity: str, entity_id: Any):
        self.actor_id = actor_id
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"user {actor_id} may not modify {entity} {entity_id}")


class LockedDiscussionError(BookCircleError):
    def __init__(self, discussion_id: int):
        self.discussion_id = discussion_id
        super().__init__(f"discussion {discussion_id} is locked")


class EventFullError(BookCircleError):
    def __init__(self, event_id: int, max_attendees: int):
        self.event_id = event_id
        self.max_attendees = max_attendees
        super().__init__(f"event {event_id} reached its capacity of {max_attendees}")


class EventCancelledError(BookCircleError):
    def __init__(self, event_id: int):
        self.event_id = event_id
        super().__init__(f"event {event_id} has been cancelled")


class NotCurrentlyReadingError(BookCircleError):
    def __init__(self, user_id: int, book_id: int):
        self.user_id = user_id
        self.book_id = book_id
        super().__init__(f"book {book_id} is not in user {user_id}'s currently reading list")
