"""
ORM models of BookCircle. Importing the package registers every mapped class
with `Base`, so string-based relationships resolve whichever model is used first.
"""

from .user import User, CurrentlyReading, ShelfEntry, Badge
from .book import Book
from .review import Review, ReviewQuote, ReviewComment, review_likes
from .discussion import Discussion, DiscussionReply, discussion_likes, reply_likes
from .event import Event, EventAttendee, event_interested

__all__ = [
    "User",
    "CurrentlyReading",
    "ShelfEntry",
    "Badge",
    "Book",
    "Review",
    "ReviewQuote",
    "ReviewComment",
    "review_likes",
    "Discussion",
    "DiscussionReply",
    "discussion_likes",
    "reply_likes",
    "Event",
    "EventAttendee",
    "event_interested",
]
