"""
CRUD operations for discussions and their replies (Engagement Store).

Replies live inside their discussion: every reply mutation loads the
discussion, changes its reply list and commits the discussion as a whole.
Counters other than `view_count` are computed from the collections.
"""

import logging
from sqlalchemy.orm import Session
from sqlalchemy import asc, desc, func
from typing import List, Optional

from ..core.enums import DiscussionCategory
from ..core.exceptions import AuthorizationError, LockedDiscussionError, NotFoundError, ValidationError
from ..models.book import Book
from ..models.discussion import Discussion, DiscussionReply, discussion_likes
from ..models.user import User
from ..schemas.discussion import DiscussionCreate, DiscussionUpdate
from .utils import commit, get_or_raise, toggle_membership

logger = logging.getLogger(__name__)


def _require_author(discussion: Discussion, requester_id: int) -> None:
    if discussion.author_id != requester_id:
        logger.error(f"Unauthorized attempt: User {requester_id} tried to modify discussion {discussion.id} owned by {discussion.author_id}")
        raise AuthorizationError(requester_id, "Discussion", discussion.id)


def _find_reply(discussion: Discussion, reply_id: int) -> DiscussionReply:
    reply = next((reply for reply in discussion.replies if reply.id == reply_id), None)
    if reply is None:
        logger.warning(f"Reply {reply_id} not found in discussion {discussion.id}")
        raise NotFoundError("DiscussionReply", reply_id)
    return reply


def create_discussion(db: Session, discussion: DiscussionCreate, author_id: int) -> Discussion:
    """
    Opens a discussion thread.

    Raises:
        NotFoundError: Author, or the referenced book, does not exist.
    """
    get_or_raise(db, User, author_id)
    if discussion.book_id is not None:
        get_or_raise(db, Book, discussion.book_id)
    db_discussion = Discussion(**discussion.model_dump(mode="json"), author_id=author_id)
    db.add(db_discussion)
    commit(db, f"creation of discussion by user {author_id}")
    db.refresh(db_discussion)
    logger.info(f"Discussion {db_discussion.id} created by user {author_id} in '{db_discussion.category}'.")
    return db_discussion


def get_discussion(db: Session, discussion_id: int, count_view: bool = True) -> Discussion:
    """
    Loads a discussion; by default counts one view.

    Raises:
        NotFoundError: Discussion does not exist.
    """
    db_discussion = get_or_raise(db, Discussion, discussion_id)
    if count_view:
        db_discussion.view_count += 1
        commit(db, f"view count of discussion {discussion_id}")
    return db_discussion


def update_discussion(db: Session, discussion_id: int, requester_id: int, update: DiscussionUpdate) -> Discussion:
    db_discussion = get_or_raise(db, Discussion, discussion_id)
    _require_author(db_discussion, requester_id)
    for field, value in update.model_dump(mode="json", exclude_none=True).items():
        setattr(db_discussion, field, value)
    commit(db, f"update of discussion {discussion_id}")
    logger.info(f"Discussion {discussion_id} updated by user {requester_id}.")
    return db_discussion


def delete_discussion(db: Session, discussion_id: int, requester_id: int) -> Discussion:
    """Soft delete: the discussion is hidden from listings, replies are kept."""
    db_discussion = get_or_raise(db, Discussion, discussion_id)
    _require_author(db_discussion, requester_id)
    db_discussion.is_active = False
    commit(db, f"deletion of discussion {discussion_id}")
    logger.info(f"Discussion {discussion_id} deactivated by user {requester_id}.")
    return db_discussion


def set_discussion_flags(db: Session, discussion_id: int, is_pinned: Optional[bool] = None,
                         is_locked: Optional[bool] = None) -> Discussion:
    """Moderation switches. Permission checks belong to the caller."""
    db_discussion = get_or_raise(db, Discussion, discussion_id)
    if is_pinned is not None:
        db_discussion.is_pinned = is_pinned
    if is_locked is not None:
        db_discussion.is_locked = is_locked
    commit(db, f"flags of discussion {discussion_id}")
    logger.info(f"Discussion {discussion_id} flags: pinned={db_discussion.is_pinned}, locked={db_discussion.is_locked}.")
    return db_discussion


def add_reply(db: Session, discussion_id: int, author_id: int, content: str) -> DiscussionReply:
    """
    Appends a reply to a discussion.

    Raises:
        ValidationError: Empty content.
        NotFoundError: Discussion or author does not exist.
        LockedDiscussionError: The discussion is locked.
    """
    if not content or not content.strip():
        raise ValidationError("content", content, "required")
    db_discussion = get_or_raise(db, Discussion, discussion_id)
    if db_discussion.is_locked:
        logger.warning(f"User {author_id} tried to reply to locked discussion {discussion_id}.")
        raise LockedDiscussionError(discussion_id)
    get_or_raise(db, User, author_id)

    reply = DiscussionReply(author_id=author_id, content=content, is_solution=False)
    db_discussion.replies.append(reply)
    commit(db, f"reply to discussion {discussion_id}")
    logger.info(f"User {author_id} replied to discussion {discussion_id} ({db_discussion.reply_count} replies).")
    return reply


def mark_solution(db: Session, discussion_id: int, reply_id: int, requester_id: int) -> Discussion:
    """
    Flags one reply as the accepted answer. Every other reply of the
    discussion is cleared first, so at most one reply is ever a solution.

    Raises:
        NotFoundError: Discussion or reply does not exist.
        AuthorizationError: The requester is not the discussion author.
    """
    db_discussion = get_or_raise(db, Discussion, discussion_id)
    _require_author(db_discussion, requester_id)
    target = _find_reply(db_discussion, reply_id)

    for reply in db_discussion.replies:
        reply.is_solution = False
    target.is_solution = True

    commit(db, f"solution marking in discussion {discussion_id}")
    logger.info(f"Reply {reply_id} marked as solution of discussion {discussion_id}.")
    return db_discussion


def toggle_discussion_like(db: Session, discussion_id: int, actor_id: int, reply_id: Optional[int] = None) -> bool:
    """
    Likes or unlikes a discussion, or one of its replies when `reply_id` is given.

    Returns:
        bool: True if the actor now likes the target.

    Raises:
        NotFoundError: Discussion, reply or actor does not exist.
    """
    db_discussion = get_or_raise(db, Discussion, discussion_id)
    actor = get_or_raise(db, User, actor_id)
    if reply_id is None:
        target, label = db_discussion, f"discussion {discussion_id}"
    else:
        target, label = _find_reply(db_discussion, reply_id), f"reply {reply_id}"

    liked = toggle_membership(target.likes, actor)
    commit(db, f"like toggle on {label}")
    logger.info(f"User {actor_id} {'liked' if liked else 'unliked'} {label}.")
    return liked


def get_discussions_by_category(db: Session, category: DiscussionCategory, skip: int = 0,
                                limit: int = 10) -> List[Discussion]:
    """Active discussions of a category, pinned first, then newest."""
    return db.query(Discussion).\
            filter(Discussion.category == DiscussionCategory(category).value, Discussion.is_active.is_(True)).\
            order_by(desc(Discussion.is_pinned), desc(Discussion.created_at), desc(Discussion.id)).\
            offset(skip).\
            limit(limit).all()


def get_popular_discussions(db: Session, limit: int = 10) -> List[Discussion]:
    """Active discussions ordered by number of likes, then views."""
    like_count = func.count(discussion_likes.c.user_id)
    return db.query(Discussion).\
            outerjoin(discussion_likes, discussion_likes.c.discussion_id == Discussion.id).\
            filter(Discussion.is_active.is_(True)).\
            group_by(Discussion.id).\
            order_by(desc(like_count), desc(Discussion.view_count)).\
            limit(limit).all()


def list_discussions(db: Session, category: Optional[DiscussionCategory] = None, sort_by: str = "created",
                     order: str = "desc", skip: int = 0, limit: int = 10) -> List[Discussion]:
    """
    Active discussions, optionally of one category, sorted by 'replies',
    'likes', 'views' or creation date (any other key).
    """
    reply_count = db.query(func.count(DiscussionReply.id)).\
            filter(DiscussionReply.discussion_id == Discussion.id).\
            correlate(Discussion).scalar_subquery()
    like_count = db.query(func.count(discussion_likes.c.user_id)).\
            filter(discussion_likes.c.discussion_id == Discussion.id).\
            correlate(Discussion).scalar_subquery()
    sort_columns = {
        "replies": reply_count,
        "likes": like_count,
        "views": Discussion.view_count,
        "created": Discussion.created_at,
    }
    column = sort_columns.get(sort_by, Discussion.created_at)

    query = db.query(Discussion).filter(Discussion.is_active.is_(True))
    if category is not None:
        query = query.filter(Discussion.category == DiscussionCategory(category).value)
    if order == "asc":
        query = query.order_by(asc(column), Discussion.id.asc())
    else:
        query = query.order_by(desc(column), Discussion.id.desc())
    return query.offset(skip).limit(limit).all()
