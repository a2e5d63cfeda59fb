"""
Helpers shared by the CRUD modules: entity lookup, set-like membership toggles
over relationship collections, and the commit/rollback sequence every
mutation ends with.
"""

import logging
from typing import Any, Type

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def get_or_raise(db: Session, model: Type[Any], entity_id: Any) -> Any:
    """
    Loads an entity by primary key.

    Raises:
        NotFoundError: If no row exists for `entity_id`.
    """
    instance = db.get(model, entity_id)
    if instance is None:
        logger.warning(f"{model.__name__} {entity_id} not found")
        raise NotFoundError(model.__name__, entity_id)
    return instance


def toggle_membership(collection: list, member: Any) -> bool:
    """
    Adds `member` to a relationship collection used as a set, or removes it if
    already present. Returns the new state: True when `member` is now in it.
    """
    if member in collection:
        collection.remove(member)
        return False
    collection.append(member)
    return True


def add_member(collection: list, member: Any) -> bool:
    """Idempotent add. Returns True if the collection changed."""
    if member in collection:
        return False
    collection.append(member)
    return True


def remove_member(collection: list, member: Any) -> bool:
    """Idempotent removal. Returns True if the collection changed."""
    if member not in collection:
        return False
    collection.remove(member)
    return True


def commit(db: Session, action: str) -> None:
    """
    Commits the pending changes of one operation. On failure the session is
    rolled back and the error re-raised to the caller.
    """
    try:
        db.commit()
    except Exception as e:
        logger.exception(f"Error committing {action}: {e}")
        db.rollback()
        raise
