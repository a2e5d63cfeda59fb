"""
Pydantic schemas for discussions and their replies.
"""

from pydantic import BaseModel, Field, ConfigDict
import datetime
from typing import List, Optional

from ..core.enums import DiscussionCategory

class DiscussionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=5000)
    category: DiscussionCategory
    tags: List[str] = []
    book_id: Optional[int] = None

class DiscussionUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    tags: Optional[List[str]] = None

class ReplySchema(BaseModel):
    id: int
    author_id: int
    content: str
    is_solution: bool
    like_count: int
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)

class DiscussionSchema(BaseModel):
    id: int
    title: str
    content: str
    author_id: int
    category: DiscussionCategory
    tags: List[str]
    book_id: Optional[int] = None
    is_pinned: bool
    is_locked: bool
    view_count: int
    like_count: int
    reply_count: int
    replies: List[ReplySchema] = []
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)
