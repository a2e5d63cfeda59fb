"""
Pydantic schemas for the User entity of BookCircle.
Input models for registration and shelf commands, output models for
profiles and shelves.
"""

from pydantic import BaseModel, EmailStr, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
import datetime
from typing import List, Optional

from ..core.enums import Genre, Shelf

class UserCreate(BaseModel):
    """
    Schema for registering a user. Credentials are handled by the
    authentication layer, not by the core.

    Attributes:
        name (str): Display name.
        email (EmailStr): Unique email address.
        favorite_genres (List[Genre]): Genres the user follows; duplicates are dropped.
    """
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    avatar: Optional[str] = None
    bio: str = Field("", max_length=500)
    location: str = Field("", max_length=100)
    favorite_genres: List[Genre] = []

    @field_validator("favorite_genres")
    @classmethod
    def dedupe_genres(cls, value: List[Genre]) -> List[Genre]:
        return list(dict.fromkeys(value))

class ShelfMove(BaseModel):
    """Command moving a book onto a shelf; `rating` only applies to `read`."""
    book_id: int
    shelf: Shelf
    rating: Optional[int] = Field(None, ge=1, le=5)

class BadgeSchema(BaseModel):
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    earned_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)

class ShelfEntrySchema(BaseModel):
    book_id: int
    shelf: Shelf
    added_at: datetime.datetime
    read_at: Optional[datetime.datetime] = None
    rating: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

class CurrentlyReadingSchema(BaseModel):
    book_id: int
    progress: int
    started_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)

class ShelvesSchema(BaseModel):
    to_read: List[int]
    read: List[ShelfEntrySchema]
    dnf: List[int]

class UserStats(BaseModel):
    """Derived counters; accepts both snake_case and the camelCase keys of `User.stats`."""
    books_read: int
    reviews_written: int
    discussions_participated: int
    followers_count: int
    following_count: int

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

class UserSchema(BaseModel):
    """
    Public profile of a user.
    """
    id: int
    name: str
    email: EmailStr
    avatar: Optional[str] = None
    bio: str
    location: str
    favorite_genres: List[Genre]
    is_active: bool
    stats: UserStats
    currently_reading: List[CurrentlyReadingSchema]
    badges: List[BadgeSchema]
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)
