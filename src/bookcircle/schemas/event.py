"""
Pydantic schemas for events.
"""

from pydantic import BaseModel, Field, ConfigDict
import datetime
from typing import List, Optional

from ..core.enums import EventCategory, EventType

class LocationSchema(BaseModel):
    venue: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    latitude: Optional[float] = None
    longitude: Optional[float] = None

class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    type: EventType
    category: EventCategory
    date: datetime.datetime
    time: str = Field(..., min_length=1, max_length=20)
    duration: float = Field(2, gt=0)
    location: LocationSchema
    is_online: bool = False
    online_link: Optional[str] = None
    max_attendees: Optional[int] = Field(None, ge=1)
    book_id: Optional[int] = None
    image: Optional[str] = None
    tags: List[str] = []
    is_free: bool = True
    price: float = Field(0, ge=0)
    requirements: Optional[str] = Field(None, max_length=500)

class EventUpdate(BaseModel):
    """
    Partial update of an event. Only the fields passed are applied; passing
    None clears an optional field such as `max_attendees` or `book_id`.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    type: Optional[EventType] = None
    category: Optional[EventCategory] = None
    date: Optional[datetime.datetime] = None
    time: Optional[str] = Field(None, min_length=1, max_length=20)
    duration: Optional[float] = Field(None, gt=0)
    location: Optional[LocationSchema] = None
    is_online: Optional[bool] = None
    online_link: Optional[str] = None
    max_attendees: Optional[int] = Field(None, ge=1)
    book_id: Optional[int] = None
    image: Optional[str] = None
    tags: Optional[List[str]] = None
    is_free: Optional[bool] = None
    price: Optional[float] = Field(None, ge=0)
    requirements: Optional[str] = Field(None, max_length=500)

class AttendeeSchema(BaseModel):
    user_id: int
    joined_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)

class EventSchema(BaseModel):
    id: int
    title: str
    description: str
    organizer_id: int
    type: EventType
    category: EventCategory
    date: datetime.datetime
    time: str
    city: str
    max_attendees: Optional[int] = None
    attendees: List[AttendeeSchema] = []
    attendee_count: int
    interested_count: int
    available_spots: Optional[int] = None
    is_cancelled: bool

    model_config = ConfigDict(from_attributes=True)
