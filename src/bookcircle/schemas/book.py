"""
Pydantic schemas for the Book entity of BookCircle.
The aggregate rating fields are output-only: no input schema accepts them.
"""

from pydantic import BaseModel, Field, ConfigDict
import datetime
from typing import List, Optional

from ..core.enums import BookStatus, Genre, Language

class BookCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    author: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    isbn: Optional[str] = Field(None, max_length=20)
    cover_image_url: Optional[str] = None
    genres: List[Genre] = []
    language: Language = Language.ENGLISH
    publication_year: Optional[int] = Field(None, ge=1800, le=datetime.date.today().year + 1)
    publisher: Optional[str] = Field(None, max_length=100)
    page_count: Optional[int] = Field(None, ge=1)
    tags: List[str] = []
    is_indian: bool = False
    is_popular: bool = False
    is_featured: bool = False
    status: BookStatus = BookStatus.ACTIVE

class BookSchema(BaseModel):
    id: int
    title: str
    author: str
    description: str
    isbn: Optional[str] = None
    cover_image_url: Optional[str] = None
    genres: List[Genre]
    language: Language
    average_rating: float
    total_ratings: int
    total_reviews: int
    rating_percentage: float

    model_config = ConfigDict(from_attributes=True)
