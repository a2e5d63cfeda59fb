"""
Pydantic schemas for the Review entity of BookCircle.
Defines the input and output models used to validate and serialize reviews.
"""

from pydantic import BaseModel, Field, ConfigDict
import datetime
from typing import List, Optional

class QuoteSchema(BaseModel):
    """
    A quote from the book attached to a review.

    Attributes:
        text (str): Quoted passage.
        page_number (Optional[int]): Page of the passage, 1 or more.
    """
    text: str = Field(..., min_length=1, max_length=500)
    page_number: Optional[int] = Field(None, ge=1)

    model_config = ConfigDict(from_attributes=True)

class ReviewBase(BaseModel):
    """
    Base schema for a review.

    Attributes:
        rating (int): Rating between 1 and 5.
        title (str): Review headline.
        content (str): Review body.
        quotes (List[QuoteSchema]): Ordered quotes from the book.
        is_spoiler (bool): Whether the review reveals the plot.
    """
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1, max_length=2000)
    quotes: List[QuoteSchema] = []
    is_spoiler: bool = False

class ReviewCreate(ReviewBase):
    """
    Schema for creating a review.
    user_id and book_id are supplied separately by the caller.
    """
    pass

class ReviewUpdate(BaseModel):
    """Partial update of a review; fields left as None are not touched."""
    rating: Optional[int] = Field(None, ge=1, le=5)
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    content: Optional[str] = Field(None, min_length=1, max_length=2000)
    quotes: Optional[List[QuoteSchema]] = None
    is_spoiler: Optional[bool] = None

class CommentSchema(BaseModel):
    user_id: int
    content: str
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)

class ReviewSchema(ReviewBase):
    """
    Output schema for a review.

    Attributes:
        id (int): Review ID.
        user_id (int): Author of the review.
        book_id (int): Reviewed book.
        like_count (int): Number of users who liked the review.
        comments (List[CommentSchema]): Comments in posting order.
        created_at (datetime.datetime): Creation date.
    """
    id: int
    user_id: int
    book_id: int
    helpful: int
    not_helpful: int
    like_count: int
    comments: List[CommentSchema] = []
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)
