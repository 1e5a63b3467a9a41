"""
Natours Backend — Review Request/Response Schemas
===================================================
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from app.schemas.common import CamelModel


class ReviewCreate(CamelModel):
    """
    Body of POST /api/v1/reviews and POST /api/v1/tours/{tourId}/reviews.

    `tour` is only read from the body on the top-level route; the nested route
    takes it from the path. The author always comes from the authenticated user.
    """

    review: str = Field(min_length=1, description="Review text")
    rating: float = Field(ge=1, le=5)
    tour: Optional[uuid.UUID] = None

    @field_validator("review")
    @classmethod
    def strip_review(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Review can not be empty!")
        return v


class ReviewAuthor(CamelModel):
    id: uuid.UUID
    name: str
    photo: Optional[str] = None


class ReviewResponse(CamelModel):
    id: uuid.UUID
    review: str
    rating: float
    tour: uuid.UUID
    # None when the referenced user no longer exists
    user: Optional[ReviewAuthor] = None
    created_at: datetime


class ReviewData(CamelModel):
    review: ReviewResponse


class ReviewsData(CamelModel):
    reviews: List[ReviewResponse]


class ReviewEnvelope(CamelModel):
    status: Literal["success"] = "success"
    data: ReviewData


class ReviewListEnvelope(CamelModel):
    status: Literal["success"] = "success"
    results: int
    data: ReviewsData
