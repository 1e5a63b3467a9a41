"""
Natours Backend — Review Route Handlers
=========================================

Two routers:
    router         /api/v1/reviews                    tour taken from the body
    tour_reviews   /api/v1/tours/{tourId}/reviews     tour taken from the path

Creating a review requires the "user" role. Listing is public; so is DELETE.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies.auth import restrict_to
from app.models.user import User
from app.schemas.common import ErrorResponse
from app.schemas.review import ReviewCreate, ReviewEnvelope, ReviewListEnvelope
from app.services.review_service import review_service
from app.utils.catch_async import catch_async

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/reviews", tags=["Reviews"])
tour_reviews = APIRouter(prefix="/api/v1/tours/{tour_id:uuid}/reviews", tags=["Reviews"])

reviewers = restrict_to("user")

_CREATE_RESPONSES = {
    400: {"description": "Invalid review", "model": ErrorResponse},
    401: {"description": "Not logged in", "model": ErrorResponse},
    403: {"description": "Only users can post reviews", "model": ErrorResponse},
    404: {"description": "Tour not found", "model": ErrorResponse},
}


# ── /api/v1/reviews ───────────────────────────────────────────────────────

@router.get("", response_model=ReviewListEnvelope, summary="List all reviews")
@catch_async
async def get_all_reviews(db: AsyncSession = Depends(get_db_session)) -> ReviewListEnvelope:
    return await review_service.list_reviews(db)


@router.post(
    "",
    response_model=ReviewEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=_CREATE_RESPONSES,
    summary="Review a tour (tour id in the body)",
)
@catch_async
async def create_review(
    payload: ReviewCreate,
    user: User = Depends(reviewers),
    db: AsyncSession = Depends(get_db_session),
) -> ReviewEnvelope:
    return await review_service.create_review(db, payload, author=user)


@router.delete(
    "/{review_id:uuid}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"description": "Review not found", "model": ErrorResponse}},
    summary="Delete a review",
)
@catch_async
async def delete_review(
    review_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await review_service.delete_review(db, review_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── /api/v1/tours/{tourId}/reviews ────────────────────────────────────────

@tour_reviews.get("", response_model=ReviewListEnvelope, summary="List the reviews of a tour")
@catch_async
async def get_tour_reviews(
    tour_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ReviewListEnvelope:
    return await review_service.list_reviews(db, tour_id=tour_id)


@tour_reviews.post(
    "",
    response_model=ReviewEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=_CREATE_RESPONSES,
    summary="Review the tour in the path",
)
@catch_async
async def create_tour_review(
    tour_id: UUID,
    payload: ReviewCreate,
    user: User = Depends(reviewers),
    db: AsyncSession = Depends(get_db_session),
) -> ReviewEnvelope:
    return await review_service.create_review(db, payload, author=user, tour_id=tour_id)
