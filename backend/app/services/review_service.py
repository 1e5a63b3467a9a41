"""
Natours Backend — Review Service
==================================

What:  Lists, creates and deletes reviews.

The reviewed tour is resolved through TourRepository, so a secret or deleted
tour can neither receive new reviews nor have its reviews listed on the
nested route (404). The top-level list is not filtered by tour visibility. The author is always the authenticated
user, never a value from the request body.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError, ValidationError
from app.models.review import Review
from app.models.user import User
from app.repositories.review_repository import ReviewRepository
from app.repositories.tour_repository import TourRepository
from app.schemas.review import (
    ReviewAuthor,
    ReviewCreate,
    ReviewData,
    ReviewEnvelope,
    ReviewListEnvelope,
    ReviewResponse,
    ReviewsData,
)

logger = logging.getLogger(__name__)


def _to_response(review: Review) -> ReviewResponse:
    author = getattr(review, "author", None)
    return ReviewResponse(
        id=review.id,
        review=review.review,
        rating=review.rating,
        tour=review.tour_id,
        user=ReviewAuthor.model_validate(author) if author is not None else None,
        created_at=review.created_at,
    )


class ReviewService:
    async def list_reviews(
        self, db: AsyncSession, tour_id: Optional[UUID] = None
    ) -> ReviewListEnvelope:
        """
        All reviews, or only those of `tour_id` on the nested route.

        The nested list 404s for a secret or missing tour, like create_review.
        """
        if tour_id is not None and await TourRepository(db).find_by_id(tour_id) is None:
            raise NotFoundError(resource="tour", resource_id=str(tour_id))

        reviews = await ReviewRepository(db).find_many(tour_id=tour_id)
        return ReviewListEnvelope(
            results=len(reviews),
            data=ReviewsData(reviews=[_to_response(r) for r in reviews]),
        )

    async def create_review(
        self,
        db: AsyncSession,
        payload: ReviewCreate,
        author: User,
        tour_id: Optional[UUID] = None,
    ) -> ReviewEnvelope:
        """
        Args:
            tour_id: Taken from the nested route path. When None the body's
                     `tour` field is used instead.
        """
        target = tour_id or payload.tour
        if target is None:
            raise ValidationError(message="Review must belong to a tour.", field="tour")

        if await TourRepository(db).find_by_id(target) is None:
            raise NotFoundError(resource="tour", resource_id=str(target))

        review = await ReviewRepository(db).create(
            review=payload.review,
            rating=payload.rating,
            tour_id=target,
            user_id=author.id,
        )
        logger.info("Review %s created for tour %s by user %s", review.id, target, author.id)
        return ReviewEnvelope(data=ReviewData(review=_to_response(review)))

    async def delete_review(self, db: AsyncSession, review_id: UUID) -> None:
        repo = ReviewRepository(db)
        review = await repo.find_by_id(review_id)
        if review is None:
            raise NotFoundError(resource="review", resource_id=str(review_id))
        await repo.delete(review)
        logger.info("Review deleted: %s", review_id)


review_service = ReviewService()
