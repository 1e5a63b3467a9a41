"""
Natours Backend — Review Repository
=====================================

Interceptors:
    populate_review_authors  after find: sets a transient `author` on each review
                             (None when the reviewing user no longer exists).
"""

import uuid
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.review import Review
from app.repositories.user_repository import UserRepository


async def populate_review_authors(session: AsyncSession, reviews: Sequence[Review]) -> None:
    users = await UserRepository(session).find_by_ids(r.user_id for r in reviews)
    for review in reviews:
        review.author = users.get(review.user_id)


class ReviewRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_many(self, tour_id: Optional[uuid.UUID] = None) -> List[Review]:
        stmt = select(Review).order_by(Review.created_at.desc())
        if tour_id is not None:
            stmt = stmt.where(Review.tour_id == tour_id)
        result = await self.session.execute(stmt)
        reviews = list(result.scalars().all())
        await populate_review_authors(self.session, reviews)
        return reviews

    async def find_by_id(self, review_id: uuid.UUID) -> Optional[Review]:
        result = await self.session.execute(select(Review).where(Review.id == review_id))
        review = result.scalar_one_or_none()
        if review is not None:
            await populate_review_authors(self.session, [review])
        return review

    async def create(
        self,
        review: str,
        rating: float,
        tour_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Review:
        entity = Review(review=review, rating=rating, tour_id=tour_id, user_id=user_id)
        self.session.add(entity)
        await self.session.flush()
        await populate_review_authors(self.session, [entity])
        return entity

    async def delete(self, review: Review) -> None:
        await self.session.delete(review)
        await self.session.flush()
