"""
Natours Backend — Tour Repository
===================================

What:  Data access for tours, including the two aggregate reports.

Interceptors (module-level functions, called only from TourRepository):
    derive_slug                    before save       slug = slugify(name)
    exclude_secret_tours           before find       drops secret tours from every
                                                     find variant (list, get, update,
                                                     delete by id)
    populate_guides                after find        resolves guide ids into
                                                     GuideSummary objects on tour.guides
    exclude_secret_from_aggregate  before aggregate  applies the same filter at the
                                                     head of every aggregate statement

A secret tour can therefore never be listed, fetched, updated, deleted or counted
through this repository.
"""

import logging
import time
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from slugify import slugify
from sqlalchemy import Select, extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.tour import Tour, TourStartDate
from app.repositories.base import flush_unique
from app.repositories.user_repository import UserRepository
from app.schemas.tour import GuideSummary
from app.utils.query_features import QueryFeatures

logger = logging.getLogger(__name__)

# API field name → column, for ?filter / ?sort
TOUR_FIELDS = {
    "name": Tour.name,
    "slug": Tour.slug,
    "duration": Tour.duration,
    "maxGroupSize": Tour.max_group_size,
    "difficulty": Tour.difficulty,
    "rating": Tour.rating,
    "ratingsAverage": Tour.ratings_average,
    "ratingsQuantity": Tour.ratings_quantity,
    "price": Tour.price,
    "priceDiscount": Tour.price_discount,
    "createdAt": Tour.created_at,
}

STATS_MIN_RATING = 4.5
MONTHLY_PLAN_LIMIT = 12


# ── Interceptors ──────────────────────────────────────────────────────────

def derive_slug(tour: Tour) -> None:
    """Before-save: the slug always follows the current name."""
    tour.slug = slugify(tour.name)


def exclude_secret_tours(stmt: Select) -> Select:
    """Before-find: secret_tour IS NOT TRUE (rows with a NULL flag stay visible)."""
    return stmt.where(Tour.secret_tour.is_not(True))


def exclude_secret_from_aggregate(stmt: Select) -> Select:
    """Before-aggregate: filter secret tours before any grouping happens."""
    return stmt.where(Tour.secret_tour.is_not(True))


async def populate_guides(session: AsyncSession, tours: Sequence[Tour]) -> None:
    """
    After-find: set a transient `guides` list of GuideSummary on each tour.

    Guide ids whose user no longer exists are dropped silently.
    """
    wanted = set()
    for tour in tours:
        for raw in tour.guide_ids or []:
            try:
                wanted.add(uuid.UUID(str(raw)))
            except ValueError:
                logger.warning("Tour %s holds a malformed guide id: %r", tour.id, raw)

    users = await UserRepository(session).find_by_ids(wanted)
    for tour in tours:
        guides = []
        for raw in tour.guide_ids or []:
            try:
                user = users.get(uuid.UUID(str(raw)))
            except ValueError:
                continue
            if user is not None:
                guides.append(GuideSummary.model_validate(user))
        tour.guides = guides


# ── Repository ────────────────────────────────────────────────────────────

class TourRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _find(self, stmt: Select) -> List[Tour]:
        started = time.perf_counter()
        result = await self.session.execute(exclude_secret_tours(stmt))
        tours = list(result.scalars().all())
        await populate_guides(self.session, tours)
        logger.debug(
            "Tour query took %.1f milliseconds (%d rows)",
            (time.perf_counter() - started) * 1000,
            len(tours),
        )
        return tours

    async def find_many(self, features: QueryFeatures) -> List[Tour]:
        return await self._find(features.apply(select(Tour)))

    async def find_by_id(self, tour_id: uuid.UUID) -> Optional[Tour]:
        tours = await self._find(select(Tour).where(Tour.id == tour_id))
        return tours[0] if tours else None

    async def create(self, values: Dict[str, Any]) -> Tour:
        start_dates = values.pop("start_dates", None) or []
        tour = Tour(**values)
        tour.start_dates = [TourStartDate(starts_at=d) for d in start_dates]
        return await self.save(tour)

    async def update(self, tour: Tour, changes: Dict[str, Any]) -> Tour:
        """Apply changes to a tour obtained through find_by_id, then save it."""
        start_dates = changes.pop("start_dates", None)
        for field, value in changes.items():
            setattr(tour, field, value)
        if start_dates is not None:
            tour.start_dates = [TourStartDate(starts_at=d) for d in start_dates]
        return await self.save(tour)

    async def save(self, tour: Tour) -> Tour:
        derive_slug(tour)
        self.session.add(tour)
        await flush_unique(self.session, field="name", value=tour.name)
        await populate_guides(self.session, [tour])
        return tour

    async def delete(self, tour: Tour) -> None:
        await self.session.delete(tour)
        await self.session.flush()

    # ── Aggregates ────────────────────────────────────────────────────────

    async def _aggregate(self, stmt: Select) -> List[Any]:
        result = await self.session.execute(exclude_secret_from_aggregate(stmt))
        return list(result.all())

    async def stats_by_difficulty(self) -> List[Dict[str, Any]]:
        """Per-difficulty figures for tours rated at least 4.5, cheapest average first."""
        avg_price = func.avg(Tour.price)
        stmt = (
            select(
                Tour.difficulty,
                func.count(Tour.id).label("num_tours"),
                func.coalesce(func.sum(Tour.ratings_quantity), 0).label("num_ratings"),
                func.avg(Tour.ratings_average).label("avg_rating"),
                avg_price.label("avg_price"),
                func.min(Tour.price).label("min_price"),
                func.max(Tour.price).label("max_price"),
            )
            .where(Tour.ratings_average >= STATS_MIN_RATING)
            .group_by(Tour.difficulty)
            .order_by(avg_price)
        )
        rows = await self._aggregate(stmt)
        return [
            {
                "difficulty": row.difficulty.upper(),
                "num_tours": row.num_tours,
                "num_ratings": int(row.num_ratings),
                "avg_rating": float(row.avg_rating),
                "avg_price": float(row.avg_price),
                "min_price": float(row.min_price),
                "max_price": float(row.max_price),
            }
            for row in rows
        ]

    async def monthly_plan(self, year: int) -> List[Dict[str, Any]]:
        """
        Start dates within `year` grouped by month: count and tour names,
        busiest month first, at most twelve entries.
        """
        month = extract("month", TourStartDate.starts_at)
        stmt = (
            select(month.label("month"), Tour.name)
            .join(TourStartDate, TourStartDate.tour_id == Tour.id)
            .where(TourStartDate.starts_at >= datetime(year, 1, 1, tzinfo=timezone.utc))
            .where(TourStartDate.starts_at < datetime(year + 1, 1, 1, tzinfo=timezone.utc))
            .order_by(month, TourStartDate.starts_at)
        )
        rows = await self._aggregate(stmt)

        by_month: Dict[int, List[str]] = defaultdict(list)
        for row in rows:
            by_month[int(row.month)].append(row.name)

        plan = [
            {"month": m, "num_tour_starts": len(names), "tours": names}
            for m, names in by_month.items()
        ]
        plan.sort(key=lambda entry: (-entry["num_tour_starts"], entry["month"]))
        return plan[:MONTHLY_PLAN_LIMIT]
