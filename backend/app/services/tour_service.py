"""
Natours Backend — Tour Service
================================

What:  Tour CRUD, the top-5-cheap alias and the stats / monthly-plan reports.
Who:   Called by app.routes.tours; uses TourRepository, which applies the tour
       interceptors (slug, secret filter, guide population).

Business rules enforced here:
    - priceDiscount must stay below price. TourCreate checks the request body
      alone; updates are checked against the merged (stored + patched) values,
      so lowering the price below an existing discount is rejected as well.
    - Required columns cannot be cleared with an explicit null in a PATCH body.
"""

import logging
from typing import Any, Dict, Mapping
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError, ValidationError
from app.models.tour import Tour
from app.repositories.tour_repository import TOUR_FIELDS, TourRepository
from app.schemas.tour import (
    DifficultyStats,
    MonthlyPlanData,
    MonthlyPlanEntry,
    MonthlyPlanEnvelope,
    TourCreate,
    TourData,
    TourEnvelope,
    TourListEnvelope,
    TourResponse,
    ToursData,
    TourStatsData,
    TourStatsEnvelope,
    TourUpdate,
    discount_error,
)
from app.utils.query_features import QueryFeatures

logger = logging.getLogger(__name__)

# Query string applied by GET /api/v1/tours/top-5-cheap
TOP_CHEAP_PARAMS = {
    "limit": "5",
    "sort": "-ratingsAverage,price",
    "fields": "name,price,ratingsAverage,summary,difficulty",
}

# Columns that may hold NULL; every other tour field is required
NULLABLE_FIELDS = {"price_discount", "description", "start_location"}


def _to_columns(data: Dict[str, Any]) -> Dict[str, Any]:
    """Request field names → Tour constructor/attribute names."""
    values = dict(data)
    if "guides" in values:
        values["guide_ids"] = [str(g) for g in values.pop("guides") or []]
    return values


def _project(tour: Tour, features: QueryFeatures) -> Dict[str, Any]:
    document = TourResponse.model_validate(tour).model_dump(by_alias=True, mode="json")
    include, exclude = features.projection()
    if include is not None:
        document = {k: v for k, v in document.items() if k in include or k == "id"}
    return {k: v for k, v in document.items() if k not in exclude or k == "id"}


class TourService:
    """
    Responsibilities:
        - list_tours() / top_cheap():  filtered, sorted, projected, paginated list
        - get_tour() / create_tour() / update_tour() / delete_tour()
        - tour_stats() / monthly_plan():  aggregate reports (secret tours excluded)
    """

    async def _get_or_404(self, repo: TourRepository, tour_id: UUID) -> Tour:
        tour = await repo.find_by_id(tour_id)
        if tour is None:
            raise NotFoundError(resource="tour", resource_id=str(tour_id))
        return tour

    async def list_tours(self, db: AsyncSession, params: Mapping[str, str]) -> TourListEnvelope:
        features = QueryFeatures(params, TOUR_FIELDS)
        tours = await TourRepository(db).find_many(features)
        return TourListEnvelope(
            results=len(tours),
            data=ToursData(tours=[_project(t, features) for t in tours]),
        )

    async def top_cheap(self, db: AsyncSession, params: Mapping[str, str]) -> TourListEnvelope:
        """The alias fixes limit, sort and fields; other filters still apply."""
        merged = {**dict(params), **TOP_CHEAP_PARAMS}
        return await self.list_tours(db, merged)

    async def get_tour(self, db: AsyncSession, tour_id: UUID) -> TourEnvelope:
        tour = await self._get_or_404(TourRepository(db), tour_id)
        return TourEnvelope(data=TourData(tour=TourResponse.model_validate(tour)))

    async def create_tour(self, db: AsyncSession, payload: TourCreate) -> TourEnvelope:
        tour = await TourRepository(db).create(_to_columns(payload.model_dump()))
        logger.info("Tour created: %s (%s)", tour.id, tour.slug)
        return TourEnvelope(data=TourData(tour=TourResponse.model_validate(tour)))

    async def update_tour(
        self, db: AsyncSession, tour_id: UUID, payload: TourUpdate
    ) -> TourEnvelope:
        changes = payload.model_dump(exclude_unset=True)

        for field, value in changes.items():
            if value is None and field not in NULLABLE_FIELDS:
                raise ValidationError(
                    message=f"{TourUpdate.model_fields[field].alias or field} cannot be null",
                    field=field,
                )

        repo = TourRepository(db)
        tour = await self._get_or_404(repo, tour_id)

        price = changes.get("price", tour.price)
        discount = changes.get("price_discount", tour.price_discount)
        if discount is not None and discount >= price:
            raise ValidationError(message=discount_error(discount), field="priceDiscount")

        tour = await repo.update(tour, _to_columns(changes))
        logger.info("Tour updated: %s", tour_id)
        return TourEnvelope(data=TourData(tour=TourResponse.model_validate(tour)))

    async def delete_tour(self, db: AsyncSession, tour_id: UUID) -> None:
        repo = TourRepository(db)
        tour = await self._get_or_404(repo, tour_id)
        await repo.delete(tour)
        logger.info("Tour deleted: %s", tour_id)

    async def tour_stats(self, db: AsyncSession) -> TourStatsEnvelope:
        rows = await TourRepository(db).stats_by_difficulty()
        return TourStatsEnvelope(
            data=TourStatsData(stats=[DifficultyStats(**row) for row in rows])
        )

    async def monthly_plan(self, db: AsyncSession, year: int) -> MonthlyPlanEnvelope:
        plan = await TourRepository(db).monthly_plan(year)
        return MonthlyPlanEnvelope(
            results=len(plan),
            data=MonthlyPlanData(plan=[MonthlyPlanEntry(**entry) for entry in plan]),
        )


tour_service = TourService()
