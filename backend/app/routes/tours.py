"""
Natours Backend — Tour Route Handlers
=======================================

What:  /api/v1/tours: list, top-5-cheap alias, stats, monthly plan, CRUD by id.
How:   Every handler is wrapped in catch_async and delegates to TourService.
       Mutations require an admin or lead-guide.

Route order:
    The static paths (top-5-cheap, tour-stats, monthly-plan) are registered
    before the id route. The id route only matches UUIDs, so any other segment
    falls through to the catch-all 404.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies.auth import restrict_to
from app.schemas.common import ErrorResponse
from app.schemas.tour import (
    MonthlyPlanEnvelope,
    TourCreate,
    TourEnvelope,
    TourListEnvelope,
    TourStatsEnvelope,
    TourUpdate,
)
from app.services.tour_service import tour_service
from app.utils.catch_async import catch_async

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tours", tags=["Tours"])

tour_managers = restrict_to("admin", "lead-guide")

_AUTH_RESPONSES = {
    401: {"description": "Not logged in or invalid token", "model": ErrorResponse},
    403: {"description": "Role not allowed", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=TourListEnvelope,
    summary="List tours",
    description=(
        "Filter with ?difficulty=easy or ?price[gte]=500, sort with "
        "?sort=-price,ratingsAverage, project with ?fields=name,price and paginate "
        "with ?page=2&limit=10. Secret tours are never listed."
    ),
)
@catch_async
async def get_all_tours(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> TourListEnvelope:
    return await tour_service.list_tours(db, request.query_params)


@router.get(
    "/top-5-cheap",
    response_model=TourListEnvelope,
    summary="Five best-rated, cheapest tours",
)
@catch_async
async def get_top_cheap_tours(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> TourListEnvelope:
    return await tour_service.top_cheap(db, request.query_params)


@router.get(
    "/tour-stats",
    response_model=TourStatsEnvelope,
    summary="Statistics per difficulty for tours rated 4.5 and above",
)
@catch_async
async def get_tour_stats(db: AsyncSession = Depends(get_db_session)) -> TourStatsEnvelope:
    return await tour_service.tour_stats(db)


@router.get(
    "/monthly-plan/{year}",
    response_model=MonthlyPlanEnvelope,
    summary="Tour starts per month of a year",
)
@catch_async
async def get_monthly_plan(
    year: int = Path(ge=1, le=9998, description="Calendar year, e.g. 2021"),
    db: AsyncSession = Depends(get_db_session),
) -> MonthlyPlanEnvelope:
    return await tour_service.monthly_plan(db, year)


@router.post(
    "",
    response_model=TourEnvelope,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(tour_managers)],
    responses={400: {"description": "Invalid tour", "model": ErrorResponse}, **_AUTH_RESPONSES},
    summary="Create a tour",
)
@catch_async
async def create_tour(
    payload: TourCreate,
    db: AsyncSession = Depends(get_db_session),
) -> TourEnvelope:
    return await tour_service.create_tour(db, payload)


@router.get(
    "/{tour_id:uuid}",
    response_model=TourEnvelope,
    responses={404: {"description": "Tour not found", "model": ErrorResponse}},
    summary="Get a tour",
)
@catch_async
async def get_tour(
    tour_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> TourEnvelope:
    return await tour_service.get_tour(db, tour_id)


@router.patch(
    "/{tour_id:uuid}",
    response_model=TourEnvelope,
    dependencies=[Depends(tour_managers)],
    responses={
        400: {"description": "Invalid update", "model": ErrorResponse},
        404: {"description": "Tour not found", "model": ErrorResponse},
        **_AUTH_RESPONSES,
    },
    summary="Update a tour",
)
@catch_async
async def update_tour(
    tour_id: UUID,
    payload: TourUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> TourEnvelope:
    return await tour_service.update_tour(db, tour_id, payload)


@router.delete(
    "/{tour_id:uuid}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    dependencies=[Depends(tour_managers)],
    responses={404: {"description": "Tour not found", "model": ErrorResponse}, **_AUTH_RESPONSES},
    summary="Delete a tour",
)
@catch_async
async def delete_tour(
    tour_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await tour_service.delete_tour(db, tour_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
