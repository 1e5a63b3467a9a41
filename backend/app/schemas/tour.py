"""
Natours Backend — Tour Request/Response Schemas
=================================================

What:  API contracts for tour CRUD, the top-5 alias and the two aggregate reports.

Field constraints mirror the data model:
    name           10-40 characters, unique (unique checked by the database)
    difficulty     easy | medium | difficult
    rating         1.0 - 5.0
    priceDiscount  strictly below price (create: checked here; update: checked
                   by TourService against the merged document)
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, computed_field, field_validator, model_validator

from app.schemas.common import CamelModel

Difficulty = Literal["easy", "medium", "difficult"]


def as_utc(value: Any) -> Any:
    """Attach UTC to naive datetimes (SQLite drops the offset on read)."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def discount_error(price_discount: float) -> str:
    return f"Discount price ({price_discount:g}) should be below regular price"


class GeoPoint(CamelModel):
    """GeoJSON point. Coordinates are [longitude, latitude]."""

    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(min_length=2, max_length=2)
    address: Optional[str] = None
    description: Optional[str] = None


class TourLocation(GeoPoint):
    day: Optional[int] = Field(default=None, ge=0)


class TourBase(CamelModel):
    @field_validator("summary", "description", check_fields=False)
    @classmethod
    def trim_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v

    @field_validator("name", mode="before", check_fields=False)
    @classmethod
    def trim_name(cls, v: Any) -> Any:
        # Before the 10-40 length check, so padding cannot satisfy it
        return v.strip() if isinstance(v, str) else v

    @field_validator("start_dates", check_fields=False)
    @classmethod
    def start_dates_in_utc(cls, v: Optional[List[datetime]]) -> Optional[List[datetime]]:
        if v is None:
            return v
        return [as_utc(d).astimezone(timezone.utc) for d in v]


class TourCreate(TourBase):
    name: str = Field(min_length=10, max_length=40)
    duration: int = Field(ge=1, description="Length in days")
    max_group_size: int = Field(ge=1)
    difficulty: Difficulty
    rating: float = Field(default=4.5, ge=1, le=5)
    ratings_average: float = Field(default=4.5, ge=1, le=5)
    ratings_quantity: int = Field(default=0, ge=0)
    price: float = Field(ge=0)
    price_discount: Optional[float] = Field(default=None, ge=0)
    summary: str = Field(min_length=1)
    description: Optional[str] = None
    image_cover: str = Field(min_length=1)
    images: List[str] = Field(default_factory=list)
    start_dates: List[datetime] = Field(default_factory=list)
    start_location: Optional[GeoPoint] = None
    locations: List[TourLocation] = Field(default_factory=list)
    guides: List[uuid.UUID] = Field(default_factory=list)
    secret_tour: bool = False

    @model_validator(mode="after")
    def discount_below_price(self) -> "TourCreate":
        if self.price_discount is not None and self.price_discount >= self.price:
            raise ValueError(discount_error(self.price_discount))
        return self


class TourUpdate(TourBase):
    """PATCH body: every field optional, same per-field constraints as TourCreate."""

    name: Optional[str] = Field(default=None, min_length=10, max_length=40)
    duration: Optional[int] = Field(default=None, ge=1)
    max_group_size: Optional[int] = Field(default=None, ge=1)
    difficulty: Optional[Difficulty] = None
    rating: Optional[float] = Field(default=None, ge=1, le=5)
    ratings_average: Optional[float] = Field(default=None, ge=1, le=5)
    ratings_quantity: Optional[int] = Field(default=None, ge=0)
    price: Optional[float] = Field(default=None, ge=0)
    price_discount: Optional[float] = Field(default=None, ge=0)
    summary: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    image_cover: Optional[str] = Field(default=None, min_length=1)
    images: Optional[List[str]] = None
    start_dates: Optional[List[datetime]] = None
    start_location: Optional[GeoPoint] = None
    locations: Optional[List[TourLocation]] = None
    guides: Optional[List[uuid.UUID]] = None
    secret_tour: Optional[bool] = None


class GuideSummary(CamelModel):
    """Embedded summary of a guide, resolved from the tour's guide ids."""

    id: uuid.UUID
    name: str
    email: str
    role: str
    photo: Optional[str] = None


class TourResponse(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    duration: int
    max_group_size: int
    difficulty: str
    rating: float
    ratings_average: float
    ratings_quantity: int
    price: float
    price_discount: Optional[float] = None
    summary: str
    description: Optional[str] = None
    image_cover: str
    images: List[str] = Field(default_factory=list)
    start_dates: List[datetime] = Field(default_factory=list)
    start_location: Optional[GeoPoint] = None
    locations: List[TourLocation] = Field(default_factory=list)
    guides: List[GuideSummary] = Field(default_factory=list)
    secret_tour: bool = False

    @field_validator("start_dates", mode="before")
    @classmethod
    def unwrap_start_dates(cls, v: Any) -> Any:
        # ORM rows arrive as TourStartDate objects; stored values are UTC
        return [as_utc(getattr(item, "starts_at", item)) for item in v or []]

    @computed_field(alias="durationWeeks")  # type: ignore[prop-decorator]
    @property
    def duration_weeks(self) -> float:
        return self.duration / 7


class TourData(CamelModel):
    tour: TourResponse


class TourEnvelope(CamelModel):
    status: Literal["success"] = "success"
    data: TourData


class ToursData(CamelModel):
    # Plain dicts: ?fields= may project any subset of TourResponse
    tours: List[Dict[str, Any]]


class TourListEnvelope(CamelModel):
    status: Literal["success"] = "success"
    results: int
    data: ToursData


class DifficultyStats(CamelModel):
    difficulty: str = Field(description="Upper-cased difficulty")
    num_tours: int
    num_ratings: int
    avg_rating: float
    avg_price: float
    min_price: float
    max_price: float


class TourStatsData(CamelModel):
    stats: List[DifficultyStats]


class TourStatsEnvelope(CamelModel):
    status: Literal["success"] = "success"
    data: TourStatsData


class MonthlyPlanEntry(CamelModel):
    month: int = Field(ge=1, le=12)
    num_tour_starts: int
    tours: List[str]


class MonthlyPlanData(CamelModel):
    plan: List[MonthlyPlanEntry]


class MonthlyPlanEnvelope(CamelModel):
    status: Literal["success"] = "success"
    results: int
    data: MonthlyPlanData
