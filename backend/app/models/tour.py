"""
Natours Backend — Tour SQLAlchemy Models
==========================================

What:  ORM models for the `tours` and `tour_start_dates` tables.
Who:   Read and written through app.repositories.tour_repository, which applies
       the tour interceptors (slug derivation, secret filtering, guide population).

Table Design:
    - GeoJSON values (start_location, locations) and image lists are JSON columns.
    - guide_ids is a JSON list of user UUID strings: a weak reference resolved at
      read time, never a foreign key.
    - start dates live in their own table so the monthly plan can group them in SQL.
    - duration_weeks is not stored; TourResponse computes it on read.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

DIFFICULTIES = ("easy", "medium", "difficult")


class Tour(Base):
    """A bookable tour. Tours with secret_tour=True never show up in queries."""

    __tablename__ = "tours"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(40), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(80), nullable=False, default="", index=True)
    secret_tour: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    max_group_size: Mapped[int] = mapped_column(Integer, nullable=False)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False)

    rating: Mapped[float] = mapped_column(Float, nullable=False, default=4.5)
    ratings_average: Mapped[float] = mapped_column(Float, nullable=False, default=4.5)
    ratings_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    price: Mapped[float] = mapped_column(Float, nullable=False)
    price_discount: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    summary: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_cover: Mapped[str] = mapped_column(String(255), nullable=False)
    images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    start_location: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    locations: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    guide_ids: Mapped[List[str]] = mapped_column("guides", JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    start_dates: Mapped[List["TourStartDate"]] = relationship(
        back_populates="tour",
        cascade="all, delete-orphan",
        order_by="TourStartDate.starts_at",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            "difficulty IN ('easy', 'medium', 'difficult')",
            name="ck_tours_difficulty",
        ),
        CheckConstraint(
            "price_discount IS NULL OR price_discount < price",
            name="ck_tours_discount_below_price",
        ),
    )

    def __repr__(self) -> str:
        return f"<Tour(id={self.id}, name='{self.name}', secret={self.secret_tour})>"


class TourStartDate(Base):
    """One scheduled start of a tour."""

    __tablename__ = "tour_start_dates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tour_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    tour: Mapped[Tour] = relationship(back_populates="start_dates")
