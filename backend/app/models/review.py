"""
Natours Backend — Review SQLAlchemy Model
===========================================

What:  ORM model for the `reviews` table.

tour_id and user_id are weak references: plain UUID columns without foreign
keys, resolved at read time by the review repository. Deleting a tour or a user leaves its reviews in place.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Review(Base):
    __tablename__ = "reviews"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    review: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    tour_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, tour={self.tour_id}, rating={self.rating})>"
