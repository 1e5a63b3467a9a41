"""
Natours Backend — User SQLAlchemy Model
=========================================

What:  ORM model for the `users` table.
Who:   Read and written through app.repositories.user_repository only.

Password handling:
    password_hash is deferred: ordinary SELECTs do not load it. The login flow
    asks for it explicitly with undefer(User.password_hash). Read responses are
    built from UserResponse, which has no password field at all.
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class UserRole(str, enum.Enum):
    USER = "user"
    GUIDE = "guide"
    LEAD_GUIDE = "lead-guide"
    ADMIN = "admin"


class User(Base):
    """A registered account: tourist, guide or administrator."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Stored lower-cased by the request schema; unique index backs signup duplicates
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    photo: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, default=None)

    # Values of UserRole; stored as plain text
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.USER.value,
    )

    password_hash: Mapped[str] = mapped_column(
        "password",
        String(255),
        nullable=False,
        deferred=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
