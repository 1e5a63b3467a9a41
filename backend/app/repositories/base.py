"""
Shared helpers for the repositories.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DuplicateFieldError

_UNIQUE_MARKERS = ("unique", "duplicate key")


def is_unique_violation(exc: IntegrityError) -> bool:
    text = str(exc.orig if exc.orig is not None else exc).lower()
    return any(marker in text for marker in _UNIQUE_MARKERS)


async def flush_unique(
    session: AsyncSession,
    field: str,
    value: Optional[str],
) -> None:
    """
    Flush pending changes; a unique-constraint violation becomes DuplicateFieldError
    naming the attempted value. Other integrity errors propagate unchanged.
    """
    try:
        await session.flush()
    except IntegrityError as e:
        if is_unique_violation(e):
            raise DuplicateFieldError(value=value, field=field) from e
        raise
