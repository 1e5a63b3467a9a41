"""
Natours Backend — User Repository
===================================

What:  Data access for users.

Interceptors:
    hash_password  before save: replaces a plain password with its bcrypt hash.

The password hash is a deferred column. Only find_by_email(with_password=True)
loads it, and only the login flow asks for it.
"""

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from app.models.user import User
from app.repositories.base import flush_unique
from app.services.passwords import hash_password as bcrypt_hash

logger = logging.getLogger(__name__)


# ── Interceptors ──────────────────────────────────────────────────────────

async def hash_password(user: User, plain_password: str) -> None:
    """Before-save: store only the hash of a newly set password."""
    user.password_hash = await bcrypt_hash(plain_password)


# ── Repository ────────────────────────────────────────────────────────────

class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        name: str,
        email: str,
        password: str,
        photo: Optional[str] = None,
        role: str = "user",
    ) -> User:
        user = User(name=name, email=email, photo=photo, role=role)
        await hash_password(user, password)
        self.session.add(user)
        await flush_unique(self.session, field="email", value=email)
        logger.info("User created: %s (role=%s)", user.id, user.role)
        return user

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str, with_password: bool = False) -> Optional[User]:
        stmt = select(User).where(User.email == email.lower())
        if with_password:
            stmt = stmt.options(undefer(User.password_hash))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_ids(self, user_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, User]:
        ids = set(user_ids)
        if not ids:
            return {}
        result = await self.session.execute(select(User).where(User.id.in_(ids)))
        return {user.id: user for user in result.scalars().all()}

    async def find_many(self, offset: int = 0, limit: int = 100) -> List[User]:
        stmt = select(User).order_by(User.created_at).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, user: User, changes: Dict[str, Any]) -> User:
        for field, value in changes.items():
            setattr(user, field, value)
        await flush_unique(self.session, field="email", value=changes.get("email"))
        return user

    async def delete(self, user: User) -> None:
        await self.session.delete(user)
        await self.session.flush()
