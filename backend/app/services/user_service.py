"""
Natours Backend — User Service
================================

Admin-only user management: list, read, update, delete.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.user import (
    UserData,
    UserEnvelope,
    UserListEnvelope,
    UserResponse,
    UsersData,
    UserUpdate,
)

logger = logging.getLogger(__name__)


class UserService:
    async def _get_or_404(self, repo: UserRepository, user_id: UUID) -> User:
        user = await repo.find_by_id(user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def list_users(self, db: AsyncSession) -> UserListEnvelope:
        users = await UserRepository(db).find_many()
        return UserListEnvelope(
            results=len(users),
            data=UsersData(users=[UserResponse.model_validate(u) for u in users]),
        )

    async def get_user(self, db: AsyncSession, user_id: UUID) -> UserEnvelope:
        user = await self._get_or_404(UserRepository(db), user_id)
        return UserEnvelope(data=UserData(user=UserResponse.model_validate(user)))

    async def update_user(
        self, db: AsyncSession, user_id: UUID, payload: UserUpdate
    ) -> UserEnvelope:
        repo = UserRepository(db)
        user = await self._get_or_404(repo, user_id)
        user = await repo.update(user, payload.model_dump(exclude_unset=True))
        logger.info("User %s updated", user_id)
        return UserEnvelope(data=UserData(user=UserResponse.model_validate(user)))

    async def delete_user(self, db: AsyncSession, user_id: UUID) -> None:
        repo = UserRepository(db)
        user = await self._get_or_404(repo, user_id)
        await repo.delete(user)
        logger.info("User %s deleted", user_id)


user_service = UserService()
