"""
Natours Backend — User Route Handlers
=======================================

What:  /api/v1/users: signup and login (public), user management (admin only).
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies.auth import get_token_service, restrict_to
from app.schemas.common import ErrorResponse
from app.schemas.user import (
    LoginRequest,
    LoginResponse,
    SignupRequest,
    SignupResponse,
    UserEnvelope,
    UserListEnvelope,
    UserUpdate,
)
from app.services.auth_service import auth_service
from app.services.token_service import TokenService
from app.services.user_service import user_service
from app.utils.catch_async import catch_async

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["Users"])

admin_only = restrict_to("admin")


# ── Authentication ────────────────────────────────────────────────────────

@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_200_OK,
    responses={400: {"description": "Invalid or duplicate signup data", "model": ErrorResponse}},
    summary="Create an account and receive a token",
)
@catch_async
async def signup(
    payload: SignupRequest,
    db: AsyncSession = Depends(get_db_session),
    tokens: TokenService = Depends(get_token_service),
) -> SignupResponse:
    return await auth_service.signup(db, payload, tokens)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Email or password missing", "model": ErrorResponse},
        401: {"description": "Incorrect email or password", "model": ErrorResponse},
    },
    summary="Exchange credentials for a token",
)
@catch_async
async def login(
    payload: Optional[LoginRequest] = None,
    db: AsyncSession = Depends(get_db_session),
    tokens: TokenService = Depends(get_token_service),
) -> LoginResponse:
    # A missing body is reported like missing fields
    return await auth_service.login(db, payload or LoginRequest(), tokens)


# ── Administration ────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=UserListEnvelope,
    dependencies=[Depends(admin_only)],
    summary="List users",
)
@catch_async
async def get_all_users(db: AsyncSession = Depends(get_db_session)) -> UserListEnvelope:
    return await user_service.list_users(db)


@router.get(
    "/{user_id:uuid}",
    response_model=UserEnvelope,
    dependencies=[Depends(admin_only)],
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user",
)
@catch_async
async def get_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    return await user_service.get_user(db, user_id)


@router.patch(
    "/{user_id:uuid}",
    response_model=UserEnvelope,
    dependencies=[Depends(admin_only)],
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Update a user (never the password)",
)
@catch_async
async def update_user(
    user_id: UUID,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    return await user_service.update_user(db, user_id, payload)


@router.delete(
    "/{user_id:uuid}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    dependencies=[Depends(admin_only)],
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Delete a user",
)
@catch_async
async def delete_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await user_service.delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
