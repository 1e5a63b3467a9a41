"""
Natours Backend — Authentication Dependencies
===============================================

What:  `protect` authenticates the request from its Bearer token;
       `restrict_to(*roles)` builds a role gate on top of it.
How:   Plain FastAPI dependencies. Routes opt in per endpoint:

           @router.post("", dependencies=[Depends(restrict_to("admin", "lead-guide"))])

       or receive the user directly:

           user: User = Depends(restrict_to("user"))

Failure responses (all rendered by the central error handler):
    no token                 401  You are not logged in! Please log in to get access.
    bad signature / garbage  401  Invalid token. Please log in again!
    expired                  401  Your token has expired! Please log in again.
    user deleted since       401  The user belonging to this token does no longer exist.
    role not allowed         403  You do not have permission to perform this action
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import AuthenticationError, AuthorizationError
from app.models.user import User
from app.services.auth_service import auth_service
from app.services.token_service import TokenService
from app.utils.catch_async import catch_async

logger = logging.getLogger(__name__)


def get_token_service(request: Request) -> TokenService:
    """The TokenService create_app() built from the injected settings."""
    return request.app.state.token_service


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


@catch_async
async def protect(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    """
    Resolve the Bearer token to a live user and attach it to request.state.user.

    request.state.user_id holds the id as a plain string for code that runs
    after the request's session has closed (the access log).
    """
    token = _bearer_token(request)
    if token is None:
        raise AuthenticationError()

    user = await auth_service.resolve_user(db, token, tokens)
    request.state.user = user
    request.state.user_id = str(user.id)
    return user


def restrict_to(*roles: str) -> Callable[..., User]:
    """
    Build a dependency that admits only users whose role is in `roles`.

    The role set is fixed when the route is registered.
    """
    allowed = frozenset(roles)

    def role_gate(user: User = Depends(protect)) -> User:
        if user.role not in allowed:
            logger.info("User %s (role=%s) denied; requires %s", user.id, user.role, sorted(allowed))
            raise AuthorizationError()
        return user

    return role_gate
