"""
Natours Backend — Auth Service
================================

What:  Signup, login and token-subject resolution.
Who:   Called by the /api/v1/users/signup and /login routes and by the protect
       dependency.

Login enumeration resistance:
    An unknown e-mail and a wrong password produce the same AuthenticationError
    (same status, same message). A password comparison still runs for unknown
    e-mails so the two cases also take comparable time.
"""

import logging
import uuid
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AuthenticationError, ValidationError
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.user import (
    LoginRequest,
    LoginResponse,
    SignupRequest,
    SignupResponse,
    UserData,
    UserResponse,
)
from app.services.passwords import pwd_context, verify_password
from app.services.token_service import INVALID_TOKEN_MESSAGE, TokenService

logger = logging.getLogger(__name__)

MISSING_CREDENTIALS_MESSAGE = "Please provide email and password!"
INCORRECT_CREDENTIALS_MESSAGE = "Incorrect email or password"
USER_GONE_MESSAGE = "The user belonging to this token does no longer exist."

# Compared against when the e-mail is unknown
_DUMMY_HASH = pwd_context.hash("natours-timing-equaliser")


class AuthService:
    """
    Responsibilities:
        - signup():        persist a user, issue a token
        - login():         check credentials, issue a token
        - resolve_user():  map a verified token to a live user
    """

    async def signup(
        self,
        db: AsyncSession,
        payload: SignupRequest,
        tokens: TokenService,
    ) -> SignupResponse:
        """
        Create the account and sign a token for it.

        The token is signed before the request transaction commits: a signing
        failure rolls the new user back.
        """
        user = await UserRepository(db).create(
            name=payload.name,
            email=payload.email,
            password=payload.password,
            photo=payload.photo,
        )
        token = await tokens.sign(user.id)
        logger.info("Signup completed for user %s", user.id)
        return SignupResponse(
            token=token,
            data=UserData(user=UserResponse.model_validate(user)),
        )

    async def login(
        self,
        db: AsyncSession,
        payload: LoginRequest,
        tokens: TokenService,
    ) -> LoginResponse:
        if not payload.email or not payload.password:
            raise ValidationError(message=MISSING_CREDENTIALS_MESSAGE)

        user = await UserRepository(db).find_by_email(payload.email, with_password=True)
        stored_hash = user.password_hash if user is not None else _DUMMY_HASH
        password_ok = await verify_password(payload.password, stored_hash)

        if user is None or not password_ok:
            raise AuthenticationError(message=INCORRECT_CREDENTIALS_MESSAGE)

        return LoginResponse(token=await tokens.sign(user.id))

    async def resolve_user(self, db: AsyncSession, token: str, tokens: TokenService) -> User:
        """
        Verify the token and load its subject.

        Raises:
            AuthenticationError: bad token, expired token, or deleted user.
        """
        payload = await tokens.verify(token)
        try:
            user_id = uuid.UUID(str(payload["id"]))
        except ValueError as e:
            raise AuthenticationError(message=INVALID_TOKEN_MESSAGE) from e

        user = await UserRepository(db).find_by_id(user_id)
        if user is None:
            raise AuthenticationError(message=USER_GONE_MESSAGE)
        return user


# Singleton instance
auth_service = AuthService()
