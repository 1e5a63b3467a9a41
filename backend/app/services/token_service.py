"""
Natours Backend — Token Service
=================================

What:  Issues and verifies signed, time-limited identity tokens (JWT, HS256).
How:   python-jose signs {"id", "iat", "exp"} with the configured secret.
       Signing and decoding run in Starlette's thread pool so a slow crypto
       backend never stalls the event loop.
Who:   Built once by create_app() from the injected Settings and stored on
       app.state.token_service. The auth routes sign; the protect dependency verifies.

Failure modes:
    sign()    → TokenSigningError (non-operational, 500). No retries.
    verify()  → AuthenticationError (operational, 401), with a dedicated
                message for expired tokens.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Union
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JOSEError
from starlette.concurrency import run_in_threadpool

from app.config import Settings
from app.exceptions import AuthenticationError, TokenSigningError

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid token. Please log in again!"
EXPIRED_TOKEN_MESSAGE = "Your token has expired! Please log in again."


class TokenService:
    """
    Stateless JWT helper bound to one secret/expiry/algorithm triple.

    Attributes:
        secret:     HMAC signing key
        expires_in: Token lifetime
        algorithm:  JWS algorithm (HS256 unless configured otherwise)
    """

    def __init__(self, secret: str, expires_in: timedelta, algorithm: str = "HS256"):
        self.secret = secret
        self.expires_in = expires_in
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.jwt_secret,
            expires_in=settings.jwt_expires_in,
            algorithm=settings.jwt_algorithm,
        )

    def _encode(self, claims: Dict[str, Any]) -> str:
        if not self.secret:
            raise TokenSigningError(message="JWT secret is not configured")
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    async def sign(self, user_id: Union[UUID, str]) -> str:
        """
        Produce a signed token for the given user id.

        Raises:
            TokenSigningError: The signing operation failed.
        """
        now = datetime.now(timezone.utc)
        claims = {
            "id": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.expires_in).timestamp()),
        }
        try:
            return await run_in_threadpool(self._encode, claims)
        except TokenSigningError:
            raise
        except (JOSEError, TypeError, ValueError) as e:
            logger.error("Token signing failed for user %s: %s", user_id, e)
            raise TokenSigningError(cause=e) from e

    async def verify(self, token: str) -> Dict[str, Any]:
        """
        Check signature and expiry; return the token payload.

        Raises:
            AuthenticationError: Malformed, tampered, expired or subject-less token.
        """
        try:
            payload = await run_in_threadpool(
                jwt.decode, token, self.secret, algorithms=[self.algorithm]
            )
        except ExpiredSignatureError as e:
            raise AuthenticationError(message=EXPIRED_TOKEN_MESSAGE) from e
        except JWTError as e:
            raise AuthenticationError(message=INVALID_TOKEN_MESSAGE) from e

        if not payload.get("id"):
            raise AuthenticationError(message=INVALID_TOKEN_MESSAGE)
        return payload
