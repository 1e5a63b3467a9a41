"""
Natours Backend — User Request/Response Schemas
=================================================

What:  API contracts for signup, login and the admin user endpoints.

Security:
    UserResponse has no password field. Nothing built from it can leak the hash,
    whatever was loaded on the ORM object.
"""

import uuid
from typing import List, Literal, Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from app.schemas.common import CamelModel

RoleName = Literal["user", "guide", "lead-guide", "admin"]


class SignupRequest(CamelModel):
    """
    What:  Body of POST /api/v1/users/signup.
    Rules: all four fields required, password at least 8 characters,
           confirmPassword must equal password. Role is never taken from signup.
    """

    name: str = Field(min_length=1, max_length=100, description="Display name")
    email: EmailStr = Field(description="Login e-mail, must be unique")
    password: str = Field(min_length=8, max_length=128)
    confirm_password: str = Field(description="Must repeat password exactly")
    photo: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please tell us your name!")
        return v

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()

    @model_validator(mode="after")
    def passwords_match(self) -> "SignupRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords are not the same!")
        return self


class LoginRequest(CamelModel):
    """
    Body of POST /api/v1/users/login.

    Both fields are optional here: their absence is reported by the login flow
    itself with "Please provide email and password!".
    """

    email: Optional[str] = None
    password: Optional[str] = None


class UserUpdate(CamelModel):
    """Admin update. Passwords are never changed through this model."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    photo: Optional[str] = None
    role: Optional[RoleName] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v


class UserResponse(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    photo: Optional[str] = None
    role: str


class UserData(CamelModel):
    user: UserResponse


class UsersData(CamelModel):
    users: List[UserResponse]


class SignupResponse(CamelModel):
    status: Literal["success"] = "success"
    token: str
    data: UserData


class LoginResponse(CamelModel):
    status: Literal["success"] = "success"
    token: str


class UserEnvelope(CamelModel):
    status: Literal["success"] = "success"
    data: UserData


class UserListEnvelope(CamelModel):
    status: Literal["success"] = "success"
    results: int
    data: UsersData
