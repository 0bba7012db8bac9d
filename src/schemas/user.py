"""User schema definitions.

This module defines the role enum, auth request/response models and the
authenticated Identity handed to routes by the access control gate.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Closed set of account roles."""

    ADMIN = "admin"
    TUTOR = "tutor"
    PARTICIPANT = "participant"

    @classmethod
    def parse(cls, value: str) -> Optional["Role"]:
        """Return the matching role or None for unknown values."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return None


class RegisterRequest(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""
    role: str = ""
    admin_token: Optional[str] = Field(
        default=None,
        description="Required for admin registration when ADMIN_REGISTRATION_TOKEN is set.",
    )


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class UserPublic(BaseModel):
    """Outward projection of a user; never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    tutor_id: Optional[int] = None
    participant_id: Optional[int] = None


class AuthResult(BaseModel):
    token: str
    expires_at: datetime
    user: UserPublic


class TokenClaims(BaseModel):
    """Verified content of a bearer token."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    role: Role
    email: Optional[str] = None
    expires_at: datetime


class Identity(TokenClaims):
    """The authenticated caller, passed explicitly through the call chain."""

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_tutor(self) -> bool:
        return self.role == Role.TUTOR
