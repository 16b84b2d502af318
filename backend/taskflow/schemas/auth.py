"""Pydantic schemas for registration, login and profiles"""
from pydantic import EmailStr, Field, ConfigDict
from typing import Optional
from datetime import datetime

from taskflow.schemas.base import CamelModel


class UserRegister(CamelModel):
    name: str = Field(..., min_length=2, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserLogin(CamelModel):
    email: EmailStr
    password: str


class UserSummary(CamelModel):
    """Public view of a user, used for assignment pickers"""
    id: str
    name: str
    email: str

    @classmethod
    def from_model(cls, user) -> "UserSummary":
        return cls(id=str(user.id), name=user.name, email=user.email)


class UserResponse(UserSummary):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, user) -> "UserResponse":
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class LoginResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserSummary


class UserProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=30)
    email: Optional[EmailStr] = None

    model_config = ConfigDict(extra="forbid")
