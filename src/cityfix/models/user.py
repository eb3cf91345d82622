"""Pydantic models for users and authentication."""

from datetime import datetime

from pydantic import EmailStr, Field

from cityfix.models.common import CamelModel


# ── Request models ─────────────────────────────────────────────────────────────

class UserCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(min_length=6)


class UserLogin(CamelModel):
    email: EmailStr
    password: str


class UserUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    avatar: str | None = None
    notifications: bool | None = None
    location_services: bool | None = None


# ── Response models ────────────────────────────────────────────────────────────

class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    avatar: str | None
    notifications: bool
    location_services: bool
    created_at: datetime


class AuthResponse(CamelModel):
    token: str
    user: UserResponse


class UserEnvelope(CamelModel):
    success: bool = True
    user: UserResponse
