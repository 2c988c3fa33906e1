from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .passwords import MAX_PASSWORD_BYTES


class UserCreate(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6, max_length=MAX_PASSWORD_BYTES)
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator("email", "name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class UserLogin(BaseModel):
    email: str
    password: str


class PublicUser(BaseModel):
    """Externally visible account. Never carries the password hash."""

    id: str
    email: str
    name: str
    role: Literal["student", "admin"]
    subscription: Dict[str, Any]
    profile: Dict[str, Any]
    study_progress: Dict[str, Any]
    settings: Dict[str, Any]
    created_at: datetime
    last_login: Optional[datetime] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    message: str
    token: str
    user: PublicUser


class MessageResponse(BaseModel):
    message: str
