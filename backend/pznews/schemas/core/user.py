"""
User schemas
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from pznews.schemas.common import ORMModel, RequestModel

UserRole = Literal["admin", "editor", "author"]

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserCreate(RequestModel):
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8, max_length=128)
    full_name: str = Field(..., min_length=2, max_length=255)
    role: UserRole = "author"
    avatar_url: Optional[str] = Field(None, max_length=500)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class UserUpdate(RequestModel):
    """Partial update; the password is changed elsewhere"""
    email: Optional[str] = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    full_name: Optional[str] = Field(None, min_length=2, max_length=255)
    role: Optional[UserRole] = None
    avatar_url: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) and v else v


class UserResponse(ORMModel):
    id: int
    email: str
    full_name: str
    role: str
    avatar_url: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
