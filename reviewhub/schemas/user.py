"""
User Pydantic Schemas

These schemas define the shape of data for account-related API operations.

Schemas:
- UserCreate: Registration data (name, email, password)
- LoginRequest: Email/password credentials
- UserUpdate: Partial profile update, optionally with a new password
- UserResponse: Own account data (never exposes the password hash)
- UserPublicResponse: Author data shown next to reviews
- AuthResponse: UserResponse plus a bearer token

Pydantic v2 Features Used:
- model_config: Configure model behavior
- Field(): Define constraints and metadata
- field_validator: Validate and transform field values
- EmailStr: Built-in email validation
"""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def check_password_strength(v: str) -> str:
    """
    Password rules shared by registration and profile update.

    Requirements:
    - At least 8 characters (enforced by min_length)
    - At least 1 uppercase letter
    - At least 1 lowercase letter
    - At least 1 number
    """
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"\d", v):
        raise ValueError("Password must contain at least one number")
    return v


class UserCreate(BaseModel):
    """
    Schema for user registration.

    Example request body:
    {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "password": "SecurePass123"
    }
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Display name shown next to reviews",
        examples=["Jane Doe"],
    )

    email: EmailStr = Field(
        ...,
        description="User's email address, used for login",
        examples=["jane@example.com"],
    )

    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (min 8 chars, must include uppercase and number)",
        examples=["SecurePass123"],
    )

    profile_image: str | None = Field(
        default=None,
        max_length=500,
        description="URL to a profile image",
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def password_must_be_strong(cls, v: str) -> str:
        return check_password_strength(v)


class LoginRequest(BaseModel):
    """Email/password credentials."""

    email: EmailStr = Field(..., examples=["jane@example.com"])
    password: str = Field(..., min_length=1, examples=["SecurePass123"])

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UserUpdate(BaseModel):
    """
    Schema for updating the current user's profile.

    All fields are optional for partial updates. Omitted fields keep their
    current value.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = Field(default=None)
    profile_image: str | None = Field(default=None, max_length=500)
    password: str | None = Field(default=None, min_length=8, max_length=128)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return v.lower() if v is not None else v

    @field_validator("password")
    @classmethod
    def password_must_be_strong(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return check_password_strength(v)


class UserResponse(BaseModel):
    """
    Schema for the user's own account data.

    SECURITY: Never includes the password hash.
    """

    id: int = Field(..., description="Unique user identifier")
    name: str = Field(..., description="Display name")
    email: EmailStr = Field(..., description="User's email address")
    profile_image: str = Field(..., description="URL to the profile image")
    is_active: bool = Field(..., description="Whether the account is active")
    created_at: datetime = Field(..., description="When the user registered")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "name": "Jane Doe",
                "email": "jane@example.com",
                "profile_image": "https://via.placeholder.com/100?text=User",
                "is_active": True,
                "created_at": "2024-01-15T10:30:00Z",
            }
        },
    )


class UserPublicResponse(BaseModel):
    """
    Public author data shown next to reviews.

    Excludes email and account status.
    """

    id: int = Field(..., description="Unique user identifier")
    name: str = Field(..., description="Display name")
    profile_image: str = Field(..., description="URL to the profile image")

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(UserResponse):
    """Account data plus a freshly issued bearer token."""

    access_token: str = Field(..., description="Bearer token for the Authorization header")
    token_type: str = Field(default="bearer")
    expires_in: int = Field(..., description="Token lifetime in seconds")
