from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from booktrack.models.user import User

_FULL_NAME_RE = re.compile(r"^[a-zA-Z\s]+$")


class UserCreate(BaseModel):
    email: EmailStr = Field(max_length=255)
    password: str = Field(repr=False)
    full_name: str = Field(alias="fullName")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("email", "full_name", mode="before")
    @classmethod
    def strip_text(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError("Password must be at least 8 characters long")
        if not re.search(r"[A-Z]", value):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", value):
            raise ValueError("Password must contain at least one lowercase letter")
        if not re.search(r"[0-9]", value):
            raise ValueError("Password must contain at least one number")
        return value

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, value: str) -> str:
        if not 2 <= len(value) <= 50:
            raise ValueError("Full name must be between 2 and 50 characters")
        if not _FULL_NAME_RE.match(value):
            raise ValueError("Full name must contain only letters and spaces")
        return value


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, repr=False)

    model_config = ConfigDict(extra="ignore")

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class UserOut(BaseModel):
    user_id: int = Field(alias="userId")
    email: str
    full_name: str = Field(alias="fullName")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class AuthOut(UserOut):
    token: str


def user_to_schema(user: User) -> UserOut:
    """Convert a SQLAlchemy User instance to a UserOut schema."""
    return UserOut.model_validate(user)


def create_user_model(payload: UserCreate, password_hash: str) -> User:
    """Instantiate a User ORM object from a validated UserCreate payload."""
    return User(
        email=payload.email,
        password_hash=password_hash,
        full_name=payload.full_name,
    )
