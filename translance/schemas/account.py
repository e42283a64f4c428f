"""Account and authentication schemas."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from translance.models.account import AccountRole


class RegisterRequest(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: AccountRole
    languages: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if len(cleaned) < 2:
            raise ValueError("Name must be at least 2 characters")
        return cleaned

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class AccountSummary(BaseModel):
    id: int
    name: str
    rating: Decimal

    model_config = ConfigDict(from_attributes=True)


class AccountPublic(BaseModel):
    id: int
    name: str
    role: AccountRole
    languages: list[str]
    rating: Decimal
    profile_picture: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AccountRead(AccountPublic):
    email: EmailStr


class AuthResponse(BaseModel):
    account: AccountRead
    token: str
