"""Review schemas."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from translance.schemas.account import AccountSummary


class ReviewCreate(BaseModel):
    project_id: int
    reviewee_id: int
    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=1000)

    @field_validator("comment")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None


class ReviewUpdate(BaseModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, max_length=1000)


class ReviewRead(BaseModel):
    id: int
    project_id: int
    reviewer_id: int
    reviewee_id: int
    rating: int
    comment: str | None
    reviewer: AccountSummary
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewSummary(BaseModel):
    reviews: list[ReviewRead]
    average_rating: Decimal
    total_reviews: int
