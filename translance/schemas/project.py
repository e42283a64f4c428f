"""Project schemas."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from translance.models.project import ProjectStatus
from translance.schemas.account import AccountSummary
from translance.schemas.bid import BidRead


class ProjectUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=5, max_length=100)
    description: str | None = Field(default=None, min_length=20, max_length=2000)
    budget: Decimal | None = Field(default=None, ge=Decimal("1"))
    deadline: datetime | None = None
    status: ProjectStatus | None = None

    @field_validator("title", "description")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None


class ProjectRead(BaseModel):
    id: int
    owner_id: int
    title: str
    description: str
    source_language: str
    target_language: str
    budget: Decimal
    deadline: datetime | None
    status: ProjectStatus
    attached_files: list[str]
    bid_count: int
    owner: AccountSummary
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProjectDetail(ProjectRead):
    bids: list[BidRead]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ProjectPage(BaseModel):
    projects: list[ProjectRead]
    pagination: Pagination
