"""Project endpoints."""
from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from translance.db import get_db
from translance.models.account import Account, AccountRole
from translance.models.project import Project, ProjectStatus
from translance.schemas.project import ProjectDetail, ProjectPage, ProjectRead, ProjectUpdate
from translance.security import require_account, require_role
from translance.services import projects as projects_service

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=ProjectPage)
def list_projects(
    status_filter: ProjectStatus | None = Query(default=None, alias="status"),
    source_language: str | None = Query(default=None, alias="sourceLanguage"),
    target_language: str | None = Query(default=None, alias="targetLanguage"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=50),
    db: Session = Depends(get_db),
) -> ProjectPage:
    projects, pagination = projects_service.list_projects(
        db,
        status=status_filter,
        source_language=source_language,
        target_language=target_language,
        page=page,
        limit=limit,
    )
    return ProjectPage(
        projects=[ProjectRead.model_validate(project) for project in projects],
        pagination=pagination,
    )


@router.get("/{project_id}", response_model=ProjectDetail)
def get_project(project_id: int, db: Session = Depends(get_db)) -> Project:
    return projects_service.get_project_or_404(db, project_id)


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_project(
    title: str = Form(..., min_length=5, max_length=100),
    description: str = Form(..., min_length=20, max_length=2000),
    source_language: str = Form(..., alias="sourceLanguage", min_length=1, max_length=64),
    target_language: str = Form(..., alias="targetLanguage", min_length=1, max_length=64),
    budget: Decimal = Form(..., ge=Decimal("1")),
    deadline: datetime | None = Form(default=None),
    files: list[UploadFile] | None = File(default=None),
    db: Session = Depends(get_db),
    owner: Account = Depends(require_role({AccountRole.CLIENT})),
) -> Project:
    """Post a project with up to five attached documents."""

    return projects_service.create_project(
        db,
        owner,
        title=title,
        description=description,
        source_language=source_language,
        target_language=target_language,
        budget=budget,
        deadline=deadline,
        files=files,
    )


@router.put("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: int,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    account: Account = Depends(require_account),
) -> Project:
    return projects_service.update_project(db, project_id, account, payload)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    account: Account = Depends(require_account),
) -> Response:
    projects_service.delete_project(db, project_id, account)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
