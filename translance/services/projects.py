"""Project lifecycle services."""
from __future__ import annotations

import logging
import math
from datetime import datetime
from decimal import Decimal

from fastapi import UploadFile
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from translance.config import get_settings
from translance.models.account import Account
from translance.models.escrow import EscrowStatus, EscrowTransaction
from translance.models.project import OWNER_TRANSITIONS, Project, ProjectStatus
from translance.schemas.project import Pagination, ProjectUpdate
from translance.utils.audit import actor_for, log_audit
from translance.utils.errors import conflict, forbidden, not_found, validation_error
from translance.utils.money import to_decimal
from translance.utils.uploads import DOCUMENT_EXTENSIONS, remove_files, save_upload

logger = logging.getLogger(__name__)


def get_project_or_404(db: Session, project_id: int) -> Project:
    project = db.get(Project, project_id)
    if project is None:
        raise not_found("PROJECT_NOT_FOUND", "Project not found")
    return project


def _ensure_owner(project: Project, account: Account, verb: str) -> None:
    if project.owner_id != account.id:
        raise forbidden("NOT_PROJECT_OWNER", f"Not authorized to {verb} this project")


def create_project(
    db: Session,
    owner: Account,
    *,
    title: str,
    description: str,
    source_language: str,
    target_language: str,
    budget: Decimal,
    deadline: datetime | None = None,
    files: list[UploadFile] | None = None,
) -> Project:
    """Store uploaded documents then create the project in POSTED status."""

    settings = get_settings()
    uploads = [upload for upload in (files or []) if upload.filename]
    if len(uploads) > settings.MAX_PROJECT_FILES:
        raise validation_error(
            "TOO_MANY_FILES", f"At most {settings.MAX_PROJECT_FILES} files per project"
        )

    stored: list[str] = []
    try:
        for upload in uploads:
            stored.append(
                save_upload(
                    upload,
                    subdir="projects",
                    allowed_extensions=DOCUMENT_EXTENSIONS,
                    max_bytes=settings.MAX_PROJECT_FILE_BYTES,
                )
            )

        project = Project(
            owner_id=owner.id,
            title=title.strip(),
            description=description.strip(),
            source_language=source_language.strip(),
            target_language=target_language.strip(),
            budget=to_decimal(budget),
            deadline=deadline,
            status=ProjectStatus.POSTED,
            attached_files=stored,
        )
        db.add(project)
        db.flush()
        log_audit(
            db,
            actor=actor_for(owner),
            action="PROJECT_CREATED",
            entity="Project",
            entity_id=project.id,
            data={
                "budget": str(project.budget),
                "source_language": project.source_language,
                "target_language": project.target_language,
                "files": len(stored),
            },
        )
        db.commit()
    except Exception:
        db.rollback()
        remove_files(stored)
        raise

    db.refresh(project)
    logger.info("Project created", extra={"project_id": project.id, "owner_id": owner.id})
    return project


def _has_pending_escrow(db: Session, project_id: int) -> bool:
    stmt = select(EscrowTransaction.id).where(
        EscrowTransaction.project_id == project_id,
        EscrowTransaction.status == EscrowStatus.PENDING,
    )
    return db.scalars(stmt).first() is not None


def update_project(db: Session, project_id: int, caller: Account, payload: ProjectUpdate) -> Project:
    project = get_project_or_404(db, project_id)
    _ensure_owner(project, caller, "update")

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    new_status = changes.pop("status", None)
    if new_status is not None and new_status != project.status:
        allowed = OWNER_TRANSITIONS[project.status]
        if new_status not in allowed:
            raise conflict(
                "INVALID_STATUS_TRANSITION",
                f"Cannot move project from {project.status.value} to {new_status.value}",
            )
        if new_status == ProjectStatus.CANCELLED and _has_pending_escrow(db, project.id):
            raise conflict("ESCROW_PENDING", "Refund the pending payment to cancel this project")

    if "budget" in changes:
        changes["budget"] = to_decimal(changes["budget"])
    for field, value in changes.items():
        setattr(project, field, value)

    previous_status = project.status
    if new_status is not None:
        project.status = new_status

    log_audit(
        db,
        actor=actor_for(caller),
        action="PROJECT_UPDATED",
        entity="Project",
        entity_id=project.id,
        data={
            "fields": sorted(changes),
            "status_from": previous_status.value,
            "status_to": project.status.value,
        },
    )
    db.commit()
    db.refresh(project)
    logger.info(
        "Project updated",
        extra={"project_id": project.id, "status": project.status.value},
    )
    return project


def delete_project(db: Session, project_id: int, caller: Account) -> None:
    """Delete the project, its bids, reviews and escrow row, then its files."""

    project = get_project_or_404(db, project_id)
    _ensure_owner(project, caller, "delete")

    files = list(project.attached_files or [])
    db.delete(project)
    log_audit(
        db,
        actor=actor_for(caller),
        action="PROJECT_DELETED",
        entity="Project",
        entity_id=project_id,
        data={"files": len(files)},
    )
    db.commit()
    remove_files(files)
    logger.info("Project deleted", extra={"project_id": project_id})


def list_projects(
    db: Session,
    *,
    status: ProjectStatus | None = None,
    source_language: str | None = None,
    target_language: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Project], Pagination]:
    filters = []
    if status is not None:
        filters.append(Project.status == status)
    if source_language:
        filters.append(Project.source_language == source_language)
    if target_language:
        filters.append(Project.target_language == target_language)

    total = db.scalar(select(func.count(Project.id)).where(*filters)) or 0
    stmt = (
        select(Project)
        .where(*filters)
        .order_by(Project.created_at.desc(), Project.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    projects = list(db.scalars(stmt).unique().all())
    pagination = Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit))
    return projects, pagination


__all__ = [
    "get_project_or_404",
    "create_project",
    "update_project",
    "delete_project",
    "list_projects",
]
