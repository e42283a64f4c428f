"""Profile and freelancer directory endpoints."""
from decimal import Decimal

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from translance.db import get_db
from translance.models.account import Account
from translance.schemas.account import AccountPublic, AccountRead
from translance.security import require_account
from translance.services import accounts as accounts_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", response_model=AccountRead)
def get_profile(account: Account = Depends(require_account)) -> Account:
    return account


@router.put("/profile", response_model=AccountRead)
def update_profile(
    name: str | None = Form(default=None, max_length=100),
    languages: str | None = Form(default=None, description="JSON array of language names"),
    profile_picture: UploadFile | None = File(default=None, alias="profilePicture"),
    db: Session = Depends(get_db),
    account: Account = Depends(require_account),
) -> Account:
    """Update the caller's own profile. Languages are ignored for clients."""

    return accounts_service.update_profile(
        db,
        account,
        name=name,
        languages=languages,
        picture=profile_picture,
    )


@router.get("/freelancers/search", response_model=list[AccountPublic])
def search_freelancers(
    language: str | None = Query(default=None, max_length=64),
    min_rating: Decimal | None = Query(default=None, alias="minRating", ge=0, le=5),
    db: Session = Depends(get_db),
) -> list[Account]:
    return accounts_service.search_freelancers(db, language=language, min_rating=min_rating)


@router.get("/{account_id}", response_model=AccountPublic)
def get_public_profile(account_id: int, db: Session = Depends(get_db)) -> Account:
    """Public profile; email is never exposed here."""

    return accounts_service.get_account_or_404(db, account_id)
