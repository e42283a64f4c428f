"""Registration and session endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from translance.db import get_db
from translance.schemas.account import AuthResponse, LoginRequest, RegisterRequest
from translance.security import require_token
from translance.services import accounts as accounts_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> AuthResponse:
    """Create an account and return it with a fresh session token."""

    account, token = accounts_service.register(db, payload)
    return AuthResponse(account=account, token=token)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> AuthResponse:
    account, token = accounts_service.login(db, payload)
    return AuthResponse(account=account, token=token)


@router.post("/logout")
def logout(
    db: Session = Depends(get_db),
    token: str = Depends(require_token),
) -> dict[str, str]:
    """Revoke the bearer token used for this request."""

    accounts_service.logout(db, token)
    return {"message": "Logged out"}
