"""API routers for the Translance backend."""
from fastapi import APIRouter

from . import auth, bids, health, projects, reviews, transactions, users


def get_api_router() -> APIRouter:
    """Return the root API router."""

    api_router = APIRouter()
    api_router.include_router(health.router)
    api_router.include_router(auth.router)
    api_router.include_router(users.router)
    api_router.include_router(projects.router)
    api_router.include_router(bids.router)
    api_router.include_router(transactions.router)
    api_router.include_router(reviews.router)
    return api_router
