from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from translance import db
from translance.config import AppInfo, Settings, get_settings
from translance.core.logging import get_logger, setup_logging
import translance.models  # registers tables
from translance.routers import get_api_router
from translance.utils.errors import error_response

logger = get_logger(__name__)


def _configure_middlewares(fastapi_app: FastAPI) -> None:
    settings = get_settings()
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    if settings.PROMETHEUS_ENABLED:
        from starlette_exporter import PrometheusMiddleware, handle_metrics

        fastapi_app.add_middleware(PrometheusMiddleware, app_name="translance")
        fastapi_app.add_route("/metrics", handle_metrics)

    if settings.SENTRY_DSN:
        import sentry_sdk

        sentry_sdk.init(dsn=settings.SENTRY_DSN, traces_sample_rate=0.2)


def _assert_stripe_configuration(settings: Settings) -> None:
    """Fail fast when Stripe is switched on without a key outside dev."""

    if not settings.STRIPE_ENABLED or settings.STRIPE_SECRET_KEY:
        return
    if not settings.is_dev:
        logger.error(
            "STRIPE_ENABLED is set but STRIPE_SECRET_KEY is missing.",
            extra={"env": settings.app_env},
        )
        raise RuntimeError("Missing Stripe secret key in non-dev environment.")
    logger.warning(
        "Stripe enabled without a secret key; payment routes will answer 503.",
        extra={"env": settings.app_env},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, service=app_info.name, env=settings.app_env)
    logger.info("Application startup", extra={"env": settings.app_env})
    _assert_stripe_configuration(settings)

    db.init_engine()
    if settings.ALLOW_DB_CREATE_ALL and settings.is_dev:
        logger.warning(
            "Running Base.metadata.create_all() because APP_ENV=%s and ALLOW_DB_CREATE_ALL=True",
            settings.app_env,
        )
        db.create_all()
    else:
        logger.info(
            "Skipping create_all(); use Alembic migrations. APP_ENV=%s, ALLOW_DB_CREATE_ALL=%s",
            settings.app_env,
            settings.ALLOW_DB_CREATE_ALL,
        )
    try:
        yield
    finally:
        db.close_engine()
        logger.info("Application shutdown", extra={"env": settings.app_env})


app_info = AppInfo()

app = FastAPI(title=app_info.name, version=app_info.version, lifespan=lifespan)

_configure_middlewares(app)
app.include_router(get_api_router())


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception", exc_info=exc)
    details = str(exc) if get_settings().is_dev else None
    payload = error_response("INTERNAL_SERVER_ERROR", "An unexpected error occurred.", details)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict) and "error" in detail:
        content: dict[str, Any] = detail
    else:
        content = error_response("HTTP_ERROR", str(detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    payload = error_response("VALIDATION_ERROR", "Invalid request.", jsonable_encoder(exc.errors()))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=payload)


__all__ = ["app"]
