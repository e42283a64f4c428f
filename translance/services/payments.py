"""Payment processor capability and its Stripe implementation.

The escrow ledger only talks to :class:`PaymentProcessor`; Stripe SDK calls are
confined to :class:`StripeProcessor` so tests and other providers can supply
their own implementation through :func:`get_payment_processor`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Protocol

import stripe
from fastapi import HTTPException, status

from translance.config import Settings, get_settings
from translance.utils.errors import error_response

logger = logging.getLogger(__name__)

HOLD_SUCCEEDED = "succeeded"


@dataclass
class PaymentHold:
    """Processor-side view of funds held for a project."""

    id: str
    status: str
    amount: Decimal
    currency: str
    client_secret: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == HOLD_SUCCEEDED


class PaymentProcessor(Protocol):
    def create_hold(
        self, *, amount: Decimal, currency: str, metadata: dict[str, str]
    ) -> PaymentHold: ...

    def confirm_hold(self, hold_id: str) -> PaymentHold: ...

    def release(self, hold_id: str, *, amount: Decimal, metadata: dict[str, str]) -> None: ...

    def refund(self, hold_id: str, *, reason: str | None = None) -> None: ...


def _to_cents(amount: Decimal) -> int:
    """Convert a decimal amount to the smallest currency unit expected by Stripe."""

    normalized = Decimal(str(amount)).quantize(Decimal("0.01"))
    return int((normalized * 100).to_integral_value())


def _from_cents(amount: int) -> Decimal:
    return (Decimal(amount) / Decimal("100")).quantize(Decimal("0.01"))


class StripeProcessor:
    """Wrapper around the Stripe Python SDK to isolate PSP concerns."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        if not settings.STRIPE_ENABLED:
            raise RuntimeError("Stripe integration is disabled; enable STRIPE_ENABLED to proceed.")
        if not settings.STRIPE_SECRET_KEY:
            raise RuntimeError("Stripe secret key is missing; configure STRIPE_SECRET_KEY.")
        stripe.api_key = settings.STRIPE_SECRET_KEY

    @staticmethod
    def _as_hold(intent: Any) -> PaymentHold:
        received = intent.get("amount_received") or intent.get("amount") or 0
        return PaymentHold(
            id=intent["id"],
            status=intent["status"],
            amount=_from_cents(received),
            currency=intent["currency"],
            client_secret=intent.get("client_secret"),
            metadata=dict(intent.get("metadata") or {}),
        )

    def create_hold(
        self, *, amount: Decimal, currency: str, metadata: dict[str, str]
    ) -> PaymentHold:
        """Create a PaymentIntent used to fund a project's escrow."""

        intent = stripe.PaymentIntent.create(
            amount=_to_cents(amount),
            currency=currency,
            metadata={**metadata, "type": "escrow"},
        )
        return self._as_hold(intent)

    def confirm_hold(self, hold_id: str) -> PaymentHold:
        return self._as_hold(stripe.PaymentIntent.retrieve(hold_id))

    def release(self, hold_id: str, *, amount: Decimal, metadata: dict[str, str]) -> None:
        # TODO: transfer to the freelancer's Stripe Connect account once payee onboarding exists.
        logger.info(
            "Escrow release recorded without transfer",
            extra={"payment_intent_id": hold_id, "amount": str(amount), **metadata},
        )

    def refund(self, hold_id: str, *, reason: str | None = None) -> None:
        stripe.Refund.create(
            payment_intent=hold_id,
            metadata={"reason": reason} if reason else {},
        )


def _processor_disabled() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=error_response("STRIPE_DISABLED", "Payment processing is not enabled."),
    )


def get_optional_payment_processor() -> PaymentProcessor | None:
    """FastAPI dependency: the configured processor, or ``None`` when payments are off.

    Settlement of an escrow that never went through the processor is pure
    bookkeeping and must keep working without Stripe.
    """

    settings = get_settings()
    if not settings.STRIPE_ENABLED:
        return None
    try:
        return StripeProcessor(settings)
    except RuntimeError as exc:
        logger.error("Stripe configuration error", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=error_response("STRIPE_NOT_CONFIGURED", str(exc)),
        ) from exc


def get_payment_processor() -> PaymentProcessor:
    """FastAPI dependency returning the configured processor or failing with 503."""

    return require_processor(get_optional_payment_processor())


def require_processor(processor: PaymentProcessor | None) -> PaymentProcessor:
    if processor is None:
        raise _processor_disabled()
    return processor


__all__ = [
    "HOLD_SUCCEEDED",
    "PaymentHold",
    "PaymentProcessor",
    "StripeProcessor",
    "get_optional_payment_processor",
    "get_payment_processor",
    "require_processor",
]
