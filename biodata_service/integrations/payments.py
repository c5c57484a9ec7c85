"""Stripe adapter: create chargeable intents and confirm captured payments."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import stripe

from ..config import get_settings
from ..services.exceptions import InternalServiceError, InvalidInputError, InvalidStateError

LOGGER = logging.getLogger("uvicorn.error")


def to_minor_units(amount: float) -> int:
    return int(round(float(amount) * 100))


class PaymentGateway:
    """Thin wrapper over the Stripe SDK. Blocking SDK calls run in a worker thread."""

    def __init__(self, secret_key: str, *, currency: str = "usd") -> None:
        self._secret_key = (secret_key or "").strip()
        self._currency = (currency or "usd").lower()

    def _require_key(self) -> str:
        if not self._secret_key:
            LOGGER.error("Payment gateway key missing (PAYMENT_GATEWAY_KEY / STRIPE_SECRET_KEY)")
            raise InternalServiceError("payment gateway not configured")
        return self._secret_key

    async def create_intent(self, amount: float) -> str:
        """Create a card PaymentIntent for ``amount`` major units; returns its client secret."""

        if amount is None or amount <= 0:
            raise InvalidInputError("amount must be a positive number")
        api_key = self._require_key()
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                amount=to_minor_units(amount),
                currency=self._currency,
                payment_method_types=["card"],
                api_key=api_key,
            )
        except stripe.StripeError as exc:
            msg = getattr(exc, "user_message", None) or str(exc)
            LOGGER.error("Stripe error creating payment intent: %s", msg)
            raise InternalServiceError("Stripe payment failed") from exc

        LOGGER.info("Stripe payment intent created: %s", intent.id)
        return intent.client_secret

    async def confirm_payment(self, transaction_id: str, amount: Optional[float] = None) -> None:
        """Require ``transaction_id`` to be a succeeded PaymentIntent, for ``amount`` when given."""

        api_key = self._require_key()
        try:
            intent = await asyncio.to_thread(stripe.PaymentIntent.retrieve, transaction_id, api_key=api_key)
        except stripe.InvalidRequestError as exc:
            LOGGER.warning("Unknown payment reference %s: %s", transaction_id, exc)
            raise InvalidInputError("unknown transactionId") from exc
        except stripe.StripeError as exc:
            LOGGER.error("Stripe error retrieving payment intent %s: %s", transaction_id, exc)
            raise InternalServiceError("Stripe payment lookup failed") from exc

        if intent.status != "succeeded":
            raise InvalidStateError(f"payment not completed (status: {intent.status})")
        if amount is not None:
            received = getattr(intent, "amount_received", None) or intent.amount
            if received != to_minor_units(amount):
                raise InvalidInputError("amountPaid does not match the captured payment")


def get_payment_gateway() -> PaymentGateway:
    settings = get_settings()
    return PaymentGateway(settings.payment_gateway_key, currency=settings.payment_currency)


__all__ = ["PaymentGateway", "get_payment_gateway", "to_minor_units"]
