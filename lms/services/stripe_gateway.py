# services/stripe_gateway.py
"""
Thin adapter over the Stripe SDK.

Orders are backed by PaymentIntents: ``create_payment`` opens one and
``retrieve_payment`` reports its current state. Amounts cross this boundary
in major units (e.g. dollars) and are converted to Stripe's minor units here.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

import stripe

from lms.errors import UpstreamError

logger = logging.getLogger(__name__)

PROVIDER = "stripe"

# Currencies Stripe expects without a minor unit
ZERO_DECIMAL_CURRENCIES = {"bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga", "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf"}


def to_minor_units(amount: float, currency: str) -> int:
    if currency.lower() in ZERO_DECIMAL_CURRENCIES:
        return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _summary(intent) -> Dict[str, Any]:
    return {
        "id": intent.id,
        "status": intent.status,
        "amount": intent.amount,
        "currency": intent.currency,
        "client_secret": getattr(intent, "client_secret", None),
    }


class StripePaymentGateway:
    def __init__(self, api_key: str):
        self.api_key = api_key

    def create_payment(self, amount: float, currency: str, metadata: Optional[Dict[str, str]] = None,
                       description: Optional[str] = None) -> Dict[str, Any]:
        params = {
            "amount": to_minor_units(amount, currency),
            "currency": currency,
            "metadata": metadata or {},
            "automatic_payment_methods": {"enabled": True},
        }
        if description:
            params["description"] = description
        try:
            intent = stripe.PaymentIntent.create(api_key=self.api_key, **params)
        except stripe.StripeError as e:
            logger.error(f"Stripe PaymentIntent creation failed: {e.user_message or str(e)}")
            raise UpstreamError(PROVIDER, e.user_message or str(e))
        logger.info(f"Opened PaymentIntent {intent.id}")
        return _summary(intent)

    def retrieve_payment(self, payment_id: str) -> Dict[str, Any]:
        try:
            intent = stripe.PaymentIntent.retrieve(payment_id, api_key=self.api_key)
        except stripe.StripeError as e:
            logger.error(f"Stripe PaymentIntent lookup failed for {payment_id}: {e.user_message or str(e)}")
            raise UpstreamError(PROVIDER, e.user_message or str(e))
        return _summary(intent)
