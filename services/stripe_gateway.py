"""Stripe operations used by the billing functions.

Every method returns a plain mapping.  Stripe API errors are folded into an
``{"error": {...}}`` mapping so the billing pipelines can treat them the same
way as any other upstream error body; connection failures are left to
propagate because they are transport errors, not answers from Stripe.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict

import stripe

LOGGER = logging.getLogger(__name__)


class StripeGateway:
    def __init__(self, secret_key: str) -> None:
        self._secret_key = secret_key

    def _call(self, operation: Callable[..., Any], **params: Any) -> Dict[str, Any]:
        try:
            result = operation(api_key=self._secret_key, **params)
        except stripe.APIConnectionError:
            raise
        except stripe.StripeError as exc:
            LOGGER.warning("Stripe rejected %s: %s", getattr(operation, "__qualname__", operation), exc)
            return {
                "error": {
                    "message": exc.user_message or str(exc),
                    "code": exc.code,
                    "http_status": exc.http_status,
                }
            }
        return dict(result)

    def create_customer(self, email: str, user_id: str) -> Dict[str, Any]:
        return self._call(
            stripe.Customer.create,
            email=email,
            metadata={"supabase_uid": user_id},
        )

    def create_setup_intent(self, customer_id: str) -> Dict[str, Any]:
        # off_session lets the card be charged later without the user present
        return self._call(
            stripe.SetupIntent.create,
            customer=customer_id,
            usage="off_session",
            automatic_payment_methods={"enabled": True},
        )

    def retrieve_customer(self, customer_id: str) -> Dict[str, Any]:
        return self._call(stripe.Customer.retrieve, id=customer_id)

    def list_card_payment_methods(self, customer_id: str) -> Dict[str, Any]:
        return self._call(stripe.PaymentMethod.list, customer=customer_id, type="card")

    def create_subscription(
        self, customer_id: str, price_id: str, payment_method_id: str
    ) -> Dict[str, Any]:
        return self._call(
            stripe.Subscription.create,
            customer=customer_id,
            items=[{"price": price_id}],
            default_payment_method=payment_method_id,
            payment_behavior="default_incomplete",
            expand=["latest_invoice.payment_intent"],
        )

    def create_portal_session(self, customer_id: str, return_url: str) -> Dict[str, Any]:
        return self._call(
            stripe.billing_portal.Session.create,
            customer=customer_id,
            return_url=return_url,
        )
