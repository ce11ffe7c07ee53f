"""Billing pipelines behind the Stripe functions.

Each pipeline runs its Stripe calls in a fixed order.  A failing step raises
:class:`UpstreamFailure` (or another :class:`HandlerError`), which stops the
remaining steps and becomes the function's response.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Protocol

from services.contracts import (
    InvalidRequestError,
    PortalSessionRequest,
    SetupIntentRequest,
    SubscriptionRequest,
    UpstreamFailure,
)
from services.upstream import upstream_error_message

LOGGER = logging.getLogger(__name__)

NO_PAYMENT_METHOD_MESSAGE = (
    "No payment method found for this customer. "
    "Please update your payment method first."
)


class PaymentsGateway(Protocol):
    def create_customer(self, email: str, user_id: str) -> Dict[str, Any]: ...

    def create_setup_intent(self, customer_id: str) -> Dict[str, Any]: ...

    def retrieve_customer(self, customer_id: str) -> Dict[str, Any]: ...

    def list_card_payment_methods(self, customer_id: str) -> Dict[str, Any]: ...

    def create_subscription(
        self, customer_id: str, price_id: str, payment_method_id: str
    ) -> Dict[str, Any]: ...

    def create_portal_session(self, customer_id: str, return_url: str) -> Dict[str, Any]: ...


def _checked(
    result: Mapping[str, Any], fallback: str, step: str, status_code: int = 502
) -> Mapping[str, Any]:
    if "error" in result:
        LOGGER.error("Stripe %s error: %s", step, result["error"])
        raise UpstreamFailure(upstream_error_message(result, fallback), status_code)
    return result


def create_setup_intent(gateway: PaymentsGateway, request: SetupIntentRequest) -> Dict[str, Any]:
    customer = _checked(
        gateway.create_customer(request.email, request.user_id),
        "Failed to create customer",
        "customer",
    )
    setup_intent = _checked(
        gateway.create_setup_intent(customer["id"]),
        "Failed to create setup intent",
        "setup_intent",
    )
    return {
        "clientSecret": setup_intent.get("client_secret"),
        "customerId": customer["id"],
    }


def _object_id(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value or None
    if isinstance(value, Mapping):
        return _object_id(value.get("id"))
    return None


def resolve_payment_method(gateway: PaymentsGateway, customer: Mapping[str, Any]) -> str:
    """Pick the customer's default payment method, else their first card."""

    invoice_settings = customer.get("invoice_settings") or {}
    payment_method_id = _object_id(invoice_settings.get("default_payment_method"))
    if payment_method_id:
        return payment_method_id

    methods = _checked(
        gateway.list_card_payment_methods(customer["id"]),
        "Failed to list payment methods",
        "payment_methods",
    )
    for method in methods.get("data") or []:
        if isinstance(method, Mapping) and method.get("type", "card") == "card":
            payment_method_id = _object_id(method)
            if payment_method_id:
                return payment_method_id

    raise InvalidRequestError(NO_PAYMENT_METHOD_MESSAGE)


def create_subscription(gateway: PaymentsGateway, request: SubscriptionRequest) -> Dict[str, Any]:
    customer = _checked(
        gateway.retrieve_customer(request.customer_id),
        "Customer not found",
        "customer",
        status_code=404,
    )
    if customer.get("deleted"):
        raise UpstreamFailure("Customer not found", 404)
    customer = {**customer, "id": customer.get("id") or request.customer_id}

    payment_method_id = resolve_payment_method(gateway, customer)
    subscription = _checked(
        gateway.create_subscription(request.customer_id, request.price_id, payment_method_id),
        "Failed to create subscription",
        "subscription",
    )
    return {
        "subscriptionId": subscription.get("id"),
        "status": subscription.get("status"),
    }


def create_portal_session(gateway: PaymentsGateway, request: PortalSessionRequest) -> Dict[str, Any]:
    session = _checked(
        gateway.create_portal_session(request.customer_id, request.return_url),
        "Failed to create portal session",
        "portal_session",
    )
    return {"url": session.get("url")}
