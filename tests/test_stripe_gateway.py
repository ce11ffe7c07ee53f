from __future__ import annotations

import unittest
from unittest import mock

import stripe

from services.stripe_gateway import StripeGateway


class StripeGatewayTest(unittest.TestCase):
    def setUp(self) -> None:
        self.gateway = StripeGateway("sk_test_123")

    def test_create_customer_passes_key_per_call(self) -> None:
        with mock.patch.object(stripe.Customer, "create", return_value={"id": "cus_1"}) as create:
            result = self.gateway.create_customer("pat@example.com", "user-1")

        self.assertEqual(result, {"id": "cus_1"})
        create.assert_called_once_with(
            api_key="sk_test_123",
            email="pat@example.com",
            metadata={"supabase_uid": "user-1"},
        )

    def test_setup_intent_is_off_session(self) -> None:
        with mock.patch.object(
            stripe.SetupIntent, "create", return_value={"client_secret": "seti_secret"}
        ) as create:
            self.gateway.create_setup_intent("cus_1")

        create.assert_called_once_with(
            api_key="sk_test_123",
            customer="cus_1",
            usage="off_session",
            automatic_payment_methods={"enabled": True},
        )

    def test_list_card_payment_methods(self) -> None:
        listing = {"object": "list", "data": [{"id": "pm_1"}]}
        with mock.patch.object(stripe.PaymentMethod, "list", return_value=listing) as list_:
            result = self.gateway.list_card_payment_methods("cus_1")

        self.assertEqual(result["data"], [{"id": "pm_1"}])
        list_.assert_called_once_with(api_key="sk_test_123", customer="cus_1", type="card")

    def test_create_subscription(self) -> None:
        with mock.patch.object(
            stripe.Subscription, "create", return_value={"id": "sub_1", "status": "incomplete"}
        ) as create:
            self.gateway.create_subscription("cus_1", "price_1", "pm_1")

        create.assert_called_once_with(
            api_key="sk_test_123",
            customer="cus_1",
            items=[{"price": "price_1"}],
            default_payment_method="pm_1",
            payment_behavior="default_incomplete",
            expand=["latest_invoice.payment_intent"],
        )

    def test_create_portal_session(self) -> None:
        with mock.patch.object(
            stripe.billing_portal.Session, "create", return_value={"url": "https://billing.stripe.com/x"}
        ) as create:
            result = self.gateway.create_portal_session("cus_1", "https://x.test/account.html")

        self.assertEqual(result, {"url": "https://billing.stripe.com/x"})
        create.assert_called_once_with(
            api_key="sk_test_123", customer="cus_1", return_url="https://x.test/account.html"
        )

    def test_api_errors_become_error_mappings(self) -> None:
        error = stripe.InvalidRequestError(
            "No such customer: 'cus_x'", "id", code="resource_missing", http_status=404
        )
        with mock.patch.object(stripe.Customer, "retrieve", side_effect=error):
            result = self.gateway.retrieve_customer("cus_x")

        self.assertEqual(result["error"]["message"], "No such customer: 'cus_x'")
        self.assertEqual(result["error"]["code"], "resource_missing")
        self.assertEqual(result["error"]["http_status"], 404)

    def test_connection_errors_propagate(self) -> None:
        with mock.patch.object(
            stripe.Customer, "create", side_effect=stripe.APIConnectionError("network down")
        ):
            with self.assertRaises(stripe.APIConnectionError):
                self.gateway.create_customer("pat@example.com", "user-1")


if __name__ == "__main__":
    unittest.main()
