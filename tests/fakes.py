"""In-memory doubles for the Stripe gateway and the Resend mailer."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from config.settings import Settings


def make_settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {
        "stripe_secret_key": "sk_test_123",
        "resend_api_key": "re_test_123",
        "supabase_url": "https://example.supabase.co",
        "supabase_anon_key": "anon-key",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeGateway:
    """Scripted stand-in for :class:`services.stripe_gateway.StripeGateway`."""

    def __init__(self, **responses: Any) -> None:
        self.responses = responses
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def _answer(self, name: str, *args: Any) -> Dict[str, Any]:
        self.calls.append((name, args))
        response = self.responses.get(name, {})
        if isinstance(response, Exception):
            raise response
        return response

    def called(self, name: str) -> bool:
        return any(call[0] == name for call in self.calls)

    def create_customer(self, email: str, user_id: str) -> Dict[str, Any]:
        return self._answer("create_customer", email, user_id)

    def create_setup_intent(self, customer_id: str) -> Dict[str, Any]:
        return self._answer("create_setup_intent", customer_id)

    def retrieve_customer(self, customer_id: str) -> Dict[str, Any]:
        return self._answer("retrieve_customer", customer_id)

    def list_card_payment_methods(self, customer_id: str) -> Dict[str, Any]:
        return self._answer("list_card_payment_methods", customer_id)

    def create_subscription(
        self, customer_id: str, price_id: str, payment_method_id: str
    ) -> Dict[str, Any]:
        return self._answer("create_subscription", customer_id, price_id, payment_method_id)

    def create_portal_session(self, customer_id: str, return_url: str) -> Dict[str, Any]:
        return self._answer("create_portal_session", customer_id, return_url)


class FakeMailer:
    def __init__(self, response: Optional[Any] = None) -> None:
        self.response = {"id": "msg_1"} if response is None else response
        self.sent: List[Dict[str, str]] = []

    def send(self, to: str, subject: str, html: str) -> Dict[str, Any]:
        self.sent.append({"to": to, "subject": subject, "html": html})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response
