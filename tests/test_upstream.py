from __future__ import annotations

import unittest
from unittest import mock

import requests

from services.upstream import UpstreamClient, upstream_error_message


def _response(status: int, body=None, json_error: Exception | None = None) -> mock.Mock:
    response = mock.Mock(spec=requests.Response)
    response.status_code = status
    response.ok = status < 400
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    return response


class UpstreamClientTest(unittest.TestCase):
    def setUp(self) -> None:
        self.session = mock.Mock(spec=requests.Session)
        self.client = UpstreamClient("https://api.resend.com/", "re_123", session=self.session)

    def test_posts_json_with_bearer(self) -> None:
        self.session.post.return_value = _response(200, {"id": "msg_1"})

        result = self.client.post_json("/emails", {"to": ["a@b.com"]})

        self.assertEqual(result, {"id": "msg_1"})
        self.session.post.assert_called_once_with(
            "https://api.resend.com/emails",
            json={"to": ["a@b.com"]},
            headers={"Content-Type": "application/json", "Authorization": "Bearer re_123"},
            timeout=None,
        )

    def test_no_credential_means_no_authorization_header(self) -> None:
        client = UpstreamClient("https://league.test/api", session=self.session, timeout=5)
        self.session.post.return_value = _response(200, {"ok": True})

        client.post_json("send-email", {})

        _, kwargs = self.session.post.call_args
        self.assertNotIn("Authorization", kwargs["headers"])
        self.assertEqual(kwargs["timeout"], 5)
        self.assertEqual(self.session.post.call_args[0][0], "https://league.test/api/send-email")

    def test_error_body_is_returned_unchanged(self) -> None:
        body = {"error": {"message": "No such customer", "type": "invalid_request_error"}}
        self.session.post.return_value = _response(404, body)
        self.assertEqual(self.client.post_json("/customers/x", {}), body)

    def test_failed_response_without_error_key_is_wrapped(self) -> None:
        body = {"statusCode": 422, "message": "Invalid `to` field.", "name": "validation_error"}
        self.session.post.return_value = _response(422, body)

        result = self.client.post_json("/emails", {})

        self.assertEqual(result, {"error": body})
        self.assertEqual(upstream_error_message(result, "fallback"), "Invalid `to` field.")

    def test_non_json_response_raises(self) -> None:
        self.session.post.return_value = _response(502, json_error=ValueError("no json"))
        with self.assertRaises(ValueError):
            self.client.post_json("/emails", {})

    def test_non_object_json_raises(self) -> None:
        self.session.post.return_value = _response(200, ["not", "an", "object"])
        with self.assertRaises(ValueError):
            self.client.post_json("/emails", {})

    def test_transport_errors_propagate(self) -> None:
        self.session.post.side_effect = requests.ConnectionError("unreachable")
        with self.assertRaises(requests.ConnectionError):
            self.client.post_json("/emails", {})


class UpstreamErrorMessageTest(unittest.TestCase):
    def test_message_from_error_object(self) -> None:
        self.assertEqual(upstream_error_message({"error": {"message": "Nope"}}, "x"), "Nope")

    def test_string_error(self) -> None:
        self.assertEqual(upstream_error_message({"error": "Nope"}, "x"), "Nope")

    def test_fallback(self) -> None:
        self.assertEqual(upstream_error_message({"error": {"message": "  "}}, "x"), "x")
        self.assertEqual(upstream_error_message({"error": None}, "x"), "x")
        self.assertEqual(upstream_error_message({}, "x"), "x")


if __name__ == "__main__":
    unittest.main()
