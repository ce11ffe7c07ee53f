"""Shared request flow for the league's serverless functions.

This module is the single source of truth used both by the Vercel functions
located in ``api/`` and by the local Flask development server
(``server.py``).  Every function answers through :func:`json_response` so the
browser always receives the same JSON shape and CORS headers, including on
errors.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar, Union

import requests
from pydantic import ValidationError

from config.settings import Settings, get_settings
from services import billing
from services.billing import PaymentsGateway
from services.contracts import (
    EmailRequest,
    HandlerError,
    PortalSessionRequest,
    SetupIntentRequest,
    SubscriptionRequest,
    as_payload,
)
from services.mailer import ResendMailer, send_templated_email
from services.stripe_gateway import StripeGateway
from services.upstream import UpstreamClient

LOGGER = logging.getLogger(__name__)

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

RawBody = Union[bytes, str, None]
RequestT = TypeVar("RequestT")


@dataclass(frozen=True)
class Envelope:
    status_code: int
    headers: Dict[str, str]
    body: bytes

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8")) if self.body else None


def json_response(payload: Any, status: int = 200) -> Envelope:
    headers = {**CORS_HEADERS, "Content-Type": "application/json"}
    return Envelope(status, headers, json.dumps(payload).encode("utf-8"))


def preflight_response() -> Envelope:
    return Envelope(204, dict(CORS_HEADERS), b"")


def decode_json_body(raw_body: RawBody) -> Any:
    """Decode a request body, raising ``ValueError`` when it is not JSON."""

    if isinstance(raw_body, bytes):
        raw_body = raw_body.decode("utf-8")
    return json.loads(raw_body or "")


def load_settings(name: str, settings: Optional[Settings] = None) -> Optional[Settings]:
    """Return *settings* or the environment's, or ``None`` when it is malformed."""

    if settings is not None:
        return settings
    try:
        return get_settings()
    except ValidationError:
        LOGGER.exception("Invalid configuration for %s", name)
        return None


def process_request(
    method: str,
    raw_body: RawBody,
    *,
    name: str,
    secret_name: str,
    settings: Optional[Settings],
    parse: Callable[[Mapping[str, Any]], RequestT],
    execute: Callable[[Settings, RequestT], Any],
) -> Envelope:
    """Run the common validation flow, then hand the parsed request to *execute*.

    *secret_name* is the environment variable holding the function's secret;
    the matching :class:`Settings` field must be set before the body is read.
    """

    method = (method or "").upper()
    if method == "OPTIONS":
        return preflight_response()
    if method != "POST":
        return json_response({"error": "Method not allowed"}, 405)

    settings = load_settings(name, settings)
    if settings is None:
        return json_response({"error": "Server configuration error"}, 500)
    if not getattr(settings, secret_name.lower()):
        LOGGER.error("%s is not set", secret_name)
        return json_response({"error": "Server configuration error"}, 500)

    try:
        try:
            decoded = decode_json_body(raw_body)
        except ValueError:
            return json_response({"error": "Invalid JSON body"}, 400)

        request = parse(as_payload(decoded))
        return json_response(execute(settings, request))
    except HandlerError as exc:
        return json_response({"error": exc.message}, exc.status_code)
    except Exception:
        LOGGER.exception("Unexpected error in %s", name)
        return json_response({"error": "Internal server error"}, 500)


def process_create_setup_intent(
    method: str,
    raw_body: RawBody,
    *,
    settings: Optional[Settings] = None,
    gateway: Optional[PaymentsGateway] = None,
) -> Envelope:
    return process_request(
        method,
        raw_body,
        name="create-setup-intent",
        secret_name="STRIPE_SECRET_KEY",
        settings=settings,
        parse=SetupIntentRequest.from_payload,
        execute=lambda loaded, request: billing.create_setup_intent(
            gateway or StripeGateway(loaded.stripe_secret_key), request
        ),
    )


def process_create_subscription(
    method: str,
    raw_body: RawBody,
    *,
    settings: Optional[Settings] = None,
    gateway: Optional[PaymentsGateway] = None,
) -> Envelope:
    return process_request(
        method,
        raw_body,
        name="create-subscription",
        secret_name="STRIPE_SECRET_KEY",
        settings=settings,
        parse=SubscriptionRequest.from_payload,
        execute=lambda loaded, request: billing.create_subscription(
            gateway or StripeGateway(loaded.stripe_secret_key), request
        ),
    )


def process_create_portal_session(
    method: str,
    raw_body: RawBody,
    *,
    settings: Optional[Settings] = None,
    gateway: Optional[PaymentsGateway] = None,
) -> Envelope:
    return process_request(
        method,
        raw_body,
        name="create-portal-session",
        secret_name="STRIPE_SECRET_KEY",
        settings=settings,
        parse=PortalSessionRequest.from_payload,
        execute=lambda loaded, request: billing.create_portal_session(
            gateway or StripeGateway(loaded.stripe_secret_key), request
        ),
    )


def _send_email(
    settings: Settings, request: EmailRequest, mailer: Optional[ResendMailer]
) -> Dict[str, Any]:
    options = {"base_url": settings.app_base_url, "escape": settings.email_escape_context}
    if mailer is not None:
        return send_templated_email(mailer, request, **options)

    with requests.Session() as session:
        client = UpstreamClient(
            settings.resend_api_base,
            settings.resend_api_key,
            session=session,
            timeout=settings.upstream_timeout,
        )
        return send_templated_email(
            ResendMailer(client, settings.email_from_address), request, **options
        )


def process_send_email(
    method: str,
    raw_body: RawBody,
    *,
    settings: Optional[Settings] = None,
    mailer: Optional[ResendMailer] = None,
) -> Envelope:
    return process_request(
        method,
        raw_body,
        name="send-email",
        secret_name="RESEND_API_KEY",
        settings=settings,
        parse=EmailRequest.from_payload,
        execute=lambda loaded, request: _send_email(loaded, request, mailer),
    )


def public_config_response(method: str, settings: Optional[Settings] = None) -> Envelope:
    """Return the browser-side configuration (public values only)."""

    method = (method or "").upper()
    if method == "OPTIONS":
        return preflight_response()
    if method != "GET":
        return json_response({"error": "Method not allowed"}, 405)

    settings = load_settings("config", settings)
    if settings is None:
        return json_response({"error": "Server configuration error"}, 500)
    if not settings.supabase_url or not settings.supabase_anon_key:
        LOGGER.error("SUPABASE_URL or SUPABASE_ANON_KEY is not set")
        return json_response({"error": "Server configuration error"}, 500)

    return json_response(
        {
            "supabaseUrl": settings.supabase_url,
            "supabaseAnonKey": settings.supabase_anon_key,
            "functionsBaseUrl": settings.resolved_functions_base_url,
        }
    )


class ServerlessHandler(BaseHTTPRequestHandler):
    """Vercel adapter: subclasses only implement :meth:`process`."""

    def process(self, method: str, raw_body: bytes) -> Envelope:
        raise NotImplementedError

    def _read_body(self) -> bytes:
        try:
            length = int(self.headers.get("Content-Length", "0"))
        except ValueError:
            length = 0
        return self.rfile.read(length) if length > 0 else b""

    def _dispatch(self) -> None:
        envelope = self.process(self.command, self._read_body())
        self.send_response(envelope.status_code)
        for header, value in envelope.headers.items():
            self.send_header(header, value)
        self.send_header("Content-Length", str(len(envelope.body)))
        self.end_headers()
        if envelope.body and self.command != "HEAD":
            self.wfile.write(envelope.body)

    do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = do_OPTIONS = do_HEAD = _dispatch  # noqa: N815
