from __future__ import annotations

import logging
from typing import Any, Dict

from services.contracts import EmailRequest, InvalidRequestError, UpstreamFailure
from services.email_templates import DEFAULT_APP_URL, render_email
from services.upstream import UpstreamClient, upstream_error_message

LOGGER = logging.getLogger(__name__)


class ResendMailer:
    """Queue a rendered message with the Resend REST API."""

    def __init__(self, client: UpstreamClient, from_address: str) -> None:
        self._client = client
        self.from_address = from_address

    def send(self, to: str, subject: str, html: str) -> Dict[str, Any]:
        return self._client.post_json(
            "/emails",
            {"from": self.from_address, "to": [to], "subject": subject, "html": html},
        )


def send_templated_email(
    mailer: ResendMailer,
    request: EmailRequest,
    *,
    base_url: str = DEFAULT_APP_URL,
    escape: bool = True,
) -> Dict[str, Any]:
    email = render_email(request.type, request.data, base_url=base_url, escape=escape)
    if email is None:
        raise InvalidRequestError(f"Unknown email type: {request.type}")

    result = mailer.send(request.to, email.subject, email.html)
    if "error" in result:
        LOGGER.error("Resend error: %s", result["error"])
        raise UpstreamFailure(upstream_error_message(result, "Failed to send email"))

    LOGGER.info("Queued %s email as %s", request.type, result.get("id"))
    return {"id": result.get("id")}
