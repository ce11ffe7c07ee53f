"""Local development server mirroring the Vercel functions under ``/api``."""

from __future__ import annotations

import argparse
import logging
import os
from typing import Callable, Dict, List, Optional

from flask import Flask, Response, request

from league_backend import (
    Envelope,
    json_response,
    process_create_portal_session,
    process_create_setup_intent,
    process_create_subscription,
    process_send_email,
    public_config_response,
)

LOGGER = logging.getLogger(__name__)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

FUNCTIONS: Dict[str, Callable[..., Envelope]] = {
    "create-setup-intent": process_create_setup_intent,
    "create-subscription": process_create_subscription,
    "create-portal-session": process_create_portal_session,
    "send-email": process_send_email,
}

app = Flask(__name__)


def _to_flask(envelope: Envelope) -> Response:
    return Response(envelope.body, status=envelope.status_code, headers=envelope.headers)


@app.route("/api/config", methods=ALL_METHODS, provide_automatic_options=False)
def public_config() -> Response:
    return _to_flask(public_config_response(request.method))


@app.route("/api/<name>", methods=ALL_METHODS, provide_automatic_options=False)
def dispatch(name: str) -> Response:
    process = FUNCTIONS.get(name)
    if process is None:
        return _to_flask(json_response({"error": f"Unknown function: {name}"}, 404))
    return _to_flask(process(request.method, request.get_data()))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "5000")))
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(levelname)s: %(message)s",
    )
    LOGGER.info("Serving league functions on http://%s:%s/api", args.host, args.port)
    app.run(host=args.host, port=args.port, debug=False)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
