"""Request records and the error types shared by every function.

Each record validates a decoded JSON body through ``from_payload``.  Any
problem is raised as a :class:`HandlerError`, which carries the HTTP status
and the message that is safe to show to the browser.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence


class HandlerError(RuntimeError):
    """Base class for failures that map directly onto an error envelope."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidRequestError(HandlerError):
    """Raised when the client sent a request we cannot act on."""

    status_code = 400


class MissingFieldsError(InvalidRequestError):
    def __init__(self, fields: Sequence[str]) -> None:
        self.fields = list(fields)
        verb = "is" if len(self.fields) == 1 else "are"
        super().__init__(f"{_join_names(self.fields)} {verb} required")


class UpstreamFailure(HandlerError):
    """Raised when a third-party API answered with an error body."""

    status_code = 502


def _join_names(names: Sequence[str]) -> str:
    if len(names) <= 1:
        return "".join(names)
    return f"{', '.join(names[:-1])} and {names[-1]}"


def _text(name: str, value: Any) -> Optional[str]:
    """Return *value* as text, ``None`` when it is absent or empty."""

    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value) if value else None
    raise InvalidRequestError(f"{name} must be a string")


def _require(payload: Mapping[str, Any], *names: str) -> Dict[str, str]:
    values = {name: _text(name, payload.get(name)) for name in names}
    missing: List[str] = [name for name in names if values[name] is None]
    if missing:
        raise MissingFieldsError(missing)
    return {name: value for name, value in values.items() if value is not None}


def as_payload(decoded: Any) -> Mapping[str, Any]:
    """Treat anything but a JSON object as an empty request body."""

    return decoded if isinstance(decoded, Mapping) else {}


@dataclass(frozen=True)
class SetupIntentRequest:
    email: str
    user_id: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SetupIntentRequest":
        values = _require(payload, "email", "userId")
        return cls(email=values["email"], user_id=values["userId"])


@dataclass(frozen=True)
class SubscriptionRequest:
    customer_id: str
    price_id: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SubscriptionRequest":
        values = _require(payload, "customerId", "priceId")
        return cls(customer_id=values["customerId"], price_id=values["priceId"])


@dataclass(frozen=True)
class PortalSessionRequest:
    customer_id: str
    return_url: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PortalSessionRequest":
        values = _require(payload, "customerId", "returnUrl")
        return cls(customer_id=values["customerId"], return_url=values["returnUrl"])


@dataclass(frozen=True)
class EmailRequest:
    type: str
    to: str
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "EmailRequest":
        values = _require(payload, "type", "to")
        data = payload.get("data")
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise InvalidRequestError("data must be an object")
        return cls(type=values["type"], to=values["to"], data=dict(data))
