"""Auth, profile and billing helpers used by the league pages.

:class:`LeagueAuth` wraps a Supabase client for session and profile work, and
calls the league's own functions for the Stripe SetupIntent and email flows.
Navigation is delegated to the ``redirect`` callable so page code decides what
"moving the browsing context" means.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from supabase import Client, create_client

from config.settings import Settings
from services.upstream import UpstreamClient

LOGGER = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"

Redirect = Callable[[str], None]


class FacadeError(RuntimeError):
    """Raised when a league function answers with an error."""


class LeagueAuth:
    def __init__(
        self,
        client: Client,
        settings: Settings,
        *,
        redirect: Redirect,
        functions: Optional[UpstreamClient] = None,
    ) -> None:
        self.client = client
        self.settings = settings
        self._redirect = redirect
        self._functions = functions or UpstreamClient(
            settings.resolved_functions_base_url,
            timeout=settings.upstream_timeout,
        )

    # Session helpers

    def get_session(self) -> Any:
        """Return the current session, or ``None``."""

        return self.client.auth.get_session()

    def get_user(self) -> Any:
        """Return the current user, or ``None``."""

        response = self.client.auth.get_user()
        return getattr(response, "user", None) if response else None

    def require_auth(self, redirect_to: Optional[str] = None) -> Any:
        """Send the visitor to the login page when nobody is signed in.

        The session (or ``None``) is returned either way; callers decide
        whether to keep rendering.
        """

        session = self.get_session()
        if not session:
            self._redirect(redirect_to or self.settings.login_page)
        return session

    def redirect_if_authed(self, redirect_to: Optional[str] = None) -> None:
        if self.get_session():
            self._redirect(redirect_to or self.settings.home_page)

    # Auth actions

    def sign_up(self, email: str, password: str) -> Any:
        return self.client.auth.sign_up({"email": email, "password": password})

    def sign_in(self, email: str, password: str) -> Any:
        return self.client.auth.sign_in_with_password({"email": email, "password": password})

    def sign_out(self) -> None:
        self.client.auth.sign_out()
        self._redirect(self.settings.login_page)

    def send_password_reset(self, email: str) -> Any:
        return self.client.auth.reset_password_for_email(
            email, {"redirect_to": self.settings.password_reset_url}
        )

    # Profiles

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        response = (
            self.client.table(PROFILES_TABLE)
            .select("*")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    def upsert_profile(self, user_id: str, fields: Mapping[str, Any]) -> Any:
        row = {
            "id": user_id,
            **fields,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        return self.client.table(PROFILES_TABLE).upsert(row).execute().data

    # League functions

    def _call_function(self, name: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        result = self._functions.post_json(name, payload)
        error = result.get("error")
        if error:
            LOGGER.warning("%s failed: %s", name, error)
            raise FacadeError(error if isinstance(error, str) else str(error))
        return result

    def create_setup_intent(self, email: str, user_id: str) -> Dict[str, Any]:
        """Return ``{clientSecret, customerId}`` for the signup card form."""

        return self._call_function("create-setup-intent", {"email": email, "userId": user_id})

    def send_email(
        self, email_type: str, to: str, data: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        return self._call_function(
            "send-email", {"type": email_type, "to": to, "data": dict(data or {})}
        )


def create_facade(settings: Settings, redirect: Redirect) -> LeagueAuth:
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise RuntimeError(
            "SUPABASE_URL and SUPABASE_ANON_KEY must be configured to use the auth helpers."
        )
    client = create_client(settings.supabase_url, settings.supabase_anon_key)
    return LeagueAuth(client, settings, redirect=redirect)
