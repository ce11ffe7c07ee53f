"""HTML bodies for the transactional emails sent through Resend.

Rendering is pure string composition: a heading and a body fragment are
dropped into the shared 4FORE shell.  Context values are HTML-escaped unless
the caller explicitly opts out with ``escape=False``.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

DEFAULT_APP_URL = "https://4fore-league.vercel.app"
DEFAULT_NAME = "Golfer"


class EmailTemplate(str, Enum):
    WELCOME = "welcome"
    PASSWORD_RESET = "password-reset"
    TRIAL_EXPIRY_7 = "trial-expiry-7"
    TRIAL_EXPIRY_3 = "trial-expiry-3"
    TRIAL_EXPIRY_1 = "trial-expiry-1"


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


def cta_button(href: str, label: str) -> str:
    return (
        '<p style="margin:28px 0;">\n'
        f'    <a href="{href}" style="display:inline-block;padding:14px 32px;'
        "background:#1B3D2A;color:#F5F0E8;font-family:'Bebas Neue',Arial,sans-serif;"
        "font-size:16px;letter-spacing:2px;text-decoration:none;border-radius:4px;\">"
        f"{label}</a>\n"
        "  </p>"
    )


def layout(heading: str, body: str, base_url: str = DEFAULT_APP_URL) -> str:
    """Wrap *body* in the forest green and gold email shell."""

    site_label = base_url.split("://", 1)[-1]
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width,initial-scale=1">
<link href="https://fonts.googleapis.com/css2?family=Bebas+Neue&family=DM+Sans:wght@400;500&display=swap" rel="stylesheet">
<style>
  body {{ margin:0; background:#F5F0E8; font-family:'DM Sans',Arial,sans-serif; }}
  a {{ color:#1B3D2A; }}
</style>
</head>
<body>
<table width="100%" cellpadding="0" cellspacing="0" bgcolor="#F5F0E8">
  <tr><td align="center" style="padding:40px 16px;">
    <table width="100%" cellpadding="0" cellspacing="0" style="max-width:560px;">

      <!-- Header -->
      <tr>
        <td style="background:#1B3D2A; padding:28px 40px; border-radius:8px 8px 0 0;">
          <span style="font-family:'Bebas Neue',Arial,sans-serif;font-size:28px;color:#C9A84C;letter-spacing:2px;">4FORE LEAGUE</span>
        </td>
      </tr>

      <!-- Body -->
      <tr>
        <td style="background:#ffffff;padding:40px;border-radius:0 0 8px 8px;">
          <h1 style="font-family:'Bebas Neue',Arial,sans-serif;font-size:32px;color:#1B3D2A;margin:0 0 20px;letter-spacing:1px;">{heading}</h1>
          <div style="font-size:15px;line-height:1.7;color:#333;">
            {body}
          </div>
        </td>
      </tr>

      <!-- Footer -->
      <tr>
        <td style="padding:24px 0;text-align:center;">
          <p style="font-size:12px;color:#9B9083;margin:0;">4FORE League &middot; Never Lay Up</p>
          <p style="font-size:12px;color:#9B9083;margin:4px 0 0;">
            <a href="{base_url}" style="color:#9B9083;">{site_label}</a>
          </p>
        </td>
      </tr>

    </table>
  </td></tr>
</table>
</body>
</html>"""


def _welcome(name: str, base_url: str) -> RenderedEmail:
    return RenderedEmail(
        subject="Welcome to 4FORE League \U0001F3CC\uFE0F",
        html=layout(
            f"Welcome, {name}!",
            f"""
          <p>You're in. Your 14-day free trial has started — no charge today.</p>
          <p>Here's what you can do right now:</p>
          <ul>
            <li><strong>Start a round</strong> — invite friends and score live</li>
            <li><strong>Complete your profile</strong> — set your handicap and display name</li>
            <li><strong>Explore the leaderboard</strong> — see how your group stacks up</li>
          </ul>
          {cta_button(f"{base_url}/round.html", "Start Your First Round")}
          <p style="color:#6B6B6B;font-size:13px;margin-top:24px;">Questions? Just reply to this email.</p>
        """,
            base_url,
        ),
    )


def _password_reset(name: str, base_url: str) -> RenderedEmail:
    return RenderedEmail(
        subject="Reset your 4FORE League password",
        html=layout(
            "Reset your password",
            f"""
          <p>Hi {name},</p>
          <p>We received a request to reset your password. Click the link in the separate email from Supabase to set a new one.</p>
          <p>If you didn't request this, you can safely ignore this message — your account is secure.</p>
          <p style="color:#6B6B6B;font-size:13px;margin-top:24px;">This request will expire in 24 hours.</p>
        """,
            base_url,
        ),
    )


def _trial_expiry_7(name: str, base_url: str) -> RenderedEmail:
    return RenderedEmail(
        subject="Your 4FORE trial ends in 7 days",
        html=layout(
            "7 days left on your trial",
            f"""
          <p>Hi {name},</p>
          <p>Your free trial ends in <strong>7 days</strong>. After that, your card on file will be charged to keep your rounds, leaderboard, and profile active.</p>
          <p>You don't need to do anything — we'll handle it automatically.</p>
          {cta_button(f"{base_url}/round.html", "Play a Round Today")}
        """,
            base_url,
        ),
    )


def _trial_expiry_3(name: str, base_url: str) -> RenderedEmail:
    return RenderedEmail(
        subject="Your 4FORE trial ends in 3 days",
        html=layout(
            "3 days left on your trial",
            f"""
          <p>Hi {name},</p>
          <p>Just a heads up — your trial ends in <strong>3 days</strong>. Your scoring history and league data will be preserved.</p>
          {cta_button(f"{base_url}/round.html", "Make the most of it")}
        """,
            base_url,
        ),
    )


def _trial_expiry_1(name: str, base_url: str) -> RenderedEmail:
    return RenderedEmail(
        subject="Last day of your 4FORE trial",
        html=layout(
            "Trial ends tomorrow",
            f"""
          <p>Hi {name},</p>
          <p>Your trial ends <strong>tomorrow</strong>. Your card will be charged after midnight to continue your membership.</p>
          <p>If you'd like to cancel, reply to this email and we'll sort it out — no questions asked.</p>
          {cta_button(f"{base_url}/round.html", "Play one last trial round")}
        """,
            base_url,
        ),
    )


_BUILDERS: Dict[EmailTemplate, Callable[[str, str], RenderedEmail]] = {
    EmailTemplate.WELCOME: _welcome,
    EmailTemplate.PASSWORD_RESET: _password_reset,
    EmailTemplate.TRIAL_EXPIRY_7: _trial_expiry_7,
    EmailTemplate.TRIAL_EXPIRY_3: _trial_expiry_3,
    EmailTemplate.TRIAL_EXPIRY_1: _trial_expiry_1,
}


def render_email(
    template_id: str,
    context: Optional[Mapping[str, Any]] = None,
    *,
    base_url: str = DEFAULT_APP_URL,
    escape: bool = True,
) -> Optional[RenderedEmail]:
    """Render *template_id* with *context*, or return ``None`` if it is unknown."""

    try:
        template = EmailTemplate(template_id)
    except ValueError:
        return None

    raw_name = (context or {}).get("name")
    name = DEFAULT_NAME if raw_name is None else str(raw_name)
    if escape:
        name = html.escape(name)
    return _BUILDERS[template](name, base_url.rstrip("/"))
