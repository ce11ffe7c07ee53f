"""Runtime configuration for the league backend functions."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Container for runtime configuration values.

    Secrets default to ``None`` so a missing key never breaks start-up: each
    handler checks the credential it needs when a request arrives and answers
    with a configuration error instead.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    stripe_secret_key: str | None = None
    resend_api_key: str | None = None
    resend_api_base: str = Field(default="https://api.resend.com")
    email_from_address: str = Field(default="4FORE League <hello@4fore.golf>")
    email_escape_context: bool = Field(default=True)

    app_base_url: str = Field(default="https://4fore-league.vercel.app")
    functions_base_url: str | None = None
    upstream_timeout: float | None = None

    supabase_url: str | None = None
    supabase_anon_key: str | None = None

    login_page: str = Field(default="login.html")
    home_page: str = Field(default="index.html")
    password_reset_page: str = Field(default="reset-password.html")

    @field_validator(
        "stripe_secret_key",
        "resend_api_key",
        "supabase_url",
        "supabase_anon_key",
        "functions_base_url",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("app_base_url", "resend_api_base", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def resolved_functions_base_url(self) -> str:
        if self.functions_base_url:
            return self.functions_base_url.rstrip("/")
        return f"{self.app_base_url}/api"

    @property
    def password_reset_url(self) -> str:
        return f"{self.app_base_url}/{self.password_reset_page}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings to avoid re-reading the environment per request."""

    return Settings()
