"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    admin_emails: str | None = None
    resend_api_key: str | None = None
    resend_base_url: str = "https://api.resend.com"
    resend_webhook_secret: str | None = None
    resend_webhook_insecure: bool = False
    recaptcha_secret_key: str | None = None
    recaptcha_score_threshold: float = 0.5
    recaptcha_verify_url: str = "https://www.google.com/recaptcha/api/siteverify"
    email_from: str = "Fly-Fleet <noreply@fly-fleet.com>"
    business_email: str = "contact@fly-fleet.com"
    whatsapp_business_phone: str = "5491166601927"
    whatsapp_rate_limit: int = 20
    whatsapp_rate_window_seconds: int = 3600
    intake_rate_limit: int = 7
    intake_rate_window_seconds: int = 3600
    default_locale: str = "es"
    content_cache_ttl_seconds: int = 3600
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_admin_emails(raw: str | None) -> set[str] | None:
    """Parse the admin email allow-list from env."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return None
    emails: set[str] = set()
    for chunk in cleaned.split(","):
        value = chunk.strip().lower()
        if not value:
            continue
        if "@" in value:
            emails.add(value)
    return emails or None
