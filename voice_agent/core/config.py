import re
from datetime import timedelta, timezone
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from the project root so it loads regardless of cwd
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")

DELIVERY_CHANNEL_NAMES = ("cloud_doc", "email", "static_file")


def parse_utc_offset(value: str) -> timezone:
    """Turn "+05:30" / "-0800" / "Z" into a fixed-offset timezone."""
    value = value.strip()
    if value.upper() in ("Z", "UTC", "+00:00"):
        return timezone.utc
    match = _OFFSET_RE.match(value)
    if not match:
        raise ValueError(f"Invalid UTC offset: {value!r} (expected e.g. +05:30)")
    sign, hours, minutes = match.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    if delta >= timedelta(hours=24):
        raise ValueError(f"UTC offset out of range: {value!r}")
    return timezone(-delta if sign == "-" else delta)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Calendar
    calendar_id: str = ""
    time_zone_name: str = "Asia/Kolkata"
    home_utc_offset: str = "+05:30"
    business_start_hour: int = 9
    business_end_hour: int = 17  # exclusive, so last slot starts at 16:30
    slot_duration_minutes: int = 30
    appointment_duration_minutes: int = 30
    send_booking_confirmation: bool = False

    # Google service account: raw JSON or base64 JSON, else a key file
    google_json: str = ""
    google_service_account_file: str = "service_account.json"
    google_impersonate_user: str = ""

    # AI provider
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"

    # Email (SMTP). Leave smtp_host empty to disable sending.
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    from_email: str = ""
    from_name: str = "Voice Agent"
    # Owner address the generated Google Doc is shared with
    email_user: str = ""
    # Default recipient when collateral falls back to email
    fallback_email: str = ""

    # Knowledge base
    documents_dir: str = "documents"
    search_limit: int = 3
    snippet_chars: int = 500
    context_doc_limit: int = 2
    context_char_budget: int = 8000

    # Collateral delivery; inline is always the last resort
    delivery_channels: str = "cloud_doc,email"
    inline_preview_chars: int = 1500
    static_dir: str = "static"
    public_base_url: str = "http://localhost:3000"

    external_call_timeout_seconds: float = 30.0

    # Service
    env: str = "development"
    cors_origins: str = "*"
    port: int = 3000

    @field_validator("home_utc_offset")
    @classmethod
    def _check_offset(cls, value: str) -> str:
        parse_utc_offset(value)
        return value

    @field_validator("delivery_channels")
    @classmethod
    def _check_channels(cls, value: str) -> str:
        for name in _split_csv(value):
            if name not in DELIVERY_CHANNEL_NAMES:
                raise ValueError(
                    f"Unknown delivery channel {name!r}; expected one of {', '.join(DELIVERY_CHANNEL_NAMES)}"
                )
        return value

    @property
    def home_tz(self) -> timezone:
        return parse_utc_offset(self.home_utc_offset)

    @property
    def cors_origins_list(self) -> list[str]:
        return _split_csv(self.cors_origins)

    @property
    def delivery_channel_list(self) -> list[str]:
        return _split_csv(self.delivery_channels)

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password and self.from_email)


def _split_csv(value: str) -> list[str]:
    return [o.strip() for o in value.split(",") if o.strip()]


settings = Settings()
