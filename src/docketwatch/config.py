from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from docketwatch.notify.resend import RESEND_API_URL
from docketwatch.site import DEFAULT_BASE_URL
from docketwatch.transport.http import DEFAULT_USER_AGENT


class Settings(BaseSettings):
    """Application configuration loaded from environment/.env."""

    base_url: str = Field(default=DEFAULT_BASE_URL)
    user_agent: str = Field(default=DEFAULT_USER_AGENT)
    request_timeout: float = Field(default=30.0)
    attachment_timeout: float = Field(default=20.0)
    attachment_limit: int | None = Field(default=3, ge=0)
    database_url: str = Field(default="sqlite:///data/docketwatch.db")
    notifier: Literal["resend", "smtp", "log"] = Field(default="resend")
    alert_email: str | None = Field(default=None)
    alert_from: str = Field(default="TN Court Monitor <alerts@example.com>")
    resend_api_key: str | None = Field(default=None)
    resend_api_url: str = Field(default=RESEND_API_URL)
    smtp_host: str | None = Field(default=None)
    smtp_port: int = Field(default=587)
    smtp_username: str | None = Field(default=None)
    smtp_password: str | None = Field(default=None)
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="DOCKETWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
