"""Application-wide configuration loading and validation."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEMO_TWIML_URL = "http://demo.twilio.com/docs/voice.xml"


class Settings(BaseSettings):
    """Centralized environment configuration.

    Instances are frozen: the process builds one at startup and hands it to
    every component that needs it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    log_level: str = Field(default="INFO")

    # Twilio credentials
    twilio_account_sid: str | None = Field(default=None)
    twilio_api_key_sid: str | None = Field(
        default=None,
        description="API Key SID (SK...). Preferred over the auth token and required for access tokens.",
    )
    twilio_api_key_secret: str | None = Field(default=None)
    twilio_auth_token: str | None = Field(default=None, description="Legacy account auth token.")

    # Twilio voice
    twilio_number: str | None = Field(default=None, description="E.164 caller id, e.g. +1555...")
    twilio_twiml_app_sid: str | None = Field(
        default=None,
        description="TwiML App SID (AP...) used for outgoing browser calls and direct dials.",
    )
    twilio_call_url: str | None = Field(
        default=None,
        description="Public URL serving TwiML, used for direct dials when no TwiML App is configured.",
    )

    # Browser softphone
    client_id: str = Field(
        default="demo-client",
        description="Client identity minted into tokens and dialed for inbound PSTN calls.",
    )
    answer_message: str = Field(default="Hello from your pals at Twilio! Have fun.")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    # Command-line dialer
    target_number: str | None = Field(default=None)

    templates_dir: Path = Field(default=Path(__file__).resolve().parents[1] / "api" / "templates")
    static_dir: Path = Field(default=Path(__file__).resolve().parents[1] / "api" / "static")

    @property
    def has_twiml_app(self) -> bool:
        return bool(self.twilio_twiml_app_sid)

    def credential_snapshot(self) -> dict[str, Any]:
        """Non-secret view of which credentials are configured."""

        return {
            "hasAccountSid": bool(self.twilio_account_sid),
            "hasApiKey": bool(self.twilio_api_key_sid),
            "hasApiSecret": bool(self.twilio_api_key_secret),
            "hasAuthToken": bool(self.twilio_auth_token),
            "hasTwimlApp": self.has_twiml_app,
            "clientId": self.client_id or None,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
