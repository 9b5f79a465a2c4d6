"""Twilio Access Token minting for the browser softphone."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass

from twilio.jwt.access_token import AccessToken
from twilio.jwt.access_token.grants import VoiceGrant

from calls.errors import ConfigurationError, TokenCredentialsError
from config.settings import Settings

LOGGER = logging.getLogger(__name__)

VOICE_TOKEN_TTL_SECONDS = 3600

NO_TWIML_APP_WARNING = (
    "TWILIO_TWIML_APP_SID is not set on the server. Outgoing calls will be bridged "
    "through the server; create and configure a TwiML App and set TWILIO_TWIML_APP_SID "
    "to connect directly."
)


class _UniqueAccessToken(AccessToken):
    # Upstream jti is "<key sid>-<unix seconds>", so tokens minted within the
    # same second would collide. _generate_payload is the hook Jwt.payload calls;
    # checked against twilio 8.x and 9.x (twilio/jwt/access_token/__init__.py).
    def _generate_payload(self):
        payload = super()._generate_payload()
        payload["jti"] = f"{payload['jti']}-{secrets.token_hex(8)}"
        return payload


@dataclass(frozen=True)
class IssuedToken:
    token: str
    identity: str
    has_twiml_app: bool
    warning: str | None = None


class VoiceTokenIssuer:
    """Mints short-lived Voice access tokens for a client identity."""

    def __init__(self, settings: Settings, *, ttl: int = VOICE_TOKEN_TTL_SECONDS) -> None:
        self._settings = settings
        self._ttl = ttl

    def _require_key(self) -> tuple[str, str, str]:
        settings = self._settings
        missing = [
            name
            for name, value in (
                ("TWILIO_API_KEY_SID", settings.twilio_api_key_sid),
                ("TWILIO_API_KEY_SECRET", settings.twilio_api_key_secret),
                ("TWILIO_ACCOUNT_SID", settings.twilio_account_sid),
            )
            if not value
        ]
        if missing:
            LOGGER.error("Missing Twilio credentials for token generation: %s", ", ".join(missing))
            raise TokenCredentialsError(missing)
        return settings.twilio_account_sid, settings.twilio_api_key_sid, settings.twilio_api_key_secret

    def issue(self, identity: str | None = None) -> IssuedToken:
        account_sid, key_sid, key_secret = self._require_key()

        identity = (identity or self._settings.client_id or "").strip()
        if not identity:
            raise ConfigurationError("CLIENT_ID / identity is not set on the server")

        token = _UniqueAccessToken(
            account_sid,
            key_sid,
            key_secret,
            identity=identity,
            ttl=self._ttl,
        )
        token.add_grant(
            VoiceGrant(
                outgoing_application_sid=self._settings.twilio_twiml_app_sid,
                incoming_allow=True,
            )
        )
        jwt = token.to_jwt()
        jwt = jwt.decode("utf-8") if isinstance(jwt, bytes) else str(jwt)

        has_app = self._settings.has_twiml_app
        LOGGER.info("Issued voice token for identity=%s (twiml_app=%s)", identity, has_app)
        return IssuedToken(
            token=jwt,
            identity=identity,
            has_twiml_app=has_app,
            warning=None if has_app else NO_TWIML_APP_WARNING,
        )
