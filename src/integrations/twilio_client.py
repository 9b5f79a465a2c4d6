from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from calls.errors import CredentialsError
from config.settings import Settings

if TYPE_CHECKING:  # pragma: no cover
    from twilio.rest import Client

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TwilioCredentials:
    scheme: Literal["api_key", "auth_token"]
    username: str
    password: str
    account_sid: str


def resolve_credentials(settings: Settings) -> TwilioCredentials:
    """Pick API key auth when complete, otherwise the account SID / auth token pair."""

    account_sid = settings.twilio_account_sid
    key_sid = settings.twilio_api_key_sid
    key_secret = settings.twilio_api_key_secret
    auth_token = settings.twilio_auth_token

    if key_sid and key_secret and account_sid:
        return TwilioCredentials("api_key", key_sid, key_secret, account_sid)
    if account_sid and auth_token:
        return TwilioCredentials("auth_token", account_sid, auth_token, account_sid)

    missing: list[str] = []
    if not account_sid:
        missing.append("TWILIO_ACCOUNT_SID")
    if key_sid or key_secret:
        # An API key was attempted; report the half that is missing.
        if not key_sid:
            missing.append("TWILIO_API_KEY_SID")
        if not key_secret:
            missing.append("TWILIO_API_KEY_SECRET")
    else:
        missing.extend(["TWILIO_API_KEY_SID", "TWILIO_API_KEY_SECRET"])
    if not auth_token:
        missing.append("TWILIO_AUTH_TOKEN")
    raise CredentialsError(missing)


def build_twilio_client(settings: Settings) -> Client:
    from twilio.rest import Client

    creds = resolve_credentials(settings)
    LOGGER.info("Using Twilio %s credentials for account %s", creds.scheme, creds.account_sid)
    if creds.scheme == "api_key":
        return Client(creds.username, creds.password, creds.account_sid)
    return Client(creds.username, creds.password)
