"""Outbound call creation through the Twilio REST API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

import requests
from twilio.base.exceptions import TwilioException

from calls.errors import MissingCallerNumberError, ProviderCallError
from calls.phone_numbers import validate_e164
from calls.routing import dial_client_twiml
from config.settings import DEMO_TWIML_URL, Settings

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacedCall:
    sid: str
    to: str
    mode: Literal["direct", "bridge"]


class OutboundCaller:
    """Wraps ``client.calls.create`` for direct and bridged dials.

    Failures are surfaced once with the provider's message; nothing is retried.
    """

    def __init__(self, client: Any, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    def _from_number(self) -> str:
        if not self._settings.twilio_number:
            raise MissingCallerNumberError("Set TWILIO_NUMBER to the Twilio number calls are placed from.")
        return self._settings.twilio_number

    def _create(self, mode: Literal["direct", "bridge"], to: str, **options: Any) -> PlacedCall:
        try:
            call = self._client.calls.create(to=to, from_=self._from_number(), **options)
        except (TwilioException, requests.RequestException) as exc:
            detail = getattr(exc, "msg", None) or str(exc)
            LOGGER.error("Twilio %s call to %s failed: %s", mode, to, detail)
            raise ProviderCallError(detail) from exc

        placed = PlacedCall(sid=str(call.sid), to=to, mode=mode)
        LOGGER.info("Initiated %s call to %s (sid=%s)", mode, to, placed.sid)
        return placed

    def direct_dial(self, to: str) -> PlacedCall:
        """Call ``to``; answer behavior comes from the TwiML App or the fallback TwiML URL."""

        number = validate_e164(to)
        if self._settings.twilio_twiml_app_sid:
            options = {"application_sid": self._settings.twilio_twiml_app_sid}
        else:
            options = {"url": self._settings.twilio_call_url or DEMO_TWIML_URL}
        return self._create("direct", number, **options)

    def bridge_dial(self, to: str, identity: str | None = None) -> PlacedCall:
        """Call ``to`` with inline TwiML that rings the browser client once answered."""

        number = validate_e164(to)
        twiml = dial_client_twiml(
            identity or self._settings.client_id,
            caller_id=self._from_number(),
        )
        return self._create("bridge", number, twiml=twiml)
