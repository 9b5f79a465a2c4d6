"""Voice webhook call routing.

Twilio hits the voice webhook for two kinds of legs:
- a browser client placing a call (``From`` is ``client:<identity>``, ``To`` is the number it dialed),
- a PSTN caller ringing our Twilio number (``To`` is our own number).

Both carry ``To``, so the ``From`` prefix is what tells them apart.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from twilio.twiml.voice_response import VoiceResponse

CLIENT_LEG_PREFIX = "client:"


class CallDirection(str, Enum):
    OUTBOUND_TO_PSTN = "outbound_to_pstn"
    INBOUND_TO_CLIENT = "inbound_to_client"


def _field(form: Mapping[str, Any], name: str) -> str:
    value = form.get(name)
    if value is None:
        lowered = name.lower()
        for key, candidate in form.items():
            if key.lower() == lowered:
                value = candidate
                break
    return str(value or "").strip()


@dataclass(frozen=True)
class VoiceWebhook:
    to: str = ""
    from_: str = ""

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> VoiceWebhook:
        return cls(to=_field(form, "To"), from_=_field(form, "From"))

    @property
    def is_client_leg(self) -> bool:
        return self.from_.startswith(CLIENT_LEG_PREFIX)


@dataclass(frozen=True)
class RouteDecision:
    direction: CallDirection
    dial_target: str
    caller_id: str | None = None


def decide_route(webhook: VoiceWebhook, *, client_identity: str, caller_id: str | None) -> RouteDecision:
    if webhook.is_client_leg and webhook.to:
        return RouteDecision(CallDirection.OUTBOUND_TO_PSTN, webhook.to, caller_id)
    return RouteDecision(CallDirection.INBOUND_TO_CLIENT, client_identity)


def dial_client_twiml(identity: str, *, caller_id: str | None = None) -> str:
    response = VoiceResponse()
    dial = response.dial(caller_id=caller_id) if caller_id else response.dial()
    dial.client(identity)
    return str(response)


def render_route(decision: RouteDecision) -> str:
    if decision.direction is CallDirection.OUTBOUND_TO_PSTN:
        response = VoiceResponse()
        if decision.caller_id:
            response.dial(decision.dial_target, caller_id=decision.caller_id)
        else:
            response.dial(decision.dial_target)
        return str(response)
    return dial_client_twiml(decision.dial_target)


def render_answer(message: str) -> str:
    response = VoiceResponse()
    response.say(message, voice="alice")
    return str(response)
