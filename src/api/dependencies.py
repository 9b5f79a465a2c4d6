"""Shared FastAPI dependencies.

Separated to avoid circular imports between route modules. Everything hangs off
``app.state``, populated once by ``main.create_app``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import Request

from calls.outbound import OutboundCaller
from config.settings import Settings
from integrations.access_tokens import VoiceTokenIssuer
from integrations.twilio_client import build_twilio_client

if TYPE_CHECKING:  # pragma: no cover
    from fastapi.templating import Jinja2Templates


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates


def get_twilio_client(request: Request) -> Any:
    # Built on first use so the pages and /token keep working without REST credentials.
    state = request.app.state
    if state.twilio_client is None:
        state.twilio_client = build_twilio_client(state.settings)
    return state.twilio_client


def get_token_issuer(request: Request) -> VoiceTokenIssuer:
    return VoiceTokenIssuer(request.app.state.settings)


def build_outbound_caller(client: Any, settings: Settings) -> OutboundCaller:
    return OutboundCaller(client, settings)
