"""Twilio Voice integration.

This module provides:
- Voice webhook (TwiML) routing browser-originated legs to the PSTN and PSTN calls to the browser client.
- Access token endpoint for the browser softphone.
- Server-side bridge call used when no TwiML App is configured.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request, Response

from api.dependencies import build_outbound_caller, get_app_settings, get_token_issuer, get_twilio_client
from api.schemas import BridgeCallResponse, ErrorResponse, TokenResponse
from calls.phone_numbers import validate_e164
from calls.routing import VoiceWebhook, decide_route, render_answer, render_route
from config.settings import Settings
from integrations.access_tokens import VoiceTokenIssuer

LOGGER = logging.getLogger(__name__)

router = APIRouter(tags=["twilio"])


def _twiml_response(xml: str) -> Response:
    # Twilio expects application/xml
    return Response(content=xml, media_type="application/xml")


@router.api_route("/voice", methods=["GET", "POST"])
async def twilio_voice_webhook(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> Response:
    params = dict(request.query_params)
    if request.method == "POST":
        params.update(await request.form())

    webhook = VoiceWebhook.from_form(params)
    decision = decide_route(webhook, client_identity=settings.client_id, caller_id=settings.twilio_number)
    LOGGER.info(
        "/voice: %s -> %s (from=%s, to=%s)",
        decision.direction.value,
        decision.dial_target,
        webhook.from_,
        webhook.to,
    )
    return _twiml_response(render_route(decision))


@router.api_route("/answer", methods=["GET", "POST"])
async def twilio_answer(settings: Settings = Depends(get_app_settings)) -> Response:
    return _twiml_response(render_answer(settings.answer_message))


@router.get(
    "/token",
    response_model=TokenResponse,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorResponse}},
)
def issue_token(issuer: VoiceTokenIssuer = Depends(get_token_issuer)) -> TokenResponse:
    issued = issuer.issue()
    return TokenResponse(
        token=issued.token,
        identity=issued.identity,
        has_twiml_app=issued.has_twiml_app,
        warning=issued.warning,
    )


@router.post(
    "/bridge-call",
    response_model=BridgeCallResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def bridge_call(
    request: Request,
    to: Any = Body(default=None, embed=True),
    settings: Settings = Depends(get_app_settings),
) -> BridgeCallResponse:
    number = validate_e164(None if to is None else str(to))
    caller = build_outbound_caller(get_twilio_client(request), settings)
    placed = caller.bridge_dial(number)
    return BridgeCallResponse(success=True, sid=placed.sid)
