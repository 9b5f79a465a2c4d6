"""FastAPI routes for the demo pages and diagnostics."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from api.dependencies import build_outbound_caller, get_app_settings, get_templates, get_twilio_client
from api.schemas import EnvStatusResponse, HealthResponse
from calls.errors import BridgeError
from config.settings import Settings

LOGGER = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, templates: Jinja2Templates = Depends(get_templates)) -> HTMLResponse:
    return templates.TemplateResponse(request, "index.html", {"message": None})


@router.get("/client", response_class=HTMLResponse)
async def client_page(
    request: Request,
    templates: Jinja2Templates = Depends(get_templates),
    settings: Settings = Depends(get_app_settings),
) -> HTMLResponse:
    return templates.TemplateResponse(request, "client.html", {"identity": settings.client_id})


@router.get("/make-call/client")
async def legacy_client_redirect() -> RedirectResponse:
    return RedirectResponse(url="/client", status_code=302)


@router.post("/make-call", response_class=HTMLResponse)
def make_call(
    request: Request,
    phone: str = Form(default=""),
    templates: Jinja2Templates = Depends(get_templates),
    settings: Settings = Depends(get_app_settings),
) -> HTMLResponse:
    if not phone.strip():
        message = "Please provide a phone number"
    else:
        try:
            caller = build_outbound_caller(get_twilio_client(request), settings)
            placed = caller.direct_dial(phone)
            message = f"Call initiated! Call SID: {placed.sid}"
        except BridgeError as exc:
            LOGGER.warning("/make-call failed: %s", exc)
            message = f"Error: {exc.detail or exc.error}"
    return templates.TemplateResponse(request, "index.html", {"message": message})


@router.get("/env", response_model=EnvStatusResponse)
async def env_status(settings: Settings = Depends(get_app_settings)) -> EnvStatusResponse:
    return EnvStatusResponse(**settings.credential_snapshot())


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()
