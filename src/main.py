"""Entry point for the PSTN to browser softphone bridge service."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from api.routes import router as pages_router
from api.twilio_routes import router as twilio_router
from calls.errors import BridgeError
from config.settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    LOGGER.info("cwd: %s pid: %s", os.getcwd(), os.getpid())
    LOGGER.info("startup env snapshot: %s", settings.credential_snapshot())
    if not settings.has_twiml_app:
        LOGGER.warning("TWILIO_TWIML_APP_SID is not set; browser calls will use the server-side bridge")
    yield


async def bridge_error_handler(request: Request, exc: BridgeError) -> JSONResponse:
    if exc.status_code >= 500:
        LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="PSTN Softphone Bridge",
        description="Bridges PSTN calls and a browser softphone through Twilio Voice.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.templates = Jinja2Templates(directory=str(settings.templates_dir))
    app.state.twilio_client = None

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        LOGGER.debug("REQUEST: %s %s", request.method, request.url.path)
        return await call_next(request)

    app.add_exception_handler(BridgeError, bridge_error_handler)
    if settings.static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(settings.static_dir)), name="static")
    app.include_router(pages_router)
    app.include_router(twilio_router)
    return app


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = create_app(settings)


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
