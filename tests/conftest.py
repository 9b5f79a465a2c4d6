from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from config.settings import Settings  # noqa: E402

ACCOUNT_SID = "AC" + "0" * 32
API_KEY_SID = "SK" + "1" * 32
API_KEY_SECRET = "test-api-key-secret"
TWIML_APP_SID = "AP" + "2" * 32
TWILIO_NUMBER = "+15005550006"


def make_settings(**overrides) -> Settings:
    values = {
        "twilio_account_sid": ACCOUNT_SID,
        "twilio_api_key_sid": API_KEY_SID,
        "twilio_api_key_secret": API_KEY_SECRET,
        "twilio_auth_token": None,
        "twilio_number": TWILIO_NUMBER,
        "twilio_twiml_app_sid": TWIML_APP_SID,
        "twilio_call_url": None,
        "client_id": "demo-client",
        "target_number": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeTwilioCall:
    def __init__(self, sid: str) -> None:
        self.sid = sid


class FakeTwilioCalls:
    def __init__(self, error: Exception | None = None) -> None:
        self.requests: list[dict] = []
        self._error = error

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self._error is not None:
            raise self._error
        return FakeTwilioCall(f"CA{len(self.requests):032d}")


class FakeTwilioClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls = FakeTwilioCalls(error)


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def twilio_client() -> FakeTwilioClient:
    return FakeTwilioClient()


@pytest.fixture()
def build_app():
    from main import create_app

    def _build(settings: Settings | None = None, twilio_client=None):
        app = create_app(settings or make_settings())
        app.state.twilio_client = twilio_client
        return app

    return _build


@pytest.fixture()
def client(build_app, twilio_client):
    app = build_app(twilio_client=twilio_client)
    with TestClient(app) as test_client:
        yield test_client
