from __future__ import annotations

from fastapi.testclient import TestClient

from calls.errors import (
    BridgeError,
    CredentialsError,
    InvalidPhoneNumberError,
    MissingCallerNumberError,
    ProviderCallError,
    TokenCredentialsError,
)
from conftest import make_settings


def test_error_payload_omits_empty_detail():
    assert TokenCredentialsError(["TWILIO_API_KEY_SID"]).to_payload() == {
        "error": "Missing Twilio API Key or Account SID on server"
    }
    assert ProviderCallError("boom").to_payload() == {"error": "Failed to create call", "detail": "boom"}


def test_error_status_codes():
    assert InvalidPhoneNumberError().status_code == 400
    assert ProviderCallError().status_code == 500
    assert CredentialsError(["TWILIO_AUTH_TOKEN"]).status_code == 500
    assert MissingCallerNumberError().status_code == 500


def test_credentials_error_lists_missing_variables():
    exc = CredentialsError(["TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN"])
    assert exc.missing == ["TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN"]
    assert exc.detail.endswith("Missing: TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN")


def test_bridge_errors_are_rendered_as_json(build_app):
    app = build_app(make_settings())

    @app.get("/boom")
    async def boom():
        raise BridgeError("exploded", error="Custom failure")

    with TestClient(app) as client:
        resp = client.get("/boom")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Custom failure", "detail": "exploded"}


def test_missing_caller_number_maps_to_500(build_app, twilio_client):
    app = build_app(make_settings(twilio_number=None), twilio_client=twilio_client)
    with TestClient(app) as client:
        resp = client.post("/bridge-call", json={"to": "+15551234567"})

    assert resp.status_code == 500
    assert resp.json()["error"] == "Missing TWILIO_NUMBER on server"
    assert twilio_client.calls.requests == []
