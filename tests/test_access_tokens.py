from __future__ import annotations

import jwt
import pytest

from calls.errors import ConfigurationError, TokenCredentialsError
from conftest import ACCOUNT_SID, API_KEY_SECRET, API_KEY_SID, TWIML_APP_SID, make_settings
from integrations.access_tokens import VOICE_TOKEN_TTL_SECONDS, VoiceTokenIssuer


def _claims(token: str) -> dict:
    return jwt.decode(token, API_KEY_SECRET, algorithms=["HS256"])


def test_token_carries_identity_and_voice_grant():
    issued = VoiceTokenIssuer(make_settings()).issue()
    claims = _claims(issued.token)

    assert issued.identity == "demo-client"
    assert issued.has_twiml_app is True
    assert issued.warning is None
    assert claims["iss"] == API_KEY_SID
    assert claims["sub"] == ACCOUNT_SID
    assert claims["exp"] - claims["nbf"] == VOICE_TOKEN_TTL_SECONDS
    assert claims["grants"]["identity"] == "demo-client"
    assert claims["grants"]["voice"] == {
        "incoming": {"allow": True},
        "outgoing": {"application_sid": TWIML_APP_SID},
    }


def test_token_without_twiml_app_still_allows_incoming():
    issued = VoiceTokenIssuer(make_settings(twilio_twiml_app_sid=None)).issue()
    claims = _claims(issued.token)

    assert issued.has_twiml_app is False
    assert "TWILIO_TWIML_APP_SID" in issued.warning
    assert claims["grants"]["voice"] == {"incoming": {"allow": True}}


def test_explicit_identity_overrides_default():
    issued = VoiceTokenIssuer(make_settings()).issue("front-desk")

    assert _claims(issued.token)["grants"]["identity"] == "front-desk"


@pytest.mark.parametrize(
    ("override", "missing"),
    [
        ({"twilio_api_key_sid": None}, ["TWILIO_API_KEY_SID"]),
        ({"twilio_api_key_secret": None}, ["TWILIO_API_KEY_SECRET"]),
        ({"twilio_account_sid": None}, ["TWILIO_ACCOUNT_SID"]),
    ],
)
def test_token_requires_api_key_and_account(override, missing):
    settings = make_settings(twilio_auth_token="legacy-token", **override)

    with pytest.raises(TokenCredentialsError) as excinfo:
        VoiceTokenIssuer(settings).issue()
    assert excinfo.value.missing == missing
    assert excinfo.value.status_code == 500


def test_empty_identity_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        VoiceTokenIssuer(make_settings(client_id="  ")).issue()


def test_two_tokens_for_same_identity_are_distinct_and_valid():
    issuer = VoiceTokenIssuer(make_settings())
    first = issuer.issue()
    second = issuer.issue()

    assert first.token != second.token
    first_claims, second_claims = _claims(first.token), _claims(second.token)
    assert first_claims["jti"] != second_claims["jti"]
    assert first_claims["grants"]["identity"] == second_claims["grants"]["identity"] == "demo-client"


def test_jti_keeps_key_prefix_and_adds_random_suffix():
    claims = _claims(VoiceTokenIssuer(make_settings()).issue().token)

    key_sid, issued_at, suffix = claims["jti"].split("-")
    assert key_sid == API_KEY_SID
    assert issued_at.isdigit()
    assert len(suffix) == 16
