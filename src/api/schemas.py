"""API-facing Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str
    identity: str
    has_twiml_app: bool = Field(alias="hasTwimlApp")
    warning: str | None = None


class BridgeCallResponse(BaseModel):
    success: bool = True
    sid: str


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None


class EnvStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_account_sid: bool = Field(alias="hasAccountSid")
    has_api_key: bool = Field(alias="hasApiKey")
    has_api_secret: bool = Field(alias="hasApiSecret")
    has_auth_token: bool = Field(alias="hasAuthToken")
    has_twiml_app: bool = Field(alias="hasTwimlApp")
    client_id: str | None = Field(default=None, alias="clientId")


class HealthResponse(BaseModel):
    status: str = "ok"
