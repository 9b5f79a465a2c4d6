"""Domain-specific exceptions for call bridging operations.

These exceptions are safe to import from API layers without pulling in the Twilio SDK.
"""

from __future__ import annotations

from typing import Any


class BridgeError(Exception):
    status_code: int = 500
    default_error: str = "Call bridge error"

    def __init__(self, detail: str | None = None, *, error: str | None = None) -> None:
        self.error = error or self.default_error
        self.detail = detail
        super().__init__(f"{self.error}: {detail}" if detail else self.error)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.detail:
            payload["detail"] = self.detail
        return payload


class ConfigurationError(BridgeError):
    status_code = 500
    default_error = "Server configuration incomplete"


class CredentialsError(ConfigurationError):
    default_error = "Missing Twilio credentials"

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            "Provide either TWILIO_API_KEY_SID & TWILIO_API_KEY_SECRET (with TWILIO_ACCOUNT_SID), "
            "or TWILIO_ACCOUNT_SID & TWILIO_AUTH_TOKEN. Missing: " + ", ".join(self.missing)
        )


class TokenCredentialsError(ConfigurationError):
    default_error = "Missing Twilio API Key or Account SID on server"

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__()


class MissingCallerNumberError(ConfigurationError):
    default_error = "Missing TWILIO_NUMBER on server"


class ProviderCallError(BridgeError):
    status_code = 500
    default_error = "Failed to create call"


class InvalidPhoneNumberError(BridgeError):
    status_code = 400
    default_error = "Invalid phone number"
