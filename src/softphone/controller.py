"""Softphone controller driving a Twilio Voice device from the browser page.

Browsers only grant audio after a user gesture, so the device is created in
``enable_audio`` and never earlier. Device signals all land on one event loop
and each one overwrites the single status slot.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Protocol

import httpx

from calls.errors import InvalidPhoneNumberError
from calls.phone_numbers import validate_e164

LOGGER = logging.getLogger(__name__)


class SoftphoneState(str, Enum):
    IDLE = "idle"
    PERMISSION_PENDING = "permission_pending"
    READY = "ready"
    CALLING = "calling"
    IN_CALL = "in_call"
    ERROR = "error"


class SoftphoneDevice(Protocol):
    def on(self, event: str, handler: Callable[..., None]) -> None:  # pragma: no cover - protocol stub
        ...

    def connect(self, params: dict[str, str]) -> Any:  # pragma: no cover - protocol stub
        ...

    def disconnect_all(self) -> None:  # pragma: no cover - protocol stub
        ...


DeviceFactory = Callable[[str], SoftphoneDevice]
MicrophoneRequest = Callable[[], Awaitable[None]]


@dataclass(frozen=True)
class TokenInfo:
    token: str
    identity: str
    has_twiml_app: bool = True
    warning: str | None = None

    @classmethod
    def from_payload(cls, body: dict[str, Any]) -> TokenInfo:
        if not body or not body.get("token"):
            raise ValueError("Server did not return a token")
        return cls(
            token=str(body["token"]),
            identity=str(body.get("identity") or ""),
            has_twiml_app=body.get("hasTwimlApp") is not False,
            warning=body.get("warning"),
        )


@dataclass(frozen=True)
class Status:
    state: SoftphoneState
    message: str


# (next state or None to keep the current one, status message)
SIGNAL_TRANSITIONS: dict[str, tuple[SoftphoneState | None, str]] = {
    "ready": (SoftphoneState.READY, "Device ready"),
    "registered": (SoftphoneState.READY, "Device registered"),
    "unregistered": (SoftphoneState.IDLE, "Device unregistered"),
    "offline": (SoftphoneState.IDLE, "Device offline"),
    "incoming": (None, "Incoming call..."),
    "connect": (SoftphoneState.IN_CALL, "In call"),
    "disconnect": (SoftphoneState.READY, "Call ended"),
    "error": (SoftphoneState.ERROR, "Device error"),
}


def _error_text(error: Any) -> str:
    message = getattr(error, "message", None) or (str(error) if error is not None else "")
    return message or "unknown error"


class SoftphoneController:
    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        device_factory: DeviceFactory,
        request_microphone: MicrophoneRequest,
    ) -> None:
        self._http = http
        self._device_factory = device_factory
        self._request_microphone = request_microphone
        self.device: SoftphoneDevice | None = None
        self.token: TokenInfo | None = None
        self.status = Status(SoftphoneState.IDLE, "")

    @property
    def state(self) -> SoftphoneState:
        return self.status.state

    @property
    def call_enabled(self) -> bool:
        # A failed call leaves the device usable, so the operator can dial again.
        return self.device is not None and self.state in {SoftphoneState.READY, SoftphoneState.ERROR}

    @property
    def hangup_enabled(self) -> bool:
        return self.state in {SoftphoneState.CALLING, SoftphoneState.IN_CALL}

    def _set(self, message: str, state: SoftphoneState | None = None) -> None:
        self.status = Status(state or self.state, message)

    async def fetch_token(self) -> TokenInfo:
        resp = await self._http.get("/token")
        if resp.status_code != 200:
            raise RuntimeError(f"Failed to get token: {resp.status_code} {resp.reason_phrase}")
        return TokenInfo.from_payload(resp.json())

    async def prefetch_token(self) -> TokenInfo | None:
        """Warm the token cache before any user gesture. Failures only update the status."""

        try:
            self.token = await self.fetch_token()
        except (httpx.HTTPError, RuntimeError, ValueError) as exc:
            LOGGER.warning("Token fetch failed: %s", exc)
            self._set(f"Token error: {exc}")
            return None

        if self.token.warning:
            self._set(f"Warning: {self.token.warning}")
        else:
            self._set(f'Got token for {self.token.identity}. Click "Enable audio" to start.')
        return self.token

    def handle_signal(self, signal: str, payload: Any = None) -> None:
        transition = SIGNAL_TRANSITIONS.get(signal)
        if transition is None:
            LOGGER.debug("Ignoring unknown device signal %s", signal)
            return
        state, message = transition
        if signal == "error":
            message = f"{message}: {_error_text(payload)}"
        self._set(message, state)

    def _bind(self, device: SoftphoneDevice) -> None:
        for signal in SIGNAL_TRANSITIONS:
            device.on(signal, partial(self.handle_signal, signal))

    async def enable_audio(self) -> bool:
        """User gesture: ask for the microphone, then build the device from the token."""

        self._set("Requesting microphone access...", SoftphoneState.PERMISSION_PENDING)
        try:
            await self._request_microphone()
        except Exception as exc:
            LOGGER.warning("Microphone permission failed: %s", exc)
            self._set(f"Microphone permission denied or error: {_error_text(exc)}", SoftphoneState.ERROR)
            return False

        self._set("Microphone access granted.")
        try:
            if self.token is None:
                self.token = await self.fetch_token()
            device = self._device_factory(self.token.token)
        except Exception as exc:
            LOGGER.warning("Device creation failed: %s", exc)
            self._set(f"Device creation failed: {_error_text(exc)}", SoftphoneState.ERROR)
            return False

        self.device = device
        self._bind(device)
        LOGGER.info("Device created for identity=%s", self.token.identity)
        return True

    async def place_call(self, raw_number: str) -> bool:
        try:
            to = validate_e164(raw_number)
        except InvalidPhoneNumberError as exc:
            self._set(exc.detail or exc.error)
            return False

        if self.device is None:
            self._set('Device not ready. Please click "Enable audio" and wait for Device ready.')
            return False

        if self.token is not None and not self.token.has_twiml_app:
            return await self._bridge_call(to)

        self._set(f"Calling {to}...", SoftphoneState.CALLING)
        try:
            self.device.connect({"To": to})
        except Exception as exc:
            LOGGER.warning("device.connect failed: %s", exc)
            self._set(f"Call failed: {_error_text(exc)}", SoftphoneState.ERROR)
            return False
        return True

    async def _bridge_call(self, to: str) -> bool:
        self._set(f"Creating server-side bridged call to {to}...", SoftphoneState.CALLING)
        try:
            resp = await self._http.post("/bridge-call", json={"to": to})
            body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            self._set(f"Bridge call error: {exc}", SoftphoneState.ERROR)
            return False

        if body.get("success"):
            self._set(f"Call initiated (bridge) - SID: {body.get('sid')}")
            return True
        self._set(f"Bridge call failed: {body.get('detail') or body.get('error') or body}", SoftphoneState.ERROR)
        return False

    def hang_up(self) -> None:
        if self.device is not None:
            self.device.disconnect_all()
