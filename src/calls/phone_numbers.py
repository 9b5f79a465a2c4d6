from __future__ import annotations

import re

from calls.errors import InvalidPhoneNumberError

E164_PATTERN = re.compile(r"^\+\d{8,15}$", re.ASCII)
_STRIP_PATTERN = re.compile(r"[^+\d]", re.ASCII)

EXAMPLE_NUMBER = "+919876543210"


def normalize_phone_number(raw: str | None) -> str:
    """Drop spaces, parentheses, dashes and other punctuation, keeping a leading +."""

    return _STRIP_PATTERN.sub("", (raw or "").strip())


def is_valid_e164(number: str) -> bool:
    return bool(E164_PATTERN.match(number))


def validate_e164(raw: str | None) -> str:
    """Return the normalized destination or raise with a user-facing explanation."""

    if not (raw or "").strip():
        raise InvalidPhoneNumberError(
            f"Enter a phone number in E.164 format (for India: {EXAMPLE_NUMBER})",
            error="Missing phone number",
        )

    number = normalize_phone_number(raw)
    if not number.startswith("+"):
        raise InvalidPhoneNumberError(
            "Please provide the number in E.164 format with a leading + and country code, "
            f"for example: {EXAMPLE_NUMBER}"
        )
    if not is_valid_e164(number):
        raise InvalidPhoneNumberError(
            "Invalid phone number. E.164 format must be: + followed by 8 to 15 digits, "
            f"e.g. {EXAMPLE_NUMBER}"
        )
    return number
