"""Value normalisation shared by the Customer model and its DTOs."""

from __future__ import annotations

import re

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{7,14}$")


def normalize_phone(value: str) -> str:
    """Strip separators; raise ``ValueError`` if it is not a phone number."""
    digits = re.sub(r"[\s\-().]", "", value or "")
    if not digits:
        return ""
    if not PHONE_PATTERN.match(digits):
        raise ValueError("Phone number must have 8 to 15 digits.")
    return digits if digits.startswith("+") else f"+{digits}"
