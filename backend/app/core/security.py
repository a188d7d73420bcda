from __future__ import annotations

import re

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_PIN_RE = re.compile(r"^\d{4,8}$")


def verify_pin_hash(plain_pin: str, hashed_pin: str) -> bool:
    return pwd_context.verify(plain_pin, hashed_pin)


def get_pin_hash(pin: str) -> str:
    return pwd_context.hash(pin)


def validate_pin_format(pin: str) -> str | None:
    """Return error message if the PIN is malformed, None if valid."""
    if not _PIN_RE.match(pin):
        return "PIN must be 4 to 8 digits"
    return None
