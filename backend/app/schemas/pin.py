from __future__ import annotations

from pydantic import BaseModel, field_validator

from backend.app.core.security import validate_pin_format
from backend.app.services.pin import PinKind


class PinSet(BaseModel):
    new_pin: str
    current_pin: str | None = None

    @field_validator("new_pin")
    @classmethod
    def pin_format(cls, v: str) -> str:
        error = validate_pin_format(v)
        if error:
            raise ValueError(error)
        return v


class PinVerify(BaseModel):
    pin: str


class PinStatusOut(BaseModel):
    kind: PinKind
    exists: bool


class PinVerifyOut(BaseModel):
    kind: PinKind
    valid: bool
