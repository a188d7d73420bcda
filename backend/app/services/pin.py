"""App, admin and price-master PINs stored in the ``app_config`` row."""
from __future__ import annotations

import enum
import logging

from sqlalchemy.orm import Session

from backend.app.core.security import get_pin_hash, validate_pin_format, verify_pin_hash
from backend.app.models.app_config import AppConfig
from backend.app.services.audit import log_action
from backend.app.services.errors import InvalidPinError, PinNotConfiguredError

logger = logging.getLogger(__name__)


class PinKind(str, enum.Enum):
    APP = "app"
    ADMIN = "admin"
    PRICE = "price"


_HASH_COLUMN = {
    PinKind.APP: "app_pin_hash",
    PinKind.ADMIN: "admin_pin_hash",
    PinKind.PRICE: "price_pin_hash",
}


def _config(db: Session) -> AppConfig | None:
    return db.query(AppConfig).order_by(AppConfig.updated_at).first()


def pin_exists(db: Session, kind: PinKind) -> bool:
    config = _config(db)
    return bool(config and getattr(config, _HASH_COLUMN[kind]))


def verify_pin(db: Session, kind: PinKind, pin: str) -> bool:
    config = _config(db)
    hashed = getattr(config, _HASH_COLUMN[kind]) if config else None
    if not hashed:
        raise PinNotConfiguredError(f"{kind.value.capitalize()} PIN has not been set")
    return verify_pin_hash(pin, hashed)


def set_pin(
    db: Session,
    kind: PinKind,
    new_pin: str,
    current_pin: str | None = None,
    ip_address: str | None = None,
) -> None:
    """Set or change a PIN. Changing an existing PIN requires the current one."""
    error = validate_pin_format(new_pin)
    if error:
        raise ValueError(error)

    config = _config(db)
    column = _HASH_COLUMN[kind]
    existing = getattr(config, column) if config else None
    if existing:
        if current_pin is None or not verify_pin_hash(current_pin, existing):
            raise InvalidPinError(f"Current {kind.value} PIN is incorrect")

    if config is None:
        config = AppConfig()
        db.add(config)
    setattr(config, column, get_pin_hash(new_pin))

    log_action(
        db,
        action="PIN_CHANGED" if existing else "PIN_SET",
        resource_type="app_config",
        resource_id=kind.value,
        ip_address=ip_address,
    )
    db.commit()
    logger.info("%s PIN %s", kind.value.capitalize(), "changed" if existing else "set")


def reset_pin(db: Session, kind: PinKind, new_pin: str) -> None:
    """Overwrite a PIN without the current one. Console recovery only."""
    error = validate_pin_format(new_pin)
    if error:
        raise ValueError(error)

    config = _config(db)
    if config is None:
        config = AppConfig()
        db.add(config)
    setattr(config, _HASH_COLUMN[kind], get_pin_hash(new_pin))
    log_action(
        db,
        action="PIN_RESET",
        resource_type="app_config",
        resource_id=kind.value,
    )
    db.commit()
    logger.warning("%s PIN reset from the console", kind.value.capitalize())
