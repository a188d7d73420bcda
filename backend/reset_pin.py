"""Console recovery for a forgotten PIN.

Usage:
    python -m backend.reset_pin
"""

from __future__ import annotations

import getpass

import backend.app.models.ledger  # noqa: F401
from backend.app.core.database import SessionLocal
from backend.app.core.logging import setup_logging
from backend.app.core.security import validate_pin_format
from backend.app.services.pin import PinKind, reset_pin


def main() -> None:
    setup_logging()
    choice = input("PIN to reset (app/admin/price) [admin]: ").strip().lower() or "admin"
    try:
        kind = PinKind(choice)
    except ValueError:
        print(f"Error: unknown PIN '{choice}'.")
        return

    pin = getpass.getpass("New PIN: ")
    pin_error = validate_pin_format(pin)
    if pin_error:
        print(f"Error: {pin_error}")
        return
    if getpass.getpass("Repeat PIN: ") != pin:
        print("Error: PINs do not match.")
        return

    db = SessionLocal()
    try:
        reset_pin(db, kind, pin)
        print(f"{kind.value.capitalize()} PIN reset.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
