from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from backend.app.core.config import settings
from backend.app.core.database import get_db
from backend.app.middleware.rate_limit import InMemoryRateLimiter
from backend.app.services.errors import PinNotConfiguredError
from backend.app.services.pin import PinKind, verify_pin

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MIME = "application/pdf"

pin_limiter = InMemoryRateLimiter(
    window_seconds=settings.PIN_WINDOW_SECONDS,
    max_attempts=settings.PIN_MAX_ATTEMPTS,
)


def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def export_response(buf: object, media_type: str, filename: str) -> StreamingResponse:
    return StreamingResponse(
        buf,  # type: ignore[arg-type]
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def check_pin(db: Session, request: Request, kind: PinKind, pin: str | None) -> None:
    """Throttled PIN check shared by the header guards and ``/pin/verify``."""
    if not pin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"{kind.value.capitalize()} PIN required",
        )
    key = f"{kind.value}:{client_ip(request) or 'unknown'}"
    pin_limiter.check(key)
    try:
        valid = verify_pin(db, kind, pin)
    except PinNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if not valid:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Invalid {kind.value} PIN",
        )
    pin_limiter.clear(key)


def require_admin_pin(
    request: Request,
    x_admin_pin: str | None = Header(None),
    db: Session = Depends(get_db),
) -> None:
    check_pin(db, request, PinKind.ADMIN, x_admin_pin)


def require_price_pin(
    request: Request,
    x_price_pin: str | None = Header(None),
    db: Session = Depends(get_db),
) -> None:
    check_pin(db, request, PinKind.PRICE, x_price_pin)
