from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.app.api.deps import require_admin_pin
from backend.app.core.database import get_db
from backend.app.models.audit import AuditLog
from backend.app.services.audit import list_audit_logs

router = APIRouter()


class AuditLogOut(BaseModel):
    id: UUID
    table_name: str
    record_id: str
    action: str
    new_values: dict[str, Any] | None
    ip_address: str | None
    created_at: datetime

    class Config:
        from_attributes = True


@router.get(
    "",
    response_model=list[AuditLogOut],
    dependencies=[Depends(require_admin_pin)],
)
def audit_logs(
    action: str | None = Query(None, description="e.g. PURCHASE_RECORDED, PRICE_SET"),
    resource_type: str | None = Query(None, description="Table name, e.g. payments"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> list[AuditLog]:
    return list_audit_logs(
        db, action=action, resource_type=resource_type, limit=limit, offset=offset,
    )
