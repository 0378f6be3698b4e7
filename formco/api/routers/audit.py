"""Read access to the acting identity's own audit trail."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from formco.api.deps import CurrentActor, audit_log_service
from formco.db.schemas.audit_log import AuditLogRead
from formco.services.audit_log import AuditLogService

router = APIRouter()


class AuditLogPage(BaseModel):
    items: List[AuditLogRead]
    total: int


@router.get("/me/audit-logs", response_model=AuditLogPage)
async def list_my_audit_logs(
    actor: CurrentActor,
    action: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    audit: AuditLogService = Depends(audit_log_service),
):
    """Newest first; ``action`` filters on the exact action name."""
    items, total = await audit.list_entries(limit=limit, offset=offset, actor_id=actor.id, action=action)
    return AuditLogPage(items=items, total=total)
