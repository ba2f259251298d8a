import datetime as dt

from fastapi import APIRouter, Depends, Query

from attendancehub.core.middleware import ROLE_ADMIN, require_role
from attendancehub.db.models import User
from attendancehub.schemas.audit import AuditAction, AuditEntity, AuditFilters, AuditLogEntry
from attendancehub.services.audit import AuditSink, get_audit_sink

router = APIRouter()


@router.get("/", response_model=list[AuditLogEntry], summary="Query the audit trail (admin only)")
async def query_audit(
    action: AuditAction | None = Query(default=None),
    entity: AuditEntity | None = Query(default=None),
    user_id: str | None = Query(default=None),
    start: dt.datetime | None = Query(default=None),
    end: dt.datetime | None = Query(default=None),
    limit: int = Query(default=200, ge=1, le=1000),
    sink: AuditSink = Depends(get_audit_sink),
    _current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> list[AuditLogEntry]:
    filters = AuditFilters(
        action=action, entity=entity, user_id=user_id, start=start, end=end, limit=limit,
    )
    return await sink.query(filters)
