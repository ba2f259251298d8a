"""
Manager-then-HR sign-off for justifications, vacations and permissions.

Transitions:
  manager approval  -> manager_approved flag, actor, timestamp;
                       approval_flow pending -> manager_approved
  HR approval       -> hr_approved flag, actor, timestamp;
                       approval_flow completed, status approved
  reject            -> status/approval_flow rejected, from any state,
                       keeping earlier approval flags
  DCTS validation   -> justifications only; dcts_validated flag, actor,
                       timestamp after HR approval

HR approval does not require the manager stage first. A rejected request
accepts no further approvals.
"""

import datetime as dt
import logging
import uuid
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from attendancehub.core.exceptions import NotFoundError, WorkflowError
from attendancehub.db.models import (
    Employee,
    Justification,
    PermissionRequest,
    User,
    VacationRequest,
)
from attendancehub.schemas.audit import AuditEntity
from attendancehub.services.audit import AuditSink, record_action

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", Justification, VacationRequest, PermissionRequest)

ENTITY_NAMES: dict[type, AuditEntity] = {
    Justification: "justification",
    VacationRequest: "vacation",
    PermissionRequest: "permission",
}


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


async def get_request(db: AsyncSession, model: type[RequestT], request_id: uuid.UUID) -> RequestT:
    record = await db.get(model, request_id)
    if record is None:
        raise NotFoundError(f"{ENTITY_NAMES[model]} {request_id} not found")
    return record


async def list_requests(
    db: AsyncSession,
    model: type[RequestT],
    status: str | None = None,
    employee_id: uuid.UUID | None = None,
) -> list[RequestT]:
    stmt = select(model)
    if status:
        stmt = stmt.where(model.status == status)
    if employee_id:
        stmt = stmt.where(model.employee_id == employee_id)
    stmt = stmt.order_by(model.created_at.desc())
    return list((await db.scalars(stmt)).all())


async def create_request(
    db: AsyncSession,
    model: type[RequestT],
    data: dict[str, Any],
    actor: User,
    sink: AuditSink,
) -> RequestT:
    employee = await db.get(Employee, data["employee_id"])
    if employee is None:
        raise NotFoundError(f"employee {data['employee_id']} not found")

    if model is Justification:
        data = {**data, "employee_name": employee.name}

    record = model(**data, status="pending", approval_flow="pending")
    db.add(record)
    await db.flush()

    await record_action(
        sink, actor, "CREATE", ENTITY_NAMES[model], record.id,
        f"Registró {ENTITY_NAMES[model]} de {employee.name}",
    )
    return record


def _ensure_open(record: Any, model: type) -> None:
    if record.status == "rejected":
        raise WorkflowError(f"{ENTITY_NAMES[model]} {record.id} was rejected and cannot be approved")


async def approve_by_manager(
    db: AsyncSession,
    model: type[RequestT],
    request_id: uuid.UUID,
    actor: User,
    sink: AuditSink,
) -> RequestT:
    record = await get_request(db, model, request_id)
    _ensure_open(record, model)

    record.manager_approved = True
    record.manager_approved_by = actor.id
    record.manager_approved_at = _now()
    # HR may already have closed the flow; never move it backwards
    if record.approval_flow == "pending":
        record.approval_flow = "manager_approved"
    await db.flush()

    await record_action(
        sink, actor, "APPROVE", ENTITY_NAMES[model], record.id, "Aprobación de jefe de área",
        {"stage": "manager"},
    )
    return record


async def approve_by_hr(
    db: AsyncSession,
    model: type[RequestT],
    request_id: uuid.UUID,
    actor: User,
    sink: AuditSink,
) -> RequestT:
    record = await get_request(db, model, request_id)
    _ensure_open(record, model)

    if not record.manager_approved:
        logger.info(
            "%s %s aprobada por RRHH sin aprobación previa de jefe",
            ENTITY_NAMES[model], record.id,
        )
    record.hr_approved = True
    record.hr_approved_by = actor.id
    record.hr_approved_at = _now()
    record.approval_flow = "completed"
    record.status = "approved"
    await db.flush()

    await record_action(
        sink, actor, "APPROVE", ENTITY_NAMES[model], record.id, "Aprobación de RRHH",
        {"stage": "hr", "manager_approved": record.manager_approved},
    )
    return record


async def reject(
    db: AsyncSession,
    model: type[RequestT],
    request_id: uuid.UUID,
    actor: User,
    sink: AuditSink,
    reason: str | None = None,
) -> RequestT:
    record = await get_request(db, model, request_id)
    if record.status == "rejected":
        return record

    previous = record.status
    record.status = "rejected"
    record.approval_flow = "rejected"
    record.rejected_by = actor.id
    record.rejected_at = _now()
    record.rejection_reason = reason
    await db.flush()

    await record_action(
        sink, actor, "REJECT", ENTITY_NAMES[model], record.id,
        reason or "Solicitud rechazada",
        {"previous_status": previous},
    )
    return record


async def validate_dcts(
    db: AsyncSession,
    justification_id: uuid.UUID,
    actor: User,
    sink: AuditSink,
) -> Justification:
    """Third sign-off (DCTS) on an HR-approved justification; repeating it is a no-op."""
    record = await get_request(db, Justification, justification_id)
    _ensure_open(record, Justification)
    if not record.hr_approved:
        raise WorkflowError(f"justification {record.id} needs HR approval before DCTS validation")
    if record.dcts_validated:
        return record

    record.dcts_validated = True
    record.dcts_validated_by = actor.id
    record.dcts_validated_at = _now()
    await db.flush()

    await record_action(
        sink, actor, "APPROVE", "justification", record.id, "Validación DCTS",
        {"stage": "dcts"},
    )
    return record
