"""
Disciplinary sanctions: proposed as ``pending``, then approved or revoked.

An approved sanction can still be revoked; a revoked one is final.
"""

import datetime as dt
import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from attendancehub.core.exceptions import NotFoundError, WorkflowError
from attendancehub.db.models import Employee, Sanction, User
from attendancehub.services.audit import AuditSink, record_action

logger = logging.getLogger(__name__)


async def get_sanction(db: AsyncSession, sanction_id: uuid.UUID) -> Sanction:
    sanction = await db.get(Sanction, sanction_id)
    if sanction is None:
        raise NotFoundError(f"sanction {sanction_id} not found")
    return sanction


async def list_sanctions(
    db: AsyncSession,
    status: str | None = None,
    employee_id: uuid.UUID | None = None,
) -> list[Sanction]:
    stmt = select(Sanction)
    if status:
        stmt = stmt.where(Sanction.status == status)
    if employee_id:
        stmt = stmt.where(Sanction.employee_id == employee_id)
    return list((await db.scalars(stmt.order_by(Sanction.created_at.desc()))).all())


async def create_sanction(
    db: AsyncSession,
    data: dict[str, Any],
    actor: User,
    sink: AuditSink,
) -> Sanction:
    employee = await db.get(Employee, data["employee_id"])
    if employee is None:
        raise NotFoundError(f"employee {data['employee_id']} not found")

    sanction = Sanction(**data, status="pending", applied_by=actor.id)
    db.add(sanction)
    await db.flush()

    await record_action(
        sink, actor, "CREATE", "sanction", sanction.id,
        f"Sanción {sanction.type} ({sanction.infraction_level}) para {employee.name}",
    )
    return sanction


async def approve_sanction(
    db: AsyncSession,
    sanction_id: uuid.UUID,
    actor: User,
    sink: AuditSink,
    notes: str | None = None,
) -> Sanction:
    sanction = await get_sanction(db, sanction_id)
    if sanction.status != "pending":
        raise WorkflowError(f"sanction {sanction.id} is {sanction.status} and cannot be approved")

    sanction.status = "approved"
    sanction.notes = notes
    sanction.resolved_by = actor.id
    sanction.resolved_at = dt.datetime.now(dt.timezone.utc)
    await db.flush()

    await record_action(
        sink, actor, "APPROVE", "sanction", sanction.id, notes or "Sanción aprobada",
    )
    return sanction


async def revoke_sanction(
    db: AsyncSession,
    sanction_id: uuid.UUID,
    actor: User,
    sink: AuditSink,
    notes: str | None = None,
) -> Sanction:
    sanction = await get_sanction(db, sanction_id)
    if sanction.status == "revoked":
        return sanction

    previous = sanction.status
    sanction.status = "revoked"
    sanction.notes = notes
    sanction.resolved_by = actor.id
    sanction.resolved_at = dt.datetime.now(dt.timezone.utc)
    await db.flush()

    if previous == "approved":
        logger.info("Sanción %s revocada después de haber sido aprobada", sanction.id)
    await record_action(
        sink, actor, "REJECT", "sanction", sanction.id, notes or "Sanción revocada",
        {"previous_status": previous},
    )
    return sanction
