"""Employee directory: registration, edits and status changes. Rows are never hard-deleted."""

import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from attendancehub.core.exceptions import ConflictError, NotFoundError
from attendancehub.db.models import Employee, User
from attendancehub.schemas.attendance import KnownEmployee
from attendancehub.schemas.employee import (
    EmployeeCreate,
    EmployeeStatus,
    EmployeeUpdate,
    UnmatchedEmployeeIn,
)
from attendancehub.services.audit import AuditSink, record_action

logger = logging.getLogger(__name__)


async def list_employees(
    db: AsyncSession,
    search: str | None = None,
    department: str | None = None,
    status: EmployeeStatus | None = None,
) -> list[Employee]:
    stmt = select(Employee)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(Employee.name.ilike(pattern), Employee.document_id.ilike(pattern)))
    if department:
        stmt = stmt.where(Employee.department == department)
    if status:
        stmt = stmt.where(Employee.status == status)
    return list((await db.scalars(stmt.order_by(Employee.name))).all())


async def list_known_employees(db: AsyncSession) -> list[KnownEmployee]:
    """Every employee, whatever the status, as the lookup table for report matching."""
    rows = (await db.scalars(select(Employee))).all()
    return [KnownEmployee.model_validate(row) for row in rows]


async def get_employee(db: AsyncSession, employee_id: uuid.UUID) -> Employee:
    employee = await db.get(Employee, employee_id)
    if employee is None:
        raise NotFoundError(f"employee {employee_id} not found")
    return employee


async def create_employee(
    db: AsyncSession,
    body: EmployeeCreate,
    actor: User,
    sink: AuditSink,
) -> Employee:
    existing = await db.scalar(select(Employee).where(Employee.document_id == body.document_id))
    if existing is not None:
        raise ConflictError(f"Ya existe un empleado con documento {body.document_id}")

    employee = Employee(**body.model_dump(), status="active")
    db.add(employee)
    await db.flush()

    await record_action(
        sink, actor, "CREATE", "employee", employee.id, f"Alta de empleado {employee.name}",
    )
    return employee


async def update_employee(
    db: AsyncSession,
    employee_id: uuid.UUID,
    body: EmployeeUpdate,
    actor: User,
    sink: AuditSink,
) -> Employee:
    employee = await get_employee(db, employee_id)
    changes = body.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(employee, key, value)
    await db.flush()

    if changes:
        await record_action(
            sink, actor, "UPDATE", "employee", employee.id,
            f"Actualización de {employee.name}",
            {"fields": sorted(changes)},
        )
    return employee


async def change_status(
    db: AsyncSession,
    employee_id: uuid.UUID,
    status: EmployeeStatus,
    actor: User,
    sink: AuditSink,
) -> Employee:
    employee = await get_employee(db, employee_id)
    previous = employee.status
    if previous == status:
        return employee

    employee.status = status
    await db.flush()
    await record_action(
        sink, actor, "UPDATE", "employee", employee.id,
        f"Estado de {employee.name}: {previous} -> {status}",
        {"previous_status": previous, "status": status},
    )
    return employee


async def add_unmatched_employees(
    db: AsyncSession,
    rows: list[UnmatchedEmployeeIn],
    actor: User,
    sink: AuditSink,
) -> tuple[list[Employee], list[str]]:
    """
    Register report rows that matched no employee.

    A document id that already exists, or repeats within ``rows``, is
    reported in the returned error list and the remaining rows still land.
    """
    added: list[Employee] = []
    errors: list[str] = []

    document_ids = {row.document_id.strip() for row in rows}
    taken = set(
        (await db.scalars(select(Employee.document_id).where(Employee.document_id.in_(document_ids)))).all()
    )

    for row in rows:
        document_id = row.document_id.strip()
        if document_id in taken:
            errors.append(f"{row.employee_name}: el documento {document_id} ya está registrado")
            continue

        employee = Employee(
            document_id=document_id,
            name=row.employee_name.strip(),
            department=row.department,
            position=row.position,
            status="active",
        )
        try:
            async with db.begin_nested():
                db.add(employee)
                await db.flush()
        except IntegrityError as exc:
            logger.exception("No se pudo registrar '%s'", row.employee_name)
            errors.append(f"{row.employee_name}: {exc.orig}")
            continue

        taken.add(document_id)
        added.append(employee)

    if added:
        await record_action(
            sink, actor, "CREATE", "employee", "bulk",
            f"Alta de {len(added)} empleados desde reporte biométrico",
            {"document_ids": [e.document_id for e in added], "errors": len(errors)},
        )
    logger.info("Empleados no coincidentes: agregados=%d, errores=%d", len(added), len(errors))
    return added, errors
