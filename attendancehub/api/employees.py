import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from attendancehub.core.middleware import ROLE_ADMIN, ROLE_MANAGER, require_role
from attendancehub.db.models import User
from attendancehub.db.session import get_db
from attendancehub.schemas.employee import (
    EmployeeCreate,
    EmployeeResponse,
    EmployeeStatus,
    EmployeeStatusUpdate,
    EmployeeUpdate,
    UnmatchedEmployeeIn,
    UnmatchedEmployeesResult,
)
from attendancehub.services import employees as employee_service
from attendancehub.services.audit import AuditSink, get_audit_sink

router = APIRouter()


@router.get("/", response_model=list[EmployeeResponse], summary="List or search employees")
async def list_employees(
    search: str | None = Query(default=None, description="Partial name or document id"),
    department: str | None = Query(default=None),
    status_filter: EmployeeStatus | None = Query(default=None, alias="status"),
    db: AsyncSession = Depends(get_db),
    _current_user: User = Depends(require_role(ROLE_ADMIN, ROLE_MANAGER)),
) -> list[EmployeeResponse]:
    rows = await employee_service.list_employees(db, search, department, status_filter)
    return [EmployeeResponse.model_validate(e) for e in rows]


@router.get("/{employee_id}", response_model=EmployeeResponse, summary="Get one employee")
async def get_employee(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _current_user: User = Depends(require_role(ROLE_ADMIN, ROLE_MANAGER)),
) -> EmployeeResponse:
    return EmployeeResponse.model_validate(await employee_service.get_employee(db, employee_id))


@router.post(
    "/",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an employee (admin only)",
)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> EmployeeResponse:
    employee = await employee_service.create_employee(db, body, current_user, sink)
    await db.commit()
    await db.refresh(employee)
    return EmployeeResponse.model_validate(employee)


@router.patch("/{employee_id}", response_model=EmployeeResponse, summary="Edit employee data (admin only)")
async def update_employee(
    employee_id: uuid.UUID,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> EmployeeResponse:
    employee = await employee_service.update_employee(db, employee_id, body, current_user, sink)
    await db.commit()
    await db.refresh(employee)
    return EmployeeResponse.model_validate(employee)


@router.patch(
    "/{employee_id}/status",
    response_model=EmployeeResponse,
    summary="Change employment status (admin only); employees are never deleted",
)
async def change_employee_status(
    employee_id: uuid.UUID,
    body: EmployeeStatusUpdate,
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> EmployeeResponse:
    employee = await employee_service.change_status(db, employee_id, body.status, current_user, sink)
    await db.commit()
    await db.refresh(employee)
    return EmployeeResponse.model_validate(employee)


@router.post(
    "/unmatched",
    response_model=UnmatchedEmployeesResult,
    summary="Register report rows that matched no employee (admin only)",
)
async def add_unmatched(
    rows: list[UnmatchedEmployeeIn],
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> UnmatchedEmployeesResult:
    added, errors = await employee_service.add_unmatched_employees(db, rows, current_user, sink)
    await db.commit()
    return UnmatchedEmployeesResult(
        added=len(added),
        errors=errors,
        employees=[EmployeeResponse.model_validate(e) for e in added],
    )
