import uuid

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from attendancehub.core.middleware import (
    ROLE_ADMIN,
    ROLE_EMPLOYEE,
    ROLE_MANAGER,
    get_current_user,
    require_role,
)
from attendancehub.db.models import User
from attendancehub.db.session import get_db
from attendancehub.schemas.sanctions import SanctionCreate, SanctionDecision, SanctionResponse
from attendancehub.services import sanctions
from attendancehub.services.audit import AuditSink, get_audit_sink

router = APIRouter()


@router.post(
    "/",
    response_model=SanctionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Propose a sanction for an employee",
)
async def create_sanction(
    body: SanctionCreate,
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    current_user: User = Depends(require_role(ROLE_ADMIN, ROLE_MANAGER)),
) -> SanctionResponse:
    sanction = await sanctions.create_sanction(db, body.model_dump(), current_user, sink)
    await db.commit()
    await db.refresh(sanction)
    return SanctionResponse.model_validate(sanction)


@router.get("/", response_model=list[SanctionResponse], summary="List sanctions")
async def list_sanctions(
    status_filter: str | None = Query(default=None, alias="status"),
    employee_id: uuid.UUID | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[SanctionResponse]:
    if current_user.role == ROLE_EMPLOYEE:
        if current_user.employee_id is None:
            return []
        employee_id = current_user.employee_id
    rows = await sanctions.list_sanctions(db, status_filter, employee_id)
    return [SanctionResponse.model_validate(s) for s in rows]


@router.get("/{sanction_id}", response_model=SanctionResponse, summary="Get a sanction")
async def get_sanction(
    sanction_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SanctionResponse:
    sanction = await sanctions.get_sanction(db, sanction_id)
    if current_user.role == ROLE_EMPLOYEE and current_user.employee_id != sanction.employee_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Employees can only view their own sanctions",
        )
    return SanctionResponse.model_validate(sanction)


@router.post(
    "/{sanction_id}/approve",
    response_model=SanctionResponse,
    summary="Approve a pending sanction (admin only)",
)
async def approve_sanction(
    sanction_id: uuid.UUID,
    body: SanctionDecision | None = Body(default=None),
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> SanctionResponse:
    notes = body.notes if body else None
    sanction = await sanctions.approve_sanction(db, sanction_id, current_user, sink, notes)
    await db.commit()
    await db.refresh(sanction)
    return SanctionResponse.model_validate(sanction)


@router.post(
    "/{sanction_id}/revoke",
    response_model=SanctionResponse,
    summary="Revoke a sanction (admin only)",
)
async def revoke_sanction(
    sanction_id: uuid.UUID,
    body: SanctionDecision | None = Body(default=None),
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> SanctionResponse:
    notes = body.notes if body else None
    sanction = await sanctions.revoke_sanction(db, sanction_id, current_user, sink, notes)
    await db.commit()
    await db.refresh(sanction)
    return SanctionResponse.model_validate(sanction)
