"""
Routers for the three request types sharing the manager-then-HR sign-off:
``/justifications``, ``/vacations`` and ``/permissions``.
"""

import uuid

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from attendancehub.core.middleware import (
    ROLE_ADMIN,
    ROLE_EMPLOYEE,
    ROLE_MANAGER,
    get_current_user,
    require_role,
)
from attendancehub.db.models import Justification, PermissionRequest, User, VacationRequest
from attendancehub.db.session import get_db
from attendancehub.schemas.requests import (
    JustificationCreate,
    JustificationResponse,
    PermissionCreate,
    PermissionResponse,
    RejectRequest,
    VacationCreate,
    VacationResponse,
)
from attendancehub.services import approvals
from attendancehub.services.audit import AuditSink, get_audit_sink


def _own_employee_only(user: User, employee_id: uuid.UUID) -> None:
    """Plain employees may only act on their own requests."""
    if user.role == ROLE_EMPLOYEE and user.employee_id != employee_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Employees can only manage their own requests",
        )


def _build_router(
    model: type,
    create_schema: type[BaseModel],
    response_schema: type[BaseModel],
) -> APIRouter:
    router = APIRouter()
    label = approvals.ENTITY_NAMES[model]

    @router.post(
        "/",
        response_model=response_schema,
        status_code=status.HTTP_201_CREATED,
        summary=f"Submit a {label} request",
    )
    async def create(
        body: create_schema,  # type: ignore[valid-type]
        db: AsyncSession = Depends(get_db),
        sink: AuditSink = Depends(get_audit_sink),
        current_user: User = Depends(get_current_user),
    ):
        _own_employee_only(current_user, body.employee_id)
        record = await approvals.create_request(db, model, body.model_dump(), current_user, sink)
        await db.commit()
        await db.refresh(record)
        return response_schema.model_validate(record)

    @router.get("/", response_model=list[response_schema], summary=f"List {label} requests")
    async def list_all(
        status_filter: str | None = Query(default=None, alias="status"),
        employee_id: uuid.UUID | None = Query(default=None),
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ):
        if current_user.role == ROLE_EMPLOYEE:
            if current_user.employee_id is None:
                return []
            employee_id = current_user.employee_id
        rows = await approvals.list_requests(db, model, status_filter, employee_id)
        return [response_schema.model_validate(r) for r in rows]

    @router.post(
        "/{request_id}/approve/manager",
        response_model=response_schema,
        summary=f"Manager approval of a {label} request",
    )
    async def approve_manager(
        request_id: uuid.UUID,
        db: AsyncSession = Depends(get_db),
        sink: AuditSink = Depends(get_audit_sink),
        current_user: User = Depends(require_role(ROLE_ADMIN, ROLE_MANAGER)),
    ):
        record = await approvals.approve_by_manager(db, model, request_id, current_user, sink)
        await db.commit()
        await db.refresh(record)
        return response_schema.model_validate(record)

    @router.post(
        "/{request_id}/approve/hr",
        response_model=response_schema,
        summary=f"HR approval of a {label} request (admin only)",
    )
    async def approve_hr(
        request_id: uuid.UUID,
        db: AsyncSession = Depends(get_db),
        sink: AuditSink = Depends(get_audit_sink),
        current_user: User = Depends(require_role(ROLE_ADMIN)),
    ):
        record = await approvals.approve_by_hr(db, model, request_id, current_user, sink)
        await db.commit()
        await db.refresh(record)
        return response_schema.model_validate(record)

    @router.post(
        "/{request_id}/reject",
        response_model=response_schema,
        summary=f"Reject a {label} request",
    )
    async def reject(
        request_id: uuid.UUID,
        body: RejectRequest | None = Body(default=None),
        db: AsyncSession = Depends(get_db),
        sink: AuditSink = Depends(get_audit_sink),
        current_user: User = Depends(require_role(ROLE_ADMIN, ROLE_MANAGER)),
    ):
        reason = body.reason if body else None
        record = await approvals.reject(db, model, request_id, current_user, sink, reason)
        await db.commit()
        await db.refresh(record)
        return response_schema.model_validate(record)

    return router


justifications_router = _build_router(Justification, JustificationCreate, JustificationResponse)
vacations_router = _build_router(VacationRequest, VacationCreate, VacationResponse)
permissions_router = _build_router(PermissionRequest, PermissionCreate, PermissionResponse)


@justifications_router.post(
    "/{request_id}/validate/dcts",
    response_model=JustificationResponse,
    summary="DCTS validation of an HR-approved justification (admin only)",
)
async def validate_dcts(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> JustificationResponse:
    record = await approvals.validate_dcts(db, request_id, current_user, sink)
    await db.commit()
    await db.refresh(record)
    return JustificationResponse.model_validate(record)
