"""
Manager-then-HR sign-off on justifications, vacations and permissions.

Tests:
  - test_create_justification_copies_employee_name
  - test_manager_then_hr                     : pending → manager_approved → completed
  - test_hr_without_manager                  : HR may close a request directly
  - test_manager_after_hr_keeps_completed
  - test_rejected_request_cannot_be_approved : WorkflowError
  - test_reject_after_hr_approval            : approval flags kept, reason stored
  - test_reject_without_reason
  - test_reject_twice_is_noop
  - test_unknown_ids                         : NotFoundError
  - test_validate_after_hr                   : DCTS flag, actor, timestamp
  - test_requires_hr_approval                : WorkflowError before HR sign-off
  - test_rejected_justification              : WorkflowError
  - test_validate_twice_is_noop
"""

from __future__ import annotations

import datetime as dt
import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from attendancehub.core.exceptions import NotFoundError, WorkflowError
from attendancehub.db.models import Employee, Justification, PermissionRequest, User, VacationRequest
from attendancehub.schemas.requests import JustificationCreate, PermissionCreate, VacationCreate
from attendancehub.services import approvals
from attendancehub.services.audit import InMemoryAuditSink


async def _justification(db, employee: Employee, actor: User, sink) -> Justification:
    body = JustificationCreate(
        employee_id=employee.id,
        date=dt.date(2026, 1, 13),
        type="tardanza",
        description="Tráfico por obras en la avenida",
    )
    return await approvals.create_request(db, Justification, body.model_dump(), actor, sink)


class TestCreate:
    async def test_create_justification_copies_employee_name(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        record = await _justification(db, employees[0], admin_user, audit_sink)
        assert record.employee_name == employees[0].name
        assert record.status == "pending"
        assert record.approval_flow == "pending"
        assert record.manager_approved is False

        [entry] = await audit_sink.query()
        assert (entry.action, entry.entity, entry.entity_id) == ("CREATE", "justification", str(record.id))

    async def test_create_vacation_counts_days(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        body = VacationCreate(
            employee_id=employees[1].id, start_date=dt.date(2026, 2, 2), end_date=dt.date(2026, 2, 6),
        )
        record = await approvals.create_request(db, VacationRequest, body.model_dump(), admin_user, audit_sink)
        assert record.days == 5

    async def test_create_permission_normalizes_times(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        body = PermissionCreate(
            employee_id=employees[2].id, date=dt.date(2026, 2, 3), type="medical",
            start_time="8:30", end_time="11:00:00",
        )
        record = await approvals.create_request(db, PermissionRequest, body.model_dump(), admin_user, audit_sink)
        assert (record.start_time, record.end_time) == ("08:30", "11:00")

    async def test_create_for_unknown_employee(
        self,
        db: AsyncSession,
        admin_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        data = {"employee_id": uuid.uuid4(), "start_date": dt.date(2026, 2, 2), "end_date": dt.date(2026, 2, 2), "days": 1}
        with pytest.raises(NotFoundError):
            await approvals.create_request(db, VacationRequest, data, admin_user, audit_sink)

    def test_vacation_range_validated(self) -> None:
        with pytest.raises(ValueError):
            VacationCreate(employee_id=uuid.uuid4(), start_date=dt.date(2026, 2, 6), end_date=dt.date(2026, 2, 2))


class TestApprovalFlow:
    async def test_manager_then_hr(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        manager_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        record = await _justification(db, employees[0], admin_user, audit_sink)

        await approvals.approve_by_manager(db, Justification, record.id, manager_user, audit_sink)
        assert record.manager_approved is True
        assert record.manager_approved_by == manager_user.id
        assert record.manager_approved_at is not None
        assert record.approval_flow == "manager_approved"
        assert record.status == "pending"

        await approvals.approve_by_hr(db, Justification, record.id, admin_user, audit_sink)
        assert record.hr_approved is True
        assert record.hr_approved_by == admin_user.id
        assert record.hr_approved_at is not None
        assert record.approval_flow == "completed"
        assert record.status == "approved"

        actions = [e.action for e in await audit_sink.query()]
        assert actions == ["APPROVE", "APPROVE", "CREATE"]

    async def test_hr_without_manager(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        record = await _justification(db, employees[0], admin_user, audit_sink)
        await approvals.approve_by_hr(db, Justification, record.id, admin_user, audit_sink)
        assert record.manager_approved is False
        assert record.approval_flow == "completed"
        assert record.status == "approved"

    async def test_manager_after_hr_keeps_completed(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        manager_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        record = await _justification(db, employees[0], admin_user, audit_sink)
        await approvals.approve_by_hr(db, Justification, record.id, admin_user, audit_sink)
        await approvals.approve_by_manager(db, Justification, record.id, manager_user, audit_sink)
        assert record.manager_approved is True
        assert record.approval_flow == "completed"


class TestReject:
    async def test_rejected_request_cannot_be_approved(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        manager_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        record = await _justification(db, employees[0], admin_user, audit_sink)
        await approvals.approve_by_manager(db, Justification, record.id, manager_user, audit_sink)
        await approvals.reject(db, Justification, record.id, admin_user, audit_sink, "Sin sustento")

        assert record.status == "rejected"
        assert record.approval_flow == "rejected"
        assert record.rejected_by == admin_user.id
        assert record.rejected_at is not None

        with pytest.raises(WorkflowError):
            await approvals.approve_by_hr(db, Justification, record.id, admin_user, audit_sink)
        with pytest.raises(WorkflowError):
            await approvals.approve_by_manager(db, Justification, record.id, manager_user, audit_sink)

    async def test_reject_after_hr_approval(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        manager_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        record = await _justification(db, employees[0], admin_user, audit_sink)
        await approvals.approve_by_manager(db, Justification, record.id, manager_user, audit_sink)
        await approvals.approve_by_hr(db, Justification, record.id, admin_user, audit_sink)
        assert record.status == "approved"

        await approvals.reject(db, Justification, record.id, admin_user, audit_sink, "Documento adulterado")
        assert record.status == "rejected"
        assert record.approval_flow == "rejected"
        assert record.hr_approved is True
        assert record.manager_approved is True
        assert record.rejection_reason == "Documento adulterado"

        [entry] = [e for e in await audit_sink.query() if e.action == "REJECT"]
        assert entry.metadata == {"previous_status": "approved"}
        assert entry.details == "Documento adulterado"

    async def test_reject_without_reason(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        body = VacationCreate(
            employee_id=employees[1].id, start_date=dt.date(2026, 2, 2), end_date=dt.date(2026, 2, 3),
        )
        record = await approvals.create_request(db, VacationRequest, body.model_dump(), admin_user, audit_sink)
        await approvals.reject(db, VacationRequest, record.id, admin_user, audit_sink)
        assert record.rejection_reason is None

    async def test_reject_twice_is_noop(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        manager_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        record = await _justification(db, employees[0], admin_user, audit_sink)
        await approvals.reject(db, Justification, record.id, admin_user, audit_sink)
        first_rejected_at = record.rejected_at

        await approvals.reject(db, Justification, record.id, manager_user, audit_sink)
        assert record.rejected_by == admin_user.id
        assert record.rejected_at == first_rejected_at
        rejects = [e for e in await audit_sink.query() if e.action == "REJECT"]
        assert len(rejects) == 1

    async def test_unknown_ids(
        self,
        db: AsyncSession,
        admin_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        for operation in (approvals.approve_by_manager, approvals.approve_by_hr, approvals.reject):
            with pytest.raises(NotFoundError):
                await operation(db, PermissionRequest, uuid.uuid4(), admin_user, audit_sink)


class TestListRequests:
    async def test_filter_by_status_and_employee(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        first = await _justification(db, employees[0], admin_user, audit_sink)
        await _justification(db, employees[1], admin_user, audit_sink)
        await approvals.reject(db, Justification, first.id, admin_user, audit_sink)

        pending = await approvals.list_requests(db, Justification, status="pending")
        assert [r.employee_id for r in pending] == [employees[1].id]
        own = await approvals.list_requests(db, Justification, employee_id=employees[0].id)
        assert [r.id for r in own] == [first.id]


class TestDctsValidation:
    async def test_validate_after_hr(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        record = await _justification(db, employees[0], admin_user, audit_sink)
        await approvals.approve_by_hr(db, Justification, record.id, admin_user, audit_sink)

        await approvals.validate_dcts(db, record.id, admin_user, audit_sink)
        assert record.dcts_validated is True
        assert record.dcts_validated_by == admin_user.id
        assert record.dcts_validated_at is not None
        assert record.status == "approved"

        latest = (await audit_sink.query())[0]
        assert latest.action == "APPROVE"
        assert latest.metadata == {"stage": "dcts"}

    async def test_requires_hr_approval(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        manager_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        record = await _justification(db, employees[0], admin_user, audit_sink)
        await approvals.approve_by_manager(db, Justification, record.id, manager_user, audit_sink)
        with pytest.raises(WorkflowError):
            await approvals.validate_dcts(db, record.id, admin_user, audit_sink)
        assert record.dcts_validated is False

    async def test_rejected_justification(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        record = await _justification(db, employees[0], admin_user, audit_sink)
        await approvals.approve_by_hr(db, Justification, record.id, admin_user, audit_sink)
        await approvals.reject(db, Justification, record.id, admin_user, audit_sink)
        with pytest.raises(WorkflowError):
            await approvals.validate_dcts(db, record.id, admin_user, audit_sink)

    async def test_validate_twice_is_noop(
        self,
        db: AsyncSession,
        employees: list[Employee],
        admin_user: User,
        manager_user: User,
        audit_sink: InMemoryAuditSink,
    ) -> None:
        record = await _justification(db, employees[0], admin_user, audit_sink)
        await approvals.approve_by_hr(db, Justification, record.id, admin_user, audit_sink)
        await approvals.validate_dcts(db, record.id, admin_user, audit_sink)
        first_at = record.dcts_validated_at

        await approvals.validate_dcts(db, record.id, manager_user, audit_sink)
        assert record.dcts_validated_by == admin_user.id
        assert record.dcts_validated_at == first_at
        stages = [e for e in await audit_sink.query() if e.metadata.get("stage") == "dcts"]
        assert len(stages) == 1
