"""initial: users, employees, attendance, requests, positions, audit, import history

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enum types shared by several tables are created once up front
user_role = postgresql.ENUM("admin", "manager", "employee", name="user_role", create_type=False)
employee_status = postgresql.ENUM(
    "active", "inactive", "on_leave", "terminated", name="employee_status", create_type=False
)
contract_type = postgresql.ENUM(
    "indefinido", "plazo_fijo", "por_obra", "honorarios", "practica",
    name="contract_type", create_type=False,
)
attendance_status = postgresql.ENUM(
    "pending", "validated", "rejected", "justified", name="attendance_status", create_type=False
)
request_status = postgresql.ENUM(
    "pending", "approved", "rejected", "cancelled", name="request_status", create_type=False
)
approval_flow = postgresql.ENUM(
    "pending", "manager_approved", "completed", "rejected", name="approval_flow", create_type=False
)
justification_type = postgresql.ENUM(
    "tardanza", "inasistencia", "salida_temprana", "permiso_medico", "emergencia_familiar",
    name="justification_type", create_type=False,
)
import_status_enum = postgresql.ENUM(
    "success", "partial", "failed", name="import_status_enum", create_type=False
)

ENUMS = (
    user_role, employee_status, contract_type, attendance_status,
    request_status, approval_flow, justification_type, import_status_enum,
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _approval_columns() -> list[sa.Column]:
    return [
        sa.Column("status", request_status, nullable=False, server_default="pending"),
        sa.Column("approval_flow", approval_flow, nullable=False, server_default="pending"),
        sa.Column("manager_approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("manager_approved_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("manager_approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("hr_approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("hr_approved_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("hr_approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    ]


def _request_key() -> list:
    return [
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("employee_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for enum in ENUMS:
        enum.create(bind, checkfirst=True)

    # --- employees ---
    op.create_table(
        "employees",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("document_id", sa.String(20), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("department", sa.String(50), nullable=False),
        sa.Column("position", sa.String(120), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("hire_date", sa.Date(), nullable=True),
        sa.Column("contract_type", contract_type, nullable=True),
        sa.Column("contract_end_date", sa.Date(), nullable=True),
        sa.Column("status", employee_status, nullable=False, server_default="active"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("document_id"),
    )

    # --- users ---
    op.create_table(
        "users",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", user_role, nullable=False, server_default="employee"),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("employee_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )

    # --- attendance_records ---
    op.create_table(
        "attendance_records",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("employee_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("scheduled_hours", sa.Float(), nullable=False, server_default="8"),
        sa.Column("worked_hours", sa.Float(), nullable=False, server_default="0"),
        sa.Column("tardy_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tardy_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("early_leave_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("early_leave_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("overtime_weekday", sa.Float(), nullable=False, server_default="0"),
        sa.Column("overtime_holiday", sa.Float(), nullable=False, server_default="0"),
        sa.Column("days_attended", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("absences", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("permissions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", attendance_status, nullable=False, server_default="pending"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )
    op.create_index("ix_attendance_records_date", "attendance_records", ["date"])

    # --- justifications / vacation_requests / permission_requests ---
    op.create_table(
        "justifications",
        *_request_key(),
        sa.Column("employee_name", sa.String(255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("type", justification_type, nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("evidence_url", sa.String(500), nullable=True),
        *_approval_columns(),
    )
    op.create_table(
        "vacation_requests",
        *_request_key(),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("days", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        *_approval_columns(),
    )
    op.create_table(
        "permission_requests",
        *_request_key(),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=True),
        sa.Column("end_time", sa.String(5), nullable=True),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("evidence_url", sa.String(500), nullable=True),
        *_approval_columns(),
    )

    # --- department_positions ---
    op.create_table(
        "department_positions",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("department", sa.String(50), nullable=False),
        sa.Column("position_name", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("responsibilities", postgresql.JSONB(), nullable=True),
        sa.Column("max_positions", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_leadership", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reports_to", sa.String(120), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("department", "position_name", name="uq_position_per_department"),
    )

    # --- audit_logs ---
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("entity", sa.String(30), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_timestamp", "audit_logs", ["timestamp"])
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity", "entity_id"])

    # --- import_history ---
    op.create_table(
        "import_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("uploaded_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column(
            "uploaded_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("period_start", sa.Date(), nullable=True),
        sa.Column("period_end", sa.Date(), nullable=True),
        sa.Column("status", import_status_enum, nullable=False),
        sa.Column("logs", postgresql.JSONB(), nullable=True),
        sa.ForeignKeyConstraint(["uploaded_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("import_history")
    op.drop_index("ix_audit_logs_entity", table_name="audit_logs")
    op.drop_index("ix_audit_logs_timestamp", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_table("department_positions")
    op.drop_table("permission_requests")
    op.drop_table("vacation_requests")
    op.drop_table("justifications")
    op.drop_index("ix_attendance_records_date", table_name="attendance_records")
    op.drop_table("attendance_records")
    op.drop_table("users")
    op.drop_table("employees")

    bind = op.get_bind()
    for enum in reversed(ENUMS):
        enum.drop(bind, checkfirst=True)
