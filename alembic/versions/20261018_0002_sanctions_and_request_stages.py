"""sanctions, rejection reason on requests, DCTS validation on justifications

Revision ID: 0002_sanctions
Revises: 0001_initial
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "0002_sanctions"
down_revision: Union[str, None] = "0001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

sanction_type = postgresql.ENUM(
    "verbal", "written", "suspension", "termination", name="sanction_type", create_type=False
)
infraction_level = postgresql.ENUM(
    "leve", "grave", "muy_grave", name="infraction_level", create_type=False
)
sanction_status = postgresql.ENUM(
    "pending", "approved", "revoked", name="sanction_status", create_type=False
)

REQUEST_TABLES = ("justifications", "vacation_requests", "permission_requests")


def upgrade() -> None:
    bind = op.get_bind()
    for enum in (sanction_type, infraction_level, sanction_status):
        enum.create(bind, checkfirst=True)

    for table in REQUEST_TABLES:
        op.add_column(table, sa.Column("rejection_reason", sa.Text(), nullable=True))

    op.add_column(
        "justifications",
        sa.Column("dcts_validated", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.add_column(
        "justifications",
        sa.Column("dcts_validated_by", postgresql.UUID(as_uuid=True), nullable=True),
    )
    op.add_column(
        "justifications",
        sa.Column("dcts_validated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "sanctions",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("employee_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("type", sanction_type, nullable=False),
        sa.Column("infraction_level", infraction_level, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("days_of_suspension", sa.Integer(), nullable=True),
        sa.Column("regulation_article", sa.String(100), nullable=True),
        sa.Column("evidence_url", sa.String(500), nullable=True),
        sa.Column("status", sanction_status, nullable=False, server_default="pending"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("applied_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("resolved_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sanctions_employee_id", "sanctions", ["employee_id"])


def downgrade() -> None:
    op.drop_index("ix_sanctions_employee_id", table_name="sanctions")
    op.drop_table("sanctions")

    op.drop_column("justifications", "dcts_validated_at")
    op.drop_column("justifications", "dcts_validated_by")
    op.drop_column("justifications", "dcts_validated")
    for table in REQUEST_TABLES:
        op.drop_column(table, "rejection_reason")

    bind = op.get_bind()
    for enum in (sanction_status, infraction_level, sanction_type):
        enum.drop(bind, checkfirst=True)
