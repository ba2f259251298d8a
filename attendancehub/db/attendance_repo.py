"""Row-level access to ``attendance_records`` keyed by (employee_id, date)."""

import datetime as dt
import uuid
from collections.abc import Sequence
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from attendancehub.db.models import AttendanceRecord


class AttendanceRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        """Scope one employee's writes; a failure rolls back only this scope."""
        async with self.db.begin_nested():
            yield

    async def find_at(self, employee_id: uuid.UUID, day: dt.date) -> AttendanceRecord | None:
        return await self.db.scalar(
            select(AttendanceRecord).where(
                AttendanceRecord.employee_id == employee_id,
                AttendanceRecord.date == day,
            )
        )

    async def list_in_range(
        self,
        employee_ids: Sequence[uuid.UUID],
        start: dt.date,
        end: dt.date,
    ) -> list[AttendanceRecord]:
        if not employee_ids:
            return []
        result = await self.db.scalars(
            select(AttendanceRecord)
            .where(
                AttendanceRecord.employee_id.in_(employee_ids),
                AttendanceRecord.date.between(start, end),
            )
            .order_by(AttendanceRecord.date)
        )
        return list(result.all())

    async def delete_range(self, employee_id: uuid.UUID, start: dt.date, end: dt.date) -> int:
        result = await self.db.execute(
            delete(AttendanceRecord).where(
                AttendanceRecord.employee_id == employee_id,
                AttendanceRecord.date.between(start, end),
            )
        )
        return result.rowcount or 0

    async def insert(self, data: dict[str, Any]) -> AttendanceRecord:
        record = AttendanceRecord(**data)
        self.db.add(record)
        await self.db.flush()
        return record

    async def update(self, record: AttendanceRecord, data: dict[str, Any]) -> AttendanceRecord:
        for key, value in data.items():
            setattr(record, key, value)
        await self.db.flush()
        return record
