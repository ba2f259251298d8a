"""
Audit trail sinks.

Services receive an ``AuditSink`` instead of writing to a shared list, so the
HTTP layer can hand them a database-backed sink while tests pass an isolated
in-memory one.
"""

import datetime as dt
import logging
import uuid
from typing import Any, Protocol

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from attendancehub.core.config import settings
from attendancehub.db.models import AuditLog, User
from attendancehub.db.session import get_db
from attendancehub.schemas.audit import AuditAction, AuditEntity, AuditFilters, AuditLogEntry

logger = logging.getLogger(__name__)


class AuditSink(Protocol):
    async def append(self, entry: AuditLogEntry) -> AuditLogEntry: ...

    async def query(self, filters: AuditFilters | None = None) -> list[AuditLogEntry]: ...


def _as_utc(value: dt.datetime) -> dt.datetime:
    return value if value.tzinfo else value.replace(tzinfo=dt.timezone.utc)


def new_entry(
    action: AuditAction,
    entity: AuditEntity,
    entity_id: str,
    user_id: str,
    user_name: str,
    details: str,
    metadata: dict[str, Any] | None = None,
) -> AuditLogEntry:
    return AuditLogEntry(
        id=f"audit-{uuid.uuid4().hex}",
        action=action,
        entity=entity,
        entity_id=str(entity_id),
        user_id=str(user_id),
        user_name=user_name,
        details=details,
        metadata=metadata or {},
        timestamp=dt.datetime.now(dt.timezone.utc),
    )


async def record_action(
    sink: AuditSink,
    actor: User,
    action: AuditAction,
    entity: AuditEntity,
    entity_id: object,
    details: str,
    metadata: dict[str, Any] | None = None,
) -> AuditLogEntry:
    """Append an entry attributed to ``actor``."""
    entry = new_entry(
        action,
        entity,
        str(entity_id),
        str(actor.id),
        actor.full_name or actor.username,
        details,
        metadata,
    )
    return await sink.append(entry)


def _log_line(entry: AuditLogEntry) -> None:
    logger.info(
        "[AUDIT] %s %s:%s by %s - %s",
        entry.action, entry.entity, entry.entity_id, entry.user_name, entry.details,
    )


class InMemoryAuditSink:
    """Bounded, newest-first audit store living in one process."""

    def __init__(self, max_entries: int | None = None) -> None:
        self.max_entries = max_entries or settings.AUDIT_LOG_MAX_ENTRIES
        self._entries: list[AuditLogEntry] = []

    async def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        self._entries.insert(0, entry)
        del self._entries[self.max_entries:]
        _log_line(entry)
        return entry

    async def query(self, filters: AuditFilters | None = None) -> list[AuditLogEntry]:
        filters = filters or AuditFilters()
        result = self._entries
        if filters.action:
            result = [e for e in result if e.action == filters.action]
        if filters.entity:
            result = [e for e in result if e.entity == filters.entity]
        if filters.user_id:
            result = [e for e in result if e.user_id == filters.user_id]
        if filters.start:
            start = _as_utc(filters.start)
            result = [e for e in result if _as_utc(e.timestamp) >= start]
        if filters.end:
            end = _as_utc(filters.end)
            result = [e for e in result if _as_utc(e.timestamp) <= end]
        return list(result[: filters.limit])

    def clear(self) -> None:
        self._entries.clear()


class SqlAuditSink:
    """Audit store backed by the ``audit_logs`` table of the current session."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        self.db.add(
            AuditLog(
                id=entry.id,
                action=entry.action,
                entity=entry.entity,
                entity_id=entry.entity_id,
                user_id=entry.user_id,
                user_name=entry.user_name,
                details=entry.details,
                extra=entry.metadata or None,
                timestamp=entry.timestamp,
            )
        )
        await self.db.flush()
        _log_line(entry)
        return entry

    async def query(self, filters: AuditFilters | None = None) -> list[AuditLogEntry]:
        filters = filters or AuditFilters()
        stmt = select(AuditLog)
        if filters.action:
            stmt = stmt.where(AuditLog.action == filters.action)
        if filters.entity:
            stmt = stmt.where(AuditLog.entity == filters.entity)
        if filters.user_id:
            stmt = stmt.where(AuditLog.user_id == filters.user_id)
        if filters.start:
            stmt = stmt.where(AuditLog.timestamp >= filters.start)
        if filters.end:
            stmt = stmt.where(AuditLog.timestamp <= filters.end)
        stmt = stmt.order_by(AuditLog.timestamp.desc()).limit(filters.limit)

        rows = (await self.db.scalars(stmt)).all()
        return [AuditLogEntry.model_validate(row) for row in rows]


async def get_audit_sink(db: AsyncSession = Depends(get_db)) -> AuditSink:
    return SqlAuditSink(db)
