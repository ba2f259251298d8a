"""
Persistence of a parsed biometric report under an operator-chosen policy.

Each matched employee's period collapses into a single attendance row dated
at ``period.end``. Employees are written one at a time inside their own
savepoint: a failing employee is recorded in ``errors`` and the rest of the
report still lands, so callers must read both ``success`` and ``rows``.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from attendancehub.db.attendance_repo import AttendanceRepository
from attendancehub.schemas.attendance import (
    BiometricStatRecord,
    ConflictPolicy,
    DuplicateCheckResult,
    ParsedBiometricReport,
    ReportPeriod,
    RowOutcome,
    UploadResult,
)

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Operación cancelada"
NO_MATCHES_MESSAGE = "No hay empleados coincidentes para guardar"


def summary_row(record: BiometricStatRecord, period: ReportPeriod) -> dict[str, Any]:
    """Column values of the single row that stands for the whole period."""
    return {
        "employee_id": record.employee_id,
        "date": period.end,
        "worked_hours": record.actual_minutes / 60,
        "tardy_minutes": record.tardy_minutes,
        "tardy_count": record.tardy_count,
        "early_leave_minutes": record.early_leave_minutes,
        "early_leave_count": record.early_leave_count,
        "absences": record.absences,
        "days_attended": record.days_attended,
        "overtime_weekday": record.overtime_weekday / 60,
        "overtime_holiday": record.overtime_holiday / 60,
        "status": "pending",
        "notes": f"Reporte período {period.start.isoformat()} al {period.end.isoformat()}",
    }


async def check_for_duplicates(
    report: ParsedBiometricReport,
    repo: AttendanceRepository,
) -> DuplicateCheckResult:
    employee_ids = [r.employee_id for r in report.matched_records]
    existing = await repo.list_in_range(employee_ids, report.period.start, report.period.end)
    return DuplicateCheckResult(
        has_duplicates=bool(existing),
        existing_count=len(existing),
        existing_dates=sorted({row.date for row in existing}),
    )


async def _persist_one(
    record: BiometricStatRecord,
    report: ParsedBiometricReport,
    policy: ConflictPolicy,
    repo: AttendanceRepository,
) -> str:
    period = report.period
    data = summary_row(record, period)

    if policy == "overwrite":
        removed = await repo.delete_range(record.employee_id, period.start, period.end)
        if removed:
            logger.debug(
                "Sobrescritura: %d registros previos eliminados para '%s'",
                removed, record.employee_name,
            )

    existing = await repo.find_at(record.employee_id, period.end)
    if existing is not None and policy == "skip":
        return "skipped"

    if existing is not None:
        await repo.update(existing, data)
    else:
        await repo.insert(data)
    return "saved"


async def save_attendance_records(
    report: ParsedBiometricReport,
    policy: ConflictPolicy,
    repo: AttendanceRepository,
) -> UploadResult:
    """
    Write the matched rows of ``report`` according to ``policy``.

    - ``cancel``: nothing is written; the result is unsuccessful.
    - ``overwrite``: the employee's rows inside the period are removed first.
    - ``skip``: an existing row at ``period.end`` is kept untouched.
    Unmatched rows are never written.
    """
    if policy == "cancel":
        logger.info("Carga cancelada por el operador (%s)", report.filename or "sin nombre")
        return UploadResult(success=False, errors=[CANCELLED_MESSAGE])

    result = UploadResult()
    matched = report.matched_records
    if not matched:
        result.success = False
        result.errors.append(NO_MATCHES_MESSAGE)
        return result

    for record in matched:
        try:
            async with repo.savepoint():
                outcome = await _persist_one(record, report, policy, repo)
        except SQLAlchemyError as exc:
            logger.exception("Error guardando registro de '%s'", record.employee_name)
            detail = str(exc.orig) if getattr(exc, "orig", None) is not None else str(exc)
            result.errors.append(f"Error guardando {record.employee_name}: {detail}")
            result.rows.append(
                RowOutcome(
                    employee_id=record.employee_id,
                    employee_name=record.employee_name,
                    outcome="failed",
                    detail=detail,
                )
            )
            continue

        if outcome == "skipped":
            result.records_skipped += 1
        else:
            result.records_saved += 1
        result.rows.append(
            RowOutcome(
                employee_id=record.employee_id,
                employee_name=record.employee_name,
                outcome=outcome,
            )
        )

    if result.errors:
        result.success = False

    logger.info(
        "Guardado de asistencia [%s] política=%s: guardados=%d, omitidos=%d, errores=%d",
        report.filename or "sin nombre", policy,
        result.records_saved, result.records_skipped, len(result.errors),
    )
    return result
