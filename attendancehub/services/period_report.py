"""Roll classified daily rows up into one stat record per employee."""

from __future__ import annotations

import logging

from attendancehub.schemas.attendance import (
    BiometricRecord,
    BiometricStatRecord,
    BiometricUploadResult,
    KnownEmployee,
    ParsedBiometricReport,
    ReportPeriod,
)

logger = logging.getLogger(__name__)


def _accumulate(stat: BiometricStatRecord, row: BiometricRecord) -> None:
    if row.status == "absent":
        stat.absences += 1
        return

    stat.days_attended += 1
    stat.actual_minutes += round(row.worked_hours * 60)
    stat.overtime_weekday += row.overtime_minutes
    if row.tardy_minutes > 0:
        stat.tardy_count += 1
        stat.tardy_minutes += row.tardy_minutes
    if row.early_leave_minutes > 0:
        stat.early_leave_count += 1
        stat.early_leave_minutes += row.early_leave_minutes


def build_period_report(
    result: BiometricUploadResult,
    employees: list[KnownEmployee] | None = None,
    filename: str | None = None,
) -> ParsedBiometricReport | None:
    """
    Group a processed report by document id over its date range.

    The period spans the earliest to the latest row date. Holiday overtime is
    never derived from the device rows and stays 0. Returns None when the
    report has no usable rows.
    """
    if not result.records:
        return None

    departments = {e.document_id: e.department for e in employees or [] if e.department}
    stats: dict[str, BiometricStatRecord] = {}

    for row in result.records:
        stat = stats.get(row.document_id)
        if stat is None:
            stat = BiometricStatRecord(
                employee_id=row.employee_id,
                employee_name=row.employee_name,
                document_id=row.document_id,
                department=departments.get(row.document_id, "Empresa"),
            )
            stats[row.document_id] = stat
        _accumulate(stat, row)

    dates = [r.date for r in result.records]
    report = ParsedBiometricReport(
        filename=filename,
        period=ReportPeriod(start=min(dates), end=max(dates)),
        records=list(stats.values()),
    )
    logger.info(
        "Reporte de período %s..%s: empleados=%d, sin coincidencia=%d",
        report.period.start, report.period.end,
        len(report.records), len(report.unmatched_records),
    )
    return report
