"""
Classification of biometric (time-clock) report rows.

Input is a matrix of string cells in the device's column order::

    [document_id, name, date, entry_time, exit_time]

Each row is matched to a known employee by exact document id, classified as
normal / tardy / early_leave / absent, and the matched rows are aggregated.
Unmatched rows stay in the output (``employee_id=None``) so the operator can
register those employees, but they never feed the totals.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterable, Sequence

from attendancehub.core.config import settings
from attendancehub.schemas.attendance import (
    BiometricRecord,
    BiometricUploadResult,
    KnownEmployee,
    RowStatus,
)
from attendancehub.services import time_calc

logger = logging.getLogger(__name__)

HEADER_MARKER = "nombre"


def _cell(row: Sequence[str], idx: int) -> str:
    if idx >= len(row) or row[idx] is None:
        return ""
    return str(row[idx]).strip()


def _is_header(raw_rows: Sequence[Sequence[str]]) -> bool:
    return bool(raw_rows) and HEADER_MARKER in _cell(raw_rows[0], 0).lower()


def _parse_row_date(value: str) -> dt.date:
    # "YYYY-MM-DD", tolerating a trailing time part
    return dt.date.fromisoformat(value[:10])


def classify_row(
    entry_time: str,
    exit_time: str,
    scheduled_entry: str,
    scheduled_exit: str,
    tolerance_minutes: int,
    lunch_break_minutes: int,
) -> tuple[RowStatus, int, int, int, float]:
    """Return (status, tardy, early_leave, overtime, worked_hours) for one day.

    Absence wins over everything else; tardiness wins over early leave.
    Without an exit punch only tardiness is evaluated.
    """
    if time_calc.is_blank_time(entry_time):
        return "absent", 0, 0, 0, 0.0

    tardy = time_calc.tardiness(entry_time, scheduled_entry, tolerance_minutes)
    status: RowStatus = "tardy" if tardy > 0 else "normal"
    early = overtime = 0
    hours = 0.0

    if not time_calc.is_blank_time(exit_time):
        early = time_calc.early_leave(exit_time, scheduled_exit)
        overtime = time_calc.overtime_minutes(exit_time, scheduled_exit)
        hours = time_calc.worked_hours(entry_time, exit_time, lunch_break_minutes)
        if early > 0 and status == "normal":
            status = "early_leave"

    return status, tardy, early, overtime, hours


def process_biometric_data(
    raw_rows: Sequence[Sequence[str]],
    employees: Iterable[KnownEmployee],
    *,
    scheduled_entry: str | None = None,
    scheduled_exit: str | None = None,
    tolerance_minutes: int | None = None,
    lunch_break_minutes: int | None = None,
    average_salary: float | None = None,
) -> BiometricUploadResult:
    """
    Classify every row of a biometric report and summarise the matched ones.

    Args:
        raw_rows: Matrix of string cells; an optional header row is detected
            when its first cell contains "nombre".
        employees: Known employees, matched by exact ``document_id``.
        scheduled_entry / scheduled_exit / tolerance_minutes /
        lunch_break_minutes: Schedule overrides; default to settings.
        average_salary: Salary used for the *estimated* tardy deduction.

    Returns:
        BiometricUploadResult with every kept row, matched or not.
    """
    scheduled_entry = scheduled_entry or settings.SCHEDULED_ENTRY_TIME
    scheduled_exit = scheduled_exit or settings.SCHEDULED_EXIT_TIME
    if tolerance_minutes is None:
        tolerance_minutes = settings.TARDY_TOLERANCE_MINUTES
    if lunch_break_minutes is None:
        lunch_break_minutes = settings.LUNCH_BREAK_MINUTES
    if average_salary is None:
        average_salary = settings.ESTIMATED_AVERAGE_SALARY

    by_document = {emp.document_id: emp for emp in employees}

    has_header = _is_header(raw_rows)
    data_rows = raw_rows[1:] if has_header else raw_rows

    records: list[BiometricRecord] = []
    total_tardy_minutes = 0
    tardies_detected = 0
    absences_detected = 0
    skipped_invalid = 0

    for i, row in enumerate(data_rows, start=2 if has_header else 1):
        document_id = _cell(row, 0)
        raw_date = _cell(row, 2)
        if not document_id or not raw_date:
            continue

        name = _cell(row, 1)
        entry_time = _cell(row, 3)
        exit_time = _cell(row, 4)

        try:
            row_date = _parse_row_date(raw_date)
            status, tardy, early, overtime, hours = classify_row(
                entry_time,
                exit_time,
                scheduled_entry,
                scheduled_exit,
                tolerance_minutes,
                lunch_break_minutes,
            )
            entry_display = "-" if time_calc.is_blank_time(entry_time) else time_calc.normalize_time(entry_time)
            exit_display = "-" if time_calc.is_blank_time(exit_time) else time_calc.normalize_time(exit_time)
        except ValueError as exc:
            skipped_invalid += 1
            logger.warning("Fila %d omitida (DNI='%s'): %s", i, document_id, exc)
            continue

        employee = by_document.get(document_id)
        if employee is not None:
            if status == "absent":
                absences_detected += 1
            elif tardy > 0:
                tardies_detected += 1
                total_tardy_minutes += tardy

        records.append(
            BiometricRecord(
                employee_id=employee.id if employee else None,
                employee_name=employee.name if employee else name,
                document_id=document_id,
                date=row_date,
                entry_time=entry_display,
                exit_time=exit_display,
                scheduled_entry=scheduled_entry,
                scheduled_exit=scheduled_exit,
                tardy_minutes=tardy,
                early_leave_minutes=early,
                overtime_minutes=overtime,
                worked_hours=hours,
                status=status,
            )
        )

    unmatched = sum(1 for r in records if not r.is_matched)
    estimated_deduction = time_calc.tardy_deduction(total_tardy_minutes, average_salary)

    logger.info(
        "Reporte biométrico procesado: filas=%d, procesadas=%d, sin_coincidencia=%d, "
        "tardanzas=%d (%d min), faltas=%d, inválidas=%d",
        len(data_rows), len(records), unmatched,
        tardies_detected, total_tardy_minutes, absences_detected, skipped_invalid,
    )

    return BiometricUploadResult(
        total_records=len(data_rows),
        processed_records=len(records),
        tardies_detected=tardies_detected,
        total_tardy_minutes=total_tardy_minutes,
        absences_detected=absences_detected,
        unmatched_records=unmatched,
        estimated_deduction=estimated_deduction,
        records=records,
    )
