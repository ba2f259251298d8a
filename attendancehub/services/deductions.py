"""Flat-rate deductions for a period report (preview figures, not payroll)."""

from __future__ import annotations

from attendancehub.schemas.attendance import ParsedBiometricReport
from attendancehub.schemas.deductions import (
    DeductionSettings,
    DeductionSummary,
    EmployeeDeduction,
)


def calculate_deductions(
    report: ParsedBiometricReport,
    config: DeductionSettings | None = None,
) -> DeductionSummary:
    config = config or DeductionSettings()
    deductions: list[EmployeeDeduction] = []

    for record in report.records:
        effective_tardy = max(0, record.tardy_minutes - record.tardy_count * config.tolerance_minutes)
        tardy = effective_tardy * config.tardy_minute_rate
        absence = record.absences * config.absence_day_rate
        early = record.early_leave_minutes * config.early_leave_minute_rate
        deductions.append(
            EmployeeDeduction(
                employee_id=record.employee_id,
                employee_name=record.employee_name,
                document_id=record.document_id,
                tardy_minutes=effective_tardy,
                tardy_deduction=tardy,
                absences=record.absences,
                absence_deduction=absence,
                early_leave_minutes=record.early_leave_minutes,
                early_leave_deduction=early,
                total_deduction=tardy + absence + early,
            )
        )

    deductions.sort(key=lambda d: d.total_deduction, reverse=True)

    total_tardy = sum(d.tardy_deduction for d in deductions)
    total_absence = sum(d.absence_deduction for d in deductions)
    total_early = sum(d.early_leave_deduction for d in deductions)
    return DeductionSummary(
        total_employees=len(report.records),
        employees_with_deductions=sum(1 for d in deductions if d.total_deduction > 0),
        total_tardy_minutes=sum(d.tardy_minutes for d in deductions),
        total_tardy_deduction=total_tardy,
        total_absences=sum(d.absences for d in deductions),
        total_absence_deduction=total_absence,
        total_early_leave_minutes=sum(d.early_leave_minutes for d in deductions),
        total_early_leave_deduction=total_early,
        grand_total_deduction=total_tardy + total_absence + total_early,
        deductions=deductions,
    )
