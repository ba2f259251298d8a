"""
Period report aggregation and deduction summary.

Tests:
  - rows grouped per document id, period = min..max date
  - absences / tardies / early leaves / worked minutes / overtime accumulated
  - empty result → None
  - deductions: tolerance per tardy event, rates, ordering, grand totals
"""

import datetime as dt
import uuid

import pytest

from attendancehub.schemas.attendance import (
    BiometricStatRecord,
    KnownEmployee,
    ParsedBiometricReport,
    ReportPeriod,
)
from attendancehub.schemas.deductions import DeductionSettings
from attendancehub.services.biometric_processor import process_biometric_data
from attendancehub.services.deductions import calculate_deductions
from attendancehub.services.period_report import build_period_report

ANA = KnownEmployee(id=uuid.uuid4(), document_id="12345678", name="Ana Torres Vega", department="Operaciones")

ROWS = [
    ["12345678", "Ana", "2026-01-14", "09:20", "18:00"],
    ["12345678", "Ana", "2026-01-12", "09:00", "19:30"],
    ["12345678", "Ana", "2026-01-13", "-", "-"],
    ["12345678", "Ana", "2026-01-15", "09:00", "17:40"],
    ["99999999", "Nuevo Ingreso", "2026-01-16", "09:00", "18:00"],
]


def _report() -> ParsedBiometricReport:
    result = process_biometric_data(ROWS, [ANA], scheduled_entry="09:00", scheduled_exit="18:00")
    report = build_period_report(result, [ANA], "enero.xlsx")
    assert report is not None
    return report


class TestBuildPeriodReport:
    def test_period_spans_all_rows(self) -> None:
        report = _report()
        assert report.filename == "enero.xlsx"
        assert report.period == ReportPeriod(start=dt.date(2026, 1, 12), end=dt.date(2026, 1, 16))

    def test_totals_per_employee(self) -> None:
        report = _report()
        ana = next(r for r in report.records if r.document_id == "12345678")
        assert ana.employee_id == ANA.id
        assert ana.department == "Operaciones"
        assert ana.days_attended == 3
        assert ana.absences == 1
        assert (ana.tardy_count, ana.tardy_minutes) == (1, 20)
        assert (ana.early_leave_count, ana.early_leave_minutes) == (1, 20)
        # 7h40 + 9h30 + 7h40 worked after lunch
        assert ana.actual_minutes == 460 + 570 + 460
        assert ana.overtime_weekday == 90
        assert ana.overtime_holiday == 0

    def test_unmatched_employee_gets_default_department(self) -> None:
        report = _report()
        assert len(report.matched_records) == 1
        [stranger] = report.unmatched_records
        assert stranger.employee_id is None
        assert stranger.employee_name == "Nuevo Ingreso"
        assert stranger.department == "Empresa"

    def test_empty_result(self) -> None:
        result = process_biometric_data([], [ANA])
        assert build_period_report(result) is None


def _stat(name: str, **counts) -> BiometricStatRecord:
    return BiometricStatRecord(employee_id=uuid.uuid4(), employee_name=name, document_id=name, **counts)


class TestDeductions:
    def test_tolerance_rates_and_ordering(self) -> None:
        report = ParsedBiometricReport(
            period=ReportPeriod(start=dt.date(2026, 1, 1), end=dt.date(2026, 1, 31)),
            records=[
                _stat("puntual"),
                _stat("tarde", tardy_count=2, tardy_minutes=50, early_leave_minutes=10),
                _stat("ausente", absences=2),
            ],
        )
        config = DeductionSettings(
            tardy_minute_rate=0.5, absence_day_rate=100, early_leave_minute_rate=0.5, tolerance_minutes=10,
        )
        summary = calculate_deductions(report, config)

        assert [d.employee_name for d in summary.deductions] == ["ausente", "tarde", "puntual"]
        tarde = summary.deductions[1]
        # 50 minutes minus 10 forgiven per event
        assert tarde.tardy_minutes == 30
        assert tarde.tardy_deduction == pytest.approx(15.0)
        assert tarde.early_leave_deduction == pytest.approx(5.0)
        assert tarde.total_deduction == pytest.approx(20.0)

        assert summary.total_employees == 3
        assert summary.employees_with_deductions == 2
        assert summary.total_absence_deduction == pytest.approx(200.0)
        assert summary.grand_total_deduction == pytest.approx(220.0)

    def test_tardiness_within_tolerance_costs_nothing(self) -> None:
        report = ParsedBiometricReport(
            period=ReportPeriod(start=dt.date(2026, 1, 1), end=dt.date(2026, 1, 1)),
            records=[_stat("casi", tardy_count=1, tardy_minutes=7)],
        )
        summary = calculate_deductions(report)
        assert summary.deductions[0].tardy_minutes == 0
        assert summary.grand_total_deduction == 0
