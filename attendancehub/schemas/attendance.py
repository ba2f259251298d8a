import datetime as dt
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from attendancehub.schemas.payload import coerce_json_object, coerce_str_list

RowStatus = Literal["normal", "tardy", "absent", "early_leave"]
ConflictPolicy = Literal["overwrite", "skip", "cancel"]


class KnownEmployee(BaseModel):
    """Minimal employee view used to match report rows by document id."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    document_id: str
    name: str
    department: str | None = None


class BiometricRecord(BaseModel):
    employee_id: UUID | None
    employee_name: str
    document_id: str
    date: dt.date
    entry_time: str
    exit_time: str
    scheduled_entry: str
    scheduled_exit: str
    tardy_minutes: int = 0
    early_leave_minutes: int = 0
    overtime_minutes: int = 0
    worked_hours: float = 0.0
    status: RowStatus = "normal"

    @property
    def is_matched(self) -> bool:
        return self.employee_id is not None


class BiometricUploadResult(BaseModel):
    total_records: int
    processed_records: int
    tardies_detected: int
    total_tardy_minutes: int
    absences_detected: int
    unmatched_records: int
    estimated_deduction: float
    records: list[BiometricRecord]


class ReportPeriod(BaseModel):
    start: dt.date
    end: dt.date

    @model_validator(mode="after")
    def start_not_after_end(self) -> "ReportPeriod":
        if self.start > self.end:
            raise ValueError("period start must not be after period end")
        return self


class EmployeeSuggestion(BaseModel):
    employee_id: UUID
    name: str
    document_id: str
    score: int


class BiometricStatRecord(BaseModel):
    """Per-employee totals for one reporting period, not yet persisted."""

    employee_id: UUID | None = None
    employee_name: str
    document_id: str
    department: str = "Empresa"
    days_attended: int = 0
    absences: int = 0
    tardy_count: int = 0
    tardy_minutes: int = 0
    early_leave_count: int = 0
    early_leave_minutes: int = 0
    # minutes; converted to hours when written to attendance_records
    actual_minutes: int = 0
    overtime_weekday: int = 0
    overtime_holiday: int = 0
    suggestions: list[EmployeeSuggestion] = Field(default_factory=list)

    @property
    def is_matched(self) -> bool:
        return self.employee_id is not None


class ParsedBiometricReport(BaseModel):
    filename: str | None = None
    period: ReportPeriod
    records: list[BiometricStatRecord]

    @property
    def matched_records(self) -> list[BiometricStatRecord]:
        return [r for r in self.records if r.is_matched]

    @property
    def unmatched_records(self) -> list[BiometricStatRecord]:
        return [r for r in self.records if not r.is_matched]


class ReportCounts(BaseModel):
    total_employees: int
    matched_employees: int
    unmatched_employees: int

    @classmethod
    def of(cls, report: ParsedBiometricReport) -> "ReportCounts":
        matched = len(report.matched_records)
        return cls(
            total_employees=len(report.records),
            matched_employees=matched,
            unmatched_employees=len(report.records) - matched,
        )


class DuplicateCheckResult(BaseModel):
    has_duplicates: bool
    existing_count: int
    existing_dates: list[dt.date]


class RowOutcome(BaseModel):
    employee_id: UUID | None
    employee_name: str
    outcome: Literal["saved", "skipped", "failed"]
    detail: str | None = None


class UploadResult(BaseModel):
    success: bool = True
    records_saved: int = 0
    records_skipped: int = 0
    errors: list[str] = Field(default_factory=list)
    rows: list[RowOutcome] = Field(default_factory=list)


class ProcessRowsRequest(BaseModel):
    rows: list[list[str]]


class UploadPreviewResponse(BaseModel):
    filename: str
    parse_errors: list[str]
    summary: BiometricUploadResult
    report: ParsedBiometricReport | None
    counts: ReportCounts | None
    duplicates: DuplicateCheckResult | None


class SaveReportResponse(UploadResult):
    import_status: Literal["success", "partial", "failed"]


class AttendanceRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: UUID
    date: dt.date
    scheduled_hours: float
    worked_hours: float
    tardy_count: int
    tardy_minutes: int
    early_leave_count: int
    early_leave_minutes: int
    overtime_weekday: float
    overtime_holiday: float
    days_attended: int
    absences: int
    permissions: int
    status: Literal["pending", "validated", "rejected", "justified"]
    notes: str | None


class ImportLogs(BaseModel):
    total_employees: int = 0
    saved: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)

    @field_validator("errors", mode="before")
    @classmethod
    def _errors_as_list(cls, v: Any) -> list[str]:
        return coerce_str_list(v)


class ImportHistoryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    filename: str
    uploaded_by: UUID | None
    uploaded_at: dt.datetime
    period_start: dt.date | None
    period_end: dt.date | None
    status: Literal["success", "partial", "failed"]
    logs: ImportLogs

    @field_validator("logs", mode="before")
    @classmethod
    def _logs_as_object(cls, v: Any) -> dict:
        return coerce_json_object(v)
