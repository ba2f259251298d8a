from uuid import UUID

from pydantic import BaseModel

from attendancehub.core.config import settings
from attendancehub.schemas.attendance import ParsedBiometricReport


class DeductionSettings(BaseModel):
    tardy_minute_rate: float = settings.DEDUCTION_TARDY_MINUTE_RATE
    absence_day_rate: float = settings.DEDUCTION_ABSENCE_DAY_RATE
    early_leave_minute_rate: float = settings.DEDUCTION_EARLY_LEAVE_MINUTE_RATE
    # forgiven minutes per tardy event
    tolerance_minutes: int = settings.DEDUCTION_TOLERANCE_MINUTES


class EmployeeDeduction(BaseModel):
    employee_id: UUID | None
    employee_name: str
    document_id: str
    tardy_minutes: int
    tardy_deduction: float
    absences: int
    absence_deduction: float
    early_leave_minutes: int
    early_leave_deduction: float
    total_deduction: float


class DeductionSummary(BaseModel):
    total_employees: int
    employees_with_deductions: int
    total_tardy_minutes: int
    total_tardy_deduction: float
    total_absences: int
    total_absence_deduction: float
    total_early_leave_minutes: int
    total_early_leave_deduction: float
    grand_total_deduction: float
    deductions: list[EmployeeDeduction]


class DeductionRequest(BaseModel):
    report: ParsedBiometricReport
    config: DeductionSettings | None = None
