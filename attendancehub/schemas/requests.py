import datetime as dt
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from attendancehub.services import time_calc

JustificationType = Literal[
    "tardanza", "inasistencia", "salida_temprana", "permiso_medico", "emergencia_familiar",
]
PermissionType = Literal["personal", "medical", "academic", "family", "other"]


class JustificationCreate(BaseModel):
    employee_id: UUID
    date: dt.date
    type: JustificationType
    description: str = Field(..., min_length=1)
    evidence_url: str | None = None


class VacationCreate(BaseModel):
    employee_id: UUID
    start_date: dt.date
    end_date: dt.date
    days: int | None = Field(default=None, ge=1)
    reason: str | None = None

    @model_validator(mode="after")
    def _check_range(self) -> "VacationCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.days is None:
            self.days = (self.end_date - self.start_date).days + 1
        return self


class PermissionCreate(BaseModel):
    employee_id: UUID
    date: dt.date
    type: PermissionType
    start_time: str | None = None
    end_time: str | None = None
    reason: str | None = None
    evidence_url: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _clock_time(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return time_calc.normalize_time(v)


class ApprovalState(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    employee_id: UUID
    status: Literal["pending", "approved", "rejected", "cancelled"]
    approval_flow: Literal["pending", "manager_approved", "completed", "rejected"]
    manager_approved: bool
    manager_approved_by: UUID | None
    manager_approved_at: dt.datetime | None
    hr_approved: bool
    hr_approved_by: UUID | None
    hr_approved_at: dt.datetime | None
    rejected_by: UUID | None
    rejected_at: dt.datetime | None
    rejection_reason: str | None
    created_at: dt.datetime


class JustificationResponse(ApprovalState):
    employee_name: str
    date: dt.date
    type: JustificationType
    description: str
    evidence_url: str | None
    dcts_validated: bool
    dcts_validated_by: UUID | None
    dcts_validated_at: dt.datetime | None


class VacationResponse(ApprovalState):
    start_date: dt.date
    end_date: dt.date
    days: int
    reason: str | None


class PermissionResponse(ApprovalState):
    date: dt.date
    type: str
    start_time: str | None
    end_time: str | None
    reason: str | None
    evidence_url: str | None


class RejectRequest(BaseModel):
    reason: str | None = None
