import datetime as dt
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

SanctionType = Literal["verbal", "written", "suspension", "termination"]
InfractionLevel = Literal["leve", "grave", "muy_grave"]
SanctionStatus = Literal["pending", "approved", "revoked"]


class SanctionCreate(BaseModel):
    employee_id: UUID
    type: SanctionType
    infraction_level: InfractionLevel
    date: dt.date
    description: str = Field(..., min_length=1)
    days_of_suspension: int | None = Field(default=None, ge=1)
    regulation_article: str | None = None
    evidence_url: str | None = None

    @model_validator(mode="after")
    def _suspension_days(self) -> "SanctionCreate":
        if self.type == "suspension" and self.days_of_suspension is None:
            raise ValueError("days_of_suspension is required for a suspension")
        if self.type != "suspension":
            self.days_of_suspension = None
        return self


class SanctionDecision(BaseModel):
    notes: str | None = None


class SanctionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    employee_id: UUID
    type: SanctionType
    infraction_level: InfractionLevel
    date: dt.date
    description: str
    days_of_suspension: int | None
    regulation_article: str | None
    evidence_url: str | None
    status: SanctionStatus
    notes: str | None
    applied_by: UUID | None
    resolved_by: UUID | None
    resolved_at: dt.datetime | None
    created_at: dt.datetime
