import datetime as dt
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from attendancehub.schemas.payload import coerce_json_object

AuditAction = Literal[
    "CREATE", "UPDATE", "DELETE", "APPROVE", "REJECT",
    "LOGIN", "LOGOUT", "UPLOAD", "DOWNLOAD", "VIEW",
]

AuditEntity = Literal[
    "employee", "contract", "sanction", "justification", "vacation",
    "permission", "payslip", "attendance", "evaluation", "task", "user",
]


class AuditLogEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    action: AuditAction
    entity: AuditEntity
    entity_id: str
    user_id: str
    user_name: str
    details: str
    # ORM rows expose the column as ``extra``
    metadata: dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("extra", "metadata")
    )
    timestamp: dt.datetime

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_as_object(cls, v: Any) -> dict[str, Any]:
        return coerce_json_object(v)


class AuditFilters(BaseModel):
    action: AuditAction | None = None
    entity: AuditEntity | None = None
    user_id: str | None = None
    start: dt.datetime | None = None
    end: dt.datetime | None = None
    limit: int = Field(default=200, ge=1, le=1000)
