import datetime as dt
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from attendancehub.schemas.payload import coerce_str_list

EmployeeStatus = Literal["active", "inactive", "on_leave", "terminated"]
ContractType = Literal["indefinido", "plazo_fijo", "por_obra", "honorarios", "practica"]


class EmployeeCreate(BaseModel):
    document_id: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1)
    department: str = "Empresa"
    position: str | None = None
    email: str | None = None
    phone: str | None = None
    hire_date: dt.date | None = None
    contract_type: ContractType | None = None
    contract_end_date: dt.date | None = None

    @field_validator("document_id", "name")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class EmployeeUpdate(BaseModel):
    name: str | None = None
    department: str | None = None
    position: str | None = None
    email: str | None = None
    phone: str | None = None
    hire_date: dt.date | None = None
    contract_type: ContractType | None = None
    contract_end_date: dt.date | None = None


class EmployeeStatusUpdate(BaseModel):
    status: EmployeeStatus


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    document_id: str
    name: str
    department: str
    position: str | None
    email: str | None
    phone: str | None
    hire_date: dt.date | None
    contract_type: str | None
    contract_end_date: dt.date | None
    status: EmployeeStatus
    created_at: dt.datetime


class UnmatchedEmployeeIn(BaseModel):
    """A report row the operator chose to register as a new employee."""

    document_id: str = Field(..., min_length=1)
    employee_name: str = Field(..., min_length=1)
    department: str = "Empresa"
    position: str | None = None


class UnmatchedEmployeesResult(BaseModel):
    added: int
    errors: list[str] = Field(default_factory=list)
    employees: list[EmployeeResponse] = Field(default_factory=list)


class PositionCreate(BaseModel):
    department: str
    position_name: str = Field(..., min_length=1)
    description: str | None = None
    responsibilities: list[str] = Field(default_factory=list)
    max_positions: int = Field(default=1, ge=1)
    is_leadership: bool = False
    reports_to: str | None = None

    @field_validator("responsibilities", mode="before")
    @classmethod
    def _responsibilities(cls, v: Any) -> list[str]:
        return coerce_str_list(v)


class PositionResponse(PositionCreate):
    model_config = ConfigDict(from_attributes=True)

    id: UUID


class OrgChartEmployee(BaseModel):
    id: UUID
    name: str
    document_id: str


class OrgChartNode(BaseModel):
    position_name: str
    description: str | None = None
    responsibilities: list[str] = Field(default_factory=list)
    max_positions: int = 1
    is_leadership: bool = False
    employees: list[OrgChartEmployee] = Field(default_factory=list)
    children: list["OrgChartNode"] = Field(default_factory=list)

    @computed_field
    @property
    def vacancies(self) -> int:
        return max(0, self.max_positions - len(self.employees))


class DepartmentChart(BaseModel):
    department: str
    roots: list[OrgChartNode] = Field(default_factory=list)
    unassigned: list[OrgChartEmployee] = Field(default_factory=list)
