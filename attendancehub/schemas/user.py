from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

UserRole = Literal["admin", "manager", "employee"]


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6)
    role: UserRole = "employee"
    full_name: str | None = None
    email: str | None = None
    employee_id: UUID | None = None


class UserUpdate(BaseModel):
    role: UserRole | None = None
    is_active: bool | None = None
    full_name: str | None = None
    email: str | None = None
    employee_id: UUID | None = None
    password: str | None = Field(default=None, min_length=6)


class UserResponse(BaseModel):
    id: UUID
    username: str
    role: UserRole
    full_name: str | None
    email: str | None
    employee_id: UUID | None
    is_active: bool

    model_config = {"from_attributes": True}
