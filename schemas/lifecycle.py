from __future__ import annotations
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

TaskTypeLiteral = Literal["ONBOARDING", "OFFBOARDING"]


class RoleIn(BaseModel):
    key: str = Field(min_length=1, max_length=100)
    label: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    type: Optional[TaskTypeLiteral] = None
    order_index: int = Field(default=0, ge=0)
    active: bool = True


class RoleUpdate(BaseModel):
    key: Optional[str] = Field(default=None, min_length=1, max_length=100)
    label: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    type: Optional[TaskTypeLiteral] = None
    order_index: Optional[int] = Field(default=None, ge=0)
    active: Optional[bool] = None

    @field_validator("key", "label", "order_index", "active")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class RoleOut(BaseModel):
    id: int
    key: str
    label: str
    description: Optional[str] = None
    type: Optional[str] = None
    order_index: int
    active: bool

    class Config:
        from_attributes = True


class StatusIn(RoleIn):
    is_done: bool = False
    is_default: bool = False


class StatusUpdate(RoleUpdate):
    is_done: Optional[bool] = None
    is_default: Optional[bool] = None

    @field_validator("is_done", "is_default")
    @classmethod
    def _flags_not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class StatusOut(RoleOut):
    is_done: bool
    is_default: bool


class TemplateIn(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    type: TaskTypeLiteral
    owner_role_id: Optional[int] = None
    relative_due_days: int = 0
    active: bool = True


class TemplateUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    type: Optional[TaskTypeLiteral] = None
    owner_role_id: Optional[int] = None
    relative_due_days: Optional[int] = None
    active: Optional[bool] = None

    @field_validator("title", "type", "relative_due_days", "active")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class TemplateOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    type: str
    owner_role_id: Optional[int] = None
    relative_due_days: int
    active: bool

    class Config:
        from_attributes = True


class GenerateIn(BaseModel):
    employee_id: int
    type: TaskTypeLiteral
    overwrite: bool = False
    template_id: Optional[int] = None


class GenerateOut(BaseModel):
    generated: int


class TaskEmployeeOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: Optional[str] = None

    class Config:
        from_attributes = True


class TaskTemplateRef(BaseModel):
    id: int
    title: str
    type: str

    class Config:
        from_attributes = True


class TaskRoleRef(BaseModel):
    id: int
    key: str
    label: str

    class Config:
        from_attributes = True


class TaskStatusRef(BaseModel):
    id: int
    key: str
    label: str
    is_done: bool

    class Config:
        from_attributes = True


class TaskOut(BaseModel):
    id: int
    type: str
    due_date: Optional[date] = None
    notes: Optional[str] = None
    employee: Optional[TaskEmployeeOut] = None
    template: Optional[TaskTemplateRef] = None
    owner_role: Optional[TaskRoleRef] = None
    status: Optional[TaskStatusRef] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    is_overdue: bool = False
    is_due_today: bool = False
    days_until_due: Optional[int] = None
    overdue_days: Optional[int] = None

    class Config:
        from_attributes = True


class TaskPatch(BaseModel):
    status_id: Optional[int] = None
    notes: Optional[str] = Field(default=None, max_length=2000)
    due_date: Optional[date] = None
