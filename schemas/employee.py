from __future__ import annotations
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

EmployeeStatusLiteral = Literal["ACTIVE", "ONBOARDING", "OFFBOARDING", "EXITED"]


class EmployeeIn(BaseModel):
    first_name: str
    last_name: str
    email: Optional[str] = None
    birth_date: Optional[date] = None
    start_date: Optional[date] = None
    exit_date: Optional[date] = None
    status: EmployeeStatusLiteral = "ACTIVE"


class EmployeeUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    birth_date: Optional[date] = None
    start_date: Optional[date] = None
    exit_date: Optional[date] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class EmployeeOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    birth_date: Optional[date] = None
    start_date: Optional[date] = None
    exit_date: Optional[date] = None
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmployeeStatusIn(BaseModel):
    status: EmployeeStatusLiteral
    start_date: Optional[date] = None
    exit_date: Optional[date] = None
    overwrite: bool = False


class EmployeeStatusOut(BaseModel):
    employee: EmployeeOut
    generated: int


class EmployeeImportOut(BaseModel):
    status: str = "ok"
    created: int
    updated: int
    skipped: int
