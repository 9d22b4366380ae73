from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d)$"
TYPE_KEY_PATTERN = r"^[A-Z_]+$"


class ScheduleIn(BaseModel):
    label: str = Field(min_length=1, max_length=100)
    days_before: int = Field(default=0, ge=0)
    time_of_day: Optional[str] = Field(default=None, pattern=TIME_OF_DAY_PATTERN)


class ScheduleOut(BaseModel):
    id: int
    label: str
    days_before: int
    time_of_day: Optional[str] = None

    class Config:
        from_attributes = True


class RecipientOut(BaseModel):
    id: int
    email: str

    class Config:
        from_attributes = True


class ReminderIn(BaseModel):
    employee_id: Optional[int] = None
    reminder_type_id: Optional[int] = None
    type: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    due_date: date
    active: bool = True
    schedules: list[ScheduleIn] = Field(default_factory=list)
    recipients: list[str] = Field(default_factory=list)


class ReminderUpdate(BaseModel):
    employee_id: Optional[int] = None
    reminder_type_id: Optional[int] = None
    type: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    due_date: Optional[date] = None
    active: Optional[bool] = None
    schedules: Optional[list[ScheduleIn]] = None
    recipients: Optional[list[str]] = None

    @field_validator("type", "due_date", "active")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class ReminderOut(BaseModel):
    id: int
    employee_id: Optional[int] = None
    reminder_type_id: Optional[int] = None
    type: str
    description: Optional[str] = None
    due_date: date
    active: bool
    created_at: Optional[datetime] = None
    schedules: list[ScheduleOut] = []
    recipients: list[RecipientOut] = []

    class Config:
        from_attributes = True


class DispatchOut(BaseModel):
    ok: bool = True
    sent: int
    already_sent: int = 0
    not_configured: int = 0
    errors: list[str] = []


class ManualSendIn(BaseModel):
    reminder_id: int


class ManualSendOut(BaseModel):
    ok: bool = True
    sent: int
    recipients: list[str]
    not_configured: int = 0
    errors: Optional[list[str]] = None


class ReminderTypeIn(BaseModel):
    key: str = Field(min_length=1, max_length=50, pattern=TYPE_KEY_PATTERN)
    label: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = None
    order_index: Optional[int] = None
    active: bool = True


class ReminderTypeUpdate(BaseModel):
    key: Optional[str] = Field(default=None, min_length=1, max_length=50, pattern=TYPE_KEY_PATTERN)
    label: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = None
    order_index: Optional[int] = None
    active: Optional[bool] = None

    @field_validator("key", "label", "order_index", "active")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class ReminderTypeOut(BaseModel):
    id: int
    key: str
    label: str
    description: Optional[str] = None
    color: Optional[str] = None
    order_index: int
    active: bool

    class Config:
        from_attributes = True
