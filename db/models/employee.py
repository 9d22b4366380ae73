from datetime import date, datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Integer, Date, DateTime

from core.clock import local_now
from db.base import Base

STATUS_ACTIVE = "ACTIVE"
STATUS_ONBOARDING = "ONBOARDING"
STATUS_OFFBOARDING = "OFFBOARDING"
STATUS_EXITED = "EXITED"

EMPLOYEE_STATUSES = (STATUS_ACTIVE, STATUS_ONBOARDING, STATUS_OFFBOARDING, STATUS_EXITED)


class Employee(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    first_name: Mapped[str] = mapped_column(String(100))
    last_name: Mapped[str] = mapped_column(String(100), index=True)
    email: Mapped[str | None] = mapped_column(String(200), nullable=True, index=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    exit_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=STATUS_ACTIVE, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=local_now, index=True)

    reminders: Mapped[list["Reminder"]] = relationship("Reminder", back_populates="employee")
    tasks: Mapped[list["TaskAssignment"]] = relationship(
        "TaskAssignment", back_populates="employee", cascade="all, delete-orphan"
    )

    @property
    def full_name(self) -> str:
        return f"{self.last_name}, {self.first_name}"
