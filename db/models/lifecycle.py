from datetime import date, datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Integer, Date, DateTime, ForeignKey, Boolean, Text, UniqueConstraint

from core.clock import local_now
from db.base import Base

TASK_ONBOARDING = "ONBOARDING"
TASK_OFFBOARDING = "OFFBOARDING"

TASK_TYPES = (TASK_ONBOARDING, TASK_OFFBOARDING)


class LifecycleRole(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    label: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    # None means usable for both task types
    type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True)


class LifecycleStatus(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    label: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_done: Mapped[bool] = mapped_column(Boolean, default=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)
    order_index: Mapped[int] = mapped_column(Integer, default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True)


class TaskTemplate(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    type: Mapped[str] = mapped_column(String(20), index=True)
    owner_role_id: Mapped[int | None] = mapped_column(ForeignKey("lifecycle_role.id"), nullable=True)
    relative_due_days: Mapped[int] = mapped_column(Integer, default=0)
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    owner_role: Mapped[Optional["LifecycleRole"]] = relationship("LifecycleRole")


class TaskAssignment(Base):
    __table_args__ = (UniqueConstraint("employee_id", "task_template_id", name="uq_task_employee_template"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("employee.id", ondelete="CASCADE"), index=True)
    task_template_id: Mapped[int] = mapped_column(ForeignKey("task_template.id", ondelete="CASCADE"), index=True)
    type: Mapped[str] = mapped_column(String(20), index=True)
    due_date: Mapped[date] = mapped_column(Date, index=True)
    owner_role_id: Mapped[int] = mapped_column(ForeignKey("lifecycle_role.id"), index=True)
    status_id: Mapped[int] = mapped_column(ForeignKey("lifecycle_status.id"), index=True)
    notes: Mapped[str | None] = mapped_column(Text(), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=local_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=local_now, onupdate=local_now)

    employee: Mapped["Employee"] = relationship("Employee", back_populates="tasks")
    template: Mapped["TaskTemplate"] = relationship("TaskTemplate")
    owner_role: Mapped["LifecycleRole"] = relationship("LifecycleRole")
    status: Mapped["LifecycleStatus"] = relationship("LifecycleStatus")
