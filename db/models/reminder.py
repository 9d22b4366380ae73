from datetime import date, datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Integer, Date, DateTime, ForeignKey, Boolean, Text

from core.clock import local_now
from db.base import Base


class Reminder(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    employee_id: Mapped[int | None] = mapped_column(
        ForeignKey("employee.id", ondelete="SET NULL"), nullable=True, index=True
    )
    reminder_type_id: Mapped[int | None] = mapped_column(
        ForeignKey("reminder_type.id"), nullable=True, index=True
    )
    # Free-text label shown in mails; mirrors the type label when a type is set
    type: Mapped[str] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    due_date: Mapped[date] = mapped_column(Date, index=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=local_now)

    employee: Mapped[Optional["Employee"]] = relationship("Employee", back_populates="reminders")
    reminder_type: Mapped[Optional["ReminderType"]] = relationship("ReminderType")
    schedules: Mapped[list["ReminderSchedule"]] = relationship(
        "ReminderSchedule",
        back_populates="reminder",
        cascade="all, delete-orphan",
        order_by="ReminderSchedule.days_before.desc()",
    )
    recipients: Mapped[list["ReminderRecipient"]] = relationship(
        "ReminderRecipient", back_populates="reminder", cascade="all, delete-orphan"
    )
    send_logs: Mapped[list["ReminderSendLog"]] = relationship(
        "ReminderSendLog", back_populates="reminder", cascade="all, delete-orphan"
    )


class ReminderSchedule(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    reminder_id: Mapped[int] = mapped_column(ForeignKey("reminder.id", ondelete="CASCADE"), index=True)
    label: Mapped[str] = mapped_column(String(100))
    days_before: Mapped[int] = mapped_column(Integer, default=0)
    # "HH:MM" local time gate, optional
    time_of_day: Mapped[str | None] = mapped_column(String(5), nullable=True)

    reminder: Mapped["Reminder"] = relationship("Reminder", back_populates="schedules")


class ReminderRecipient(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    reminder_id: Mapped[int] = mapped_column(ForeignKey("reminder.id", ondelete="CASCADE"), index=True)
    email: Mapped[str] = mapped_column(String(255))

    reminder: Mapped["Reminder"] = relationship("Reminder", back_populates="recipients")


class ReminderSendLog(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    reminder_id: Mapped[int] = mapped_column(ForeignKey("reminder.id", ondelete="CASCADE"), index=True)
    schedule_label: Mapped[str] = mapped_column(String(100), index=True)
    target_email: Mapped[str] = mapped_column(String(255), index=True)
    sent_at: Mapped[datetime] = mapped_column(DateTime, default=local_now, index=True)

    reminder: Mapped["Reminder"] = relationship("Reminder", back_populates="send_logs")
