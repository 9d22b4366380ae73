from datetime import datetime

from sqlalchemy.orm import Session
from sqlalchemy import select

from db.models.reminder import ReminderSendLog


class SendLogRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, reminder_id: int, schedule_label: str, target_email: str, sent_at: datetime | None = None) -> ReminderSendLog:
        log = ReminderSendLog(
            reminder_id=reminder_id,
            schedule_label=schedule_label,
            target_email=target_email,
        )
        if sent_at is not None:
            log.sent_at = sent_at
        self.session.add(log)
        self.session.flush()
        return log

    def exists_between(
        self,
        reminder_id: int,
        schedule_label: str,
        target_email: str,
        start: datetime,
        end: datetime,
    ) -> bool:
        stmt = (
            select(ReminderSendLog.id)
            .where(
                ReminderSendLog.reminder_id == reminder_id,
                ReminderSendLog.schedule_label == schedule_label,
                ReminderSendLog.target_email == target_email,
                ReminderSendLog.sent_at >= start,
                ReminderSendLog.sent_at <= end,
            )
            .limit(1)
        )
        return self.session.scalars(stmt).first() is not None

    def list_by_reminder(self, reminder_id: int | None = None, limit: int = 1000) -> list[ReminderSendLog]:
        stmt = select(ReminderSendLog)
        if reminder_id is not None:
            stmt = stmt.where(ReminderSendLog.reminder_id == reminder_id)
        stmt = stmt.order_by(ReminderSendLog.sent_at.desc()).limit(limit)
        return list(self.session.scalars(stmt))
