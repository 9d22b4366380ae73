from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, func

from db.models.reminder import Reminder, ReminderSchedule, ReminderRecipient


class ReminderRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _with_children(self):
        return select(Reminder).options(
            selectinload(Reminder.schedules),
            selectinload(Reminder.recipients),
            selectinload(Reminder.employee),
        )

    def get_by_id(self, reminder_id: int) -> Reminder | None:
        stmt = self._with_children().where(Reminder.id == reminder_id)
        return self.session.scalars(stmt).first()

    def list_active(self) -> list[Reminder]:
        stmt = self._with_children().where(Reminder.active.is_(True))
        return list(self.session.scalars(stmt))

    def list_all(self, limit: int = 100, offset: int = 0, active: bool | None = None) -> list[Reminder]:
        stmt = self._with_children()
        if active is not None:
            stmt = stmt.where(Reminder.active.is_(active))
        stmt = stmt.order_by(Reminder.due_date.asc()).limit(limit).offset(offset)
        return list(self.session.scalars(stmt))

    def count_by_type(self, reminder_type_id: int) -> int:
        stmt = select(func.count()).select_from(Reminder).where(Reminder.reminder_type_id == reminder_type_id)
        return int(self.session.scalar(stmt) or 0)

    def create(self, schedules: list[dict], recipients: list[str], **fields) -> Reminder:
        reminder = Reminder(**fields)
        reminder.schedules = [ReminderSchedule(**s) for s in schedules]
        reminder.recipients = [ReminderRecipient(email=e) for e in recipients]
        self.session.add(reminder)
        self.session.flush()
        return reminder

    def update(
        self,
        reminder: Reminder,
        schedules: list[dict] | None = None,
        recipients: list[str] | None = None,
        **fields,
    ) -> Reminder:
        for key, value in fields.items():
            setattr(reminder, key, value)
        # Children are replaced wholesale, the admin form always sends the full list
        if schedules is not None:
            reminder.schedules = [ReminderSchedule(**s) for s in schedules]
        if recipients is not None:
            reminder.recipients = [ReminderRecipient(email=e) for e in recipients]
        self.session.flush()
        return reminder

    def delete(self, reminder: Reminder) -> None:
        self.session.delete(reminder)
        self.session.flush()
