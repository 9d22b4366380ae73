from __future__ import annotations
from datetime import datetime

from loguru import logger
from sqlalchemy.orm import Session

from core.errors import ConflictError, NotFoundError, ReminderNotFoundError
from db.models.reminder import Reminder
from db.models.reminder_type import ReminderType
from db.repositories.reminder_repo import ReminderRepository
from db.repositories.reminder_type_repo import ReminderTypeRepository
from db.repositories.send_log_repo import SendLogRepository
from services.mail_service import MailSender
from services.reminder_dispatch import DispatchResult, ReminderDispatcher

DEFAULT_REMINDER_TYPES = [
    {"key": "GEHALT", "label": "Gehalt", "description": "Gehaltserhöhungen und -anpassungen", "color": "emerald", "order_index": 0},
    {"key": "MEILENSTEIN", "label": "Meilenstein", "description": "Wichtige Ereignisse und Jubiläen", "color": "blue", "order_index": 1},
    {"key": "SONDERBONUS", "label": "Sonderbonus", "description": "Einmalige Bonuszahlungen", "color": "amber", "order_index": 2},
    {"key": "STAFFELBONUS", "label": "Staffelbonus", "description": "Gestaffelte Bonuszahlungen", "color": "orange", "order_index": 3},
    {"key": "URLAUBSGELD", "label": "Urlaubsgeld", "description": "Jährliche Urlaubsgeldzahlung", "color": "indigo", "order_index": 4},
    {"key": "WEIHNACHTSGELD", "label": "Weihnachtsgeld", "description": "Jährliche Weihnachtsgeldzahlung", "color": "red", "order_index": 5},
]


class ReminderService:
    def __init__(self, session: Session, mailer: MailSender) -> None:
        self.session = session
        self.reminders = ReminderRepository(session)
        self.types = ReminderTypeRepository(session)
        self.dispatcher = ReminderDispatcher(self.reminders, SendLogRepository(session), mailer)

    def _resolve_type(self, fields: dict) -> dict:
        # A configured type fills in the display label when none is given
        type_id = fields.get("reminder_type_id")
        if type_id is not None:
            reminder_type = self.types.get_by_id(type_id)
            if reminder_type is None:
                raise NotFoundError(f"Reminder type {type_id} not found")
            if not fields.get("type"):
                fields["type"] = reminder_type.label
        if not fields.get("type"):
            raise ValueError("Either type or reminder_type_id is required")
        return fields

    def create(self, schedules: list[dict], recipients: list[str], **fields) -> Reminder:
        fields = self._resolve_type(fields)
        reminder = self.reminders.create(schedules=schedules, recipients=recipients, **fields)
        logger.info("Created reminder {} ({}) due {}", reminder.id, reminder.type, reminder.due_date)
        return reminder

    def update(self, reminder_id: int, schedules: list[dict] | None = None, recipients: list[str] | None = None, **fields) -> Reminder:
        reminder = self.reminders.get_by_id(reminder_id)
        if reminder is None:
            raise ReminderNotFoundError(f"Reminder {reminder_id} not found")
        if "reminder_type_id" in fields and fields["reminder_type_id"] is not None:
            fields = self._resolve_type({"type": fields.get("type") or reminder.type, **fields})
        return self.reminders.update(reminder, schedules=schedules, recipients=recipients, **fields)

    def delete(self, reminder_id: int) -> None:
        reminder = self.reminders.get_by_id(reminder_id)
        if reminder is None:
            raise ReminderNotFoundError(f"Reminder {reminder_id} not found")
        self.reminders.delete(reminder)

    def send_due_reminders(self, now: datetime | None = None) -> DispatchResult:
        return self.dispatcher.run_scheduled(now)

    def send_now(self, reminder_id: int, now: datetime | None = None) -> DispatchResult:
        return self.dispatcher.send_manual(reminder_id, now)

    # reminder types

    def create_type(self, **fields) -> ReminderType:
        if self.types.find_by_key(fields["key"]) is not None:
            raise ConflictError("A reminder type with this key already exists")
        if fields.get("order_index") is None:
            fields["order_index"] = self.types.next_order_index()
        return self.types.create(**fields)

    def update_type(self, type_id: int, **fields) -> ReminderType:
        item = self.types.get_by_id(type_id)
        if item is None:
            raise NotFoundError(f"Reminder type {type_id} not found")
        new_key = fields.get("key")
        if new_key and new_key != item.key and self.types.find_by_key(new_key) is not None:
            raise ConflictError("A reminder type with this key already exists")
        for key, value in fields.items():
            setattr(item, key, value)
        self.session.flush()
        return item

    def delete_type(self, type_id: int) -> None:
        item = self.types.get_by_id(type_id)
        if item is None:
            raise NotFoundError(f"Reminder type {type_id} not found")
        in_use = self.reminders.count_by_type(type_id)
        if in_use > 0:
            raise ConflictError(f"Type is used by {in_use} reminder(s) and cannot be deleted")
        self.types.delete(item)

    def seed_types(self) -> int:
        created = 0
        for data in DEFAULT_REMINDER_TYPES:
            if self.types.find_by_key(data["key"]) is None:
                self.types.create(**data)
                created += 1
        return created
