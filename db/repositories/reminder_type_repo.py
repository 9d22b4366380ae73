from __future__ import annotations
from sqlalchemy.orm import Session
from sqlalchemy import select, func

from db.models.reminder_type import ReminderType


class ReminderTypeRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, type_id: int) -> ReminderType | None:
        return self.session.get(ReminderType, type_id)

    def find_by_key(self, key: str) -> ReminderType | None:
        return self.session.scalars(select(ReminderType).where(ReminderType.key == key)).first()

    def list(self) -> list[ReminderType]:
        stmt = select(ReminderType).order_by(ReminderType.order_index.asc(), ReminderType.label.asc())
        return list(self.session.scalars(stmt))

    def next_order_index(self) -> int:
        current = self.session.scalar(select(func.max(ReminderType.order_index)))
        return 0 if current is None else current + 1

    def create(self, **fields) -> ReminderType:
        item = ReminderType(**fields)
        self.session.add(item)
        self.session.flush()
        return item

    def delete(self, item: ReminderType) -> None:
        self.session.delete(item)
        self.session.flush()
