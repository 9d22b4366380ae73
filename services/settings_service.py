from __future__ import annotations

from sqlalchemy.orm import Session

from db.models.setting import Setting
from db.repositories.setting_repo import SettingRepository
from services.mail_service import MailService


def load_settings(session: Session) -> Setting:
    """Return the settings row, creating it with defaults on first access."""
    return SettingRepository(session).get_or_create()


def save_settings(session: Session, **fields) -> Setting:
    return SettingRepository(session).update(**fields)


def mail_service_for(session: Session) -> MailService:
    return MailService.from_settings(SettingRepository(session).find())
