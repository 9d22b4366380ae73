from typing import Callable, Generator

from fastapi import Cookie, Depends, HTTPException
from sqlalchemy.orm import Session

from core.config import settings
from db.session import get_session
from services.auth_service import SessionUser, fetch_session_user, has_role
from services.mail_service import MailSender
from services.reminder_service import ReminderService
from services.settings_service import mail_service_for


def get_db_session() -> Generator:
    with get_session() as session:
        yield session


def get_mail_sender(session: Session = Depends(get_db_session)) -> MailSender:
    return mail_service_for(session)


def get_reminder_service(
    session: Session = Depends(get_db_session),
    mailer: MailSender = Depends(get_mail_sender),
) -> ReminderService:
    return ReminderService(session=session, mailer=mailer)


def get_session_token(
    token: str | None = Cookie(default=None, alias=settings.session_cookie_name),
) -> str | None:
    return token


def get_current_user(
    token: str | None = Depends(get_session_token),
    session: Session = Depends(get_db_session),
) -> SessionUser:
    user = fetch_session_user(session, token)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def require_roles(*roles: str) -> Callable[..., SessionUser]:
    def _dependency(user: SessionUser = Depends(get_current_user)) -> SessionUser:
        if not has_role(user, *roles):
            raise HTTPException(status_code=403, detail="Forbidden")
        return user

    return _dependency
