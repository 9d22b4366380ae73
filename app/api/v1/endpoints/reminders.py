from fastapi import APIRouter, Depends, HTTPException
from typing import List
from loguru import logger

from app.dependencies import get_current_user, get_db_session, get_reminder_service, require_roles
from core.errors import MailNotConfiguredError, NoRecipientsError, NotFoundError, ReminderDispatchError
from core.security import ROLE_ADMIN, ROLE_HR
from db.repositories.reminder_repo import ReminderRepository
from db.repositories.send_log_repo import SendLogRepository
from schemas.log import SendLogOut
from schemas.reminder import DispatchOut, ManualSendIn, ManualSendOut, ReminderIn, ReminderOut, ReminderUpdate
from services.auth_service import SessionUser
from services.reminder_service import ReminderService

router = APIRouter()


@router.post("/run", response_model=DispatchOut)
def run_reminders(
    service: ReminderService = Depends(get_reminder_service),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
):
    result = service.send_due_reminders()
    return DispatchOut(
        sent=result.sent,
        already_sent=result.already_sent,
        not_configured=result.not_configured,
        errors=result.errors,
    )


@router.post("/send", response_model=ManualSendOut)
def send_reminder_now(
    payload: ManualSendIn,
    service: ReminderService = Depends(get_reminder_service),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN, ROLE_HR)),
):
    try:
        result = service.send_now(payload.reminder_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Reminder not found")
    except (NoRecipientsError, MailNotConfiguredError) as ex:
        raise HTTPException(status_code=400, detail=str(ex))
    except ReminderDispatchError as ex:
        logger.error("Manual send of reminder {} failed: {}", payload.reminder_id, ex)
        raise HTTPException(status_code=500, detail=str(ex))
    return ManualSendOut(
        sent=result.sent,
        recipients=result.recipients,
        not_configured=result.not_configured,
        errors=result.errors or None,
    )


@router.get("/", response_model=List[ReminderOut])
def list_reminders(
    limit: int = 100,
    offset: int = 0,
    active: bool | None = None,
    session=Depends(get_db_session),
    _: SessionUser = Depends(get_current_user),
):
    return ReminderRepository(session).list_all(limit=limit, offset=offset, active=active)


@router.post("/", response_model=ReminderOut, status_code=201)
def create_reminder(
    payload: ReminderIn,
    service: ReminderService = Depends(get_reminder_service),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN, ROLE_HR)),
):
    data = payload.model_dump()
    schedules = data.pop("schedules")
    recipients = [e.strip() for e in data.pop("recipients") if e.strip()]
    try:
        return service.create(schedules=schedules, recipients=recipients, **data)
    except NotFoundError as ex:
        raise HTTPException(status_code=404, detail=str(ex))
    except ValueError as ex:
        raise HTTPException(status_code=400, detail=str(ex))


@router.get("/logs", response_model=List[SendLogOut])
def list_send_logs(
    reminder_id: int | None = None,
    limit: int = 1000,
    session=Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN, ROLE_HR)),
):
    return SendLogRepository(session).list_by_reminder(reminder_id=reminder_id, limit=limit)


@router.get("/{reminder_id}", response_model=ReminderOut)
def get_reminder(
    reminder_id: int,
    session=Depends(get_db_session),
    _: SessionUser = Depends(get_current_user),
):
    reminder = ReminderRepository(session).get_by_id(reminder_id)
    if reminder is None:
        raise HTTPException(status_code=404, detail="Reminder not found")
    return reminder


@router.patch("/{reminder_id}", response_model=ReminderOut)
def update_reminder(
    reminder_id: int,
    payload: ReminderUpdate,
    service: ReminderService = Depends(get_reminder_service),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN, ROLE_HR)),
):
    data = payload.model_dump(exclude_unset=True)
    schedules = data.pop("schedules", None)
    recipients = data.pop("recipients", None)
    if recipients is not None:
        recipients = [e.strip() for e in recipients if e.strip()]
    try:
        return service.update(reminder_id, schedules=schedules, recipients=recipients, **data)
    except NotFoundError as ex:
        raise HTTPException(status_code=404, detail=str(ex))
    except ValueError as ex:
        raise HTTPException(status_code=400, detail=str(ex))


@router.delete("/{reminder_id}")
def delete_reminder(
    reminder_id: int,
    service: ReminderService = Depends(get_reminder_service),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN, ROLE_HR)),
) -> dict:
    try:
        service.delete(reminder_id)
    except NotFoundError as ex:
        raise HTTPException(status_code=404, detail=str(ex))
    return {"ok": True}
