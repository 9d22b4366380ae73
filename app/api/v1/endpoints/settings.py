from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sqlalchemy.orm import Session

from app.dependencies import get_db_session, get_mail_sender, require_roles
from core.errors import MailDeliveryError
from core.security import ROLE_ADMIN
from db.models.setting import Setting
from schemas.setting import MailTestIn, SettingsIn, SettingsOut
from services.auth_service import SessionUser
from services.mail_service import MailSender
from services.settings_service import load_settings, save_settings

router = APIRouter()

TEST_MAIL_SUBJECT = "SMTP Test"


def _settings_out(row: Setting) -> SettingsOut:
    return SettingsOut.model_validate(row).model_copy(update={"smtp_pass_set": bool(row.smtp_pass)})


@router.get("/", response_model=SettingsOut)
def get_settings(
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
):
    return _settings_out(load_settings(session))


@router.put("/", response_model=SettingsOut)
def put_settings(
    payload: SettingsIn,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
):
    fields = payload.model_dump()
    if fields.get("smtp_pass") is None:
        fields.pop("smtp_pass", None)
    row = save_settings(session, **fields)
    logger.info("Settings updated (smtp_host={}, daily_send_hour={})", row.smtp_host, row.daily_send_hour)
    return _settings_out(row)


@router.post("/test-mail")
def send_test_mail(
    payload: MailTestIn,
    mailer: MailSender = Depends(get_mail_sender),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
) -> dict:
    html = "<p>This is a test mail. SMTP delivery works.</p>"
    try:
        result = mailer.send(to=payload.to.strip(), subject=TEST_MAIL_SUBJECT, html=html)
    except MailDeliveryError as ex:
        logger.error("Test mail to {} failed: {}", payload.to, ex)
        raise HTTPException(status_code=500, detail=str(ex))
    if result.skipped:
        raise HTTPException(status_code=400, detail="SMTP is not configured")
    return {"ok": True, "message_id": result.message_id}
