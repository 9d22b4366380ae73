from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, get_db_session, get_mail_sender, require_roles
from core.clock import local_today
from core.security import ROLE_ADMIN, ROLE_HR
from db.models.employee import STATUS_EXITED
from db.repositories.employee_repo import EmployeeRepository
from schemas.jubilee import DailyRunOut, JubileeGroupOut, JubileeHitOut
from services.auth_service import SessionUser
from services.daily_service import run_daily
from services.jubilee import find_jubilees_on_day, find_upcoming_jubilees, group_hits_by_years, parse_jubilee_years
from services.mail_service import MailSender
from services.settings_service import load_settings

router = APIRouter()

MAX_WINDOW_DAYS = 366


@router.get("/jubilees", response_model=List[JubileeGroupOut])
def list_jubilees(
    window_days: int = Query(default=30, ge=0),
    on: Optional[date] = None,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(get_current_user),
):
    """Upcoming milestone anniversaries grouped by years, or the exact day when ``on`` is given."""
    if window_days > MAX_WINDOW_DAYS:
        raise HTTPException(status_code=400, detail=f"window_days must not exceed {MAX_WINDOW_DAYS}")
    setting = load_settings(session)
    years = parse_jubilee_years(setting.jubilee_years_csv)
    employees = [e for e in EmployeeRepository(session).list_all() if e.status != STATUS_EXITED]
    if on is not None:
        hits = find_jubilees_on_day(employees, years, on)
    else:
        hits = find_upcoming_jubilees(employees, years, window_days, local_today())
    return [
        JubileeGroupOut(
            years=count,
            hits=[
                JubileeHitOut(
                    employee_id=hit.employee.id,
                    first_name=hit.employee.first_name,
                    last_name=hit.employee.last_name,
                    years=hit.years,
                    anniversary_date=hit.anniversary_date,
                )
                for hit in group
            ],
        )
        for count, group in group_hits_by_years(hits)
    ]


@router.post("/daily/run", response_model=DailyRunOut)
def trigger_daily_run(
    on: Optional[date] = None,
    session: Session = Depends(get_db_session),
    mailer: MailSender = Depends(get_mail_sender),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN, ROLE_HR)),
):
    result = run_daily(session, mailer, on)
    return DailyRunOut(
        birthdays=result.birthdays,
        jubilee_hits=result.jubilee_hits,
        managers_notified=result.managers_notified,
    )
