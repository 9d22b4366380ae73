from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from html import escape

from loguru import logger
from sqlalchemy.orm import Session

from core.clock import local_today
from core.errors import MailDeliveryError
from db.models.employee import STATUS_EXITED
from db.models.setting import DEFAULT_BIRTHDAY_TEMPLATE, DEFAULT_JUBILEE_TEMPLATE
from db.repositories.employee_repo import EmployeeRepository
from db.repositories.setting_repo import SettingRepository
from services.jubilee import find_jubilees_on_day, group_hits_by_years, is_birthday, parse_jubilee_years
from services.mail_service import MailSender, render_template

BIRTHDAY_SUBJECT = "Alles Gute zum Geburtstag!"
JUBILEE_SUBJECT = "Jubilare heute"


@dataclass
class DailyRunResult:
    birthdays: int = 0
    jubilee_hits: int = 0
    managers_notified: int = 0


def parse_email_list(csv: str | None) -> list[str]:
    return [part.strip() for part in (csv or "").split(",") if part.strip()]


def run_daily(session: Session, mailer: MailSender, today: date | None = None) -> DailyRunResult:
    """Send today's birthday greetings and the jubilee digest to managers."""
    today = today or local_today()
    setting = SettingRepository(session).get_or_create()
    employees = [e for e in EmployeeRepository(session).list_all() if e.status != STATUS_EXITED]
    result = DailyRunResult()

    years = parse_jubilee_years(setting.jubilee_years_csv)
    hits = find_jubilees_on_day(employees, years, today)
    result.jubilee_hits = len(hits)

    if setting.send_on_birthday:
        template = setting.birthday_email_template or DEFAULT_BIRTHDAY_TEMPLATE
        for employee in employees:
            if not employee.email or not is_birthday(employee.birth_date, today):
                continue
            html = render_template(template, {"firstName": employee.first_name, "lastName": employee.last_name})
            try:
                outcome = mailer.send(to=employee.email, subject=BIRTHDAY_SUBJECT, html=html)
            except MailDeliveryError as ex:
                logger.warning("Birthday mail to {} failed: {}", employee.email, ex)
                continue
            if outcome.ok:
                result.birthdays += 1

    managers = parse_email_list(setting.manager_emails)
    if setting.send_on_jubilee and managers and hits:
        template = setting.jubilee_email_template or DEFAULT_JUBILEE_TEMPLATE
        sections = []
        for count, group in group_hits_by_years(hits):
            rows = []
            for hit in group:
                greeting = render_template(
                    template,
                    {"years": count, "firstName": hit.employee.first_name, "lastName": hit.employee.last_name},
                )
                rows.append(
                    f"<li>{escape(hit.employee.last_name)}, {escape(hit.employee.first_name)}: {escape(greeting)}</li>"
                )
            sections.append(f"<h3>{count} Jahre</h3><ul>{''.join(rows)}</ul>")
        html = "".join(sections)
        try:
            outcome = mailer.send(to=managers, subject=JUBILEE_SUBJECT, html=html)
            if outcome.ok:
                result.managers_notified = len(managers)
        except MailDeliveryError as ex:
            logger.warning("Jubilee digest to {} failed: {}", managers, ex)

    logger.info(
        "Daily run {}: birthdays={} jubilee_hits={} managers_notified={}",
        today,
        result.birthdays,
        result.jubilee_hits,
        result.managers_notified,
    )
    return result
