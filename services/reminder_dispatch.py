from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from html import escape
import re

from loguru import logger

from core.clock import local_now
from core.errors import (
    MailDeliveryError,
    MailNotConfiguredError,
    NoRecipientsError,
    ReminderDispatchError,
    ReminderNotFoundError,
)
from core.logging import audit_logger
from db.models.reminder import Reminder, ReminderSchedule
from db.repositories.reminder_repo import ReminderRepository
from db.repositories.send_log_repo import SendLogRepository
from services.mail_service import MailSender

MANUAL_SCHEDULE_LABEL = "Manuell gesendet"

_TIME_OF_DAY = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

audit = audit_logger("reminder_dispatch")


@dataclass
class DispatchResult:
    sent: int = 0
    already_sent: int = 0
    not_configured: int = 0
    errors: list[str] = field(default_factory=list)
    recipients: list[str] = field(default_factory=list)


def day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Start and end of the local calendar day containing ``now``, both inclusive."""
    return datetime.combine(now.date(), time.min), datetime.combine(now.date(), time.max)


def is_valid_time_of_day(value: str | None) -> bool:
    return bool(value) and _TIME_OF_DAY.match(value) is not None


def parse_time_of_day(value: str | None) -> time | None:
    if not value:
        return None
    match = _TIME_OF_DAY.match(value.strip())
    if match is None:
        logger.warning("Ignoring malformed time_of_day gate {!r}", value)
        return None
    return time(int(match.group(1)), int(match.group(2)))


def schedule_target_day(due_date: date, days_before: int) -> date:
    return due_date - timedelta(days=days_before)


def is_schedule_due(due_date: date, days_before: int, time_of_day: str | None, now: datetime) -> bool:
    """True when the schedule fires today and the optional time gate has passed."""
    if schedule_target_day(due_date, days_before) != now.date():
        return False
    gate = parse_time_of_day(time_of_day)
    if gate is not None and now.time() < gate:
        return False
    return True


def _format_date(value: date) -> str:
    return value.strftime("%d.%m.%Y")


def _employee_name(reminder: Reminder) -> str:
    employee = reminder.employee
    if employee is None:
        return ", "
    return f"{employee.last_name or ''}, {employee.first_name or ''}"


def _schedule_hint(schedule: ReminderSchedule) -> str:
    suffix = f", {schedule.time_of_day} Uhr" if schedule.time_of_day else ""
    return f"{schedule.label} ({schedule.days_before} Tage vorher{suffix})"


def build_subject(reminder: Reminder) -> str:
    return f"Erinnerung: {reminder.type} – {_employee_name(reminder)} – {_format_date(reminder.due_date)}"


def build_body(reminder: Reminder, hint: str, manual: bool = False) -> str:
    lines = [f"<p><strong>Erinnerung:</strong> {escape(reminder.type)}</p>"]
    if reminder.description:
        lines.append(f"<p>{escape(reminder.description)}</p>")
    lines.append(f"<p><strong>Berechtigter:</strong> {escape(_employee_name(reminder))}</p>")
    lines.append(f"<p><strong>Fälligkeit:</strong> {_format_date(reminder.due_date)}</p>")
    lines.append(f"<p><strong>Hinweis:</strong> {escape(hint)}</p>")
    if manual:
        lines.append("<p><em>Diese Erinnerung wurde manuell gesendet.</em></p>")
    return "\n".join(lines)


class ReminderDispatcher:
    """Sends reminder mails and records them in the send-log.

    The send-log is the only dedup state: a (reminder, schedule label,
    recipient) triple logged inside today's window is not sent again, so the
    scheduled run can be triggered any number of times per day.
    """

    def __init__(self, reminders: ReminderRepository, send_logs: SendLogRepository, mailer: MailSender) -> None:
        self.reminders = reminders
        self.send_logs = send_logs
        self.mailer = mailer

    def _deliver(
        self,
        reminder: Reminder,
        label: str,
        email: str,
        subject: str,
        html: str,
        now: datetime,
        result: DispatchResult,
    ) -> None:
        try:
            outcome = self.mailer.send(to=email, subject=subject, html=html)
        except MailDeliveryError as ex:
            logger.warning("Reminder {} to {} failed: {}", reminder.id, email, ex)
            result.errors.append(f"{email}: {ex}")
            return
        if outcome.skipped:
            # Not logged, a later run retries once SMTP is configured
            result.not_configured += 1
            return
        self.send_logs.add(reminder_id=reminder.id, schedule_label=label, target_email=email, sent_at=now)
        result.sent += 1
        audit.info("reminder_sent", reminder_id=reminder.id, schedule=label, to=email, message_id=outcome.message_id)

    def run_scheduled(self, now: datetime | None = None) -> DispatchResult:
        now = now or local_now()
        day_start, day_end = day_bounds(now)
        result = DispatchResult()

        reminders = self.reminders.list_active()
        logger.info("Evaluating {} active reminders for {}", len(reminders), now.date())
        for reminder in reminders:
            for schedule in reminder.schedules:
                if not is_schedule_due(reminder.due_date, schedule.days_before, schedule.time_of_day, now):
                    continue
                subject = build_subject(reminder)
                html = build_body(reminder, _schedule_hint(schedule))
                for recipient in reminder.recipients:
                    email = recipient.email
                    if self.send_logs.exists_between(reminder.id, schedule.label, email, day_start, day_end):
                        result.already_sent += 1
                        continue
                    self._deliver(reminder, schedule.label, email, subject, html, now, result)

        logger.info(
            "Scheduled reminder run done: sent={} already_sent={} not_configured={} errors={}",
            result.sent,
            result.already_sent,
            result.not_configured,
            len(result.errors),
        )
        return result

    def send_manual(self, reminder_id: int, now: datetime | None = None) -> DispatchResult:
        """Send a reminder to all recipients right away, ignoring schedules and dedup.

        Partial success is reported through ``errors``. When no recipient was
        reached the whole operation fails, also when SMTP is not configured.
        """
        now = now or local_now()
        reminder = self.reminders.get_by_id(reminder_id)
        if reminder is None:
            raise ReminderNotFoundError(f"Reminder {reminder_id} not found")
        if not reminder.recipients:
            raise NoRecipientsError("No recipients configured")

        if reminder.schedules:
            hint = ", ".join(_schedule_hint(s) for s in reminder.schedules)
        else:
            hint = MANUAL_SCHEDULE_LABEL
        subject = build_subject(reminder)
        html = build_body(reminder, hint, manual=True)

        result = DispatchResult(recipients=[r.email for r in reminder.recipients])
        for recipient in reminder.recipients:
            self._deliver(reminder, MANUAL_SCHEDULE_LABEL, recipient.email, subject, html, now, result)

        if result.sent == 0 and result.errors:
            raise ReminderDispatchError(result.errors)
        if result.sent == 0 and result.not_configured:
            raise MailNotConfiguredError("SMTP is not configured")
        return result
