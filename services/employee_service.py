from __future__ import annotations
from datetime import date, datetime
from io import BytesIO
import re
import unicodedata

import pandas as pd
from loguru import logger
from sqlalchemy.orm import Session

from core.clock import local_today
from core.config import settings
from core.errors import EmployeeNotFoundError
from db.models.employee import Employee, STATUS_OFFBOARDING, STATUS_ONBOARDING
from db.models.lifecycle import TASK_OFFBOARDING, TASK_ONBOARDING
from db.repositories.employee_repo import EmployeeRepository
from services.lifecycle_service import generate_tasks

MAX_IMPORT_ROWS = 5000

COMBINED_NAME_COLS = ["name, vorname", "name vorname", "full_name", "fullname"]
FIRST_NAME_COLS = ["vorname", "first_name", "firstname"]
LAST_NAME_COLS = ["nachname", "last_name", "lastname", "name"]
START_DATE_COLS = ["eintrittsdatum", "eintritt", "startdatum", "start_date", "startdate"]
BIRTH_DATE_COLS = ["geburtstag", "geburtsdatum", "birth_date", "birthdate", "birthday"]
EMAIL_COLS = ["email", "e-mail", "mail", "email_address"]

_GERMAN_DATE = re.compile(r"^([0-3]?\d)\.([0-1]?\d)\.(\d{2}|\d{4})$")


class ImportTooLargeError(ValueError):
    pass


def _normalize_header(value) -> str:
    text = unicodedata.normalize("NFD", str(value or "")).lower()
    return "".join(ch for ch in text if unicodedata.category(ch) != "Mn").strip()


def _resolve_column(row: pd.Series, candidates: list[str]) -> str:
    for key in candidates:
        if key in row and pd.notna(row[key]):
            value = str(row[key]).strip()
            if value:
                return value
    return ""


def _resolve_raw(row: pd.Series, candidates: list[str]):
    for key in candidates:
        if key in row and pd.notna(row[key]):
            return row[key]
    return None


def parse_date_flexible(value) -> date | None:
    """Accept datetime cells, ISO strings and German dd.mm.yy / dd.mm.yyyy."""
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    match = _GERMAN_DATE.match(text)
    if match:
        day, month, year = (int(g) for g in match.groups())
        if len(match.group(3)) == 2:
            year += 2000 if year < 50 else 1900
        try:
            return date(year, month, day)
        except ValueError:
            return None
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def _normalize_name_part(value: str | None) -> str:
    text = unicodedata.normalize("NFD", value or "").lower()
    text = "".join(ch for ch in text if unicodedata.category(ch) != "Mn")
    text = re.sub(r"[^a-z\s-]", "", text)
    text = re.sub(r"[\s-]+", ".", text.strip())
    return re.sub(r"\.+", ".", text).strip(".")


def build_email(first_name: str | None, last_name: str | None, domain: str | None = None) -> str | None:
    first = _normalize_name_part(first_name)
    last = _normalize_name_part(last_name)
    if not first or not last:
        return None
    return f"{first}.{last}@{domain or settings.employee_email_domain}"


def parse_row(row: pd.Series) -> dict:
    first_name = ""
    last_name = ""
    combined = _resolve_column(row, COMBINED_NAME_COLS)
    if combined:
        parts = combined.split(",")
        if len(parts) >= 2:
            last_name = parts[0].strip()
            first_name = ",".join(parts[1:]).strip()
        else:
            first_name = combined
    first_name = _resolve_column(row, FIRST_NAME_COLS) or first_name
    # An explicit last-name column wins over the combined one
    last_name = _resolve_column(row, LAST_NAME_COLS) or last_name
    return {
        "first_name": first_name,
        "last_name": last_name,
        "start_date": parse_date_flexible(_resolve_raw(row, START_DATE_COLS)),
        "birth_date": parse_date_flexible(_resolve_raw(row, BIRTH_DATE_COLS)),
        "email": _resolve_column(row, EMAIL_COLS) or None,
    }


def _read_frame(file_bytes: bytes, filename: str | None) -> pd.DataFrame:
    if filename and filename.lower().endswith(".csv"):
        df = pd.read_csv(BytesIO(file_bytes), sep=None, engine="python", dtype=str)
    else:
        df = pd.read_excel(BytesIO(file_bytes), engine="openpyxl")
    df.columns = [_normalize_header(c) for c in df.columns]
    return df


def import_employees_from_frame(df: pd.DataFrame, session: Session) -> dict[str, int]:
    if len(df) > MAX_IMPORT_ROWS:
        raise ImportTooLargeError(f"Too many rows ({len(df)}), at most {MAX_IMPORT_ROWS} per upload")

    repo = EmployeeRepository(session)
    created = 0
    updated = 0
    skipped = 0
    for _, row in df.iterrows():
        data = parse_row(row)
        if not data["first_name"] or not data["last_name"] or data["birth_date"] is None:
            skipped += 1
            continue
        email = data["email"]
        existing = repo.find_by_name_and_birth(data["first_name"], data["last_name"], data["birth_date"])
        if existing is None:
            email = email or build_email(data["first_name"], data["last_name"])
        _, was_created = repo.upsert_by_name_and_birth(
            first_name=data["first_name"],
            last_name=data["last_name"],
            birth_date=data["birth_date"],
            start_date=data["start_date"] or (local_today() if existing is None else None),
            email=email,
        )
        if was_created:
            created += 1
        else:
            updated += 1

    logger.info("Employee import: created={} updated={} skipped={}", created, updated, skipped)
    return {"created": created, "updated": updated, "skipped": skipped}


def import_employees_from_excel_stream(file_bytes: bytes, session: Session, filename: str | None = None) -> dict[str, int]:
    """Import employees from an uploaded Excel (or CSV) file."""
    return import_employees_from_frame(_read_frame(file_bytes, filename), session)


def change_status(
    session: Session,
    employee_id: int,
    status: str,
    start_date: date | None = None,
    exit_date: date | None = None,
    overwrite: bool = False,
) -> tuple[Employee, int]:
    """Update an employee's status and generate lifecycle tasks where it applies."""
    employee = EmployeeRepository(session).get_by_id(employee_id)
    if employee is None:
        raise EmployeeNotFoundError(f"Employee {employee_id} not found")
    employee.status = status
    if start_date is not None:
        employee.start_date = start_date
    if exit_date is not None:
        employee.exit_date = exit_date
    session.flush()

    generated = 0
    if status == STATUS_ONBOARDING:
        generated = generate_tasks(session, employee_id, TASK_ONBOARDING, overwrite=overwrite)
    elif status == STATUS_OFFBOARDING:
        generated = generate_tasks(session, employee_id, TASK_OFFBOARDING, overwrite=overwrite)
    return employee, generated
