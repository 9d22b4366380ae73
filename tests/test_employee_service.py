from datetime import date

import pandas as pd
import pytest

from core.clock import local_today
from db.repositories.employee_repo import EmployeeRepository
from db.repositories.lifecycle_repo import TaskTemplateRepository
from services.employee_service import (
    MAX_IMPORT_ROWS,
    ImportTooLargeError,
    build_email,
    change_status,
    import_employees_from_excel_stream,
    import_employees_from_frame,
    parse_date_flexible,
)


def test_parse_date_flexible_formats():
    assert parse_date_flexible("01.02.85") == date(1985, 2, 1)
    assert parse_date_flexible("01.02.15") == date(2015, 2, 1)
    assert parse_date_flexible("1.2.2001") == date(2001, 2, 1)
    assert parse_date_flexible("2001-02-01") == date(2001, 2, 1)
    assert parse_date_flexible(pd.Timestamp("2010-05-06")) == date(2010, 5, 6)
    assert parse_date_flexible("31.02.2001") is None
    assert parse_date_flexible("") is None


def test_build_email_strips_accents():
    assert build_email("Jörg", "Müller-Lüdenscheidt", "example.com") == "jorg.muller.ludenscheidt@example.com"
    assert build_email("", "Muster", "example.com") is None


def test_import_creates_updates_and_skips(session):
    df = pd.DataFrame(
        [
            {"name, vorname": "Muster, Anna", "geburtstag": "14.07.90", "eintrittsdatum": "01.04.2015"},
            {"vorname": "Ben", "nachname": "Beispiel", "geburtstag": "1988-03-02"},
            {"vorname": "Ohne", "nachname": "Geburtstag"},
        ]
    )
    assert import_employees_from_frame(df, session) == {"created": 2, "updated": 0, "skipped": 1}

    anna = EmployeeRepository(session).find_by_name_and_birth("Anna", "Muster", date(1990, 7, 14))
    assert anna.start_date == date(2015, 4, 1)
    assert anna.email == "anna.muster@example.com"
    ben = EmployeeRepository(session).find_by_name_and_birth("Ben", "Beispiel", date(1988, 3, 2))
    assert ben.start_date == local_today()

    again = pd.DataFrame([{"vorname": "Anna", "nachname": "Muster", "geburtstag": "14.07.1990", "eintritt": "01.05.2015"}])
    assert import_employees_from_frame(again, session) == {"created": 0, "updated": 1, "skipped": 0}
    assert anna.start_date == date(2015, 5, 1)


def test_import_rejects_too_many_rows(session):
    df = pd.DataFrame({"vorname": ["A"] * (MAX_IMPORT_ROWS + 1)})
    with pytest.raises(ImportTooLargeError):
        import_employees_from_frame(df, session)


def test_import_csv_upload(session):
    data = "Vorname;Nachname;Geburtsdatum\nCarla;Chef;02.03.1970\n".encode("utf-8")
    result = import_employees_from_excel_stream(data, session, filename="people.csv")
    assert result["created"] == 1


def test_change_status_generates_onboarding_tasks(session, make_employee):
    TaskTemplateRepository(session).create(title="Laptop", type="ONBOARDING", relative_due_days=-3)
    employee = make_employee()
    updated, generated = change_status(session, employee.id, "ONBOARDING", start_date=date(2025, 9, 1))
    assert updated.status == "ONBOARDING"
    assert updated.start_date == date(2025, 9, 1)
    assert generated == 1


def test_change_status_active_generates_nothing(session, make_employee):
    employee = make_employee(start_date=date(2020, 1, 1))
    _, generated = change_status(session, employee.id, "ACTIVE")
    assert generated == 0
