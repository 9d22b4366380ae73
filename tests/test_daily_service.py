from datetime import date

from db.repositories.setting_repo import SettingRepository
from fakes import FakeMailer
from services.daily_service import BIRTHDAY_SUBJECT, JUBILEE_SUBJECT, parse_email_list, run_daily

TODAY = date(2025, 6, 10)


def test_parse_email_list():
    assert parse_email_list(" a@example.com, ,b@example.com ") == ["a@example.com", "b@example.com"]
    assert parse_email_list(None) == []


def test_birthday_greeting_sent(session, make_employee):
    make_employee(first_name="Anna", email="anna@example.com", birth_date=date(1990, 6, 10))
    make_employee(first_name="Ben", email="ben@example.com", birth_date=date(1990, 6, 11))
    mailer = FakeMailer()

    result = run_daily(session, mailer, TODAY)

    assert result.birthdays == 1
    assert mailer.sent[0]["to"] == "anna@example.com"
    assert mailer.sent[0]["subject"] == BIRTHDAY_SUBJECT
    assert "Anna" in mailer.sent[0]["html"]


def test_jubilee_digest_goes_to_managers(session, make_employee):
    SettingRepository(session).update(manager_emails="boss@example.com, hr@example.com", send_on_birthday=False)
    make_employee(first_name="Anna", start_date=date(2015, 6, 10))
    make_employee(first_name="Ben", start_date=date(2020, 6, 10))
    make_employee(first_name="Cleo", start_date=date(2017, 6, 10))
    mailer = FakeMailer()

    result = run_daily(session, mailer, TODAY)

    assert result.jubilee_hits == 2
    assert result.managers_notified == 2
    assert len(mailer.sent) == 1
    digest = mailer.sent[0]
    assert digest["subject"] == JUBILEE_SUBJECT
    assert digest["to"] == ["boss@example.com", "hr@example.com"]
    assert digest["html"].index("5 Jahre") < digest["html"].index("10 Jahre")


def test_exited_employees_are_excluded(session, make_employee):
    make_employee(email="gone@example.com", birth_date=date(1990, 6, 10), start_date=date(2015, 6, 10), status="EXITED")
    SettingRepository(session).update(manager_emails="boss@example.com")
    mailer = FakeMailer()

    result = run_daily(session, mailer, TODAY)

    assert result.birthdays == 0
    assert result.jubilee_hits == 0
    assert mailer.sent == []


def test_failed_birthday_mail_is_skipped(session, make_employee):
    make_employee(first_name="Anna", email="anna@example.com", birth_date=date(1990, 6, 10))
    make_employee(first_name="Ben", email="ben@example.com", birth_date=date(1985, 6, 10))
    mailer = FakeMailer(fail_for={"anna@example.com"})

    result = run_daily(session, mailer, TODAY)

    assert result.birthdays == 1
    assert [m["to"] for m in mailer.sent] == ["ben@example.com"]
