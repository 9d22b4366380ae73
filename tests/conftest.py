from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db.base import Base
from db.registry import import_models
from db.repositories.employee_repo import EmployeeRepository
from db.repositories.reminder_repo import ReminderRepository
from fakes import FakeMailer

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-secret"


@pytest.fixture()
def engine():
    import_models()
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    yield session
    session.close()


@pytest.fixture()
def mailer():
    return FakeMailer()


@pytest.fixture()
def make_employee(session):
    def _make(first_name="Anna", last_name="Muster", **fields):
        return EmployeeRepository(session).create(first_name=first_name, last_name=last_name, **fields)

    return _make


@pytest.fixture()
def make_reminder(session, make_employee):
    def _make(due_date=date(2025, 6, 10), schedules=None, recipients=("hr@example.com",), **fields):
        if "employee_id" not in fields:
            fields["employee_id"] = make_employee().id
        fields.setdefault("type", "Gehalt")
        return ReminderRepository(session).create(
            schedules=schedules if schedules is not None else [{"label": "5 Tage vorher", "days_before": 5}],
            recipients=list(recipients),
            due_date=due_date,
            **fields,
        )

    return _make


@pytest.fixture()
def client(session, mailer):
    from app.dependencies import get_db_session, get_mail_sender
    from app.main import app

    def _db_session():
        yield session
        session.flush()

    app.dependency_overrides[get_db_session] = _db_session
    app.dependency_overrides[get_mail_sender] = lambda: mailer
    # https so the secure session cookie is sent back
    with_client = TestClient(app, base_url="https://testserver")
    yield with_client
    app.dependency_overrides.clear()


@pytest.fixture()
def admin_client(client, session):
    from core.security import ROLE_ADMIN
    from services.auth_service import create_user

    create_user(session, ADMIN_EMAIL, ADMIN_PASSWORD, ROLE_ADMIN, "Admin")
    response = client.post("/api/v1/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client
