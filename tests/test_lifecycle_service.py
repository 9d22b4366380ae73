from datetime import date, datetime

import pytest

from core.errors import EmployeeNotFoundError, NotFoundError, TemplateUnavailableError
from db.repositories.lifecycle_repo import (
    LifecycleRoleRepository,
    LifecycleStatusRepository,
    TaskAssignmentRepository,
    TaskTemplateRepository,
)
from services.lifecycle_service import describe_due, generate_tasks, seed_defaults, update_task


@pytest.fixture()
def templates(session):
    repo = TaskTemplateRepository(session)
    return {
        "laptop": repo.create(title="Laptop bestellen", type="ONBOARDING", relative_due_days=-7),
        "badge": repo.create(title="Zugangskarte", type="ONBOARDING", relative_due_days=0),
        "inactive": repo.create(title="Alt", type="ONBOARDING", active=False),
        "return": repo.create(title="Laptop zurückgeben", type="OFFBOARDING", relative_due_days=0),
    }


def test_generate_onboarding_tasks(session, make_employee, templates):
    employee = make_employee(start_date=date(2025, 7, 1))
    assert generate_tasks(session, employee.id, "ONBOARDING") == 2

    tasks = TaskAssignmentRepository(session).search(employee_id=employee.id)
    due = {t.template.title: t.due_date for t in tasks}
    assert due == {"Laptop bestellen": date(2025, 6, 24), "Zugangskarte": date(2025, 7, 1)}
    assert all(t.status.key == "OPEN" for t in tasks)
    # no owner on the template falls back to HR
    assert all(t.owner_role.key == "HR" for t in tasks)


def test_generate_is_idempotent_without_overwrite(session, make_employee, templates):
    employee = make_employee(start_date=date(2025, 7, 1))
    generate_tasks(session, employee.id, "ONBOARDING")
    assert generate_tasks(session, employee.id, "ONBOARDING") == 0
    assert len(TaskAssignmentRepository(session).search(employee_id=employee.id)) == 2


def test_overwrite_resets_existing_tasks(session, make_employee, templates):
    seed_defaults(session)
    employee = make_employee(start_date=date(2025, 7, 1))
    generate_tasks(session, employee.id, "ONBOARDING")
    task = TaskAssignmentRepository(session).search(employee_id=employee.id)[0]
    done = LifecycleStatusRepository(session).find_by_key("DONE")
    update_task(session, task.id, status_id=done.id, now=datetime(2025, 6, 20, 10, 0))
    assert task.completed_at == datetime(2025, 6, 20, 10, 0)

    employee.start_date = date(2025, 8, 1)
    assert generate_tasks(session, employee.id, "ONBOARDING", overwrite=True) == 2
    refreshed = TaskAssignmentRepository(session).get_by_id(task.id)
    assert refreshed.status.key == "OPEN"
    assert refreshed.completed_at is None
    assert refreshed.due_date == date(2025, 7, 25)


def test_missing_anchor_generates_nothing(session, make_employee, templates):
    employee = make_employee()
    assert generate_tasks(session, employee.id, "OFFBOARDING") == 0


def test_offboarding_uses_exit_date(session, make_employee, templates):
    employee = make_employee(start_date=date(2020, 1, 1), exit_date=date(2025, 9, 30))
    assert generate_tasks(session, employee.id, "OFFBOARDING") == 1
    task = TaskAssignmentRepository(session).search(task_type="OFFBOARDING")[0]
    assert task.due_date == date(2025, 9, 30)


def test_single_template_must_match_type_and_be_active(session, make_employee, templates):
    employee = make_employee(start_date=date(2025, 7, 1))
    with pytest.raises(TemplateUnavailableError):
        generate_tasks(session, employee.id, "ONBOARDING", template_id=templates["inactive"].id)
    with pytest.raises(TemplateUnavailableError):
        generate_tasks(session, employee.id, "ONBOARDING", template_id=templates["return"].id)
    with pytest.raises(NotFoundError):
        generate_tasks(session, employee.id, "ONBOARDING", template_id=9999)
    assert generate_tasks(session, employee.id, "ONBOARDING", template_id=templates["badge"].id) == 1


def test_unknown_employee(session, templates):
    with pytest.raises(EmployeeNotFoundError):
        generate_tasks(session, 12345, "ONBOARDING")


def test_seed_defaults_is_repeatable(session):
    assert seed_defaults(session) == {"roles": 6, "statuses": 4}
    assert seed_defaults(session) == {"roles": 0, "statuses": 0}
    assert LifecycleRoleRepository(session).find_default().key == "HR"


def test_describe_due():
    today = date(2025, 6, 10)
    assert describe_due(date(2025, 6, 8), today)["overdue_days"] == 2
    assert describe_due(date(2025, 6, 10), today)["is_due_today"]
    assert describe_due(date(2025, 6, 13), today)["days_until_due"] == 3
    assert describe_due(None, today) == {
        "is_overdue": False,
        "is_due_today": False,
        "days_until_due": None,
        "overdue_days": None,
    }
