from __future__ import annotations
from datetime import date, datetime, timedelta

from loguru import logger
from sqlalchemy.orm import Session

from core.clock import local_now, local_today
from core.errors import EmployeeNotFoundError, NotFoundError, TemplateUnavailableError
from db.models.employee import Employee
from db.models.lifecycle import (
    TASK_ONBOARDING,
    LifecycleRole,
    LifecycleStatus,
    TaskAssignment,
    TaskTemplate,
)
from db.repositories.employee_repo import EmployeeRepository
from db.repositories.lifecycle_repo import (
    LifecycleRoleRepository,
    LifecycleStatusRepository,
    TaskAssignmentRepository,
    TaskTemplateRepository,
)
from services.jubilee import to_date

DEFAULT_ROLES = [
    {"key": "ADMIN", "label": "Admin", "description": "Administratoren", "order_index": 0},
    {"key": "HR", "label": "HR", "description": "Human Resources", "order_index": 1},
    {"key": "IT", "label": "IT", "description": "IT-Abteilung", "order_index": 2},
    {"key": "UNIT_LEAD", "label": "Unit-Leiter", "description": "Abteilungsleiter", "order_index": 3},
    {"key": "TEAM_LEAD", "label": "Team-Leiter", "description": "Teamleiter", "order_index": 4},
    {"key": "PEOPLE_MANAGER", "label": "People Manager", "description": "Personalverantwortliche", "order_index": 5},
]

DEFAULT_STATUSES = [
    {"key": "OPEN", "label": "Offen", "description": "Aufgabe wurde noch nicht begonnen", "is_done": False, "is_default": True, "order_index": 0},
    {"key": "IN_PROGRESS", "label": "In Bearbeitung", "description": "Aufgabe wird gerade bearbeitet", "is_done": False, "is_default": False, "order_index": 1},
    {"key": "BLOCKED", "label": "Blockiert", "description": "Aufgabe kann nicht fortgesetzt werden", "is_done": False, "is_default": False, "order_index": 2},
    {"key": "DONE", "label": "Erledigt", "description": "Aufgabe wurde abgeschlossen", "is_done": True, "is_default": False, "order_index": 3},
]


def anchor_date(employee: Employee, task_type: str) -> date | None:
    """Hire date for onboarding, exit date for offboarding."""
    value = employee.start_date if task_type == TASK_ONBOARDING else employee.exit_date
    return to_date(value)


def ensure_open_status(session: Session) -> LifecycleStatus:
    repo = LifecycleStatusRepository(session)
    status = repo.find_default()
    if status is None:
        logger.info("No default lifecycle status found, creating OPEN")
        status = repo.create(**DEFAULT_STATUSES[0])
    return status


def ensure_default_role(session: Session) -> LifecycleRole:
    repo = LifecycleRoleRepository(session)
    role = repo.find_default()
    if role is None:
        logger.info("No default lifecycle role found, creating HR")
        role = repo.create(key="HR", label="HR", description="Human Resources", order_index=0)
    return role


def _select_templates(session: Session, task_type: str, template_id: int | None) -> list[TaskTemplate]:
    repo = TaskTemplateRepository(session)
    if template_id is None:
        return repo.list(task_type=task_type, active=True)

    template = repo.get_by_id(template_id)
    if template is None:
        raise NotFoundError(f"Task template {template_id} not found")
    reasons = []
    if template.type != task_type:
        reasons.append(f"type is {template.type}, not {task_type}")
    if not template.active:
        reasons.append("template is not active")
    if reasons:
        raise TemplateUnavailableError(f'Template "{template.title}" cannot be used: {", ".join(reasons)}')
    return [template]


def generate_tasks(
    session: Session,
    employee_id: int,
    task_type: str,
    overwrite: bool = False,
    template_id: int | None = None,
) -> int:
    """Create task assignments for every active template of ``task_type``.

    Without ``overwrite`` existing (employee, template) pairs are left alone;
    with it they are reset to the open status and get a recomputed due date
    and owner. Returns the number of created or updated assignments; an
    employee without the anchor date yields 0.
    """
    employee = EmployeeRepository(session).get_by_id(employee_id)
    if employee is None:
        raise EmployeeNotFoundError(f"Employee {employee_id} not found")

    anchor = anchor_date(employee, task_type)
    if anchor is None:
        logger.info("Employee {} has no anchor date for {}, nothing generated", employee_id, task_type)
        return 0

    templates = _select_templates(session, task_type, template_id)
    if not templates:
        logger.info("No active {} templates found", task_type)
        return 0

    open_status = ensure_open_status(session)
    default_role = ensure_default_role(session)
    tasks = TaskAssignmentRepository(session)

    generated = 0
    for template in templates:
        due = anchor + timedelta(days=template.relative_due_days or 0)
        owner = template.owner_role or default_role
        existing = tasks.find(employee_id, template.id)

        if existing is not None:
            if not overwrite:
                logger.debug("Task for employee {} / template {} exists, skipped", employee_id, template.id)
                continue
            existing.type = task_type
            existing.due_date = due
            existing.owner_role = owner
            existing.status = open_status
            existing.completed_at = None
            generated += 1
            continue

        tasks.add(
            TaskAssignment(
                employee_id=employee_id,
                task_template_id=template.id,
                type=task_type,
                due_date=due,
                owner_role_id=owner.id,
                status_id=open_status.id,
            )
        )
        generated += 1

    session.flush()
    logger.info("Generated {} {} tasks for employee {}", generated, task_type, employee_id)
    return generated


def seed_defaults(session: Session) -> dict[str, int]:
    """Insert the default roles and statuses that do not exist yet."""
    roles = LifecycleRoleRepository(session)
    statuses = LifecycleStatusRepository(session)
    created_roles = 0
    created_statuses = 0
    for data in DEFAULT_ROLES:
        if roles.find_by_key(data["key"]) is None:
            roles.create(**data)
            created_roles += 1
    for data in DEFAULT_STATUSES:
        if statuses.find_by_key(data["key"]) is None:
            statuses.create(**data)
            created_statuses += 1
    return {"roles": created_roles, "statuses": created_statuses}


def describe_due(due: date | None, today: date | None = None) -> dict:
    """Overdue / due-today flags for a task due date."""
    today = today or local_today()
    info = {"is_overdue": False, "is_due_today": False, "days_until_due": None, "overdue_days": None}
    if due is None:
        return info
    diff = (due - today).days
    if diff < 0:
        info["is_overdue"] = True
        info["overdue_days"] = -diff
    elif diff == 0:
        info["is_due_today"] = True
        info["days_until_due"] = 0
    else:
        info["days_until_due"] = diff
    return info


def update_task(
    session: Session,
    task_id: int,
    status_id: int | None = None,
    notes: str | None = None,
    notes_set: bool = False,
    due_date: date | None = None,
    now: datetime | None = None,
) -> TaskAssignment:
    task = TaskAssignmentRepository(session).get_by_id(task_id)
    if task is None:
        raise NotFoundError(f"Task {task_id} not found")
    if status_id is not None:
        status = LifecycleStatusRepository(session).get_by_id(status_id)
        if status is None:
            raise NotFoundError(f"Status {status_id} not found")
        task.status = status
        task.completed_at = (now or local_now()) if status.is_done else None
    if notes_set:
        task.notes = notes
    if due_date is not None:
        task.due_date = due_date
    session.flush()
    return task
