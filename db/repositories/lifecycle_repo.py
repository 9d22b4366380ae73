from __future__ import annotations

from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, or_

from db.models.employee import Employee
from db.models.lifecycle import LifecycleRole, LifecycleStatus, TaskTemplate, TaskAssignment


class LifecycleRoleRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, role_id: int) -> LifecycleRole | None:
        return self.session.get(LifecycleRole, role_id)

    def find_by_key(self, key: str) -> LifecycleRole | None:
        return self.session.scalars(select(LifecycleRole).where(LifecycleRole.key == key)).first()

    def find_default(self) -> LifecycleRole | None:
        # HR preferred over ADMIN as the fallback owner
        for key in ("HR", "ADMIN"):
            role = self.find_by_key(key)
            if role is not None:
                return role
        return None

    def list(self) -> list[LifecycleRole]:
        stmt = select(LifecycleRole).order_by(LifecycleRole.order_index.asc(), LifecycleRole.key.asc())
        return list(self.session.scalars(stmt))

    def create(self, **fields) -> LifecycleRole:
        role = LifecycleRole(**fields)
        self.session.add(role)
        self.session.flush()
        return role


class LifecycleStatusRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, status_id: int) -> LifecycleStatus | None:
        return self.session.get(LifecycleStatus, status_id)

    def find_by_key(self, key: str) -> LifecycleStatus | None:
        return self.session.scalars(select(LifecycleStatus).where(LifecycleStatus.key == key)).first()

    def find_default(self) -> LifecycleStatus | None:
        stmt = (
            select(LifecycleStatus)
            .where(or_(LifecycleStatus.key == "OPEN", LifecycleStatus.is_default.is_(True)))
            .order_by(LifecycleStatus.order_index.asc())
        )
        return self.session.scalars(stmt).first()

    def list(self) -> list[LifecycleStatus]:
        stmt = select(LifecycleStatus).order_by(LifecycleStatus.order_index.asc(), LifecycleStatus.key.asc())
        return list(self.session.scalars(stmt))

    def create(self, **fields) -> LifecycleStatus:
        status = LifecycleStatus(**fields)
        self.session.add(status)
        self.session.flush()
        return status


class TaskTemplateRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, template_id: int) -> TaskTemplate | None:
        return self.session.get(TaskTemplate, template_id)

    def list(self, task_type: str | None = None, active: bool | None = None) -> list[TaskTemplate]:
        stmt = select(TaskTemplate)
        if task_type is not None:
            stmt = stmt.where(TaskTemplate.type == task_type)
        if active is not None:
            stmt = stmt.where(TaskTemplate.active.is_(active))
        stmt = stmt.order_by(TaskTemplate.title.asc())
        return list(self.session.scalars(stmt))

    def create(self, **fields) -> TaskTemplate:
        template = TaskTemplate(**fields)
        self.session.add(template)
        self.session.flush()
        return template

    def delete(self, template: TaskTemplate) -> None:
        self.session.delete(template)
        self.session.flush()


class TaskAssignmentRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _with_relations(self):
        return select(TaskAssignment).options(
            selectinload(TaskAssignment.employee),
            selectinload(TaskAssignment.template),
            selectinload(TaskAssignment.owner_role),
            selectinload(TaskAssignment.status),
        )

    def get_by_id(self, task_id: int) -> TaskAssignment | None:
        return self.session.scalars(self._with_relations().where(TaskAssignment.id == task_id)).first()

    def find(self, employee_id: int, template_id: int) -> TaskAssignment | None:
        stmt = select(TaskAssignment).where(
            TaskAssignment.employee_id == employee_id,
            TaskAssignment.task_template_id == template_id,
        )
        return self.session.scalars(stmt).first()

    def search(
        self,
        task_type: str | None = None,
        status_id: int | None = None,
        owner_role_id: int | None = None,
        employee_id: int | None = None,
        q: str | None = None,
    ) -> list[TaskAssignment]:
        stmt = self._with_relations()
        if task_type:
            stmt = stmt.where(TaskAssignment.type == task_type)
        if status_id:
            stmt = stmt.where(TaskAssignment.status_id == status_id)
        if owner_role_id:
            stmt = stmt.where(TaskAssignment.owner_role_id == owner_role_id)
        if employee_id:
            stmt = stmt.where(TaskAssignment.employee_id == employee_id)
        if q and q.strip():
            pattern = f"%{q.strip()}%"
            stmt = (
                stmt.join(TaskAssignment.employee)
                .join(TaskAssignment.template)
                .where(
                    or_(
                        Employee.first_name.ilike(pattern),
                        Employee.last_name.ilike(pattern),
                        TaskTemplate.title.ilike(pattern),
                    )
                )
            )
        stmt = stmt.order_by(TaskAssignment.due_date.asc())
        return list(self.session.scalars(stmt))

    def add(self, task: TaskAssignment) -> TaskAssignment:
        self.session.add(task)
        self.session.flush()
        return task
