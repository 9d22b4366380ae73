from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional
from loguru import logger
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, get_db_session, get_reminder_service, require_roles
from core.errors import EmployeeNotFoundError, NotFoundError, TemplateUnavailableError
from core.security import ROLE_ADMIN, ROLE_HR, ROLE_UNIT_LEAD
from db.repositories.lifecycle_repo import (
    LifecycleRoleRepository,
    LifecycleStatusRepository,
    TaskAssignmentRepository,
    TaskTemplateRepository,
)
from schemas.lifecycle import (
    GenerateIn,
    GenerateOut,
    RoleIn,
    RoleOut,
    RoleUpdate,
    StatusIn,
    StatusOut,
    StatusUpdate,
    TaskOut,
    TaskPatch,
    TemplateIn,
    TemplateOut,
    TemplateUpdate,
)
from services.auth_service import SessionUser
from services.lifecycle_service import describe_due, generate_tasks, seed_defaults, update_task
from services.reminder_service import ReminderService

router = APIRouter()


def _apply(obj, fields: dict, session: Session):
    for key, value in fields.items():
        setattr(obj, key, value)
    session.flush()
    return obj


def _task_out(task) -> TaskOut:
    out = TaskOut.model_validate(task)
    return out.model_copy(update=describe_due(task.due_date))


@router.post("/seed")
def seed_lifecycle(
    session: Session = Depends(get_db_session),
    reminder_service: ReminderService = Depends(get_reminder_service),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
) -> dict:
    created = seed_defaults(session)
    created["reminder_types"] = reminder_service.seed_types()
    logger.info("Seeded defaults: {}", created)
    return created


# roles

@router.get("/roles", response_model=List[RoleOut])
def list_roles(session: Session = Depends(get_db_session), _: SessionUser = Depends(get_current_user)):
    return LifecycleRoleRepository(session).list()


@router.post("/roles", response_model=RoleOut, status_code=201)
def create_role(
    payload: RoleIn,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
):
    repo = LifecycleRoleRepository(session)
    if repo.find_by_key(payload.key) is not None:
        raise HTTPException(status_code=409, detail=f"Role {payload.key} already exists")
    return repo.create(**payload.model_dump())


@router.patch("/roles/{role_id}", response_model=RoleOut)
def update_role(
    role_id: int,
    payload: RoleUpdate,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
):
    role = LifecycleRoleRepository(session).get_by_id(role_id)
    if role is None:
        raise HTTPException(status_code=404, detail="Role not found")
    return _apply(role, payload.model_dump(exclude_unset=True), session)


@router.delete("/roles/{role_id}")
def delete_role(
    role_id: int,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
) -> dict:
    role = LifecycleRoleRepository(session).get_by_id(role_id)
    if role is None:
        raise HTTPException(status_code=404, detail="Role not found")
    session.delete(role)
    session.flush()
    return {"ok": True}


# statuses

@router.get("/statuses", response_model=List[StatusOut])
def list_statuses(session: Session = Depends(get_db_session), _: SessionUser = Depends(get_current_user)):
    return LifecycleStatusRepository(session).list()


@router.post("/statuses", response_model=StatusOut, status_code=201)
def create_status(
    payload: StatusIn,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
):
    repo = LifecycleStatusRepository(session)
    if repo.find_by_key(payload.key) is not None:
        raise HTTPException(status_code=409, detail=f"Status {payload.key} already exists")
    return repo.create(**payload.model_dump())


@router.patch("/statuses/{status_id}", response_model=StatusOut)
def update_status(
    status_id: int,
    payload: StatusUpdate,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
):
    status = LifecycleStatusRepository(session).get_by_id(status_id)
    if status is None:
        raise HTTPException(status_code=404, detail="Status not found")
    return _apply(status, payload.model_dump(exclude_unset=True), session)


@router.delete("/statuses/{status_id}")
def delete_status(
    status_id: int,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
) -> dict:
    status = LifecycleStatusRepository(session).get_by_id(status_id)
    if status is None:
        raise HTTPException(status_code=404, detail="Status not found")
    session.delete(status)
    session.flush()
    return {"ok": True}


# templates

@router.get("/templates", response_model=List[TemplateOut])
def list_templates(
    type: Optional[str] = None,
    active: Optional[bool] = None,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(get_current_user),
):
    return TaskTemplateRepository(session).list(task_type=type, active=active)


@router.post("/templates", response_model=TemplateOut, status_code=201)
def create_template(
    payload: TemplateIn,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
):
    if payload.owner_role_id is not None and LifecycleRoleRepository(session).get_by_id(payload.owner_role_id) is None:
        raise HTTPException(status_code=400, detail="Unknown owner role")
    return TaskTemplateRepository(session).create(**payload.model_dump())


@router.patch("/templates/{template_id}", response_model=TemplateOut)
def update_template(
    template_id: int,
    payload: TemplateUpdate,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
):
    template = TaskTemplateRepository(session).get_by_id(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return _apply(template, payload.model_dump(exclude_unset=True), session)


@router.delete("/templates/{template_id}")
def delete_template(
    template_id: int,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
) -> dict:
    repo = TaskTemplateRepository(session)
    template = repo.get_by_id(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Template not found")
    repo.delete(template)
    return {"ok": True}


# tasks

@router.post("/generate", response_model=GenerateOut)
def generate(
    payload: GenerateIn,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN, ROLE_HR, ROLE_UNIT_LEAD)),
):
    try:
        generated = generate_tasks(
            session,
            payload.employee_id,
            payload.type,
            overwrite=payload.overwrite,
            template_id=payload.template_id,
        )
    except EmployeeNotFoundError as ex:
        raise HTTPException(status_code=404, detail=str(ex))
    except TemplateUnavailableError as ex:
        raise HTTPException(status_code=400, detail=str(ex))
    except NotFoundError as ex:
        raise HTTPException(status_code=404, detail=str(ex))
    return GenerateOut(generated=generated)


@router.get("/tasks", response_model=List[TaskOut])
def list_tasks(
    type: Optional[str] = None,
    status_id: Optional[int] = None,
    owner_role_id: Optional[int] = None,
    employee_id: Optional[int] = None,
    q: Optional[str] = None,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(get_current_user),
):
    tasks = TaskAssignmentRepository(session).search(
        task_type=type,
        status_id=status_id,
        owner_role_id=owner_role_id,
        employee_id=employee_id,
        q=q,
    )
    return [_task_out(task) for task in tasks]


@router.patch("/tasks/{task_id}", response_model=TaskOut)
def patch_task(
    task_id: int,
    payload: TaskPatch,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(get_current_user),
):
    fields = payload.model_dump(exclude_unset=True)
    try:
        task = update_task(
            session,
            task_id,
            status_id=fields.get("status_id"),
            notes=fields.get("notes"),
            notes_set="notes" in fields,
            due_date=fields.get("due_date"),
        )
    except NotFoundError as ex:
        raise HTTPException(status_code=404, detail=str(ex))
    return _task_out(task)
