from fastapi import APIRouter, Depends, HTTPException
from typing import List

from app.dependencies import get_reminder_service, require_roles
from core.errors import ConflictError, NotFoundError
from core.security import ROLE_ADMIN, ROLE_HR
from schemas.reminder import ReminderTypeIn, ReminderTypeOut, ReminderTypeUpdate
from services.auth_service import SessionUser
from services.reminder_service import ReminderService

router = APIRouter()


@router.get("/", response_model=List[ReminderTypeOut])
def list_reminder_types(
    service: ReminderService = Depends(get_reminder_service),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN, ROLE_HR)),
):
    return service.types.list()


@router.post("/", response_model=ReminderTypeOut, status_code=201)
def create_reminder_type(
    payload: ReminderTypeIn,
    service: ReminderService = Depends(get_reminder_service),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
):
    try:
        return service.create_type(**payload.model_dump())
    except ConflictError as ex:
        raise HTTPException(status_code=409, detail=str(ex))


@router.post("/seed")
def seed_reminder_types(
    service: ReminderService = Depends(get_reminder_service),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
) -> dict:
    return {"created": service.seed_types()}


@router.patch("/{type_id}", response_model=ReminderTypeOut)
def update_reminder_type(
    type_id: int,
    payload: ReminderTypeUpdate,
    service: ReminderService = Depends(get_reminder_service),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
):
    try:
        return service.update_type(type_id, **payload.model_dump(exclude_unset=True))
    except NotFoundError as ex:
        raise HTTPException(status_code=404, detail=str(ex))
    except ConflictError as ex:
        raise HTTPException(status_code=409, detail=str(ex))


@router.delete("/{type_id}")
def delete_reminder_type(
    type_id: int,
    service: ReminderService = Depends(get_reminder_service),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
) -> dict:
    try:
        service.delete_type(type_id)
    except NotFoundError as ex:
        raise HTTPException(status_code=404, detail=str(ex))
    except ConflictError as ex:
        raise HTTPException(status_code=409, detail=str(ex))
    return {"ok": True}
