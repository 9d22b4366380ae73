from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from sqlalchemy.orm import Session
from loguru import logger

from app.dependencies import get_current_user, get_db_session, require_roles
from core.errors import EmployeeNotFoundError, NotFoundError, TemplateUnavailableError
from core.security import ROLE_ADMIN, ROLE_HR, ROLE_UNIT_LEAD
from db.repositories.employee_repo import EmployeeRepository
from schemas.employee import (
    EmployeeImportOut,
    EmployeeIn,
    EmployeeOut,
    EmployeeStatusIn,
    EmployeeStatusOut,
    EmployeeUpdate,
)
from services.auth_service import SessionUser
from services.employee_service import ImportTooLargeError, change_status, import_employees_from_excel_stream

MAX_UPLOAD_BYTES = 8 * 1024 * 1024

router = APIRouter()


@router.get("/", response_model=list[EmployeeOut])
def list_employees(
    limit: int = 100,
    offset: int = 0,
    status: str | None = None,
    q: str | None = None,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(get_current_user),
):
    return EmployeeRepository(session).list(limit=limit, offset=offset, status=status, q=q)


@router.post("/", response_model=EmployeeOut, status_code=201)
def create_employee(
    payload: EmployeeIn,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN, ROLE_HR)),
):
    logger.debug("create_employee payload: {} {}", payload.first_name, payload.last_name)
    return EmployeeRepository(session).create(**payload.model_dump())


@router.get("/{employee_id}", response_model=EmployeeOut)
def get_employee(
    employee_id: int,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(get_current_user),
):
    emp = EmployeeRepository(session).get_by_id(employee_id)
    if not emp:
        raise HTTPException(status_code=404, detail="Employee not found")
    return emp


@router.patch("/{employee_id}", response_model=EmployeeOut)
def update_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN, ROLE_HR)),
):
    emp = EmployeeRepository(session).get_by_id(employee_id)
    if not emp:
        raise HTTPException(status_code=404, detail="Employee not found")
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(emp, key, value)
    session.flush()
    return emp


@router.post("/{employee_id}/status", response_model=EmployeeStatusOut)
def update_status(
    employee_id: int,
    payload: EmployeeStatusIn,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN, ROLE_HR, ROLE_UNIT_LEAD)),
):
    try:
        employee, generated = change_status(
            session,
            employee_id,
            payload.status,
            start_date=payload.start_date,
            exit_date=payload.exit_date,
            overwrite=payload.overwrite,
        )
    except EmployeeNotFoundError as ex:
        raise HTTPException(status_code=404, detail=str(ex))
    except (NotFoundError, TemplateUnavailableError) as ex:
        raise HTTPException(status_code=400, detail=str(ex))
    return EmployeeStatusOut(employee=EmployeeOut.model_validate(employee), generated=generated)


@router.post("/import", response_model=EmployeeImportOut)
async def import_employees_file(
    file: UploadFile = File(...),
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN, ROLE_HR)),
):
    data = await file.read()
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File too large, please split it")
    try:
        result = import_employees_from_excel_stream(file_bytes=data, session=session, filename=file.filename)
    except ImportTooLargeError as ex:
        raise HTTPException(status_code=400, detail=str(ex))
    except ValueError as ex:
        logger.exception("Employee import failed: {}", ex)
        raise HTTPException(status_code=400, detail=f"Unreadable file: {ex}")
    return EmployeeImportOut(**result)
