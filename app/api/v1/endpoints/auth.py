from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, get_db_session, get_session_token, require_roles
from core.config import settings
from core.errors import AuthenticationError
from core.security import ROLE_ADMIN
from db.repositories.user_repo import UserRepository
from schemas.auth import LoginIn, UserCreateIn, UserOut
from services import auth_service
from services.auth_service import SessionUser

router = APIRouter()


def _set_session_cookie(response: Response, token: str, max_age: int) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=max_age,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


@router.post("/login", response_model=UserOut)
def login(payload: LoginIn, response: Response, session: Session = Depends(get_db_session)):
    try:
        token, _, user = auth_service.login(session, payload.email, payload.password)
    except AuthenticationError as ex:
        raise HTTPException(status_code=401, detail=str(ex))
    _set_session_cookie(response, token, settings.session_ttl_seconds)
    return user


@router.post("/logout")
def logout(
    response: Response,
    token: str | None = Depends(get_session_token),
    session: Session = Depends(get_db_session),
) -> dict:
    auth_service.logout(session, token)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return {"ok": True}


@router.get("/me", response_model=UserOut)
def me(user: SessionUser = Depends(get_current_user)):
    return user


@router.post("/users", response_model=UserOut, status_code=201)
def create_user(
    payload: UserCreateIn,
    session: Session = Depends(get_db_session),
    _: SessionUser = Depends(require_roles(ROLE_ADMIN)),
):
    if UserRepository(session).find_by_email(payload.email) is not None:
        raise HTTPException(status_code=409, detail="User already exists")
    return auth_service.create_user(session, payload.email, payload.password, payload.role, payload.name)
