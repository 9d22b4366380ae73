from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta

from loguru import logger
from sqlalchemy.orm import Session

from core.clock import local_now
from core.config import settings
from core.errors import AuthenticationError
from core.security import ROLE_ADMIN, hash_password, new_session_token, verify_password
from db.models.user import User
from db.repositories.user_repo import AuthSessionRepository, UserRepository


@dataclass(frozen=True)
class SessionUser:
    id: int
    email: str
    name: str | None
    role: str


def _to_session_user(user: User) -> SessionUser:
    return SessionUser(id=user.id, email=user.email, name=user.name, role=user.role)


def has_role(user: SessionUser | None, *roles: str) -> bool:
    return user is not None and user.role in roles


def login(session: Session, email: str, password: str, now: datetime | None = None) -> tuple[str, datetime, SessionUser]:
    """Check credentials and open a new session; returns (token, expires_at, user)."""
    user = UserRepository(session).find_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid email or password")
    now = now or local_now()
    token = new_session_token()
    expires_at = now + timedelta(seconds=settings.session_ttl_seconds)
    AuthSessionRepository(session).create(token=token, user_id=user.id, expires_at=expires_at)
    logger.info("User {} logged in", user.email)
    return token, expires_at, _to_session_user(user)


def logout(session: Session, token: str | None) -> None:
    if not token:
        return
    AuthSessionRepository(session).delete_by_token(token)


def fetch_session_user(session: Session, token: str | None, now: datetime | None = None) -> SessionUser | None:
    """Resolve a session token; expired sessions are deleted and yield None."""
    if not token:
        return None
    repo = AuthSessionRepository(session)
    auth_session = repo.find_by_token(token)
    if auth_session is None:
        return None
    if auth_session.expires_at < (now or local_now()):
        repo.delete(auth_session)
        return None
    return _to_session_user(auth_session.user)


def create_user(session: Session, email: str, password: str, role: str, name: str | None = None) -> User:
    return UserRepository(session).create(email=email, password_hash=hash_password(password), role=role, name=name)


def ensure_bootstrap_admin(session: Session) -> User | None:
    """Create the configured admin account when the user table is empty."""
    repo = UserRepository(session)
    if repo.count() > 0:
        return None
    if not settings.bootstrap_admin_email or not settings.bootstrap_admin_password:
        logger.warning("No users exist and no bootstrap admin is configured")
        return None
    logger.info("Creating bootstrap admin {}", settings.bootstrap_admin_email)
    return create_user(
        session,
        email=settings.bootstrap_admin_email,
        password=settings.bootstrap_admin_password,
        role=ROLE_ADMIN,
        name="Administrator",
    )
