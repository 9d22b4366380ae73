from datetime import datetime

from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, delete, func

from db.models.user import User, AuthSession


class UserRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def find_by_email(self, email: str) -> User | None:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return self.session.scalars(stmt).first()

    def count(self) -> int:
        return int(self.session.scalar(select(func.count()).select_from(User)) or 0)

    def create(self, email: str, password_hash: str, role: str, name: str | None = None) -> User:
        user = User(email=email.strip().lower(), password_hash=password_hash, role=role, name=name)
        self.session.add(user)
        self.session.flush()
        return user


class AuthSessionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, token: str, user_id: int, expires_at: datetime) -> AuthSession:
        auth_session = AuthSession(token=token, user_id=user_id, expires_at=expires_at)
        self.session.add(auth_session)
        self.session.flush()
        return auth_session

    def find_by_token(self, token: str) -> AuthSession | None:
        stmt = select(AuthSession).options(selectinload(AuthSession.user)).where(AuthSession.token == token)
        return self.session.scalars(stmt).first()

    def delete(self, auth_session: AuthSession) -> None:
        self.session.delete(auth_session)
        self.session.flush()

    def delete_by_token(self, token: str) -> None:
        self.session.execute(delete(AuthSession).where(AuthSession.token == token))
