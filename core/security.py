import secrets

from werkzeug.security import check_password_hash, generate_password_hash

ROLE_ADMIN = "ADMIN"
ROLE_HR = "HR"
ROLE_PEOPLE_MANAGER = "PEOPLE_MANAGER"
ROLE_UNIT_LEAD = "UNIT_LEAD"
ROLE_TEAM_LEAD = "TEAM_LEAD"

ROLES = (ROLE_ADMIN, ROLE_HR, ROLE_PEOPLE_MANAGER, ROLE_UNIT_LEAD, ROLE_TEAM_LEAD)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def new_session_token() -> str:
    # 32 random bytes, hex encoded
    return secrets.token_hex(32)
