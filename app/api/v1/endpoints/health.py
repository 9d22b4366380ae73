from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.dependencies import get_db_session
from core.config import settings

router = APIRouter()


@router.get("/health")
def health(session: Session = Depends(get_db_session)) -> dict:
    database = "ok"
    try:
        session.execute(text("SELECT 1"))
    except SQLAlchemyError as ex:
        logger.warning("Health check database query failed: {}", ex)
        database = "unavailable"
    return {"status": "ok", "app": settings.app_name, "env": settings.app_env, "database": database}
