from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from core.config import settings
from core.logging import configure_logging
from db.session import create_all, get_session
from services.auth_service import ensure_bootstrap_admin
from services.scheduler import get_scheduler, start_scheduler, shutdown_scheduler
from app.api.v1.routes import api_router

configure_logging()

app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    docs_url="/docs",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on {} {}: {}", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.on_event("startup")
async def on_startup() -> None:
    if settings.auto_create_tables:
        logger.info("Creating missing database tables")
        create_all()
    with get_session() as session:
        ensure_bootstrap_admin(session)
    start_scheduler(get_scheduler())


@app.on_event("shutdown")
async def on_shutdown() -> None:
    shutdown_scheduler(get_scheduler())
