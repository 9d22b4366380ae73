from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
import os
import logging


class Settings(BaseSettings):
    app_name: str = Field(default="HR_REMINDERS")
    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")
    timezone: str = Field(default="Europe/Berlin")

    database_url: str = Field(alias="DATABASE_URL", default="sqlite+pysqlite:///./app.db")
    auto_create_tables: bool = Field(alias="AUTO_CREATE_TABLES", default=True)

    # SMTP fallbacks, used when the settings row leaves a field blank
    smtp_host: str = Field(alias="SMTP_HOST", default="")
    smtp_port: int = Field(alias="SMTP_PORT", default=465)
    smtp_user: str = Field(alias="SMTP_USER", default="")
    smtp_pass: str = Field(alias="SMTP_PASS", default="")
    smtp_from: str = Field(alias="SMTP_FROM", default="")
    smtp_timeout: int = Field(alias="SMTP_TIMEOUT", default=15)

    session_cookie_name: str = Field(alias="SESSION_COOKIE_NAME", default="rc_session")
    session_ttl_seconds: int = Field(alias="SESSION_TTL_SECONDS", default=8 * 60 * 60)
    session_cookie_secure: bool = Field(alias="SESSION_COOKIE_SECURE", default=True)

    bootstrap_admin_email: str = Field(alias="BOOTSTRAP_ADMIN_EMAIL", default="")
    bootstrap_admin_password: str = Field(alias="BOOTSTRAP_ADMIN_PASSWORD", default="")

    employee_email_domain: str = Field(alias="EMPLOYEE_EMAIL_DOMAIN", default="example.com")

    scheduler_enabled: bool = Field(alias="SCHEDULER_ENABLED", default=False)
    schedule_cron_reminders: str = Field(alias="SCHEDULE_CRON_REMINDERS", default="*/15 * * * *")
    schedule_cron_daily: str = Field(alias="SCHEDULE_CRON_DAILY", default="0 * * * *")

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
        populate_by_name=True,
    )


settings = Settings()  # type: ignore

# Lightweight diagnostics to verify env loading (avoids circular import with core.logging)
_logger = logging.getLogger("core.config")
_logger.info(
    "Settings loaded | env_file=%s | app_env=%s | db=%s | tz=%s | scheduler_enabled=%s",
    os.getenv("ENV_FILE", ".env"),
    settings.app_env,
    settings.database_url,
    settings.timezone,
    settings.scheduler_enabled,
)
