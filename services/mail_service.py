from __future__ import annotations
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
import re
import smtplib
from typing import Any, Mapping, Protocol, Sequence

from loguru import logger

from core.config import settings
from core.errors import MailDeliveryError

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def render_template(template: str, values: Mapping[str, Any]) -> str:
    """Substitute ``{{ key }}`` placeholders; unknown keys render as empty strings."""

    def _replace(match: re.Match) -> str:
        value = values.get(match.group(1))
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(_replace, template or "")


@dataclass(frozen=True)
class MailResult:
    ok: bool
    skipped: bool = False
    message_id: str | None = None


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int
    user: str
    password: str
    sender: str
    secure: bool = True
    timeout: int = 15

    @property
    def complete(self) -> bool:
        return bool(self.host and self.user and self.password and self.sender)


class MailSender(Protocol):
    def send(self, to: str | Sequence[str], subject: str, html: str) -> MailResult: ...


class MailService:
    def __init__(self, config: SmtpConfig) -> None:
        self.config = config

    @classmethod
    def from_settings(cls, row: Any = None) -> "MailService":
        """Build from the settings row, falling back to environment values per field."""
        host = (getattr(row, "smtp_host", None) or settings.smtp_host).strip()
        port = int(getattr(row, "smtp_port", None) or settings.smtp_port)
        user = (getattr(row, "smtp_user", None) or settings.smtp_user).strip()
        password = getattr(row, "smtp_pass", None) or settings.smtp_pass
        sender = (getattr(row, "smtp_from", None) or settings.smtp_from or user).strip()
        secure = getattr(row, "smtp_secure", None)
        if secure is None:
            secure = port == 465
        return cls(
            SmtpConfig(
                host=host,
                port=port,
                user=user,
                password=password,
                sender=sender,
                secure=bool(secure),
                timeout=settings.smtp_timeout,
            )
        )

    def send(self, to: str | Sequence[str], subject: str, html: str) -> MailResult:
        recipients = [to] if isinstance(to, str) else list(to)
        if not self.config.complete:
            logger.warning("SMTP not fully configured; skipping send to {}", recipients)
            return MailResult(ok=False, skipped=True)

        message = EmailMessage()
        message["From"] = self.config.sender
        message["To"] = ", ".join(recipients)
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")

        try:
            self._deliver(message)
        except (smtplib.SMTPException, OSError) as ex:
            raise MailDeliveryError(str(ex) or ex.__class__.__name__) from ex

        logger.info("Mail sent to {} subject={!r}", recipients, subject)
        return MailResult(ok=True, message_id=message["Message-ID"])

    def _deliver(self, message: EmailMessage) -> None:
        """Implicit TLS on 465, STARTTLS upgrade elsewhere.

        ``secure`` makes the upgrade mandatory on ports other than 465.
        """
        config = self.config
        if config.port == 465:
            with smtplib.SMTP_SSL(config.host, config.port, timeout=config.timeout) as smtp:
                smtp.login(config.user, config.password)
                smtp.send_message(message)
            return

        with smtplib.SMTP(config.host, config.port, timeout=config.timeout) as smtp:
            smtp.ehlo()
            if smtp.has_extn("starttls"):
                smtp.starttls()
                smtp.ehlo()
            elif config.secure:
                raise MailDeliveryError(f"{config.host}:{config.port} does not offer STARTTLS")
            smtp.login(config.user, config.password)
            smtp.send_message(message)
