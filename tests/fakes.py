from core.errors import MailDeliveryError
from services.mail_service import MailResult


class FakeMailer:
    """Records sends; addresses in ``fail_for`` raise, ``skip`` mimics missing SMTP config."""

    def __init__(self, fail_for=(), skip=False):
        self.fail_for = set(fail_for)
        self.skip = skip
        self.sent = []

    def send(self, to, subject, html):
        recipients = [to] if isinstance(to, str) else list(to)
        if self.skip:
            return MailResult(ok=False, skipped=True)
        for email in recipients:
            if email in self.fail_for:
                raise MailDeliveryError("connection refused")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return MailResult(ok=True, message_id=f"<{len(self.sent)}@test>")
