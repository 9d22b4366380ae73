import smtplib
from types import SimpleNamespace

import pytest

from core.errors import MailDeliveryError
from services.mail_service import MailService, SmtpConfig, render_template


def test_render_template_substitutes_placeholders():
    out = render_template("Congrats on {{years}} years, {{ firstName }}!", {"years": 10, "firstName": "Anna"})
    assert out == "Congrats on 10 years, Anna!"


def test_render_template_missing_key_renders_empty():
    assert render_template("Hi {{firstName}} {{lastName}}", {"firstName": "Anna"}) == "Hi Anna "


def test_incomplete_config_skips_send():
    service = MailService(SmtpConfig(host="", port=465, user="", password="", sender=""))
    result = service.send("a@example.com", "Subject", "<p>x</p>")
    assert result.skipped
    assert not result.ok


def test_from_settings_prefers_row_values():
    row = SimpleNamespace(
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="user",
        smtp_pass="secret",
        smtp_from="",
        smtp_secure=False,
    )
    service = MailService.from_settings(row)
    assert service.config.host == "smtp.example.com"
    assert service.config.port == 587
    assert service.config.sender == "user"
    assert service.config.secure is False
    assert service.config.complete


def test_transport_error_raises_delivery_error(monkeypatch):
    def _refuse(*args, **kwargs):
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr(smtplib, "SMTP_SSL", _refuse)
    service = MailService(SmtpConfig(host="smtp.example.com", port=465, user="u", password="p", sender="u@example.com"))
    with pytest.raises(MailDeliveryError, match="refused"):
        service.send("a@example.com", "Subject", "<p>x</p>")


class _StartTlsServer:
    """Stands in for ``smtplib.SMTP`` and records the calls made on it."""

    instances: list = []

    def __init__(self, host, port, timeout=None, offers_starttls=True):
        self.host = host
        self.port = port
        self.offers_starttls = offers_starttls
        self.calls = []
        _StartTlsServer.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def ehlo(self):
        self.calls.append("ehlo")

    def has_extn(self, name):
        return name == "starttls" and self.offers_starttls

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append("login")

    def send_message(self, message):
        self.calls.append("send")


def _no_implicit_tls(*args, **kwargs):
    raise AssertionError("SMTP_SSL must only be used on port 465")


def test_submission_port_upgrades_with_starttls(monkeypatch):
    _StartTlsServer.instances = []
    monkeypatch.setattr(smtplib, "SMTP", _StartTlsServer)
    monkeypatch.setattr(smtplib, "SMTP_SSL", _no_implicit_tls)
    config = SmtpConfig(host="smtp.example.com", port=587, user="u", password="p", sender="u@example.com", secure=True)

    result = MailService(config).send("a@example.com", "Subject", "<p>x</p>")

    assert result.ok
    assert _StartTlsServer.instances[0].calls == ["ehlo", "starttls", "ehlo", "login", "send"]


def test_secure_flag_requires_starttls(monkeypatch):
    monkeypatch.setattr(smtplib, "SMTP", lambda *a, **kw: _StartTlsServer(*a, offers_starttls=False, **kw))
    secure = SmtpConfig(host="smtp.example.com", port=25, user="u", password="p", sender="u@example.com", secure=True)
    with pytest.raises(MailDeliveryError, match="STARTTLS"):
        MailService(secure).send("a@example.com", "Subject", "<p>x</p>")

    _StartTlsServer.instances = []
    plain = SmtpConfig(host="smtp.example.com", port=25, user="u", password="p", sender="u@example.com", secure=False)
    assert MailService(plain).send("a@example.com", "Subject", "<p>x</p>").ok
    assert "starttls" not in _StartTlsServer.instances[0].calls
