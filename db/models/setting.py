from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Boolean, Text

from db.base import Base

DEFAULT_BIRTHDAY_TEMPLATE = "Happy Birthday, {{firstName}}!"
DEFAULT_JUBILEE_TEMPLATE = "Congrats on {{years}} years, {{firstName}}!"
DEFAULT_JUBILEE_YEARS = "5,10,15,20,25,30,35,40"
SETTINGS_ROW_ID = 1


class Setting(Base):
    """Single-row application settings, always stored with id 1."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    manager_emails: Mapped[str] = mapped_column(Text(), default="")
    birthday_email_template: Mapped[str] = mapped_column(Text(), default=DEFAULT_BIRTHDAY_TEMPLATE)
    jubilee_email_template: Mapped[str] = mapped_column(Text(), default=DEFAULT_JUBILEE_TEMPLATE)
    jubilee_years_csv: Mapped[str] = mapped_column(String(200), default=DEFAULT_JUBILEE_YEARS)

    smtp_host: Mapped[str] = mapped_column(String(200), default="")
    smtp_port: Mapped[int] = mapped_column(Integer, default=465)
    smtp_user: Mapped[str] = mapped_column(String(200), default="")
    smtp_pass: Mapped[str] = mapped_column(String(200), default="")
    smtp_from: Mapped[str] = mapped_column(String(200), default="")
    smtp_secure: Mapped[bool] = mapped_column(Boolean, default=True)

    send_on_birthday: Mapped[bool] = mapped_column(Boolean, default=True)
    send_on_jubilee: Mapped[bool] = mapped_column(Boolean, default=True)
    daily_send_hour: Mapped[int] = mapped_column(Integer, default=8)
