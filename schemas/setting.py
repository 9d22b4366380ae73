import re

from pydantic import BaseModel, Field, field_validator


class SettingsOut(BaseModel):
    manager_emails: str
    birthday_email_template: str
    jubilee_email_template: str
    jubilee_years_csv: str
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_from: str
    smtp_secure: bool
    smtp_pass_set: bool = False
    send_on_birthday: bool
    send_on_jubilee: bool
    daily_send_hour: int

    class Config:
        from_attributes = True


class SettingsIn(BaseModel):
    manager_emails: str = ""
    birthday_email_template: str = Field(min_length=1)
    jubilee_email_template: str = Field(min_length=1)
    jubilee_years_csv: str
    smtp_host: str = ""
    smtp_port: int = Field(default=465, ge=1, le=65535)
    smtp_user: str = ""
    # None keeps the stored password
    smtp_pass: str | None = None
    smtp_from: str = ""
    smtp_secure: bool = True
    send_on_birthday: bool = True
    send_on_jubilee: bool = True
    daily_send_hour: int = Field(default=8, ge=0, le=23)

    @field_validator("manager_emails", "smtp_host", "smtp_user", "smtp_from")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator("jubilee_years_csv")
    @classmethod
    def _years_csv(cls, value: str) -> str:
        compact = re.sub(r"\s+", "", value)
        if not re.fullmatch(r"\d+(,\d+)*", compact):
            raise ValueError("jubilee_years_csv must be comma-separated integers")
        return compact


class MailTestIn(BaseModel):
    to: str = Field(min_length=3)
