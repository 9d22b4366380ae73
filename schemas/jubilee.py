from datetime import date

from pydantic import BaseModel


class JubileeHitOut(BaseModel):
    employee_id: int
    first_name: str
    last_name: str
    years: int
    anniversary_date: date


class JubileeGroupOut(BaseModel):
    years: int
    hits: list[JubileeHitOut]


class DailyRunOut(BaseModel):
    birthdays: int
    jubilee_hits: int
    managers_notified: int
