from typing import Literal, Optional

from pydantic import BaseModel, Field

RoleLiteral = Literal["ADMIN", "HR", "PEOPLE_MANAGER", "UNIT_LEAD", "TEAM_LEAD"]


class LoginIn(BaseModel):
    email: str
    password: str


class UserOut(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: str

    class Config:
        from_attributes = True


class UserCreateIn(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=8)
    name: Optional[str] = None
    role: RoleLiteral = "HR"
