# app/schemas/user.py
from datetime import datetime

from pydantic import BaseModel


class UserOut(BaseModel):
    id: str
    login: str
    name: str
    phone: str | None = None
    role: str
    status: str
    password_change_required: bool = False
    created_at: datetime | None = None


class UserCreate(BaseModel):
    login: str
    name: str
    phone: str | None = None
    password: str
    role: str = "organizer"
    status: str = "active"
    password_change_required: bool = True


class UserUpdate(BaseModel):
    login: str | None = None
    name: str | None = None
    phone: str | None = None
    password: str | None = None
    role: str | None = None
    status: str | None = None
    password_change_required: bool | None = None


class LoginIn(BaseModel):
    login: str
    password: str


class LoginOut(BaseModel):
    token: str
    user: UserOut


class PasswordChangeIn(BaseModel):
    new_password: str
    confirmation: str
