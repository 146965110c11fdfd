from __future__ import annotations

from pydantic import BaseModel, EmailStr


class LoginIn(BaseModel):
    email: EmailStr
    password: str


class LoginOut(BaseModel):
    access_token: str | None = None
    refresh_token: str | None = None
    token_type: str = "bearer"


class MeOut(BaseModel):
    id: int
    email: EmailStr
    name: str
    is_active: bool


class AuthSession(BaseModel):
    """Sessão vista pelo painel: só a identidade, o papel vem do perfil."""

    user_id: int
    email: str
    name: str = ""


class ProfileOut(BaseModel):
    id: int
    role: str
