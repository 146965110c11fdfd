from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from alunos.audit.helpers import record_audit
from alunos.core.logging import get_logger
from alunos.core.security import (
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    verify_password,
)
from alunos.core.settings import settings
from alunos.db import get_db
from alunos.deps import get_current_user
from alunos.models.user import User
from alunos.schemas.auth import LoginIn, LoginOut, MeOut

router = APIRouter(prefix="/auth", tags=["auth"])

AUTH_COOKIES = ("access_token", "refresh_token")


def _set_auth_cookies(resp: Response, access: str, refresh: str) -> None:
    cookie_kwargs = dict(
        httponly=True,
        secure=bool(settings.SECURE_COOKIES),
        samesite="lax",
        path="/",
        domain=settings.COOKIE_DOMAIN or None,
    )
    resp.set_cookie(
        key="access_token",
        value=access,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        **cookie_kwargs,
    )
    resp.set_cookie(
        key="refresh_token",
        value=refresh,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        **cookie_kwargs,
    )


@router.post("/login", response_model=LoginOut)
def api_login(
    payload: LoginIn,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
) -> LoginOut:
    user: User | None = db.query(User).filter(User.email == payload.email).one_or_none()
    if not user or not user.is_active or not verify_password(payload.password, user.password_hash):
        get_logger().info("auth.login.denied", email=payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenciais inválidas")

    access = create_access_token(str(user.id))
    refresh = create_refresh_token(str(user.id))

    # Optionally set HttpOnly cookies (useful for frontends)
    if settings.USE_COOKIE_AUTH:
        _set_auth_cookies(response, access, refresh)

    record_audit(
        db,
        request=request,
        user_id=user.id,
        action="LOGIN",
        entity="user",
        entity_id=user.id,
        autocommit=True,
    )
    return LoginOut(access_token=access, refresh_token=refresh, token_type="bearer")


@router.get("/me", response_model=MeOut)
def api_me(current_user: Annotated[User, Depends(get_current_user)]) -> MeOut:
    return MeOut(
        id=current_user.id,
        email=current_user.email,
        name=current_user.name,
        is_active=current_user.is_active,
    )


@router.post("/logout")
def api_logout(response: Response):
    # JWTs são stateless; só limpa os cookies. Chamar de novo não tem efeito.
    for k in AUTH_COOKIES:
        response.delete_cookie(k, path="/")
    return {"ok": True}


@router.post("/refresh", response_model=LoginOut)
def api_refresh(request: Request) -> LoginOut:
    # Expect refresh token in Authorization: Bearer <token> or cookie
    auth = request.headers.get("Authorization")
    token: str | None = None
    if auth and auth.lower().startswith("bearer "):
        token = auth.split(" ", 1)[1]
    if not token:
        token = request.cookies.get("refresh_token")
    if not token:
        raise HTTPException(status_code=401, detail="Refresh token ausente")

    try:
        payload = decode_token(token, expected_type=REFRESH)
    except ValueError as e:
        raise HTTPException(status_code=401, detail="Refresh token inválido") from e

    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="Refresh token malformado")

    access = create_access_token(str(sub))
    refresh = create_refresh_token(str(sub))
    return LoginOut(access_token=access, refresh_token=refresh)
