from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from alunos.core.logging import get_logger, set_user_id
from alunos.core.security import ACCESS, decode_token
from alunos.core.settings import settings
from alunos.db import get_db
from alunos.models.user import Profile, Role, User


def _extract_token_from_request(request: Request) -> str | None:
    # Priority: Authorization header, then cookie (if enabled)
    auth = request.headers.get("Authorization")
    if auth and auth.lower().startswith("bearer "):
        return auth.split(" ", 1)[1]
    if settings.USE_COOKIE_AUTH:
        return request.cookies.get("access_token")
    return None


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:  # noqa: B008
    token = _extract_token_from_request(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Não autenticado"
        )

    try:
        payload = decode_token(token, expected_type=ACCESS)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido ou expirado",
        ) from e

    user_id = payload.get("sub")
    if not user_id or not str(user_id).isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token malformado"
        )

    user: User | None = db.get(User, int(user_id))
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário inativo ou inexistente",
        )

    set_user_id(str(user.id))
    return user


def resolve_role(db: Session, user: User) -> Role | None:
    """Papel do usuário pelo perfil; None se não houver perfil ou o valor for desconhecido."""
    profile = db.get(Profile, user.id)
    if profile is None:
        return None
    try:
        return Role(profile.role)
    except ValueError:
        get_logger().warning("profile.role.unknown", user_id=user.id, role=profile.role)
        return None


def require_roles(*allowed: Role) -> Callable[[Request, Session], User]:
    def wrapper(request: Request, db: Session = Depends(get_db)) -> User:  # noqa: B008
        user = get_current_user(request, db)
        # sem perfil = sem privilégio (fail-closed)
        if resolve_role(db, user) not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Sem permissão"
            )
        return user

    return wrapper
