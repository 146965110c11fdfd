from __future__ import annotations

import enum
from collections.abc import Callable

from alunos.core.errors import TransportError
from alunos.core.logging import clear_log_context, get_logger, set_user_id
from alunos.models.user import Role
from alunos.schemas.auth import AuthSession


class AuthState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


Listener = Callable[[AuthState], None]


class SessionGate:
    """
    Estado de autenticação e papel do usuário.

    O papel é consultado uma única vez por sessão, no perfil do usuário.
    Qualquer falha nessa consulta (ou papel desconhecido) conta como usuário
    comum: sem perfil confirmado, sem ações de escrita.
    """

    def __init__(self, gateway):
        self._gateway = gateway
        self._listeners: list[Listener] = []
        self.state = AuthState.UNAUTHENTICATED
        self.session: AuthSession | None = None
        self.role: Role | None = None
        self.log = get_logger("alunos.session")

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _set_state(self, state: AuthState) -> None:
        changed = state != self.state
        self.state = state
        if changed:
            self.log.info("session.state", state=state.value)
            for listener in list(self._listeners):
                listener(state)

    @property
    def authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    @property
    def is_admin(self) -> bool:
        return self.authenticated and self.role == Role.ADMIN

    @property
    def role_label(self) -> str:
        return "Administrador" if self.is_admin else "Usuário"

    async def sign_in(self, email: str, password: str) -> bool:
        await self._gateway.sign_in(email, password)
        return await self.establish()

    async def establish(self) -> bool:
        """Lê a sessão do provedor; com sessão válida, resolve o papel e autentica."""
        session = await self._gateway.get_session()
        if session is None:
            self._drop()
            return False

        if self.session is not None and self.session.user_id != session.user_id:
            # troca de identidade sem logout: derruba a anterior para os
            # ouvintes descartarem o que é dela
            self.log.info(
                "session.identity_changed",
                previous_user_id=self.session.user_id,
                user_id=session.user_id,
            )
            self._drop()

        if self.session is None:
            # nova identidade: nada do papel anterior é aproveitado
            self.role = None
            self.session = session
            self.role = await self._resolve_role(session)
        set_user_id(str(session.user_id))
        self._set_state(AuthState.AUTHENTICATED)
        return True

    async def _resolve_role(self, session: AuthSession) -> Role:
        try:
            raw = await self._gateway.fetch_role(session.user_id)
        except TransportError as exc:
            self.log.warning(
                "session.role.lookup_failed",
                user_id=session.user_id,
                status_code=exc.status_code,
            )
            return Role.USER
        try:
            return Role(raw)
        except ValueError:
            self.log.warning("session.role.unknown", user_id=session.user_id, role=raw)
            return Role.USER

    def _drop(self) -> None:
        self.session = None
        self.role = None
        clear_log_context()
        self._set_state(AuthState.UNAUTHENTICATED)

    async def sign_out(self) -> None:
        await self._gateway.sign_out()
        self._drop()

    def expire(self) -> None:
        """Sessão perdida no meio do uso (401 do servidor)."""
        if self.authenticated:
            self.log.info("session.expired", user_id=self.session.user_id if self.session else None)
        self._drop()


__all__ = ["AuthState", "SessionGate"]
