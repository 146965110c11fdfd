from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from alunos.client.dialogs import DialogOrchestrator
from alunos.client.flash import FlashQueue
from alunos.client.gateway import StudentGateway
from alunos.client.listing import LoadState, StudentListController, StudentStats
from alunos.client.session import AuthState, SessionGate
from alunos.core.errors import ActionNotAllowed, SessionExpired, TransportError
from alunos.core.logging import get_logger
from alunos.core.settings import settings
from alunos.schemas.students import StudentOut
from alunos.utils.dates import format_date, format_datetime

DASHBOARD_PATH = "/dashboard"
SESSION_EXPIRED_MESSAGE = "Sessão expirada. Entre novamente."

VIEW = "view"
EDIT = "edit"
DELETE = "delete"


class Dashboard:
    """
    Painel de alunos: recebe as intenções da camada de apresentação e
    coordena sessão, lista e diálogos.

    Criar, editar e excluir só aparecem para administradores; o servidor
    confere de novo. Saída ou expiração da sessão descarta tudo que está em
    memória e volta para a tela de login (`location`).
    """

    def __init__(
        self,
        gateway,
        *,
        flashes: FlashQueue | None = None,
        entry_point: str | None = None,
    ):
        self.gateway = gateway
        self.flashes = flashes or FlashQueue()
        self.gate = SessionGate(gateway)
        self.listing = StudentListController(gateway, self.flashes)
        self.dialogs = DialogOrchestrator(gateway, self.listing, self.flashes)
        self.entry_point = entry_point or settings.LOGIN_PATH
        self.location = self.entry_point
        self.log = get_logger("alunos.dashboard")
        self.gate.subscribe(self._on_auth_change)

    @classmethod
    def from_settings(cls) -> Dashboard:
        return cls(StudentGateway.from_settings())

    # ------------------------------------------------------------ sessão
    def _on_auth_change(self, state: AuthState) -> None:
        if state == AuthState.AUTHENTICATED:
            self.location = DASHBOARD_PATH
            return
        # troca de identidade: nada de lista/diálogo da sessão anterior
        self.listing.reset()
        self.dialogs.reset()
        self.location = self.entry_point

    async def _guard(self, call: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return await call()
        except SessionExpired:
            self.gate.expire()
            self.flashes.error(SESSION_EXPIRED_MESSAGE)
            return False

    async def start(self) -> bool:
        """Montagem do painel: confere a sessão e, se houver, carrega a lista."""
        try:
            ok = await self._guard(self.gate.establish)
        except TransportError as exc:
            self.flashes.error(exc.message)
            return False
        if not ok:
            self.location = self.entry_point
            return False
        await self.refresh()
        return True

    async def sign_in(self, email: str, password: str) -> bool:
        try:
            ok = await self._guard(lambda: self.gate.sign_in(email, password))
        except TransportError as exc:
            self.flashes.error(exc.message)
            return False
        if ok:
            await self.refresh()
        return bool(ok)

    async def sign_out(self) -> None:
        await self.gate.sign_out()

    @property
    def role_label(self) -> str:
        return self.gate.role_label

    # ------------------------------------------------------------- lista
    async def refresh(self) -> bool:
        if not self.gate.authenticated:
            return False
        return bool(await self._guard(self.listing.refresh))

    def set_search(self, text: str) -> None:
        self.listing.set_filter(text)

    @property
    def view(self) -> list[StudentOut]:
        return self.listing.view

    @property
    def stats(self) -> StudentStats:
        return self.listing.stats

    @property
    def load_state(self) -> LoadState:
        return self.listing.load_state

    # ----------------------------------------------------------- permissões
    @property
    def can_manage(self) -> bool:
        return self.gate.is_admin

    def row_actions(self, student: StudentOut) -> tuple[str, ...]:
        if not self.gate.authenticated:
            return ()
        if self.can_manage:
            return (VIEW, EDIT, DELETE)
        return (VIEW,)

    def _require_admin(self, action: str) -> None:
        if not self.gate.is_admin:
            self.log.warning("dashboard.action_denied", action=action)
            raise ActionNotAllowed()

    def _require_session(self, action: str) -> None:
        if not self.gate.authenticated:
            self.log.warning("dashboard.action_denied", action=action)
            raise ActionNotAllowed("Não autenticado")

    # ------------------------------------------------------------- diálogos
    def open_create(self) -> None:
        self._require_admin("create")
        self.dialogs.open_form(None)

    def open_edit(self, student: StudentOut) -> None:
        self._require_admin("edit")
        self.dialogs.open_form(student)

    def open_details(self, student: StudentOut) -> None:
        self._require_session("details")
        self.dialogs.open_details(student)

    def open_delete(self, student: StudentOut) -> None:
        self._require_admin("delete")
        self.dialogs.open_delete(student)

    def edit_field(self, name: str, value: str) -> None:
        self.dialogs.set_field(name, value)

    async def submit(self) -> bool:
        self._require_admin("edit" if self.dialogs.editing else "create")
        return bool(await self._guard(self.dialogs.submit_form))

    async def confirm_delete(self) -> bool:
        self._require_admin("delete")
        return bool(await self._guard(self.dialogs.confirm_delete))

    def close_form(self) -> None:
        self.dialogs.close_form()

    def close_details(self) -> None:
        self.dialogs.close_details()

    def close_delete(self) -> None:
        self.dialogs.close_delete()

    def details(self) -> dict[str, str] | None:
        """Aluno alvo pronto para o diálogo de detalhes (datas formatadas)."""
        student = self.dialogs.target
        if not self.dialogs.details_open or student is None:
            return None
        data = student.editable_fields()
        data.update(
            id=student.id,
            birth_date=format_date(student.birth_date),
            created_at=format_datetime(student.created_at),
            updated_at=format_datetime(student.updated_at),
        )
        return data
