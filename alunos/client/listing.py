from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass

from alunos.client.flash import FlashQueue
from alunos.core.errors import TransportError
from alunos.core.logging import get_logger
from alunos.models.student import StudentStatus
from alunos.schemas.students import StudentOut

LOAD_ERROR_MESSAGE = "Erro ao carregar alunos"


class LoadState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class StudentStats:
    total: int
    active: int
    inactive: int


def matches(student: StudentOut, needle: str) -> bool:
    """Busca por nome, matrícula ou curso (contém, sem diferenciar maiúsculas)."""
    needle = needle.lower()
    return (
        needle in student.full_name.lower()
        or needle in student.registration_number.lower()
        or needle in student.course.lower()
    )


def derive_view(collection: Sequence[StudentOut], filter_text: str) -> list[StudentOut]:
    """Visão filtrada; mantém a ordem da coleção, sem reordenar por relevância."""
    if not filter_text:
        return list(collection)
    return [s for s in collection if matches(s, filter_text)]


class StudentListController:
    """
    Dono da coleção canônica de alunos e do texto de busca.

    A visão derivada é recalculada na hora, sempre que um dos dois muda; quem
    lê `view` depois de `set_filter`/`refresh` nunca vê um estado velho.
    """

    def __init__(self, gateway, flashes: FlashQueue):
        self._gateway = gateway
        self._flashes = flashes
        self._records: tuple[StudentOut, ...] = ()
        self._filter_text = ""
        self._view: list[StudentOut] = []
        # incrementado a cada carga e no reset: cargas superadas são descartadas
        self._epoch = 0
        self.load_state = LoadState.IDLE
        self.error: str | None = None
        self.log = get_logger("alunos.listing")

    @property
    def records(self) -> tuple[StudentOut, ...]:
        return self._records

    @property
    def filter_text(self) -> str:
        return self._filter_text

    @property
    def view(self) -> list[StudentOut]:
        return list(self._view)

    @property
    def loading(self) -> bool:
        return self.load_state == LoadState.LOADING

    @property
    def stats(self) -> StudentStats:
        active = sum(1 for s in self._records if s.status == StudentStatus.ACTIVE)
        inactive = sum(1 for s in self._records if s.status == StudentStatus.INACTIVE)
        return StudentStats(total=len(self._records), active=active, inactive=inactive)

    def _recompute(self) -> None:
        self._view = derive_view(self._records, self._filter_text)

    def set_filter(self, text: str) -> None:
        self._filter_text = text or ""
        self._recompute()

    async def refresh(self) -> bool:
        """
        Recarrega a coleção. Sucesso substitui tudo (sem merge); falha mantém a
        coleção anterior e registra a mensagem. Sem retry automático.
        SessionExpired não é tratada aqui. Só a carga mais recente é aplicada.
        """
        self._epoch += 1
        epoch = self._epoch
        self.load_state = LoadState.LOADING
        self.error = None
        try:
            rows = await self._gateway.list_students()
        except TransportError as exc:
            if epoch != self._epoch:
                return False
            self.load_state = LoadState.FAILED
            self.error = LOAD_ERROR_MESSAGE
            self._flashes.error(LOAD_ERROR_MESSAGE)
            self.log.warning("students.load.failed", error=exc.message, status_code=exc.status_code)
            return False

        if epoch != self._epoch:
            self.log.info("students.load.discarded")
            return False

        self._records = tuple(rows)
        self._recompute()
        self.load_state = LoadState.READY
        self.log.info("students.load.done", count=len(self._records))
        return True

    def reset(self) -> None:
        self._epoch += 1
        self._records = ()
        self._filter_text = ""
        self._view = []
        self.load_state = LoadState.IDLE
        self.error = None
