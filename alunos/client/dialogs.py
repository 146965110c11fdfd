from __future__ import annotations

from alunos.client.flash import FlashQueue
from alunos.client.listing import StudentListController
from alunos.core.errors import TransportError, ValidationError
from alunos.core.logging import get_logger
from alunos.models.student import StudentStatus
from alunos.schemas.students import STUDENT_FIELDS, StudentOut
from alunos.services.student_validator import ensure_valid

SAVE_ERROR_MESSAGE = "Erro ao salvar aluno"
DELETE_ERROR_MESSAGE = "Erro ao excluir aluno"
CREATED_MESSAGE = "Aluno cadastrado com sucesso!"
UPDATED_MESSAGE = "Aluno atualizado com sucesso!"
DELETED_MESSAGE = "Aluno excluído com sucesso"


def empty_draft() -> dict[str, str]:
    draft = {name: "" for name in STUDENT_FIELDS}
    draft["status"] = StudentStatus.ACTIVE.value
    return draft


class DialogOrchestrator:
    """
    Três diálogos (formulário, detalhes, exclusão) com flags independentes e
    um único aluno alvo compartilhado. Nada impede dois abertos ao mesmo tempo.

    O formulário edita `draft`, uma cópia de trabalho; o aluno alvo nunca é
    alterado localmente. Falha de gravação mantém diálogo, alvo e rascunho
    para o usuário tentar de novo.
    """

    def __init__(self, gateway, listing: StudentListController, flashes: FlashQueue):
        self._gateway = gateway
        self._listing = listing
        self._flashes = flashes
        self._epoch = 0
        self.form_open = False
        self.details_open = False
        self.delete_open = False
        self.target: StudentOut | None = None
        self.draft: dict[str, str] = empty_draft()
        self.submitting = False
        self.error: str | None = None
        self.log = get_logger("alunos.dialogs")

    @property
    def editing(self) -> bool:
        return self.target is not None

    # ------------------------------------------------------------ abertura
    def open_form(self, target: StudentOut | None = None) -> None:
        """None = cadastro; aluno = edição com o rascunho preenchido."""
        self.target = target
        self.draft = target.editable_fields() if target else empty_draft()
        self.error = None
        self.form_open = True

    def open_details(self, target: StudentOut) -> None:
        self.target = target
        self.details_open = True

    def open_delete(self, target: StudentOut) -> None:
        self.target = target
        self.error = None
        self.delete_open = True

    def set_field(self, name: str, value: str) -> None:
        if name not in self.draft:
            raise KeyError(name)
        self.draft[name] = value

    # ----------------------------------------------------------- fechamento
    def close_form(self) -> None:
        self.form_open = False
        self.target = None
        self.error = None

    def close_details(self) -> None:
        self.details_open = False

    def close_delete(self) -> None:
        self.delete_open = False
        self.error = None

    def reset(self) -> None:
        self._epoch += 1
        self.form_open = False
        self.details_open = False
        self.delete_open = False
        self.target = None
        self.draft = empty_draft()
        self.submitting = False
        self.error = None

    def _fail(self, message: str) -> None:
        self.error = message
        self._flashes.error(message)

    # ------------------------------------------------------------- gravação
    async def submit_form(self) -> bool:
        """
        Valida o rascunho e grava (insert ou update). Sucesso fecha o
        formulário e só então pede o recarregamento da lista.
        """
        target = self.target
        payload = dict(self.draft)
        epoch = self._epoch
        try:
            ensure_valid(payload)
            self.submitting = True
            if target is not None:
                await self._gateway.update_student(target.id, payload)
            else:
                await self._gateway.insert_student(payload)
        except ValidationError as exc:
            self.log.info("student.form.invalid", field=exc.first.field)
            self._fail(exc.first.message)
            return False
        except TransportError as exc:
            self.log.warning(
                "student.form.save_failed",
                student_id=target.id if target else None,
                status_code=exc.status_code,
                error=exc.message,
            )
            # detalhe do servidor quando houve resposta; senão a mensagem genérica
            self._fail(exc.message if exc.status_code is not None else SAVE_ERROR_MESSAGE)
            return False
        finally:
            self.submitting = False

        if epoch != self._epoch:
            return False

        self._flashes.success(UPDATED_MESSAGE if target else CREATED_MESSAGE)
        self.form_open = False
        self.target = None
        self.draft = empty_draft()
        self.error = None
        await self._listing.refresh()
        return True

    async def confirm_delete(self) -> bool:
        target = self.target
        if target is None:
            return False
        epoch = self._epoch
        self.submitting = True
        try:
            await self._gateway.delete_student(target.id)
        except TransportError as exc:
            self.log.warning(
                "student.delete_failed", student_id=target.id, status_code=exc.status_code
            )
            self._fail(DELETE_ERROR_MESSAGE)
            return False
        finally:
            self.submitting = False

        if epoch != self._epoch:
            return False

        self._flashes.success(DELETED_MESSAGE)
        self.delete_open = False
        self.target = None
        self.error = None
        await self._listing.refresh()
        return True
