import pytest

from alunos.client.dialogs import (
    CREATED_MESSAGE,
    DELETE_ERROR_MESSAGE,
    DELETED_MESSAGE,
    SAVE_ERROR_MESSAGE,
    UPDATED_MESSAGE,
    DialogOrchestrator,
    empty_draft,
)
from alunos.client.flash import ERROR, SUCCESS, FlashQueue
from alunos.client.listing import StudentListController
from alunos.core.errors import TransportError
from alunos.schemas.students import STUDENT_FIELDS
from conftest import make_student


@pytest.fixture
def flashes():
    return FlashQueue()


@pytest.fixture
def listing(fake_gateway, flashes):
    return StudentListController(fake_gateway, flashes)


@pytest.fixture
def dialogs(fake_gateway, listing, flashes):
    return DialogOrchestrator(fake_gateway, listing, flashes)


def fill(dialogs, payload):
    for name, value in payload.items():
        dialogs.set_field(name, value)


def test_open_form_for_create_has_empty_draft(dialogs):
    dialogs.open_form(None)

    assert dialogs.form_open
    assert not dialogs.editing
    assert dialogs.draft == empty_draft()
    assert dialogs.draft["status"] == "Ativo"


def test_open_form_for_edit_seeds_draft_without_touching_target(dialogs):
    student = make_student()
    dialogs.open_form(student)

    dialogs.set_field("full_name", "Outro Nome")

    assert dialogs.editing
    assert dialogs.target is student
    assert student.full_name == "Carla Souza"
    assert dialogs.draft["birth_date"] == "1999-12-31"
    assert list(dialogs.draft) == list(STUDENT_FIELDS)


def test_set_unknown_field_rejected(dialogs):
    dialogs.open_form(None)

    with pytest.raises(KeyError):
        dialogs.set_field("nickname", "x")


@pytest.mark.asyncio
async def test_create_inserts_once_then_refreshes(dialogs, fake_gateway, listing, flashes, student_payload):
    dialogs.open_form(None)
    fill(dialogs, student_payload)

    assert await dialogs.submit_form() is True

    assert [c[0] for c in fake_gateway.calls] == ["insert_student", "list_students"]
    assert fake_gateway.calls[0][1] == student_payload
    assert not dialogs.form_open
    assert dialogs.target is None
    assert dialogs.draft == empty_draft()
    assert [s.full_name for s in listing.view] == ["Ana Silva"]
    assert [(f.level, f.message) for f in flashes.peek()] == [(SUCCESS, CREATED_MESSAGE)]


@pytest.mark.asyncio
async def test_invalid_draft_never_reaches_gateway(dialogs, fake_gateway, flashes, student_payload):
    dialogs.open_form(None)
    fill(dialogs, {**student_payload, "full_name": "Al", "phone": "1"})

    assert await dialogs.submit_form() is False

    assert fake_gateway.calls == []
    assert dialogs.form_open
    assert dialogs.error == "Nome deve ter no mínimo 3 caracteres"
    assert dialogs.draft["full_name"] == "Al"
    assert flashes.peek()[0].level == ERROR


@pytest.mark.asyncio
async def test_update_success(dialogs, fake_gateway, flashes, student_payload):
    student = make_student()
    fake_gateway.students = [student]
    dialogs.open_form(student)
    dialogs.set_field("status", "Inativo")

    assert await dialogs.submit_form() is True

    op, student_id, payload = fake_gateway.calls[0]
    assert (op, student_id) == ("update_student", student.id)
    assert payload["status"] == "Inativo"
    assert fake_gateway.count("list_students") == 1
    assert flashes.peek()[-1].message == UPDATED_MESSAGE


@pytest.mark.asyncio
async def test_failed_update_keeps_form_and_target(dialogs, fake_gateway, listing, flashes):
    student = make_student()
    dialogs.open_form(student)
    dialogs.set_field("course", "Arquitetura")
    fake_gateway.fail["update_student"] = TransportError("Sem permissão", status_code=403)

    assert await dialogs.submit_form() is False

    assert dialogs.form_open
    assert dialogs.target is student
    assert dialogs.draft["course"] == "Arquitetura"
    assert dialogs.error == "Sem permissão"
    assert fake_gateway.count("list_students") == 0
    assert not dialogs.submitting
    assert [(f.level, f.message) for f in flashes.peek()] == [(ERROR, "Sem permissão")]


@pytest.mark.asyncio
async def test_save_without_server_answer_uses_generic_message(dialogs, fake_gateway, student_payload):
    dialogs.open_form(None)
    fill(dialogs, student_payload)
    fake_gateway.fail["insert_student"] = TransportError("Falha de comunicação com o servidor")

    assert await dialogs.submit_form() is False

    assert dialogs.error == SAVE_ERROR_MESSAGE
    assert dialogs.form_open


@pytest.mark.asyncio
async def test_retry_after_failure(dialogs, fake_gateway):
    dialogs.open_form(make_student())
    fake_gateway.fail["update_student"] = TransportError()
    await dialogs.submit_form()

    del fake_gateway.fail["update_student"]
    assert await dialogs.submit_form() is True
    assert fake_gateway.count("update_student") == 2


@pytest.mark.asyncio
async def test_delete_success(dialogs, fake_gateway, flashes):
    student = make_student()
    other = make_student(full_name="Davi Lima")
    fake_gateway.students = [student, other]
    dialogs.open_delete(student)

    assert await dialogs.confirm_delete() is True

    assert fake_gateway.calls[0] == ("delete_student", student.id)
    assert fake_gateway.count("delete_student") == 1
    assert fake_gateway.count("list_students") == 1
    assert not dialogs.delete_open
    assert dialogs.target is None
    assert flashes.peek()[-1].message == DELETED_MESSAGE


@pytest.mark.asyncio
async def test_delete_failure_keeps_dialog(dialogs, fake_gateway):
    student = make_student()
    dialogs.open_delete(student)
    fake_gateway.fail["delete_student"] = TransportError("boom", status_code=500)

    assert await dialogs.confirm_delete() is False

    assert dialogs.delete_open
    assert dialogs.target is student
    assert dialogs.error == DELETE_ERROR_MESSAGE
    assert fake_gateway.count("list_students") == 0


@pytest.mark.asyncio
async def test_confirm_delete_without_target_is_noop(dialogs, fake_gateway):
    assert await dialogs.confirm_delete() is False
    assert fake_gateway.calls == []


def test_dialogs_can_be_open_at_the_same_time(dialogs):
    """Sem exclusão mútua: os três diálogos têm flags independentes."""
    student = make_student()

    dialogs.open_details(student)
    dialogs.open_delete(student)
    dialogs.open_form(student)

    assert dialogs.details_open and dialogs.delete_open and dialogs.form_open


def test_close_form_clears_target(dialogs):
    dialogs.open_form(make_student())

    dialogs.close_form()

    assert not dialogs.form_open
    assert dialogs.target is None


def test_close_details_and_delete_keep_target(dialogs):
    student = make_student()
    dialogs.open_details(student)
    dialogs.close_details()
    assert dialogs.target is student

    dialogs.open_delete(student)
    dialogs.close_delete()
    assert not dialogs.delete_open
    assert dialogs.target is student


def test_reset_closes_everything(dialogs):
    student = make_student()
    dialogs.open_form(student)
    dialogs.open_details(student)
    dialogs.set_field("full_name", "Outro")

    dialogs.reset()

    assert not (dialogs.form_open or dialogs.details_open or dialogs.delete_open)
    assert dialogs.target is None
    assert dialogs.draft == empty_draft()
