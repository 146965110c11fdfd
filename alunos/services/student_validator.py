from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from alunos.core.errors import FieldViolation, ValidationError
from alunos.schemas.students import STUDENT_FIELDS, StudentIn

# (campo, tipo) -> mensagem exibida no painel
MESSAGES: dict[tuple[str, str], str] = {
    ("full_name", "min"): "Nome deve ter no mínimo 3 caracteres",
    ("full_name", "max"): "Nome deve ter no máximo 100 caracteres",
    ("birth_date", "missing"): "Data de nascimento é obrigatória",
    ("birth_date", "invalid"): "Data de nascimento inválida",
    ("email", "invalid"): "E-mail inválido",
    ("phone", "min"): "Telefone inválido",
    ("phone", "max"): "Telefone deve ter no máximo 20 caracteres",
    ("course", "min"): "Curso é obrigatório",
    ("course", "max"): "Curso deve ter no máximo 100 caracteres",
    ("registration_number", "min"): "Matrícula é obrigatória",
    ("registration_number", "max"): "Matrícula deve ter no máximo 50 caracteres",
    ("status", "invalid"): "Status inválido",
}

_KIND_BY_ERROR_TYPE = {
    "missing": "missing",
    "string_too_short": "min",
    "string_too_long": "max",
}


def _message(field: str, kind: str) -> str:
    if (field, kind) in MESSAGES:
        return MESSAGES[(field, kind)]
    # campo vazio/ausente cai na mensagem de mínimo quando houver
    if kind == "missing" and (field, "min") in MESSAGES:
        return MESSAGES[(field, "min")]
    return MESSAGES.get((field, "invalid"), f"Campo inválido: {field}")


def _kind(error: Mapping[str, Any], value: Any) -> str:
    if value in (None, ""):
        return "missing"
    return _KIND_BY_ERROR_TYPE.get(error["type"], "invalid")


def validate_student(candidate: Mapping[str, Any]) -> list[FieldViolation]:
    """
    Valida um aluno candidato (campos em texto) sem efeitos colaterais.
    Retorna TODAS as violações, uma por campo, na ordem de STUDENT_FIELDS;
    lista vazia = válido.
    """
    try:
        StudentIn.model_validate(dict(candidate))
    except PydanticValidationError as exc:
        by_field: dict[str, FieldViolation] = {}
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else ""
            if field not in STUDENT_FIELDS or field in by_field:
                continue
            kind = _kind(error, candidate.get(field))
            by_field[field] = FieldViolation(field=field, message=_message(field, kind))
        return [by_field[f] for f in STUDENT_FIELDS if f in by_field]
    return []


def ensure_valid(candidate: Mapping[str, Any]) -> StudentIn:
    """Como validate_student, mas levanta ValidationError (primeira violação em .first)."""
    violations = validate_student(candidate)
    if violations:
        raise ValidationError(violations)
    return StudentIn.model_validate(dict(candidate))
