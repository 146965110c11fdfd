from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, EmailStr, constr, field_validator

from alunos.models.student import StudentStatus

# Ordem fixa dos campos: define qual violação é reportada primeiro
STUDENT_FIELDS: tuple[str, ...] = (
    "full_name",
    "birth_date",
    "email",
    "phone",
    "course",
    "registration_number",
    "status",
)

EMAIL_MAX_LENGTH = 255


class StudentIn(BaseModel):
    """Dados editáveis de um aluno (criação e atualização)."""

    full_name: constr(min_length=3, max_length=100)
    birth_date: dt.date
    email: EmailStr
    phone: constr(min_length=10, max_length=20)
    course: constr(min_length=3, max_length=100)
    registration_number: constr(min_length=3, max_length=50)
    status: StudentStatus

    @field_validator("email")
    @classmethod
    def _email_max_length(cls, v: str) -> str:
        if len(v) > EMAIL_MAX_LENGTH:
            raise ValueError(f"e-mail com mais de {EMAIL_MAX_LENGTH} caracteres")
        return v


class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    birth_date: dt.date
    email: str
    phone: str
    course: str
    registration_number: str
    status: StudentStatus
    created_at: dt.datetime
    updated_at: dt.datetime

    def editable_fields(self) -> dict[str, str]:
        """Cópia de trabalho para o formulário (tudo como texto)."""
        data = self.model_dump(mode="json", include=set(STUDENT_FIELDS))
        return {name: data[name] for name in STUDENT_FIELDS}
