"""Erros do painel de alunos (lado cliente do serviço)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str


class ClientError(Exception):
    """Base de todos os erros levantados pelo painel."""

    default_message = "Erro inesperado"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ClientError):
    """Falha local de validação; nunca chega ao gateway."""

    default_message = "Dados inválidos"

    def __init__(self, violations: list[FieldViolation]):
        if not violations:
            raise ValueError("ValidationError requires at least one violation")
        self.violations = list(violations)
        super().__init__(self.violations[0].message)

    @property
    def first(self) -> FieldViolation:
        return self.violations[0]


class TransportError(ClientError):
    """Qualquer falha de chamada ao serviço, inclusive negação de permissão."""

    default_message = "Erro de comunicação com o servidor"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class SessionExpired(ClientError):
    default_message = "Sessão expirada"


class ActionNotAllowed(ClientError):
    default_message = "Sem permissão"
