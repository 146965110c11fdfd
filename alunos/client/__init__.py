"""Painel de alunos: estado do lado cliente sobre o serviço HTTP."""

from alunos.client.dashboard import Dashboard
from alunos.client.gateway import StudentGateway

__all__ = ["Dashboard", "StudentGateway"]
