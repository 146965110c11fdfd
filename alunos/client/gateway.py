"""
Gateway remoto do painel: única porta de entrada para o serviço de alunos.

Todas as falhas viram TransportError (rede, 4xx/5xx, inclusive 403); um 401
numa chamada autenticada vira SessionExpired. Timeouts ficam com o httpx.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from alunos.core.errors import SessionExpired, TransportError
from alunos.core.logging import get_logger
from alunos.core.settings import settings
from alunos.schemas.auth import AuthSession
from alunos.schemas.students import StudentOut

API_PREFIX = "/api/v1"
INVALID_RESPONSE_MESSAGE = "Resposta inválida do servidor"


def _json_body(resp: httpx.Response, expected: type) -> Any:
    """Corpo JSON de uma resposta 2xx; formato inesperado vira TransportError."""
    try:
        body = resp.json()
    except ValueError as exc:
        raise TransportError(INVALID_RESPONSE_MESSAGE, status_code=resp.status_code) from exc
    if not isinstance(body, expected):
        raise TransportError(INVALID_RESPONSE_MESSAGE, status_code=resp.status_code)
    return body


def _error_detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.reason_phrase or f"HTTP {resp.status_code}"
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list) and detail:
        # 422 do FastAPI: lista de erros do pydantic
        return str(detail[0].get("msg", "Dados inválidos"))
    return resp.reason_phrase or f"HTTP {resp.status_code}"


class StudentGateway:
    def __init__(self, client: httpx.AsyncClient):
        self._client = client
        self._access_token: str | None = None
        self.log = get_logger("alunos.gateway")

    @classmethod
    def from_settings(cls) -> StudentGateway:
        client = httpx.AsyncClient(
            base_url=settings.API_BASE_URL,
            timeout=settings.API_TIMEOUT_SECONDS,
            headers={"accept": "application/json"},
        )
        return cls(client)

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def has_credentials(self) -> bool:
        return self._access_token is not None

    def _clear_tokens(self) -> None:
        self._access_token = None
        # só usamos Bearer; cookies de sessão do servidor não devem sobreviver
        self._client.cookies.clear()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        authenticated: bool = True,
        allow_not_found: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        if authenticated and self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"

        url = f"{API_PREFIX}{path}"
        try:
            resp = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            self.log.warning(
                "gateway.transport_failed", method=method, path=path, error=repr(exc)
            )
            raise TransportError("Falha de comunicação com o servidor") from exc

        if resp.status_code == 401 and authenticated:
            self.log.info("gateway.session_expired", method=method, path=path)
            self._clear_tokens()
            raise SessionExpired()
        if resp.status_code == 404 and allow_not_found:
            return resp
        if resp.is_error:
            detail = _error_detail(resp)
            self.log.warning(
                "gateway.request_failed",
                method=method,
                path=path,
                status_code=resp.status_code,
                detail=detail,
            )
            raise TransportError(detail, status_code=resp.status_code)
        return resp

    # ----------------------------------------------------------- auth
    async def sign_in(self, email: str, password: str) -> None:
        resp = await self._request(
            "POST",
            "/auth/login",
            authenticated=False,
            json={"email": email, "password": password},
        )
        data = _json_body(resp, dict)
        token = data.get("access_token")
        if not isinstance(token, str) or not token:
            raise TransportError(INVALID_RESPONSE_MESSAGE, status_code=resp.status_code)
        self._client.cookies.clear()
        self._access_token = token

    async def get_session(self) -> AuthSession | None:
        if not self._access_token:
            return None
        try:
            resp = await self._request("GET", "/auth/me")
        except SessionExpired:
            return None
        data = _json_body(resp, dict)
        try:
            return AuthSession(
                user_id=data.get("id"), email=data.get("email"), name=data.get("name") or ""
            )
        except PydanticValidationError as exc:
            raise TransportError(INVALID_RESPONSE_MESSAGE, status_code=resp.status_code) from exc

    async def sign_out(self) -> None:
        """Idempotente: sem token não há o que encerrar."""
        if not self._access_token:
            return
        try:
            await self._request("POST", "/auth/logout")
        except (TransportError, SessionExpired) as exc:
            # a sessão local acaba de qualquer jeito
            self.log.warning("gateway.sign_out_failed", error=exc.message)
        finally:
            self._clear_tokens()

    async def fetch_role(self, user_id: int) -> str:
        resp = await self._request("GET", f"/profiles/{user_id}")
        role = _json_body(resp, dict).get("role")
        return role if isinstance(role, str) else ""

    # ----------------------------------------------------------- alunos
    def _parse_student(self, data: Any) -> StudentOut:
        try:
            return StudentOut.model_validate(data)
        except PydanticValidationError as exc:
            raise TransportError(INVALID_RESPONSE_MESSAGE) from exc

    async def list_students(self) -> list[StudentOut]:
        resp = await self._request("GET", "/students")
        return [self._parse_student(item) for item in _json_body(resp, list)]

    async def insert_student(self, candidate: Mapping[str, Any]) -> StudentOut:
        resp = await self._request("POST", "/students", json=dict(candidate))
        return self._parse_student(_json_body(resp, dict))

    async def update_student(self, student_id: str, candidate: Mapping[str, Any]) -> None:
        await self._request("PUT", f"/students/{student_id}", json=dict(candidate))

    async def delete_student(self, student_id: str) -> None:
        # aluno já excluído conta como sucesso
        await self._request("DELETE", f"/students/{student_id}", allow_not_found=True)
