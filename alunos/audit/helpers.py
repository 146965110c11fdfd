from __future__ import annotations

from datetime import UTC, datetime

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from alunos.core.logging import get_logger
from alunos.models.audit_log import AuditLog


def get_client_ip(request: Request) -> str | None:
    # Respeita proxy → 1º IP do X-Forwarded-For
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    xri = request.headers.get("x-real-ip")
    if xri:
        return xri.strip()
    return request.client.host if request.client else None


def record_audit(
    db: Session,
    *,
    request: Request,
    user_id: int | None,
    action: str,
    entity: str,
    entity_id: str | int | None,
    autocommit: bool = False,
) -> None:
    """
    Se autocommit=False (padrão): inclui o log na MESMA transação do CRUD do aluno.
    Se autocommit=True: faz commit isolado só do log (bom para login).
    """
    log = AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        timestamp_utc=datetime.now(UTC),
        ip=get_client_ip(request),
    )
    db.add(log)
    if autocommit:
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()  # falha em log não deve derrubar o request
            get_logger().warning("audit.commit_failed", action=action, entity=entity)
