from __future__ import annotations

from dataclasses import dataclass

from alunos.core.logging import get_logger

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class Flash:
    level: str
    message: str


class FlashQueue:
    """Mensagens transitórias para a camada de apresentação (toasts)."""

    def __init__(self) -> None:
        self._items: list[Flash] = []

    def success(self, message: str) -> None:
        self._items.append(Flash(SUCCESS, message))
        get_logger().info("flash.success", message=message)

    def error(self, message: str) -> None:
        self._items.append(Flash(ERROR, message))
        get_logger().info("flash.error", message=message)

    def peek(self) -> list[Flash]:
        return list(self._items)
