from __future__ import annotations

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

BR_TZ = ZoneInfo("America/Sao_Paulo")

MONTHS_PT = (
    "janeiro",
    "fevereiro",
    "março",
    "abril",
    "maio",
    "junho",
    "julho",
    "agosto",
    "setembro",
    "outubro",
    "novembro",
    "dezembro",
)


def to_local(dt: datetime, tz: ZoneInfo | None = None) -> datetime:
    """
    Converte para a TZ local (aware).
    - Naive: assume UTC (é o que o banco devolve no SQLite).
    - Aware: só converte.
    """
    tz = tz or BR_TZ
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(tz)


def fmt_dmy(d: date) -> str:
    return d.strftime("%d/%m/%Y")


def fmt_long(d: date) -> str:
    # strftime("%B") depende do locale do processo
    return f"{d.day:02d} de {MONTHS_PT[d.month - 1]} de {d.year}"


def format_date(value: date | str | None) -> str:
    """Data de nascimento por extenso ("01 de janeiro de 2000"); texto que não for data volta como veio."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return fmt_long(value)
    try:
        return fmt_long(date.fromisoformat(value))
    except ValueError:
        return value


def format_datetime(value: datetime | str | None, tz: ZoneInfo | None = None) -> str:
    """Carimbo de criação/atualização: dd/mm/aaaa às HH:MM no horário local."""
    if value is None:
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    local = to_local(value, tz)
    return f"{fmt_dmy(local.date())} às {local:%H:%M}"
