from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, datetime, str, None]


def to_date(value: DateLike) -> Optional[date]:
    """Normaliza date/datetime/ISO string para date (meia-noite local).

    Hora e fuso são descartados; string vazia ou inválida vira None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raw = str(value).strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return None


def compute_days(start: DateLike, end: DateLike) -> int:
    """Quantidade de dias do afastamento, inclusiva (mínimo 1).

    Conta dias de calendário: hora e fuso são descartados antes da
    subtração, para date, datetime ou string ISO. Intervalos invertidos ou
    incompletos resultam em 1.
    """
    s, e = to_date(start), to_date(end)
    if s is None or e is None:
        return 1
    days = (e - s).days + 1
    return days if days > 0 else 1


def format_br(value: DateLike) -> str:
    d = to_date(value)
    return d.strftime("%d/%m/%Y") if d else "---"
