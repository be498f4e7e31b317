from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Tuple

from ..utils.dates import DateLike, to_date
from .alerts import INSS_THRESHOLD_DAYS
from .records import Employee, MedicalCertificate

RECENT_LIMIT = 5


@dataclass
class DashboardStats:
    active_count: int = 0
    employee_count: int = 0
    returns_next_7_days: int = 0
    critical_count: int = 0
    by_department: List[Tuple[str, int]] = field(default_factory=list)
    recent_active: List[MedicalCertificate] = field(default_factory=list)


def department_breakdown(
    employees: Iterable[Employee], certificates: Iterable[MedicalCertificate]
) -> List[Tuple[str, int]]:
    dept_by_emp = {e.id: e.department for e in employees}
    counts: Dict[str, int] = {}
    for c in certificates:
        if c.employee_id not in dept_by_emp:
            continue
        dept = dept_by_emp[c.employee_id] or "Sem setor"
        counts[dept] = counts.get(dept, 0) + 1

    if not counts:
        return [("Sem registros", 0)]
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))


def build_stats(
    employees: List[Employee],
    certificates: List[MedicalCertificate],
    today: DateLike,
) -> DashboardStats:
    ref = to_date(today) or date.today()

    active = [c for c in certificates if to_date(c.end_date) and to_date(c.end_date) >= ref]
    returning = [c for c in active if 0 < (to_date(c.end_date) - ref).days < 7]

    return DashboardStats(
        active_count=len(active),
        employee_count=len(employees),
        returns_next_7_days=len(returning),
        critical_count=sum(1 for c in active if c.days > INSS_THRESHOLD_DAYS),
        by_department=department_breakdown(employees, certificates),
        recent_active=active[:RECENT_LIMIT],
    )
