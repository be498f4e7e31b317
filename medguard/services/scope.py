from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from .records import Employee, MedicalCertificate, Restriction


def _norm(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def restriction_for(user) -> Restriction:
    """Restrição de visibilidade (CNPJ e/ou cidade) do usuário logado."""
    return Restriction(
        cnpj=_norm(getattr(user, "cnpj", None)),
        city=_norm(getattr(user, "city", None)),
    )


def _matches(emp: Employee, restriction: Restriction) -> bool:
    cnpj = _norm(restriction.cnpj)
    city = _norm(restriction.city)
    if cnpj is not None and _norm(emp.cnpj) != cnpj:
        return False
    if city is not None and _norm(emp.city) != city:
        return False
    return True


def scope(
    employees: Iterable[Employee],
    certificates: Iterable[MedicalCertificate],
    restriction: Optional[Restriction],
) -> Tuple[List[Employee], List[MedicalCertificate]]:
    """Recorta funcionários/atestados visíveis para a restrição.

    Sem restrição (administrador global) tudo é visível. Com restrição,
    CNPJ e cidade são conjuntivos e atestados sem funcionário visível
    ficam de fora.
    """
    if restriction is None or restriction.is_empty:
        return list(employees), list(certificates)

    visible_employees = [e for e in employees if _matches(e, restriction)]
    visible_ids = {e.id for e in visible_employees}
    visible_certificates = [c for c in certificates if c.employee_id in visible_ids]
    return visible_employees, visible_certificates
