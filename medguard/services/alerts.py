"""Classificador de alertas operacionais de afastamento."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from ..utils.dates import DateLike, to_date
from .records import UNLINKED_EMPLOYEE, Employee, MedicalCertificate

# afastamentos acima disso exigem encaminhamento ao INSS
INSS_THRESHOLD_DAYS = 15

RETURN_TOMORROW = "RETURN_TOMORROW"
RETURN_OVERDUE = "RETURN_OVERDUE"
INSS_THRESHOLD = "INSS_THRESHOLD"

SEVERITY_ORDER = {"critical": 0, "danger": 1, "warning": 2}


@dataclass(frozen=True)
class Alert:
    kind: str
    severity: str
    title: str
    description: str
    date: date
    employee: Employee
    certificate: MedicalCertificate

    @property
    def is_linked(self) -> bool:
        return self.employee is not UNLINKED_EMPLOYEE


def _employee_index(employees: Iterable[Employee]) -> Dict[str, Employee]:
    return {e.id: e for e in employees}


def _display_name(emp: Employee) -> str:
    return emp.name if emp is not UNLINKED_EMPLOYEE else "Funcionário"


def classify_one(
    cert: MedicalCertificate, emp: Employee, today: date
) -> Optional[Alert]:
    """Primeira regra que casar vence; no máximo um alerta por atestado."""
    end = to_date(cert.end_date)

    # 1. atestado termina hoje -> retorno amanhã
    if end == today:
        return Alert(
            kind=RETURN_TOMORROW,
            severity="warning",
            title="Retorno Previsto para Amanhã",
            description=f"O período de afastamento de {_display_name(emp)} encerra hoje.",
            date=end,
            employee=emp,
            certificate=cert,
        )

    # 2. atestado terminou ontem -> deveria ter retornado hoje
    if end == today - timedelta(days=1):
        return Alert(
            kind=RETURN_OVERDUE,
            severity="danger",
            title="Retorno Pendente (Hoje)",
            description=f"{_display_name(emp)} deveria ter retornado hoje ao posto de trabalho.",
            date=end,
            employee=emp,
            certificate=cert,
        )

    # 3. afastamento longo
    if cert.days > INSS_THRESHOLD_DAYS:
        return Alert(
            kind=INSS_THRESHOLD,
            severity="critical",
            title="Alerta de INSS (Afastamento Longo)",
            description=(
                f"Afastamento de {cert.days} dias detectado. "
                "Necessário agendamento de perícia previdenciária."
            ),
            date=to_date(cert.start_date),
            employee=emp,
            certificate=cert,
        )

    return None


def classify(
    certificates: Iterable[MedicalCertificate],
    employees: Iterable[Employee],
    reference_date: DateLike,
) -> List[Alert]:
    """Gera a lista de alertas na ordem dos atestados recebidos."""
    today = to_date(reference_date)
    if today is None:
        return []

    by_id = _employee_index(employees)
    alerts: List[Alert] = []
    for cert in certificates:
        emp = by_id.get(cert.employee_id, UNLINKED_EMPLOYEE)
        alert = classify_one(cert, emp, today)
        if alert is not None:
            alerts.append(alert)
    return alerts


def sort_by_severity(alerts: Iterable[Alert]) -> List[Alert]:
    return sorted(alerts, key=lambda a: SEVERITY_ORDER.get(a.severity, len(SEVERITY_ORDER)))


def count_attention(certificates: Iterable[MedicalCertificate], reference_date: DateLike) -> int:
    """Contador do menu: atestados vencidos/encerrando hoje ou acima do limite do INSS."""
    today = to_date(reference_date)
    if today is None:
        return 0
    return sum(
        1
        for c in certificates
        if (to_date(c.end_date) is not None and to_date(c.end_date) <= today)
        or c.days > INSS_THRESHOLD_DAYS
    )
