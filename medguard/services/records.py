"""Registros de domínio e a camada de adaptação com o armazenamento.

As linhas do banco (e os dicts do modo demonstração) usam nomes snake_case
próprios do armazenamento (``file_path``, ``doctor_name`` ...). As telas e os
serviços trabalham apenas com os registros tipados abaixo; a conversão fica
concentrada nas funções ``*_from_row`` / ``*_from_payload`` / ``*_to_payload``.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..utils.dates import compute_days, to_date

CERTIFICATE_TYPES = ("Doença", "Acidente", "Maternidade", "Outros")
CERTIFICATE_STATUSES = ("ACTIVE", "EXPIRED", "PENDING")


@dataclass(frozen=True)
class Employee:
    id: str
    name: str
    cpf: str
    registration: str
    department: str
    role: str
    cnpj: Optional[str] = None
    city: Optional[str] = None
    created_at: Optional[datetime] = None


# funcionário removido ou id inexistente
UNLINKED_EMPLOYEE = Employee(
    id="",
    name="Não vinculado",
    cpf="",
    registration="---",
    department="",
    role="",
)


@dataclass(frozen=True)
class MedicalCertificate:
    id: str
    employee_id: str
    issue_date: date
    start_date: date
    end_date: date
    days: int
    doctor_name: str
    crm: str
    type: str = "Doença"
    status: str = "ACTIVE"
    cid: Optional[str] = None
    file_path: Optional[str] = None
    file_name: Optional[str] = None
    observations: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def has_attachment(self) -> bool:
        return bool(self.file_path)


@dataclass(frozen=True)
class Restriction:
    cnpj: Optional[str] = None
    city: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not _clean(self.cnpj) and not _clean(self.city)


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _id(value: Any) -> str:
    return "" if value is None else str(value)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


# --------------------
# Funcionários
# --------------------
def employee_from_row(row) -> Employee:
    return Employee(
        id=_id(row.id),
        name=row.name or "",
        cpf=row.cpf or "",
        registration=row.registration or "",
        department=row.department or "",
        role=row.role or "",
        cnpj=_clean(row.cnpj),
        city=_clean(row.city),
        created_at=row.created_at,
    )


def employee_to_payload(emp: Employee) -> Dict[str, Any]:
    return {
        "id": emp.id or None,
        "name": emp.name,
        "cpf": emp.cpf,
        "registration": emp.registration,
        "department": emp.department,
        "role": emp.role,
        "cnpj": _clean(emp.cnpj),
        "city": _clean(emp.city),
        "created_at": emp.created_at.isoformat() if emp.created_at else None,
    }


def employee_from_payload(data: Dict[str, Any]) -> Employee:
    return Employee(
        id=_id(data.get("id")),
        name=data.get("name") or "",
        cpf=data.get("cpf") or "",
        registration=data.get("registration") or "",
        department=data.get("department") or "",
        role=data.get("role") or "",
        cnpj=_clean(data.get("cnpj")),
        city=_clean(data.get("city")),
        created_at=_to_datetime(data.get("created_at")),
    )


# --------------------
# Atestados
# --------------------
def certificate_from_row(row) -> MedicalCertificate:
    return MedicalCertificate(
        id=_id(row.id),
        employee_id=_id(row.employee_id),
        issue_date=row.issue_date,
        start_date=row.start_date,
        end_date=row.end_date,
        days=row.days,
        doctor_name=row.doctor_name or "",
        crm=row.crm or "",
        type=row.type or "Outros",
        status=row.status or "ACTIVE",
        cid=_clean(row.cid),
        file_path=_clean(row.file_path),
        file_name=_clean(row.file_name),
        observations=_clean(row.observations),
        created_at=row.created_at,
    )


def certificate_to_payload(cert: MedicalCertificate) -> Dict[str, Any]:
    return {
        "id": cert.id or None,
        "employee_id": cert.employee_id or None,
        "issue_date": _iso(cert.issue_date),
        "start_date": _iso(cert.start_date),
        "end_date": _iso(cert.end_date),
        "days": cert.days,
        "cid": _clean(cert.cid),
        "doctor_name": cert.doctor_name,
        "crm": cert.crm,
        "type": cert.type,
        "status": cert.status,
        "file_path": _clean(cert.file_path),
        "file_name": _clean(cert.file_name),
        "observations": _clean(cert.observations),
        "created_at": cert.created_at.isoformat() if cert.created_at else None,
    }


def certificate_from_payload(data: Dict[str, Any]) -> MedicalCertificate:
    start = to_date(data.get("start_date"))
    end = to_date(data.get("end_date"))
    days = data.get("days")
    return MedicalCertificate(
        id=_id(data.get("id")),
        employee_id=_id(data.get("employee_id")),
        issue_date=to_date(data.get("issue_date")) or start,
        start_date=start,
        end_date=end,
        days=int(days) if days else compute_days(start, end),
        doctor_name=data.get("doctor_name") or "",
        crm=data.get("crm") or "",
        type=data.get("type") or "Outros",
        status=data.get("status") or "ACTIVE",
        cid=_clean(data.get("cid")),
        file_path=_clean(data.get("file_path")),
        file_name=_clean(data.get("file_name")),
        observations=_clean(data.get("observations")),
        created_at=_to_datetime(data.get("created_at")),
    )
