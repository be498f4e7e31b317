"""Acesso a dados de funcionários e atestados.

``SqlRepository`` fala com o banco (Flask-SQLAlchemy); ``DemoRepository``
guarda uma cópia local por sessão para o login de demonstração.
Ambos devolvem apenas registros de domínio (``services.records``).
"""
from __future__ import annotations

import json
import logging
import os
import secrets
import time
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Tuple

from flask import current_app, session
from flask_login import current_user
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models.certificate import MedicalCertificate as CertificateRow
from ..models.employee import Employee as EmployeeRow
from ..utils.dates import to_date
from .records import (
    Employee,
    MedicalCertificate,
    certificate_from_payload,
    certificate_from_row,
    certificate_to_payload,
    employee_from_payload,
    employee_from_row,
    employee_to_payload,
)
from .scope import restriction_for, scope

logger = logging.getLogger(__name__)

DEMO_EMPLOYEES_KEY = "medguard_demo_employees"
DEMO_CERTIFICATES_KEY = "medguard_demo_certificates"


class StoreError(Exception):
    """Falha ao gravar/ler no armazenamento."""


class DuplicateRecordError(StoreError):
    pass


class RecordNotFound(StoreError):
    pass


def _int_id(value: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _commit(error_message: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("%s", error_message)
        raise StoreError(f"{error_message}: {e}") from e


class SqlRepository:
    # --------------------
    # Funcionários
    # --------------------
    def list_employees(self) -> List[Employee]:
        rows = EmployeeRow.query.order_by(EmployeeRow.name.asc()).all()
        return [employee_from_row(r) for r in rows]

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        pk = _int_id(employee_id)
        row = db.session.get(EmployeeRow, pk) if pk is not None else None
        return employee_from_row(row) if row else None

    def save_employee(self, emp: Employee) -> Employee:
        payload = employee_to_payload(emp)
        payload.pop("id")
        payload.pop("created_at")

        pk = _int_id(emp.id)
        if pk is not None:
            row = db.session.get(EmployeeRow, pk)
            if row is None:
                raise RecordNotFound("Funcionário não encontrado.")
            for key, value in payload.items():
                setattr(row, key, value)
        else:
            row = EmployeeRow(**payload)
            db.session.add(row)

        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise DuplicateRecordError("Este CPF já está cadastrado.") from e
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreError(f"Erro ao salvar funcionário: {e}") from e
        return employee_from_row(row)

    def delete_employee(self, employee_id: str) -> None:
        pk = _int_id(employee_id)
        row = db.session.get(EmployeeRow, pk) if pk is not None else None
        if row is None:
            raise RecordNotFound("Funcionário não encontrado.")
        # SQLite não aplica ON DELETE sem PRAGMA; desvincula explicitamente
        CertificateRow.query.filter_by(employee_id=row.id).update({"employee_id": None})
        db.session.delete(row)
        _commit("Erro ao excluir funcionário")

    # --------------------
    # Atestados
    # --------------------
    def list_certificates(self) -> List[MedicalCertificate]:
        rows = CertificateRow.query.order_by(CertificateRow.issue_date.desc(), CertificateRow.id.desc()).all()
        return [certificate_from_row(r) for r in rows]

    def get_certificate(self, certificate_id: str) -> Optional[MedicalCertificate]:
        pk = _int_id(certificate_id)
        row = db.session.get(CertificateRow, pk) if pk is not None else None
        return certificate_from_row(row) if row else None

    def save_certificate(self, cert: MedicalCertificate) -> MedicalCertificate:
        payload = certificate_to_payload(cert)
        payload.pop("id")
        payload.pop("created_at")
        for key in ("issue_date", "start_date", "end_date"):
            payload[key] = to_date(payload[key])
        payload["employee_id"] = _int_id(payload["employee_id"])

        pk = _int_id(cert.id)
        if pk is not None:
            row = db.session.get(CertificateRow, pk)
            if row is None:
                raise RecordNotFound("Atestado não encontrado.")
            for key, value in payload.items():
                setattr(row, key, value)
        else:
            row = CertificateRow(**payload)
            db.session.add(row)

        _commit("Erro no salvamento")
        return certificate_from_row(row)

    def delete_certificate(self, certificate_id: str) -> None:
        pk = _int_id(certificate_id)
        row = db.session.get(CertificateRow, pk) if pk is not None else None
        if row is None:
            raise RecordNotFound("Atestado não encontrado.")
        db.session.delete(row)
        _commit("Erro ao excluir atestado")


class DemoRepository:
    """Cópia local dos dados de demonstração, sem tocar no banco.

    A sessão guarda só um token; as listas ficam em um JSON por sessão em
    DEMO_DATA_FOLDER (cookie de sessão não comporta a lista inteira).
    """

    def _path(self) -> str:
        token = session.get("demo_token")
        if not token:
            token = secrets.token_hex(16)
            session["demo_token"] = token
        folder = current_app.config["DEMO_DATA_FOLDER"]
        os.makedirs(folder, exist_ok=True)
        return os.path.join(folder, f"{token}.json")

    def _read(self) -> dict:
        path = self._path()
        if not os.path.exists(path):
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("demo data unreadable: %s", path)
            raise StoreError("Falha ao ler dados de demonstração.") from e

    def _load(self, key: str) -> list:
        return list(self._read().get(key) or [])

    def _store(self, key: str, items: list) -> None:
        data = self._read()
        data[key] = items
        try:
            with open(self._path(), "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
        except OSError as e:
            raise StoreError("Falha ao gravar dados de demonstração.") from e

    def discard(self) -> None:
        """Apaga os dados da sessão atual (logout do modo demonstração)."""
        token = session.pop("demo_token", None)
        if not token:
            return
        path = os.path.join(current_app.config["DEMO_DATA_FOLDER"], f"{token}.json")
        if os.path.exists(path):
            os.remove(path)

    @staticmethod
    def purge_expired(max_age_seconds: int) -> int:
        """Remove arquivos de sessões abandonadas (sem logout)."""
        folder = current_app.config["DEMO_DATA_FOLDER"]
        if not os.path.isdir(folder):
            return 0
        cutoff = time.time() - max_age_seconds
        removed = 0
        for name in os.listdir(folder):
            path = os.path.join(folder, name)
            if name.endswith(".json") and os.path.getmtime(path) < cutoff:
                os.remove(path)
                removed += 1
        if removed:
            logger.info("demo data purged: %s file(s)", removed)
        return removed

    @staticmethod
    def _new_id(prefix: str) -> str:
        return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(3)}"

    def list_employees(self) -> List[Employee]:
        emps = [employee_from_payload(d) for d in self._load(DEMO_EMPLOYEES_KEY)]
        return sorted(emps, key=lambda e: e.name.lower())

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        return next((e for e in self.list_employees() if e.id == employee_id), None)

    def save_employee(self, emp: Employee) -> Employee:
        items = self._load(DEMO_EMPLOYEES_KEY)
        if any(d.get("cpf") == emp.cpf and d.get("id") != (emp.id or None) for d in items):
            raise DuplicateRecordError("Este CPF já está cadastrado.")

        if emp.id:
            saved = replace(emp, created_at=emp.created_at or datetime.utcnow())
            items = [employee_to_payload(saved) if d.get("id") == emp.id else d for d in items]
        else:
            saved = replace(emp, id=self._new_id("demo-emp"), created_at=datetime.utcnow())
            items = [employee_to_payload(saved)] + items
        self._store(DEMO_EMPLOYEES_KEY, items)
        return saved

    def delete_employee(self, employee_id: str) -> None:
        items = self._load(DEMO_EMPLOYEES_KEY)
        if not any(d.get("id") == employee_id for d in items):
            raise RecordNotFound("Funcionário não encontrado.")
        self._store(DEMO_EMPLOYEES_KEY, [d for d in items if d.get("id") != employee_id])

        certs = self._load(DEMO_CERTIFICATES_KEY)
        for d in certs:
            if d.get("employee_id") == employee_id:
                d["employee_id"] = None
        self._store(DEMO_CERTIFICATES_KEY, certs)

    def list_certificates(self) -> List[MedicalCertificate]:
        return [certificate_from_payload(d) for d in self._load(DEMO_CERTIFICATES_KEY)]

    def get_certificate(self, certificate_id: str) -> Optional[MedicalCertificate]:
        return next((c for c in self.list_certificates() if c.id == certificate_id), None)

    def save_certificate(self, cert: MedicalCertificate) -> MedicalCertificate:
        items = self._load(DEMO_CERTIFICATES_KEY)
        if cert.id:
            saved = cert
            items = [certificate_to_payload(saved) if d.get("id") == cert.id else d for d in items]
        else:
            saved = replace(cert, id=self._new_id("demo-cert"), created_at=datetime.utcnow())
            items = [certificate_to_payload(saved)] + items
        self._store(DEMO_CERTIFICATES_KEY, items)
        return saved

    def delete_certificate(self, certificate_id: str) -> None:
        items = [d for d in self._load(DEMO_CERTIFICATES_KEY) if d.get("id") != certificate_id]
        self._store(DEMO_CERTIFICATES_KEY, items)


def get_repository():
    if getattr(current_user, "is_demo", False):
        return DemoRepository()
    return SqlRepository()


def load_visible(repo=None) -> Tuple[List[Employee], List[MedicalCertificate]]:
    """Carrega funcionários/atestados já recortados pela restrição do usuário."""
    repo = repo or get_repository()
    return scope(repo.list_employees(), repo.list_certificates(), restriction_for(current_user))
