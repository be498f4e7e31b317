from __future__ import annotations

from datetime import date, timedelta

import pytest

from medguard import create_app
from medguard.extensions import db
from medguard.models.user import User
from medguard.services.records import Employee, MedicalCertificate
from medguard.services.repository import SqlRepository

PASSWORD = "senha-teste-123"
RESTRICTED_CNPJ = "11222333000181"


def make_employee(id="E1", **kwargs) -> Employee:
    data = dict(
        id=id,
        name=f"Funcionário {id}",
        cpf="12345678901",
        registration=f"MAT-{id}",
        department="TI",
        role="Analista",
        cnpj=None,
        city=None,
    )
    data.update(kwargs)
    return Employee(**data)


def make_certificate(id="C1", employee_id="E1", start=None, end=None, days=None, **kwargs) -> MedicalCertificate:
    end = end or date.today()
    start = start or end
    data = dict(
        id=id,
        employee_id=employee_id,
        issue_date=start,
        start_date=start,
        end_date=end,
        days=days if days is not None else (end - start).days + 1,
        doctor_name="Dra. Ana",
        crm="12345-PE",
    )
    data.update(kwargs)
    return MedicalCertificate(**data)


@pytest.fixture
def employee_factory():
    return make_employee


@pytest.fixture
def certificate_factory():
    return make_certificate


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "WTF_CSRF_ENABLED": False,
        "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        "DEMO_DATA_FOLDER": str(tmp_path / "demo"),
        "DEMO_MODE_ENABLED": True,
        "LOG_FILE": "",
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def users(app):
    """admin global, visualizador global, visualizador restrito (CNPJ + Recife) e inativo."""
    profiles = {
        "admin": dict(name="Admin", email="admin@medguard.com", role="ADMIN"),
        "viewer": dict(name="Leitor", email="viewer@medguard.com", role="VIEWER"),
        "restricted": dict(
            name="Leitor Recife", email="recife@medguard.com", role="VIEWER",
            cnpj=RESTRICTED_CNPJ, city="Recife",
        ),
        "restricted_admin": dict(
            name="Admin Recife", email="adm.recife@medguard.com", role="ADMIN",
            cnpj=RESTRICTED_CNPJ, city="Recife",
        ),
        "inactive": dict(name="Inativo", email="inativo@medguard.com", role="ADMIN", active=False),
    }
    ids = {}
    with app.app_context():
        for key, profile in profiles.items():
            u = User(**profile)
            u.set_password(PASSWORD)
            db.session.add(u)
            db.session.commit()
            ids[key] = u.id
    return {key: dict(id=ids[key], **profile) for key, profile in profiles.items()}


@pytest.fixture
def login(client, users):
    def _login(who="admin", password=PASSWORD):
        return client.post("/auth/login", data={"email": users[who]["email"], "password": password})
    return _login


@pytest.fixture
def seeded(app):
    """Dois funcionários (Recife / Olinda) com um atestado cada.

    E1 (Recife) termina hoje; E2 (Olinda) terminou há 10 dias com 20 dias.
    """
    today = date.today()
    with app.app_context():
        repo = SqlRepository()
        e1 = repo.save_employee(make_employee(
            id="", name="Maria Recife", cpf="11111111111", registration="R-1",
            department="Enfermagem", cnpj=RESTRICTED_CNPJ, city="Recife",
        ))
        e2 = repo.save_employee(make_employee(
            id="", name="João Olinda", cpf="22222222222", registration="O-1",
            department="Financeiro", cnpj="99888777000166", city="Olinda",
        ))
        c1 = repo.save_certificate(make_certificate(
            id="", employee_id=e1.id, start=today - timedelta(days=2), end=today, cid="J11",
        ))
        c2 = repo.save_certificate(make_certificate(
            id="", employee_id=e2.id, start=today - timedelta(days=29), end=today - timedelta(days=10), days=20,
            cid="M54",
        ))
    return {"e1": e1, "e2": e2, "c1": c1, "c2": c2}
