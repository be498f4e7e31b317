from __future__ import annotations

import os
from datetime import date, timedelta
from io import BytesIO

from openpyxl import load_workbook

from medguard.models.audit_log import AuditLog
from medguard.services.repository import SqlRepository


def _form(employee_id, **overrides):
    today = date.today()
    data = {
        "employee_id": employee_id,
        "issue_date": "",
        "start_date": (today - timedelta(days=4)).isoformat(),
        "end_date": today.isoformat(),
        "days": "1",
        "cid": "",
        "doctor_name": "Dr. Paulo",
        "crm": "9988-PE",
        "type": "Doença",
        "status": "ACTIVE",
        "observations": "",
    }
    data.update(overrides)
    return data


def test_admin_sees_cid_viewer_sees_mask(client, login, seeded):
    login("admin")
    assert "J11" in client.get("/certificates/").get_data(as_text=True)

    client.post("/auth/logout")
    login("viewer")
    body = client.get("/certificates/").get_data(as_text=True)
    assert "J11" not in body
    assert "***" in body


def test_restricted_viewer_sees_only_scope(client, login, seeded):
    login("restricted")
    body = client.get("/certificates/").get_data(as_text=True)
    assert "Maria Recife" in body
    assert "João Olinda" not in body
    assert client.get(f"/certificates/{seeded['c2'].id}").status_code == 404


def test_create_derives_days_and_stores_attachment(app, client, login, seeded):
    login("admin")
    data = _form(seeded["e1"].id, lgpd_consent="y", cid="a09")
    data["arquivo"] = (BytesIO(b"%PDF-1.4 atestado"), "atestado.pdf")
    response = client.post("/certificates/new", data=data, content_type="multipart/form-data")
    assert response.status_code == 302

    with app.app_context():
        created = [c for c in SqlRepository().list_certificates() if c.doctor_name == "Dr. Paulo"][0]
        assert created.days == 5
        assert created.cid == "A09"
        assert created.issue_date == created.start_date
        assert created.file_name == "atestado.pdf"
        assert os.path.exists(os.path.join(app.config["UPLOAD_FOLDER"], "certificates", created.file_path))
        assert AuditLog.query.filter_by(action="CERT_CREATE").count() == 1

    download = client.get(f"/certificates/{created.id}/file")
    assert download.status_code == 200
    assert download.data == b"%PDF-1.4 atestado"


def test_cid_not_stored_without_consent(app, client, login, seeded):
    login("admin")
    client.post("/certificates/new", data=_form(seeded["e1"].id))
    with app.app_context():
        created = [c for c in SqlRepository().list_certificates() if c.doctor_name == "Dr. Paulo"][0]
        assert created.cid is None


def test_rejects_end_before_start(client, login, seeded):
    login("admin")
    today = date.today()
    data = _form(seeded["e1"].id, start_date=today.isoformat(), end_date=(today - timedelta(days=1)).isoformat())
    response = client.post("/certificates/new", data=data)
    assert response.status_code == 200
    assert "não pode ser anterior" in response.get_data(as_text=True)


def test_rejects_unknown_attachment_type(client, login, seeded):
    login("admin")
    data = _form(seeded["e1"].id)
    data["arquivo"] = (BytesIO(b"MZ"), "virus.exe")
    response = client.post("/certificates/new", data=data, content_type="multipart/form-data")
    assert response.status_code == 200
    assert "Envie PDF ou imagem." in response.get_data(as_text=True)


def test_new_form_prefills_employee(client, login, seeded):
    login("admin")
    body = client.get(f"/certificates/new?employee_id={seeded['e1'].id}").get_data(as_text=True)
    assert f'<option selected value="{seeded["e1"].id}">' in body


def test_viewer_can_open_but_not_edit(client, login, seeded):
    login("viewer")
    cert = seeded["c1"]
    page = client.get(f"/certificates/{cert.id}")
    assert page.status_code == 200
    assert "J11" not in page.get_data(as_text=True)

    response = client.post(f"/certificates/{cert.id}", data=_form(cert.employee_id))
    assert response.status_code == 403


def test_admin_edits_certificate(app, client, login, seeded):
    login("admin")
    cert = seeded["c1"]
    today = date.today()
    data = _form(
        cert.employee_id,
        start_date=(today - timedelta(days=19)).isoformat(),
        end_date=today.isoformat(),
        cid="J11",
        lgpd_consent="y",
    )
    assert client.post(f"/certificates/{cert.id}", data=data).status_code == 302
    with app.app_context():
        updated = SqlRepository().get_certificate(cert.id)
        assert updated.days == 20
        assert updated.cid == "J11"


def test_delete_certificate(app, client, login, seeded):
    login("admin")
    cert = seeded["c2"]
    assert client.post(f"/certificates/{cert.id}/delete").status_code == 302
    with app.app_context():
        assert SqlRepository().get_certificate(cert.id) is None
        assert AuditLog.query.filter_by(action="CERT_DELETE").count() == 1


def test_viewer_cannot_delete(client, login, seeded):
    login("viewer")
    assert client.post(f"/certificates/{seeded['c1'].id}/delete").status_code == 403


def test_export_pdf(app, client, login, seeded):
    login("viewer")
    response = client.get("/certificates/export.pdf")
    assert response.status_code == 200
    assert response.mimetype == "application/pdf"
    assert response.data.startswith(b"%PDF")
    with app.app_context():
        assert AuditLog.query.filter_by(action="EXPORT").count() == 1


def test_export_xlsx_is_scoped_and_masked(client, login, seeded):
    login("restricted")
    response = client.get("/certificates/export.xlsx")
    assert response.status_code == 200
    rows = list(load_workbook(BytesIO(response.data)).active.iter_rows(values_only=True))
    assert len(rows) == 2
    assert rows[1][0] == "Maria Recife"
    assert rows[1][6] == "***"


def test_cid_typed_without_consent_is_discarded(app, client, login, seeded):
    login("admin")
    client.post("/certificates/new", data=_form(seeded["e1"].id, cid="A09"))
    with app.app_context():
        created = [c for c in SqlRepository().list_certificates() if c.doctor_name == "Dr. Paulo"][0]
        assert created.cid is None


def test_withdrawing_consent_on_edit_clears_cid(app, client, login, seeded):
    login("admin")
    cert = seeded["c1"]
    data = _form(
        cert.employee_id,
        start_date=cert.start_date.isoformat(),
        end_date=cert.end_date.isoformat(),
        cid="J11",
    )
    assert client.post(f"/certificates/{cert.id}", data=data).status_code == 302
    with app.app_context():
        assert SqlRepository().get_certificate(cert.id).cid is None
