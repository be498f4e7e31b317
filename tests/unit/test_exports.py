from __future__ import annotations

from datetime import date, datetime
from io import BytesIO

from openpyxl import load_workbook

from medguard.services.exports import XLSX_HEADERS, certificates_pdf, certificates_xlsx


def _sheet_rows(content: bytes):
    wb = load_workbook(BytesIO(content))
    return [list(r) for r in wb.active.iter_rows(values_only=True)]


def _data(employee_factory, certificate_factory):
    employees = [employee_factory("E1", name="Ana", registration="M-1", department="TI")]
    certs = [
        certificate_factory("C1", "E1", start=date(2024, 1, 1), end=date(2024, 1, 5), days=5, cid="J11"),
        certificate_factory("C2", "removido", start=date(2024, 2, 1), end=date(2024, 2, 1), days=1),
    ]
    return employees, certs


def test_xlsx_rows(employee_factory, certificate_factory):
    employees, certs = _data(employee_factory, certificate_factory)
    rows = _sheet_rows(certificates_xlsx(certs, employees))

    assert rows[0] == XLSX_HEADERS
    assert rows[1][:7] == ["Ana", "M-1", "TI", "01/01/2024", "05/01/2024", 5, "J11"]
    assert rows[2][0] == "Não vinculado"
    assert rows[2][6] == "N/I"


def test_xlsx_masks_cid(employee_factory, certificate_factory):
    employees, certs = _data(employee_factory, certificate_factory)
    rows = _sheet_rows(certificates_xlsx(certs, employees, show_cid=False))
    assert rows[1][6] == "***"


def test_pdf_is_generated(employee_factory, certificate_factory):
    employees, certs = _data(employee_factory, certificate_factory)
    content = certificates_pdf(certs, employees, generated_at=datetime(2024, 3, 1, 10, 0))
    assert content.startswith(b"%PDF")


def test_pdf_without_records():
    assert certificates_pdf([], []).startswith(b"%PDF")
