"""Relatórios de atestados em PDF (reportlab) e Excel (openpyxl)."""
from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Iterable, List, Sequence
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..utils.dates import format_br
from .records import UNLINKED_EMPLOYEE, Employee, MedicalCertificate

PDF_HEADERS = ["Funcionário", "Matrícula", "Início", "Término", "Dias", "CID", "Tipo", "Observações"]
XLSX_HEADERS = [
    "Funcionário", "Matrícula", "Setor", "Data Início", "Data Término",
    "Dias", "CID", "Médico", "CRM", "Tipo", "Observações",
]
TEMPLATE_HEADERS = ["Nome", "CPF", "Matricula", "Setor", "Cargo", "CNPJ", "Cidade"]

INDIGO = colors.Color(79 / 255, 70 / 255, 229 / 255)
ROW_ALT = colors.Color(245 / 255, 247 / 255, 250 / 255)


def _pairs(certificates: Iterable[MedicalCertificate], employees: Iterable[Employee]):
    by_id = {e.id: e for e in employees}
    for c in certificates:
        yield c, by_id.get(c.employee_id, UNLINKED_EMPLOYEE)


def _cid(cert: MedicalCertificate, show_cid: bool) -> str:
    if not cert.cid:
        return "N/I"
    return cert.cid if show_cid else "***"


def make_xlsx_bytes(sheet_name: str, headers: Sequence[str], rows: Iterable[Sequence[object]]) -> bytes:
    """Planilha simples: cabeçalho em negrito, congelado, largura automática."""
    wb = Workbook()
    ws = wb.active
    ws.title = (sheet_name or "Planilha")[:31]

    ws.append(list(headers))
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill("solid", fgColor="4F46E5")
    for col in range(1, len(headers) + 1):
        cell = ws.cell(row=1, column=col)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    for r in rows:
        ws.append(["" if v is None else v for v in r])

    ws.freeze_panes = "A2"

    for col_idx in range(1, len(headers) + 1):
        col_letter = get_column_letter(col_idx)
        max_len = max((len(str(c.value)) for c in ws[col_letter] if c.value is not None), default=0)
        ws.column_dimensions[col_letter].width = min(max(10, max_len + 2), 55)

    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()


def certificates_xlsx(
    certificates: List[MedicalCertificate], employees: List[Employee], show_cid: bool = True
) -> bytes:
    rows = []
    for c, emp in _pairs(certificates, employees):
        rows.append([
            emp.name,
            emp.registration,
            emp.department,
            format_br(c.start_date),
            format_br(c.end_date),
            c.days,
            _cid(c, show_cid),
            c.doctor_name,
            c.crm,
            c.type,
            c.observations or "",
        ])
    return make_xlsx_bytes("Atestados", XLSX_HEADERS, rows)


def import_template_xlsx() -> bytes:
    example = ["NOME DO FUNCIONARIO", "00000000000", "MAT-001", "TI", "ANALISTA", "", ""]
    return make_xlsx_bytes("Modelo", TEMPLATE_HEADERS, [example])


def certificates_pdf(
    certificates: List[MedicalCertificate],
    employees: List[Employee],
    show_cid: bool = True,
    generated_at: datetime = None,
) -> bytes:
    generated_at = generated_at or datetime.now()
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=30,
        leftMargin=30,
        topMargin=30,
        bottomMargin=30,
        title="MedGuard - Relatório de Afastamentos",
    )

    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name="ReportTitle", fontSize=18, leading=22, textColor=INDIGO, spaceAfter=6))
    styles.add(ParagraphStyle(name="Small", fontSize=9, textColor=colors.grey, spaceAfter=12))
    cell_style = ParagraphStyle(name="Cell", fontSize=8, leading=10)

    elements = [
        Paragraph("MedGuard - Relatório de Afastamentos", styles["ReportTitle"]),
        Paragraph(f"Gerado em: {generated_at.strftime('%d/%m/%Y %H:%M')}", styles["Small"]),
        Spacer(1, 6),
    ]

    data = [PDF_HEADERS]
    for c, emp in _pairs(certificates, employees):
        data.append([
            Paragraph(escape(emp.name), cell_style),
            emp.registration or "---",
            format_br(c.start_date),
            format_br(c.end_date),
            str(c.days),
            _cid(c, show_cid),
            c.type,
            Paragraph(escape(c.observations or "---"), cell_style),
        ])

    table = Table(data, repeatRows=1, colWidths=[150, 70, 65, 65, 40, 50, 75, 250])
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), INDIGO),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
    ]
    for i in range(2, len(data), 2):
        style.append(("BACKGROUND", (0, i), (-1, i), ROW_ALT))
    table.setStyle(TableStyle(style))
    elements.append(table)

    if len(data) == 1:
        elements.append(Spacer(1, 12))
        elements.append(Paragraph("Nenhum registro neste escopo.", styles["Small"]))

    doc.build(elements)
    return buffer.getvalue()
