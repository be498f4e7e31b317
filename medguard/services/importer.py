"""Importação de funcionários por planilha Excel.

Os cabeçalhos variam de planilha para planilha (``Matrícula``, ``MATRICULA``,
``registration``...); cada campo aceita uma lista de sinônimos, comparados
sem acento, caixa ou espaços.
"""
from __future__ import annotations

import unicodedata
from typing import Any, Dict, List, Sequence

from openpyxl import load_workbook

from .records import Employee

FIELD_ALIASES: Dict[str, Sequence[str]] = {
    "name": ("Nome", "name", "Funcionário", "Employee", "Nome Completo"),
    "cpf": ("CPF", "Documento"),
    "registration": ("Matricula", "Matrícula", "registration", "ID"),
    "department": ("Setor", "department", "Departamento"),
    "role": ("Cargo", "role", "Função"),
    "cnpj": ("CNPJ", "Empresa"),
    "city": ("Cidade", "city", "Município"),
}


def norm_key(header: Any) -> str:
    if header is None:
        return ""
    s = unicodedata.normalize("NFKD", str(header)).encode("ascii", "ignore").decode("ascii")
    s = s.strip().lower()
    for ch in (" ", "_", "-", "/"):
        s = s.replace(ch, "")
    return s


_ALIAS_LOOKUP = {norm_key(alias): field for field, aliases in FIELD_ALIASES.items() for alias in aliases}


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def rows_to_employees(headers: Sequence[Any], rows: Sequence[Sequence[Any]]) -> List[Employee]:
    """Converte linhas da planilha em funcionários novos (sem id).

    Colunas desconhecidas são ignoradas; linhas sem nome são descartadas.
    """
    columns = {}
    for idx, h in enumerate(headers):
        field = _ALIAS_LOOKUP.get(norm_key(h))
        if field and field not in columns:
            columns[field] = idx

    employees = []
    for row in rows:
        values = {
            field: _cell(row[idx]) if idx < len(row) else ""
            for field, idx in columns.items()
        }
        if not values.get("name"):
            continue
        employees.append(
            Employee(
                id="",
                name=values["name"],
                cpf=values.get("cpf", ""),
                registration=values.get("registration", ""),
                department=values.get("department", ""),
                role=values.get("role", ""),
                cnpj=values.get("cnpj") or None,
                city=values.get("city") or None,
            )
        )
    return employees


def read_employees_xlsx(file_storage, max_rows: int = 5000) -> List[Employee]:
    """Lê a primeira aba da planilha enviada (FileStorage ou caminho)."""
    try:
        wb = load_workbook(file_storage, read_only=True, data_only=True)
    except Exception as e:
        raise ValueError("Erro ao ler o arquivo Excel.") from e

    ws = wb.worksheets[0] if wb.worksheets else None
    if ws is None:
        raise ValueError("Planilha sem abas.")

    it = ws.iter_rows(values_only=True)
    headers = next(it, None)
    if not headers or all(h is None for h in headers):
        raise ValueError("Planilha vazia.")

    rows = []
    for i, row in enumerate(it):
        if i >= max_rows:
            break
        rows.append(row)
    wb.close()
    return rows_to_employees(headers, rows)
