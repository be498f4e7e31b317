from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta

import pytest

from medguard.services.alerts import (
    INSS_THRESHOLD,
    RETURN_OVERDUE,
    RETURN_TOMORROW,
    classify,
    count_attention,
    sort_by_severity,
)
from medguard.services.records import UNLINKED_EMPLOYEE

TODAY = date(2024, 6, 10)


@pytest.fixture
def roster(employee_factory):
    return [employee_factory("E1", name="Ana"), employee_factory("E2", name="Bruno")]


def test_ends_today_is_return_tomorrow(roster, certificate_factory):
    cert = certificate_factory("C1", "E1", start=TODAY - timedelta(days=2), end=TODAY)
    alerts = classify([cert], roster, TODAY)

    assert len(alerts) == 1
    assert alerts[0].kind == RETURN_TOMORROW
    assert alerts[0].severity == "warning"
    assert alerts[0].certificate is cert
    assert alerts[0].employee.name == "Ana"
    assert "Ana" in alerts[0].description


def test_ended_yesterday_is_overdue(roster, certificate_factory):
    cert = certificate_factory("C1", "E1", end=TODAY - timedelta(days=1))
    alerts = classify([cert], roster, TODAY)

    assert [a.kind for a in alerts] == [RETURN_OVERDUE]
    assert alerts[0].severity == "danger"
    assert alerts[0].date == TODAY - timedelta(days=1)


def test_long_leave_is_inss(roster, certificate_factory):
    start = TODAY - timedelta(days=30)
    cert = certificate_factory("C1", "E1", start=start, end=TODAY + timedelta(days=5), days=36)
    alerts = classify([cert], roster, TODAY)

    assert [a.kind for a in alerts] == [INSS_THRESHOLD]
    assert alerts[0].severity == "critical"
    assert alerts[0].date == start
    assert "36 dias" in alerts[0].description


@pytest.mark.parametrize("days", [1, 15])
def test_short_leave_with_other_end_date_has_no_alert(roster, certificate_factory, days):
    cert = certificate_factory("C1", "E1", end=TODAY + timedelta(days=3), days=days)
    assert classify([cert], roster, TODAY) == []


def test_return_alert_wins_over_inss(roster, certificate_factory):
    due = certificate_factory("C1", "E1", end=TODAY, days=20)
    overdue = certificate_factory("C2", "E2", end=TODAY - timedelta(days=1), days=40)
    alerts = classify([due, overdue], roster, TODAY)

    assert [a.kind for a in alerts] == [RETURN_TOMORROW, RETURN_OVERDUE]


def test_at_most_one_alert_per_certificate(roster, certificate_factory):
    certs = [
        certificate_factory(f"C{i}", "E1", end=TODAY + timedelta(days=i - 3), days=10 + i * 3)
        for i in range(8)
    ]
    alerts = classify(certs, roster, TODAY)
    ids = [a.certificate.id for a in alerts]
    assert len(ids) == len(set(ids))


def test_output_follows_input_order(roster, certificate_factory):
    certs = [
        certificate_factory("C1", "E1", end=TODAY + timedelta(days=9), days=30),
        certificate_factory("C2", "E2", end=TODAY - timedelta(days=1)),
        certificate_factory("C3", "E1", end=TODAY),
    ]
    alerts = classify(certs, roster, TODAY)
    assert [a.certificate.id for a in alerts] == ["C1", "C2", "C3"]


def test_unknown_employee_uses_placeholder(roster, certificate_factory):
    cert = certificate_factory("C1", "removido", end=TODAY)
    alerts = classify([cert], roster, TODAY)

    assert alerts[0].employee is UNLINKED_EMPLOYEE
    assert alerts[0].employee.name == "Não vinculado"
    assert not alerts[0].is_linked


def test_end_date_as_iso_string_is_normalized(roster, certificate_factory):
    cert = certificate_factory("C1", "E1", end=TODAY)
    cert_str = replace(cert, end_date=TODAY.isoformat())
    assert [a.kind for a in classify([cert_str], roster, TODAY.isoformat())] == [RETURN_TOMORROW]


def test_empty_inputs(roster):
    assert classify([], roster, TODAY) == []
    assert classify([], [], TODAY) == []


def test_example_scenario_unscoped(employee_factory, certificate_factory):
    employees = [employee_factory("E1", city="X"), employee_factory("E2", city="Y")]
    certs = [
        certificate_factory("C1", "E1", end=TODAY, days=3),
        certificate_factory("C2", "E2", end=TODAY - timedelta(days=10), days=20),
    ]
    alerts = classify(certs, employees, TODAY)

    assert [(a.kind, a.certificate.id) for a in alerts] == [
        (RETURN_TOMORROW, "C1"),
        (INSS_THRESHOLD, "C2"),
    ]


def test_sort_by_severity(roster, certificate_factory):
    certs = [
        certificate_factory("C1", "E1", end=TODAY),
        certificate_factory("C2", "E1", end=TODAY - timedelta(days=1)),
        certificate_factory("C3", "E2", end=TODAY + timedelta(days=20), days=25),
    ]
    ordered = sort_by_severity(classify(certs, roster, TODAY))
    assert [a.severity for a in ordered] == ["critical", "danger", "warning"]


def test_count_attention(certificate_factory):
    certs = [
        certificate_factory("C1", end=TODAY),
        certificate_factory("C2", end=TODAY - timedelta(days=30)),
        certificate_factory("C3", end=TODAY + timedelta(days=3), days=16),
        certificate_factory("C4", end=TODAY + timedelta(days=3), days=4),
    ]
    assert count_attention(certs, TODAY) == 3
