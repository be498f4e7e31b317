from __future__ import annotations
from datetime import date
from flask import Blueprint, request, jsonify
from flask_login import login_required
from ...services.alerts import classify, sort_by_severity
from ...services.repository import load_visible
from ...utils.dates import compute_days, to_date
from ...utils.security import require_active, require_permission

bp = Blueprint("api", __name__, url_prefix="/api")


@bp.get("/compute-days")
@login_required
def days():
    """
    Recalcula a quantidade de dias do formulário de atestado
    sempre que início/término mudam.
    """
    start = to_date(request.args.get("start"))
    end = to_date(request.args.get("end"))
    if start is None or end is None:
        return jsonify({"error": "Informe início e término (AAAA-MM-DD)"}), 400
    return jsonify({"start": start.isoformat(), "end": end.isoformat(), "days": compute_days(start, end)})


@bp.get("/alerts")
@login_required
@require_active
@require_permission("CERT_READ")
def alerts():
    ref = to_date(request.args.get("date")) or date.today()
    employees, certificates = load_visible()
    items = classify(certificates, employees, ref)
    if request.args.get("sort") == "severity":
        items = sort_by_severity(items)

    return jsonify({
        "date": ref.isoformat(),
        "total": len(items),
        "alerts": [
            {
                "type": a.kind,
                "severity": a.severity,
                "title": a.title,
                "description": a.description,
                "date": a.date.isoformat() if a.date else None,
                "certificate_id": a.certificate.id,
                "employee": {
                    "id": a.employee.id or None,
                    "name": a.employee.name,
                    "registration": a.employee.registration,
                },
            }
            for a in items
        ],
    })
