from datetime import date
from flask import Blueprint, render_template
from flask_login import login_required
from ...services.alerts import classify
from ...services.repository import load_visible
from ...utils.security import require_active, require_permission

alerts_bp = Blueprint("alerts", __name__, url_prefix="/alerts")


@alerts_bp.route("/")
@login_required
@require_active
@require_permission("CERT_READ")
def index():
    employees, certificates = load_visible()
    alerts = classify(certificates, employees, date.today())
    return render_template("alerts/index.html", title="Alertas", alerts=alerts)
