from datetime import date
from flask import Blueprint, render_template, redirect, url_for, jsonify
from flask_login import login_required, current_user
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from ...extensions import db
from ...services.dashboard import build_stats
from ...services.repository import load_visible
from ...utils.security import require_active

main_bp = Blueprint("main", __name__)


@main_bp.route("/")
def root():
    if not current_user.is_authenticated:
        return redirect(url_for("auth.login"))
    return redirect(url_for("main.dashboard"))


@main_bp.route("/dashboard")
@login_required
@require_active
def dashboard():
    employees, certificates = load_visible()
    stats = build_stats(employees, certificates, date.today())
    employees_by_id = {e.id: e for e in employees}
    max_dept = max((n for _, n in stats.by_department), default=0)

    return render_template(
        "main/dashboard.html",
        title="Dashboard",
        stats=stats,
        employees_by_id=employees_by_id,
        max_dept=max_dept,
    )


@main_bp.get("/health")
def health():
    try:
        db.session.execute(text("SELECT 1"))
        return jsonify({"database": "ok"})
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({"database": "error"}), 503
