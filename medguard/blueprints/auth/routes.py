from datetime import datetime
from flask import Blueprint, render_template, redirect, url_for, flash, current_app, abort
from flask_login import login_user, logout_user, login_required, current_user
from ...extensions import db
from ...models.user import User, DemoUser
from ...services import audit
from ...services.repository import DemoRepository
from .forms import LoginForm

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    if current_user.is_authenticated:
        return redirect(url_for("main.dashboard"))

    form = LoginForm()
    if form.validate_on_submit():
        email = (form.email.data or "").strip().lower()
        user = User.query.filter_by(email=email).first()
        if not user or not user.check_password(form.password.data):
            flash("E-mail ou senha incorretos. Verifique os dados digitados.", "danger")
            return render_template("auth/login.html", form=form), 401

        if not user.active:
            flash("Usuário inativo. Procure um administrador.", "warning")
            return render_template("auth/login.html", form=form), 403

        login_user(user)
        user.last_login = datetime.utcnow()
        db.session.commit()
        audit.record("LOGIN", f"Acesso de {user.email}", entity="auth", actor=user)
        return redirect(url_for("main.dashboard"))

    return render_template("auth/login.html", form=form)


@auth_bp.route("/demo", methods=["POST"])
def demo_login():
    if not current_app.config.get("DEMO_MODE_ENABLED"):
        abort(404)
    DemoRepository.purge_expired(current_app.config.get("DEMO_DATA_MAX_AGE", 24 * 60 * 60))
    login_user(DemoUser())
    flash("Modo demonstração: os dados ficam apenas nesta sessão.", "info")
    return redirect(url_for("main.dashboard"))


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    audit.record("LOGOUT", f"Saída de {current_user.email}", entity="auth")
    if current_user.is_demo:
        DemoRepository().discard()
    logout_user()
    return redirect(url_for("auth.login"))
