from __future__ import annotations

from flask import Blueprint, render_template, request, redirect, url_for, flash, abort
from flask_login import login_required, current_user

from ...extensions import db
from ...models.user import User
from ...services import audit
from ...utils.security import require_active, require_permission
from ..employees.forms import only_digits
from .forms import UserForm

users_bp = Blueprint("users", __name__, url_prefix="/users")


@users_bp.before_request
def _block_demo():
    # contas reais não podem ser geridas pelo modo demonstração
    if getattr(current_user, "is_demo", False):
        abort(403)


def _status_label(active: bool) -> str:
    return "Ativo" if active else "Inativo"


@users_bp.get("/")
@login_required
@require_active
@require_permission("USER_MANAGEMENT")
def index():
    q = (request.args.get("q") or "").strip()
    role = (request.args.get("role") or "").strip()

    query = User.query
    if q:
        query = query.filter((User.name.ilike(f"%{q}%")) | (User.email.ilike(f"%{q}%")))
    if role:
        query = query.filter_by(role=role)

    users = query.order_by(User.name.asc()).all()
    return render_template(
        "users/index.html",
        title="Usuários",
        users=users,
        logs=audit.recent(),
        q=q,
        role=role,
    )


@users_bp.route("/new", methods=["GET", "POST"])
@login_required
@require_active
@require_permission("USER_MANAGEMENT")
def create():
    form = UserForm()
    if form.validate_on_submit():
        email = form.email.data.strip().lower()
        if not form.password.data:
            flash("E-mail e senha são obrigatórios.", "warning")
            return render_template("users/form.html", title="Novo usuário", form=form)
        if User.query.filter_by(email=email).first():
            flash("E-mail já cadastrado.", "warning")
            return render_template("users/form.html", title="Novo usuário", form=form)

        u = User(
            name=form.name.data.strip(),
            email=email,
            role=form.role.data,
            active=bool(form.active.data),
            cnpj=only_digits(form.cnpj.data) or None,
            city=(form.city.data or "").strip() or None,
        )
        u.set_password(form.password.data)
        db.session.add(u)
        db.session.commit()

        audit.record("USER_CREATE", f"Usuário {u.email} criado ({u.role})", entity="user")
        flash("Usuário criado.", "success")
        return redirect(url_for("users.index"))

    return render_template("users/form.html", title="Novo usuário", form=form)


@users_bp.route("/<int:user_id>/edit", methods=["GET", "POST"])
@login_required
@require_active
@require_permission("USER_MANAGEMENT")
def edit(user_id: int):
    u = db.session.get(User, user_id) or abort(404)
    form = UserForm(obj=u)

    if form.validate_on_submit():
        email = form.email.data.strip().lower()
        other = User.query.filter(User.email == email, User.id != u.id).first()
        if other:
            flash("E-mail já cadastrado.", "warning")
            return render_template("users/form.html", title="Editar usuário", form=form, user=u)

        if u.id == current_user.id and (form.role.data != "ADMIN" or not form.active.data):
            flash("Você não pode remover o próprio acesso de administrador.", "warning")
            return render_template("users/form.html", title="Editar usuário", form=form, user=u)

        u.name = form.name.data.strip()
        u.email = email
        u.role = form.role.data
        u.active = bool(form.active.data)
        u.cnpj = only_digits(form.cnpj.data) or None
        u.city = (form.city.data or "").strip() or None
        if form.password.data:
            u.set_password(form.password.data)
        db.session.commit()

        audit.record("USER_UPDATE", f"Usuário {u.email} alterado", entity="user")
        flash("Usuário atualizado.", "success")
        return redirect(url_for("users.index"))

    return render_template("users/form.html", title="Editar usuário", form=form, user=u)


@users_bp.post("/<int:user_id>/toggle")
@login_required
@require_active
@require_permission("USER_MANAGEMENT")
def toggle(user_id: int):
    u = db.session.get(User, user_id) or abort(404)
    if u.id == current_user.id:
        flash("Você não pode desativar o próprio usuário.", "warning")
        return redirect(url_for("users.index"))

    u.active = not bool(u.active)
    db.session.commit()
    audit.record("USER_UPDATE", f"Status do usuário {u.email} alterado para {_status_label(u.active)}", entity="user")
    flash("Usuário atualizado.", "success")
    return redirect(url_for("users.index"))


@users_bp.post("/<int:user_id>/delete")
@login_required
@require_active
@require_permission("USER_MANAGEMENT")
def delete(user_id: int):
    u = db.session.get(User, user_id) or abort(404)
    if u.id == current_user.id:
        flash("Você não pode excluir o próprio usuário.", "warning")
        return redirect(url_for("users.index"))

    email = u.email
    db.session.delete(u)
    db.session.commit()
    audit.record("USER_DELETE", f"Usuário {email} excluído", entity="user")
    flash("Usuário excluído.", "success")
    return redirect(url_for("users.index"))
