from dataclasses import replace
from flask import Blueprint, render_template, request, redirect, url_for, flash, abort, send_file, current_app
from flask_login import login_required, current_user
from io import BytesIO
from ...services import audit
from ...services.exports import import_template_xlsx
from ...services.importer import read_employees_xlsx
from ...services.records import Employee
from ...services.repository import get_repository, load_visible, StoreError
from ...services.scope import restriction_for, scope
from ...utils.security import require_active, require_permission
from .forms import EmployeeForm, EmployeeImportForm, only_digits

employees_bp = Blueprint("employees", __name__, url_prefix="/employees")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _visible_employee_or_404(employee_id: str) -> Employee:
    repo = get_repository()
    emp = repo.get_employee(employee_id)
    if emp is None:
        abort(404)
    visible, _ = scope([emp], [], restriction_for(current_user))
    if not visible:
        abort(404)
    return emp


def _search(employees, term: str):
    term = (term or "").strip().lower()
    if not term:
        return employees
    return [
        e for e in employees
        if term in e.name.lower()
        or (e.cpf and term in e.cpf)
        or (e.registration and term in e.registration.lower())
    ]


def _employee_from_form(form: EmployeeForm, base: Employee = None) -> Employee:
    fields = dict(
        name=form.name.data.strip(),
        cpf=only_digits(form.cpf.data),
        registration=form.registration.data.strip(),
        department=form.department.data.strip(),
        role=form.role.data.strip(),
        cnpj=only_digits(form.cnpj.data) or None,
        city=(form.city.data or "").strip() or None,
    )
    if base is not None:
        return replace(base, **fields)
    return Employee(id="", **fields)


@employees_bp.route("/")
@login_required
@require_active
@require_permission("EMPLOYEE_READ")
def index():
    employees, certificates = load_visible()
    q = (request.args.get("q") or "").strip()
    cert_counts = {}
    for c in certificates:
        cert_counts[c.employee_id] = cert_counts.get(c.employee_id, 0) + 1

    return render_template(
        "employees/index.html",
        title="Funcionários",
        employees=_search(employees, q),
        total=len(employees),
        cert_counts=cert_counts,
        q=q,
        import_form=EmployeeImportForm(),
    )


@employees_bp.route("/new", methods=["GET", "POST"])
@login_required
@require_active
@require_permission("EMPLOYEE_WRITE")
def create():
    form = EmployeeForm()
    restriction = restriction_for(current_user)
    if request.method == "GET":
        # usuário restrito cadastra dentro do próprio escopo
        form.cnpj.data = restriction.cnpj
        form.city.data = restriction.city

    if form.validate_on_submit():
        emp = _employee_from_form(form)
        if not scope([emp], [], restriction)[0]:
            flash("Funcionário fora do seu escopo de visibilidade (CNPJ/cidade).", "warning")
            return render_template("employees/form.html", title="Novo Funcionário", form=form)
        try:
            saved = get_repository().save_employee(emp)
        except StoreError as e:
            flash(str(e), "danger")
            return render_template("employees/form.html", title="Novo Funcionário", form=form)

        audit.record("EMPLOYEE_CREATE", f"Funcionário {saved.name} ({saved.registration}) cadastrado", entity="employee")
        flash("Funcionário cadastrado.", "success")
        return redirect(url_for("employees.index"))

    return render_template("employees/form.html", title="Novo Funcionário", form=form)


@employees_bp.route("/<employee_id>/edit", methods=["GET", "POST"])
@login_required
@require_active
@require_permission("EMPLOYEE_WRITE")
def edit(employee_id: str):
    current = _visible_employee_or_404(employee_id)
    form = EmployeeForm(obj=current)

    if form.validate_on_submit():
        emp = _employee_from_form(form, base=current)
        if not scope([emp], [], restriction_for(current_user))[0]:
            flash("Funcionário fora do seu escopo de visibilidade (CNPJ/cidade).", "warning")
            return render_template("employees/form.html", title="Editar Funcionário", form=form, employee=current)
        try:
            saved = get_repository().save_employee(emp)
        except StoreError as e:
            flash(str(e), "danger")
            return render_template("employees/form.html", title="Editar Funcionário", form=form, employee=current)

        audit.record("EMPLOYEE_UPDATE", f"Funcionário {saved.name} ({saved.registration}) alterado", entity="employee")
        flash("Funcionário atualizado.", "success")
        return redirect(url_for("employees.index"))

    return render_template("employees/form.html", title="Editar Funcionário", form=form, employee=current)


@employees_bp.post("/<employee_id>/delete")
@login_required
@require_active
@require_permission("EMPLOYEE_DELETE")
def delete(employee_id: str):
    emp = _visible_employee_or_404(employee_id)
    try:
        get_repository().delete_employee(emp.id)
    except StoreError as e:
        flash(str(e), "danger")
        return redirect(url_for("employees.index"))

    audit.record("EMPLOYEE_DELETE", f"Funcionário {emp.name} ({emp.registration}) excluído", entity="employee")
    flash("Funcionário excluído.", "success")
    return redirect(url_for("employees.index"))


@employees_bp.post("/import")
@login_required
@require_active
@require_permission("IMPORT", "EMPLOYEE_WRITE")
def bulk_import():
    form = EmployeeImportForm()
    if not form.validate_on_submit():
        for errors in form.errors.values():
            for err in errors:
                flash(err, "warning")
        return redirect(url_for("employees.index"))

    try:
        rows = read_employees_xlsx(form.arquivo.data)
    except ValueError as e:
        flash(str(e), "danger")
        return redirect(url_for("employees.index"))

    if not rows:
        flash("Nenhum dado válido encontrado.", "warning")
        return redirect(url_for("employees.index"))

    restriction = restriction_for(current_user)
    repo = get_repository()
    imported, failed = 0, []
    for emp in rows:
        # herda CNPJ/cidade do escopo quando a planilha não informa
        emp = replace(
            emp,
            cpf=only_digits(emp.cpf),
            cnpj=only_digits(emp.cnpj) or restriction.cnpj,
            city=emp.city or restriction.city,
        )
        if not scope([emp], [], restriction)[0]:
            failed.append(f"{emp.name}: fora do escopo")
            continue
        try:
            repo.save_employee(emp)
            imported += 1
        except StoreError as e:
            failed.append(f"{emp.name}: {e}")

    current_app.logger.info("employee import: %s ok, %s failed", imported, len(failed))
    audit.record("IMPORT", f"{imported} funcionário(s) importado(s), {len(failed)} rejeitado(s)", entity="employee")
    if imported:
        flash(f"{imported} funcionário(s) importado(s).", "success")
    for msg in failed[:10]:
        flash(msg, "warning")
    return redirect(url_for("employees.index"))


@employees_bp.get("/import/template")
@login_required
@require_active
@require_permission("IMPORT")
def import_template():
    return send_file(
        BytesIO(import_template_xlsx()),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name="modelo_medguard.xlsx",
    )
