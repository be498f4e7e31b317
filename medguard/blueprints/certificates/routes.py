from dataclasses import replace
from datetime import datetime
from io import BytesIO
from flask import Blueprint, render_template, request, redirect, url_for, flash, abort, send_file, send_from_directory, current_app
from flask_login import login_required, current_user
from ...services import audit
from ...services.exports import certificates_pdf, certificates_xlsx
from ...services.records import MedicalCertificate, UNLINKED_EMPLOYEE
from ...services.repository import get_repository, load_visible, StoreError
from ...utils.dates import compute_days
from ...utils.security import require_active, require_permission, has_permission
from ...utils.uploads import save_upload, remove_upload, upload_folder
from .forms import CertificateForm

certificates_bp = Blueprint("certificates", __name__, url_prefix="/certificates")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _visible_certificate_or_404(certificate_id: str):
    employees, certificates = load_visible()
    cert = next((c for c in certificates if c.id == certificate_id), None)
    if cert is None:
        abort(404)
    return cert, employees


def _employee_choices(employees):
    return [("", "Selecione...")] + [(e.id, f"{e.name} ({e.registration})") for e in employees]


def _certificate_from_form(form: CertificateForm, base: MedicalCertificate = None) -> MedicalCertificate:
    # CID é dado sensível: só persiste com o consentimento LGPD marcado
    cid = (form.cid.data or "").strip().upper()
    consent = bool(form.lgpd_consent.data)

    fields = dict(
        employee_id=form.employee_id.data,
        issue_date=form.issue_date.data or form.start_date.data,
        start_date=form.start_date.data,
        end_date=form.end_date.data,
        days=compute_days(form.start_date.data, form.end_date.data),
        cid=cid if consent and cid else None,
        doctor_name=form.doctor_name.data.strip(),
        crm=form.crm.data.strip(),
        type=form.type.data,
        status=form.status.data,
        observations=(form.observations.data or "").strip() or None,
    )
    if base is not None:
        return replace(base, **fields)
    return MedicalCertificate(id="", **fields)


def _render_form(form, certificate=None, employee=None):
    return render_template(
        "certificates/form.html",
        title="Editar Atestado" if certificate else "Novo Atestado",
        form=form,
        certificate=certificate,
        employee=employee,
        show_cid=has_permission(current_user, "VIEW_SENSITIVE"),
    )


def _save(form: CertificateForm, base: MedicalCertificate = None):
    cert = _certificate_from_form(form, base)

    stored = None
    if form.arquivo.data:
        try:
            stored, original = save_upload(form.arquivo.data, subdir="certificates")
        except ValueError as e:
            flash(str(e), "danger")
            return None
        cert = replace(cert, file_path=stored, file_name=original)

    try:
        saved = get_repository().save_certificate(cert)
    except StoreError as e:
        current_app.logger.exception("certificate save failed")
        if stored:
            remove_upload(stored)
        flash(str(e), "danger")
        return None

    if stored and base is not None and base.file_path and base.file_path != stored:
        remove_upload(base.file_path)
    return saved


@certificates_bp.route("/")
@login_required
@require_active
@require_permission("CERT_READ")
def index():
    employees, certificates = load_visible()
    employees_by_id = {e.id: e for e in employees}
    return render_template(
        "certificates/index.html",
        title="Prontuário de Atestados",
        certificates=certificates,
        employees_by_id=employees_by_id,
        unlinked=UNLINKED_EMPLOYEE,
        show_cid=has_permission(current_user, "VIEW_SENSITIVE"),
    )


@certificates_bp.route("/new", methods=["GET", "POST"])
@login_required
@require_active
@require_permission("CERT_WRITE")
def create():
    employees, _ = load_visible()
    form = CertificateForm()
    form.employee_id.choices = _employee_choices(employees)
    if request.method == "GET" and request.args.get("employee_id"):
        form.employee_id.data = request.args["employee_id"]

    if form.validate_on_submit():
        saved = _save(form)
        if saved is not None:
            audit.record("CERT_CREATE", f"Atestado de {saved.days} dia(s) registrado ({saved.start_date:%d/%m/%Y})", entity="certificate")
            flash("Atestado salvo.", "success")
            return redirect(url_for("certificates.index"))

    return _render_form(form)


@certificates_bp.route("/<certificate_id>", methods=["GET", "POST"])
@login_required
@require_active
@require_permission("CERT_READ")
def edit(certificate_id: str):
    cert, employees = _visible_certificate_or_404(certificate_id)
    employee = next((e for e in employees if e.id == cert.employee_id), UNLINKED_EMPLOYEE)

    form = CertificateForm(obj=cert)
    choices = _employee_choices(employees)
    if employee is UNLINKED_EMPLOYEE and cert.employee_id:
        choices.append((cert.employee_id, UNLINKED_EMPLOYEE.name))
    form.employee_id.choices = choices
    if request.method == "GET":
        form.lgpd_consent.data = bool(cert.cid)
        if not has_permission(current_user, "VIEW_SENSITIVE"):
            form.cid.data = ""

    if request.method == "POST":
        if not has_permission(current_user, "CERT_WRITE"):
            abort(403)
        if form.validate_on_submit():
            if not has_permission(current_user, "VIEW_SENSITIVE") and not (form.cid.data or "").strip():
                form.cid.data = cert.cid
                form.lgpd_consent.data = bool(cert.cid)
            saved = _save(form, base=cert)
            if saved is not None:
                audit.record("CERT_UPDATE", f"Atestado #{saved.id} alterado", entity="certificate")
                flash("Atestado atualizado.", "success")
                return redirect(url_for("certificates.index"))

    return _render_form(form, certificate=cert, employee=employee)


@certificates_bp.post("/<certificate_id>/delete")
@login_required
@require_active
@require_permission("CERT_DELETE")
def delete(certificate_id: str):
    cert, _ = _visible_certificate_or_404(certificate_id)
    try:
        get_repository().delete_certificate(cert.id)
    except StoreError as e:
        flash(str(e), "danger")
        return redirect(url_for("certificates.index"))

    remove_upload(cert.file_path)
    audit.record("CERT_DELETE", f"Atestado #{cert.id} excluído", entity="certificate")
    flash("Atestado excluído.", "success")
    return redirect(url_for("certificates.index"))


@certificates_bp.get("/<certificate_id>/file")
@login_required
@require_active
@require_permission("CERT_READ")
def attachment(certificate_id: str):
    cert, _ = _visible_certificate_or_404(certificate_id)
    if not cert.file_path:
        abort(404)
    return send_from_directory(upload_folder("certificates"), cert.file_path, as_attachment=False, download_name=cert.file_name)


@certificates_bp.get("/export.pdf")
@login_required
@require_active
@require_permission("CERT_READ", "EXPORT")
def export_pdf():
    employees, certificates = load_visible()
    content = certificates_pdf(certificates, employees, show_cid=has_permission(current_user, "VIEW_SENSITIVE"))
    audit.record("EXPORT", f"Relatório PDF com {len(certificates)} atestado(s)", entity="certificate")
    return send_file(
        BytesIO(content),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=f"relatorio_atestados_{datetime.now():%Y%m%d_%H%M%S}.pdf",
    )


@certificates_bp.get("/export.xlsx")
@login_required
@require_active
@require_permission("CERT_READ", "EXPORT")
def export_xlsx():
    employees, certificates = load_visible()
    content = certificates_xlsx(certificates, employees, show_cid=has_permission(current_user, "VIEW_SENSITIVE"))
    audit.record("EXPORT", f"Planilha com {len(certificates)} atestado(s)", entity="certificate")
    return send_file(
        BytesIO(content),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=f"relatorio_medguard_{datetime.now():%Y%m%d_%H%M%S}.xlsx",
    )
