from __future__ import annotations
from datetime import datetime
from ..extensions import db


class MedicalCertificate(db.Model):
    __tablename__ = "medical_certificates"

    id = db.Column(db.Integer, primary_key=True)
    # atestado sobrevive à exclusão do funcionário ("Não vinculado")
    employee_id = db.Column(
        db.Integer, db.ForeignKey("employees.id", ondelete="SET NULL"), nullable=True, index=True
    )

    issue_date = db.Column(db.Date, nullable=False, index=True)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False, index=True)
    days = db.Column(db.Integer, nullable=False)

    cid = db.Column(db.String(10), nullable=True)  # somente com consentimento LGPD
    doctor_name = db.Column(db.String(120), nullable=False)
    crm = db.Column(db.String(20), nullable=False)

    type = db.Column(db.String(20), default="Doença", nullable=False)  # Doença/Acidente/Maternidade/Outros
    status = db.Column(db.String(20), default="ACTIVE", nullable=False, index=True)  # ACTIVE/EXPIRED/PENDING

    file_path = db.Column(db.String(255), nullable=True)
    file_name = db.Column(db.String(255), nullable=True)
    observations = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
