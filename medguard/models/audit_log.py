from __future__ import annotations
from datetime import datetime
from ..extensions import db


class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Integer, primary_key=True)
    actor_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    actor_name = db.Column(db.String(120), nullable=False, default="Sistema")

    action = db.Column(db.String(40), nullable=False, index=True)  # LOGIN, EMPLOYEE_CREATE, CERT_UPDATE...
    details = db.Column(db.Text, nullable=True)
    entity = db.Column(db.String(40), default="system", nullable=False)
    ip = db.Column(db.String(45), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
