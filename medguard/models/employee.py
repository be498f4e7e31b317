from __future__ import annotations
from datetime import datetime
from ..extensions import db


class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(160), nullable=False, index=True)
    cpf = db.Column(db.String(14), unique=True, nullable=False, index=True)
    registration = db.Column(db.String(32), nullable=True, index=True)  # matrícula
    department = db.Column(db.String(80), nullable=True)  # setor
    role = db.Column(db.String(80), nullable=True)  # cargo

    cnpj = db.Column(db.String(20), nullable=True, index=True)
    city = db.Column(db.String(80), nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Employee {self.registration} {self.name}>"
