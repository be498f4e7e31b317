from __future__ import annotations
from datetime import datetime
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from ..extensions import db


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(180), unique=True, nullable=False, index=True)

    password_hash = db.Column(db.String(255), nullable=False)

    # ADMIN -> gestão completa, VIEWER -> somente leitura
    role = db.Column(db.String(20), default="VIEWER", nullable=False, index=True)
    active = db.Column(db.Boolean, default=True, nullable=False)

    # restrição de visibilidade (vazio = vê tudo)
    cnpj = db.Column(db.String(20), nullable=True)
    city = db.Column(db.String(80), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    is_demo = False

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    @property
    def is_active(self) -> bool:
        return bool(self.active)

    def __repr__(self) -> str:
        return f"<User {self.email} {self.role}>"


class DemoUser(UserMixin):
    """Administrador de demonstração: não existe no banco."""

    id = "demo-user"
    name = "Usuário Demonstrativo"
    email = "demo@medguard.com"
    role = "ADMIN"
    active = True
    cnpj = None
    city = None
    is_demo = True

    def get_id(self) -> str:
        return self.id
