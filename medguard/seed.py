from __future__ import annotations
import click
from flask import Flask
from .extensions import db
from .models.user import User


def register_seed_command(app: Flask):
    @app.cli.command("seed")
    @click.option("--password", default="admin123", show_default=True, help="Senha dos usuários criados.")
    def seed(password: str):
        """Cria usuários de teste (administrador + visualizador)."""
        created = 0

        def upsert_user(email, name, role):
            nonlocal created
            u = User.query.filter_by(email=email).first()
            if not u:
                u = User(email=email, name=name, role=role, active=True)
                u.set_password(password)
                db.session.add(u)
                created += 1
            else:
                u.name = name
                u.role = role
            return u

        upsert_user("admin@medguard.com", "Administrador", "ADMIN")
        upsert_user("viewer@medguard.com", "Visualizador", "VIEWER")

        db.session.commit()
        click.echo(f"Seed concluído. Usuários criados/atualizados: {created}")
