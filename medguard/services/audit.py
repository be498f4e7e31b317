from __future__ import annotations

import logging
from typing import List, Optional

from flask import current_app, has_request_context, request
from flask_login import current_user

from ..extensions import db
from ..models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def record(action: str, details: str = "", entity: str = "system", actor=None) -> Optional[AuditLog]:
    """Registra uma ação administrativa (somente inclusão, nunca altera).

    Usuário de demonstração não gera log.
    """
    actor = actor if actor is not None else current_user
    if getattr(actor, "is_demo", False):
        return None

    authenticated = bool(getattr(actor, "is_authenticated", False))
    entry = AuditLog(
        actor_id=actor.id if authenticated else None,
        actor_name=actor.name if authenticated else "Sistema",
        action=action,
        details=details,
        entity=entity,
        ip=request.remote_addr if has_request_context() else None,
    )
    db.session.add(entry)
    db.session.commit()
    logger.info("audit %s by %s: %s", action, entry.actor_name, details)
    return entry


def recent(limit: Optional[int] = None) -> List[AuditLog]:
    if limit is None:
        limit = current_app.config.get("AUDIT_LOG_LIMIT", 50)
    return AuditLog.query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()
