from functools import wraps
from flask import abort
from flask_login import current_user
from ..services.scope import restriction_for

PERMISSIONS = (
    "EMPLOYEE_READ", "EMPLOYEE_WRITE", "EMPLOYEE_DELETE",
    "CERT_READ", "CERT_WRITE", "CERT_DELETE",
    "USER_MANAGEMENT", "IMPORT", "EXPORT", "VIEW_SENSITIVE",
)

ROLE_PERMISSIONS = {
    "ADMIN": frozenset(PERMISSIONS),
    "VIEWER": frozenset({"EMPLOYEE_READ", "CERT_READ", "EXPORT"}),
}


def has_permission(user, permission: str) -> bool:
    if not getattr(user, "is_authenticated", False):
        return False
    if not getattr(user, "active", False):
        return False
    if permission not in ROLE_PERMISSIONS.get(getattr(user, "role", None), frozenset()):
        return False
    # administrador restrito não gerencia contas (poderia criar uma sem restrição)
    if permission == "USER_MANAGEMENT" and not restriction_for(user).is_empty:
        return False
    return True


def require_active(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not getattr(current_user, "active", False):
            abort(403)
        return f(*args, **kwargs)
    return wrapper


def require_permission(*permissions: str):
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            if not all(has_permission(current_user, p) for p in permissions):
                abort(403)
            return f(*args, **kwargs)
        return wrapper
    return decorator
