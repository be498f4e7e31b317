from .user import User, DemoUser
from .employee import Employee
from .certificate import MedicalCertificate
from .audit_log import AuditLog

__all__ = [
    # Auth / Usuários
    "User",
    "DemoUser",

    # Cadastro
    "Employee",

    # Atestados
    "MedicalCertificate",

    # Auditoria
    "AuditLog",
]
