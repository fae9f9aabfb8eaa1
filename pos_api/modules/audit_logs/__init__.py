"""Audit logs module"""

from .models import AuditLog, AuditAction
from .service import AuditContext, AuditLogService
from .router import router, audit_context

__all__ = ["AuditLog", "AuditAction", "AuditContext", "AuditLogService", "router", "audit_context"]
