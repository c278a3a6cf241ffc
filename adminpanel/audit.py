import logging

from .models import AuditLog

logger = logging.getLogger(__name__)


def record(admin, action, details=""):
    """Append an audit entry for an admin action."""
    entry = AuditLog.objects.create(admin=admin, action=action, details=details or "")
    logger.info("Audit: %s by %s: %s", action, getattr(admin, "email", "system"), details)
    return entry
