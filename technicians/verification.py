import logging

from rest_framework.exceptions import PermissionDenied

from .models import Technician

logger = logging.getLogger(__name__)

NOT_VERIFIED = "Your account must be verified by admin to {action}."


def current_technician(user):
    """Technician row of the requesting user, read fresh from the database."""
    technician = Technician.objects.filter(user_id=user.id).first()
    if technician is None:
        raise PermissionDenied("Technician profile not found.")
    return technician


def ensure_can_work(user, action="work on jobs"):
    """
    Gate for claiming and updating jobs.
    Re-reads the technician row and requires APPROVED; raises 403 otherwise.
    """
    technician = current_technician(user)
    if technician.verification_status != Technician.VerificationStatus.APPROVED:
        logger.info(
            "Technician %s blocked from %s (status %s)",
            technician.id, action, technician.verification_status,
        )
        raise PermissionDenied(NOT_VERIFIED.format(action=action))
    return technician
