import logging

from django.utils import timezone

from .models import Booking

logger = logging.getLogger(__name__)


class JobUnavailable(Exception):
    pass


def claim_booking(booking_id, technician):
    """
    Assign ``technician`` to a PENDING, unassigned booking.

    Single conditional UPDATE: the affected-row count decides the winner,
    so at most one technician is ever assigned. Raises Booking.DoesNotExist
    for an unknown id and JobUnavailable when the job is taken or no longer
    pending.
    """
    claimed = Booking.objects.filter(
        pk=booking_id,
        status=Booking.Status.PENDING,
        technician__isnull=True,
    ).update(
        technician=technician,
        status=Booking.Status.ACCEPTED,
        updated_at=timezone.now(),
    )

    booking = Booking.objects.select_related("service", "address", "customer").get(pk=booking_id)
    if claimed != 1:
        logger.info("Technician %s lost claim on booking %s", technician.pk, booking_id)
        raise JobUnavailable("Job not available or already taken.")

    logger.info("Technician %s claimed booking %s", technician.pk, booking_id)
    return booking
