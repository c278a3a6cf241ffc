"""
Booking status machine.

Allowed moves are listed in ``TRANSITIONS``; COMPLETED and CANCELLED are
terminal. Writes are conditional on the status that was read, so two
requests racing on the same booking cannot both apply a transition.
"""
import logging

from django.db import transaction
from django.utils import timezone

from .models import Booking
from .settlement import settle_completion

logger = logging.getLogger(__name__)

Status = Booking.Status

TRANSITIONS = {
    Status.PENDING: frozenset({Status.ACCEPTED, Status.CANCELLED}),
    Status.ACCEPTED: frozenset({Status.IN_PROGRESS, Status.CANCELLED}),
    Status.IN_PROGRESS: frozenset({Status.COMPLETED}),
}

TERMINAL = frozenset({Status.COMPLETED, Status.CANCELLED})


class TransitionError(Exception):
    pass


def parse_status(value):
    normalized = str(value or "").strip().upper()
    if normalized not in Status.values:
        raise TransitionError(f"Unknown status '{value}'. Allowed: {', '.join(Status.values)}.")
    return normalized


def can_transition(current, new):
    return new in TRANSITIONS.get(current, frozenset())


def check_transition(current, new):
    if current in TERMINAL:
        raise TransitionError("Booking is already finalized.")
    if not can_transition(current, new):
        raise TransitionError(f"Cannot change status from {current} to {new}.")


def transition(booking, new_status):
    """Move ``booking`` to ``new_status`` or raise TransitionError."""
    new_status = parse_status(new_status)
    previous = booking.status
    check_transition(previous, new_status)

    now = timezone.now()
    changes = {"status": new_status, "updated_at": now}
    if new_status == Status.COMPLETED:
        changes["work_completed_at"] = now

    with transaction.atomic():
        updated = Booking.objects.filter(pk=booking.pk, status=previous).update(**changes)
        if updated != 1:
            current = Booking.objects.filter(pk=booking.pk).values_list("status", flat=True).first()
            check_transition(current, new_status)
            raise TransitionError("Booking was modified by another request. Reload and try again.")

        for field, value in changes.items():
            setattr(booking, field, value)

        if new_status == Status.COMPLETED:
            settle_completion(booking)

    logger.info("Booking %s: %s -> %s", booking.pk, previous, new_status)
    return booking


def progress_of(status):
    return {
        Status.PENDING: 20,
        Status.ACCEPTED: 50,
        Status.IN_PROGRESS: 75,
        Status.COMPLETED: 100,
    }.get(status, 10)
