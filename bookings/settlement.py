import logging
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.db.models import F

from technicians.models import Technician

from .models import Commission

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def commission_for(total_amount):
    percent = Decimal(str(settings.PLATFORM_COMMISSION_PERCENT))
    amount = (Decimal(total_amount) * percent / 100).quantize(CENT, rounding=ROUND_HALF_UP)
    return percent, amount


def settle_completion(booking):
    """Record the platform commission and credit the rest to the technician's wallet."""
    percent, amount = commission_for(booking.total_amount)
    payout = Decimal(booking.total_amount) - amount

    Commission.objects.create(
        booking=booking,
        technician_id=booking.technician_id,
        percentage=percent,
        amount=amount,
    )
    Technician.objects.filter(pk=booking.technician_id).update(
        wallet_balance=F("wallet_balance") + payout,
        total_jobs_completed=F("total_jobs_completed") + 1,
    )
    logger.info("Booking %s settled: commission %s, payout %s", booking.pk, amount, payout)
