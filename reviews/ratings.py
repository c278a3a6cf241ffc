from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Avg, Count

from technicians.models import Technician

from .models import Review


def refresh_technician_rating(technician_id):
    stats = Review.objects.filter(technician_id=technician_id).aggregate(avg=Avg("rating"), total=Count("id"))
    average = Decimal(str(stats["avg"] or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    Technician.objects.filter(pk=technician_id).update(rating_average=average, total_ratings=stats["total"])
