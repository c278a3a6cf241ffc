from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db.models import Count, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from bookings.models import Booking
from technicians.models import Technician

User = get_user_model()

WINDOW = timedelta(days=30)
ACTIVE_JOB_STATUSES = (Booking.Status.ACCEPTED, Booking.Status.IN_PROGRESS)


def percent_change(current, previous):
    current, previous = float(current), float(previous)
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 1)


def _revenue(qs):
    return qs.aggregate(total=Sum("total_amount"))["total"] or Decimal("0")


def dashboard_stats(now=None):
    now = now or timezone.now()
    last_start = now - WINDOW
    prev_start = last_start - WINDOW

    completed = Booking.objects.filter(status=Booking.Status.COMPLETED)
    revenue_last = _revenue(completed.filter(work_completed_at__gte=last_start))
    revenue_prev = _revenue(completed.filter(work_completed_at__gte=prev_start, work_completed_at__lt=last_start))

    approved = Technician.objects.filter(verification_status=Technician.VerificationStatus.APPROVED)
    approved_last = approved.filter(verified_at__gte=last_start).count()
    approved_prev = approved.filter(verified_at__gte=prev_start, verified_at__lt=last_start).count()

    active_jobs = Booking.objects.filter(status__in=ACTIVE_JOB_STATUSES)
    jobs_last = active_jobs.filter(booking_date__gte=last_start).count()
    jobs_prev = active_jobs.filter(booking_date__gte=prev_start, booking_date__lt=last_start).count()

    return {
        "total_revenue": _revenue(completed),
        "revenue_change": percent_change(revenue_last, revenue_prev),
        "active_technicians": approved.count(),
        "technician_change": percent_change(approved_last, approved_prev),
        "jobs_in_progress": active_jobs.count(),
        "jobs_change": percent_change(jobs_last, jobs_prev),
        "new_registrations": User.objects.filter(created_at__gte=last_start).count(),
    }


def booking_trends(days=30):
    today = timezone.localdate()
    first_day = today - timedelta(days=days - 1)

    rows = (
        Booking.objects.annotate(day=TruncDate("booking_date"))
        .filter(day__gte=first_day, day__lte=today)
        .values("day")
        .annotate(count=Count("id"))
        .order_by()
    )
    per_day = {row["day"]: row["count"] for row in rows}

    dates = [first_day + timedelta(days=i) for i in range(days)]
    counts = [per_day.get(d, 0) for d in dates]

    half = days // 2
    return {
        "labels": [d.strftime("%b %d") for d in dates],
        "data": counts,
        "total": sum(counts),
        "growth": percent_change(sum(counts[half:]), sum(counts[:half])),
    }
