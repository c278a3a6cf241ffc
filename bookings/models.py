from django.conf import settings
from django.db import models
from django.utils import timezone


class Booking(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        ACCEPTED = "ACCEPTED", "Accepted"
        IN_PROGRESS = "IN_PROGRESS", "In progress"
        COMPLETED = "COMPLETED", "Completed"
        CANCELLED = "CANCELLED", "Cancelled"

    customer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="bookings")

    # null until a technician claims the job
    technician = models.ForeignKey(
        "technicians.Technician",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="assigned_bookings",
    )

    service = models.ForeignKey("catalog.Service", on_delete=models.PROTECT, related_name="bookings")
    address = models.ForeignKey("accounts.Address", on_delete=models.PROTECT, related_name="bookings")

    description = models.TextField(max_length=1000)
    reference_image = models.CharField(max_length=500, blank=True, default="")

    booking_date = models.DateTimeField(default=timezone.now)
    preferred_start = models.DateTimeField()
    preferred_end = models.DateTimeField()

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)

    # copied from Service.fixed_rate when the booking is made
    total_amount = models.DecimalField(max_digits=18, decimal_places=2)

    work_completed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ("-booking_date",)

    def __str__(self):
        return f"Booking #{self.id} ({self.status})"


class Commission(models.Model):
    booking = models.OneToOneField(Booking, on_delete=models.CASCADE, related_name="commission")
    technician = models.ForeignKey("technicians.Technician", on_delete=models.CASCADE, related_name="commissions")

    percentage = models.DecimalField(max_digits=5, decimal_places=2)
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    deducted_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"Commission {self.amount} on booking #{self.booking_id}"
