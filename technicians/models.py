from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Technician(models.Model):
    class VerificationStatus(models.TextChoices):
        PENDING = "PENDING", "Pending"
        APPROVED = "APPROVED", "Approved"
        REJECTED = "REJECTED", "Rejected"
        SUSPENDED = "SUSPENDED", "Suspended"

    class Availability(models.TextChoices):
        AVAILABLE = "AVAILABLE", "Available"
        BUSY = "BUSY", "Busy"
        OFFLINE = "OFFLINE", "Offline"

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="technician")

    experience_years = models.PositiveIntegerField(default=0)
    rating_average = models.DecimalField(
        max_digits=3, decimal_places=2, default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    total_ratings = models.PositiveIntegerField(default=0)
    availability_status = models.CharField(max_length=20, choices=Availability.choices, default=Availability.AVAILABLE)
    wallet_balance = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    total_jobs_completed = models.PositiveIntegerField(default=0)

    verification_status = models.CharField(
        max_length=20, choices=VerificationStatus.choices, default=VerificationStatus.PENDING
    )
    verified_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.CharField(max_length=500, blank=True, default="")

    # document references (paths or URLs handed over by the client)
    id_proof = models.CharField(max_length=500, blank=True, default="")
    certificate = models.CharField(max_length=500, blank=True, default="")

    categories = models.ManyToManyField("catalog.Category", blank=True, related_name="technicians")

    def has_documents(self):
        return bool(self.id_proof) and bool(self.certificate)

    def __str__(self):
        return f"Technician #{self.id} ({self.verification_status})"
