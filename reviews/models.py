from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Review(models.Model):
    # one review per completed booking
    booking = models.OneToOneField("bookings.Booking", on_delete=models.CASCADE, related_name="review")

    technician = models.ForeignKey(
        "technicians.Technician",
        on_delete=models.CASCADE,
        related_name="reviews",
    )

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews_written",
    )

    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Review #{self.id} ({self.rating})"
