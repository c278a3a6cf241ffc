import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Technician",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("experience_years", models.PositiveIntegerField(default=0)),
                (
                    "rating_average",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=3,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(5),
                        ],
                    ),
                ),
                ("total_ratings", models.PositiveIntegerField(default=0)),
                (
                    "availability_status",
                    models.CharField(
                        choices=[("AVAILABLE", "Available"), ("BUSY", "Busy"), ("OFFLINE", "Offline")],
                        default="AVAILABLE",
                        max_length=20,
                    ),
                ),
                ("wallet_balance", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("total_jobs_completed", models.PositiveIntegerField(default=0)),
                (
                    "verification_status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                            ("SUSPENDED", "Suspended"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("verified_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.CharField(blank=True, default="", max_length=500)),
                ("id_proof", models.CharField(blank=True, default="", max_length=500)),
                ("certificate", models.CharField(blank=True, default="", max_length=500)),
                (
                    "categories",
                    models.ManyToManyField(blank=True, related_name="technicians", to="catalog.category"),
                ),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="technician",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
        ),
    ]
