from django.core.validators import MinValueValidator
from django.db import models
from django.db.models.functions import Lower


class Category(models.Model):
    name = models.CharField(max_length=50)
    description = models.CharField(max_length=200, blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_by = models.CharField(max_length=100, default="system")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ("name",)
        verbose_name_plural = "categories"
        constraints = [
            models.UniqueConstraint(Lower("name"), name="catalog_category_name_ci_unique"),
        ]

    def __str__(self):
        return self.name


class Service(models.Model):
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True, default="")

    fixed_rate = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    estimated_duration = models.DecimalField(max_digits=3, decimal_places=1, default=1)

    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name="services")

    image_url = models.CharField(max_length=500, blank=True, default="")
    image_public_id = models.CharField(max_length=200, blank=True, default="")

    class Meta:
        ordering = ("name",)

    def __str__(self):
        return f"{self.name} ({self.fixed_rate})"
