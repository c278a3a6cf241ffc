from django.contrib import admin

from .models import Booking, Commission


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "customer", "service", "technician", "status", "total_amount", "booking_date")
    list_filter = ("status",)
    search_fields = ("customer__email", "service__name", "description")


@admin.register(Commission)
class CommissionAdmin(admin.ModelAdmin):
    list_display = ("booking", "technician", "percentage", "amount", "deducted_at")
