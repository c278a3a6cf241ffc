from django.contrib import admin

from .models import Technician


@admin.register(Technician)
class TechnicianAdmin(admin.ModelAdmin):
    list_display = ("user", "verification_status", "availability_status", "rating_average", "total_jobs_completed")
    list_filter = ("verification_status", "availability_status")
    search_fields = ("user__email", "user__full_name")
