from django.utils.timesince import timesince
from rest_framework import serializers

from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    admin_email = serializers.EmailField(source="admin.email", read_only=True, default=None)
    time_ago = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = ("id", "admin_email", "action", "details", "created_at", "time_ago")

    def get_time_ago(self, obj) -> str:
        return f"{timesince(obj.created_at)} ago"


class DashboardStatsSerializer(serializers.Serializer):
    total_revenue = serializers.DecimalField(max_digits=18, decimal_places=2)
    revenue_change = serializers.FloatField()
    active_technicians = serializers.IntegerField()
    technician_change = serializers.FloatField()
    jobs_in_progress = serializers.IntegerField()
    jobs_change = serializers.FloatField()
    new_registrations = serializers.IntegerField()


class BookingTrendsSerializer(serializers.Serializer):
    labels = serializers.ListField(child=serializers.CharField())
    data = serializers.ListField(child=serializers.IntegerField())
    total = serializers.IntegerField()
    growth = serializers.FloatField()
