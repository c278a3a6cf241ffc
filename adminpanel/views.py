from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import extend_schema

from accounts.permissions import IsAdmin

from .models import AuditLog
from .serializers import AuditLogSerializer, BookingTrendsSerializer, DashboardStatsSerializer
from .stats import booking_trends, dashboard_stats


class DashboardStatsAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    @extend_schema(responses={200: DashboardStatsSerializer})
    def get(self, request):
        return Response(DashboardStatsSerializer(dashboard_stats()).data)


class RecentActivityAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    @extend_schema(responses={200: AuditLogSerializer(many=True)})
    def get(self, request):
        limit = request.query_params.get("limit", "10")
        try:
            limit = int(limit)
        except ValueError:
            raise ValidationError({"limit": "Must be an integer"})
        if limit < 1 or limit > 100:
            raise ValidationError({"limit": "Must be between 1 and 100"})

        qs = AuditLog.objects.select_related("admin")[:limit]
        return Response(AuditLogSerializer(qs, many=True).data)


class BookingTrendsAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    @extend_schema(responses={200: BookingTrendsSerializer})
    def get(self, request):
        return Response(BookingTrendsSerializer(booking_trends()).data)
