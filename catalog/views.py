from django.db.models import Count, Q
from django.utils import timezone

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsAdmin
from adminpanel.audit import record
from bookings.models import Booking

from .models import Category, Service
from .serializers import CategorySerializer, PublicCategorySerializer, ServiceSerializer


def active_services():
    return Service.objects.filter(category__is_active=True).select_related("category")


class CategoryViewSet(viewsets.ReadOnlyModelViewSet):
    """Public catalogue: active categories only."""
    serializer_class = PublicCategorySerializer
    permission_classes = [AllowAny]
    authentication_classes = []

    def get_queryset(self):
        return Category.objects.filter(is_active=True).annotate(service_count=Count("services"))

    # /api/categories/{id}/services/
    @action(detail=True, methods=["get"], url_path="services")
    def services(self, request, pk=None):
        category = self.get_object()
        qs = active_services().filter(category=category)
        return Response(ServiceSerializer(qs, many=True).data)


class ServiceViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = ServiceSerializer
    permission_classes = [AllowAny]
    authentication_classes = []

    def get_queryset(self):
        qs = active_services()

        category_id = self.request.query_params.get("category_id")
        if category_id is not None:
            try:
                category_id = int(category_id)
            except ValueError:
                raise ValidationError({"category_id": "Must be an integer"})
            qs = qs.filter(category_id=category_id)

        return qs


class CategoryAdminViewSet(viewsets.ModelViewSet):
    serializer_class = CategorySerializer
    permission_classes = [IsAuthenticated, IsAdmin]

    def get_queryset(self):
        return Category.objects.annotate(total_services=Count("services"))

    def perform_create(self, serializer):
        category = serializer.save(created_by=self.request.user.email)
        record(self.request.user, "Category created", category.name)

    def perform_update(self, serializer):
        category = serializer.save(updated_at=timezone.now())
        record(self.request.user, "Category updated", category.name)

    def perform_destroy(self, instance):
        if instance.services.exists():
            raise ValidationError("Cannot delete category that has associated services.")
        name = instance.name
        instance.delete()
        record(self.request.user, "Category deleted", name)


class ServiceAdminViewSet(viewsets.ModelViewSet):
    serializer_class = ServiceSerializer
    permission_classes = [IsAuthenticated, IsAdmin]

    def get_queryset(self):
        qs = Service.objects.select_related("category")

        category_id = self.request.query_params.get("category_id")
        if category_id:
            try:
                qs = qs.filter(category_id=int(category_id))
            except ValueError:
                raise ValidationError({"category_id": "Must be an integer"})

        search = self.request.query_params.get("search")
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(description__icontains=search))

        return qs

    def perform_create(self, serializer):
        service = serializer.save()
        record(self.request.user, "Service created", f"{service.name} @ {service.fixed_rate}")

    def perform_update(self, serializer):
        service = serializer.save()
        record(self.request.user, "Service updated", f"{service.name} @ {service.fixed_rate}")

    def perform_destroy(self, instance):
        if Booking.objects.filter(service=instance).exists():
            raise ValidationError("Cannot delete service with existing bookings.")
        name = instance.name
        instance.delete()
        record(self.request.user, "Service deleted", name)
