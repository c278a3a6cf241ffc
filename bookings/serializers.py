from rest_framework import serializers

from accounts.models import Address
from catalog.models import Service

from .lifecycle import progress_of
from .models import Booking


class BookingCreateSerializer(serializers.ModelSerializer):
    service_id = serializers.PrimaryKeyRelatedField(source="service", queryset=Service.objects.all())
    address_id = serializers.PrimaryKeyRelatedField(source="address", queryset=Address.objects.all())

    class Meta:
        model = Booking
        fields = ("service_id", "address_id", "description", "reference_image", "preferred_start", "preferred_end")

    def validate_service_id(self, service):
        if not service.category.is_active:
            raise serializers.ValidationError("Service is not available.")
        return service

    def validate_address_id(self, address):
        if address.user_id != self.context["request"].user.id:
            raise serializers.ValidationError("Address does not belong to you.")
        return address

    def validate(self, attrs):
        if attrs["preferred_end"] <= attrs["preferred_start"]:
            raise serializers.ValidationError({"preferred_end": "Must be after preferred_start."})
        return attrs

    def create(self, validated_data):
        validated_data["total_amount"] = validated_data["service"].fixed_rate
        validated_data["status"] = Booking.Status.PENDING
        return super().create(validated_data)


class BookingSerializer(serializers.ModelSerializer):
    customer_id = serializers.IntegerField(read_only=True)
    customer_name = serializers.CharField(source="customer.full_name", read_only=True)
    technician_id = serializers.IntegerField(read_only=True)
    technician_name = serializers.SerializerMethodField()
    service_id = serializers.IntegerField(read_only=True)
    service_name = serializers.CharField(source="service.name", read_only=True)
    address = serializers.SerializerMethodField()
    progress = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = (
            "id", "customer_id", "customer_name",
            "technician_id", "technician_name",
            "service_id", "service_name", "address",
            "description", "reference_image",
            "booking_date", "preferred_start", "preferred_end",
            "status", "total_amount", "work_completed_at", "progress",
        )
        read_only_fields = fields

    def get_technician_name(self, obj) -> str:
        if obj.technician_id is None:
            return "Not Assigned"
        return obj.technician.user.full_name

    def get_address(self, obj) -> str:
        return obj.address.one_line()

    def get_progress(self, obj) -> int:
        return progress_of(obj.status)


class CustomerOverviewSerializer(serializers.Serializer):
    current_booking = BookingSerializer(allow_null=True)
    booking_history = BookingSerializer(many=True)


class TechnicianJobSerializer(serializers.ModelSerializer):
    title = serializers.CharField(source="service.name", read_only=True)
    category = serializers.CharField(source="service.category.name", read_only=True)
    address = serializers.SerializerMethodField()
    rate = serializers.DecimalField(source="total_amount", max_digits=18, decimal_places=2, read_only=True)
    customer_name = serializers.CharField(source="customer.full_name", read_only=True)
    customer_phone = serializers.CharField(source="customer.phone", read_only=True)
    assigned_to_me = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = (
            "id", "title", "category", "address", "rate", "description",
            "status", "customer_name", "customer_phone",
            "preferred_start", "preferred_end", "created_at", "assigned_to_me",
        )
        read_only_fields = fields

    def get_address(self, obj) -> str:
        return obj.address.one_line()

    def get_assigned_to_me(self, obj) -> bool:
        technician = self.context.get("technician")
        return technician is not None and obj.technician_id == technician.id


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField()
