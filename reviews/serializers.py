from rest_framework import serializers

from .models import Review


class ReviewSerializer(serializers.ModelSerializer):
    booking_id = serializers.IntegerField(read_only=True)
    technician_id = serializers.IntegerField(read_only=True)
    customer_id = serializers.IntegerField(read_only=True)
    customer_name = serializers.CharField(source="customer.full_name", read_only=True)

    class Meta:
        model = Review
        fields = ("id", "booking_id", "technician_id", "customer_id", "customer_name", "rating", "comment", "created_at")
        read_only_fields = ("id", "booking_id", "technician_id", "customer_id", "customer_name", "created_at")

    def validate_rating(self, value):
        if not (1 <= int(value) <= 5):
            raise serializers.ValidationError("Rating must be between 1 and 5.")
        return value
