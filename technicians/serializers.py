from django.contrib.auth import get_user_model
from rest_framework import serializers

from accounts.models import Address
from sitesmart.exceptions import Conflict

from .models import Technician

User = get_user_model()


class TechnicianProfileSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    full_name = serializers.CharField(source="user.full_name", required=False)
    email = serializers.EmailField(source="user.email", read_only=True)
    phone = serializers.CharField(source="user.phone", required=False, allow_blank=True, allow_null=True)
    availability_status = serializers.CharField(max_length=20, required=False)
    categories = serializers.SlugRelatedField(slug_field="name", many=True, read_only=True)

    class Meta:
        model = Technician
        fields = (
            "id", "user_id", "full_name", "email", "phone",
            "experience_years", "rating_average", "total_ratings",
            "availability_status", "wallet_balance", "total_jobs_completed",
            "verification_status", "verified_at", "categories",
        )
        read_only_fields = (
            "id", "user_id", "email", "rating_average", "total_ratings",
            "wallet_balance", "total_jobs_completed",
            "verification_status", "verified_at", "categories",
        )

    def validate_availability_status(self, value):
        value = str(value).strip().upper()
        if value not in Technician.Availability.values:
            raise serializers.ValidationError(f"Must be one of {', '.join(Technician.Availability.values)}")
        return value

    def update(self, instance, validated_data):
        user_data = validated_data.pop("user", {})
        if user_data:
            user = instance.user
            if "full_name" in user_data and user_data["full_name"].strip():
                user.full_name = user_data["full_name"].strip()
            if "phone" in user_data:
                phone = (user_data["phone"] or "").strip() or None
                if phone and User.objects.filter(phone=phone).exclude(pk=user.pk).exists():
                    raise Conflict("Phone already registered.")
                user.phone = phone
            user.save(update_fields=["full_name", "phone"])
        return super().update(instance, validated_data)


class AddressInputSerializer(serializers.ModelSerializer):
    class Meta:
        model = Address
        fields = ("street", "city", "state", "postal_code", "country")
        extra_kwargs = {
            "street": {"required": False},
            "city": {"required": False},
            "state": {"required": False},
            "postal_code": {"required": False},
            "country": {"required": False},
        }


class DocumentSubmissionSerializer(serializers.Serializer):
    id_proof = serializers.CharField(max_length=500, required=False, allow_blank=True)
    certificate = serializers.CharField(max_length=500, required=False, allow_blank=True)
    experience_years = serializers.IntegerField(required=False, min_value=0)
    address = AddressInputSerializer(required=False)
    categories = serializers.ListField(child=serializers.CharField(), required=False)


class VerifyDetailsSerializer(serializers.ModelSerializer):
    address = serializers.SerializerMethodField()
    categories = serializers.SlugRelatedField(slug_field="name", many=True, read_only=True)

    class Meta:
        model = Technician
        fields = (
            "id", "id_proof", "certificate", "experience_years",
            "verification_status", "rejection_reason", "address", "categories",
        )

    def get_address(self, obj):
        addr = obj.user.addresses.order_by("-is_default", "-created_at").first()
        return AddressInputSerializer(addr).data if addr else None


class TechnicianVerificationSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    full_name = serializers.CharField(source="user.full_name", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)
    phone = serializers.CharField(source="user.phone", read_only=True, default="")

    class Meta:
        model = Technician
        fields = (
            "id", "user_id", "full_name", "email", "phone",
            "verification_status", "experience_years",
            "id_proof", "certificate", "verified_at", "rejection_reason",
        )


class TechnicianVerificationDetailSerializer(TechnicianVerificationSerializer):
    address = serializers.SerializerMethodField()

    class Meta(TechnicianVerificationSerializer.Meta):
        fields = TechnicianVerificationSerializer.Meta.fields + ("address",)

    def get_address(self, obj):
        addr = obj.user.addresses.order_by("-is_default", "-created_at").first()
        return AddressInputSerializer(addr).data if addr else None


class VerifyRequestSerializer(serializers.Serializer):
    status = serializers.CharField()
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True)

    def validate_status(self, value):
        value = str(value).strip().upper()
        if value not in Technician.VerificationStatus.values:
            raise serializers.ValidationError("Invalid status value.")
        return value
