from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework import serializers

from sitesmart.exceptions import Conflict

from .models import Address, AdminProfile
from .utils import expires_in, new_token

User = get_user_model()


class RegisterSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(max_length=255)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    role = serializers.CharField(max_length=20, required=False, default=User.Role.CUSTOMER)
    password = serializers.CharField(write_only=True, min_length=6)

    class Meta:
        model = User
        fields = ("id", "full_name", "email", "phone", "role", "password")

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise Conflict("Email already registered.")
        return value

    def validate_phone(self, value):
        value = (value or "").strip() or None
        if value and User.objects.filter(phone=value).exists():
            raise Conflict("Phone already registered.")
        return value

    def validate_role(self, value):
        allowed = {User.Role.CUSTOMER, User.Role.TECHNICIAN}
        value = str(value).strip().upper()
        return value if value in allowed else User.Role.CUSTOMER

    def create(self, validated_data):
        from technicians.models import Technician

        password = validated_data.pop("password")
        user = User(**validated_data)
        user.set_password(password)
        user.verification_token = new_token()
        user.verification_token_expires = expires_in(settings.EMAIL_TOKEN_HOURS)
        user.save()

        if user.role == User.Role.TECHNICIAN:
            Technician.objects.create(user=user)
        return user


class LoginRequestSerializer(serializers.Serializer):
    identifier = serializers.CharField()
    password = serializers.CharField()


class AdminLoginRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()


class CreateSuperAdminSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    email = serializers.EmailField(max_length=255)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    password = serializers.CharField(write_only=True, min_length=6)


class PublicUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ("id", "full_name", "email", "role")


class LoginResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()
    role = serializers.CharField()
    user = PublicUserSerializer()
    technician_id = serializers.IntegerField(required=False)
    verification_status = serializers.CharField(required=False)


class EmailSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ResetPasswordSerializer(serializers.Serializer):
    token = serializers.CharField()
    password = serializers.CharField(write_only=True, min_length=6)


class ProfileSerializer(serializers.ModelSerializer):
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)

    class Meta:
        model = User
        fields = ("id", "full_name", "email", "phone", "role", "status", "profile_image", "email_confirmed", "created_at")
        read_only_fields = ("id", "email", "role", "status", "email_confirmed", "created_at")

    def validate_full_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Full name cannot be blank.")
        return value

    def validate_phone(self, value):
        value = (value or "").strip() or None
        if value and User.objects.filter(phone=value).exclude(pk=self.instance.pk).exists():
            raise Conflict("Phone already registered.")
        return value


class AddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = Address
        fields = ("id", "street", "city", "state", "postal_code", "country", "is_default", "created_at")
        read_only_fields = ("id", "created_at")


class AdminProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = AdminProfile
        fields = ("admin_level", "can_manage_users", "can_manage_services", "can_view_reports", "last_login_at", "last_login_ip")


class AdminUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ("id", "full_name", "email", "phone", "role", "status", "email_confirmed", "created_at")


class UserStatusSerializer(serializers.Serializer):
    status = serializers.CharField()

    def validate_status(self, value):
        value = str(value).strip().upper()
        if value not in User.Status.values:
            raise serializers.ValidationError(f"Invalid status. Allowed: {', '.join(User.Status.values)}")
        return value
