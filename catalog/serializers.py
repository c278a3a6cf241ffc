from rest_framework import serializers

from sitesmart.exceptions import Conflict

from .models import Category, Service


class CategorySerializer(serializers.ModelSerializer):
    total_services = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ("id", "name", "description", "is_active", "created_by", "created_at", "updated_at", "total_services")
        read_only_fields = ("id", "created_by", "created_at", "updated_at", "total_services")

    def get_total_services(self, obj):
        annotated = getattr(obj, "total_services", None)
        return annotated if annotated is not None else obj.services.count()

    def validate_name(self, value):
        name = value.strip()
        if not name:
            raise serializers.ValidationError("Category name is required.")

        qs = Category.objects.filter(name__iexact=name)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise Conflict("Category name already exists.")
        return name


class PublicCategorySerializer(serializers.ModelSerializer):
    service_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Category
        fields = ("id", "name", "description", "service_count")


class ServiceSerializer(serializers.ModelSerializer):
    category_id = serializers.PrimaryKeyRelatedField(source="category", queryset=Category.objects.all())
    category_name = serializers.CharField(source="category.name", read_only=True)

    class Meta:
        model = Service
        fields = (
            "id", "name", "description",
            "fixed_rate", "estimated_duration",
            "category_id", "category_name",
            "image_url", "image_public_id",
        )
        read_only_fields = ("id", "category_name")

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Service name is required.")
        return value

    def validate_fixed_rate(self, value):
        if value <= 0:
            raise serializers.ValidationError("Fixed rate must be greater than zero.")
        return value

    def validate_estimated_duration(self, value):
        if value <= 0:
            raise serializers.ValidationError("Estimated duration must be greater than zero.")
        return value

    def validate_category_id(self, value):
        if self.instance is None and not value.is_active:
            raise serializers.ValidationError("Category is inactive.")
        return value
