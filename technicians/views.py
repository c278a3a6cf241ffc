import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import OpenApiResponse, extend_schema

from accounts.models import Address
from accounts.permissions import IsAdmin, IsTechnician
from adminpanel.audit import record
from catalog.models import Category

from .models import Technician
from .serializers import (
    DocumentSubmissionSerializer,
    TechnicianProfileSerializer,
    TechnicianVerificationDetailSerializer,
    TechnicianVerificationSerializer,
    VerifyDetailsSerializer,
    VerifyRequestSerializer,
)
from .verification import current_technician

logger = logging.getLogger(__name__)


class TechnicianProfileAPIView(APIView):
    permission_classes = [IsAuthenticated, IsTechnician]

    @extend_schema(responses={200: TechnicianProfileSerializer})
    def get(self, request):
        technician = current_technician(request.user)
        return Response(TechnicianProfileSerializer(technician).data)

    @extend_schema(request=TechnicianProfileSerializer, responses={200: TechnicianProfileSerializer})
    def put(self, request):
        return self._update(request, partial=False)

    @extend_schema(request=TechnicianProfileSerializer, responses={200: TechnicianProfileSerializer})
    def patch(self, request):
        return self._update(request, partial=True)

    def _update(self, request, partial):
        technician = current_technician(request.user)
        ser = TechnicianProfileSerializer(technician, data=request.data, partial=partial)
        ser.is_valid(raise_exception=True)
        ser.save()
        return Response(ser.data)


class TechnicianDocumentsAPIView(APIView):
    """
    Verification package: document references, experience, address and skills.
    A rejected technician who resubmits goes back to PENDING.
    """
    permission_classes = [IsAuthenticated, IsTechnician]

    @extend_schema(request=DocumentSubmissionSerializer, responses={200: VerifyDetailsSerializer})
    def post(self, request):
        ser = DocumentSubmissionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        user = request.user

        with transaction.atomic():
            technician = Technician.objects.select_for_update().filter(user=user).first()
            if technician is None:
                technician = Technician.objects.create(user=user)

            if data.get("id_proof"):
                technician.id_proof = data["id_proof"].strip()
            if data.get("certificate"):
                technician.certificate = data["certificate"].strip()
            if "experience_years" in data:
                technician.experience_years = data["experience_years"]
            if technician.verification_status == Technician.VerificationStatus.REJECTED:
                technician.verification_status = Technician.VerificationStatus.PENDING
                technician.rejection_reason = ""
            technician.save()

            address_data = data.get("address")
            if address_data:
                self._save_address(user, address_data)

            unknown = []
            for name in data.get("categories", []):
                name = name.strip()
                if not name:
                    continue
                category = Category.objects.filter(name__iexact=name, is_active=True).first()
                if category is None:
                    unknown.append(name)
                    continue
                technician.categories.add(category)

        logger.info("Technician %s submitted verification documents", technician.id)
        body = VerifyDetailsSerializer(technician).data
        body["unknown_categories"] = unknown
        return Response(body, status=status.HTTP_200_OK)

    def _save_address(self, user, address_data):
        addr = user.addresses.order_by("-is_default", "-created_at").first()
        if addr is None:
            Address.objects.create(
                user=user,
                street=address_data.get("street", ""),
                city=address_data.get("city", ""),
                state=address_data.get("state", ""),
                postal_code=address_data.get("postal_code", ""),
                country=address_data.get("country") or settings.DEFAULT_COUNTRY,
                is_default=True,
            )
            return

        for field in ("street", "city", "state", "postal_code", "country"):
            value = address_data.get(field)
            if value:
                setattr(addr, field, value)
        addr.save()


class VerifyDetailsAPIView(APIView):
    permission_classes = [IsAuthenticated, IsTechnician]

    @extend_schema(responses={200: VerifyDetailsSerializer})
    def get(self, request):
        technician = current_technician(request.user)
        return Response(VerifyDetailsSerializer(technician).data)


class AdminTechnicianViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get_queryset(self):
        qs = Technician.objects.select_related("user").order_by("id")

        status_param = self.request.query_params.get("status")
        if status_param:
            status_param = status_param.strip().upper()
            if status_param not in Technician.VerificationStatus.values:
                raise ValidationError({"status": "Invalid status value."})
            qs = qs.filter(verification_status=status_param)
        return qs

    def get_serializer_class(self):
        if self.action == "retrieve":
            return TechnicianVerificationDetailSerializer
        return TechnicianVerificationSerializer

    # /api/admin/technicians/pending/
    @action(detail=False, methods=["get"], url_path="pending")
    def pending(self, request):
        qs = Technician.objects.select_related("user").filter(
            verification_status=Technician.VerificationStatus.PENDING
        ).order_by("id")
        return Response(TechnicianVerificationSerializer(qs, many=True).data)

    # /api/admin/technicians/{id}/verify/
    @extend_schema(
        request=VerifyRequestSerializer,
        responses={
            200: TechnicianVerificationSerializer,
            400: OpenApiResponse(description="Invalid status or missing documents"),
        },
    )
    @action(detail=True, methods=["put", "post"], url_path="verify")
    def verify(self, request, pk=None):
        ser = VerifyRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        new_status = ser.validated_data["status"]
        reason = ser.validated_data.get("reason", "")

        technician = self.get_object()

        if new_status == Technician.VerificationStatus.APPROVED and not technician.has_documents():
            raise ValidationError(
                "Cannot approve: technician has not uploaded both ID proof and certificate."
            )

        technician.verification_status = new_status
        technician.verified_at = timezone.now() if new_status == Technician.VerificationStatus.APPROVED else None
        technician.rejection_reason = reason if new_status == Technician.VerificationStatus.REJECTED else ""
        technician.save(update_fields=["verification_status", "verified_at", "rejection_reason"])

        logger.info("Technician %s set to %s by %s", technician.id, new_status, request.user.email)
        record(request.user, f"Technician {new_status.lower()}", f"{technician.user.email} ({reason})" if reason else technician.user.email)
        return Response(TechnicianVerificationSerializer(technician).data)
