import logging

from django.db.models import Q

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from drf_spectacular.utils import OpenApiResponse, extend_schema

from accounts.models import User
from accounts.permissions import IsAdmin, IsCustomer, IsTechnician, is_admin, is_customer
from reviews.models import Review
from reviews.ratings import refresh_technician_rating
from reviews.serializers import ReviewSerializer
from sitesmart.exceptions import Conflict
from technicians.verification import current_technician, ensure_can_work

from .claims import JobUnavailable, claim_booking
from .lifecycle import TERMINAL, TransitionError, transition
from .models import Booking
from .permissions import IsBookingOwnerOrAdmin
from .serializers import (
    BookingCreateSerializer,
    BookingSerializer,
    CustomerOverviewSerializer,
    StatusUpdateSerializer,
    TechnicianJobSerializer,
)

logger = logging.getLogger(__name__)


def bookings_with_relations():
    return Booking.objects.select_related("customer", "service__category", "address", "technician__user")


def filter_by_status(qs, value):
    if not value:
        return qs
    value = value.strip().upper()
    if value not in Booking.Status.values:
        raise ValidationError({"status": f"Must be one of {', '.join(Booking.Status.values)}"})
    return qs.filter(status=value)


class BookingViewSet(mixins.CreateModelMixin, mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated, IsBookingOwnerOrAdmin]
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        user = self.request.user
        qs = bookings_with_relations()

        if is_admin(user):
            pass
        elif user.role == User.Role.TECHNICIAN:
            # technician: only jobs assigned to them; open jobs are under /technician/jobs/
            qs = qs.filter(technician__user=user)
        else:
            qs = qs.filter(customer=user)

        return filter_by_status(qs, self.request.query_params.get("status"))

    def get_serializer_class(self):
        if self.action == "create":
            return BookingCreateSerializer
        return BookingSerializer

    @extend_schema(request=BookingCreateSerializer, responses={201: BookingSerializer})
    def create(self, request, *args, **kwargs):
        if not is_customer(request.user):
            raise PermissionDenied("Only customers can create bookings.")

        ser = BookingCreateSerializer(data=request.data, context=self.get_serializer_context())
        ser.is_valid(raise_exception=True)
        booking = ser.save(customer=request.user)

        logger.info("Booking %s created by %s for %s", booking.id, request.user.email, booking.service.name)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    # /api/bookings/current/
    @extend_schema(responses={200: CustomerOverviewSerializer})
    @action(detail=False, methods=["get"], url_path="current", permission_classes=[IsAuthenticated, IsCustomer])
    def current(self, request):
        qs = bookings_with_relations().filter(customer=request.user).order_by("-booking_date")
        current = qs.exclude(status__in=TERMINAL).first()
        history = qs.exclude(pk=current.pk) if current else qs

        return Response(
            {
                "current_booking": BookingSerializer(current).data if current else None,
                "booking_history": BookingSerializer(history, many=True).data,
            }
        )

    # /api/bookings/{id}/cancel/
    # customer: own PENDING bookings; admin: any booking the status machine allows
    @extend_schema(request=None, responses={200: BookingSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        booking = self.get_object()

        if not is_admin(request.user) and booking.status in (Booking.Status.ACCEPTED, Booking.Status.IN_PROGRESS):
            raise ValidationError("Only pending bookings can be cancelled.")

        try:
            transition(booking, Booking.Status.CANCELLED)
        except TransitionError as exc:
            raise ValidationError(str(exc))

        return Response(BookingSerializer(booking).data)

    # /api/bookings/{id}/review/
    # Body: {"rating": 1..5, "comment": "..."}
    @extend_schema(request=ReviewSerializer, responses={201: ReviewSerializer})
    @action(detail=True, methods=["post"], url_path="review", permission_classes=[IsAuthenticated, IsCustomer])
    def review(self, request, pk=None):
        booking = self.get_object()

        if booking.status != Booking.Status.COMPLETED:
            raise ValidationError("You can only review a completed booking.")

        if Review.objects.filter(booking=booking).exists():
            raise ValidationError("You already reviewed this booking.")

        ser = ReviewSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        review = Review.objects.create(
            booking=booking,
            technician_id=booking.technician_id,
            customer=request.user,
            rating=ser.validated_data["rating"],
            comment=ser.validated_data.get("comment", ""),
        )
        refresh_technician_rating(booking.technician_id)
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


class TechnicianJobViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated, IsTechnician]
    serializer_class = TechnicianJobSerializer
    lookup_value_regex = r"\d+"

    def _serialize(self, data, technician, many=False):
        return TechnicianJobSerializer(data, many=many, context={"technician": technician}).data

    # GET /api/technician/jobs/  open jobs plus my active ones
    def list(self, request):
        technician = current_technician(request.user)
        qs = bookings_with_relations().filter(
            Q(status=Booking.Status.PENDING, technician__isnull=True)
            | Q(technician=technician, status__in=[Booking.Status.ACCEPTED, Booking.Status.IN_PROGRESS])
        ).order_by("-created_at")
        return Response(self._serialize(qs, technician, many=True))

    # GET /api/technician/jobs/mine/
    @action(detail=False, methods=["get"], url_path="mine")
    def mine(self, request):
        technician = current_technician(request.user)
        qs = bookings_with_relations().filter(technician=technician).order_by("-created_at")
        qs = filter_by_status(qs, request.query_params.get("status"))
        return Response(self._serialize(qs, technician, many=True))

    # POST /api/technician/jobs/{id}/accept/
    @extend_schema(
        request=None,
        responses={
            200: TechnicianJobSerializer,
            403: OpenApiResponse(description="Technician not verified"),
            404: OpenApiResponse(description="Booking not found"),
            409: OpenApiResponse(description="Job not available or already taken"),
        },
    )
    @action(detail=True, methods=["post"], url_path="accept")
    def accept(self, request, pk=None):
        technician = ensure_can_work(request.user, action="accept jobs")

        try:
            booking = claim_booking(int(pk), technician)
        except Booking.DoesNotExist:
            raise NotFound("Booking not found.")
        except JobUnavailable as exc:
            raise Conflict(str(exc))

        return Response(self._serialize(booking, technician))

    # PATCH /api/technician/jobs/{id}/status/
    # Body: {"status": "IN_PROGRESS" | "COMPLETED" | "CANCELLED"}
    @extend_schema(request=StatusUpdateSerializer, responses={200: TechnicianJobSerializer})
    @action(detail=True, methods=["patch", "post"], url_path="status")
    def update_status(self, request, pk=None):
        ser = StatusUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        technician = ensure_can_work(request.user, action="update jobs")

        try:
            booking = bookings_with_relations().get(pk=pk, technician=technician)
        except Booking.DoesNotExist:
            raise NotFound("Job not found.")

        try:
            transition(booking, ser.validated_data["status"])
        except TransitionError as exc:
            raise ValidationError(str(exc))

        return Response(self._serialize(booking, technician))


class AdminBookingViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = BookingSerializer
    permission_classes = [IsAuthenticated, IsAdmin]
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        qs = bookings_with_relations().order_by("-booking_date")
        return filter_by_status(qs, self.request.query_params.get("status"))
