import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.hashers import check_password
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from rest_framework import status, viewsets
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import OpenApiResponse, extend_schema

from adminpanel.audit import record
from bookings.models import Booking
from sitesmart.exceptions import Conflict

from .models import Address, AdminProfile
from .permissions import IsAdmin
from .serializers import (
    AddressSerializer,
    AdminLoginRequestSerializer,
    AdminUserSerializer,
    CreateSuperAdminSerializer,
    EmailSerializer,
    LoginRequestSerializer,
    LoginResponseSerializer,
    ProfileSerializer,
    PublicUserSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    UserStatusSerializer,
)
from .utils import client_ip, expires_in, new_token, tokens_for_user

logger = logging.getLogger(__name__)

User = get_user_model()

INVALID_CREDENTIALS = "Invalid credentials"


class RegisterView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(
        request=RegisterSerializer,
        responses={201: RegisterSerializer, 409: OpenApiResponse(description="Email or phone already registered")},
    )
    def post(self, request):
        ser = RegisterSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        with transaction.atomic():
            user = ser.save()

        logger.info("Registered %s as %s", user.email, user.role)
        logger.info("Email verification link for %s: /api/auth/verify/%s/", user.email, user.verification_token)
        return Response(RegisterSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(
        request=LoginRequestSerializer,
        responses={
            200: LoginResponseSerializer,
            401: OpenApiResponse(description="Invalid credentials or unconfirmed email"),
            403: OpenApiResponse(description="Account inactive or banned"),
        },
    )
    def post(self, request):
        identifier = (request.data.get("identifier") or "").strip()
        password = request.data.get("password")

        if not identifier or not password:
            return Response(
                {"detail": "identifier and password are required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        user = (
            User.objects.filter(Q(email__iexact=identifier) | Q(phone=identifier))
            .select_related("technician")
            .first()
        )

        if not user or not check_password(password, user.password):
            logger.info("Failed login for %s", identifier)
            return Response({"detail": INVALID_CREDENTIALS}, status=status.HTTP_401_UNAUTHORIZED)

        if settings.REQUIRE_EMAIL_CONFIRMATION and not user.email_confirmed:
            return Response({"detail": "Please verify your email first"}, status=status.HTTP_401_UNAUTHORIZED)

        if user.status != User.Status.ACTIVE:
            raise PermissionDenied("Account is not active.")

        data = {
            **tokens_for_user(user),
            "role": user.role,
            "user": PublicUserSerializer(user).data,
        }
        technician = getattr(user, "technician", None)
        if technician is not None:
            data["technician_id"] = technician.id
            data["verification_status"] = technician.verification_status

        logger.info("User %s logged in", user.email)
        return Response(data, status=status.HTTP_200_OK)


class AdminLoginView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(request=AdminLoginRequestSerializer, responses={200: LoginResponseSerializer})
    def post(self, request):
        ser = AdminLoginRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        email = ser.validated_data["email"].strip()

        user = (
            User.objects.filter(email__iexact=email, admin_profile__isnull=False)
            .select_related("admin_profile")
            .first()
        )
        if not user or not check_password(ser.validated_data["password"], user.password):
            logger.info("Failed admin login for %s", email)
            return Response({"detail": INVALID_CREDENTIALS}, status=status.HTTP_401_UNAUTHORIZED)

        if not user.email_confirmed:
            return Response({"detail": "Please verify your email first"}, status=status.HTTP_401_UNAUTHORIZED)

        if user.status != User.Status.ACTIVE:
            raise PermissionDenied("Account is not active.")

        profile = user.admin_profile
        profile.last_login_at = timezone.now()
        profile.last_login_ip = client_ip(request)
        profile.save(update_fields=["last_login_at", "last_login_ip"])

        logger.info("Admin %s logged in from %s", user.email, profile.last_login_ip)
        return Response(
            {
                **tokens_for_user(user),
                "role": user.role,
                "user": PublicUserSerializer(user).data,
                "admin_level": profile.admin_level,
            }
        )


class CreateSuperAdminView(APIView):
    """
    Bootstrap endpoint: creates the first admin account.
    Refused once any admin profile exists.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(request=CreateSuperAdminSerializer, responses={201: PublicUserSerializer})
    def post(self, request):
        ser = CreateSuperAdminSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        if AdminProfile.objects.exists():
            raise Conflict("Super admin already exists.")

        email = data["email"].strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise Conflict("Email already registered.")

        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                password=data["password"],
                full_name=(data.get("full_name") or "").strip() or "Super Admin",
                phone=(data.get("phone") or "").strip() or None,
                role=User.Role.ADMIN,
                email_confirmed=True,
                is_staff=True,
            )
            AdminProfile.objects.create(user=user, admin_level=AdminProfile.Level.SUPER_ADMIN)

        logger.info("Super admin %s created", user.email)
        return Response(PublicUserSerializer(user).data, status=status.HTTP_201_CREATED)


class VerifyEmailView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request, token):
        user = User.objects.filter(verification_token=token).first()
        if not user or not user.verification_token_expires or user.verification_token_expires < timezone.now():
            raise ValidationError({"token": "Invalid or expired verification link."})

        user.email_confirmed = True
        user.verification_token = None
        user.verification_token_expires = None
        user.save(update_fields=["email_confirmed", "verification_token", "verification_token_expires"])

        logger.info("Email confirmed for %s", user.email)
        return Response({"detail": "Email verified."})


class ResendVerificationView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(request=EmailSerializer)
    def post(self, request):
        ser = EmailSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        user = User.objects.filter(email__iexact=ser.validated_data["email"].strip()).first()
        if not user:
            raise NotFound("No account found with this email.")
        if user.email_confirmed:
            raise ValidationError("Email already verified.")

        user.verification_token = new_token()
        user.verification_token_expires = expires_in(settings.EMAIL_TOKEN_HOURS)
        user.save(update_fields=["verification_token", "verification_token_expires"])

        logger.info("Email verification link for %s: /api/auth/verify/%s/", user.email, user.verification_token)
        return Response({"detail": "Verification email sent."})


class ForgotPasswordView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(request=EmailSerializer)
    def post(self, request):
        ser = EmailSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        user = User.objects.filter(email__iexact=ser.validated_data["email"].strip()).first()
        if user:
            user.reset_token = new_token()
            user.reset_token_expires = expires_in(settings.RESET_TOKEN_HOURS)
            user.save(update_fields=["reset_token", "reset_token_expires"])
            logger.info("Password reset token issued for %s: %s", user.email, user.reset_token)

        # same answer whether or not the account exists
        return Response({"detail": "If the email exists, a reset link has been sent."})


class ResetPasswordView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(request=ResetPasswordSerializer)
    def post(self, request):
        ser = ResetPasswordSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        user = User.objects.filter(reset_token=ser.validated_data["token"]).first()
        if not user or not user.reset_token_expires or user.reset_token_expires < timezone.now():
            raise ValidationError({"token": "Invalid or expired reset token."})

        user.set_password(ser.validated_data["password"])
        user.reset_token = None
        user.reset_token_expires = None
        user.save(update_fields=["password", "reset_token", "reset_token_expires"])

        logger.info("Password reset for %s", user.email)
        return Response({"detail": "Password has been reset."})


class MeProfileAPIView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: ProfileSerializer})
    def get(self, request):
        return Response(ProfileSerializer(request.user).data)

    @extend_schema(request=ProfileSerializer, responses={200: ProfileSerializer})
    def put(self, request):
        return self._update(request, partial=False)

    @extend_schema(request=ProfileSerializer, responses={200: ProfileSerializer})
    def patch(self, request):
        return self._update(request, partial=True)

    def _update(self, request, partial):
        ser = ProfileSerializer(request.user, data=request.data, partial=partial)
        ser.is_valid(raise_exception=True)
        ser.save()
        return Response(ser.data)


class AddressViewSet(viewsets.ModelViewSet):
    serializer_class = AddressSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Address.objects.filter(user=self.request.user).order_by("-is_default", "-created_at")

    def perform_create(self, serializer):
        with transaction.atomic():
            address = serializer.save(user=self.request.user)
            self._keep_single_default(address)

    def perform_update(self, serializer):
        with transaction.atomic():
            address = serializer.save()
            self._keep_single_default(address)

    def perform_destroy(self, instance):
        if Booking.objects.filter(address=instance).exists():
            raise ValidationError("Cannot delete an address used by bookings.")
        instance.delete()

    def _keep_single_default(self, address):
        if address.is_default:
            Address.objects.filter(user=address.user).exclude(id=address.id).update(is_default=False)


class AdminUsersAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    @extend_schema(responses={200: AdminUserSerializer(many=True)})
    def get(self, request):
        qs = User.objects.all().order_by("-created_at")

        role = request.query_params.get("role")
        user_status = request.query_params.get("status")

        if role:
            role = role.strip().upper()
            if role not in User.Role.values:
                raise ValidationError({"role": f"Must be one of {', '.join(User.Role.values)}"})
            qs = qs.filter(role=role)

        if user_status:
            user_status = user_status.strip().upper()
            if user_status not in User.Status.values:
                raise ValidationError({"status": f"Must be one of {', '.join(User.Status.values)}"})
            qs = qs.filter(status=user_status)

        return Response(AdminUserSerializer(qs, many=True).data)


class AdminUserStatusAPIView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    @extend_schema(request=UserStatusSerializer, responses={200: AdminUserSerializer})
    def patch(self, request, user_id):
        ser = UserStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            u = User.objects.get(id=user_id)
        except User.DoesNotExist:
            raise NotFound("User not found")

        if u.id == request.user.id:
            raise ValidationError("You cannot change your own status.")

        u.status = ser.validated_data["status"]
        u.is_active = u.status == User.Status.ACTIVE
        u.save(update_fields=["status", "is_active"])

        record(request.user, "User status changed", f"{u.email} -> {u.status}")
        return Response(AdminUserSerializer(u).data)
