from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import AdminLoginView, AdminUsersAPIView, AdminUserStatusAPIView
from .views import AddressViewSet, MeProfileAPIView
from .views import CreateSuperAdminView, ForgotPasswordView, ResetPasswordView
from .views import RegisterView, LoginView, ResendVerificationView, VerifyEmailView

router = DefaultRouter()
router.register("me/addresses", AddressViewSet, basename="addresses")

urlpatterns = [
    path("auth/register/", RegisterView.as_view()),
    path("auth/login/", LoginView.as_view()),
    path("auth/admin-login/", AdminLoginView.as_view()),
    path("auth/create-super-admin/", CreateSuperAdminView.as_view()),
    path("auth/verify/<str:token>/", VerifyEmailView.as_view()),
    path("auth/resend-verification/", ResendVerificationView.as_view()),
    path("auth/forgot-password/", ForgotPasswordView.as_view()),
    path("auth/reset-password/", ResetPasswordView.as_view()),

    path("me/profile/", MeProfileAPIView.as_view()),

    path("admin/users/", AdminUsersAPIView.as_view()),
    path("admin/users/<int:user_id>/status/", AdminUserStatusAPIView.as_view()),
] + router.urls
