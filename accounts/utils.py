import secrets
from datetime import timedelta

from django.utils import timezone
from rest_framework_simplejwt.tokens import RefreshToken


def new_token():
    return secrets.token_hex(32)


def expires_in(hours):
    return timezone.now() + timedelta(hours=hours)


def tokens_for_user(user):
    """Refresh/access pair carrying the role (and technician id) as extra claims."""
    refresh = RefreshToken.for_user(user)
    refresh["role"] = user.role

    technician = getattr(user, "technician", None)
    if technician is not None:
        refresh["technician_id"] = technician.id

    return {"refresh": str(refresh), "access": str(refresh.access_token)}


def client_ip(request):
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")
