from rest_framework.permissions import BasePermission, SAFE_METHODS

from accounts.permissions import is_admin


class IsBookingOwnerOrAdmin(BasePermission):
    """Reads are already scoped by the queryset; writes need the owner or an admin."""

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return True
        return obj.customer_id == request.user.id or is_admin(request.user)
