from rest_framework.permissions import BasePermission


def is_admin(user):
    return bool(user and user.is_authenticated and (user.is_superuser or getattr(user, "role", None) == "ADMIN"))

def is_customer(user):
    return bool(user and user.is_authenticated and getattr(user, "role", None) == "CUSTOMER")

def is_technician(user):
    return bool(user and user.is_authenticated and getattr(user, "role", None) == "TECHNICIAN")


class IsAdmin(BasePermission):
    message = "Admin access required."

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsCustomer(BasePermission):
    message = "Only customers can do this."

    def has_permission(self, request, view):
        return is_customer(request.user)


class IsTechnician(BasePermission):
    message = "Only technicians can do this."

    def has_permission(self, request, view):
        return is_technician(request.user)
