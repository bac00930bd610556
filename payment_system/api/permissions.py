from django.conf import settings
from rest_framework import permissions


def client_ip(request):
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


class IsStaffOrInternalService(permissions.BasePermission):
    """
    Allows staff users, or schedulers calling from a whitelisted address.

    Used for settlement endpoints that normally run from the celery beat
    schedule but can be triggered by hand.
    """

    message = "Only staff or internal services can trigger payment distribution."

    def has_permission(self, request, view):
        if request.user and request.user.is_staff:
            return True

        return client_ip(request) in getattr(settings, "INTERNAL_SERVICE_IPS", [])
