"""API throttling classes."""

from rest_framework.throttling import UserRateThrottle


class CheckInRateThrottle(UserRateThrottle):
    """Throttle limiting check-in create requests per user."""
    scope = "check_in_create"
    rate = "30/hour"
