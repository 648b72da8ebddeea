"""
Timezone utility functions for consistent date/time handling across the application.
"""
from django.utils import timezone


def get_clinic_now():
    """
    Get current datetime in the clinic's timezone.

    Returns:
        datetime: Current datetime localized to settings.TIME_ZONE
    """
    return timezone.localtime(timezone.now())


def get_clinic_today():
    """
    Get today's date in the clinic's timezone.

    Returns:
        date: Today's date in settings.TIME_ZONE
    """
    return get_clinic_now().date()


def get_clinic_date(dt):
    """
    Convert a datetime to the clinic's timezone and extract the date.

    Args:
        dt (datetime): A timezone-aware or naive datetime

    Returns:
        date: The date in settings.TIME_ZONE
    """
    if dt is None:
        return None

    # Make timezone-aware if naive
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt)

    return timezone.localtime(dt).date()
