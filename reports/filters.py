# reports/filters.py
"""
Date-range filtering for report records.

Appointments are filtered on start time and payments on payment date, both
compared as clinic-local dates. Patients and inventory are never filtered.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from core.utils import get_clinic_date, get_clinic_today

from .conf import get_setting
from .formatting import format_date

logger = logging.getLogger(__name__)

DATE_RANGES = ('today', 'yesterday', 'last_7_days', 'last_30_days', 'this_month', 'custom')


@dataclass(frozen=True)
class DateRange:
    key: str
    start_date: date
    end_date: date

    def contains(self, value):
        if value is None:
            return False
        if isinstance(value, datetime):
            value = get_clinic_date(value)
        return self.start_date <= value <= self.end_date

    @property
    def description(self):
        """Human readable range, e.g. 01/06/2026 - 30/06/2026"""
        if self.start_date == self.end_date:
            return format_date(self.start_date)
        return f"{format_date(self.start_date)} - {format_date(self.end_date)}"


def get_date_range(date_range=None, custom_start=None, custom_end=None, today=None):
    """
    Calculate start and end dates based on selected range

    Args:
        date_range: Predefined range key, defaults to REPORTS['default_date_range']
        custom_start: Custom start date string (YYYY-MM-DD)
        custom_end: Custom end date string (YYYY-MM-DD)
        today: Reference date, defaults to the clinic's today

    Returns:
        DateRange
    """
    today = today or get_clinic_today()
    date_range = date_range or get_setting('default_date_range', 'last_30_days')

    if date_range == 'today':
        start_date = end_date = today
    elif date_range == 'yesterday':
        start_date = end_date = today - timedelta(days=1)
    elif date_range == 'last_7_days':
        start_date = today - timedelta(days=7)
        end_date = today
    elif date_range == 'last_30_days':
        start_date = today - timedelta(days=30)
        end_date = today
    elif date_range == 'this_month':
        start_date = today.replace(day=1)
        end_date = today
    elif date_range == 'custom' and custom_start and custom_end:
        try:
            start_date = datetime.strptime(custom_start, '%Y-%m-%d').date()
            end_date = datetime.strptime(custom_end, '%Y-%m-%d').date()

            # Validate date range
            if start_date > end_date:
                start_date, end_date = end_date, start_date

        except (ValueError, TypeError):
            logger.warning(f"Invalid custom date range {custom_start!r} - {custom_end!r}, using last 30 days")
            date_range = 'last_30_days'
            start_date = today - timedelta(days=30)
            end_date = today
    elif date_range == 'custom':
        logger.warning(f"Incomplete custom date range {custom_start!r} - {custom_end!r}, using last 30 days")
        date_range = 'last_30_days'
        start_date = today - timedelta(days=30)
        end_date = today
    else:
        # Default fallback
        if date_range not in DATE_RANGES:
            logger.warning(f"Unknown date range {date_range!r}, using last 30 days")
        date_range = 'last_30_days'
        start_date = today - timedelta(days=30)
        end_date = today

    return DateRange(key=date_range, start_date=start_date, end_date=end_date)


def filter_appointments(appointments, date_range):
    return [
        appointment for appointment in appointments
        if date_range.contains(appointment.start_time)
    ]


def filter_payments(payments, date_range):
    return [
        payment for payment in payments
        if date_range.contains(payment.payment_date)
    ]
