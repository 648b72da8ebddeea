# reports/conf.py
"""
Report settings lookup.

Values come from the ``REPORTS`` dict in the Django settings module and fall
back to the defaults below. Keys follow the clinic's settings naming
(``clinic_name``, ``currency_symbol`` ...).
"""
from django.conf import settings


DEFAULTS = {
    'clinic_name': 'Dental Clinic',
    'clinic_address': '',
    'clinic_phone': '',
    'clinic_email': '',
    'currency_symbol': '$',
    'default_language': 'en',
    'default_date_range': 'last_30_days',
    'repository_class': 'reports.repository.DemoRecordRepository',
    'pdf_detail_row_limit': 50,
    'top_categories_limit': 5,
    'expiring_soon_days': 30,
}


def _configured():
    return getattr(settings, 'REPORTS', None) or {}


def get_setting(key, default=None):
    """Get a report setting value by key"""
    configured = _configured()
    if key in configured:
        return configured[key]
    return DEFAULTS.get(key, default)


def get_int_setting(key, default=0):
    """Get an integer report setting value"""
    value = get_setting(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        return default

