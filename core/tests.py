# core/tests.py
"""
Unit tests for clinic timezone helpers
"""
from datetime import date, datetime, timezone as dt_timezone

from django.test import SimpleTestCase, override_settings
from django.utils import timezone

from .utils import get_clinic_date, get_clinic_now, get_clinic_today


@override_settings(TIME_ZONE='Asia/Manila')
class ClinicTimeTest(SimpleTestCase):
    """Test clinic-local date helpers"""

    def test_aware_datetime_converted_to_clinic_date(self):
        """Test a UTC evening is the next day in Manila"""
        moment = datetime(2026, 6, 14, 20, 0, tzinfo=dt_timezone.utc)

        self.assertEqual(get_clinic_date(moment), date(2026, 6, 15))

    def test_naive_datetime_treated_as_clinic_time(self):
        """Test naive datetimes are read in the clinic timezone"""
        self.assertEqual(get_clinic_date(datetime(2026, 6, 14, 23, 30)), date(2026, 6, 14))

    def test_none(self):
        """Test None passes through"""
        self.assertIsNone(get_clinic_date(None))

    def test_now_and_today(self):
        """Test now is aware and today matches it"""
        now = get_clinic_now()

        self.assertTrue(timezone.is_aware(now))
        self.assertEqual(get_clinic_today(), timezone.localtime(timezone.now()).date())
