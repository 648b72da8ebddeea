# reports/repository.py
"""
Record sources for the reports.

Views and commands never reach for module-level data; they ask
get_repository() for the repository configured in
``REPORTS['repository_class']``.
"""
import logging
from dataclasses import replace

from django.utils.module_loading import import_string

from core.utils import get_clinic_now

from .conf import get_setting
from .demo_data import build_demo_records
from .records import Appointment, InventoryItem, Patient, Payment

logger = logging.getLogger(__name__)


class RecordRepository:
    """Read-only access to clinic records."""

    def get_patients(self):
        raise NotImplementedError

    def get_appointments(self):
        raise NotImplementedError

    def get_payments(self):
        raise NotImplementedError

    def get_inventory(self):
        raise NotImplementedError

    def get_all(self):
        return {
            'patients': self.get_patients(),
            'appointments': self.get_appointments(),
            'payments': self.get_payments(),
            'inventory': self.get_inventory(),
        }


def _coerce(records, record_class):
    return tuple(
        record if isinstance(record, record_class) else record_class.from_dict(record)
        for record in records
    )


class InMemoryRecordRepository(RecordRepository):
    """
    Repository over records held in memory.

    Accepts record instances or raw dicts. Appointments and payments without
    a patient name get the name of the matching patient.
    """

    def __init__(self, patients=(), appointments=(), payments=(), inventory=()):
        self._patients = _coerce(patients, Patient)
        names = {patient.id: patient.full_name for patient in self._patients}

        self._appointments = tuple(
            self._with_patient_name(record, names) for record in _coerce(appointments, Appointment)
        )
        self._payments = tuple(
            self._with_patient_name(record, names) for record in _coerce(payments, Payment)
        )
        self._inventory = _coerce(inventory, InventoryItem)

    @staticmethod
    def _with_patient_name(record, names):
        if record.patient_name or record.patient_id not in names:
            return record
        return replace(record, patient_name=names[record.patient_id])

    def get_patients(self):
        return self._patients

    def get_appointments(self):
        return self._appointments

    def get_payments(self):
        return self._payments

    def get_inventory(self):
        return self._inventory


class DemoRecordRepository(InMemoryRecordRepository):
    """In-memory repository seeded with the demo clinic data."""

    def __init__(self, now=None):
        super().__init__(**build_demo_records(now or get_clinic_now()))


def get_repository():
    """Instantiate the repository class named in settings."""
    dotted_path = get_setting('repository_class', 'reports.repository.DemoRecordRepository')
    repository_class = import_string(dotted_path)
    logger.debug(f"Using report repository {dotted_path}")
    return repository_class()
