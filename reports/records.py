# reports/records.py
"""
Plain record types read by the report aggregator.

Records are owned by the calling application and are never modified here.
Numeric fields keep whatever value the caller supplied; the aggregator
coerces them (and logs a warning) when they are malformed.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from django.utils.dateparse import parse_date, parse_datetime


def parse_when(value):
    """Parse an ISO date or datetime string; dates and datetimes pass through."""
    if value is None or value == '':
        return None
    if isinstance(value, (date, datetime)):
        return value
    try:
        parsed = parse_datetime(str(value))
        if parsed is None:
            parsed = parse_date(str(value))
    except ValueError:
        return None
    return parsed


def as_date(value):
    """Date part of a date/datetime value, None when missing."""
    if isinstance(value, datetime):
        return value.date()
    return value


def _normalize_choice(value, default=''):
    if value is None:
        return default
    return str(value).strip().lower().replace('-', '_') or default


@dataclass(frozen=True)
class Patient:
    id: str
    full_name: str = ''
    serial_number: str = ''
    gender: str = ''
    age: Any = None
    phone: str = ''
    email: str = ''
    is_active: bool = True
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data):
        full_name = data.get('full_name') or ' '.join(
            part for part in (data.get('first_name'), data.get('last_name')) if part
        )
        return cls(
            id=str(data.get('id', '')),
            full_name=full_name,
            serial_number=data.get('serial_number') or '',
            gender=_normalize_choice(data.get('gender')),
            age=data.get('age'),
            phone=data.get('phone') or '',
            email=data.get('email') or '',
            is_active=data.get('is_active', True) is not False,
            created_at=parse_when(data.get('created_at')),
        )


@dataclass(frozen=True)
class Appointment:
    id: str
    patient_id: str = ''
    patient_name: str = ''
    treatment: str = ''
    start_time: Optional[datetime] = None
    status: str = 'scheduled'
    cost: Any = None

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data.get('id', '')),
            patient_id=str(data.get('patient_id') or ''),
            patient_name=data.get('patient_name') or '',
            treatment=data.get('treatment') or data.get('title') or '',
            start_time=parse_when(data.get('start_time')),
            status=_normalize_choice(data.get('status'), 'scheduled'),
            cost=data.get('cost'),
        )


@dataclass(frozen=True)
class Payment:
    """
    A payment against a patient's bill.

    ``amount`` is the recorded transaction amount. For partial payments
    ``amount_paid`` holds the paid-so-far figure and ``total_amount_due`` the
    full bill.
    """
    id: str
    patient_id: str = ''
    patient_name: str = ''
    receipt_number: str = ''
    payment_date: Optional[datetime] = None
    payment_method: str = ''
    status: str = 'completed'
    amount: Any = None
    amount_paid: Any = None
    total_amount_due: Any = None
    description: str = ''

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data.get('id', '')),
            patient_id=str(data.get('patient_id') or ''),
            patient_name=data.get('patient_name') or '',
            receipt_number=data.get('receipt_number') or '',
            payment_date=parse_when(data.get('payment_date')),
            payment_method=_normalize_choice(data.get('payment_method')),
            status=_normalize_choice(data.get('status'), 'completed'),
            amount=data.get('amount'),
            amount_paid=data.get('amount_paid'),
            total_amount_due=data.get('total_amount_due'),
            description=data.get('description') or '',
        )


@dataclass(frozen=True)
class InventoryItem:
    id: str
    name: str = ''
    category: str = ''
    quantity: Any = 0
    unit: str = ''
    cost_per_unit: Any = 0
    minimum_stock: Any = 0
    expiry_date: Optional[date] = None
    supplier: str = ''

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name') or '',
            category=data.get('category') or '',
            quantity=data.get('quantity', 0),
            unit=data.get('unit') or '',
            cost_per_unit=data.get('cost_per_unit', 0),
            minimum_stock=data.get('minimum_stock', 0),
            expiry_date=as_date(parse_when(data.get('expiry_date'))),
            supplier=data.get('supplier') or '',
        )
