# reports/demo_data.py
"""
Demo clinic records.

Dates are given as offsets from the moment the data is built so the default
date ranges ("last 30 days", "this month") always contain records.
"""
from datetime import timedelta


def _at(now, days_ago, hour=9, minute=0):
    moment = now - timedelta(days=days_ago)
    return moment.replace(hour=hour, minute=minute, second=0, microsecond=0)


def build_demo_records(now):
    """
    Raw demo records keyed by entity kind.

    Args:
        now: timezone-aware datetime the offsets are relative to

    Returns:
        Dict with 'patients', 'appointments', 'payments' and 'inventory' lists
    """
    today = now.date()

    patients = [
        {
            'id': 'patient-1',
            'serial_number': 'P001',
            'full_name': 'Ahmed Mohammed Ali',
            'gender': 'male',
            'age': 35,
            'email': 'ahmed@example.com',
            'phone': '+966501234567',
            'created_at': _at(now, 160, 10),
        },
        {
            'id': 'patient-2',
            'serial_number': 'P002',
            'full_name': 'Fatima Ahmed Al-Salem',
            'gender': 'female',
            'age': 28,
            'email': 'fatima@example.com',
            'phone': '+966507654321',
            'created_at': _at(now, 155, 14, 30),
        },
        {
            'id': 'patient-3',
            'serial_number': 'P003',
            'full_name': 'Mohammed Abdullah Al-Khalid',
            'gender': 'male',
            'age': 42,
            'email': 'mohammed@example.com',
            'phone': '+966512345678',
            'created_at': _at(now, 140, 9, 15),
        },
        {
            'id': 'patient-4',
            'serial_number': 'P004',
            'full_name': 'Nora Saad Al-Mutairi',
            'gender': 'female',
            'age': 31,
            'email': 'nora@example.com',
            'phone': '+966598765432',
            'created_at': _at(now, 0, 8, 45),
        },
        {
            'id': 'patient-5',
            'serial_number': 'P005',
            'full_name': 'Khalid Abdulrahman Al-Nasr',
            'gender': 'male',
            'age': 65,
            'email': 'khalid@example.com',
            'phone': '+966523456789',
            'created_at': _at(now, 90, 16, 20),
        },
        {
            'id': 'patient-6',
            'serial_number': 'P006',
            'full_name': 'Layla Omar',
            'gender': 'female',
            'age': 9,
            'phone': '+966534567890',
            'created_at': _at(now, 0, 8, 0),
        },
    ]

    appointments = [
        {
            'id': 'appointment-1',
            'patient_id': 'patient-1',
            'treatment': 'Teeth cleaning',
            'start_time': _at(now, 3, 9),
            'status': 'completed',
            'cost': 200,
        },
        {
            'id': 'appointment-2',
            'patient_id': 'patient-2',
            'treatment': 'Filling',
            'start_time': _at(now, 3, 10, 30),
            'status': 'completed',
            'cost': 150,
        },
        {
            'id': 'appointment-3',
            'patient_id': 'patient-3',
            'treatment': 'Root canal',
            'start_time': _at(now, 10, 14),
            'status': 'in_progress',
            'cost': 800,
        },
        {
            'id': 'appointment-4',
            'patient_id': 'patient-4',
            'treatment': 'Teeth whitening',
            'start_time': _at(now, 0, 11),
            'status': 'scheduled',
            'cost': 600,
        },
        {
            'id': 'appointment-5',
            'patient_id': 'patient-5',
            'treatment': 'Teeth cleaning',
            'start_time': _at(now, 5, 9, 30),
            'status': 'no_show',
            'cost': 200,
        },
        {
            'id': 'appointment-6',
            'patient_id': 'patient-6',
            'treatment': 'Extraction',
            'start_time': _at(now, 12, 15),
            'status': 'cancelled',
            'cost': 100,
        },
    ]

    payments = [
        {
            'id': 'payment-1',
            'patient_id': 'patient-1',
            'amount': 200,
            'payment_method': 'cash',
            'payment_date': _at(now, 3, 9, 45),
            'description': 'Teeth cleaning',
            'receipt_number': 'REC-001',
            'status': 'completed',
        },
        {
            'id': 'payment-2',
            'patient_id': 'patient-2',
            'amount': 150,
            'payment_method': 'bank_transfer',
            'payment_date': _at(now, 3, 11, 30),
            'description': 'Filling',
            'receipt_number': 'REC-002',
            'status': 'completed',
        },
        {
            'id': 'payment-3',
            'patient_id': 'patient-3',
            'amount': 400,
            'amount_paid': 400,
            'total_amount_due': 800,
            'payment_method': 'cash',
            'payment_date': _at(now, 10, 9, 15),
            'description': 'Root canal, first installment',
            'receipt_number': 'REC-003',
            'status': 'partial',
        },
        {
            'id': 'payment-4',
            'patient_id': 'patient-4',
            'amount': 600,
            'payment_method': 'card',
            'payment_date': _at(now, 0, 11, 5),
            'description': 'Teeth whitening',
            'receipt_number': 'REC-004',
            'status': 'pending',
        },
        {
            'id': 'payment-5',
            'patient_id': 'patient-5',
            'amount': 200,
            'payment_method': 'insurance',
            'payment_date': _at(now, 20, 10),
            'description': 'Check-up',
            'receipt_number': 'REC-005',
            'status': 'overdue',
        },
    ]

    inventory = [
        {
            'id': 'inventory-1',
            'name': 'Composite fillings',
            'category': 'Filling materials',
            'quantity': 50,
            'unit': 'piece',
            'cost_per_unit': 25,
            'supplier': 'Advanced Medical Supplies Co.',
            'expiry_date': today + timedelta(days=400),
            'minimum_stock': 10,
        },
        {
            'id': 'inventory-2',
            'name': 'Local anaesthetic',
            'category': 'Medication',
            'quantity': 4,
            'unit': 'ampoule',
            'cost_per_unit': 15,
            'supplier': 'Modern Pharmaceuticals',
            'expiry_date': today + timedelta(days=20),
            'minimum_stock': 5,
        },
        {
            'id': 'inventory-3',
            'name': 'Medical gloves',
            'category': 'Supplies',
            'quantity': 200,
            'unit': 'pair',
            'cost_per_unit': 2,
            'supplier': 'Medical Supplies Co.',
            'expiry_date': today + timedelta(days=500),
            'minimum_stock': 50,
        },
        {
            'id': 'inventory-4',
            'name': 'Cleaning instruments',
            'category': 'Instruments',
            'quantity': 15,
            'unit': 'set',
            'cost_per_unit': 120,
            'supplier': 'Specialist Medical Tools',
            'minimum_stock': 3,
        },
        {
            'id': 'inventory-5',
            'name': 'Whitening gel',
            'category': 'Medication',
            'quantity': 0,
            'unit': 'tube',
            'cost_per_unit': 45,
            'supplier': 'Modern Pharmaceuticals',
            'expiry_date': today - timedelta(days=15),
            'minimum_stock': 2,
        },
    ]

    return {
        'patients': patients,
        'appointments': appointments,
        'payments': payments,
        'inventory': inventory,
    }
