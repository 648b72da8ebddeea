# reports/aggregation.py
"""
Report aggregation.

Turns plain clinic records into report statistics. Every figure is a pure
function of the records passed in, the export options and the ``as_of``
date; nothing is read from module state.

IMPORTANT NOTES:
- Revenue counts completed and partial payments only. For a partial payment
  only the amount paid so far is revenue, never the nominal bill.
- Remaining balance is computed per patient as max(0, due - paid) and then
  summed, so an overpaying patient never offsets another patient's debt.
- Malformed numbers (garbage strings, NaN, Infinity, magnitudes of 1e15 and
  above) count as zero and are logged as warnings; aggregation never raises
  for them.
"""
import logging
from collections import Counter, defaultdict
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import ClassVar, Optional, Tuple

from core.utils import get_clinic_date, get_clinic_today

from .conf import get_int_setting
from .exceptions import UnsupportedReportTypeError
from .options import ExportOptions

logger = logging.getLogger(__name__)

REPORT_TYPES = ('patients', 'appointments', 'financial', 'inventory', 'overview')

REVENUE_STATUSES = ('completed', 'partial')
NON_BILLABLE_STATUSES = ('cancelled', 'refunded')
UNKNOWN = 'unknown'

AGE_GROUPS = ('children', 'teens', 'adults', 'seniors')
GENDERS = ('male', 'female')

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0')
# Larger magnitudes are treated as malformed input
MAX_MAGNITUDE = Decimal('1e15')


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------

def to_decimal(value, field_name='amount', record_id=None):
    """
    Coerce a raw numeric field to Decimal.

    Missing values are zero. Malformed and non-finite values are zero too,
    with a warning naming the record.
    """
    if value is None or value == '':
        return ZERO
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        logger.warning(f"Invalid {field_name} {value!r} for record {record_id}, using 0")
        return ZERO
    if not amount.is_finite():
        logger.warning(f"Non-finite {field_name} {value!r} for record {record_id}, using 0")
        return ZERO
    if abs(amount) >= MAX_MAGNITUDE:
        logger.warning(f"Out of range {field_name} {value!r} for record {record_id}, using 0")
        return ZERO
    return amount


def to_int(value, field_name='value', record_id=None):
    """Coerce to int; None when missing or malformed (malformed is logged)."""
    if value is None or value == '':
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        logger.warning(f"Invalid {field_name} {value!r} for record {record_id}, ignored")
        return None
    if not amount.is_finite():
        logger.warning(f"Non-finite {field_name} {value!r} for record {record_id}, ignored")
        return None
    if abs(amount) >= MAX_MAGNITUDE:
        logger.warning(f"Out of range {field_name} {value!r} for record {record_id}, ignored")
        return None
    return int(amount)


def money(value):
    """Round half-up to cents."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def percentage(count, total):
    """count / total * 100, one decimal, 0.0 when total is 0"""
    if not total:
        return 0.0
    return round(count / total * 100, 1)


def _local_date(value):
    if isinstance(value, datetime):
        return get_clinic_date(value)
    return value


def payment_paid(payment):
    """Amount paid so far: amount_paid when recorded, else the amount of a settled payment."""
    if payment.amount_paid is not None:
        return to_decimal(payment.amount_paid, 'amount_paid', payment.id)
    if payment.status in REVENUE_STATUSES:
        return to_decimal(payment.amount, 'amount', payment.id)
    return ZERO


def payment_due(payment):
    """Full bill: total_amount_due when recorded, else the payment amount."""
    if payment.total_amount_due is not None:
        return to_decimal(payment.total_amount_due, 'total_amount_due', payment.id)
    return to_decimal(payment.amount, 'amount', payment.id)


def payment_revenue(payment):
    """Revenue contributed by a payment; partial payments count what was paid."""
    if payment.status == 'partial':
        return payment_paid(payment)
    return to_decimal(payment.amount, 'amount', payment.id)


# ---------------------------------------------------------------------------
# Report data containers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BreakdownItem:
    """One row of a distribution: key, count, share of the total, optional amount."""
    key: str
    count: int
    percentage: float
    amount: Optional[Decimal] = None


@dataclass(frozen=True)
class MonthlyRevenue:
    month: str
    revenue: Decimal


@dataclass(frozen=True)
class PatientBalance:
    patient_id: str
    patient_name: str
    total_due: Decimal
    total_paid: Decimal
    remaining: Decimal


@dataclass(frozen=True)
class ReportData:
    """Common fields for every report kind."""
    report_type: ClassVar[str] = ''

    total: int = 0
    filter_info: str = ''
    as_of: Optional[date] = None
    records: tuple = ()

    @property
    def data_count(self):
        return self.total

    def to_dict(self):
        data = asdict(self)
        data['report_type'] = self.report_type
        data['data_count'] = self.data_count
        return data


@dataclass(frozen=True)
class PatientReportData(ReportData):
    report_type: ClassVar[str] = 'patients'

    active_patients: int = 0
    new_patients_this_month: int = 0
    average_age: int = 0
    age_distribution: Tuple[BreakdownItem, ...] = ()
    gender_distribution: Tuple[BreakdownItem, ...] = ()


@dataclass(frozen=True)
class AppointmentReportData(ReportData):
    report_type: ClassVar[str] = 'appointments'

    completed_appointments: int = 0
    cancelled_appointments: int = 0
    no_show_appointments: int = 0
    scheduled_appointments: int = 0
    in_progress_appointments: int = 0
    attendance_rate: float = 0.0
    cancellation_rate: float = 0.0
    no_show_rate: float = 0.0
    completed_value: Decimal = ZERO
    appointments_by_status: Tuple[BreakdownItem, ...] = ()
    appointments_by_treatment: Tuple[BreakdownItem, ...] = ()


@dataclass(frozen=True)
class FinancialReportData(ReportData):
    report_type: ClassVar[str] = 'financial'

    total_revenue: Decimal = ZERO
    completed_payments: Decimal = ZERO
    partial_payments: Decimal = ZERO
    partial_payments_count: int = 0
    partial_remaining: Decimal = ZERO
    pending_payments: Decimal = ZERO
    overdue_payments: Decimal = ZERO
    outstanding_balance: Decimal = ZERO
    remaining_balance: Decimal = ZERO
    average_payment: Decimal = ZERO
    payment_method_stats: Tuple[BreakdownItem, ...] = ()
    payments_by_status: Tuple[BreakdownItem, ...] = ()
    monthly_revenue: Tuple[MonthlyRevenue, ...] = ()
    patient_balances: Tuple[PatientBalance, ...] = ()


@dataclass(frozen=True)
class InventoryReportData(ReportData):
    report_type: ClassVar[str] = 'inventory'

    total_quantity: int = 0
    total_value: Decimal = ZERO
    low_stock_items: int = 0
    out_of_stock_items: int = 0
    expired_items: int = 0
    expiring_soon_items: int = 0
    items_by_category: Tuple[BreakdownItem, ...] = ()
    top_categories: Tuple[BreakdownItem, ...] = ()


@dataclass(frozen=True)
class OverviewReportData(ReportData):
    report_type: ClassVar[str] = 'overview'

    patients: Optional[PatientReportData] = None
    appointments: Optional[AppointmentReportData] = None
    financial: Optional[FinancialReportData] = None
    inventory: Optional[InventoryReportData] = None

    @property
    def sections(self):
        return [
            report for report in (self.patients, self.appointments, self.financial, self.inventory)
            if report is not None
        ]


# ---------------------------------------------------------------------------
# Breakdowns
# ---------------------------------------------------------------------------

def build_breakdown(records, key_func, amount_func=None, order=None):
    """
    Count records per key.

    Args:
        records: iterable of records
        key_func: record -> key; empty keys go to the 'unknown' bucket
        amount_func: optional record -> Decimal summed per key
        order: optional fixed key order; listed keys appear even at zero

    Returns:
        Tuple of BreakdownItem whose counts sum to the number of records.
        Without ``order`` items are sorted by count descending, then key.
    """
    counts = Counter()
    amounts = defaultdict(lambda: ZERO)

    for record in records:
        key = key_func(record) or UNKNOWN
        counts[key] += 1
        if amount_func is not None:
            amounts[key] += amount_func(record)

    total = sum(counts.values())
    ranked = sorted(counts, key=lambda k: (-counts[k], str(k)))
    if order:
        keys = list(order) + [k for k in ranked if k not in order]
    else:
        keys = ranked

    return tuple(
        BreakdownItem(
            key=str(key),
            count=counts.get(key, 0),
            percentage=percentage(counts.get(key, 0), total),
            amount=money(amounts[key]) if amount_func is not None else None,
        )
        for key in keys
    )


def age_group(age):
    if age is None or age <= 0:
        return UNKNOWN
    if age < 13:
        return 'children'
    if age < 20:
        return 'teens'
    if age < 60:
        return 'adults'
    return 'seniors'


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------

class ReportAggregator:
    """
    Computes ReportData for one entity kind (or all of them for overview).

    Args:
        options: ExportOptions; include_details keeps the records on the result
        as_of: reference date for "this month", expiry and overdue checks
        filter_info: human readable description of the filter applied upstream
    """

    def __init__(self, options=None, as_of=None, filter_info=''):
        self.options = options or ExportOptions()
        self.as_of = as_of or get_clinic_today()
        self.filter_info = filter_info

    def _details(self, records):
        return tuple(records) if self.options.include_details else ()

    def build(self, report_type, patients=(), appointments=(), payments=(), inventory=()):
        """Aggregate the records relevant to ``report_type``."""
        if report_type == 'patients':
            return self.patient_report(patients)
        if report_type == 'appointments':
            return self.appointment_report(appointments)
        if report_type == 'financial':
            return self.financial_report(payments)
        if report_type == 'inventory':
            return self.inventory_report(inventory)
        if report_type == 'overview':
            return self.overview_report(patients, appointments, payments, inventory)
        raise UnsupportedReportTypeError(report_type)

    # Patients ---------------------------------------------------------------

    def patient_report(self, patients):
        patients = list(patients)
        month_start = self.as_of.replace(day=1)

        aged = [(patient, to_int(patient.age, 'age', patient.id)) for patient in patients]

        valid_ages = [age for _, age in aged if age is not None and age > 0]
        average_age = round(sum(valid_ages) / len(valid_ages)) if valid_ages else 0

        new_this_month = sum(
            1 for patient in patients
            if patient.created_at is not None and _local_date(patient.created_at) >= month_start
        )

        return PatientReportData(
            total=len(patients),
            filter_info=self.filter_info,
            as_of=self.as_of,
            records=self._details(patients),
            active_patients=sum(1 for patient in patients if patient.is_active),
            new_patients_this_month=new_this_month,
            average_age=average_age,
            age_distribution=build_breakdown(
                aged, lambda pair: age_group(pair[1]), order=AGE_GROUPS
            ),
            gender_distribution=build_breakdown(
                patients, lambda p: p.gender, order=GENDERS
            ),
        )

    # Appointments -----------------------------------------------------------

    def appointment_report(self, appointments):
        appointments = list(appointments)
        total = len(appointments)
        statuses = Counter(appointment.status for appointment in appointments)

        completed = statuses['completed']
        cancelled = statuses['cancelled']
        no_shows = statuses['no_show']

        completed_value = sum(
            (to_decimal(a.cost, 'cost', a.id) for a in appointments if a.status == 'completed'),
            ZERO,
        )

        return AppointmentReportData(
            total=total,
            filter_info=self.filter_info,
            as_of=self.as_of,
            records=self._details(appointments),
            completed_appointments=completed,
            cancelled_appointments=cancelled,
            no_show_appointments=no_shows,
            scheduled_appointments=statuses['scheduled'],
            in_progress_appointments=statuses['in_progress'],
            attendance_rate=percentage(completed, total),
            cancellation_rate=percentage(cancelled, total),
            # Only completed + no-show were expected to happen
            no_show_rate=percentage(no_shows, completed + no_shows),
            completed_value=money(completed_value),
            appointments_by_status=build_breakdown(appointments, lambda a: a.status),
            appointments_by_treatment=build_breakdown(appointments, lambda a: a.treatment),
        )

    # Payments ---------------------------------------------------------------

    def financial_report(self, payments):
        payments = list(payments)

        revenue = [
            (payment, payment_revenue(payment))
            for payment in payments
            if payment.status in REVENUE_STATUSES
        ]
        completed_total = sum((amount for p, amount in revenue if p.status == 'completed'), ZERO)
        partial_total = sum((amount for p, amount in revenue if p.status == 'partial'), ZERO)
        total_revenue = completed_total + partial_total

        pending = sum(
            (to_decimal(p.amount, 'amount', p.id) for p in payments if p.status == 'pending'), ZERO
        )
        overdue = sum(
            (to_decimal(p.amount, 'amount', p.id) for p in payments if p.status == 'overdue'), ZERO
        )

        partial_remaining = ZERO
        for payment, paid in revenue:
            if payment.status == 'partial':
                due = (
                    to_decimal(payment.total_amount_due, 'total_amount_due', payment.id)
                    if payment.total_amount_due is not None else paid
                )
                partial_remaining += max(ZERO, due - paid)

        balances = self.patient_balances(payments)
        remaining_balance = sum((balance.remaining for balance in balances), ZERO)

        monthly = defaultdict(lambda: ZERO)
        for payment, amount in revenue:
            if payment.payment_date is None:
                logger.warning(f"Payment {payment.id} has no valid payment date, skipped in monthly revenue")
                continue
            monthly[_local_date(payment.payment_date).strftime('%Y-%m')] += amount

        average_payment = total_revenue / len(revenue) if revenue else ZERO

        return FinancialReportData(
            total=len(payments),
            filter_info=self.filter_info,
            as_of=self.as_of,
            records=self._details(payments),
            total_revenue=money(total_revenue),
            completed_payments=money(completed_total),
            partial_payments=money(partial_total),
            partial_payments_count=sum(1 for p in payments if p.status == 'partial'),
            partial_remaining=money(partial_remaining),
            pending_payments=money(pending),
            overdue_payments=money(overdue),
            outstanding_balance=money(pending + overdue),
            remaining_balance=money(remaining_balance),
            average_payment=money(average_payment),
            payment_method_stats=build_breakdown(
                revenue,
                lambda pair: pair[0].payment_method,
                amount_func=lambda pair: pair[1],
            ),
            payments_by_status=build_breakdown(payments, lambda p: p.status),
            monthly_revenue=tuple(
                MonthlyRevenue(month=month, revenue=money(amount))
                for month, amount in sorted(monthly.items())
            ),
            patient_balances=balances,
        )

    def patient_balances(self, payments):
        """
        Per-patient remaining balance, max(0, total due - total paid).

        Cancelled and refunded payments carry no balance.
        """
        due = defaultdict(lambda: ZERO)
        paid = defaultdict(lambda: ZERO)
        names = {}

        for payment in payments:
            if payment.status in NON_BILLABLE_STATUSES:
                continue
            due[payment.patient_id] += payment_due(payment)
            paid[payment.patient_id] += payment_paid(payment)
            if payment.patient_name:
                names[payment.patient_id] = payment.patient_name

        balances = [
            PatientBalance(
                patient_id=patient_id,
                patient_name=names.get(patient_id, ''),
                total_due=money(due[patient_id]),
                total_paid=money(paid[patient_id]),
                remaining=money(max(ZERO, due[patient_id] - paid[patient_id])),
            )
            for patient_id in due
        ]
        balances.sort(key=lambda balance: (-balance.remaining, balance.patient_id))
        return tuple(balances)

    # Inventory --------------------------------------------------------------

    def inventory_report(self, items):
        items = list(items)
        soon = self.as_of + timedelta(days=get_int_setting('expiring_soon_days', 30))

        # (item, quantity, value) kept by position; ids may be blank or repeated
        stock = []
        for item in items:
            quantity = to_decimal(item.quantity, 'quantity', item.id)
            value = quantity * to_decimal(item.cost_per_unit, 'cost_per_unit', item.id)
            stock.append((item, quantity, value))

        low_stock = 0
        out_of_stock = 0
        for item, quantity, _ in stock:
            minimum = to_decimal(item.minimum_stock, 'minimum_stock', item.id)
            if quantity <= 0:
                out_of_stock += 1
            elif quantity <= minimum:
                low_stock += 1

        expired = sum(
            1 for item in items if item.expiry_date is not None and item.expiry_date < self.as_of
        )
        expiring_soon = sum(
            1 for item in items
            if item.expiry_date is not None and self.as_of <= item.expiry_date <= soon
        )

        by_category = build_breakdown(
            stock, lambda entry: entry[0].category, amount_func=lambda entry: entry[2]
        )

        return InventoryReportData(
            total=len(items),
            filter_info=self.filter_info,
            as_of=self.as_of,
            records=self._details(items),
            total_quantity=int(sum((quantity for _, quantity, _ in stock), ZERO)),
            total_value=money(sum((value for _, _, value in stock), ZERO)),
            low_stock_items=low_stock,
            out_of_stock_items=out_of_stock,
            expired_items=expired,
            expiring_soon_items=expiring_soon,
            items_by_category=by_category,
            top_categories=by_category[:get_int_setting('top_categories_limit', 5)],
        )

    # Overview ---------------------------------------------------------------

    def overview_report(self, patients, appointments, payments, inventory):
        sections = {
            'patients': self.patient_report(patients),
            'appointments': self.appointment_report(appointments),
            'financial': self.financial_report(payments),
            'inventory': self.inventory_report(inventory),
        }
        return OverviewReportData(
            total=sum(report.total for report in sections.values()),
            filter_info=self.filter_info,
            as_of=self.as_of,
            **sections,
        )
