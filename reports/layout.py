# reports/layout.py
"""
Presentation-neutral report layout.

Every renderer (CSV, Excel, PDF) walks the same ReportLayout built from one
ReportData, so the figures printed in each format are identical; only the
styling differs. Cell values stay raw (int, Decimal, date) and carry a
``kind`` telling the renderer how to format them.
"""
from dataclasses import dataclass
from typing import Any, Tuple

from .aggregation import (
    OverviewReportData, ZERO, payment_due, payment_paid, to_decimal, to_int,
)
from .labels import Labels

# Cell kinds
COUNT = 'count'
MONEY = 'money'
PERCENT = 'percent'
DATE = 'date'
TEXT = 'text'
YEARS = 'years'


@dataclass(frozen=True)
class SummaryItem:
    key: str
    label: str
    value: Any
    kind: str = COUNT


@dataclass(frozen=True)
class TableSection:
    key: str
    title: str
    columns: Tuple[str, ...]
    kinds: Tuple[str, ...]
    rows: Tuple[tuple, ...]
    chartable: bool = False
    is_detail: bool = False


@dataclass(frozen=True)
class ReportLayout:
    report_type: str
    title: str
    summary: Tuple[SummaryItem, ...]
    tables: Tuple[TableSection, ...]
    filter_items: Tuple[SummaryItem, ...] = ()

    @property
    def chart_tables(self):
        return [table for table in self.tables if table.chartable and table.rows]


def _summary(labels, items):
    return tuple(
        SummaryItem(key=key, label=labels.get(f'summary.{key}'), value=value, kind=kind)
        for key, value, kind in items
    )


def _breakdown_table(labels, key, column_key, prefix, items, with_amount=False, amount_column='column.amount',
                     chartable=True):
    columns = [labels.get(column_key), labels.get('column.count'), labels.get('column.percentage')]
    kinds = [TEXT, COUNT, PERCENT]
    if with_amount:
        columns.append(labels.get(amount_column))
        kinds.append(MONEY)

    rows = []
    for item in items:
        row = [labels.choice(prefix, item.key), item.count, item.percentage]
        if with_amount:
            row.append(item.amount if item.amount is not None else ZERO)
        rows.append(tuple(row))

    return TableSection(
        key=key,
        title=labels.get(f'section.{key}'),
        columns=tuple(columns),
        kinds=tuple(kinds),
        rows=tuple(rows),
        chartable=chartable,
    )


def _detail_table(labels, key, column_keys, kinds, rows):
    return TableSection(
        key=key,
        title=labels.get(f'section.{key}'),
        columns=tuple(labels.get(f'column.{column}') for column in column_keys),
        kinds=tuple(kinds),
        rows=tuple(tuple(row) for row in rows),
        is_detail=True,
    )


def _filter_items(labels, report):
    if not report.filter_info:
        return ()
    return _summary(labels, [
        ('data_range', report.filter_info, TEXT),
        ('data_count', report.data_count, COUNT),
    ])


# ---------------------------------------------------------------------------
# Per report type
# ---------------------------------------------------------------------------

def patient_layout(report, labels):
    summary = _summary(labels, [
        ('total_patients', report.total, COUNT),
        ('new_patients_this_month', report.new_patients_this_month, COUNT),
        ('active_patients', report.active_patients, COUNT),
        ('average_age', report.average_age, YEARS),
    ])
    tables = [
        _breakdown_table(labels, 'age_distribution', 'column.age_group', 'age', report.age_distribution),
        _breakdown_table(labels, 'gender_distribution', 'column.gender', 'gender', report.gender_distribution),
    ]
    if report.records:
        tables.append(_detail_table(
            labels, 'patient_details',
            ('serial_number', 'full_name', 'gender', 'age', 'phone', 'email', 'registered'),
            (TEXT, TEXT, TEXT, COUNT, TEXT, TEXT, DATE),
            [
                (
                    patient.serial_number,
                    patient.full_name,
                    labels.choice('gender', patient.gender),
                    to_int(patient.age, 'age', patient.id),
                    patient.phone,
                    patient.email,
                    patient.created_at,
                )
                for patient in report.records
            ],
        ))
    return ReportLayout(
        report_type=report.report_type,
        title=labels.get('report.patients'),
        summary=summary,
        tables=tuple(tables),
        filter_items=_filter_items(labels, report),
    )


def appointment_layout(report, labels):
    summary = _summary(labels, [
        ('total_appointments', report.total, COUNT),
        ('completed_appointments', report.completed_appointments, COUNT),
        ('cancelled_appointments', report.cancelled_appointments, COUNT),
        ('scheduled_appointments', report.scheduled_appointments, COUNT),
        ('in_progress_appointments', report.in_progress_appointments, COUNT),
        ('no_show_appointments', report.no_show_appointments, COUNT),
        ('attendance_rate', report.attendance_rate, PERCENT),
        ('cancellation_rate', report.cancellation_rate, PERCENT),
        ('no_show_rate', report.no_show_rate, PERCENT),
        ('completed_value', report.completed_value, MONEY),
    ])
    tables = [
        _breakdown_table(labels, 'status_distribution', 'column.status', 'status', report.appointments_by_status),
        _breakdown_table(labels, 'treatment_distribution', 'column.treatment', 'treatment',
                         report.appointments_by_treatment),
    ]
    if report.records:
        tables.append(_detail_table(
            labels, 'appointment_details',
            ('date', 'patient', 'treatment', 'status', 'cost'),
            (DATE, TEXT, TEXT, TEXT, MONEY),
            [
                (
                    appointment.start_time,
                    appointment.patient_name or appointment.patient_id,
                    appointment.treatment,
                    labels.choice('status', appointment.status),
                    to_decimal(appointment.cost, 'cost', appointment.id),
                )
                for appointment in report.records
            ],
        ))
    return ReportLayout(
        report_type=report.report_type,
        title=labels.get('report.appointments'),
        summary=summary,
        tables=tuple(tables),
        filter_items=_filter_items(labels, report),
    )


def financial_layout(report, labels):
    summary = _summary(labels, [
        ('total_payments', report.total, COUNT),
        ('total_revenue', report.total_revenue, MONEY),
        ('completed_payments', report.completed_payments, MONEY),
        ('partial_payments', report.partial_payments, MONEY),
        ('partial_payments_count', report.partial_payments_count, COUNT),
        ('partial_remaining', report.partial_remaining, MONEY),
        ('pending_payments', report.pending_payments, MONEY),
        ('overdue_payments', report.overdue_payments, MONEY),
        ('outstanding_balance', report.outstanding_balance, MONEY),
        ('remaining_balance', report.remaining_balance, MONEY),
        ('average_payment', report.average_payment, MONEY),
    ])
    tables = [
        _breakdown_table(labels, 'payment_methods', 'column.method', 'method',
                         report.payment_method_stats, with_amount=True),
        _breakdown_table(labels, 'payment_status', 'column.status', 'status', report.payments_by_status),
        TableSection(
            key='monthly_revenue',
            title=labels.get('section.monthly_revenue'),
            columns=(labels.get('column.month'), labels.get('column.revenue')),
            kinds=(TEXT, MONEY),
            rows=tuple((entry.month, entry.revenue) for entry in report.monthly_revenue),
        ),
    ]
    if report.records:
        tables.append(_detail_table(
            labels, 'patient_balances',
            ('patient', 'total_due', 'paid', 'remaining'),
            (TEXT, MONEY, MONEY, MONEY),
            [
                (balance.patient_name or balance.patient_id, balance.total_due,
                 balance.total_paid, balance.remaining)
                for balance in report.patient_balances
            ],
        ))
        tables.append(_detail_table(
            labels, 'payment_details',
            ('receipt', 'date', 'patient', 'description', 'total_due', 'paid', 'remaining', 'method', 'status'),
            (TEXT, DATE, TEXT, TEXT, MONEY, MONEY, MONEY, TEXT, TEXT),
            [_payment_row(payment, labels) for payment in report.records],
        ))
    return ReportLayout(
        report_type=report.report_type,
        title=labels.get('report.financial'),
        summary=summary,
        tables=tuple(tables),
        filter_items=_filter_items(labels, report),
    )


def _payment_row(payment, labels):
    due = payment_due(payment)
    paid = payment_paid(payment)
    return (
        payment.receipt_number or f"#{str(payment.id)[-6:]}",
        payment.payment_date,
        payment.patient_name or payment.patient_id,
        payment.description,
        due,
        paid,
        max(ZERO, due - paid),
        labels.choice('method', payment.payment_method),
        labels.choice('status', payment.status),
    )


def inventory_layout(report, labels):
    summary = _summary(labels, [
        ('total_items', report.total, COUNT),
        ('total_quantity', report.total_quantity, COUNT),
        ('total_value', report.total_value, MONEY),
        ('low_stock_items', report.low_stock_items, COUNT),
        ('out_of_stock_items', report.out_of_stock_items, COUNT),
        ('expired_items', report.expired_items, COUNT),
        ('expiring_soon_items', report.expiring_soon_items, COUNT),
    ])
    tables = [
        _breakdown_table(labels, 'category_distribution', 'column.category', 'category',
                         report.items_by_category, with_amount=True, amount_column='column.value'),
        # Subset of the category distribution; not charted
        _breakdown_table(labels, 'top_categories', 'column.category', 'category',
                         report.top_categories, with_amount=True, amount_column='column.value',
                         chartable=False),
    ]
    if report.records:
        tables.append(_detail_table(
            labels, 'inventory_details',
            ('name', 'category', 'quantity', 'unit', 'cost_per_unit', 'value', 'expiry', 'supplier'),
            (TEXT, TEXT, COUNT, TEXT, MONEY, MONEY, DATE, TEXT),
            [_inventory_row(item) for item in report.records],
        ))
    return ReportLayout(
        report_type=report.report_type,
        title=labels.get('report.inventory'),
        summary=summary,
        tables=tuple(tables),
        filter_items=_filter_items(labels, report),
    )


def _inventory_row(item):
    quantity = to_decimal(item.quantity, 'quantity', item.id)
    cost = to_decimal(item.cost_per_unit, 'cost_per_unit', item.id)
    return (
        item.name,
        item.category,
        int(quantity) if quantity == quantity.to_integral_value() else quantity,
        item.unit,
        cost,
        quantity * cost,
        item.expiry_date,
        item.supplier,
    )


LAYOUT_BUILDERS = {
    'patients': patient_layout,
    'appointments': appointment_layout,
    'financial': financial_layout,
    'inventory': inventory_layout,
}


def build_layouts(report, language='en'):
    """
    Layouts for a report; an overview yields one layout per section.

    Returns:
        List of ReportLayout in display order
    """
    labels = Labels(language)
    if isinstance(report, OverviewReportData):
        return [LAYOUT_BUILDERS[section.report_type](section, labels) for section in report.sections]
    return [LAYOUT_BUILDERS[report.report_type](report, labels)]


def layout_totals(layouts):
    """{(report_type, summary key): raw value}, used to compare renderers."""
    return {
        (layout.report_type, item.key): item.value
        for layout in layouts
        for item in layout.summary
    }
