# reports/formatting.py
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from core.utils import get_clinic_now

from .conf import get_setting
from .labels import LABELS, Labels

EXTENSIONS = {
    'pdf': 'pdf',
    'excel': 'xlsx',
    'csv': 'csv',
}


def format_currency(value, symbol=None):
    """Format amount with the clinic currency symbol, e.g. $1,250.00"""
    if symbol is None:
        symbol = get_setting('currency_symbol', '$')
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            amount = Decimal('0')
    except (InvalidOperation, TypeError, ValueError):
        amount = Decimal('0')
    return f"{symbol}{amount:,.2f}"


def format_percentage(value):
    try:
        return f"{float(value):.1f}%"
    except (TypeError, ValueError):
        return "0.0%"


def format_date(value):
    """DD/MM/YYYY (Gregorian)"""
    if value is None or value == '':
        return ''
    if isinstance(value, (date, datetime)):
        return value.strftime('%d/%m/%Y')
    return str(value)


def format_value(value, kind, labels=None):
    """Render a layout cell value as display text."""
    if kind == 'money':
        return format_currency(value)
    if kind == 'percent':
        return format_percentage(value)
    if kind == 'date':
        return format_date(value)
    if kind == 'years':
        suffix = labels.get('unit.years') if labels else 'years'
        return f"{value} {suffix}"
    if value is None:
        return ''
    return str(value)


def generate_filename(report_type, export_format, language='en', now=None,
                      include_time=False, suffix=None):
    """
    Build a descriptive export filename.

    Format: <ReportName>_<DD-MM-YYYY>[_<HHMMSS>][_<suffix>].<ext>

    Args:
        report_type: patients, appointments, financial, inventory or overview
        export_format: pdf, excel or csv (excel maps to .xlsx)
        language: label language for the report name
        now: datetime to stamp, defaults to the clinic's current time
        include_time: append the time of day
        suffix: optional free-text suffix
    """
    labels = Labels(language)
    now = now or get_clinic_now()

    key = f'file.{report_type}'
    if key in LABELS['en']:
        report_name = labels.get(key)
    else:
        report_name = labels.get('file.other', type=report_type)

    filename = f"{report_name}_{now.strftime('%d-%m-%Y')}"
    if include_time:
        filename += f"_{now.strftime('%H%M%S')}"
    if suffix:
        filename += f"_{suffix}"

    extension = EXTENSIONS.get(export_format, export_format)
    return f"{filename}.{extension}"
