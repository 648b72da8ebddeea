# reports/services.py
import logging

from .aggregation import REPORT_TYPES, ReportAggregator
from .exceptions import UnsupportedReportTypeError
from .filters import filter_appointments, filter_payments
from .repository import get_repository

logger = logging.getLogger(__name__)


def build_report_data(report_type, options=None, date_range=None, repository=None, as_of=None):
    """
    Load records, apply the date range and aggregate them.

    Args:
        report_type: patients, appointments, financial, inventory or overview
        options: ExportOptions passed to the aggregator
        date_range: optional DateRange applied to appointments and payments
        repository: RecordRepository, defaults to the configured one
        as_of: reference date for month/expiry checks

    Returns:
        ReportData for ``report_type``
    """
    if report_type not in REPORT_TYPES:
        raise UnsupportedReportTypeError(report_type)

    repository = repository or get_repository()
    records = repository.get_all()

    filter_info = ''
    if date_range is not None:
        records['appointments'] = filter_appointments(records['appointments'], date_range)
        records['payments'] = filter_payments(records['payments'], date_range)
        filter_info = date_range.description

    logger.debug(
        f"Building {report_type} report from {len(records['patients'])} patients, "
        f"{len(records['appointments'])} appointments, {len(records['payments'])} payments, "
        f"{len(records['inventory'])} inventory items"
    )

    aggregator = ReportAggregator(options=options, as_of=as_of, filter_info=filter_info)
    return aggregator.build(report_type, **records)
