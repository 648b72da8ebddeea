# reports/views.py
import logging

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.utils.http import content_disposition_header
from django.views.decorators.http import require_GET

from .exceptions import (
    ExportFailedError, InvalidExportOptionsError, UnsupportedFormatError, UnsupportedReportTypeError,
)
from .exporters import export_report
from .filters import get_date_range
from .options import ExportOptions
from .services import build_report_data

logger = logging.getLogger(__name__)


def _date_range_from_request(request):
    return get_date_range(
        request.GET.get('date_range'),
        request.GET.get('custom_start'),
        request.GET.get('custom_end'),
    )


@login_required
@require_GET
def report_summary(request, report_type):
    """
    Aggregated report as JSON.

    Query parameters: date_range, custom_start, custom_end, include_details
    """
    try:
        options = ExportOptions.from_query(request.GET)
    except InvalidExportOptionsError as e:
        return JsonResponse(e.to_dict(), status=400)

    date_range = _date_range_from_request(request)
    try:
        data = build_report_data(report_type, options=options, date_range=date_range)
    except UnsupportedReportTypeError as e:
        return JsonResponse(e.to_dict(), status=404)

    return JsonResponse({
        'report': data.to_dict(),
        'options': options.to_dict(),
        'date_range': {
            'key': date_range.key,
            'start_date': date_range.start_date,
            'end_date': date_range.end_date,
        },
    })


@login_required
@require_GET
def export_report_view(request, report_type):
    """
    Export a report as a file attachment.

    Query parameters: format (pdf, excel, csv), language, include_charts,
    include_details, orientation, page_size and the date range parameters.
    """
    try:
        options = ExportOptions.from_query(request.GET)
    except InvalidExportOptionsError as e:
        return JsonResponse(e.to_dict(), status=400)

    date_range = _date_range_from_request(request)
    try:
        data = build_report_data(report_type, options=options, date_range=date_range)
        result = export_report(report_type, data, options)
    except UnsupportedReportTypeError as e:
        return JsonResponse(e.to_dict(), status=404)
    except UnsupportedFormatError as e:
        return JsonResponse(e.to_dict(), status=400)
    except ExportFailedError as e:
        return JsonResponse(e.to_dict(), status=500)

    logger.info(f"User {request.user.get_username()} exported {result.filename}")

    response = HttpResponse(result.content, content_type=result.content_type)
    response['Content-Disposition'] = content_disposition_header(True, result.filename)
    response['Content-Length'] = str(result.size)
    return response
