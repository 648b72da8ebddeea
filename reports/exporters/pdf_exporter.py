# reports/exporters/pdf_exporter.py
import logging
from io import BytesIO

from django.template.loader import render_to_string
from xhtml2pdf import pisa

from ..conf import get_int_setting, get_setting
from ..formatting import format_date, format_value
from .charts import paginate_image, render_breakdown_chart

logger = logging.getLogger(__name__)

CONTENT_TYPE = 'application/pdf'
TEMPLATE_NAME = 'reports/report_pdf.html'

PAGE_MARGIN_MM = 15
FOOTER_HEIGHT_MM = 10
# The chart section starts on a new page below its heading
CHART_HEADING_MM = 12


class PDFRenderError(Exception):
    pass


def _table_context(table, labels, row_limit):
    rows = table.rows
    truncated = 0
    if table.is_detail and row_limit and len(rows) > row_limit:
        truncated = len(rows) - row_limit
        rows = rows[:row_limit]
    return {
        'title': table.title,
        'columns': table.columns,
        'rows': [
            [format_value(value, kind, labels) for value, kind in zip(row, table.kinds)]
            for row in rows
        ],
        'truncated': truncated,
        'truncated_note': labels.get('text.more_rows', count=truncated) if truncated else '',
    }


def _layout_context(layout, labels, row_limit):
    return {
        'title': layout.title,
        'filter_items': [
            (item.label, format_value(item.value, item.kind, labels)) for item in layout.filter_items
        ],
        'summary': [
            (item.label, format_value(item.value, item.kind, labels)) for item in layout.summary
        ],
        'tables': [_table_context(table, labels, row_limit) for table in layout.tables],
    }


def chart_strips(layouts, options):
    """Chart image cut into page strips; empty when there is nothing to chart."""
    image = render_breakdown_chart(layouts)
    if image is None:
        return []

    page_width, page_height = options.page_dimensions
    content_width = page_width - 2 * PAGE_MARGIN_MM
    content_height = page_height - 2 * PAGE_MARGIN_MM - FOOTER_HEIGHT_MM
    return paginate_image(
        image,
        content_width_mm=content_width,
        first_page_remaining_mm=content_height - CHART_HEADING_MM,
        page_height_mm=content_height,
    )


def render_pdf(layouts, options, labels, now):
    """
    Render layouts to PDF through the report HTML template.

    Raises:
        PDFRenderError: when xhtml2pdf reports errors
    """
    row_limit = get_int_setting('pdf_detail_row_limit', 50)
    page_width, page_height = options.page_dimensions

    context = {
        'title': layouts[0].title if len(layouts) == 1 else labels.get('report.overview'),
        'layouts': [_layout_context(layout, labels, row_limit) for layout in layouts],
        'chart_strips': chart_strips(layouts, options) if options.include_charts else [],
        'report_date_label': labels.get('text.report_date'),
        'generated_at_label': labels.get('text.generated_at'),
        'filter_label': labels.get('section.filter'),
        'summary_label': labels.get('section.summary'),
        'charts_label': labels.get('section.charts'),
        'no_data_label': labels.get('text.no_data'),
        'footer_label': labels.get('text.footer'),
        'language': labels.language,
        'is_rtl': labels.is_rtl,
        'report_date': format_date(now),
        'generated_at': now.strftime('%H:%M:%S'),
        'page_width': page_width,
        'page_height': page_height,
        'page_margin': PAGE_MARGIN_MM,
        'bottom_margin': PAGE_MARGIN_MM + FOOTER_HEIGHT_MM,
        'footer_height': FOOTER_HEIGHT_MM,
        'clinic_name': get_setting('clinic_name', 'KingJoy Dental Clinic'),
        'clinic_address': get_setting('clinic_address', ''),
        'clinic_phone': get_setting('clinic_phone', ''),
        'clinic_email': get_setting('clinic_email', ''),
    }

    html_string = render_to_string(TEMPLATE_NAME, context)

    buffer = BytesIO()
    pisa_status = pisa.CreatePDF(html_string, dest=buffer, encoding='utf-8')
    if pisa_status.err:
        raise PDFRenderError(f"xhtml2pdf reported {pisa_status.err} error(s)")

    logger.debug(f"Rendered PDF with {len(context['chart_strips'])} chart page strip(s)")
    return buffer.getvalue()
