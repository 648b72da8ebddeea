# reports/exporters/__init__.py
"""
Report export entry points.

export_report() builds the shared layout once and hands it to the renderer
for the requested format. Renderers are stateless; concurrent exports do
not share anything.
"""
import logging
from dataclasses import dataclass

from asgiref.sync import sync_to_async

from core.utils import get_clinic_now

from ..exceptions import ExportFailedError, ReportError, UnsupportedFormatError
from ..formatting import generate_filename
from ..labels import Labels
from ..layout import build_layouts
from ..options import ExportOptions
from . import csv_exporter, excel_exporter, pdf_exporter

logger = logging.getLogger(__name__)


RENDERERS = {
    'pdf': (pdf_exporter.render_pdf, pdf_exporter.CONTENT_TYPE),
    'excel': (excel_exporter.render_excel, excel_exporter.CONTENT_TYPE),
    'csv': (csv_exporter.render_csv, csv_exporter.CONTENT_TYPE),
}


@dataclass(frozen=True)
class ExportResult:
    filename: str
    content: bytes
    content_type: str
    format: str

    @property
    def size(self):
        return len(self.content)


def export_report(report_type, data, options=None, now=None):
    """
    Export aggregated report data to a file.

    Args:
        report_type: patients, appointments, financial, inventory or overview
        data: ReportData produced by ReportAggregator for ``report_type``
        options: ExportOptions (defaults to PDF)
        now: export timestamp, defaults to the clinic's current time

    Returns:
        ExportResult with the generated filename and file bytes

    Raises:
        UnsupportedFormatError: options.format is not pdf, excel or csv
        ExportFailedError: the renderer failed; message is localized
    """
    options = options or ExportOptions()
    if options.format not in RENDERERS:
        raise UnsupportedFormatError(options.format)

    now = now or get_clinic_now()
    labels = Labels(options.language)
    renderer, content_type = RENDERERS[options.format]

    try:
        layouts = build_layouts(data, options.language)
        content = renderer(layouts, options, labels, now)
    except ReportError:
        raise
    except Exception as exc:
        logger.exception(f"Failed to export {report_type} report as {options.format}")
        raise ExportFailedError(
            labels.get('error.export_failed', format=options.format.upper()),
            export_format=options.format,
            report_type=report_type,
        ) from exc

    filename = generate_filename(report_type, options.format, options.language, now=now, include_time=True)
    logger.info(f"Exported {report_type} report as {options.format}: {filename} ({len(content)} bytes)")

    return ExportResult(
        filename=filename,
        content=content,
        content_type=content_type,
        format=options.format,
    )


async def aexport_report(report_type, data, options=None, now=None):
    """Async variant of export_report; rendering runs in a worker thread."""
    return await sync_to_async(export_report, thread_sensitive=False)(
        report_type, data, options=options, now=now
    )
