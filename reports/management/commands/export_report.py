# reports/management/commands/export_report.py
from pathlib import Path

from django.core.management.base import BaseCommand

from reports.aggregation import REPORT_TYPES
from reports.exceptions import ReportError
from reports.exporters import export_report
from reports.filters import DATE_RANGES, get_date_range
from reports.options import EXPORT_FORMATS, LANGUAGES, ORIENTATIONS, PAGE_SIZES, ExportOptions
from reports.services import build_report_data


class Command(BaseCommand):
    help = 'Export a clinic report to a PDF, Excel or CSV file'

    def add_arguments(self, parser):
        parser.add_argument('report_type', choices=REPORT_TYPES, help='Report to export')
        parser.add_argument(
            '--format',
            dest='export_format',
            choices=EXPORT_FORMATS,
            default='pdf',
            help='Output format. Default: pdf'
        )
        parser.add_argument(
            '--language',
            choices=LANGUAGES,
            default=None,
            help='Report language. Default: REPORTS["default_language"]'
        )
        parser.add_argument('--charts', action='store_true', help='Include charts')
        parser.add_argument('--details', action='store_true', help='Include record details')
        parser.add_argument('--orientation', choices=ORIENTATIONS, default='portrait')
        parser.add_argument('--page-size', dest='page_size', choices=list(PAGE_SIZES), default='A4')
        parser.add_argument(
            '--date-range',
            dest='date_range',
            choices=DATE_RANGES,
            default=None,
            help='Date range applied to appointments and payments'
        )
        parser.add_argument('--start', help='Custom range start (format: YYYY-MM-DD)')
        parser.add_argument('--end', help='Custom range end (format: YYYY-MM-DD)')
        parser.add_argument(
            '--output-dir',
            dest='output_dir',
            default='.',
            help='Directory the file is written to. Default: current directory'
        )

    def handle(self, *args, **options):
        report_type = options['report_type']

        export_options = ExportOptions.from_dict({
            'format': options['export_format'],
            'language': options['language'],
            'include_charts': options['charts'],
            'include_details': options['details'],
            'orientation': options['orientation'],
            'page_size': options['page_size'],
        })
        date_range = get_date_range(options['date_range'], options['start'], options['end'])

        self.stdout.write(
            f'Exporting {report_type} report as {export_options.format} '
            f'({date_range.description})...'
        )

        try:
            data = build_report_data(report_type, options=export_options, date_range=date_range)
            result = export_report(report_type, data, export_options)
        except ReportError as e:
            self.stdout.write(self.style.ERROR(f'Export failed: {e.message}'))
            return

        output_dir = Path(options['output_dir'])
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / result.filename
        path.write_bytes(result.content)

        self.stdout.write(self.style.SUCCESS(f'✓ Wrote {path} ({result.size} bytes)'))
