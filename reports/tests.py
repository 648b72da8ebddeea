# reports/tests.py
"""
Unit tests for report aggregation and export
"""
import csv
import re
import tempfile
import zipfile
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO, StringIO
from pathlib import Path
from unittest import mock

from django.contrib.auth.models import User
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from openpyxl import load_workbook
from PIL import Image

from .aggregation import ReportAggregator, build_breakdown, money, percentage, to_decimal
from .exceptions import (
    ExportFailedError, InvalidExportOptionsError, UnsupportedFormatError, UnsupportedReportTypeError,
)
from .exporters import aexport_report, export_report
from .exporters.charts import count_additional_pages, paginate_image, slice_offsets
from .exporters.pdf_exporter import _table_context, chart_strips
from .filters import filter_payments, get_date_range
from .formatting import format_currency, format_date, format_percentage, generate_filename
from .labels import Labels
from .layout import build_layouts, layout_totals
from .options import ExportOptions
from .records import Appointment, InventoryItem, Patient, Payment
from .repository import DemoRecordRepository, InMemoryRecordRepository, get_repository
from .services import build_report_data

AS_OF = date(2026, 6, 15)


def aware(*args):
    return timezone.make_aware(datetime(*args))


NOW = aware(2026, 6, 15, 14, 30, 5)


def make_patients():
    return [
        Patient(id='p1', full_name='Ahmed Ali', gender='male', age=35, created_at=aware(2026, 6, 2, 10)),
        Patient(id='p2', full_name='Sara Omar', gender='female', age=8, created_at=aware(2026, 1, 10, 9)),
        Patient(id='p3', full_name='No Details'),
        Patient(id='p4', full_name='Mona Saleh', gender='female', age=70, is_active=False,
                created_at=aware(2026, 6, 10, 11)),
    ]


def make_appointments():
    return [
        Appointment(id='a1', patient_id='p1', treatment='Cleaning', status='completed', cost=200,
                    start_time=aware(2026, 6, 1, 9)),
        Appointment(id='a2', patient_id='p2', treatment='Filling', status='completed', cost='abc',
                    start_time=aware(2026, 6, 2, 9)),
        Appointment(id='a3', patient_id='p3', treatment='Cleaning', status='cancelled', cost=200,
                    start_time=aware(2026, 6, 3, 9)),
        Appointment(id='a4', patient_id='p4', treatment='Extraction', status='no_show', cost=100,
                    start_time=aware(2026, 6, 4, 9)),
        Appointment(id='a5', patient_id='p1', treatment='Cleaning', status='scheduled', cost=200,
                    start_time=aware(2026, 6, 20, 9)),
    ]


def make_payments():
    return [
        Payment(id='pay1', patient_id='p1', patient_name='Ahmed Ali', status='partial',
                amount=400, amount_paid=400, total_amount_due=800, payment_method='cash',
                payment_date=aware(2026, 6, 1, 10), receipt_number='REC-001'),
        Payment(id='pay2', patient_id='p2', patient_name='Sara Omar', status='completed',
                amount=200, payment_method='card', payment_date=aware(2026, 5, 20, 10),
                receipt_number='REC-002'),
        Payment(id='pay3', patient_id='p3', patient_name='No Details', status='pending',
                amount=150, payment_method='cash', payment_date=aware(2026, 6, 10, 10)),
        Payment(id='pay4', patient_id='p2', patient_name='Sara Omar', status='cancelled',
                amount=300, payment_method='cash', payment_date=aware(2026, 6, 11, 10)),
    ]


def make_inventory():
    return [
        InventoryItem(id='i1', name='Gloves', category='Supplies', quantity=10, minimum_stock=5,
                      cost_per_unit='2.5', expiry_date=date(2026, 12, 31)),
        InventoryItem(id='i2', name='Anaesthetic', category='Medication', quantity=3, minimum_stock=5,
                      cost_per_unit=10, expiry_date=date(2026, 6, 1)),
        InventoryItem(id='i3', name='Whitening gel', category='Medication', quantity=0, minimum_stock=2,
                      cost_per_unit=40, expiry_date=date(2026, 7, 1)),
        InventoryItem(id='i4', name='Mystery item', category='', quantity='NaN', cost_per_unit=5),
    ]


def make_repository():
    return InMemoryRecordRepository(
        patients=make_patients(),
        appointments=make_appointments(),
        payments=make_payments(),
        inventory=make_inventory(),
    )


def aggregate(report_type, options=None):
    aggregator = ReportAggregator(options=options, as_of=AS_OF)
    return aggregator.build(
        report_type,
        patients=make_patients(),
        appointments=make_appointments(),
        payments=make_payments(),
        inventory=make_inventory(),
    )


def summary_value(report, key):
    layouts = build_layouts(report)
    return layout_totals(layouts)[(report.report_type, key)]


class NumericHelpersTest(SimpleTestCase):
    """Test numeric coercion and percentages"""

    def test_malformed_values_become_zero_with_warning(self):
        """Test garbage and non-finite amounts count as zero and are logged"""
        with self.assertLogs('reports.aggregation', level='WARNING') as logs:
            self.assertEqual(to_decimal('abc', 'amount', 'x1'), Decimal('0'))
            self.assertEqual(to_decimal(float('nan'), 'amount', 'x2'), Decimal('0'))
            self.assertEqual(to_decimal('Infinity', 'amount', 'x3'), Decimal('0'))

        self.assertEqual(len(logs.records), 3)
        self.assertIn('x1', logs.output[0])

    def test_missing_values_are_zero_without_warning(self):
        """Test None and empty string are zero"""
        self.assertEqual(to_decimal(None), Decimal('0'))
        self.assertEqual(to_decimal(''), Decimal('0'))
        self.assertEqual(to_decimal('12.50'), Decimal('12.50'))

    def test_percentage_zero_total(self):
        """Test percentage guards division by zero"""
        self.assertEqual(percentage(0, 0), 0.0)
        self.assertEqual(percentage(1, 3), 33.3)

    def test_out_of_range_values_become_zero(self):
        """Test huge amounts are treated as malformed instead of raising"""
        with self.assertLogs('reports.aggregation', level='WARNING') as logs:
            report = ReportAggregator(as_of=AS_OF).financial_report([
                Payment(id='big', amount='1e27'),
                Payment(id='ok', amount='120.50'),
            ])

        self.assertIn('big', logs.output[0])
        self.assertEqual(report.total_revenue, Decimal('120.50'))

    def test_money_past_default_precision(self):
        """Test rounding to cents works past the default precision"""
        self.assertEqual(money(Decimal('1e30')), Decimal('1e30'))
        self.assertEqual(money(Decimal('12.345')), Decimal('12.35'))


class BreakdownTest(SimpleTestCase):
    """Test build_breakdown"""

    def test_counts_sum_to_total(self):
        """Test every record lands in exactly one bucket"""
        records = ['a', 'b', 'a', None, '']
        items = build_breakdown(records, lambda r: r)

        self.assertEqual(sum(item.count for item in items), len(records))
        self.assertEqual(items[0].key, 'a')
        self.assertEqual(items[0].count, 2)
        self.assertIn('unknown', [item.key for item in items])

    def test_empty_input(self):
        """Test an empty breakdown with a fixed order reports zeros"""
        items = build_breakdown([], lambda r: r, order=('male', 'female'))

        self.assertEqual([item.key for item in items], ['male', 'female'])
        self.assertTrue(all(item.count == 0 and item.percentage == 0.0 for item in items))


class PatientReportTest(SimpleTestCase):
    """Test patient aggregation"""

    def setUp(self):
        self.report = aggregate('patients')

    def test_totals(self):
        """Test counts, new patients and average age"""
        self.assertEqual(self.report.total, 4)
        self.assertEqual(self.report.active_patients, 3)
        self.assertEqual(self.report.new_patients_this_month, 2)
        self.assertEqual(self.report.average_age, 38)

    def test_age_distribution(self):
        """Test age groups include unknown ages and sum to the total"""
        by_key = {item.key: item for item in self.report.age_distribution}

        self.assertEqual(by_key['children'].count, 1)
        self.assertEqual(by_key['teens'].count, 0)
        self.assertEqual(by_key['adults'].count, 1)
        self.assertEqual(by_key['seniors'].count, 1)
        self.assertEqual(by_key['unknown'].count, 1)
        self.assertEqual(sum(item.count for item in self.report.age_distribution), 4)
        self.assertAlmostEqual(sum(item.percentage for item in self.report.age_distribution), 100, delta=0.5)

    def test_gender_distribution(self):
        """Test missing gender is reported as unknown"""
        by_key = {item.key: item.count for item in self.report.gender_distribution}

        self.assertEqual(by_key, {'male': 1, 'female': 2, 'unknown': 1})

    def test_details_only_when_requested(self):
        """Test records are kept only with include_details"""
        self.assertEqual(self.report.records, ())
        detailed = aggregate('patients', ExportOptions(include_details=True))
        self.assertEqual(len(detailed.records), 4)

    def test_records_without_ids(self):
        """Test patients with blank or repeated ids are each counted"""
        patients = [
            Patient.from_dict({'full_name': 'First', 'age': 10}),
            Patient.from_dict({'full_name': 'Second', 'age': 70}),
            Patient.from_dict({'id': 'dup', 'full_name': 'Third', 'age': 16}),
            Patient.from_dict({'id': 'dup', 'full_name': 'Fourth', 'age': 30}),
        ]
        report = ReportAggregator(as_of=AS_OF).patient_report(patients)
        by_key = {item.key: item.count for item in report.age_distribution}

        self.assertEqual(report.average_age, 32)
        self.assertEqual(by_key, {'children': 1, 'teens': 1, 'adults': 1, 'seniors': 1})


class AppointmentReportTest(SimpleTestCase):
    """Test appointment aggregation"""

    def test_rates(self):
        """Test attendance, cancellation and no-show rates"""
        with self.assertLogs('reports.aggregation', level='WARNING'):
            report = aggregate('appointments')

        self.assertEqual(report.total, 5)
        self.assertEqual(report.completed_appointments, 2)
        self.assertEqual(report.cancelled_appointments, 1)
        self.assertEqual(report.no_show_appointments, 1)
        self.assertEqual(report.scheduled_appointments, 1)
        self.assertEqual(report.attendance_rate, 40.0)
        self.assertEqual(report.cancellation_rate, 20.0)
        self.assertEqual(report.no_show_rate, 33.3)

    def test_malformed_cost_counts_as_zero(self):
        """Test a garbage cost is logged and ignored in completed value"""
        with self.assertLogs('reports.aggregation', level='WARNING') as logs:
            report = aggregate('appointments')

        self.assertEqual(report.completed_value, Decimal('200.00'))
        self.assertTrue(any('a2' in line for line in logs.output))

    def test_status_breakdown_sums_to_total(self):
        """Test status breakdown covers every appointment"""
        with self.assertLogs('reports.aggregation', level='WARNING'):
            report = aggregate('appointments')

        self.assertEqual(sum(item.count for item in report.appointments_by_status), report.total)
        self.assertEqual(report.appointments_by_treatment[0].key, 'Cleaning')


class FinancialReportTest(SimpleTestCase):
    """Test financial aggregation"""

    def setUp(self):
        self.report = aggregate('financial')

    def test_partial_payment_revenue(self):
        """Test partial (due 800, paid 400) plus completed 200 gives revenue 600"""
        self.assertEqual(self.report.total_revenue, Decimal('600.00'))
        self.assertEqual(self.report.completed_payments, Decimal('200.00'))
        self.assertEqual(self.report.partial_payments, Decimal('400.00'))
        self.assertEqual(self.report.partial_payments_count, 1)
        self.assertEqual(self.report.partial_remaining, Decimal('400.00'))
        self.assertEqual(self.report.average_payment, Decimal('300.00'))

    def test_outstanding(self):
        """Test pending and overdue totals"""
        self.assertEqual(self.report.pending_payments, Decimal('150.00'))
        self.assertEqual(self.report.overdue_payments, Decimal('0.00'))
        self.assertEqual(self.report.outstanding_balance, Decimal('150.00'))

    def test_patient_balances(self):
        """Test remaining balance per patient is due minus paid and never negative"""
        balances = {balance.patient_id: balance for balance in self.report.patient_balances}

        self.assertEqual(balances['p1'].remaining, Decimal('400.00'))
        self.assertEqual(balances['p2'].remaining, Decimal('0.00'))
        self.assertEqual(balances['p2'].total_due, Decimal('200.00'))
        self.assertEqual(balances['p3'].remaining, Decimal('150.00'))
        self.assertEqual(self.report.remaining_balance, Decimal('550.00'))

    def test_overpayment_does_not_go_negative(self):
        """Test a patient who paid more than due has zero remaining"""
        payments = [
            Payment(id='x', patient_id='p9', status='partial', amount=600,
                    amount_paid=600, total_amount_due=500),
        ]
        report = ReportAggregator(as_of=AS_OF).financial_report(payments)

        self.assertEqual(report.remaining_balance, Decimal('0.00'))
        self.assertEqual(report.partial_remaining, Decimal('0.00'))

    def test_breakdowns(self):
        """Test payment method and monthly revenue breakdowns"""
        methods = {item.key: item for item in self.report.payment_method_stats}

        self.assertEqual(methods['cash'].amount, Decimal('400.00'))
        self.assertEqual(methods['card'].amount, Decimal('200.00'))
        self.assertEqual(methods['cash'].percentage, 50.0)
        self.assertEqual(sum(item.count for item in self.report.payments_by_status), 4)
        self.assertEqual(
            [(entry.month, entry.revenue) for entry in self.report.monthly_revenue],
            [('2026-05', Decimal('200.00')), ('2026-06', Decimal('400.00'))],
        )

    def test_empty_payments(self):
        """Test no payments gives zero totals and no breakdown rows"""
        report = ReportAggregator(as_of=AS_OF).financial_report([])

        self.assertEqual(report.total, 0)
        self.assertEqual(report.total_revenue, Decimal('0.00'))
        self.assertEqual(report.average_payment, Decimal('0.00'))
        self.assertEqual(report.payment_method_stats, ())


class InventoryReportTest(SimpleTestCase):
    """Test inventory aggregation"""

    def test_stock_levels(self):
        """Test value, low stock, out of stock and expiry counts"""
        with self.assertLogs('reports.aggregation', level='WARNING'):
            report = aggregate('inventory')

        self.assertEqual(report.total, 4)
        self.assertEqual(report.total_quantity, 13)
        self.assertEqual(report.total_value, Decimal('55.00'))
        self.assertEqual(report.low_stock_items, 1)
        self.assertEqual(report.out_of_stock_items, 2)
        self.assertEqual(report.expired_items, 1)
        self.assertEqual(report.expiring_soon_items, 1)

    def test_categories(self):
        """Test category breakdown carries value and unknown bucket"""
        with self.assertLogs('reports.aggregation', level='WARNING'):
            report = aggregate('inventory')

        self.assertEqual(
            [(item.key, item.count, item.amount) for item in report.items_by_category],
            [
                ('Medication', 2, Decimal('30.00')),
                ('Supplies', 1, Decimal('25.00')),
                ('unknown', 1, Decimal('0.00')),
            ],
        )

    @override_settings(REPORTS={'top_categories_limit': 1})
    def test_top_categories_limit(self):
        """Test top categories follow the configured limit"""
        with self.assertLogs('reports.aggregation', level='WARNING'):
            report = aggregate('inventory')

        self.assertEqual([item.key for item in report.top_categories], ['Medication'])

    def test_items_without_ids(self):
        """Test items with blank or repeated ids are each counted"""
        items = [
            InventoryItem.from_dict({'name': 'Gloves', 'category': 'Supplies', 'quantity': 10, 'cost_per_unit': 2}),
            InventoryItem.from_dict({'name': 'Masks', 'category': 'Supplies', 'quantity': 5, 'cost_per_unit': 4}),
            InventoryItem.from_dict({'id': 'dup', 'name': 'Gel', 'category': 'Medication',
                                     'quantity': 0, 'cost_per_unit': 40}),
            InventoryItem.from_dict({'id': 'dup', 'name': 'Floss', 'category': 'Supplies',
                                     'quantity': 3, 'cost_per_unit': 1}),
        ]
        report = ReportAggregator(as_of=AS_OF).inventory_report(items)

        self.assertEqual(report.total_quantity, 18)
        self.assertEqual(report.total_value, Decimal('43.00'))
        self.assertEqual(report.out_of_stock_items, 1)
        self.assertEqual(sum(item.amount for item in report.items_by_category), report.total_value)
        self.assertEqual(
            [(item.key, item.count, item.amount) for item in report.items_by_category],
            [('Supplies', 3, Decimal('43.00')), ('Medication', 1, Decimal('0.00'))],
        )

    @override_settings(REPORTS={'top_categories_limit': 1})
    def test_top_categories_table(self):
        """Test top categories are rendered as an uncharted table"""
        with self.assertLogs('reports.aggregation', level='WARNING'):
            layout = build_layouts(aggregate('inventory'))[0]
        tables = {table.key: table for table in layout.tables}

        self.assertEqual([row[0] for row in tables['top_categories'].rows], ['Medication'])
        self.assertEqual(tables['top_categories'].title, 'Top Categories')
        self.assertNotIn(tables['top_categories'], layout.chart_tables)
        self.assertIn(tables['category_distribution'], layout.chart_tables)


class OverviewReportTest(SimpleTestCase):
    """Test overview aggregation"""

    def test_sections(self):
        """Test overview holds every section"""
        with self.assertLogs('reports.aggregation', level='WARNING'):
            report = aggregate('overview')

        self.assertEqual(
            [section.report_type for section in report.sections],
            ['patients', 'appointments', 'financial', 'inventory'],
        )
        self.assertEqual(report.total, 4 + 5 + 4 + 4)
        self.assertEqual(len(build_layouts(report)), 4)

    def test_unknown_report_type(self):
        """Test unknown report types are rejected"""
        with self.assertRaises(UnsupportedReportTypeError):
            ReportAggregator(as_of=AS_OF).build('analytics')


class ExportOptionsTest(SimpleTestCase):
    """Test ExportOptions parsing"""

    def test_from_dict(self):
        """Test camelCase keys and lower case page sizes are accepted"""
        options = ExportOptions.from_dict({
            'format': 'CSV',
            'includeCharts': 'true',
            'pageSize': 'a4',
            'orientation': 'landscape',
            'language': 'ar',
        })

        self.assertEqual(options.format, 'csv')
        self.assertTrue(options.include_charts)
        self.assertFalse(options.include_details)
        self.assertEqual(options.page_size, 'A4')
        self.assertEqual(options.page_dimensions, (297.0, 210.0))

    def test_invalid_page_size(self):
        """Test unknown page sizes raise"""
        with self.assertRaises(InvalidExportOptionsError):
            ExportOptions(page_size='B5')

    def test_unknown_language_falls_back(self):
        """Test unsupported language falls back to English with a warning"""
        with self.assertLogs('reports.options', level='WARNING'):
            options = ExportOptions(language='fr')

        self.assertEqual(options.language, 'en')


class FormattingTest(SimpleTestCase):
    """Test locale formatting and filenames"""

    def test_currency(self):
        """Test currency formatting"""
        self.assertEqual(format_currency(Decimal('1250'), '$'), '$1,250.00')
        self.assertEqual(format_currency('garbage', '$'), '$0.00')

    def test_percentage_and_date(self):
        """Test percentage and date formatting"""
        self.assertEqual(format_percentage(33.333), '33.3%')
        self.assertEqual(format_date(date(2026, 6, 5)), '05/06/2026')
        self.assertEqual(format_date(None), '')

    def test_filename(self):
        """Test filename pattern and extension mapping"""
        self.assertEqual(
            generate_filename('patients', 'excel', now=NOW),
            'Patients_Report_15-06-2026.xlsx',
        )
        self.assertEqual(
            generate_filename('financial', 'pdf', now=NOW, include_time=True),
            'Financial_Report_15-06-2026_143005.pdf',
        )
        self.assertEqual(
            generate_filename('inventory', 'csv', now=NOW, suffix='summary'),
            'Inventory_Report_15-06-2026_summary.csv',
        )

    def test_localized_filename(self):
        """Test Arabic report names and unknown report types"""
        self.assertEqual(generate_filename('patients', 'csv', 'ar', now=NOW), 'تقرير_المرضى_15-06-2026.csv')
        self.assertEqual(generate_filename('analytics', 'pdf', now=NOW), 'Report_analytics_15-06-2026.pdf')

    def test_labels_fallback(self):
        """Test missing keys fall back to English, then to the key"""
        labels = Labels('ar')

        self.assertTrue(labels.is_rtl)
        self.assertEqual(labels.choice('status', 'completed'), 'مكتمل')
        self.assertEqual(labels.choice('status', None), 'غير محدد')
        self.assertEqual(labels.choice('treatment', 'Cleaning'), 'Cleaning')
        self.assertEqual(labels.get('missing.key'), 'missing.key')


class CSVExportTest(SimpleTestCase):
    """Test CSV export"""

    def setUp(self):
        self.report = aggregate('financial', ExportOptions(format='csv', include_details=True))
        self.result = export_report('financial', self.report, ExportOptions(format='csv'), now=NOW)
        self.text = self.result.content.decode('utf-8')

    def test_bom_and_quoting(self):
        """Test the file starts with a BOM and every field is quoted"""
        self.assertTrue(self.text.startswith('\ufeff'))
        for line in self.text[1:].split('\n'):
            if line:
                self.assertTrue(line.startswith('"') and line.endswith('"'), line)

    def test_content(self):
        """Test title, summary values and filename"""
        rows = list(csv.reader(StringIO(self.text[1:])))

        self.assertEqual(rows[0], ['Financial Report'])
        self.assertIn(['Total revenue', '$600.00'], rows)
        self.assertIn(['Total remaining balance', '$550.00'], rows)
        self.assertIn(['Patient Balances'], rows)
        self.assertRegex(self.result.filename, r'^Financial_Report_\d{2}-\d{2}-\d{4}_\d{6}\.csv$')
        self.assertEqual(self.result.content_type, 'text/csv; charset=utf-8')

    def test_arabic_labels(self):
        """Test Arabic exports use Arabic labels"""
        options = ExportOptions(format='csv', language='ar')
        result = export_report('financial', self.report, options, now=NOW)
        rows = list(csv.reader(StringIO(result.content.decode('utf-8')[1:])))

        self.assertEqual(rows[0], ['التقرير المالي'])
        self.assertIn(['إجمالي الإيرادات', '$600.00'], rows)


class ExcelExportTest(SimpleTestCase):
    """Test Excel export"""

    def load(self, report, report_type='financial', **kwargs):
        options = ExportOptions(format='excel', **kwargs)
        result = export_report(report_type, report, options, now=NOW)
        return result, load_workbook(BytesIO(result.content))

    def test_header_and_values(self):
        """Test merged bold title and numeric summary values"""
        result, wb = self.load(aggregate('financial'))
        ws = wb.worksheets[0]

        self.assertTrue(result.filename.endswith('.xlsx'))
        self.assertIn('A1:F1', [str(cell_range) for cell_range in ws.merged_cells.ranges])
        self.assertEqual(ws['A1'].value, 'Financial Report')
        self.assertTrue(ws['A1'].font.bold)
        self.assertEqual(ws['A1'].font.size, 16)

        values = {row[0]: row[1] for row in ws.iter_rows(values_only=True) if row and row[0]}
        self.assertEqual(float(values['Total revenue']), 600.0)
        self.assertEqual(values['Total payments'], 4)

    def test_overview_has_four_sheets(self):
        """Test one sheet per report type"""
        with self.assertLogs('reports.aggregation', level='WARNING'):
            report = aggregate('overview')
        _, wb = self.load(report, 'overview')

        self.assertEqual(len(wb.worksheets), 4)

    def test_rtl_and_page_setup(self):
        """Test Arabic sheets are right-to-left and page setup follows options"""
        _, wb = self.load(aggregate('patients'), 'patients', language='ar', orientation='landscape')
        ws = wb.worksheets[0]

        self.assertTrue(ws.sheet_view.rightToLeft)
        self.assertEqual(ws.page_setup.orientation, 'landscape')

    def test_charts(self):
        """Test bar charts are embedded when requested"""
        result = export_report(
            'patients', aggregate('patients'), ExportOptions(format='excel', include_charts=True), now=NOW
        )
        names = zipfile.ZipFile(BytesIO(result.content)).namelist()

        self.assertTrue(any(name.startswith('xl/charts/chart') for name in names))


class PDFExportTest(SimpleTestCase):
    """Test PDF export"""

    def test_pdf(self):
        """Test a PDF document is produced"""
        result = export_report('financial', aggregate('financial'), ExportOptions(format='pdf'), now=NOW)

        self.assertTrue(result.content.startswith(b'%PDF'))
        self.assertEqual(result.content_type, 'application/pdf')
        self.assertTrue(result.filename.endswith('.pdf'))

    def test_pdf_with_charts_and_details(self):
        """Test charts and details render in landscape"""
        options = ExportOptions(format='pdf', include_charts=True, include_details=True,
                                orientation='landscape', page_size='letter')
        result = export_report('patients', aggregate('patients', options), options, now=NOW)

        self.assertTrue(result.content.startswith(b'%PDF'))

    def test_chart_strips(self):
        """Test chart image is cut into data URI strips"""
        options = ExportOptions(include_charts=True)
        strips = chart_strips(build_layouts(aggregate('patients')), options)

        self.assertTrue(strips)
        self.assertTrue(all(strip['src'].startswith('data:image/png;base64,') for strip in strips))

    def test_detail_rows_capped(self):
        """Test detail tables are truncated at the row limit"""
        report = aggregate('patients', ExportOptions(include_details=True))
        detail = [table for table in build_layouts(report)[0].tables if table.is_detail][0]
        context = _table_context(detail, Labels('en'), 1)

        self.assertEqual(len(context['rows']), 1)
        self.assertEqual(context['truncated'], 3)
        self.assertIn('3', context['truncated_note'])

    def test_render_failure(self):
        """Test renderer errors become ExportFailedError with a localized message"""
        report = aggregate('financial')
        with mock.patch('reports.exporters.pdf_exporter.render_to_string', side_effect=RuntimeError('boom')):
            with self.assertLogs('reports.exporters', level='ERROR'):
                with self.assertRaises(ExportFailedError) as ctx:
                    export_report('financial', report, ExportOptions(format='pdf'), now=NOW)

            self.assertEqual(ctx.exception.message, 'Failed to export the report to PDF')
            self.assertIsInstance(ctx.exception.__cause__, RuntimeError)

            with self.assertLogs('reports.exporters', level='ERROR'):
                with self.assertRaises(ExportFailedError) as ctx:
                    export_report('financial', report, ExportOptions(format='pdf', language='ar'), now=NOW)

            self.assertEqual(ctx.exception.message, 'فشل في تصدير التقرير إلى PDF')


class PaginationTest(SimpleTestCase):
    """Test chart image pagination"""

    def test_additional_pages(self):
        """Test additional page count from image and page heights"""
        self.assertEqual(count_additional_pages(100, 150, 200), 0)
        self.assertEqual(count_additional_pages(500, 100, 200), 2)
        self.assertEqual(count_additional_pages(501, 100, 200), 3)
        self.assertEqual(count_additional_pages(300, 0, 200), 2)

    def test_slice_offsets_cover_image(self):
        """Test strips cover the image exactly once"""
        self.assertEqual(slice_offsets(500, 100, 200), [(0, 100), (100, 300), (300, 500)])
        self.assertEqual(slice_offsets(80, 100, 200), [(0, 80)])

    def test_paginate_image(self):
        """Test strip heights add up to the scaled image height"""
        image = Image.new('RGB', (100, 1000), 'white')
        strips = paginate_image(image, content_width_mm=100, first_page_remaining_mm=250, page_height_mm=300)

        self.assertEqual([strip['height_mm'] for strip in strips], [250.0, 300.0, 300.0, 150.0])


class ExportDispatchTest(SimpleTestCase):
    """Test export dispatch"""

    def test_unsupported_format(self):
        """Test unknown formats raise UnsupportedFormatError"""
        with self.assertRaises(UnsupportedFormatError) as ctx:
            export_report('patients', aggregate('patients'), ExportOptions(format='docx'), now=NOW)

        self.assertEqual(ctx.exception.to_dict()['error'], 'UNSUPPORTED_FORMAT')

    def test_totals_identical_across_formats(self):
        """Test CSV and Excel show the same summary figures"""
        report = aggregate('financial')
        layout = build_layouts(report)[0]

        csv_rows = list(csv.reader(StringIO(
            export_report('financial', report, ExportOptions(format='csv'), now=NOW).content.decode('utf-8')[1:]
        )))
        wb = load_workbook(BytesIO(
            export_report('financial', report, ExportOptions(format='excel'), now=NOW).content
        ))
        excel_values = {row[0]: row[1] for row in wb.worksheets[0].iter_rows(values_only=True) if row and row[0]}

        for item in layout.summary:
            csv_value = next(row[1] for row in csv_rows if row and row[0] == item.label)
            self.assertEqual(
                Decimal(csv_value.replace('$', '').replace(',', '')),
                Decimal(str(item.value)),
            )
            self.assertEqual(Decimal(str(excel_values[item.label])), Decimal(str(item.value)))

    async def test_async_export(self):
        """Test the async variant returns the same file"""
        report = aggregate('patients')
        result = await aexport_report('patients', report, ExportOptions(format='csv'), now=NOW)

        self.assertEqual(result.filename, 'Patients_Report_15-06-2026_143005.csv')
        self.assertTrue(result.content.startswith('\ufeff'.encode('utf-8')))


class FilterTest(SimpleTestCase):
    """Test date range filters"""

    def test_predefined_ranges(self):
        """Test predefined ranges relative to today"""
        this_month = get_date_range('this_month', today=AS_OF)
        yesterday = get_date_range('yesterday', today=AS_OF)

        self.assertEqual((this_month.start_date, this_month.end_date), (date(2026, 6, 1), AS_OF))
        self.assertEqual(yesterday.start_date, date(2026, 6, 14))
        self.assertEqual(yesterday.description, '14/06/2026')

    def test_custom_range(self):
        """Test reversed custom ranges are swapped and bad input falls back"""
        swapped = get_date_range('custom', '2026-06-10', '2026-06-01', today=AS_OF)
        self.assertEqual((swapped.start_date, swapped.end_date), (date(2026, 6, 1), date(2026, 6, 10)))

        with self.assertLogs('reports.filters', level='WARNING'):
            fallback = get_date_range('custom', 'not-a-date', '2026-06-01', today=AS_OF)
        self.assertEqual(fallback.key, 'last_30_days')
        self.assertEqual(fallback.start_date, date(2026, 5, 16))

    def test_custom_range_missing_bound(self):
        """Test a custom range with one bound logs and falls back"""
        with self.assertLogs('reports.filters', level='WARNING') as logs:
            fallback = get_date_range('custom', '2026-06-01', None, today=AS_OF)

        self.assertIn('Incomplete custom date range', logs.output[0])
        self.assertEqual(fallback.key, 'last_30_days')
        self.assertEqual((fallback.start_date, fallback.end_date), (date(2026, 5, 16), AS_OF))

    def test_filter_payments(self):
        """Test payments are filtered on payment date"""
        date_range = get_date_range('custom', '2026-06-01', '2026-06-10', today=AS_OF)
        payments = filter_payments(make_payments(), date_range)

        self.assertEqual([payment.id for payment in payments], ['pay1', 'pay3'])


class RepositoryServiceTest(SimpleTestCase):
    """Test repositories and the report service"""

    def test_in_memory_repository_accepts_dicts(self):
        """Test raw dicts are converted and patient names filled in"""
        repository = InMemoryRecordRepository(
            patients=[{'id': 'p1', 'first_name': 'Ahmed', 'last_name': 'Ali', 'gender': 'Male'}],
            payments=[{'id': 'pay1', 'patient_id': 'p1', 'amount': '100', 'status': 'Completed'}],
        )

        self.assertEqual(repository.get_patients()[0].full_name, 'Ahmed Ali')
        self.assertEqual(repository.get_patients()[0].gender, 'male')
        self.assertEqual(repository.get_payments()[0].patient_name, 'Ahmed Ali')
        self.assertEqual(repository.get_payments()[0].status, 'completed')

    def test_demo_repository(self):
        """Test demo records are available"""
        repository = DemoRecordRepository(now=NOW)

        self.assertEqual(len(repository.get_patients()), 6)
        self.assertEqual(len(repository.get_payments()), 5)
        self.assertTrue(all(payment.patient_name for payment in repository.get_payments()))

    @override_settings(REPORTS={'repository_class': 'reports.repository.InMemoryRecordRepository'})
    def test_configured_repository(self):
        """Test the repository class comes from settings"""
        self.assertIsInstance(get_repository(), InMemoryRecordRepository)
        self.assertNotIsInstance(get_repository(), DemoRecordRepository)

    def test_build_report_data_with_filter(self):
        """Test the date range filters records and is described in the report"""
        date_range = get_date_range('custom', '2026-06-01', '2026-06-10', today=AS_OF)
        report = build_report_data('financial', date_range=date_range, repository=make_repository(), as_of=AS_OF)

        self.assertEqual(report.total, 2)
        self.assertEqual(report.data_count, 2)
        self.assertEqual(report.filter_info, '01/06/2026 - 10/06/2026')
        self.assertEqual(report.total_revenue, Decimal('400.00'))
        self.assertEqual(report.to_dict()['data_count'], 2)
        self.assertEqual(summary_value(report, 'total_revenue'), Decimal('400.00'))

    def test_build_report_data_unknown_type(self):
        """Test unknown report types are rejected before loading records"""
        with self.assertRaises(UnsupportedReportTypeError):
            build_report_data('analytics', repository=make_repository())


class ReportViewsTest(TestCase):
    """Test report endpoints"""

    def setUp(self):
        self.user = User.objects.create_user(username='staff', password='testpass123')
        self.client.force_login(self.user)

    def test_login_required(self):
        """Test anonymous users are redirected to login"""
        self.client.logout()
        response = self.client.get(reverse('reports:export', args=['patients']))

        self.assertEqual(response.status_code, 302)

    def test_summary(self):
        """Test JSON summary"""
        response = self.client.get(reverse('reports:summary', args=['financial']))

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload['report']['report_type'], 'financial')
        self.assertEqual(payload['report']['data_count'], payload['report']['total'])
        self.assertEqual(payload['date_range']['key'], 'last_30_days')

    def test_csv_export(self):
        """Test CSV download"""
        response = self.client.get(reverse('reports:export', args=['financial']), {'format': 'csv'})

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.content.startswith(b'\xef\xbb\xbf'))
        self.assertIn('attachment', response['Content-Disposition'])
        self.assertIn('Financial_Report_', response['Content-Disposition'])

    def test_excel_export(self):
        """Test Excel download of the overview"""
        response = self.client.get(reverse('reports:export', args=['overview']), {'format': 'excel'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(load_workbook(BytesIO(response.content)).worksheets), 4)

    def test_unsupported_format(self):
        """Test unsupported formats return 400"""
        response = self.client.get(reverse('reports:export', args=['patients']), {'format': 'docx'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'UNSUPPORTED_FORMAT')

    def test_unknown_report_type(self):
        """Test unknown report types return 404"""
        response = self.client.get(reverse('reports:export', args=['analytics']), {'format': 'csv'})

        self.assertEqual(response.status_code, 404)

    def test_export_failure(self):
        """Test render failures return 500 with the localized message"""
        with mock.patch('reports.exporters.build_layouts', side_effect=RuntimeError('boom')):
            with self.assertLogs('reports.exporters', level='ERROR'):
                response = self.client.get(
                    reverse('reports:export', args=['patients']), {'format': 'csv', 'language': 'ar'}
                )

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['message'], 'فشل في تصدير التقرير إلى CSV')


class ExportCommandTest(SimpleTestCase):
    """Test the export_report management command"""

    def test_writes_file(self):
        """Test the export is written to the output directory"""
        out = StringIO()
        with tempfile.TemporaryDirectory() as output_dir:
            call_command('export_report', 'inventory', '--format', 'csv', '--output-dir', output_dir, stdout=out)
            files = list(Path(output_dir).iterdir())

            self.assertEqual(len(files), 1)
            self.assertTrue(re.match(r'^Inventory_Report_\d{2}-\d{2}-\d{4}_\d{6}\.csv$', files[0].name))
            self.assertTrue(files[0].read_bytes().startswith(b'\xef\xbb\xbf'))

        self.assertIn('Wrote', out.getvalue())
