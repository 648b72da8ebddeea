# reports/exporters/excel_exporter.py
import re
from datetime import date, datetime
from io import BytesIO

from openpyxl import Workbook
from openpyxl.chart import BarChart, Reference
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from core.utils import get_clinic_date

from ..conf import get_setting
from ..formatting import format_date
from ..layout import DATE, MONEY, PERCENT

CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

PAPER_SIZES = {
    'letter': 1,
    'legal': 5,
    'A3': 8,
    'A4': 9,
    'A5': 11,
}

TITLE_FONT = Font(bold=True, size=16)
SECTION_FONT = Font(bold=True, size=12)
HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color='CCCCCC', end_color='CCCCCC', fill_type='solid')
LABEL_FONT = Font(bold=True)

MAX_COLUMN_WIDTH = 50
CHART_ANCHOR_COLUMN = 'K'

# Characters Excel rejects in sheet titles
INVALID_TITLE_CHARS = re.compile(r'[\[\]:*?/\\]')


def _sheet_title(title, used):
    title = INVALID_TITLE_CHARS.sub(' ', title)[:31]
    candidate = title
    counter = 2
    while candidate in used:
        suffix = f" ({counter})"
        candidate = title[:31 - len(suffix)] + suffix
        counter += 1
    used.add(candidate)
    return candidate


def _cell_value(value, kind):
    """openpyxl cannot store timezone-aware datetimes; dates are written as clinic-local dates."""
    if kind == DATE:
        if isinstance(value, datetime):
            return get_clinic_date(value)
        return value if isinstance(value, date) else (value or None)
    return value


def _number_format(kind, currency_format):
    if kind == MONEY:
        return currency_format
    if kind == PERCENT:
        return '0.0"%"'
    if kind == DATE:
        return 'DD/MM/YYYY'
    return None


def _style_header_row(ws, row, width):
    for column in range(1, width + 1):
        cell = ws.cell(row=row, column=column)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL


def _autosize_columns(ws):
    for column in ws.columns:
        max_length = 0
        column_letter = get_column_letter(column[0].column)
        for cell in column:
            # Merged title cell spans A:F and would widen column A
            if cell.coordinate == 'A1' or cell.value is None:
                continue
            max_length = max(max_length, len(str(cell.value)))
        ws.column_dimensions[column_letter].width = min(max_length + 2, MAX_COLUMN_WIDTH)


def _add_bar_chart(ws, table, header_row, last_row, position):
    chart = BarChart()
    chart.type = 'bar'
    chart.title = table.title
    chart.y_axis.title = table.columns[1]
    chart.legend = None

    data = Reference(ws, min_col=2, min_row=header_row, max_row=last_row)
    categories = Reference(ws, min_col=1, min_row=header_row + 1, max_row=last_row)
    chart.add_data(data, titles_from_data=True)
    chart.set_categories(categories)
    ws.add_chart(chart, position)


def _write_layout(ws, layout, options, labels, now, currency_format):
    ws.merge_cells('A1:F1')
    ws['A1'] = layout.title
    ws['A1'].font = TITLE_FONT
    ws['A1'].alignment = Alignment(horizontal='center')

    ws.append([labels.get('text.report_date'), format_date(now)])
    ws.append([labels.get('text.generated_at'), now.strftime('%H:%M:%S')])

    if layout.filter_items:
        ws.append([])
        ws.append([labels.get('section.filter')])
        ws.cell(row=ws.max_row, column=1).font = SECTION_FONT
        for item in layout.filter_items:
            ws.append([item.label, item.value])
            ws.cell(row=ws.max_row, column=1).font = LABEL_FONT

    ws.append([])
    ws.append([labels.get('section.summary')])
    ws.cell(row=ws.max_row, column=1).font = SECTION_FONT
    for item in layout.summary:
        ws.append([item.label, _cell_value(item.value, item.kind)])
        ws.cell(row=ws.max_row, column=1).font = LABEL_FONT
        number_format = _number_format(item.kind, currency_format)
        if number_format:
            ws.cell(row=ws.max_row, column=2).number_format = number_format

    chart_row = None
    for table in layout.tables:
        ws.append([])
        ws.append([table.title])
        ws.cell(row=ws.max_row, column=1).font = SECTION_FONT

        ws.append(list(table.columns))
        header_row = ws.max_row
        _style_header_row(ws, header_row, len(table.columns))

        for row in table.rows:
            ws.append([_cell_value(value, kind) for value, kind in zip(row, table.kinds)])
            for column, kind in enumerate(table.kinds, start=1):
                number_format = _number_format(kind, currency_format)
                if number_format:
                    ws.cell(row=ws.max_row, column=column).number_format = number_format

        if options.include_charts and table.chartable and table.rows:
            # Charts are stacked beside the tables, 16 rows apart
            chart_row = header_row if chart_row is None else max(header_row, chart_row + 16)
            _add_bar_chart(ws, table, header_row, ws.max_row, f"{CHART_ANCHOR_COLUMN}{chart_row}")

    _autosize_columns(ws)


def render_excel(layouts, options, labels, now):
    """One worksheet per layout; an overview gives four sheets."""
    wb = Workbook()
    wb.remove(wb.active)

    symbol = get_setting('currency_symbol', '$')
    currency_format = f'"{symbol}"#,##0.00'
    used_titles = set()

    for layout in layouts:
        ws = wb.create_sheet(title=_sheet_title(layout.title, used_titles))
        ws.page_setup.orientation = (
            ws.ORIENTATION_LANDSCAPE if options.orientation == 'landscape' else ws.ORIENTATION_PORTRAIT
        )
        ws.page_setup.paperSize = PAPER_SIZES[options.page_size]
        if labels.is_rtl:
            ws.sheet_view.rightToLeft = True

        _write_layout(ws, layout, options, labels, now, currency_format)

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
