# reports/exporters/csv_exporter.py
import csv
from io import StringIO

from ..formatting import format_date, format_value

# Excel needs the BOM to read the file as UTF-8 (Arabic labels)
BOM = '\ufeff'
CONTENT_TYPE = 'text/csv; charset=utf-8'


def render_csv(layouts, options, labels, now):
    """
    Render layouts as delimited text.

    Every field is quoted; sections are separated by a blank line.
    """
    output = StringIO()
    output.write(BOM)
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator='\n')

    title = layouts[0].title if len(layouts) == 1 else labels.get('report.overview')
    writer.writerow([title])
    writer.writerow([labels.get('text.report_date'), format_date(now)])
    writer.writerow([labels.get('text.generated_at'), now.strftime('%H:%M:%S')])

    for layout in layouts:
        if len(layouts) > 1:
            writer.writerow([])
            writer.writerow([layout.title])

        if layout.filter_items:
            writer.writerow([])
            writer.writerow([labels.get('section.filter')])
            for item in layout.filter_items:
                writer.writerow([item.label, format_value(item.value, item.kind, labels)])

        writer.writerow([])
        writer.writerow([labels.get('section.summary')])
        for item in layout.summary:
            writer.writerow([item.label, format_value(item.value, item.kind, labels)])

        for table in layout.tables:
            writer.writerow([])
            writer.writerow([table.title])
            writer.writerow(table.columns)
            if not table.rows:
                writer.writerow([labels.get('text.no_data')])
            for row in table.rows:
                writer.writerow([
                    format_value(value, kind, labels)
                    for value, kind in zip(row, table.kinds)
                ])

    return output.getvalue().encode('utf-8')
