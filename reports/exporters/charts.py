# reports/exporters/charts.py
"""
Breakdown charts for the PDF export.

xhtml2pdf cannot split one image across pages, so the rendered chart image
is cut into page-sized strips before it reaches the template. The first
strip fills what is left of the page the chart section starts on; every
further strip takes a full page.
"""
import base64
import logging
import math
from io import BytesIO

from matplotlib.figure import Figure
from PIL import Image

logger = logging.getLogger(__name__)

CHART_DPI = 100
CHART_WIDTH_INCHES = 8.0
CHART_HEIGHT_INCHES = 2.8
BAR_COLOR = '#0d6efd'


def count_additional_pages(image_height, first_page_remaining, page_height):
    """
    Pages needed after the first one to show an image of ``image_height``.

    All three values share one unit. Zero when the image fits in the space
    left on the first page.
    """
    if image_height <= first_page_remaining:
        return 0
    if page_height <= 0:
        raise ValueError("page_height must be positive")
    return math.ceil((image_height - max(first_page_remaining, 0)) / page_height)


def slice_offsets(image_height, first_page_remaining, page_height):
    """
    (top, bottom) offsets of each page strip, first page first.

    The strips cover the image exactly once.
    """
    first = min(image_height, max(first_page_remaining, 0))
    offsets = []
    if first > 0:
        offsets.append((0, first))

    top = first
    for _ in range(count_additional_pages(image_height, first_page_remaining, page_height)):
        bottom = min(image_height, top + page_height)
        offsets.append((top, bottom))
        top = bottom
    return offsets


def render_breakdown_chart(layouts):
    """
    Draw one horizontal bar chart per chartable table of every layout.

    Returns:
        PIL Image, or None when no layout has chartable rows
    """
    tables = [
        (layout.title, table)
        for layout in layouts
        for table in layout.chart_tables
    ]
    if not tables:
        return None

    figure = Figure(
        figsize=(CHART_WIDTH_INCHES, CHART_HEIGHT_INCHES * len(tables)),
        dpi=CHART_DPI,
        tight_layout=True,
    )
    for index, (report_title, table) in enumerate(tables, start=1):
        axes = figure.add_subplot(len(tables), 1, index)
        names = [str(row[0]) for row in table.rows]
        counts = [row[1] for row in table.rows]
        positions = range(len(names))

        axes.barh(positions, counts, color=BAR_COLOR)
        axes.set_yticks(list(positions))
        axes.set_yticklabels(names)
        axes.invert_yaxis()
        axes.set_title(f"{report_title}: {table.title}", fontsize=10)
        axes.set_xlabel(table.columns[1])

    buffer = BytesIO()
    figure.savefig(buffer, format='png', dpi=CHART_DPI)
    buffer.seek(0)

    image = Image.open(buffer)
    image.load()
    logger.debug(f"Rendered {len(tables)} chart(s) into a {image.width}x{image.height} image")
    return image


def paginate_image(image, content_width_mm, first_page_remaining_mm, page_height_mm):
    """
    Cut ``image`` into strips that fit the PDF pages.

    The image is scaled to the printable width, so one pixel is
    ``content_width_mm / image.width`` millimetres tall.

    Returns:
        List of dicts with the strip as a PNG data URI plus its size in mm
    """
    mm_per_pixel = content_width_mm / image.width
    first_page_px = int(first_page_remaining_mm / mm_per_pixel)
    page_px = max(1, int(page_height_mm / mm_per_pixel))

    strips = []
    for top, bottom in slice_offsets(image.height, first_page_px, page_px):
        strip = image.crop((0, top, image.width, bottom))
        strips.append({
            'src': to_data_uri(strip),
            'width_mm': round(content_width_mm, 1),
            'height_mm': round((bottom - top) * mm_per_pixel, 1),
        })
    return strips


def to_data_uri(image):
    buffer = BytesIO()
    image.save(buffer, format='PNG')
    encoded = base64.b64encode(buffer.getvalue()).decode('ascii')
    return f"data:image/png;base64,{encoded}"
