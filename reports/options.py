# reports/options.py
import logging
from dataclasses import dataclass, asdict

from .conf import get_setting
from .exceptions import InvalidExportOptionsError

logger = logging.getLogger(__name__)


EXPORT_FORMATS = ('pdf', 'excel', 'csv')
LANGUAGES = ('en', 'ar')
ORIENTATIONS = ('portrait', 'landscape')

# Page dimensions in millimetres (portrait)
PAGE_SIZES = {
    'A3': (297.0, 420.0),
    'A4': (210.0, 297.0),
    'A5': (148.0, 210.0),
    'letter': (215.9, 279.4),
    'legal': (215.9, 355.6),
}


def parse_bool(value):
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).lower() in ('true', '1', 'yes', 'on')


@dataclass(frozen=True)
class ExportOptions:
    """
    How a report should be exported.

    ``format`` is validated when the export runs so that an unsupported
    format surfaces as UnsupportedFormatError from the exporter.
    """
    format: str = 'pdf'
    include_charts: bool = False
    include_details: bool = False
    language: str = 'en'
    orientation: str = 'portrait'
    page_size: str = 'A4'

    def __post_init__(self):
        if self.orientation not in ORIENTATIONS:
            raise InvalidExportOptionsError('orientation', self.orientation)
        if self.page_size not in PAGE_SIZES:
            raise InvalidExportOptionsError('page_size', self.page_size)
        if self.language not in LANGUAGES:
            logger.warning(f"Unsupported report language '{self.language}', falling back to English")
            object.__setattr__(self, 'language', 'en')

    @property
    def page_dimensions(self):
        """(width, height) in millimetres after applying orientation."""
        width, height = PAGE_SIZES[self.page_size]
        if self.orientation == 'landscape':
            return height, width
        return width, height

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        page_size = data.get('page_size') or data.get('pageSize') or 'A4'
        # Accept 'a4' / 'LETTER' style spellings
        for known in PAGE_SIZES:
            if str(page_size).lower() == known.lower():
                page_size = known
                break
        return cls(
            format=str(data.get('format') or 'pdf').lower(),
            include_charts=parse_bool(data.get('include_charts', data.get('includeCharts'))),
            include_details=parse_bool(data.get('include_details', data.get('includeDetails'))),
            language=str(
                data.get('language') or get_setting('default_language', 'en')
            ).lower(),
            orientation=str(data.get('orientation') or 'portrait').lower(),
            page_size=page_size,
        )

    @classmethod
    def from_query(cls, query):
        """Build options from request.GET style parameters."""
        return cls.from_dict({key: query.get(key) for key in query.keys()})
