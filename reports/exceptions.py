# reports/exceptions.py
"""
Report error hierarchy.

Every error carries a machine readable ``code`` and a ``details`` dict so
views can serialize it with ``to_dict()``.
"""
from typing import Any, Dict, Optional


class ReportError(Exception):
    """Base exception for report aggregation and export errors."""

    def __init__(
        self,
        message: str,
        code: str = "REPORT_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class UnsupportedFormatError(ReportError):
    """Requested export format is not pdf, excel or csv."""

    def __init__(self, export_format: Any):
        super().__init__(
            message=f"Unsupported export format: {export_format}",
            code="UNSUPPORTED_FORMAT",
            details={"format": export_format},
        )
        self.export_format = export_format


class UnsupportedReportTypeError(ReportError):
    """Requested report type has no aggregator."""

    def __init__(self, report_type: Any):
        super().__init__(
            message=f"Unsupported report type: {report_type}",
            code="UNSUPPORTED_REPORT_TYPE",
            details={"report_type": report_type},
        )
        self.report_type = report_type


class InvalidExportOptionsError(ReportError):
    """Export options carry a value outside the recognized set."""

    def __init__(self, option: str, value: Any):
        super().__init__(
            message=f"Invalid value for export option '{option}': {value}",
            code="INVALID_OPTIONS",
            details={"option": option, "value": value},
        )
        self.option = option


class ExportFailedError(ReportError):
    """Rendering failed; message is in the report's display language."""

    def __init__(
        self,
        message: str,
        export_format: str = "unknown",
        report_type: str = "unknown",
    ):
        super().__init__(
            message=message,
            code="EXPORT_FAILED",
            details={"format": export_format, "report_type": report_type},
        )
        self.export_format = export_format
        self.report_type = report_type
