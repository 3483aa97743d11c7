"""
Data models for the comparison service.

Contains Pydantic models for request/response validation and serialization.
"""

from sheetdiff.models.comparison_models import (
    CellDiff,
    ComparisonMode,
    ComparisonResponse,
    ComparisonResult,
    ComparisonSummary,
    DiffType,
    ErrorResponse,
    ExportSavedResponse,
    GridComparisonResponse,
    HeadersResponse,
    RowDiff,
    SheetComparison,
    SheetComparisonSummary,
)
from sheetdiff.models.invoice_models import (
    ExtractedInvoiceData,
    InvoiceExportRequest,
    InvoiceMetadata,
    InvoiceTable,
    InvoiceValidationResult,
    ValidationIssue,
)
from sheetdiff.models.report_models import ReportCell, ReportSheet
from sheetdiff.models.workbook_models import (
    CellValue,
    KeyedRow,
    KeyedSheet,
    Sheet,
    SheetInfo,
    Workbook,
)

__all__ = [
    "CellValue",
    "Sheet",
    "SheetInfo",
    "Workbook",
    "KeyedRow",
    "KeyedSheet",
    "DiffType",
    "ComparisonMode",
    "RowDiff",
    "CellDiff",
    "ComparisonSummary",
    "ComparisonResult",
    "SheetComparisonSummary",
    "SheetComparison",
    "ComparisonResponse",
    "GridComparisonResponse",
    "HeadersResponse",
    "ExportSavedResponse",
    "ErrorResponse",
    "InvoiceMetadata",
    "InvoiceTable",
    "ExtractedInvoiceData",
    "ValidationIssue",
    "InvoiceValidationResult",
    "InvoiceExportRequest",
    "ReportCell",
    "ReportSheet",
]
