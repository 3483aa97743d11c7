"""
Custom exceptions for the comparison service.

Provides type-safe, descriptive exceptions for error handling throughout
the application.
"""

from sheetdiff.exceptions.comparison_exceptions import (
    ComparisonError,
    ExportError,
    InvalidInvoiceDataError,
    InvalidSheetIndexError,
    InvalidUploadError,
    NoKeyColumnsError,
    ObjectNotFoundError,
    SheetDiffError,
    StorageError,
    UnknownKeyColumnError,
    UnreadableWorkbookError,
)

__all__ = [
    "SheetDiffError",
    "UnreadableWorkbookError",
    "NoKeyColumnsError",
    "UnknownKeyColumnError",
    "InvalidSheetIndexError",
    "InvalidUploadError",
    "InvalidInvoiceDataError",
    "ComparisonError",
    "ExportError",
    "StorageError",
    "ObjectNotFoundError",
]
