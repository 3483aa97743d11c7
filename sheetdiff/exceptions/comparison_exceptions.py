"""
Custom exceptions for spreadsheet comparison operations.

This module defines a hierarchy of exceptions for handling the error
conditions that can occur while reading, comparing, and exporting
workbooks. All exceptions inherit from SheetDiffError for consistent
error handling.

Example:
    try:
        service.compare_keyed(old_bytes, new_bytes, ["InvoiceNo"])
    except UnknownKeyColumnError as e:
        logger.error(f"Missing key columns: {e.missing_columns}")
    except SheetDiffError as e:
        logger.error(f"General error: {e}")
"""


class SheetDiffError(Exception):
    """
    Base exception for all comparison service errors.

    All custom exceptions in this module inherit from this class,
    allowing consumers to catch every comparison-related error with a
    single except clause.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code for API responses.
        details: Optional additional context about the error.
    """

    def __init__(
        self,
        message: str,
        error_code: str = "SHEETDIFF_ERROR",
        details: dict | None = None,
    ) -> None:
        """
        Initialize the SheetDiffError.

        Args:
            message: Human-readable error description.
            error_code: Machine-readable error code for API responses.
            details: Optional additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict:
        """
        Convert exception to a dictionary for API responses.

        Returns:
            Dictionary containing error_code, message, and details.
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class UnreadableWorkbookError(SheetDiffError):
    """
    Raised when the input bytes are not a parseable workbook.

    Also raised for workbooks that parse but contain no worksheets.

    Attributes:
        file_name: Name of the workbook that could not be read.
        reason: Specific reason for the failure.
    """

    def __init__(
        self,
        file_name: str,
        reason: str | None = None,
    ) -> None:
        """
        Initialize the UnreadableWorkbookError.

        Args:
            file_name: Name of the workbook that could not be read.
            reason: Specific reason for the failure.
        """
        self.file_name = file_name
        self.reason = reason

        message = f"Unreadable workbook: {file_name}"
        if reason:
            message += f" - {reason}"

        super().__init__(
            message=message,
            error_code="UNREADABLE_WORKBOOK",
            details={
                "file_name": file_name,
                "reason": reason,
            },
        )


class NoKeyColumnsError(SheetDiffError):
    """Raised when a keyed comparison is requested without key columns."""

    def __init__(self) -> None:
        """Initialize the NoKeyColumnsError."""
        super().__init__(
            message="At least one key column is required for keyed comparison",
            error_code="NO_KEY_COLUMNS",
        )


class UnknownKeyColumnError(SheetDiffError):
    """
    Raised when requested key columns are absent from both sheets' headers.

    Attributes:
        missing_columns: Key column names that were not found.
        available_headers: Union of the headers of both sheets.
    """

    def __init__(
        self,
        missing_columns: list[str],
        available_headers: list[str] | None = None,
    ) -> None:
        """
        Initialize the UnknownKeyColumnError.

        Args:
            missing_columns: Key column names that were not found.
            available_headers: Union of the headers of both sheets.
        """
        self.missing_columns = missing_columns
        self.available_headers = available_headers or []

        message = f"Unknown key columns: {', '.join(missing_columns)}"
        if available_headers:
            message += f". Available columns: {', '.join(available_headers)}"

        super().__init__(
            message=message,
            error_code="UNKNOWN_KEY_COLUMN",
            details={
                "missing_columns": missing_columns,
                "available_headers": self.available_headers,
            },
        )


class InvalidSheetIndexError(SheetDiffError):
    """
    Raised when a sheet index is outside the workbook's sheet range.

    Attributes:
        sheet_index: The requested 0-based sheet index.
        available_sheets: Names of the sheets in the workbook.
    """

    def __init__(
        self,
        sheet_index: int,
        available_sheets: list[str] | None = None,
    ) -> None:
        """
        Initialize the InvalidSheetIndexError.

        Args:
            sheet_index: The requested 0-based sheet index.
            available_sheets: Names of the sheets in the workbook.
        """
        self.sheet_index = sheet_index
        self.available_sheets = available_sheets or []

        message = f"Invalid sheet index: {sheet_index}"
        if available_sheets:
            message += f". Available sheets: {', '.join(available_sheets)}"
        else:
            message += ". Workbook has no sheets"

        super().__init__(
            message=message,
            error_code="INVALID_SHEET_INDEX",
            details={
                "sheet_index": sheet_index,
                "available_sheets": self.available_sheets,
            },
        )


class InvalidUploadError(SheetDiffError):
    """
    Raised when an uploaded file is rejected before it is read.

    Covers unsupported extensions, empty uploads and oversized files.

    Attributes:
        file_name: Name of the uploaded file.
        reason: Why the upload was rejected.
    """

    def __init__(
        self,
        file_name: str,
        reason: str,
        error_code: str = "INVALID_UPLOAD",
    ) -> None:
        """
        Initialize the InvalidUploadError.

        Args:
            file_name: Name of the uploaded file.
            reason: Why the upload was rejected.
            error_code: Machine-readable error code.
        """
        self.file_name = file_name
        self.reason = reason

        super().__init__(
            message=f"Invalid upload: {file_name} - {reason}",
            error_code=error_code,
            details={
                "file_name": file_name,
                "reason": reason,
            },
        )


class InvalidInvoiceDataError(SheetDiffError):
    """
    Raised when extracted invoice data has an inconsistent shape.

    Attributes:
        reason: Description of the inconsistency.
    """

    def __init__(self, reason: str, details: dict | None = None) -> None:
        """
        Initialize the InvalidInvoiceDataError.

        Args:
            reason: Description of the inconsistency.
            details: Optional additional context.
        """
        self.reason = reason
        super().__init__(
            message=f"Invalid invoice data: {reason}",
            error_code="INVALID_INVOICE_DATA",
            details=details,
        )


class ComparisonError(SheetDiffError):
    """
    Raised when a comparison fails for reasons not covered by other errors.

    Attributes:
        mode: The comparison mode that failed ("keyed" or "grid").
    """

    def __init__(
        self,
        mode: str,
        reason: str | None = None,
    ) -> None:
        """
        Initialize the ComparisonError.

        Args:
            mode: The comparison mode that failed.
            reason: Specific reason for the failure.
        """
        self.mode = mode
        self.reason = reason

        message = f"Failed to run {mode} comparison"
        if reason:
            message += f" - {reason}"

        super().__init__(
            message=message,
            error_code="COMPARISON_ERROR",
            details={
                "mode": mode,
                "reason": reason,
            },
        )


class ExportError(SheetDiffError):
    """
    Raised when rendering an export workbook fails.

    Attributes:
        export_type: The kind of export being rendered.
    """

    def __init__(
        self,
        export_type: str,
        reason: str | None = None,
    ) -> None:
        """
        Initialize the ExportError.

        Args:
            export_type: The kind of export being rendered.
            reason: Specific reason for the failure.
        """
        self.export_type = export_type
        self.reason = reason

        message = f"Failed to render {export_type} export"
        if reason:
            message += f" - {reason}"

        super().__init__(
            message=message,
            error_code="EXPORT_ERROR",
            details={
                "export_type": export_type,
                "reason": reason,
            },
        )


class StorageError(SheetDiffError):
    """
    Raised when the blob store cannot complete an operation.

    Attributes:
        path: Storage path involved in the failed operation.
        operation: The operation that failed (put/get/delete).
    """

    def __init__(
        self,
        path: str,
        operation: str,
        reason: str | None = None,
        error_code: str = "STORAGE_ERROR",
    ) -> None:
        """
        Initialize the StorageError.

        Args:
            path: Storage path involved in the failed operation.
            operation: The operation that failed.
            reason: Specific reason for the failure.
            error_code: Machine-readable error code.
        """
        self.path = path
        self.operation = operation
        self.reason = reason

        message = f"Storage {operation} failed for: {path}"
        if reason:
            message += f" - {reason}"

        super().__init__(
            message=message,
            error_code=error_code,
            details={
                "path": path,
                "operation": operation,
                "reason": reason,
            },
        )


class ObjectNotFoundError(StorageError):
    """Raised when a requested object does not exist in the blob store."""

    def __init__(self, path: str) -> None:
        """
        Initialize the ObjectNotFoundError.

        Args:
            path: Storage path that was not found.
        """
        super().__init__(
            path=path,
            operation="get",
            reason="Object not found",
            error_code="OBJECT_NOT_FOUND",
        )
