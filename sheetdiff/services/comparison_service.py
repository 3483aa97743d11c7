"""
Core comparison service layer.

This module provides the ComparisonService class which encapsulates every
comparison, export and invoice operation and serves as the single entry
point for both the FastAPI and MCP interfaces. Transport layers only deal
with uploads, file paths and response formatting.

The service coordinates a workbook reader (calamine or openpyxl), the
Comparator, the two exporters and the invoice validator. All of them are
injected, so tests and transports can swap any of them.

Example:
    service = ComparisonService()

    response = service.compare_keyed(old_bytes, new_bytes, ["InvoiceNo"])
    print(response.result.summary)

    data = service.export_grid(old_bytes, new_bytes, 0, 0)
"""

import time
from datetime import datetime, timezone
from pathlib import PurePosixPath

from pydantic import ValidationError

from sheetdiff.adapters import create_reader
from sheetdiff.adapters.calamine_adapter import CalamineAdapter
from sheetdiff.adapters.storage_adapter import XLSX_CONTENT_TYPE, BlobStore, LocalBlobStore
from sheetdiff.adapters.workbook_reader import WorkbookReader
from sheetdiff.config import Settings
from sheetdiff.exceptions.comparison_exceptions import (
    ComparisonError,
    ExportError,
    InvalidInvoiceDataError,
    NoKeyColumnsError,
    SheetDiffError,
    StorageError,
)
from sheetdiff.models.comparison_models import (
    ComparisonMode,
    ComparisonResponse,
    ExportSavedResponse,
    GridComparisonResponse,
    HeadersResponse,
)
from sheetdiff.models.invoice_models import ExtractedInvoiceData, InvoiceValidationResult
from sheetdiff.models.workbook_models import SheetInfo
from sheetdiff.services.comparator import Comparator
from sheetdiff.services.diff_exporter import DiffExporter
from sheetdiff.services.invoice_exporter import InvoiceExporter
from sheetdiff.services.invoice_validator import InvoiceValidator
from sheetdiff.services.normalizer import ValueNormalizer
from sheetdiff.utils.logging import get_logger

logger = get_logger(__name__)

EXPORT_PREFIX = "exports"


def _elapsed_ms(start_time: float) -> float:
    return round((time.time() - start_time) * 1000, 2)


class ComparisonService:
    """
    Core service layer for workbook comparison and invoice export.

    All methods are transport-agnostic: they take workbook bytes or
    validated models and return Pydantic models or workbook bytes. Typed
    SheetDiffError subclasses propagate unchanged; any other failure is
    wrapped in ComparisonError or ExportError.

    Attributes:
        reader: Workbook reader.
        comparator: Keyed and positional comparison.
        diff_exporter: Renders comparison workbooks.
        invoice_exporter: Renders invoice workbooks.
        validator: Checks invoice line arithmetic.
        blob_store: Optional store for saved exports.

    Example:
        service = ComparisonService(comparator=Comparator(ValueNormalizer(0.01)))

        sheets = service.list_sheets(data, "january.xlsx")
        response = service.compare_grid(old_bytes, new_bytes, 0, 1)
        print(response.comparison.summary.changed_cells)
    """

    def __init__(
        self,
        reader: WorkbookReader | None = None,
        comparator: Comparator | None = None,
        diff_exporter: DiffExporter | None = None,
        invoice_exporter: InvoiceExporter | None = None,
        validator: InvoiceValidator | None = None,
        blob_store: BlobStore | None = None,
    ) -> None:
        """
        Initialize the ComparisonService.

        Args:
            reader: Optional workbook reader. If None, uses CalamineAdapter.
            comparator: Optional Comparator. If None, creates a default one.
            diff_exporter: Optional DiffExporter.
            invoice_exporter: Optional InvoiceExporter.
            validator: Optional InvoiceValidator.
            blob_store: Optional blob store used by ``save_export``.
        """
        self.reader = reader or CalamineAdapter()
        self.comparator = comparator or Comparator()
        self.diff_exporter = diff_exporter or DiffExporter()
        self.invoice_exporter = invoice_exporter or InvoiceExporter()
        self.validator = validator or InvoiceValidator()
        self.blob_store = blob_store

    @classmethod
    def from_settings(cls, settings: Settings) -> "ComparisonService":
        """
        Build a service wired according to application settings.

        Args:
            settings: Application settings.

        Returns:
            ComparisonService using the configured reader engine, numeric
            tolerance and storage directory.
        """
        return cls(
            reader=create_reader(settings.reader_engine),
            comparator=Comparator(ValueNormalizer(settings.numeric_tolerance)),
            blob_store=LocalBlobStore(settings.storage_dir),
        )

    def list_sheets(self, data: bytes, file_name: str = "workbook.xlsx") -> list[SheetInfo]:
        """
        List the worksheets of a workbook.

        Args:
            data: Workbook bytes.
            file_name: Name the workbook was supplied under.

        Returns:
            SheetInfo for each worksheet.

        Raises:
            UnreadableWorkbookError: If the workbook cannot be read.
        """
        return self.reader.list_sheets(data, file_name)

    def get_headers(self, data: bytes, file_name: str = "workbook.xlsx") -> HeadersResponse:
        """
        Get the headers of a workbook's first sheet, for key selection.

        Args:
            data: Workbook bytes.
            file_name: Name the workbook was supplied under.

        Returns:
            HeadersResponse with the headers and the data row count.

        Raises:
            UnreadableWorkbookError: If the workbook cannot be read.
        """
        keyed = self.reader.read_keyed_sheet(data, file_name)
        return HeadersResponse(
            file_name=file_name,
            sheet_name=keyed.sheet_name,
            headers=keyed.headers,
            row_count=len(keyed.rows),
        )

    def compare_keyed(
        self,
        old_data: bytes,
        new_data: bytes,
        key_columns: list[str],
        old_file_name: str = "old.xlsx",
        new_file_name: str = "new.xlsx",
    ) -> ComparisonResponse:
        """
        Compare the first sheets of two workbooks by composite key.

        Args:
            old_data: Bytes of the old workbook.
            new_data: Bytes of the new workbook.
            key_columns: Ordered key column names.
            old_file_name: Name of the old workbook.
            new_file_name: Name of the new workbook.

        Returns:
            ComparisonResponse with the result and processing time.

        Raises:
            NoKeyColumnsError: If no key columns were given.
            UnreadableWorkbookError: If either workbook cannot be read.
            UnknownKeyColumnError: If a key column is not a header.
            ComparisonError: If the comparison fails unexpectedly.
        """
        if not key_columns:
            raise NoKeyColumnsError()

        start_time = time.time()
        try:
            old_sheet = self.reader.read_keyed_sheet(old_data, old_file_name)
            new_sheet = self.reader.read_keyed_sheet(new_data, new_file_name)

            result = self.comparator.compare_keyed(old_sheet, new_sheet, key_columns)

            return ComparisonResponse(
                success=True,
                result=result,
                processing_time_ms=_elapsed_ms(start_time),
            )

        except SheetDiffError:
            raise
        except Exception as e:
            logger.exception("Keyed comparison failed", old_file=old_file_name, new_file=new_file_name)
            raise ComparisonError(mode=ComparisonMode.KEYED.value, reason=str(e)) from e

    def compare_grid(
        self,
        old_data: bytes,
        new_data: bytes,
        old_sheet_index: int | None = None,
        new_sheet_index: int | None = None,
        old_file_name: str = "old.xlsx",
        new_file_name: str = "new.xlsx",
    ) -> GridComparisonResponse:
        """
        Compare one sheet of each workbook cell by cell.

        When either sheet index is omitted, no comparison is run: the
        response lists the sheets of both workbooks and sets
        ``requires_selection``.

        Args:
            old_data: Bytes of the old workbook.
            new_data: Bytes of the new workbook.
            old_sheet_index: 0-based sheet index in the old workbook.
            new_sheet_index: 0-based sheet index in the new workbook.
            old_file_name: Name of the old workbook.
            new_file_name: Name of the new workbook.

        Returns:
            GridComparisonResponse with either the sheet lists or the
            comparison.

        Raises:
            UnreadableWorkbookError: If either workbook cannot be read.
            InvalidSheetIndexError: If a sheet index is out of range.
            ComparisonError: If the comparison fails unexpectedly.
        """
        start_time = time.time()
        try:
            old_workbook = self.reader.read_workbook(old_data, old_file_name)
            new_workbook = self.reader.read_workbook(new_data, new_file_name)
            old_sheets = [sheet.to_info() for sheet in old_workbook.sheets]
            new_sheets = [sheet.to_info() for sheet in new_workbook.sheets]

            if old_sheet_index is None or new_sheet_index is None:
                return GridComparisonResponse(
                    success=True,
                    requires_selection=True,
                    old_sheets=old_sheets,
                    new_sheets=new_sheets,
                    processing_time_ms=_elapsed_ms(start_time),
                )

            old_sheet = self.reader.select_sheet(old_workbook, old_sheet_index)
            new_sheet = self.reader.select_sheet(new_workbook, new_sheet_index)

            comparison = self.comparator.compare_grid(old_sheet, new_sheet)

            return GridComparisonResponse(
                success=True,
                requires_selection=False,
                old_sheets=old_sheets,
                new_sheets=new_sheets,
                comparison=comparison,
                processing_time_ms=_elapsed_ms(start_time),
            )

        except SheetDiffError:
            raise
        except Exception as e:
            logger.exception("Grid comparison failed", old_file=old_file_name, new_file=new_file_name)
            raise ComparisonError(mode=ComparisonMode.GRID.value, reason=str(e)) from e

    def export_keyed(
        self,
        old_data: bytes,
        new_data: bytes,
        key_columns: list[str],
        include_unchanged: bool = True,
        old_file_name: str = "old.xlsx",
        new_file_name: str = "new.xlsx",
    ) -> bytes:
        """
        Run a keyed comparison and render it as a highlighted workbook.

        Raises:
            ExportError: If rendering fails.
            SheetDiffError: Any error raised by ``compare_keyed``.
        """
        response = self.compare_keyed(old_data, new_data, key_columns, old_file_name, new_file_name)
        try:
            return self.diff_exporter.render_keyed(response.result, include_unchanged)
        except SheetDiffError:
            raise
        except Exception as e:
            raise ExportError(export_type="keyed_comparison", reason=str(e)) from e

    def export_grid(
        self,
        old_data: bytes,
        new_data: bytes,
        old_sheet_index: int = 0,
        new_sheet_index: int = 0,
        include_unchanged: bool = True,
        old_file_name: str = "old.xlsx",
        new_file_name: str = "new.xlsx",
    ) -> bytes:
        """
        Run a positional comparison and render it as a highlighted workbook.

        Raises:
            ExportError: If rendering fails.
            SheetDiffError: Any error raised by ``compare_grid``.
        """
        response = self.compare_grid(
            old_data,
            new_data,
            old_sheet_index,
            new_sheet_index,
            old_file_name,
            new_file_name,
        )
        try:
            return self.diff_exporter.render_grid(response.comparison, include_unchanged)
        except SheetDiffError:
            raise
        except Exception as e:
            raise ExportError(export_type="grid_comparison", reason=str(e)) from e

    def parse_invoices(self, raw_invoices: list[dict]) -> list[ExtractedInvoiceData]:
        """
        Validate raw extraction output.

        Args:
            raw_invoices: Invoices as decoded JSON.

        Returns:
            Validated invoices.

        Raises:
            InvalidInvoiceDataError: If any invoice is malformed.
        """
        try:
            return [ExtractedInvoiceData.model_validate(raw) for raw in raw_invoices]
        except ValidationError as e:
            raise InvalidInvoiceDataError(
                reason="Extracted invoice data failed validation",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

    def export_invoices(self, invoices: list[ExtractedInvoiceData], batch_mode: bool = False) -> bytes:
        """
        Render extracted invoices as a workbook.

        Args:
            invoices: Invoices to export.
            batch_mode: Combine every invoice into a single sheet.

        Returns:
            The workbook as bytes.

        Raises:
            InvalidInvoiceDataError: If no invoices were given.
            ExportError: If rendering fails.
        """
        if not invoices:
            raise InvalidInvoiceDataError(reason="No invoices to export")

        try:
            data = self.invoice_exporter.render(invoices, batch_mode)
        except SheetDiffError:
            raise
        except Exception as e:
            raise ExportError(export_type="invoices", reason=str(e)) from e

        logger.info("Exported invoices", invoices=len(invoices), batch_mode=batch_mode, size_bytes=len(data))
        return data

    def validate_invoices(self, invoices: list[ExtractedInvoiceData]) -> list[InvoiceValidationResult]:
        """
        Check the line arithmetic of each invoice.

        Args:
            invoices: Invoices to check.

        Returns:
            One InvoiceValidationResult per invoice, in input order.
        """
        results = [self.validator.validate(invoice) for invoice in invoices]
        flagged = sum(1 for result in results if result.needs_review)
        if flagged:
            logger.warning("Invoices need review", flagged=flagged, total=len(results))
        return results

    def save_export(self, data: bytes, file_name: str) -> ExportSavedResponse:
        """
        Store an export under ``exports/<timestamp>_<file_name>``.

        Args:
            data: Workbook bytes.
            file_name: File name of the export.

        Returns:
            ExportSavedResponse with the storage path and size.

        Raises:
            StorageError: If no blob store is configured or the write fails.
        """
        if self.blob_store is None:
            raise StorageError(path=file_name, operation="put", reason="No blob store configured")

        file_name = PurePosixPath(file_name.replace("\\", "/")).name or "export.xlsx"
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
        path = f"{EXPORT_PREFIX}/{timestamp}_{file_name}"
        stored = self.blob_store.put(path, data, XLSX_CONTENT_TYPE)

        logger.info("Saved export", path=stored.path, size_bytes=stored.size_bytes)
        return ExportSavedResponse(
            success=True,
            path=stored.path,
            file_name=file_name,
            size_bytes=stored.size_bytes,
        )

    def load_export(self, path: str) -> bytes:
        """
        Fetch a stored export.

        Raises:
            StorageError: If no blob store is configured.
            ObjectNotFoundError: If nothing is stored at the path.
        """
        if self.blob_store is None:
            raise StorageError(path=path, operation="get", reason="No blob store configured")
        return self.blob_store.get(path)
