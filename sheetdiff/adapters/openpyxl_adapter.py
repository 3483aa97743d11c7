"""
Openpyxl adapter for workbook reading.

This module provides the OpenpyxlAdapter class that wraps openpyxl for
reading uploaded workbooks from memory. Openpyxl is a pure Python library;
it is the alternative engine when python-calamine cannot handle a file or
when a pure Python stack is required.

Formula cells are read with ``data_only=True``, so their cached results
are compared rather than the formula text. Rich text is loaded as plain
text and hyperlink cells carry their display text as the cell value.

Supported formats:
    - .xlsx (Excel 2007+)
    - .xlsm (Excel Macro-Enabled)

Example:
    adapter = OpenpyxlAdapter()
    workbook = adapter.read_workbook(data, "invoices.xlsx")
"""

from io import BytesIO

from openpyxl import load_workbook
from openpyxl.workbook.workbook import Workbook as OpenpyxlWorkbook

from sheetdiff.adapters.workbook_reader import RawSheet, WorkbookReader
from sheetdiff.exceptions.comparison_exceptions import UnreadableWorkbookError


class OpenpyxlAdapter(WorkbookReader):
    """
    Adapter for openpyxl reading operations.

    Attributes:
        SUPPORTED_EXTENSIONS: Tuple of supported file extensions.

    Example:
        adapter = OpenpyxlAdapter()
        sheets = adapter.list_sheets(data, "report.xlsx")
    """

    engine = "openpyxl"
    SUPPORTED_EXTENSIONS = (".xlsx", ".xlsm")

    def _open_workbook(self, data: bytes, file_name: str) -> OpenpyxlWorkbook:
        """
        Open a workbook from bytes using openpyxl.

        Args:
            data: Workbook bytes.
            file_name: Name used in error messages.

        Returns:
            Workbook instance.

        Raises:
            UnreadableWorkbookError: If the bytes cannot be parsed.
        """
        if not data:
            raise UnreadableWorkbookError(file_name=file_name, reason="File is empty")

        try:
            return load_workbook(BytesIO(data), data_only=True)
        except Exception as e:
            raise UnreadableWorkbookError(
                file_name=file_name,
                reason=str(e),
            ) from e

    def _load_raw_sheets(self, data: bytes, file_name: str) -> list[RawSheet]:
        workbook = self._open_workbook(data, file_name)

        raw_sheets: list[RawSheet] = []
        try:
            for worksheet in workbook.worksheets:
                rows = [list(row) for row in worksheet.iter_rows(values_only=True)]
                raw_sheets.append((worksheet.title, rows))
        except Exception as e:
            raise UnreadableWorkbookError(
                file_name=file_name,
                reason=str(e),
            ) from e
        finally:
            workbook.close()

        return raw_sheets
