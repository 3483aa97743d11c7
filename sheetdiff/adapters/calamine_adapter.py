"""
Calamine adapter for high-performance workbook reading.

This module provides the CalamineAdapter class that wraps python-calamine
for reading uploaded workbooks from memory. python-calamine is a Rust-based
library with exceptional performance for large files and a small memory
footprint.

Supported formats:
    - .xlsx (Excel 2007+)
    - .xls (Excel 97-2003)
    - .xlsb (Excel Binary)
    - .xlsm (Excel Macro-Enabled)
    - .ods (OpenDocument Spreadsheet)

Example:
    adapter = CalamineAdapter()
    workbook = adapter.read_workbook(data, "invoices.xlsx")
    keyed = adapter.read_keyed_sheet(data, "invoices.xlsx")
"""

from io import BytesIO

from python_calamine import CalamineWorkbook

from sheetdiff.adapters.workbook_reader import RawSheet, WorkbookReader
from sheetdiff.exceptions.comparison_exceptions import UnreadableWorkbookError


class CalamineAdapter(WorkbookReader):
    """
    Adapter for python-calamine reading operations.

    Formula cells are read as their cached results and rich text as its
    plain text, which is what calamine returns natively. Empty cells come
    back as empty strings and are reduced to None by the shared reader.

    Attributes:
        SUPPORTED_EXTENSIONS: Tuple of supported file extensions.

    Example:
        adapter = CalamineAdapter()
        sheets = adapter.list_sheets(data, "report.xlsx")
        sheet = adapter.read_sheet(data, sheet_index=0)
    """

    engine = "calamine"
    SUPPORTED_EXTENSIONS = (".xlsx", ".xls", ".xlsb", ".xlsm", ".ods")

    def _open_workbook(self, data: bytes, file_name: str) -> CalamineWorkbook:
        """
        Open a workbook from bytes using calamine.

        Args:
            data: Workbook bytes.
            file_name: Name used in error messages.

        Returns:
            CalamineWorkbook instance.

        Raises:
            UnreadableWorkbookError: If the bytes cannot be parsed.
        """
        if not data:
            raise UnreadableWorkbookError(file_name=file_name, reason="File is empty")

        try:
            return CalamineWorkbook.from_filelike(BytesIO(data))
        except Exception as e:
            raise UnreadableWorkbookError(
                file_name=file_name,
                reason=str(e),
            ) from e

    def _load_raw_sheets(self, data: bytes, file_name: str) -> list[RawSheet]:
        workbook = self._open_workbook(data, file_name)

        raw_sheets: list[RawSheet] = []
        try:
            for index, name in enumerate(workbook.sheet_names):
                sheet = workbook.get_sheet_by_index(index)
                raw_sheets.append((name, sheet.to_python(skip_empty_area=False)))
        except Exception as e:
            raise UnreadableWorkbookError(
                file_name=file_name,
                reason=str(e),
            ) from e

        return raw_sheets
