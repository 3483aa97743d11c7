"""
Shared reading logic for workbook adapters.

Engine adapters only know how to turn workbook bytes into raw rows per
sheet. Everything that defines what a "read" sheet is lives here, so every
engine produces identical grids:

    - cell values reduced to str, int, float, bool or None
    - dates and datetimes rendered as ISO ``YYYY-MM-DD`` strings
    - trailing empty rows dropped
    - grids padded to the widest populated column across all rows
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, time, timedelta
from typing import Any

from sheetdiff.exceptions.comparison_exceptions import (
    InvalidSheetIndexError,
    UnreadableWorkbookError,
)
from sheetdiff.models.workbook_models import (
    CellValue,
    KeyedRow,
    KeyedSheet,
    Sheet,
    SheetInfo,
    Workbook,
)
from sheetdiff.utils.logging import get_logger

logger = get_logger(__name__)

RawSheet = tuple[str, list[list[Any]]]


class WorkbookReader(ABC):
    """
    Base class for workbook reading adapters.

    Subclasses implement ``_load_raw_sheets`` for a specific library; the
    public operations are shared.

    Attributes:
        engine: Short name of the reading library.
    """

    engine: str = "base"

    @abstractmethod
    def _load_raw_sheets(self, data: bytes, file_name: str) -> list[RawSheet]:
        """
        Load every worksheet as raw library values.

        Args:
            data: Workbook bytes.
            file_name: Name used in error messages.

        Returns:
            List of (sheet name, rows of raw cell values) in workbook order.

        Raises:
            UnreadableWorkbookError: If the bytes cannot be parsed.
        """

    def _to_cell_value(self, value: Any) -> CellValue:
        """
        Reduce a raw library value to a CellValue.

        Args:
            value: Raw cell value.

        Returns:
            Normalized cell value.
        """
        if value is None:
            return None

        if isinstance(value, bool):
            return value

        if isinstance(value, float):
            if value.is_integer():
                return int(value)
            return value

        if isinstance(value, int):
            return value

        if isinstance(value, str):
            return value if value != "" else None

        if isinstance(value, datetime):
            return value.date().isoformat()

        if isinstance(value, (date, time)):
            return value.isoformat()

        if isinstance(value, timedelta):
            return str(value)

        return str(value)

    def _build_sheet(self, name: str, index: int, raw_rows: list[list[Any]]) -> Sheet:
        """
        Build a dense sheet grid from raw rows.

        Args:
            name: Sheet name.
            index: 0-based sheet index.
            raw_rows: Rows of raw cell values.

        Returns:
            Sheet sized to its populated rows and widest populated column.
        """
        rows = [[self._to_cell_value(cell) for cell in row] for row in raw_rows]

        while rows and all(cell is None for cell in rows[-1]):
            rows.pop()

        column_count = max((_populated_width(row) for row in rows), default=0)
        grid = [_fit_row(row, column_count) for row in rows]

        headers = None
        if grid:
            headers = [str(cell) if cell is not None else "" for cell in grid[0]]

        return Sheet(
            name=name,
            index=index,
            row_count=len(grid),
            column_count=column_count,
            data=grid,
            headers=headers,
        )

    def read_workbook(self, data: bytes, file_name: str = "workbook.xlsx") -> Workbook:
        """
        Read every worksheet of a workbook.

        Args:
            data: Workbook bytes.
            file_name: Name the workbook was supplied under.

        Returns:
            Workbook with one dense Sheet per worksheet.

        Raises:
            UnreadableWorkbookError: If the bytes are not a workbook or the
                workbook contains no worksheets.
        """
        raw_sheets = self._load_raw_sheets(data, file_name)

        if not raw_sheets:
            raise UnreadableWorkbookError(
                file_name=file_name,
                reason="Workbook contains no worksheets",
            )

        sheets = [
            self._build_sheet(name, index, raw_rows)
            for index, (name, raw_rows) in enumerate(raw_sheets)
        ]

        logger.debug(
            "Read workbook",
            engine=self.engine,
            file_name=file_name,
            sheets=len(sheets),
        )

        return Workbook(file_name=file_name, sheets=sheets)

    def list_sheets(self, data: bytes, file_name: str = "workbook.xlsx") -> list[SheetInfo]:
        """
        List the worksheets of a workbook for sheet selection.

        Args:
            data: Workbook bytes.
            file_name: Name the workbook was supplied under.

        Returns:
            SheetInfo for each worksheet.

        Raises:
            UnreadableWorkbookError: If the workbook cannot be read.
        """
        workbook = self.read_workbook(data, file_name)
        return [sheet.to_info() for sheet in workbook.sheets]

    def read_sheet(
        self,
        data: bytes,
        sheet_index: int,
        file_name: str = "workbook.xlsx",
    ) -> Sheet:
        """
        Read a single worksheet by index.

        Args:
            data: Workbook bytes.
            sheet_index: 0-based index of the sheet.
            file_name: Name the workbook was supplied under.

        Returns:
            The requested Sheet.

        Raises:
            UnreadableWorkbookError: If the workbook cannot be read.
            InvalidSheetIndexError: If the index is out of range.
        """
        return self.select_sheet(self.read_workbook(data, file_name), sheet_index)

    @staticmethod
    def select_sheet(workbook: Workbook, sheet_index: int) -> Sheet:
        """
        Pick a sheet of an already-read workbook by index.

        Raises:
            InvalidSheetIndexError: If the index is out of range.
        """
        if sheet_index < 0 or sheet_index >= len(workbook.sheets):
            raise InvalidSheetIndexError(
                sheet_index=sheet_index,
                available_sheets=workbook.sheet_names,
            )

        return workbook.sheets[sheet_index]

    def read_keyed_sheet(self, data: bytes, file_name: str = "workbook.xlsx") -> KeyedSheet:
        """
        Read the first worksheet as header-keyed rows.

        Row 1 is consumed as headers. Each following row maps header name
        to value for the cells the row actually carries, so a row with
        fewer populated cells than headers leaves its trailing fields
        absent. Columns with an empty header are skipped, duplicate
        headers are last-write-wins and fully empty rows are ignored.

        Args:
            data: Workbook bytes.
            file_name: Name the workbook was supplied under.

        Returns:
            KeyedSheet with headers and rows.

        Raises:
            UnreadableWorkbookError: If the workbook cannot be read.
        """
        raw_sheets = self._load_raw_sheets(data, file_name)

        if not raw_sheets:
            raise UnreadableWorkbookError(
                file_name=file_name,
                reason="Workbook contains no worksheets",
            )

        sheet_name, raw_rows = raw_sheets[0]
        rows = [[self._to_cell_value(cell) for cell in row] for row in raw_rows]

        if not rows:
            return KeyedSheet(sheet_name=sheet_name)

        column_names = [str(cell).strip() if cell is not None else "" for cell in rows[0]]

        headers: list[str] = []
        for name in column_names:
            if name and name not in headers:
                headers.append(name)

        keyed_rows: list[KeyedRow] = []
        for offset, row in enumerate(rows[1:]):
            width = _populated_width(row)
            if width == 0:
                continue

            values: dict[str, CellValue] = {}
            for col_idx in range(min(width, len(column_names))):
                header = column_names[col_idx]
                if header:
                    values[header] = row[col_idx]

            keyed_rows.append(KeyedRow(row_number=offset + 2, values=values))

        return KeyedSheet(sheet_name=sheet_name, headers=headers, rows=keyed_rows)


def _populated_width(row: list[CellValue]) -> int:
    """Return the index of the last non-empty cell plus one."""
    for col_idx in range(len(row) - 1, -1, -1):
        if row[col_idx] is not None:
            return col_idx + 1
    return 0


def _fit_row(row: list[CellValue], width: int) -> list[CellValue]:
    """Pad or cut a row to exactly ``width`` cells."""
    if len(row) >= width:
        return row[:width]
    return row + [None] * (width - len(row))
