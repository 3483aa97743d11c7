"""
XlsxWriter adapter for rendering export workbooks.

This module provides the XlsxWriterAdapter class that wraps XlsxWriter for
rendering report layouts into workbook bytes. Workbooks are built entirely
in memory so the result can be returned as a download or handed to the
blob store without touching the local filesystem.

Features:
    - In-memory rendering to bytes
    - Named cell styles (diff colors, headers, banners)
    - Auto-sized column widths with a clamped maximum
    - Frozen header rows and merged title cells

Example:
    adapter = XlsxWriterAdapter()
    data = adapter.write_workbook([
        ReportSheet(
            name="Comparison",
            rows=[[ReportCell("Status", "header")], [ReportCell("added", "added")]],
        )
    ])
"""

from datetime import date, datetime
from io import BytesIO
from typing import Any

import xlsxwriter
from xlsxwriter.format import Format
from xlsxwriter.workbook import Workbook
from xlsxwriter.worksheet import Worksheet

from sheetdiff.exceptions.comparison_exceptions import ExportError
from sheetdiff.models.report_models import ReportCell, ReportSheet


class XlsxWriterAdapter:
    """
    Adapter for XlsxWriter rendering operations.

    Attributes:
        STYLES: Format properties for each named style.

    Example:
        adapter = XlsxWriterAdapter()
        data = adapter.write_workbook([sheet])
        with open("report.xlsx", "wb") as f:
            f.write(data)
    """

    STYLES: dict[str, dict[str, Any]] = {
        "title": {"bold": True, "font_size": 14},
        "banner": {
            "bold": True,
            "font_size": 16,
            "font_color": "#FFFFFF",
            "bg_color": "#2E75B6",
            "align": "center",
            "valign": "vcenter",
        },
        "section": {
            "bold": True,
            "font_size": 14,
            "font_color": "#FFFFFF",
            "bg_color": "#4472C4",
            "align": "center",
            "valign": "vcenter",
        },
        "label": {"bold": True, "bg_color": "#E7E6E6", "border": 1},
        "header": {"bold": True, "bg_color": "#D3D3D3", "border": 1},
        "table_header": {
            "bold": True,
            "font_color": "#FFFFFF",
            "bg_color": "#70AD47",
            "border": 2,
            "align": "center",
            "valign": "vcenter",
            "text_wrap": True,
        },
        "cell": {"border": 1},
        "zebra": {"border": 1, "bg_color": "#F2F2F2"},
        "added": {"bg_color": "#C6EFCE", "border": 1},
        "deleted": {"bg_color": "#FFC7CE", "border": 1},
        "modified": {"bg_color": "#FFEB9C", "border": 1},
        "changed": {"bold": True, "bg_color": "#FFD966", "border": 1},
        "unchanged": {"bg_color": "#FFFFFF", "border": 1},
    }

    def _create_formats(self, workbook: Workbook) -> dict[str, Format]:
        """
        Register every named style on the workbook.

        Args:
            workbook: Workbook being rendered.

        Returns:
            Mapping of style name to XlsxWriter format.
        """
        return {name: workbook.add_format(props) for name, props in self.STYLES.items()}

    def _calculate_column_widths(self, sheet: ReportSheet) -> list[int]:
        """
        Calculate column widths based on content.

        Args:
            sheet: Sheet layout.

        Returns:
            List of column widths, one per column.
        """
        if not sheet.rows:
            return []

        max_cols = max(len(row) for row in sheet.rows)
        widths = [sheet.min_column_width] * max_cols

        for row in sheet.rows:
            for col_idx, cell in enumerate(row):
                if cell.value is None or not cell.measure:
                    continue
                cell_width = min(
                    len(str(cell.value)) + sheet.column_padding,
                    sheet.max_column_width,
                )
                widths[col_idx] = max(widths[col_idx], cell_width)

        return widths

    def _write_cell(
        self,
        worksheet: Worksheet,
        row: int,
        col: int,
        value: Any,
        cell_format: Format | None = None,
    ) -> None:
        """
        Write a value to a cell with appropriate type handling.

        Strings are always written as strings, never as formulas.

        Args:
            worksheet: The worksheet to write to.
            row: Row index (0-based).
            col: Column index (0-based).
            value: Value to write.
            cell_format: Optional format to apply.
        """
        if value is None:
            worksheet.write_blank(row, col, None, cell_format)
        elif isinstance(value, bool):
            worksheet.write_boolean(row, col, value, cell_format)
        elif isinstance(value, (int, float)):
            worksheet.write_number(row, col, value, cell_format)
        elif isinstance(value, (datetime, date)):
            worksheet.write_string(row, col, value.isoformat(), cell_format)
        else:
            worksheet.write_string(row, col, str(value), cell_format)

    def _write_sheet(
        self,
        workbook: Workbook,
        sheet: ReportSheet,
        formats: dict[str, Format],
    ) -> None:
        worksheet = workbook.add_worksheet(sheet.name)

        merge_anchors = {(first_row, first_col) for first_row, first_col, _, _ in sheet.merges}

        for row_idx, row in enumerate(sheet.rows):
            for col_idx, cell in enumerate(row):
                if (row_idx, col_idx) in merge_anchors:
                    continue
                cell_format = formats.get(cell.style) if cell.style else None
                self._write_cell(worksheet, row_idx, col_idx, cell.value, cell_format)

        for first_row, first_col, last_row, last_col in sheet.merges:
            anchor = sheet.rows[first_row][first_col]
            anchor_format = formats.get(anchor.style) if anchor.style else None
            if (first_row, first_col) == (last_row, last_col):
                self._write_cell(worksheet, first_row, first_col, anchor.value, anchor_format)
            else:
                worksheet.merge_range(
                    first_row,
                    first_col,
                    last_row,
                    last_col,
                    anchor.value,
                    anchor_format,
                )

        for row_idx, height in sheet.row_heights.items():
            worksheet.set_row(row_idx, height)

        for col_idx, width in enumerate(self._calculate_column_widths(sheet)):
            worksheet.set_column(col_idx, col_idx, width)

        if sheet.freeze_rows:
            worksheet.freeze_panes(sheet.freeze_rows, 0)

    def write_workbook(self, sheets: list[ReportSheet], export_type: str = "report") -> bytes:
        """
        Render sheet layouts into workbook bytes.

        Args:
            sheets: Sheet layouts in workbook order.
            export_type: Kind of export, used in error messages.

        Returns:
            The rendered .xlsx file as bytes.

        Raises:
            ExportError: If rendering fails.
        """
        if not sheets:
            raise ExportError(export_type=export_type, reason="No sheets to write")

        output = BytesIO()
        workbook: Workbook | None = None
        try:
            workbook = xlsxwriter.Workbook(output, {"in_memory": True})
            formats = self._create_formats(workbook)

            for sheet in sheets:
                self._write_sheet(workbook, sheet, formats)

            workbook.close()
            workbook = None

            return output.getvalue()

        except Exception as e:
            raise ExportError(
                export_type=export_type,
                reason=str(e),
            ) from e
        finally:
            if workbook is not None:
                try:
                    workbook.close()
                except Exception:
                    pass
