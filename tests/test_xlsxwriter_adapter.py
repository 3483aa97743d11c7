"""
Tests for the XlsxWriterAdapter.

Rendered workbooks are loaded back with openpyxl to inspect styles and
layout.
"""

from io import BytesIO

import pytest
from openpyxl import load_workbook

from sheetdiff.adapters.xlsxwriter_adapter import XlsxWriterAdapter
from sheetdiff.exceptions.comparison_exceptions import ExportError
from sheetdiff.models.report_models import ReportCell, ReportSheet


def load(data: bytes):
    """Load rendered workbook bytes with openpyxl."""
    return load_workbook(BytesIO(data))


class TestXlsxWriterAdapterRendering:
    """Tests for rendering sheet layouts."""

    def test_write_workbook_returns_xlsx_bytes(self, xlsxwriter_adapter: XlsxWriterAdapter) -> None:
        """The result is a zip-based .xlsx file."""
        data = xlsxwriter_adapter.write_workbook(
            [ReportSheet(name="Report", rows=[[ReportCell("Hello")]])]
        )

        assert data[:2] == b"PK"
        assert load(data).sheetnames == ["Report"]

    def test_values_keep_their_types(self, xlsxwriter_adapter: XlsxWriterAdapter) -> None:
        """Numbers, booleans, text and blanks are written as such."""
        sheet = ReportSheet(
            name="Types",
            rows=[[ReportCell(42), ReportCell(2.5), ReportCell(True), ReportCell("text"), ReportCell(None)]],
        )

        worksheet = load(xlsxwriter_adapter.write_workbook([sheet]))["Types"]

        assert worksheet["A1"].value == 42
        assert worksheet["B1"].value == 2.5
        assert worksheet["C1"].value is True
        assert worksheet["D1"].value == "text"
        assert worksheet["E1"].value is None

    def test_formula_like_text_is_written_as_text(self, xlsxwriter_adapter: XlsxWriterAdapter) -> None:
        """Cell text starting with '=' is never turned into a formula."""
        sheet = ReportSheet(name="Text", rows=[[ReportCell("=SUM(A2:A9)")]])

        worksheet = load(xlsxwriter_adapter.write_workbook([sheet]))["Text"]

        assert worksheet["A1"].value == "=SUM(A2:A9)"
        assert worksheet["A1"].data_type == "s"

    def test_named_styles_set_fills(self, xlsxwriter_adapter: XlsxWriterAdapter) -> None:
        """Diff styles map to their fill colors."""
        sheet = ReportSheet(
            name="Fills",
            rows=[
                [
                    ReportCell("a", "added"),
                    ReportCell("d", "deleted"),
                    ReportCell("m", "modified"),
                    ReportCell("h", "header"),
                ]
            ],
        )

        worksheet = load(xlsxwriter_adapter.write_workbook([sheet]))["Fills"]

        assert worksheet["A1"].fill.fgColor.rgb == "FFC6EFCE"
        assert worksheet["B1"].fill.fgColor.rgb == "FFFFC7CE"
        assert worksheet["C1"].fill.fgColor.rgb == "FFFFEB9C"
        assert worksheet["D1"].fill.fgColor.rgb == "FFD3D3D3"
        assert worksheet["D1"].font.bold is True

    def test_merges_freeze_and_row_heights(self, xlsxwriter_adapter: XlsxWriterAdapter) -> None:
        """Merged ranges, frozen rows and row heights are applied."""
        sheet = ReportSheet(
            name="Layout",
            rows=[[ReportCell("Title", "banner")], [], [ReportCell("A"), ReportCell("B")]],
            merges=[(0, 0, 0, 1)],
            freeze_rows=3,
            row_heights={0: 30},
        )

        worksheet = load(xlsxwriter_adapter.write_workbook([sheet]))["Layout"]

        assert "A1:B1" in {str(rng) for rng in worksheet.merged_cells.ranges}
        assert worksheet["A1"].value == "Title"
        assert worksheet.freeze_panes == "A4"
        assert worksheet.row_dimensions[1].height == 30

    def test_multiple_sheets(self, xlsxwriter_adapter: XlsxWriterAdapter) -> None:
        """Sheets are written in order."""
        data = xlsxwriter_adapter.write_workbook(
            [ReportSheet(name="First"), ReportSheet(name="Second")]
        )

        assert load(data).sheetnames == ["First", "Second"]


class TestXlsxWriterAdapterColumnWidths:
    """Tests for auto-sized column widths."""

    def test_widths_follow_content(self, xlsxwriter_adapter: XlsxWriterAdapter) -> None:
        """Width is the longest value plus padding, but at least the minimum."""
        sheet = ReportSheet(
            name="Widths",
            rows=[[ReportCell("x"), ReportCell("a" * 20)]],
        )

        widths = xlsxwriter_adapter._calculate_column_widths(sheet)

        assert widths == [10, 22]

    def test_widths_are_clamped(self, xlsxwriter_adapter: XlsxWriterAdapter) -> None:
        """Very long values do not produce very wide columns."""
        sheet = ReportSheet(name="Widths", rows=[[ReportCell("a" * 500)]])

        assert xlsxwriter_adapter._calculate_column_widths(sheet) == [50]

    def test_unmeasured_cells_are_ignored(self, xlsxwriter_adapter: XlsxWriterAdapter) -> None:
        """Titles marked as unmeasured do not widen their column."""
        sheet = ReportSheet(
            name="Widths",
            rows=[[ReportCell("A very long report title", measure=False)], [ReportCell("ok")]],
        )

        assert xlsxwriter_adapter._calculate_column_widths(sheet) == [10]

    def test_sheet_limits_are_used(self, xlsxwriter_adapter: XlsxWriterAdapter) -> None:
        """Per-sheet minimum, maximum and padding apply."""
        sheet = ReportSheet(
            name="Widths",
            rows=[[ReportCell("abc"), ReportCell("a" * 100)]],
            min_column_width=12,
            max_column_width=40,
            column_padding=3,
        )

        assert xlsxwriter_adapter._calculate_column_widths(sheet) == [12, 40]


class TestXlsxWriterAdapterErrors:
    """Tests for rendering failures."""

    def test_no_sheets_raises_export_error(self, xlsxwriter_adapter: XlsxWriterAdapter) -> None:
        """Rendering nothing is an error."""
        with pytest.raises(ExportError) as exc_info:
            xlsxwriter_adapter.write_workbook([], export_type="keyed_comparison")

        assert exc_info.value.error_code == "EXPORT_ERROR"
        assert exc_info.value.export_type == "keyed_comparison"

    def test_invalid_sheet_name_raises_export_error(self, xlsxwriter_adapter: XlsxWriterAdapter) -> None:
        """Library errors are wrapped in ExportError."""
        with pytest.raises(ExportError):
            xlsxwriter_adapter.write_workbook([ReportSheet(name="bad/name")])
