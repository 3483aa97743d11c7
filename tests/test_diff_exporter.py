"""
Tests for the DiffExporter.

Layouts are checked directly and rendered workbooks are loaded back with
openpyxl to check sheet names and fills.
"""

from io import BytesIO

from openpyxl import load_workbook

from sheetdiff.models.comparison_models import DiffType
from sheetdiff.models.workbook_models import KeyedRow, Sheet
from sheetdiff.services.comparator import Comparator
from sheetdiff.services.diff_exporter import SHEET_NAME, DiffExporter
from sheetdiff.services.key_matcher import RowKeyMatcher

HEADERS = ["InvoiceNo", "Qty", "Price"]

FILL = {
    "added": "FFC6EFCE",
    "deleted": "FFFFC7CE",
    "modified": "FFFFEB9C",
    "changed": "FFFFD966",
}


def keyed_result():
    """Keyed result with one row of each diff type."""
    old_rows = [
        KeyedRow(row_number=2, values={"InvoiceNo": "1", "Qty": 1, "Price": "17.50"}),
        KeyedRow(row_number=3, values={"InvoiceNo": "2", "Qty": 2, "Price": "5.00"}),
        KeyedRow(row_number=4, values={"InvoiceNo": "3", "Qty": 3, "Price": "9.99"}),
    ]
    new_rows = [
        KeyedRow(row_number=2, values={"InvoiceNo": "1", "Qty": 1, "Price": "18.00"}),
        KeyedRow(row_number=3, values={"InvoiceNo": "2", "Qty": 2, "Price": "5"}),
        KeyedRow(row_number=4, values={"InvoiceNo": "4", "Qty": 4, "Price": "1.00"}),
    ]
    return RowKeyMatcher().compare(old_rows, new_rows, HEADERS, ["InvoiceNo"])


def grid_comparison():
    """Grid comparison with one modified cell and one appended row."""
    old = Sheet(name="Old", index=0, row_count=2, column_count=2, data=[["A", "B"], ["1", "2"]])
    new = Sheet(
        name="New",
        index=0,
        row_count=3,
        column_count=2,
        data=[["A", "B"], ["1", "3"], ["x", "y"]],
    )
    return Comparator().compare_grid(old, new)


def load_sheet(data: bytes):
    """Load the comparison sheet of a rendered workbook."""
    workbook = load_workbook(BytesIO(data))
    assert workbook.sheetnames == [SHEET_NAME]
    return workbook[SHEET_NAME]


def find_row(worksheet, first_value) -> int:
    """Return the 1-based index of the first row whose column A equals a value."""
    for row in worksheet.iter_rows(min_col=1, max_col=1):
        if row[0].value == first_value:
            return row[0].row
    raise AssertionError(f"no row starting with {first_value!r}")


class TestDiffExporterKeyedLayout:
    """Tests for the keyed comparison layout."""

    def test_header_row_and_body(self) -> None:
        """Body columns are Status, Changed Fields and every header."""
        sheet = DiffExporter().build_keyed_sheet(keyed_result())

        values = [[cell.value for cell in row] for row in sheet.rows]
        header_index = values.index(["Status", "Changed Fields", *HEADERS])
        body = values[header_index + 1:]

        assert body == [
            ["Modified", "Price", "1", 1, "18.00"],
            ["Unchanged", "-", "2", 2, "5"],
            ["Deleted", "-", "3", 3, "9.99"],
            ["Added", "-", "4", 4, "1.00"],
        ]
        assert values[header_index - 1] == []

    def test_summary_block(self) -> None:
        """Summary counts appear above the body."""
        sheet = DiffExporter().build_keyed_sheet(keyed_result())

        summary = {
            row[0].value: row[1].value
            for row in sheet.rows
            if len(row) == 2 and str(row[0].value).endswith(":")
        }

        assert summary["Key Columns:"] == "InvoiceNo"
        assert summary["Added:"] == 1
        assert summary["Deleted:"] == 1
        assert summary["Modified:"] == 1
        assert summary["Unchanged:"] == 1

    def test_unchanged_rows_can_be_omitted(self) -> None:
        """Unchanged rows are left out of the body but still counted."""
        sheet = DiffExporter().build_keyed_sheet(keyed_result(), include_unchanged=False)

        statuses = [row[0].value for row in sheet.rows if row and row[0].style in FILL]
        assert statuses == ["Modified", "Deleted", "Added"]

        summary = {row[0].value: row[1].value for row in sheet.rows if len(row) == 2}
        assert summary["Unchanged:"] == 1

    def test_changed_cells_are_highlighted(self) -> None:
        """In modified rows, changed cells use the stronger style."""
        sheet = DiffExporter().build_keyed_sheet(keyed_result())
        modified_row = next(row for row in sheet.rows if row and row[0].value == "Modified")

        styles = [cell.style for cell in modified_row]
        assert styles == ["modified", "modified", "modified", "modified", "changed"]


class TestDiffExporterKeyedWorkbook:
    """Tests for the rendered keyed workbook."""

    def test_rendered_fills(self) -> None:
        """Row fills follow diff types."""
        worksheet = load_sheet(DiffExporter().render_keyed(keyed_result()))

        added = find_row(worksheet, "Added")
        deleted = find_row(worksheet, "Deleted")
        modified = find_row(worksheet, "Modified")

        assert worksheet.cell(added, 3).fill.fgColor.rgb == FILL["added"]
        assert worksheet.cell(deleted, 3).fill.fgColor.rgb == FILL["deleted"]
        assert worksheet.cell(modified, 3).fill.fgColor.rgb == FILL["modified"]
        assert worksheet.cell(modified, 5).fill.fgColor.rgb == FILL["changed"]

    def test_render_dispatches_on_result_type(self) -> None:
        """render accepts results of both modes."""
        exporter = DiffExporter()

        keyed = load_sheet(exporter.render(keyed_result()))
        grid = load_sheet(exporter.render(grid_comparison()))

        assert find_row(keyed, "Status") > 0
        assert find_row(grid, "Row") > 0


class TestDiffExporterGrid:
    """Tests for the positional comparison layout."""

    def test_side_by_side_header(self) -> None:
        """Old and new blocks are separated by a divider column."""
        sheet = DiffExporter().build_grid_sheet(grid_comparison())

        headers = [[cell.value for cell in row] for row in sheet.rows]
        assert ["Row", "Col 1 (Old)", "Col 2 (Old)", "|", "Col 1 (New)", "Col 2 (New)"] in headers

    def test_body_rows_and_styles(self) -> None:
        """Each sheet row becomes one body row with differing cells styled."""
        sheet = DiffExporter().build_grid_sheet(grid_comparison())
        values = [[cell.value for cell in row] for row in sheet.rows]
        start = values.index(["Row", "Col 1 (Old)", "Col 2 (Old)", "|", "Col 1 (New)", "Col 2 (New)"]) + 1
        body = sheet.rows[start:]

        assert [[cell.value for cell in row] for row in body] == [
            [1, "A", "B", "|", "A", "B"],
            [2, "1", "2", "|", "1", "3"],
            [3, None, None, "|", "x", "y"],
        ]
        assert body[1][2].style == DiffType.MODIFIED.value
        assert body[1][5].style == DiffType.MODIFIED.value
        assert body[1][1].style == DiffType.UNCHANGED.value
        assert body[2][4].style == DiffType.ADDED.value

    def test_rows_without_changes_can_be_omitted(self) -> None:
        """With include_unchanged off, only rows with differences remain."""
        sheet = DiffExporter().build_grid_sheet(grid_comparison(), include_unchanged=False)

        row_numbers = [
            row[0].value for row in sheet.rows if len(row) == 6 and isinstance(row[0].value, int)
        ]
        assert row_numbers == [2, 3]

    def test_rendered_grid_fills(self) -> None:
        """Modified cells are amber in both blocks of the rendered sheet."""
        worksheet = load_sheet(DiffExporter().render_grid(grid_comparison()))
        row = find_row(worksheet, 2)

        assert worksheet.cell(row, 3).value == "2"
        assert worksheet.cell(row, 3).fill.fgColor.rgb == FILL["modified"]
        assert worksheet.cell(row, 6).value == "3"
        assert worksheet.cell(row, 6).fill.fgColor.rgb == FILL["modified"]
