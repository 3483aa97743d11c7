"""
Render comparison results as a highlighted workbook.

The exporter only decides the layout (which value goes in which cell and
which fill it gets); XlsxWriterAdapter turns the layout into bytes.
"""

from sheetdiff.adapters.xlsxwriter_adapter import XlsxWriterAdapter
from sheetdiff.models.comparison_models import (
    CellDiff,
    ComparisonResult,
    DiffType,
    SheetComparison,
)
from sheetdiff.models.report_models import ReportCell, ReportSheet
from sheetdiff.models.workbook_models import CellValue

SHEET_NAME = "Comparison"
GRID_SEPARATOR = "|"


def _label(text: str) -> ReportCell:
    return ReportCell(text, "header")


def _summary_row(label: str, value: CellValue) -> list[ReportCell]:
    return [_label(label), ReportCell(value)]


class DiffExporter:
    """
    Builds the single-sheet comparison workbook for either mode.

    The sheet starts with a title, a summary block and a blank row,
    followed by a bold header row and one colored body row per entry.

    Attributes:
        writer: Adapter used to render the layout.

    Example:
        exporter = DiffExporter()
        data = exporter.render_keyed(result, include_unchanged=False)
    """

    def __init__(self, writer: XlsxWriterAdapter | None = None) -> None:
        """
        Initialize the DiffExporter.

        Args:
            writer: Workbook writer. If None, creates a default one.
        """
        self.writer = writer or XlsxWriterAdapter()

    def render(
        self,
        result: ComparisonResult | SheetComparison,
        include_unchanged: bool = True,
    ) -> bytes:
        """
        Render a result of either comparison mode.

        Args:
            result: Keyed or positional comparison result.
            include_unchanged: Whether unchanged entries appear in the body.

        Returns:
            The workbook as bytes.
        """
        if isinstance(result, SheetComparison):
            return self.render_grid(result, include_unchanged)
        return self.render_keyed(result, include_unchanged)

    def build_keyed_sheet(
        self,
        result: ComparisonResult,
        include_unchanged: bool = True,
    ) -> ReportSheet:
        """
        Lay out a keyed comparison.

        Body columns are Status, Changed Fields and then every header.
        Values come from the new row when present, otherwise the old row.

        Args:
            result: Keyed comparison result.
            include_unchanged: Whether unchanged rows appear in the body.

        Returns:
            The sheet layout.
        """
        summary = result.summary
        rows: list[list[ReportCell]] = [
            [ReportCell("Comparison Summary", "title", measure=False)],
            _summary_row("Key Columns:", ", ".join(result.key_columns)),
            _summary_row("Old Rows:", summary.total_old),
            _summary_row("New Rows:", summary.total_new),
            _summary_row("Added:", summary.added),
            _summary_row("Deleted:", summary.deleted),
            _summary_row("Modified:", summary.modified),
            _summary_row("Unchanged:", summary.unchanged),
            [],
            [_label("Status"), _label("Changed Fields")]
            + [_label(header) for header in result.headers],
        ]

        for diff in result.diffs:
            if diff.type is DiffType.UNCHANGED and not include_unchanged:
                continue

            style = diff.type.value
            changed = set(diff.changed_fields or [])
            source = diff.new_row or diff.old_row
            values = source.values if source is not None else {}

            row = [
                ReportCell(diff.type.value.capitalize(), style),
                ReportCell(", ".join(diff.changed_fields or []) or "-", style),
            ]
            for header in result.headers:
                cell_style = "changed" if header in changed else style
                row.append(ReportCell(values.get(header), cell_style))
            rows.append(row)

        return ReportSheet(name=SHEET_NAME, rows=rows)

    def build_grid_sheet(
        self,
        comparison: SheetComparison,
        include_unchanged: bool = True,
    ) -> ReportSheet:
        """
        Lay out a positional comparison as side-by-side old and new blocks.

        Args:
            comparison: Positional comparison result.
            include_unchanged: Whether rows without differences appear.

        Returns:
            The sheet layout.
        """
        summary = comparison.summary
        old_data = comparison.old_data
        new_data = comparison.new_data

        max_rows = max(len(old_data), len(new_data))
        max_cols = max((len(row) for row in old_data + new_data), default=0)

        header = [_label("Row")]
        header += [_label(f"Col {col + 1} (Old)") for col in range(max_cols)]
        header.append(_label(GRID_SEPARATOR))
        header += [_label(f"Col {col + 1} (New)") for col in range(max_cols)]

        rows: list[list[ReportCell]] = [
            [ReportCell("Sheet Comparison Summary", "title", measure=False)],
            _summary_row("Old Sheet:", comparison.old_sheet_name),
            _summary_row("New Sheet:", comparison.new_sheet_name),
            _summary_row("Total Cells:", summary.total_cells),
            _summary_row("Changed Cells:", summary.changed_cells),
            _summary_row("Added Rows:", summary.added_rows),
            _summary_row("Deleted Rows:", summary.deleted_rows),
            _summary_row("Added Columns:", summary.added_columns),
            _summary_row("Deleted Columns:", summary.deleted_columns),
            [],
            header,
        ]

        diff_map: dict[tuple[int, int], CellDiff] = {
            (diff.row, diff.col): diff for diff in comparison.diffs
        }
        changed_rows = {diff.row for diff in comparison.diffs}

        for row_idx in range(max_rows):
            if row_idx not in changed_rows and not include_unchanged:
                continue

            old_cells = old_data[row_idx] if row_idx < len(old_data) else []
            new_cells = new_data[row_idx] if row_idx < len(new_data) else []

            old_block = []
            new_block = []
            for col in range(max_cols):
                diff = diff_map.get((row_idx, col))
                style = diff.type.value if diff else DiffType.UNCHANGED.value
                old_value = old_cells[col] if col < len(old_cells) else None
                new_value = new_cells[col] if col < len(new_cells) else None
                old_block.append(ReportCell(old_value, style))
                new_block.append(ReportCell(new_value, style))

            rows.append(
                [ReportCell(row_idx + 1)] + old_block + [ReportCell(GRID_SEPARATOR)] + new_block
            )

        return ReportSheet(name=SHEET_NAME, rows=rows)

    def render_keyed(self, result: ComparisonResult, include_unchanged: bool = True) -> bytes:
        """Render a keyed comparison to workbook bytes."""
        sheet = self.build_keyed_sheet(result, include_unchanged)
        return self.writer.write_workbook([sheet], export_type="keyed_comparison")

    def render_grid(self, comparison: SheetComparison, include_unchanged: bool = True) -> bytes:
        """Render a positional comparison to workbook bytes."""
        sheet = self.build_grid_sheet(comparison, include_unchanged)
        return self.writer.write_workbook([sheet], export_type="grid_comparison")
