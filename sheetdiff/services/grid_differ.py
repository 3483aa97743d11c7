"""
Positional comparison: compare two sheets cell by cell.

Cells are matched purely by (row, column) coordinate. There is no
realignment, so a row inserted near the top of a sheet shows up as
modified cells in every row below it; keyed comparison is the mode that
handles insertions.
"""

from sheetdiff.models.comparison_models import (
    CellDiff,
    DiffType,
    SheetComparison,
    SheetComparisonSummary,
)
from sheetdiff.models.workbook_models import CellValue, Sheet
from sheetdiff.services.normalizer import ValueNormalizer


class CellGridDiffer:
    """
    Reports the cells that differ between two sheets.

    Unchanged cells are not emitted. Row and column additions/deletions
    are the positive differences between the two sheets' dimensions.

    Attributes:
        normalizer: Value normalizer used for cell equality.
    """

    def __init__(self, normalizer: ValueNormalizer | None = None) -> None:
        """
        Initialize the CellGridDiffer.

        Args:
            normalizer: Value normalizer. If None, creates a default one.
        """
        self.normalizer = normalizer or ValueNormalizer()

    @staticmethod
    def _cell(data: list[list[CellValue]], row: int, col: int) -> CellValue:
        if row >= len(data):
            return None
        cells = data[row]
        if col >= len(cells):
            return None
        return cells[col]

    def classify(self, old_value: CellValue, new_value: CellValue) -> DiffType:
        """
        Classify a pair of cell values.

        Args:
            old_value: Value in the old sheet.
            new_value: Value in the new sheet.

        Returns:
            The diff type of the cell.
        """
        if self.normalizer.equal(old_value, new_value):
            return DiffType.UNCHANGED
        if old_value is None:
            return DiffType.ADDED
        if new_value is None:
            return DiffType.DELETED
        return DiffType.MODIFIED

    def compare(self, old_sheet: Sheet, new_sheet: Sheet) -> SheetComparison:
        """
        Compare two sheets over the union of their dimensions.

        Args:
            old_sheet: The old (reference) sheet.
            new_sheet: The new sheet.

        Returns:
            SheetComparison listing only the differing cells, row-major.
        """
        old_data = old_sheet.data
        new_data = new_sheet.data

        max_rows = max(len(old_data), len(new_data))
        max_cols = max(old_sheet.column_count, new_sheet.column_count)

        diffs: list[CellDiff] = []
        for row in range(max_rows):
            for col in range(max_cols):
                old_value = self._cell(old_data, row, col)
                new_value = self._cell(new_data, row, col)

                diff_type = self.classify(old_value, new_value)
                if diff_type is DiffType.UNCHANGED:
                    continue

                diffs.append(
                    CellDiff(
                        row=row,
                        col=col,
                        type=diff_type,
                        old_value=old_value,
                        new_value=new_value,
                    )
                )

        return SheetComparison(
            old_sheet_name=old_sheet.name,
            new_sheet_name=new_sheet.name,
            summary=SheetComparisonSummary(
                total_cells=max_rows * max_cols,
                changed_cells=len(diffs),
                added_rows=max(0, len(new_data) - len(old_data)),
                deleted_rows=max(0, len(old_data) - len(new_data)),
                added_columns=max(0, new_sheet.column_count - old_sheet.column_count),
                deleted_columns=max(0, old_sheet.column_count - new_sheet.column_count),
            ),
            diffs=diffs,
            old_data=old_data,
            new_data=new_data,
        )
