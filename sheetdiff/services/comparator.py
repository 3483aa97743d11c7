"""
Single comparison capability with keyed and positional modes.

Both modes share one ValueNormalizer, so the same trimming, case-folding
and numeric tolerance apply whichever mode a caller picks.
"""

from sheetdiff.models.comparison_models import ComparisonResult, SheetComparison
from sheetdiff.models.workbook_models import KeyedSheet, Sheet
from sheetdiff.services.grid_differ import CellGridDiffer
from sheetdiff.services.key_matcher import RowKeyMatcher
from sheetdiff.services.normalizer import ValueNormalizer
from sheetdiff.utils.logging import get_logger, timed_operation

logger = get_logger(__name__)


class Comparator:
    """
    Compares sheets by composite key or by cell position.

    Attributes:
        normalizer: Value normalizer shared by both modes.
        key_matcher: Keyed comparison strategy.
        grid_differ: Positional comparison strategy.

    Example:
        comparator = Comparator()
        result = comparator.compare_keyed(old_keyed, new_keyed, ["InvoiceNo"])
        comparison = comparator.compare_grid(old_sheet, new_sheet)
    """

    def __init__(self, normalizer: ValueNormalizer | None = None) -> None:
        """
        Initialize the Comparator.

        Args:
            normalizer: Value normalizer. If None, creates a default one.
        """
        self.normalizer = normalizer or ValueNormalizer()
        self.key_matcher = RowKeyMatcher(self.normalizer)
        self.grid_differ = CellGridDiffer(self.normalizer)

    @staticmethod
    def merge_headers(old_headers: list[str], new_headers: list[str]) -> list[str]:
        """
        Union of two header lists, old order first then new-only headers.

        Args:
            old_headers: Headers of the old sheet.
            new_headers: Headers of the new sheet.

        Returns:
            Merged header list without duplicates.
        """
        merged = list(old_headers)
        seen = set(merged)
        for header in new_headers:
            if header not in seen:
                merged.append(header)
                seen.add(header)
        return merged

    def compare_keyed(
        self,
        old_sheet: KeyedSheet,
        new_sheet: KeyedSheet,
        key_columns: list[str],
    ) -> ComparisonResult:
        """
        Compare two keyed sheets.

        Args:
            old_sheet: Rows of the old workbook's first sheet.
            new_sheet: Rows of the new workbook's first sheet.
            key_columns: Ordered key column names.

        Returns:
            ComparisonResult for the two sheets.

        Raises:
            NoKeyColumnsError: If no key columns were given.
            UnknownKeyColumnError: If any key column is not a header.
        """
        headers = self.merge_headers(old_sheet.headers, new_sheet.headers)

        with timed_operation(logger, "keyed_comparison") as timing:
            result = self.key_matcher.compare(
                old_sheet.rows,
                new_sheet.rows,
                headers,
                key_columns,
            )
            timing.metrics.update(result.summary.model_dump())

        logger.info(
            "Keyed comparison completed",
            key_columns=",".join(key_columns),
            added=result.summary.added,
            deleted=result.summary.deleted,
            modified=result.summary.modified,
            unchanged=result.summary.unchanged,
        )
        return result

    def compare_grid(self, old_sheet: Sheet, new_sheet: Sheet) -> SheetComparison:
        """
        Compare two sheets cell by cell.

        Args:
            old_sheet: The old (reference) sheet.
            new_sheet: The new sheet.

        Returns:
            SheetComparison for the two sheets.
        """
        with timed_operation(logger, "grid_comparison") as timing:
            comparison = self.grid_differ.compare(old_sheet, new_sheet)
            timing.metrics["changed_cells"] = comparison.summary.changed_cells

        logger.info(
            "Grid comparison completed",
            old_sheet=old_sheet.name,
            new_sheet=new_sheet.name,
            total_cells=comparison.summary.total_cells,
            changed_cells=comparison.summary.changed_cells,
        )
        return comparison
