"""
Tests for keyed comparison (RowKeyMatcher and Comparator.compare_keyed).
"""

import pytest

from sheetdiff.exceptions.comparison_exceptions import (
    NoKeyColumnsError,
    UnknownKeyColumnError,
)
from sheetdiff.models.comparison_models import DiffType
from sheetdiff.models.workbook_models import KeyedRow, KeyedSheet
from sheetdiff.services.comparator import Comparator
from sheetdiff.services.key_matcher import RowKeyMatcher


def make_rows(headers: list[str], rows: list[list]) -> list[KeyedRow]:
    """Build keyed rows from a header list and value lists."""
    return [
        KeyedRow(row_number=index + 2, values=dict(zip(headers, values)))
        for index, values in enumerate(rows)
    ]


HEADERS = ["InvoiceNo", "Qty", "Price"]


@pytest.fixture
def matcher(normalizer) -> RowKeyMatcher:
    """Create a RowKeyMatcher with the default normalizer."""
    return RowKeyMatcher(normalizer)


class TestRowKeyMatcherClassification:
    """Tests for row classification."""

    def test_modified_row_reports_changed_fields(self, matcher: RowKeyMatcher) -> None:
        """A changed price is reported as a modified row with that field."""
        old_rows = make_rows(HEADERS, [["1", "20.640", "17.50"]])
        new_rows = make_rows(HEADERS, [["1", "20.640", "18.00"]])

        result = matcher.compare(old_rows, new_rows, HEADERS, ["InvoiceNo"])

        assert len(result.diffs) == 1
        diff = result.diffs[0]
        assert diff.type == DiffType.MODIFIED
        assert diff.changed_fields == ["Price"]
        assert diff.old_row.get("Price") == "17.50"
        assert diff.new_row.get("Price") == "18.00"

    def test_added_and_deleted_rows(self, matcher: RowKeyMatcher) -> None:
        """Keys only on one side are added or deleted."""
        old_rows = make_rows(HEADERS, [["1", "1", "10"], ["2", "2", "20"]])
        new_rows = make_rows(HEADERS, [["2", "2", "20"], ["3", "3", "30"]])

        result = matcher.compare(old_rows, new_rows, HEADERS, ["InvoiceNo"])

        by_key = {diff.key: diff for diff in result.diffs}
        assert by_key["1"].type == DiffType.DELETED
        assert by_key["1"].new_row is None
        assert by_key["2"].type == DiffType.UNCHANGED
        assert by_key["3"].type == DiffType.ADDED
        assert by_key["3"].old_row is None
        assert result.summary.added == 1
        assert result.summary.deleted == 1
        assert result.summary.unchanged == 1
        assert result.summary.modified == 0

    def test_diff_order_old_keys_first(self, matcher: RowKeyMatcher) -> None:
        """Old keys come first in old order, then new-only keys."""
        old_rows = make_rows(HEADERS, [["b", 1, 1], ["a", 1, 1]])
        new_rows = make_rows(HEADERS, [["c", 1, 1], ["a", 1, 1]])

        result = matcher.compare(old_rows, new_rows, HEADERS, ["InvoiceNo"])

        assert [diff.key for diff in result.diffs] == ["b", "a", "c"]

    def test_formatting_differences_are_unchanged(self, matcher: RowKeyMatcher) -> None:
        """Trailing zeros and case differences do not make a row modified."""
        headers = ["InvoiceNo", "Price", "Status"]
        old_rows = make_rows(headers, [["1", "17.50", "Paid"]])
        new_rows = make_rows(headers, [["1", 17.5, " paid"]])

        result = matcher.compare(old_rows, new_rows, headers, ["InvoiceNo"])

        assert result.diffs[0].type == DiffType.UNCHANGED
        assert result.diffs[0].changed_fields is None

    def test_keys_are_normalized(self, matcher: RowKeyMatcher) -> None:
        """Keys match regardless of case and surrounding whitespace."""
        old_rows = make_rows(HEADERS, [[" INV-1 ", 1, 1]])
        new_rows = make_rows(HEADERS, [["inv-1", 1, 1]])

        result = matcher.compare(old_rows, new_rows, HEADERS, ["InvoiceNo"])

        assert len(result.diffs) == 1
        assert result.diffs[0].key == "inv-1"
        assert result.diffs[0].type == DiffType.UNCHANGED

    def test_composite_key(self, matcher: RowKeyMatcher) -> None:
        """Several key columns are joined into one composite key."""
        headers = ["InvoiceNo", "Line", "Price"]
        old_rows = make_rows(headers, [["1", 1, 10], ["1", 2, 20]])
        new_rows = make_rows(headers, [["1", 1, 10], ["1", 2, 25]])

        result = matcher.compare(old_rows, new_rows, headers, ["InvoiceNo", "Line"])

        assert [diff.key for diff in result.diffs] == ["1|1", "1|2"]
        assert [diff.type for diff in result.diffs] == [DiffType.UNCHANGED, DiffType.MODIFIED]

    def test_missing_field_against_value_is_modified(self, matcher: RowKeyMatcher) -> None:
        """A field absent on one side differs from a populated field."""
        headers = ["InvoiceNo", "Note"]
        old_rows = [KeyedRow(row_number=2, values={"InvoiceNo": "1"})]
        new_rows = make_rows(headers, [["1", "urgent"]])

        result = matcher.compare(old_rows, new_rows, headers, ["InvoiceNo"])

        assert result.diffs[0].type == DiffType.MODIFIED
        assert result.diffs[0].changed_fields == ["Note"]

    def test_duplicate_keys_last_row_wins(self, matcher: RowKeyMatcher) -> None:
        """A later row with the same key replaces the earlier one."""
        old_rows = make_rows(HEADERS, [["1", 1, 10], ["1", 1, 12]])
        new_rows = make_rows(HEADERS, [["1", 1, 12]])

        result = matcher.compare(old_rows, new_rows, HEADERS, ["InvoiceNo"])

        assert len(result.diffs) == 1
        assert result.diffs[0].type == DiffType.UNCHANGED
        assert result.summary.total_old == 2
        assert result.summary.total_new == 1


class TestRowKeyMatcherErrors:
    """Tests for key column validation."""

    def test_unknown_key_column(self, matcher: RowKeyMatcher) -> None:
        """An unknown key column raises UnknownKeyColumnError naming it."""
        rows = make_rows(HEADERS, [["1", 1, 1]])

        with pytest.raises(UnknownKeyColumnError) as exc_info:
            matcher.compare(rows, rows, HEADERS, ["NonExistentColumn"])

        assert exc_info.value.error_code == "UNKNOWN_KEY_COLUMN"
        assert exc_info.value.missing_columns == ["NonExistentColumn"]
        assert "NonExistentColumn" in exc_info.value.message

    def test_no_key_columns(self, matcher: RowKeyMatcher) -> None:
        """An empty key list raises NoKeyColumnsError."""
        rows = make_rows(HEADERS, [["1", 1, 1]])

        with pytest.raises(NoKeyColumnsError) as exc_info:
            matcher.compare(rows, rows, HEADERS, [])

        assert exc_info.value.error_code == "NO_KEY_COLUMNS"


class TestKeyedComparisonProperties:
    """Properties that hold for any keyed comparison."""

    OLD = make_rows(HEADERS, [["1", 1, 10], ["2", 2, 20], ["3", 3, 30], ["5", 5, 50]])
    NEW = make_rows(HEADERS, [["2", 2, 21], ["3", 3, 30], ["4", 4, 40]])

    def test_self_comparison_has_no_changes(self, matcher: RowKeyMatcher) -> None:
        """Comparing rows against themselves finds only unchanged rows."""
        result = matcher.compare(self.OLD, self.OLD, HEADERS, ["InvoiceNo"])

        assert all(diff.type == DiffType.UNCHANGED for diff in result.diffs)
        assert result.summary.unchanged == len(self.OLD)

    def test_swapping_sides_swaps_added_and_deleted(self, matcher: RowKeyMatcher) -> None:
        """added under (old, new) equals deleted under (new, old)."""
        forward = matcher.compare(self.OLD, self.NEW, HEADERS, ["InvoiceNo"]).summary
        backward = matcher.compare(self.NEW, self.OLD, HEADERS, ["InvoiceNo"]).summary

        assert forward.added == backward.deleted
        assert forward.deleted == backward.added
        assert forward.modified == backward.modified

    def test_every_row_is_accounted_for(self, matcher: RowKeyMatcher) -> None:
        """Each old and new row appears in exactly one diff."""
        result = matcher.compare(self.OLD, self.NEW, HEADERS, ["InvoiceNo"])

        old_seen = [diff.old_row.row_number for diff in result.diffs if diff.old_row]
        new_seen = [diff.new_row.row_number for diff in result.diffs if diff.new_row]

        assert sorted(old_seen) == [row.row_number for row in self.OLD]
        assert sorted(new_seen) == [row.row_number for row in self.NEW]

    def test_summary_counts_match_diffs(self, matcher: RowKeyMatcher) -> None:
        """Summary counts add up to the number of diffs."""
        result = matcher.compare(self.OLD, self.NEW, HEADERS, ["InvoiceNo"])
        summary = result.summary

        assert summary.added + summary.deleted + summary.modified + summary.unchanged == len(
            result.diffs
        )
        assert (summary.added, summary.deleted, summary.modified, summary.unchanged) == (1, 2, 1, 1)


class TestComparatorKeyed:
    """Tests for Comparator.compare_keyed."""

    def test_headers_are_merged_old_first(self) -> None:
        """Headers present only in the new sheet are appended."""
        old = KeyedSheet(
            sheet_name="Old",
            headers=["InvoiceNo", "Price"],
            rows=make_rows(["InvoiceNo", "Price"], [["1", 10]]),
        )
        new = KeyedSheet(
            sheet_name="New",
            headers=["Price", "InvoiceNo", "Discount"],
            rows=make_rows(["Price", "InvoiceNo", "Discount"], [[10, "1", 2]]),
        )

        result = Comparator().compare_keyed(old, new, ["InvoiceNo"])

        assert result.headers == ["InvoiceNo", "Price", "Discount"]
        assert result.key_columns == ["InvoiceNo"]
        assert result.diffs[0].changed_fields == ["Discount"]

    def test_key_column_only_in_new_sheet_is_accepted(self) -> None:
        """A key column known to either side is valid."""
        old = KeyedSheet(sheet_name="Old", headers=["Price"], rows=make_rows(["Price"], [[10]]))
        new = KeyedSheet(
            sheet_name="New",
            headers=["Price", "Code"],
            rows=make_rows(["Price", "Code"], [[10, "A"]]),
        )

        result = Comparator().compare_keyed(old, new, ["Code"])

        assert {diff.type for diff in result.diffs} == {DiffType.ADDED, DiffType.DELETED}
