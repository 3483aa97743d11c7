"""
Keyed comparison: match rows between two sheets by composite key.

Rows are matched on the normalized values of the caller's key columns, so
inserted or deleted rows do not shift the comparison of the rows around
them.
"""

from collections.abc import Iterable

from sheetdiff.exceptions.comparison_exceptions import (
    NoKeyColumnsError,
    UnknownKeyColumnError,
)
from sheetdiff.models.comparison_models import (
    ComparisonResult,
    ComparisonSummary,
    DiffType,
    RowDiff,
)
from sheetdiff.models.workbook_models import KeyedRow
from sheetdiff.services.normalizer import ValueNormalizer

KEY_SEPARATOR = "|"


class RowKeyMatcher:
    """
    Classifies rows as added, deleted, modified or unchanged by key.

    Within one side, a later row with the same key replaces an earlier
    one; the totals in the summary still count every input row.

    Attributes:
        normalizer: Value normalizer used for keys and field equality.

    Example:
        matcher = RowKeyMatcher(ValueNormalizer())
        result = matcher.compare(old_rows, new_rows, headers, ["InvoiceNo"])
    """

    def __init__(self, normalizer: ValueNormalizer | None = None) -> None:
        """
        Initialize the RowKeyMatcher.

        Args:
            normalizer: Value normalizer. If None, creates a default one.
        """
        self.normalizer = normalizer or ValueNormalizer()

    def build_key(self, row: KeyedRow, key_columns: list[str]) -> str:
        """
        Build the composite key of a row.

        Args:
            row: The row.
            key_columns: Ordered key column names.

        Returns:
            Normalized key values joined by the key separator.
        """
        return KEY_SEPARATOR.join(
            self.normalizer.key_part(row.get(column)) for column in key_columns
        )

    def validate_key_columns(self, headers: list[str], key_columns: list[str]) -> None:
        """
        Check that key columns were given and all exist in the headers.

        Args:
            headers: Union of old and new headers.
            key_columns: Requested key columns.

        Raises:
            NoKeyColumnsError: If no key columns were given.
            UnknownKeyColumnError: If any key column is not a header.
        """
        if not key_columns:
            raise NoKeyColumnsError()

        known = set(headers)
        missing = [column for column in key_columns if column not in known]
        if missing:
            raise UnknownKeyColumnError(
                missing_columns=missing,
                available_headers=headers,
            )

    def _index_rows(self, rows: Iterable[KeyedRow], key_columns: list[str]) -> dict[str, KeyedRow]:
        indexed: dict[str, KeyedRow] = {}
        for row in rows:
            indexed[self.build_key(row, key_columns)] = row
        return indexed

    def changed_fields(self, old_row: KeyedRow, new_row: KeyedRow, headers: list[str]) -> list[str]:
        """
        List the headers whose values differ between two rows.

        Args:
            old_row: Row from the old sheet.
            new_row: Row from the new sheet.
            headers: Headers to compare, in output order.

        Returns:
            Names of the differing headers.
        """
        return [
            header
            for header in headers
            if not self.normalizer.equal(old_row.get(header), new_row.get(header))
        ]

    def compare(
        self,
        old_rows: list[KeyedRow],
        new_rows: list[KeyedRow],
        headers: list[str],
        key_columns: list[str],
    ) -> ComparisonResult:
        """
        Compare two row sets by composite key.

        Diffs are emitted for every key of the old side first, in the
        order the keys were first seen, followed by keys only present on
        the new side.

        Args:
            old_rows: Rows of the old sheet.
            new_rows: Rows of the new sheet.
            headers: Union of old and new headers.
            key_columns: Ordered key column names.

        Returns:
            ComparisonResult with one RowDiff per distinct key.

        Raises:
            NoKeyColumnsError: If no key columns were given.
            UnknownKeyColumnError: If any key column is not a header.
        """
        self.validate_key_columns(headers, key_columns)

        old_by_key = self._index_rows(old_rows, key_columns)
        new_by_key = self._index_rows(new_rows, key_columns)

        diffs: list[RowDiff] = []

        for key, old_row in old_by_key.items():
            new_row = new_by_key.get(key)
            if new_row is None:
                diffs.append(RowDiff(type=DiffType.DELETED, key=key, old_row=old_row))
                continue

            changed = self.changed_fields(old_row, new_row, headers)
            if changed:
                diffs.append(
                    RowDiff(
                        type=DiffType.MODIFIED,
                        key=key,
                        old_row=old_row,
                        new_row=new_row,
                        changed_fields=changed,
                    )
                )
            else:
                diffs.append(
                    RowDiff(
                        type=DiffType.UNCHANGED,
                        key=key,
                        old_row=old_row,
                        new_row=new_row,
                    )
                )

        for key, new_row in new_by_key.items():
            if key not in old_by_key:
                diffs.append(RowDiff(type=DiffType.ADDED, key=key, new_row=new_row))

        counts = {diff_type: 0 for diff_type in DiffType}
        for diff in diffs:
            counts[diff.type] += 1

        return ComparisonResult(
            summary=ComparisonSummary(
                total_old=len(old_rows),
                total_new=len(new_rows),
                added=counts[DiffType.ADDED],
                deleted=counts[DiffType.DELETED],
                modified=counts[DiffType.MODIFIED],
                unchanged=counts[DiffType.UNCHANGED],
            ),
            diffs=diffs,
            headers=list(headers),
            key_columns=list(key_columns),
        )
