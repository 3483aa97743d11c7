"""
Layout models handed from the exporters to the workbook writer.

Exporters decide what goes where and how each cell is styled; the writer
adapter turns the layout into workbook bytes. Styles are referred to by
name and resolved by the writer.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ReportCell:
    """
    A single cell of a report.

    Attributes:
        value: Value to write (None writes a blank cell).
        style: Name of the style to apply, if any.
        measure: Whether the value counts towards auto-sized column widths.
    """

    value: Any = None
    style: str | None = None
    measure: bool = True


@dataclass
class ReportSheet:
    """
    A worksheet layout.

    Attributes:
        name: Worksheet name.
        rows: Rows of cells, written from A1 downwards.
        min_column_width: Lower bound for auto-sized columns.
        max_column_width: Upper bound for auto-sized columns.
        column_padding: Characters added to the longest value of a column.
        freeze_rows: Number of top rows to freeze, if any.
        merges: Ranges (first_row, first_col, last_row, last_col) to merge;
            the first cell of each range keeps its value and style.
        row_heights: Heights for specific row indices.
    """

    name: str
    rows: list[list[ReportCell]] = field(default_factory=list)
    min_column_width: int = 10
    max_column_width: int = 50
    column_padding: int = 2
    freeze_rows: int | None = None
    merges: list[tuple[int, int, int, int]] = field(default_factory=list)
    row_heights: dict[int, float] = field(default_factory=dict)
