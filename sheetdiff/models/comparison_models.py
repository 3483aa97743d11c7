"""
Pydantic models for comparison results and API responses.

Keyed comparisons produce a ComparisonResult made of RowDiff entries;
positional comparisons produce a SheetComparison made of CellDiff entries.
Both share the DiffType classification.
"""

from enum import Enum

from pydantic import BaseModel, Field

from sheetdiff.models.workbook_models import CellValue, KeyedRow, SheetInfo


class DiffType(str, Enum):
    """
    Classification of a row (keyed mode) or a cell (grid mode).
    """

    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


class ComparisonMode(str, Enum):
    """Supported comparison modes."""

    KEYED = "keyed"
    GRID = "grid"


class RowDiff(BaseModel):
    """
    Difference for a single composite key.

    Attributes:
        type: How the row changed.
        key: The composite key the rows were matched on.
        old_row: The row from the old workbook (absent for added rows).
        new_row: The row from the new workbook (absent for deleted rows).
        changed_fields: Headers whose values differ (modified rows only).
    """

    type: DiffType = Field(
        description="How the row changed",
    )
    key: str = Field(
        description="The composite key the rows were matched on",
    )
    old_row: KeyedRow | None = Field(
        default=None,
        description="Row from the old workbook",
    )
    new_row: KeyedRow | None = Field(
        default=None,
        description="Row from the new workbook",
    )
    changed_fields: list[str] | None = Field(
        default=None,
        description="Headers whose values differ",
    )


class CellDiff(BaseModel):
    """
    Difference for a single cell coordinate.

    Attributes:
        row: 0-based row index.
        col: 0-based column index.
        type: How the cell changed.
        old_value: Value in the old sheet (None when out of range or empty).
        new_value: Value in the new sheet (None when out of range or empty).
    """

    row: int = Field(ge=0, description="0-based row index")
    col: int = Field(ge=0, description="0-based column index")
    type: DiffType = Field(description="How the cell changed")
    old_value: CellValue = Field(default=None, description="Value in the old sheet")
    new_value: CellValue = Field(default=None, description="Value in the new sheet")


class ComparisonSummary(BaseModel):
    """Row counts for a keyed comparison."""

    total_old: int = Field(ge=0, description="Number of data rows in the old sheet")
    total_new: int = Field(ge=0, description="Number of data rows in the new sheet")
    added: int = Field(default=0, ge=0, description="Keys only present in the new sheet")
    deleted: int = Field(default=0, ge=0, description="Keys only present in the old sheet")
    modified: int = Field(default=0, ge=0, description="Keys whose rows differ")
    unchanged: int = Field(default=0, ge=0, description="Keys whose rows are equal")


class ComparisonResult(BaseModel):
    """
    Result of a keyed comparison.

    Attributes:
        summary: Row counts by diff type.
        diffs: One entry per composite key.
        headers: Union of old and new headers, old order first.
        key_columns: The key columns the rows were matched on.
    """

    summary: ComparisonSummary
    diffs: list[RowDiff] = Field(default_factory=list)
    headers: list[str] = Field(default_factory=list)
    key_columns: list[str] = Field(default_factory=list)


class SheetComparisonSummary(BaseModel):
    """Cell and shape counts for a positional comparison."""

    total_cells: int = Field(ge=0, description="Cells in the compared rectangle")
    changed_cells: int = Field(ge=0, description="Cells that differ")
    added_rows: int = Field(ge=0, description="Rows the new sheet has beyond the old one")
    deleted_rows: int = Field(ge=0, description="Rows the old sheet has beyond the new one")
    added_columns: int = Field(ge=0, description="Columns the new sheet has beyond the old one")
    deleted_columns: int = Field(ge=0, description="Columns the old sheet has beyond the new one")


class SheetComparison(BaseModel):
    """
    Result of a positional (cell-by-cell) comparison.

    Attributes:
        old_sheet_name: Name of the old sheet.
        new_sheet_name: Name of the new sheet.
        summary: Cell and shape counts.
        diffs: Only the differing cells, in row-major order.
        old_data: Grid of the old sheet.
        new_data: Grid of the new sheet.
    """

    old_sheet_name: str
    new_sheet_name: str
    summary: SheetComparisonSummary
    diffs: list[CellDiff] = Field(default_factory=list)
    old_data: list[list[CellValue]] = Field(default_factory=list)
    new_data: list[list[CellValue]] = Field(default_factory=list)


class ComparisonResponse(BaseModel):
    """
    Response model for keyed comparisons.

    Attributes:
        success: Whether the comparison was successful.
        result: The comparison result.
        processing_time_ms: Time taken to process the request in milliseconds.
    """

    success: bool = Field(default=True)
    result: ComparisonResult
    processing_time_ms: float | None = Field(default=None, ge=0)


class GridComparisonResponse(BaseModel):
    """
    Response model for positional comparisons.

    When no sheet indices are supplied the response only lists the sheets
    of both workbooks so the caller can choose which pair to compare.

    Attributes:
        success: Whether the request was successful.
        requires_selection: True when sheet indices must still be chosen.
        old_sheets: Sheets available in the old workbook.
        new_sheets: Sheets available in the new workbook.
        comparison: The comparison, when both sheet indices were supplied.
        processing_time_ms: Time taken to process the request in milliseconds.
    """

    success: bool = Field(default=True)
    requires_selection: bool = Field(default=False)
    old_sheets: list[SheetInfo] = Field(default_factory=list)
    new_sheets: list[SheetInfo] = Field(default_factory=list)
    comparison: SheetComparison | None = Field(default=None)
    processing_time_ms: float | None = Field(default=None, ge=0)


class HeadersResponse(BaseModel):
    """Headers of the first sheet of an uploaded workbook."""

    file_name: str
    sheet_name: str
    headers: list[str] = Field(default_factory=list)
    row_count: int = Field(ge=0, description="Number of data rows below the headers")


class ExportSavedResponse(BaseModel):
    """
    Response model for exports persisted to the blob store.

    Attributes:
        success: Whether the export was stored.
        path: Storage path of the export.
        file_name: File name of the export.
        size_bytes: Size of the stored export.
    """

    success: bool = Field(default=True)
    path: str
    file_name: str
    size_bytes: int = Field(ge=0)


class ErrorResponse(BaseModel):
    """
    Standard error response model for the API.

    Attributes:
        success: Always False for error responses.
        error_code: Machine-readable error code.
        message: Human-readable error description.
        details: Additional error context.
    """

    success: bool = Field(
        default=False,
        description="Always False for error responses",
    )
    error_code: str = Field(
        description="Machine-readable error code",
    )
    message: str = Field(
        description="Human-readable error description",
    )
    details: dict | None = Field(
        default=None,
        description="Additional error context",
    )
