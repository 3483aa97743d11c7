"""
Pydantic models describing workbooks as read for comparison.

A workbook is read once into immutable sheets: dense grids of typed cell
values plus an optional header row. Keyed comparisons work on rows keyed
by header name instead of on the raw grid.
"""

from typing import TypeAlias

from pydantic import BaseModel, Field

CellValue: TypeAlias = str | int | float | bool | None
"""A single cell value. Dates are carried as ISO ``YYYY-MM-DD`` strings."""


class SheetInfo(BaseModel):
    """
    Metadata about a single worksheet, used for sheet selection.

    Attributes:
        name: The name of the sheet.
        index: The 0-based index of the sheet in the workbook.
        row_count: Number of populated rows.
        column_count: Number of populated columns.
    """

    name: str = Field(
        description="The name of the sheet",
    )
    index: int = Field(
        ge=0,
        description="The 0-based index of the sheet in the workbook",
    )
    row_count: int = Field(
        ge=0,
        description="Number of populated rows",
    )
    column_count: int = Field(
        ge=0,
        description="Number of populated columns",
    )


class Sheet(BaseModel):
    """
    A worksheet read into a dense rectangular grid.

    Every row of ``data`` has exactly ``column_count`` cells; cells past
    the end of a shorter source row are None.

    Attributes:
        name: The name of the sheet.
        index: The 0-based index of the sheet in the workbook.
        row_count: Number of rows in ``data``.
        column_count: Number of columns in every row of ``data``.
        data: Grid of cell values, rows by columns.
        headers: Row 0 rendered as strings, if the sheet has any rows.
    """

    model_config = {"frozen": True}

    name: str = Field(
        description="The name of the sheet",
    )
    index: int = Field(
        ge=0,
        description="The 0-based index of the sheet in the workbook",
    )
    row_count: int = Field(
        ge=0,
        description="Number of rows in the grid",
    )
    column_count: int = Field(
        ge=0,
        description="Number of columns in every row of the grid",
    )
    data: list[list[CellValue]] = Field(
        default_factory=list,
        description="Grid of cell values, rows by columns",
    )
    headers: list[str] | None = Field(
        default=None,
        description="First row rendered as strings",
    )

    def to_info(self) -> SheetInfo:
        """Return the lightweight listing for this sheet."""
        return SheetInfo(
            name=self.name,
            index=self.index,
            row_count=self.row_count,
            column_count=self.column_count,
        )


class Workbook(BaseModel):
    """
    All worksheets of a workbook.

    Attributes:
        file_name: Name the workbook was supplied under.
        sheets: Worksheets in workbook order.
    """

    model_config = {"frozen": True}

    file_name: str = Field(
        description="Name the workbook was supplied under",
    )
    sheets: list[Sheet] = Field(
        default_factory=list,
        description="Worksheets in workbook order",
    )

    @property
    def sheet_names(self) -> list[str]:
        """Names of all sheets, in workbook order."""
        return [sheet.name for sheet in self.sheets]


class KeyedRow(BaseModel):
    """
    A data row mapped by header name.

    Attributes:
        row_number: 1-based row number in the source sheet.
        values: Ordered mapping of header name to cell value.
    """

    row_number: int = Field(
        ge=1,
        description="1-based row number in the source sheet",
    )
    values: dict[str, CellValue] = Field(
        default_factory=dict,
        description="Ordered mapping of header name to cell value",
    )

    def get(self, header: str) -> CellValue:
        """Return the value under ``header``, or None if the field is absent."""
        return self.values.get(header)


class KeyedSheet(BaseModel):
    """
    The first worksheet of a workbook read for keyed comparison.

    Attributes:
        sheet_name: Name of the worksheet that was read.
        headers: Header names from row 1, empty headers excluded.
        rows: Data rows below the header row.
    """

    sheet_name: str = Field(
        description="Name of the worksheet that was read",
    )
    headers: list[str] = Field(
        default_factory=list,
        description="Header names from row 1",
    )
    rows: list[KeyedRow] = Field(
        default_factory=list,
        description="Data rows below the header row",
    )
