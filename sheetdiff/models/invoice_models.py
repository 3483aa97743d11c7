"""
Pydantic models for extracted invoice data.

The extraction pipeline is an external collaborator; its output is
treated as untrusted and validated here before it is exported or checked.
Field names accept both snake_case and the camelCase used by the
extraction service.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

TableCellValue = str | int | float | None


class InvoiceMetadata(BaseModel):
    """
    Header-level information of an extracted invoice.

    Attributes:
        id: Identifier assigned by the extraction pipeline.
        file_name: Name of the source document.
        invoice_number: Invoice number, if found.
        invoice_date: Invoice date, if found.
        supplier: Supplier name, if found.
        customer: Customer name, if found.
        total_amount: Invoice total, if found.
        currency: Currency of the total, if found.
        notes: Free-form notes, if any.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(description="Identifier assigned by the extraction pipeline")
    file_name: str = Field(description="Name of the source document")
    invoice_number: str | None = None
    invoice_date: str | None = None
    supplier: str | None = None
    customer: str | None = None
    total_amount: float | None = None
    currency: str | None = None
    notes: str | None = None


class InvoiceTable(BaseModel):
    """
    A table extracted from an invoice.

    Attributes:
        headers: Column headers in display order.
        rows: Rows mapping header name to value.
    """

    headers: list[str] = Field(description="Column headers in display order")
    rows: list[dict[str, TableCellValue]] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_shape(self) -> "InvoiceTable":
        """Ensure headers are present and unique and rows only use known headers."""
        if not self.headers:
            raise ValueError("table must have at least one header")

        seen: set[str] = set()
        duplicates = []
        for header in self.headers:
            if header in seen:
                duplicates.append(header)
            seen.add(header)
        if duplicates:
            raise ValueError(f"duplicate headers: {', '.join(duplicates)}")

        for row_index, row in enumerate(self.rows):
            unknown = [name for name in row if name not in seen]
            if unknown:
                raise ValueError(
                    f"row {row_index} has fields not in headers: {', '.join(unknown)}"
                )
        return self


class ExtractedInvoiceData(BaseModel):
    """Structured output of the extraction pipeline for one document."""

    metadata: InvoiceMetadata
    tables: list[InvoiceTable] = Field(default_factory=list)


class ValidationIssue(BaseModel):
    """
    A row whose quantity and unit price do not add up to its total.

    Attributes:
        table_index: Index of the table within the invoice.
        row_index: Index of the row within the table.
        expected: Quantity multiplied by unit price.
        actual: Total stated on the row.
        difference: Absolute difference between expected and actual.
        description: Human-readable description of the issue.
    """

    table_index: int = Field(ge=0)
    row_index: int = Field(ge=0)
    expected: float
    actual: float
    difference: float = Field(ge=0)
    description: str


class InvoiceValidationResult(BaseModel):
    """Outcome of checking an invoice's line arithmetic."""

    invoice_id: str
    is_valid: bool
    needs_review: bool
    issues: list[ValidationIssue] = Field(default_factory=list)


class InvoiceExportRequest(BaseModel):
    """
    Request model for exporting extracted invoices.

    Attributes:
        invoices: Invoices to export.
        batch_mode: Combine every invoice into a single sheet.
        file_name: File name for the export.
    """

    invoices: list[ExtractedInvoiceData] = Field(min_length=1)
    batch_mode: bool = Field(default=False)
    file_name: str = Field(default="invoices.xlsx")
