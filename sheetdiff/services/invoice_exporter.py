"""
Render extracted invoices as a workbook.

Two layouts are supported: one sheet per invoice with its metadata and
tables, or a single combined sheet holding every table row of every
invoice.
"""

import re

from sheetdiff.adapters.xlsxwriter_adapter import XlsxWriterAdapter
from sheetdiff.models.invoice_models import ExtractedInvoiceData, InvoiceMetadata
from sheetdiff.models.report_models import ReportCell, ReportSheet

MAX_SHEET_NAME_LENGTH = 31
INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")
MISSING_VALUE = "-"
BATCH_SHEET_NAME = "Combined Invoices"


def _display(value):
    if value is None or value == "":
        return MISSING_VALUE
    return value


def _invoice_sheet(name: str) -> ReportSheet:
    return ReportSheet(name=name, min_column_width=12, max_column_width=40, column_padding=3)


class InvoiceExporter:
    """
    Builds invoice workbooks in normal or batch mode.

    Attributes:
        writer: Adapter used to render the layout.

    Example:
        exporter = InvoiceExporter()
        data = exporter.render(invoices, batch_mode=True)
    """

    def __init__(self, writer: XlsxWriterAdapter | None = None) -> None:
        """
        Initialize the InvoiceExporter.

        Args:
            writer: Optional writer adapter. If None, uses XlsxWriterAdapter.
        """
        self.writer = writer or XlsxWriterAdapter()

    @staticmethod
    def sheet_name(candidate: str, used: set[str]) -> str:
        """
        Make a valid worksheet name that is not already used.

        Characters Excel rejects are replaced, the name is truncated to
        31 characters and a numeric suffix is added on collisions. The
        comparison with used names is case-insensitive, as in Excel.

        Args:
            candidate: Preferred name.
            used: Lower-cased names already taken; updated in place.

        Returns:
            The name to use.
        """
        base = INVALID_SHEET_CHARS.sub("_", candidate).strip() or "Sheet"
        base = base[:MAX_SHEET_NAME_LENGTH]

        name = base
        counter = 2
        while name.lower() in used:
            suffix = f" ({counter})"
            name = base[: MAX_SHEET_NAME_LENGTH - len(suffix)] + suffix
            counter += 1

        used.add(name.lower())
        return name

    @staticmethod
    def _metadata_rows(metadata: InvoiceMetadata) -> list[list[ReportCell]]:
        total = None
        if metadata.total_amount is not None:
            total = f"{metadata.total_amount} {metadata.currency or ''}".strip()

        fields = [
            ("File Name", metadata.file_name),
            ("Invoice No", metadata.invoice_number),
            ("Date", metadata.invoice_date),
            ("Supplier", metadata.supplier),
            ("Customer", metadata.customer),
            ("Total Amount", total),
            ("Notes", metadata.notes),
        ]
        return [
            [ReportCell(label, "label"), ReportCell(value, "cell")]
            for label, value in fields
            if value
        ]

    def build_invoice_sheet(self, invoice: ExtractedInvoiceData, name: str) -> ReportSheet:
        """
        Lay out one invoice: metadata block followed by its tables.

        Args:
            invoice: The invoice.
            name: Worksheet name.

        Returns:
            The sheet layout.
        """
        sheet = _invoice_sheet(name)
        sheet.rows.append([ReportCell("INVOICE DETAILS", "section", measure=False)])
        sheet.row_heights[0] = 25
        sheet.rows.extend(self._metadata_rows(invoice.metadata))

        for table in invoice.tables:
            sheet.rows.append([])
            sheet.row_heights[len(sheet.rows)] = 25
            sheet.rows.append([ReportCell(header, "table_header") for header in table.headers])

            for row_index, row in enumerate(table.rows):
                style = "zebra" if row_index % 2 == 1 else "cell"
                sheet.rows.append(
                    [ReportCell(_display(row.get(header)), style) for header in table.headers]
                )

        return sheet

    def build_batch_sheet(self, invoices: list[ExtractedInvoiceData]) -> ReportSheet:
        """
        Lay out every table row of every invoice on one sheet.

        Columns are No, Invoice No and Invoice Date followed by the union
        of all table headers in first-seen order.

        Args:
            invoices: Invoices to combine.

        Returns:
            The sheet layout.
        """
        table_headers: list[str] = []
        seen: set[str] = set()
        for invoice in invoices:
            for table in invoice.tables:
                for header in table.headers:
                    if header not in seen:
                        seen.add(header)
                        table_headers.append(header)

        columns = ["No", "Invoice No", "Invoice Date"] + table_headers

        sheet = _invoice_sheet(BATCH_SHEET_NAME)
        sheet.rows.append([ReportCell("Combined Invoice Data", "banner", measure=False)])
        sheet.row_heights[0] = 30
        if len(columns) > 1:
            sheet.merges.append((0, 0, 0, len(columns) - 1))
        sheet.rows.append([])
        sheet.rows.append([ReportCell(column, "table_header") for column in columns])
        sheet.row_heights[2] = 25
        sheet.freeze_rows = 3

        number = 0
        for invoice in invoices:
            metadata = invoice.metadata
            for table in invoice.tables:
                for row in table.rows:
                    number += 1
                    style = "zebra" if number % 2 == 1 else "cell"
                    values = [
                        number,
                        _display(metadata.invoice_number),
                        _display(metadata.invoice_date),
                    ] + [_display(row.get(header)) for header in table_headers]
                    sheet.rows.append([ReportCell(value, style) for value in values])

        return sheet

    def render(self, invoices: list[ExtractedInvoiceData], batch_mode: bool = False) -> bytes:
        """
        Render invoices to workbook bytes.

        Args:
            invoices: Invoices to export.
            batch_mode: Combine every invoice into a single sheet.

        Returns:
            The workbook as bytes.
        """
        if batch_mode:
            sheets = [self.build_batch_sheet(invoices)]
        else:
            used: set[str] = set()
            sheets = [
                self.build_invoice_sheet(
                    invoice,
                    self.sheet_name(invoice.metadata.invoice_number or f"Invoice_{index + 1}", used),
                )
                for index, invoice in enumerate(invoices)
            ]

        return self.writer.write_workbook(sheets, export_type="invoices")
