"""
Test fixtures and utilities for the comparison service tests.

This module provides shared fixtures including temporary directories,
in-memory workbooks and service instances.
"""

import tempfile
from collections.abc import Callable, Generator
from datetime import date, datetime
from io import BytesIO
from pathlib import Path
from typing import Any

import pytest
import xlsxwriter

from sheetdiff.adapters.calamine_adapter import CalamineAdapter
from sheetdiff.adapters.openpyxl_adapter import OpenpyxlAdapter
from sheetdiff.adapters.storage_adapter import LocalBlobStore
from sheetdiff.adapters.xlsxwriter_adapter import XlsxWriterAdapter
from sheetdiff.services.comparison_service import ComparisonService
from sheetdiff.services.normalizer import ValueNormalizer

WorkbookFactory = Callable[[dict[str, list[list[Any]]]], bytes]


def build_workbook(sheets: dict[str, list[list[Any]]]) -> bytes:
    """
    Build an .xlsx workbook in memory.

    Args:
        sheets: Mapping of sheet name to rows. None leaves a cell empty.

    Returns:
        The workbook as bytes.
    """
    output = BytesIO()
    workbook = xlsxwriter.Workbook(output, {"in_memory": True})
    date_format = workbook.add_format({"num_format": "yyyy-mm-dd"})

    for name, rows in sheets.items():
        worksheet = workbook.add_worksheet(name)
        for row_idx, row in enumerate(rows):
            for col_idx, value in enumerate(row):
                if value is None:
                    continue
                if isinstance(value, (datetime, date)):
                    worksheet.write_datetime(row_idx, col_idx, value, date_format)
                elif isinstance(value, str):
                    worksheet.write_string(row_idx, col_idx, value)
                else:
                    worksheet.write(row_idx, col_idx, value)

    workbook.close()
    return output.getvalue()


@pytest.fixture
def workbook_factory() -> WorkbookFactory:
    """
    Return the in-memory workbook builder.

    Returns:
        Function building workbook bytes from a sheet mapping.
    """
    return build_workbook


@pytest.fixture
def calamine_adapter() -> CalamineAdapter:
    """
    Create a CalamineAdapter instance for testing.

    Returns:
        CalamineAdapter instance.
    """
    return CalamineAdapter()


@pytest.fixture
def openpyxl_adapter() -> OpenpyxlAdapter:
    """
    Create an OpenpyxlAdapter instance for testing.

    Returns:
        OpenpyxlAdapter instance.
    """
    return OpenpyxlAdapter()


@pytest.fixture
def xlsxwriter_adapter() -> XlsxWriterAdapter:
    """
    Create an XlsxWriterAdapter instance for testing.

    Returns:
        XlsxWriterAdapter instance.
    """
    return XlsxWriterAdapter()


@pytest.fixture
def normalizer() -> ValueNormalizer:
    """Create a ValueNormalizer with the default tolerance."""
    return ValueNormalizer()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def blob_store(temp_dir: Path) -> LocalBlobStore:
    """Create a LocalBlobStore rooted in a temporary directory."""
    return LocalBlobStore(temp_dir / "storage")


@pytest.fixture
def comparison_service(blob_store: LocalBlobStore) -> ComparisonService:
    """
    Create a ComparisonService instance for testing.

    Returns:
        ComparisonService backed by a temporary blob store.
    """
    return ComparisonService(blob_store=blob_store)


@pytest.fixture
def old_invoices() -> bytes:
    """
    Workbook of invoice lines before a correction.

    Returns:
        Workbook bytes.
    """
    return build_workbook(
        {
            "Invoices": [
                ["InvoiceNo", "Qty", "Price", "Customer"],
                ["1", "20.640", "17.50", "Acme"],
                ["2", "5", "10.00", "Globex"],
                ["3", "1", "99.90", "Initech"],
            ]
        }
    )


@pytest.fixture
def new_invoices() -> bytes:
    """
    Workbook of invoice lines after a correction.

    Invoice 1 has a new price, invoice 2 is unchanged apart from
    formatting, invoice 3 is gone and invoice 4 is new.

    Returns:
        Workbook bytes.
    """
    return build_workbook(
        {
            "Invoices": [
                ["InvoiceNo", "Qty", "Price", "Customer"],
                ["1", "20.640", "18.00", "Acme"],
                ["2", "5.0", "10", " globex "],
                ["4", "2", "15.00", "Umbrella"],
            ]
        }
    )


@pytest.fixture
def special_cells_workbook() -> bytes:
    """
    Workbook with a formula, a rich-text and a hyperlink cell.

    Row 0 holds headers; row 1 holds the formula (cached result 42), the
    rich string "Bold and plain" and a link displayed as "Label".

    Returns:
        Workbook bytes.
    """
    output = BytesIO()
    workbook = xlsxwriter.Workbook(output, {"in_memory": True})
    bold = workbook.add_format({"bold": True})
    worksheet = workbook.add_worksheet("Cells")

    worksheet.write_row(0, 0, ["Formula", "Rich", "Link"])
    worksheet.write_formula(1, 0, "=40+2", None, 42)
    worksheet.write_rich_string(1, 1, bold, "Bold", " and plain")
    worksheet.write_url(1, 2, "https://example.com/invoice/1", string="Label")

    workbook.close()
    return output.getvalue()


@pytest.fixture
def old_grid() -> bytes:
    """Two-sheet workbook used for positional comparisons."""
    return build_workbook(
        {
            "Summary": [["A", "B"], ["1", "2"]],
            "Detail": [["x"]],
        }
    )


@pytest.fixture
def new_grid() -> bytes:
    """Counterpart of ``old_grid`` with one changed cell."""
    return build_workbook(
        {
            "Summary": [["A", "B"], ["1", "3"]],
        }
    )


@pytest.fixture
def sample_invoice_payload() -> dict[str, Any]:
    """
    Extracted invoice data as produced by the extraction pipeline.

    Returns:
        Invoice in camelCase JSON form.
    """
    return {
        "metadata": {
            "id": "inv-001",
            "fileName": "invoice_001.pdf",
            "invoiceNumber": "F-2024-001",
            "invoiceDate": "2024-03-01",
            "supplier": "Beton AG",
            "customer": "Bau GmbH",
            "totalAmount": 55.0,
            "currency": "EUR",
        },
        "tables": [
            {
                "headers": ["Description", "Quantity", "Unit Price", "Total"],
                "rows": [
                    {"Description": "Concrete C25", "Quantity": "10", "Unit Price": "2,50", "Total": "25,00"},
                    {"Description": "Pump", "Quantity": 1, "Unit Price": 30, "Total": 30},
                ],
            }
        ],
    }
