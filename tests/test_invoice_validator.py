"""
Tests for the InvoiceValidator.
"""

import pytest

from sheetdiff.models.invoice_models import ExtractedInvoiceData, InvoiceTable
from sheetdiff.services.invoice_validator import InvoiceValidator, parse_number


def invoice_with(table: InvoiceTable) -> ExtractedInvoiceData:
    """Wrap a single table in an invoice."""
    return ExtractedInvoiceData.model_validate(
        {"metadata": {"id": "inv-x", "fileName": "x.pdf"}, "tables": [table.model_dump()]}
    )


class TestParseNumber:
    """Tests for lenient number parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (10, 10.0),
            (2.5, 2.5),
            ("2,50", 2.5),
            (" 1 250,50 EUR", 1250.5),
            ("CHF 99.90", 99.9),
            ("-3", -3.0),
        ],
    )
    def test_parses_numbers(self, raw, expected) -> None:
        """Decimal commas, spaces and currency text are handled."""
        assert parse_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "n/a", True])
    def test_unparseable_values(self, raw) -> None:
        """Values without a number give None."""
        assert parse_number(raw) is None


class TestDetectColumns:
    """Tests for multilingual column detection."""

    @pytest.mark.parametrize(
        ("headers", "expected"),
        [
            (["Description", "Quantity", "Unit Price", "Total"], ("Quantity", "Unit Price", "Total")),
            (["Désignation", "Qté", "P.U", "Montant"], ("Qté", "P.U", "Montant")),
            (["Artikel", "Menge", "Einzelpreis", "Betrag"], ("Menge", "Einzelpreis", "Betrag")),
            (["Ürün", "Miktar", "Birim Fiyat", "Toplam"], ("Miktar", "Birim Fiyat", "Toplam")),
        ],
    )
    def test_languages(self, headers, expected) -> None:
        """French, German, English and Turkish headers are recognized."""
        assert InvoiceValidator.detect_columns(headers) == expected

    def test_columns_are_distinct(self) -> None:
        """A header is never used for two roles."""
        quantity, price, total = InvoiceValidator.detect_columns(["Qty", "Price", "Total Price"])

        assert (quantity, price, total) == ("Qty", "Price", "Total Price")

    def test_missing_columns(self) -> None:
        """Unrecognized headers give None."""
        assert InvoiceValidator.detect_columns(["Item", "Notes"]) == (None, None, None)


class TestInvoiceValidator:
    """Tests for line arithmetic checks."""

    def test_consistent_invoice(self, sample_invoice_payload) -> None:
        """Rows adding up produce a valid result."""
        invoice = ExtractedInvoiceData.model_validate(sample_invoice_payload)

        result = InvoiceValidator().validate(invoice)

        assert result.invoice_id == "inv-001"
        assert result.is_valid is True
        assert result.needs_review is False
        assert result.issues == []

    def test_inconsistent_row_is_flagged(self) -> None:
        """10 x 2.50 with a total of 30 is reported."""
        table = InvoiceTable(
            headers=["Item", "Qty", "Price", "Total"],
            rows=[
                {"Item": "ok", "Qty": 10, "Price": "2,50", "Total": "25,00"},
                {"Item": "bad", "Qty": 10, "Price": "2,50", "Total": "30,00"},
            ],
        )

        result = InvoiceValidator().validate(invoice_with(table))

        assert result.is_valid is False
        assert result.needs_review is True
        assert len(result.issues) == 1
        issue = result.issues[0]
        assert issue.table_index == 0
        assert issue.row_index == 1
        assert issue.expected == 25.0
        assert issue.actual == 30.0
        assert issue.difference == 5.0
        assert issue.description == "Row 2: 10 x 2.5 = 25.00, but total is 30"

    def test_small_rounding_is_tolerated(self) -> None:
        """Differences within 1% of the expected total pass."""
        table = InvoiceTable(
            headers=["Qty", "Price", "Total"],
            rows=[{"Qty": 3, "Price": 33.33, "Total": 100}],
        )

        assert InvoiceValidator().validate(invoice_with(table)).is_valid is True

    def test_minimum_tolerance(self) -> None:
        """Small totals are checked against a 0.01 tolerance."""
        table = InvoiceTable(
            headers=["Qty", "Price", "Total"],
            rows=[
                {"Qty": 1, "Price": 0.5, "Total": 0.505},
                {"Qty": 1, "Price": 0.5, "Total": 0.52},
            ],
        )

        result = InvoiceValidator().validate(invoice_with(table))

        assert [issue.row_index for issue in result.issues] == [1]

    def test_rows_with_missing_values_are_skipped(self) -> None:
        """Rows lacking a parseable number are not checked."""
        table = InvoiceTable(
            headers=["Qty", "Price", "Total"],
            rows=[{"Qty": None, "Price": 5, "Total": 99}, {"Qty": "n/a", "Price": 5, "Total": 99}],
        )

        assert InvoiceValidator().validate(invoice_with(table)).is_valid is True

    def test_tables_without_arithmetic_columns_are_skipped(self) -> None:
        """Tables missing a role column are not checked."""
        table = InvoiceTable(headers=["Plate", "Total"], rows=[{"Plate": "ZH 1", "Total": 5}])

        assert InvoiceValidator().validate(invoice_with(table)).is_valid is True
