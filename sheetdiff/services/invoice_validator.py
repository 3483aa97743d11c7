"""
Line arithmetic checks for extracted invoices.

For every table whose quantity, unit price and total columns can be
identified, each row is checked for quantity x unit price = total within
a tolerance of 1% (at least 0.01). Column names are recognized in
French, German, English and Turkish.
"""

import re

from sheetdiff.models.invoice_models import (
    ExtractedInvoiceData,
    InvoiceTable,
    InvoiceValidationResult,
    ValidationIssue,
)

QUANTITY_PATTERNS = (
    "quantité", "quantity", "menge", "miktar", "qty", "qté",
    "nombre", "anzahl", "adet",
)

UNIT_PRICE_PATTERNS = (
    "pu", "p.u", "prix unitaire", "unit price", "einzelpreis", "ep", "e.p",
    "birim fiyat", "birim fiyatı", "price", "fiyat", "preis",
)

TOTAL_PATTERNS = (
    "somme", "total", "montant", "gesamt", "betrag", "toplam",
    "sum", "amount", "tutar",
)

NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")
NON_NUMERIC = re.compile(r"[^\d.\-]")

MIN_TOLERANCE = 0.01
RELATIVE_TOLERANCE = 0.01


def parse_number(value) -> float | None:
    """
    Parse a table value leniently.

    Whitespace is removed, decimal commas become dots and any other
    non-numeric characters are dropped before reading the leading number,
    so "1 250,50 EUR" parses as 1250.5.

    Args:
        value: Raw table value.

    Returns:
        The number, or None if no number could be read.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)

    text = re.sub(r"\s", "", str(value)).replace(",", ".")
    text = NON_NUMERIC.sub("", text)

    match = NUMBER_PREFIX.match(text)
    if not match:
        return None
    return float(match.group(0))


def _find_column(headers: list[str], patterns: tuple[str, ...], taken: set[str]) -> str | None:
    for header in headers:
        if header in taken:
            continue
        lowered = header.lower().strip()
        if any(pattern in lowered for pattern in patterns):
            return header
    return None


class InvoiceValidator:
    """
    Flags invoice rows whose totals do not match quantity x unit price.

    Example:
        validator = InvoiceValidator()
        result = validator.validate(invoice)
        if result.needs_review:
            ...
    """

    @staticmethod
    def detect_columns(headers: list[str]) -> tuple[str | None, str | None, str | None]:
        """
        Identify the quantity, unit price and total columns.

        Each column is the first header matching its patterns that has not
        already been assigned to a previous role.

        Args:
            headers: Table headers.

        Returns:
            Tuple of (quantity, unit_price, total) header names.
        """
        taken: set[str] = set()

        quantity = _find_column(headers, QUANTITY_PATTERNS, taken)
        if quantity:
            taken.add(quantity)

        unit_price = _find_column(headers, UNIT_PRICE_PATTERNS, taken)
        if unit_price:
            taken.add(unit_price)

        total = _find_column(headers, TOTAL_PATTERNS, taken)
        return quantity, unit_price, total

    def validate_table(self, table: InvoiceTable, table_index: int) -> list[ValidationIssue]:
        """Check every row of one table."""
        quantity_col, price_col, total_col = self.detect_columns(table.headers)
        if not (quantity_col and price_col and total_col):
            return []

        issues = []
        for row_index, row in enumerate(table.rows):
            quantity = parse_number(row.get(quantity_col))
            unit_price = parse_number(row.get(price_col))
            total = parse_number(row.get(total_col))
            if quantity is None or unit_price is None or total is None:
                continue

            expected = quantity * unit_price
            difference = abs(expected - total)
            tolerance = max(MIN_TOLERANCE, abs(expected) * RELATIVE_TOLERANCE)

            if difference > tolerance:
                issues.append(
                    ValidationIssue(
                        table_index=table_index,
                        row_index=row_index,
                        expected=round(expected, 2),
                        actual=round(total, 2),
                        difference=round(difference, 2),
                        description=(
                            f"Row {row_index + 1}: {quantity:g} x {unit_price:g} = "
                            f"{expected:.2f}, but total is {total:g}"
                        ),
                    )
                )
        return issues

    def validate(self, invoice: ExtractedInvoiceData) -> InvoiceValidationResult:
        """
        Check the line arithmetic of an invoice.

        Args:
            invoice: The invoice.

        Returns:
            InvoiceValidationResult listing every inconsistent row.
        """
        issues = []
        for table_index, table in enumerate(invoice.tables):
            issues.extend(self.validate_table(table, table_index))

        return InvoiceValidationResult(
            invoice_id=invoice.metadata.id,
            is_valid=not issues,
            needs_review=bool(issues),
            issues=issues,
        )
