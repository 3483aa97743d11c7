"""
Tolerant equality for cell values.

Invoice spreadsheets often round-trip numbers through text with
inconsistent precision ("20.50" vs "20.5") and inconsistent casing or
padding of labels. Both comparison modes use ValueNormalizer so that such
formatting noise is not reported as a change.
"""

import math
import re

from sheetdiff.models.workbook_models import CellValue

NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:e[+-]?\d+)?$")


class ValueNormalizer:
    """
    Canonicalizes cell values for equality checks.

    Two values are equal when they are identical, or when their trimmed,
    lower-cased string forms are equal, or when both string forms are
    numbers that differ by less than the tolerance.

    Attributes:
        tolerance: Absolute tolerance for numeric comparisons.

    Example:
        normalizer = ValueNormalizer()
        normalizer.equal("17.50", "17.5")   # True
        normalizer.equal(" Paid ", "paid")  # True
        normalizer.equal("17.50", "17.6")   # False
    """

    DEFAULT_TOLERANCE = 0.0001

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE) -> None:
        """
        Initialize the ValueNormalizer.

        Args:
            tolerance: Absolute tolerance for numeric comparisons.
        """
        self.tolerance = tolerance

    def normalize(self, value: CellValue) -> str:
        """
        Return the canonical string form of a value.

        None becomes the empty string and booleans become "true"/"false".

        Args:
            value: Cell value.

        Returns:
            Trimmed, lower-cased string.
        """
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value).strip().lower()

    def to_number(self, text: str) -> float | None:
        """
        Parse a canonical string as a plain decimal number.

        Args:
            text: Output of ``normalize``.

        Returns:
            The number, or None if the text is not a plain number.
        """
        if not NUMBER_PATTERN.match(text):
            return None
        return float(text)

    def key_part(self, value: CellValue) -> str:
        """Return the form of a value used inside composite keys."""
        return self.normalize(value)

    def equal(self, a: CellValue, b: CellValue) -> bool:
        """
        Compare two cell values.

        Args:
            a: First value.
            b: Second value.

        Returns:
            True if the values are considered equal.
        """
        if a is None and b is None:
            return True
        if a is None or b is None:
            return False
        if type(a) is type(b) and a == b:
            return True

        a_str = self.normalize(a)
        b_str = self.normalize(b)

        a_num = self.to_number(a_str)
        b_num = self.to_number(b_str)
        if (
            a_num is not None
            and b_num is not None
            and math.isfinite(a_num)
            and math.isfinite(b_num)
        ):
            return a_num == b_num or abs(a_num - b_num) < self.tolerance

        return a_str == b_str
