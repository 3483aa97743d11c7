"""
Service layer for workbook comparison and invoice export.

Contains the comparison logic and the exporters, decoupled from the
transport layers (HTTP/MCP).
"""

from sheetdiff.services.comparator import Comparator
from sheetdiff.services.comparison_service import ComparisonService
from sheetdiff.services.diff_exporter import DiffExporter
from sheetdiff.services.grid_differ import CellGridDiffer
from sheetdiff.services.invoice_exporter import InvoiceExporter
from sheetdiff.services.invoice_validator import InvoiceValidator
from sheetdiff.services.key_matcher import RowKeyMatcher
from sheetdiff.services.normalizer import ValueNormalizer

__all__ = [
    "ComparisonService",
    "Comparator",
    "ValueNormalizer",
    "RowKeyMatcher",
    "CellGridDiffer",
    "DiffExporter",
    "InvoiceExporter",
    "InvoiceValidator",
]
