"""
Adapters for workbook and storage operations.

Implements the adapter pattern for the libraries the service depends on:
- CalamineAdapter: High-performance reading using python-calamine (Rust-based)
- OpenpyxlAdapter: Pure Python reading using openpyxl
- XlsxWriterAdapter: In-memory rendering of exports using XlsxWriter
- LocalBlobStore: Filesystem-backed blob store for saved exports
"""

from sheetdiff.adapters.calamine_adapter import CalamineAdapter
from sheetdiff.adapters.openpyxl_adapter import OpenpyxlAdapter
from sheetdiff.adapters.storage_adapter import BlobStore, LocalBlobStore, StoredObject
from sheetdiff.adapters.workbook_reader import WorkbookReader
from sheetdiff.adapters.xlsxwriter_adapter import XlsxWriterAdapter

READER_ENGINES: dict[str, type[WorkbookReader]] = {
    CalamineAdapter.engine: CalamineAdapter,
    OpenpyxlAdapter.engine: OpenpyxlAdapter,
}


def create_reader(engine: str = "calamine") -> WorkbookReader:
    """
    Create a workbook reader for the named engine.

    Args:
        engine: "calamine" or "openpyxl".

    Returns:
        WorkbookReader instance.

    Raises:
        ValueError: If the engine name is unknown.
    """
    try:
        return READER_ENGINES[engine]()
    except KeyError:
        raise ValueError(
            f"Unknown reader engine: {engine}. Available: {', '.join(READER_ENGINES)}"
        ) from None


__all__ = [
    "WorkbookReader",
    "CalamineAdapter",
    "OpenpyxlAdapter",
    "XlsxWriterAdapter",
    "BlobStore",
    "LocalBlobStore",
    "StoredObject",
    "READER_ENGINES",
    "create_reader",
]
