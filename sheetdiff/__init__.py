"""
sheetdiff: spreadsheet comparison service for extracted invoice data.

This package compares two Excel workbooks, either row-by-row using a
composite key or cell-by-cell by position, and renders highlighted diff
workbooks. The same service is exposed through both OpenAPI (REST via
FastAPI) and MCP (Model Context Protocol) interfaces.

Architecture:
    - Service Layer pattern separating comparison logic from transports
    - python-calamine (default) or openpyxl for reading workbooks
    - XlsxWriter for rendering diff and invoice exports
"""

__version__ = "0.1.0"
__author__ = "Jeff"
