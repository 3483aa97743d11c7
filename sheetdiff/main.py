"""
FastAPI application for the comparison service.

This module provides the REST API endpoints for comparing uploaded
workbooks, exporting highlighted comparison workbooks and exporting or
validating extracted invoice data.

API Endpoints:
    - GET /health: Health check
    - POST /compare/sheets: List the sheets of an uploaded workbook
    - POST /compare/headers: Headers of an uploaded workbook's first sheet
    - POST /compare/keyed: Keyed comparison of two uploads
    - POST /compare/keyed/export: Keyed comparison as a workbook
    - POST /compare/grid: Cell-by-cell comparison of two uploads
    - POST /compare/grid/export: Cell-by-cell comparison as a workbook
    - POST /invoices/export: Export extracted invoices as a workbook
    - POST /invoices/validate: Check invoice line arithmetic
    - GET /exports/{path}: Download a saved export

Example:
    To run the server:
        uvicorn sheetdiff.main:app --reload

    Or programmatically:
        from sheetdiff.main import run_server
        run_server()
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Annotated, Any

import uvicorn
from fastapi import FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from sheetdiff import __version__
from sheetdiff.adapters.storage_adapter import XLSX_CONTENT_TYPE
from sheetdiff.config import get_settings
from sheetdiff.exceptions.comparison_exceptions import InvalidUploadError, SheetDiffError
from sheetdiff.models.comparison_models import (
    ComparisonResponse,
    ErrorResponse,
    ExportSavedResponse,
    GridComparisonResponse,
    HeadersResponse,
)
from sheetdiff.models.invoice_models import InvoiceExportRequest, InvoiceValidationResult
from sheetdiff.models.workbook_models import SheetInfo
from sheetdiff.services.comparison_service import ComparisonService
from sheetdiff.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

VALID_EXTENSIONS = (".xlsx", ".xls", ".xlsb", ".xlsm", ".ods")

STATUS_CODE_MAP = {
    "UNREADABLE_WORKBOOK": 400,
    "UNKNOWN_KEY_COLUMN": 400,
    "NO_KEY_COLUMNS": 400,
    "INVALID_SHEET_INDEX": 400,
    "INVALID_UPLOAD": 400,
    "UPLOAD_TOO_LARGE": 413,
    "INVALID_INVOICE_DATA": 422,
    "OBJECT_NOT_FOUND": 404,
    "STORAGE_ERROR": 500,
    "EXPORT_ERROR": 500,
    "COMPARISON_ERROR": 500,
}

comparison_service: ComparisonService | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Configures logging and builds the comparison service on startup, and
    releases it on shutdown. A service installed beforehand (as tests do)
    is kept.

    Args:
        app: The FastAPI application instance.
    """
    global comparison_service
    settings = get_settings()
    configure_logging(settings.effective_log_level)

    created = comparison_service is None
    if created:
        comparison_service = ComparisonService.from_settings(settings)
    logger.info(
        "Comparison service started",
        reader_engine=settings.reader_engine,
        tolerance=settings.numeric_tolerance,
    )
    yield
    if created:
        comparison_service = None


app = FastAPI(
    title="Sheetdiff Comparison Service",
    description="""
    Spreadsheet comparison and invoice export service, exposed over REST and MCP.

    ## Features

    - **Keyed comparison**: Match rows by one or more key columns
    - **Grid comparison**: Compare two sheets cell by cell
    - **Highlighted exports**: Download comparisons as color-coded workbooks
    - **Invoice exports**: Turn extracted invoice data into workbooks
    - **Multiple formats**: .xlsx, .xls, .xlsb, .xlsm, .ods

    ## Architecture

    - **Service Layer**: Comparison logic decoupled from transport
    - **Adapters**: python-calamine or openpyxl for reading, XlsxWriter for writing
    - **Dual Protocol**: Same service exposed via REST and MCP
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_service() -> ComparisonService:
    """
    Get the comparison service instance.

    Returns:
        The global ComparisonService instance.

    Raises:
        HTTPException: If the service is not initialized.
    """
    if comparison_service is None:
        raise HTTPException(
            status_code=503,
            detail="Comparison service is not initialized",
        )
    return comparison_service


@app.exception_handler(SheetDiffError)
async def handle_sheetdiff_error(request: Request, error: SheetDiffError) -> JSONResponse:
    """
    Convert SheetDiffError to appropriate HTTP response.

    Args:
        request: The request that failed.
        error: The SheetDiffError to convert.

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = STATUS_CODE_MAP.get(error.error_code, 500)
    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, error_code=error.error_code)

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            success=False,
            error_code=error.error_code,
            message=error.message,
            details=error.details,
        ).model_dump(),
    )


async def read_upload(file: UploadFile) -> tuple[bytes, str]:
    """
    Read an uploaded workbook into memory after basic checks.

    Args:
        file: The uploaded file.

    Returns:
        Tuple of (bytes, file name).

    Raises:
        InvalidUploadError: If the file has no name, an unsupported
            extension, no content or exceeds the size limit.
    """
    file_name = file.filename or ""
    if not file_name:
        raise InvalidUploadError(file_name="", reason="No file provided")

    if not file_name.lower().endswith(VALID_EXTENSIONS):
        raise InvalidUploadError(
            file_name=file_name,
            reason=f"Invalid file extension. Supported: {', '.join(VALID_EXTENSIONS)}",
        )

    max_bytes = get_settings().max_upload_size_bytes
    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise InvalidUploadError(
            file_name=file_name,
            reason=f"File exceeds the {max_bytes} byte upload limit",
            error_code="UPLOAD_TOO_LARGE",
        )
    if not content:
        raise InvalidUploadError(file_name=file_name, reason="File is empty")

    return content, file_name


def xlsx_response(data: bytes, file_name: str) -> Response:
    """Wrap workbook bytes in a download response."""
    return Response(
        content=data,
        media_type=XLSX_CONTENT_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


def export_response(data: bytes, file_name: str, save: bool) -> Response | ExportSavedResponse:
    """Return an export as a download, or store it and describe where."""
    if save:
        return get_service().save_export(data, file_name)
    return xlsx_response(data, file_name)


def clean_key_columns(key_columns: list[str] | None) -> list[str]:
    """
    Normalize the submitted key columns.

    Each form value is one header name, which may itself contain commas.
    Names are stripped and blank ones dropped.
    """
    return [name.strip() for name in key_columns or [] if name.strip()]


@app.get(
    "/health",
    tags=["System"],
    summary="Health check",
    response_model=dict,
)
async def health_check() -> dict[str, Any]:
    """
    Check the health status of the service.

    Returns:
        Dictionary containing status and timestamp.
    """
    return {
        "status": "healthy",
        "service": "Sheetdiff Comparison Service",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.post(
    "/compare/sheets",
    tags=["Comparison"],
    summary="List sheets of an uploaded workbook",
    response_model=list[SheetInfo],
    responses={400: {"model": ErrorResponse, "description": "Invalid workbook"}},
)
async def list_sheets(
    file: Annotated[UploadFile, File(description="Workbook to inspect")],
) -> list[SheetInfo]:
    """
    List the worksheets of an uploaded workbook, for sheet selection.

    Args:
        file: The uploaded workbook.

    Returns:
        SheetInfo for each worksheet.
    """
    data, file_name = await read_upload(file)
    return get_service().list_sheets(data, file_name)


@app.post(
    "/compare/headers",
    tags=["Comparison"],
    summary="Get headers of an uploaded workbook",
    response_model=HeadersResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid workbook"}},
)
async def get_headers(
    file: Annotated[UploadFile, File(description="Workbook to inspect")],
) -> HeadersResponse:
    """
    Get the headers of the first sheet, for key column selection.

    Args:
        file: The uploaded workbook.

    Returns:
        HeadersResponse with the headers and data row count.
    """
    data, file_name = await read_upload(file)
    return get_service().get_headers(data, file_name)


@app.post(
    "/compare/keyed",
    tags=["Comparison"],
    summary="Compare two workbooks by key columns",
    response_model=ComparisonResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid workbook or key columns"},
        500: {"model": ErrorResponse, "description": "Comparison error"},
    },
)
async def compare_keyed(
    old_file: Annotated[UploadFile, File(description="Old (reference) workbook")],
    new_file: Annotated[UploadFile, File(description="New workbook")],
    key_columns: Annotated[list[str] | None, Form(description="Key column names")] = None,
) -> ComparisonResponse:
    """
    Compare the first sheets of two workbooks, matching rows by key.

    Args:
        old_file: The old workbook.
        new_file: The new workbook.
        key_columns: One or more key column names.

    Returns:
        ComparisonResponse with row diffs and summary counts.
    """
    old_data, old_name = await read_upload(old_file)
    new_data, new_name = await read_upload(new_file)

    return get_service().compare_keyed(
        old_data,
        new_data,
        clean_key_columns(key_columns),
        old_file_name=old_name,
        new_file_name=new_name,
    )


@app.post(
    "/compare/keyed/export",
    tags=["Comparison"],
    summary="Export a keyed comparison as a workbook",
    response_model=None,
    responses={
        200: {"content": {XLSX_CONTENT_TYPE: {}}, "description": "Highlighted workbook"},
        400: {"model": ErrorResponse, "description": "Invalid workbook or key columns"},
        500: {"model": ErrorResponse, "description": "Export error"},
    },
)
async def export_keyed(
    old_file: Annotated[UploadFile, File(description="Old (reference) workbook")],
    new_file: Annotated[UploadFile, File(description="New workbook")],
    key_columns: Annotated[list[str] | None, Form(description="Key column names")] = None,
    include_unchanged: Annotated[bool, Query(description="Include unchanged rows")] = True,
    save: Annotated[bool, Query(description="Store the export instead of downloading it")] = False,
    file_name: Annotated[str, Query(description="File name of the export")] = "comparison.xlsx",
) -> Response | ExportSavedResponse:
    """
    Run a keyed comparison and return it as a color-coded workbook.

    Args:
        old_file: The old workbook.
        new_file: The new workbook.
        key_columns: One or more key column names.
        include_unchanged: Whether unchanged rows appear in the body.
        save: Store the export and return its location instead.
        file_name: File name of the export.

    Returns:
        The workbook download, or ExportSavedResponse when ``save`` is set.
    """
    old_data, old_name = await read_upload(old_file)
    new_data, new_name = await read_upload(new_file)

    data = get_service().export_keyed(
        old_data,
        new_data,
        clean_key_columns(key_columns),
        include_unchanged=include_unchanged,
        old_file_name=old_name,
        new_file_name=new_name,
    )
    return export_response(data, file_name, save)


@app.post(
    "/compare/grid",
    tags=["Comparison"],
    summary="Compare two workbooks cell by cell",
    response_model=GridComparisonResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid workbook or sheet index"},
        500: {"model": ErrorResponse, "description": "Comparison error"},
    },
)
async def compare_grid(
    old_file: Annotated[UploadFile, File(description="Old (reference) workbook")],
    new_file: Annotated[UploadFile, File(description="New workbook")],
    old_sheet_index: Annotated[int | None, Form(description="Sheet index in the old workbook")] = None,
    new_sheet_index: Annotated[int | None, Form(description="Sheet index in the new workbook")] = None,
) -> GridComparisonResponse:
    """
    Compare one sheet of each workbook cell by cell.

    Without both sheet indices, the response only lists the sheets of
    both workbooks so the caller can pick a pair.

    Args:
        old_file: The old workbook.
        new_file: The new workbook.
        old_sheet_index: 0-based sheet index in the old workbook.
        new_sheet_index: 0-based sheet index in the new workbook.

    Returns:
        GridComparisonResponse with the sheet lists or the comparison.
    """
    old_data, old_name = await read_upload(old_file)
    new_data, new_name = await read_upload(new_file)

    return get_service().compare_grid(
        old_data,
        new_data,
        old_sheet_index,
        new_sheet_index,
        old_file_name=old_name,
        new_file_name=new_name,
    )


@app.post(
    "/compare/grid/export",
    tags=["Comparison"],
    summary="Export a cell-by-cell comparison as a workbook",
    response_model=None,
    responses={
        200: {"content": {XLSX_CONTENT_TYPE: {}}, "description": "Highlighted workbook"},
        400: {"model": ErrorResponse, "description": "Invalid workbook or sheet index"},
        500: {"model": ErrorResponse, "description": "Export error"},
    },
)
async def export_grid(
    old_file: Annotated[UploadFile, File(description="Old (reference) workbook")],
    new_file: Annotated[UploadFile, File(description="New workbook")],
    old_sheet_index: Annotated[int, Form(description="Sheet index in the old workbook")] = 0,
    new_sheet_index: Annotated[int, Form(description="Sheet index in the new workbook")] = 0,
    include_unchanged: Annotated[bool, Query(description="Include rows without differences")] = True,
    save: Annotated[bool, Query(description="Store the export instead of downloading it")] = False,
    file_name: Annotated[str, Query(description="File name of the export")] = "comparison.xlsx",
) -> Response | ExportSavedResponse:
    """
    Run a cell-by-cell comparison and return it as a color-coded workbook.

    Args:
        old_file: The old workbook.
        new_file: The new workbook.
        old_sheet_index: 0-based sheet index in the old workbook.
        new_sheet_index: 0-based sheet index in the new workbook.
        include_unchanged: Whether rows without differences appear.
        save: Store the export and return its location instead.
        file_name: File name of the export.

    Returns:
        The workbook download, or ExportSavedResponse when ``save`` is set.
    """
    old_data, old_name = await read_upload(old_file)
    new_data, new_name = await read_upload(new_file)

    data = get_service().export_grid(
        old_data,
        new_data,
        old_sheet_index,
        new_sheet_index,
        include_unchanged=include_unchanged,
        old_file_name=old_name,
        new_file_name=new_name,
    )
    return export_response(data, file_name, save)


@app.post(
    "/invoices/export",
    tags=["Invoices"],
    summary="Export extracted invoices as a workbook",
    response_model=None,
    responses={
        200: {"content": {XLSX_CONTENT_TYPE: {}}, "description": "Invoice workbook"},
        422: {"model": ErrorResponse, "description": "Invalid invoice data"},
        500: {"model": ErrorResponse, "description": "Export error"},
    },
)
async def export_invoices(
    request: InvoiceExportRequest,
    save: Annotated[bool, Query(description="Store the export instead of downloading it")] = False,
) -> Response | ExportSavedResponse:
    """
    Export extracted invoices, one sheet per invoice or combined.

    Args:
        request: Invoices and export options.
        save: Store the export and return its location instead.

    Returns:
        The workbook download, or ExportSavedResponse when ``save`` is set.
    """
    data = get_service().export_invoices(request.invoices, request.batch_mode)
    return export_response(data, request.file_name, save)


@app.post(
    "/invoices/validate",
    tags=["Invoices"],
    summary="Check invoice line arithmetic",
    response_model=list[InvoiceValidationResult],
)
async def validate_invoices(request: InvoiceExportRequest) -> list[InvoiceValidationResult]:
    """
    Flag invoice rows where quantity x unit price does not match the total.

    Args:
        request: Invoices to check. Export options are ignored.

    Returns:
        One validation result per invoice.
    """
    return get_service().validate_invoices(request.invoices)


@app.get(
    "/exports/{path:path}",
    tags=["Exports"],
    summary="Download a saved export",
    responses={
        200: {"content": {XLSX_CONTENT_TYPE: {}}, "description": "Stored workbook"},
        404: {"model": ErrorResponse, "description": "Export not found"},
    },
)
async def download_export(path: str) -> Response:
    """
    Download an export stored with ``save=true``.

    Args:
        path: Storage path returned when the export was saved.

    Returns:
        The stored workbook.
    """
    data = get_service().load_export(path)
    return xlsx_response(data, PurePosixPath(path).name)


def run_server(
    host: str | None = None,
    port: int | None = None,
    reload: bool = False,
) -> None:
    """
    Run the FastAPI server.

    Args:
        host: Host to bind to. Defaults to the configured server host.
        port: Port to listen on. Defaults to the configured server port.
        reload: Whether to enable auto-reload. Defaults to False.

    Example:
        from sheetdiff.main import run_server
        run_server(host="127.0.0.1", port=8080)
    """
    settings = get_settings()
    uvicorn.run(
        "sheetdiff.main:app",
        host=host or settings.server_host,
        port=port or settings.server_port,
        reload=reload,
    )


if __name__ == "__main__":
    run_server()
