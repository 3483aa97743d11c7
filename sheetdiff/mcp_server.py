"""
MCP (Model Context Protocol) server for workbook comparison.

This module implements an MCP server that exposes the comparison service
as tools that can be called by AI agents. It provides the same comparisons
as the REST API, but works on workbook files given by path instead of
uploads.

MCP Tools:
    - list_sheets: List the sheets of a workbook
    - get_headers: Get the headers of a workbook's first sheet
    - compare_keyed: Compare two workbooks by key columns
    - compare_grid: Compare two workbooks cell by cell
    - export_comparison: Write a highlighted comparison workbook

Example:
    To run the MCP server:
        python -m sheetdiff.mcp_server

    Or programmatically:
        from sheetdiff.mcp_server import run_mcp_server
        run_mcp_server()
"""

import asyncio
import json
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    TextContent,
    Tool,
)

from sheetdiff.config import get_settings
from sheetdiff.exceptions.comparison_exceptions import (
    ExportError,
    SheetDiffError,
    UnreadableWorkbookError,
)
from sheetdiff.models.comparison_models import ComparisonMode, DiffType
from sheetdiff.services.comparison_service import ComparisonService
from sheetdiff.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

FILE_PAIR_PROPERTIES = {
    "old_file_path": {
        "type": "string",
        "description": "Path to the old (reference) workbook",
    },
    "new_file_path": {
        "type": "string",
        "description": "Path to the new workbook",
    },
}


def read_workbook_file(file_path: str) -> bytes:
    """
    Read a workbook file from disk.

    Args:
        file_path: Path to the workbook.

    Returns:
        The file contents.

    Raises:
        UnreadableWorkbookError: If the file cannot be read.
    """
    try:
        return Path(file_path).read_bytes()
    except OSError as e:
        raise UnreadableWorkbookError(file_name=file_path, reason=str(e)) from e


class MCPComparisonServer:
    """
    MCP server implementation for workbook comparison.

    This class wraps the ComparisonService and exposes it through the MCP
    protocol, allowing AI agents to compare workbooks using standardized
    tool calls.

    Attributes:
        service: The underlying ComparisonService instance.
        server: The MCP Server instance.

    Example:
        mcp_server = MCPComparisonServer()
        await mcp_server.run()
    """

    def __init__(self, service: ComparisonService | None = None) -> None:
        """
        Initialize the MCP comparison server.

        Args:
            service: Optional ComparisonService instance. If None, builds
                one from the application settings.
        """
        self.service = service or ComparisonService.from_settings(get_settings())
        self.server = Server("sheetdiff-mcp-server")
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Set up MCP request handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            """Return the list of available comparison tools."""
            return self._get_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            """Execute a tool and return the result."""
            result = await self._execute_tool(name, arguments)
            return [TextContent(type="text", text=json.dumps(result, default=str, indent=2))]

    def _get_tools(self) -> list[Tool]:
        """
        Get the list of available comparison tools.

        Returns:
            List of MCP Tool definitions.
        """
        return [
            Tool(
                name="list_sheets",
                description="List the sheets of a workbook with their row and column counts.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "file_path": {
                            "type": "string",
                            "description": "Path to the workbook",
                        },
                    },
                    "required": ["file_path"],
                },
            ),
            Tool(
                name="get_headers",
                description=(
                    "Get the header row of a workbook's first sheet. "
                    "Use it to choose key columns for compare_keyed."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "file_path": {
                            "type": "string",
                            "description": "Path to the workbook",
                        },
                    },
                    "required": ["file_path"],
                },
            ),
            Tool(
                name="compare_keyed",
                description=(
                    "Compare the first sheets of two workbooks, matching rows by one or "
                    "more key columns. Reports added, deleted, modified and unchanged rows."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        **FILE_PAIR_PROPERTIES,
                        "key_columns": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Key column names, in order",
                        },
                        "include_unchanged": {
                            "type": "boolean",
                            "description": "Include unchanged rows in the result (default: false)",
                            "default": False,
                        },
                    },
                    "required": ["old_file_path", "new_file_path", "key_columns"],
                },
            ),
            Tool(
                name="compare_grid",
                description=(
                    "Compare one sheet of each workbook cell by cell. Without sheet "
                    "indices, returns the sheets of both workbooks for selection."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        **FILE_PAIR_PROPERTIES,
                        "old_sheet_index": {
                            "type": "integer",
                            "description": "0-based sheet index in the old workbook",
                        },
                        "new_sheet_index": {
                            "type": "integer",
                            "description": "0-based sheet index in the new workbook",
                        },
                    },
                    "required": ["old_file_path", "new_file_path"],
                },
            ),
            Tool(
                name="export_comparison",
                description=(
                    "Compare two workbooks and write a color-coded comparison workbook: "
                    "green for added, red for deleted and amber for modified entries."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        **FILE_PAIR_PROPERTIES,
                        "output_path": {
                            "type": "string",
                            "description": "Path of the workbook to write",
                        },
                        "mode": {
                            "type": "string",
                            "enum": [mode.value for mode in ComparisonMode],
                            "description": "Comparison mode (default: keyed)",
                            "default": ComparisonMode.KEYED.value,
                        },
                        "key_columns": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Key column names (keyed mode)",
                        },
                        "old_sheet_index": {
                            "type": "integer",
                            "description": "0-based sheet index in the old workbook (grid mode)",
                            "default": 0,
                        },
                        "new_sheet_index": {
                            "type": "integer",
                            "description": "0-based sheet index in the new workbook (grid mode)",
                            "default": 0,
                        },
                        "include_unchanged": {
                            "type": "boolean",
                            "description": "Include unchanged entries (default: true)",
                            "default": True,
                        },
                    },
                    "required": ["old_file_path", "new_file_path", "output_path"],
                },
            ),
        ]

    def _export(self, arguments: dict[str, Any]) -> dict[str, Any]:
        old_path = arguments["old_file_path"]
        new_path = arguments["new_file_path"]
        mode = ComparisonMode(arguments.get("mode", ComparisonMode.KEYED.value))
        include_unchanged = arguments.get("include_unchanged", True)

        old_data = read_workbook_file(old_path)
        new_data = read_workbook_file(new_path)

        if mode is ComparisonMode.KEYED:
            data = self.service.export_keyed(
                old_data,
                new_data,
                arguments.get("key_columns", []),
                include_unchanged=include_unchanged,
                old_file_name=old_path,
                new_file_name=new_path,
            )
        else:
            data = self.service.export_grid(
                old_data,
                new_data,
                arguments.get("old_sheet_index", 0),
                arguments.get("new_sheet_index", 0),
                include_unchanged=include_unchanged,
                old_file_name=old_path,
                new_file_name=new_path,
            )

        output_path = Path(arguments["output_path"])
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(data)
        except OSError as e:
            raise ExportError(export_type=f"{mode.value}_comparison", reason=str(e)) from e

        return {
            "output_path": str(output_path),
            "mode": mode.value,
            "size_bytes": len(data),
        }

    async def _execute_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """
        Execute a tool with the given arguments.

        Args:
            name: The tool name.
            arguments: The tool arguments.

        Returns:
            Dictionary with "success" and either "data" or "error".
        """
        try:
            if name == "list_sheets":
                path = arguments["file_path"]
                sheets = self.service.list_sheets(read_workbook_file(path), path)
                return {"success": True, "data": [sheet.model_dump() for sheet in sheets]}

            elif name == "get_headers":
                path = arguments["file_path"]
                headers = self.service.get_headers(read_workbook_file(path), path)
                return {"success": True, "data": headers.model_dump()}

            elif name == "compare_keyed":
                old_path = arguments["old_file_path"]
                new_path = arguments["new_file_path"]
                response = self.service.compare_keyed(
                    read_workbook_file(old_path),
                    read_workbook_file(new_path),
                    arguments.get("key_columns", []),
                    old_file_name=old_path,
                    new_file_name=new_path,
                )
                if not arguments.get("include_unchanged", False):
                    response.result.diffs = [
                        diff
                        for diff in response.result.diffs
                        if diff.type is not DiffType.UNCHANGED
                    ]
                return {"success": True, "data": response.model_dump(mode="json")}

            elif name == "compare_grid":
                old_path = arguments["old_file_path"]
                new_path = arguments["new_file_path"]
                response = self.service.compare_grid(
                    read_workbook_file(old_path),
                    read_workbook_file(new_path),
                    arguments.get("old_sheet_index"),
                    arguments.get("new_sheet_index"),
                    old_file_name=old_path,
                    new_file_name=new_path,
                )
                data = response.model_dump(mode="json")
                if data["comparison"] is not None:
                    data["comparison"].pop("old_data")
                    data["comparison"].pop("new_data")
                return {"success": True, "data": data}

            elif name == "export_comparison":
                return {"success": True, "data": self._export(arguments)}

            else:
                return {
                    "success": False,
                    "error": {
                        "error_code": "UNKNOWN_TOOL",
                        "message": f"Unknown tool: {name}",
                    },
                }

        except SheetDiffError as e:
            return {
                "success": False,
                "error": e.to_dict(),
            }
        except Exception as e:
            logger.exception("Tool failed", tool=name)
            return {
                "success": False,
                "error": {
                    "error_code": "INTERNAL_ERROR",
                    "message": str(e),
                },
            }

    async def run(self) -> None:
        """
        Run the MCP server using stdio transport.

        This method starts the server and blocks until it is terminated.
        It uses stdin/stdout for communication with the MCP client.
        """
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


def run_mcp_server() -> None:
    """
    Run the MCP comparison server.

    This is the entry point for running the MCP server from the command line.
    Logging goes to stderr so it does not interfere with the stdio transport.

    Example:
        python -m sheetdiff.mcp_server
    """
    configure_logging(get_settings().effective_log_level)
    server = MCPComparisonServer()
    asyncio.run(server.run())


if __name__ == "__main__":
    run_mcp_server()
