"""Server package: query service and the MCP stdio server."""

from .errors import ErrorCode, MCPError
from .query_service import QueryService, NO_RESULTS_ANSWER, format_search_response, format_document
from .mcp_server import MCPServer, TOOLS

__all__ = [
    'ErrorCode',
    'MCPError',
    'QueryService',
    'NO_RESULTS_ANSWER',
    'format_search_response',
    'format_document',
    'MCPServer',
    'TOOLS'
]
