# Socket Docs MCP Server - JSON-RPC 2.0 over stdio
# Exposes the search_docs and get_doc tools over the local documentation corpus

import sys, json, math, asyncio, logging, argparse
from typing import Dict, Any, List, Optional, Sequence

from config.settings import DocsConfig, load_config
from observability.logging import setup_logging

from .errors import ErrorCode, MCPError
from .query_service import QueryService

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

TOOLS = [
    {
        "name": "search_docs",
        "description": "Search Socket.dev documentation for relevant content",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query for documentation"
                },
                "limit": {
                    "type": "number",
                    "description": "Maximum number of results to return (default: 5)",
                    "default": 5
                }
            },
            "required": ["query"]
        }
    },
    {
        "name": "get_doc",
        "description": "Retrieve a specific documentation page by URL",
        "inputSchema": {
            "type": "object",
            "properties": {
                "url": {
                    "type": "string",
                    "description": "Canonical URL of the documentation page"
                }
            },
            "required": ["url"]
        }
    }
]


def text_result(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap an envelope as MCP text content."""
    return {"content": [{"type": "text", "text": json.dumps(payload, indent=2)}]}


class MCPServer:
    def __init__(self, service: QueryService, allowed_url_prefixes: Sequence[str]):
        self.service = service
        self.allowed_url_prefixes = tuple(allowed_url_prefixes)
        self.capabilities = {
            "tools": {}
        }
        self.server_info = {
            "name": "socket-docs-server",
            "version": "1.0.0"
        }
        self.session_initialized = False

    @classmethod
    def from_config(cls, config: DocsConfig) -> 'MCPServer':
        return cls(QueryService.from_config(config), config.allowed_url_prefixes)

    async def handle_initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Handle MCP initialize request"""
        client_info = params.get("clientInfo", {})
        logger.info(f"Initializing MCP session with client: {client_info.get('name', 'unknown')}")

        return {
            "protocolVersion": params.get("protocolVersion", PROTOCOL_VERSION),
            "capabilities": self.capabilities,
            "serverInfo": self.server_info
        }

    async def handle_initialized(self, params: Dict[str, Any]) -> None:
        """Handle MCP initialized notification"""
        self.session_initialized = True
        logger.info("MCP session initialized successfully")

    async def handle_tools_list(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": TOOLS}

    async def handle_tools_call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Execute MCP tool calls"""
        name = params.get("name")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise MCPError(ErrorCode.INVALID_PARAMS, "Tool arguments must be an object")

        try:
            if name == "search_docs":
                return await self._tool_search_docs(arguments)
            elif name == "get_doc":
                return await self._tool_get_doc(arguments)
            else:
                raise MCPError(ErrorCode.METHOD_NOT_FOUND, f"Unknown tool: {name}")
        except MCPError:
            raise
        except Exception as e:
            logger.exception(f"Tool {name} failed")
            raise MCPError(ErrorCode.INTERNAL_ERROR, f"Tool execution failed: {e}")

    async def _tool_search_docs(self, args: Dict[str, Any]) -> Dict[str, Any]:
        query = args.get("query")
        if not query or not isinstance(query, str):
            raise MCPError(ErrorCode.INVALID_PARAMS,
                           "Query parameter is required and must be a string")

        limit = args.get("limit")
        if limit is not None:
            if isinstance(limit, bool) or not isinstance(limit, (int, float)):
                raise MCPError(ErrorCode.INVALID_PARAMS, "Limit parameter must be a number")
            if not math.isfinite(limit):
                raise MCPError(ErrorCode.INVALID_PARAMS, "Limit parameter must be finite")
            limit = int(limit)

        return text_result(await self.service.search_docs(query, limit))

    async def _tool_get_doc(self, args: Dict[str, Any]) -> Dict[str, Any]:
        url = args.get("url")
        if not url or not isinstance(url, str):
            raise MCPError(ErrorCode.INVALID_PARAMS,
                           "URL parameter is required and must be a string")

        if not url.startswith(self.allowed_url_prefixes):
            allowed = " or ".join(self.allowed_url_prefixes)
            raise MCPError(ErrorCode.INVALID_PARAMS, f"URL must start with {allowed}")

        return text_result(await self.service.get_doc(url))

    async def handle_request(self, request_data: Any) -> Optional[Dict[str, Any]]:
        """Dispatch one JSON-RPC 2.0 message"""
        if not isinstance(request_data, dict):
            return self._error_response(None, MCPError(ErrorCode.INVALID_REQUEST, "Request must be an object"))

        request_id = request_data.get("id")
        is_notification = "id" not in request_data

        try:
            if request_data.get("jsonrpc") != "2.0":
                raise MCPError(ErrorCode.INVALID_REQUEST, "Invalid JSON-RPC version")

            method = request_data.get("method")
            params = request_data.get("params")
            if params is None:
                params = {}
            if not isinstance(params, dict):
                raise MCPError(ErrorCode.INVALID_PARAMS, "Params must be an object")

            if not method or not isinstance(method, str):
                raise MCPError(ErrorCode.INVALID_REQUEST, "Missing method")

            if method == "initialize":
                result = await self.handle_initialize(params)
            elif method in ("notifications/initialized", "initialized"):
                await self.handle_initialized(params)
                return None  # Notification, no response
            elif method == "ping":
                result = {}
            elif method == "tools/list":
                result = await self.handle_tools_list(params)
            elif method == "tools/call":
                result = await self.handle_tools_call(params)
            else:
                raise MCPError(ErrorCode.METHOD_NOT_FOUND, f"Unknown method: {method}")

        except MCPError as e:
            logger.warning(f"Request failed: {e.message}")
            return None if is_notification else self._error_response(request_id, e)
        except Exception as e:
            logger.exception(f"Error handling request: {e}")
            error = MCPError(ErrorCode.INTERNAL_ERROR, str(e))
            return None if is_notification else self._error_response(request_id, error)

        if is_notification:
            return None

        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "result": result
        }

    def _error_response(self, request_id: Any, error: MCPError) -> Dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": error.to_dict()
        }

    async def handle_line(self, line: str) -> Optional[Dict[str, Any]]:
        """Decode one stdio line and dispatch it."""
        try:
            request_data = json.loads(line)
        except json.JSONDecodeError as e:
            return self._error_response(None, MCPError(ErrorCode.PARSE_ERROR, f"Parse error: {e}"))
        return await self.handle_request(request_data)

    async def serve_stdio(self, stdin=None, stdout=None) -> None:
        """Read requests line by line until EOF."""
        stdin = stdin or sys.stdin
        stdout = stdout or sys.stdout
        logger.info("Starting MCP server in stdio mode")

        while True:
            try:
                line = stdin.readline()
            except OSError as e:
                logger.error(f"stdin closed: {e}")
                break
            if not line:
                break
            if not line.strip():
                continue

            response = await self.handle_line(line.strip())
            if response:  # Don't send response for notifications
                try:
                    stdout.write(json.dumps(response) + "\n")
                    stdout.flush()
                except OSError as e:
                    logger.error(f"stdout closed: {e}")
                    break

        logger.info("MCP server stopped")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Socket docs MCP server (JSON-RPC over stdio)")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--log-level", help="Log level (overrides config)")
    parser.add_argument("--log-file", help="Also append JSON log lines to this file")
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None):
    """Main entry point for MCP server"""
    args = parse_args(argv)
    config = load_config(args.config)

    # stdout carries protocol messages
    setup_logging(
        level=args.log_level or config.log_level,
        service_name="socket-docs-server",
        log_file=args.log_file or config.log_file,
        use_json=config.json_logs,
        use_colors=False,
        stream=sys.stderr
    )

    server = MCPServer.from_config(config)
    await server.serve_stdio()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
