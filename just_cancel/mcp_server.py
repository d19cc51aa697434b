"""
MCP Server Wiring

Binds the ProtocolDispatcher to a low-level ``mcp`` Server.

List operations use the SDK's decorators. Tool calls and resource reads are
registered as raw request handlers so the dispatcher controls argument
validation and the result ``_meta`` exactly. JustCancelError subclasses are
converted to McpError with their JSON-RPC code; anything else propagates
to the SDK, which answers with a generic JSON-RPC error.
"""

from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.shared.exceptions import McpError

from . import __version__
from .dispatcher import ProtocolDispatcher
from .errors import JustCancelError
from .logging_config import get_logger

logger = get_logger(__name__)

SERVER_NAME = "just-cancel"
SERVER_INSTRUCTIONS = (
    "Just Cancel helps users analyze their subscriptions and discover which ones "
    "to cancel to save money on monthly expenses."
)


def to_mcp_error(error: JustCancelError) -> McpError:
    return McpError(
        types.ErrorData(code=error.rpc_code, message=error.message, data=error.to_dict())
    )


def request_meta(params: Any) -> dict[str, Any]:
    """Request ``_meta`` as a plain dict (empty when absent)."""
    meta = getattr(params, "meta", None)
    if meta is None:
        return {}
    return meta.model_dump(by_alias=True, exclude_none=True)


def create_mcp_server(dispatcher: ProtocolDispatcher) -> Server:
    """
    Create the MCP server for a dispatcher.

    Args:
        dispatcher: Dispatcher implementing the tool and resource operations

    Returns:
        Configured low-level Server, ready for ``server.run(read, write, ...)``
    """
    server = Server(SERVER_NAME, version=__version__, instructions=SERVER_INSTRUCTIONS)

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        return [types.Resource.model_validate(r) for r in dispatcher.list_resources()]

    @server.list_resource_templates()
    async def list_resource_templates() -> list[types.ResourceTemplate]:
        return [
            types.ResourceTemplate.model_validate(t)
            for t in dispatcher.list_resource_templates()
        ]

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [types.Tool.model_validate(t) for t in dispatcher.list_tools()]

    async def read_resource(req: types.ReadResourceRequest) -> types.ServerResult:
        try:
            contents = dispatcher.read_resource(str(req.params.uri))
        except JustCancelError as e:
            logger.warning(f"Resource read failed: {e.message}")
            raise to_mcp_error(e) from e

        return types.ServerResult(
            types.ReadResourceResult(contents=[types.TextResourceContents.model_validate(contents)])
        )

    async def call_tool(req: types.CallToolRequest) -> types.ServerResult:
        name = req.params.name
        logger.info(f"Tool called: {name}", extra={"tool_name": name})

        try:
            result = await dispatcher.call_tool(
                name, req.params.arguments, request_meta(req.params)
            )
        except JustCancelError as e:
            raise to_mcp_error(e) from e

        return types.ServerResult(types.CallToolResult.model_validate(result))

    server.request_handlers[types.ReadResourceRequest] = read_resource
    server.request_handlers[types.CallToolRequest] = call_tool

    return server
