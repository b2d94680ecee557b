"""Azure DevOps MCP Server - Expose work items, repositories and code search to AI assistants."""
import asyncio
import logging
import sys

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolRequest, CallToolResult, ServerResult, TextContent, Tool

from ado_core.config import Settings, get_settings
from ado_core.connection import AzureDevOpsConnection

from . import __version__, dispatcher, tools


# Configure logging to stderr (stdout carries the protocol)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stderr,
    force=True
)
logger = logging.getLogger("azure-devops-mcp")


def create_server(connection: AzureDevOpsConnection) -> Server:
    """Build the MCP server around one shared connection."""
    app = Server("azure-devops-mcp", version=__version__)

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        """List available MCP tools for Azure DevOps."""
        return tools.get_tools()

    async def call_tool(req: CallToolRequest) -> ServerResult:
        """Handle MCP tool calls by delegating to the dispatcher.

        Registered directly rather than with @app.call_tool(), so absent
        arguments reach the dispatcher as None and it does all validation.
        """
        name = req.params.name
        arguments = req.params.arguments
        logger.info(f"Tool call: {name} with arguments: {arguments}")
        response = await dispatcher.invoke(
            connection, dispatcher.ToolInvocationRequest(name=name, arguments=arguments)
        )
        return ServerResult(CallToolResult(
            content=[TextContent(type="text", text=response.text)],
            isError=response.is_error,
        ))

    app.request_handlers[CallToolRequest] = call_tool
    return app


async def serve(settings: Settings) -> None:
    """Connect to the organization and serve MCP over stdio until the client goes away."""
    logger.info(f"MCP Server starting for {settings.organization_url}")
    async with AzureDevOpsConnection(settings) as connection:
        await connection.test_connection()
        logger.info(f"Connected to {settings.organization_url}")

        app = create_server(connection)
        async with stdio_server() as (read_stream, write_stream):
            await app.run(read_stream, write_stream, app.create_initialization_options())


async def main():
    """Run the MCP server."""
    await serve(get_settings())


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
