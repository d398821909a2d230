"""
Oracle MCP Server

Exposes the Rust code model and the crate dependency graph as MCP tools.

Architecture:
- Analyzer: tree-sitter item extraction with inline module expansion
- Dependencies: cargo metadata package graph (rustworkx)
- Tools: analysis, search and dependency queries over stdio
"""

import asyncio
import json
import logging
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .config import Settings
from .tools import ALL_TOOLS, ToolHandlers

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("mcp-oracle")


def create_server(settings: Settings | None = None) -> tuple[Server, ToolHandlers]:
    """Create and configure MCP server.

    Args:
        settings: Server settings (read from the environment when omitted)

    Returns:
        Tuple of (server, handlers)
    """
    if settings is None:
        settings = Settings.from_env()
    logging.getLogger().setLevel(settings.log_level_value)

    logger.info("Oracle MCP Server initializing")
    logger.info(f"Project: {settings.project_path}")
    logger.info(f"Include private items: {settings.include_private}")

    handlers = ToolHandlers(settings)
    server = Server("oracle-mcp")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        return [
            Tool(
                name=tool["name"],
                description=tool["description"],
                inputSchema=tool["inputSchema"],
            )
            for tool in ALL_TOOLS
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle tool invocation."""
        logger.info(f"Tool called: {name}")

        try:
            result = await handlers.handle_tool(name, arguments or {})
            return [TextContent(type="text", text=json.dumps(result, indent=2, default=str))]
        except Exception as e:
            logger.error(f"Tool error: {e}", exc_info=True)
            return [TextContent(type="text", text=json.dumps({"error": str(e)}))]

    return server, handlers


async def main():
    """Main entry point for MCP server."""
    logger.info("Starting Oracle MCP Server...")

    server, handlers = create_server()

    logger.info(f"Registered {len(ALL_TOOLS)} tools")

    async with stdio_server() as (read_stream, write_stream):
        logger.info("Server running on stdio")
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def cli_main():
    """CLI entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
