"""
Tool definitions and handlers for Oracle MCP Server.

Categories:
- Analysis tools: Extract items from source snippets or whole projects
- Query tools: Search items and inspect definitions
- Dependency tools: Dependency tree, direct dependencies, crate metadata
"""

from .definitions import ALL_TOOLS
from .handlers import ToolHandlers

__all__ = ["ALL_TOOLS", "ToolHandlers"]
