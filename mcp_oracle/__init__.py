"""
Oracle MCP - Rust code model and dependency graph over MCP.
"""

__version__ = "0.1.0"
