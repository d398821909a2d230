"""
MCP Tool definitions for Oracle.

All tools are defined here with their schemas.
Handlers are implemented in handlers.py.
"""

from typing import Any

# Tool schema type
Tool = dict[str, Any]


# ==================== Analysis Tools ====================

ANALYSIS_TOOLS: list[Tool] = [
    {
        "name": "oracle_analyze_source",
        "description": "Extract items (functions, structs, enums, traits, impls, modules, type aliases, consts, statics) from a Rust source snippet.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "source": {"type": "string", "description": "Rust source code"},
                "module_path": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Module path of the snippet (e.g., ['serde', 'de'])",
                },
                "include_private": {"type": "boolean", "description": "Include non-pub items (default: server setting)"},
            },
            "required": ["source"],
        },
    },
    {
        "name": "oracle_analyze_project",
        "description": "Analyze a Rust project (all files under src/ plus cargo dependencies). Replaces the previously analyzed project.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Project root or .rs file (default: configured project)"},
                "include_private": {"type": "boolean", "description": "Include non-pub items (default: server setting)"},
            },
        },
    },
]


# ==================== Query Tools ====================

QUERY_TOOLS: list[Tool] = [
    {
        "name": "oracle_search_items",
        "description": "Search analyzed items by name, or by qualified path when the query contains '::'.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Name or path fragment (e.g., 'parse' or 'de::Deserialize')"},
                "category": {
                    "type": "string",
                    "enum": ["types", "functions", "modules", "all"],
                    "description": "Item group (default: all)",
                },
                "limit": {"type": "integer", "description": "Maximum results (default: 50)"},
            },
        },
    },
    {
        "name": "oracle_item_detail",
        "description": "Get the full record and rendered definition of an item by qualified name.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "qualified_name": {"type": "string", "description": "Qualified name (e.g., 'analyzer::parser::RustAnalyzer')"},
            },
            "required": ["qualified_name"],
        },
    },
]


# ==================== Dependency Tools ====================

DEPENDENCY_TOOLS: list[Tool] = [
    {
        "name": "oracle_dependency_tree",
        "description": "Get the transitive dependency tree as (name, depth) entries in depth-first order.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "root": {"type": "string", "description": "Package to start from (default: root package)"},
                "query": {"type": "string", "description": "Filter by crate name; result is sorted alphabetically"},
            },
        },
    },
    {
        "name": "oracle_direct_dependencies",
        "description": "List the dependencies a package declares (normal, dev and build).",
        "inputSchema": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Package name"},
            },
            "required": ["name"],
        },
    },
    {
        "name": "oracle_crate_info",
        "description": "Get package metadata (version, license, features, ...) and its transitive dependency count.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Package name (default: root package)"},
            },
        },
    },
]


# ==================== All Tools ====================

ALL_TOOLS: list[Tool] = [
    *ANALYSIS_TOOLS,
    *QUERY_TOOLS,
    *DEPENDENCY_TOOLS,
]
