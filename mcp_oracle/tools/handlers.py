"""
Tool handlers for Oracle MCP Server.

Implements the actual logic for each tool defined in definitions.py.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

from ..analyzer import (
    DependencyAnalyzer,
    ItemCategory,
    ProjectModel,
    RustAnalyzer,
    analyze_project,
    definition,
    filter_dependencies,
    filter_items,
    find_by_qualified_name,
    qualified_name,
    to_dict,
)
from ..config import Settings
from ..errors import OracleError


logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 50

_NO_PROJECT = "No project analyzed. Run oracle_analyze_project first."
_NO_DEPENDENCIES = "No dependency data. The analyzed project has no usable Cargo.toml."


class ToolHandlers:
    """Handlers for all MCP tools.

    Holds the most recently analyzed project. Analyzing again replaces it.
    """

    def __init__(self, settings: Settings):
        """Initialize tool handlers.

        Args:
            settings: Server settings (project path, include_private default)
        """
        self.settings = settings
        self._project: ProjectModel | None = None

    @property
    def project(self) -> ProjectModel | None:
        return self._project

    async def handle_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Route tool call to appropriate handler.

        Args:
            name: Tool name
            arguments: Tool arguments

        Returns:
            Tool result
        """
        handler = getattr(self, f"_handle_{name}", None)
        if handler is None:
            raise ValueError(f"Unknown tool: {name}")
        try:
            return await handler(arguments)
        except OracleError as e:
            logger.warning("Tool %s failed: %s", name, e)
            return {"success": False, "error": str(e)}

    def _include_private(self, args: dict[str, Any]) -> bool:
        value = args.get("include_private")
        return self.settings.include_private if value is None else bool(value)

    def _dependencies(self) -> DependencyAnalyzer | None:
        if self._project is None:
            return None
        return self._project.dependencies

    # ==================== Analysis Tools ====================

    async def _handle_oracle_analyze_source(self, args: dict[str, Any]) -> dict[str, Any]:
        """Extract items from a source snippet."""
        source = args.get("source", "")
        module_path = args.get("module_path")

        analyzer = RustAnalyzer(include_private=self._include_private(args))
        items = await asyncio.to_thread(analyzer.analyze_source, source, None, module_path)

        return {
            "success": True,
            "items": [to_dict(item) for item in items],
            "count": len(items),
        }

    async def _handle_oracle_analyze_project(self, args: dict[str, Any]) -> dict[str, Any]:
        """Analyze a project and make it the current one."""
        path = Path(args.get("path") or self.settings.project_path)
        if not path.exists():
            return {"success": False, "error": f"Path does not exist: {path}"}

        project = await asyncio.to_thread(analyze_project, path, self._include_private(args))
        self._project = project

        result: dict[str, Any] = {
            "success": True,
            "project_path": project.project_path,
            "analyzed_files": project.analyzed_files,
            "item_count": len(project.items),
            "failures": [f.to_dict() for f in project.failures],
        }
        if project.crate_info is not None:
            result["crate"] = project.crate_info.name
            result["dependency_count"] = max(len(project.dependency_tree) - 1, 0)
        return result

    # ==================== Query Tools ====================

    async def _handle_oracle_search_items(self, args: dict[str, Any]) -> dict[str, Any]:
        """Search items of the current project."""
        if self._project is None:
            return {"success": False, "error": _NO_PROJECT}

        query = args.get("query", "")
        limit = int(args.get("limit") or DEFAULT_SEARCH_LIMIT)
        try:
            category = ItemCategory(args.get("category") or ItemCategory.ALL.value)
        except ValueError:
            return {"success": False, "error": f"Unknown category: {args.get('category')}"}

        matches = filter_items(self._project.items, query, category)
        return {
            "success": True,
            "items": [
                {
                    "kind": item.kind.value,
                    "name": item.name,
                    "qualified_name": qualified_name(item),
                    "location": str(item.source_location) if item.source_location else None,
                }
                for item in matches[:limit]
            ],
            "count": len(matches),
        }

    async def _handle_oracle_item_detail(self, args: dict[str, Any]) -> dict[str, Any]:
        """Get one item with its rendered definition."""
        if self._project is None:
            return {"success": False, "error": _NO_PROJECT}

        qualified = args.get("qualified_name", "")
        item = find_by_qualified_name(self._project.items, qualified)
        if item is None:
            return {"success": False, "error": f"Item not found: {qualified}"}

        return {
            "success": True,
            "item": to_dict(item),
            "definition": definition(item),
        }

    # ==================== Dependency Tools ====================

    async def _handle_oracle_dependency_tree(self, args: dict[str, Any]) -> dict[str, Any]:
        """Get the dependency tree of a package."""
        dependencies = self._dependencies()
        if dependencies is None:
            return {"success": False, "error": _NO_PROJECT if self._project is None else _NO_DEPENDENCIES}

        root = args.get("root")
        if root is None:
            root_info = dependencies.root_package()
            if root_info is None:
                return {"success": False, "error": "No root package; pass 'root'"}
            root = root_info.name

        tree = dependencies.dependency_tree(root)
        query = args.get("query")
        if query:
            tree = filter_dependencies(tree, query)

        return {
            "success": True,
            "root": root,
            "tree": [{"name": name, "depth": depth} for name, depth in tree],
            "count": len(tree),
        }

    async def _handle_oracle_direct_dependencies(self, args: dict[str, Any]) -> dict[str, Any]:
        """List the dependencies a package declares."""
        dependencies = self._dependencies()
        if dependencies is None:
            return {"success": False, "error": _NO_PROJECT if self._project is None else _NO_DEPENDENCIES}

        name = args.get("name", "")
        deps = dependencies.direct_dependencies(name)
        return {
            "success": True,
            "name": name,
            "dependencies": [d.to_dict() for d in deps],
            "count": len(deps),
        }

    async def _handle_oracle_crate_info(self, args: dict[str, Any]) -> dict[str, Any]:
        """Get package metadata."""
        dependencies = self._dependencies()
        if dependencies is None:
            return {"success": False, "error": _NO_PROJECT if self._project is None else _NO_DEPENDENCIES}

        name = args.get("name")
        info = dependencies.root_package() if name is None else dependencies.get_crate_info(name)
        if info is None:
            return {"success": False, "error": f"Crate not found: {name or '<root>'}"}

        return {
            "success": True,
            "crate": info.to_dict(),
            "total_dependencies": dependencies.total_dependency_count(info.name),
        }
