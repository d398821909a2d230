"""
Tests for MCP tools module.

Tests cover:
- Tool definitions
- Handler routing
- Individual tool handlers
"""

import tempfile
from pathlib import Path

import pytest

from mcp_oracle.analyzer import DependencyAnalyzer, ProjectModel
from mcp_oracle.config import Settings
from mcp_oracle.tools import ALL_TOOLS, ToolHandlers
from mcp_oracle.tools.definitions import ANALYSIS_TOOLS, DEPENDENCY_TOOLS, QUERY_TOOLS


# ==================== Tool Definitions Tests ====================


class TestToolDefinitions:
    """Test tool definition schemas."""

    def test_all_tools_count(self):
        """Verify total tool count."""
        assert len(ALL_TOOLS) == len(ANALYSIS_TOOLS) + len(QUERY_TOOLS) + len(DEPENDENCY_TOOLS)

    def test_tool_names(self):
        """Verify tool names."""
        names = {t["name"] for t in ALL_TOOLS}
        assert names == {
            "oracle_analyze_source",
            "oracle_analyze_project",
            "oracle_search_items",
            "oracle_item_detail",
            "oracle_dependency_tree",
            "oracle_direct_dependencies",
            "oracle_crate_info",
        }

    def test_tool_schema_format(self):
        """Verify all tools have required schema fields."""
        for tool in ALL_TOOLS:
            assert "name" in tool, f"Tool missing name: {tool}"
            assert "description" in tool, f"Tool missing description: {tool}"
            assert "inputSchema" in tool, f"Tool missing inputSchema: {tool}"
            assert tool["inputSchema"]["type"] == "object"

    def test_every_tool_has_handler(self):
        """Verify each definition routes to a handler."""
        for tool in ALL_TOOLS:
            assert hasattr(ToolHandlers, f"_handle_{tool['name']}"), tool["name"]


# ==================== Fixtures ====================


@pytest.fixture
def temp_codebase():
    """Create a temporary Rust project for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        src_dir = root / "src"
        src_dir.mkdir()

        (src_dir / "lib.rs").write_text("""
//! Test library

/// Returns the answer.
pub fn test_function() -> i32 {
    42
}

pub mod shapes {
    #[derive(Debug)]
    pub struct Square(pub f64);

    fn helper() {}
}
""")

        yield root


@pytest.fixture
def handlers(temp_codebase):
    """Create handlers for the temporary project."""
    return ToolHandlers(Settings(project_path=temp_codebase))


@pytest.fixture
def dependency_project():
    """A project model carrying dependency data."""
    metadata = {
        "packages": [
            {
                "name": "app",
                "version": "1.0.0",
                "id": "app 1.0.0",
                "license": "MIT",
                "dependencies": [
                    {"name": "serde-json", "req": "^1", "kind": None},
                    {"name": "tempfile", "req": "^3", "kind": "dev"},
                ],
            },
            {
                "name": "serde-json",
                "version": "1.0.1",
                "id": "serde-json 1.0.1",
                "dependencies": [{"name": "serde", "req": "^1", "kind": None}],
            },
            {"name": "serde", "version": "1.0.2", "id": "serde 1.0.2", "dependencies": []},
            {"name": "tempfile", "version": "3.0.0", "id": "tempfile 3.0.0", "dependencies": []},
        ],
        "resolve": {"root": "app 1.0.0", "nodes": []},
        "workspace_root": "/work",
    }
    analyzer = DependencyAnalyzer.from_metadata(metadata)
    return ProjectModel(
        project_path="/work",
        crate_info=analyzer.root_package(),
        dependency_tree=analyzer.dependency_tree("app"),
        dependencies=analyzer,
    )


# ==================== Handler Routing Tests ====================


class TestHandlerRouting:
    """Test handler routing logic."""

    def test_handlers_init(self, handlers, temp_codebase):
        """Test handlers initialization."""
        assert handlers.settings.project_path == temp_codebase
        assert handlers.project is None

    @pytest.mark.asyncio
    async def test_handle_unknown_tool(self, handlers):
        """Test handling of unknown tool."""
        with pytest.raises(ValueError, match="Unknown tool"):
            await handlers.handle_tool("nonexistent_tool", {})

    @pytest.mark.asyncio
    async def test_queries_need_project(self, handlers):
        """Test query tools before any analysis."""
        for name in ("oracle_search_items", "oracle_item_detail", "oracle_dependency_tree", "oracle_crate_info"):
            result = await handlers.handle_tool(name, {"qualified_name": "x"})
            assert not result["success"]
            assert "oracle_analyze_project" in result["error"]


# ==================== Analysis Tools Tests ====================


class TestAnalysisTools:
    """Test analysis tools."""

    @pytest.mark.asyncio
    async def test_analyze_source(self, handlers):
        """Test analyzing a snippet."""
        result = await handlers.handle_tool(
            "oracle_analyze_source",
            {"source": "mod inner { pub fn g() {} }", "module_path": ["pkg"]},
        )

        assert result["success"]
        assert result["count"] == 2
        assert [i["qualified_name"] for i in result["items"]] == ["pkg::inner::g", "pkg::inner"]

    @pytest.mark.asyncio
    async def test_analyze_source_public_only(self, handlers):
        """Test include_private=False."""
        result = await handlers.handle_tool(
            "oracle_analyze_source",
            {"source": "pub fn a() {}\nfn b() {}", "include_private": False},
        )

        assert [i["name"] for i in result["items"]] == ["a"]

    @pytest.mark.asyncio
    async def test_analyze_source_parse_error(self, handlers):
        """Test malformed source reports an error result."""
        result = await handlers.handle_tool("oracle_analyze_source", {"source": "fn broken( {"})

        assert not result["success"]
        assert "Parse error" in result["error"]

    @pytest.mark.asyncio
    async def test_analyze_project(self, handlers):
        """Test analyzing the configured project."""
        result = await handlers.handle_tool("oracle_analyze_project", {})

        assert result["success"]
        assert result["analyzed_files"] == 1
        assert result["item_count"] == 4
        assert result["failures"] == []
        assert handlers.project is not None

    @pytest.mark.asyncio
    async def test_analyze_project_missing_path(self, handlers):
        """Test a nonexistent path."""
        result = await handlers.handle_tool("oracle_analyze_project", {"path": "/nonexistent/project"})

        assert not result["success"]
        assert "does not exist" in result["error"]

    @pytest.mark.asyncio
    async def test_reanalysis_replaces_project(self, handlers):
        """Test a second analysis replaces the first."""
        await handlers.handle_tool("oracle_analyze_project", {})
        first = handlers.project
        await handlers.handle_tool("oracle_analyze_project", {"include_private": False})

        assert handlers.project is not first
        assert len(handlers.project.items) < len(first.items)


# ==================== Query Tools Tests ====================


class TestQueryTools:
    """Test search and detail tools."""

    @pytest.mark.asyncio
    async def test_search_items(self, handlers):
        """Test searching by name."""
        await handlers.handle_tool("oracle_analyze_project", {})
        result = await handlers.handle_tool("oracle_search_items", {"query": "square"})

        assert result["success"]
        assert result["count"] == 1
        assert result["items"][0]["qualified_name"] == "shapes::Square"
        assert result["items"][0]["location"].endswith("lib.rs:11")

    @pytest.mark.asyncio
    async def test_search_items_category_and_limit(self, handlers):
        """Test category filtering and result limits."""
        await handlers.handle_tool("oracle_analyze_project", {})
        result = await handlers.handle_tool("oracle_search_items", {"category": "functions", "limit": 1})

        assert result["count"] == 2
        assert len(result["items"]) == 1

    @pytest.mark.asyncio
    async def test_search_items_bad_category(self, handlers):
        """Test an unknown category."""
        await handlers.handle_tool("oracle_analyze_project", {})
        result = await handlers.handle_tool("oracle_search_items", {"category": "widgets"})

        assert not result["success"]

    @pytest.mark.asyncio
    async def test_item_detail(self, handlers):
        """Test item detail with definition."""
        await handlers.handle_tool("oracle_analyze_project", {})
        result = await handlers.handle_tool("oracle_item_detail", {"qualified_name": "shapes::Square"})

        assert result["success"]
        assert result["item"]["derives"] == ["Debug"]
        assert result["definition"] == "pub struct Square(pub f64);"

    @pytest.mark.asyncio
    async def test_item_detail_not_found(self, handlers):
        """Test unknown qualified names."""
        await handlers.handle_tool("oracle_analyze_project", {})
        result = await handlers.handle_tool("oracle_item_detail", {"qualified_name": "nope::Nothing"})

        assert not result["success"]


# ==================== Dependency Tools Tests ====================


class TestDependencyTools:
    """Test dependency tools."""

    @pytest.mark.asyncio
    async def test_no_dependency_data(self, handlers):
        """Test projects analyzed without Cargo.toml."""
        await handlers.handle_tool("oracle_analyze_project", {})
        result = await handlers.handle_tool("oracle_dependency_tree", {})

        assert not result["success"]
        assert "Cargo.toml" in result["error"]

    @pytest.mark.asyncio
    async def test_dependency_tree(self, handlers, dependency_project):
        """Test the tree from the root package."""
        handlers._project = dependency_project
        result = await handlers.handle_tool("oracle_dependency_tree", {})

        assert result["success"]
        assert result["root"] == "app"
        assert [(e["name"], e["depth"]) for e in result["tree"]] == [
            ("app", 0),
            ("serde-json", 1),
            ("serde", 2),
            ("tempfile", 1),
        ]

    @pytest.mark.asyncio
    async def test_dependency_tree_query(self, handlers, dependency_project):
        """Test filtering the tree."""
        handlers._project = dependency_project
        result = await handlers.handle_tool("oracle_dependency_tree", {"query": "serde_"})

        assert [e["name"] for e in result["tree"]] == ["serde-json"]

    @pytest.mark.asyncio
    async def test_direct_dependencies(self, handlers, dependency_project):
        """Test direct dependencies with kinds."""
        handlers._project = dependency_project
        result = await handlers.handle_tool("oracle_direct_dependencies", {"name": "app"})

        assert result["count"] == 2
        assert [(d["name"], d["kind"]) for d in result["dependencies"]] == [
            ("serde-json", "normal"),
            ("tempfile", "dev"),
        ]

    @pytest.mark.asyncio
    async def test_crate_info(self, handlers, dependency_project):
        """Test root crate info with transitive count."""
        handlers._project = dependency_project
        result = await handlers.handle_tool("oracle_crate_info", {})

        assert result["crate"]["name"] == "app"
        assert result["crate"]["license"] == "MIT"
        assert result["total_dependencies"] == 3

    @pytest.mark.asyncio
    async def test_crate_info_unknown(self, handlers, dependency_project):
        """Test unknown crates."""
        handlers._project = dependency_project
        result = await handlers.handle_tool("oracle_crate_info", {"name": "ghost"})

        assert not result["success"]
