"""
Tests for whole-project analysis.
"""

import shutil
import tempfile
from pathlib import Path

import pytest

from mcp_oracle.analyzer import ItemKind, analyze_project, qualified_name


# ==================== Fixtures ====================


@pytest.fixture
def temp_project():
    """Create a temporary Rust project (no Cargo.toml)."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        src = root / "src"
        (src / "net").mkdir(parents=True)

        (src / "lib.rs").write_text("""
//! Test crate.

pub mod net;

/// Entry point.
pub fn start() {}

fn internal() {}
""")
        (src / "net" / "mod.rs").write_text("""
pub mod client;

pub struct Address(pub String);
""")
        (src / "net" / "client.rs").write_text("""
pub struct Client {
    addr: super::Address,
}

impl Client {
    pub fn connect(&self) {}
}

mod retry {
    pub fn backoff() {}
}
""")
        (src / "broken.rs").write_text("pub fn broken( {\n")

        yield root


# ==================== Tests ====================


class TestAnalyzeProject:
    """Test analyze_project."""

    def test_items_from_all_files(self, temp_project):
        """Test items are collected from every file with module paths."""
        model = analyze_project(temp_project)
        names = {qualified_name(item) for item in model.items}

        assert "start" in names
        assert "internal" in names
        assert "net" in names
        assert "net::Address" in names
        assert "net::client::Client" in names
        assert "net::client::retry::backoff" in names
        assert "net::client::retry" in names
        assert model.analyzed_files == 3

    def test_failures_recorded(self, temp_project):
        """Test a malformed file is recorded and the rest still analyzed."""
        model = analyze_project(temp_project)

        assert len(model.failures) == 1
        assert model.failures[0].path == str(Path("src") / "broken.rs")
        assert "Parse error" in model.failures[0].error

    def test_relative_locations(self, temp_project):
        """Test locations are relative to the project root."""
        model = analyze_project(temp_project)
        start = next(item for item in model.items if item.name == "start")

        assert start.source_location.file == str(Path("src") / "lib.rs")
        assert start.source_location.line == 7

    def test_public_only(self, temp_project):
        """Test include_private=False keeps only pub items."""
        model = analyze_project(temp_project, include_private=False)
        names = {item.name for item in model.items}

        assert "start" in names
        assert "internal" not in names
        assert "retry" not in names
        assert "backoff" in names
        assert all(item.kind is not ItemKind.IMPL for item in model.items)

    def test_no_manifest_no_dependencies(self, temp_project):
        """Test projects without Cargo.toml have no crate data."""
        model = analyze_project(temp_project)

        assert model.crate_info is None
        assert model.dependency_tree == []
        assert model.dependencies is None

    def test_single_file(self, temp_project):
        """Test analyzing one .rs file."""
        model = analyze_project(temp_project / "src" / "net" / "client.rs")

        assert model.analyzed_files == 1
        assert {"Client", "retry", "backoff"} <= {item.name for item in model.items}
        client = next(item for item in model.items if item.name == "Client")
        assert client.module_path == ["net", "client"]

    def test_missing_path(self):
        """Test a nonexistent path raises."""
        with pytest.raises(FileNotFoundError):
            analyze_project("/nonexistent/oracle/project")

    def test_to_dict(self, temp_project):
        """Test serialization of the model."""
        data = analyze_project(temp_project).to_dict()

        assert data["analyzed_files"] == 3
        assert len(data["items"]) > 0
        assert data["failures"][0]["path"].endswith("broken.rs")
        assert "crate_info" not in data

    @pytest.mark.skipif(shutil.which("cargo") is None, reason="cargo not installed")
    def test_with_manifest(self, temp_project):
        """Test crate data is loaded when Cargo.toml is present."""
        (temp_project / "Cargo.toml").write_text(
            '[package]\nname = "netkit"\nversion = "0.3.0"\nedition = "2021"\n'
        )

        model = analyze_project(temp_project)

        assert model.crate_info is not None
        assert model.crate_info.name == "netkit"
        assert model.dependency_tree == [("netkit", 0)]
        assert model.dependencies is not None
