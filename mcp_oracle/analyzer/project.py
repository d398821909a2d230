"""
Whole-project analysis: every source file plus crate dependency data.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..errors import MetadataError, ParseFailure
from .dependency import CrateInfo, DependencyAnalyzer
from .parser import RustAnalyzer
from .types import AnalyzedItem, to_dict


logger = logging.getLogger(__name__)

MANIFEST_NAME = "Cargo.toml"


def _utcnow() -> str:
    """Get current UTC time as ISO string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class FileFailure:
    """A source file that could not be analyzed."""

    path: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"path": self.path, "error": self.error}


@dataclass
class ProjectModel:
    """Result of one analysis run. A new run produces a new model."""

    project_path: str
    items: list[AnalyzedItem] = field(default_factory=list)
    crate_info: CrateInfo | None = None
    dependency_tree: list[tuple[str, int]] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)
    analyzed_files: int = 0
    generated_at: str = field(default_factory=_utcnow)
    dependencies: DependencyAnalyzer | None = field(default=None, repr=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "project_path": self.project_path,
            "generated_at": self.generated_at,
            "analyzed_files": self.analyzed_files,
            "items": [to_dict(item) for item in self.items],
        }
        if self.crate_info is not None:
            result["crate_info"] = self.crate_info.to_dict()
        if self.dependency_tree:
            result["dependency_tree"] = [
                {"name": name, "depth": depth} for name, depth in self.dependency_tree
            ]
        if self.failures:
            result["failures"] = [f.to_dict() for f in self.failures]
        return result


def find_rust_files(project_root: Path) -> list[Path]:
    """Find all Rust source files under ``src``, sorted.

    Args:
        project_root: Crate root (containing Cargo.toml)

    Returns:
        Sorted list of .rs file paths
    """
    src_dir = project_root / "src"
    if not src_dir.is_dir():
        return []
    return sorted(src_dir.rglob("*.rs"))


def _load_dependencies(project_root: Path, model: ProjectModel) -> None:
    manifest = project_root / MANIFEST_NAME
    if not manifest.is_file():
        return

    try:
        analyzer = DependencyAnalyzer.from_manifest(manifest)
    except MetadataError as e:
        logger.warning("Skipping dependency analysis for %s: %s", project_root, e)
        return

    model.dependencies = analyzer
    model.crate_info = analyzer.root_package()
    if model.crate_info is not None:
        model.dependency_tree = analyzer.dependency_tree(model.crate_info.name)


def analyze_project(path: str | Path, include_private: bool = True) -> ProjectModel:
    """Analyze a Rust project directory or a single .rs file.

    Args:
        path: Crate root directory, or one .rs file
        include_private: Keep non-``pub`` items

    Returns:
        ProjectModel with items from every file that parsed; files that did
        not are listed in ``failures``

    Raises:
        FileNotFoundError: ``path`` does not exist
    """
    root = Path(path)
    if not root.exists():
        raise FileNotFoundError(f"Path does not exist: {root}")

    analyzer = RustAnalyzer(include_private=include_private)
    model = ProjectModel(project_path=str(root))

    if root.is_file():
        files = [(root, str(root))]
    else:
        _load_dependencies(root, model)
        # Paths relative to the root keep module derivation anchored at src/
        files = [(f, str(f.relative_to(root))) for f in find_rust_files(root)]

    for file_path, display_path in files:
        try:
            source = file_path.read_text(encoding="utf-8")
            items = analyzer.analyze_source(source, path=display_path)
        except (ParseFailure, OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to analyze %s: %s", display_path, e)
            model.failures.append(FileFailure(path=display_path, error=str(e)))
            continue
        model.items.extend(items)
        model.analyzed_files += 1

    logger.info(
        "Analyzed %s: %d files, %d items, %d failures",
        root,
        model.analyzed_files,
        len(model.items),
        len(model.failures),
    )
    return model
