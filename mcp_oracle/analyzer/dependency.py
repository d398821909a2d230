"""
Crate dependency analysis from ``cargo metadata``.

Builds a directed package graph (one node per package name, one edge per
declared dependency on a known package) and answers traversal queries.
"""

import json
import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import rustworkx as rx

from ..errors import MetadataError
from .types import DependencyKind


logger = logging.getLogger(__name__)

CARGO_METADATA_ARGS = ["metadata", "--format-version", "1"]

_KIND_MAP = {
    None: DependencyKind.NORMAL,
    "normal": DependencyKind.NORMAL,
    "dev": DependencyKind.DEV,
    "build": DependencyKind.BUILD,
}


@dataclass
class DependencyInfo:
    """A dependency as declared in a package manifest."""

    name: str
    version_req: str
    optional: bool = False
    features: list[str] = field(default_factory=list)
    kind: DependencyKind = DependencyKind.NORMAL

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "name": self.name,
            "version_req": self.version_req,
            "kind": self.kind.value,
        }
        if self.optional:
            result["optional"] = True
        if self.features:
            result["features"] = self.features
        return result


@dataclass
class CrateInfo:
    """Package metadata of one crate."""

    name: str
    version: str
    authors: list[str] = field(default_factory=list)
    license: str | None = None
    description: str | None = None
    homepage: str | None = None
    repository: str | None = None
    documentation: str | None = None
    dependencies: list[DependencyInfo] = field(default_factory=list)
    features: list[str] = field(default_factory=list)
    default_features: list[str] = field(default_factory=list)
    edition: str = "2015"
    rust_version: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "edition": self.edition,
            "dependencies": [d.to_dict() for d in self.dependencies],
        }
        for key in ("license", "description", "homepage", "repository", "documentation", "rust_version"):
            value = getattr(self, key)
            if value:
                result[key] = value
        if self.authors:
            result["authors"] = self.authors
        if self.features:
            result["features"] = self.features
        if self.default_features:
            result["default_features"] = self.default_features
        return result


def run_cargo_metadata(manifest_path: str | Path | None = None, cwd: str | Path | None = None) -> dict[str, Any]:
    """Run ``cargo metadata`` and decode its JSON output.

    Args:
        manifest_path: Cargo.toml to describe (cargo's own lookup when None)
        cwd: Working directory for cargo

    Returns:
        The decoded metadata document

    Raises:
        MetadataError: cargo is missing, failed, or printed invalid JSON
    """
    cargo = os.environ.get("CARGO", "cargo")
    cmd = [cargo, *CARGO_METADATA_ARGS]
    if manifest_path is not None:
        cmd.extend(["--manifest-path", str(manifest_path)])

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise MetadataError(f"Failed to run cargo metadata: {e}") from e

    if result.returncode != 0:
        raise MetadataError(f"cargo metadata failed: {result.stderr.strip()}")

    try:
        metadata = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise MetadataError(f"Invalid cargo metadata output: {e}") from e

    if not isinstance(metadata, dict) or not isinstance(metadata.get("packages"), list):
        raise MetadataError("cargo metadata output has no package list")
    return metadata


class DependencyAnalyzer:
    """Dependency graph over the packages of one metadata snapshot."""

    def __init__(self, metadata: dict[str, Any]):
        self._metadata = metadata
        self._packages: list[dict[str, Any]] = list(metadata.get("packages") or [])
        self._graph = rx.PyDiGraph(multigraph=True, check_cycle=False)
        self._node_map: dict[str, int] = {}
        self._build_graph()

    @classmethod
    def from_metadata(cls, metadata: dict[str, Any]) -> "DependencyAnalyzer":
        """Build from an already decoded ``cargo metadata`` document."""
        return cls(metadata)

    @classmethod
    def from_manifest(cls, manifest_path: str | Path) -> "DependencyAnalyzer":
        """Build from a Cargo.toml path.

        Raises:
            MetadataError: cargo metadata could not be obtained
        """
        return cls(run_cargo_metadata(manifest_path=manifest_path))

    @classmethod
    def from_current_dir(cls) -> "DependencyAnalyzer":
        """Build from the manifest cargo finds for the working directory."""
        return cls(run_cargo_metadata())

    def _build_graph(self) -> None:
        for package in self._packages:
            name = package["name"]
            # Duplicate names share one node; the last package wins
            self._node_map[name] = self._graph.add_node(name)

        edges = []
        for package in self._packages:
            from_node = self._node_map[package["name"]]
            for position, dep in enumerate(package.get("dependencies") or []):
                to_node = self._node_map.get(dep.get("name"))
                if to_node is not None:
                    edges.append((from_node, to_node, position))
        self._graph.add_edges_from(edges)

        logger.debug(
            "Built dependency graph: %d nodes, %d edges",
            self._graph.num_nodes(),
            self._graph.num_edges(),
        )

    @property
    def graph(self) -> rx.PyDiGraph:
        return self._graph

    # ==================== Package metadata ====================

    def _find_package(self, name: str) -> dict[str, Any] | None:
        for package in self._packages:
            if package["name"] == name:
                return package
        return None

    def root_package(self) -> CrateInfo | None:
        """The package the metadata was resolved for, if any.

        Uses ``resolve.root``; without a resolve section, the package whose
        manifest sits at the workspace root.
        """
        resolve = self._metadata.get("resolve") or {}
        root_id = resolve.get("root")
        if root_id is not None:
            for package in self._packages:
                if package.get("id") == root_id:
                    return _package_to_info(package)
            return None

        workspace_root = self._metadata.get("workspace_root")
        if workspace_root is None:
            return None
        root_manifest = Path(workspace_root) / "Cargo.toml"
        for package in self._packages:
            manifest = package.get("manifest_path")
            if manifest is not None and Path(manifest) == root_manifest:
                return _package_to_info(package)
        return None

    def get_crate_info(self, name: str) -> CrateInfo | None:
        package = self._find_package(name)
        return _package_to_info(package) if package is not None else None

    def all_packages(self) -> list[CrateInfo]:
        return [_package_to_info(package) for package in self._packages]

    def direct_dependencies(self, name: str) -> list[DependencyInfo]:
        """Dependencies declared by a package, without traversal ([] if unknown)."""
        package = self._find_package(name)
        if package is None:
            return []
        return _extract_dependencies(package)

    # ==================== Traversal ====================

    def _children(self, node: int) -> list[int]:
        """Targets of a node's edges in declared dependency order."""
        edges = sorted(self._graph.out_edges(node), key=lambda edge: edge[2])
        return [target for _, target, _ in edges]

    def dependency_tree(self, root: str) -> list[tuple[str, int]]:
        """Depth-first listing of everything reachable from ``root``.

        Each package appears once, at the depth where it was first reached;
        ``root`` itself is at depth 0. A package reachable by a shorter path
        found later keeps its first depth.

        Args:
            root: Package name

        Returns:
            ``(name, depth)`` pairs in visit order ([] if ``root`` is unknown)
        """
        root_node = self._node_map.get(root)
        if root_node is None:
            return []

        result: list[tuple[str, int]] = []
        visited: set[int] = set()
        stack = [(root_node, 0)]

        while stack:
            node, depth = stack.pop()
            if node in visited:
                continue
            visited.add(node)
            result.append((self._graph[node], depth))
            for child in reversed(self._children(node)):
                if child not in visited:
                    stack.append((child, depth + 1))

        return result

    traverse = dependency_tree

    def total_dependency_count(self, name: str) -> int:
        """Number of distinct transitive dependencies (0 if unknown)."""
        return max(len(self.dependency_tree(name)) - 1, 0)


def _extract_dependencies(package: dict[str, Any]) -> list[DependencyInfo]:
    return [
        DependencyInfo(
            name=dep["name"],
            version_req=dep.get("req") or "*",
            optional=bool(dep.get("optional", False)),
            features=list(dep.get("features") or []),
            kind=_KIND_MAP.get(dep.get("kind"), DependencyKind.NORMAL),
        )
        for dep in package.get("dependencies") or []
    ]


def _package_to_info(package: dict[str, Any]) -> CrateInfo:
    features: dict[str, list[str]] = package.get("features") or {}
    return CrateInfo(
        name=package["name"],
        version=package.get("version", ""),
        authors=list(package.get("authors") or []),
        license=package.get("license"),
        description=package.get("description"),
        homepage=package.get("homepage"),
        repository=package.get("repository"),
        documentation=package.get("documentation"),
        dependencies=_extract_dependencies(package),
        features=list(features),
        default_features=list(features.get("default", [])),
        edition=package.get("edition") or "2015",
        rust_version=package.get("rust_version"),
    )
