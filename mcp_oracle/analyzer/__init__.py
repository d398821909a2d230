"""
Oracle analyzer - Rust source model and crate dependency graph.

- parser: tree-sitter based item extraction with inline module expansion
- dependency: cargo metadata package graph and traversal
- project: whole-project analysis
- search: filtering of items and dependency listings
"""

from .types import (
    AnalyzedItem,
    AssociatedConst,
    AssociatedType,
    ConstInfo,
    DependencyKind,
    EnumInfo,
    Field,
    FunctionInfo,
    ImplInfo,
    ItemKind,
    ModuleInfo,
    Parameter,
    SourceLocation,
    StaticInfo,
    StructInfo,
    StructKind,
    TraitInfo,
    TraitMethod,
    TypeAliasInfo,
    Variant,
    VariantFields,
    Visibility,
    definition,
    is_public,
    qualified_name,
    to_dict,
)
from .module_path import derive_file_module_path
from .parser import RustAnalyzer, filter_public
from .dependency import CrateInfo, DependencyAnalyzer, DependencyInfo
from .project import FileFailure, ProjectModel, analyze_project
from .search import (
    CompletionCandidate,
    ItemCategory,
    completion_candidates,
    filter_dependencies,
    filter_items,
    find_by_qualified_name,
)

__all__ = [
    # Types
    "AnalyzedItem",
    "AssociatedConst",
    "AssociatedType",
    "ConstInfo",
    "DependencyKind",
    "EnumInfo",
    "Field",
    "FunctionInfo",
    "ImplInfo",
    "ItemKind",
    "ModuleInfo",
    "Parameter",
    "SourceLocation",
    "StaticInfo",
    "StructInfo",
    "StructKind",
    "TraitInfo",
    "TraitMethod",
    "TypeAliasInfo",
    "Variant",
    "VariantFields",
    "Visibility",
    "definition",
    "is_public",
    "qualified_name",
    "to_dict",
    # Parser
    "RustAnalyzer",
    "derive_file_module_path",
    "filter_public",
    # Dependencies
    "CrateInfo",
    "DependencyAnalyzer",
    "DependencyInfo",
    # Project
    "FileFailure",
    "ProjectModel",
    "analyze_project",
    # Search
    "CompletionCandidate",
    "ItemCategory",
    "completion_candidates",
    "filter_dependencies",
    "filter_items",
    "find_by_qualified_name",
]
