"""
Search and filtering over analyzed items and dependency listings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .types import PATH_SEPARATOR, AnalyzedItem, ItemKind, _exhaustive, qualified_name


SUMMARY_WIDTH = 40


class ItemCategory(str, Enum):
    """Groups of item kinds used to narrow a search."""

    TYPES = "types"
    FUNCTIONS = "functions"
    MODULES = "modules"
    ALL = "all"


_CATEGORY_KINDS: dict[ItemCategory, frozenset[ItemKind]] = {
    ItemCategory.TYPES: frozenset({ItemKind.STRUCT, ItemKind.ENUM, ItemKind.TYPE_ALIAS}),
    ItemCategory.FUNCTIONS: frozenset({ItemKind.FUNCTION}),
    ItemCategory.MODULES: frozenset({ItemKind.MODULE}),
    ItemCategory.ALL: frozenset(ItemKind),
}

# Short labels shown next to completion candidates
_KIND_LABELS: dict[ItemKind, str] = _exhaustive(
    {
        ItemKind.FUNCTION: "fn",
        ItemKind.STRUCT: "st",
        ItemKind.ENUM: "en",
        ItemKind.TRAIT: "tr",
        ItemKind.IMPL: "",
        ItemKind.MODULE: "md",
        ItemKind.TYPE_ALIAS: "ty",
        ItemKind.CONST: "ct",
        ItemKind.STATIC: "ct",
    },
    "completion labels",
)


def _matches_query(item: AnalyzedItem, query: str) -> bool:
    if not query:
        return True
    if PATH_SEPARATOR in query:
        if query in qualified_name(item).lower():
            return True
        segment = query.replace(PATH_SEPARATOR, "")
        return any(segment in part.lower() for part in item.module_path)
    return query in item.name.lower()


def filter_items(
    items: list[AnalyzedItem],
    query: str = "",
    category: ItemCategory = ItemCategory.ALL,
) -> list[AnalyzedItem]:
    """Items of a category whose name (or qualified path) matches a query.

    Matching is case-insensitive. A query containing ``::`` is matched
    against the qualified name, or against any module path segment with the
    separators removed; other queries are substring matches on the name.

    Args:
        items: Items to search
        query: Search text ('' matches everything)
        category: Kind group to keep

    Returns:
        Matching items in their original order
    """
    kinds = _CATEGORY_KINDS[ItemCategory(category)]
    needle = query.strip().lower()
    return [item for item in items if item.kind in kinds and _matches_query(item, needle)]


def find_by_qualified_name(items: list[AnalyzedItem], qualified: str) -> AnalyzedItem | None:
    """First item whose qualified name equals ``qualified``."""
    for item in items:
        if qualified_name(item) == qualified:
            return item
    return None


def filter_dependencies(tree: list[tuple[str, int]], query: str = "") -> list[tuple[str, int]]:
    """Dependency entries whose name matches, sorted by name.

    ``-`` and ``_`` are interchangeable in crate names, so ``serde_json``
    also finds ``serde-json``.
    """
    needle = query.strip().lower()
    matched = [
        entry
        for entry in tree
        if not needle
        or needle in entry[0].lower()
        or needle in entry[0].lower().replace("-", "_")
    ]
    return sorted(matched, key=lambda entry: entry[0].lower())


@dataclass
class CompletionCandidate:
    """Entry of a completion popup."""

    primary: str
    label: str
    secondary: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"primary": self.primary, "label": self.label}
        if self.secondary:
            result["secondary"] = self.secondary
        return result


def _summary(documentation: str | None) -> str | None:
    if documentation is None:
        return None
    first_line = documentation.split("\n", 1)[0]
    if len(first_line) > SUMMARY_WIDTH:
        return f"{first_line[: SUMMARY_WIDTH - 3]}..."
    return first_line


def completion_candidates(items: list[AnalyzedItem]) -> list[CompletionCandidate]:
    """One candidate per item: name, kind label and first doc line."""
    return [
        CompletionCandidate(
            primary=item.name,
            label=_KIND_LABELS[item.kind],
            secondary=_summary(item.documentation),
        )
        for item in items
    ]
