"""
Tree-sitter based Rust source analyzer.

Uses tree-sitter-rust to parse Rust source and turns each top-level item into
an ``AnalyzedItem`` record. Items declared inside inline modules
(``mod x { ... }``) are flattened into the same list with their module path
extended by the module names.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Callable

import tree_sitter_rust as ts_rust
from tree_sitter import Language, Node, Parser

from ..errors import ParseFailure
from .attributes import (
    COMMENT_TYPES,
    ItemPrelude,
    extract_attributes,
    extract_derives,
    inner_docs,
    join_docs,
    normalize_whitespace,
    normalized_text,
    outer_doc_text,
    parse_visibility,
    visibility_from_text,
    walk_items,
)
from .module_path import derive_file_module_path
from .types import (
    AnalyzedItem,
    AssociatedConst,
    AssociatedType,
    ConstInfo,
    EnumInfo,
    Field,
    FunctionInfo,
    ImplInfo,
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
    is_public,
)


logger = logging.getLogger(__name__)

RUST_LANGUAGE = Language(ts_rust.language())

_SKIPPED_TYPES = ("attribute_item", *COMMENT_TYPES)


class RustAnalyzer:
    """Analyze Rust source into a flat list of items.

    The only state is the ``include_private`` flag, so one analyzer can be
    shared between threads. A fresh tree-sitter parser is created per call.
    """

    def __init__(self, include_private: bool = True):
        """Initialize the analyzer.

        Args:
            include_private: Keep non-``pub`` items (False keeps only ``pub`` ones)
        """
        self._include_private = include_private

    @property
    def include_private(self) -> bool:
        return self._include_private

    def with_private(self, include: bool) -> "RustAnalyzer":
        """Return an analyzer with the given ``include_private`` setting."""
        return RustAnalyzer(include_private=include)

    def analyze_file(self, path: str | Path, module_path: list[str] | None = None) -> list[AnalyzedItem]:
        """Analyze a Rust source file.

        Args:
            path: Path to the .rs file
            module_path: Explicit module path (derived from ``path`` when omitted)

        Returns:
            Items in source order

        Raises:
            OSError: The file could not be read
            ParseFailure: The file is not valid Rust
        """
        file_path = Path(path)
        content = file_path.read_text(encoding="utf-8")
        return self.analyze_source(content, path=str(file_path), module_path=module_path)

    def analyze_source(
        self,
        source: str,
        path: str | None = None,
        module_path: list[str] | None = None,
    ) -> list[AnalyzedItem]:
        """Analyze Rust source text.

        Args:
            source: Rust source code
            path: File the source came from; enables source locations
            module_path: Explicit module path, overriding the one derived from ``path``

        Returns:
            Items in source order, filtered by visibility

        Raises:
            ParseFailure: The source has syntax errors
        """
        if module_path is not None:
            effective_path = list(module_path)
        elif path is not None:
            effective_path = derive_file_module_path(path)
        else:
            effective_path = []

        root = parse_source(source, path)
        items = self.expand_inline_modules(root.children, effective_path, path)
        logger.debug("Analyzed %s: %d items", path or "<source>", len(items))

        if self._include_private:
            return items
        return filter_public(items)

    def expand_inline_modules(
        self,
        nodes: list[Node],
        inherited_path: list[str],
        file_path: str | None = None,
    ) -> list[AnalyzedItem]:
        """Classify a declaration list, flattening inline modules.

        Items found inside ``mod name { ... }`` are emitted first with
        ``inherited_path + [name]``, followed by the module record itself at
        ``inherited_path``.

        Args:
            nodes: Children of a ``source_file`` or ``declaration_list``
            inherited_path: Module path of the enclosing scope
            file_path: Source file for locations, if known

        Returns:
            Items with module path and location stamped
        """
        items: list[AnalyzedItem] = []

        for node, prelude in walk_items(nodes):
            if node.type == "mod_item":
                body = node.child_by_field_name("body")
                if body is not None:
                    child_path = [*inherited_path, _name(node)]
                    items.extend(self.expand_inline_modules(body.children, child_path, file_path))

            record = classify(node, prelude)
            if record is None:
                continue

            location = None
            if file_path is not None:
                location = SourceLocation(file=file_path, line=_item_line(node))
            items.append(replace(record, module_path=list(inherited_path), source_location=location))

        return items

    @staticmethod
    def derive_module_path(path: str | Path) -> list[str]:
        return derive_file_module_path(path)


def filter_public(items: list[AnalyzedItem]) -> list[AnalyzedItem]:
    """Public-only view of an item list. The input list is left untouched."""
    return [item for item in items if is_public(item)]


def parse_source(source: str, path: str | None = None) -> Node:
    """Parse Rust source and return the root node.

    Raises:
        ParseFailure: tree-sitter recovered from syntax errors
    """
    parser = Parser(RUST_LANGUAGE)
    tree = parser.parse(source.encode("utf-8"))
    root = tree.root_node

    if root.has_error:
        error = _first_error(root)
        line = error.start_point[0] + 1 if error is not None else None
        if error is not None and error.is_missing:
            message = f"missing {error.type}"
        else:
            message = "unexpected syntax"
        raise ParseFailure(message, path=path, line=line)

    return root


def _first_error(node: Node) -> Node | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


# ==================== Node helpers ====================


def _name(node: Node) -> str:
    return normalized_text(node.child_by_field_name("name"))


def _optional_text(node: Node | None) -> str | None:
    text = normalized_text(node)
    return text or None


def _find_child_by_type(node: Node, type_name: str) -> Node | None:
    for child in node.children:
        if child.type == type_name:
            return child
    return None


def _has_child(node: Node, type_name: str) -> bool:
    return _find_child_by_type(node, type_name) is not None


def _where_clause(node: Node) -> str | None:
    return _optional_text(_find_child_by_type(node, "where_clause"))


def _item_line(node: Node) -> int:
    """1-based line of the item's name token (``impl`` keyword for impls)."""
    if node.type == "impl_item":
        anchor = _find_child_by_type(node, "impl")
    else:
        anchor = node.child_by_field_name("name")
    if anchor is None:
        anchor = node
    return anchor.start_point[0] + 1


def _generic_params(node: Node) -> list[str]:
    type_params = node.child_by_field_name("type_parameters")
    if type_params is None:
        return []
    return [
        normalized_text(child)
        for child in type_params.named_children
        if child.type not in _SKIPPED_TYPES
    ]


def _modifiers(node: Node) -> set[str]:
    """Keywords of a function's ``function_modifiers`` (async, const, unsafe, ...)."""
    found: set[str] = set()
    for child in node.children:
        if child.type == "function_modifiers":
            found.update(mod.type for mod in child.children)
        elif child.type in ("async", "const", "unsafe"):
            found.add(child.type)
    return found


def _signature(node: Node, body: Node | None) -> str:
    """Function signature text: modifiers through return type and where clause."""
    start = node.start_byte
    for child in node.children:
        if child.type not in ("visibility_modifier", *_SKIPPED_TYPES):
            start = child.start_byte
            break
    end = body.start_byte if body is not None else node.end_byte

    raw = node.text[start - node.start_byte : end - node.start_byte].decode("utf-8")
    return normalize_whitespace(raw).rstrip(";").rstrip()


def _parameters(node: Node | None) -> list[Parameter]:
    if node is None:
        return []

    params: list[Parameter] = []
    for child in node.named_children:
        if child.type == "self_parameter":
            params.append(
                Parameter(
                    name="self",
                    ty="Self",
                    is_self=True,
                    is_mut=_has_child(child, "mutable_specifier"),
                    is_ref=_has_child(child, "&"),
                )
            )
        elif child.type == "parameter":
            params.append(_typed_parameter(child))
        elif child.type == "variadic_parameter":
            params.append(Parameter(name="...", ty="..."))
    return params


def _typed_parameter(node: Node) -> Parameter:
    pattern = node.child_by_field_name("pattern")
    ty_node = node.child_by_field_name("type")
    is_mut = _has_child(node, "mutable_specifier")

    if pattern is not None and pattern.type == "mut_pattern":
        is_mut = True
        inner = [c for c in pattern.named_children if c.type != "mutable_specifier"]
        name = normalized_text(inner[0]) if inner else normalized_text(pattern)
    else:
        name = normalized_text(pattern)

    return Parameter(
        name=name,
        ty=normalized_text(ty_node),
        is_self=name == "self",
        is_mut=is_mut,
        is_ref=ty_node is not None and ty_node.type == "reference_type",
    )


def _named_fields(body: Node) -> list[Field]:
    fields: list[Field] = []
    for item, prelude in walk_items(body.children):
        if item.type != "field_declaration":
            continue
        fields.append(
            Field(
                name=_name(item),
                ty=normalized_text(item.child_by_field_name("type")),
                visibility=parse_visibility(item),
                documentation=join_docs(prelude.docs),
            )
        )
    return fields


def _ordered_fields(body: Node) -> list[Field]:
    """Fields of a tuple body; names are positional indices."""
    fields: list[Field] = []
    visibility = Visibility.PRIVATE
    prelude = ItemPrelude()

    for child in body.named_children:
        if child.type == "visibility_modifier":
            visibility = visibility_from_text(normalized_text(child))
        elif child.type == "attribute_item":
            prelude.attributes.append(child)
        elif child.type in COMMENT_TYPES:
            doc = outer_doc_text(child)
            if doc is not None:
                prelude.docs.append(doc)
        else:
            fields.append(
                Field(
                    name=str(len(fields)),
                    ty=normalized_text(child),
                    visibility=visibility,
                    documentation=join_docs(prelude.docs),
                )
            )
            visibility = Visibility.PRIVATE
            prelude = ItemPrelude()
    return fields


# ==================== Classifiers ====================


def _classify_function(node: Node, prelude: ItemPrelude) -> FunctionInfo:
    modifiers = _modifiers(node)
    return FunctionInfo(
        name=_name(node),
        signature=_signature(node, node.child_by_field_name("body")),
        visibility=parse_visibility(node),
        is_async="async" in modifiers,
        is_const="const" in modifiers,
        is_unsafe="unsafe" in modifiers,
        generics=_generic_params(node),
        parameters=_parameters(node.child_by_field_name("parameters")),
        return_type=_optional_text(node.child_by_field_name("return_type")),
        where_clause=_where_clause(node),
        attributes=extract_attributes(prelude),
        documentation=join_docs(prelude.docs),
    )


def _classify_struct(node: Node, prelude: ItemPrelude) -> StructInfo:
    body = node.child_by_field_name("body")
    if body is None:
        struct_kind, fields = StructKind.UNIT, []
    elif body.type == "field_declaration_list":
        struct_kind, fields = StructKind.NAMED, _named_fields(body)
    else:
        struct_kind, fields = StructKind.TUPLE, _ordered_fields(body)

    return StructInfo(
        name=_name(node),
        visibility=parse_visibility(node),
        struct_kind=struct_kind,
        fields=fields,
        derives=extract_derives(prelude),
        generics=_generic_params(node),
        attributes=extract_attributes(prelude),
        where_clause=_where_clause(node),
        documentation=join_docs(prelude.docs),
    )


def _variant(node: Node, prelude: ItemPrelude) -> Variant:
    body = node.child_by_field_name("body")
    if body is None:
        fields = VariantFields()
    elif body.type == "field_declaration_list":
        fields = VariantFields(shape=StructKind.NAMED, named=_named_fields(body))
    else:
        fields = VariantFields(
            shape=StructKind.TUPLE,
            unnamed=[f.ty for f in _ordered_fields(body)],
        )

    return Variant(
        name=_name(node),
        fields=fields,
        discriminant=_optional_text(node.child_by_field_name("value")),
        documentation=join_docs(prelude.docs),
    )


def _classify_enum(node: Node, prelude: ItemPrelude) -> EnumInfo:
    variants: list[Variant] = []
    body = node.child_by_field_name("body")
    if body is not None:
        for item, item_prelude in walk_items(body.children):
            if item.type == "enum_variant":
                variants.append(_variant(item, item_prelude))

    return EnumInfo(
        name=_name(node),
        visibility=parse_visibility(node),
        variants=variants,
        derives=extract_derives(prelude),
        generics=_generic_params(node),
        attributes=extract_attributes(prelude),
        where_clause=_where_clause(node),
        documentation=join_docs(prelude.docs),
    )


def _classify_trait(node: Node, prelude: ItemPrelude) -> TraitInfo:
    supertraits: list[str] = []
    bounds = node.child_by_field_name("bounds")
    if bounds is not None:
        supertraits = [
            normalized_text(child)
            for child in bounds.named_children
            if child.type not in _SKIPPED_TYPES
        ]

    methods: list[TraitMethod] = []
    associated_types: list[AssociatedType] = []
    associated_consts: list[AssociatedConst] = []

    body = node.child_by_field_name("body")
    for item, item_prelude in walk_items(body.children if body is not None else []):
        if item.type in ("function_signature_item", "function_item"):
            item_body = item.child_by_field_name("body")
            methods.append(
                TraitMethod(
                    name=_name(item),
                    signature=_signature(item, item_body),
                    has_default=item_body is not None,
                    is_async="async" in _modifiers(item),
                    documentation=join_docs(item_prelude.docs),
                )
            )
        elif item.type == "associated_type":
            type_bounds = item.child_by_field_name("bounds")
            associated_types.append(
                AssociatedType(
                    name=_name(item),
                    bounds=[
                        normalized_text(child)
                        for child in (type_bounds.named_children if type_bounds is not None else [])
                        if child.type not in _SKIPPED_TYPES
                    ],
                    default=_optional_text(item.child_by_field_name("default")),
                )
            )
        elif item.type == "type_item":
            # `type Name = Default;` inside a trait body
            associated_types.append(
                AssociatedType(
                    name=_name(item),
                    default=_optional_text(item.child_by_field_name("type")),
                )
            )
        elif item.type == "const_item":
            associated_consts.append(
                AssociatedConst(
                    name=_name(item),
                    ty=normalized_text(item.child_by_field_name("type")),
                    default=_optional_text(item.child_by_field_name("value")),
                )
            )

    return TraitInfo(
        name=_name(node),
        visibility=parse_visibility(node),
        supertraits=supertraits,
        methods=methods,
        associated_types=associated_types,
        associated_consts=associated_consts,
        is_unsafe=_has_child(node, "unsafe"),
        is_auto=_has_child(node, "auto"),
        generics=_generic_params(node),
        where_clause=_where_clause(node),
        documentation=join_docs(prelude.docs),
    )


def _classify_impl(node: Node, prelude: ItemPrelude) -> ImplInfo:
    methods: list[FunctionInfo] = []
    body = node.child_by_field_name("body")
    if body is not None:
        for item, item_prelude in walk_items(body.children):
            if item.type == "function_item":
                methods.append(_classify_function(item, item_prelude))

    return ImplInfo(
        self_ty=normalized_text(node.child_by_field_name("type")),
        trait_name=_optional_text(node.child_by_field_name("trait")),
        is_unsafe=_has_child(node, "unsafe"),
        is_negative=_has_child(node, "!"),
        methods=methods,
        generics=_generic_params(node),
        where_clause=_where_clause(node),
        documentation=join_docs(prelude.docs),
    )


def _item_summary(node: Node) -> str | None:
    """Short description of an item inside a module body (``fn name``)."""
    if node.type == "impl_item":
        self_ty = normalized_text(node.child_by_field_name("type"))
        trait = node.child_by_field_name("trait")
        if trait is not None:
            return f"impl {normalized_text(trait)} for {self_ty}"
        return f"impl {self_ty}"

    keyword = _SUMMARY_KEYWORDS.get(node.type)
    if keyword is None:
        return None
    return f"{keyword} {_name(node)}"


_SUMMARY_KEYWORDS = {
    "function_item": "fn",
    "struct_item": "struct",
    "enum_item": "enum",
    "trait_item": "trait",
    "type_item": "type",
    "const_item": "const",
    "static_item": "static",
}


def _classify_module(node: Node, prelude: ItemPrelude) -> ModuleInfo:
    body = node.child_by_field_name("body")
    submodules: list[str] = []
    items: list[str] = []
    docs = list(prelude.docs)

    if body is not None:
        docs.extend(inner_docs(body.children))
        for item, _ in walk_items(body.children):
            if item.type == "mod_item":
                submodules.append(_name(item))
                continue
            summary = _item_summary(item)
            if summary is not None:
                items.append(summary)

    return ModuleInfo(
        name=_name(node),
        visibility=parse_visibility(node),
        submodules=submodules,
        items=items,
        is_inline=body is not None,
        documentation=join_docs(docs),
    )


def _classify_type_alias(node: Node, prelude: ItemPrelude) -> TypeAliasInfo:
    return TypeAliasInfo(
        name=_name(node),
        ty=normalized_text(node.child_by_field_name("type")),
        visibility=parse_visibility(node),
        generics=_generic_params(node),
        where_clause=_where_clause(node),
        documentation=join_docs(prelude.docs),
    )


def _classify_const(node: Node, prelude: ItemPrelude) -> ConstInfo:
    return ConstInfo(
        name=_name(node),
        ty=normalized_text(node.child_by_field_name("type")),
        value=_optional_text(node.child_by_field_name("value")),
        visibility=parse_visibility(node),
        documentation=join_docs(prelude.docs),
    )


def _classify_static(node: Node, prelude: ItemPrelude) -> StaticInfo:
    return StaticInfo(
        name=_name(node),
        ty=normalized_text(node.child_by_field_name("type")),
        is_mut=_has_child(node, "mutable_specifier"),
        visibility=parse_visibility(node),
        documentation=join_docs(prelude.docs),
    )


_CLASSIFIERS: dict[str, Callable[[Node, ItemPrelude], AnalyzedItem]] = {
    "function_item": _classify_function,
    "struct_item": _classify_struct,
    "enum_item": _classify_enum,
    "trait_item": _classify_trait,
    "impl_item": _classify_impl,
    "mod_item": _classify_module,
    "type_item": _classify_type_alias,
    "const_item": _classify_const,
    "static_item": _classify_static,
}


def classify(node: Node, prelude: ItemPrelude | None = None) -> AnalyzedItem | None:
    """Classify one item node.

    Args:
        node: Item node from a declaration list
        prelude: Attributes and doc comments preceding the node

    Returns:
        Populated record without module path or location, or None for nodes
        that are not tracked (use declarations, macro invocations, ...)
    """
    classifier = _CLASSIFIERS.get(node.type)
    if classifier is None:
        return None
    return classifier(node, prelude or ItemPrelude())
