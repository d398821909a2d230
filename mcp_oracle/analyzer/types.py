"""
Item model for analyzed Rust code.

Every declaration is one of nine record types. They form a closed tagged
union (``AnalyzedItem``): each record carries a class-level ``kind`` tag and
consumers dispatch on it through tables keyed by ``ItemKind``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Union


PATH_SEPARATOR = "::"


class ItemKind(str, Enum):
    """Kind tag of an analyzed item."""

    FUNCTION = "fn"
    STRUCT = "struct"
    ENUM = "enum"
    TRAIT = "trait"
    IMPL = "impl"
    MODULE = "mod"
    TYPE_ALIAS = "type"
    CONST = "const"
    STATIC = "static"


class Visibility(str, Enum):
    """Item visibility."""

    PUBLIC = "pub"
    CRATE = "pub(crate)"
    SUPER = "pub(super)"
    SELF_ONLY = "pub(self)"
    PRIVATE = "private"

    @property
    def keyword(self) -> str:
        """Visibility as written in source (empty for private items)."""
        return "" if self is Visibility.PRIVATE else self.value


class StructKind(str, Enum):
    """Shape of a struct body."""

    NAMED = "named"
    TUPLE = "tuple"
    UNIT = "unit"


class DependencyKind(str, Enum):
    """Kind of a crate dependency."""

    NORMAL = "normal"
    DEV = "dev"
    BUILD = "build"


@dataclass(frozen=True)
class SourceLocation:
    """File and 1-based line of an item."""

    file: str | None = None
    line: int | None = None

    def __str__(self) -> str:
        if self.file is not None and self.line is not None:
            return f"{self.file}:{self.line}"
        if self.file is not None:
            return self.file
        return "unknown"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"file": self.file, "line": self.line}


@dataclass
class Parameter:
    """Function parameter."""

    name: str
    ty: str
    is_self: bool = False
    is_mut: bool = False
    is_ref: bool = False

    def __str__(self) -> str:
        if self.is_self:
            if self.is_ref and self.is_mut:
                return "&mut self"
            if self.is_ref:
                return "&self"
            if self.is_mut:
                return "mut self"
            return "self"
        return f"{self.name}: {self.ty}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"name": self.name, "ty": self.ty}
        if self.is_self:
            result["is_self"] = True
        if self.is_mut:
            result["is_mut"] = True
        if self.is_ref:
            result["is_ref"] = True
        return result


@dataclass
class Field:
    """Struct or enum variant field."""

    name: str
    ty: str
    visibility: Visibility = Visibility.PRIVATE
    documentation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "name": self.name,
            "ty": self.ty,
            "visibility": self.visibility.value,
        }
        if self.documentation:
            result["documentation"] = self.documentation
        return result


@dataclass
class VariantFields:
    """Fields of an enum variant: named, unnamed (tuple) or unit."""

    shape: StructKind = StructKind.UNIT
    named: list[Field] = field(default_factory=list)
    unnamed: list[str] = field(default_factory=list)

    def render(self) -> str:
        if self.shape is StructKind.NAMED:
            inner = ", ".join(f"{f.name}: {f.ty}" for f in self.named)
            return f" {{ {inner} }}"
        if self.shape is StructKind.TUPLE:
            return f"({', '.join(self.unnamed)})"
        return ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"shape": self.shape.value}
        if self.shape is StructKind.NAMED:
            result["named"] = [f.to_dict() for f in self.named]
        elif self.shape is StructKind.TUPLE:
            result["unnamed"] = self.unnamed
        return result


@dataclass
class Variant:
    """Enum variant."""

    name: str
    fields: VariantFields = field(default_factory=VariantFields)
    discriminant: str | None = None
    documentation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"name": self.name, "fields": self.fields.to_dict()}
        if self.discriminant:
            result["discriminant"] = self.discriminant
        if self.documentation:
            result["documentation"] = self.documentation
        return result


@dataclass
class TraitMethod:
    """Method signature declared in a trait."""

    name: str
    signature: str
    has_default: bool = False
    is_async: bool = False
    documentation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"name": self.name, "signature": self.signature}
        if self.has_default:
            result["has_default"] = True
        if self.is_async:
            result["is_async"] = True
        if self.documentation:
            result["documentation"] = self.documentation
        return result


@dataclass
class AssociatedType:
    """Associated type in a trait."""

    name: str
    bounds: list[str] = field(default_factory=list)
    default: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"name": self.name}
        if self.bounds:
            result["bounds"] = self.bounds
        if self.default:
            result["default"] = self.default
        return result


@dataclass
class AssociatedConst:
    """Associated const in a trait."""

    name: str
    ty: str
    default: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"name": self.name, "ty": self.ty}
        if self.default:
            result["default"] = self.default
        return result


# ==================== Item records ====================


@dataclass
class FunctionInfo:
    """A free function, or a method inside an impl block."""

    kind: ClassVar[ItemKind] = ItemKind.FUNCTION

    name: str
    signature: str
    visibility: Visibility = Visibility.PRIVATE
    is_async: bool = False
    is_const: bool = False
    is_unsafe: bool = False
    generics: list[str] = field(default_factory=list)
    parameters: list[Parameter] = field(default_factory=list)
    return_type: str | None = None
    where_clause: str | None = None
    attributes: list[str] = field(default_factory=list)
    documentation: str | None = None
    module_path: list[str] = field(default_factory=list)
    source_location: SourceLocation | None = None


@dataclass
class StructInfo:
    """A struct declaration."""

    kind: ClassVar[ItemKind] = ItemKind.STRUCT

    name: str
    visibility: Visibility = Visibility.PRIVATE
    struct_kind: StructKind = StructKind.UNIT
    fields: list[Field] = field(default_factory=list)
    derives: list[str] = field(default_factory=list)
    generics: list[str] = field(default_factory=list)
    attributes: list[str] = field(default_factory=list)
    where_clause: str | None = None
    documentation: str | None = None
    module_path: list[str] = field(default_factory=list)
    source_location: SourceLocation | None = None


@dataclass
class EnumInfo:
    """An enum declaration."""

    kind: ClassVar[ItemKind] = ItemKind.ENUM

    name: str
    visibility: Visibility = Visibility.PRIVATE
    variants: list[Variant] = field(default_factory=list)
    derives: list[str] = field(default_factory=list)
    generics: list[str] = field(default_factory=list)
    attributes: list[str] = field(default_factory=list)
    where_clause: str | None = None
    documentation: str | None = None
    module_path: list[str] = field(default_factory=list)
    source_location: SourceLocation | None = None


@dataclass
class TraitInfo:
    """A trait declaration."""

    kind: ClassVar[ItemKind] = ItemKind.TRAIT

    name: str
    visibility: Visibility = Visibility.PRIVATE
    supertraits: list[str] = field(default_factory=list)
    methods: list[TraitMethod] = field(default_factory=list)
    associated_types: list[AssociatedType] = field(default_factory=list)
    associated_consts: list[AssociatedConst] = field(default_factory=list)
    is_unsafe: bool = False
    is_auto: bool = False
    generics: list[str] = field(default_factory=list)
    where_clause: str | None = None
    documentation: str | None = None
    module_path: list[str] = field(default_factory=list)
    source_location: SourceLocation | None = None


@dataclass
class ImplInfo:
    """An impl block. Impls have no visibility of their own."""

    kind: ClassVar[ItemKind] = ItemKind.IMPL

    self_ty: str
    trait_name: str | None = None
    is_unsafe: bool = False
    is_negative: bool = False
    methods: list[FunctionInfo] = field(default_factory=list)
    generics: list[str] = field(default_factory=list)
    where_clause: str | None = None
    documentation: str | None = None
    module_path: list[str] = field(default_factory=list)
    source_location: SourceLocation | None = None

    @property
    def name(self) -> str:
        return self.self_ty

    @property
    def visibility(self) -> None:
        return None


@dataclass
class ModuleInfo:
    """A module declaration, inline (``mod x { .. }``) or file-backed (``mod x;``)."""

    kind: ClassVar[ItemKind] = ItemKind.MODULE

    name: str
    visibility: Visibility = Visibility.PRIVATE
    submodules: list[str] = field(default_factory=list)
    items: list[str] = field(default_factory=list)
    is_inline: bool = False
    documentation: str | None = None
    module_path: list[str] = field(default_factory=list)
    source_location: SourceLocation | None = None


@dataclass
class TypeAliasInfo:
    """A type alias."""

    kind: ClassVar[ItemKind] = ItemKind.TYPE_ALIAS

    name: str
    ty: str
    visibility: Visibility = Visibility.PRIVATE
    generics: list[str] = field(default_factory=list)
    where_clause: str | None = None
    documentation: str | None = None
    module_path: list[str] = field(default_factory=list)
    source_location: SourceLocation | None = None


@dataclass
class ConstInfo:
    """A const item."""

    kind: ClassVar[ItemKind] = ItemKind.CONST

    name: str
    ty: str
    value: str | None = None
    visibility: Visibility = Visibility.PRIVATE
    documentation: str | None = None
    module_path: list[str] = field(default_factory=list)
    source_location: SourceLocation | None = None


@dataclass
class StaticInfo:
    """A static item."""

    kind: ClassVar[ItemKind] = ItemKind.STATIC

    name: str
    ty: str
    is_mut: bool = False
    visibility: Visibility = Visibility.PRIVATE
    documentation: str | None = None
    module_path: list[str] = field(default_factory=list)
    source_location: SourceLocation | None = None


AnalyzedItem = Union[
    FunctionInfo,
    StructInfo,
    EnumInfo,
    TraitInfo,
    ImplInfo,
    ModuleInfo,
    TypeAliasInfo,
    ConstInfo,
    StaticInfo,
]

ITEM_TYPES: dict[ItemKind, type] = {
    ItemKind.FUNCTION: FunctionInfo,
    ItemKind.STRUCT: StructInfo,
    ItemKind.ENUM: EnumInfo,
    ItemKind.TRAIT: TraitInfo,
    ItemKind.IMPL: ImplInfo,
    ItemKind.MODULE: ModuleInfo,
    ItemKind.TYPE_ALIAS: TypeAliasInfo,
    ItemKind.CONST: ConstInfo,
    ItemKind.STATIC: StaticInfo,
}


def _exhaustive(table: dict[ItemKind, Any], what: str) -> dict[ItemKind, Any]:
    missing = set(ItemKind) - set(table)
    if missing:
        raise TypeError(f"{what} does not handle: {sorted(k.value for k in missing)}")
    return table


# ==================== Accessors ====================


def join_path(module_path: list[str], name: str) -> str:
    """Join module path segments and a name with ``::``."""
    return PATH_SEPARATOR.join([*module_path, name])


def qualified_name(item: AnalyzedItem) -> str:
    """Fully qualified path of an item (e.g. ``serde::de::Deserialize``)."""
    return join_path(item.module_path, item.name)


def is_public(item: AnalyzedItem) -> bool:
    """True for ``pub`` items. Impls are never public."""
    return item.visibility is Visibility.PUBLIC


# ==================== Definitions ====================


def _generics(generics: list[str]) -> str:
    return f"<{', '.join(generics)}>" if generics else ""


def _pub(visibility: Visibility) -> str:
    return "pub " if visibility is Visibility.PUBLIC else ""


def _struct_definition(s: StructInfo) -> str:
    head = f"{_pub(s.visibility)}struct {s.name}{_generics(s.generics)}"
    if s.struct_kind is StructKind.NAMED:
        body = ",\n".join(f"    {_pub(f.visibility)}{f.name}: {f.ty}" for f in s.fields)
        return f"{head} {{\n{body}\n}}"
    if s.struct_kind is StructKind.TUPLE:
        body = ", ".join(f"{_pub(f.visibility)}{f.ty}" for f in s.fields)
        return f"{head}({body});"
    return f"{head};"


def _enum_definition(e: EnumInfo) -> str:
    variants = ",\n".join(f"    {v.name}{v.fields.render()}" for v in e.variants)
    return f"{_pub(e.visibility)}enum {e.name}{_generics(e.generics)} {{\n{variants}\n}}"


def _trait_definition(t: TraitInfo) -> str:
    prefix = _pub(t.visibility)
    if t.is_unsafe:
        prefix += "unsafe "
    if t.is_auto:
        prefix += "auto "
    bounds = f": {' + '.join(t.supertraits)}" if t.supertraits else ""
    members = [f"    type {at.name};" for at in t.associated_types]
    members.extend(f"    {m.signature};" for m in t.methods)
    body = "\n".join(members)
    return f"{prefix}trait {t.name}{_generics(t.generics)}{bounds} {{\n{body}\n}}"


def _impl_definition(i: ImplInfo) -> str:
    if i.trait_name is None:
        return f"impl{_generics(i.generics)} {i.self_ty}"
    unsafe = "unsafe " if i.is_unsafe else ""
    negative = "!" if i.is_negative else ""
    return f"{unsafe}impl{_generics(i.generics)} {negative}{i.trait_name} for {i.self_ty}"


def _static_definition(s: StaticInfo) -> str:
    mut = "mut " if s.is_mut else ""
    return f"static {mut}{s.name}: {s.ty}"


_DEFINITIONS: dict[ItemKind, Callable[[Any], str]] = _exhaustive(
    {
        ItemKind.FUNCTION: lambda f: f.signature,
        ItemKind.STRUCT: _struct_definition,
        ItemKind.ENUM: _enum_definition,
        ItemKind.TRAIT: _trait_definition,
        ItemKind.IMPL: _impl_definition,
        ItemKind.MODULE: lambda m: f"mod {m.name}",
        ItemKind.TYPE_ALIAS: lambda t: f"type {t.name} = {t.ty}",
        ItemKind.CONST: lambda c: f"const {c.name}: {c.ty}",
        ItemKind.STATIC: _static_definition,
    },
    "definition()",
)


def definition(item: AnalyzedItem) -> str:
    """Render the item's definition as Rust-like code."""
    return _DEFINITIONS[item.kind](item)


# ==================== Serialization ====================


def _function_fields(f: FunctionInfo) -> dict[str, Any]:
    result: dict[str, Any] = {
        "signature": f.signature,
        "parameters": [p.to_dict() for p in f.parameters],
    }
    if f.is_async:
        result["is_async"] = True
    if f.is_const:
        result["is_const"] = True
    if f.is_unsafe:
        result["is_unsafe"] = True
    if f.generics:
        result["generics"] = f.generics
    if f.return_type:
        result["return_type"] = f.return_type
    if f.where_clause:
        result["where_clause"] = f.where_clause
    if f.attributes:
        result["attributes"] = f.attributes
    return result


def _struct_fields(s: StructInfo) -> dict[str, Any]:
    result: dict[str, Any] = {
        "struct_kind": s.struct_kind.value,
        "fields": [f.to_dict() for f in s.fields],
    }
    if s.derives:
        result["derives"] = s.derives
    if s.generics:
        result["generics"] = s.generics
    if s.attributes:
        result["attributes"] = s.attributes
    if s.where_clause:
        result["where_clause"] = s.where_clause
    return result


def _enum_fields(e: EnumInfo) -> dict[str, Any]:
    result: dict[str, Any] = {"variants": [v.to_dict() for v in e.variants]}
    if e.derives:
        result["derives"] = e.derives
    if e.generics:
        result["generics"] = e.generics
    if e.attributes:
        result["attributes"] = e.attributes
    if e.where_clause:
        result["where_clause"] = e.where_clause
    return result


def _trait_fields(t: TraitInfo) -> dict[str, Any]:
    result: dict[str, Any] = {"methods": [m.to_dict() for m in t.methods]}
    if t.supertraits:
        result["supertraits"] = t.supertraits
    if t.associated_types:
        result["associated_types"] = [a.to_dict() for a in t.associated_types]
    if t.associated_consts:
        result["associated_consts"] = [a.to_dict() for a in t.associated_consts]
    if t.is_unsafe:
        result["is_unsafe"] = True
    if t.is_auto:
        result["is_auto"] = True
    if t.generics:
        result["generics"] = t.generics
    if t.where_clause:
        result["where_clause"] = t.where_clause
    return result


def _impl_fields(i: ImplInfo) -> dict[str, Any]:
    result: dict[str, Any] = {
        "self_ty": i.self_ty,
        "methods": [to_dict(m) for m in i.methods],
    }
    if i.trait_name:
        result["trait_name"] = i.trait_name
    if i.is_unsafe:
        result["is_unsafe"] = True
    if i.is_negative:
        result["is_negative"] = True
    if i.generics:
        result["generics"] = i.generics
    if i.where_clause:
        result["where_clause"] = i.where_clause
    return result


def _module_fields(m: ModuleInfo) -> dict[str, Any]:
    return {"is_inline": m.is_inline, "submodules": m.submodules, "items": m.items}


def _type_alias_fields(t: TypeAliasInfo) -> dict[str, Any]:
    result: dict[str, Any] = {"ty": t.ty}
    if t.generics:
        result["generics"] = t.generics
    if t.where_clause:
        result["where_clause"] = t.where_clause
    return result


def _const_fields(c: ConstInfo) -> dict[str, Any]:
    result: dict[str, Any] = {"ty": c.ty}
    if c.value is not None:
        result["value"] = c.value
    return result


def _static_fields(s: StaticInfo) -> dict[str, Any]:
    result: dict[str, Any] = {"ty": s.ty}
    if s.is_mut:
        result["is_mut"] = True
    return result


_KIND_FIELDS: dict[ItemKind, Callable[[Any], dict[str, Any]]] = _exhaustive(
    {
        ItemKind.FUNCTION: _function_fields,
        ItemKind.STRUCT: _struct_fields,
        ItemKind.ENUM: _enum_fields,
        ItemKind.TRAIT: _trait_fields,
        ItemKind.IMPL: _impl_fields,
        ItemKind.MODULE: _module_fields,
        ItemKind.TYPE_ALIAS: _type_alias_fields,
        ItemKind.CONST: _const_fields,
        ItemKind.STATIC: _static_fields,
    },
    "to_dict()",
)


def to_dict(item: AnalyzedItem) -> dict[str, Any]:
    """Convert an item to a dictionary for JSON serialization."""
    result: dict[str, Any] = {
        "kind": item.kind.value,
        "name": item.name,
        "qualified_name": qualified_name(item),
        "module_path": list(item.module_path),
    }
    if item.visibility is not None:
        result["visibility"] = item.visibility.value
    if item.documentation:
        result["documentation"] = item.documentation
    if item.source_location is not None:
        result["source_location"] = item.source_location.to_dict()
    result.update(_KIND_FIELDS[item.kind](item))
    return result
