"""
Tests for the item model: qualified names, definitions and serialization.
"""

from mcp_oracle.analyzer import (
    ConstInfo,
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
    AssociatedType,
    TypeAliasInfo,
    Variant,
    VariantFields,
    Visibility,
    definition,
    is_public,
    qualified_name,
    to_dict,
)


class TestAccessors:
    """Test qualified names and visibility helpers."""

    def test_qualified_name(self):
        """Test module path and name are joined with ::."""
        func = FunctionInfo(name="parse", signature="fn parse()", module_path=["analyzer", "parser"])

        assert qualified_name(func) == "analyzer::parser::parse"

    def test_qualified_name_at_root(self):
        """Test items without a module path."""
        assert qualified_name(StructInfo(name="Root")) == "Root"

    def test_impl_is_never_public(self):
        """Test impls have no visibility."""
        impl = ImplInfo(self_ty="Point")

        assert impl.visibility is None
        assert not is_public(impl)
        assert is_public(StructInfo(name="P", visibility=Visibility.PUBLIC))

    def test_kind_tags(self):
        """Test every record carries its kind."""
        assert FunctionInfo.kind is ItemKind.FUNCTION
        assert ImplInfo.kind is ItemKind.IMPL
        assert TypeAliasInfo.kind is ItemKind.TYPE_ALIAS

    def test_source_location_str(self):
        """Test location rendering."""
        assert str(SourceLocation("src/lib.rs", 4)) == "src/lib.rs:4"
        assert str(SourceLocation("src/lib.rs")) == "src/lib.rs"
        assert str(SourceLocation()) == "unknown"

    def test_parameter_str(self):
        """Test parameter rendering."""
        assert str(Parameter("self", "Self", is_self=True, is_ref=True, is_mut=True)) == "&mut self"
        assert str(Parameter("self", "Self", is_self=True, is_mut=True)) == "mut self"
        assert str(Parameter("self", "Self", is_self=True)) == "self"
        assert str(Parameter("x", "u8")) == "x: u8"


class TestDefinition:
    """Test rendered definitions."""

    def test_named_struct(self):
        """Test a struct with named fields."""
        struct = StructInfo(
            name="Point",
            visibility=Visibility.PUBLIC,
            struct_kind=StructKind.NAMED,
            generics=["T"],
            fields=[Field("x", "T", Visibility.PUBLIC), Field("y", "T")],
        )

        assert definition(struct) == "pub struct Point<T> {\n    pub x: T,\n    y: T\n}"

    def test_tuple_and_unit_struct(self):
        """Test tuple and unit structs."""
        pair = StructInfo(name="Pair", struct_kind=StructKind.TUPLE, fields=[Field("0", "u8"), Field("1", "u16")])

        assert definition(pair) == "struct Pair(u8, u16);"
        assert definition(StructInfo(name="Unit")) == "struct Unit;"

    def test_enum(self):
        """Test enum variants of every shape."""
        enum = EnumInfo(
            name="Shape",
            variants=[
                Variant("Empty"),
                Variant("Circle", VariantFields(StructKind.TUPLE, unnamed=["f64"])),
                Variant("Rect", VariantFields(StructKind.NAMED, named=[Field("w", "f64")])),
            ],
        )

        assert definition(enum) == "enum Shape {\n    Empty,\n    Circle(f64),\n    Rect { w: f64 }\n}"

    def test_trait(self):
        """Test trait with supertraits, associated types and methods."""
        trait = TraitInfo(
            name="Shape",
            visibility=Visibility.PUBLIC,
            supertraits=["Debug"],
            associated_types=[AssociatedType("Output")],
            methods=[TraitMethod("area", "fn area(&self) -> f64")],
        )

        assert definition(trait) == "pub trait Shape: Debug {\n    type Output;\n    fn area(&self) -> f64;\n}"

    def test_impl(self):
        """Test trait and inherent impl headers."""
        assert definition(ImplInfo(self_ty="Point")) == "impl Point"
        assert (
            definition(ImplInfo(self_ty="Wrapper<T>", trait_name="Send", generics=["T"], is_unsafe=True))
            == "unsafe impl<T> Send for Wrapper<T>"
        )
        assert definition(ImplInfo(self_ty="X", trait_name="Sync", is_negative=True)) == "impl !Sync for X"

    def test_simple_items(self):
        """Test one-line definitions."""
        assert definition(FunctionInfo(name="f", signature="fn f() -> u8")) == "fn f() -> u8"
        assert definition(ModuleInfo(name="ui")) == "mod ui"
        assert definition(TypeAliasInfo(name="Id", ty="u64")) == "type Id = u64"
        assert definition(ConstInfo(name="MAX", ty="usize", value="3")) == "const MAX: usize"
        assert definition(StaticInfo(name="COUNT", ty="u32", is_mut=True)) == "static mut COUNT: u32"


class TestToDict:
    """Test JSON serialization."""

    def test_common_fields(self):
        """Test fields shared by every kind."""
        func = FunctionInfo(
            name="run",
            signature="pub fn run()",
            visibility=Visibility.PUBLIC,
            documentation="Runs.",
            module_path=["cli"],
            source_location=SourceLocation("src/cli.rs", 2),
        )
        data = to_dict(func)

        assert data["kind"] == "fn"
        assert data["name"] == "run"
        assert data["qualified_name"] == "cli::run"
        assert data["visibility"] == "pub"
        assert data["documentation"] == "Runs."
        assert data["source_location"] == {"file": "src/cli.rs", "line": 2}
        assert data["parameters"] == []

    def test_empty_fields_omitted(self):
        """Test empty optional fields are left out."""
        data = to_dict(FunctionInfo(name="f", signature="fn f()"))

        assert "documentation" not in data
        assert "source_location" not in data
        assert "return_type" not in data
        assert "is_async" not in data

    def test_impl_has_no_visibility(self):
        """Test impls serialize without visibility."""
        impl = ImplInfo(self_ty="P", methods=[FunctionInfo(name="m", signature="fn m()")])
        data = to_dict(impl)

        assert "visibility" not in data
        assert data["self_ty"] == "P"
        assert data["methods"][0]["name"] == "m"
