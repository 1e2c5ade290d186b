"""
Tests for building TypeDefinitions from raw declarations.
"""

from __future__ import annotations

import pytest

from ts_bindings.pipeline.analyzer import (
    ContainerKind,
    PayloadKind,
    PrimitiveKind,
    RefKind,
    TypeKind,
    TypeModelBuilder,
    TypeRef,
)
from ts_bindings.pipeline.errors import InvalidAttributeTarget, UnsupportedType
from ts_bindings.pipeline.schema_ast import FeedParser


def build(entry: dict, module: str = "api"):
    decl = FeedParser().parse({"module": module, "types": [entry]})[0]
    return TypeModelBuilder().build(decl)


def test_struct_preserves_field_order():
    definition = build(
        {
            "name": "User",
            "fields": [
                {"name": "zeta", "type": "u8"},
                {"name": "alpha", "type": "String"},
                {"name": "mid", "type": "bool"},
            ],
        }
    )
    assert definition.kind == TypeKind.STRUCT
    assert definition.qualified_name == "api::User"
    assert [f.name for f in definition.fields] == ["zeta", "alpha", "mid"]


def test_skipped_fields_are_not_resolved():
    # The skipped field's type is unsupported; skipping it must not fail
    definition = build(
        {
            "name": "Handler",
            "fields": [
                {"name": "id", "type": "u32"},
                {"name": "callback", "type": "fn(u32)", "directives": ["skip"]},
            ],
        }
    )
    assert [f.name for f in definition.fields] == ["id"]


def test_unsupported_field_type():
    with pytest.raises(UnsupportedType) as exc_info:
        build({"name": "Handler", "fields": [{"name": "callback", "type": "fn(u32)"}]})
    assert exc_info.value.site == "callback"
    assert exc_info.value.type_name == "api::Handler"


def test_malformed_type_is_unsupported():
    with pytest.raises(UnsupportedType):
        build({"name": "Bad", "fields": [{"name": "x", "type": "Vec<"}]})


def test_union_is_unsupported():
    with pytest.raises(UnsupportedType, match="union"):
        build({"name": "Raw", "kind": "union", "fields": [{"name": "a", "type": "u32"}]})


def test_optional_unwraps_option():
    definition = build(
        {
            "name": "Profile",
            "fields": [
                {"name": "nickname", "type": "Option<String>", "directives": ["optional"]},
                {"name": "avatar", "type": "Option<String>", "directives": ["optional=nullable"]},
            ],
        }
    )
    nickname, avatar = definition.fields
    assert nickname.optional
    assert nickname.type_ref == TypeRef.primitive(PrimitiveKind.STRING)
    assert avatar.optional
    assert avatar.type_ref.container == ContainerKind.OPTIONAL


def test_optional_requires_option():
    with pytest.raises(InvalidAttributeTarget, match="Option"):
        build({"name": "P", "fields": [{"name": "n", "type": "String", "directives": ["optional"]}]})


def test_flatten_requires_struct_or_map():
    with pytest.raises(InvalidAttributeTarget, match="flatten"):
        build({"name": "P", "fields": [{"name": "n", "type": "Vec<Meta>", "directives": ["flatten"]}]})


def test_type_override_skips_resolution():
    definition = build(
        {"name": "Event", "fields": [{"name": "at", "type": "Instant<Clock>", "directives": ["type=Date"]}]}
    )
    assert definition.fields[0].type_ref is None
    assert definition.fields[0].config.type_override == "Date"


def test_generics_drop_lifetimes_and_bounds():
    definition = build(
        {
            "name": "Page",
            "generics": ["'a", "T: Clone + Debug", "U = String"],
            "fields": [{"name": "items", "type": "Vec<T>"}, {"name": "extra", "type": "U"}],
        }
    )
    assert definition.generics == ("T", "U")
    assert definition.fields[0].type_ref.type_args[0] == TypeRef.generic("T")


def test_const_generics_are_unsupported():
    with pytest.raises(UnsupportedType):
        build({"name": "Buffer", "generics": ["const N: usize"], "fields": [{"name": "data", "type": "[u8; 4]"}]})


def test_tuple_and_unit_structs():
    newtype = build({"name": "UserId", "kind": "tuple", "fields": ["u64"]})
    assert newtype.kind == TypeKind.TUPLE
    assert newtype.fields[0].name is None
    assert newtype.fields[0].type_ref == TypeRef.primitive(PrimitiveKind.BIGINT)

    unit = build({"name": "Marker", "kind": "unit"})
    assert unit.kind == TypeKind.TUPLE
    assert unit.fields == ()


def test_alias():
    definition = build({"name": "Ids", "kind": "alias", "target": "Vec<UserId>"})
    assert definition.kind == TypeKind.ALIAS
    assert definition.target.type_args[0].kind == RefKind.NAMED

    with pytest.raises(UnsupportedType):
        build({"name": "Nothing", "kind": "alias"})


def test_enum_variants():
    definition = build(
        {
            "name": "Shape",
            "kind": "enum",
            "directives": ["tag=kind"],
            "docs": "A shape.",
            "variants": [
                {"name": "Circle", "fields": [{"name": "radius", "type": "f64"}]},
                {"name": "Square", "types": ["f64"]},
                {"name": "Legacy", "directives": ["skip"]},
                {"name": "Empty", "docs": "Nothing."},
            ],
        }
    )
    assert [v.name for v in definition.variants] == ["Circle", "Square", "Empty"]
    circle, square, empty = definition.variants
    assert circle.payload == PayloadKind.STRUCT
    assert circle.fields[0].name == "radius"
    assert square.payload == PayloadKind.TUPLE
    assert square.types == (TypeRef.primitive(PrimitiveKind.NUMBER),)
    assert empty.payload == PayloadKind.UNIT
    assert empty.config.docs == "Nothing."
    assert definition.config.docs == "A shape."
    assert definition.tag_strategy.tag == "kind"


def test_struct_variant_field_errors_name_the_variant():
    with pytest.raises(UnsupportedType) as exc_info:
        build({"name": "E", "kind": "enum", "variants": [{"name": "V", "fields": [{"name": "f", "type": "*mut u8"}]}]})
    assert exc_info.value.site == "V.f"


def test_raw_identifiers():
    definition = build({"name": "r#Match", "fields": [{"name": "r#type", "type": "String"}]})
    assert definition.name == "Match"
    assert definition.fields[0].name == "type"
