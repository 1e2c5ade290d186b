"""
Tests for mapping declared types to TypeRefs.
"""

from __future__ import annotations

import pytest

from ts_bindings.pipeline.analyzer import ContainerKind, PrimitiveKind, RefKind, TypeRef, TypeResolver
from ts_bindings.pipeline.errors import UnsupportedType
from ts_bindings.pipeline.schema_ast import parse_type


def resolve(text: str, generics: tuple[str, ...] = (), registered: tuple[str, ...] = ()) -> TypeRef:
    resolver = TypeResolver("api::Owner", generics, is_registered=lambda path: path in registered)
    return resolver.resolve(parse_type(text), "field")


NUMBER = TypeRef.primitive(PrimitiveKind.NUMBER)
BIGINT = TypeRef.primitive(PrimitiveKind.BIGINT)
STRING = TypeRef.primitive(PrimitiveKind.STRING)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("u8", PrimitiveKind.NUMBER),
        ("i32", PrimitiveKind.NUMBER),
        ("f64", PrimitiveKind.NUMBER),
        ("usize", PrimitiveKind.NUMBER),
        ("u64", PrimitiveKind.BIGINT),
        ("i128", PrimitiveKind.BIGINT),
        ("bool", PrimitiveKind.BOOLEAN),
        ("String", PrimitiveKind.STRING),
        ("&'static str", PrimitiveKind.STRING),
        ("char", PrimitiveKind.STRING),
        ("std::path::PathBuf", PrimitiveKind.STRING),
        ("uuid::Uuid", PrimitiveKind.STRING),
        ("chrono::DateTime<chrono::Utc>", PrimitiveKind.STRING),
        ("PhantomData<T>", PrimitiveKind.NULL),
        ("()", PrimitiveKind.NULL),
    ],
)
def test_primitives(text, expected):
    assert resolve(text, ("T",)) == TypeRef.primitive(expected)


def test_option_and_list():
    assert resolve("Option<String>") == TypeRef.of(ContainerKind.OPTIONAL, STRING)
    assert resolve("Vec<u32>") == TypeRef.of(ContainerKind.LIST, NUMBER)
    assert resolve("HashSet<u32>") == TypeRef.of(ContainerKind.LIST, NUMBER)
    assert resolve("&[u32]") == TypeRef.of(ContainerKind.LIST, NUMBER)


def test_maps():
    assert resolve("HashMap<String, u64>") == TypeRef.of(ContainerKind.MAP, STRING, BIGINT)
    assert resolve("BTreeMap<String, u64>").is_map
    # Custom hasher is ignored
    assert resolve("HashMap<String, u64, RandomState>") == TypeRef.of(ContainerKind.MAP, STRING, BIGINT)


def test_result():
    assert resolve("Result<i32, String>") == TypeRef.of(ContainerKind.RESULT, NUMBER, STRING)


def test_transparent_wrappers():
    assert resolve("Box<String>") == STRING
    assert resolve("Arc<Mutex<Vec<i32>>>") == TypeRef.of(ContainerKind.LIST, NUMBER)
    assert resolve("Cow<'a, str>") == STRING


def test_ranges():
    assert resolve("Range<u32>") == TypeRef.of(ContainerKind.RANGE, NUMBER)
    assert resolve("std::ops::RangeInclusive<T>", ("T",)) == TypeRef.of(ContainerKind.RANGE, TypeRef.generic("T"))


def test_byte_buffers():
    assert resolve("bytes::Bytes") == TypeRef.of(ContainerKind.LIST, NUMBER)
    assert resolve("BytesMut") == TypeRef.of(ContainerKind.LIST, NUMBER)


def test_tuples_and_arrays():
    assert resolve("(i32, String)") == TypeRef.of(ContainerKind.TUPLE, NUMBER, STRING)
    assert resolve("[u8; 3]") == TypeRef.of(ContainerKind.TUPLE, NUMBER, NUMBER, NUMBER)
    assert resolve("[u8; 1024]") == TypeRef.of(ContainerKind.LIST, NUMBER)


def test_generic_parameters():
    assert resolve("T", ("T",)) == TypeRef.generic("T")
    assert resolve("Vec<T>", ("T",)) == TypeRef.of(ContainerKind.LIST, TypeRef.generic("T"))
    # Out of scope: a named type
    assert resolve("T").kind == RefKind.NAMED


def test_named_references_keep_their_path():
    ref = resolve("crate::models::Page<User>")
    assert ref.kind == RefKind.NAMED
    assert ref.name == "crate::models::Page"
    assert ref.type_args == (TypeRef.named("User"),)


@pytest.mark.parametrize(
    "text",
    ["fn(i32) -> bool", "*const u8", "Box<dyn Display>", "!", "Range<u32, u32>", "Vec<u8, u8>", "Option<>"],
)
def test_unsupported(text):
    with pytest.raises(UnsupportedType) as exc_info:
        resolve(text)
    assert exc_info.value.type_name == "api::Owner"
    assert exc_info.value.site == "field"


class TestRegisteredTypes:
    def test_registered_names_are_not_library_types(self):
        assert resolve("Version", registered=("Version",)) == TypeRef.named("Version")
        assert resolve("Cell<u8>", registered=("Cell",)) == TypeRef.named("Cell", NUMBER)
        assert resolve("Range<u32>", registered=("Range",)) == TypeRef.named("Range", NUMBER)

    def test_unregistered_paths_use_the_library_tables(self):
        assert resolve("semver::Version", registered=("Version",)) == STRING
        assert resolve("Version") == STRING

    def test_core_primitives_cannot_be_shadowed(self):
        assert resolve("String", registered=("String",)) == STRING
        assert resolve("u64", registered=("u64",)) == BIGINT
