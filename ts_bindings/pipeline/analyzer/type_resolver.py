"""
Type reference resolver.

Maps a declared type (a parsed RawType) to a language-agnostic TypeRef,
given the generic parameters in scope. Named types are not built here:
they stay names and are resolved lazily by the dependency graph.

Core primitives (`u8`, `bool`, `String`, ...) always map to TypeScript
primitives. Every other well-known name (`Uuid`, `Version`, `Box`,
`HashMap`, ...) is only used when no registered type answers to the path,
so a user type called `Version` or `Cell` is emitted as itself.
"""

from __future__ import annotations

from collections.abc import Callable

from ..errors import UnsupportedType
from ..schema_ast.nodes import RawType, RawTypeKind
from .ir_nodes import ContainerKind, PrimitiveKind, TypeRef

# Fixed-size arrays longer than this are emitted as Array<T>
ARRAY_TUPLE_LIMIT = 64

# Language primitives, never shadowed by registered types
CORE_PRIMITIVES: dict[str, PrimitiveKind] = {
    **dict.fromkeys(
        ["u8", "i8", "u16", "i16", "u32", "i32", "usize", "isize", "f32", "f64"],
        PrimitiveKind.NUMBER,
    ),
    **dict.fromkeys(["u64", "i64", "u128", "i128"], PrimitiveKind.BIGINT),
    "bool": PrimitiveKind.BOOLEAN,
    **dict.fromkeys(["String", "str", "char"], PrimitiveKind.STRING),
}

# Library types with a fixed representation
PRIMITIVE_TYPES: dict[str, PrimitiveKind] = {
    **dict.fromkeys(
        [
            "NonZeroU8",
            "NonZeroI8",
            "NonZeroU16",
            "NonZeroI16",
            "NonZeroU32",
            "NonZeroI32",
            "NonZeroUsize",
            "NonZeroIsize",
            "OrderedFloat",
        ],
        PrimitiveKind.NUMBER,
    ),
    **dict.fromkeys(["NonZeroU64", "NonZeroI64", "NonZeroU128", "NonZeroI128"], PrimitiveKind.BIGINT),
    **dict.fromkeys(
        [
            "Path",
            "PathBuf",
            "IpAddr",
            "Ipv4Addr",
            "Ipv6Addr",
            "SocketAddr",
            "SocketAddrV4",
            "SocketAddrV6",
            "Uuid",
            "Url",
            "BigDecimal",
            "Version",
            "DateTime",
            "NaiveDateTime",
            "NaiveDate",
            "NaiveTime",
        ],
        PrimitiveKind.STRING,
    ),
    "PhantomData": PrimitiveKind.NULL,
}

LIST_TYPES = {"Vec", "VecDeque", "LinkedList", "HashSet", "BTreeSet", "IndexSet", "BinaryHeap"}
MAP_TYPES = {"HashMap", "BTreeMap", "IndexMap"}
RANGE_TYPES = {"Range", "RangeInclusive"}

# Byte buffers serialize like Vec<u8>
BYTES_TYPES = {"Bytes", "BytesMut"}

# Smart pointers and cells serialize as their content
TRANSPARENT_TYPES = {"Box", "Rc", "Arc", "Cow", "Cell", "RefCell", "Mutex", "RwLock", "Weak"}

# Containers that may carry a trailing hasher parameter
HASHED_TYPES = {"HashMap", "HashSet", "IndexMap", "IndexSet"}

# Arity of the built-in generic containers
CONTAINER_ARITY = {
    "Option": 1,
    "Result": 2,
    **dict.fromkeys(LIST_TYPES, 1),
    **dict.fromkeys(MAP_TYPES, 2),
    **dict.fromkeys(RANGE_TYPES, 1),
}


class TypeResolver:
    """Resolves declared types to TypeRefs within a generic scope."""

    def __init__(
        self,
        type_name: str,
        generics: tuple[str, ...] = (),
        is_registered: Callable[[str], bool] | None = None,
    ):
        """
        Initialize the resolver.

        Args:
            type_name: Qualified name of the type being built, for error messages
            generics: Generic parameters of the enclosing type
            is_registered: Whether a path names a registered type; such paths
                are never mapped through the well-known type tables
        """
        self.type_name = type_name
        self.generics = set(generics)
        self.is_registered = is_registered

    def resolve(self, raw: RawType, site: str = "") -> TypeRef:
        """
        Resolve a declared type.

        Args:
            raw: The parsed declared type
            site: Field or variant the type belongs to, for error messages

        Returns:
            The resolved TypeRef

        Raises:
            UnsupportedType: If the construct cannot be represented
        """
        if raw.kind == RawTypeKind.PATH:
            return self._resolve_path(raw, site)

        if raw.kind == RawTypeKind.REFERENCE:
            return self.resolve(raw.args[0], site)

        if raw.kind == RawTypeKind.TUPLE:
            if not raw.args:
                return TypeRef.primitive(PrimitiveKind.NULL)
            return TypeRef.of(ContainerKind.TUPLE, *(self.resolve(a, site) for a in raw.args))

        if raw.kind == RawTypeKind.SLICE:
            return TypeRef.of(ContainerKind.LIST, self.resolve(raw.args[0], site))

        if raw.kind == RawTypeKind.ARRAY:
            element = self.resolve(raw.args[0], site)
            if raw.length is not None and raw.length <= ARRAY_TUPLE_LIMIT:
                return TypeRef.of(ContainerKind.TUPLE, *([element] * raw.length))
            return TypeRef.of(ContainerKind.LIST, element)

        # Function pointers, raw pointers, trait objects and `!`
        raise UnsupportedType(self.type_name, raw.text or raw.kind.value, site)

    def _resolve_path(self, raw: RawType, site: str) -> TypeRef:
        ident = raw.ident

        # A bare identifier naming a generic parameter in scope
        if len(raw.segments) == 1 and ident in self.generics:
            if raw.args:
                raise UnsupportedType(self.type_name, raw.text, site)
            return TypeRef.generic(ident)

        if ident in CORE_PRIMITIVES:
            return TypeRef.primitive(CORE_PRIMITIVES[ident])

        if self.is_registered is not None and self.is_registered(raw.path):
            return self._named(raw, site)

        if ident in PRIMITIVE_TYPES:
            return TypeRef.primitive(PRIMITIVE_TYPES[ident])

        if ident in BYTES_TYPES:
            return TypeRef.of(ContainerKind.LIST, TypeRef.primitive(PrimitiveKind.NUMBER))

        if ident in TRANSPARENT_TYPES:
            # Cow<'a, T> keeps only T once lifetimes are dropped
            if len(raw.args) != 1:
                raise UnsupportedType(self.type_name, raw.text, site)
            return self.resolve(raw.args[0], site)

        if ident in CONTAINER_ARITY:
            expected = CONTAINER_ARITY[ident]
            allowed = expected + 1 if ident in HASHED_TYPES else expected
            if not expected <= len(raw.args) <= allowed:
                raise UnsupportedType(self.type_name, raw.text, site)
            args = [self.resolve(a, site) for a in raw.args[:expected]]
            if ident == "Option":
                return TypeRef.of(ContainerKind.OPTIONAL, *args)
            if ident == "Result":
                return TypeRef.of(ContainerKind.RESULT, *args)
            if ident in LIST_TYPES:
                return TypeRef.of(ContainerKind.LIST, *args)
            if ident in RANGE_TYPES:
                return TypeRef.of(ContainerKind.RANGE, *args)
            return TypeRef.of(ContainerKind.MAP, *args)

        return self._named(raw, site)

    def _named(self, raw: RawType, site: str) -> TypeRef:
        return TypeRef.named(raw.path, *(self.resolve(a, site) for a in raw.args))
