"""
IR (Intermediate Representation) node definitions.

These nodes describe an exported type independently of both the source
declaration feed and the TypeScript output. Named references are kept as
names and resolved lazily, so forward and recursive references are allowed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TypeKind(str, Enum):
    """Kind of a type definition."""

    STRUCT = "struct"  # Named fields
    ENUM = "enum"  # Variants
    ALIAS = "alias"  # type Name = Target
    TUPLE = "tuple"  # Positional fields (newtype, tuple struct, unit struct)


class RefKind(str, Enum):
    """Kind of a type reference."""

    PRIMITIVE = "primitive"  # number, string, ...
    NAMED = "named"  # Another definition, possibly generic
    GENERIC_PARAM = "generic_param"  # T in the enclosing scope
    CONTAINER = "container"  # Option, Vec, HashMap, tuples, Result, Range


class PrimitiveKind(str, Enum):
    """TypeScript primitive a source primitive maps to."""

    NUMBER = "number"
    BIGINT = "bigint"
    STRING = "string"
    BOOLEAN = "boolean"
    NULL = "null"


class ContainerKind(str, Enum):
    """Structural container kinds."""

    OPTIONAL = "optional"  # T | null
    LIST = "list"  # Array<T>
    MAP = "map"  # { [key: K]: V }
    TUPLE = "tuple"  # [A, B]
    RESULT = "result"  # { Ok: T } | { Err: E }
    RANGE = "range"  # { start: T, end: T }


class CaseConvention(str, Enum):
    """Values accepted by rename_all / rename_all_fields."""

    LOWER = "lowercase"
    UPPER = "UPPERCASE"
    CAMEL = "camelCase"
    SNAKE = "snake_case"
    PASCAL = "PascalCase"
    SCREAMING_SNAKE = "SCREAMING_SNAKE_CASE"
    KEBAB = "kebab-case"
    SCREAMING_KEBAB = "SCREAMING-KEBAB-CASE"


class TagKind(str, Enum):
    """Enum representation on the wire."""

    EXTERNAL = "external"
    INTERNAL = "internal"
    ADJACENT = "adjacent"
    UNTAGGED = "untagged"


class PayloadKind(str, Enum):
    """Shape of an enum variant's payload."""

    UNIT = "unit"
    TUPLE = "tuple"
    STRUCT = "struct"


@dataclass(frozen=True)
class TypeRef:
    """A resolved, language-agnostic type reference."""

    kind: RefKind = RefKind.PRIMITIVE

    # Primitive kind value, definition name (as written) or generic parameter name
    name: str = ""

    # Generic arguments of a NAMED ref, or elements of a CONTAINER
    type_args: tuple[TypeRef, ...] = ()

    # For CONTAINER refs
    container: ContainerKind | None = None

    @staticmethod
    def primitive(kind: PrimitiveKind) -> TypeRef:
        return TypeRef(kind=RefKind.PRIMITIVE, name=kind.value)

    @staticmethod
    def named(name: str, *type_args: TypeRef) -> TypeRef:
        return TypeRef(kind=RefKind.NAMED, name=name, type_args=tuple(type_args))

    @staticmethod
    def generic(name: str) -> TypeRef:
        return TypeRef(kind=RefKind.GENERIC_PARAM, name=name)

    @staticmethod
    def of(container: ContainerKind, *elements: TypeRef) -> TypeRef:
        return TypeRef(kind=RefKind.CONTAINER, container=container, type_args=tuple(elements))

    @property
    def is_optional(self) -> bool:
        return self.kind == RefKind.CONTAINER and self.container == ContainerKind.OPTIONAL

    @property
    def is_map(self) -> bool:
        return self.kind == RefKind.CONTAINER and self.container == ContainerKind.MAP

    def walk(self):
        """Yield this reference and every reference nested inside it."""
        yield self
        for arg in self.type_args:
            yield from arg.walk()


@dataclass(frozen=True)
class TagStrategy:
    """Tagging scheme of an enum, applied uniformly to its variants."""

    kind: TagKind = TagKind.EXTERNAL
    tag: str | None = None
    content: str | None = None

    @staticmethod
    def external() -> TagStrategy:
        return TagStrategy()

    @staticmethod
    def internal(tag: str) -> TagStrategy:
        return TagStrategy(kind=TagKind.INTERNAL, tag=tag)

    @staticmethod
    def adjacent(tag: str, content: str) -> TagStrategy:
        return TagStrategy(kind=TagKind.ADJACENT, tag=tag, content=content)

    @staticmethod
    def untagged() -> TagStrategy:
        return TagStrategy(kind=TagKind.UNTAGGED)


@dataclass(frozen=True)
class ExportConfig:
    """Normalized configuration attached to a type, field or variant."""

    rename: str | None = None
    rename_all: CaseConvention | None = None

    # Enum only: convention for the fields of struct variants
    rename_all_fields: CaseConvention | None = None

    skip: bool = False
    flatten: bool = False
    inline: bool = False

    # Field only: verbatim TypeScript type
    type_override: str | None = None

    # Enum only
    tag_strategy: TagStrategy | None = None

    # Type only: export this type as a root, and where
    export: bool = False
    export_to: str | None = None

    docs: str | None = None


@dataclass(frozen=True)
class Field:
    """A struct, tuple or struct-variant field."""

    name: str | None = None  # None for positional fields
    type_ref: TypeRef | None = None
    optional: bool = False  # Rendered as `name?: T`
    config: ExportConfig = field(default_factory=ExportConfig)


@dataclass(frozen=True)
class Variant:
    """An enum variant."""

    name: str = ""
    payload: PayloadKind = PayloadKind.UNIT

    # For TUPLE payloads
    types: tuple[TypeRef, ...] = ()

    # For STRUCT payloads
    fields: tuple[Field, ...] = ()

    config: ExportConfig = field(default_factory=ExportConfig)


@dataclass(frozen=True)
class TypeDefinition:
    """A fully built type, ready for dependency resolution and rendering."""

    name: str = ""
    module: str = ""
    kind: TypeKind = TypeKind.STRUCT
    generics: tuple[str, ...] = ()

    # For STRUCT and TUPLE
    fields: tuple[Field, ...] = ()

    # For ENUM
    variants: tuple[Variant, ...] = ()

    # For ALIAS
    target: TypeRef | None = None

    config: ExportConfig = field(default_factory=ExportConfig)

    @property
    def qualified_name(self) -> str:
        """Registry key, e.g. `api::models::User`."""
        return f"{self.module}::{self.name}" if self.module else self.name

    @property
    def ts_name(self) -> str:
        """Name of the declaration in TypeScript."""
        return self.config.rename or self.name

    @property
    def tag_strategy(self) -> TagStrategy:
        return self.config.tag_strategy or TagStrategy.external()
