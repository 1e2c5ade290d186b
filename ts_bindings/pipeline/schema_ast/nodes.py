"""
Raw declaration nodes.

These mirror the declaration feed handed over by the host's reflection
machinery: names, declared types as source text, and the flat list of
directives attached to each item. Nothing here is resolved yet.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class RawTypeKind(str, Enum):
    """Kind of a raw declared type expression."""

    PATH = "path"  # Foo, std::vec::Vec<T>
    TUPLE = "tuple"  # (A, B), () for unit
    ARRAY = "array"  # [T; N]
    SLICE = "slice"  # [T]
    REFERENCE = "reference"  # &T, &'a mut T
    POINTER = "pointer"  # *const T, *mut T
    FUNCTION = "function"  # fn(A) -> B
    TRAIT_OBJECT = "trait_object"  # dyn Trait, impl Trait
    NEVER = "never"  # !


@dataclass
class RawType:
    """A parsed declared type expression."""

    kind: RawTypeKind = RawTypeKind.PATH

    # Path segments for PATH, e.g. ["std", "collections", "HashMap"]
    segments: list[str] = field(default_factory=list)

    # Generic arguments (PATH), elements (TUPLE) or the inner type
    args: list[RawType] = field(default_factory=list)

    # Length of a fixed-size ARRAY
    length: int | None = None

    # Source text, kept for error messages
    text: str = ""

    @property
    def ident(self) -> str:
        """Last path segment, e.g. `HashMap`."""
        return self.segments[-1] if self.segments else ""

    @property
    def path(self) -> str:
        return "::".join(self.segments)


@dataclass
class RawField:
    """A declared field. `name` is None for tuple fields."""

    name: str | None = None
    type: str = ""
    directives: list[str] = field(default_factory=list)
    docs: str | None = None


@dataclass
class RawVariant:
    """A declared enum variant.

    A variant with `fields` is struct-like, one with `types` is tuple-like,
    and one with neither is a unit variant.
    """

    name: str = ""
    fields: list[RawField] | None = None
    types: list[str] | None = None
    directives: list[str] = field(default_factory=list)
    docs: str | None = None


@dataclass
class RawTypeDecl:
    """A declared type as supplied by the feed."""

    name: str = ""
    module: str = ""
    kind: str = "struct"  # struct, tuple, unit, enum, alias, union
    generics: list[str] = field(default_factory=list)
    fields: list[RawField] = field(default_factory=list)
    variants: list[RawVariant] = field(default_factory=list)
    target: str | None = None  # For aliases
    directives: list[str] = field(default_factory=list)
    docs: str | None = None

    @property
    def qualified_name(self) -> str:
        return f"{self.module}::{self.name}" if self.module else self.name
