"""
Process-wide type registry.

Each exportable type registers a builder under its qualified name
(`module::Name`). Definitions are built lazily, the first time the
dependency graph asks for them, and memoized. A build failure is memoized
too, so a broken type fails the same way for every root that reaches it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from ..errors import GenerationError
from ..schema_ast.nodes import RawTypeDecl
from ..schema_ast.parser import load_feed
from .attributes import parse_directive
from .builder import TypeModelBuilder
from .ir_nodes import TypeDefinition

DefinitionBuilder = Callable[[], TypeDefinition]


def qualify(module: str, name: str) -> str:
    return f"{module}::{name}" if module else name


class TypeRegistry:
    """Maps qualified type names to lazily built definitions."""

    def __init__(self, model_builder: TypeModelBuilder | None = None):
        self.model_builder = model_builder or TypeModelBuilder()
        self._builders: dict[str, DefinitionBuilder] = {}
        self._built: dict[str, TypeDefinition] = {}
        self._failures: dict[str, GenerationError] = {}
        # bare name -> qualified names, in registration order
        self._by_name: dict[str, list[str]] = {}
        # Types marked as export roots
        self._exported: set[str] = set()

    def __contains__(self, qualified_name: str) -> bool:
        return qualified_name in self._builders

    def __len__(self) -> int:
        return len(self._builders)

    def names(self) -> list[str]:
        """Qualified names in registration order."""
        return list(self._builders)

    def exported_names(self) -> list[str]:
        """Qualified names of the types marked for export, in registration order."""
        return [name for name in self._builders if name in self._exported]

    def register(self, qualified_name: str, builder: DefinitionBuilder, export: bool = False) -> None:
        """
        Register a lazy builder.

        Args:
            qualified_name: `module::Name`, or `Name` for the root module
            builder: Zero-argument callable returning the TypeDefinition
            export: Whether the type is an export root

        Raises:
            ValueError: If the name is already registered
        """
        if qualified_name in self._builders:
            raise ValueError(f"Type `{qualified_name}` is already registered")
        self._builders[qualified_name] = builder
        if export:
            self._exported.add(qualified_name)
        bare = qualified_name.rsplit("::", 1)[-1]
        self._by_name.setdefault(bare, []).append(qualified_name)

    def register_definition(self, definition: TypeDefinition) -> None:
        """Register an already built definition."""
        self.register(definition.qualified_name, lambda: definition, export=definition.config.export)

    def register_decl(self, decl: RawTypeDecl) -> None:
        """Register a raw declaration, built on first use."""
        # Export marker, read without building the type
        export = any(parse_directive(d).key in ("export", "export_to") for d in decl.directives)
        self.register(
            decl.qualified_name,
            lambda: self.model_builder.build(decl, lambda path: bool(self.candidates(path, decl.module))),
            export=export,
        )

    def register_feed(self, path: str | Path) -> list[str]:
        """Register every declaration of a feed file. Returns their qualified names."""
        return self.register_decls(load_feed(path))

    def register_decls(self, decls: Iterable[RawTypeDecl]) -> list[str]:
        names = []
        for decl in decls:
            self.register_decl(decl)
            names.append(decl.qualified_name)
        return names

    def get(self, qualified_name: str) -> TypeDefinition:
        """
        Return the definition registered under a qualified name, building it if needed.

        Raises:
            KeyError: If nothing is registered under the name
            GenerationError: If building the definition fails
        """
        if qualified_name in self._built:
            return self._built[qualified_name]
        if qualified_name in self._failures:
            raise self._failures[qualified_name]

        builder = self._builders[qualified_name]
        try:
            definition = builder()
        except GenerationError as e:
            self._failures[qualified_name] = e
            raise
        self._built[qualified_name] = definition
        return definition

    def lookup(self, name: str, from_module: str = "") -> str | None:
        """
        Find the qualified name a reference points to.

        Paths are tried as written (with `crate::`, `self::` and `super::`
        resolved against `from_module`). A bare name is looked up in
        `from_module` first, then in the root module, then as a unique
        match across all modules.

        Returns:
            The qualified name, or None if missing or ambiguous
        """
        matches = self.candidates(name, from_module)
        return matches[0] if len(matches) == 1 else None

    def candidates(self, name: str, from_module: str = "") -> list[str]:
        """Qualified names a reference may point to; more than one means it is ambiguous."""
        if "::" in name:
            segments = name.split("::")
            module_segments = from_module.split("::") if from_module else []
            if segments[0] == "crate":
                segments = segments[1:]
            elif segments[0] == "self":
                segments = module_segments + segments[1:]
            elif segments[0] == "super":
                while segments and segments[0] == "super":
                    module_segments = module_segments[:-1]
                    segments = segments[1:]
                segments = module_segments + segments
            candidate = "::".join(segments)
            return [candidate] if candidate in self._builders else []

        local = qualify(from_module, name)
        if local in self._builders:
            return [local]
        if name in self._builders:
            return [name]
        return list(self._by_name.get(name, []))

    def clear(self) -> None:
        self._builders.clear()
        self._built.clear()
        self._failures.clear()
        self._by_name.clear()
        self._exported.clear()


default_registry = TypeRegistry()
