"""
Dependency graph resolver.

Walks every named reference reachable from a set of root definitions and
returns the closure that has to be emitted. Visits are memoized by
qualified name, so recursive and mutually recursive types terminate and
each definition is visited once per run.
"""

from __future__ import annotations

from collections.abc import Iterator

from ..errors import GenericArityMismatch, UnresolvedTypeReference, UnsupportedRecursiveType
from .ir_nodes import ContainerKind, PayloadKind, RefKind, TagKind, TypeDefinition, TypeKind, TypeRef
from .registry import TypeRegistry


def iter_references(definition: TypeDefinition) -> Iterator[tuple[TypeRef, str]]:
    """Yield every top-level type reference of a definition with its site.

    Skipped fields and fields with a `type` override are not part of the
    output and contribute no references.
    """
    for index, f in enumerate(definition.fields):
        if f.config.skip or f.type_ref is None:
            continue
        yield f.type_ref, f.name if f.name is not None else str(index)

    for variant in definition.variants:
        if variant.config.skip:
            continue
        for type_ref in variant.types:
            yield type_ref, variant.name
        for f in variant.fields:
            if f.config.skip or f.type_ref is None:
                continue
            yield f.type_ref, f"{variant.name}.{f.name}"

    if definition.target is not None:
        yield definition.target, ""


def _bare_references(type_ref: TypeRef) -> Iterator[TypeRef]:
    """Named references that render without an object or array around them."""
    if type_ref.kind == RefKind.NAMED:
        yield type_ref
    elif type_ref.kind == RefKind.CONTAINER and type_ref.container == ContainerKind.OPTIONAL:
        yield from _bare_references(type_ref.type_args[0])


def iter_bare_references(definition: TypeDefinition) -> Iterator[tuple[TypeRef, str]]:
    """Yield references that TypeScript cannot defer when they form a cycle.

    These are alias targets, newtype fields, untagged single payloads and
    internally tagged newtype payloads (rendered as an intersection).
    """
    if definition.kind == TypeKind.ALIAS and definition.target is not None:
        for type_ref in _bare_references(definition.target):
            yield type_ref, ""

    if definition.kind == TypeKind.TUPLE:
        fields = [f for f in definition.fields if not f.config.skip and f.type_ref is not None]
        if len(fields) == 1 and len(definition.fields) == 1:
            for type_ref in _bare_references(fields[0].type_ref):
                yield type_ref, "0"

    if definition.kind == TypeKind.ENUM and definition.tag_strategy.kind in (TagKind.UNTAGGED, TagKind.INTERNAL):
        for variant in definition.variants:
            if variant.payload == PayloadKind.TUPLE and len(variant.types) == 1:
                for type_ref in _bare_references(variant.types[0]):
                    yield type_ref, variant.name


class DependencyGraph:
    """Resolves named references and computes emission closures."""

    def __init__(self, registry: TypeRegistry):
        self.registry = registry

    def resolve_reference(self, owner: TypeDefinition, type_ref: TypeRef, site: str = "") -> TypeDefinition:
        """
        Resolve a NAMED reference made from `owner`.

        Raises:
            UnresolvedTypeReference: If no definition, or more than one, answers to the name
            GenericArityMismatch: If the argument count differs from the target's parameters
            GenerationError: If building the target definition fails
        """
        matches = self.registry.candidates(type_ref.name, owner.module)
        if len(matches) != 1:
            raise UnresolvedTypeReference(owner.qualified_name, type_ref.name, site, candidates=matches)
        target = self.registry.get(matches[0])
        if len(type_ref.type_args) != len(target.generics):
            raise GenericArityMismatch(
                owner.qualified_name,
                target.qualified_name,
                len(target.generics),
                len(type_ref.type_args),
                site,
            )
        return target

    def dependencies(self, definition: TypeDefinition) -> list[TypeDefinition]:
        """Direct dependencies in first-reference order, without duplicates."""
        seen: dict[str, TypeDefinition] = {}
        for top, site in iter_references(definition):
            for type_ref in top.walk():
                if type_ref.kind != RefKind.NAMED:
                    continue
                target = self.resolve_reference(definition, type_ref, site)
                seen.setdefault(target.qualified_name, target)
        return list(seen.values())

    def closure(self, roots: list[TypeDefinition]) -> list[TypeDefinition]:
        """
        Compute every definition reachable from the roots.

        Depth-first pre-order, roots first, dependencies in declaration
        order. Each definition appears exactly once.

        Raises:
            UnresolvedTypeReference: For a reference to an unregistered type
            GenericArityMismatch: For a reference with the wrong argument count
            UnsupportedRecursiveType: For a cycle TypeScript cannot express
        """
        visited: dict[str, TypeDefinition] = {}
        stack: list[Iterator[TypeDefinition]] = [iter(roots)]
        while stack:
            definition = next(stack[-1], None)
            if definition is None:
                stack.pop()
                continue
            if definition.qualified_name in visited:
                continue
            visited[definition.qualified_name] = definition
            stack.append(iter(self.dependencies(definition)))

        result = list(visited.values())
        self.check_bare_cycles(result)
        return result

    def check_bare_cycles(self, definitions: list[TypeDefinition]) -> None:
        """
        Reject cycles made only of bare references, e.g. `type A = B | null; type B = A`.

        Raises:
            UnsupportedRecursiveType: Naming the cycle
        """
        edges: dict[str, list[str]] = {}
        for definition in definitions:
            targets = []
            for type_ref, site in iter_bare_references(definition):
                targets.append(self.resolve_reference(definition, type_ref, site).qualified_name)
            edges[definition.qualified_name] = targets

        state: dict[str, int] = {}  # 1 = on the current path, 2 = done

        def visit(name: str, path: list[str]) -> None:
            state[name] = 1
            path.append(name)
            for target in edges.get(name, []):
                if state.get(target) == 1:
                    cycle = path[path.index(target) :] + [target]
                    raise UnsupportedRecursiveType(cycle[0], cycle)
                if target not in state:
                    visit(target, path)
            path.pop()
            state[name] = 2

        for name in edges:
            if name not in state:
                visit(name, [])
