"""
TypeScript rendering backend.

Renders definitions as `export type` declarations. Named references are
always emitted by name, never expanded, so recursive types render as a
single self-referencing declaration. Only `flatten` and `inline` expand a
referenced definition in place.
"""

from __future__ import annotations

from ...utils import convert_case, to_ts_field_name, to_ts_string_literal
from ..analyzer.ir_nodes import (
    CaseConvention,
    ContainerKind,
    Field,
    PayloadKind,
    PrimitiveKind,
    RefKind,
    TagKind,
    TypeDefinition,
    TypeKind,
    TypeRef,
    Variant,
)
from ..errors import InvalidAttributeTarget, UnsupportedRecursiveType
from .base import CodeBackend, RenderContext, RenderedType

# Map keys that can be expressed as an index signature
INDEX_SIGNATURE_KEYS = {PrimitiveKind.STRING.value, PrimitiveKind.NUMBER.value}

EMPTY_OBJECT = "Record<string, never>"


class TypeScriptBackend(CodeBackend):
    """TypeScript rendering backend."""

    TEMPLATE_LANG = "typescript"
    FILE_EXTENSION = "ts"

    def render_declaration(self, definition: TypeDefinition) -> RenderedType:
        """Render `export type Name<T> = ...;` for a definition."""
        ctx = RenderContext.for_definition(definition)
        body = self._render_body(definition, ctx)

        params = f"<{', '.join(definition.generics)}>" if definition.generics else ""
        declaration = f"export type {definition.ts_name}{params} = {body};"
        docs = self._format_docs(definition.config.docs)
        if docs:
            declaration = f"{docs}\n{declaration}"

        references = [d for name, d in ctx.references.items() if name != definition.qualified_name]
        return RenderedType(definition=definition, declaration=declaration, references=references)

    def render_file(self, rendered: RenderedType, imports: list[tuple[str, str]]) -> str:
        return self.artifact_template.render(
            header=self.generation_header(rendered.definition.qualified_name),
            imports=imports,
            declaration=rendered.declaration,
        )

    def translate_type(self, type_ref: TypeRef, ctx: RenderContext, site: str = "", inline: bool = False) -> str:
        """Translate a type reference to a TypeScript type expression.

        With `inline`, named references are replaced by the body of the
        definition they point to.
        """
        if type_ref.kind == RefKind.PRIMITIVE:
            return type_ref.name

        if type_ref.kind == RefKind.GENERIC_PARAM:
            return ctx.bindings.get(type_ref.name, type_ref.name)

        if type_ref.kind == RefKind.NAMED:
            target = self.graph.resolve_reference(ctx.current, type_ref, site)
            if inline:
                nested = self._expand(target, type_ref, ctx, site)
                return self._render_body(target, nested)
            ctx.references.setdefault(target.qualified_name, target)
            if not type_ref.type_args:
                return target.ts_name
            args = ", ".join(self.translate_type(a, ctx, site, inline) for a in type_ref.type_args)
            return f"{target.ts_name}<{args}>"

        return self._translate_container(type_ref, ctx, site, inline)

    def _translate_container(self, type_ref: TypeRef, ctx: RenderContext, site: str, inline: bool) -> str:
        elements = [self.translate_type(a, ctx, site, inline) for a in type_ref.type_args]

        if type_ref.container == ContainerKind.OPTIONAL:
            return f"{elements[0]} | null"
        if type_ref.container == ContainerKind.LIST:
            return f"Array<{elements[0]}>"
        if type_ref.container == ContainerKind.TUPLE:
            return f"[{', '.join(elements)}]"
        if type_ref.container == ContainerKind.MAP:
            return self._map(type_ref.type_args[0], *elements)
        if type_ref.container == ContainerKind.RANGE:
            return f"{{ start: {elements[0]}, end: {elements[0]} }}"
        # RESULT
        ok, err = elements
        return f'{{ "Ok": {ok} }} | {{ "Err": {err} }}'

    def _map(self, key_ref: TypeRef, key: str, value: str) -> str:
        """Map type for a key.

        `string` and `number` keys use an index signature, named keys a
        mapped type. Other keys (bigint, boolean, generic parameters) are
        JSON object keys and render as `string`.
        """
        if key in INDEX_SIGNATURE_KEYS:
            return f"{{ [key: {key}]: {value} }}"
        if key_ref.kind == RefKind.NAMED:
            return f"{{ [key in {key}]?: {value} }}"
        return f"{{ [key: string]: {value} }}"

    def _expand(self, target: TypeDefinition, type_ref: TypeRef, ctx: RenderContext, site: str) -> RenderContext:
        """Context for rendering `target` in place, with its generics bound to the reference's arguments."""
        if target.qualified_name in ctx.expanding:
            raise UnsupportedRecursiveType(ctx.owner.qualified_name, ctx.expanding + [target.qualified_name], site)
        bindings = {
            param: self.translate_type(arg, ctx, site) for param, arg in zip(target.generics, type_ref.type_args)
        }
        return ctx.nested(target, bindings)

    # Bodies

    def _render_body(self, definition: TypeDefinition, ctx: RenderContext) -> str:
        if definition.kind == TypeKind.STRUCT:
            members, intersections = self._render_members(definition.fields, definition.config.rename_all, ctx)
            return self._object(members, intersections)

        if definition.kind == TypeKind.TUPLE:
            fields = [f for f in definition.fields if not f.config.skip]
            if not fields:
                return "null"
            rendered = [self._field_type(f, ctx, str(i)) for i, f in enumerate(fields)]
            if len(rendered) == 1:
                return rendered[0]
            return f"[{', '.join(rendered)}]"

        if definition.kind == TypeKind.ALIAS:
            return self.translate_type(definition.target, ctx)

        return self._render_enum(definition, ctx)

    def _render_members(
        self,
        fields: tuple[Field, ...],
        convention: CaseConvention | None,
        ctx: RenderContext,
        prefix: str = "",
    ) -> tuple[list[str], list[str]]:
        """Render object members in declared order.

        Returns:
            (members, intersections): flattened map fields become intersections
        """
        members: list[str] = []
        intersections: list[str] = []
        for f in fields:
            if f.config.skip:
                continue
            site = f"{prefix}{f.name}"

            if f.config.flatten:
                self._flatten(f, ctx, site, members, intersections)
                continue

            name = f.config.rename or (convert_case(f.name, convention.value) if convention else f.name)
            key = to_ts_field_name(name)
            marker = "?" if f.optional else ""
            member = f"{key}{marker}: {self._field_type(f, ctx, site)}"
            docs = self._format_inline_docs(f.config.docs)
            members.append(f"{docs}{member}")
        return members, intersections

    def _flatten(self, f: Field, ctx: RenderContext, site: str, members: list[str], intersections: list[str]) -> None:
        if f.type_ref.is_map:
            intersections.append(self.translate_type(f.type_ref, ctx, site, f.config.inline))
            return

        target = self.graph.resolve_reference(ctx.current, f.type_ref, site)
        if target.kind != TypeKind.STRUCT:
            raise InvalidAttributeTarget(
                ctx.owner.qualified_name,
                "flatten",
                f"is only valid on struct or map fields, `{target.qualified_name}` is a {target.kind.value}",
                site,
            )
        nested = self._expand(target, f.type_ref, ctx, site)
        inner_members, inner_intersections = self._render_members(
            target.fields, target.config.rename_all, nested, prefix=f"{site}."
        )
        members.extend(inner_members)
        intersections.extend(inner_intersections)

    def _field_type(self, f: Field, ctx: RenderContext, site: str) -> str:
        if f.config.type_override is not None:
            return f.config.type_override
        return self.translate_type(f.type_ref, ctx, site, f.config.inline)

    def _object(self, members: list[str], intersections: list[str] | None = None) -> str:
        parts = []
        if members:
            parts.append(f"{{ {', '.join(members)} }}")
        parts.extend(intersections or [])
        if not parts:
            return EMPTY_OBJECT
        return " & ".join(parts)

    # Enums

    def _render_enum(self, definition: TypeDefinition, ctx: RenderContext) -> str:
        variants = [v for v in definition.variants if not v.config.skip]
        if not variants:
            return "never"
        return " | ".join(self._render_variant(definition, v, ctx) for v in variants)

    def _variant_name(self, definition: TypeDefinition, variant: Variant) -> str:
        if variant.config.rename:
            return variant.config.rename
        if definition.config.rename_all:
            return convert_case(variant.name, definition.config.rename_all.value)
        return variant.name

    def _render_variant(self, definition: TypeDefinition, variant: Variant, ctx: RenderContext) -> str:
        strategy = definition.tag_strategy
        name = self._variant_name(definition, variant)
        literal = to_ts_string_literal(name)

        if strategy.kind == TagKind.EXTERNAL:
            if variant.payload == PayloadKind.UNIT:
                return literal
            return f"{{ {literal}: {self._payload(definition, variant, ctx)} }}"

        if strategy.kind == TagKind.UNTAGGED:
            if variant.payload == PayloadKind.UNIT:
                return "null"
            return self._payload(definition, variant, ctx)

        tag = f"{to_ts_string_literal(strategy.tag)}: {literal}"

        if strategy.kind == TagKind.ADJACENT:
            if variant.payload == PayloadKind.UNIT:
                return self._object([tag])
            content = to_ts_string_literal(strategy.content)
            return self._object([tag, f"{content}: {self._payload(definition, variant, ctx)}"])

        # INTERNAL: the tag becomes a member of the payload object
        if variant.payload == PayloadKind.UNIT:
            return self._object([tag])
        if variant.payload == PayloadKind.STRUCT:
            members, intersections = self._render_members(
                variant.fields, self._field_convention(definition, variant), ctx, prefix=f"{variant.name}."
            )
            return self._object([tag] + members, intersections)
        return self._internal_newtype(definition, variant, tag, ctx)

    def _internal_newtype(self, definition: TypeDefinition, variant: Variant, tag: str, ctx: RenderContext) -> str:
        """`{ "tag": "A" } & Inner` for a tuple variant wrapping a single struct."""
        if len(variant.types) == 1 and variant.types[0].kind == RefKind.NAMED:
            target = self.graph.resolve_reference(ctx.current, variant.types[0], variant.name)
            if target.kind == TypeKind.STRUCT:
                return f"{self._object([tag])} & {self.translate_type(variant.types[0], ctx, variant.name)}"
        raise InvalidAttributeTarget(
            definition.qualified_name,
            "tag",
            "requires unit, struct or single-struct payloads, found a tuple payload",
            variant.name,
        )

    def _field_convention(self, definition: TypeDefinition, variant: Variant) -> CaseConvention | None:
        return variant.config.rename_all or definition.config.rename_all_fields

    def _payload(self, definition: TypeDefinition, variant: Variant, ctx: RenderContext) -> str:
        if variant.payload == PayloadKind.STRUCT:
            members, intersections = self._render_members(
                variant.fields, self._field_convention(definition, variant), ctx, prefix=f"{variant.name}."
            )
            return self._object(members, intersections)

        types = [self.translate_type(t, ctx, variant.name) for t in variant.types]
        if len(types) == 1:
            return types[0]
        return f"[{', '.join(types)}]"

    # Docs

    def _format_docs(self, docs: str | None) -> str:
        """JSDoc block for a declaration."""
        if not docs or not self.config.emit_docs:
            return ""
        lines = [f" * {line.rstrip()}" if line.strip() else " *" for line in docs.strip("\n").splitlines()]
        return "/**\n" + "\n".join(lines) + "\n */"

    def _format_inline_docs(self, docs: str | None) -> str:
        """Single-line JSDoc prefix for a member."""
        if not docs or not self.config.emit_docs:
            return ""
        text = " ".join(line.strip() for line in docs.splitlines() if line.strip())
        return f"/** {text} */ "
