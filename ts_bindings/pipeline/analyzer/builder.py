"""
Type model builder.

Combines a raw declaration with resolved type references and processed
directives into an immutable TypeDefinition. Declaration order of fields
and variants is preserved exactly; generated output depends on it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace

from ...utils import strip_raw_identifier
from ..errors import UnsupportedType
from ..schema_ast.nodes import RawField, RawTypeDecl, RawVariant
from ..schema_ast.parser import TypeSyntaxError, parse_type
from .attributes import AttributeProcessor
from .ir_nodes import Field, PayloadKind, TypeDefinition, TypeKind, TypeRef, Variant
from .type_resolver import TypeResolver

logger = logging.getLogger(__name__)

DECLARATION_KINDS = {
    "struct": TypeKind.STRUCT,
    "tuple": TypeKind.TUPLE,
    "unit": TypeKind.TUPLE,
    "enum": TypeKind.ENUM,
    "alias": TypeKind.ALIAS,
}


class TypeModelBuilder:
    """Builds TypeDefinitions from raw declarations."""

    def __init__(self, attributes: AttributeProcessor | None = None):
        self.attributes = attributes or AttributeProcessor()

    def build(self, decl: RawTypeDecl, is_registered: Callable[[str], bool] | None = None) -> TypeDefinition:
        """
        Build the IR for one declaration.

        Args:
            decl: The raw declaration from the feed
            is_registered: Whether a referenced path names a registered type

        Returns:
            The built TypeDefinition

        Raises:
            UnsupportedType: If the declaration or one of its types has no TypeScript form
            InvalidAttributeTarget: If a directive is misplaced
        """
        type_name = decl.qualified_name
        if decl.kind not in DECLARATION_KINDS:
            raise UnsupportedType(type_name, decl.kind)

        kind = DECLARATION_KINDS[decl.kind]
        generics = self._generics(type_name, decl.generics)
        resolver = TypeResolver(type_name, generics, is_registered)

        config = self.attributes.type_config(type_name, kind, decl.directives)
        if decl.docs:
            config = replace(config, docs=decl.docs)

        fields: tuple[Field, ...] = ()
        variants: tuple[Variant, ...] = ()
        target = None

        if kind == TypeKind.STRUCT:
            fields = self._build_fields(type_name, decl.fields, resolver)
        elif kind == TypeKind.TUPLE:
            fields = self._build_fields(type_name, decl.fields, resolver, positional=True)
        elif kind == TypeKind.ENUM:
            variants = tuple(v for v in (self._build_variant(type_name, raw, resolver) for raw in decl.variants) if v)
        else:
            if not decl.target:
                raise UnsupportedType(type_name, "alias without a target")
            target = self._resolve(resolver, type_name, decl.target, "")

        return TypeDefinition(
            name=decl.name,
            module=decl.module,
            kind=kind,
            generics=generics,
            fields=fields,
            variants=variants,
            target=target,
            config=config,
        )

    def _generics(self, type_name: str, declared: list[str]) -> tuple[str, ...]:
        """Keep type parameters in order, dropping lifetimes and bounds."""
        params = []
        for param in declared:
            param = param.strip()
            if param.startswith("'"):
                continue
            if param.startswith("const "):
                raise UnsupportedType(type_name, param)
            # `T: Clone + Debug` -> `T`, `T = i32` -> `T`
            params.append(param.split(":")[0].split("=")[0].strip())
        return tuple(params)

    def _build_fields(
        self,
        type_name: str,
        raw_fields: list[RawField],
        resolver: TypeResolver,
        positional: bool = False,
        prefix: str = "",
    ) -> tuple[Field, ...]:
        fields = []
        for index, raw in enumerate(raw_fields):
            name = None if positional else strip_raw_identifier(raw.name or "")
            site = f"{prefix}{name if name is not None else index}"
            attrs = self.attributes.field_attributes(type_name, site, raw.directives, positional=positional)
            if attrs.config.skip:
                logger.debug("%s.%s: skipped", type_name, site)
                continue

            type_ref = None
            optional = attrs.optional
            if attrs.config.type_override is None:
                type_ref = self._resolve(resolver, type_name, attrs.type_as or raw.type, site)
                self.attributes.check_field_type(type_name, site, attrs, type_ref)
                if attrs.optional and not attrs.nullable:
                    # `t?: T` instead of `t: T | null`
                    type_ref = type_ref.type_args[0]

            config = attrs.config
            if raw.docs:
                config = replace(config, docs=raw.docs)
            fields.append(Field(name=name, type_ref=type_ref, optional=optional, config=config))
        return tuple(fields)

    def _build_variant(self, type_name: str, raw: RawVariant, resolver: TypeResolver) -> Variant | None:
        name = strip_raw_identifier(raw.name)
        config = self.attributes.variant_config(type_name, name, raw.directives)
        if config.skip:
            logger.debug("%s.%s: variant skipped", type_name, name)
            return None
        if raw.docs:
            config = replace(config, docs=raw.docs)

        if raw.fields is not None:
            fields = self._build_fields(type_name, raw.fields, resolver, prefix=f"{name}.")
            return Variant(name=name, payload=PayloadKind.STRUCT, fields=fields, config=config)

        if raw.types is not None:
            types = tuple(self._resolve(resolver, type_name, text, name) for text in raw.types)
            return Variant(name=name, payload=PayloadKind.TUPLE, types=types, config=config)

        return Variant(name=name, payload=PayloadKind.UNIT, config=config)

    def _resolve(self, resolver: TypeResolver, type_name: str, text: str, site: str) -> TypeRef:
        try:
            raw = parse_type(text)
        except TypeSyntaxError as e:
            raise UnsupportedType(type_name, text, site) from e
        return resolver.resolve(raw, site)
