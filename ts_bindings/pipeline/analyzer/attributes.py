"""
Attribute processor.

Turns the flat directive lists attached to types, fields and variants
(`"rename=id"`, `"skip"`, `"serde:tag=type"`) into normalized ExportConfig
values and enforces where each directive may be placed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import InvalidAttributeTarget
from .ir_nodes import CaseConvention, ExportConfig, RefKind, TagStrategy, TypeKind, TypeRef

logger = logging.getLogger(__name__)

# Directive keys accepted at each placement
TYPE_KEYS = {"rename", "rename_all", "rename_all_fields", "tag", "content", "untagged", "export", "export_to"}
FIELD_KEYS = {"rename", "skip", "flatten", "inline", "optional", "type", "as"}
VARIANT_KEYS = {"rename", "rename_all", "skip"}
ENUM_ONLY_KEYS = {"tag", "content", "untagged", "rename_all_fields"}

# serde directives with no effect on the generated declaration
SERDE_NO_EFFECT = {"default"}

NAMESPACES = ("ts", "serde")


@dataclass(frozen=True)
class Directive:
    """A single parsed directive."""

    key: str
    value: str | None = None
    namespace: str = "ts"

    def __str__(self) -> str:
        text = self.key if self.value is None else f"{self.key}={self.value}"
        return text if self.namespace == "ts" else f"{self.namespace}:{text}"


def parse_directive(text: str) -> Directive:
    """Parse `key`, `key=value` or `namespace:key=value`."""
    namespace = "ts"
    head, sep, value = text.partition("=")
    head = head.strip()
    if ":" in head:
        prefix, _, head = head.partition(":")
        if prefix in NAMESPACES:
            namespace = prefix
    if not sep:
        return Directive(key=head, namespace=namespace)
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return Directive(key=head, value=value, namespace=namespace)


@dataclass(frozen=True)
class FieldAttributes:
    """Processed directives of one field."""

    config: ExportConfig
    optional: bool = False  # `optional` directive present
    nullable: bool = False  # `optional=nullable`
    type_as: str | None = None  # `as=Type`, declared type used instead of the field's own


class AttributeProcessor:
    """Parses directive lists into ExportConfig, applying placement rules."""

    def type_config(self, type_name: str, kind: TypeKind, directives: list[str]) -> ExportConfig:
        """
        Process the directives attached to a type.

        Args:
            type_name: Qualified name, for error messages
            kind: Kind of the type the directives are attached to
            directives: Raw directive strings in declaration order

        Returns:
            The type's ExportConfig

        Raises:
            InvalidAttributeTarget: If a directive does not apply to this kind
        """
        values = self._collect(type_name, "", directives, TYPE_KEYS, "types")

        for key in ENUM_ONLY_KEYS & values.keys():
            if kind != TypeKind.ENUM:
                raise InvalidAttributeTarget(type_name, key, f"is only valid on enums, not on {kind.value} types")

        if "rename_all" in values and kind in (TypeKind.TUPLE, TypeKind.ALIAS):
            raise InvalidAttributeTarget(type_name, "rename_all", f"is not applicable to {kind.value} types")

        tag_strategy = None
        if kind == TypeKind.ENUM:
            tag_strategy = self._tag_strategy(type_name, values)

        return ExportConfig(
            rename=values.get("rename"),
            rename_all=self._convention(type_name, "", "rename_all", values),
            rename_all_fields=self._convention(type_name, "", "rename_all_fields", values),
            tag_strategy=tag_strategy,
            export="export" in values or "export_to" in values,
            export_to=values.get("export_to"),
        )

    def field_attributes(
        self,
        type_name: str,
        site: str,
        directives: list[str],
        positional: bool = False,
    ) -> FieldAttributes:
        """
        Process the directives attached to a field.

        `skip` dominates every other directive on the same field; the
        combination is accepted but logged as a warning.

        Args:
            type_name: Qualified name of the enclosing type
            site: Field (or `Variant.field`) name, for error messages
            directives: Raw directive strings
            positional: Whether this is a tuple field

        Returns:
            FieldAttributes for the field
        """
        values = self._collect(type_name, site, directives, FIELD_KEYS, "fields")

        if "skip" in values:
            others = sorted(k for k in values if k != "skip")
            if others:
                logger.warning(
                    "%s.%s: `skip` combined with %s; the field is skipped and the other directives are ignored",
                    type_name,
                    site,
                    ", ".join(f"`{k}`" for k in others),
                )
            return FieldAttributes(config=ExportConfig(skip=True))

        if positional:
            for key in ("rename", "flatten", "optional"):
                if key in values:
                    raise InvalidAttributeTarget(type_name, key, "is not applicable to tuple fields", site)

        if "as" in values and "type" in values:
            raise InvalidAttributeTarget(type_name, "type", "is not compatible with `as`", site)
        if "as" in values and not values["as"]:
            raise InvalidAttributeTarget(type_name, "as", "requires a type", site)

        if "flatten" in values and "type" in values:
            raise InvalidAttributeTarget(type_name, "flatten", "is not compatible with `type`", site)

        optional = "optional" in values
        nullable = False
        if optional and values["optional"] is not None:
            if values["optional"] != "nullable":
                raise InvalidAttributeTarget(
                    type_name, "optional", f"accepts only `nullable` as a value, found `{values['optional']}`", site
                )
            nullable = True

        config = ExportConfig(
            rename=values.get("rename"),
            flatten="flatten" in values,
            inline="inline" in values,
            type_override=values.get("type"),
        )
        return FieldAttributes(config=config, optional=optional, nullable=nullable, type_as=values.get("as"))

    def variant_config(self, type_name: str, site: str, directives: list[str]) -> ExportConfig:
        """Process the directives attached to an enum variant."""
        values = self._collect(type_name, site, directives, VARIANT_KEYS, "variants")
        if "skip" in values:
            if len(values) > 1:
                logger.warning("%s.%s: `skip` takes precedence over the other variant directives", type_name, site)
            return ExportConfig(skip=True)
        return ExportConfig(
            rename=values.get("rename"),
            rename_all=self._convention(type_name, site, "rename_all", values),
        )

    def check_field_type(self, type_name: str, site: str, attributes: FieldAttributes, type_ref: TypeRef) -> None:
        """
        Validate directives that depend on the field's resolved type.

        Flattening a named type is checked again at render time, when the
        target definition is known to be a struct.

        Raises:
            InvalidAttributeTarget: If `flatten` or `optional` is misplaced
        """
        if attributes.config.flatten and not (type_ref.kind == RefKind.NAMED or type_ref.is_map):
            raise InvalidAttributeTarget(type_name, "flatten", "is only valid on struct or map fields", site)
        if attributes.optional and not type_ref.is_optional:
            raise InvalidAttributeTarget(type_name, "optional", "is only valid on Option fields", site)

    def _collect(
        self,
        type_name: str,
        site: str,
        directives: list[str],
        allowed: set[str],
        placement: str,
    ) -> dict[str, str | None]:
        values: dict[str, str | None] = {}
        for text in directives:
            directive = parse_directive(text)
            if directive.key in allowed:
                values[directive.key] = directive.value
            elif directive.namespace == "serde":
                if directive.key not in SERDE_NO_EFFECT:
                    logger.warning(
                        "%s: unsupported serde directive `%s` on %s is ignored",
                        f"{type_name}.{site}" if site else type_name,
                        directive,
                        placement,
                    )
            elif directive.key in TYPE_KEYS | FIELD_KEYS | VARIANT_KEYS:
                raise InvalidAttributeTarget(type_name, directive.key, f"is not applicable to {placement}", site)
            else:
                raise InvalidAttributeTarget(type_name, directive.key, "is not a recognised directive", site)
        return values

    def _convention(
        self,
        type_name: str,
        site: str,
        key: str,
        values: dict[str, str | None],
    ) -> CaseConvention | None:
        value = values.get(key)
        if value is None:
            return None
        try:
            return CaseConvention(value)
        except ValueError:
            raise InvalidAttributeTarget(type_name, key, f"has unknown case convention `{value}`", site) from None

    def _tag_strategy(self, type_name: str, values: dict[str, str | None]) -> TagStrategy:
        tag = values.get("tag")
        content = values.get("content")
        if "untagged" in values:
            if "tag" in values or "content" in values:
                raise InvalidAttributeTarget(type_name, "untagged", "cannot be combined with `tag` or `content`")
            return TagStrategy.untagged()
        if "content" in values and "tag" not in values:
            raise InvalidAttributeTarget(type_name, "content", "requires `tag`")
        if "tag" in values and not tag:
            raise InvalidAttributeTarget(type_name, "tag", "requires a field name")
        if "content" in values and not content:
            raise InvalidAttributeTarget(type_name, "content", "requires a field name")
        if tag and content:
            return TagStrategy.adjacent(tag, content)
        if tag:
            return TagStrategy.internal(tag)
        return TagStrategy.external()
