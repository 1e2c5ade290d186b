"""
Analyzer module.

Contains attribute processing, type resolution, model building, the type
registry and the dependency graph.
"""

from __future__ import annotations

from .attributes import AttributeProcessor
from .builder import TypeModelBuilder
from .dependency_graph import DependencyGraph
from .ir_nodes import (
    CaseConvention,
    ContainerKind,
    ExportConfig,
    Field,
    PayloadKind,
    PrimitiveKind,
    RefKind,
    TagKind,
    TagStrategy,
    TypeDefinition,
    TypeKind,
    TypeRef,
    Variant,
)
from .registry import TypeRegistry, default_registry
from .type_resolver import TypeResolver

__all__ = [
    "AttributeProcessor",
    "CaseConvention",
    "ContainerKind",
    "DependencyGraph",
    "ExportConfig",
    "Field",
    "PayloadKind",
    "PrimitiveKind",
    "RefKind",
    "TagKind",
    "TagStrategy",
    "TypeDefinition",
    "TypeKind",
    "TypeModelBuilder",
    "TypeRef",
    "TypeRegistry",
    "TypeResolver",
    "Variant",
    "default_registry",
]
