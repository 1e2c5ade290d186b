"""
Pipeline - TypeScript bindings generator.

This module provides a multi-phase architecture for generating TypeScript
declarations from type declarations:

1. Phase 1 (Parser): Parse a declaration feed into raw declarations
2. Phase 2 (Analyzer): Process directives, resolve types and build definitions
3. Phase 3 (Dependency graph): Compute the closure of types to emit
4. Phase 4 (Backend): Render one `export type` declaration per type
5. Phase 5 (Formatter): Optional post-processing (prettier)
6. Phase 6 (Writer): Conflict detection and atomic writes
"""

from __future__ import annotations

from .analyzer import TypeRegistry, default_registry
from .config import FormatterConfig, GeneratorConfig, ModuleLayout, OutputConfig, OutputMode
from .errors import (
    DuplicateNameConflict,
    GenerationError,
    GenericArityMismatch,
    InvalidAttributeTarget,
    UnresolvedTypeReference,
    UnsupportedRecursiveType,
    UnsupportedType,
)
from .generator import ExportReport, PipelineGenerator
from .writer import AtomicWriter

__all__ = [
    "PipelineGenerator",
    "ExportReport",
    "GeneratorConfig",
    "FormatterConfig",
    "OutputConfig",
    "OutputMode",
    "ModuleLayout",
    "TypeRegistry",
    "default_registry",
    "AtomicWriter",
    "GenerationError",
    "UnsupportedType",
    "InvalidAttributeTarget",
    "GenericArityMismatch",
    "UnresolvedTypeReference",
    "UnsupportedRecursiveType",
    "DuplicateNameConflict",
]
