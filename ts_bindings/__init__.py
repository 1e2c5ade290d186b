"""TypeScript bindings generator

Generates TypeScript type declarations from Rust-style type declarations,
one `.ts` file per exported type, honoring serde-style naming and enum
tagging directives.
"""

__version__ = "0.1.0"

from .pipeline import (
    AtomicWriter,
    DuplicateNameConflict,
    ExportReport,
    FormatterConfig,
    GenerationError,
    GeneratorConfig,
    ModuleLayout,
    OutputConfig,
    OutputMode,
    PipelineGenerator,
    TypeRegistry,
    default_registry,
)

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
    "DuplicateNameConflict",
]
