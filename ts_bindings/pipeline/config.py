"""
Configuration for the bindings generator pipeline.

The export root override is read from the environment once, when the
configuration is built, and then threaded explicitly through the writer.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# Process-wide override of the export root, relative to the base directory
EXPORT_DIR_ENV = "TS_BINDINGS_EXPORT_DIR"

DEFAULT_EXPORT_DIR = "bindings"


class OutputMode(str, Enum):
    """Behavior when an artifact already exists on disk.

    Identical artifacts are always left untouched.
    """

    CHECK = "check"  # Default: replace our own stale artifacts, refuse foreign ones
    FORCE = "force"  # Overwrite whatever is there


class ModuleLayout(str, Enum):
    """How module paths map to directories under the export root."""

    NESTED = "nested"  # api::models::User -> api/models/User.ts
    FLAT = "flat"  # api::models::User -> User.ts


@dataclass
class OutputConfig:
    """Configuration for artifact placement and writing.

    Attributes:
        base_dir: Directory that relative export paths are resolved against
        export_dir: Export root, relative to base_dir unless absolute
        layout: Module path to directory mapping
        mode: How to handle artifacts that already exist
        import_extension: Suffix for import specifiers (".js" for ES modules)
    """

    base_dir: str = "."
    export_dir: str = DEFAULT_EXPORT_DIR
    layout: ModuleLayout = ModuleLayout.NESTED
    mode: OutputMode = OutputMode.CHECK
    import_extension: str = ""

    @property
    def export_root(self) -> Path:
        return Path(self.base_dir) / self.export_dir

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None, **kwargs) -> OutputConfig:
        """Build an OutputConfig, taking the export root from the environment if set."""
        environ = os.environ if environ is None else environ
        config = OutputConfig(**kwargs)
        if environ.get(EXPORT_DIR_ENV):
            config.export_dir = environ[EXPORT_DIR_ENV]
        return config


@dataclass
class FormatterConfig:
    """Configuration for post-processing formatters."""

    # Whether formatting is enabled
    enabled: bool = False

    # Line length for the formatter
    line_length: int = 100

    # Formatter executable
    command: str = "prettier"


@dataclass
class GeneratorConfig:
    """Configuration options for generation."""

    # Add a JSDoc block for documented types and fields
    emit_docs: bool = True

    # Formatter configuration
    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    # Output configuration
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if k == "formatter" and isinstance(v, dict):
                config.formatter = FormatterConfig(**v)
            elif k == "output" and isinstance(v, dict):
                config.output = OutputConfig(
                    base_dir=v.get("base_dir", "."),
                    export_dir=v.get("export_dir", DEFAULT_EXPORT_DIR),
                    layout=ModuleLayout(v.get("layout", ModuleLayout.NESTED)),
                    mode=OutputMode(v.get("mode", OutputMode.CHECK)),
                    import_extension=v.get("import_extension", ""),
                )
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "emit_docs": self.emit_docs,
            "formatter": {
                "enabled": self.formatter.enabled,
                "line_length": self.formatter.line_length,
                "command": self.formatter.command,
            },
            "output": {
                "base_dir": self.output.base_dir,
                "export_dir": self.output.export_dir,
                "layout": self.output.layout.value,
                "mode": self.output.mode.value,
                "import_extension": self.output.import_extension,
            },
        }
