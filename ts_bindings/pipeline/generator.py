"""
Pipeline generator orchestrating all phases.

1. Registry: lazily built TypeDefinitions (feed parsing, attributes, resolution)
2. Dependency graph: emission closure of the requested roots
3. Backend: TypeScript declaration for each definition
4. Formatter: optional post-processing with prettier
5. Writer: conflict checks, then atomic writes
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .analyzer.dependency_graph import DependencyGraph
from .analyzer.ir_nodes import TypeDefinition
from .analyzer.registry import TypeRegistry, default_registry
from .backends.typescript_backend import TypeScriptBackend
from .config import GeneratorConfig
from .errors import DuplicateNameConflict, GenerationError, UnresolvedTypeReference
from .formatters import Formatter, PrettierFormatter
from .writer import Artifact, ExportWriter

logger = logging.getLogger(__name__)


@dataclass
class ExportReport:
    """Outcome of an export batch.

    Attributes:
        exported: Qualified names of the roots that exported successfully
        written: Artifacts created or replaced
        unchanged: Artifacts already up to date on disk
        errors: Requested name -> the error that stopped it
    """

    exported: list[str] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)
    errors: dict[str, GenerationError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class PipelineGenerator:
    """Generates TypeScript bindings for registered types.

    A generator instance is one run: each definition is rendered at most
    once, and every artifact it writes takes part in duplicate detection.
    """

    def __init__(self, registry: TypeRegistry | None = None, config: GeneratorConfig | None = None):
        """
        Initialize the generator.

        Args:
            registry: Registry to export from (the process-wide one by default)
            config: Generation configuration
        """
        self.registry = registry if registry is not None else default_registry
        self.config = config or GeneratorConfig()
        self.graph = DependencyGraph(self.registry)
        self.backend = TypeScriptBackend(self.graph, self.config)
        self.writer = ExportWriter(self.config.output, extension=self.backend.FILE_EXTENSION)
        self.formatter: Formatter | None = None
        if self.config.formatter.enabled:
            self.formatter = PrettierFormatter(self.config.formatter.command)
        self._artifacts: dict[str, Artifact] = {}

    def resolve_name(self, name: str) -> str:
        """Qualified name for a root given as `module::Name` or a unique bare name.

        Raises:
            UnresolvedTypeReference: If no registered type matches, or several do
        """
        matches = self.registry.candidates(name)
        if len(matches) != 1:
            raise UnresolvedTypeReference(name, name, candidates=matches)
        return matches[0]

    def artifact(self, definition: TypeDefinition) -> Artifact:
        """Render the artifact of one definition, memoized per run.

        Raises:
            GenerationError: If rendering fails
            DuplicateNameConflict: If two referenced types share a TypeScript name
        """
        qualified = definition.qualified_name
        if qualified in self._artifacts:
            return self._artifacts[qualified]

        rendered = self.backend.render_declaration(definition)
        path = self.writer.destination(definition)

        names = {definition.ts_name: qualified}
        imports = []
        for ref in sorted(rendered.references, key=lambda d: (d.ts_name, d.qualified_name)):
            other = names.setdefault(ref.ts_name, ref.qualified_name)
            if other != ref.qualified_name:
                raise DuplicateNameConflict(ref.qualified_name, other, f"{path} (imported as `{ref.ts_name}`)")
            imports.append((ref.ts_name, self.writer.import_specifier(path, self.writer.destination(ref))))

        content = self.backend.render_file(rendered, imports)
        if self.formatter is not None:
            content = self.formatter.format(content, self.config.formatter)

        artifact = Artifact(source=qualified, path=path, content=content)
        self._artifacts[qualified] = artifact
        return artifact

    def render(self, name: str) -> list[Artifact]:
        """Artifacts for a root and every type it depends on, root first."""
        root = self.registry.get(self.resolve_name(name))
        return [self.artifact(d) for d in self.graph.closure([root])]

    def export_to_string(self, name: str) -> str:
        """Artifact text of a single type, without touching the disk."""
        definition = self.registry.get(self.resolve_name(name))
        self.graph.closure([definition])
        return self.artifact(definition).content

    def export(self, names: list[str]) -> ExportReport:
        """
        Export roots and their dependencies.

        A failing root is recorded in the report and the other roots still
        export. Conflicts abort the whole batch before anything is written.

        Raises:
            DuplicateNameConflict: If two types claim the same artifact or import name
        """
        report = ExportReport()
        artifacts: list[Artifact] = []
        for name in names:
            try:
                root_artifacts = self.render(name)
            except DuplicateNameConflict:
                raise
            except GenerationError as e:
                logger.error("%s", e)
                report.errors[name] = e
                continue
            artifacts.extend(root_artifacts)
            report.exported.append(root_artifacts[0].source)

        result = self.writer.write(artifacts)
        report.written.extend(result.written)
        report.unchanged.extend(result.unchanged)
        logger.info(
            "Exported %d type(s): %d written, %d unchanged, %d failed",
            len(report.exported),
            len(result.written),
            len(result.unchanged),
            len(report.errors),
        )
        return report

    def export_all(self) -> ExportReport:
        """Export every registered type marked with the `export` directive."""
        roots = self.registry.exported_names()
        if not roots:
            logger.warning("No registered type is marked for export")
        return self.export(roots)
