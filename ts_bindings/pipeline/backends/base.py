"""
Base class for rendering backends.

Defines the interface that a target-language backend must implement and
the Jinja2 setup used to assemble artifact files.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

import jinja2

from ..analyzer.dependency_graph import DependencyGraph
from ..analyzer.ir_nodes import TypeDefinition, TypeRef
from ..config import GeneratorConfig

GENERATOR_NAME = "ts_bindings"


@dataclass
class RenderContext:
    """State carried while rendering one declaration.

    Attributes:
        owner: Definition whose artifact is being rendered
        current: Definition whose body is being rendered (differs from owner
            while a flattened or inlined type is expanded)
        bindings: Generic parameter -> rendered argument, identity when empty
        references: Named definitions that appear by name in the output
        expanding: Qualified names currently being flattened or inlined
    """

    owner: TypeDefinition
    current: TypeDefinition
    bindings: dict[str, str] = field(default_factory=dict)
    references: dict[str, TypeDefinition] = field(default_factory=dict)
    expanding: list[str] = field(default_factory=list)

    @staticmethod
    def for_definition(definition: TypeDefinition) -> RenderContext:
        return RenderContext(owner=definition, current=definition, expanding=[definition.qualified_name])

    def nested(self, definition: TypeDefinition, bindings: dict[str, str]) -> RenderContext:
        """Context for expanding `definition` in place."""
        return RenderContext(
            owner=self.owner,
            current=definition,
            bindings=bindings,
            references=self.references,
            expanding=self.expanding + [definition.qualified_name],
        )


@dataclass
class RenderedType:
    """A rendered declaration and the named types it refers to."""

    definition: TypeDefinition
    declaration: str
    references: list[TypeDefinition] = field(default_factory=list)


class CodeBackend(ABC):
    """Abstract base class for rendering backends."""

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    # Line comment prefix
    COMMENT_PREFIX: str = "//"

    def __init__(self, graph: DependencyGraph, config: GeneratorConfig | None = None):
        """
        Initialize the backend.

        Args:
            graph: Dependency graph used to resolve named references
            config: Generation configuration
        """
        self.graph = graph
        self.config = config or GeneratorConfig()
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self.artifact_template = self.jinja_env.get_template(f"artifact.{self.FILE_EXTENSION}.jinja2")

    @abstractmethod
    def render_declaration(self, definition: TypeDefinition) -> RenderedType:
        """
        Render one definition as a declaration.

        Args:
            definition: The definition to render

        Returns:
            The rendered declaration and its named references
        """

    @abstractmethod
    def translate_type(self, type_ref: TypeRef, ctx: RenderContext, site: str = "") -> str:
        """
        Translate a type reference to a target-language type expression.

        Args:
            type_ref: The type reference
            ctx: Current render context
            site: Field or variant, for error messages

        Returns:
            Target-language type string
        """

    @abstractmethod
    def render_file(self, rendered: RenderedType, imports: list[tuple[str, str]]) -> str:
        """
        Assemble the full artifact text.

        Args:
            rendered: The rendered declaration
            imports: (type name, module specifier) pairs to import

        Returns:
            File content
        """

    def generation_header(self, source: str) -> str:
        """First line of every artifact, naming the type it was generated from."""
        return (
            f"{self.COMMENT_PREFIX} This file was generated by {GENERATOR_NAME} from `{source}`. "
            "Do not edit this file manually."
        )
