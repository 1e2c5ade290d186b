"""
Export writer.

Places artifacts on disk, one file per type. Every conflict of a batch is
detected before the first write, so a conflicting run leaves the export
root exactly as it found it.
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from ..analyzer.ir_nodes import TypeDefinition
from ..backends.base import GENERATOR_NAME
from ..config import ModuleLayout, OutputConfig, OutputMode
from ..errors import DuplicateNameConflict
from .atomic_writer import AtomicWriter

logger = logging.getLogger(__name__)

_SOURCE_PATTERN = re.compile(rf"generated by {GENERATOR_NAME} from `([^`]+)`")

_MODULE_SEPARATOR = re.compile(r"::|\.")


def read_source_identity(content: str) -> str | None:
    """Qualified name recorded in an artifact's generation header, if any."""
    first_line = content.split("\n", 1)[0]
    match = _SOURCE_PATTERN.search(first_line)
    return match.group(1) if match else None


def module_segments(module: str) -> list[str]:
    """Directory names for a module path ("crate::api::models" -> ["api", "models"])."""
    segments = [s for s in _MODULE_SEPARATOR.split(module) if s]
    if segments and segments[0] == "crate":
        segments = segments[1:]
    return segments


@dataclass
class Artifact:
    """One file to write."""

    source: str
    path: Path
    content: str

    @property
    def sha256(self) -> str:
        return hashlib.sha256(self.content.encode("utf-8")).hexdigest()


@dataclass
class WriteResult:
    written: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)


class ExportWriter:
    """Computes artifact destinations and writes batches of artifacts.

    A writer instance corresponds to one run: artifacts planned in earlier
    batches of the same instance still take part in duplicate detection.
    """

    def __init__(self, output: OutputConfig, extension: str = "ts", atomic_writer: AtomicWriter | None = None):
        self.output = output
        self.extension = extension
        self.atomic_writer = atomic_writer or AtomicWriter()
        self._planned: dict[Path, Artifact] = {}

    def destination(self, definition: TypeDefinition) -> Path:
        """Path of the artifact for a definition."""
        file_name = f"{definition.ts_name}.{self.extension}"
        export_to = definition.config.export_to
        if export_to:
            base = Path(self.output.base_dir)
            if export_to.endswith("/"):
                return base / export_to / file_name
            return base / export_to

        root = self.output.export_root
        if self.output.layout == ModuleLayout.FLAT:
            return root / file_name
        return root.joinpath(*module_segments(definition.module)) / file_name

    def import_specifier(self, from_path: Path, to_path: Path) -> str:
        """Relative module specifier for importing `to_path` from the artifact at `from_path`."""
        target = to_path.with_suffix("") if to_path.suffix == f".{self.extension}" else to_path
        relative = Path(os.path.relpath(target, from_path.parent)).as_posix()
        if not relative.startswith("."):
            relative = f"./{relative}"
        return f"{relative}{self.output.import_extension}"

    def plan(self, artifacts: list[Artifact]) -> list[Artifact]:
        """
        Deduplicate a batch and check it for conflicts, without writing.

        Returns:
            The artifacts to write, one per path, in first-seen order

        Raises:
            DuplicateNameConflict: For a path claimed by two different contents,
                or an existing file that belongs to another type
        """
        batch: dict[Path, Artifact] = {}
        for artifact in artifacts:
            key = self._key(artifact.path)
            previous = batch.get(key) or self._planned.get(key)
            if previous is None:
                batch[key] = artifact
                continue
            if previous.sha256 != artifact.sha256:
                raise DuplicateNameConflict(artifact.source, previous.source, str(artifact.path))
            logger.debug("Artifact %s already produced in this run", artifact.path)

        for artifact in batch.values():
            self._check_existing(artifact)

        self._planned.update(batch)
        return list(batch.values())

    def write(self, artifacts: list[Artifact]) -> WriteResult:
        """Plan a batch, then write every artifact whose bytes differ from disk."""
        result = WriteResult()
        for artifact in self.plan(artifacts):
            if self.atomic_writer.write_if_changed(artifact.path, artifact.content):
                logger.info("Wrote %s", artifact.path)
                result.written.append(artifact.path)
            else:
                logger.debug("Unchanged %s", artifact.path)
                result.unchanged.append(artifact.path)
        return result

    def _check_existing(self, artifact: Artifact) -> None:
        if not artifact.path.is_file():
            return
        existing = artifact.path.read_text(encoding="utf-8", errors="replace")
        if existing == artifact.content:
            return
        if self.output.mode == OutputMode.FORCE:
            logger.warning("Overwriting %s", artifact.path)
            return
        owner = read_source_identity(existing)
        if owner == artifact.source:
            return
        raise DuplicateNameConflict(artifact.source, owner or "a file not generated by ts_bindings", str(artifact.path))

    @staticmethod
    def _key(path: Path) -> Path:
        return Path(os.path.normpath(os.path.abspath(path)))
