"""
Writer module.

Places generated artifacts on disk atomically and detects name conflicts.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .export_writer import Artifact, ExportWriter, WriteResult, module_segments, read_source_identity

__all__ = [
    "Artifact",
    "AtomicWriter",
    "ExportWriter",
    "WriteResult",
    "module_segments",
    "read_source_identity",
]
