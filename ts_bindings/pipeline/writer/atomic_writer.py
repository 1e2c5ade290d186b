"""
Atomic file writer for generated artifacts.

Ensures that an interrupted run never leaves a partially written
artifact at its final path.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def default_file_mode() -> int:
    """Mode `open()` gives a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class AtomicWriter:
    """Handles atomic file writes.

    Uses a two-phase approach:
    1. Write to a temporary file in the same directory
    2. Atomically replace the target file

    Readers see either the previous content or the new content, never a
    mix of both.
    """

    def write(self, path: Path, content: str) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write

        Raises:
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory so the rename stays on one filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
            # mkstemp creates the file owner-only
            temp_path.chmod(default_file_mode())
            temp_path.replace(path)
        except BaseException:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    pass  # Best effort cleanup
            raise

    def write_if_changed(self, path: Path, content: str) -> bool:
        """Write content unless the file already holds exactly these bytes.

        Returns:
            True if the file was written, False if it was left untouched
        """
        if path.is_file() and path.read_bytes() == content.encode("utf-8"):
            return False
        self.write(path, content)
        return True
