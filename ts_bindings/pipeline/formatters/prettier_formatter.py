"""
Prettier formatter for TypeScript artifacts.
"""

from __future__ import annotations

import logging
import subprocess

from ..config import FormatterConfig
from .base import Formatter

logger = logging.getLogger(__name__)


class PrettierFormatter(Formatter):
    """Formatter running `prettier` over stdin/stdout."""

    def __init__(self, command: str = "prettier"):
        self.command = command
        self._available = None

    def is_available(self) -> bool:
        """Check if prettier is installed."""
        if self._available is None:
            try:
                result = subprocess.run(
                    [self.command, "--version"],
                    capture_output=True,
                    text=True,
                    timeout=10,
                )
                self._available = result.returncode == 0
            except (subprocess.SubprocessError, FileNotFoundError):
                self._available = False
            if not self._available:
                logger.warning("%s is not available, artifacts are written unformatted", self.command)
        return self._available

    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Format TypeScript code using prettier.

        Args:
            code: TypeScript source
            config: Formatter configuration

        Returns:
            Formatted code, or the input unchanged if prettier fails
        """
        if not self.is_available():
            return code

        cmd = [self.command, "--parser", "typescript", "--stdin-filepath", "artifact.ts"]
        if config.line_length:
            cmd.extend(["--print-width", str(config.line_length)])

        try:
            result = subprocess.run(
                cmd,
                input=code,
                capture_output=True,
                text=True,
                timeout=30,
            )
        except subprocess.SubprocessError as e:
            logger.warning("prettier failed: %s", e)
            return code

        if result.returncode != 0:
            logger.warning("prettier exited with %d: %s", result.returncode, result.stderr.strip())
            return code
        return result.stdout
