"""
Rendering backends.
"""

from __future__ import annotations

from .base import CodeBackend, RenderContext, RenderedType
from .typescript_backend import TypeScriptBackend

__all__ = [
    "CodeBackend",
    "RenderContext",
    "RenderedType",
    "TypeScriptBackend",
]
