"""
Schema AST module.

Raw declarations as they appear in a declaration feed, before any
attribute or type resolution.
"""

from __future__ import annotations

from .nodes import RawField, RawType, RawTypeDecl, RawTypeKind, RawVariant
from .parser import FeedParser, TypeSyntaxError, load_feed, parse_type

__all__ = [
    "FeedParser",
    "RawField",
    "RawType",
    "RawTypeDecl",
    "RawTypeKind",
    "RawVariant",
    "TypeSyntaxError",
    "load_feed",
    "parse_type",
]
