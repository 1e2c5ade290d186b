"""
Declaration feed parser.

Phase 1 of the pipeline: turn the declaration feed (JSON, one object per
module) into raw declaration nodes, and parse declared type expressions
such as `Option<Vec<Box<Node<T>>>>` into `RawType` trees. Nothing is
resolved here; that is the job of the analyzer.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from ...utils import strip_raw_identifier
from .nodes import RawField, RawType, RawTypeDecl, RawTypeKind, RawVariant

_TOKEN_PATTERN = re.compile(
    r"\s*(?:(?P<lifetime>'[A-Za-z_]\w*)"
    r"|(?P<ident>r#[A-Za-z_]\w*|[A-Za-z_]\w*)"
    r"|(?P<number>\d+)"
    r"|(?P<punct>::|->|[<>()\[\];,&*!+=]))"
)


class TypeSyntaxError(ValueError):
    """Raised when a declared type expression cannot be parsed."""


def _join_tokens(tokens: list[tuple[str, str]]) -> str:
    """Re-assemble tokens into readable source text, e.g. `Vec<Option<T>>`."""
    parts = []
    previous = None
    for kind, value in tokens:
        if previous is not None:
            if previous[0] != "punct" and kind != "punct":
                parts.append(" ")
            elif previous[1] in (",", "->", "+") or value in ("->", "+"):
                parts.append(" ")
        parts.append(value)
        previous = (kind, value)
    return "".join(parts)


class TypeExpressionParser:
    """Recursive-descent parser for declared type expressions."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = self._tokenize(text)
        self.pos = 0

    def _tokenize(self, text: str) -> list[tuple[str, str]]:
        tokens = []
        pos = 0
        stripped = text.rstrip()
        while pos < len(stripped):
            match = _TOKEN_PATTERN.match(stripped, pos)
            if not match:
                raise TypeSyntaxError(f"Unexpected character at {pos} in `{text}`")
            kind = match.lastgroup
            tokens.append((kind, match.group(kind)))
            pos = match.end()
        return tokens

    def parse(self) -> RawType:
        if not self.tokens:
            raise TypeSyntaxError("Empty type expression")
        result = self._parse_type()
        if self.pos != len(self.tokens):
            raise TypeSyntaxError(f"Trailing input `{self._peek()}` in `{self.text}`")
        return result

    # Token helpers

    def _peek(self, offset: int = 0) -> str | None:
        index = self.pos + offset
        if index < len(self.tokens):
            return self.tokens[index][1]
        return None

    def _peek_kind(self) -> str | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos][0]
        return None

    def _next(self) -> str:
        if self.pos >= len(self.tokens):
            raise TypeSyntaxError(f"Unexpected end of `{self.text}`")
        value = self.tokens[self.pos][1]
        self.pos += 1
        return value

    def _expect(self, value: str) -> None:
        found = self._next()
        if found != value:
            raise TypeSyntaxError(f"Expected `{value}`, found `{found}` in `{self.text}`")

    def _accept(self, value: str) -> bool:
        if self._peek() == value:
            self.pos += 1
            return True
        return False

    # Grammar

    def _parse_type(self) -> RawType:
        start = self.pos
        token = self._peek()

        if token == "!":
            self._next()
            node = RawType(kind=RawTypeKind.NEVER)
        elif token == "&":
            self._next()
            if self._peek_kind() == "lifetime":
                self._next()
            self._accept("mut")
            node = RawType(kind=RawTypeKind.REFERENCE, args=[self._parse_type()])
        elif token == "*":
            self._next()
            if self._peek() not in ("const", "mut"):
                raise TypeSyntaxError(f"Expected `const` or `mut` after `*` in `{self.text}`")
            self._next()
            node = RawType(kind=RawTypeKind.POINTER, args=[self._parse_type()])
        elif token == "(":
            node = self._parse_tuple()
        elif token == "[":
            node = self._parse_array()
        elif token in ("fn", "unsafe", "extern", "for"):
            node = self._parse_function()
        elif token in ("dyn", "impl"):
            self._next()
            node = self._parse_bounds()
        elif self._peek_kind() == "ident" or token == "::":
            node = self._parse_path()
        else:
            raise TypeSyntaxError(f"Unexpected `{token}` in `{self.text}`")

        node.text = _join_tokens(self.tokens[start : self.pos])
        return node

    def _parse_tuple(self) -> RawType:
        self._expect("(")
        elements = []
        while not self._accept(")"):
            elements.append(self._parse_type())
            if not self._accept(","):
                self._expect(")")
                # `(T)` is a parenthesized type, not a 1-tuple
                if len(elements) == 1:
                    return elements[0]
                break
        return RawType(kind=RawTypeKind.TUPLE, args=elements)

    def _parse_array(self) -> RawType:
        self._expect("[")
        element = self._parse_type()
        if self._accept(";"):
            if self._peek_kind() != "number":
                raise TypeSyntaxError(f"Array length must be a literal in `{self.text}`")
            length = int(self._next())
            self._expect("]")
            return RawType(kind=RawTypeKind.ARRAY, args=[element], length=length)
        self._expect("]")
        return RawType(kind=RawTypeKind.SLICE, args=[element])

    def _parse_function(self) -> RawType:
        if self._accept("for"):
            self._skip_angle_brackets()
        self._accept("unsafe")
        if self._accept("extern") and self._peek_kind() == "ident" and self._peek() != "fn":
            self._next()
        self._expect("fn")
        params = self._parse_tuple_args()
        if self._accept("->"):
            params.append(self._parse_type())
        return RawType(kind=RawTypeKind.FUNCTION, args=params)

    def _parse_tuple_args(self) -> list[RawType]:
        self._expect("(")
        params = []
        while not self._accept(")"):
            params.append(self._parse_type())
            if not self._accept(","):
                self._expect(")")
                break
        return params

    def _parse_bounds(self) -> RawType:
        bounds = []
        while True:
            if self._peek_kind() == "lifetime":
                self._next()
            else:
                bound = self._parse_path()
                if self._peek() == "(":
                    # Fn(A) -> B sugar
                    bound.args = self._parse_tuple_args()
                    if self._accept("->"):
                        bound.args.append(self._parse_type())
                bounds.append(bound)
            if not self._accept("+"):
                break
        segments = bounds[0].segments if bounds else []
        return RawType(kind=RawTypeKind.TRAIT_OBJECT, segments=segments, args=bounds)

    def _parse_path(self) -> RawType:
        self._accept("::")
        segments = []
        args: list[RawType] = []
        while True:
            if self._peek_kind() != "ident":
                raise TypeSyntaxError(f"Expected identifier, found `{self._peek()}` in `{self.text}`")
            segments.append(self._next())
            # `Vec::<T>` and `Vec<T>` are equivalent
            if self._peek() == "::" and self._peek(1) == "<":
                self._next()
            if self._peek() == "<":
                args = self._parse_generic_args()
            if not self._accept("::"):
                break
        return RawType(kind=RawTypeKind.PATH, segments=segments, args=args)

    def _parse_generic_args(self) -> list[RawType]:
        self._expect("<")
        args = []
        while not self._accept(">"):
            if self._peek_kind() == "lifetime":
                self._next()
            elif self._peek_kind() == "ident" and self._peek(1) == "=":
                # Associated type binding, e.g. Iterator<Item = T>
                self._next()
                self._next()
                args.append(self._parse_type())
            else:
                args.append(self._parse_type())
            if not self._accept(","):
                self._expect(">")
                break
        return args

    def _skip_angle_brackets(self) -> None:
        depth = 0
        while True:
            token = self._next()
            if token == "<":
                depth += 1
            elif token == ">":
                depth -= 1
                if depth == 0:
                    return


def parse_type(text: str) -> RawType:
    """Parse a declared type expression into a RawType tree.

    Raises:
        TypeSyntaxError: If the expression is malformed
    """
    return TypeExpressionParser(text).parse()


class FeedParser:
    """Parses a declaration feed into raw declaration nodes."""

    # Declaration kinds the feed may use
    KINDS = {"struct", "tuple", "unit", "enum", "alias", "union"}

    def parse(self, feed: dict[str, Any]) -> list[RawTypeDecl]:
        """
        Parse one feed document.

        Args:
            feed: The feed dictionary, `{"module": ..., "types": [...]}`

        Returns:
            Raw declarations in feed order
        """
        module = feed.get("module", "")
        decls = []
        for entry in feed.get("types", []):
            decls.append(self._parse_decl(entry, module))
        return decls

    def _parse_decl(self, entry: dict[str, Any], module: str) -> RawTypeDecl:
        if "name" not in entry:
            raise ValueError(f"Type declaration without a name in module `{module}`")

        kind = entry.get("kind", "struct")
        if kind not in self.KINDS:
            raise ValueError(f"Unknown declaration kind `{kind}` for `{entry['name']}`")

        return RawTypeDecl(
            name=strip_raw_identifier(entry["name"]),
            module=entry.get("module", module),
            kind=kind,
            generics=list(entry.get("generics", [])),
            fields=[self._parse_field(f) for f in entry.get("fields", [])],
            variants=[self._parse_variant(v) for v in entry.get("variants", [])],
            target=entry.get("target"),
            directives=list(entry.get("directives", [])),
            docs=entry.get("docs"),
        )

    def _parse_field(self, entry: dict[str, Any] | str) -> RawField:
        # Tuple fields may be given as bare type strings
        if isinstance(entry, str):
            return RawField(type=entry)
        return RawField(
            name=entry.get("name"),
            type=entry["type"],
            directives=list(entry.get("directives", [])),
            docs=entry.get("docs"),
        )

    def _parse_variant(self, entry: dict[str, Any]) -> RawVariant:
        fields = entry.get("fields")
        return RawVariant(
            name=entry["name"],
            fields=[self._parse_field(f) for f in fields] if fields is not None else None,
            types=list(entry["types"]) if entry.get("types") is not None else None,
            directives=list(entry.get("directives", [])),
            docs=entry.get("docs"),
        )


def load_feed(path: str | Path) -> list[RawTypeDecl]:
    """Load and parse a declaration feed file."""
    with open(path, encoding="utf-8") as f:
        feed = json.load(f)
    return FeedParser().parse(feed)
