"""
Errors raised while generating TypeScript bindings.

Every error is detected at generation time and names the offending type,
the site inside it (field or variant) and the rule that was violated.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for all generation failures.

    Attributes:
        type_name: Qualified name of the type being generated
        site: Field, variant or reference site inside that type (may be empty)
        rule: Short description of the violated rule
    """

    def __init__(self, type_name: str, rule: str, site: str = ""):
        self.type_name = type_name
        self.site = site
        self.rule = rule
        super().__init__(self._format())

    def _format(self) -> str:
        location = f"{self.type_name}.{self.site}" if self.site else self.type_name
        return f"{location}: {self.rule}"


class UnsupportedType(GenerationError):
    """A source construct has no TypeScript representation."""

    def __init__(self, type_name: str, construct: str, site: str = ""):
        self.construct = construct
        super().__init__(type_name, f"unsupported type `{construct}`", site)


class InvalidAttributeTarget(GenerationError):
    """A directive was placed on a shape it cannot apply to."""

    def __init__(self, type_name: str, directive: str, rule: str, site: str = ""):
        self.directive = directive
        super().__init__(type_name, f"`{directive}` {rule}", site)


class GenericArityMismatch(GenerationError):
    """A generic reference has the wrong number of type arguments."""

    def __init__(self, type_name: str, target: str, expected: int, found: int, site: str = ""):
        self.target = target
        self.expected = expected
        self.found = found
        super().__init__(
            type_name,
            f"`{target}` expects {expected} type argument(s), found {found}",
            site,
        )


class UnresolvedTypeReference(GenerationError):
    """A named type was referenced but never registered, or matches several registered types."""

    def __init__(self, type_name: str, missing: str, site: str = "", candidates: list[str] | None = None):
        self.missing = missing
        self.candidates = candidates or []
        if self.candidates:
            rule = f"ambiguous reference to `{missing}`, candidates: {', '.join(self.candidates)}"
        else:
            rule = f"reference to unregistered type `{missing}`"
        super().__init__(type_name, rule, site)


class UnsupportedRecursiveType(GenerationError):
    """A recursive type that TypeScript cannot express."""

    def __init__(self, type_name: str, cycle: list[str], site: str = ""):
        self.cycle = cycle
        super().__init__(type_name, f"recursion cannot be expressed: {' -> '.join(cycle)}", site)


class DuplicateNameConflict(GenerationError):
    """Two distinct types collapse onto the same exported name.

    Unlike the other errors this one fails the whole batch.
    """

    def __init__(self, type_name: str, other: str, destination: str):
        self.other = other
        self.destination = destination
        super().__init__(type_name, f"conflicts with `{other}` at {destination}")
