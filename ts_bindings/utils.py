"""
Utility functions for the TypeScript bindings generator.
"""

import re

# Names TypeScript accepts unquoted as object member keys
_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def snake_to_pascal_case(text: str) -> str:
    """Convert snake_case to PascalCase the way serde does.

    Underscores are dropped and the character after each one is upper-cased;
    every other character is kept as is.

    Examples:
        "first_name" -> "FirstName"
        "actionTemplate" -> "ActionTemplate"
        "line_2" -> "Line2"

    Args:
        text: The text to convert

    Returns:
        PascalCase string
    """
    result = []
    capitalize = True
    for char in text:
        if char == "_":
            capitalize = True
        elif capitalize:
            result.append(char.upper())
            capitalize = False
        else:
            result.append(char)
    return "".join(result)


def snake_to_camel_case(text: str) -> str:
    """Convert text to camelCase ("first_name" -> "firstName")."""
    pascal = snake_to_pascal_case(text)
    return pascal[:1].lower() + pascal[1:]


def pascal_to_snake_case(text: str) -> str:
    """Convert PascalCase to snake_case the way serde does.

    Every uppercase letter but the first starts a new word, so acronyms are
    split letter by letter: "HTTPServer" -> "h_t_t_p_server".
    """
    result = []
    for i, char in enumerate(text):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)


def convert_case(text: str, convention: str) -> str:
    """Apply a rename_all convention to a field or variant name.

    Fields are expected in snake_case and variants in PascalCase; for those
    inputs the result is the name serde writes. `lowercase` and `UPPERCASE`
    only change the letter case, so "first_name" stays "first_name" and
    "FirstName" becomes "firstname".

    Args:
        text: Field name (usually snake_case) or variant name (usually PascalCase)
        convention: One of the CaseConvention values

    Returns:
        The renamed identifier
    """
    if convention == "lowercase":
        return text.lower()
    if convention == "UPPERCASE":
        return text.upper()
    if convention == "PascalCase":
        return snake_to_pascal_case(text)
    if convention == "camelCase":
        return snake_to_camel_case(text)

    snake = pascal_to_snake_case(text)
    if convention == "snake_case":
        return snake
    if convention == "SCREAMING_SNAKE_CASE":
        return snake.upper()
    if convention == "kebab-case":
        return snake.replace("_", "-")
    if convention == "SCREAMING-KEBAB-CASE":
        return snake.upper().replace("_", "-")
    raise ValueError(f"Unknown case convention: {convention}")


def to_ts_field_name(name: str) -> str:
    """Quote a member name unless it is a valid TypeScript identifier."""
    if _IDENTIFIER_PATTERN.match(name):
        return name
    return f'"{name}"'


def to_ts_string_literal(value: str) -> str:
    """Render a string literal type, e.g. `"Circle"`."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def strip_raw_identifier(name: str) -> str:
    """Drop the `r#` prefix of a raw identifier (`r#type` -> `type`)."""
    if name.startswith("r#"):
        return name[2:]
    return name
