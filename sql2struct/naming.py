"""
Identifier casing helpers.

Column names in the schemas this tool reads may carry a one-letter
``f`` marker prefix (``fuser_id``). The marker never appears in the
generated field names, so to_pascal_case() drops a leading ``F`` after
casing.
"""


def upper_first(name: str) -> str:
    """Uppercase the first character, leave the rest untouched."""
    return name[:1].upper() + name[1:]


def lower_first(name: str) -> str:
    """Lowercase the first character, leave the rest untouched."""
    return name[:1].lower() + name[1:]


def to_pascal_case(name: str) -> str:
    """
    Convert snake_case to PascalCase.

    Only the first character of each underscore-separated segment is
    forced to upper case; the rest of a segment is kept as written.
    A result starting with ``F`` loses that letter and the new first
    letter is capitalized.

    Examples:
        >>> to_pascal_case("user_name")
        'UserName'
        >>> to_pascal_case("fcreated_at")
        'CreatedAt'
    """
    result = "".join(upper_first(part) for part in name.split("_"))
    if result.startswith("F"):
        return upper_first(result[1:])
    return result


def to_snake_case(name: str) -> str:
    """
    Convert PascalCase/camelCase to snake_case.

    An underscore goes before every upper-case letter except the first
    character.
    """
    chars = []
    for i, ch in enumerate(name):
        if ch.isupper():
            if i > 0:
                chars.append("_")
            chars.append(ch.lower())
        else:
            chars.append(ch)
    return "".join(chars)
