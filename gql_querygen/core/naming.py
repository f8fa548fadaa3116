"""Name conversion helpers for generated Python code."""

import keyword
import re


def to_snake_case(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def to_pascal_case(name: str) -> str:
    """Convert snake_case or camelCase to PascalCase."""
    snake = to_snake_case(name)
    return "".join(word[:1].upper() + word[1:] for word in snake.split("_"))


# BaseModel attributes a generated field must not shadow
_RESERVED_ATTRIBUTES = {
    "construct", "copy", "dict", "fields", "from_orm", "json", "parse_file",
    "parse_obj", "parse_raw", "schema", "schema_json", "update_forward_refs",
    "validate",
    # Type names used in generated annotations
    "bool", "date", "datetime", "float", "int", "str",
}


def attribute_name(response_key: str) -> str:
    """Python attribute name for a GraphQL response key or variable name.

    Leading underscores move to the end so pydantic does not treat the field
    as private: ``__typename`` becomes ``typename__``.
    """
    stripped = response_key.lstrip("_")
    name = to_snake_case(stripped) + "_" * (len(response_key) - len(stripped))
    if not stripped:
        name = "field_"
    if keyword.iskeyword(name) or name in _RESERVED_ATTRIBUTES or name.startswith("model_"):
        name = f"{name}_"
    return name


# Names Enum refuses as members
_RESERVED_MEMBERS = {"mro"}


def enum_member_name(value: str) -> str:
    """Python member name for a GraphQL enum value."""
    if keyword.iskeyword(value) or value in _RESERVED_MEMBERS or value.startswith("_"):
        return f"{value.lstrip('_')}_" if value.lstrip("_") else "value_"
    return value


class NameAllocator:
    """Hands out module-level names, resolving clashes with numeric suffixes.

    Suffixes depend only on allocation order, so identical input always
    produces identical names.
    """

    def __init__(self, reserved: set[str] | None = None):
        self._taken: set[str] = set(reserved or ())

    def allocate(self, name: str) -> str:
        candidate, counter = name, 2
        while candidate in self._taken:
            candidate = f"{name}{counter}"
            counter += 1
        self._taken.add(candidate)
        return candidate

    def __contains__(self, name: str) -> bool:
        return name in self._taken
