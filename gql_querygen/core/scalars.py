"""Scalar and enum type mapping for GraphQL code generation.

Maps GraphQL scalar names to the Python types used in generated models.
The five built-in scalars have fixed mappings; every other scalar maps to
``Any`` unless the caller passes an explicit override.

Example usage:
    from gql_querygen.core.scalars import ScalarRegistry, DateTimeHandler

    registry = ScalarRegistry(overrides={"DateTime": DateTimeHandler()})
    registry.python_type("DateTime")  # "datetime"

    # Custom handler
    class MoneyHandler:
        python_type = "Decimal"
        import_statement = "from decimal import Decimal"

    registry = ScalarRegistry(overrides={"Money": MoneyHandler()})
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class ScalarHandler(Protocol):
    """Protocol for scalar mappings.

    Attributes:
        python_type: The Python type name (e.g., "datetime", "Decimal")
        import_statement: The import needed for this type, or "" for builtins
    """

    python_type: str
    import_statement: str


@dataclass(frozen=True)
class ScalarMapping:
    """A plain scalar mapping, used for builtins and configured mappings."""
    python_type: str
    import_statement: str = ""


class DateTimeHandler:
    """DateTime scalars as ISO 8601 datetimes."""

    python_type = "datetime"
    import_statement = "from datetime import datetime"


class DateHandler:
    """Date scalars as ISO 8601 dates."""

    python_type = "date"
    import_statement = "from datetime import date"


class UUIDHandler:
    python_type = "UUID"
    import_statement = "from uuid import UUID"


class DecimalHandler:
    python_type = "Decimal"
    import_statement = "from decimal import Decimal"


class JSONHandler:
    """JSON scalars are passed through untouched."""

    python_type = "Any"
    import_statement = "from typing import Any"


BUILTIN_MAPPINGS: dict[str, ScalarHandler] = {
    "String": ScalarMapping("str"),
    "Int": ScalarMapping("int"),
    "Float": ScalarMapping("float"),
    "Boolean": ScalarMapping("bool"),
    "ID": ScalarMapping("str"),
}

DEFAULT_MAPPING = JSONHandler()

# Handlers that can be selected by name from configuration files and the CLI
PRESETS: dict[str, ScalarHandler] = {
    "datetime": DateTimeHandler(),
    "date": DateHandler(),
    "uuid": UUIDHandler(),
    "decimal": DecimalHandler(),
    "json": JSONHandler(),
    "str": ScalarMapping("str"),
    "int": ScalarMapping("int"),
    "float": ScalarMapping("float"),
    "bool": ScalarMapping("bool"),
}


def preset(name: str) -> ScalarHandler:
    """Return the handler registered under a preset name."""
    try:
        return PRESETS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown scalar preset '{name}' (choose from {', '.join(sorted(PRESETS))})"
        ) from None


class ScalarRegistry:
    """Registry mapping scalar and enum names to Python type names.

    The registry holds no global state: everything beyond the built-in
    scalars comes from the overrides passed in.

    Example:
        registry = ScalarRegistry(overrides={"UUID": UUIDHandler()})
        registry.python_type("UUID")  # "UUID"
        registry.python_type("Cursor")  # "Any"
    """

    def __init__(
        self,
        overrides: Mapping[str, ScalarHandler] | None = None,
        enum_overrides: Mapping[str, ScalarHandler] | None = None,
    ):
        self._handlers: dict[str, ScalarHandler] = dict(BUILTIN_MAPPINGS)
        self._handlers.update(overrides or {})
        self._enum_overrides: dict[str, ScalarHandler] = dict(enum_overrides or {})

    def get(self, scalar_name: str) -> ScalarHandler:
        """Get the handler for a scalar type, falling back to the opaque default."""
        return self._handlers.get(scalar_name, DEFAULT_MAPPING)

    def has(self, scalar_name: str) -> bool:
        """Check if a scalar has an explicit (builtin or configured) mapping."""
        return scalar_name in self._handlers

    def python_type(self, scalar_name: str) -> str:
        return self.get(scalar_name).python_type

    def enum_override(self, enum_name: str) -> ScalarHandler | None:
        """Return a configured replacement for a generated enum, if any."""
        return self._enum_overrides.get(enum_name)
