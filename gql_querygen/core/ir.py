"""Intermediate Representation (IR) for GraphQL schemas.

This module defines dataclasses that represent the GraphQL type system
independently of where it was loaded from (SDL or introspection JSON).
The schema model is built once per generation run and only read afterwards.
"""

from dataclasses import dataclass, field
from typing import Any, Union


BUILTIN_SCALARS = ("String", "Int", "Float", "Boolean", "ID")


@dataclass(frozen=True)
class NamedTypeRef:
    """Reference to a named type. Nullable unless wrapped in NonNullTypeRef."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ListTypeRef:
    of: "TypeRef"

    def __str__(self) -> str:
        return f"[{self.of}]"


@dataclass(frozen=True)
class NonNullTypeRef:
    of: "TypeRef"

    def __str__(self) -> str:
        return f"{self.of}!"


TypeRef = Union[NamedTypeRef, ListTypeRef, NonNullTypeRef]


def named_type(type_ref: TypeRef) -> str:
    """Return the innermost type name of a (possibly wrapped) type reference."""
    while not isinstance(type_ref, NamedTypeRef):
        type_ref = type_ref.of
    return type_ref.name


@dataclass
class InputValue:
    """An argument of a field or a field of an input object."""
    name: str
    type: TypeRef
    default_value: str | None = None  # printed GraphQL literal
    description: str | None = None


@dataclass
class Field:
    """Represents a field in an object or interface type."""
    name: str
    type: TypeRef
    arguments: dict[str, InputValue] = field(default_factory=dict)
    description: str | None = None


@dataclass
class EnumValue:
    """Represents a single value in a GraphQL enum."""
    name: str
    description: str | None = None


@dataclass
class ObjectType:
    name: str
    fields: dict[str, Field] = field(default_factory=dict)
    implements: list[str] = field(default_factory=list)
    description: str | None = None


@dataclass
class InterfaceType:
    name: str
    fields: dict[str, Field] = field(default_factory=dict)
    # Populated by the parser from object 'implements' relations
    possible_types: list[str] = field(default_factory=list)
    implements: list[str] = field(default_factory=list)
    description: str | None = None


@dataclass
class UnionType:
    name: str
    possible_types: list[str] = field(default_factory=list)
    description: str | None = None


@dataclass
class EnumType:
    name: str
    values: list[EnumValue] = field(default_factory=list)
    description: str | None = None


@dataclass
class ScalarType:
    name: str
    description: str | None = None


@dataclass
class InputObjectType:
    name: str
    fields: dict[str, InputValue] = field(default_factory=dict)
    description: str | None = None


SchemaType = Union[ObjectType, InterfaceType, UnionType, EnumType, ScalarType, InputObjectType]
CompositeType = Union[ObjectType, InterfaceType, UnionType]

COMPOSITE_TYPES = (ObjectType, InterfaceType, UnionType)
LEAF_TYPES = (ScalarType, EnumType)
INPUT_TYPES = (ScalarType, EnumType, InputObjectType)


@dataclass
class SchemaModel:
    """Complete in-memory GraphQL type system."""
    types: dict[str, SchemaType] = field(default_factory=dict)
    query_type: str | None = None
    mutation_type: str | None = None
    subscription_type: str | None = None

    def get_type(self, name: str) -> SchemaType | None:
        """Look up a type by name."""
        return self.types.get(name)

    def root_type(self, operation_kind: str) -> ObjectType | None:
        """Return the root object type for 'query', 'mutation' or 'subscription'."""
        name = {
            "query": self.query_type,
            "mutation": self.mutation_type,
            "subscription": self.subscription_type,
        }.get(operation_kind)
        root = self.types.get(name) if name else None
        return root if isinstance(root, ObjectType) else None

    def possible_types(self, type_name: str) -> list[str]:
        """Concrete object types a value of the given type can have at runtime."""
        schema_type = self.types.get(type_name)
        if isinstance(schema_type, ObjectType):
            return [schema_type.name]
        if isinstance(schema_type, (InterfaceType, UnionType)):
            return list(schema_type.possible_types)
        return []

    def types_overlap(self, first: str, second: str) -> bool:
        """True if some concrete type is possible for both types."""
        if first == second:
            return True
        return bool(set(self.possible_types(first)) & set(self.possible_types(second)))

    def is_supertype(self, abstract: str, of_type: str) -> bool:
        """True if every value of `of_type` is also a value of `abstract`."""
        if abstract == of_type:
            return True
        if abstract in self.all_interfaces(of_type):
            return True
        outer = self.types.get(abstract)
        return (
            isinstance(outer, UnionType)
            and isinstance(self.types.get(of_type), ObjectType)
            and of_type in outer.possible_types
        )

    def all_interfaces(self, type_name: str) -> set[str]:
        seen: set[str] = set()
        pending = [type_name]
        while pending:
            current = self.types.get(pending.pop())
            for iface in getattr(current, "implements", []):
                if iface not in seen:
                    seen.add(iface)
                    pending.append(iface)
        return seen

    def lookup_field(self, type_name: str, field_name: str) -> Field | None:
        """Find a field on a type or on one of the interfaces it implements."""
        schema_type = self.types.get(type_name)
        if not isinstance(schema_type, (ObjectType, InterfaceType)):
            return None
        if field_name in schema_type.fields:
            return schema_type.fields[field_name]
        for iface in sorted(self.all_interfaces(type_name)):
            iface_type = self.types.get(iface)
            if isinstance(iface_type, InterfaceType) and field_name in iface_type.fields:
                return iface_type.fields[field_name]
        return None

    def get_all_types(self) -> dict[str, Any]:
        """Return all non-builtin types."""
        return {k: v for k, v in self.types.items() if k not in BUILTIN_SCALARS}
