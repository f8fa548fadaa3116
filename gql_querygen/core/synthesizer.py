"""Output synthesis.

Walks a resolved output tree and a Variables shape and produces the flat,
ordered sequence of named type definitions that make up one generated
module. Names are derived from the response-key path, so the same query
always yields the same definitions in the same order.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Union

from .errors import Diagnostic
from .ir import (
    EnumType,
    InputObjectType,
    ListTypeRef,
    NonNullTypeRef,
    ScalarType,
    SchemaModel,
    TypeRef,
    named_type,
)
from .naming import NameAllocator, attribute_name, enum_member_name, to_pascal_case
from .scalars import ScalarRegistry
from .selection import LeafNode, ObjectNode, OutputField, PolymorphicNode
from .variables import VariablesShape

logger = logging.getLogger(__name__)

RESPONSE_DATA = "ResponseData"
VARIABLES = "Variables"
DISCRIMINATOR_ATTRIBUTE = "typename__"

# Names imported by every generated module
MODULE_NAMES = {
    "Annotated", "Any", "Discriminator", "FALLBACK_TAG", "Field", "GraphQLQuery",
    "InputModel", "List", "Literal", "OPERATION_NAME", "OpenEnum", "Optional",
    "QUERY", "ResponseModel", "Tag", "Union", "typename_discriminator",
    # Types pulled in by scalar presets
    "Decimal", "UUID",
}


@dataclass(frozen=True)
class NamedType:
    name: str


@dataclass(frozen=True)
class ListType:
    of: "FieldType"


@dataclass(frozen=True)
class OptionalType:
    of: "FieldType"


@dataclass(frozen=True)
class LiteralType:
    value: str


FieldType = Union[NamedType, ListType, OptionalType, LiteralType]


@dataclass
class StructField:
    name: str
    alias: str
    type: FieldType
    has_default: bool = False
    default: Any = None
    description: str | None = None


@dataclass
class StructDef:
    """A model class. `kind` is 'response' or 'input'."""
    name: str
    kind: str
    fields: list[StructField] = field(default_factory=list)
    graphql_type: str | None = None
    description: str | None = None


@dataclass
class TaggedUnionDef:
    """A union of variant structs selected by the value of '__typename'."""
    name: str
    variants: list[tuple[str, str]]  # (type name, struct name)
    fallback: str
    graphql_type: str | None = None


@dataclass
class EnumDef:
    name: str
    values: list[tuple[str, str]]  # (member name, GraphQL value)
    description: str | None = None


NamedTypeDef = Union[StructDef, TaggedUnionDef, EnumDef]


@dataclass
class GeneratedModule:
    """Everything needed to render the module of one operation."""
    definitions: list[NamedTypeDef] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    operation_name: str = ""
    operation_kind: str = "query"
    binding_name: str = ""
    query: str = ""
    source_name: str = ""
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def get(self, name: str) -> NamedTypeDef | None:
        """Look up a definition by its generated name."""
        for definition in self.definitions:
            if definition.name == name:
                return definition
        return None


def translate(type_ref: TypeRef, inner: FieldType) -> FieldType:
    """Translate a GraphQL type reference around an already mapped named type.

    NonNull(T) is required T, List(T) is a list of T, and a bare named type is
    optional.
    """
    if isinstance(type_ref, NonNullTypeRef):
        translated = translate(type_ref.of, inner)
        return translated.of if isinstance(translated, OptionalType) else translated
    if isinstance(type_ref, ListTypeRef):
        return OptionalType(ListType(translate(type_ref.of, inner)))
    return OptionalType(inner)


class OutputSynthesizer:
    """Produces named type definitions for one operation."""

    def __init__(
        self,
        schema: SchemaModel,
        registry: ScalarRegistry,
        reserved: set[str] | None = None,
    ):
        self.schema = schema
        self.registry = registry
        self._names = NameAllocator(MODULE_NAMES | {RESPONSE_DATA, VARIABLES} | set(reserved or ()))
        self._enums: dict[str, EnumDef] = {}
        self._inputs: dict[str, StructDef] = {}
        self._schema_names: dict[str, str] = {}
        self._response_defs: list[NamedTypeDef] = []
        self._imports: set[str] = set()

    def synthesize(self, root: ObjectNode, variables: VariablesShape) -> GeneratedModule:
        variables_def = StructDef(name=VARIABLES, kind="input")
        for variable in variables.fields:
            inner = self._input_named_type(named_type(variable.type))
            field_type = translate(variable.type, inner)
            has_default = variable.has_default or isinstance(field_type, OptionalType)
            variables_def.fields.append(StructField(
                name=attribute_name(variable.name),
                alias=variable.name,
                type=field_type,
                has_default=has_default,
                default=variable.default if variable.has_default else None,
            ))
        _dedupe_attributes(variables_def.fields)

        response_def = StructDef(name=RESPONSE_DATA, kind="response", graphql_type=root.type_name)
        response_def.fields = self._struct_fields(root.fields, "")

        definitions: list[NamedTypeDef] = []
        definitions.extend(self._enums.values())
        definitions.extend(self._inputs.values())
        definitions.extend(self._response_defs)
        definitions.append(variables_def)
        definitions.append(response_def)
        logger.debug("Synthesized %d definitions", len(definitions))
        return GeneratedModule(
            definitions=definitions,
            imports=sorted(self._imports),
            diagnostics=list(variables.diagnostics),
        )

    # Leaves

    def _leaf_type(self, type_name: str) -> FieldType:
        schema_type = self.schema.get_type(type_name)
        if isinstance(schema_type, EnumType):
            override = self.registry.enum_override(type_name)
            if override is not None:
                return self._mapped(override)
            return NamedType(self._enum(schema_type))
        return self._mapped(self.registry.get(type_name))

    def _mapped(self, handler) -> FieldType:
        if handler.import_statement:
            self._imports.add(handler.import_statement)
        return NamedType(handler.python_type)

    def _enum(self, enum_type: EnumType) -> str:
        if enum_type.name not in self._enums:
            name = self._schema_name(enum_type.name)
            self._enums[enum_type.name] = EnumDef(
                name=name,
                values=[(enum_member_name(v.name), v.name) for v in enum_type.values],
                description=enum_type.description,
            )
        return self._enums[enum_type.name].name

    def _schema_name(self, type_name: str) -> str:
        """Class name for a schema enum or input type, capitalized so it never equals a field attribute."""
        if type_name not in self._schema_names:
            class_name = type_name[:1].upper() + type_name[1:]
            self._schema_names[type_name] = self._names.allocate(class_name)
        return self._schema_names[type_name]

    # Inputs

    def _input_named_type(self, type_name: str) -> FieldType:
        schema_type = self.schema.get_type(type_name)
        if isinstance(schema_type, InputObjectType):
            return NamedType(self._input_object(schema_type))
        if isinstance(schema_type, (ScalarType, EnumType)):
            return self._leaf_type(type_name)
        raise ValueError(f"'{type_name}' is not an input type")

    def _input_object(self, input_type: InputObjectType) -> str:
        if input_type.name in self._inputs:
            return self._inputs[input_type.name].name
        struct = StructDef(
            name=self._schema_name(input_type.name),
            kind="input",
            graphql_type=input_type.name,
            description=input_type.description,
        )
        # Registered before recursing so self-referencing inputs terminate
        self._inputs[input_type.name] = struct
        for value in input_type.fields.values():
            inner = self._input_named_type(named_type(value.type))
            field_type = translate(value.type, inner)
            if value.default_value is not None and not isinstance(field_type, OptionalType):
                # Omitted fields take the schema default on the server
                field_type = OptionalType(field_type)
            struct.fields.append(StructField(
                name=attribute_name(value.name),
                alias=value.name,
                type=field_type,
                has_default=isinstance(field_type, OptionalType),
                description=value.description,
            ))
        _dedupe_attributes(struct.fields)
        return struct.name

    # Responses

    def _struct_fields(self, fields: dict[str, OutputField], path: str) -> list[StructField]:
        result = []
        for key, output_field in fields.items():
            inner = self._output_named_type(output_field, path + to_pascal_case(key))
            field_type = translate(output_field.type, inner)
            result.append(StructField(
                name=attribute_name(key),
                alias=key,
                type=field_type,
                has_default=isinstance(field_type, OptionalType),
            ))
        _dedupe_attributes(result)
        return result

    def _output_named_type(self, output_field: OutputField, path: str) -> FieldType:
        node = output_field.node
        if isinstance(node, LeafNode):
            return self._leaf_type(node.type_name)
        if isinstance(node, ObjectNode):
            return NamedType(self._object_struct(node, path))
        return NamedType(self._tagged_union(node, path))

    def _object_struct(self, node: ObjectNode, path: str) -> str:
        struct = StructDef(name=self._names.allocate(path), kind="response", graphql_type=node.type_name)
        struct.fields = self._struct_fields(node.fields, struct.name)
        self._response_defs.append(struct)
        return struct.name

    def _tagged_union(self, node: PolymorphicNode, path: str) -> str:
        union_name = self._names.allocate(path)
        variants = []
        for type_name, variant in node.variants.items():
            struct_name = self._variant_struct(variant, f"{union_name}On{type_name}", LiteralType(type_name))
            variants.append((type_name, struct_name))
        fallback = self._variant_struct(node.fallback, f"{union_name}Fallback", NamedType("str"))
        self._response_defs.append(TaggedUnionDef(
            name=union_name,
            variants=variants,
            fallback=fallback,
            graphql_type=node.type_name,
        ))
        return union_name

    def _variant_struct(self, node: ObjectNode, name: str, discriminator: FieldType) -> str:
        struct = StructDef(name=self._names.allocate(name), kind="response", graphql_type=node.type_name)
        fields = [f for f in self._struct_fields(node.fields, struct.name) if f.alias != "__typename"]
        struct.fields = [StructField(name=DISCRIMINATOR_ATTRIBUTE, alias="__typename", type=discriminator)]
        struct.fields.extend(fields)
        _dedupe_attributes(struct.fields)
        self._response_defs.append(struct)
        return struct.name


def _dedupe_attributes(fields: list[StructField]):
    """Make attribute names unique within one struct, in field order."""
    seen: set[str] = set()
    for struct_field in fields:
        name, counter = struct_field.name, 2
        while name in seen:
            name = f"{struct_field.name}_{counter}"
            counter += 1
        struct_field.name = name
        seen.add(name)
