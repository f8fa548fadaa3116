"""GraphQL schema parser using graphql-core.

Builds a SchemaModel from SDL (text or a parsed DocumentNode) or from an
introspection query result.
"""

import json
import logging
import os
from typing import Any

from graphql import (
    DocumentNode,
    EnumTypeDefinitionNode,
    EnumTypeExtensionNode,
    GraphQLSyntaxError,
    InputObjectTypeDefinitionNode,
    InputObjectTypeExtensionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    ScalarTypeDefinitionNode,
    SchemaDefinitionNode,
    TypeNode,
    UnionTypeDefinitionNode,
    UnionTypeExtensionNode,
    parse,
    print_ast,
)

from .errors import MissingRootType, SchemaParseError, SourceReadError, UnsupportedSchemaFormat
from .ir import (
    BUILTIN_SCALARS,
    EnumType,
    EnumValue,
    Field,
    InputObjectType,
    InputValue,
    InterfaceType,
    ListTypeRef,
    NamedTypeRef,
    NonNullTypeRef,
    ObjectType,
    ScalarType,
    SchemaModel,
    TypeRef,
    UnionType,
)

logger = logging.getLogger(__name__)

SDL_EXTENSIONS = (".graphql", ".graphqls", ".gql")
INTROSPECTION_EXTENSIONS = (".json",)

_EXTENSION_NODES = (
    ObjectTypeExtensionNode,
    InterfaceTypeExtensionNode,
    UnionTypeExtensionNode,
    EnumTypeExtensionNode,
    InputObjectTypeExtensionNode,
)


def _description(node) -> str | None:
    return node.description.value if getattr(node, "description", None) else None


class SchemaParser:
    """Parses GraphQL schemas into a SchemaModel."""

    def __init__(self):
        self.model = SchemaModel()

    @classmethod
    def from_path(cls, schema_path: str) -> SchemaModel:
        """Load a schema file or a directory of SDL files."""
        if os.path.isdir(schema_path):
            files = cls._collect_schema_files(schema_path)
            if not files:
                raise UnsupportedSchemaFormat(
                    f"No GraphQL schema files found in {schema_path}",
                    context={"file": schema_path},
                )
            return cls().build("\n".join(read_text(f) for f in files))

        extension = os.path.splitext(schema_path)[1].lower()
        if extension not in SDL_EXTENSIONS + INTROSPECTION_EXTENSIONS:
            raise UnsupportedSchemaFormat(
                f"Unsupported extension for the GraphQL schema: {extension or '<none>'}",
                context={"file": schema_path},
            )
        text = read_text(schema_path)
        try:
            if extension in INTROSPECTION_EXTENSIONS:
                return cls().build(_decode_json(text))
            return cls().build(text)
        except SchemaParseError as e:
            raise e.with_context(file=schema_path)

    @staticmethod
    def _collect_schema_files(path: str) -> list[str]:
        """Collect all SDL files below path."""
        files = []
        for root, _, filenames in os.walk(path):
            for filename in filenames:
                if filename.endswith(SDL_EXTENSIONS):
                    files.append(os.path.join(root, filename))
        return sorted(files)

    def build(self, source: Any) -> SchemaModel:
        """Build the schema model from SDL text, an SDL AST or introspection JSON."""
        if isinstance(source, bytes):
            source = source.decode("utf-8")
        if isinstance(source, str):
            if source.lstrip().startswith("{"):
                source = _decode_json(source)
            else:
                try:
                    source = parse(source)
                except GraphQLSyntaxError as e:
                    raise SchemaParseError(f"Invalid SDL: {e.message}") from e

        if isinstance(source, DocumentNode):
            self._process_ast(source)
        elif isinstance(source, dict):
            self._process_introspection(source)
        else:
            raise UnsupportedSchemaFormat(
                f"Cannot build a schema from {type(source).__name__}"
            )

        self._register_builtin_scalars()
        self._compute_possible_types()
        if self.model.root_type("query") is None:
            raise MissingRootType(
                f"Schema has no query root type (expected '{self.model.query_type or 'Query'}')"
            )
        logger.debug(
            "Built schema model with %d types (query=%s, mutation=%s, subscription=%s)",
            len(self.model.types),
            self.model.query_type,
            self.model.mutation_type,
            self.model.subscription_type,
        )
        return self.model

    # SDL

    def _process_ast(self, ast: DocumentNode):
        """Process the GraphQL AST and populate the model."""
        roots: dict[str, str] = {}
        extensions = []
        for definition in ast.definitions:
            if isinstance(definition, SchemaDefinitionNode):
                for op_type in definition.operation_types:
                    roots[op_type.operation.value] = op_type.type.name.value
            elif isinstance(definition, _EXTENSION_NODES):
                # Applied after all definitions so order in the file does not matter
                extensions.append(definition)
            elif isinstance(definition, ScalarTypeDefinitionNode):
                self._add(ScalarType(name=definition.name.value, description=_description(definition)))
            elif isinstance(definition, EnumTypeDefinitionNode):
                self._add(EnumType(
                    name=definition.name.value,
                    values=self._enum_values(definition),
                    description=_description(definition),
                ))
            elif isinstance(definition, InterfaceTypeDefinitionNode):
                self._add(InterfaceType(
                    name=definition.name.value,
                    fields=self._process_fields(definition.fields),
                    implements=[i.name.value for i in definition.interfaces or []],
                    description=_description(definition),
                ))
            elif isinstance(definition, ObjectTypeDefinitionNode):
                self._add(ObjectType(
                    name=definition.name.value,
                    fields=self._process_fields(definition.fields),
                    implements=[i.name.value for i in definition.interfaces or []],
                    description=_description(definition),
                ))
            elif isinstance(definition, UnionTypeDefinitionNode):
                self._add(UnionType(
                    name=definition.name.value,
                    possible_types=[t.name.value for t in definition.types or []],
                    description=_description(definition),
                ))
            elif isinstance(definition, InputObjectTypeDefinitionNode):
                self._add(InputObjectType(
                    name=definition.name.value,
                    fields=self._process_input_values(definition.fields),
                    description=_description(definition),
                ))

        for extension in extensions:
            self._merge_extension(extension)

        self.model.query_type = roots.get("query", "Query")
        self.model.mutation_type = roots.get("mutation", "Mutation" if "Mutation" in self.model.types else None)
        self.model.subscription_type = roots.get(
            "subscription", "Subscription" if "Subscription" in self.model.types else None
        )

    def _add(self, schema_type):
        if schema_type.name in self.model.types:
            raise SchemaParseError(
                f"Type '{schema_type.name}' is defined more than once",
                hint="Use 'extend type' to add fields to an existing type.",
                context={"type": schema_type.name},
            )
        self.model.types[schema_type.name] = schema_type

    def _merge_extension(self, node):
        """Merge an 'extend ...' definition into the existing type."""
        name = node.name.value
        existing = self.model.types.get(name)
        if existing is None:
            # Extension without a base definition; treat it as the definition
            if isinstance(node, ObjectTypeExtensionNode):
                existing = ObjectType(name=name)
            elif isinstance(node, InterfaceTypeExtensionNode):
                existing = InterfaceType(name=name)
            elif isinstance(node, UnionTypeExtensionNode):
                existing = UnionType(name=name)
            elif isinstance(node, EnumTypeExtensionNode):
                existing = EnumType(name=name)
            else:
                existing = InputObjectType(name=name)
            self.model.types[name] = existing

        if isinstance(node, (ObjectTypeExtensionNode, InterfaceTypeExtensionNode)):
            for field_name, ir_field in self._process_fields(node.fields).items():
                existing.fields.setdefault(field_name, ir_field)
            for iface in node.interfaces or []:
                if iface.name.value not in existing.implements:
                    existing.implements.append(iface.name.value)
        elif isinstance(node, UnionTypeExtensionNode):
            for member in node.types or []:
                if member.name.value not in existing.possible_types:
                    existing.possible_types.append(member.name.value)
        elif isinstance(node, EnumTypeExtensionNode):
            known = {v.name for v in existing.values}
            existing.values.extend(v for v in self._enum_values(node) if v.name not in known)
        elif isinstance(node, InputObjectTypeExtensionNode):
            for field_name, value in self._process_input_values(node.fields).items():
                existing.fields.setdefault(field_name, value)

    @staticmethod
    def _enum_values(node) -> list[EnumValue]:
        return [
            EnumValue(name=v.name.value, description=_description(v))
            for v in node.values or []
        ]

    def _process_fields(self, field_nodes) -> dict[str, Field]:
        """Process field definitions into IR fields, keeping declaration order."""
        fields = {}
        for node in field_nodes or []:
            name = node.name.value
            if name in fields:
                raise SchemaParseError(f"Field '{name}' is defined more than once", context={"field": name})
            fields[name] = Field(
                name=name,
                type=self.type_ref(node.type),
                arguments=self._process_input_values(node.arguments),
                description=_description(node),
            )
        return fields

    def _process_input_values(self, nodes) -> dict[str, InputValue]:
        values = {}
        for node in nodes or []:
            values[node.name.value] = InputValue(
                name=node.name.value,
                type=self.type_ref(node.type),
                default_value=print_ast(node.default_value) if node.default_value else None,
                description=_description(node),
            )
        return values

    @staticmethod
    def type_ref(type_node: TypeNode) -> TypeRef:
        """Convert a graphql-core type node into a TypeRef, keeping all wrappers."""
        if isinstance(type_node, NonNullTypeNode):
            return NonNullTypeRef(SchemaParser.type_ref(type_node.type))
        if isinstance(type_node, ListTypeNode):
            return ListTypeRef(SchemaParser.type_ref(type_node.type))
        assert isinstance(type_node, NamedTypeNode), f"Expected NamedTypeNode, got {type(type_node)}"
        return NamedTypeRef(type_node.name.value)

    # Introspection

    def _process_introspection(self, document: dict):
        """Process an introspection result ({data: {__schema: ...}} or {__schema: ...})."""
        try:
            payload = document.get("data", document)
            schema = payload["__schema"]
            for type_json in schema["types"]:
                self._process_introspection_type(type_json)
            self.model.query_type = (schema.get("queryType") or {}).get("name")
            self.model.mutation_type = (schema.get("mutationType") or {}).get("name")
            self.model.subscription_type = (schema.get("subscriptionType") or {}).get("name")
        except (KeyError, TypeError, AttributeError) as e:
            raise SchemaParseError(
                f"Malformed introspection document: missing or invalid {e}",
                hint="Expected the JSON result of an introspection query: {\"data\": {\"__schema\": ...}}.",
            ) from e

    def _process_introspection_type(self, type_json: dict):
        name = type_json["name"]
        if name.startswith("__"):
            return
        kind = type_json["kind"]
        description = type_json.get("description")
        if kind == "OBJECT":
            self._add(ObjectType(
                name=name,
                fields=self._introspection_fields(type_json.get("fields")),
                implements=[i["name"] for i in type_json.get("interfaces") or []],
                description=description,
            ))
        elif kind == "INTERFACE":
            self._add(InterfaceType(
                name=name,
                fields=self._introspection_fields(type_json.get("fields")),
                implements=[i["name"] for i in type_json.get("interfaces") or []],
                description=description,
            ))
        elif kind == "UNION":
            self._add(UnionType(
                name=name,
                possible_types=[t["name"] for t in type_json.get("possibleTypes") or []],
                description=description,
            ))
        elif kind == "ENUM":
            self._add(EnumType(
                name=name,
                values=[
                    EnumValue(name=v["name"], description=v.get("description"))
                    for v in type_json.get("enumValues") or []
                ],
                description=description,
            ))
        elif kind == "SCALAR":
            self._add(ScalarType(name=name, description=description))
        elif kind == "INPUT_OBJECT":
            self._add(InputObjectType(
                name=name,
                fields=self._introspection_input_values(type_json.get("inputFields")),
                description=description,
            ))
        else:
            raise SchemaParseError(f"Unknown type kind '{kind}'", context={"type": name})

    def _introspection_fields(self, fields_json) -> dict[str, Field]:
        return {
            f["name"]: Field(
                name=f["name"],
                type=self._introspection_type_ref(f["type"]),
                arguments=self._introspection_input_values(f.get("args")),
                description=f.get("description"),
            )
            for f in fields_json or []
        }

    def _introspection_input_values(self, values_json) -> dict[str, InputValue]:
        return {
            v["name"]: InputValue(
                name=v["name"],
                type=self._introspection_type_ref(v["type"]),
                default_value=v.get("defaultValue"),
                description=v.get("description"),
            )
            for v in values_json or []
        }

    @staticmethod
    def _introspection_type_ref(type_json: dict) -> TypeRef:
        kind = type_json["kind"]
        if kind == "NON_NULL":
            return NonNullTypeRef(SchemaParser._introspection_type_ref(type_json["ofType"]))
        if kind == "LIST":
            return ListTypeRef(SchemaParser._introspection_type_ref(type_json["ofType"]))
        return NamedTypeRef(type_json["name"])

    # Shared

    def _register_builtin_scalars(self):
        for name in BUILTIN_SCALARS:
            self.model.types.setdefault(name, ScalarType(name=name))

    def _compute_possible_types(self):
        """Fill interface possible types by scanning object definitions in order."""
        objects = [t for t in self.model.types.values() if isinstance(t, ObjectType)]
        for schema_type in self.model.types.values():
            if isinstance(schema_type, InterfaceType):
                schema_type.possible_types = [
                    obj.name for obj in objects
                    if schema_type.name in self.model.all_interfaces(obj.name)
                ]
            elif isinstance(schema_type, UnionType):
                schema_type.possible_types = [
                    member for member in schema_type.possible_types
                    if isinstance(self.model.types.get(member), ObjectType)
                ]


def read_text(path: str) -> str:
    """Read a UTF-8 source file, raising SourceReadError on failure."""
    try:
        with open(path, encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise SourceReadError(
            f"Could not read file {path}: {e.strerror or e}",
            context={"file": path},
        ) from e
    except UnicodeDecodeError as e:
        raise SourceReadError(
            f"File {path} is not valid UTF-8 (byte {e.start})",
            hint="Save GraphQL sources with UTF-8 encoding.",
            context={"file": path},
        ) from e


def _decode_json(text: str) -> dict:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaParseError(f"Invalid introspection JSON: {e}") from e
