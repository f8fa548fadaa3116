"""Operation documents.

Converts the graphql-core AST of a query document into the small set of
dataclasses the resolvers work on: operations, fragments and selections.
Field arguments are kept as printed GraphQL so that selections sharing a
response key can be compared, and each selection remembers which variables
it references.
"""

from dataclasses import dataclass, field
from typing import Any, Union

from graphql import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    GraphQLSyntaxError,
    InlineFragmentNode,
    ListValueNode,
    ObjectValueNode,
    OperationDefinitionNode,
    SelectionSetNode,
    ValueNode,
    VariableNode,
    parse,
    print_ast,
    value_from_ast_untyped,
)

from .errors import QueryParseError
from .ir import TypeRef
from .parser import SchemaParser


@dataclass
class FieldSelection:
    """A field in a selection set, optionally aliased."""
    name: str
    alias: str | None = None
    # (argument name, printed GraphQL value) in source order
    arguments: tuple[tuple[str, str], ...] = ()
    selection_set: list["Selection"] | None = None
    variables: frozenset[str] = frozenset()
    # Offset of the '{' opening this field's selection set in the source text
    selection_set_offset: int | None = None

    @property
    def response_key(self) -> str:
        return self.alias or self.name

    @property
    def argument_signature(self) -> tuple[tuple[str, str], ...]:
        return tuple(sorted(self.arguments))


@dataclass
class FragmentSpread:
    name: str
    variables: frozenset[str] = frozenset()


@dataclass
class InlineFragment:
    type_condition: str | None
    selection_set: list["Selection"] = field(default_factory=list)
    variables: frozenset[str] = frozenset()


Selection = Union[FieldSelection, FragmentSpread, InlineFragment]


@dataclass
class VariableDecl:
    name: str
    type: TypeRef
    has_default: bool = False
    default: Any = None


@dataclass
class Operation:
    """A top-level query, mutation or subscription."""
    name: str | None
    kind: str  # 'query', 'mutation' or 'subscription'
    variable_decls: list[VariableDecl] = field(default_factory=list)
    selection_set: list[Selection] = field(default_factory=list)
    variables: frozenset[str] = frozenset()  # referenced by the operation's own directives


@dataclass
class Fragment:
    name: str
    on_type: str
    selection_set: list[Selection] = field(default_factory=list)


@dataclass
class QueryDocument:
    """A parsed operation document and its source text."""
    source: str
    operations: list[Operation] = field(default_factory=list)
    fragments: list[Fragment] = field(default_factory=list)


def parse_document(source: str, source_name: str = "query") -> QueryDocument:
    """Parse operation text with graphql-core and convert it."""
    try:
        ast = parse(source)
    except GraphQLSyntaxError as e:
        raise QueryParseError(
            f"Invalid GraphQL document: {e.message}",
            context={"file": source_name},
        ) from e
    return convert_document(ast, source)


def convert_document(ast: DocumentNode, source: str) -> QueryDocument:
    document = QueryDocument(source=source)
    for definition in ast.definitions:
        if isinstance(definition, OperationDefinitionNode):
            document.operations.append(Operation(
                name=definition.name.value if definition.name else None,
                kind=definition.operation.value,
                variable_decls=[
                    _variable_decl(v) for v in definition.variable_definitions or []
                ],
                selection_set=_selections(definition.selection_set),
                variables=_directive_variables(definition),
            ))
        elif isinstance(definition, FragmentDefinitionNode):
            document.fragments.append(Fragment(
                name=definition.name.value,
                on_type=definition.type_condition.name.value,
                selection_set=_selections(definition.selection_set),
            ))
    return document


def _variable_decl(node) -> VariableDecl:
    has_default = node.default_value is not None
    return VariableDecl(
        name=node.variable.name.value,
        type=SchemaParser.type_ref(node.type),
        has_default=has_default,
        default=value_from_ast_untyped(node.default_value) if has_default else None,
    )


def _selections(selection_set: SelectionSetNode | None) -> list[Selection]:
    if selection_set is None:
        return []
    result: list[Selection] = []
    for node in selection_set.selections:
        if isinstance(node, FieldNode):
            variables = set(_directive_variables(node))
            for arg in node.arguments or []:
                variables.update(_value_variables(arg.value))
            result.append(FieldSelection(
                name=node.name.value,
                alias=node.alias.value if node.alias else None,
                arguments=tuple(
                    (arg.name.value, print_ast(arg.value)) for arg in node.arguments or []
                ),
                selection_set=_selections(node.selection_set) if node.selection_set else None,
                variables=frozenset(variables),
                selection_set_offset=(
                    node.selection_set.loc.start
                    if node.selection_set is not None and node.selection_set.loc
                    else None
                ),
            ))
        elif isinstance(node, FragmentSpreadNode):
            result.append(FragmentSpread(
                name=node.name.value,
                variables=_directive_variables(node),
            ))
        elif isinstance(node, InlineFragmentNode):
            result.append(InlineFragment(
                type_condition=node.type_condition.name.value if node.type_condition else None,
                selection_set=_selections(node.selection_set),
                variables=_directive_variables(node),
            ))
    return result


def _directive_variables(node) -> frozenset[str]:
    names: set[str] = set()
    for directive in node.directives or []:
        for arg in directive.arguments or []:
            names.update(_value_variables(arg.value))
    return frozenset(names)


def _value_variables(value: ValueNode) -> set[str]:
    if isinstance(value, VariableNode):
        return {value.name.value}
    if isinstance(value, ListValueNode):
        return set().union(*(_value_variables(v) for v in value.values))
    if isinstance(value, ObjectValueNode):
        return set().union(*(_value_variables(f.value) for f in value.fields))
    return set()
