"""Selection set resolution.

Matches the selection sets of an operation against the schema model and
produces an output tree describing the exact shape of every response:
leaves for scalars and enums, objects for concrete types, and polymorphic
nodes for interfaces and unions.

Interfaces and unions are resolved per runtime type. For every concrete
type the resolver collects the fields that would be returned for it; a
concrete type gets its own variant only if some typed fragment applies to
it. The fallback variant is what an unknown type (one added to the schema
after generation) would return: the fields selected on the abstract type
itself.
"""

import logging
from dataclasses import dataclass, field
from typing import Union

from .document import FieldSelection, FragmentSpread, Operation, Selection
from .errors import (
    AliasConflict,
    CodegenError,
    InvalidFragmentTarget,
    MissingRootType,
    SelectionError,
    SubselectionError,
    UnknownField,
)
from .fragments import FragmentLibrary
from .ir import (
    COMPOSITE_TYPES,
    LEAF_TYPES,
    ListTypeRef,
    NamedTypeRef,
    NonNullTypeRef,
    ObjectType,
    SchemaModel,
    TypeRef,
    UnionType,
    named_type,
)

logger = logging.getLogger(__name__)

TYPENAME = "__typename"


@dataclass
class LeafNode:
    """A scalar or enum value."""
    type_name: str


@dataclass
class OutputField:
    response_key: str
    field_name: str
    type: TypeRef
    node: "OutputNode"


@dataclass
class ObjectNode:
    type_name: str
    # Keyed by response key, in first-occurrence order
    fields: dict[str, OutputField] = field(default_factory=dict)


@dataclass
class PolymorphicNode:
    type_name: str
    common_fields: dict[str, OutputField]
    variants: dict[str, ObjectNode]
    fallback: ObjectNode


OutputNode = Union[LeafNode, ObjectNode, PolymorphicNode]


@dataclass
class Resolution:
    """Resolved output tree of one operation."""
    root: ObjectNode
    # Source offsets of selection sets that need '__typename' injected
    typename_offsets: list[int] = field(default_factory=list)


@dataclass
class _Entry:
    selection: FieldSelection
    parent: str
    visiting: frozenset[str]


# A selection set together with the fragments being expanded where it appears
_Group = tuple[list[Selection], frozenset[str]]


class SelectionResolver:
    """Resolves selection sets against a schema model."""

    def __init__(self, schema: SchemaModel, fragments: FragmentLibrary):
        self.schema = schema
        self.fragments = fragments
        self._typename_offsets: set[int] = set()

    def resolve_operation(self, operation: Operation) -> Resolution:
        root = self.schema.root_type(operation.kind)
        if root is None:
            raise MissingRootType(
                f"Schema defines no {operation.kind} root type",
                context={"operation": operation.name or "<anonymous>"},
            )
        self._typename_offsets = set()
        node = self._resolve_groups(root.name, [(operation.selection_set, frozenset())])
        return Resolution(root=node, typename_offsets=sorted(self._typename_offsets))

    def resolve(self, type_name: str, selections: list[Selection]) -> OutputNode:
        """Resolve one selection set against the named composite type."""
        return self._resolve_groups(type_name, [(selections, frozenset())])

    def _resolve_groups(self, type_name: str, groups: list[_Group]) -> OutputNode:
        schema_type = self.schema.get_type(type_name)
        if isinstance(schema_type, ObjectType):
            entries: dict[str, list[_Entry]] = {}
            for selections, visiting in groups:
                self._collect(type_name, selections, visiting, type_name, type_name, entries)
            return self._build_object(type_name, entries)
        if isinstance(schema_type, COMPOSITE_TYPES):
            return self._resolve_abstract(type_name, groups)
        raise SubselectionError(
            f"Type '{type_name}' has no fields to select",
            context={"type": type_name},
        )

    def _resolve_abstract(self, type_name: str, groups: list[_Group]) -> PolymorphicNode:
        fallback_entries: dict[str, list[_Entry]] = {}
        for selections, visiting in groups:
            self._collect(type_name, selections, visiting, None, type_name, fallback_entries)
        fallback = self._build_object(type_name, fallback_entries)

        variants: dict[str, ObjectNode] = {}
        for concrete in self.schema.possible_types(type_name):
            entries: dict[str, list[_Entry]] = {}
            typed = False
            for selections, visiting in groups:
                typed |= self._collect(type_name, selections, visiting, concrete, type_name, entries)
            if typed:
                variants[concrete] = self._build_object(concrete, entries)

        self._check_same_shape(type_name, list(variants.values()) + [fallback])
        logger.debug(
            "Resolved %s as polymorphic with variants %s",
            type_name,
            ", ".join(variants) or "<none>",
        )
        return PolymorphicNode(
            type_name=type_name,
            common_fields=fallback.fields,
            variants=variants,
            fallback=fallback,
        )

    def _collect(
        self,
        parent: str,
        selections: list[Selection],
        visiting: frozenset[str],
        runtime: str | None,
        context: str,
        out: dict[str, list[_Entry]],
    ) -> bool:
        """Gather the fields returned when the runtime type is `runtime`.

        `runtime` is None when collecting for an unknown concrete type of the
        abstract `context`. Returns True if a fragment narrower than `context`
        applied.
        """
        typed = False
        for selection in selections:
            if isinstance(selection, FieldSelection):
                self._check_field(parent, selection)
                out.setdefault(selection.response_key, []).append(
                    _Entry(selection, parent, visiting)
                )
                continue

            if isinstance(selection, FragmentSpread):
                inner = self.fragments.inline(selection.name, parent, visiting)
                condition = self.fragments.get(selection.name).on_type
                inner_visiting = visiting | {selection.name}
            else:
                condition = selection.type_condition or parent
                self._check_inline_target(parent, condition)
                inner = selection.selection_set
                inner_visiting = visiting

            if not self._applies(condition, runtime, context):
                continue
            if not self.schema.is_supertype(condition, context):
                typed = True
            typed |= self._collect(condition, inner, inner_visiting, runtime, context, out)
        return typed

    def _applies(self, condition: str, runtime: str | None, context: str) -> bool:
        if runtime is None:
            return self.schema.is_supertype(condition, context)
        return runtime in self.schema.possible_types(condition)

    def _check_field(self, parent: str, selection: FieldSelection):
        if selection.name == TYPENAME:
            return
        if self.schema.lookup_field(parent, selection.name) is None:
            hint = None
            if isinstance(self.schema.get_type(parent), UnionType):
                hint = "Only '__typename' can be selected on a union; use inline fragments for member fields."
            raise UnknownField(
                f"Field '{selection.name}' does not exist on type '{parent}'",
                hint=hint,
                context={"type": parent, "field": selection.name},
            )

    def _check_inline_target(self, parent: str, condition: str):
        if not isinstance(self.schema.get_type(condition), COMPOSITE_TYPES):
            raise InvalidFragmentTarget(
                f"Inline fragment on '{condition}': not an object, interface or union type",
                context={"type": parent},
            )
        if not self.schema.types_overlap(condition, parent):
            raise InvalidFragmentTarget(
                f"Inline fragment on '{condition}' can never apply to '{parent}'",
                context={"type": parent},
            )

    def _build_object(self, type_name: str, entries: dict[str, list[_Entry]]) -> ObjectNode:
        node = ObjectNode(type_name=type_name)
        for key, key_entries in entries.items():
            node.fields[key] = self._merge_field(type_name, key, key_entries)
        return node

    def _merge_field(self, owner: str, key: str, entries: list[_Entry]) -> OutputField:
        """Merge all selections of one response key (GraphQL field merging)."""
        first = entries[0].selection
        for entry in entries[1:]:
            other = entry.selection
            if other.name != first.name:
                raise AliasConflict(
                    f"Response key '{key}' selects both '{first.name}' and '{other.name}'",
                    context={"type": owner, "field": key},
                )
            if other.argument_signature != first.argument_signature:
                raise AliasConflict(
                    f"Response key '{key}' selects '{first.name}' with different arguments",
                    context={"type": owner, "field": key},
                )

        if first.name == TYPENAME:
            string = NamedTypeRef("String")
            return OutputField(key, TYPENAME, NonNullTypeRef(string), LeafNode("String"))

        schema_field = self.schema.lookup_field(owner, first.name)
        if schema_field is None:
            # Only reachable for a field validated against an interface the owner lacks
            raise UnknownField(
                f"Field '{first.name}' does not exist on type '{owner}'",
                context={"type": owner, "field": first.name},
            )
        target_name = named_type(schema_field.type)
        target = self.schema.get_type(target_name)
        with_subselection = [e for e in entries if e.selection.selection_set is not None]

        if isinstance(target, LEAF_TYPES):
            if with_subselection:
                raise SubselectionError(
                    f"Field '{first.name}' of leaf type '{target_name}' cannot have a selection set",
                    context={"type": owner, "field": key},
                )
            return OutputField(key, first.name, schema_field.type, LeafNode(target_name))

        if target is None:
            raise SelectionError(
                f"Field '{first.name}' refers to undefined type '{target_name}'",
                context={"type": owner, "field": key},
            )
        if not with_subselection:
            raise SubselectionError(
                f"Field '{first.name}' of type '{target_name}' must have a selection set",
                context={"type": owner, "field": key},
            )

        groups = [(e.selection.selection_set, e.visiting) for e in with_subselection]
        try:
            node = self._resolve_groups(target_name, groups)
        except CodegenError as e:
            inner_path = e.context.get("path")
            e.context["path"] = f"{key}.{inner_path}" if inner_path else key
            raise
        if isinstance(node, PolymorphicNode):
            self._request_typename(with_subselection)
        return OutputField(key, first.name, schema_field.type, node)

    def _request_typename(self, entries: list[_Entry]):
        for entry in entries:
            selection = entry.selection
            if selection.selection_set_offset is None:
                continue
            already_selected = any(
                isinstance(s, FieldSelection) and s.name == TYPENAME and s.alias is None
                for s in selection.selection_set
            )
            if not already_selected:
                self._typename_offsets.add(selection.selection_set_offset)

    def _check_same_shape(self, type_name: str, objects: list[ObjectNode]):
        """Fields sharing a response key across variants must decode alike."""
        seen: dict[str, OutputField] = {}
        for obj in objects:
            for key, output_field in obj.fields.items():
                if key in seen and not _same_shape(seen[key], output_field):
                    raise AliasConflict(
                        f"Response key '{key}' has different shapes on the possible types of '{type_name}'",
                        context={"type": type_name, "field": key},
                    )
                seen.setdefault(key, output_field)


def _wrappers(type_ref: TypeRef) -> tuple[str, ...]:
    result = []
    while not isinstance(type_ref, NamedTypeRef):
        result.append("list" if isinstance(type_ref, ListTypeRef) else "non_null")
        type_ref = type_ref.of
    return tuple(result)


def _same_shape(first: OutputField, second: OutputField) -> bool:
    if _wrappers(first.type) != _wrappers(second.type):
        return False
    a, b = first.node, second.node
    if isinstance(a, LeafNode) or isinstance(b, LeafNode):
        return isinstance(a, LeafNode) and isinstance(b, LeafNode) and a.type_name == b.type_name
    a_fields = a.fields if isinstance(a, ObjectNode) else a.common_fields
    b_fields = b.fields if isinstance(b, ObjectNode) else b.common_fields
    return all(
        _same_shape(a_fields[key], b_fields[key])
        for key in a_fields.keys() & b_fields.keys()
    )
