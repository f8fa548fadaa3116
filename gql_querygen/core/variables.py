"""Operation variable binding.

Turns the variable declarations of an operation into a Variables shape and
checks them against their usage and against the schema.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .document import FieldSelection, FragmentSpread, InlineFragment, Operation, Selection
from .errors import Diagnostic, UndeclaredVariable, VariableError, VariableTypeMismatch, unused_warning
from .fragments import FragmentLibrary
from .ir import INPUT_TYPES, SchemaModel, TypeRef, named_type

logger = logging.getLogger(__name__)


@dataclass
class VariableField:
    name: str
    type: TypeRef
    has_default: bool = False
    default: Any = None


@dataclass
class VariablesShape:
    """The declared variables of one operation, in declaration order."""
    fields: list[VariableField] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


class VariableBinder:
    """Extracts and validates the variables of an operation."""

    def __init__(self, schema: SchemaModel, fragments: FragmentLibrary):
        self.schema = schema
        self.fragments = fragments

    def bind(self, operation: Operation, operation_name: str | None = None) -> VariablesShape:
        name = operation_name or operation.name or "<anonymous>"
        shape = VariablesShape()
        declared: set[str] = set()

        for decl in operation.variable_decls:
            if decl.name in declared:
                raise VariableError(
                    f"Variable '${decl.name}' is declared more than once",
                    context={"operation": name, "variable": decl.name},
                )
            declared.add(decl.name)
            type_name = named_type(decl.type)
            if not isinstance(self.schema.get_type(type_name), INPUT_TYPES):
                kind = "undefined" if self.schema.get_type(type_name) is None else "not an input type"
                raise VariableTypeMismatch(
                    f"Variable '${decl.name}' is declared as '{decl.type}', but '{type_name}' is {kind}",
                    context={"operation": name, "variable": decl.name},
                )
            shape.fields.append(VariableField(
                name=decl.name,
                type=decl.type,
                has_default=decl.has_default,
                default=decl.default,
            ))

        used = self.used_variables(operation)
        for variable in used:
            if variable not in declared:
                raise UndeclaredVariable(
                    f"Variable '${variable}' is used but not declared",
                    context={"operation": name, "variable": variable},
                )
        for variable in (v.name for v in shape.fields):
            if variable not in used:
                diagnostic = unused_warning(variable, name)
                logger.warning("%s", diagnostic)
                shape.diagnostics.append(diagnostic)
        return shape

    def used_variables(self, operation: Operation) -> list[str]:
        """Variables referenced by the operation and every fragment it spreads."""
        found: dict[str, None] = dict.fromkeys(sorted(operation.variables))
        seen_fragments: set[str] = set()
        for variable in self._walk(operation.selection_set, seen_fragments):
            found.setdefault(variable, None)
        return list(found)

    def _walk(self, selections: list[Selection], seen_fragments: set[str]) -> Iterable[str]:
        for selection in selections:
            yield from sorted(selection.variables)
            if isinstance(selection, FieldSelection):
                yield from self._walk(selection.selection_set or [], seen_fragments)
            elif isinstance(selection, InlineFragment):
                yield from self._walk(selection.selection_set, seen_fragments)
            elif isinstance(selection, FragmentSpread):
                if selection.name in seen_fragments or selection.name not in self.fragments:
                    continue
                seen_fragments.add(selection.name)
                yield from self._walk(self.fragments.get(selection.name).selection_set, seen_fragments)
