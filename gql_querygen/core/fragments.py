"""Named fragment indexing and inlining."""

import logging
from collections.abc import Iterable

from .document import FieldSelection, Fragment, FragmentSpread, InlineFragment, QueryDocument, Selection
from .errors import FragmentCycle, FragmentError, InvalidFragmentTarget, TypeConditionMismatch, UndefinedFragment
from .ir import COMPOSITE_TYPES, SchemaModel

logger = logging.getLogger(__name__)


class FragmentLibrary:
    """Name to definition table for the fragments of one document."""

    def __init__(self, schema: SchemaModel, fragments: Iterable[Fragment] = ()):
        self.schema = schema
        self._fragments: dict[str, Fragment] = {}
        for fragment in fragments:
            if fragment.name in self._fragments:
                raise FragmentError(
                    f"Fragment '{fragment.name}' is defined more than once",
                    context={"fragment": fragment.name},
                )
            self._fragments[fragment.name] = fragment

    @classmethod
    def index(cls, schema: SchemaModel, document: QueryDocument) -> "FragmentLibrary":
        """Index a document's fragments and reject spread cycles up front."""
        library = cls(schema, document.fragments)
        library.check_cycles()
        return library

    def __contains__(self, name: str) -> bool:
        return name in self._fragments

    def get(self, name: str) -> Fragment:
        try:
            return self._fragments[name]
        except KeyError:
            raise UndefinedFragment(
                f"Fragment '{name}' is not defined",
                context={"fragment": name},
            ) from None

    def inline(self, spread_name: str, context_type: str, visiting: frozenset[str]) -> list[Selection]:
        """Return the selections of a spread fragment.

        `visiting` holds the fragments already being expanded on the current
        path; spreading one of them again is a cycle.
        """
        if spread_name in visiting:
            raise FragmentCycle(
                "Fragment cycle detected: " + " -> ".join(sorted(visiting) + [spread_name]),
                context={"fragment": spread_name},
            )
        fragment = self.get(spread_name)
        if not isinstance(self.schema.get_type(fragment.on_type), COMPOSITE_TYPES):
            raise InvalidFragmentTarget(
                f"Fragment '{fragment.name}' targets '{fragment.on_type}', "
                "which is not an object, interface or union type",
                context={"fragment": fragment.name, "type": fragment.on_type},
            )
        if not self.schema.types_overlap(fragment.on_type, context_type):
            raise TypeConditionMismatch(
                f"Fragment '{fragment.name}' on '{fragment.on_type}' can never apply to '{context_type}'",
                hint=f"Spread it only where a '{fragment.on_type}' can appear.",
                context={"fragment": fragment.name, "type": context_type},
            )
        logger.debug("Inlining fragment %s into %s", spread_name, context_type)
        return fragment.selection_set

    def spreads(self, name: str) -> list[str]:
        """Names of the fragments spread (at any depth) by one fragment's selection set."""
        return list(dict.fromkeys(_spread_names(self.get(name).selection_set)))

    def check_cycles(self):
        """Fail with FragmentCycle if any fragment transitively spreads itself."""
        done: set[str] = set()

        def walk(name: str, path: list[str]):
            if name in path:
                cycle = path[path.index(name):] + [name]
                raise FragmentCycle(
                    "Fragment cycle detected: " + " -> ".join(cycle),
                    context={"fragment": name},
                )
            if name in done or name not in self._fragments:
                return
            for child in self.spreads(name):
                walk(child, path + [name])
            done.add(name)

        for name in self._fragments:
            walk(name, [])


def _spread_names(selections: list[Selection]) -> Iterable[str]:
    for selection in selections:
        if isinstance(selection, FragmentSpread):
            yield selection.name
        elif isinstance(selection, InlineFragment):
            yield from _spread_names(selection.selection_set)
        elif isinstance(selection, FieldSelection) and selection.selection_set:
            yield from _spread_names(selection.selection_set)
