"""Generation pipeline: runs every stage for each operation of a document.

Operations are generated independently. A failure in one is recorded as
that operation's diagnostic and produces no output for it, while the other
operations of the batch still generate.
"""

import logging
import os
from dataclasses import dataclass, field

from .document import Operation, QueryDocument, parse_document
from .errors import CodegenError, Diagnostic
from .fragments import FragmentLibrary
from .ir import SchemaModel
from .naming import to_pascal_case
from .query_builder import build_query_text
from .scalars import ScalarRegistry
from .selection import SelectionResolver
from .synthesizer import GeneratedModule, OutputSynthesizer
from .variables import VariableBinder

logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    """Outcome of generating one operation."""
    operation_name: str
    module: GeneratedModule | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.module is not None


def generate_operation(
    schema: SchemaModel,
    document: QueryDocument,
    operation: Operation,
    registry: ScalarRegistry,
    operation_name: str | None = None,
    source_name: str = "",
) -> GeneratedModule:
    """Generate the module definitions for a single operation."""
    name = operation_name or operation.name or "Query"
    fragments = FragmentLibrary.index(schema, document)
    resolution = SelectionResolver(schema, fragments).resolve_operation(operation)
    variables = VariableBinder(schema, fragments).bind(operation, name)

    binding_name = to_pascal_case(name)
    synthesizer = OutputSynthesizer(schema, registry, reserved={binding_name})
    module = synthesizer.synthesize(resolution.root, variables)
    module.operation_name = name
    module.operation_kind = operation.kind
    module.binding_name = binding_name
    module.query = build_query_text(document.source, resolution.typename_offsets)
    module.source_name = source_name
    return module


def generate_document(
    schema: SchemaModel,
    query_text: str,
    registry: ScalarRegistry | None = None,
    source_name: str = "query.graphql",
) -> list[OperationResult]:
    """Generate every operation of a query document.

    Raises QueryParseError if the document itself cannot be parsed; all
    later errors are captured per operation.
    """
    registry = registry or ScalarRegistry()
    document = parse_document(query_text, source_name)
    if not document.operations:
        logger.warning("%s contains no operations", source_name)

    results = []
    used_names: set[str] = set()
    for operation in document.operations:
        name = _operation_name(operation, source_name, used_names)
        try:
            module = generate_operation(schema, document, operation, registry, name, source_name)
        except CodegenError as e:
            e.with_context(file=source_name, operation=name)
            logger.error("Failed to generate %s: %s", name, e)
            results.append(OperationResult(name, None, [Diagnostic.from_error(e)]))
        else:
            logger.debug("Generated %s with %d definitions", name, len(module.definitions))
            results.append(OperationResult(name, module, list(module.diagnostics)))
    return results


def _operation_name(operation: Operation, source_name: str, used: set[str]) -> str:
    """Operation name, falling back to the file stem for anonymous operations."""
    base = operation.name
    if not base:
        stem = os.path.splitext(os.path.basename(source_name))[0]
        base = to_pascal_case(stem.replace("-", "_").replace(".", "_")) or "Query"
    name, counter = base, 2
    while name in used:
        name = f"{base}{counter}"
        counter += 1
    used.add(name)
    return name
