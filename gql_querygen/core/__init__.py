"""Core modules for GraphQL query code generation."""

from .config import (
    ConfigFileSource,
    GraphQLConfigFile,
    InlineSource,
    ResolvedSources,
    build_registry,
    find_config_file,
    load_config_file,
    resolve_sources,
)
from .document import QueryDocument, parse_document
from .errors import (
    AliasConflict,
    CodegenError,
    ConfigError,
    Diagnostic,
    FragmentCycle,
    FragmentError,
    InvalidFragmentTarget,
    MissingRootType,
    ParseError,
    QueryParseError,
    SchemaError,
    SchemaParseError,
    SelectionError,
    Severity,
    SourceReadError,
    SubselectionError,
    TypeConditionMismatch,
    UndeclaredVariable,
    UndefinedFragment,
    UnknownField,
    UnsupportedSchemaFormat,
    VariableError,
    VariableTypeMismatch,
)
from .fragments import FragmentLibrary
from .generator import CodeGenerator
from .hooks import (
    AddHeaderHook,
    HookRunner,
    StripDescriptionsHook,
    PostGenerateHook,
    PreGenerateHook,
)
from .ir import SchemaModel
from .parser import SchemaParser
from .pipeline import OperationResult, generate_document, generate_operation
from .scalars import (
    DateHandler,
    DateTimeHandler,
    DecimalHandler,
    JSONHandler,
    ScalarHandler,
    ScalarRegistry,
    UUIDHandler,
)
from .selection import SelectionResolver
from .synthesizer import GeneratedModule, OutputSynthesizer
from .variables import VariableBinder

__all__ = [
    # Configuration
    "ConfigFileSource",
    "GraphQLConfigFile",
    "InlineSource",
    "ResolvedSources",
    "build_registry",
    "find_config_file",
    "load_config_file",
    "resolve_sources",
    # Errors
    "AliasConflict",
    "CodegenError",
    "ConfigError",
    "Diagnostic",
    "FragmentCycle",
    "FragmentError",
    "InvalidFragmentTarget",
    "MissingRootType",
    "ParseError",
    "QueryParseError",
    "SchemaError",
    "SchemaParseError",
    "SelectionError",
    "Severity",
    "SourceReadError",
    "SubselectionError",
    "TypeConditionMismatch",
    "UndeclaredVariable",
    "UndefinedFragment",
    "UnknownField",
    "UnsupportedSchemaFormat",
    "VariableError",
    "VariableTypeMismatch",
    # Scalars
    "ScalarHandler",
    "ScalarRegistry",
    "DateTimeHandler",
    "DateHandler",
    "DecimalHandler",
    "UUIDHandler",
    "JSONHandler",
    # Hooks
    "PreGenerateHook",
    "PostGenerateHook",
    "AddHeaderHook",
    "HookRunner",
    "StripDescriptionsHook",
    # Schema
    "SchemaModel",
    "SchemaParser",
    # Pipeline
    "FragmentLibrary",
    "GeneratedModule",
    "OperationResult",
    "OutputSynthesizer",
    "QueryDocument",
    "SelectionResolver",
    "VariableBinder",
    "generate_document",
    "generate_operation",
    "parse_document",
    # Rendering
    "CodeGenerator",
]
