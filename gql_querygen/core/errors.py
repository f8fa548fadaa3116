"""Error taxonomy and diagnostics for query code generation.

Every fatal problem is raised as a subclass of CodegenError. Each error
carries a human readable message, an optional remediation hint and the
context (file, type, field) where it was found, so the CLI can report it
without knowing which stage failed.
"""

from dataclasses import dataclass, field
from enum import Enum


class CodegenError(Exception):
    """Base class for all fatal generation errors."""

    default_hint: str | None = None

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: dict[str, str] | None = None,
    ):
        self.message = message
        self.hint = hint if hint is not None else self.default_hint
        self.context = dict(context or {})
        super().__init__(message)

    def with_context(self, **context: str) -> "CodegenError":
        """Add context keys that are not already set and return self."""
        for key, value in context.items():
            self.context.setdefault(key, value)
        return self

    def __str__(self) -> str:
        parts = [self.message]
        if self.context:
            where = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"({where})")
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        return " ".join(parts)


class ConfigError(CodegenError):
    """A schema or query location could not be resolved."""


class SourceReadError(CodegenError):
    """A schema or query file could not be read."""

    default_hint = "File paths are relative to the project root (or to the config file)."


class ParseError(CodegenError):
    """Malformed GraphQL or JSON input."""


class QueryParseError(ParseError):
    """The operation document is not valid GraphQL."""


# Schema errors

class SchemaError(CodegenError):
    """The schema could not be turned into a schema model."""


class UnsupportedSchemaFormat(SchemaError):
    default_hint = "Use SDL (.graphql, .graphqls, .gql) or introspection JSON (.json)."


class SchemaParseError(SchemaError, ParseError):
    pass


class MissingRootType(SchemaError):
    default_hint = "Define a 'Query' type or declare one in a 'schema { query: ... }' block."


# Selection errors

class SelectionError(CodegenError):
    """A selection set does not match the schema."""


class UnknownField(SelectionError):
    pass


class AliasConflict(SelectionError):
    default_hint = "Give the conflicting selections different aliases."


class InvalidFragmentTarget(SelectionError):
    pass


class SubselectionError(SelectionError):
    pass


# Fragment errors

class FragmentError(CodegenError):
    """A fragment could not be inlined."""


class UndefinedFragment(FragmentError):
    default_hint = "Define the fragment in the same document as the operation."


class FragmentCycle(FragmentError):
    default_hint = "A fragment must not spread itself, directly or through other fragments."


class TypeConditionMismatch(FragmentError):
    pass


# Variable errors

class VariableError(CodegenError):
    """An operation's variables do not match their usage or the schema."""


class UndeclaredVariable(VariableError):
    default_hint = "Declare the variable in the operation header, e.g. query Name($id: ID!)."


class VariableTypeMismatch(VariableError):
    default_hint = "Variables must be declared with a scalar, enum or input object type."


class Severity(Enum):
    """Diagnostic severity."""
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Diagnostic:
    """A reportable finding attached to one operation."""
    severity: Severity
    message: str
    hint: str | None = None
    context: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_error(cls, error: CodegenError) -> "Diagnostic":
        return cls(
            severity=Severity.ERROR,
            message=error.message,
            hint=error.hint,
            context=dict(error.context),
        )

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def __str__(self) -> str:
        text = f"{self.severity.value}: {self.message}"
        if self.context:
            text += " (" + ", ".join(f"{k}={v}" for k, v in self.context.items()) + ")"
        if self.hint:
            text += f" Hint: {self.hint}"
        return text


def unused_warning(variable: str, operation: str) -> Diagnostic:
    """Build the non-fatal diagnostic for a declared but unused variable."""
    return Diagnostic(
        severity=Severity.WARNING,
        message=f"Variable '${variable}' is declared but never used",
        hint="Remove the declaration or reference it in an argument.",
        context={"operation": operation, "variable": variable},
    )
