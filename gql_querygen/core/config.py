"""Source locations and scalar configuration.

Schema and query locations come from one of two places:

* ``InlineSource``: paths given directly (CLI flags).
* ``ConfigFileSource``: a ``.graphqlconfig`` JSON file, e.g.::

    {
      "schemaPath": "schema.graphql",
      "documents": ["queries/*.graphql"],
      "extensions": {
        "scalars": {"DateTime": "datetime", "Money": {"python_type": "Decimal",
                                                       "import": "from decimal import Decimal"}},
        "enums": {"Locale": "str"}
      }
    }

Inline values take precedence over the config file. Paths inside a config
file are relative to the directory that contains it.
"""

import glob
import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError
from .parser import read_text
from .scalars import ScalarHandler, ScalarMapping, ScalarRegistry, preset

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".graphqlconfig", ".graphqlconfig.json")


class CustomScalar(BaseModel):
    """An explicit Python type for a scalar or enum."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    python_type: str
    import_statement: str = Field(default="", alias="import")


class CodegenExtensions(BaseModel):
    model_config = ConfigDict(extra="ignore")

    scalars: dict[str, Union[str, CustomScalar]] = Field(default_factory=dict)
    enums: dict[str, Union[str, CustomScalar]] = Field(default_factory=dict)


class GraphQLConfigFile(BaseModel):
    """Contents of a .graphqlconfig file. Unknown keys are ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    schema_path: Optional[str] = Field(default=None, alias="schemaPath")
    documents: Union[str, list[str]] = Field(default_factory=list)
    extensions: CodegenExtensions = Field(default_factory=CodegenExtensions)


@dataclass(frozen=True)
class InlineSource:
    """Locations given directly by the caller."""
    schema_path: Optional[str] = None
    query_paths: tuple[str, ...] = ()


@dataclass(frozen=True)
class ConfigFileSource:
    """Locations read from a config file."""
    path: str
    config: GraphQLConfigFile

    @property
    def base_dir(self) -> str:
        return os.path.dirname(os.path.abspath(self.path))

    def schema_path(self) -> Optional[str]:
        if not self.config.schema_path:
            return None
        return os.path.join(self.base_dir, self.config.schema_path)

    def query_paths(self) -> list[str]:
        patterns = self.config.documents
        if isinstance(patterns, str):
            patterns = [patterns]
        paths = []
        for pattern in patterns:
            matches = sorted(glob.glob(os.path.join(self.base_dir, pattern), recursive=True))
            if not matches:
                logger.warning("No query documents match %s", pattern)
            paths.extend(matches)
        return paths


SourceLocation = Union[InlineSource, ConfigFileSource]


@dataclass
class ResolvedSources:
    """Schema and query locations plus the configured type overrides."""
    schema_path: str
    query_paths: list[str]
    scalars: dict[str, ScalarHandler] = field(default_factory=dict)
    enums: dict[str, ScalarHandler] = field(default_factory=dict)
    config_path: Optional[str] = None


def find_config_file(start: str = ".") -> Optional[str]:
    """Search start and its parents for a config file."""
    current = os.path.abspath(start)
    while True:
        for name in CONFIG_FILENAMES:
            candidate = os.path.join(current, name)
            if os.path.isfile(candidate):
                return candidate
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def load_config_file(path: str) -> ConfigFileSource:
    """Load and validate a config file."""
    text = read_text(path)
    try:
        config = GraphQLConfigFile.model_validate_json(text)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid config file {path}: {e.error_count()} problem(s)\n{e}",
            hint="The file must be a JSON object with 'schemaPath' and optional 'extensions.scalars'.",
            context={"file": path},
        ) from e
    logger.debug("Loaded config file %s", path)
    return ConfigFileSource(path=path, config=config)


def resolve_sources(
    inline: InlineSource,
    config_path: Optional[str] = None,
    search_from: str = ".",
) -> ResolvedSources:
    """Combine inline locations with a config file.

    An explicit config_path is always loaded. Otherwise a config file is
    looked up from search_from only when the schema is not given inline.
    """
    config_source = None
    if config_path is not None:
        config_source = load_config_file(config_path)
    elif inline.schema_path is None:
        found = find_config_file(search_from)
        if found:
            config_source = load_config_file(found)

    schema_path = inline.schema_path
    if schema_path is None and config_source is not None:
        schema_path = config_source.schema_path()
    if schema_path is None:
        raise ConfigError(
            "No GraphQL schema location given",
            hint=(
                "Pass --schema, or add a .graphqlconfig file with a 'schemaPath' "
                "entry next to your queries."
            ),
        )

    query_paths = list(inline.query_paths)
    if not query_paths and config_source is not None:
        query_paths = config_source.query_paths()
    if not query_paths:
        raise ConfigError(
            "No query documents given",
            hint="Pass one or more --query files, or list them under 'documents' in .graphqlconfig.",
        )

    resolved = ResolvedSources(schema_path=schema_path, query_paths=query_paths)
    if config_source is not None:
        extensions = config_source.config.extensions
        context = {"file": config_source.path}
        resolved.scalars = {
            name: _handler(value, context) for name, value in extensions.scalars.items()
        }
        resolved.enums = {
            name: _handler(value, context) for name, value in extensions.enums.items()
        }
        resolved.config_path = config_source.path
    return resolved


def parse_scalar_option(option: str) -> tuple[str, ScalarHandler]:
    """Parse a NAME=PRESET scalar override."""
    name, sep, value = option.partition("=")
    if not sep or not name.strip() or not value.strip():
        raise ConfigError(
            f"Invalid scalar override '{option}'",
            hint="Use NAME=PRESET, e.g. --scalar DateTime=datetime.",
        )
    return name.strip(), _handler(value.strip(), {"option": option})


def build_registry(
    sources: ResolvedSources,
    scalar_overrides: dict[str, ScalarHandler] | None = None,
) -> ScalarRegistry:
    """Registry from the config file mappings, with explicit overrides on top."""
    scalars = dict(sources.scalars)
    scalars.update(scalar_overrides or {})
    return ScalarRegistry(overrides=scalars, enum_overrides=sources.enums)


def _handler(value: Union[str, CustomScalar], context: dict[str, str]) -> ScalarHandler:
    if isinstance(value, CustomScalar):
        return ScalarMapping(value.python_type, value.import_statement)
    try:
        return preset(value)
    except ValueError as e:
        raise ConfigError(str(e), context=context) from e
