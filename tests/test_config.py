"""Tests for source location and scalar configuration."""

import json
import os

import pytest

from gql_querygen.core.config import (
    ConfigFileSource,
    InlineSource,
    build_registry,
    find_config_file,
    load_config_file,
    parse_scalar_option,
    resolve_sources,
)
from gql_querygen.core.errors import ConfigError, SourceReadError
from gql_querygen.core.scalars import ScalarMapping


@pytest.fixture
def project(tmp_path):
    """A project directory with a schema, two queries and a config file."""
    (tmp_path / "schema.graphql").write_text("type Query { hello: String }")
    queries = tmp_path / "queries"
    queries.mkdir()
    (queries / "b.graphql").write_text("query B { hello }")
    (queries / "a.graphql").write_text("query A { hello }")
    config = {
        "schemaPath": "schema.graphql",
        "documents": "queries/*.graphql",
        "extensions": {
            "scalars": {
                "DateTime": "datetime",
                "Money": {"python_type": "Decimal", "import": "from decimal import Decimal"},
            },
            "enums": {"Locale": "str"},
        },
    }
    (tmp_path / ".graphqlconfig").write_text(json.dumps(config))
    return tmp_path


class TestConfigFile:
    """Tests for loading .graphqlconfig files."""

    def test_load(self, project):
        source = load_config_file(str(project / ".graphqlconfig"))
        assert isinstance(source, ConfigFileSource)
        assert source.config.schema_path == "schema.graphql"
        assert source.schema_path() == os.path.join(str(project), "schema.graphql")

    def test_documents_are_globbed_in_order(self, project):
        source = load_config_file(str(project / ".graphqlconfig"))
        assert [os.path.basename(p) for p in source.query_paths()] == ["a.graphql", "b.graphql"]

    def test_unknown_keys_are_ignored(self, tmp_path):
        path = tmp_path / ".graphqlconfig"
        path.write_text(json.dumps({"schemaPath": "s.graphql", "projects": {}}))
        assert load_config_file(str(path)).config.schema_path == "s.graphql"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / ".graphqlconfig"
        path.write_text("{ schemaPath: ")
        with pytest.raises(ConfigError) as exc_info:
            load_config_file(str(path))
        assert exc_info.value.hint

    def test_invalid_scalar_entry(self, tmp_path):
        path = tmp_path / ".graphqlconfig"
        path.write_text(json.dumps({"extensions": {"scalars": {"Money": {"import": "x"}}}}))
        with pytest.raises(ConfigError):
            load_config_file(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceReadError):
            load_config_file(str(tmp_path / ".graphqlconfig"))

    def test_find_in_parent(self, project):
        nested = project / "queries" / "deeper"
        nested.mkdir()
        assert find_config_file(str(nested)) == str(project / ".graphqlconfig")

    def test_find_json_variant(self, tmp_path):
        (tmp_path / ".graphqlconfig.json").write_text("{}")
        assert find_config_file(str(tmp_path)) == str(tmp_path / ".graphqlconfig.json")


class TestResolveSources:
    """Tests for combining inline locations with config files."""

    def test_from_config_file(self, project):
        sources = resolve_sources(InlineSource(), config_path=str(project / ".graphqlconfig"))
        assert sources.schema_path == os.path.join(str(project), "schema.graphql")
        assert len(sources.query_paths) == 2
        assert sources.scalars["DateTime"].python_type == "datetime"
        assert sources.scalars["Money"] == ScalarMapping("Decimal", "from decimal import Decimal")
        assert sources.enums["Locale"].python_type == "str"
        assert sources.config_path == str(project / ".graphqlconfig")

    def test_discovered_config_file(self, project):
        sources = resolve_sources(InlineSource(), search_from=str(project / "queries"))
        assert sources.schema_path == os.path.join(str(project), "schema.graphql")

    def test_inline_takes_precedence(self, project):
        sources = resolve_sources(
            InlineSource(schema_path="other.graphql", query_paths=("q.graphql",)),
            config_path=str(project / ".graphqlconfig"),
        )
        assert sources.schema_path == "other.graphql"
        assert sources.query_paths == ["q.graphql"]
        assert "DateTime" in sources.scalars

    def test_inline_only(self, tmp_path):
        sources = resolve_sources(
            InlineSource(schema_path="schema.graphql", query_paths=("q.graphql",)),
            search_from=str(tmp_path),
        )
        assert sources.config_path is None
        assert sources.scalars == {}

    def test_no_schema(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            resolve_sources(InlineSource(query_paths=("q.graphql",)), search_from=str(tmp_path))
        assert "--schema" in exc_info.value.hint

    def test_no_queries(self, tmp_path):
        with pytest.raises(ConfigError):
            resolve_sources(InlineSource(schema_path="schema.graphql"), search_from=str(tmp_path))

    def test_unknown_preset(self, tmp_path):
        path = tmp_path / ".graphqlconfig"
        path.write_text(json.dumps({
            "schemaPath": "schema.graphql",
            "documents": ["q.graphql"],
            "extensions": {"scalars": {"Money": "money"}},
        }))
        (tmp_path / "q.graphql").write_text("{ hello }")
        with pytest.raises(ConfigError) as exc_info:
            resolve_sources(InlineSource(), config_path=str(path))
        assert exc_info.value.context["file"] == str(path)


class TestScalarOptions:
    """Tests for NAME=PRESET options and registry building."""

    def test_parse(self):
        name, handler = parse_scalar_option("DateTime=datetime")
        assert name == "DateTime"
        assert handler.python_type == "datetime"

    @pytest.mark.parametrize("option", ["DateTime", "=datetime", "DateTime="])
    def test_malformed(self, option):
        with pytest.raises(ConfigError):
            parse_scalar_option(option)

    def test_unknown_preset(self):
        with pytest.raises(ConfigError):
            parse_scalar_option("Money=money")

    def test_build_registry(self, project):
        sources = resolve_sources(InlineSource(), config_path=str(project / ".graphqlconfig"))
        _, uuid_handler = parse_scalar_option("DateTime=uuid")
        registry = build_registry(sources, {"DateTime": uuid_handler})
        assert registry.python_type("DateTime") == "UUID"
        assert registry.python_type("Money") == "Decimal"
        assert registry.enum_override("Locale").python_type == "str"
