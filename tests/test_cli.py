"""Tests for the command-line interface."""

import ast

import pytest
from click.testing import CliRunner

from gql_querygen.cli import main

HERO_QUERY = """
query HeroQuery {
  hero {
    name
    ... on Human { homePlanet }
  }
}
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def files(tmp_path, sdl):
    schema = tmp_path / "schema.graphql"
    schema.write_text(sdl)
    hero = tmp_path / "hero.graphql"
    hero.write_text(HERO_QUERY)
    mixed = tmp_path / "mixed.graphql"
    mixed.write_text("""
        query Good { hero { name } }
        query Bad { hero { mass } }
    """)
    return {"schema": str(schema), "hero": str(hero), "mixed": str(mixed), "root": tmp_path}


class TestGenerate:
    """Tests for the generate command."""

    def test_generates_module(self, runner, files):
        output = files["root"] / "generated"
        result = runner.invoke(main, [
            "generate", "-s", files["schema"], "-q", files["hero"], "-o", str(output),
        ])
        assert result.exit_code == 0, result.output
        assert "Generated 1 module(s)" in result.output
        ast.parse((output / "hero_query.py").read_text())
        assert (output / "__init__.py").exists()

    def test_failing_operation_does_not_block_others(self, runner, files):
        output = files["root"] / "generated"
        result = runner.invoke(main, [
            "generate", "-s", files["schema"], "-q", files["mixed"], "-o", str(output),
        ])
        assert result.exit_code == 1
        assert (output / "good.py").exists()
        assert not (output / "bad.py").exists()

    def test_header_and_scalar_options(self, runner, files):
        query = files["root"] / "reviews.graphql"
        query.write_text("query Reviews { reviews(episode: JEDI) { createdAt } }")
        output = files["root"] / "generated"
        result = runner.invoke(main, [
            "generate", "-s", files["schema"], "-q", str(query), "-o", str(output),
            "--scalar", "DateTime=datetime", "--header", "# do not edit",
        ])
        assert result.exit_code == 0, result.output
        content = (output / "reviews.py").read_text()
        assert content.startswith("# do not edit\n\n")
        assert "from datetime import datetime" in content

    def test_strip_descriptions(self, runner, files):
        query = files["root"] / "appears.graphql"
        query.write_text("query Appears { hero { appearsIn } }")
        output = files["root"] / "generated"
        args = ["generate", "-s", files["schema"], "-q", str(query), "-o", str(output)]

        assert runner.invoke(main, args).exit_code == 0
        assert "One of the films" in (output / "appears.py").read_text()

        assert runner.invoke(main, args + ["--strip-descriptions"]).exit_code == 0
        assert "One of the films" not in (output / "appears.py").read_text()

    def test_bad_scalar_option(self, runner, files):
        result = runner.invoke(main, [
            "generate", "-s", files["schema"], "-q", files["hero"], "-o", str(files["root"] / "out"),
            "--scalar", "DateTime",
        ])
        assert result.exit_code == 1
        assert "NAME=PRESET" in result.output

    def test_config_file(self, runner, files):
        config = files["root"] / ".graphqlconfig"
        config.write_text('{"schemaPath": "schema.graphql", "documents": ["hero.graphql"]}')
        output = files["root"] / "generated"
        result = runner.invoke(main, ["generate", "--config", str(config), "-o", str(output)])
        assert result.exit_code == 0, result.output
        assert (output / "hero_query.py").exists()

    def test_missing_schema(self, runner, files):
        with runner.isolated_filesystem(temp_dir=files["root"]):
            result = runner.invoke(main, ["generate", "-q", files["hero"], "-o", "out"])
        assert result.exit_code == 1
        assert "No GraphQL schema location given" in result.output

    def test_invalid_query_document(self, runner, files):
        broken = files["root"] / "broken.graphql"
        broken.write_text("query {")
        result = runner.invoke(main, [
            "generate", "-s", files["schema"], "-q", str(broken), "-q", files["hero"],
            "-o", str(files["root"] / "out"),
        ])
        assert result.exit_code == 1
        assert (files["root"] / "out" / "hero_query.py").exists()

    def test_undecodable_file_does_not_block_others(self, runner, files):
        broken = files["root"] / "broken.graphql"
        broken.write_bytes(b"query Broken { hero { name } }\xff\xfe")
        output = files["root"] / "out"
        result = runner.invoke(main, [
            "generate", "-s", files["schema"], "-q", str(broken), "-q", files["hero"], "-o", str(output),
        ])
        assert result.exit_code == 1
        assert not isinstance(result.exception, UnicodeDecodeError)
        assert (output / "hero_query.py").exists()

    def test_output_name_clash(self, runner, files):
        other = files["root"] / "other.graphql"
        other.write_text("query HeroQuery { hero { name } }")
        result = runner.invoke(main, [
            "generate", "-s", files["schema"], "-q", files["hero"], "-q", str(other),
            "-o", str(files["root"] / "out"),
        ])
        assert result.exit_code == 1


class TestCheck:
    """Tests for the check command."""

    def test_valid(self, runner, files):
        result = runner.invoke(main, ["check", "-s", files["schema"], "-q", files["hero"]])
        assert result.exit_code == 0, result.output
        assert "ok: HeroQuery" in result.output

    def test_invalid(self, runner, files):
        result = runner.invoke(main, ["check", "-s", files["schema"], "-q", files["mixed"]])
        assert result.exit_code == 1
        assert "ok: Good" in result.output

    def test_writes_nothing(self, runner, files):
        before = sorted(p.name for p in files["root"].iterdir())
        runner.invoke(main, ["check", "-s", files["schema"], "-q", files["hero"]])
        assert sorted(p.name for p in files["root"].iterdir()) == before


class TestVersion:
    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output
