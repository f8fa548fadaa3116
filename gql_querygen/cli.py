"""Command-line interface for gql-querygen."""

import logging
import os
from pathlib import Path

import click

from . import __version__
from .core.config import InlineSource, build_registry, parse_scalar_option, resolve_sources
from .core.errors import CodegenError
from .core.generator import CodeGenerator
from .core.hooks import AddHeaderHook, HookRunner, StripDescriptionsHook
from .core.parser import SchemaParser, read_text
from .core.pipeline import OperationResult, generate_document
from .log import configure_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="gql-querygen")
def main():
    """Typed Python bindings for GraphQL queries.

    Checks query documents against a schema and generates one module per
    operation with pydantic models for its variables and response.
    """
    pass


def _load(queries, schema, config_path, scalar_options):
    """Resolve sources, load the schema and generate every query document.

    Returns the results of all operations and the number of query files that
    could not be processed at all.
    """
    try:
        sources = resolve_sources(
            InlineSource(schema_path=schema, query_paths=tuple(queries)),
            config_path=config_path,
        )
        overrides = dict(parse_scalar_option(option) for option in scalar_options)
        registry = build_registry(sources, overrides)
        logger.debug("Schema: %s", sources.schema_path)
        schema_model = SchemaParser.from_path(sources.schema_path)
    except CodegenError as e:
        raise click.ClickException(str(e)) from e

    logger.debug(
        "Schema has %d types (query root: %s)",
        len(schema_model.get_all_types()),
        schema_model.query_type,
    )

    results: list[OperationResult] = []
    failed_files = 0
    for query_path in sources.query_paths:
        try:
            text = read_text(query_path)
            results.extend(generate_document(schema_model, text, registry, source_name=query_path))
        except CodegenError as e:
            logger.error("%s", e.with_context(file=query_path))
            failed_files += 1
    return results, failed_files


def _report(result: OperationResult):
    for diagnostic in result.diagnostics:
        if diagnostic.is_error:
            logger.error("%s: %s", result.operation_name, diagnostic)
        else:
            logger.warning("%s: %s", result.operation_name, diagnostic)


@main.command()
@click.option(
    "--query",
    "-q",
    "queries",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="GraphQL query document. Repeat for several files.",
)
@click.option(
    "--schema",
    "-s",
    type=click.Path(exists=True),
    help="Schema SDL file, directory of SDL files, or introspection JSON.",
)
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(file_okay=False),
    help="Output directory for generated modules.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a .graphqlconfig file (searched upwards by default).",
)
@click.option(
    "--scalar",
    "scalar_options",
    multiple=True,
    metavar="NAME=PRESET",
    help="Map a custom scalar to a preset (datetime, date, uuid, decimal, json, str, int, float, bool).",
)
@click.option(
    "--template-dir",
    type=click.Path(exists=True, file_okay=False),
    help="Directory with templates overriding the built-in module.py.j2.",
)
@click.option("--header", help="Text to put at the top of every generated file.")
@click.option(
    "--strip-descriptions",
    is_flag=True,
    help="Leave schema descriptions out of generated docstrings.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
def generate(
    queries, schema, output, config_path, scalar_options, template_dir, header, strip_descriptions, verbose
):
    """Generate Python modules from GraphQL query documents.

    Examples:

        gql-querygen generate -s ./schema.graphql -q ./queries/hero.graphql -o ./generated

        gql-querygen generate -q hero.graphql -q droid.graphql -o ./generated --scalar DateTime=datetime
    """
    configure_logging(verbose)
    output_path = Path(output).resolve()

    click.echo("Checking queries...")
    results, failed_files = _load(queries, schema, config_path, scalar_options)

    hooks = HookRunner()
    if strip_descriptions:
        hooks.add_pre_hook(StripDescriptionsHook())
    if header:
        hooks.add_post_hook(AddHeaderHook(header))
    generator = CodeGenerator(str(output_path), template_dir=template_dir, hooks=hooks)

    written: dict[str, str] = {}
    failed = failed_files
    for result in results:
        _report(result)
        if not result.ok:
            failed += 1
            continue
        filename = generator.module_filename(result.module)
        if filename in written:
            logger.error(
                "%s: output file %s is already used by %s; rename one of the operations",
                result.operation_name,
                filename,
                written[filename],
            )
            failed += 1
            continue
        written[filename] = result.operation_name
        generator.generate([result.module])
        if verbose:
            click.echo(f"  {result.operation_name} -> {os.path.join(output_path, filename)}")

    click.echo(f"Generated {len(written)} module(s) in {output_path}")
    if failed:
        raise click.ClickException(f"{failed} operation(s) or file(s) failed")


@main.command()
@click.option(
    "--query",
    "-q",
    "queries",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="GraphQL query document. Repeat for several files.",
)
@click.option(
    "--schema",
    "-s",
    type=click.Path(exists=True),
    help="Schema SDL file, directory of SDL files, or introspection JSON.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a .graphqlconfig file (searched upwards by default).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
def check(queries, schema, config_path, verbose):
    """Validate query documents against the schema without writing files.

    Examples:

        gql-querygen check -s ./schema.graphql -q ./queries/hero.graphql
    """
    configure_logging(verbose)
    results, failed = _load(queries, schema, config_path, ())
    generator = CodeGenerator()
    for result in results:
        _report(result)
        if result.ok:
            generator.render(result.module)
            click.echo(f"ok: {result.operation_name}")
        else:
            failed += 1

    if failed:
        raise click.ClickException(f"{failed} operation(s) or file(s) failed")
    click.echo(f"All {len(results)} operation(s) are valid")


if __name__ == "__main__":
    main()
