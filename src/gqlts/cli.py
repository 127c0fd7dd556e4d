import logging
import os
import sys
from pathlib import Path
from typing import Any

import rich_click as click
from graphql import GraphQLSchema
from pydantic import ValidationError
from rich.traceback import install
from yaml import YAMLError

from gqlts import __version__, log
from gqlts.exporters.typescript import translate_to_typescript_enums, translate_to_typescript_operations
from gqlts.exporters.typescript.errors import TypeGenerationError
from gqlts.exporters.typescript.models import LoadedFragment
from gqlts.exporters.utils.config import CodegenConfig, load_codegen_config
from gqlts.exporters.utils.extraction import get_fragment_definitions
from gqlts.exporters.utils.schema_loader import (
    check_correct_schema,
    load_document,
    load_documents,
    load_fragments,
    load_schema,
    resolve_graphql_files,
)

DEFAULT_EXTENSION = ".generated.ts"


class PathResolverOption(click.Option):
    def process_value(self, ctx: click.Context, value: Any) -> list[Path] | None:
        value = super().process_value(ctx, value)
        if not value:
            return None
        paths = set(value)
        return resolve_graphql_files(list(paths))


schema_option = click.option(
    "--schema",
    "-s",
    "schemas",
    type=click.Path(exists=True, path_type=Path),
    cls=PathResolverOption,
    required=True,
    multiple=True,
    help="The GraphQL schema file or directory containing schema files. Can be specified multiple times.",
)


documents_option = click.option(
    "--documents",
    "-d",
    "documents",
    type=click.Path(exists=True, path_type=Path),
    cls=PathResolverOption,
    required=True,
    multiple=True,
    help="GraphQL operation document or directory containing documents. Can be specified multiple times.",
)


external_documents_option = click.option(
    "--external-documents",
    "-x",
    "external_documents",
    type=click.Path(exists=True, path_type=Path),
    cls=PathResolverOption,
    multiple=True,
    help="Documents whose fragments may be spread but whose types are generated elsewhere.",
)


config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file containing the code generation configuration",
)


output_option = click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    required=True,
    help="Output file",
)


optional_output_option = click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    required=False,
    help="Output file",
)


def assert_correct_schema(schema: GraphQLSchema) -> None:
    schema_errors = check_correct_schema(schema)
    if schema_errors:
        log.error("Schema validation failed:")
        for error in schema_errors:
            log.error(error)
        log.error(f"Found {len(schema_errors)} validation error(s). Please fix the schema before generating types.")
        sys.exit(1)


def load_config(config_path: Path | None) -> CodegenConfig:
    try:
        return load_codegen_config(config_path)
    except (OSError, YAMLError, TypeError, ValidationError) as e:
        raise click.ClickException(f"Invalid codegen config: {e}") from e


def get_near_operation_file_path(document_path: Path, extension: str) -> Path:
    """Return the path of the file generated next to a document, e.g. ``pets.graphql`` -> ``pets.generated.ts``."""
    return document_path.with_name(document_path.stem + extension)


def get_import_path(target: Path, importing_file: Path) -> str:
    """Return the relative module specifier under which ``importing_file`` imports ``target``."""
    relative = os.path.relpath(target, importing_file.parent).replace(os.sep, "/")
    if relative.endswith(".ts"):
        relative = relative[: -len(".ts")]
    return relative if relative.startswith(".") else f"./{relative}"


@click.group(context_settings={"auto_envvar_prefix": "gqlts"})
@click.option(
    "-l",
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
    help="Log level",
    show_default=True,
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Log file",
)
@click.version_option(__version__)
def cli(log_level: str, log_file: Path | None) -> None:
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setFormatter(logging.Formatter("%(asctime)s:%(levelname)s:%(message)s"))
        log.addHandler(file_handler)

    log.setLevel(log_level)
    if log_level == "DEBUG":
        _ = install(show_locals=True)


@click.group()
def generate() -> None:
    """Generate commands."""
    pass


# Generate -> operations
# ----------
@generate.command
@schema_option
@documents_option
@external_documents_option
@config_option
@optional_output_option
@click.option(
    "--near-operation-file",
    is_flag=True,
    default=False,
    help="Write one file next to every document instead of a single output file",
)
@click.option(
    "--extension",
    default=DEFAULT_EXTENSION,
    help="File extension of the files generated next to the documents",
    show_default=True,
)
def operations(
    schemas: list[Path],
    documents: list[Path],
    external_documents: list[Path] | None,
    config_path: Path | None,
    output: Path | None,
    near_operation_file: bool,
    extension: str,
) -> None:
    """Generate TypeScript types for GraphQL operations and fragments."""
    if near_operation_file == (output is not None):
        raise click.UsageError("Pass either --output or --near-operation-file.")

    graphql_schema = load_schema(schemas)
    assert_correct_schema(graphql_schema)
    config = load_config(config_path)
    external_fragments = load_fragments(load_documents(external_documents or []), is_external=True)

    try:
        if output is not None:
            result = translate_to_typescript_operations(
                graphql_schema, load_documents(documents), config, external_fragments
            )
            output.parent.mkdir(parents=True, exist_ok=True)
            _ = output.write_text(result + "\n")
            log.info(f"Wrote TypeScript operation types to {output}")
            return

        generate_near_operation_files(graphql_schema, documents, config, external_fragments, extension)
    except TypeGenerationError as e:
        raise click.ClickException(f"Type generation failed: {e}") from e


def generate_near_operation_files(
    graphql_schema: GraphQLSchema,
    document_paths: list[Path],
    config: CodegenConfig,
    external_fragments: list[LoadedFragment],
    extension: str,
) -> None:
    """Generate one module per document, importing the fragment types of the other documents."""
    documents = {path: load_document(path) for path in document_paths}

    for path, document in documents.items():
        output = get_near_operation_file_path(path, extension)
        sibling_fragments = [
            LoadedFragment.from_definition(
                fragment,
                is_external=True,
                import_from=get_import_path(get_near_operation_file_path(other_path, extension), output),
            )
            for other_path, other_document in documents.items()
            if other_path != path
            for fragment in get_fragment_definitions(other_document)
        ]
        available_fragments = [*external_fragments, *sibling_fragments]

        result = translate_to_typescript_operations(graphql_schema, [document], config, available_fragments)
        _ = output.write_text(result + "\n")
        log.info(f"Wrote TypeScript operation types to {output}")


# Generate -> enums
# ----------
@generate.command
@schema_option
@config_option
@output_option
def enums(schemas: list[Path], config_path: Path | None, output: Path) -> None:
    """Generate the global TypeScript module holding the enums and scalars of a GraphQL schema."""
    graphql_schema = load_schema(schemas)
    assert_correct_schema(graphql_schema)
    config = load_config(config_path)

    result = translate_to_typescript_enums(graphql_schema, config)
    output.parent.mkdir(parents=True, exist_ok=True)
    _ = output.write_text(result + "\n")
    log.info(f"Wrote TypeScript enums to {output}")


cli.add_command(generate)

if __name__ == "__main__":
    cli()
