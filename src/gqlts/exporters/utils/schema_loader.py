from pathlib import Path

from ariadne import load_schema_from_path
from graphql import DocumentNode, GraphQLSchema, Source, build_schema, parse, print_schema, validate_schema

from gqlts import log
from gqlts.exporters.typescript.models import LoadedFragment
from gqlts.exporters.utils.extraction import get_fragment_definitions

GRAPHQL_FILE_PATTERNS = ("*.graphql", "*.graphqls", "*.gql")


def resolve_graphql_files(paths: list[Path]) -> list[Path]:
    """Resolve a list of paths (files and directories) into a flat list of unique GraphQL files.

    Args:
        paths: List of file or directory paths

    Returns:
        Flat list of unique GraphQL file paths (deduplicated and sorted)
    """
    resolved_files: set[Path] = set()

    for path in paths:
        if path.is_file():
            resolved_files.add(path)
        elif path.is_dir():
            for pattern in GRAPHQL_FILE_PATTERNS:
                resolved_files.update(path.rglob(pattern))

    return sorted(resolved_files)


def build_schema_str(graphql_schema_paths: list[Path]) -> str:
    """Build a GraphQL schema from a file or folder."""
    schema_str = ""
    for graphql_file in graphql_schema_paths:
        schema_str += load_schema_from_path(graphql_file) + "\n"
    return schema_str


def load_schema(graphql_schema_paths: Path | list[Path]) -> GraphQLSchema:
    """Load and build a GraphQL schema from files or folders."""
    if isinstance(graphql_schema_paths, Path):
        graphql_schema_paths = [graphql_schema_paths]

    schema = build_schema(build_schema_str(graphql_schema_paths))
    log.info("Successfully built the given GraphQL schema string.")
    log.debug(f"Read schema: \n{print_schema(schema)}")
    return schema


def check_correct_schema(schema: GraphQLSchema) -> list[str]:
    """Check that the schema satisfies the GraphQL type system validation rules.

    Args:
        schema: The GraphQL schema to validate

    Returns:
        list[str]: List of error messages if any validation errors are found
    """
    return [f"  - {error.message}" for error in validate_schema(schema)]


def load_document(document_path: Path) -> DocumentNode:
    """Parse a single GraphQL document file, keeping its path as source name for error messages."""
    return parse(Source(document_path.read_text(encoding="utf-8"), str(document_path)))


def load_documents(document_paths: list[Path]) -> list[DocumentNode]:
    """Parse GraphQL operation documents from files or folders."""
    documents = [load_document(path) for path in resolve_graphql_files(document_paths)]
    log.info(f"Loaded {len(documents)} GraphQL document(s)")
    return documents


def load_fragments(
    documents: list[DocumentNode], is_external: bool = False, import_from: str | None = None
) -> list[LoadedFragment]:
    """Collect the fragment definitions of the given documents."""
    return [
        LoadedFragment.from_definition(fragment, is_external, import_from)
        for document in documents
        for fragment in get_fragment_definitions(document)
    ]
