from pathlib import Path

import pytest
from graphql import GraphQLSchema, build_schema, parse

from gqlts.exporters.typescript.models import LoadedFragment
from gqlts.exporters.typescript.renderer import NamedTypeRenderer
from gqlts.exporters.utils.config import CodegenConfig
from gqlts.exporters.utils.extraction import get_fragment_definitions


class TestSchemaData:
    TESTS_DATA_DIR: Path = Path(__file__).parent / "data"
    SCHEMA: Path = TESTS_DATA_DIR / "schema.graphql"
    DOCUMENTS_DIR: Path = TESTS_DATA_DIR / "documents"
    PETS_DOCUMENT: Path = DOCUMENTS_DIR / "pets.graphql"
    OWNERS_DOCUMENT: Path = DOCUMENTS_DIR / "owners.graphql"
    DUPLICATE_EXPORT_DOCUMENT: Path = TESTS_DATA_DIR / "invalid" / "duplicate_export.graphql"
    CODEGEN_CONFIG: Path = TESTS_DATA_DIR / "codegen.yaml"


@pytest.fixture(scope="module")
def schema() -> GraphQLSchema:
    assert TestSchemaData.SCHEMA.exists(), f"Missing test file: {TestSchemaData.SCHEMA}"
    return build_schema(TestSchemaData.SCHEMA.read_text())


@pytest.fixture
def config() -> CodegenConfig:
    return CodegenConfig()


@pytest.fixture
def renderer(schema: GraphQLSchema, config: CodegenConfig) -> NamedTypeRenderer:
    return NamedTypeRenderer(schema, config)


def fragments_of(source: str) -> dict[str, LoadedFragment]:
    """Parse a document and return its fragments by name."""
    return {
        definition.name.value: LoadedFragment.from_definition(definition)
        for definition in get_fragment_definitions(parse(source))
    }
