import pytest
from graphql import FieldNode, GraphQLSchema, OperationDefinitionNode, SelectionNode, parse

from gqlts.exporters.typescript.errors import DuplicateExportError, ExportDirectiveError, PrimitiveExportError
from gqlts.exporters.typescript.exports import ExportExtractor, get_export_name
from gqlts.exporters.typescript.models import ExportedAlias
from gqlts.exporters.typescript.renderer import NamedTypeRenderer
from gqlts.exporters.typescript.selection import SelectionFlattener
from gqlts.exporters.utils.config import CodegenConfig
from tests.conftest import fragments_of


def selections_of(source: str) -> tuple[SelectionNode, ...]:
    operation = next(d for d in parse(source).definitions if isinstance(d, OperationDefinitionNode))
    return tuple(operation.selection_set.selections)


class ExportHarness:
    def __init__(self, schema: GraphQLSchema, source: str):
        config = CodegenConfig()
        renderer = NamedTypeRenderer(schema, config)
        fragments = fragments_of(source)
        self.extractor = ExportExtractor(schema, renderer)
        self.flattener = SelectionFlattener(schema, renderer, self.extractor, fragments, config)
        self.selections = selections_of(source)

    def collect(self) -> list[ExportedAlias]:
        return self.extractor.collect("Query", self.selections)

    def render(self) -> list[str]:
        return self.extractor.render(self.collect(), self.flattener)


class TestGetExportName:
    def test_reads_export_name(self) -> None:
        field = selections_of('{ owner @export(exportName: "Keeper") { name } }')[0]
        assert isinstance(field, FieldNode)
        assert get_export_name(field) == "Keeper"

    @pytest.mark.parametrize(
        "source,message",
        [
            ("{ owner { name } }", "Couldn't find export directive"),
            ("{ owner @export { name } }", "Couldn't find exportName"),
            ("{ owner @export(exportName: 5) { name } }", "Couldn't find exportName"),
        ],
    )
    def test_missing_directive_or_name(self, source: str, message: str) -> None:
        field = selections_of(source)[0]
        assert isinstance(field, FieldNode)
        with pytest.raises(ExportDirectiveError, match=message):
            get_export_name(field)


class TestCollect:
    def test_object_export(self, schema: GraphQLSchema) -> None:
        harness = ExportHarness(
            schema, '{ pet(id: 1) { name ... on Dog { breed @export(exportName: "Breed") { name } } } }'
        )
        aliases = harness.collect()
        assert [(a.exported_name, a.concrete_type_name, a.parent_type_name, a.field_name) for a in aliases] == [
            ("Breed", "Breed", "Dog", "breed")
        ]

    def test_interface_export_creates_one_alias_per_implementation(self, schema: GraphQLSchema) -> None:
        harness = ExportHarness(schema, '{ owner { pets @export(exportName: "Pet") { name } } }')
        assert [(a.exported_name, a.concrete_type_name) for a in harness.collect()] == [
            ("Pet", "Animal"),
            ("Pet_Dog", "Dog"),
            ("Pet_Cat", "Cat"),
        ]

    def test_nested_exports(self, schema: GraphQLSchema) -> None:
        harness = ExportHarness(
            schema,
            """
            {
              pet(id: 1) {
                ... on Dog {
                  breed @export(exportName: "Breed") {
                    name
                    origin @export(exportName: "Origin") { code }
                  }
                }
              }
            }
            """,
        )
        assert [a.exported_name for a in harness.collect()] == ["Breed", "Origin"]

    def test_fragment_spreads_are_not_entered(self, schema: GraphQLSchema) -> None:
        harness = ExportHarness(
            schema,
            """
            { pet(id: 1) { name ...DogFields } }
            fragment DogFields on Dog { breed @export(exportName: "Breed") { name } }
            """,
        )
        assert harness.collect() == []

    def test_fragment_spread_twice(self, schema: GraphQLSchema) -> None:
        harness = ExportHarness(
            schema,
            """
            { first: pet(id: 1) { ...DogFields } second: pet(id: 2) { ...DogFields } }
            fragment DogFields on Dog { breed @export(exportName: "Breed") { name } }
            """,
        )
        assert harness.collect() == []

    def test_fragment_collects_its_own_exports(self, schema: GraphQLSchema) -> None:
        source = 'query Q { owner { name } } fragment DogFields on Dog { breed @export(exportName: "Breed") { name } }'
        fragment = fragments_of(source)["DogFields"]
        harness = ExportHarness(schema, source)

        aliases = harness.extractor.collect(fragment.on_type, fragment.node.selection_set.selections)
        assert [(a.exported_name, a.parent_type_name) for a in aliases] == [("Breed", "Dog")]

    def test_primitive_export(self, schema: GraphQLSchema) -> None:
        harness = ExportHarness(schema, '{ pet(id: 1) { name @export(exportName: "Name") } }')
        with pytest.raises(PrimitiveExportError, match="Type String is a primitive and may not be exported"):
            harness.collect()

    def test_enum_export(self, schema: GraphQLSchema) -> None:
        harness = ExportHarness(schema, '{ pet(id: 1) { kind @export(exportName: "Kind") } }')
        with pytest.raises(PrimitiveExportError, match="Field name is kind"):
            harness.collect()

    def test_union_export(self, schema: GraphQLSchema) -> None:
        harness = ExportHarness(schema, '{ search(term: "a") @export(exportName: "Hit") { __typename } }')
        with pytest.raises(ExportDirectiveError, match="neither an object nor an interface"):
            harness.collect()

    def test_duplicate_export(self, schema: GraphQLSchema) -> None:
        harness = ExportHarness(
            schema,
            """
            {
              pet(id: 1) {
                ... on Dog { breed @export(exportName: "Breed") { name } }
                ... on Dog { breed @export(exportName: "Breed") { origin { code } } }
              }
            }
            """,
        )
        with pytest.raises(DuplicateExportError, match="Already set an export marked type name Breed for field breed"):
            harness.collect()

    def test_collections_are_independent(self, schema: GraphQLSchema) -> None:
        """Collecting the same selection twice does not report duplicates."""
        harness = ExportHarness(
            schema, '{ pet(id: 1) { ... on Dog { breed @export(exportName: "Breed") { name } } } }'
        )
        assert harness.collect() == harness.collect()


class TestRender:
    def test_object_alias(self, schema: GraphQLSchema) -> None:
        harness = ExportHarness(
            schema, '{ pet(id: 1) { name ... on Dog { breed @export(exportName: "Breed") { name } } } }'
        )
        assert harness.render() == ["export type Breed = { __typename?: 'Breed', name: string };"]

    def test_interface_alias_has_n_plus_one_declarations(self, schema: GraphQLSchema) -> None:
        harness = ExportHarness(schema, '{ owner { pets @export(exportName: "Pet") { name ... on Cat { lives } } } }')
        implementations = schema.get_possible_types(schema.type_map["Animal"])  # type: ignore[arg-type]

        declarations = harness.render()
        assert len(declarations) == len(implementations) + 1
        assert declarations == [
            "export type Pet = Pet_Dog | Pet_Cat;",
            "export type Pet_Dog = { __typename?: 'Dog', name: string };",
            "export type Pet_Cat = { __typename?: 'Cat', name: string, lives?: number | null };",
        ]

    def test_nested_alias_is_referenced(self, schema: GraphQLSchema) -> None:
        harness = ExportHarness(
            schema,
            """
            {
              pet(id: 1) {
                ... on Dog {
                  breed @export(exportName: "Breed") {
                    name
                    origin @export(exportName: "Origin") { code }
                  }
                }
              }
            }
            """,
        )
        assert harness.render() == [
            "export type Breed = { __typename?: 'Breed', name: string, origin?: Origin | null };",
            "export type Origin = { __typename?: 'Country', code: string };",
        ]

    def test_same_name_on_sibling_branches_is_intersected(self, schema: GraphQLSchema) -> None:
        harness = ExportHarness(
            schema,
            """
            {
              search(term: "a") {
                ... on Dog { owner @export(exportName: "Keeper") { name } }
                ... on Cat { owner @export(exportName: "Keeper") { address { city } } }
              }
            }
            """,
        )
        assert harness.render() == [
            "export type Keeper = { __typename?: 'Owner', name: string }"
            " & { __typename?: 'Owner', address?: { __typename?: 'Address', city: string } | null };"
        ]

    def test_interface_union_is_parenthesized_in_intersections(self, schema: GraphQLSchema) -> None:
        harness = ExportHarness(
            schema,
            """
            {
              pet(id: 1) @export(exportName: "Pet") { id }
              owner { pets @export(exportName: "Pet") { name } }
            }
            """,
        )
        declarations = harness.render()
        assert declarations[0] == "export type Pet = (Pet_Dog | Pet_Cat) & (Pet_Dog | Pet_Cat);"
