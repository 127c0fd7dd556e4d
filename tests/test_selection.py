import pytest
from graphql import (
    FieldNode,
    GraphQLSchema,
    InlineFragmentNode,
    OperationDefinitionNode,
    SelectionNode,
    build_schema,
    parse,
)

from gqlts.exporters.typescript.errors import TypeResolutionError
from gqlts.exporters.typescript.exports import ExportExtractor
from gqlts.exporters.typescript.renderer import NamedTypeRenderer
from gqlts.exporters.typescript.selection import SelectionFlattener, inline_fragment_spreads
from gqlts.exporters.utils.config import CodegenConfig
from tests.conftest import fragments_of


def make_flattener(schema: GraphQLSchema, config: CodegenConfig | None = None, source: str = "") -> SelectionFlattener:
    config = config or CodegenConfig()
    renderer = NamedTypeRenderer(schema, config)
    fragments = fragments_of(source) if source else {}
    return SelectionFlattener(schema, renderer, ExportExtractor(schema, renderer), fragments, config)


def query_selections(source: str) -> tuple[SelectionNode, ...]:
    operation = next(d for d in parse(source).definitions if isinstance(d, OperationDefinitionNode))
    return tuple(operation.selection_set.selections)


def field_selections(source: str) -> tuple[SelectionNode, ...]:
    """Return the sub-selections of the first root field of the first operation."""
    root_field = query_selections(source)[0]
    assert isinstance(root_field, FieldNode) and root_field.selection_set
    return tuple(root_field.selection_set.selections)


def field_names(fields: list[FieldNode]) -> list[str]:
    return [field.name.value for field in fields]


class TestFlatten:
    def test_every_possible_type_gets_an_entry(self, schema: GraphQLSchema) -> None:
        flattened = make_flattener(schema).flatten("Animal", field_selections("{ pet(id: 1) { name } }"))
        assert {type_name: field_names(fields) for type_name, fields in flattened.items()} == {
            "Dog": ["name"],
            "Cat": ["name"],
        }

    def test_inline_fragments_narrow_to_matching_types(self, schema: GraphQLSchema) -> None:
        selections = field_selections("{ pet(id: 1) { name ... on Dog { breed { name } } id } }")
        flattened = make_flattener(schema).flatten("Animal", selections)
        assert field_names(flattened["Dog"]) == ["name", "breed", "id"]
        assert field_names(flattened["Cat"]) == ["name", "id"]

    def test_interface_condition_matches_implementations(self, schema: GraphQLSchema) -> None:
        source = '{ search(term: "a") { ... on Animal { name } ... on Owner { address { city } } } }'
        selections = field_selections(source)
        flattened = make_flattener(schema).flatten("SearchResult", selections)
        assert field_names(flattened["Dog"]) == ["name"]
        assert field_names(flattened["Cat"]) == ["name"]
        assert field_names(flattened["Owner"]) == ["address"]

    def test_fragment_spreads_are_resolved(self, schema: GraphQLSchema) -> None:
        source = """
        { pet(id: 1) { ...AnimalFields } }
        fragment AnimalFields on Animal { id ...CatFields }
        fragment CatFields on Cat { lives }
        """
        flattened = make_flattener(schema, source=source).flatten("Animal", field_selections(source))
        assert field_names(flattened["Dog"]) == ["id"]
        assert field_names(flattened["Cat"]) == ["id", "lives"]

    def test_unknown_fragment(self, schema: GraphQLSchema) -> None:
        with pytest.raises(TypeResolutionError, match="Could not find fragment Missing"):
            make_flattener(schema).flatten("Animal", field_selections("{ pet(id: 1) { ...Missing } }"))

    def test_fragment_cycle(self, schema: GraphQLSchema) -> None:
        source = "{ owner { ...OwnerFields } } fragment OwnerFields on Owner { name ...OwnerFields }"
        with pytest.raises(TypeResolutionError, match="Fragment OwnerFields spreads itself"):
            make_flattener(schema, source=source).flatten("Owner", field_selections(source))

    def test_leaf_types_cannot_be_flattened(self, schema: GraphQLSchema) -> None:
        with pytest.raises(TypeResolutionError, match="Type AnimalKind has no fields to select from"):
            make_flattener(schema).flatten("AnimalKind", ())


class TestRenderSelectionSet:
    def test_interface_selection(self, schema: GraphQLSchema) -> None:
        rendered = make_flattener(schema).render_selection_set(
            "Animal", field_selections("{ pet(id: 1) { name kind ... on Cat { lives } } }")
        )
        assert rendered == (
            "{ __typename?: 'Dog', name: string, kind: Types.AnimalKind }"
            " | { __typename?: 'Cat', name: string, kind: Types.AnimalKind, lives?: number | null }"
        )

    def test_explicit_typename_is_required_literal(self, schema: GraphQLSchema) -> None:
        rendered = make_flattener(schema).render_selection_set(
            "SearchResult", field_selections('{ search(term: "a") { __typename ... on Owner { name } } }')
        )
        assert rendered == "{ __typename: 'Dog' } | { __typename: 'Cat' } | { __typename: 'Owner', name: string }"

    def test_nested_fields_are_wrapped(self, schema: GraphQLSchema) -> None:
        rendered = make_flattener(schema).render_selection_set("Query", query_selections("{ owner { pets { id } } }"))
        assert rendered == (
            "{ __typename?: 'Query', owner?: { __typename?: 'Owner', pets: Array<"
            "{ __typename?: 'Dog', id: string } | { __typename?: 'Cat', id: string }> } | null }"
        )

    def test_same_response_key_is_merged(self, schema: GraphQLSchema) -> None:
        rendered = make_flattener(schema).render_selection_set(
            "Owner", field_selections("{ owner { address { city } name address { street } } }")
        )
        assert rendered == (
            "{ __typename?: 'Owner', address?: { __typename?: 'Address', city: string, street?: string | null }"
            " | null, name: string }"
        )

    def test_aliases_are_used_as_keys(self, schema: GraphQLSchema) -> None:
        selections = field_selections("{ owner { ownerName: name } }")
        rendered = make_flattener(schema).render_selection_set("Owner", selections)
        assert rendered == "{ __typename?: 'Owner', ownerName: string }"

    def test_exported_field_references_alias(self, schema: GraphQLSchema) -> None:
        rendered = make_flattener(schema).render_selection_set(
            "Dog", field_selections('{ pet(id: 1) { ... on Dog { breed @export(exportName: "Breed") { name } } } }')
        )
        assert rendered == "{ __typename?: 'Dog', breed?: Breed | null }"

    def test_unknown_field(self, schema: GraphQLSchema) -> None:
        with pytest.raises(TypeResolutionError, match="Could not find field nope on type Owner"):
            make_flattener(schema).render_selection_set("Owner", field_selections("{ owner { nope } }"))

    def test_no_possible_types_renders_never(self) -> None:
        lonely = build_schema("interface Lonely { id: ID } type Query { lonely: Lonely }")
        assert make_flattener(lonely).render_selection_set("Lonely", ()) == "never"


class TestRenderOptions:
    SELECTION = "{ owner { name address { city } } }"

    def render(self, schema: GraphQLSchema, config: CodegenConfig) -> str:
        return make_flattener(schema, config).render_selection_set("Owner", field_selections(self.SELECTION))

    def test_immutable_types(self, schema: GraphQLSchema) -> None:
        assert self.render(schema, CodegenConfig(immutable_types=True)) == (
            "{ readonly __typename?: 'Owner', readonly name: string, readonly address?: "
            "{ readonly __typename?: 'Address', readonly city: string } | null }"
        )

    def test_avoid_optional_fields(self, schema: GraphQLSchema) -> None:
        config = CodegenConfig.model_validate({"avoidOptionals": {"field": True}})
        assert self.render(schema, config) == (
            "{ __typename?: 'Owner', name: string, address: { __typename?: 'Address', city: string } | null }"
        )

    def test_skip_typename(self, schema: GraphQLSchema) -> None:
        assert self.render(schema, CodegenConfig(skip_typename=True)) == (
            "{ name: string, address?: { city: string } | null }"
        )

    def test_non_optional_typename(self, schema: GraphQLSchema) -> None:
        assert self.render(schema, CodegenConfig(non_optional_typename=True)) == (
            "{ __typename: 'Owner', name: string, address?: { __typename: 'Address', city: string } | null }"
        )


class TestInlineFragmentSpreads:
    def test_spreads_become_inline_fragments(self, schema: GraphQLSchema) -> None:
        source = "{ owner { pets { ...CatFields } } } fragment CatFields on Cat { lives }"
        inlined = inline_fragment_spreads(query_selections(source), fragments_of(source))

        owner = inlined[0]
        assert isinstance(owner, FieldNode) and owner.selection_set
        pets = owner.selection_set.selections[0]
        assert isinstance(pets, FieldNode) and pets.selection_set
        spread = pets.selection_set.selections[0]
        assert isinstance(spread, InlineFragmentNode)
        assert spread.type_condition.name.value == "Cat"
        assert field_names(list(spread.selection_set.selections)) == ["lives"]  # type: ignore[arg-type]
