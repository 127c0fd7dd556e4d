from graphql import GraphQLSchema, OperationDefinitionNode, VariableDefinitionNode, parse

from gqlts.exporters.typescript.models import TsField
from gqlts.exporters.typescript.renderer import NamedTypeRenderer
from gqlts.exporters.typescript.variables import VariablesTransformer
from gqlts.exporters.utils.config import CodegenConfig


def variables_of(source: str) -> tuple[VariableDefinitionNode, ...]:
    operation = parse(source).definitions[0]
    assert isinstance(operation, OperationDefinitionNode)
    return tuple(operation.variable_definitions or ())


def make_transformer(schema: GraphQLSchema, config: CodegenConfig | None = None) -> VariablesTransformer:
    config = config or CodegenConfig()
    return VariablesTransformer(schema, NamedTypeRenderer(schema, config), config)


class TestTransformVariable:
    def test_required_and_optional_variables(self, schema: GraphQLSchema) -> None:
        fields = make_transformer(schema).transform(variables_of("query Q($id: ID!, $limit: Int) { owner { name } }"))
        assert fields == [
            TsField(name="id", type="string", optional=False),
            TsField(name="limit", type="number | null", optional=True),
        ]

    def test_default_value_makes_variable_optional(self, schema: GraphQLSchema) -> None:
        (field,) = make_transformer(schema).transform(variables_of("query Q($limit: Int! = 10) { owner { name } }"))
        assert field.render() == "limit?: number"

    def test_enum_is_namespaced(self, schema: GraphQLSchema) -> None:
        (field,) = make_transformer(schema).transform(variables_of("query Q($order: SortOrder) { owner { name } }"))
        assert field.render() == "order?: Types.SortOrder | null"

    def test_input_object_is_local(self, schema: GraphQLSchema) -> None:
        variables = variables_of("query Q($filter: [PetFilter!]!) { owner { name } }")
        (field,) = make_transformer(schema).transform(variables)
        assert field.render() == "filter: Array<PetFilter>"

    def test_configured_scalar_uses_input_side(self, schema: GraphQLSchema) -> None:
        config = CodegenConfig.model_validate({"scalars": {"Date": {"input": "string", "output": "Date"}}})
        (field,) = make_transformer(schema, config).transform(variables_of("query Q($after: Date) { owner { name } }"))
        assert field.render() == "after?: string | null"

    def test_configured_scalar_falls_back_to_output_side(self, schema: GraphQLSchema) -> None:
        config = CodegenConfig.model_validate({"scalars": {"Date": {"input": "", "output": "Date"}}})
        (field,) = make_transformer(schema, config).transform(variables_of("query Q($after: Date!) { owner { name } }"))
        assert field.render() == "after: Date"

    def test_avoid_optional_objects(self, schema: GraphQLSchema) -> None:
        config = CodegenConfig.model_validate({"avoidOptionals": {"object": True}})
        (field,) = make_transformer(schema, config).transform(variables_of("query Q($limit: Int) { owner { name } }"))
        assert field.render() == "limit: number | null"

    def test_immutable_types(self, schema: GraphQLSchema) -> None:
        config = CodegenConfig(immutable_types=True)
        variables = variables_of("query Q($names: [String!]) { owner { name } }")
        (field,) = make_transformer(schema, config).transform(variables)
        assert field.render() == "readonly names?: ReadonlyArray<string> | null"


class TestRenderVariables:
    def test_variables_type(self, schema: GraphQLSchema) -> None:
        rendered = make_transformer(schema).render(
            "GetPetQueryVariables", variables_of("query GetPet($id: ID!, $limit: Int) { owner { name } }")
        )
        assert rendered == "export type GetPetQueryVariables = {\n  id: string;\n  limit?: number | null;\n};"

    def test_no_variables(self, schema: GraphQLSchema) -> None:
        rendered = make_transformer(schema).render("GetOwnerQueryVariables", ())
        assert rendered == "export type GetOwnerQueryVariables = { [key: string]: never };"
