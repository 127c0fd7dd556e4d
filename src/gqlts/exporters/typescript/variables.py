from collections.abc import Sequence

from graphql import GraphQLSchema, NonNullTypeNode, VariableDefinitionNode, is_enum_type

from gqlts.exporters.typescript.declarations import render_object_type, render_type_alias
from gqlts.exporters.typescript.models import TsField
from gqlts.exporters.typescript.renderer import NamedTypeRenderer
from gqlts.exporters.utils.config import CodegenConfig
from gqlts.exporters.utils.extraction import get_base_type_node
from gqlts.exporters.utils.naming import convert_type_name

EMPTY_VARIABLES_TYPE = "{ [key: string]: never }"


class VariablesTransformer:
    """Converts the variable definitions of an operation into the fields of its variables type."""

    def __init__(self, schema: GraphQLSchema, renderer: NamedTypeRenderer, config: CodegenConfig):
        self.schema = schema
        self.renderer = renderer
        self.config = config

    def base_type(self, type_name: str) -> str:
        """
        Resolve the unwrapped type of a variable.

        Configured scalars are pre-resolved, enums point into the global types module and
        input objects reference the supporting types generated next to the operations.
        """
        mapping = self.renderer.scalars.get(type_name)
        if mapping is not None:
            return mapping.input or mapping.output
        if is_enum_type(self.schema.get_type(type_name)):
            return self.renderer.enum_reference(type_name)
        return convert_type_name(type_name, self.config)

    def transform_variable(self, variable: VariableDefinitionNode) -> TsField:
        base_type_name = get_base_type_node(variable.type).name.value
        has_default_value = variable.default_value is not None
        is_non_null = isinstance(variable.type, NonNullTypeNode)

        return TsField(
            name=variable.variable.name.value,
            type=self.renderer.wrap_type_node(self.base_type(base_type_name), variable.type),
            optional=(not is_non_null or has_default_value) and not self.config.avoid_optionals.object,
            readonly=self.config.immutable_types,
        )

    def transform(self, variables: Sequence[VariableDefinitionNode]) -> list[TsField]:
        return [self.transform_variable(variable) for variable in variables]

    def render(self, type_name: str, variables: Sequence[VariableDefinitionNode]) -> str:
        """Render the variables type of an operation, an empty index signature type when it has none."""
        fields = self.transform(variables)
        if not fields:
            return render_type_alias(type_name, EMPTY_VARIABLES_TYPE)
        return render_object_type(type_name, fields)
