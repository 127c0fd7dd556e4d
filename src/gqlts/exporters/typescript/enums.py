from graphql import DefinitionNode, EnumTypeDefinitionNode, GraphQLSchema

from gqlts import log
from gqlts.exporters.typescript.declarations import format_description, render_template
from gqlts.exporters.typescript.models import GeneratedOutput
from gqlts.exporters.typescript.pruning import build_schema_document, filter_document
from gqlts.exporters.utils.config import CodegenConfig, build_scalar_map
from gqlts.exporters.utils.graphql_type import is_introspection_type
from gqlts.exporters.utils.naming import apply_naming_convention, convert_enum_name


def is_enum_definition(definition: DefinitionNode) -> bool:
    return isinstance(definition, EnumTypeDefinitionNode) and not is_introspection_type(definition.name.value)


def render_enum(definition: EnumTypeDefinitionNode, config: CodegenConfig) -> str:
    members = [
        {
            "name": apply_naming_convention(value.name.value, config),
            "value": value.name.value,
            "description": format_description(value.description),
        }
        for value in definition.values or ()
    ]
    return render_template(
        "enum.ts.j2",
        name=convert_enum_name(definition.name.value, config),
        members=members,
        description=format_description(definition.description),
    )


def transform(graphql_schema: GraphQLSchema, config: CodegenConfig | None = None) -> GeneratedOutput:
    """
    Generate the global types module: the scalars map and every enum of the schema.

    Operation types reference enums as ``<namespacedImportName>.<Enum>`` and unresolved scalars
    as ``<namespacedImportName>.Scalars['Name']['input' | 'output']``, both pointing into this module.

    Args:
        graphql_schema: The GraphQL schema
        config: Code generation configuration, defaults are used when omitted

    Returns:
        GeneratedOutput: The scalars map as prepended definition and the enums as content
    """
    config = config or CodegenConfig()
    enum_document = filter_document(build_schema_document(graphql_schema), is_enum_definition)
    log.info(f"Generating {len(enum_document.definitions)} TypeScript enum(s)")

    scalars = render_template("scalars.ts.j2", scalars=build_scalar_map(graphql_schema, config))
    enums = [render_enum(definition, config) for definition in enum_document.definitions]  # type: ignore[arg-type]
    return GeneratedOutput(prepend=[scalars], content="\n\n".join(enums))


def translate_to_typescript_enums(graphql_schema: GraphQLSchema, config: CodegenConfig | None = None) -> str:
    """Translate the enums of a GraphQL schema into the text of the global TypeScript types module."""
    return transform(graphql_schema, config).text
