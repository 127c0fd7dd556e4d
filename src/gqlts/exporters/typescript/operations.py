from collections.abc import Iterable, Sequence

from graphql import (
    DocumentNode,
    FragmentDefinitionNode,
    GraphQLObjectType,
    GraphQLSchema,
    OperationDefinitionNode,
    OperationType,
)

from gqlts import log
from gqlts.exporters.typescript.declarations import (
    SupportingTypesRenderer,
    render_imports,
    render_type_alias,
)
from gqlts.exporters.typescript.errors import RootTypeError, TypeGenerationErrorMessages
from gqlts.exporters.typescript.exports import ExportExtractor
from gqlts.exporters.typescript.models import GeneratedOutput, LoadedFragment
from gqlts.exporters.typescript.optimizer import optimize_documents
from gqlts.exporters.typescript.pruning import build_supporting_document
from gqlts.exporters.typescript.renderer import NamedTypeRenderer
from gqlts.exporters.typescript.selection import SelectionFlattener
from gqlts.exporters.typescript.variables import VariablesTransformer
from gqlts.exporters.utils.config import CodegenConfig, FragmentImportConfig
from gqlts.exporters.utils.extraction import (
    get_document_spread_fragment_names,
    get_fragment_definitions,
    get_operation_definitions,
    get_variable_type_names,
)
from gqlts.exporters.utils.naming import convert_type_name

OPERATION_SUFFIXES = {
    OperationType.QUERY: "Query",
    OperationType.MUTATION: "Mutation",
    OperationType.SUBSCRIPTION: "Subscription",
}
FRAGMENT_SUFFIX = "Fragment"
VARIABLES_SUFFIX = "Variables"


def get_root_type(operation: OperationType, schema: GraphQLSchema) -> GraphQLObjectType:
    """Return the schema root type for an operation kind.

    Raises:
        RootTypeError: If the schema defines no root type for the operation kind
    """
    root_type = schema.get_root_type(operation)
    if root_type is None:
        raise RootTypeError(TypeGenerationErrorMessages.MISSING_ROOT_TYPE.format(operation=operation.value))
    return root_type


def get_fragment_type_name(fragment_name: str, config: CodegenConfig) -> str:
    """Return the name of the type generated for a fragment, e.g. ``DogFieldsFragment``."""
    suffix = FRAGMENT_SUFFIX
    if config.omit_operation_suffix or (config.dedupe_operation_suffix and fragment_name.endswith(suffix)):
        suffix = ""
    return convert_type_name(fragment_name, config) + suffix


class TypeScriptOperationsTransformer:
    """
    Transformer class that generates the TypeScript types of GraphQL operations and fragments.

    The output starts with the supporting types, the input and composite types reachable from
    operation variables, followed by the variables, result and export alias types of every
    operation and then the types of every fragment.
    """

    def __init__(
        self,
        graphql_schema: GraphQLSchema,
        documents: Sequence[DocumentNode],
        config: CodegenConfig | None = None,
        external_fragments: Iterable[LoadedFragment] = (),
    ):
        self.graphql_schema = graphql_schema
        self.config = config or CodegenConfig()
        external_fragments = list(external_fragments)

        if self.config.flatten_generated_types:
            self.documents = optimize_documents(documents, external_fragments)
        else:
            self.documents = list(documents)

        self.fragments: dict[str, LoadedFragment] = {fragment.name: fragment for fragment in external_fragments}
        for document in self.documents:
            for definition in get_fragment_definitions(document):
                self.fragments[definition.name.value] = LoadedFragment.from_definition(definition)

        self.renderer = NamedTypeRenderer(graphql_schema, self.config)
        self.exports = ExportExtractor(graphql_schema, self.renderer)
        self.flattener = SelectionFlattener(graphql_schema, self.renderer, self.exports, self.fragments, self.config)
        self.variables = VariablesTransformer(graphql_schema, self.renderer, self.config)
        self.unnamed_counter = 0

    def transform(self) -> GeneratedOutput:
        """Generate the TypeScript types of all documents."""
        operations = [operation for document in self.documents for operation in get_operation_definitions(document)]
        fragments = [fragment for document in self.documents for fragment in get_fragment_definitions(document)]
        log.info(f"Generating types for {len(operations)} operation(s) and {len(fragments)} fragment(s)")

        blocks: list[str] = []
        supporting_types = self.transform_supporting_types()
        if supporting_types:
            blocks.append(supporting_types)
        for operation in operations:
            blocks.extend(self.transform_operation(operation))
        for fragment in fragments:
            blocks.extend(self.transform_fragment(fragment))

        fragment_imports = [*self.config.fragment_imports, *self.transform_fragment_imports()]
        prepend = render_imports(self.config.namespaced_import_name, self.config.base_types_path, fragment_imports)
        content = "\n\n".join(blocks)
        self.check_namespace_import(content)
        return GeneratedOutput(prepend=prepend, content=content)

    def transform_supporting_types(self) -> str:
        seeds = get_variable_type_names(self.documents)
        supporting_document = build_supporting_document(self.graphql_schema, seeds)
        return SupportingTypesRenderer(self.renderer, self.config).render(supporting_document)

    def transform_fragment_imports(self) -> list[FragmentImportConfig]:
        """
        Build the type-only imports of the external fragments spread by the documents.

        Besides the fragment type, every export alias declared inside the fragment is imported,
        since the shapes of the spreading selections reference it by name.
        """
        local_names = {
            fragment.name.value for document in self.documents for fragment in get_fragment_definitions(document)
        }
        spread_names = {
            name for document in self.documents for name in get_document_spread_fragment_names(document)
        } - local_names

        identifiers_by_path: dict[str, dict[str, None]] = {}
        for fragment in self.fragments.values():
            if not fragment.is_external or not fragment.import_from or fragment.name not in spread_names:
                continue
            identifiers = identifiers_by_path.setdefault(fragment.import_from, {})
            identifiers.setdefault(get_fragment_type_name(fragment.name, self.config))
            for alias in self.exports.collect(fragment.on_type, fragment.node.selection_set.selections):
                identifiers.setdefault(alias.exported_name)

        return [
            FragmentImportConfig(path=path, identifiers=list(identifiers))
            for path, identifiers in identifiers_by_path.items()
        ]

    def check_namespace_import(self, content: str) -> None:
        namespace_prefix = self.renderer.namespace_prefix
        if namespace_prefix and not self.config.base_types_path and namespace_prefix in content:
            log.warning(
                f"Generated types reference {namespace_prefix}* but no baseTypesPath is configured, "
                f"so {self.config.namespaced_import_name} is not imported"
            )

    def get_operation_type_name(self, operation: OperationDefinitionNode) -> str:
        suffix = OPERATION_SUFFIXES[operation.operation]
        if operation.name is None:
            self.unnamed_counter += 1
            name = f"Unnamed_{self.unnamed_counter}_"
        else:
            name = operation.name.value

        if self.config.omit_operation_suffix or (self.config.dedupe_operation_suffix and name.endswith(suffix)):
            suffix = ""
        return convert_type_name(name, self.config) + suffix

    def transform_operation(self, operation: OperationDefinitionNode) -> list[str]:
        """Render the variables type, the result type and the export aliases of one operation."""
        root_type = get_root_type(operation.operation, self.graphql_schema)
        type_name = self.get_operation_type_name(operation)
        selections = operation.selection_set.selections
        log.debug(f"Transforming operation {type_name} on {root_type.name}")

        aliases = self.exports.collect(root_type.name, selections)
        return [
            self.variables.render(type_name + VARIABLES_SUFFIX, operation.variable_definitions or ()),
            render_type_alias(type_name, self.flattener.render_selection_set(root_type.name, selections)),
            *self.exports.render(aliases, self.flattener),
        ]

    def transform_fragment(self, fragment: FragmentDefinitionNode) -> list[str]:
        """Render the type and the export aliases of one fragment."""
        type_name = get_fragment_type_name(fragment.name.value, self.config)
        on_type = fragment.type_condition.name.value
        selections = fragment.selection_set.selections
        log.debug(f"Transforming fragment {type_name} on {on_type}")

        aliases = self.exports.collect(on_type, selections)
        return [
            render_type_alias(type_name, self.flattener.render_selection_set(on_type, selections)),
            *self.exports.render(aliases, self.flattener),
        ]


def transform(
    graphql_schema: GraphQLSchema,
    documents: Sequence[DocumentNode],
    config: CodegenConfig | None = None,
    external_fragments: Iterable[LoadedFragment] = (),
) -> GeneratedOutput:
    """
    Transform GraphQL operation documents into TypeScript type declarations.

    Args:
        graphql_schema: The GraphQL schema the documents are written against
        documents: The operation documents to generate types for
        config: Code generation configuration, defaults are used when omitted
        external_fragments: Fragments that documents may spread but that are declared elsewhere.
            Those with an import path are imported together with their export aliases

    Returns:
        GeneratedOutput: Import statements and the generated declarations

    Raises:
        TypeGenerationError: If the documents cannot be resolved against the schema
    """
    log.info(f"Transforming {len(documents)} GraphQL document(s) to TypeScript")

    transformer = TypeScriptOperationsTransformer(
        graphql_schema, documents, config, external_fragments
    )
    output = transformer.transform()

    log.info("Successfully converted GraphQL operations to TypeScript")
    return output


def translate_to_typescript_operations(
    graphql_schema: GraphQLSchema,
    documents: Sequence[DocumentNode],
    config: CodegenConfig | None = None,
    external_fragments: Iterable[LoadedFragment] = (),
) -> str:
    """
    Translate GraphQL operation documents into the text of a TypeScript module.

    Args:
        graphql_schema: The GraphQL schema the documents are written against
        documents: The operation documents to generate types for
        config: Code generation configuration, defaults are used when omitted
        external_fragments: Fragments that documents may spread but that are declared elsewhere.
            Those with an import path are imported together with their export aliases

    Returns:
        str: The TypeScript module text
    """
    return transform(graphql_schema, documents, config, external_fragments).text
