from collections.abc import Callable, Iterable, Set

from graphql import (
    DefinitionNode,
    DocumentNode,
    GraphQLSchema,
    InputObjectTypeDefinitionNode,
    InterfaceTypeDefinitionNode,
    ObjectTypeDefinitionNode,
    parse,
    print_schema,
)

from gqlts import log
from gqlts.exporters.typescript.closure import get_required_type_names

PRUNABLE_DEFINITIONS = (ObjectTypeDefinitionNode, InterfaceTypeDefinitionNode, InputObjectTypeDefinitionNode)


def keep_definition(definition: DefinitionNode, type_names: Set[str]) -> bool:
    """Decide whether a definition survives pruning.

    Only object, interface and input object definitions listed in ``type_names`` are kept.
    Enums and scalars live in the global types module, unions can only be selected through
    inline fragments, and directive or schema definitions never produce declarations.
    """
    return isinstance(definition, PRUNABLE_DEFINITIONS) and definition.name.value in type_names


def filter_document(document: DocumentNode, predicate: Callable[[DefinitionNode], bool]) -> DocumentNode:
    """Build a new document holding the definitions accepted by the predicate, in their original order."""
    return DocumentNode(definitions=tuple(definition for definition in document.definitions if predicate(definition)))


def prune_schema_document(document: DocumentNode, type_names: Set[str]) -> DocumentNode:
    """Strip a schema document down to the composite and input definitions in ``type_names``."""
    pruned = filter_document(document, lambda definition: keep_definition(definition, type_names))
    log.debug(f"Pruned schema document from {len(document.definitions)} to {len(pruned.definitions)} definitions")
    return pruned


def build_schema_document(graphql_schema: GraphQLSchema) -> DocumentNode:
    """Parse a printed copy of the schema so it can be rewritten without touching the schema itself."""
    return parse(print_schema(graphql_schema))


def build_supporting_document(graphql_schema: GraphQLSchema, seed_type_names: Iterable[str]) -> DocumentNode:
    """Return the pruned schema document with the types required by the given variable types."""
    required = get_required_type_names(graphql_schema, seed_type_names)
    return prune_schema_document(build_schema_document(graphql_schema), required)
