from collections.abc import Iterable, Sequence

from graphql import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    OperationDefinitionNode,
    SelectionNode,
    TypeNode,
)


def get_operation_definitions(document: DocumentNode) -> list[OperationDefinitionNode]:
    return [definition for definition in document.definitions if isinstance(definition, OperationDefinitionNode)]


def get_fragment_definitions(document: DocumentNode) -> list[FragmentDefinitionNode]:
    return [definition for definition in document.definitions if isinstance(definition, FragmentDefinitionNode)]


def get_base_type_node(type_node: TypeNode) -> NamedTypeNode:
    """Unwrap list and non-null modifiers from a type node."""
    while isinstance(type_node, ListTypeNode | NonNullTypeNode):
        type_node = type_node.type
    return type_node  # type: ignore[return-value]


def get_variable_type_names(documents: Iterable[DocumentNode]) -> list[str]:
    """
    Returns the de-duplicated base type names of all operation variables in the given documents.

    The result may contain scalar and enum names; consumers only keep the types they need.

    Args:
        documents: Documents whose operation variable definitions are inspected

    Returns:
        list[str]: Type names in first-occurrence order
    """
    type_names: dict[str, None] = {}
    for document in documents:
        for operation in get_operation_definitions(document):
            for variable_definition in operation.variable_definitions or ():
                type_names.setdefault(get_base_type_node(variable_definition.type).name.value)
    return list(type_names)


def get_spread_fragment_names(selections: Sequence[SelectionNode]) -> list[str]:
    """Return the names of all fragments spread anywhere inside the given selections."""
    names: dict[str, None] = {}
    for selection in selections:
        if isinstance(selection, FragmentSpreadNode):
            names.setdefault(selection.name.value)
        elif isinstance(selection, FieldNode | InlineFragmentNode) and selection.selection_set:
            for name in get_spread_fragment_names(selection.selection_set.selections):
                names.setdefault(name)
    return list(names)


def get_document_spread_fragment_names(document: DocumentNode) -> list[str]:
    """Return the names of all fragments spread by the operations and fragments of a document."""
    names: dict[str, None] = {}
    for definition in document.definitions:
        if isinstance(definition, OperationDefinitionNode | FragmentDefinitionNode):
            for name in get_spread_fragment_names(definition.selection_set.selections):
                names.setdefault(name)
    return list(names)
