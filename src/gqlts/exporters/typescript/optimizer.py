"""Document optimization applied when generated types should be flattened.

Every fragment spread is inlined into the selection using it, fields selected more than once
under the same response key are merged and the now unused fragment definitions are dropped,
so operations render as a single self-contained shape.
"""

from collections.abc import Iterable, Sequence

from graphql import (
    DocumentNode,
    FieldNode,
    InlineFragmentNode,
    OperationDefinitionNode,
    SelectionNode,
    SelectionSetNode,
)

from gqlts import log
from gqlts.exporters.typescript.models import LoadedFragment
from gqlts.exporters.typescript.selection import get_response_key, inline_fragment_spreads
from gqlts.exporters.utils.extraction import get_fragment_definitions, get_operation_definitions


def merge_fields(selections: Sequence[SelectionNode]) -> tuple[SelectionNode, ...]:
    """Merge sibling fields sharing a response key into the first occurrence, at any depth."""
    merged: list[SelectionNode] = []
    fields_by_key: dict[str, tuple[int, FieldNode]] = {}

    for selection in selections:
        if not isinstance(selection, FieldNode):
            merged.append(selection)
            continue

        key = get_response_key(selection)
        if key not in fields_by_key:
            fields_by_key[key] = (len(merged), selection)
            merged.append(selection)
            continue

        index, existing = fields_by_key[key]
        if existing.selection_set is None or selection.selection_set is None:
            continue
        combined = FieldNode(
            alias=existing.alias,
            name=existing.name,
            arguments=existing.arguments or (),
            directives=existing.directives or selection.directives or (),
            selection_set=SelectionSetNode(
                selections=(*existing.selection_set.selections, *selection.selection_set.selections)
            ),
        )
        fields_by_key[key] = (index, combined)
        merged[index] = combined

    return tuple(_merge_nested(selection) for selection in merged)


def _merge_nested(selection: SelectionNode) -> SelectionNode:
    if isinstance(selection, FieldNode) and selection.selection_set:
        return FieldNode(
            alias=selection.alias,
            name=selection.name,
            arguments=selection.arguments or (),
            directives=selection.directives or (),
            selection_set=SelectionSetNode(selections=merge_fields(selection.selection_set.selections)),
        )
    if isinstance(selection, InlineFragmentNode):
        return InlineFragmentNode(
            type_condition=selection.type_condition,
            directives=selection.directives or (),
            selection_set=SelectionSetNode(selections=merge_fields(selection.selection_set.selections)),
        )
    return selection


def optimize_operation(
    operation: OperationDefinitionNode, fragments: dict[str, LoadedFragment]
) -> OperationDefinitionNode:
    selections = merge_fields(inline_fragment_spreads(operation.selection_set.selections, fragments))
    return OperationDefinitionNode(
        operation=operation.operation,
        name=operation.name,
        variable_definitions=operation.variable_definitions or (),
        directives=operation.directives or (),
        selection_set=SelectionSetNode(selections=selections),
    )


def optimize_documents(
    documents: Iterable[DocumentNode], external_fragments: Iterable[LoadedFragment] = ()
) -> list[DocumentNode]:
    """
    Inline all fragments of the given documents into their operations.

    Args:
        documents: The operation documents
        external_fragments: Fragments defined outside the documents that may be spread

    Returns:
        list[DocumentNode]: One document per input document holding only its optimized operations
    """
    documents = list(documents)
    fragments = {fragment.name: fragment for fragment in external_fragments}
    for document in documents:
        for definition in get_fragment_definitions(document):
            fragments[definition.name.value] = LoadedFragment.from_definition(definition)

    optimized = [
        DocumentNode(
            definitions=tuple(
                optimize_operation(operation, fragments) for operation in get_operation_definitions(document)
            )
        )
        for document in documents
    ]
    log.debug(f"Optimized {len(optimized)} document(s) by inlining {len(fragments)} fragment(s)")
    return optimized
