from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from graphql import (
    FieldNode,
    FragmentSpreadNode,
    GraphQLOutputType,
    GraphQLSchema,
    InlineFragmentNode,
    SelectionNode,
    SelectionSetNode,
    get_named_type,
    is_abstract_type,
    is_leaf_type,
    is_non_null_type,
    is_object_type,
)

from gqlts.exporters.typescript.declarations import render_inline_object
from gqlts.exporters.typescript.errors import TypeGenerationErrorMessages, TypeResolutionError
from gqlts.exporters.typescript.models import LoadedFragment, TsField
from gqlts.exporters.typescript.renderer import NamedTypeRenderer
from gqlts.exporters.utils.config import CodegenConfig

if TYPE_CHECKING:
    from gqlts.exporters.typescript.exports import ExportExtractor

TYPENAME_FIELD = "__typename"

FlattenedFields = dict[str, list[FieldNode]]


def get_response_key(field: FieldNode) -> str:
    return field.alias.value if field.alias else field.name.value


def resolve_fragment_spread(
    spread: FragmentSpreadNode, fragments: Mapping[str, LoadedFragment], visiting: tuple[str, ...] = ()
) -> LoadedFragment:
    """Look up the fragment a spread refers to.

    Args:
        spread: The fragment spread node
        fragments: Local and external fragments by name
        visiting: Names of the fragments currently being expanded

    Raises:
        TypeResolutionError: If the fragment is unknown or spreads itself
    """
    fragment_name = spread.name.value
    if fragment_name in visiting:
        raise TypeResolutionError(TypeGenerationErrorMessages.FRAGMENT_CYCLE.format(fragment_name=fragment_name))
    fragment = fragments.get(fragment_name)
    if fragment is None:
        raise TypeResolutionError(TypeGenerationErrorMessages.UNKNOWN_FRAGMENT.format(fragment_name=fragment_name))
    return fragment


def inline_fragment_spreads(
    selections: Sequence[SelectionNode], fragments: Mapping[str, LoadedFragment], visiting: tuple[str, ...] = ()
) -> tuple[SelectionNode, ...]:
    """Replace every fragment spread by an inline fragment on the fragment's type condition, at any depth."""
    inlined: list[SelectionNode] = []
    for selection in selections:
        if isinstance(selection, FragmentSpreadNode):
            fragment = resolve_fragment_spread(selection, fragments, visiting)
            inlined.append(
                InlineFragmentNode(
                    type_condition=fragment.node.type_condition,
                    directives=selection.directives or (),
                    selection_set=SelectionSetNode(
                        selections=inline_fragment_spreads(
                            fragment.node.selection_set.selections, fragments, (*visiting, fragment.name)
                        )
                    ),
                )
            )
        elif isinstance(selection, InlineFragmentNode):
            inlined.append(
                InlineFragmentNode(
                    type_condition=selection.type_condition,
                    directives=selection.directives or (),
                    selection_set=SelectionSetNode(
                        selections=inline_fragment_spreads(selection.selection_set.selections, fragments, visiting)
                    ),
                )
            )
        elif isinstance(selection, FieldNode) and selection.selection_set:
            inlined.append(
                FieldNode(
                    alias=selection.alias,
                    name=selection.name,
                    arguments=selection.arguments or (),
                    directives=selection.directives or (),
                    selection_set=SelectionSetNode(
                        selections=inline_fragment_spreads(selection.selection_set.selections, fragments, visiting)
                    ),
                )
            )
        else:
            inlined.append(selection)
    return tuple(inlined)


class SelectionFlattener:
    """
    Flattens selection sets into one field list per concrete object type and renders them.

    The flattener does not know about export directives itself: every field is first offered
    to the export extractor, which returns the alias reference for exported fields.
    """

    def __init__(
        self,
        schema: GraphQLSchema,
        renderer: NamedTypeRenderer,
        exports: "ExportExtractor",
        fragments: Mapping[str, LoadedFragment],
        config: CodegenConfig,
    ):
        self.schema = schema
        self.renderer = renderer
        self.exports = exports
        self.fragments = fragments
        self.config = config

    def possible_type_names(self, type_name: str) -> list[str]:
        """Return the concrete object types a value of the given composite type can have at runtime."""
        named_type = self.schema.get_type(type_name)
        if named_type is None:
            raise TypeResolutionError(TypeGenerationErrorMessages.UNKNOWN_TYPE.format(type_name=type_name))
        if is_object_type(named_type):
            return [type_name]
        if is_abstract_type(named_type):
            return [possible_type.name for possible_type in self.schema.get_possible_types(named_type)]  # type: ignore[arg-type]
        raise TypeResolutionError(TypeGenerationErrorMessages.NON_COMPOSITE_SELECTION.format(type_name=type_name))

    def matches_condition(self, concrete_type_name: str, condition_type_name: str) -> bool:
        if concrete_type_name == condition_type_name:
            return True
        condition_type = self.schema.get_type(condition_type_name)
        if condition_type is None:
            raise TypeResolutionError(TypeGenerationErrorMessages.UNKNOWN_TYPE.format(type_name=condition_type_name))
        concrete_type = self.schema.get_type(concrete_type_name)
        return is_abstract_type(condition_type) and self.schema.is_sub_type(condition_type, concrete_type)  # type: ignore[arg-type]

    def flatten(self, parent_type_name: str, selections: Sequence[SelectionNode]) -> FlattenedFields:
        """
        Distribute the fields of a selection set over the possible types of the parent.

        Every possible type gets an entry, even when no inline fragment narrows on it. Fields keep
        their first-occurrence order; fields with the same response key are merged when rendering.

        Args:
            parent_type_name: Name of the composite type the selection is made on
            selections: The selections of the selection set

        Returns:
            FlattenedFields: Concrete type name to the field nodes selected on it
        """
        flattened: FlattenedFields = {type_name: [] for type_name in self.possible_type_names(parent_type_name)}
        self._distribute(flattened, list(flattened), selections, ())
        return flattened

    def _distribute(
        self,
        flattened: FlattenedFields,
        applicable: list[str],
        selections: Sequence[SelectionNode],
        visiting: tuple[str, ...],
    ) -> None:
        for selection in selections:
            if isinstance(selection, FieldNode):
                for type_name in applicable:
                    flattened[type_name].append(selection)
            elif isinstance(selection, InlineFragmentNode):
                narrowed = applicable
                if selection.type_condition:
                    condition = selection.type_condition.name.value
                    narrowed = [type_name for type_name in applicable if self.matches_condition(type_name, condition)]
                self._distribute(flattened, narrowed, selection.selection_set.selections, visiting)
            elif isinstance(selection, FragmentSpreadNode):
                fragment = resolve_fragment_spread(selection, self.fragments, visiting)
                narrowed = [
                    type_name for type_name in applicable if self.matches_condition(type_name, fragment.on_type)
                ]
                self._distribute(
                    flattened, narrowed, fragment.node.selection_set.selections, (*visiting, fragment.name)
                )

    def typename_field(self, type_name: str, optional: bool) -> TsField:
        return TsField(
            name=TYPENAME_FIELD,
            type=f"'{type_name}'",
            optional=optional,
            readonly=self.config.immutable_types,
        )

    def render_fields(self, type_name: str, fields: Sequence[FieldNode]) -> list[TsField]:
        """Render the fields selected on a concrete type, merging fields that share a response key."""
        object_type = self.schema.get_type(type_name)
        grouped: dict[str, list[FieldNode]] = {}
        for field in fields:
            grouped.setdefault(get_response_key(field), []).append(field)

        rendered: list[TsField] = []
        for response_key, nodes in grouped.items():
            field_name = nodes[0].name.value
            if field_name == TYPENAME_FIELD:
                rendered.append(TsField(response_key, f"'{type_name}'", readonly=self.config.immutable_types))
                continue

            field_definition = object_type.fields.get(field_name)  # type: ignore[union-attr]
            if field_definition is None:
                raise TypeResolutionError(
                    TypeGenerationErrorMessages.UNKNOWN_FIELD.format(field_name=field_name, type_name=type_name)
                )

            type_str = next(
                (
                    exported
                    for node in nodes
                    if (exported := self.exports.intercept(node, field_definition.type)) is not None
                ),
                None,
            )
            if type_str is None:
                type_str = self.render_field_type(field_definition.type, nodes)

            rendered.append(
                TsField(
                    name=response_key,
                    type=type_str,
                    optional=not is_non_null_type(field_definition.type) and not self.config.avoid_optionals.field,
                    readonly=self.config.immutable_types,
                )
            )
        return rendered

    def render_field_type(self, field_type: GraphQLOutputType, nodes: Sequence[FieldNode]) -> str:
        named_type = get_named_type(field_type)
        if is_leaf_type(named_type):
            base = self.renderer.named_type(named_type.name)
        else:
            sub_selections = [
                selection for node in nodes if node.selection_set for selection in node.selection_set.selections
            ]
            base = self.render_selection_set(named_type.name, sub_selections)
        return self.renderer.wrap_graphql_type(base, field_type)

    def render_object(self, type_name: str, fields: Sequence[FieldNode]) -> str:
        """Render the shape of one concrete type, e.g. ``{ __typename?: 'Dog', name: string }``."""
        rendered = self.render_fields(type_name, fields)
        if not self.config.skip_typename and all(field.name != TYPENAME_FIELD for field in rendered):
            rendered.insert(0, self.typename_field(type_name, not self.config.non_optional_typename))
        return render_inline_object(rendered)

    def render_selection_set(self, parent_type_name: str, selections: Sequence[SelectionNode]) -> str:
        """Render a selection set as the union of the distinct shapes of all possible types."""
        flattened = self.flatten(parent_type_name, selections)
        shapes = dict.fromkeys(self.render_object(type_name, fields) for type_name, fields in flattened.items())
        return " | ".join(shapes) if shapes else "never"
