"""Extraction of ``@export``-ed sub-selections into named type aliases.

Exports are handled in two phases. :meth:`ExportExtractor.collect` walks one top-level
selection set and returns the requested aliases as immutable records, and
:meth:`ExportExtractor.render` turns those records into declarations. No alias state is
kept on the extractor between calls.

Fragment spreads are not followed: the exports inside a fragment belong to the declarations
generated for that fragment, so they are declared once per module no matter how often the
fragment is spread.
"""

from collections.abc import Sequence

from graphql import (
    FieldNode,
    GraphQLOutputType,
    GraphQLSchema,
    InlineFragmentNode,
    SelectionNode,
    get_named_type,
    is_interface_type,
    is_leaf_type,
    is_object_type,
)

from gqlts import log
from gqlts.exporters.typescript.declarations import render_type_alias
from gqlts.exporters.typescript.errors import (
    DuplicateExportError,
    ExportDirectiveError,
    PrimitiveExportError,
    TypeGenerationErrorMessages,
    TypeResolutionError,
)
from gqlts.exporters.typescript.models import ExportedAlias
from gqlts.exporters.typescript.renderer import NamedTypeRenderer
from gqlts.exporters.typescript.selection import SelectionFlattener
from gqlts.exporters.utils.directive import get_directive, get_string_argument, has_given_directive
from gqlts.exporters.utils.graphql_type import is_exportable_type

EXPORT_DIRECTIVE = "export"
EXPORT_NAME_ARGUMENT = "exportName"


def get_export_name(node: FieldNode) -> str:
    """Return the exportName of a field's export directive.

    Raises:
        ExportDirectiveError: If the directive or a string exportName argument is missing
    """
    if get_directive(node, EXPORT_DIRECTIVE) is None:
        raise ExportDirectiveError(
            f"{TypeGenerationErrorMessages.MISSING_EXPORT_DIRECTIVE}. Field name is {node.name.value}"
        )
    export_name = get_string_argument(node, EXPORT_DIRECTIVE, EXPORT_NAME_ARGUMENT)
    if not export_name:
        raise ExportDirectiveError(
            f"{TypeGenerationErrorMessages.MISSING_EXPORT_NAME}. Field name is {node.name.value}"
        )
    return export_name


def get_interface_alias_name(exported_name: str, concrete_type_name: str) -> str:
    return f"{exported_name}_{concrete_type_name}"


class ExportExtractor:
    def __init__(self, schema: GraphQLSchema, renderer: NamedTypeRenderer) -> None:
        self.schema = schema
        self.renderer = renderer

    def intercept(self, node: FieldNode, field_type: GraphQLOutputType) -> str | None:
        """Return the alias reference replacing an exported field's inline shape, or None if it is not exported."""
        if not has_given_directive(node, EXPORT_DIRECTIVE):
            return None

        export_name = get_export_name(node)
        named_type = get_named_type(field_type)
        if is_leaf_type(named_type):
            raise PrimitiveExportError(
                TypeGenerationErrorMessages.PRIMITIVE_EXPORT.format(
                    type_name=named_type.name, field_name=node.name.value
                )
            )
        return self.renderer.wrap_graphql_type(export_name, field_type)

    def collect(self, parent_type_name: str, selections: Sequence[SelectionNode]) -> list[ExportedAlias]:
        """
        Collect the export aliases requested inside a selection set, without entering fragment spreads.

        Args:
            parent_type_name: Name of the type the selection set is made on
            selections: The selections of the top-level selection set

        Returns:
            list[ExportedAlias]: The aliases in first-occurrence order

        Raises:
            DuplicateExportError: If the same field of a type is exported twice under one name
            PrimitiveExportError: If a scalar or enum field is exported
        """
        aliases: list[ExportedAlias] = []
        self._walk(parent_type_name, selections, aliases, set())
        log.debug(f"Collected {len(aliases)} export aliases on {parent_type_name}")
        return aliases

    def _walk(
        self,
        parent_type_name: str,
        selections: Sequence[SelectionNode],
        aliases: list[ExportedAlias],
        bindings: set[tuple[str, str, str, str]],
    ) -> None:
        parent_type = self.schema.get_type(parent_type_name)
        if parent_type is None:
            raise TypeResolutionError(TypeGenerationErrorMessages.UNKNOWN_TYPE.format(type_name=parent_type_name))

        for selection in selections:
            if isinstance(selection, InlineFragmentNode):
                condition = selection.type_condition.name.value if selection.type_condition else parent_type_name
                self._walk(condition, selection.selection_set.selections, aliases, bindings)
            elif isinstance(selection, FieldNode):
                self._walk_field(parent_type_name, selection, aliases, bindings)

    def _walk_field(
        self,
        parent_type_name: str,
        node: FieldNode,
        aliases: list[ExportedAlias],
        bindings: set[tuple[str, str, str, str]],
    ) -> None:
        parent_type = self.schema.get_type(parent_type_name)
        field_name = node.name.value
        field_definition = getattr(parent_type, "fields", {}).get(field_name)
        is_exported = has_given_directive(node, EXPORT_DIRECTIVE)

        if field_definition is None:
            # __typename and other meta fields
            if is_exported:
                raise TypeResolutionError(
                    TypeGenerationErrorMessages.UNKNOWN_FIELD.format(field_name=field_name, type_name=parent_type_name)
                )
            return

        field_type = get_named_type(field_definition.type)
        if is_exported:
            for alias in self._create_aliases(parent_type_name, node, field_type.name):
                if alias.binding in bindings:
                    raise DuplicateExportError(
                        TypeGenerationErrorMessages.DUPLICATE_EXPORT.format(
                            alias=alias.exported_name, field_name=field_name, type_name=alias.concrete_type_name
                        )
                    )
                bindings.add(alias.binding)
                aliases.append(alias)

        if node.selection_set and not is_leaf_type(field_type):
            self._walk(field_type.name, node.selection_set.selections, aliases, bindings)

    def _create_aliases(self, parent_type_name: str, node: FieldNode, field_type_name: str) -> list[ExportedAlias]:
        field_type = self.schema.get_type(field_type_name)
        export_name = get_export_name(node)

        if is_leaf_type(field_type):
            raise PrimitiveExportError(
                TypeGenerationErrorMessages.PRIMITIVE_EXPORT.format(
                    type_name=field_type_name, field_name=node.name.value
                )
            )
        if not is_exportable_type(field_type):
            raise ExportDirectiveError(
                TypeGenerationErrorMessages.NON_COMPOSITE_EXPORT.format(type_name=field_type_name)
            )

        aliases = [ExportedAlias(export_name, field_type_name, parent_type_name, node.name.value, node)]
        if is_interface_type(field_type):
            aliases.extend(
                ExportedAlias(
                    get_interface_alias_name(export_name, possible_type.name),
                    possible_type.name,
                    parent_type_name,
                    node.name.value,
                    node,
                )
                for possible_type in self.schema.get_possible_types(field_type)  # type: ignore[arg-type]
            )
        return aliases

    def render_alias(self, alias: ExportedAlias, flattener: SelectionFlattener) -> str:
        concrete_type = self.schema.get_type(alias.concrete_type_name)
        if concrete_type is None:
            raise TypeResolutionError(
                TypeGenerationErrorMessages.UNKNOWN_TYPE.format(type_name=alias.concrete_type_name)
            )

        if is_interface_type(concrete_type):
            implementors = [
                get_interface_alias_name(alias.exported_name, possible_type.name)
                for possible_type in self.schema.get_possible_types(concrete_type)  # type: ignore[arg-type]
            ]
            return " | ".join(implementors) if implementors else "never"

        if not is_object_type(concrete_type):
            raise TypeResolutionError(
                TypeGenerationErrorMessages.NON_COMPOSITE_EXPORT.format(type_name=alias.concrete_type_name)
            )
        selections = alias.selection.selection_set.selections if alias.selection.selection_set else ()
        flattened = flattener.flatten(alias.concrete_type_name, selections)
        return flattener.render_object(alias.concrete_type_name, flattened[alias.concrete_type_name])

    def render(self, aliases: Sequence[ExportedAlias], flattener: SelectionFlattener) -> list[str]:
        """
        Render one declaration per distinct exported name.

        When several shapes are registered under the same name, e.g. the same exportName on
        sibling inline fragments, the declaration is their intersection.
        """
        shapes: dict[str, list[str]] = {}
        for alias in aliases:
            shapes.setdefault(alias.exported_name, []).append(self.render_alias(alias, flattener))

        declarations = []
        for exported_name, parts in shapes.items():
            if len(parts) > 1:
                parts = [f"({part})" if " | " in part and not part.startswith("{") else part for part in parts]
            declarations.append(render_type_alias(exported_name, " & ".join(parts)))
        return declarations
