"""Rendering of GraphQL type references as TypeScript type expressions.

Nullability is rendered in two passes: every named and list reference first gets the
`` | null`` suffix, and a non-null wrapper then strips exactly one suffix from what it
wraps. Computing nullability in a single pass diverges for nested list/non-null
combinations, so both AST type nodes and schema types go through the same two steps.
"""

from typing import Literal

from graphql import (
    GraphQLSchema,
    GraphQLType,
    ListTypeNode,
    NonNullTypeNode,
    TypeNode,
    is_enum_type,
    is_list_type,
    is_non_null_type,
    is_scalar_type,
)

from gqlts.exporters.utils.config import CodegenConfig, ScalarMapping, build_scalar_map
from gqlts.exporters.utils.extraction import get_base_type_node
from gqlts.exporters.utils.naming import convert_enum_name, convert_type_name

NULLABLE_SUFFIX = " | null"

ScalarSide = Literal["input", "output"]


class NamedTypeRenderer:
    """Converts schema type references into TypeScript type expressions."""

    def __init__(self, schema: GraphQLSchema, config: CodegenConfig):
        self.schema = schema
        self.config = config
        self.scalars: dict[str, ScalarMapping] = build_scalar_map(schema, config)

    @property
    def namespace_prefix(self) -> str:
        return f"{self.config.namespaced_import_name}." if self.config.namespaced_import_name else ""

    def scalar(self, name: str, side: ScalarSide) -> str:
        """Return the pre-resolved representation of a scalar.

        Falls back to an indexed reference into the ``Scalars`` map of the global types module
        when no representation is configured for the requested side.
        """
        mapping = self.scalars.get(name)
        resolved = getattr(mapping, side) if mapping else None
        return resolved or f"{self.namespace_prefix}Scalars['{name}']['{side}']"

    def enum_reference(self, name: str) -> str:
        return f"{self.namespace_prefix}{convert_enum_name(name, self.config)}"

    def named_type(self, name: str, is_input: bool = False) -> str:
        """Render a named type reference without any nullability."""
        named_type = self.schema.get_type(name)
        if is_scalar_type(named_type) or (named_type is None and name in self.scalars):
            return self.scalar(name, "input" if is_input else "output")
        if is_enum_type(named_type):
            return self.enum_reference(name)
        return convert_type_name(name, self.config)

    def wrap_optional(self, type_str: str) -> str:
        return type_str + NULLABLE_SUFFIX

    def clear_optional(self, type_str: str) -> str:
        if type_str.endswith(NULLABLE_SUFFIX):
            return type_str[: -len(NULLABLE_SUFFIX)]
        return type_str

    def wrap_list(self, type_str: str) -> str:
        list_type = "ReadonlyArray" if self.config.immutable_types else "Array"
        return f"{list_type}<{type_str}>"

    def wrap_type_node(self, base: str, type_node: TypeNode) -> str:
        """Wrap an already rendered base type with the modifiers of an AST type node."""
        if isinstance(type_node, NonNullTypeNode):
            return self.clear_optional(self.wrap_type_node(base, type_node.type))
        if isinstance(type_node, ListTypeNode):
            return self.wrap_optional(self.wrap_list(self.wrap_type_node(base, type_node.type)))
        return self.wrap_optional(base)

    def wrap_graphql_type(self, base: str, graphql_type: GraphQLType) -> str:
        """Wrap an already rendered base type with the modifiers of a schema type."""
        if is_non_null_type(graphql_type):
            return self.clear_optional(self.wrap_graphql_type(base, graphql_type.of_type))  # type: ignore[union-attr]
        if is_list_type(graphql_type):
            return self.wrap_optional(self.wrap_list(self.wrap_graphql_type(base, graphql_type.of_type)))  # type: ignore[union-attr]
        return self.wrap_optional(base)

    def type_node(self, type_node: TypeNode, is_input: bool = False) -> str:
        """Render an AST type node, e.g. ``[Int!]`` as ``Array<number> | null``."""
        base = self.named_type(get_base_type_node(type_node).name.value, is_input)
        return self.wrap_type_node(base, type_node)
