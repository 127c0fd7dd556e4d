from graphql import (
    GraphQLNamedType,
    is_input_object_type,
    is_interface_type,
    is_object_type,
)


def is_introspection_type(type_name: str) -> bool:
    return type_name.startswith("__")


def is_fielded_type(named_type: GraphQLNamedType | None) -> bool:
    """Check whether a named type declares fields (object, interface or input object)."""
    return is_object_type(named_type) or is_interface_type(named_type) or is_input_object_type(named_type)


def is_exportable_type(named_type: GraphQLNamedType | None) -> bool:
    """Check whether a selected field of this type may carry the export directive."""
    return is_object_type(named_type) or is_interface_type(named_type)
