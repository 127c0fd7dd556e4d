from typing import Any

from graphql import (
    BooleanValueNode,
    DirectiveNode,
    FieldNode,
    FloatValueNode,
    InlineFragmentNode,
    IntValueNode,
    StringValueNode,
)

DirectiveHolder = FieldNode | InlineFragmentNode


def get_directive(node: DirectiveHolder, directive_name: str) -> DirectiveNode | None:
    """Return the first directive with the given name applied to a selection node."""
    return next((directive for directive in node.directives or () if directive.name.value == directive_name), None)


def has_given_directive(node: DirectiveHolder, directive_name: str) -> bool:
    """Check whether a selection node (field, inline fragment) has a particular specified directive."""
    return get_directive(node, directive_name) is not None


def get_directive_arguments(node: DirectiveHolder, directive_name: str) -> dict[str, Any]:
    """
    Extracts the literal arguments of a specified directive applied to a selection node.
    Args:
        node: The selection node from which to extract the directive arguments.
        directive_name: The name of the directive whose arguments are to be extracted.
    Returns:
        dict[str, Any]: A dictionary containing the directive arguments with proper type conversion.
        String arguments keep their StringValueNode so callers can tell them apart from enum literals.
    """
    directive = get_directive(node, directive_name)
    if directive is None:
        return {}

    args: dict[str, Any] = {}
    for arg in directive.arguments or ():
        arg_name = arg.name.value
        if isinstance(arg.value, IntValueNode):
            args[arg_name] = int(arg.value.value)
        elif isinstance(arg.value, FloatValueNode):
            args[arg_name] = float(arg.value.value)
        elif isinstance(arg.value, BooleanValueNode):
            args[arg_name] = arg.value.value
        else:
            args[arg_name] = arg.value

    return args


def get_string_argument(node: DirectiveHolder, directive_name: str, argument_name: str) -> str | None:
    """Return the value of a string literal argument, or None when it is absent or not a string."""
    value = get_directive_arguments(node, directive_name).get(argument_name)
    return value.value if isinstance(value, StringValueNode) else None
