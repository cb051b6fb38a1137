from typing import Any

from graphql import DirectiveNode, value_from_ast_untyped
from graphql.language import Node

from gqlcompose.definitions import DirectiveUsage


def get_directive_arguments(directive: DirectiveNode) -> dict[str, Any]:
    """
    Extracts the arguments of a directive node as plain Python values.

    Args:
        directive: The directive node as produced by the SDL parser.

    Returns:
        dict[str, Any]: Argument name to value, with literals converted by graphql-core.
    """
    return {arg.name.value: value_from_ast_untyped(arg.value) for arg in directive.arguments or ()}


def directives_from_ast(node: Node | None) -> list[DirectiveUsage]:
    """Collect the directive instances applied to an AST node, in source order, duplicates kept."""
    if node is None:
        return []
    return [
        DirectiveUsage(directive.name.value, get_directive_arguments(directive))
        for directive in getattr(node, "directives", None) or ()
    ]


def has_given_directive(node: Node | None, directive_name: str) -> bool:
    """Check whether an AST node (field, type, enum value) has a particular directive applied."""
    if node is not None and getattr(node, "directives", None):
        for directive in node.directives:  # type: ignore[attr-defined]
            if directive.name.value == directive_name:
                return True
    return False


def get_directive_argument(node: Node | None, directive_name: str, argument_name: str) -> Any | None:
    """
    Extracts one argument of the first matching directive on an AST node.

    Args:
        node: The AST node to inspect.
        directive_name: The name of the directive whose argument is read.
        argument_name: The name of the argument.

    Returns:
        Any | None: The argument value if present, otherwise None.
    """
    if not has_given_directive(node, directive_name):
        return None
    directive = next(d for d in node.directives if d.name.value == directive_name)  # type: ignore[union-attr]
    return get_directive_arguments(directive).get(argument_name)
