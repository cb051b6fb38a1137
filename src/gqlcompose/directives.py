"""Directives every registry starts with, and the JSON scalar ``@default`` needs."""

from typing import Any

from graphql import (
    DirectiveLocation,
    GraphQLArgument,
    GraphQLDeprecatedDirective,
    GraphQLDirective,
    GraphQLIncludeDirective,
    GraphQLNonNull,
    GraphQLScalarType,
    GraphQLSkipDirective,
    ValueNode,
    value_from_ast_untyped,
)


def _parse_json_literal(value_node: ValueNode, variables: dict[str, Any] | None = None) -> Any:
    return value_from_ast_untyped(value_node, variables)


GraphQLJSON = GraphQLScalarType(
    name="JSON",
    description="The `JSON` scalar type represents JSON values as specified by ECMA-404.",
    serialize=lambda value: value,
    parse_value=lambda value: value,
    parse_literal=_parse_json_literal,
    specified_by_url="http://www.ecma-international.org/publications/files/ECMA-ST/ECMA-404.pdf",
)

GraphQLDefaultDirective = GraphQLDirective(
    name="default",
    locations=[DirectiveLocation.INPUT_FIELD_DEFINITION, DirectiveLocation.ARGUMENT_DEFINITION],
    args={"value": GraphQLArgument(GraphQLNonNull(GraphQLJSON))},
    description="Provides default value for input field.",
)

BUILT_IN_DIRECTIVES: tuple[GraphQLDirective, ...] = (
    GraphQLIncludeDirective,
    GraphQLSkipDirective,
    GraphQLDeprecatedDirective,
    GraphQLDefaultDirective,
)
