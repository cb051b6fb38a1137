"""Conversion of every accepted type-definition form into composers.

Inputs are first classified into a ``DefinitionKind`` and then converted by an
explicit branch per kind; anything that does not classify is rejected with
``ComposerConfigError`` instead of being guessed at.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING, Any

from graphql import (
    DirectiveDefinitionNode,
    DirectiveLocation,
    EnumTypeDefinitionNode,
    EnumTypeExtensionNode,
    GraphQLArgument,
    GraphQLDeprecatedDirective,
    GraphQLDirective,
    GraphQLEnumType,
    GraphQLField,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLList,
    GraphQLNamedType,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLScalarType,
    GraphQLUnionType,
    InputObjectTypeDefinitionNode,
    InputObjectTypeExtensionNode,
    InputValueDefinitionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
    ListTypeNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    ScalarTypeDefinitionNode,
    ScalarTypeExtensionNode,
    TypeDefinitionNode,
    TypeNode,
    Undefined,
    UnionTypeDefinitionNode,
    UnionTypeExtensionNode,
    is_type,
    parse,
    specified_scalar_types,
    value_from_ast_untyped,
)
from graphql.execution.values import get_directive_values
from graphql.language import Node, parse_type

from gqlcompose.composers import (
    Composer,
    EnumTypeComposer,
    InputTypeComposer,
    InterfaceTypeComposer,
    ListComposer,
    NamedTypeComposer,
    NonNullComposer,
    ObjectTypeComposer,
    ScalarTypeComposer,
    ThunkComposer,
    UnionTypeComposer,
)
from gqlcompose.composers.base import NAME_PATTERN
from gqlcompose.definitions import (
    EnumValueConfig,
    InputFieldConfig,
    ObjectFieldConfig,
    extensions_with_directives,
)
from gqlcompose.errors import ComposerConfigError
from gqlcompose.utils.directive import directives_from_ast, get_directive_argument, has_given_directive

if TYPE_CHECKING:
    from gqlcompose.schema_composer import SchemaComposer

TYPE_EXPRESSION_PATTERN = re.compile(r"^[\[\s]*[_A-Za-z][_0-9A-Za-z]*[\s!\]]*$")
SDL_PATTERN = re.compile(r"(?:^|\s)(?:type|input|enum|interface|union|scalar|directive|schema)\s*[_A-Za-z@{]")

OUTPUT_FIELD_KEYS = {"type", "args", "resolve", "subscribe", "description", "deprecation_reason", "extensions", "directives", "ast_node"}
INPUT_FIELD_KEYS = {"type", "default_value", "description", "deprecation_reason", "extensions", "directives", "ast_node"}

COMPOSER_CLASSES: tuple[tuple[type[GraphQLNamedType], type[NamedTypeComposer]], ...] = (
    (GraphQLObjectType, ObjectTypeComposer),
    (GraphQLInputObjectType, InputTypeComposer),
    (GraphQLScalarType, ScalarTypeComposer),
    (GraphQLEnumType, EnumTypeComposer),
    (GraphQLInterfaceType, InterfaceTypeComposer),
    (GraphQLUnionType, UnionTypeComposer),
)

OUTPUT_ONLY_COMPOSERS = (ObjectTypeComposer, InterfaceTypeComposer, UnionTypeComposer)


class DefinitionKind(str, Enum):
    """Shapes a type definition can take when handed to a composer or the registry."""

    COMPOSER = "composer"
    GRAPHQL_TYPE = "graphql_type"
    TYPE_NAME = "type_name"
    TYPE_EXPRESSION = "type_expression"
    SDL = "sdl"
    CONFIG = "config"
    LIST = "list"
    THUNK = "thunk"


def classify_definition(type_def: Any) -> DefinitionKind:
    """
    Tag a type definition with its kind.

    Args:
        type_def: A composer, graphql-core type, type name, type expression such as
            ``"[Int]!"``, SDL text, config mapping, one-element list or zero-argument callable

    Returns:
        DefinitionKind: The detected kind

    Raises:
        ComposerConfigError: If the value matches none of the accepted shapes
    """
    if isinstance(type_def, Composer):
        return DefinitionKind.COMPOSER
    if is_type(type_def):
        return DefinitionKind.GRAPHQL_TYPE
    if isinstance(type_def, str):
        text = type_def.strip()
        if NAME_PATTERN.match(text):
            return DefinitionKind.TYPE_NAME
        if TYPE_EXPRESSION_PATTERN.match(text):
            return DefinitionKind.TYPE_EXPRESSION
        if SDL_PATTERN.search(text):
            return DefinitionKind.SDL
        raise ComposerConfigError(f"Cannot recognize type definition string {type_def!r}")
    if isinstance(type_def, Mapping):
        return DefinitionKind.CONFIG
    if isinstance(type_def, list):
        return DefinitionKind.LIST
    if callable(type_def):
        return DefinitionKind.THUNK
    raise ComposerConfigError(f"Cannot use {type_def!r} as a type definition")


def composer_class_for(gql_type: GraphQLNamedType) -> type[NamedTypeComposer]:
    for graphql_class, composer_class in COMPOSER_CLASSES:
        if isinstance(gql_type, graphql_class):
            return composer_class
    raise ComposerConfigError(f"Unsupported GraphQL type {gql_type!r}")


def _description(node: Node) -> str | None:
    description = getattr(node, "description", None)
    return description.value if description else None


def _deprecation_reason(node: Node) -> str | None:
    deprecated = get_directive_values(GraphQLDeprecatedDirective, node)  # type: ignore[arg-type]
    return deprecated["reason"] if deprecated else None


def _node_extensions(node: Node) -> dict[str, Any]:
    return extensions_with_directives(None, directives_from_ast(node))


class TypeMapper:
    """Converts definitions into composers bound to one registry."""

    def __init__(self, schema_composer: "SchemaComposer") -> None:
        self.schema_composer = schema_composer

    # type references

    def convert_output_type(self, type_def: Any) -> Composer:
        tc = self._convert_type(type_def, self.convert_output_type, ObjectTypeComposer)
        named = _peek_named(tc)
        if isinstance(named, InputTypeComposer):
            raise ComposerConfigError(f"InputTypeComposer '{named.get_type_name()}' cannot be used as an output type")
        return tc

    def convert_input_type(self, type_def: Any) -> Composer:
        tc = self._convert_type(type_def, self.convert_input_type, InputTypeComposer)
        named = _peek_named(tc)
        if isinstance(named, OUTPUT_ONLY_COMPOSERS):
            raise ComposerConfigError(f"{type(named).__name__} '{named.get_type_name()}' cannot be used as an input type")
        return tc

    def _convert_type(
        self, type_def: Any, convert: Callable[[Any], Composer], config_class: type[NamedTypeComposer]
    ) -> Composer:
        kind = classify_definition(type_def)

        if kind is DefinitionKind.COMPOSER:
            return type_def  # type: ignore[no-any-return]
        if kind is DefinitionKind.GRAPHQL_TYPE:
            return self.convert_graphql_type(type_def)
        if kind in (DefinitionKind.TYPE_NAME, DefinitionKind.TYPE_EXPRESSION):
            return self.type_from_expression(type_def)
        if kind is DefinitionKind.SDL:
            tc = self.convert_sdl_type_definition(type_def)
            self.schema_composer.add(tc)
            return tc
        if kind is DefinitionKind.LIST:
            if len(type_def) != 1:
                raise ComposerConfigError(f"Type list must contain exactly one type definition, got {len(type_def)}")
            return ListComposer(convert(type_def[0]))
        if kind is DefinitionKind.THUNK:
            return ThunkComposer(lambda: convert(type_def()))
        if kind is DefinitionKind.CONFIG:
            if not isinstance(type_def.get("name"), str):
                raise ComposerConfigError(f"Type config must have a `name`, got keys {sorted(type_def)}")
            return config_class.create(type_def, self.schema_composer)

        raise ComposerConfigError(f"Cannot convert {type_def!r} to a composer")

    def convert_interface_type(self, type_def: Any) -> Composer:
        kind = classify_definition(type_def)
        if kind is DefinitionKind.THUNK:
            return ThunkComposer(lambda: self.convert_interface_type(type_def()))
        if kind is DefinitionKind.TYPE_NAME and not self.schema_composer.has(type_def):
            return self.named_reference(type_def.strip())

        tc = self._convert_type(type_def, self.convert_interface_type, InterfaceTypeComposer)
        if not isinstance(tc, InterfaceTypeComposer | ThunkComposer):
            raise ComposerConfigError(f"For interface you must provide an InterfaceTypeComposer, got {tc!r}")
        return tc

    def type_from_expression(self, expression: str) -> Composer:
        """Convert ``"User"``, ``"[Int]!"`` and similar; unknown names become name-hinted thunks."""
        return self.type_from_ast(parse_type(expression.strip()), self._existing_or_reference)

    def type_from_ast(self, type_node: TypeNode, named: Callable[[str], Composer] | None = None) -> Composer:
        named = named or self.named_reference
        if isinstance(type_node, NonNullTypeNode):
            return NonNullComposer(self.type_from_ast(type_node.type, named))
        if isinstance(type_node, ListTypeNode):
            return ListComposer(self.type_from_ast(type_node.type, named))
        return named(type_node.name.value)  # type: ignore[attr-defined]

    def _existing_or_reference(self, name: str) -> Composer:
        if self.schema_composer.has(name):
            return self.schema_composer.get(name)
        return self.named_reference(name)

    def named_reference(self, name: str) -> Composer:
        """Built-in scalars resolve at once; other names become thunks looked up on first use."""
        sc = self.schema_composer
        if name in specified_scalar_types and not sc.has(name):
            return sc.get_any_tc(specified_scalar_types[name])
        return ThunkComposer(lambda: sc.get(name), name)

    def convert_graphql_type(self, gql_type: Any) -> Composer:
        if isinstance(gql_type, GraphQLNonNull):
            return NonNullComposer(self.convert_graphql_type(gql_type.of_type))
        if isinstance(gql_type, GraphQLList):
            return ListComposer(self.convert_graphql_type(gql_type.of_type))
        return self.schema_composer.get_any_tc(gql_type)

    def convert_graphql_type_lazily(self, gql_type: Any) -> Composer:
        """Like ``convert_graphql_type`` but defers importing named types that are not registered yet."""
        if isinstance(gql_type, GraphQLNonNull):
            return NonNullComposer(self.convert_graphql_type_lazily(gql_type.of_type))
        if isinstance(gql_type, GraphQLList):
            return ListComposer(self.convert_graphql_type_lazily(gql_type.of_type))
        sc = self.schema_composer
        if sc.has(gql_type.name):
            return sc.get(gql_type.name)
        return ThunkComposer(lambda: sc.get_any_tc(gql_type), gql_type.name)

    # fields

    def convert_output_field_config(self, field_def: Any, field_name: str = "", type_name: str = "") -> ObjectFieldConfig:
        """
        Convert a field definition of an object or interface type.

        Args:
            field_def: ObjectFieldConfig, GraphQLField, mapping with a ``type`` key,
                zero-argument callable or a bare type definition
            field_name: Field name, used in error messages
            type_name: Owning type name, used in error messages

        Returns:
            ObjectFieldConfig: The stored field record
        """
        if isinstance(field_def, ObjectFieldConfig):
            return replace(field_def, type=self.convert_output_type(field_def.type), args=self.convert_args(field_def.args))
        if isinstance(field_def, GraphQLField):
            return ObjectFieldConfig(
                type=self.convert_graphql_type_lazily(field_def.type),
                args={name: self.convert_input_field_config(arg, name) for name, arg in field_def.args.items()},
                resolve=field_def.resolve,
                subscribe=field_def.subscribe,
                description=field_def.description,
                deprecation_reason=field_def.deprecation_reason,
                extensions=dict(field_def.extensions or {}),
                ast_node=field_def.ast_node,
            )
        if isinstance(field_def, Mapping) and "type" in field_def:
            unknown = set(field_def) - OUTPUT_FIELD_KEYS
            if unknown:
                raise ComposerConfigError(f"Unknown options for field '{type_name}.{field_name}': {', '.join(sorted(unknown))}")
            return ObjectFieldConfig(
                type=self.convert_output_type(field_def["type"]),
                args=self.convert_args(field_def.get("args") or {}),
                resolve=field_def.get("resolve"),
                subscribe=field_def.get("subscribe"),
                description=field_def.get("description"),
                deprecation_reason=field_def.get("deprecation_reason"),
                extensions=extensions_with_directives(field_def.get("extensions"), field_def.get("directives")),
                ast_node=field_def.get("ast_node"),
            )
        try:
            return ObjectFieldConfig(type=self.convert_output_type(field_def))
        except ComposerConfigError as error:
            raise ComposerConfigError(f"Cannot convert field '{type_name}.{field_name}': {error}") from error

    def convert_input_field_config(self, field_def: Any, field_name: str = "", type_name: str = "") -> InputFieldConfig:
        """Convert an input field or argument definition; accepts the same shapes as output fields."""
        if isinstance(field_def, InputFieldConfig):
            return replace(field_def, type=self.convert_input_type(field_def.type))
        if isinstance(field_def, GraphQLInputField | GraphQLArgument):
            return InputFieldConfig(
                type=self.convert_graphql_type_lazily(field_def.type),
                default_value=field_def.default_value,
                description=field_def.description,
                deprecation_reason=field_def.deprecation_reason,
                extensions=dict(field_def.extensions or {}),
                ast_node=field_def.ast_node,
            )
        if isinstance(field_def, Mapping) and "type" in field_def:
            unknown = set(field_def) - INPUT_FIELD_KEYS
            if unknown:
                raise ComposerConfigError(f"Unknown options for input field '{type_name}.{field_name}': {', '.join(sorted(unknown))}")
            return InputFieldConfig(
                type=self.convert_input_type(field_def["type"]),
                default_value=field_def.get("default_value", Undefined),
                description=field_def.get("description"),
                deprecation_reason=field_def.get("deprecation_reason"),
                extensions=extensions_with_directives(field_def.get("extensions"), field_def.get("directives")),
                ast_node=field_def.get("ast_node"),
            )
        try:
            return InputFieldConfig(type=self.convert_input_type(field_def))
        except ComposerConfigError as error:
            raise ComposerConfigError(f"Cannot convert input field '{type_name}.{field_name}': {error}") from error

    def convert_args(self, args: Mapping[str, Any]) -> dict[str, InputFieldConfig]:
        if not isinstance(args, Mapping):
            raise ComposerConfigError(f"Field arguments must be a mapping, got {type(args).__name__}")
        return {name: self.convert_input_field_config(arg, name) for name, arg in args.items()}

    # SDL

    def convert_sdl_type_definition(self, sdl: str) -> NamedTypeComposer:
        """Build an unregistered composer from SDL holding exactly one type definition."""
        definitions = [d for d in parse(sdl).definitions if isinstance(d, TypeDefinitionNode)]
        if len(definitions) != 1:
            raise ComposerConfigError(f"SDL must contain exactly one type definition, found {len(definitions)}")
        return self.make_composer_from_ast(definitions[0])

    def make_composer_from_ast(self, node: Node) -> NamedTypeComposer:
        """
        Build an unregistered composer from a type definition or extension node.

        Named references inside the node become thunks looked up by name, so the
        referenced types may be declared later or replaced before they are used.
        """
        sc = self.schema_composer
        name = node.name.value  # type: ignore[attr-defined]
        common: dict[str, Any] = {
            "description": _description(node),
            "extensions": _node_extensions(node),
            # graphql-core only accepts definition nodes here, extensions are merged into an existing type anyway
            "ast_node": node if isinstance(node, TypeDefinitionNode) else None,
            "temp": True,
        }

        if isinstance(node, ObjectTypeDefinitionNode | ObjectTypeExtensionNode):
            return ObjectTypeComposer(
                name,
                sc,
                fields=self._output_fields_from_ast(node),
                interfaces=[self.named_reference(i.name.value) for i in node.interfaces or ()],
                **common,
            )
        if isinstance(node, InterfaceTypeDefinitionNode | InterfaceTypeExtensionNode):
            return InterfaceTypeComposer(
                name,
                sc,
                fields=self._output_fields_from_ast(node),
                interfaces=[self.named_reference(i.name.value) for i in node.interfaces or ()],
                **common,
            )
        if isinstance(node, InputObjectTypeDefinitionNode | InputObjectTypeExtensionNode):
            return InputTypeComposer(name, sc, fields=self._input_values_from_ast(node.fields), **common)
        if isinstance(node, EnumTypeDefinitionNode | EnumTypeExtensionNode):
            values = {
                value.name.value: EnumValueConfig(
                    value=value.name.value,
                    description=_description(value),
                    deprecation_reason=_deprecation_reason(value),
                    extensions=_node_extensions(value),
                    ast_node=value,
                )
                for value in node.values or ()
            }
            return EnumTypeComposer(name, sc, values=values, **common)
        if isinstance(node, UnionTypeDefinitionNode | UnionTypeExtensionNode):
            return UnionTypeComposer(name, sc, types=[self.named_reference(t.name.value) for t in node.types or ()], **common)
        if isinstance(node, ScalarTypeDefinitionNode | ScalarTypeExtensionNode):
            return ScalarTypeComposer(
                name, sc, specified_by_url=get_directive_argument(node, "specifiedBy", "url"), **common
            )

        raise ComposerConfigError(f"Unsupported SDL definition {type(node).__name__} for '{name}'")

    def _output_fields_from_ast(self, node: Any) -> dict[str, ObjectFieldConfig]:
        return {
            field.name.value: ObjectFieldConfig(
                type=self.type_from_ast(field.type),
                args=self._input_values_from_ast(field.arguments),
                description=_description(field),
                deprecation_reason=_deprecation_reason(field),
                extensions=_node_extensions(field),
                ast_node=field,
            )
            for field in node.fields or ()
        }

    def _input_values_from_ast(self, nodes: Any) -> dict[str, InputFieldConfig]:
        return {node.name.value: self._input_value_from_ast(node) for node in nodes or ()}

    def _input_value_from_ast(self, node: InputValueDefinitionNode) -> InputFieldConfig:
        default_value: Any = Undefined
        if node.default_value is not None:
            default_value = value_from_ast_untyped(node.default_value)
        elif has_given_directive(node, "default"):
            default_value = get_directive_argument(node, "default", "value")
        return InputFieldConfig(
            type=self.type_from_ast(node.type),
            default_value=default_value,
            description=_description(node),
            deprecation_reason=_deprecation_reason(node),
            extensions=_node_extensions(node),
            ast_node=node,
        )

    def make_directive_from_ast(self, node: DirectiveDefinitionNode) -> GraphQLDirective:
        args = self._input_values_from_ast(node.arguments)
        return GraphQLDirective(
            name=node.name.value,
            locations=[DirectiveLocation[location.value] for location in node.locations],
            args={
                name: GraphQLArgument(
                    config.type.get_type(),  # type: ignore[arg-type]
                    default_value=config.default_value,
                    description=config.description,
                    deprecation_reason=config.deprecation_reason,
                    ast_node=config.ast_node,
                )
                for name, config in args.items()
            },
            is_repeatable=node.repeatable,
            description=_description(node),
            ast_node=node,
        )


def _peek_named(tc: Composer) -> Composer:
    """Strip List/NonNull layers without forcing thunks."""
    while isinstance(tc, ListComposer | NonNullComposer):
        tc = tc.of_type
    return tc
