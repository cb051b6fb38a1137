from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Self, cast

from graphql import GraphQLScalarType, specified_scalar_types

from gqlcompose.composers.base import NamedTypeComposer
from gqlcompose.errors import ComposerConfigError

if TYPE_CHECKING:
    from gqlcompose.schema_composer import SchemaComposer

SCALAR_FUNCTIONS = ("serialize", "parse_value", "parse_literal")


class ScalarTypeComposer(NamedTypeComposer):
    """
    Composer for ``scalar Name``.

    A composer created from an existing GraphQLScalarType keeps that very instance,
    so built-in scalars such as ``GraphQLString`` keep their identity in built schemas.
    Built-ins are graphql-core globals shared by every registry, so their composers
    are read-only; ``clone`` one to get a scalar that can be changed.
    """

    graphql_class = GraphQLScalarType

    def __init__(
        self,
        name: str,
        schema_composer: "SchemaComposer",
        *,
        serialize: Callable[..., Any] | None = None,
        parse_value: Callable[..., Any] | None = None,
        parse_literal: Callable[..., Any] | None = None,
        specified_by_url: str | None = None,
        description: str | None = None,
        extensions: Mapping[str, Any] | None = None,
        ast_node: Any = None,
        temp: bool = False,
    ) -> None:
        self._serialize = serialize
        self._parse_value = parse_value
        self._parse_literal = parse_literal
        self._specified_by_url = specified_by_url
        super().__init__(
            name, schema_composer, description=description, extensions=extensions, ast_node=ast_node, temp=temp
        )

    @classmethod
    def _from_graphql_type(cls, gql_type: GraphQLScalarType, schema_composer: "SchemaComposer") -> Self:
        tc = cls(
            gql_type.name,
            schema_composer,
            serialize=gql_type.serialize,
            parse_value=gql_type.parse_value,
            parse_literal=gql_type.parse_literal,
            specified_by_url=gql_type.specified_by_url,
            description=gql_type.description,
            extensions=gql_type.extensions,
            ast_node=gql_type.ast_node,
            temp=True,
        )
        tc._gql_type = gql_type
        return tc

    @classmethod
    def _from_config(cls, config: Mapping[str, Any], schema_composer: "SchemaComposer") -> Self:
        options = cls._common_config(config, (*SCALAR_FUNCTIONS, "specified_by_url"))
        return cls(
            config["name"],
            schema_composer,
            serialize=config.get("serialize"),
            parse_value=config.get("parse_value"),
            parse_literal=config.get("parse_literal"),
            specified_by_url=config.get("specified_by_url"),
            temp=True,
            **options,
        )

    @classmethod
    def _sdl_example(cls) -> str:
        return "scalar Example"

    def _create_type(self) -> GraphQLScalarType:
        return GraphQLScalarType(
            self._name,
            serialize=self._serialize,
            parse_value=self._parse_value,
            parse_literal=self._parse_literal,
            description=self._description,
            specified_by_url=self._specified_by_url,
            extensions=dict(self._extensions),
            ast_node=self._ast_node,
        )

    def is_builtin(self) -> bool:
        """True when the composer wraps one of graphql-core's specified scalars (String, Int, ...)."""
        return any(self._gql_type is scalar for scalar in specified_scalar_types.values())

    def _check_not_builtin(self) -> None:
        if self.is_builtin():
            raise ComposerConfigError(
                f"Built-in scalar '{self._name}' is shared by every schema and cannot be modified. "
                "Clone it into a new scalar instead."
            )

    def _changed(self) -> Self:
        if self.is_builtin():
            self._reload_from_type()
            self._check_not_builtin()
        return super()._changed()

    def set_type_name(self, name: str) -> Self:
        # renaming moves the registry entry before the change is recorded
        self._check_not_builtin()
        return super().set_type_name(name)

    def _reload_from_type(self) -> None:
        """Drop pending changes by reading the configuration back from the wrapped instance."""
        gql_type = cast(GraphQLScalarType, self._gql_type)
        self._name = gql_type.name
        self._description = gql_type.description
        self._extensions = dict(gql_type.extensions or {})
        self._ast_node = gql_type.ast_node
        self._specified_by_url = gql_type.specified_by_url
        for attr in SCALAR_FUNCTIONS:
            setattr(self, f"_{attr}", getattr(gql_type, attr))

    def _sync_type(self, gql_type: Any) -> None:
        # only touch what changed: the instance may be a raw scalar owned by the caller
        for attr, value in (
            ("name", self._name),
            ("description", self._description),
            ("specified_by_url", self._specified_by_url),
            ("ast_node", self._ast_node),
        ):
            if getattr(gql_type, attr) != value:
                setattr(gql_type, attr, value)
        if gql_type.extensions != self._extensions:
            gql_type.extensions = dict(self._extensions)
        for attr in SCALAR_FUNCTIONS:
            value = getattr(self, f"_{attr}")
            if value is not None and getattr(gql_type, attr) != value:
                setattr(gql_type, attr, value)

    def get_serialize(self) -> Callable[..., Any] | None:
        return self._serialize

    def set_serialize(self, serialize: Callable[..., Any]) -> Self:
        self._serialize = serialize
        return self._changed()

    def get_parse_value(self) -> Callable[..., Any] | None:
        return self._parse_value

    def set_parse_value(self, parse_value: Callable[..., Any]) -> Self:
        self._parse_value = parse_value
        return self._changed()

    def get_parse_literal(self) -> Callable[..., Any] | None:
        return self._parse_literal

    def set_parse_literal(self, parse_literal: Callable[..., Any]) -> Self:
        self._parse_literal = parse_literal
        return self._changed()

    def get_specified_by_url(self) -> str | None:
        return self._specified_by_url

    def set_specified_by_url(self, url: str | None) -> Self:
        self._specified_by_url = url
        return self._changed()

    def merge(self, other: Any) -> Self:
        """Take over functions and settings ``self`` lacks from a scalar composer or GraphQLScalarType."""
        source = self._coerce_merge_source(other)
        for attr in SCALAR_FUNCTIONS:
            if getattr(self, f"_{attr}") is None:
                setattr(self, f"_{attr}", getattr(source, f"_{attr}"))
        self._specified_by_url = self._specified_by_url or source._specified_by_url
        self._description = self._description or source._description
        self._extensions = {**source._extensions, **self._extensions}
        return self._changed()

    def clone(self, new_type_or_name: "str | ScalarTypeComposer") -> "ScalarTypeComposer":
        target = self._clone_target(new_type_or_name)
        self._clone_common(target)
        for attr in SCALAR_FUNCTIONS:
            setattr(target, f"_{attr}", getattr(self, f"_{attr}"))
        target._specified_by_url = self._specified_by_url
        return target
