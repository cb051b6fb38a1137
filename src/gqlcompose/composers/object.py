from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Self

from graphql import GraphQLObjectType

from gqlcompose.composers.base import NamedTypeComposer
from gqlcompose.composers.fields import OutputFieldsMixin
from gqlcompose.errors import ComposerConfigError

if TYPE_CHECKING:
    from gqlcompose.schema_composer import SchemaComposer


class ObjectTypeComposer(OutputFieldsMixin, NamedTypeComposer):
    """Composer for ``type Name { ... }``."""

    graphql_class = GraphQLObjectType
    cached_type_properties = ("fields", "interfaces")

    def __init__(
        self,
        name: str,
        schema_composer: "SchemaComposer",
        *,
        fields: Mapping[str, Any] | None = None,
        interfaces: Sequence[Any] | None = None,
        is_type_of: Callable[..., Any] | None = None,
        description: str | None = None,
        extensions: Mapping[str, Any] | None = None,
        ast_node: Any = None,
        temp: bool = False,
    ) -> None:
        self._fields = {}
        self._interfaces = {}
        self._is_type_of = is_type_of
        super().__init__(
            name, schema_composer, description=description, extensions=extensions, ast_node=ast_node, temp=temp
        )
        if fields:
            self.set_fields(fields)
        if interfaces:
            self.set_interfaces(interfaces)

    @classmethod
    def _from_graphql_type(cls, gql_type: GraphQLObjectType, schema_composer: "SchemaComposer") -> Self:
        mapper = schema_composer.type_mapper
        tc = cls(
            gql_type.name,
            schema_composer,
            is_type_of=gql_type.is_type_of,
            description=gql_type.description,
            extensions=gql_type.extensions,
            ast_node=gql_type.ast_node,
            temp=True,
        )
        tc._fields = {name: mapper.convert_output_field_config(field, name, gql_type.name) for name, field in gql_type.fields.items()}
        tc._interfaces = {iface.name: mapper.convert_graphql_type_lazily(iface) for iface in gql_type.interfaces}
        return tc

    @classmethod
    def _from_config(cls, config: Mapping[str, Any], schema_composer: "SchemaComposer") -> Self:
        options = cls._common_config(config, ("fields", "interfaces", "is_type_of"))
        fields = config.get("fields") or {}
        if callable(fields):
            raise ComposerConfigError(f"Fields of {config['name']} must be a mapping; wrap single field types in thunks instead")
        return cls(
            config["name"],
            schema_composer,
            fields=fields,
            interfaces=config.get("interfaces") or (),
            is_type_of=config.get("is_type_of"),
            temp=True,
            **options,
        )

    def _create_type(self) -> GraphQLObjectType:
        return GraphQLObjectType(
            self._name,
            fields=self._build_fields,
            interfaces=self._build_interfaces,
            is_type_of=self._is_type_of,
            extensions=dict(self._extensions),
            description=self._description,
            ast_node=self._ast_node,
        )

    def _sync_type(self, gql_type: Any) -> None:
        super()._sync_type(gql_type)
        gql_type.is_type_of = self._is_type_of

    def _nested_composer_class(self) -> type[NamedTypeComposer]:
        return ObjectTypeComposer

    def get_is_type_of(self) -> Callable[..., Any] | None:
        return self._is_type_of

    def set_is_type_of(self, is_type_of: Callable[..., Any] | None) -> Self:
        self._is_type_of = is_type_of
        return self._changed()

    def get(self, path: str | Sequence[str]) -> Any:
        """
        Walk a dotted field path to the named composer at its end.

        ``query_tc.get("users.access")`` returns the composer of ``Query.users.access``.
        """
        parts = path.split(".") if isinstance(path, str) else list(path)
        tc: Any = self
        for part in parts:
            tc = tc.get_field_tc(part)
        return tc

    def get_field_otc(self, field_name: str) -> "ObjectTypeComposer":
        tc = self.get_field_tc(field_name)
        if not isinstance(tc, ObjectTypeComposer):
            raise ComposerConfigError(
                f"{self._name}.get_field_otc('{field_name}') must be ObjectTypeComposer, but received {type(tc).__name__}. "
                "Maybe you need to use 'get_field_tc()' method which returns any type composer?"
            )
        return tc

    def merge(self, other: Any) -> Self:
        """Append fields and interfaces of ``other`` (same kind or GraphQLObjectType); existing entries win."""
        source = self._coerce_merge_source(other)
        self._merge_fields_from(source)
        self._merge_interfaces_from(source)
        return self

    def clone(self, new_type_or_name: "str | ObjectTypeComposer") -> "ObjectTypeComposer":
        target = self._clone_target(new_type_or_name)
        self._clone_common(target)
        self._copy_fields_to(target)
        target._interfaces = dict(self._interfaces)
        target._is_type_of = self._is_type_of
        return target
