from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Self

from graphql import GraphQLInterfaceType

from gqlcompose.composers.abstract import TypeResolversMixin
from gqlcompose.composers.base import NamedTypeComposer
from gqlcompose.composers.fields import OutputFieldsMixin
from gqlcompose.composers.wrappers import Composer
from gqlcompose.dispatch import ResolveTypeFn
from gqlcompose.errors import ComposerConfigError

if TYPE_CHECKING:
    from gqlcompose.schema_composer import SchemaComposer


class InterfaceTypeComposer(TypeResolversMixin, OutputFieldsMixin, NamedTypeComposer):
    """
    Composer for ``interface Name { ... }``.

    Object types registered through ``add_type_resolver`` become must-have schema
    types, so implementations that are never referenced from a field still end up
    in the built schema.
    """

    graphql_class = GraphQLInterfaceType
    cached_type_properties = ("fields", "interfaces")

    def __init__(
        self,
        name: str,
        schema_composer: "SchemaComposer",
        *,
        fields: Mapping[str, Any] | None = None,
        interfaces: Sequence[Any] | None = None,
        resolve_type: ResolveTypeFn | None = None,
        description: str | None = None,
        extensions: Mapping[str, Any] | None = None,
        ast_node: Any = None,
        temp: bool = False,
    ) -> None:
        self._fields = {}
        self._interfaces = {}
        self._type_resolvers = {}
        self._resolve_type = resolve_type
        super().__init__(
            name, schema_composer, description=description, extensions=extensions, ast_node=ast_node, temp=temp
        )
        if fields:
            self.set_fields(fields)
        if interfaces:
            self.set_interfaces(interfaces)

    @classmethod
    def _from_graphql_type(cls, gql_type: GraphQLInterfaceType, schema_composer: "SchemaComposer") -> Self:
        mapper = schema_composer.type_mapper
        tc = cls(
            gql_type.name,
            schema_composer,
            resolve_type=gql_type.resolve_type,
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
        options = cls._common_config(config, ("fields", "interfaces", "resolve_type", "type_resolvers"))
        fields = config.get("fields") or {}
        if callable(fields):
            raise ComposerConfigError(f"Fields of {config['name']} must be a mapping; wrap single field types in thunks instead")
        tc = cls(
            config["name"],
            schema_composer,
            fields=fields,
            interfaces=config.get("interfaces") or (),
            resolve_type=config.get("resolve_type"),
            temp=True,
            **options,
        )
        if config.get("type_resolvers"):
            tc.set_type_resolvers(config["type_resolvers"])
        return tc

    @classmethod
    def _sdl_example(cls) -> str:
        return "interface Example { name: String }"

    def _create_type(self) -> GraphQLInterfaceType:
        return GraphQLInterfaceType(
            self._name,
            fields=self._build_fields,
            interfaces=self._build_interfaces,
            resolve_type=self._resolve_type,
            description=self._description,
            extensions=dict(self._extensions),
            ast_node=self._ast_node,
        )

    def _sync_type(self, gql_type: Any) -> None:
        super()._sync_type(gql_type)
        gql_type.resolve_type = self._resolve_type

    def _nested_composer_class(self) -> type[NamedTypeComposer]:
        from gqlcompose.composers.object import ObjectTypeComposer

        return ObjectTypeComposer

    def _on_type_resolver_registered(self, tc: Composer) -> None:
        self.schema_composer.add_schema_must_have_type(tc)

    def merge(self, other: Any) -> Self:
        """Append fields and interfaces of ``other`` (same kind or GraphQLInterfaceType); existing entries win."""
        source = self._coerce_merge_source(other)
        self._merge_fields_from(source)
        self._merge_interfaces_from(source)
        return self

    def clone(self, new_type_or_name: "str | InterfaceTypeComposer") -> "InterfaceTypeComposer":
        target = self._clone_target(new_type_or_name)
        self._clone_common(target)
        self._copy_fields_to(target)
        target._interfaces = dict(self._interfaces)
        self._copy_type_resolvers_to(target)
        return target
