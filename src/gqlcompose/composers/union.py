from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Self

from graphql import GraphQLObjectType, GraphQLUnionType

from gqlcompose.composers.abstract import TypeResolversMixin
from gqlcompose.composers.base import NamedTypeComposer
from gqlcompose.composers.wrappers import Composer
from gqlcompose.dispatch import ResolveTypeFn
from gqlcompose.errors import ComposerConfigError

if TYPE_CHECKING:
    from gqlcompose.schema_composer import SchemaComposer


class UnionTypeComposer(TypeResolversMixin, NamedTypeComposer):
    """
    Composer for ``union Name = A | B``.

    Membership is kept in insertion order by type name. Registering a type
    resolver for an object type also makes that type a member; removing a member
    leaves its resolver alone.
    """

    graphql_class = GraphQLUnionType
    cached_type_properties = ("types",)

    def __init__(
        self,
        name: str,
        schema_composer: "SchemaComposer",
        *,
        types: Sequence[Any] | None = None,
        resolve_type: ResolveTypeFn | None = None,
        description: str | None = None,
        extensions: Mapping[str, Any] | None = None,
        ast_node: Any = None,
        temp: bool = False,
    ) -> None:
        self._types: dict[str, Composer] = {}
        self._type_resolvers = {}
        self._resolve_type = resolve_type
        super().__init__(
            name, schema_composer, description=description, extensions=extensions, ast_node=ast_node, temp=temp
        )
        if types:
            self.set_types(types)

    @classmethod
    def _from_graphql_type(cls, gql_type: GraphQLUnionType, schema_composer: "SchemaComposer") -> Self:
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
        tc._types = {member.name: mapper.convert_graphql_type_lazily(member) for member in gql_type.types}
        return tc

    @classmethod
    def _from_config(cls, config: Mapping[str, Any], schema_composer: "SchemaComposer") -> Self:
        options = cls._common_config(config, ("types", "resolve_type", "type_resolvers"))
        types = config.get("types") or ()
        if callable(types):
            raise ComposerConfigError(f"Types of union {config['name']} must be a list; wrap single members in thunks instead")
        tc = cls(config["name"], schema_composer, types=types, resolve_type=config.get("resolve_type"), temp=True, **options)
        if config.get("type_resolvers"):
            tc.set_type_resolvers(config["type_resolvers"])
        return tc

    @classmethod
    def _sdl_example(cls) -> str:
        return "union Example = A | B"

    def _create_type(self) -> GraphQLUnionType:
        return GraphQLUnionType(
            self._name,
            types=self._build_types,
            resolve_type=self._resolve_type,
            description=self._description,
            extensions=dict(self._extensions),
            ast_node=self._ast_node,
        )

    def _sync_type(self, gql_type: Any) -> None:
        super()._sync_type(gql_type)
        gql_type.resolve_type = self._resolve_type

    def _build_types(self) -> list[GraphQLObjectType]:
        types = []
        for name, tc in self._types.items():
            gql_type = tc.get_type()
            if not isinstance(gql_type, GraphQLObjectType):
                raise ComposerConfigError(f"Union '{self._name}' member '{name}' must be an object type, got {gql_type!r}")
            types.append(gql_type)
        return types

    def _on_type_resolver_registered(self, tc: Composer) -> None:
        self._types.setdefault(tc.get_type_name(), tc)

    # members

    def has_type(self, type_def: Any) -> bool:
        return self._resolver_key(type_def) in self._types

    def get_types(self) -> list[Composer]:
        return list(self._types.values())

    def get_type_names(self) -> list[str]:
        return list(self._types)

    def clear_types(self) -> Self:
        self._types = {}
        return self._changed()

    def set_types(self, types: Sequence[Any]) -> Self:
        if isinstance(types, str) or not isinstance(types, Sequence):
            raise ComposerConfigError(f"Types of union {self._name} must be a list")
        self._types = {}
        return self.add_types(types)

    def add_type(self, type_def: Any) -> Self:
        tc = self._convert_object_type(type_def)
        self._types[tc.get_type_name()] = tc
        return self._changed()

    def add_types(self, types: Sequence[Any]) -> Self:
        for type_def in types:
            self.add_type(type_def)
        return self

    def remove_type(self, names: Any) -> Self:
        for type_def in names if isinstance(names, list | tuple) else [names]:
            self._types.pop(self._resolver_key(type_def), None)
        return self._changed()

    def remove_other_types(self, names: Any) -> Self:
        keep = {self._resolver_key(type_def) for type_def in (names if isinstance(names, list | tuple) else [names])}
        self._types = {name: tc for name, tc in self._types.items() if name in keep}
        return self._changed()

    def merge(self, other: Any) -> Self:
        """Append members of ``other`` (same kind or GraphQLUnionType); existing members win."""
        source = self._coerce_merge_source(other)
        for name, tc in source._types.items():
            self._types.setdefault(name, tc)
        return self._changed()

    def clone(self, new_type_or_name: "str | UnionTypeComposer") -> "UnionTypeComposer":
        target = self._clone_target(new_type_or_name)
        self._clone_common(target)
        target._types = dict(self._types)
        self._copy_type_resolvers_to(target)
        return target
