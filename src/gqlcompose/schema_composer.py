"""The type registry: name table, root types, directive catalog, merge/import and schema build."""

import builtins
from collections.abc import Callable, Iterator, Mapping, Sequence
from typing import Any, TypeVar

from graphql import (
    DirectiveDefinitionNode,
    GraphQLDirective,
    GraphQLNamedType,
    GraphQLScalarType,
    GraphQLSchema,
    SchemaDefinitionNode,
    TypeDefinitionNode,
    TypeExtensionNode,
    get_named_type,
    is_wrapping_type,
    parse,
    specified_scalar_types,
)

from gqlcompose import log
from gqlcompose.composers import (
    Composer,
    EnumTypeComposer,
    InputTypeComposer,
    InterfaceTypeComposer,
    NamedTypeComposer,
    ObjectTypeComposer,
    ScalarTypeComposer,
    UnionTypeComposer,
)
from gqlcompose.composers.fields import FieldsMixin
from gqlcompose.composers.scalar import SCALAR_FUNCTIONS
from gqlcompose.directives import BUILT_IN_DIRECTIVES
from gqlcompose.errors import ComposeError, ComposerConfigError, MergeConflictError, SchemaBuildError, TypeLookupError
from gqlcompose.type_mapper import DefinitionKind, TypeMapper, classify_definition, composer_class_for
from gqlcompose.utils.graphql_type import ROOT_TYPE_NAMES, is_builtin_scalar_type, is_introspection_type, is_root_type

TC = TypeVar("TC", bound=NamedTypeComposer)

OnCreate = Callable[[Any], None]


class SchemaComposer:
    """
    Registry of named type composers.

    Composers register themselves on construction, may reference each other through
    thunks before they exist, and are materialized into a ``GraphQLSchema`` by
    ``build_schema``. Nothing is shared between instances.
    """

    def __init__(self, schema: GraphQLSchema | None = None) -> None:
        """
        Args:
            schema: Optional schema whose types are imported with ``merge``
        """
        self._types: dict[str, NamedTypeComposer] = {}
        self._schema_must_have_types: list[Composer] = []
        self._directives: list[GraphQLDirective] = list(BUILT_IN_DIRECTIVES)
        self.type_mapper = TypeMapper(self)
        if schema is not None:
            self.merge(schema)

    def __repr__(self) -> str:
        return f"<SchemaComposer types={len(self._types)} directives={len(self._directives)}>"

    # name table

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._types))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._types

    def items(self) -> list[tuple[str, NamedTypeComposer]]:
        return list(self._types.items())

    def values(self) -> list[NamedTypeComposer]:
        return list(self._types.values())

    def get_type_names(self) -> list[str]:
        return list(self._types)

    def has(self, type_or_name: Any) -> bool:
        """Check by name; composers and graphql-core types are looked up by their names."""
        return self._name_of(type_or_name) in self._types

    def has_instance(self, type_or_name: Any, composer_class: type[NamedTypeComposer]) -> bool:
        name = self._name_of(type_or_name)
        return isinstance(self._types.get(name), composer_class)

    def get(self, name: str) -> NamedTypeComposer:
        try:
            return self._types[name]
        except KeyError:
            raise TypeLookupError(f'Type with name "{name}" does not exist') from None

    def set(self, name: str, tc: NamedTypeComposer) -> "SchemaComposer":
        """
        Store ``tc`` under ``name``, replacing a composer of the same kind.

        Raises:
            MergeConflictError: If ``name`` is taken by a composer of another kind
        """
        existing = self._types.get(name)
        if existing is tc:
            return self
        if existing is not None and not (isinstance(tc, type(existing)) or isinstance(existing, type(tc))):
            raise MergeConflictError(
                f"Type '{name}' is already registered as {type(existing).__name__}, "
                f"cannot register {type(tc).__name__} with the same name."
            )
        self._types[name] = tc
        log.debug(f"{'Replaced' if existing else 'Registered'} {type(tc).__name__} '{name}'")
        return self

    def delete(self, name: str) -> bool:
        return self._types.pop(name, None) is not None

    def add(self, type_def: Any) -> str:
        """
        Register a composer, graphql-core named type or SDL definition.

        Re-adding the composer already stored under its name is a no-op, as is
        adding the graphql-core instance that composer materialized.

        Returns:
            str: The name the type is stored under
        """
        if isinstance(type_def, NamedTypeComposer):
            name = type_def.get_type_name()
            self.set(name, type_def)
            return name
        if isinstance(type_def, Composer):
            return self.add(type_def.get_unwrapped_tc())
        if is_wrapping_type(type_def):
            return self.add(get_named_type(type_def))
        if isinstance(type_def, GraphQLNamedType):
            existing = self._types.get(type_def.name)
            if existing is not None and existing.wraps(type_def):
                return type_def.name
            self.set(type_def.name, composer_class_for(type_def).create_temp(type_def, self))
            return type_def.name
        if isinstance(type_def, str) and classify_definition(type_def) is DefinitionKind.SDL:
            tc = self.type_mapper.convert_sdl_type_definition(type_def)
            self.set(tc.get_type_name(), tc)
            return tc.get_type_name()
        raise ComposerConfigError(f"Cannot add {type_def!r} to SchemaComposer")

    @staticmethod
    def _name_of(type_or_name: Any) -> str:
        if isinstance(type_or_name, str):
            return type_or_name
        if isinstance(type_or_name, Composer):
            return type_or_name.get_type_name()
        if isinstance(type_or_name, GraphQLNamedType):
            return type_or_name.name
        raise ComposerConfigError(f"Expected a type name, composer or GraphQL named type, got {type_or_name!r}")

    # kind-specific getters

    def _get_kind(self, type_or_name: Any, composer_class: type[TC]) -> TC:
        if isinstance(type_or_name, GraphQLNamedType) and not self.has(type_or_name):
            self.add(type_or_name)
        name = self._name_of(type_or_name)
        tc = self._types.get(name)
        if not isinstance(tc, composer_class):
            raise TypeLookupError(f"Cannot find {composer_class.__name__} with name {name}")
        return tc

    def get_otc(self, type_or_name: Any) -> ObjectTypeComposer:
        return self._get_kind(type_or_name, ObjectTypeComposer)

    def get_itc(self, type_or_name: Any) -> InputTypeComposer:
        return self._get_kind(type_or_name, InputTypeComposer)

    def get_stc(self, type_or_name: Any) -> ScalarTypeComposer:
        return self._get_kind(type_or_name, ScalarTypeComposer)

    def get_etc(self, type_or_name: Any) -> EnumTypeComposer:
        return self._get_kind(type_or_name, EnumTypeComposer)

    def get_iftc(self, type_or_name: Any) -> InterfaceTypeComposer:
        return self._get_kind(type_or_name, InterfaceTypeComposer)

    def get_utc(self, type_or_name: Any) -> UnionTypeComposer:
        return self._get_kind(type_or_name, UnionTypeComposer)

    def get_any_tc(self, type_or_name: Any) -> NamedTypeComposer:
        """
        Named composer for a name, composer or graphql-core type (List/NonNull are unwrapped).

        A graphql-core type that is not registered yet is imported on the way.
        """
        if isinstance(type_or_name, str):
            if type_or_name in specified_scalar_types and type_or_name not in self._types:
                return self.get_any_tc(specified_scalar_types[type_or_name])
            return self.get(type_or_name)
        if isinstance(type_or_name, Composer):
            return type_or_name.get_unwrapped_tc()  # type: ignore[no-any-return]
        if is_wrapping_type(type_or_name):
            return self.get_any_tc(get_named_type(type_or_name))
        if isinstance(type_or_name, GraphQLNamedType):
            if type_or_name.name not in self._types:
                self.add(type_or_name)
            return self._types[type_or_name.name]
        raise ComposerConfigError(f"Cannot get a type composer for {type_or_name!r}")

    # factories

    def create_object_tc(self, type_def: Any) -> ObjectTypeComposer:
        return ObjectTypeComposer.create(type_def, self)

    def create_input_tc(self, type_def: Any) -> InputTypeComposer:
        return InputTypeComposer.create(type_def, self)

    def create_scalar_tc(self, type_def: Any) -> ScalarTypeComposer:
        return ScalarTypeComposer.create(type_def, self)

    def create_enum_tc(self, type_def: Any) -> EnumTypeComposer:
        return EnumTypeComposer.create(type_def, self)

    def create_interface_tc(self, type_def: Any) -> InterfaceTypeComposer:
        return InterfaceTypeComposer.create(type_def, self)

    def create_union_tc(self, type_def: Any) -> UnionTypeComposer:
        return UnionTypeComposer.create(type_def, self)

    def _composer_class_for_definition(self, type_def: Any) -> type[NamedTypeComposer]:
        kind = classify_definition(type_def)
        if kind is DefinitionKind.COMPOSER and isinstance(type_def, NamedTypeComposer):
            return type(type_def)
        if kind is DefinitionKind.GRAPHQL_TYPE and isinstance(type_def, GraphQLNamedType):
            return composer_class_for(type_def)
        if kind is DefinitionKind.SDL:
            return type(self.type_mapper.convert_sdl_type_definition(type_def))
        if kind in (DefinitionKind.TYPE_NAME, DefinitionKind.CONFIG):
            return ObjectTypeComposer
        raise ComposerConfigError(f"Cannot create a type composer from {type_def!r}")

    def create_tc(self, type_def: Any) -> NamedTypeComposer:
        """Create and register a composer whose kind follows the definition (SDL keyword, graphql-core class)."""
        if isinstance(type_def, NamedTypeComposer):
            self.add(type_def)
            return type_def
        return self._composer_class_for_definition(type_def).create(type_def, self)

    def create_temp_tc(self, type_def: Any) -> NamedTypeComposer:
        """Like ``create_tc`` but nothing is registered."""
        if isinstance(type_def, NamedTypeComposer):
            return type_def
        return self._composer_class_for_definition(type_def).create_temp(type_def, self)

    def get_or_create_tc(self, composer_class: type[TC], name: str, on_create: OnCreate | None = None) -> TC:
        """
        Return the composer registered under ``name`` or create one of ``composer_class``.

        Args:
            composer_class: Expected composer kind
            name: Type name
            on_create: Called with the new composer, only when it was created here

        Raises:
            TypeLookupError: If ``name`` is registered under another kind
        """
        if name in self._types:
            existing = self._types[name]
            if not isinstance(existing, composer_class):
                raise TypeLookupError(
                    f"Cannot find {composer_class.__name__} with name {name}: it is registered as {type(existing).__name__}"
                )
            return existing
        if composer_class is ScalarTypeComposer and name in specified_scalar_types:
            tc: Any = self.get_any_tc(specified_scalar_types[name])
        else:
            tc = composer_class(name, self)
        if on_create is not None:
            on_create(tc)
        return tc  # type: ignore[no-any-return]

    def get_or_create_otc(self, name: str, on_create: OnCreate | None = None) -> ObjectTypeComposer:
        return self.get_or_create_tc(ObjectTypeComposer, name, on_create)

    def get_or_create_itc(self, name: str, on_create: OnCreate | None = None) -> InputTypeComposer:
        return self.get_or_create_tc(InputTypeComposer, name, on_create)

    def get_or_create_stc(self, name: str, on_create: OnCreate | None = None) -> ScalarTypeComposer:
        return self.get_or_create_tc(ScalarTypeComposer, name, on_create)

    def get_or_create_etc(self, name: str, on_create: OnCreate | None = None) -> EnumTypeComposer:
        return self.get_or_create_tc(EnumTypeComposer, name, on_create)

    def get_or_create_iftc(self, name: str, on_create: OnCreate | None = None) -> InterfaceTypeComposer:
        return self.get_or_create_tc(InterfaceTypeComposer, name, on_create)

    def get_or_create_utc(self, name: str, on_create: OnCreate | None = None) -> UnionTypeComposer:
        return self.get_or_create_tc(UnionTypeComposer, name, on_create)

    # root types

    @property
    def query(self) -> ObjectTypeComposer:
        return self.get_or_create_otc("Query")

    @property
    def mutation(self) -> ObjectTypeComposer:
        return self.get_or_create_otc("Mutation")

    @property
    def subscription(self) -> ObjectTypeComposer:
        return self.get_or_create_otc("Subscription")

    def add_schema_must_have_type(self, type_def: Any) -> "SchemaComposer":
        """Force a type into every built schema even when no field references it."""
        tc = type_def if isinstance(type_def, Composer) else self.get_any_tc(type_def)
        if not any(existing is tc for existing in self._schema_must_have_types):
            self._schema_must_have_types.append(tc)
        return self

    def get_schema_must_have_types(self) -> list[Composer]:
        return list(self._schema_must_have_types)

    def clear(self) -> "SchemaComposer":
        """Drop every type and must-have entry; the directive catalog goes back to the built-ins."""
        self._types = {}
        self._schema_must_have_types = []
        self._directives = list(BUILT_IN_DIRECTIVES)
        log.debug("Cleared SchemaComposer")
        return self

    # SDL & resolvers

    def add_type_defs(self, type_defs: str) -> dict[str, NamedTypeComposer]:
        """
        Register every type and directive declared in SDL.

        Root types (``Query``/``Mutation``/``Subscription`` and the names mapped in a
        ``schema { ... }`` block) are merged field by field into the existing roots,
        ``extend`` definitions are merged into existing types, and every other
        definition replaces a registered type of the same name.

        Args:
            type_defs: SDL text

        Returns:
            dict[str, NamedTypeComposer]: Composers touched by the SDL, by name
        """
        document = parse(type_defs)

        root_aliases = {name: name for name in ROOT_TYPE_NAMES}
        for definition in document.definitions:
            if isinstance(definition, SchemaDefinitionNode):
                for operation_type in definition.operation_types:
                    root_aliases[operation_type.type.name.value] = operation_type.operation.value.capitalize()

        added: dict[str, NamedTypeComposer] = {}
        for definition in document.definitions:
            if not isinstance(definition, TypeDefinitionNode | TypeExtensionNode):
                continue
            name = definition.name.value
            if is_builtin_scalar_type(name):
                continue
            tc = self.type_mapper.make_composer_from_ast(definition)

            if name in root_aliases:
                root = self.get_or_create_otc(root_aliases[name])
                root.merge(tc)
                added[root.get_type_name()] = root
            elif isinstance(definition, TypeExtensionNode) and name in self._types:
                existing = self._types[name]
                existing.merge(tc)  # type: ignore[attr-defined]
                added[name] = existing
            else:
                self.set(name, tc)
                added[name] = tc

        for definition in document.definitions:
            if isinstance(definition, DirectiveDefinitionNode):
                directive = self.type_mapper.make_directive_from_ast(definition)
                if self.has_directive(directive.name):
                    self.remove_directive(directive.name)
                self.add_directive(directive)

        log.debug(f"Added {len(added)} types from SDL")
        return added

    def add_resolve_methods(self, resolve_methods: Mapping[str, Any]) -> "SchemaComposer":
        """
        Attach resolvers the way graphql-tools resolver maps do.

        ``{"Query": {"posts": fn}}`` sets field resolvers; a scalar name mapped to a
        GraphQLScalarType or a config mapping sets the scalar's functions.
        """
        for type_name, methods in resolve_methods.items():
            if isinstance(methods, GraphQLScalarType) and type_name not in self._types:
                self.add(methods)
                continue

            tc = self.get(type_name)
            if isinstance(tc, ScalarTypeComposer):
                source = methods if isinstance(methods, GraphQLScalarType) else {"name": type_name, **methods}
                source_tc = ScalarTypeComposer.create_temp(source, self)
                for attr in SCALAR_FUNCTIONS:
                    value = getattr(source_tc, f"get_{attr}")()
                    if value is not None:
                        getattr(tc, f"set_{attr}")(value)
            elif isinstance(tc, ObjectTypeComposer | InterfaceTypeComposer):
                for field_name, resolve in methods.items():
                    tc.set_field_resolver(field_name, resolve)
            else:
                raise ComposerConfigError(f"Cannot add resolve methods to {type(tc).__name__} '{type_name}'")
        return self

    # directive catalog

    def get_directives(self) -> list[GraphQLDirective]:
        return list(self._directives)

    def add_directive(self, directive: GraphQLDirective) -> "SchemaComposer":
        if not isinstance(directive, GraphQLDirective):
            raise ComposerConfigError(f"You should provide a GraphQLDirective to SchemaComposer.add_directive(), got {directive!r}")
        if not any(existing is directive for existing in self._directives):
            self._directives.append(directive)
        return self

    def _find_directive(self, directive: GraphQLDirective | str) -> int | None:
        for i, existing in enumerate(self._directives):
            if isinstance(directive, str):
                if existing.name == directive.lstrip("@"):
                    return i
            elif existing is directive:
                return i
        return None

    def remove_directive(self, directive: GraphQLDirective | str) -> "SchemaComposer":
        index = self._find_directive(directive)
        if index is not None:
            del self._directives[index]
        return self

    def has_directive(self, directive: GraphQLDirective | str) -> bool:
        return self._find_directive(directive) is not None

    def get_directive(self, name: str) -> GraphQLDirective:
        index = self._find_directive(name)
        if index is None:
            raise TypeLookupError(f"Directive instance with name {name} does not exist.")
        return self._directives[index]

    def clear_directives(self) -> "SchemaComposer":
        self._directives = []
        return self

    # merge & build

    def merge(self, source: "GraphQLSchema | SchemaComposer") -> "SchemaComposer":
        """
        Import every type of another schema or registry.

        Root types merge by field union (non-standard root names such as ``MyQuery``
        merge into ``Query``); other types are added when absent and merged into the
        existing composer otherwise.

        Raises:
            MergeConflictError: If a name is registered here under another kind
        """
        if isinstance(source, SchemaComposer):
            roots = {name: source.get(name).get_type() for name in ROOT_TYPE_NAMES if name in source}
            types = [tc.get_type() for name, tc in source.items() if not is_root_type(name)]
            directives = source.get_directives()
        elif isinstance(source, GraphQLSchema):
            roots = {
                name: root
                for name, root in zip(
                    ROOT_TYPE_NAMES, (source.query_type, source.mutation_type, source.subscription_type), strict=True
                )
                if root is not None
            }
            root_names = {root.name for root in roots.values()}
            types = [gql_type for name, gql_type in source.type_map.items() if name not in root_names]
            directives = list(source.directives)
        else:
            raise ComposerConfigError(f"SchemaComposer.merge() accepts GraphQLSchema or SchemaComposer, got {source!r}")

        for root_name, root in roots.items():
            self.get_or_create_otc(root_name).merge(root)

        for gql_type in types:
            name = gql_type.name
            if is_introspection_type(name) or is_builtin_scalar_type(name):
                continue
            if name not in self._types:
                self.add(gql_type)
                continue
            existing = self._types[name]
            incoming_class = composer_class_for(gql_type)
            if not isinstance(existing, incoming_class):
                raise MergeConflictError(
                    f"Cannot merge {incoming_class.__name__} '{name}' with {type(existing).__name__} '{name}'. "
                    "Types with the same name must be of the same kind."
                )
            existing.merge(gql_type)  # type: ignore[attr-defined]

        for directive in directives:
            if not self.has_directive(directive.name):
                self.add_directive(directive)

        log.debug(f"Merged {len(roots)} root types and {len(types)} types")
        return self

    def remove_empty_types(self, tc: FieldsMixin, _visited: builtins.set[int] | None = None) -> None:
        """
        Remove fields whose object type has no fields, walking the graph below ``tc``.

        Each removal is logged. Self and mutual references terminate through a visited
        set, and fields whose types cannot be resolved are logged and skipped.
        """
        visited = _visited if _visited is not None else set()
        visited.add(id(tc))
        type_name = tc.get_type_name()  # type: ignore[attr-defined]

        for field_name in tc.get_field_names():
            try:
                field_tc = tc.get_field_tc(field_name)
            except ComposeError as error:
                log.warning(f"Skip field '{type_name}.{field_name}' while removing empty types: {error}")
                continue

            if not isinstance(field_tc, ObjectTypeComposer) or id(field_tc) in visited:
                continue
            if not field_tc.get_field_names():
                tc.remove_field(field_name)
                log.info(
                    f"Delete field '{type_name}.{field_name}' with type '{field_tc.get_type_name()}', "
                    "cause it does not have fields."
                )
                continue
            self.remove_empty_types(field_tc, visited)

    def build_schema(
        self,
        types: Sequence[Any] | None = None,
        directives: Sequence[GraphQLDirective] | None = None,
    ) -> GraphQLSchema:
        """
        Materialize the registry into a GraphQLSchema.

        Args:
            types: Extra composers or graphql-core types to include even when unreferenced
            directives: Extra directives on top of the catalog

        Returns:
            GraphQLSchema: The executable schema

        Raises:
            SchemaBuildError: If the Query type is missing or has no fields
        """
        query = self._types.get("Query")
        if not isinstance(query, ObjectTypeComposer) or not query.get_field_names():
            raise SchemaBuildError("Query type must be initialized and have at least one field.")

        roots: dict[str, Any] = {"query": query.get_type()}
        for key, name in (("mutation", "Mutation"), ("subscription", "Subscription")):
            root = self._types.get(name)
            if isinstance(root, ObjectTypeComposer) and root.get_field_names():
                roots[key] = root.get_type()

        extra_types: list[Any] = []
        seen: set[int] = set()
        for type_def in [*self._schema_must_have_types, *(types or ())]:
            gql_type = type_def.get_type() if isinstance(type_def, Composer) else type_def
            if id(gql_type) not in seen:
                seen.add(id(gql_type))
                extra_types.append(gql_type)

        all_directives = list(self._directives)
        for directive in directives or ():
            if not any(existing is directive for existing in all_directives):
                all_directives.append(directive)

        schema = GraphQLSchema(**roots, types=extra_types or None, directives=all_directives)
        log.info(f"Built schema with {len(schema.type_map)} types and {len(all_directives)} directives")
        return schema


schema_composer = SchemaComposer()
