"""Behaviour shared by every named type composer."""

import re
from abc import abstractmethod
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, ClassVar, Self, cast

from graphql import GraphQLNamedType

from gqlcompose import log
from gqlcompose.composers.wrappers import Composer
from gqlcompose.definitions import (
    DIRECTIVES_EXTENSION,
    DirectiveUsage,
    directive_by_id,
    directive_by_name,
    directive_names,
    directives_from_extensions,
    extensions_with_directives,
)
from gqlcompose.errors import ComposerConfigError, MergeConflictError

if TYPE_CHECKING:
    from gqlcompose.schema_composer import SchemaComposer
    from gqlcompose.type_mapper import TypeMapper

NAME_PATTERN = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")


def _new_schema_composer() -> "SchemaComposer":
    from gqlcompose.schema_composer import SchemaComposer

    return SchemaComposer()


class NamedTypeComposer(Composer):
    """
    Mutable builder for one named GraphQL type.

    The composer owns its configuration and materializes exactly one graphql-core
    instance on the first ``get_type()`` call. Mutations after that point update
    the cached instance in place, so every reference handed out earlier stays valid.
    """

    graphql_class: ClassVar[type[GraphQLNamedType]]
    # graphql-core cached_property names dropped when the configuration changes
    cached_type_properties: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        name: str,
        schema_composer: "SchemaComposer",
        *,
        description: str | None = None,
        extensions: Mapping[str, Any] | None = None,
        ast_node: Any = None,
        temp: bool = False,
    ) -> None:
        """
        Create the composer and register it under ``name``.

        Args:
            name: GraphQL type name
            schema_composer: Registry the composer belongs to
            description: Type description
            extensions: Arbitrary extension values; directives live under "directives"
            ast_node: SDL node the composer was built from
            temp: Skip registration when True
        """
        from gqlcompose.schema_composer import SchemaComposer

        if not isinstance(schema_composer, SchemaComposer):
            raise ComposerConfigError(
                f"You must provide SchemaComposer instance as a second argument for `{type(self).__name__}(name, schema_composer)`"
            )
        if not isinstance(name, str) or not NAME_PATTERN.match(name):
            raise ComposerConfigError(f"{type(self).__name__} expects a valid GraphQL type name, got {name!r}")

        self.schema_composer = schema_composer
        self._name = name
        self._description = description
        self._extensions: dict[str, Any] = dict(extensions or {})
        self._ast_node = ast_node
        self._gql_type: GraphQLNamedType | None = None
        self._type_changed = False

        if not temp:
            schema_composer.add(self)

    # construction helpers

    @classmethod
    def create_temp(cls, type_def: Any, schema_composer: "SchemaComposer | None" = None) -> Self:
        """
        Build an unregistered composer from a name, SDL text, graphql-core type or config mapping.

        Args:
            type_def: The type definition
            schema_composer: Registry used to resolve references (a fresh one when omitted)

        Returns:
            The new composer
        """
        from gqlcompose.type_mapper import DefinitionKind, classify_definition

        sc = schema_composer if schema_composer is not None else _new_schema_composer()
        kind = classify_definition(type_def)

        if kind is DefinitionKind.TYPE_NAME:
            return cls(type_def.strip(), sc, temp=True)
        if kind is DefinitionKind.SDL:
            tc = sc.type_mapper.convert_sdl_type_definition(type_def)
            if not isinstance(tc, cls):
                raise ComposerConfigError(
                    f"You should provide correct {cls.graphql_class.__name__} type definition. "
                    f"Eg. `{cls._sdl_example()}`"
                )
            return tc
        if kind is DefinitionKind.GRAPHQL_TYPE and isinstance(type_def, cls.graphql_class):
            return cls._from_graphql_type(type_def, sc)
        if kind is DefinitionKind.CONFIG:
            return cls._from_config(type_def, sc)

        raise ComposerConfigError(f"You should provide a type name, SDL, {cls.graphql_class.__name__} or config mapping to {cls.__name__}.create_temp()")

    @classmethod
    def create(cls, type_def: Any, schema_composer: "SchemaComposer") -> Self:
        """
        Like ``create_temp`` but registers the result.

        A bare type name or a wrapped graphql-core instance returns the composer already
        registered for it. SDL and config mappings replace a registered type of the same name.
        """
        from gqlcompose.schema_composer import SchemaComposer

        if not isinstance(schema_composer, SchemaComposer):
            raise ComposerConfigError(f"You must provide SchemaComposer instance as a second argument for `{cls.__name__}.create(type_def, schema_composer)`")

        if isinstance(type_def, str) and NAME_PATTERN.match(type_def.strip()) and schema_composer.has(type_def.strip()):
            existing = schema_composer.get(type_def.strip())
            if isinstance(existing, cls):
                return existing
        if isinstance(type_def, GraphQLNamedType) and schema_composer.has(type_def.name):
            existing = schema_composer.get(type_def.name)
            if isinstance(existing, cls) and existing.wraps(type_def):
                return existing

        # SDL and config mappings are full definitions: they replace a registered type of the same name
        tc = cls.create_temp(type_def, schema_composer)
        schema_composer.add(tc)
        return tc

    @classmethod
    def _from_graphql_type(cls, gql_type: Any, schema_composer: "SchemaComposer") -> Self:
        raise NotImplementedError

    @classmethod
    def _from_config(cls, config: Mapping[str, Any], schema_composer: "SchemaComposer") -> Self:
        raise NotImplementedError

    @classmethod
    def _sdl_example(cls) -> str:
        return "type Example { name: String }"

    @classmethod
    def _common_config(cls, config: Mapping[str, Any], allowed: Sequence[str]) -> dict[str, Any]:
        """Validate config keys and pull out the options every composer accepts."""
        unknown = set(config) - {"name", "description", "extensions", "directives", "ast_node", *allowed}
        if unknown:
            raise ComposerConfigError(f"Unknown options for {cls.__name__}: {', '.join(sorted(unknown))}")
        name = config.get("name")
        if not isinstance(name, str):
            raise ComposerConfigError(f"{cls.__name__} config must have a string `name`")
        return {
            "description": config.get("description"),
            "extensions": extensions_with_directives(config.get("extensions"), config.get("directives")),
            "ast_node": config.get("ast_node"),
        }

    @property
    def type_mapper(self) -> "TypeMapper":
        return self.schema_composer.type_mapper

    # graphql-core materialization

    def get_type(self) -> GraphQLNamedType:
        if self._gql_type is None:
            self._gql_type = self._create_type()
            self._type_changed = False
        elif self._type_changed:
            self._sync_type(self._gql_type)
            self._type_changed = False
        return self._gql_type

    @abstractmethod
    def _create_type(self) -> GraphQLNamedType: ...

    def _sync_type(self, gql_type: Any) -> None:
        """Push the current configuration onto the already materialized instance."""
        gql_type.name = self._name
        gql_type.description = self._description
        gql_type.extensions = dict(self._extensions)
        gql_type.ast_node = self._ast_node
        for prop in self.cached_type_properties:
            gql_type.__dict__.pop(prop, None)

    def _changed(self) -> Self:
        self._type_changed = True
        return self

    def wraps(self, gql_type: Any) -> bool:
        """True when ``gql_type`` is the instance this composer materialized."""
        return self._gql_type is not None and self._gql_type is gql_type

    def get_unwrapped_tc(self) -> Self:
        return self

    # name & description

    def get_type_name(self) -> str:
        return self._name

    def set_type_name(self, name: str) -> Self:
        """Rename the type; a registered composer is moved to the new name."""
        if not NAME_PATTERN.match(name):
            raise ComposerConfigError(f"Invalid GraphQL type name {name!r}")
        old_name = self._name
        if old_name == name:
            return self
        sc = self.schema_composer
        registered = sc.has(old_name) and sc.get(old_name) is self
        self._name = name
        if registered:
            sc.delete(old_name)
            sc.set(name, self)
            log.debug(f"Renamed {type(self).__name__} '{old_name}' to '{name}'")
        return self._changed()

    def get_description(self) -> str | None:
        return self._description

    def set_description(self, description: str | None) -> Self:
        self._description = description
        return self._changed()

    # extensions

    def get_extensions(self) -> dict[str, Any]:
        return dict(self._extensions)

    def set_extensions(self, extensions: Mapping[str, Any] | None) -> Self:
        self._extensions = dict(extensions or {})
        return self._changed()

    def extend_extensions(self, extensions: Mapping[str, Any]) -> Self:
        self._extensions = {**self._extensions, **extensions}
        return self._changed()

    def clear_extensions(self) -> Self:
        return self.set_extensions({})

    def get_extension(self, name: str) -> Any:
        return self._extensions.get(name)

    def has_extension(self, name: str) -> bool:
        return name in self._extensions

    def set_extension(self, name: str, value: Any) -> Self:
        return self.extend_extensions({name: value})

    def remove_extension(self, name: str) -> Self:
        self._extensions = {k: v for k, v in self._extensions.items() if k != name}
        return self._changed()

    # type-level directives

    def get_directives(self) -> list[DirectiveUsage]:
        return directives_from_extensions(self._extensions)

    def set_directives(self, directives: Sequence[Any]) -> Self:
        self._extensions = extensions_with_directives(self._extensions, directives)
        return self._changed()

    def get_directive_names(self) -> list[str]:
        return directive_names(self.get_directives())

    def get_directive_by_name(self, directive_name: str) -> dict[str, Any] | None:
        return directive_by_name(self.get_directives(), directive_name)

    def set_directive_by_name(self, directive_name: str, args: Mapping[str, Any] | None = None) -> Self:
        """Replace the arguments of the first ``directive_name`` instance, or append a new one."""
        directives = self.get_directives()
        usage = DirectiveUsage(directive_name, dict(args or {}))
        for i, directive in enumerate(directives):
            if directive.name == directive_name:
                directives[i] = usage
                break
        else:
            directives.append(usage)
        return self.set_directives(directives)

    def get_directive_by_id(self, index: int) -> dict[str, Any] | None:
        return directive_by_id(self.get_directives(), index)

    def has_directives(self) -> bool:
        return bool(self._extensions.get(DIRECTIVES_EXTENSION))

    # merge & clone

    def _coerce_merge_source(self, other: Any) -> Self:
        if isinstance(other, type(self)):
            return cast(Self, other)
        if isinstance(other, self.graphql_class) and not isinstance(other, NamedTypeComposer):
            return type(self).create_temp(other, self.schema_composer)
        other_kind = type(other).__name__
        other_name = other.get_type_name() if isinstance(other, Composer) else getattr(other, "name", "?")
        raise MergeConflictError(
            f"Cannot merge {other_kind} '{other_name}' with {type(self).__name__} '{self.get_type_name()}'. "
            "Provided type should be of the same kind."
        )

    def _clone_target(self, new_type_or_name: "str | NamedTypeComposer") -> Self:
        if isinstance(new_type_or_name, str):
            return type(self)(new_type_or_name, self.schema_composer)
        if isinstance(new_type_or_name, type(self)):
            if new_type_or_name is self:
                raise ComposerConfigError("Cannot clone a composer into itself")
            return new_type_or_name
        raise ComposerConfigError(f"You should provide a new type name or {type(self).__name__} to clone()")

    def _clone_common(self, target: "NamedTypeComposer") -> None:
        target._description = self._description
        target._extensions = dict(self._extensions)
        target._changed()
