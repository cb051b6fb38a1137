from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Self

from graphql import GraphQLEnumType, GraphQLEnumValue

from gqlcompose.composers.base import NamedTypeComposer
from gqlcompose.definitions import EnumValueConfig, extensions_with_directives
from gqlcompose.errors import ComposerConfigError, FieldNotFoundError

if TYPE_CHECKING:
    from gqlcompose.schema_composer import SchemaComposer

ENUM_VALUE_KEYS = {"value", "description", "deprecation_reason", "extensions", "directives", "ast_node"}


class EnumTypeComposer(NamedTypeComposer):
    """Composer for ``enum Name { ... }``; values default to their own names."""

    graphql_class = GraphQLEnumType
    cached_type_properties = ("_value_lookup",)

    def __init__(
        self,
        name: str,
        schema_composer: "SchemaComposer",
        *,
        values: Mapping[str, Any] | Sequence[str] | None = None,
        description: str | None = None,
        extensions: Mapping[str, Any] | None = None,
        ast_node: Any = None,
        temp: bool = False,
    ) -> None:
        self._values: dict[str, EnumValueConfig] = {}
        super().__init__(
            name, schema_composer, description=description, extensions=extensions, ast_node=ast_node, temp=temp
        )
        if values:
            self.set_values(values)

    @classmethod
    def _from_graphql_type(cls, gql_type: GraphQLEnumType, schema_composer: "SchemaComposer") -> Self:
        tc = cls(
            gql_type.name,
            schema_composer,
            description=gql_type.description,
            extensions=gql_type.extensions,
            ast_node=gql_type.ast_node,
            temp=True,
        )
        tc._values = {name: _convert_value(name, value) for name, value in gql_type.values.items()}
        return tc

    @classmethod
    def _from_config(cls, config: Mapping[str, Any], schema_composer: "SchemaComposer") -> Self:
        options = cls._common_config(config, ("values",))
        return cls(config["name"], schema_composer, values=config.get("values") or {}, temp=True, **options)

    @classmethod
    def _sdl_example(cls) -> str:
        return "enum Example { A B }"

    def _create_type(self) -> GraphQLEnumType:
        return GraphQLEnumType(
            self._name,
            self._build_values(),
            description=self._description,
            extensions=dict(self._extensions),
            ast_node=self._ast_node,
        )

    def _sync_type(self, gql_type: Any) -> None:
        super()._sync_type(gql_type)
        gql_type.values = self._build_values()

    def _build_values(self) -> dict[str, GraphQLEnumValue]:
        return {
            name: GraphQLEnumValue(
                name if config.value is None else config.value,
                description=config.description,
                deprecation_reason=config.deprecation_reason,
                extensions=dict(config.extensions),
                ast_node=config.ast_node,
            )
            for name, config in self._values.items()
        }

    def _convert_values(self, values: Mapping[str, Any] | Sequence[str]) -> dict[str, EnumValueConfig]:
        if isinstance(values, str):
            raise ComposerConfigError(f"Values of enum {self._name} must be a mapping or a list of names")
        if not isinstance(values, Mapping):
            return {name: EnumValueConfig() for name in values}
        return {name: _convert_value(name, value) for name, value in values.items()}

    def get_values(self) -> dict[str, EnumValueConfig]:
        return dict(self._values)

    def get_value_names(self) -> list[str]:
        return list(self._values)

    def has_value(self, name: str) -> bool:
        return name in self._values

    def get_value(self, name: str) -> EnumValueConfig:
        try:
            return self._values[name]
        except KeyError:
            raise FieldNotFoundError(f"Cannot get value '{name}' from enum type '{self._name}'. Value with such name does not exist.") from None

    def set_values(self, values: Mapping[str, Any] | Sequence[str]) -> Self:
        self._values = self._convert_values(values)
        return self._changed()

    def add_values(self, values: Mapping[str, Any] | Sequence[str]) -> Self:
        self._values.update(self._convert_values(values))
        return self._changed()

    def set_value(self, name: str, value: Any) -> Self:
        return self.add_values({name: value})

    def remove_value(self, names: str | Sequence[str]) -> Self:
        for name in [names] if isinstance(names, str) else names:
            self._values.pop(name, None)
        return self._changed()

    def remove_other_values(self, names: str | Sequence[str]) -> Self:
        keep = {names} if isinstance(names, str) else set(names)
        self._values = {name: config for name, config in self._values.items() if name in keep}
        return self._changed()

    def reorder_values(self, names: Sequence[str]) -> Self:
        ordered = {name: self._values[name] for name in names if name in self._values}
        for name, config in self._values.items():
            ordered.setdefault(name, config)
        self._values = ordered
        return self._changed()

    def extend_value(self, name: str, partial: Mapping[str, Any]) -> Self:
        if name not in self._values:
            raise FieldNotFoundError(f"Cannot extend value '{name}' from enum type '{self._name}'. Value does not exist.")
        current = self._values[name]
        updates = dict(partial)
        extensions = {**current.extensions, **(updates.pop("extensions", None) or {})}
        if "directives" in updates:
            extensions = extensions_with_directives(extensions, updates.pop("directives"))
        try:
            self._values[name] = replace(current, **updates, extensions=extensions)
        except TypeError as error:
            raise ComposerConfigError(f"Cannot extend value '{name}': {error}") from error
        return self._changed()

    def deprecate(self, reasons: str | Sequence[str] | Mapping[str, str]) -> Self:
        """Mark values deprecated: a name, a list of names, or a name -> reason mapping."""
        if isinstance(reasons, str):
            reasons = {reasons: "deprecated"}
        elif not isinstance(reasons, Mapping):
            reasons = {name: "deprecated" for name in reasons}
        for name, reason in reasons.items():
            self.extend_value(name, {"deprecation_reason": reason})
        return self

    def merge(self, other: Any) -> Self:
        """Append values of ``other`` (same kind or GraphQLEnumType); existing values win."""
        source = self._coerce_merge_source(other)
        for name, config in source._values.items():
            self._values.setdefault(name, config)
        return self._changed()

    def clone(self, new_type_or_name: "str | EnumTypeComposer") -> "EnumTypeComposer":
        target = self._clone_target(new_type_or_name)
        self._clone_common(target)
        target._values = dict(self._values)
        return target


def _convert_value(name: str, value: Any) -> EnumValueConfig:
    if isinstance(value, EnumValueConfig):
        return value
    if isinstance(value, GraphQLEnumValue):
        return EnumValueConfig(
            value=value.value,
            description=value.description,
            deprecation_reason=value.deprecation_reason,
            extensions=dict(value.extensions or {}),
            ast_node=value.ast_node,
        )
    if isinstance(value, Mapping):
        unknown = set(value) - ENUM_VALUE_KEYS
        if unknown:
            raise ComposerConfigError(f"Unknown options for enum value '{name}': {', '.join(sorted(unknown))}")
        return EnumValueConfig(
            value=value.get("value"),
            description=value.get("description"),
            deprecation_reason=value.get("deprecation_reason"),
            extensions=extensions_with_directives(value.get("extensions"), value.get("directives")),
            ast_node=value.get("ast_node"),
        )
    return EnumValueConfig(value=value)
