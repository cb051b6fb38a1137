"""Field-map behaviour shared by object, interface and input composers."""

from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Self

from graphql import GraphQLArgument, GraphQLField, GraphQLInputField, GraphQLType

from gqlcompose.composers.wrappers import (
    Composer,
    is_plural,
    make_non_null,
    make_non_plural,
    make_nullable,
    make_plural,
    NonNullComposer,
)
from gqlcompose.definitions import (
    InputFieldConfig,
    ObjectFieldConfig,
    DirectiveUsage,
    directive_by_id,
    directive_by_name,
    directive_names,
    directives_from_extensions,
    extensions_with_directives,
    normalize_directives,
)
from gqlcompose.errors import ComposerConfigError, FieldNotFoundError
from gqlcompose.utils.graphql_type import upper_first

if TYPE_CHECKING:
    from gqlcompose.composers.base import NamedTypeComposer

FieldNames = str | Sequence[str]


def _as_names(names: FieldNames) -> list[str]:
    return [names] if isinstance(names, str) else list(names)


class FieldsMixin:
    """
    Ordered field map with CRUD helpers.

    Host classes provide ``_convert_field`` (definition -> config record) and
    ``_nested_composer_class`` (kind created by ``add_nested_fields``).
    """

    _fields: dict[str, Any]

    def _convert_field(self, field_def: Any, field_name: str) -> Any:
        raise NotImplementedError

    def _nested_composer_class(self) -> type["NamedTypeComposer"]:
        raise NotImplementedError

    def _convert_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        if not isinstance(fields, Mapping):
            raise ComposerConfigError(f"Fields of {self.get_type_name()} must be a mapping, got {type(fields).__name__}")  # type: ignore[attr-defined]
        return {name: self._convert_field(field_def, name) for name, field_def in fields.items()}

    def get_fields(self) -> dict[str, Any]:
        return dict(self._fields)

    def get_field_names(self) -> list[str]:
        return list(self._fields)

    def has_field(self, field_name: str) -> bool:
        return field_name in self._fields

    def get_field(self, field_name: str) -> Any:
        """
        Return the stored config record of a field.

        Raises:
            FieldNotFoundError: If the field does not exist
        """
        try:
            return self._fields[field_name]
        except KeyError:
            raise FieldNotFoundError(
                f"Cannot get field '{field_name}' from type '{self.get_type_name()}'. Field does not exist."  # type: ignore[attr-defined]
            ) from None

    def set_fields(self, fields: Mapping[str, Any]) -> Self:
        self._fields = self._convert_fields(fields)
        return self._changed()  # type: ignore[attr-defined,no-any-return]

    def set_field(self, field_name: str, field_def: Any) -> Self:
        self._fields[field_name] = self._convert_field(field_def, field_name)
        return self._changed()  # type: ignore[attr-defined,no-any-return]

    def add_fields(self, fields: Mapping[str, Any]) -> Self:
        self._fields.update(self._convert_fields(fields))
        return self._changed()  # type: ignore[attr-defined,no-any-return]

    def add_nested_fields(self, fields: Mapping[str, Any]) -> Self:
        """
        Add fields given by dotted paths, creating intermediate types on the way.

        ``{"address.city": "String"}`` on ``User`` creates (or reuses) ``UserAddress``
        with a ``city`` field and adds ``address: UserAddress`` to ``User``.
        """
        for path, field_def in fields.items():
            name, _, rest = path.partition(".")
            if not rest:
                self.set_field(name, field_def)
                continue

            nested_class = self._nested_composer_class()
            if not self.has_field(name):
                nested_name = f"{self.get_type_name()}{upper_first(name)}"  # type: ignore[attr-defined]
                nested_tc = self.schema_composer.get_or_create_tc(nested_class, nested_name)  # type: ignore[attr-defined]
                self.set_field(name, {"type": nested_tc, **self._nested_field_extras()})
            else:
                nested_tc = self.get_field_tc(name)
                if not isinstance(nested_tc, nested_class):
                    raise ComposerConfigError(
                        f"Cannot add nested field '{path}' to '{self.get_type_name()}': "  # type: ignore[attr-defined]
                        f"field '{name}' is not of {nested_class.__name__} kind"
                    )
            nested_tc.add_nested_fields({rest: field_def})
        return self

    def _nested_field_extras(self) -> dict[str, Any]:
        return {}

    def remove_field(self, names: FieldNames) -> Self:
        for name in _as_names(names):
            self._fields.pop(name, None)
        return self._changed()  # type: ignore[attr-defined,no-any-return]

    def remove_other_fields(self, names: FieldNames) -> Self:
        keep = set(_as_names(names))
        self._fields = {name: config for name, config in self._fields.items() if name in keep}
        return self._changed()  # type: ignore[attr-defined,no-any-return]

    def reorder_fields(self, names: Sequence[str]) -> Self:
        """Move the named fields to the front in the given order; the rest keep their relative order."""
        ordered = {name: self._fields[name] for name in names if name in self._fields}
        for name, config in self._fields.items():
            ordered.setdefault(name, config)
        self._fields = ordered
        return self._changed()  # type: ignore[attr-defined,no-any-return]

    def extend_field(self, field_name: str, partial: Any) -> Self:
        """
        Shallow-merge ``partial`` onto an existing field; extensions are merged key by key.

        Args:
            field_name: Field to extend
            partial: Mapping of config keys, or any field definition (its set keys are applied)

        Raises:
            FieldNotFoundError: If the field does not exist
        """
        if field_name not in self._fields:
            raise FieldNotFoundError(
                f"Cannot extend field '{field_name}' from type '{self.get_type_name()}'. Field does not exist."  # type: ignore[attr-defined]
            )
        current = self._fields[field_name]
        updates = dict(partial) if isinstance(partial, Mapping) else {"type": partial}

        extensions = {**current.extensions, **(updates.pop("extensions", None) or {})}
        if "directives" in updates:
            extensions = extensions_with_directives(extensions, updates.pop("directives"))
        if "type" in updates:
            updates["type"] = self._convert_field({"type": updates["type"]}, field_name).type
        if "args" in updates:
            updates["args"] = self.type_mapper.convert_args(updates["args"])  # type: ignore[attr-defined]

        try:
            self._fields[field_name] = replace(current, **updates, extensions=extensions)
        except TypeError as error:
            raise ComposerConfigError(f"Cannot extend field '{field_name}': {error}") from error
        return self._changed()  # type: ignore[attr-defined,no-any-return]

    def _replace_field(self, field_name: str, **changes: Any) -> None:
        self._fields[field_name] = replace(self._fields[field_name], **changes)
        self._changed()  # type: ignore[attr-defined]

    # field types

    def get_field_type(self, field_name: str) -> GraphQLType:
        return self.get_field(field_name).type.get_type()

    def get_field_type_name(self, field_name: str) -> str:
        return self.get_field(field_name).type.get_type_name()

    def get_field_tc(self, field_name: str) -> Any:
        """Named composer of the field type, with List/NonNull/thunk layers removed."""
        return self.get_field(field_name).type.get_unwrapped_tc()

    def get_field_config(self, field_name: str) -> Any:
        """Materialized graphql-core field (GraphQLField or GraphQLInputField)."""
        return self._build_field(self.get_field(field_name))

    def _build_field(self, config: Any) -> Any:
        raise NotImplementedError

    def is_field_plural(self, field_name: str) -> bool:
        return is_plural(self.get_field(field_name).type)

    def is_field_non_null(self, field_name: str) -> bool:
        return isinstance(self.get_field(field_name).type, NonNullComposer)

    def _rewrap(self, names: FieldNames, wrapper: Any) -> Self:
        for name in _as_names(names):
            if name in self._fields:
                self._replace_field(name, type=wrapper(self._fields[name].type))
        return self

    def make_field_plural(self, names: FieldNames) -> Self:
        return self._rewrap(names, make_plural)

    def make_field_non_plural(self, names: FieldNames) -> Self:
        return self._rewrap(names, make_non_plural)

    def make_field_non_null(self, names: FieldNames) -> Self:
        return self._rewrap(names, make_non_null)

    def make_field_nullable(self, names: FieldNames) -> Self:
        return self._rewrap(names, make_nullable)

    # field extensions & directives

    def get_field_extensions(self, field_name: str) -> dict[str, Any]:
        return dict(self.get_field(field_name).extensions)

    def set_field_extensions(self, field_name: str, extensions: Mapping[str, Any]) -> Self:
        self.get_field(field_name)
        self._replace_field(field_name, extensions=dict(extensions))
        return self

    def extend_field_extensions(self, field_name: str, extensions: Mapping[str, Any]) -> Self:
        current = self.get_field_extensions(field_name)
        return self.set_field_extensions(field_name, {**current, **extensions})

    def get_field_extension(self, field_name: str, extension_name: str) -> Any:
        return self.get_field_extensions(field_name).get(extension_name)

    def has_field_extension(self, field_name: str, extension_name: str) -> bool:
        return extension_name in self.get_field_extensions(field_name)

    def set_field_extension(self, field_name: str, extension_name: str, value: Any) -> Self:
        return self.extend_field_extensions(field_name, {extension_name: value})

    def remove_field_extension(self, field_name: str, extension_name: str) -> Self:
        extensions = self.get_field_extensions(field_name)
        extensions.pop(extension_name, None)
        return self.set_field_extensions(field_name, extensions)

    def get_field_directives(self, field_name: str) -> list[DirectiveUsage]:
        return directives_from_extensions(self.get_field(field_name).extensions)

    def set_field_directives(self, field_name: str, directives: Sequence[Any]) -> Self:
        extensions = extensions_with_directives(self.get_field_extensions(field_name), normalize_directives(directives))
        return self.set_field_extensions(field_name, extensions)

    def get_field_directive_names(self, field_name: str) -> list[str]:
        return directive_names(self.get_field_directives(field_name))

    def get_field_directive_by_name(self, field_name: str, directive_name: str) -> dict[str, Any] | None:
        return directive_by_name(self.get_field_directives(field_name), directive_name)

    def get_field_directive_by_id(self, field_name: str, index: int) -> dict[str, Any] | None:
        return directive_by_id(self.get_field_directives(field_name), index)

    # merge & clone helpers

    def _merge_fields_from(self, other: Any) -> None:
        for name, config in other.get_fields().items():
            if name not in self._fields:
                self._fields[name] = self._convert_field(config, name)
        self._changed()  # type: ignore[attr-defined]

    def _copy_fields_to(self, target: Any) -> None:
        target._fields = dict(self._fields)


class OutputFieldsMixin(FieldsMixin):
    """Arguments, resolvers and interfaces of object and interface types."""

    _interfaces: dict[str, Composer]

    def _convert_field(self, field_def: Any, field_name: str) -> ObjectFieldConfig:
        return self.type_mapper.convert_output_field_config(field_def, field_name, self.get_type_name())  # type: ignore[attr-defined,no-any-return]

    def _nested_field_extras(self) -> dict[str, Any]:
        # nested object fields need a non-null source, so they resolve to an empty object by default
        return {"resolve": lambda source, info, **args: {}}

    def _build_field(self, config: ObjectFieldConfig) -> GraphQLField:
        return GraphQLField(
            config.type.get_type(),  # type: ignore[arg-type]
            args={name: _build_argument(arg) for name, arg in config.args.items()},
            resolve=config.resolve,
            subscribe=config.subscribe,
            description=config.description,
            deprecation_reason=config.deprecation_reason,
            extensions=dict(config.extensions),
            ast_node=config.ast_node,
        )

    def _build_fields(self) -> dict[str, GraphQLField]:
        return {name: self._build_field(config) for name, config in self._fields.items()}

    # resolvers

    def get_field_resolver(self, field_name: str) -> Any:
        return self.get_field(field_name).resolve

    def set_field_resolver(self, field_name: str, resolve: Any) -> Self:
        self.get_field(field_name)
        if resolve is not None and not callable(resolve):
            raise ComposerConfigError(f"Resolver for '{self.get_type_name()}.{field_name}' must be callable")  # type: ignore[attr-defined]
        self._replace_field(field_name, resolve=resolve)
        return self

    # arguments

    def get_field_args(self, field_name: str) -> dict[str, InputFieldConfig]:
        return dict(self.get_field(field_name).args)

    def get_field_arg_names(self, field_name: str) -> list[str]:
        return list(self.get_field(field_name).args)

    def has_field_arg(self, field_name: str, arg_name: str) -> bool:
        return self.has_field(field_name) and arg_name in self._fields[field_name].args

    def get_field_arg(self, field_name: str, arg_name: str) -> InputFieldConfig:
        args = self.get_field(field_name).args
        if arg_name not in args:
            raise FieldNotFoundError(
                f"Cannot get arg '{arg_name}' from type.field '{self.get_type_name()}.{field_name}'. Argument does not exist."  # type: ignore[attr-defined]
            )
        return args[arg_name]  # type: ignore[no-any-return]

    def get_field_arg_type(self, field_name: str, arg_name: str) -> GraphQLType:
        return self.get_field_arg(field_name, arg_name).type.get_type()

    def get_field_arg_tc(self, field_name: str, arg_name: str) -> Any:
        return self.get_field_arg(field_name, arg_name).type.get_unwrapped_tc()

    def set_field_args(self, field_name: str, args: Mapping[str, Any]) -> Self:
        self.get_field(field_name)
        self._replace_field(field_name, args=self.type_mapper.convert_args(args))  # type: ignore[attr-defined]
        return self

    def add_field_args(self, field_name: str, args: Mapping[str, Any]) -> Self:
        current = self.get_field(field_name).args
        self._replace_field(field_name, args={**current, **self.type_mapper.convert_args(args)})  # type: ignore[attr-defined]
        return self

    def remove_field_arg(self, field_name: str, arg_names: FieldNames) -> Self:
        drop = set(_as_names(arg_names))
        current = self.get_field(field_name).args
        self._replace_field(field_name, args={k: v for k, v in current.items() if k not in drop})
        return self

    # interfaces

    def get_interfaces(self) -> list[Composer]:
        return list(self._interfaces.values())

    def get_interface_names(self) -> list[str]:
        return list(self._interfaces)

    def set_interfaces(self, interfaces: Sequence[Any]) -> Self:
        self._interfaces = {}
        for interface in interfaces:
            tc = self.type_mapper.convert_interface_type(interface)  # type: ignore[attr-defined]
            self._interfaces[tc.get_type_name()] = tc
        return self._changed()  # type: ignore[attr-defined,no-any-return]

    def add_interface(self, interface: Any) -> Self:
        tc = self.type_mapper.convert_interface_type(interface)  # type: ignore[attr-defined]
        self._interfaces.setdefault(tc.get_type_name(), tc)
        return self._changed()  # type: ignore[attr-defined,no-any-return]

    def add_interfaces(self, interfaces: Sequence[Any]) -> Self:
        for interface in interfaces:
            self.add_interface(interface)
        return self

    def has_interface(self, interface: Any) -> bool:
        return self._interface_name(interface) in self._interfaces

    def remove_interface(self, interface: Any) -> Self:
        self._interfaces.pop(self._interface_name(interface), None)
        return self._changed()  # type: ignore[attr-defined,no-any-return]

    def _interface_name(self, interface: Any) -> str:
        if isinstance(interface, str):
            return interface
        if isinstance(interface, Composer):
            return interface.get_type_name()
        return str(getattr(interface, "name", interface))

    def _build_interfaces(self) -> list[Any]:
        return [tc.get_type() for tc in self._interfaces.values()]

    def _merge_interfaces_from(self, other: Any) -> None:
        for name, tc in other._interfaces.items():
            self._interfaces.setdefault(name, tc)
        self._changed()  # type: ignore[attr-defined]


def _build_argument(config: InputFieldConfig) -> GraphQLArgument:
    return GraphQLArgument(
        config.type.get_type(),  # type: ignore[arg-type]
        default_value=config.default_value,
        description=config.description,
        deprecation_reason=config.deprecation_reason,
        extensions=dict(config.extensions),
        ast_node=config.ast_node,
    )


def build_input_field(config: InputFieldConfig) -> GraphQLInputField:
    return GraphQLInputField(
        config.type.get_type(),  # type: ignore[arg-type]
        default_value=config.default_value,
        description=config.description,
        deprecation_reason=config.deprecation_reason,
        extensions=dict(config.extensions),
        ast_node=config.ast_node,
    )
