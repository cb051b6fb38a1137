from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Self

from graphql import GraphQLInputField, GraphQLInputObjectType

from gqlcompose.composers.base import NamedTypeComposer
from gqlcompose.composers.fields import FieldNames, FieldsMixin, build_input_field
from gqlcompose.definitions import InputFieldConfig
from gqlcompose.errors import ComposerConfigError

if TYPE_CHECKING:
    from gqlcompose.schema_composer import SchemaComposer


class InputTypeComposer(FieldsMixin, NamedTypeComposer):
    """Composer for ``input Name { ... }``."""

    graphql_class = GraphQLInputObjectType
    cached_type_properties = ("fields",)

    def __init__(
        self,
        name: str,
        schema_composer: "SchemaComposer",
        *,
        fields: Mapping[str, Any] | None = None,
        description: str | None = None,
        extensions: Mapping[str, Any] | None = None,
        ast_node: Any = None,
        temp: bool = False,
    ) -> None:
        self._fields = {}
        super().__init__(
            name, schema_composer, description=description, extensions=extensions, ast_node=ast_node, temp=temp
        )
        if fields:
            self.set_fields(fields)

    @classmethod
    def _from_graphql_type(cls, gql_type: GraphQLInputObjectType, schema_composer: "SchemaComposer") -> Self:
        mapper = schema_composer.type_mapper
        tc = cls(
            gql_type.name,
            schema_composer,
            description=gql_type.description,
            extensions=gql_type.extensions,
            ast_node=gql_type.ast_node,
            temp=True,
        )
        tc._fields = {name: mapper.convert_input_field_config(field, name, gql_type.name) for name, field in gql_type.fields.items()}
        return tc

    @classmethod
    def _from_config(cls, config: Mapping[str, Any], schema_composer: "SchemaComposer") -> Self:
        options = cls._common_config(config, ("fields",))
        fields = config.get("fields") or {}
        if callable(fields):
            raise ComposerConfigError(f"Fields of {config['name']} must be a mapping; wrap single field types in thunks instead")
        return cls(config["name"], schema_composer, fields=fields, temp=True, **options)

    @classmethod
    def _sdl_example(cls) -> str:
        return "input ExampleInput { name: String }"

    def _create_type(self) -> GraphQLInputObjectType:
        return GraphQLInputObjectType(
            self._name,
            fields=self._build_fields,
            description=self._description,
            extensions=dict(self._extensions),
            ast_node=self._ast_node,
        )

    def _convert_field(self, field_def: Any, field_name: str) -> InputFieldConfig:
        return self.type_mapper.convert_input_field_config(field_def, field_name, self._name)

    def _nested_composer_class(self) -> type[NamedTypeComposer]:
        return InputTypeComposer

    def _build_field(self, config: InputFieldConfig) -> GraphQLInputField:
        return build_input_field(config)

    def _build_fields(self) -> dict[str, GraphQLInputField]:
        return {name: build_input_field(config) for name, config in self._fields.items()}

    def get_field_default_value(self, field_name: str) -> Any:
        return self.get_field(field_name).default_value

    def make_required(self, names: FieldNames) -> Self:
        return self.make_field_non_null(names)

    def make_optional(self, names: FieldNames) -> Self:
        return self.make_field_nullable(names)

    def merge(self, other: Any) -> Self:
        """Append fields of ``other`` (same kind or GraphQLInputObjectType); existing fields win."""
        source = self._coerce_merge_source(other)
        self._merge_fields_from(source)
        return self

    def clone(self, new_type_or_name: "str | InputTypeComposer") -> "InputTypeComposer":
        target = self._clone_target(new_type_or_name)
        self._clone_common(target)
        self._copy_fields_to(target)
        return target
