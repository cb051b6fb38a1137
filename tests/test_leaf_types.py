from typing import Any

import pytest
from graphql import GraphQLEnumType, GraphQLEnumValue, GraphQLScalarType, GraphQLString

from gqlcompose.composers import EnumTypeComposer, ScalarTypeComposer
from gqlcompose.definitions import DirectiveUsage, EnumValueConfig
from gqlcompose.errors import ComposerConfigError, FieldNotFoundError, MergeConflictError
from gqlcompose.schema_composer import SchemaComposer


class TestEnumTypeComposer:
    @pytest.fixture
    def role_tc(self, sc: SchemaComposer) -> EnumTypeComposer:
        return sc.create_enum_tc(
            """
            "Account role"
            enum Role {
              ADMIN
              EDITOR @deprecated(reason: "Use ADMIN")
              READER @audit(level: 2)
            }
            """
        )

    def test_values_from_sdl(self, role_tc: EnumTypeComposer) -> None:
        assert role_tc.get_value_names() == ["ADMIN", "EDITOR", "READER"]
        assert role_tc.get_description() == "Account role"
        assert role_tc.get_value("EDITOR").deprecation_reason == "Use ADMIN"
        assert role_tc.get_value("READER").extensions == {"directives": [DirectiveUsage("audit", {"level": 2})]}

        gql_type = role_tc.get_type()
        assert isinstance(gql_type, GraphQLEnumType)
        assert gql_type.values["ADMIN"].value == "ADMIN"

    def test_values_default_to_names(self, sc: SchemaComposer) -> None:
        tc = EnumTypeComposer("Color", sc, values=["RED", "GREEN"])
        assert tc.get_value("RED") == EnumValueConfig()
        assert tc.get_type().values["RED"].value == "RED"

    def test_custom_values(self, sc: SchemaComposer) -> None:
        tc = sc.create_enum_tc({"name": "Level", "values": {"LOW": 1, "HIGH": {"value": 9, "description": "Top"}}})
        gql_type = tc.get_type()
        assert gql_type.values["LOW"].value == 1
        assert gql_type.values["HIGH"].description == "Top"
        assert gql_type.serialize(9) == "HIGH"

    def test_value_crud(self, role_tc: EnumTypeComposer) -> None:
        role_tc.add_values(["GUEST"])
        role_tc.set_value("OWNER", {"description": "Owns the account"})
        assert role_tc.has_value("OWNER")

        role_tc.remove_value(["EDITOR", "MISSING"])
        role_tc.reorder_values(["OWNER", "GUEST"])
        assert role_tc.get_value_names() == ["OWNER", "GUEST", "ADMIN", "READER"]

        role_tc.remove_other_values(["ADMIN", "GUEST"])
        assert role_tc.get_value_names() == ["GUEST", "ADMIN"]

    def test_missing_value_raises(self, role_tc: EnumTypeComposer) -> None:
        with pytest.raises(FieldNotFoundError, match="Cannot get value 'OWNER' from enum type 'Role'"):
            role_tc.get_value("OWNER")
        with pytest.raises(FieldNotFoundError, match="Cannot extend value 'OWNER'"):
            role_tc.extend_value("OWNER", {"description": "x"})

    def test_extend_and_deprecate(self, role_tc: EnumTypeComposer) -> None:
        role_tc.extend_value("READER", {"description": "Read only", "extensions": {"tier": "free"}})
        assert role_tc.get_value("READER").description == "Read only"
        assert role_tc.get_value("READER").extensions["tier"] == "free"
        assert role_tc.get_value("READER").extensions["directives"] == [DirectiveUsage("audit", {"level": 2})]

        role_tc.deprecate({"ADMIN": "Use OWNER"})
        role_tc.deprecate("READER")
        assert role_tc.get_value("ADMIN").deprecation_reason == "Use OWNER"
        assert role_tc.get_value("READER").deprecation_reason == "deprecated"

    def test_unknown_value_option_raises(self, sc: SchemaComposer) -> None:
        with pytest.raises(ComposerConfigError, match="Unknown options for enum value 'A': colour"):
            EnumTypeComposer("Bad", sc, values={"A": {"colour": "red"}})

    def test_cached_instance_follows_mutations(self, role_tc: EnumTypeComposer) -> None:
        gql_type = role_tc.get_type()
        role_tc.add_values(["GUEST"])
        assert role_tc.get_type() is gql_type
        assert "GUEST" in gql_type.values
        assert gql_type.serialize("GUEST") == "GUEST"

    def test_merge_and_clone(self, role_tc: EnumTypeComposer, sc: SchemaComposer) -> None:
        raw = GraphQLEnumType("Role", {"ADMIN": GraphQLEnumValue("root"), "GUEST": GraphQLEnumValue("GUEST")})
        role_tc.merge(raw)
        assert role_tc.get_value_names() == ["ADMIN", "EDITOR", "READER", "GUEST"]
        assert role_tc.get_value("ADMIN").value == "ADMIN"

        clone_tc = role_tc.clone("Permission")
        assert sc.get("Permission") is clone_tc
        assert clone_tc.get_value_names() == role_tc.get_value_names()

    def test_merge_other_kind_raises(self, role_tc: EnumTypeComposer, sc: SchemaComposer) -> None:
        with pytest.raises(MergeConflictError, match="Cannot merge InputTypeComposer 'Filter' with EnumTypeComposer 'Role'"):
            role_tc.merge(sc.create_input_tc("Filter"))


class TestScalarTypeComposer:
    def test_builtin_identity(self, sc: SchemaComposer) -> None:
        string_tc = sc.get_any_tc("String")
        assert isinstance(string_tc, ScalarTypeComposer)
        assert string_tc.get_type() is GraphQLString
        assert sc.get_or_create_stc("String") is string_tc

    @pytest.mark.parametrize(
        "change",
        [
            lambda tc: tc.set_description("hijacked"),
            lambda tc: tc.set_serialize(lambda value: "hijacked"),
            lambda tc: tc.set_extension("owner", "blog"),
            lambda tc: tc.merge(GraphQLScalarType("String", description="hijacked")),
            lambda tc: tc.set_type_name("Text"),
        ],
    )
    def test_builtin_scalars_are_not_shared_between_registries(self, change: Any) -> None:
        first, second = SchemaComposer(), SchemaComposer()
        string_tc = first.get_or_create_stc("String")
        description = GraphQLString.description

        with pytest.raises(ComposerConfigError, match="Built-in scalar 'String' is shared by every schema"):
            change(string_tc)

        assert GraphQLString.description == description
        assert "owner" not in (GraphQLString.extensions or {})
        assert string_tc.get_description() == description
        assert string_tc.get_type_name() == "String"
        assert first.get("String") is string_tc
        assert second.get_or_create_stc("String").get_description() == description

    def test_clone_builtin_scalar_to_customize(self, sc: SchemaComposer) -> None:
        text_tc = sc.get_or_create_stc("String").clone("Text")
        text_tc.set_description("Free text")

        assert not text_tc.is_builtin()
        assert text_tc.get_type() is not GraphQLString
        assert text_tc.get_type().serialize(1) == "1"
        assert GraphQLString.description != "Free text"

    def test_custom_scalar_functions(self, sc: SchemaComposer) -> None:
        tc = ScalarTypeComposer("Upper", sc, serialize=lambda value: str(value).upper())
        assert tc.get_serialize() is not None
        assert tc.get_type().serialize("abc") == "ABC"

        tc.set_parse_value(lambda value: str(value).lower())
        assert tc.get_type().parse_value("ABC") == "abc"

    def test_specified_by_url_from_sdl(self, sc: SchemaComposer) -> None:
        tc = sc.create_scalar_tc('scalar DateTime @specifiedBy(url: "https://example.com/rfc3339")')
        assert tc.get_specified_by_url() == "https://example.com/rfc3339"
        gql_type = tc.get_type()

        tc.set_specified_by_url("https://example.com/iso8601")
        assert tc.get_type() is gql_type
        assert gql_type.specified_by_url == "https://example.com/iso8601"

    def test_raw_scalar_keeps_instance(self, sc: SchemaComposer) -> None:
        raw = GraphQLScalarType("Money", serialize=lambda value: f"{value:.2f}")
        tc = sc.create_scalar_tc(raw)
        assert tc.get_type() is raw
        assert tc.wraps(raw)
        assert sc.create_scalar_tc(raw) is tc

    def test_merge_fills_missing_functions(self, sc: SchemaComposer) -> None:
        def serialize(value: object) -> str:
            return "json"

        tc = sc.create_scalar_tc({"name": "JSONish", "description": "Mine"})
        tc.merge(GraphQLScalarType("JSONish", serialize=serialize, description="Theirs"))
        assert tc.get_serialize() is serialize
        assert tc.get_description() == "Mine"

    def test_merge_other_kind_raises(self, sc: SchemaComposer) -> None:
        tc = sc.create_scalar_tc("scalar Money")
        with pytest.raises(MergeConflictError, match="Cannot merge EnumTypeComposer 'Currency' with ScalarTypeComposer 'Money'"):
            tc.merge(sc.create_enum_tc("enum Currency { EUR }"))

    def test_clone(self, sc: SchemaComposer) -> None:
        tc = sc.create_scalar_tc({"name": "Date", "specified_by_url": "https://example.com/date"})
        clone_tc = tc.clone("Day")
        assert clone_tc.get_specified_by_url() == "https://example.com/date"
        assert clone_tc.get_type() is not tc.get_type()

    def test_wrong_sdl_kind_raises(self, sc: SchemaComposer) -> None:
        with pytest.raises(ComposerConfigError, match="Eg. `scalar Example`"):
            sc.create_scalar_tc("type Date { day: Int }")


class TestTypeDirectivesAndExtensions:
    def test_directives_from_sdl(self, sc: SchemaComposer) -> None:
        tc = sc.create_object_tc('type Post @key(fields: "id") @key(fields: "slug") @cached { id: ID slug: String }')
        assert tc.get_directive_names() == ["key", "key", "cached"]
        assert tc.get_directive_by_name("key") == {"fields": "id"}
        assert tc.get_directive_by_id(1) == {"fields": "slug"}
        assert tc.get_directive_by_id(5) is None
        assert tc.has_directives()

    def test_set_directive_by_name(self, sc: SchemaComposer) -> None:
        tc = sc.create_object_tc("Post")
        assert not tc.has_directives()
        tc.set_directive_by_name("cached", {"ttl": 10})
        tc.set_directive_by_name("cached", {"ttl": 60})
        assert tc.get_directives() == [DirectiveUsage("cached", {"ttl": 60})]
        tc.set_directives([])
        assert tc.get_directive_names() == []
        assert not tc.has_extension("directives")

    def test_extension_accessors(self, sc: SchemaComposer) -> None:
        tc = sc.create_object_tc({"name": "Post", "extensions": {"owner": "blog"}})
        tc.extend_extensions({"tier": 1})
        tc.set_extension("public", True)
        assert tc.get_extensions() == {"owner": "blog", "tier": 1, "public": True}
        assert tc.get_extension("tier") == 1

        tc.remove_extension("owner")
        assert not tc.has_extension("owner")
        assert tc.get_type().extensions == {"tier": 1, "public": True}

        tc.clear_extensions()
        assert tc.get_type().extensions == {}
