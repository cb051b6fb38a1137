import pytest
from graphql import GraphQLInt, GraphQLList, GraphQLNonNull, GraphQLObjectType
from hypothesis import given
from hypothesis import strategies as st

from gqlcompose.composers import ListComposer, NonNullComposer, ObjectTypeComposer, ThunkComposer
from gqlcompose.composers.wrappers import is_plural, make_non_null, make_non_plural, make_nullable, make_plural
from gqlcompose.errors import ComposerConfigError, TypeLookupError
from gqlcompose.schema_composer import SchemaComposer


class TestThunkComposer:
    def test_name_hint_does_not_resolve(self) -> None:
        calls: list[int] = []

        def resolve() -> ObjectTypeComposer:
            calls.append(1)
            raise AssertionError("must not be called")

        thunk = ThunkComposer(resolve, "User")
        assert thunk.get_type_name() == "User"
        assert not thunk.is_resolved()
        assert calls == []

    def test_resolves_once_and_memoizes(self, sc: SchemaComposer) -> None:
        user_tc = sc.create_object_tc("User")
        calls: list[int] = []

        def resolve() -> ObjectTypeComposer:
            calls.append(1)
            return user_tc

        thunk = ThunkComposer(resolve)
        assert thunk.of_type is user_tc
        assert thunk.of_type is user_tc
        assert thunk.get_unwrapped_tc() is user_tc
        assert thunk.get_type_name() == "User"
        assert len(calls) == 1

    def test_failed_resolution_is_not_cached(self, sc: SchemaComposer) -> None:
        thunk = ThunkComposer(lambda: sc.get("Later"), "Later")
        with pytest.raises(TypeLookupError, match='Type with name "Later" does not exist'):
            _ = thunk.of_type
        later_tc = sc.create_object_tc("Later")
        assert thunk.of_type is later_tc

    def test_rejects_non_composer_result(self) -> None:
        thunk = ThunkComposer(lambda: "User", "User")  # type: ignore[arg-type,return-value]
        with pytest.raises(ComposerConfigError, match="must return a composer"):
            _ = thunk.of_type

    def test_requires_callable(self) -> None:
        with pytest.raises(ComposerConfigError):
            ThunkComposer("User")  # type: ignore[arg-type]

    def test_forward_and_self_references(self, sc: SchemaComposer) -> None:
        user_tc = sc.create_object_tc(
            {"name": "User", "fields": {"friends": "[User]", "posts": lambda: ["Post"]}}
        )
        post_tc = sc.create_object_tc({"name": "Post", "fields": {"author": user_tc}})

        assert user_tc.get_field_tc("friends") is user_tc
        assert user_tc.get_field_tc("posts") is post_tc
        gql_type = user_tc.get_type()
        assert isinstance(gql_type, GraphQLObjectType)
        posts_type = gql_type.fields["posts"].type
        assert isinstance(posts_type, GraphQLList)
        assert posts_type.of_type is post_tc.get_type()


class TestModifiers:
    def test_type_names(self, sc: SchemaComposer) -> None:
        int_tc = sc.get_any_tc("Int")
        assert ListComposer(int_tc).get_type_name() == "[Int]"
        assert NonNullComposer(ListComposer(NonNullComposer(int_tc))).get_type_name() == "[Int!]!"

    def test_materialized_types(self, sc: SchemaComposer) -> None:
        int_tc = sc.get_any_tc("Int")
        gql_type = NonNullComposer(ListComposer(int_tc)).get_type()
        assert isinstance(gql_type, GraphQLNonNull)
        assert isinstance(gql_type.of_type, GraphQLList)
        assert gql_type.of_type.of_type is GraphQLInt

    def test_unwrap_reaches_named_composer(self, sc: SchemaComposer) -> None:
        user_tc = sc.create_object_tc("User")
        wrapped = NonNullComposer(ListComposer(NonNullComposer(user_tc)))
        assert wrapped.get_unwrapped_tc() is user_tc
        assert wrapped.of_type.of_type.of_type is user_tc

    def test_non_null_cannot_wrap_non_null(self, sc: SchemaComposer) -> None:
        with pytest.raises(ComposerConfigError, match="Nesting NonNull is not allowed"):
            NonNullComposer(NonNullComposer(sc.get_any_tc("Int")))

    def test_non_null_shortcuts(self, sc: SchemaComposer) -> None:
        non_null = sc.get_any_tc("String").get_type_non_null()
        assert non_null.get_type_non_null() is non_null
        assert non_null.get_type_nullable() is sc.get_any_tc("String")
        assert non_null.get_type_plural().get_type_name() == "[String!]"

    @pytest.mark.parametrize(
        "expression,plural,non_plural",
        [
            ("Int", "[Int]", "Int"),
            ("Int!", "[Int!]", "Int!"),
            ("[Int]", "[Int]", "Int"),
            ("[Int]!", "[Int]!", "Int!"),
            ("[Int!]!", "[Int!]!", "Int!"),
            ("[[Int]]", "[[Int]]", "[Int]"),
        ],
    )
    def test_plural_helpers(self, sc: SchemaComposer, expression: str, plural: str, non_plural: str) -> None:
        tc = sc.type_mapper.type_from_expression(expression)
        assert make_plural(tc).get_type_name() == plural
        assert make_non_plural(tc).get_type_name() == non_plural

    def test_nullable_helpers(self, sc: SchemaComposer) -> None:
        tc = sc.type_mapper.type_from_expression("[Int]")
        assert make_non_null(tc).get_type_name() == "[Int]!"
        assert make_nullable(make_non_null(tc)) is tc
        assert make_nullable(tc) is tc


@given(depth=st.integers(min_value=0, max_value=4), non_null=st.booleans())
def test_plural_wrapping_is_idempotent(depth: int, non_null: bool) -> None:
    sc = SchemaComposer()
    tc = sc.type_mapper.type_from_expression("[" * depth + "Int" + "]" * depth + ("!" if non_null else ""))

    once = make_plural(tc)
    twice = make_plural(once)

    assert is_plural(once)
    assert twice.get_type_name() == once.get_type_name()
    if not is_plural(tc):
        assert make_non_plural(once) is tc


@given(depth=st.integers(min_value=1, max_value=4))
def test_non_plural_removes_exactly_one_layer(depth: int) -> None:
    sc = SchemaComposer()
    tc = sc.type_mapper.type_from_expression("[" * depth + "String" + "]" * depth)
    assert make_non_plural(tc).get_type_name() == "[" * (depth - 1) + "String" + "]" * (depth - 1)
