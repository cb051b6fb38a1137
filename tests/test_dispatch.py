import asyncio
import inspect
from typing import Any

import pytest
from graphql import graphql, graphql_sync

from gqlcompose.composers import ObjectTypeComposer, UnionTypeComposer
from gqlcompose.dispatch import compile_type_resolver
from gqlcompose.errors import ComposerConfigError, MergeConflictError, TypeLookupError
from gqlcompose.schema_composer import SchemaComposer
from tests.conftest import make_info


def is_kind_a(value: Any, context: Any, info: Any) -> bool:
    return value.get("kind") == "A"


def always(value: Any, context: Any, info: Any) -> bool:
    return True


@pytest.fixture
def union_tc(sc: SchemaComposer) -> UnionTypeComposer:
    sc.create_object_tc({"name": "A", "fields": {"a": "String"}})
    sc.create_object_tc({"name": "B", "fields": {"b": "String"}})
    return sc.create_union_tc({"name": "AB", "type_resolvers": {"A": is_kind_a, "B": always}})


class TestCompileTypeResolver:
    def test_sync_first_match_wins(self) -> None:
        resolve_type = compile_type_resolver([("A", is_kind_a), ("B", always)], deferred=False)
        assert not inspect.iscoroutinefunction(resolve_type)
        assert resolve_type({"kind": "A"}, make_info(), None) == "A"
        assert resolve_type({"kind": "x"}, make_info(), None) == "B"

    def test_no_match_returns_none(self) -> None:
        resolve_type = compile_type_resolver([("A", is_kind_a)], deferred=False)
        assert resolve_type({"kind": "x"}, make_info(), None) is None

    def test_predicates_receive_context(self) -> None:
        seen: list[Any] = []

        def check(value: Any, context: Any, info: Any) -> bool:
            seen.append((value, context, info))
            return True

        info = make_info({"role": "admin"})
        resolve_type = compile_type_resolver([("A", check)], deferred=False)
        resolve_type("value", info, None)
        assert seen == [("value", {"role": "admin"}, info)]

    def test_deferred_awaits_sequentially(self) -> None:
        calls: list[str] = []

        async def slow_false(value: Any, context: Any, info: Any) -> bool:
            calls.append("slow:start")
            await asyncio.sleep(0.01)
            calls.append("slow:end")
            return False

        def sync_true(value: Any, context: Any, info: Any) -> bool:
            calls.append("sync")
            return True

        async def never_reached(value: Any, context: Any, info: Any) -> bool:
            calls.append("never")
            return True

        resolve_type = compile_type_resolver(
            [("A", slow_false), ("B", sync_true), ("C", never_reached)], deferred=True
        )
        assert inspect.iscoroutinefunction(resolve_type)
        assert asyncio.run(resolve_type({}, make_info(), None)) == "B"
        assert calls == ["slow:start", "slow:end", "sync"]

    def test_deferred_no_match(self) -> None:
        async def never(value: Any, context: Any, info: Any) -> bool:
            return False

        resolve_type = compile_type_resolver([("A", never)], deferred=True)
        assert asyncio.run(resolve_type({}, make_info(), None)) is None

    def test_sync_hook_rejects_awaitable_answer(self) -> None:
        async def is_kind_a_async(value: Any, context: Any, info: Any) -> bool:
            return value.get("kind") == "A"

        def lookup(value: Any, context: Any, info: Any) -> Any:
            return is_kind_a_async(value, context, info)

        resolve_type = compile_type_resolver([("A", lookup), ("B", always)], deferred=False)
        with pytest.raises(ComposerConfigError, match="'A' returned an awaitable. Register it as deferred."):
            resolve_type({"kind": "x"}, make_info(), None)

    def test_predicate_errors_propagate(self) -> None:
        def broken(value: Any, context: Any, info: Any) -> bool:
            raise RuntimeError("predicate failed")

        resolve_type = compile_type_resolver([("A", broken)], deferred=False)
        with pytest.raises(RuntimeError, match="predicate failed"):
            resolve_type({}, make_info(), None)


class TestUnionTypeResolvers:
    def test_dispatch_order(self, union_tc: UnionTypeComposer) -> None:
        resolve_type = union_tc.get_resolve_type()
        assert resolve_type is not None
        assert not inspect.iscoroutinefunction(resolve_type)
        assert resolve_type({"kind": "A"}, make_info(), None) == "A"
        assert resolve_type({"kind": "x"}, make_info(), None) == "B"

    def test_resolvers_make_members(self, union_tc: UnionTypeComposer) -> None:
        assert union_tc.get_type_names() == ["A", "B"]
        assert union_tc.get_type_resolver_names() == ["A", "B"]
        assert [tc.get_type_name() for tc in union_tc.get_type_resolver_types()] == ["A", "B"]

    def test_mixing_in_deferred_predicate_switches_whole_hook(self, union_tc: UnionTypeComposer, sc: SchemaComposer) -> None:
        async def is_kind_c(value: Any, context: Any, info: Any) -> bool:
            return value.get("kind") == "C"

        sc.create_object_tc({"name": "C", "fields": {"c": "String"}})
        union_tc.remove_type_resolver("B")
        union_tc.add_type_resolver("C", is_kind_c)

        resolve_type = union_tc.get_resolve_type()
        assert union_tc.is_type_resolver_deferred("C")
        assert inspect.iscoroutinefunction(resolve_type)
        assert asyncio.run(resolve_type({"kind": "A"}, make_info(), None)) == "A"
        assert asyncio.run(resolve_type({"kind": "C"}, make_info(), None)) == "C"
        assert asyncio.run(resolve_type({"kind": "x"}, make_info(), None)) is None

    def test_declared_deferred_predicate(self, union_tc: UnionTypeComposer) -> None:
        async def answer(result: bool) -> bool:
            return result

        union_tc.set_type_resolvers({"A": (lambda value, context, info: answer(False), True), "B": always})
        assert union_tc.is_type_resolver_deferred("A")
        assert not union_tc.is_type_resolver_deferred("B")
        resolve_type = union_tc.get_resolve_type()
        assert inspect.iscoroutinefunction(resolve_type)
        assert asyncio.run(resolve_type({}, make_info(), None)) == "B"

        union_tc.add_type_resolver("A", lambda value, context, info: answer(True), deferred=True)
        assert asyncio.run(union_tc.get_resolve_type()({}, make_info(), None)) == "A"

    def test_undeclared_awaitable_answer_raises(self, union_tc: UnionTypeComposer) -> None:
        async def answer() -> bool:
            return False

        union_tc.set_type_resolvers({"A": lambda value, context, info: answer(), "B": always})
        resolve_type = union_tc.get_resolve_type()
        assert not inspect.iscoroutinefunction(resolve_type)
        with pytest.raises(ComposerConfigError, match="Type check function for 'A' returned an awaitable"):
            resolve_type({"kind": "B"}, make_info(), None)

    def test_predicates_are_never_called_at_registration(self, union_tc: UnionTypeComposer) -> None:
        calls: list[Any] = []
        union_tc.add_type_resolver("A", lambda value, context, info: calls.append(value))
        union_tc.add_type_resolver("B", lambda value, context, info: calls.append(value), deferred=True)
        assert calls == []

    def test_resolver_accessors(self, union_tc: UnionTypeComposer, sc: SchemaComposer) -> None:
        assert union_tc.has_type_resolver("A")
        assert union_tc.has_type_resolver(sc.get_otc("B"))
        assert union_tc.get_type_resolver_check_fn("A") is is_kind_a
        assert list(union_tc.get_type_resolvers().values()) == [is_kind_a, always]

        with pytest.raises(TypeLookupError, match="Type resolver for 'C' is not registered in 'AB'"):
            union_tc.get_type_resolver_check_fn("C")

    def test_removing_every_resolver_clears_hook(self, union_tc: UnionTypeComposer) -> None:
        union_tc.remove_type_resolver("A").remove_type_resolver("B")
        assert union_tc.get_resolve_type() is None
        assert union_tc.get_type_names() == ["A", "B"]

    def test_set_resolve_type_by_hand(self, union_tc: UnionTypeComposer) -> None:
        union_tc.set_resolve_type(lambda value, info, abstract_type: "B")
        assert union_tc.get_type().resolve_type({"kind": "A"}, None, None) == "B"

    @pytest.mark.parametrize(
        "type_resolvers,message",
        [
            ({"A": "not callable"}, "must be callable"),
            ({"Int": always}, "you must provide an ObjectTypeComposer"),
            ([("A", always)], "must be a mapping"),
        ],
    )
    def test_invalid_resolver_maps(self, union_tc: UnionTypeComposer, type_resolvers: Any, message: str) -> None:
        with pytest.raises(ComposerConfigError, match=message):
            union_tc.set_type_resolvers(type_resolvers)


class TestUnionMembers:
    def test_member_operations(self, sc: SchemaComposer) -> None:
        for name in ("A", "B", "C"):
            sc.create_object_tc({"name": name, "fields": {"id": "ID"}})
        union_tc = sc.create_union_tc("union Letters = A | B")

        assert union_tc.get_type_names() == ["A", "B"]
        union_tc.add_types(["C", "A"])
        assert union_tc.get_type_names() == ["A", "B", "C"]
        assert union_tc.has_type("C")

        union_tc.remove_type(["A", "Z"])
        assert union_tc.get_type_names() == ["B", "C"]
        union_tc.remove_other_types("C")
        assert union_tc.get_type_names() == ["C"]

        union_tc.set_types([sc.get_otc("A")])
        assert [t.name for t in union_tc.get_type().types] == ["A"]
        union_tc.clear_types()
        assert union_tc.get_types() == []

    def test_non_object_member_rejected(self, sc: SchemaComposer) -> None:
        union_tc = sc.create_union_tc("Letters")
        with pytest.raises(ComposerConfigError, match="you must provide an ObjectTypeComposer"):
            union_tc.add_type("String")

    def test_thunk_to_wrong_kind_fails_when_materialized(self, sc: SchemaComposer) -> None:
        union_tc = sc.create_union_tc("Letters")
        union_tc.add_type(lambda: "String")
        with pytest.raises(TypeError, match="must be an object type"):
            _ = union_tc.get_type().types

    def test_merge_and_clone(self, union_tc: UnionTypeComposer, sc: SchemaComposer) -> None:
        sc.create_object_tc({"name": "C", "fields": {"c": "String"}})
        union_tc.merge(UnionTypeComposer.create_temp({"name": "Other", "types": ["C", "A"]}, sc))
        assert union_tc.get_type_names() == ["A", "B", "C"]

        clone_tc = union_tc.clone("ABC")
        assert clone_tc.get_type_names() == ["A", "B", "C"]
        assert clone_tc.get_type_resolver_names() == ["A", "B"]
        resolve_type = clone_tc.get_resolve_type()
        assert resolve_type is not None
        assert resolve_type({"kind": "A"}, make_info(), None) == "A"

    def test_merge_other_kind_raises(self, union_tc: UnionTypeComposer, sc: SchemaComposer) -> None:
        with pytest.raises(MergeConflictError, match="Cannot merge ObjectTypeComposer 'A' with UnionTypeComposer 'AB'"):
            union_tc.merge(sc.get_otc("A"))
        assert union_tc.get_type_names() == ["A", "B"]


class TestExecution:
    QUERY = "{ search { __typename ... on A { a } ... on B { b } } }"

    @staticmethod
    def build(sc: SchemaComposer) -> None:
        sc.query.add_fields(
            {
                "search": {
                    "type": "[AB]",
                    "resolve": lambda source, info: [{"kind": "A", "a": "first"}, {"kind": "x", "b": "second"}],
                }
            }
        )

    def test_sync_execution(self, union_tc: UnionTypeComposer, sc: SchemaComposer) -> None:
        self.build(sc)
        result = graphql_sync(sc.build_schema(), self.QUERY)
        assert result.errors is None
        assert result.data == {"search": [{"__typename": "A", "a": "first"}, {"__typename": "B", "b": "second"}]}

    def test_async_execution_with_context(self, sc: SchemaComposer) -> None:
        async def is_admin_view(value: Any, context: Any, info: Any) -> bool:
            await asyncio.sleep(0)
            return bool(context["admin"])

        sc.create_object_tc({"name": "A", "fields": {"a": "String"}})
        sc.create_object_tc({"name": "B", "fields": {"b": "String"}})
        sc.create_union_tc({"name": "AB", "type_resolvers": {"A": is_admin_view, "B": always}})
        self.build(sc)

        schema = sc.build_schema()
        admin = asyncio.run(graphql(schema, self.QUERY, context_value={"admin": True}))
        guest = asyncio.run(graphql(schema, self.QUERY, context_value={"admin": False}))

        assert admin.errors is None
        assert [item["__typename"] for item in admin.data["search"]] == ["A", "A"]
        assert [item["__typename"] for item in guest.data["search"]] == ["B", "B"]


class TestInterfaceTypeResolvers:
    @pytest.fixture
    def node_sc(self, sc: SchemaComposer) -> SchemaComposer:
        sc.add_type_defs(
            """
            interface Node { id: ID! }
            type User implements Node { id: ID! name: String }
            type Post implements Node { id: ID! title: String }
            type Query { node(id: ID!): Node }
            """
        )
        sc.get_otc("Query").set_field_resolver("node", lambda source, info, id: {"id": id, "title": f"Post {id}"})
        return sc

    def test_registered_types_become_must_have(self, node_sc: SchemaComposer) -> None:
        node_tc = node_sc.get_iftc("Node")
        node_tc.add_type_resolver("User", lambda value, context, info: "name" in value)
        node_tc.add_type_resolver("Post", lambda value, context, info: "title" in value)

        assert [tc.get_type_name() for tc in node_sc.get_schema_must_have_types()] == ["User", "Post"]
        schema = node_sc.build_schema()
        assert "User" in schema.type_map
        assert "Post" in schema.type_map

        result = graphql_sync(schema, '{ node(id: "7") { __typename id ... on Post { title } } }')
        assert result.errors is None
        assert result.data == {"node": {"__typename": "Post", "id": "7", "title": "Post 7"}}

    def test_interface_merge_and_clone_keep_resolvers(self, node_sc: SchemaComposer) -> None:
        node_tc = node_sc.get_iftc("Node")
        node_tc.set_type_resolvers({"User": always})
        node_tc.merge(node_sc.create_temp_tc("interface Other { createdAt: String }"))
        assert node_tc.get_field_names() == ["id", "createdAt"]

        clone_tc = node_tc.clone("Entity")
        assert clone_tc.get_type_resolver_names() == ["User"]
        assert clone_tc.get_field_names() == ["id", "createdAt"]

    def test_interface_predicates_need_object_types(self, node_sc: SchemaComposer) -> None:
        with pytest.raises(ComposerConfigError, match="you must provide an ObjectTypeComposer"):
            node_sc.get_iftc("Node").add_type_resolver("Node", always)


def test_object_type_can_be_used_for_dispatch_before_declaration(sc: SchemaComposer) -> None:
    union_tc = sc.create_union_tc("Later")
    union_tc.add_type_resolver("Future", always)
    assert union_tc.get_type_names() == ["Future"]

    future_tc = ObjectTypeComposer("Future", sc, fields={"id": "ID"})
    assert list(union_tc.get_type().types) == [future_tc.get_type()]
