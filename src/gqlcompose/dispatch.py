"""Compile ordered type predicates into a graphql-core ``resolve_type`` hook.

A predicate receives ``(value, context, info)`` and answers whether ``value``
belongs to its member type. The compiled hook asks the predicates in insertion
order and returns the name of the first member that answers truthy.
"""

from collections.abc import Awaitable, Callable, Sequence
from inspect import isawaitable, iscoroutine
from typing import Any

from graphql import GraphQLAbstractType, GraphQLResolveInfo

from gqlcompose.errors import ComposerConfigError

TypeCheckFn = Callable[[Any, Any, GraphQLResolveInfo], Any]
ResolveTypeFn = Callable[[Any, GraphQLResolveInfo, GraphQLAbstractType], "str | None | Awaitable[str | None]"]


def compile_type_resolver(entries: Sequence[tuple[str, TypeCheckFn]], deferred: bool) -> ResolveTypeFn:
    """
    Build the dispatch function installed as ``resolve_type``.

    Args:
        entries: ``(type name, predicate)`` pairs in dispatch order
        deferred: Emit a coroutine function that awaits awaitable answers one at a time

    Raises:
        ComposerConfigError: From the synchronous hook, when a predicate answers with an awaitable

    Returns:
        ResolveTypeFn: Hook returning the matching type name, or None when nothing matches
    """
    checks = tuple(entries)

    if deferred:

        async def resolve_type_async(value: Any, info: GraphQLResolveInfo, abstract_type: GraphQLAbstractType) -> str | None:
            for type_name, check_fn in checks:
                is_matched = check_fn(value, info.context, info)
                if isawaitable(is_matched):
                    is_matched = await is_matched
                if is_matched:
                    return type_name
            return None

        return resolve_type_async

    def resolve_type(value: Any, info: GraphQLResolveInfo, abstract_type: GraphQLAbstractType) -> str | None:
        for type_name, check_fn in checks:
            is_matched = check_fn(value, info.context, info)
            if isawaitable(is_matched):
                if iscoroutine(is_matched):
                    is_matched.close()
                raise ComposerConfigError(
                    f"Type check function for '{type_name}' returned an awaitable. Register it as deferred."
                )
            if is_matched:
                return type_name
        return None

    return resolve_type
