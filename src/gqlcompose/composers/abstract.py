"""Type-resolver (predicate) bookkeeping shared by union and interface composers."""

import inspect
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Self

from gqlcompose.composers.thunk import ThunkComposer
from gqlcompose.composers.wrappers import Composer
from gqlcompose.dispatch import ResolveTypeFn, TypeCheckFn, compile_type_resolver
from gqlcompose.errors import ComposerConfigError, TypeLookupError


@dataclass(frozen=True)
class TypeResolver:
    type_composer: Composer
    check_fn: TypeCheckFn
    deferred: bool


class TypeResolversMixin:
    """
    Ordered map of object type -> predicate, compiled into ``resolve_type``.

    A predicate is deferred when declared with ``deferred=True`` or when it is a
    coroutine function. Any deferred predicate switches the whole hook to the
    sequential awaiting form.
    """

    _type_resolvers: dict[str, TypeResolver]
    _resolve_type: ResolveTypeFn | None

    def _on_type_resolver_registered(self, tc: Composer) -> None:
        """Hook for the host class (unions add members, interfaces mark must-have types)."""

    def _convert_object_type(self, type_def: Any) -> Composer:
        from gqlcompose.composers.object import ObjectTypeComposer

        tc = self.type_mapper.convert_output_type(type_def)  # type: ignore[attr-defined]
        if not isinstance(tc, ObjectTypeComposer | ThunkComposer):
            raise ComposerConfigError(
                f"For type resolver of '{self.get_type_name()}' you must provide an ObjectTypeComposer "  # type: ignore[attr-defined]
                f"or a thunk returning it, got {tc!r}"
            )
        return tc

    def _make_resolver(self, type_def: Any, check_fn: Any, deferred: bool | None) -> TypeResolver:
        tc = self._convert_object_type(type_def)
        if not callable(check_fn):
            raise ComposerConfigError(
                f"Type resolver check function for '{tc.get_type_name()}' in '{self.get_type_name()}' must be callable"  # type: ignore[attr-defined]
            )
        if deferred is None:
            deferred = inspect.iscoroutinefunction(check_fn)
        return TypeResolver(tc, check_fn, deferred)

    def _compile_resolve_type(self) -> None:
        entries = [(name, resolver.check_fn) for name, resolver in self._type_resolvers.items()]
        deferred = any(resolver.deferred for resolver in self._type_resolvers.values())
        self._resolve_type = compile_type_resolver(entries, deferred) if entries else None
        self._changed()  # type: ignore[attr-defined]

    def get_type_resolvers(self) -> dict[Composer, TypeCheckFn]:
        return {resolver.type_composer: resolver.check_fn for resolver in self._type_resolvers.values()}

    def set_type_resolvers(self, type_resolvers: Mapping[Any, Any]) -> Self:
        """
        Replace every predicate.

        Args:
            type_resolvers: Ordered mapping of object type (composer, name, thunk or
                graphql-core type) to predicate ``(value, context, info)``. A value may
                also be a ``(predicate, deferred)`` pair for a plain function that
                returns an awaitable

        Raises:
            ComposerConfigError: If a key is not an object type or a value is not callable
        """
        if not isinstance(type_resolvers, Mapping):
            raise ComposerConfigError(
                f"Type resolvers of '{self.get_type_name()}' must be a mapping of object types to check functions"  # type: ignore[attr-defined]
            )
        resolvers = {}
        for type_def, value in type_resolvers.items():
            check_fn, deferred = value if isinstance(value, tuple) else (value, None)
            resolver = self._make_resolver(type_def, check_fn, deferred)
            resolvers[resolver.type_composer.get_type_name()] = resolver
        self._type_resolvers = resolvers
        for resolver in resolvers.values():
            self._on_type_resolver_registered(resolver.type_composer)
        self._compile_resolve_type()
        return self

    def add_type_resolver(self, type_def: Any, check_fn: TypeCheckFn, deferred: bool | None = None) -> Self:
        resolver = self._make_resolver(type_def, check_fn, deferred)
        self._type_resolvers[resolver.type_composer.get_type_name()] = resolver
        self._on_type_resolver_registered(resolver.type_composer)
        self._compile_resolve_type()
        return self

    def remove_type_resolver(self, type_def: Any) -> Self:
        self._type_resolvers.pop(self._resolver_key(type_def), None)
        self._compile_resolve_type()
        return self

    def has_type_resolver(self, type_def: Any) -> bool:
        return self._resolver_key(type_def) in self._type_resolvers

    def get_type_resolver_check_fn(self, type_def: Any) -> TypeCheckFn:
        key = self._resolver_key(type_def)
        if key not in self._type_resolvers:
            raise TypeLookupError(f"Type resolver for '{key}' is not registered in '{self.get_type_name()}'")  # type: ignore[attr-defined]
        return self._type_resolvers[key].check_fn

    def get_type_resolver_names(self) -> list[str]:
        return list(self._type_resolvers)

    def get_type_resolver_types(self) -> list[Composer]:
        return [resolver.type_composer for resolver in self._type_resolvers.values()]

    def is_type_resolver_deferred(self, type_def: Any) -> bool:
        return self._type_resolvers[self._resolver_key(type_def)].deferred

    def get_resolve_type(self) -> ResolveTypeFn | None:
        return self._resolve_type

    def set_resolve_type(self, resolve_type: ResolveTypeFn | None) -> Self:
        """Install a hand-written hook; registered predicates stay but no longer drive dispatch until they change."""
        self._resolve_type = resolve_type
        return self._changed()  # type: ignore[attr-defined,no-any-return]

    def _resolver_key(self, type_def: Any) -> str:
        if isinstance(type_def, str):
            return type_def
        if isinstance(type_def, Composer):
            return type_def.get_type_name()
        return str(getattr(type_def, "name", type_def))

    def _copy_type_resolvers_to(self, target: Any) -> None:
        # the compiled hook only closes over type names, so the clone can share it
        target._type_resolvers = dict(self._type_resolvers)
        target._resolve_type = self._resolve_type
        target._changed()
