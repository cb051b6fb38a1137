"""Deferred type references for forward and self references."""

from collections.abc import Callable
from typing import Any

from graphql import GraphQLType

from gqlcompose.composers.wrappers import Composer
from gqlcompose.errors import ComposerConfigError


class ThunkComposer(Composer):
    """
    Memoizing reference to a composer that may not exist yet.

    The resolver runs on first access of ``of_type`` and its result is cached for
    the life of the instance. A resolver that raises caches nothing, so the error
    surfaces again on the next access.
    """

    def __init__(self, thunk: Callable[[], Composer], type_name: str | None = None) -> None:
        """
        Args:
            thunk: Zero-argument callable returning the referenced composer
            type_name: Optional name hint, returned by ``get_type_name`` without resolving
        """
        if not callable(thunk):
            raise ComposerConfigError(f"ThunkComposer expects a callable, got {thunk!r}")
        self._thunk = thunk
        self._type_name = type_name
        self._resolved: Composer | None = None

    @property
    def of_type(self) -> Composer:
        if self._resolved is None:
            resolved = self._thunk()
            if not isinstance(resolved, Composer):
                raise ComposerConfigError(
                    f"Thunk for type '{self._type_name or '?'}' must return a composer, got {resolved!r}"
                )
            self._resolved = resolved
        return self._resolved

    def is_resolved(self) -> bool:
        return self._resolved is not None

    def get_type(self) -> GraphQLType:
        return self.of_type.get_type()

    def get_type_name(self) -> str:
        if self._type_name:
            return self._type_name
        return self.of_type.get_type_name()

    def get_unwrapped_tc(self) -> Any:
        return self.of_type.get_unwrapped_tc()
