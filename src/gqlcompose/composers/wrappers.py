"""Base contract of every composer and the List / NonNull modifiers."""

from abc import ABC, abstractmethod
from typing import Any

from graphql import GraphQLList, GraphQLNonNull, GraphQLType

from gqlcompose.errors import ComposerConfigError


class Composer(ABC):
    """Anything that can stand for a GraphQL type reference inside a registry."""

    @abstractmethod
    def get_type(self) -> GraphQLType:
        """Materialize the graphql-core type."""

    @abstractmethod
    def get_type_name(self) -> str:
        """Render the type reference, e.g. ``[User!]``."""

    @abstractmethod
    def get_unwrapped_tc(self) -> Any:
        """Return the named composer beneath every modifier and thunk."""

    def get_type_plural(self) -> "ListComposer":
        return ListComposer(self)

    def get_type_non_null(self) -> "NonNullComposer":
        return NonNullComposer(self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.get_type_name()}>"


class ListComposer(Composer):
    def __init__(self, of_type: Composer) -> None:
        if not isinstance(of_type, Composer):
            raise ComposerConfigError(f"ListComposer accepts only composers, got {of_type!r}")
        self.of_type = of_type

    def get_type(self) -> GraphQLList[Any]:
        return GraphQLList(self.of_type.get_type())

    def get_type_name(self) -> str:
        return f"[{self.of_type.get_type_name()}]"

    def get_unwrapped_tc(self) -> Any:
        return self.of_type.get_unwrapped_tc()


class NonNullComposer(Composer):
    def __init__(self, of_type: Composer) -> None:
        if not isinstance(of_type, Composer):
            raise ComposerConfigError(f"NonNullComposer accepts only composers, got {of_type!r}")
        if isinstance(of_type, NonNullComposer):
            raise ComposerConfigError("You provide NonNull value to NonNullComposer constructor. Nesting NonNull is not allowed.")
        self.of_type = of_type

    def get_type(self) -> GraphQLNonNull[Any]:
        return GraphQLNonNull(self.of_type.get_type())

    def get_type_name(self) -> str:
        return f"{self.of_type.get_type_name()}!"

    def get_unwrapped_tc(self) -> Any:
        return self.of_type.get_unwrapped_tc()

    def get_type_non_null(self) -> "NonNullComposer":
        return self

    def get_type_nullable(self) -> Composer:
        return self.of_type


def is_plural(tc: Composer) -> bool:
    """True for ``[T]`` and ``[T]!`` shapes."""
    if isinstance(tc, NonNullComposer):
        tc = tc.of_type
    return isinstance(tc, ListComposer)


def make_plural(tc: Composer) -> Composer:
    """Wrap the whole reference in a list unless it is already plural (``T!`` becomes ``[T!]``)."""
    return tc if is_plural(tc) else ListComposer(tc)


def make_non_plural(tc: Composer) -> Composer:
    """Drop one list layer; an outer NonNull survives (``[T]!`` becomes ``T!``)."""
    if isinstance(tc, ListComposer):
        return tc.of_type
    if isinstance(tc, NonNullComposer) and isinstance(tc.of_type, ListComposer):
        inner = tc.of_type.of_type
        return inner if isinstance(inner, NonNullComposer) else NonNullComposer(inner)
    return tc


def make_non_null(tc: Composer) -> Composer:
    return tc if isinstance(tc, NonNullComposer) else NonNullComposer(tc)


def make_nullable(tc: Composer) -> Composer:
    return tc.of_type if isinstance(tc, NonNullComposer) else tc
