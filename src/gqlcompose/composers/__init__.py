from gqlcompose.composers.base import NamedTypeComposer
from gqlcompose.composers.enum import EnumTypeComposer
from gqlcompose.composers.input import InputTypeComposer
from gqlcompose.composers.interface import InterfaceTypeComposer
from gqlcompose.composers.object import ObjectTypeComposer
from gqlcompose.composers.scalar import ScalarTypeComposer
from gqlcompose.composers.thunk import ThunkComposer
from gqlcompose.composers.union import UnionTypeComposer
from gqlcompose.composers.wrappers import Composer, ListComposer, NonNullComposer

__all__ = [
    "Composer",
    "EnumTypeComposer",
    "InputTypeComposer",
    "InterfaceTypeComposer",
    "ListComposer",
    "NamedTypeComposer",
    "NonNullComposer",
    "ObjectTypeComposer",
    "ScalarTypeComposer",
    "ThunkComposer",
    "UnionTypeComposer",
]
